from pathlib import Path

import pytest

from engagement_artifacts.config import (
    CONFIG_PATH_ENV,
    Config,
    ConfigLoadError,
    LogFormat,
    deep_merge,
    parse_env_vars,
    parse_string_value,
    read_toml_file,
    set_nested_key,
)

# =============================================================================
# Loader Tests
# =============================================================================


class TestReadTomlFile:
    def test_reads_tables(self, tmp_path: Path) -> None:
        path = tmp_path / "config.toml"
        _ = path.write_text('[repository]\nkind = "local"\n')
        assert read_toml_file(path) == {"repository": {"kind": "local"}}

    def test_missing_file_raises(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigLoadError, match="not found") as exc_info:
            _ = read_toml_file(tmp_path / "missing.toml")
        assert exc_info.value.path == tmp_path / "missing.toml"

    def test_invalid_toml_reports_location(self, tmp_path: Path) -> None:
        path = tmp_path / "config.toml"
        _ = path.write_text("[repository\n")
        with pytest.raises(ConfigLoadError) as exc_info:
            _ = read_toml_file(path)
        assert exc_info.value.line == 1


class TestDeepMerge:
    def test_merges_nested_tables(self) -> None:
        base = {"retry": {"attempts": 3, "delay": 0.5}, "store": {"path": "a.db"}}
        override = {"retry": {"attempts": 5}}
        assert deep_merge(base, override) == {
            "retry": {"attempts": 5, "delay": 0.5},
            "store": {"path": "a.db"},
        }

    def test_replaces_lists(self) -> None:
        assert deep_merge({"a": [1, 2]}, {"a": [3]}) == {"a": [3]}

    def test_does_not_modify_inputs(self) -> None:
        base = {"retry": {"attempts": 3}}
        _ = deep_merge(base, {"retry": {"attempts": 5}})
        assert base == {"retry": {"attempts": 3}}


class TestEnvironment:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("true", True),
            ("FALSE", False),
            ("42", 42),
            ("0.5", 0.5),
            ('["na", "emea"]', ["na", "emea"]),
            ("master", "master"),
            ("1.2.3", "1.2.3"),
        ],
    )
    def test_parse_string_value(self, raw: str, expected: object) -> None:
        assert parse_string_value(raw) == expected

    def test_parse_env_vars_nests_double_underscores(self) -> None:
        environ = {
            "ARTIFACTS_REPOSITORY__TOKEN": "secret",
            "ARTIFACTS_RETRY__ATTEMPTS": "5",
            "OTHER_VALUE": "ignored",
        }
        assert parse_env_vars("ARTIFACTS_", environ) == {
            "repository": {"token": "secret"},
            "retry": {"attempts": 5},
        }

    def test_set_nested_key_replaces_scalars(self) -> None:
        data: dict[str, object] = {"retry": 3}
        set_nested_key(data, "retry.attempts", 5)
        assert data == {"retry": {"attempts": 5}}


# =============================================================================
# Config Tests
# =============================================================================


class TestConfigLoad:
    def test_defaults(self) -> None:
        config = Config.load(environ={})
        assert config.repository.default_branch == "master"
        assert config.repository.artifacts_file == "artifacts.json"
        assert config.retry.attempts == 3
        assert config.paging.default_page_size == 20
        assert config.logging.format is LogFormat.JSON

    def test_file_overrides_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "config.toml"
        _ = path.write_text(
            '[repository]\nkind = "local"\nlocal_root = "/srv/repos"\n'
            "[concurrency]\nrefresh_workers = 2\n"
        )

        config = Config.load(path, environ={})

        assert config.repository.kind == "local"
        assert config.repository.local_root == Path("/srv/repos")
        assert config.concurrency.refresh_workers == 2
        assert config.concurrency.bulk_workers == 4

    def test_environment_overrides_file(self, tmp_path: Path) -> None:
        path = tmp_path / "config.toml"
        _ = path.write_text("[retry]\nattempts = 2\n")

        config = Config.load(path, environ={"ARTIFACTS_RETRY__ATTEMPTS": "7"})

        assert config.retry.attempts == 7

    def test_config_path_from_environment(self, tmp_path: Path) -> None:
        path = tmp_path / "config.toml"
        _ = path.write_text('[store]\npath = "custom.db"\n')

        config = Config.load(environ={CONFIG_PATH_ENV: str(path)})

        assert config.store.path == Path("custom.db")

    def test_environment_can_be_ignored(self) -> None:
        config = Config.load(include_env=False, environ={"ARTIFACTS_RETRY__ATTEMPTS": "7"})
        assert config.retry.attempts == 3

    def test_invalid_value_raises(self) -> None:
        with pytest.raises(ConfigLoadError, match="Invalid configuration"):
            _ = Config.load(environ={"ARTIFACTS_RETRY__ATTEMPTS": "0"})

    def test_unknown_repository_kind_raises(self) -> None:
        with pytest.raises(ConfigLoadError):
            _ = Config.from_dict({"repository": {"kind": "svn"}})

    def test_sections_are_frozen(self) -> None:
        config = Config()
        with pytest.raises(ValueError, match="frozen"):
            config.retry.attempts = 9  # pyright: ignore[reportAttributeAccessIssue]
