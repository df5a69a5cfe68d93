from pathlib import Path

import pytest


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        if Path(item.path).is_relative_to(Path(__file__).parent):
            item.add_marker(pytest.mark.unit)


@pytest.fixture
def freeze_time(monkeypatch: pytest.MonkeyPatch) -> str:
    """Freeze pendulum.now() at 2024-05-01T12:00:00Z and return that instant."""
    import pendulum

    fixed = pendulum.datetime(2024, 5, 1, 12, 0, 0, tz="UTC")

    def mock_now(tz: str = "UTC") -> pendulum.DateTime:
        return fixed if tz == "UTC" else pendulum.now(tz)

    monkeypatch.setattr("pendulum.now", mock_now)
    return fixed.to_iso8601_string()
