from collections.abc import Iterator

from engagement_artifacts.artifacts import (
    Artifact,
    ArtifactUpdate,
    ChangeSet,
    assign_identities,
    compute_change_set,
)


def _ids(*values: str) -> Iterator[str]:
    return iter(values)


def _artifact(uuid: str | None = None, **overrides: str) -> Artifact:
    data = {
        "uuid": uuid,
        "engagement_uuid": "e1",
        "title": "Demo",
        "description": "A demo",
        "type": "Demo",
        "link_address": "https://example.com",
    }
    data.update(overrides)
    return Artifact.model_validate(data)


# =============================================================================
# assign_identities Tests
# =============================================================================


class TestAssignIdentities:
    def test_keeps_client_uuids(self) -> None:
        result = assign_identities([_artifact("a")], id_factory=lambda: "generated")
        assert result[0].uuid == "a"

    def test_generates_missing_uuids_in_order(self) -> None:
        ids = _ids("g1", "g2")
        result = assign_identities(
            [_artifact(), _artifact("a"), _artifact()], id_factory=lambda: next(ids)
        )
        assert [a.uuid for a in result] == ["g1", "a", "g2"]

    def test_treats_empty_uuid_as_missing(self) -> None:
        result = assign_identities([_artifact("")], id_factory=lambda: "g1")
        assert result[0].uuid == "g1"

    def test_does_not_modify_inputs(self) -> None:
        original = _artifact()
        _ = assign_identities([original], id_factory=lambda: "g1")
        assert original.uuid is None


# =============================================================================
# compute_change_set Tests
# =============================================================================


class TestComputeChangeSet:
    def test_identical_lists_are_empty(self) -> None:
        existing = [_artifact("a"), _artifact("b")]
        change_set = compute_change_set("e1", list(existing), existing)
        assert change_set.is_empty
        assert change_set.unchanged == frozenset({"a", "b"})

    def test_new_items_are_created_with_generated_ids(self) -> None:
        change_set = compute_change_set(
            "e1", [_artifact(), _artifact()], [], id_factory=iter(["x", "y"]).__next__
        )
        assert [a.uuid for a in change_set.created] == ["x", "y"]
        assert change_set.updated == ()
        assert change_set.deleted == ()

    def test_unknown_client_uuid_is_created(self) -> None:
        change_set = compute_change_set("e1", [_artifact("a")], [])
        assert [a.uuid for a in change_set.created] == ["a"]

    def test_missing_items_are_deleted(self) -> None:
        existing = [_artifact("a"), _artifact("b")]
        change_set = compute_change_set("e1", [existing[0]], existing)
        assert [a.uuid for a in change_set.deleted] == ["b"]
        assert change_set.deleted_uuids == ["b"]

    def test_empty_submission_deletes_everything(self) -> None:
        existing = [_artifact("b"), _artifact("a")]
        change_set = compute_change_set("e1", [], existing)
        assert change_set.deleted_uuids == ["a", "b"]
        assert change_set.size_delta == -2

    def test_changed_content_is_updated(self) -> None:
        existing = [_artifact("a")]
        change_set = compute_change_set("e1", [_artifact("a", title="Renamed")], existing)
        assert len(change_set.updated) == 1
        update = change_set.updated[0]
        assert update.existing is existing[0]
        assert update.deltas == {"title": ("Demo", "Renamed")}

    def test_matching_is_by_identity_not_content(self) -> None:
        existing = [_artifact("a")]
        change_set = compute_change_set("e1", [_artifact("b")], existing)
        assert [a.uuid for a in change_set.created] == ["b"]
        assert [a.uuid for a in change_set.deleted] == ["a"]
        assert change_set.updated == ()

    def test_timestamps_alone_do_not_update(self) -> None:
        existing = [_artifact("a", created="2020", updated="2020")]
        change_set = compute_change_set("e1", [_artifact("a")], existing)
        assert change_set.is_empty


# =============================================================================
# ChangeSet Tests
# =============================================================================


class TestChangeLog:
    def test_empty_change_set_has_no_lines(self) -> None:
        assert ChangeSet("e1").change_log() == []

    def test_orders_deleted_updated_created(self) -> None:
        change_set = ChangeSet(
            "e1",
            created=(_artifact("c2"), _artifact("c1")),
            updated=(
                ArtifactUpdate(
                    _artifact("u1", title="New"),
                    _artifact("u1"),
                    {"title": ("Demo", "New")},
                ),
            ),
            deleted=(_artifact("d1"),),
        )
        assert change_set.change_log() == [
            "deleted artifact d1",
            "updated artifact u1: title 'Demo' -> 'New'",
            "created artifact c1",
            "created artifact c2",
        ]

    def test_update_lists_fields_alphabetically(self) -> None:
        update = ArtifactUpdate(
            _artifact("u1"),
            _artifact("u1"),
            {"type": ("Demo", "Video"), "region": (None, "na")},
        )
        line = ChangeSet("e1", updated=(update,)).change_log()[0]
        assert line == "updated artifact u1: region None -> 'na'; type 'Demo' -> 'Video'"

    def test_size_delta_counts_creates_minus_deletes(self) -> None:
        change_set = ChangeSet(
            "e1", created=(_artifact("a"), _artifact("b")), deleted=(_artifact("c"),)
        )
        assert change_set.size_delta == 1
        assert not change_set.is_empty
