"""Property-based tests for change-set computation."""

import itertools

from hypothesis import given, strategies as st

from engagement_artifacts.artifacts import (
    Artifact,
    assign_identities,
    compute_change_set,
)

# =============================================================================
# Strategies
# =============================================================================

small_text = st.one_of(st.none(), st.sampled_from(["Demo", "Video", "Deck", "", "na"]))

uuids = st.text(alphabet="abcdef0123456789", min_size=1, max_size=6)


@st.composite
def artifact_lists(draw: st.DrawFn, *, min_size: int = 0) -> list[Artifact]:
    """Artifacts with distinct uuids and varied content."""
    ids = draw(st.lists(uuids, min_size=min_size, max_size=8, unique=True))
    return [
        Artifact.model_validate(
            {
                "uuid": uuid,
                "engagementUuid": "e1",
                "title": draw(small_text),
                "type": draw(small_text),
                "region": draw(small_text),
            }
        )
        for uuid in ids
    ]


# =============================================================================
# Classification Properties
# =============================================================================


@given(existing=artifact_lists())
def test_identical_lists_give_empty_change_set(existing: list[Artifact]) -> None:
    """Property: submitting the persisted list unchanged is a no-op."""
    change_set = compute_change_set("e1", existing, existing)

    assert change_set.is_empty
    assert change_set.unchanged == {a.uuid for a in existing}
    assert change_set.change_log() == []


@given(incoming=artifact_lists(), existing=artifact_lists())
def test_every_incoming_artifact_is_classified_once(
    incoming: list[Artifact], existing: list[Artifact]
) -> None:
    """Property: created, updated and unchanged partition the incoming uuids."""
    change_set = compute_change_set("e1", incoming, existing)

    created = [a.uuid for a in change_set.created]
    updated = [u.incoming.uuid for u in change_set.updated]
    classified = created + updated + sorted(change_set.unchanged)

    assert sorted(classified) == sorted(a.uuid for a in incoming)
    assert len(set(classified)) == len(classified)


@given(incoming=artifact_lists(), existing=artifact_lists())
def test_deleted_are_existing_minus_incoming(
    incoming: list[Artifact], existing: list[Artifact]
) -> None:
    """Property: exactly the persisted uuids missing from the submission are deleted."""
    change_set = compute_change_set("e1", incoming, existing)

    expected = {a.uuid for a in existing} - {a.uuid for a in incoming}
    assert set(change_set.deleted_uuids) == expected
    assert change_set.size_delta == len(incoming) - len(existing)


@given(incoming=artifact_lists(), existing=artifact_lists())
def test_updates_carry_only_changed_fields(
    incoming: list[Artifact], existing: list[Artifact]
) -> None:
    """Property: every reported delta is a real difference between old and new."""
    change_set = compute_change_set("e1", incoming, existing)

    for update in change_set.updated:
        assert update.deltas
        for old, new in update.deltas.values():
            assert old != new


@given(incoming=artifact_lists(), existing=artifact_lists())
def test_change_log_ignores_submission_order(
    incoming: list[Artifact], existing: list[Artifact]
) -> None:
    """Property: reordering the submission does not change the change-log."""
    forward = compute_change_set("e1", incoming, existing)
    backward = compute_change_set("e1", list(reversed(incoming)), existing)

    assert forward.change_log() == backward.change_log()


# =============================================================================
# Identity Properties
# =============================================================================


@given(
    supplied=st.lists(st.one_of(st.none(), uuids), max_size=10).filter(
        lambda ids: len([i for i in ids if i]) == len({i for i in ids if i})
    )
)
def test_assign_identities_fills_blanks_only(supplied: list[str | None]) -> None:
    """Property: supplied uuids are kept and blanks get distinct fresh ones."""
    counter = itertools.count()
    artifacts = [Artifact(uuid=uuid) for uuid in supplied]

    identified = assign_identities(artifacts, id_factory=lambda: f"gen-{next(counter)}")

    assert len(identified) == len(artifacts)
    for before, after in zip(artifacts, identified, strict=True):
        assert after.uuid
        if before.uuid:
            assert after.uuid == before.uuid
    assert len({a.uuid for a in identified}) == len(identified)
