"""Property-based tests for snapshot encoding."""

import orjson
from hypothesis import given, strategies as st

from engagement_artifacts.artifacts import (
    LEGACY_ARTIFACTS_KEY,
    Artifact,
    dump_snapshot,
    merge_legacy_document,
    parse_snapshot,
)

# =============================================================================
# Strategies
# =============================================================================

# orjson rejects lone surrogates
json_text = st.text(alphabet=st.characters(blacklist_categories=["Cs"]), max_size=30)

optional_text = st.one_of(st.none(), json_text)

artifacts = st.builds(
    lambda uuid, title, description, kind, link, region, created: Artifact.model_validate(
        {
            "uuid": uuid,
            "engagementUuid": "e1",
            "title": title,
            "description": description,
            "type": kind,
            "linkAddress": link,
            "region": region,
            "created": created,
            "updated": created,
        }
    ),
    uuid=optional_text,
    title=optional_text,
    description=optional_text,
    kind=optional_text,
    link=optional_text,
    region=optional_text,
    created=st.one_of(st.none(), st.just("2024-05-01T12:00:00Z")),
)

extra_keys = st.dictionaries(
    json_text.filter(lambda key: key != LEGACY_ARTIFACTS_KEY),
    st.one_of(st.integers(min_value=-(2**53), max_value=2**53), json_text, st.booleans()),
    max_size=5,
)


# =============================================================================
# Snapshot Properties
# =============================================================================


@given(items=st.lists(artifacts, max_size=6))
def test_dump_then_parse_restores_artifacts(items: list[Artifact]) -> None:
    """Property: a dumped snapshot parses back to the same artifacts in order."""
    assert parse_snapshot(dump_snapshot(items)) == items


@given(items=st.lists(artifacts, max_size=6))
def test_snapshot_never_contains_nulls(items: list[Artifact]) -> None:
    """Property: unset fields are omitted rather than written as null."""
    for entry in orjson.loads(dump_snapshot(items)):
        assert None not in entry.values()
        assert "id" not in entry


# =============================================================================
# Legacy Document Properties
# =============================================================================


@given(document=extra_keys, items=st.lists(artifacts, max_size=4))
def test_legacy_merge_keeps_other_keys(
    document: dict[str, object], items: list[Artifact]
) -> None:
    """Property: merging replaces only the artifacts key and sorts top-level keys."""
    merged = orjson.loads(merge_legacy_document(orjson.dumps(document).decode(), items))

    assert {k: v for k, v in merged.items() if k != LEGACY_ARTIFACTS_KEY} == document
    assert list(merged) == sorted(merged)
    assert parse_snapshot(orjson.dumps(merged[LEGACY_ARTIFACTS_KEY]).decode()) == items
