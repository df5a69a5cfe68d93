"""Snapshot file encoding.

A snapshot is the full artifact list of one engagement serialized as a JSON
array. The legacy engagement document embeds the same array under its
``artifacts`` key. Everything here works on plain decoded text; transport
encodings (base64 content, URL-encoded paths) live in the repository layer.
"""

from collections.abc import Iterable
from typing import Final, cast

import orjson
from pydantic import ValidationError

from engagement_artifacts.artifacts._models import Artifact
from engagement_artifacts.exceptions import SnapshotFormatError

LEGACY_ARTIFACTS_KEY: Final = "artifacts"


def snapshot_payload(artifacts: Iterable[Artifact]) -> list[dict[str, object]]:
    """Convert artifacts into JSON-ready snapshot objects.

    Keys follow the snapshot field order (``uuid, engagementUuid, title,
    description, type, linkAddress, region, created, updated``); unset fields
    are omitted.

    Args:
        artifacts: Artifacts to convert.

    Returns:
        One dictionary per artifact.
    """
    return [
        artifact.model_dump(mode="json", by_alias=True, exclude_none=True)
        for artifact in artifacts
    ]


def dump_snapshot(artifacts: Iterable[Artifact]) -> str:
    """Serialize artifacts into canonical snapshot file content.

    Args:
        artifacts: The authoritative artifact list for one engagement.

    Returns:
        Pretty-printed JSON array text.
    """
    return orjson.dumps(snapshot_payload(artifacts), option=orjson.OPT_INDENT_2).decode()


def parse_snapshot(content: str | None, *, path: str | None = None) -> list[Artifact]:
    """Parse snapshot file content into artifacts.

    Args:
        content: Decoded file content. None or blank content is an empty list.
        path: Repository path of the file, used in error messages.

    Returns:
        The artifacts in file order.

    Raises:
        SnapshotFormatError: If the content is not a JSON array of artifact
            objects.
    """
    if content is None or not content.strip():
        return []

    try:
        data = cast("object", orjson.loads(content))
    except orjson.JSONDecodeError as e:
        msg = f"Snapshot is not valid JSON: {e}"
        raise SnapshotFormatError(msg, path=path) from e

    if not isinstance(data, list):
        msg = "Snapshot must be a JSON array"
        raise SnapshotFormatError(msg, path=path)

    artifacts: list[Artifact] = []
    for index, item in enumerate(cast("list[object]", data)):
        try:
            artifacts.append(Artifact.model_validate(item))
        except ValidationError as e:
            msg = f"Snapshot entry {index} is not a valid artifact: {e}"
            raise SnapshotFormatError(msg, path=path) from e
    return artifacts


def merge_legacy_document(document: str, artifacts: Iterable[Artifact]) -> str:
    """Embed artifacts into a legacy engagement document.

    The document's ``artifacts`` key is added or replaced and all top-level
    keys are re-emitted in sorted order so repository diffs stay stable.

    Args:
        document: Decoded legacy engagement document (a JSON object).
        artifacts: Artifacts to embed.

    Returns:
        The merged, pretty-printed document.

    Raises:
        SnapshotFormatError: If the document is not a JSON object.
    """
    try:
        data = cast("object", orjson.loads(document))
    except orjson.JSONDecodeError as e:
        msg = f"Engagement document is not valid JSON: {e}"
        raise SnapshotFormatError(msg) from e

    if not isinstance(data, dict):
        msg = "Engagement document must be a JSON object"
        raise SnapshotFormatError(msg)

    merged = cast("dict[str, object]", data)
    merged[LEGACY_ARTIFACTS_KEY] = snapshot_payload(artifacts)
    ordered = {key: merged[key] for key in sorted(merged)}
    return orjson.dumps(ordered, option=orjson.OPT_INDENT_2).decode()
