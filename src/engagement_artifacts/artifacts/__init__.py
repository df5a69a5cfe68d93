"""Artifact records, change-sets and snapshot encoding.

Models:
    Artifact: A titled link attached to one engagement.
    ArtifactCount: Aggregate count projection.
    Engagement: Engagement entry from the engagement directory.

Change-sets:
    ChangeSet: Classified delta between two artifact lists.
    ArtifactUpdate: A matched artifact whose content changed.
    compute_change_set: Diff submitted artifacts against persisted ones.

Snapshots:
    dump_snapshot / parse_snapshot: Snapshot file content codec.
    merge_legacy_document: Embed artifacts into the legacy engagement document.

Example:
    >>> from engagement_artifacts.artifacts import Artifact, compute_change_set
    >>> change_set = compute_change_set("e1", [Artifact(title="New")], [])
    >>> len(change_set.created)
    1
"""

from engagement_artifacts.artifacts._changeset import (
    ArtifactUpdate,
    ChangeSet,
    assign_identities,
    compute_change_set,
)
from engagement_artifacts.artifacts._models import (
    COMPARED_FIELDS,
    REQUIRED_FIELDS,
    Artifact,
    ArtifactCount,
    Engagement,
    new_uuid,
    validate_submission,
)
from engagement_artifacts.artifacts._snapshot import (
    LEGACY_ARTIFACTS_KEY,
    dump_snapshot,
    merge_legacy_document,
    parse_snapshot,
    snapshot_payload,
)

__all__ = [
    "COMPARED_FIELDS",
    "LEGACY_ARTIFACTS_KEY",
    "REQUIRED_FIELDS",
    "Artifact",
    "ArtifactCount",
    "ArtifactUpdate",
    "ChangeSet",
    "Engagement",
    "assign_identities",
    "compute_change_set",
    "dump_snapshot",
    "merge_legacy_document",
    "new_uuid",
    "parse_snapshot",
    "snapshot_payload",
    "validate_submission",
]
