"""Change-set computation for artifact reconciliation.

This module compares the artifact list a client submitted for one engagement
against the list currently persisted for that engagement and classifies every
artifact as created, updated, deleted or unchanged. Matching is by identity
(``uuid``), never by content.
"""

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

from engagement_artifacts.artifacts._models import Artifact, new_uuid


@dataclass(frozen=True, slots=True)
class ArtifactUpdate:
    """A matched artifact whose content changed.

    Attributes:
        incoming: The artifact as submitted.
        existing: The artifact as currently persisted.
        deltas: JSON field name to ``(old, new)`` for each changed field.
    """

    incoming: Artifact
    existing: Artifact
    deltas: dict[str, tuple[str | None, str | None]] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class ChangeSet:
    """Classified delta between two artifact lists for one engagement.

    Attributes:
        engagement_uuid: The engagement both lists belong to.
        created: Incoming artifacts with no persisted counterpart.
        updated: Matched artifacts whose content differs.
        deleted: Persisted artifacts absent from the incoming list.
        unchanged: Uuids of matched artifacts with identical content.
    """

    engagement_uuid: str
    created: tuple[Artifact, ...] = ()
    updated: tuple[ArtifactUpdate, ...] = ()
    deleted: tuple[Artifact, ...] = ()
    unchanged: frozenset[str] = frozenset()

    @property
    def is_empty(self) -> bool:
        """True when applying this change-set would not change anything."""
        return not (self.created or self.updated or self.deleted)

    @property
    def deleted_uuids(self) -> list[str]:
        """Uuids of deleted artifacts, sorted."""
        return sorted(_uuid_key(artifact) for artifact in self.deleted)

    @property
    def size_delta(self) -> int:
        """Net change in the number of artifacts for the engagement."""
        return len(self.created) - len(self.deleted)

    def change_log(self) -> list[str]:
        """Render one human-readable line per change.

        Lines are ordered deleted, then updated, then created, each group
        sorted by uuid, so the same change-set always renders identically.

        Returns:
            Change-log lines, empty for an empty change-set.
        """
        lines = [
            f"deleted artifact {artifact.uuid}"
            for artifact in sorted(self.deleted, key=_uuid_key)
        ]
        for update in sorted(self.updated, key=lambda u: _uuid_key(u.incoming)):
            changes = "; ".join(
                f"{name} {old!r} -> {new!r}"
                for name, (old, new) in sorted(update.deltas.items())
            )
            lines.append(f"updated artifact {update.incoming.uuid}: {changes}")
        lines.extend(
            f"created artifact {artifact.uuid}"
            for artifact in sorted(self.created, key=_uuid_key)
        )
        return lines


def _uuid_key(artifact: Artifact) -> str:
    return artifact.uuid or ""


def assign_identities(
    artifacts: Sequence[Artifact],
    *,
    id_factory: Callable[[], str] = new_uuid,
) -> list[Artifact]:
    """Give every artifact without a uuid a freshly generated one.

    Client-supplied uuids are never touched. The inputs are not modified;
    copies are returned for the artifacts that needed an identity.

    Args:
        artifacts: Artifacts that may lack a uuid.
        id_factory: Identity generator, injectable for tests.

    Returns:
        Artifacts in the same order, each with a non-empty uuid.
    """
    return [
        artifact if artifact.uuid else artifact.model_copy(update={"uuid": id_factory()})
        for artifact in artifacts
    ]


def compute_change_set(
    engagement_uuid: str,
    incoming: Sequence[Artifact],
    existing: Sequence[Artifact],
    *,
    id_factory: Callable[[], str] = new_uuid,
) -> ChangeSet:
    """Compare submitted artifacts against the persisted ones.

    Args:
        engagement_uuid: Engagement both lists belong to.
        incoming: Full intended artifact list. Items may lack a uuid.
        existing: Artifacts currently persisted for the engagement.
        id_factory: Identity generator for incoming items without a uuid.

    Returns:
        The classified change-set. It is empty exactly when both lists hold
        the same uuids with the same compared content.

    Example:
        >>> old = Artifact(uuid="a", title="t", type="Demo")
        >>> new = old.model_copy(update={"title": "changed"})
        >>> change_set = compute_change_set("e1", [new], [old])
        >>> change_set.change_log()
        ["updated artifact a: title 't' -> 'changed'"]
    """
    identified = assign_identities(incoming, id_factory=id_factory)
    existing_by_uuid = {artifact.uuid: artifact for artifact in existing if artifact.uuid}
    incoming_uuids = {artifact.uuid for artifact in identified}

    created: list[Artifact] = []
    updated: list[ArtifactUpdate] = []
    unchanged: set[str] = set()

    for artifact in identified:
        persisted = existing_by_uuid.get(artifact.uuid)
        if persisted is None:
            created.append(artifact)
            continue

        deltas = artifact.field_deltas(persisted)
        if deltas:
            updated.append(ArtifactUpdate(artifact, persisted, deltas))
        elif artifact.uuid is not None:
            unchanged.add(artifact.uuid)

    deleted = [
        artifact for artifact in existing if artifact.uuid not in incoming_uuids
    ]

    return ChangeSet(
        engagement_uuid=engagement_uuid,
        created=tuple(created),
        updated=tuple(updated),
        deleted=tuple(deleted),
        unchanged=frozenset(unchanged),
    )
