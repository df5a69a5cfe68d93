"""Artifact data models.

This module defines the records exchanged with clients, persisted in the
document store, and serialized into repository snapshots.
"""

import uuid as uuid_lib
from collections.abc import Iterable
from typing import ClassVar, Final

from pydantic import BaseModel, ConfigDict, Field

from engagement_artifacts.exceptions import ArtifactValidationError

# Fields a client submission must carry as non-blank strings
REQUIRED_FIELDS: Final = ("title", "description", "type", "link_address")

# Fields compared when deciding whether a matched artifact changed
COMPARED_FIELDS: Final = (
    "title",
    "description",
    "type",
    "link_address",
    "region",
    "engagement_uuid",
)


def new_uuid() -> str:
    """Generate a new artifact identity.

    Returns:
        A random UUID4 rendered as a string.
    """
    return str(uuid_lib.uuid4())


class Artifact(BaseModel):
    """A titled link attached to one engagement.

    Instances are immutable; use ``model_copy(update=...)`` to derive changed
    copies. JSON field names follow the snapshot file format (camelCase, with
    ``modified`` serialized as ``updated``). The store key ``id`` is never
    serialized.

    Attributes:
        id: Internal document store key, assigned by the store.
        uuid: Artifact identity, unique across the store.
        engagement_uuid: Owning engagement.
        title: Display title.
        description: Free text description.
        type: Artifact category (for example ``Demo`` or ``Video``).
        link_address: Where the artifact lives.
        region: Optional region tag.
        created: ISO-8601 creation timestamp, immutable once set.
        modified: ISO-8601 last modification timestamp.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(
        frozen=True,
        populate_by_name=True,
        extra="ignore",
    )

    id: int | None = Field(default=None, exclude=True)
    uuid: str | None = None
    engagement_uuid: str | None = Field(default=None, alias="engagementUuid")
    title: str | None = None
    description: str | None = None
    type: str | None = None
    link_address: str | None = Field(default=None, alias="linkAddress")
    region: str | None = None
    created: str | None = None
    modified: str | None = Field(default=None, alias="updated")

    def field_deltas(
        self, other: "Artifact"
    ) -> dict[str, tuple[str | None, str | None]]:
        """Compare the content fields of two artifacts.

        Args:
            other: The previously persisted version of this artifact.

        Returns:
            Mapping of JSON field name to ``(old, new)`` for every compared
            field that differs. Empty when the content is identical.
        """
        deltas: dict[str, tuple[str | None, str | None]] = {}
        for name in COMPARED_FIELDS:
            new_value: str | None = getattr(self, name)
            old_value: str | None = getattr(other, name)
            if new_value != old_value:
                alias = type(self).model_fields[name].alias or name
                deltas[alias] = (old_value, new_value)
        return deltas


class ArtifactCount(BaseModel):
    """Aggregate count projection, never persisted.

    Attributes:
        count: Number of matching artifacts.
        type: Group key for grouped aggregates (artifact type or engagement
            uuid), None for plain counts.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True)

    count: int = 0
    type: str | None = None


class Engagement(BaseModel):
    """An engagement as reported by the engagement directory.

    Attributes:
        uuid: Engagement identity. Some directory entries lack one.
        project_id: Repository project holding the engagement's files.
        artifact_count: Artifact count last reported to the directory.
        name: Optional display name.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(
        frozen=True,
        populate_by_name=True,
        extra="ignore",
    )

    uuid: str | None = None
    project_id: int | str | None = Field(default=None, alias="projectId")
    artifact_count: int | None = Field(default=None, alias="artifactCount")
    name: str | None = None


def validate_submission(
    artifacts: Iterable[Artifact],
    *,
    require_engagement: bool = False,
) -> None:
    """Check that client-submitted artifacts carry every required field.

    Args:
        artifacts: Artifacts as received from a client.
        require_engagement: Also require ``engagementUuid`` (bulk updates).

    Raises:
        ArtifactValidationError: If a required field is missing or blank, or
            if two artifacts share a uuid.
    """
    required = (
        (*REQUIRED_FIELDS, "engagement_uuid") if require_engagement else REQUIRED_FIELDS
    )
    seen: set[str] = set()
    for index, artifact in enumerate(artifacts):
        for name in required:
            value: str | None = getattr(artifact, name)
            if value is None or not value.strip():
                alias = Artifact.model_fields[name].alias or name
                msg = f"Artifact at index {index} is missing required field '{alias}'"
                raise ArtifactValidationError(
                    msg, artifact_id=artifact.uuid, field=alias
                )
        if artifact.uuid:
            if artifact.uuid in seen:
                msg = f"Duplicate artifact uuid '{artifact.uuid}' in submission"
                raise ArtifactValidationError(
                    msg, artifact_id=artifact.uuid, field="uuid"
                )
            seen.add(artifact.uuid)
