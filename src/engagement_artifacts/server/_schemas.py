from typing import ClassVar

from pydantic import BaseModel, ConfigDict, Field


class HealthResponse(BaseModel):
    status: str


class ErrorResponse(BaseModel):
    detail: str


class BulkUpdateResponse(BaseModel):
    """Per-engagement outcome of a bulk update."""

    engagements: dict[str, int] = Field(default_factory=dict)
    failed: dict[str, str] = Field(default_factory=dict)


class RefreshResponse(BaseModel):
    """Outcome of a purge and refresh."""

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True)

    total: int
    failed: dict[str, str] = Field(default_factory=dict)
