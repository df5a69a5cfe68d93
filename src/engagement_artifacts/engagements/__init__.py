"""Engagement directory access.

Classes:
    EngagementDirectoryProtocol: Runtime-checkable protocol for dependency injection.
    EngagementApiClient: Engagement API client (httpx with tenacity retries).
    FakeEngagementDirectory: In-memory directory for tests.
"""

from engagement_artifacts.engagements._client import (
    ENGAGEMENTS_PATH,
    EngagementApiClient,
)
from engagement_artifacts.engagements._fake import FakeEngagementDirectory
from engagement_artifacts.engagements._protocol import EngagementDirectoryProtocol

__all__ = [
    "ENGAGEMENTS_PATH",
    "EngagementApiClient",
    "EngagementDirectoryProtocol",
    "FakeEngagementDirectory",
]
