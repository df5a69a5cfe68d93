"""Remote repositories holding engagement snapshot files.

This package provides the protocol the service writes snapshots through and
its implementations.

Classes:
    RemoteRepositoryProtocol: Runtime-checkable protocol for dependency injection.
    GitLabRepository: GitLab v4 REST API client (httpx with tenacity retries).
    LocalGitRepository: Bare git repositories on disk (dulwich).
    FakeRemoteRepository: In-memory repository for tests.

Models:
    RepositoryFile: One file with optional transport encoding.
    CommitRequest: Multi-file commit.
    CommitAction: One file change inside a commit.
    FileAction: create, update or delete.

Example:
    >>> from engagement_artifacts.repository import FakeRemoteRepository
    >>> repo = FakeRemoteRepository()
    >>> repo.put(42, "artifacts.json", "[]")
"""

from engagement_artifacts.repository._fake import FakeRemoteRepository
from engagement_artifacts.repository._gitlab import TOKEN_HEADER, GitLabRepository
from engagement_artifacts.repository._local import LocalGitRepository
from engagement_artifacts.repository._models import (
    BASE64_ENCODING,
    CommitAction,
    CommitRequest,
    FileAction,
    ProjectId,
    RepositoryFile,
)
from engagement_artifacts.repository._protocol import RemoteRepositoryProtocol

__all__ = [
    "BASE64_ENCODING",
    "TOKEN_HEADER",
    "CommitAction",
    "CommitRequest",
    "FakeRemoteRepository",
    "FileAction",
    "GitLabRepository",
    "LocalGitRepository",
    "ProjectId",
    "RemoteRepositoryProtocol",
    "RepositoryFile",
]
