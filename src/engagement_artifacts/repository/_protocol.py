"""Remote repository protocol for type-safe dependency injection.

This module defines a runtime-checkable Protocol satisfied by the GitLab
client, the local dulwich repository and the in-memory fake.
"""

from typing import Protocol, runtime_checkable

from engagement_artifacts.repository._models import (
    CommitRequest,
    ProjectId,
    RepositoryFile,
)


@runtime_checkable
class RemoteRepositoryProtocol(Protocol):
    """Protocol for reading and writing engagement files.

    All file content crossing this interface is plain text; transport
    encodings are an implementation detail.

    Example:
        >>> async def read_snapshot(repo: RemoteRepositoryProtocol) -> str:
        ...     file = await repo.get_file(42, "artifacts.json", ref="master")
        ...     return file.content
    """

    async def get_file(
        self, project_id: ProjectId, file_path: str, *, ref: str
    ) -> RepositoryFile:
        """Read a file at the given branch.

        Args:
            project_id: Repository project.
            file_path: Path of the file inside the repository.
            ref: Branch or commit to read from.

        Returns:
            The decoded file.

        Raises:
            RemoteNotFoundError: If the project or file does not exist.
            RemoteError: On any other failure.
        """
        ...

    async def create_file(self, project_id: ProjectId, file: RepositoryFile) -> None:
        """Create a new file in one commit.

        Raises:
            RemoteError: If the file already exists or the write fails.
        """
        ...

    async def update_file(self, project_id: ProjectId, file: RepositoryFile) -> None:
        """Replace an existing file's content in one commit.

        Raises:
            RemoteNotFoundError: If the file does not exist.
            RemoteError: On any other failure.
        """
        ...

    async def commit(self, project_id: ProjectId, request: CommitRequest) -> None:
        """Apply several file changes as a single commit.

        Raises:
            RemoteError: If the commit cannot be created.
        """
        ...

    async def aclose(self) -> None:
        """Release connections and file handles."""
        ...
