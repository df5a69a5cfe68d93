"""Fake remote repository for testing.

This module provides a FakeRemoteRepository class that implements
RemoteRepositoryProtocol entirely in memory.
"""

from dataclasses import dataclass, field

from engagement_artifacts.exceptions import (
    FatalRemoteError,
    RemoteError,
    RemoteNotFoundError,
)
from engagement_artifacts.repository._models import (
    CommitAction,
    CommitRequest,
    FileAction,
    ProjectId,
    RepositoryFile,
)


@dataclass(slots=True)
class FakeRemoteRepository:
    """In-memory remote repository for testing.

    Files are keyed by ``(project_id, file_path)``; branches are recorded on
    writes but not modelled separately. Every call is appended to ``calls``
    so tests can assert on exactly which writes happened.

    Errors can be injected per operation name (``get_file``, ``create_file``,
    ``update_file``, ``commit``) and per project:

    Example:
        >>> repo = FakeRemoteRepository()
        >>> repo.put(1, "artifacts.json", "[]")
        >>> repo.fail("update_file", TransientRemoteError("down"))
        >>> repo.writes
        []
    """

    files: dict[tuple[str, str], str] = field(default_factory=dict)
    calls: list[tuple[str, str, str]] = field(default_factory=list)
    commits: list[CommitRequest] = field(default_factory=list)
    _errors: dict[tuple[str, str | None], RemoteError] = field(default_factory=dict)

    # =========================================================================
    # Test Helpers
    # =========================================================================

    def put(self, project_id: ProjectId, file_path: str, content: str) -> None:
        """Seed a file without recording a call."""
        self.files[(str(project_id), file_path)] = content

    def content(self, project_id: ProjectId, file_path: str) -> str | None:
        """Return a file's content, or None if it does not exist."""
        return self.files.get((str(project_id), file_path))

    def fail(
        self,
        operation: str,
        error: RemoteError,
        *,
        project_id: ProjectId | None = None,
    ) -> None:
        """Make an operation raise ``error``.

        Args:
            operation: Protocol method name.
            error: Exception to raise on every matching call.
            project_id: Limit the failure to one project.
        """
        key = None if project_id is None else str(project_id)
        self._errors[(operation, key)] = error

    def clear_failures(self) -> None:
        self._errors.clear()

    @property
    def writes(self) -> list[tuple[str, str, str]]:
        """Recorded calls that modify the repository."""
        return [call for call in self.calls if call[0] != "get_file"]

    def _record(self, operation: str, project_id: ProjectId, target: str) -> None:
        self.calls.append((operation, str(project_id), target))
        error = self._errors.get((operation, str(project_id))) or self._errors.get(
            (operation, None)
        )
        if error is not None:
            raise error

    # =========================================================================
    # RemoteRepositoryProtocol Methods
    # =========================================================================

    async def get_file(
        self, project_id: ProjectId, file_path: str, *, ref: str
    ) -> RepositoryFile:
        self._record("get_file", project_id, file_path)
        content = self.content(project_id, file_path)
        if content is None:
            msg = f"File {file_path} not found in project {project_id}"
            raise RemoteNotFoundError(msg, status_code=404)
        return RepositoryFile(file_path=file_path, content=content, branch=ref)

    async def create_file(self, project_id: ProjectId, file: RepositoryFile) -> None:
        plain = file.decoded()
        self._record("create_file", project_id, plain.file_path)
        self._apply(project_id, CommitAction(FileAction.CREATE, plain.file_path, plain.content))

    async def update_file(self, project_id: ProjectId, file: RepositoryFile) -> None:
        plain = file.decoded()
        self._record("update_file", project_id, plain.file_path)
        self._apply(project_id, CommitAction(FileAction.UPDATE, plain.file_path, plain.content))

    async def commit(self, project_id: ProjectId, request: CommitRequest) -> None:
        self._record(
            "commit",
            project_id,
            ",".join(action.file_path for action in request.actions),
        )
        for action in request.actions:
            self._apply(project_id, action)
        self.commits.append(request)

    async def aclose(self) -> None:
        """Close the repository (no-op for fake)."""

    def _apply(self, project_id: ProjectId, action: CommitAction) -> None:
        key = (str(project_id), action.file_path)
        exists = key in self.files
        if action.action is FileAction.CREATE and exists:
            msg = f"File {action.file_path} already exists"
            raise FatalRemoteError(msg, status_code=400)
        if action.action is not FileAction.CREATE and not exists:
            msg = f"File {action.file_path} not found"
            raise RemoteNotFoundError(msg, status_code=404)
        if action.action is FileAction.DELETE:
            del self.files[key]
        else:
            self.files[key] = action.content
