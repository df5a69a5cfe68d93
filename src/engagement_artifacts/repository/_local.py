# ruff: noqa: TC003  # Path needed at runtime for method signatures
"""Local git repositories as a remote repository.

Each project is a bare git repository under a common root directory, named
after its project id. Commits are built directly from blobs and trees, so no
working tree or index is involved. Blocking dulwich calls run in worker
threads.
"""

import time
from pathlib import Path

import anyio
import anyio.to_thread
from dulwich.errors import NotTreeError
from dulwich.object_store import commit_tree_changes, tree_lookup_path
from dulwich.objects import Blob, Commit, Tree
from dulwich.repo import Repo
from structlog.typing import FilteringBoundLogger

from engagement_artifacts.exceptions import (
    FatalRemoteError,
    RemoteNotFoundError,
    SnapshotFormatError,
)
from engagement_artifacts.repository._models import (
    CommitAction,
    CommitRequest,
    FileAction,
    ProjectId,
    RepositoryFile,
)
from engagement_artifacts.utils import create_service_logger

# Regular non-executable file
_FILE_MODE = 0o100644

_DEFAULT_NAME = "Artifacts Service"
_DEFAULT_EMAIL = "artifacts@localhost"


def _format_author_line(name: str | None, email: str | None) -> bytes:
    return f"{name or _DEFAULT_NAME} <{email or _DEFAULT_EMAIL}>".encode()


class LocalGitRepository:
    """Remote repository backed by bare git repositories on disk.

    Repositories are created on first write. Reads from a project or branch
    that does not exist raise ``RemoteNotFoundError``, as the GitLab API does.

    Example:
        >>> repo = LocalGitRepository(Path("repositories"))
        >>> await repo.create_file(7, RepositoryFile("artifacts.json", "[]", branch="master"))
        >>> (await repo.get_file(7, "artifacts.json", ref="master")).content
        '[]'
    """

    def __init__(
        self,
        root: Path,
        *,
        logger: FilteringBoundLogger | None = None,
    ) -> None:
        """Initialize with the directory holding the project repositories.

        Args:
            root: Parent directory of the per-project repositories.
            logger: Logger for commit events.
        """
        self._root: Path = root
        self._write_lock: anyio.Lock = anyio.Lock()
        self._logger: FilteringBoundLogger = logger or create_service_logger(
            component="local_repository"
        )

    @property
    def root(self) -> Path:
        """Directory holding one repository per project."""
        return self._root

    def project_path(self, project_id: ProjectId) -> Path:
        """Return the repository directory of a project."""
        return self._root / str(project_id)

    async def aclose(self) -> None:
        """Nothing to release; repositories are opened per call."""

    # =========================================================================
    # RemoteRepositoryProtocol Methods
    # =========================================================================

    async def get_file(
        self, project_id: ProjectId, file_path: str, *, ref: str
    ) -> RepositoryFile:
        """Read a file from the tip of a branch.

        Raises:
            RemoteNotFoundError: If the project, branch or file is missing.
        """
        content = await anyio.to_thread.run_sync(
            self._read_blob, project_id, file_path, ref
        )
        return RepositoryFile(file_path=file_path, content=content, branch=ref)

    async def create_file(self, project_id: ProjectId, file: RepositoryFile) -> None:
        """Commit a new file.

        Raises:
            FatalRemoteError: If the file already exists.
        """
        await self.commit(project_id, _single_file_commit(FileAction.CREATE, file))

    async def update_file(self, project_id: ProjectId, file: RepositoryFile) -> None:
        """Commit new content for an existing file.

        Raises:
            RemoteNotFoundError: If the file does not exist.
        """
        await self.commit(project_id, _single_file_commit(FileAction.UPDATE, file))

    async def commit(self, project_id: ProjectId, request: CommitRequest) -> None:
        """Apply every action of the request as one commit."""
        async with self._write_lock:
            sha = await anyio.to_thread.run_sync(self._commit, project_id, request)
        self._logger.info(
            "repository_commit_created",
            project_id=project_id,
            branch=request.branch,
            sha=sha,
            files=[action.file_path for action in request.actions],
        )

    # =========================================================================
    # Blocking Helpers
    # =========================================================================

    def _open(self, project_id: ProjectId, *, create: bool = False) -> Repo:
        path = self.project_path(project_id)
        if (path / "HEAD").exists():
            return Repo(str(path))
        if not create:
            msg = f"Project {project_id} has no repository"
            raise RemoteNotFoundError(msg, status_code=404, url=str(path))
        path.mkdir(parents=True, exist_ok=True)
        return Repo.init_bare(str(path))

    def _read_blob(self, project_id: ProjectId, file_path: str, ref: str) -> str:
        repo = self._open(project_id)
        try:
            location = str(self.project_path(project_id) / file_path)
            try:
                head = repo.refs[f"refs/heads/{ref}".encode()]
            except KeyError as e:
                msg = f"Branch {ref} not found in project {project_id}"
                raise RemoteNotFoundError(msg, status_code=404, url=location) from e

            commit = repo[head]
            if not isinstance(commit, Commit):
                msg = f"Branch {ref} does not point to a commit"
                raise FatalRemoteError(msg, url=location)

            try:
                _, sha = tree_lookup_path(repo.__getitem__, commit.tree, file_path.encode())
            except (KeyError, NotTreeError) as e:
                msg = f"File {file_path} not found in project {project_id}"
                raise RemoteNotFoundError(msg, status_code=404, url=location) from e

            blob = repo[sha]
            if not isinstance(blob, Blob):
                msg = f"{file_path} is not a file"
                raise FatalRemoteError(msg, url=location)
            try:
                return blob.data.decode()
            except UnicodeDecodeError as e:
                msg = f"{file_path} in project {project_id} is not valid UTF-8"
                raise SnapshotFormatError(msg, path=location) from e
        finally:
            repo.close()

    def _commit(self, project_id: ProjectId, request: CommitRequest) -> str:
        repo = self._open(project_id, create=True)
        try:
            ref = f"refs/heads/{request.branch}".encode()
            parent: bytes | None
            try:
                parent = repo.refs[ref]
            except KeyError:
                parent = None

            if parent is None:
                tree = Tree()
            else:
                location = str(self.project_path(project_id))
                parent_commit = repo[parent]
                if not isinstance(parent_commit, Commit):
                    msg = f"Branch {request.branch} does not point to a commit"
                    raise FatalRemoteError(msg, url=location)
                tree_object = repo[parent_commit.tree]
                if not isinstance(tree_object, Tree):
                    msg = f"Commit {parent.decode()} has no readable tree"
                    raise FatalRemoteError(msg, url=location)
                tree = tree_object

            changes: list[tuple[bytes, int | None, bytes | None]] = []
            for action in request.actions:
                self._check_action(repo, tree, action, project_id)
                path = action.file_path.encode()
                if action.action is FileAction.DELETE:
                    changes.append((path, None, None))
                    continue
                blob = Blob.from_string(action.content.encode())
                repo.object_store.add_object(blob)
                changes.append((path, _FILE_MODE, blob.id))

            new_tree = commit_tree_changes(repo.object_store, tree, changes)
            repo.object_store.add_object(new_tree)

            author = _format_author_line(request.author_name, request.author_email)
            now = int(time.time())
            commit = Commit()
            commit.tree = new_tree.id
            commit.parents = [] if parent is None else [parent]
            commit.author = commit.committer = author
            commit.author_time = commit.commit_time = now
            commit.author_timezone = commit.commit_timezone = 0
            commit.encoding = b"UTF-8"
            commit.message = request.commit_message.encode()
            repo.object_store.add_object(commit)
            repo.refs[ref] = commit.id
            return commit.id.decode()
        finally:
            repo.close()

    def _check_action(
        self, repo: Repo, tree: Tree, action: CommitAction, project_id: ProjectId
    ) -> None:
        try:
            _ = tree_lookup_path(repo.__getitem__, tree.id, action.file_path.encode())
            exists = True
        except (KeyError, NotTreeError):
            exists = False

        location = str(self.project_path(project_id) / action.file_path)
        if action.action is FileAction.CREATE and exists:
            msg = f"File {action.file_path} already exists in project {project_id}"
            raise FatalRemoteError(msg, status_code=400, url=location)
        if action.action is not FileAction.CREATE and not exists:
            msg = f"File {action.file_path} not found in project {project_id}"
            raise RemoteNotFoundError(msg, status_code=404, url=location)


def _single_file_commit(action: FileAction, file: RepositoryFile) -> CommitRequest:
    plain = file.decoded()
    return CommitRequest(
        branch=plain.branch or "master",
        commit_message=plain.commit_message or f"{action.value} {plain.file_path}",
        actions=(CommitAction(action, plain.file_path, plain.content),),
        author_email=plain.author_email,
        author_name=plain.author_name,
    )
