"""Remote repository models.

This module defines the file and commit structures exchanged with a remote
repository. Content is held as decoded text everywhere in the service; the
base64 and URL encodings used on the wire are applied only through
``RepositoryFile.encoded`` and ``RepositoryFile.decoded``.
"""

import base64
import binascii
from dataclasses import dataclass, field, replace
from enum import StrEnum
from typing import Self
from urllib.parse import quote, unquote

from engagement_artifacts.exceptions import SnapshotFormatError

BASE64_ENCODING = "base64"

# Project identifiers are numeric on GitLab but may be paths elsewhere
type ProjectId = int | str


class FileAction(StrEnum):
    """Kind of change applied to one file in a commit."""

    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


@dataclass(frozen=True, slots=True)
class RepositoryFile:
    """A single file read from or written to a remote repository.

    Attributes:
        file_path: Path of the file inside the repository.
        content: File content. Plain text unless ``encoding`` is set.
        branch: Branch the file was read from or is written to.
        encoding: ``base64`` once encoded for transport, None for plain text.
        author_email: Commit author email for writes.
        author_name: Commit author name for writes.
        commit_message: Commit message for writes.
    """

    file_path: str
    content: str = ""
    branch: str | None = None
    encoding: str | None = None
    author_email: str | None = None
    author_name: str | None = None
    commit_message: str | None = None

    @property
    def is_encoded(self) -> bool:
        return self.encoding == BASE64_ENCODING

    def encoded(self) -> Self:
        """Return a copy ready for transport.

        The content is base64-encoded and the path URL-encoded. Encoding an
        already encoded file returns it unchanged.
        """
        if self.is_encoded:
            return self
        content = base64.b64encode(self.content.encode()).decode()
        return replace(
            self,
            file_path=quote(self.file_path, safe=""),
            content=content,
            encoding=BASE64_ENCODING,
        )

    def decoded(self) -> Self:
        """Return a copy with plain text content and path.

        Raises:
            SnapshotFormatError: If the content is not valid base64 UTF-8.
        """
        if not self.is_encoded:
            return self
        try:
            content = base64.b64decode(self.content, validate=True).decode()
        except (binascii.Error, UnicodeDecodeError) as e:
            msg = f"File content is not valid base64: {e}"
            raise SnapshotFormatError(msg, path=unquote(self.file_path)) from e
        return replace(
            self,
            file_path=unquote(self.file_path),
            content=content,
            encoding=None,
        )

    def to_payload(self) -> dict[str, str]:
        """Build the JSON body for a file create or update request.

        The file must already be encoded.
        """
        payload = {
            "file_path": self.file_path,
            "branch": self.branch or "",
            "encoding": self.encoding or "text",
            "content": self.content,
        }
        if self.author_email:
            payload["author_email"] = self.author_email
        if self.author_name:
            payload["author_name"] = self.author_name
        if self.commit_message:
            payload["commit_message"] = self.commit_message
        return payload


@dataclass(frozen=True, slots=True)
class CommitAction:
    """One file change inside a multi-file commit.

    Attributes:
        action: Kind of change.
        file_path: Path of the file inside the repository (plain text).
        content: Plain text file content.
    """

    action: FileAction
    file_path: str
    content: str = ""

    def to_payload(self) -> dict[str, str]:
        payload = {"action": self.action.value, "file_path": self.file_path}
        if self.action is not FileAction.DELETE:
            payload["content"] = base64.b64encode(self.content.encode()).decode()
            payload["encoding"] = BASE64_ENCODING
        return payload


@dataclass(frozen=True, slots=True)
class CommitRequest:
    """A commit touching several files at once.

    Attributes:
        branch: Target branch.
        commit_message: Commit message.
        actions: File changes, applied in order.
        author_email: Commit author email.
        author_name: Commit author name.
    """

    branch: str
    commit_message: str
    actions: tuple[CommitAction, ...] = field(default_factory=tuple)
    author_email: str | None = None
    author_name: str | None = None

    def to_payload(self) -> dict[str, object]:
        payload: dict[str, object] = {
            "branch": self.branch,
            "commit_message": self.commit_message,
            "actions": [action.to_payload() for action in self.actions],
        }
        if self.author_email:
            payload["author_email"] = self.author_email
        if self.author_name:
            payload["author_name"] = self.author_name
        return payload
