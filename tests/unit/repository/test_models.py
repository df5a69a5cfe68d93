import base64

import pytest

from engagement_artifacts.exceptions import SnapshotFormatError
from engagement_artifacts.repository import (
    BASE64_ENCODING,
    CommitAction,
    CommitRequest,
    FileAction,
    RepositoryFile,
)


class TestRepositoryFileEncoding:
    def test_encodes_content_and_path(self) -> None:
        file = RepositoryFile(file_path="data/artifacts.json", content="[]", branch="master")

        encoded = file.encoded()

        assert encoded.is_encoded
        assert encoded.encoding == BASE64_ENCODING
        assert encoded.file_path == "data%2Fartifacts.json"
        assert base64.b64decode(encoded.content) == b"[]"
        assert encoded.branch == "master"

    def test_encoding_twice_is_a_no_op(self) -> None:
        encoded = RepositoryFile(file_path="a.json", content="x").encoded()
        assert encoded.encoded() is encoded

    def test_decoded_restores_plain_file(self) -> None:
        file = RepositoryFile(file_path="data/a b.json", content='{"k": "é"}')
        assert file.encoded().decoded() == file

    def test_decoding_plain_file_is_a_no_op(self) -> None:
        file = RepositoryFile(file_path="a.json", content="x")
        assert file.decoded() is file

    def test_rejects_invalid_base64(self) -> None:
        file = RepositoryFile(file_path="a%2Fb.json", content="@@@", encoding="base64")
        with pytest.raises(SnapshotFormatError) as exc_info:
            _ = file.decoded()
        assert exc_info.value.path == "a/b.json"

    def test_payload_includes_commit_details(self) -> None:
        file = RepositoryFile(
            file_path="a.json",
            content="[]",
            branch="master",
            author_email="dev@example.com",
            author_name="Dev",
            commit_message="Update",
        ).encoded()
        assert file.to_payload() == {
            "file_path": "a.json",
            "branch": "master",
            "encoding": "base64",
            "content": base64.b64encode(b"[]").decode(),
            "author_email": "dev@example.com",
            "author_name": "Dev",
            "commit_message": "Update",
        }

    def test_payload_omits_unset_author(self) -> None:
        payload = RepositoryFile(file_path="a.json", content="x").to_payload()
        assert "author_email" not in payload
        assert payload["encoding"] == "text"


class TestCommitRequestPayload:
    def test_encodes_action_content(self) -> None:
        request = CommitRequest(
            branch="master",
            commit_message="Update",
            actions=(
                CommitAction(FileAction.UPDATE, "artifacts.json", "[]"),
                CommitAction(FileAction.DELETE, "old.json"),
            ),
            author_name="Dev",
        )

        assert request.to_payload() == {
            "branch": "master",
            "commit_message": "Update",
            "actions": [
                {
                    "action": "update",
                    "file_path": "artifacts.json",
                    "content": base64.b64encode(b"[]").decode(),
                    "encoding": "base64",
                },
                {"action": "delete", "file_path": "old.json"},
            ],
            "author_name": "Dev",
        }
