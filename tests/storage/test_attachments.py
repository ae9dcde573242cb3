"""Tests for the local-directory attachment storage."""

from __future__ import annotations

from pathlib import Path

import pytest

from replydesk.domain.errors import AttachmentNotFoundError
from replydesk.storage.attachments import AttachmentStorage


@pytest.fixture
def storage(tmp_path: Path) -> AttachmentStorage:
    (tmp_path / "b_guide.pdf").write_bytes(b"%PDF-1.4")
    (tmp_path / "a_checklist.txt").write_text("W-2\n1099", encoding="utf-8")
    (tmp_path / "subdir").mkdir()
    return AttachmentStorage(tmp_path)


class TestListFiles:
    """Tests for AttachmentStorage.list_files."""

    def test_sorted_regular_files_only(self, storage: AttachmentStorage) -> None:
        assert storage.list_files() == ["a_checklist.txt", "b_guide.pdf"]

    def test_missing_directory_is_empty(self, tmp_path: Path) -> None:
        assert AttachmentStorage(tmp_path / "nope").list_files() == []


class TestLoadAttachment:
    """Tests for AttachmentStorage.read_file and load_attachment."""

    def test_read_file(self, storage: AttachmentStorage) -> None:
        assert storage.read_file("b_guide.pdf") == b"%PDF-1.4"

    def test_load_attachment_guesses_mime_type(self, storage: AttachmentStorage) -> None:
        attachment = storage.load_attachment("b_guide.pdf")

        assert attachment.filename == "b_guide.pdf"
        assert attachment.content == b"%PDF-1.4"
        assert attachment.mime_type == "application/pdf"

    def test_unknown_extension_defaults_to_octet_stream(self, tmp_path: Path) -> None:
        (tmp_path / "blob.zzz").write_bytes(b"\x00\x01")
        attachment = AttachmentStorage(tmp_path).load_attachment("blob.zzz")
        assert attachment.mime_type == "application/octet-stream"

    def test_missing_file_raises(self, storage: AttachmentStorage) -> None:
        with pytest.raises(AttachmentNotFoundError) as exc_info:
            storage.load_attachment("missing.pdf")
        assert exc_info.value.filename == "missing.pdf"

    @pytest.mark.parametrize("name", ["../secret.txt", "subdir", "", "..", "/etc/passwd"])
    def test_rejects_paths_and_directories(self, storage: AttachmentStorage, name: str) -> None:
        with pytest.raises(AttachmentNotFoundError):
            storage.read_file(name)
