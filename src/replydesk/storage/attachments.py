"""Local-directory attachment storage.

Attachments are uploaded out of band; the reply assistant only lists them
and reads them by filename when composing an outgoing reply.
"""

from __future__ import annotations

import mimetypes
from pathlib import Path

from replydesk.domain.errors import AttachmentNotFoundError
from replydesk.email.models import Attachment


class AttachmentStorage:
    """Read-only view of the shared attachments directory.

    Args:
        root: Directory holding the attachment files.  It does not need to
            exist; a missing directory behaves as empty.
    """

    def __init__(self, root: Path) -> None:
        self._root = root

    @property
    def root(self) -> Path:
        return self._root

    def list_files(self) -> list[str]:
        """Return the sorted names of regular files in the storage directory."""
        if not self._root.is_dir():
            return []
        return sorted(p.name for p in self._root.iterdir() if p.is_file())

    def _resolve(self, filename: str) -> Path:
        # Only bare names; "a/../b" or absolute paths never leave the directory.
        if not filename or Path(filename).name != filename or filename in (".", ".."):
            raise AttachmentNotFoundError(filename)
        path = self._root / filename
        if not path.is_file():
            raise AttachmentNotFoundError(filename)
        return path

    def read_file(self, filename: str) -> bytes:
        """Return the content of *filename*.

        Raises:
            AttachmentNotFoundError: If the name has path components or no
                such file exists.
        """
        return self._resolve(filename).read_bytes()

    def load_attachment(self, filename: str) -> Attachment:
        """Read *filename* into an ``Attachment`` with a guessed MIME type."""
        content = self.read_file(filename)
        mime_type, _ = mimetypes.guess_type(filename)
        return Attachment(
            filename=filename,
            content=content,
            mime_type=mime_type or "application/octet-stream",
        )
