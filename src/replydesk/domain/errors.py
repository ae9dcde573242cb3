"""Domain-specific exception classes for the reply assistant."""


class ReplyDeskError(Exception):
    """Base class for all domain errors in the reply assistant."""


class CandidateParseError(ReplyDeskError):
    """Raised when AI output cannot be parsed into reply candidates.

    Attributes:
        raw_text: The provider output that failed to parse.
    """

    def __init__(self, reason: str, raw_text: str = "") -> None:
        self.raw_text = raw_text
        super().__init__(reason)


class SendError(ReplyDeskError):
    """Raised when a reply cannot be sent.  The cache is never mutated."""


class InvalidCandidateError(SendError):
    """Raised when the chosen candidate is missing a subject or body."""


class ThreadNotFoundError(SendError):
    """Raised when the thread to reply to is not in the unreplied cache.

    Attributes:
        thread_id: The provider thread ID that was requested.
    """

    def __init__(self, thread_id: str) -> None:
        self.thread_id = thread_id
        super().__init__(f"Thread '{thread_id}' not found among unreplied threads")


class AttachmentNotFoundError(SendError):
    """Raised when a requested attachment is not present in storage.

    Attributes:
        filename: The attachment filename that was requested.
    """

    def __init__(self, filename: str) -> None:
        self.filename = filename
        super().__init__(f"Attachment '{filename}' not found in storage")
