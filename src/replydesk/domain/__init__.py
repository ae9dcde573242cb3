"""Domain types and errors for the reply assistant."""

from replydesk.domain.errors import (
    AttachmentNotFoundError,
    CandidateParseError,
    InvalidCandidateError,
    ReplyDeskError,
    SendError,
    ThreadNotFoundError,
)
from replydesk.domain.types import STANDARD_CATEGORIES, CandidateCategory, RefreshState

__all__ = [
    "STANDARD_CATEGORIES",
    "AttachmentNotFoundError",
    "CandidateCategory",
    "CandidateParseError",
    "InvalidCandidateError",
    "RefreshState",
    "ReplyDeskError",
    "SendError",
    "ThreadNotFoundError",
]
