"""Pydantic v2 models for cached threads and the send contract."""

from pydantic import BaseModel, Field

from replydesk.email.models import Message
from replydesk.llm.models import ReplyDraft, ResponseCandidate


class Thread(BaseModel):
    """A normalized conversation as shown to the operator.

    ``messages`` are ordered oldest first and hold messages with a
    non-empty clean body plus any sent from the account's own address.
    ``replied`` is true iff any message was sent from that address.
    """

    thread_id: str
    sender: str = Field(description="From header of the latest message")
    subject: str
    snippet: str = ""
    messages: list[Message] = Field(default_factory=list)
    replied: bool = False
    candidates: list[ResponseCandidate] = Field(default_factory=list)

    @property
    def has_usable_candidates(self) -> bool:
        """True when AI drafting produced real candidates for this thread."""
        return bool(self.candidates) and not any(c.placeholder for c in self.candidates)


class ThreadsSnapshot(BaseModel):
    """Point-in-time copy of both cache collections."""

    unreplied: list[Thread] = Field(default_factory=list)
    replied: list[Thread] = Field(default_factory=list)


class SendRequest(BaseModel):
    """An operator's request to send a (possibly edited) candidate."""

    thread_id: str
    response: ReplyDraft
    attachments: list[str] = Field(default_factory=list)


class SendResult(BaseModel):
    """Outcome of a successful send."""

    success: bool = True
    updated_thread: Thread
