"""Pydantic v2 models for the email domain.

Provides the MIME part tree (a tagged variant of leaf and multipart nodes),
frozen models for fetched messages and reply threading context, and the
outbound message composed at send time.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field


class LeafPart(BaseModel):
    """A single body part carrying an encoded payload.

    ``data`` is the payload exactly as the provider returns it (base64url
    for Gmail).  ``charset`` is the ``Content-Type`` charset parameter, empty
    when the part declares none.  Decoding happens in the body extractor.
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["leaf"] = "leaf"
    mime_type: str
    data: str = ""
    charset: str = ""


class MultipartPart(BaseModel):
    """A ``multipart/*`` container node with ordered child parts."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["multipart"] = "multipart"
    mime_type: str
    parts: list[MimePart] = Field(default_factory=list)


MimePart = Annotated[LeafPart | MultipartPart, Field(discriminator="kind")]

MultipartPart.model_rebuild()


class Message(BaseModel):
    """One mail item within a thread, with its body already cleaned.

    ``sender`` is the raw ``From`` header (display name and address).
    ``timestamp`` comes from the provider's internal date, in UTC.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    sender: str
    message_id_header: str = ""  # RFC 2822 Message-ID header
    subject: str = ""
    body: str
    timestamp: datetime
    is_from_self: bool = False


class ReplyContext(BaseModel):
    """Threading metadata of the message being replied to."""

    model_config = ConfigDict(frozen=True)

    message_id_header: str  # RFC 2822 Message-ID header
    recipient: str
    subject: str


class Attachment(BaseModel):
    """A file attached to an outbound email."""

    model_config = ConfigDict(frozen=True)

    filename: str
    content: bytes
    mime_type: str = "application/octet-stream"


class OutboundEmail(BaseModel):
    """An outbound HTML email.

    When ``thread_id``, ``in_reply_to``, and ``references`` are provided,
    the email is threaded as a reply.  Otherwise it is sent as a new
    conversation.
    """

    model_config = ConfigDict(frozen=True)

    to: str
    subject: str
    html_body: str
    thread_id: str | None = None
    in_reply_to: str | None = None  # RFC 2822 Message-ID to reply to
    references: str | None = None  # Space-separated RFC 2822 Message-IDs
    attachments: list[Attachment] = Field(default_factory=list)
