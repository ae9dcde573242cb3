"""Email domain: Gmail API client, body extraction, threading, and models."""

from replydesk.email.client import GmailClient
from replydesk.email.models import (
    Attachment,
    LeafPart,
    Message,
    MimePart,
    MultipartPart,
    OutboundEmail,
    ReplyContext,
)
from replydesk.email.parser import (
    extract_clean_body,
    find_best_part,
    html_to_text,
    parse_gmail_message,
    part_from_payload,
    strip_quoted_text,
)
from replydesk.email.threading import build_reply_headers, ensure_reply_subject, get_reply_context

__all__ = [
    "Attachment",
    "GmailClient",
    "LeafPart",
    "Message",
    "MimePart",
    "MultipartPart",
    "OutboundEmail",
    "ReplyContext",
    "build_reply_headers",
    "ensure_reply_subject",
    "extract_clean_body",
    "find_best_part",
    "get_reply_context",
    "html_to_text",
    "parse_gmail_message",
    "part_from_payload",
    "strip_quoted_text",
]
