"""Reply threading context extraction and reply header management.

Provides helpers for:
- Extracting threading metadata of a single Gmail message
- Building RFC 2822 reply headers so a reply lands in the same conversation
"""

from __future__ import annotations

from typing import Any

from replydesk.email.models import ReplyContext


def get_reply_context(service: Any, message_id: str) -> ReplyContext:
    """Extract threading context from the Gmail message being replied to.

    Calls the Gmail API ``messages.get`` endpoint with ``format="metadata"``
    to retrieve only header information (no body content).  The reply goes
    to ``Reply-To`` when the message carries one, otherwise to ``From``.

    Args:
        service: An authenticated Gmail API service resource.
        message_id: The Gmail message ID (not the RFC 2822 header).

    Returns:
        A ``ReplyContext`` with the message's Message-ID header, recipient
        for the reply, and subject line.
    """
    msg = (
        service.users()
        .messages()
        .get(
            userId="me",
            id=message_id,
            format="metadata",
            metadataHeaders=["From", "Reply-To", "Subject", "Message-ID"],
        )
        .execute()
    )

    headers = {h["name"].lower(): h["value"] for h in msg["payload"]["headers"]}

    return ReplyContext(
        message_id_header=headers.get("message-id", ""),
        recipient=headers.get("reply-to") or headers.get("from", ""),
        subject=headers.get("subject", ""),
    )


def ensure_reply_subject(subject: str) -> str:
    """Prefix ``Re: `` unless the subject already starts with it (case-insensitive)."""
    subject = subject.strip()
    if subject.lower().startswith("re:"):
        return subject
    return f"Re: {subject}"


def build_reply_headers(ctx: ReplyContext) -> dict[str, str]:
    """Build RFC 2822 reply headers from a reply context.

    Args:
        ctx: The context from ``get_reply_context``.

    Returns:
        A dict with ``In-Reply-To``, ``References``, ``Subject``, and
        ``To`` values for the outgoing reply.
    """
    return {
        "In-Reply-To": ctx.message_id_header,
        "References": ctx.message_id_header,
        "Subject": ensure_reply_subject(ctx.subject),
        "To": ctx.recipient,
    }
