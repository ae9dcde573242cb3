"""Thread classification: fetch, clean, decide replied state, draft replies.

Turns one Gmail thread into a normalized ``Thread`` record.  Runs
synchronously; the cache coordinator calls it through ``asyncio.to_thread``.
"""

from __future__ import annotations

import html
from collections.abc import Sequence
from typing import Any

import structlog

from replydesk.email.client import GmailClient
from replydesk.email.models import Message
from replydesk.email.parser import parse_gmail_message
from replydesk.llm.composer import ResponseGenerator
from replydesk.llm.models import ResponseCandidate
from replydesk.threads.models import Thread

logger = structlog.get_logger()

TRANSCRIPT_SEPARATOR = "\n\n--- Next Message ---\n\n"


def build_transcript(messages: Sequence[Message]) -> str:
    """Join sender-labelled clean bodies, oldest first, skipping empty bodies."""
    return TRANSCRIPT_SEPARATOR.join(
        f"From: {message.sender}\n\n{message.body}" for message in messages if message.body
    )


def sort_raw_messages(raw_messages: Sequence[dict[str, Any]]) -> list[dict[str, Any]]:
    """Order Gmail messages by ``internalDate``; ties keep provider order."""
    return sorted(raw_messages, key=lambda m: int(m.get("internalDate", "0")))


class ThreadClassifier:
    """Builds ``Thread`` records from Gmail threads.

    Args:
        gmail: The Gmail client used to fetch thread content.
        generator: Drafts reply candidates for unreplied threads.
    """

    def __init__(self, gmail: GmailClient, generator: ResponseGenerator) -> None:
        self._gmail = gmail
        self._generator = generator

    def build_thread(
        self,
        thread_id: str,
        raw_messages: Sequence[dict[str, Any]],
        own_address: str,
    ) -> Thread | None:
        """Normalize already-fetched Gmail messages into a ``Thread``.

        Messages with an empty clean body are dropped, except messages sent
        from *own_address*, which are kept so ``replied`` always agrees with
        the retained messages.  A thread left with no message body at all is
        dropped.  Reply candidates are generated only for unreplied threads.

        Args:
            thread_id: The Gmail thread ID.
            raw_messages: The thread's ``messages`` list, any order.
            own_address: The authenticated account's email address.

        Returns:
            The normalized thread, or ``None`` if nothing displayable remains.
        """
        ordered = sort_raw_messages(raw_messages)
        parsed = [parse_gmail_message(raw, own_address) for raw in ordered]
        retained = [m for m in parsed if m.body or m.is_from_self]
        if not any(m.body for m in retained):
            logger.debug("thread_without_content", thread_id=thread_id)
            return None

        replied = any(m.is_from_self for m in retained)
        latest = parsed[-1]

        candidates: list[ResponseCandidate] = []
        if not replied:
            candidates = self._generator.generate(build_transcript(retained), latest.subject)

        return Thread(
            thread_id=thread_id,
            sender=latest.sender,
            subject=latest.subject,
            snippet=html.unescape(str(ordered[-1].get("snippet", ""))),
            messages=retained,
            replied=replied,
            candidates=candidates,
        )

    def classify(self, thread_id: str, own_address: str) -> Thread | None:
        """Fetch a Gmail thread and normalize it with ``build_thread``.

        A failure to fetch or process the thread is logged and yields
        ``None`` so the rest of the batch continues.
        """
        try:
            raw = self._gmail.get_thread(thread_id)
            return self.build_thread(thread_id, raw.get("messages", []), own_address)
        except Exception:
            logger.exception("thread_classification_failed", thread_id=thread_id)
            return None
