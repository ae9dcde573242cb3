"""Shared pytest fixtures for the reply assistant test suite."""

from __future__ import annotations

import base64
import json
from collections.abc import Callable
from typing import Any
from unittest.mock import MagicMock

import pytest

from replydesk.llm.models import HistoricalExample

OWN_ADDRESS = "desk@taxoffice.com"
CUSTOMER = "cust@x.com"


def encode_body(text: str) -> str:
    """Base64url-encode *text* the way Gmail returns body data (no padding)."""
    return base64.urlsafe_b64encode(text.encode("utf-8")).decode().rstrip("=")


@pytest.fixture
def own_address() -> str:
    """The authenticated account's address."""
    return OWN_ADDRESS


@pytest.fixture
def make_gmail_message() -> Callable[..., dict[str, Any]]:
    """Factory for ``format="full"`` Gmail message dicts with a text/plain body."""

    def _make(
        msg_id: str = "m1",
        body: str = "When is my refund?",
        sender: str = CUSTOMER,
        subject: str = "Refund status",
        internal_date: int = 1_700_000_000_000,
        mime_type: str = "text/plain",
        snippet: str = "",
    ) -> dict[str, Any]:
        return {
            "id": msg_id,
            "threadId": "t1",
            "internalDate": str(internal_date),
            "snippet": snippet or body[:50],
            "payload": {
                "mimeType": mime_type,
                "headers": [
                    {"name": "From", "value": sender},
                    {"name": "Subject", "value": subject},
                    {"name": "Message-ID", "value": f"<{msg_id}@mail.x.com>"},
                ],
                "body": {"data": encode_body(body)},
            },
        }

    return _make


@pytest.fixture
def three_candidates_json() -> str:
    """A well-formed AI output with the three standard candidates."""
    return json.dumps(
        [
            {
                "category": "direct-answer",
                "subject": "Re: Your refund",
                "body": "Refunds usually arrive within 21 days.",
            },
            {
                "category": "alternative-answer",
                "subject": "Re: Checking your refund",
                "body": "You can track it online with the IRS tool.",
            },
            {
                "category": "info-request",
                "subject": "Re: Refund details needed",
                "body": "Could you tell us when you filed?",
            },
        ]
    )


@pytest.fixture
def make_anthropic_client() -> Callable[[str], MagicMock]:
    """Factory for a mock Anthropic client returning a canned text response."""

    def _make(response_text: str) -> MagicMock:
        mock_client = MagicMock()
        mock_response = MagicMock()
        mock_content_block = MagicMock()
        mock_content_block.text = response_text
        mock_response.content = [mock_content_block]
        mock_client.messages.create.return_value = mock_response
        return mock_client

    return _make


@pytest.fixture
def sample_examples() -> list[HistoricalExample]:
    """A small historical corpus."""
    return [
        HistoricalExample(
            question="When will I get my tax refund?",
            answer="Refunds usually arrive within 21 days.",
        ),
        HistoricalExample(
            question="What documents should I bring?",
            answer="Bring your W-2 and last year's return.",
        ),
        HistoricalExample(
            question="Can I file after the deadline?",
            answer="Yes, but penalties may apply if you owe.",
        ),
    ]
