"""Tests for reply threading context and header helpers."""

from __future__ import annotations

from unittest.mock import MagicMock

from replydesk.email.models import ReplyContext
from replydesk.email.threading import (
    build_reply_headers,
    ensure_reply_subject,
    get_reply_context,
)


def _make_service(headers: list[dict[str, str]]) -> MagicMock:
    service = MagicMock()
    service.users().messages().get().execute.return_value = {
        "id": "m1",
        "payload": {"headers": headers},
    }
    return service


class TestGetReplyContext:
    """Tests for get_reply_context."""

    def test_uses_from_header(self) -> None:
        service = _make_service(
            [
                {"name": "From", "value": "Customer <cust@x.com>"},
                {"name": "Subject", "value": "Refund status"},
                {"name": "Message-ID", "value": "<abc@mail.x.com>"},
            ]
        )

        ctx = get_reply_context(service, "m1")

        assert ctx == ReplyContext(
            message_id_header="<abc@mail.x.com>",
            recipient="Customer <cust@x.com>",
            subject="Refund status",
        )
        service.users().messages().get.assert_called_with(
            userId="me",
            id="m1",
            format="metadata",
            metadataHeaders=["From", "Reply-To", "Subject", "Message-ID"],
        )

    def test_reply_to_takes_precedence(self) -> None:
        service = _make_service(
            [
                {"name": "From", "value": "noreply@x.com"},
                {"name": "Reply-To", "value": "support@x.com"},
                {"name": "Subject", "value": "Question"},
                {"name": "Message-Id", "value": "<id@x.com>"},
            ]
        )

        ctx = get_reply_context(service, "m1")

        assert ctx.recipient == "support@x.com"
        assert ctx.message_id_header == "<id@x.com>"


class TestEnsureReplySubject:
    """Tests for ensure_reply_subject."""

    def test_adds_prefix(self) -> None:
        assert ensure_reply_subject("Refund status") == "Re: Refund status"

    def test_keeps_existing_prefix_any_case(self) -> None:
        assert ensure_reply_subject("RE: Refund status") == "RE: Refund status"


class TestBuildReplyHeaders:
    """Tests for build_reply_headers."""

    def test_headers(self) -> None:
        ctx = ReplyContext(
            message_id_header="<abc@mail.x.com>",
            recipient="cust@x.com",
            subject="Refund status",
        )

        headers = build_reply_headers(ctx)

        assert headers == {
            "In-Reply-To": "<abc@mail.x.com>",
            "References": "<abc@mail.x.com>",
            "Subject": "Re: Refund status",
            "To": "cust@x.com",
        }
