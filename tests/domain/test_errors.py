"""Tests for domain enumerations and exception hierarchy."""

from __future__ import annotations

from replydesk.domain.errors import (
    AttachmentNotFoundError,
    CandidateParseError,
    InvalidCandidateError,
    ReplyDeskError,
    SendError,
    ThreadNotFoundError,
)
from replydesk.domain.types import STANDARD_CATEGORIES, CandidateCategory, RefreshState


class TestCandidateCategory:
    """Tests for CandidateCategory values."""

    def test_wire_values(self) -> None:
        assert CandidateCategory("direct-answer") is CandidateCategory.DIRECT_ANSWER
        assert str(CandidateCategory.PAID_CONSULTATION_OFFER) == "paid-consultation-offer"

    def test_standard_categories_exclude_offer(self) -> None:
        assert CandidateCategory.PAID_CONSULTATION_OFFER not in STANDARD_CATEGORIES
        assert len(STANDARD_CATEGORIES) == 3


class TestRefreshState:
    def test_values(self) -> None:
        assert RefreshState.IDLE == "idle"
        assert RefreshState.REFRESHING == "refreshing"


class TestErrors:
    """Tests for the exception hierarchy."""

    def test_send_errors_share_base(self) -> None:
        for exc in (
            InvalidCandidateError("x"),
            ThreadNotFoundError("t1"),
            AttachmentNotFoundError("a.pdf"),
        ):
            assert isinstance(exc, SendError)
            assert isinstance(exc, ReplyDeskError)

    def test_thread_not_found_message(self) -> None:
        exc = ThreadNotFoundError("t1")
        assert exc.thread_id == "t1"
        assert "t1" in str(exc)

    def test_parse_error_keeps_raw_text(self) -> None:
        exc = CandidateParseError("bad", "raw output")
        assert str(exc) == "bad"
        assert exc.raw_text == "raw output"
