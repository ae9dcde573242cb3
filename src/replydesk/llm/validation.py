"""Deterministic checks and clean-up for reply candidates.

Normalizes AI-generated candidates before they reach the cache and gates
operator-chosen candidates before any email is sent.  Regex and string
matching only -- no LLM calls.
"""

from __future__ import annotations

import re

import structlog

from replydesk.domain.errors import InvalidCandidateError
from replydesk.domain.types import STANDARD_CATEGORIES, CandidateCategory
from replydesk.email.threading import ensure_reply_subject
from replydesk.llm.models import ReplyDraft, ResponseCandidate

logger = structlog.get_logger()

# Internal case codes the model copies from past answers, e.g. "FX20231104"
_REFERENCE_CODE_PATTERN = re.compile(r"\bFX-?\d+\b")
_MULTI_SPACE = re.compile(r"\s{2,}")


def normalize_subject(subject: str, original_subject: str) -> str:
    """Strip reference codes and ensure a ``Re:`` prefix.

    An empty result falls back to a reply to *original_subject*.
    """
    cleaned = _REFERENCE_CODE_PATTERN.sub("", subject)
    cleaned = _MULTI_SPACE.sub(" ", cleaned).strip(" -:|")
    if not cleaned or cleaned.lower() in ("re", "re:"):
        cleaned = original_subject
    return ensure_reply_subject(cleaned)


def normalize_candidates(
    candidates: list[ResponseCandidate],
    original_subject: str,
    consultation_template: str,
) -> list[ResponseCandidate]:
    """Apply the output rules to parsed candidates.

    A paid-consultation offer always stands alone and always carries the
    canned template as its body.  Every subject is normalized with
    ``normalize_subject``.  A set that is not exactly the three standard
    categories is logged but returned as is.

    Args:
        candidates: Candidates as parsed from AI output.
        original_subject: Subject of the latest message in the thread.
        consultation_template: Canned body for paid-consultation offers.

    Returns:
        The normalized candidates.
    """
    offers = [c for c in candidates if c.category == CandidateCategory.PAID_CONSULTATION_OFFER]
    if offers:
        offer = offers[0]
        return [
            offer.model_copy(
                update={
                    "subject": normalize_subject(offer.subject, original_subject),
                    "body": consultation_template,
                }
            )
        ]

    normalized = [
        c.model_copy(update={"subject": normalize_subject(c.subject, original_subject)})
        for c in candidates
    ]
    if tuple(c.category for c in normalized) != STANDARD_CATEGORIES:
        logger.warning(
            "unexpected_candidate_set",
            categories=[str(c.category) for c in normalized],
        )
    return normalized


def validate_for_send(candidate: ReplyDraft | ResponseCandidate) -> None:
    """Reject a candidate that cannot be sent.

    Raises:
        InvalidCandidateError: If the subject or body is empty or blank.
    """
    if not candidate.subject.strip():
        msg = "Reply must include a subject"
        raise InvalidCandidateError(msg)
    if not candidate.body.strip():
        msg = "Reply must include a body"
        raise InvalidCandidateError(msg)
