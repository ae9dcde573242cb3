"""Domain enumerations for the reply assistant."""

from enum import StrEnum


class CandidateCategory(StrEnum):
    """Kinds of draft reply the generator may propose."""

    DIRECT_ANSWER = "direct-answer"
    ALTERNATIVE_ANSWER = "alternative-answer"
    INFO_REQUEST = "info-request"
    PAID_CONSULTATION_OFFER = "paid-consultation-offer"


# The three categories emitted together for a simple inquiry, in display order.
STANDARD_CATEGORIES: tuple[CandidateCategory, ...] = (
    CandidateCategory.DIRECT_ANSWER,
    CandidateCategory.ALTERNATIVE_ANSWER,
    CandidateCategory.INFO_REQUEST,
)


class RefreshState(StrEnum):
    """States of the thread cache refresh cycle."""

    IDLE = "idle"
    REFRESHING = "refreshing"
