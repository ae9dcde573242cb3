"""Pydantic models defining the structured I/O contracts of reply generation.

These models are used for:
- Historical question/answer examples used as grounding context
- Reply candidates parsed from AI output and edited by the operator
"""

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from replydesk.domain.types import CandidateCategory


class HistoricalExample(BaseModel):
    """A past customer question and the answer that was sent."""

    model_config = ConfigDict(frozen=True)

    question: str
    answer: str


class ResponseCandidate(BaseModel):
    """One AI-proposed reply, editable by the operator before send.

    AI output may label the category as either ``category`` or ``type``.
    """

    model_config = ConfigDict(populate_by_name=True)

    category: CandidateCategory = Field(
        validation_alias=AliasChoices("category", "type"),
        description="Which kind of reply this candidate is",
    )
    subject: str = Field(default="", description="Reply subject line, starting with 'Re:'")
    body: str = Field(default="", description="Reply body text with \\n line breaks")
    placeholder: bool = Field(
        default=False,
        description="True when AI drafting failed and this only stands in for real candidates",
    )


class ReplyDraft(BaseModel):
    """The reply the operator chose to send, possibly edited.

    ``category`` is informational; the UI may drop it after editing.
    """

    category: CandidateCategory | None = None
    subject: str = ""
    body: str = ""
