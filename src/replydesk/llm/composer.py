"""Reply candidate generation using the Anthropic Claude API.

Builds a single instruction prompt from the conversation transcript and
retrieved historical examples, asks Claude for a JSON array of candidates,
and parses the output defensively.  Generation never raises to the caller:
provider or parse failures become one placeholder candidate so the thread
still shows up for manual reply.
"""

from __future__ import annotations

import json
import re
from collections.abc import Sequence

import anthropic
import structlog
from anthropic import Anthropic
from pydantic import ValidationError

from replydesk.domain.errors import CandidateParseError
from replydesk.domain.types import CandidateCategory
from replydesk.llm.client import COMPOSE_MODEL, DEFAULT_MAX_TOKENS
from replydesk.llm.models import HistoricalExample, ResponseCandidate
from replydesk.llm.prompts import GENERATION_FAILED_BODY, RESPONSE_GENERATION_PROMPT
from replydesk.llm.retrieval import find_similar_examples, format_grounding_context
from replydesk.llm.validation import normalize_candidates, normalize_subject

logger = structlog.get_logger()

_CODE_FENCE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)
_JSON_SPAN = re.compile(r"(\[.*\]|\{.*\})", re.DOTALL)

DEFAULT_BUSINESS_NAME = "our office"
DEFAULT_BUSINESS_DOMAIN = "US tax preparation and accounting"
DEFAULT_REPLY_LANGUAGE = "English"


def build_generation_prompt(
    transcript: str,
    original_subject: str,
    grounding_context: str,
    *,
    business_name: str = DEFAULT_BUSINESS_NAME,
    business_domain: str = DEFAULT_BUSINESS_DOMAIN,
    reply_language: str = DEFAULT_REPLY_LANGUAGE,
) -> str:
    """Fill ``RESPONSE_GENERATION_PROMPT`` with the per-thread values."""
    return RESPONSE_GENERATION_PROMPT.format(
        business_name=business_name,
        business_domain=business_domain,
        reply_language=reply_language,
        original_subject=original_subject,
        grounding_context=grounding_context,
        transcript=transcript,
    )


def _load_json(text: str) -> object:
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        pass

    # Fall back to the outermost JSON-looking span when the model added prose.
    match = _JSON_SPAN.search(text)
    if match is None:
        msg = "No JSON found in AI output"
        raise CandidateParseError(msg, text)
    try:
        return json.loads(match.group(1))
    except json.JSONDecodeError as exc:
        msg = f"Invalid JSON in AI output: {exc.msg}"
        raise CandidateParseError(msg, text) from exc


def parse_candidates(raw_text: str) -> list[ResponseCandidate]:
    """Parse AI output text into reply candidates.

    Accepts a JSON array of objects, optionally wrapped in a Markdown code
    fence or surrounded by prose.  A single JSON object is normalized into
    a one-element list.

    Args:
        raw_text: The model's text output.

    Returns:
        The parsed candidates, in output order.

    Raises:
        CandidateParseError: If no JSON can be recovered, the JSON is not
            an object or list of objects, or an entry fails validation
            (e.g. an unknown category).
    """
    text = _CODE_FENCE.sub("", raw_text.strip())
    data = _load_json(text)

    if isinstance(data, dict):
        data = [data]
    if not isinstance(data, list):
        msg = f"Expected a JSON array or object, got {type(data).__name__}"
        raise CandidateParseError(msg, raw_text)

    try:
        return [ResponseCandidate.model_validate(item) for item in data]
    except ValidationError as exc:
        msg = f"AI output does not match the candidate schema: {exc.error_count()} error(s)"
        raise CandidateParseError(msg, raw_text) from exc


def generation_failed_candidate(original_subject: str) -> ResponseCandidate:
    """Placeholder shown when AI drafting is unavailable for a thread."""
    return ResponseCandidate(
        category=CandidateCategory.INFO_REQUEST,
        subject=normalize_subject("", original_subject),
        body=GENERATION_FAILED_BODY,
        placeholder=True,
    )


class ResponseGenerator:
    """Drafts reply candidates for a conversation.

    Args:
        client: Configured Anthropic client instance (or compatible mock).
        examples: The historical example corpus used for grounding.
        consultation_template: Canned body for paid-consultation offers.
        model: Model ID to use.  Defaults to COMPOSE_MODEL (Sonnet).
        business_name: Name the assistant writes on behalf of.
        business_domain: The business's field, stated in the persona.
        reply_language: Language the replies are written in.
    """

    def __init__(
        self,
        client: Anthropic,
        examples: Sequence[HistoricalExample],
        consultation_template: str,
        *,
        model: str = COMPOSE_MODEL,
        business_name: str = DEFAULT_BUSINESS_NAME,
        business_domain: str = DEFAULT_BUSINESS_DOMAIN,
        reply_language: str = DEFAULT_REPLY_LANGUAGE,
        max_tokens: int = DEFAULT_MAX_TOKENS,
    ) -> None:
        self._client = client
        self._examples = list(examples)
        self._consultation_template = consultation_template
        self._model = model
        self._business_name = business_name
        self._business_domain = business_domain
        self._reply_language = reply_language
        self._max_tokens = max_tokens

    def build_prompt(self, transcript: str, original_subject: str) -> str:
        """Retrieve grounding examples for *transcript* and build the full prompt."""
        similar = find_similar_examples(transcript, self._examples)
        return build_generation_prompt(
            transcript,
            original_subject,
            format_grounding_context(similar),
            business_name=self._business_name,
            business_domain=self._business_domain,
            reply_language=self._reply_language,
        )

    def generate(self, transcript: str, original_subject: str) -> list[ResponseCandidate]:
        """Draft reply candidates for a conversation.

        Args:
            transcript: Sender-labelled clean message bodies, oldest first.
            original_subject: Subject of the latest message in the thread.

        Returns:
            Exactly one paid-consultation offer, normally three standard
            candidates, a single placeholder on failure, or an empty list
            when the transcript is empty (no provider call is made).
        """
        if not transcript.strip():
            return []

        prompt = self.build_prompt(transcript, original_subject)

        try:
            response = self._client.messages.create(
                model=self._model,
                max_tokens=self._max_tokens,
                messages=[{"role": "user", "content": prompt}],
            )
            raw_text = "".join(getattr(block, "text", "") for block in response.content)
            candidates = parse_candidates(raw_text)
        except anthropic.APIError:
            logger.warning("candidate_generation_failed", subject=original_subject, exc_info=True)
            return [generation_failed_candidate(original_subject)]
        except CandidateParseError as exc:
            logger.warning(
                "candidate_parse_failed",
                subject=original_subject,
                reason=str(exc),
                raw_text=exc.raw_text[:500],
            )
            return [generation_failed_candidate(original_subject)]

        if not candidates:
            logger.warning("candidate_generation_empty", subject=original_subject)
            return [generation_failed_candidate(original_subject)]

        return normalize_candidates(candidates, original_subject, self._consultation_template)
