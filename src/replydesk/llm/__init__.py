"""LLM integration package for the reply assistant.

Provides Anthropic client configuration, Pydantic models for LLM I/O, the
prompt template, knowledge base loading, lexical example retrieval,
candidate generation and parsing, and the deterministic candidate checks.
"""

from replydesk.llm.client import COMPOSE_MODEL, get_anthropic_client
from replydesk.llm.composer import (
    ResponseGenerator,
    build_generation_prompt,
    generation_failed_candidate,
    parse_candidates,
)
from replydesk.llm.knowledge_base import (
    load_consultation_template,
    load_examples,
    load_signature,
)
from replydesk.llm.models import HistoricalExample, ReplyDraft, ResponseCandidate
from replydesk.llm.retrieval import (
    NO_EXAMPLES_PLACEHOLDER,
    find_similar_examples,
    format_grounding_context,
)
from replydesk.llm.validation import normalize_candidates, normalize_subject, validate_for_send

__all__ = [
    "COMPOSE_MODEL",
    "NO_EXAMPLES_PLACEHOLDER",
    "HistoricalExample",
    "ReplyDraft",
    "ResponseCandidate",
    "ResponseGenerator",
    "build_generation_prompt",
    "find_similar_examples",
    "format_grounding_context",
    "generation_failed_candidate",
    "get_anthropic_client",
    "load_consultation_template",
    "load_examples",
    "load_signature",
    "normalize_candidates",
    "normalize_subject",
    "parse_candidates",
    "validate_for_send",
]
