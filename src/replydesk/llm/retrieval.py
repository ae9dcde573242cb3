"""Lexical similarity retrieval over the historical example corpus.

Scores are plain token-overlap counts: the corpus is small and only steers
tone and style, so no embeddings are involved.
"""

from __future__ import annotations

from collections.abc import Sequence

from replydesk.llm.models import HistoricalExample

DEFAULT_TOP_K = 2

NO_EXAMPLES_PLACEHOLDER = "No past examples to reference."


def tokenize(text: str) -> set[str]:
    """Lowercase *text* and split it on whitespace into a set of unique words."""
    return set(text.lower().split())


def find_similar_examples(
    query: str,
    examples: Sequence[HistoricalExample],
    k: int = DEFAULT_TOP_K,
) -> list[HistoricalExample]:
    """Return the *k* examples whose questions share the most words with *query*.

    Score is the size of the intersection between the query's word set and
    the example question's word set.  Ordering is by descending score;
    ties keep corpus order.  Examples sharing no words are never returned,
    so a query unrelated to the whole corpus yields an empty list.

    Args:
        query: The conversation transcript.
        examples: The historical corpus.
        k: Maximum number of examples to return.

    Returns:
        Up to *k* examples, best first.
    """
    if not examples or k <= 0:
        return []

    query_words = tokenize(query)
    scored = [(len(query_words & tokenize(example.question)), example) for example in examples]
    # sorted() is stable, so equal scores keep corpus order
    ranked = sorted(scored, key=lambda pair: pair[0], reverse=True)
    return [example for score, example in ranked[:k] if score > 0]


def format_grounding_context(examples: Sequence[HistoricalExample]) -> str:
    """Render retrieved examples for prompt injection, or the placeholder if none."""
    if not examples:
        return NO_EXAMPLES_PLACEHOLDER
    blocks = [f'Q: "{example.question}"\nA: "{example.answer}"' for example in examples]
    return "Reference these successful past responses:\n" + "\n---\n".join(blocks)
