"""Knowledge base loader for historical examples and canned reply text.

Loads data files from the knowledge_base/ directory at project root:
``email_samples.json`` (historical Q/A corpus), ``consultation_offer.md``
(canned paid-consultation body), and ``signature.html`` (appended to every
sent reply).
"""

from __future__ import annotations

import json
from pathlib import Path

import structlog
from pydantic import TypeAdapter, ValidationError

from replydesk.llm.models import HistoricalExample

logger = structlog.get_logger()

# Resolve from src/replydesk/llm/ up 3 levels to project root, then into knowledge_base/
DEFAULT_KB_DIR = Path(__file__).resolve().parents[3] / "knowledge_base"

EXAMPLES_FILE = "email_samples.json"
CONSULTATION_TEMPLATE_FILE = "consultation_offer.md"
SIGNATURE_FILE = "signature.html"

_EXAMPLES_ADAPTER = TypeAdapter(list[HistoricalExample])


def load_examples(kb_dir: Path = DEFAULT_KB_DIR) -> list[HistoricalExample]:
    """Load the historical example corpus.

    A missing or malformed file yields an empty corpus; generation then
    proceeds without grounding examples.

    Args:
        kb_dir: Path to the knowledge_base directory.

    Returns:
        The examples in file order.
    """
    path = kb_dir / EXAMPLES_FILE
    if not path.exists():
        logger.warning("examples_file_missing", path=str(path))
        return []

    try:
        examples = _EXAMPLES_ADAPTER.validate_python(json.loads(path.read_text(encoding="utf-8")))
    except (json.JSONDecodeError, ValidationError):
        logger.warning("examples_file_invalid", path=str(path), exc_info=True)
        return []

    logger.info("examples_loaded", count=len(examples))
    return examples


def load_consultation_template(kb_dir: Path = DEFAULT_KB_DIR) -> str:
    """Load the canned body used for paid-consultation offers.

    Raises:
        FileNotFoundError: If ``consultation_offer.md`` does not exist in kb_dir.
    """
    path = kb_dir / CONSULTATION_TEMPLATE_FILE
    if not path.exists():
        msg = f"Consultation template not found: {path}"
        raise FileNotFoundError(msg)
    return path.read_text(encoding="utf-8").strip()


def load_signature(kb_dir: Path = DEFAULT_KB_DIR) -> str:
    """Load the HTML signature block.  Returns an empty string if absent."""
    path = kb_dir / SIGNATURE_FILE
    if not path.exists():
        logger.warning("signature_file_missing", path=str(path))
        return ""
    return path.read_text(encoding="utf-8")
