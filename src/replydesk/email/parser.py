"""Email body extraction and Gmail message decoding.

Provides helpers for:
- Building a ``MimePart`` tree from a Gmail API ``payload`` dict
- Choosing the best text part of a tree and decoding it (HTML converted to text)
- Stripping quoted history and signatures from a decoded body
- Decoding a full Gmail API message dict into a ``Message``
"""

from __future__ import annotations

import base64
import codecs
import re
from datetime import UTC, datetime
from email.message import Message as HeaderBlock
from email.utils import parseaddr
from typing import Any

import structlog
from bs4 import BeautifulSoup

from replydesk.email.models import LeafPart, Message, MimePart, MultipartPart

logger = structlog.get_logger()

_TEXT_TYPES = ("text/html", "text/plain")

# A line whose trimmed content starts with one of these is quoted history.
QUOTE_MARKERS: tuple[str, ...] = (
    ">",
    "On ",
    "wrote:",
    "-----Original Message-----",
    "----- Original Message -----",
    "From:",
    "Sent:",
    "To:",
    "Subject:",
    "님이 작성:",
)

# Attribution lines such as "On Mon, Jan 1 Jane <j@x.com> wrote:".
_ATTRIBUTION_SUFFIXES: tuple[str, ...] = ("wrote:", "님이 작성:")

_SIGNATURE_DELIMITER = "--"

_MAX_LEAD_IN_WORDS = 2

_BLANK_RUN = re.compile(r"\n\s*\n+")


def part_from_payload(payload: dict[str, Any]) -> MimePart:
    """Convert a Gmail API ``payload`` dict into a ``MimePart`` tree.

    Args:
        payload: The ``payload`` field of a ``format="full"`` message.

    Returns:
        A ``MultipartPart`` for ``multipart/*`` nodes (children converted
        recursively, in order), otherwise a ``LeafPart``.
    """
    mime_type = str(payload.get("mimeType", "")).lower()
    children = payload.get("parts") or []
    if mime_type.startswith("multipart/") or children:
        return MultipartPart(
            mime_type=mime_type,
            parts=[part_from_payload(child) for child in children],
        )
    body = payload.get("body") or {}
    return LeafPart(
        mime_type=mime_type,
        data=str(body.get("data", "")),
        charset=_content_charset(payload.get("headers") or []),
    )


def _content_charset(headers: list[dict[str, str]]) -> str:
    """Return the lower-cased charset of a part's ``Content-Type`` header, or ``""``."""
    for header in headers:
        if header.get("name", "").lower() == "content-type":
            holder = HeaderBlock()
            holder["Content-Type"] = header.get("value", "")
            return holder.get_content_charset("") or ""
    return ""


def find_best_part(part: MimePart) -> LeafPart | None:
    """Find the text leaf that best represents *part*.

    Depth-first.  Inside ``multipart/alternative`` an HTML rendering wins
    over a plain-text sibling; inside any other ``multipart/*`` the first
    child that yields a text leaf wins.

    Args:
        part: The root of the part tree.

    Returns:
        The chosen ``LeafPart``, or ``None`` if the tree holds no
        non-empty ``text/html`` or ``text/plain`` leaf.
    """
    if isinstance(part, LeafPart):
        if part.mime_type in _TEXT_TYPES and part.data:
            return part
        return None

    if part.mime_type == "multipart/alternative":
        found = [leaf for leaf in map(find_best_part, part.parts) if leaf is not None]
        for leaf in found:
            if leaf.mime_type == "text/html":
                return leaf
        return found[0] if found else None

    for child in part.parts:
        leaf = find_best_part(child)
        if leaf is not None:
            return leaf
    return None


def decode_body_data(data: str, charset: str = "") -> str:
    """Decode a base64url payload into text.

    Missing ``=`` padding is tolerated.  The bytes are decoded with
    *charset* (e.g. ``euc-kr`` or ``iso-8859-1``); an empty or unknown
    charset means UTF-8.  Bytes invalid in the codec become U+FFFD.

    Raises:
        ValueError: If the payload is not valid base64 (``binascii.Error``).
    """
    padded = data + "=" * (-len(data) % 4)
    raw = base64.urlsafe_b64decode(padded)
    try:
        codec = codecs.lookup(charset or "utf-8").name
    except LookupError:
        logger.debug("unknown_charset", charset=charset)
        codec = "utf-8"
    return raw.decode(codec, errors="replace")


def html_to_text(markup: str) -> str:
    """Convert HTML to plain text, keeping line structure.

    ``<br>`` and block elements become line breaks and ``<blockquote>``
    content is prefixed with ``> `` so the quote stripper can drop it.
    """
    soup = BeautifulSoup(markup, "html.parser")

    for el in soup(["script", "style", "head", "title", "meta", "link"]):
        el.decompose()

    for br in soup.find_all("br"):
        br.replace_with("\n")
    for tag in soup.find_all(["p", "div", "tr", "li", "h1", "h2", "h3", "h4", "h5", "h6"]):
        tag.insert_before("\n")
        tag.insert_after("\n")

    # Innermost first so nested quotes get one marker per level.
    for quote in reversed(soup.find_all("blockquote")):
        lines = quote.get_text().strip("\n").split("\n")
        quote.replace_with("\n" + "\n".join(f"> {line}" for line in lines) + "\n")

    text = soup.get_text()
    return "\n".join(line.rstrip() for line in text.split("\n"))


def _is_quote_line(stripped: str) -> bool:
    if stripped.startswith(QUOTE_MARKERS):
        return True
    return stripped.endswith(_ATTRIBUTION_SUFFIXES)


def _looks_like_attribution(stripped: str) -> bool:
    """Whether a ``...:`` line reads as a quote header rather than prose.

    Headers carry an address or a date, or are a bare lead-in of at most
    two words such as ``Quoted:``.
    """
    if not stripped.endswith(":"):
        return False
    if "@" in stripped or any(ch.isdigit() for ch in stripped):
        return True
    return len(stripped.split()) <= _MAX_LEAD_IN_WORDS


def _drop_attribution(kept: list[str]) -> None:
    """Remove an attribution line that introduces the quote block being dropped."""
    index = len(kept) - 1
    while index >= 0 and not kept[index].strip():
        index -= 1
    if index >= 0 and _looks_like_attribution(kept[index].strip()):
        del kept[index]


def strip_quoted_text(text: str) -> str:
    """Remove quoted history and signatures from a decoded body.

    Every quoted line is dropped individually, since inline replies can be
    interleaved with quoted content.  A line ending in ``:`` directly
    before a ``>`` quote is dropped too when it looks like the quote's
    attribution (an address, a date, or a short lead-in).  Everything after a ``--`` signature delimiter is dropped.  Runs
    of blank lines collapse to a single blank line.

    Args:
        text: The decoded body text.

    Returns:
        The cleaned text, stripped of leading and trailing whitespace.
    """
    kept: list[str] = []
    for line in text.replace("\r\n", "\n").split("\n"):
        stripped = line.strip()
        if stripped == _SIGNATURE_DELIMITER:
            break
        if stripped.startswith(">"):
            _drop_attribution(kept)
            continue
        if _is_quote_line(stripped):
            continue
        kept.append(line)

    return _BLANK_RUN.sub("\n\n", "\n".join(kept)).strip()


def extract_clean_body(part: MimePart) -> str:
    """Return the clean human-authored text of a message part tree.

    Uses ``find_best_part`` to pick the rendering; when the tree holds no
    text leaf, falls back to the root's own payload.  The leaf's declared
    charset is honoured.  A payload that is not valid base64 yields an
    empty string rather than an exception.

    Args:
        part: The root of the message's part tree.

    Returns:
        The cleaned body text, possibly empty.
    """
    leaf = find_best_part(part)
    if leaf is None and isinstance(part, LeafPart) and part.data:
        leaf = part
    if leaf is None:
        return ""

    try:
        text = decode_body_data(leaf.data, leaf.charset)
    except ValueError:
        logger.debug("body_decode_failed", mime_type=leaf.mime_type)
        return ""

    if leaf.mime_type == "text/html":
        text = html_to_text(text)
    return strip_quoted_text(text)


def is_own_address(sender: str, own_address: str) -> bool:
    """Return whether a ``From`` header value belongs to *own_address*."""
    if not own_address:
        return False
    _, address = parseaddr(sender)
    return (address or sender).strip().lower() == own_address.strip().lower()


def parse_gmail_message(raw: dict[str, Any], own_address: str) -> Message:
    """Decode a ``format="full"`` Gmail API message into a ``Message``.

    Args:
        raw: One entry of a thread's ``messages`` list.
        own_address: The authenticated account's email address.

    Returns:
        A ``Message`` with its clean body (possibly empty), headers, and
        UTC timestamp converted from ``internalDate`` (ms since epoch).
    """
    payload = raw.get("payload") or {}
    headers = {h["name"].lower(): h["value"] for h in payload.get("headers", [])}
    sender = headers.get("from", "")

    internal_date_ms = int(raw.get("internalDate", "0"))
    timestamp = datetime.fromtimestamp(internal_date_ms / 1000, tz=UTC)

    return Message(
        id=str(raw.get("id", "")),
        sender=sender,
        message_id_header=headers.get("message-id", ""),
        subject=headers.get("subject", ""),
        body=extract_clean_body(part_from_payload(payload)),
        timestamp=timestamp,
        is_from_self=is_own_address(sender, own_address),
    )
