# src/taskflow/insights/parser.py

"""
Parse a free-text model reply into structured insight cards.

The reply is expected to be a bullet list with bold titles:

    Okay, here are some insights:
    * **Focus on overdue tasks:** You have 2 overdue items, tackle them first.
    * **Plan your week:** Review deadlines every Monday.

Grammar per block (one block per top-level bullet):

    block  := BULLET ws* BOLD title BOLD ws* [":"] ws* body
    body   := rest of the bullet line
    BULLET := "*"
    BOLD   := "**"

Lines after the bullet line (sub-bullets, a closing remark) are ignored.
Anything that does not fit is dropped without error. parse_insights() never
raises and never returns None.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

BULLET = "*"
BOLD = "**"

CHATTER_PREFIX = "Okay"
CHATTER_PHRASE = "here are some insights"

_ENUMERATION_RE = re.compile(r"^\d+\s*[.)]\s*")


@dataclass(slots=True)
class InsightEntry:
    title: str
    body: list[str] = field(default_factory=list)


def split_blocks(raw: str) -> list[str]:
    """
    Cut the text before every line that starts with the bullet marker.
    Text before the first bullet becomes block 0. Indented sub-bullets stay
    inside their parent block.
    """
    blocks: list[str] = []
    current: list[str] = []
    for line in raw.replace("\r\n", "\n").replace("\r", "\n").split("\n"):
        if line.startswith(BULLET) and current:
            blocks.append("\n".join(current))
            current = []
        current.append(line)
    if current:
        blocks.append("\n".join(current))
    return blocks


def is_chatter(block: str) -> bool:
    """Conversational wrapper text from the model, not content."""
    text = block.strip()
    if not text:
        return True
    return text.startswith(CHATTER_PREFIX) or CHATTER_PHRASE in text.lower()


def _take_bullet(text: str) -> str | None:
    if not text.startswith(BULLET):
        return None
    return text[len(BULLET) :].lstrip(" \t")


def _take_bold(text: str) -> tuple[str, str] | None:
    """Return (inner, rest) for text that starts with **inner**."""
    if not text.startswith(BOLD):
        return None
    end = text.find(BOLD, len(BOLD))
    if end == -1:
        return None
    inner = text[len(BOLD) : end]
    if "\n" in inner:
        return None
    return inner, text[end + len(BOLD) :]


def _take_colon(text: str) -> str:
    rest = text.lstrip(" \t")
    if rest.startswith(":"):
        rest = rest[1:]
    return rest.lstrip(" \t")


def clean_title(raw_title: str) -> str:
    title = raw_title.strip()
    # "**Title:**" keeps its colon inside the bold segment
    title = title.rstrip(":").strip()
    return _ENUMERATION_RE.sub("", title).strip()


def clean_body_line(line: str) -> str:
    return line.replace(BULLET, "").strip()


def parse_block(block: str) -> InsightEntry | None:
    """Match one block against the bullet/bold-title/body shape."""
    text = block.strip()

    after_bullet = _take_bullet(text)
    if after_bullet is None:
        return None

    bold = _take_bold(after_bullet)
    if bold is None:
        return None
    raw_title, rest = bold

    title = clean_title(raw_title)
    if not title:
        return None

    body = clean_body_line(_take_colon(rest).partition("\n")[0])
    if not body:
        return None

    return InsightEntry(title=title, body=[body])


def parse_insights(raw: str | None) -> list[InsightEntry]:
    if not isinstance(raw, str) or not raw.strip():
        return []

    entries: list[InsightEntry] = []
    dropped = 0
    for block in split_blocks(raw):
        if is_chatter(block):
            continue
        entry = parse_block(block)
        if entry is None:
            dropped += 1
            continue
        entries.append(entry)

    if dropped:
        logger.debug("parse_insights: kept=%d dropped=%d", len(entries), dropped)
    return entries
