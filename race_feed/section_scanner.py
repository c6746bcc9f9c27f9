"""Walk the listing's <li> items and track the inherited date scope.

The listing groups races under headers such as "TODAY Wednesday 4th
February", "TOMORROW" and "UPCOMING". Items after a header inherit its
date until the next header. The scan is a fold over the items: each
header produces a new ScanState, entries carry the state's scope.
"""

from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import NamedTuple

from race_feed.config import (
    HEADER_DATE_PATTERN,
    SECTION_TODAY,
    SECTION_TOKENS,
    SECTION_TOMORROW,
    SECTION_UPCOMING,
)
from race_feed.field_extractors import build_date

logger = logging.getLogger(__name__)

HEADER = "header"
ENTRY = "entry"
SKIP = "skip"


class ScanState(NamedTuple):
    """Scope inherited by entries, plus the last resolved TODAY date."""
    scope: str = ""
    today: str = ""


class ScannedItem(NamedTuple):
    kind: str
    node: object
    text: str
    scope: str


def flatten_text(node) -> str:
    """Flattened text of a node with whitespace runs collapsed."""
    return " ".join(node.get_text().split())


def is_section_header(text: str) -> bool:
    return any(token in text for token in SECTION_TOKENS)


def parse_header_date(header: str, year: int) -> str:
    """Parse "TODAY Wednesday 4th February" into an ISO date, or "" when absent."""
    m = HEADER_DATE_PATTERN.search(header)
    if not m:
        return ""
    parsed = build_date(year, m.group(2), int(m.group(1)))
    if parsed is None:
        logger.debug(f"Invalid date in section header: {header!r}")
        return ""
    return parsed.isoformat()


def advance_scope(state: ScanState, header: str, year: int) -> ScanState:
    """Return the state that follows a section header."""
    if SECTION_TODAY in header:
        today = parse_header_date(header, year)
        if not today:
            logger.warning(f"Could not parse date from TODAY header: {header!r}")
        return ScanState(scope=today, today=today)

    if SECTION_TOMORROW in header:
        explicit = parse_header_date(header, year)
        if explicit:
            return state._replace(scope=explicit)
        if state.today:
            tomorrow = date.fromisoformat(state.today) + timedelta(days=1)
            return state._replace(scope=tomorrow.isoformat())
        return state._replace(scope=SECTION_TOMORROW)

    return state._replace(scope=SECTION_UPCOMING)


def has_image(node) -> bool:
    return node.find("img") is not None


def scan_sections(items, year: int) -> list[ScannedItem]:
    """Classify each <li> as header, entry or skip, in document order.

    Entries are items carrying a flag <img>; items without one are
    decorative text and skipped.
    """
    state = ScanState()
    scanned = []

    for node in items:
        text = flatten_text(node)

        if is_section_header(text):
            state = advance_scope(state, text, year)
            logger.debug(f"Section header {text!r} -> scope {state.scope!r}")
            scanned.append(ScannedItem(HEADER, node, text, state.scope))
            continue

        if not has_image(node):
            if len(text) > 20:
                logger.debug(f"No image in list item, skipping: {text!r}")
            scanned.append(ScannedItem(SKIP, node, text, state.scope))
            continue

        scanned.append(ScannedItem(ENTRY, node, text, state.scope))

    return scanned
