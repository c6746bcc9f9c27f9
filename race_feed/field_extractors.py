"""Recover individual race fields from a listing entry.

Each extractor looks at one thing only: the entry's flattened text, the
flag image URL, or the entry's markup. A miss returns an empty value
rather than raising, so the assembler can apply its fallbacks.

Entry text examples:

  "Friday 6th February for 3 days - WE 12.40 UTC (60 mins) - ME 14.00 UTC (90 mins) (WE, ME) - LIVE - Link"
  "Tour Down Under (ME) - stage 2 (of 6) - 23.30 UTC (2 hrs) - POSSIBLE LIVE"
"""

from __future__ import annotations

import re
from datetime import date, timedelta
from posixpath import basename
from urllib.parse import urlparse

from race_feed.config import (
    CATEGORY_WHITELIST,
    ENTRY_DATE_PATTERN,
    FLAG_FILENAME_PATTERN,
    MONTH_NUMBERS,
    MULTI_DAY_PATTERN,
    STANDALONE_CATEGORIES,
    STREAM_LANGUAGE_PRIORITY,
    STREAM_TYPE_PRIORITY,
    TAGGED_TIME_PATTERN,
    TBA_MARKERS,
    UNTAGGED_TIME_PATTERN,
)
from race_feed.models import TimeSlot

_PARENTHESIZED = re.compile(r"\(([^)]+)\)")


def build_date(year: int, month_name: str, day: int) -> date | None:
    """Return the calendar date, or None for impossible combinations like 31st February."""
    month = MONTH_NUMBERS.get(month_name)
    if not month:
        return None
    try:
        return date(year, month, day)
    except ValueError:
        return None


def parse_date_range(text: str, year: int) -> tuple[str, str]:
    """Extract (start_date, end_date) as ISO strings from entry text.

    The end date is only set when a "for N days" clause accompanies an
    explicit start date. Returns ("", "") when no explicit date is found.
    """
    m = ENTRY_DATE_PATTERN.search(text)
    if not m:
        return "", ""

    start = build_date(year, m.group(2), int(m.group(1)))
    if start is None:
        return "", ""

    end_date = ""
    days = MULTI_DAY_PATTERN.search(text)
    if days and int(days.group(1)) > 0:
        end_date = (start + timedelta(days=int(days.group(1)) - 1)).isoformat()

    return start.isoformat(), end_date


def is_time_tba(text: str) -> bool:
    """True when the entry announces its times are not yet known."""
    return any(marker in text for marker in TBA_MARKERS)


def extract_categories(text: str) -> list[str]:
    """Extract whitelisted category tags in first-seen order, without duplicates."""
    categories = []

    for group in _PARENTHESIZED.findall(text):
        for part in group.split(","):
            cat = part.strip()
            if cat in CATEGORY_WHITELIST and cat not in categories:
                categories.append(cat)

    for cat in STANDALONE_CATEGORIES:
        # word boundary keeps "Men Elite" from matching inside "Women Elite"
        if cat not in categories and re.search(rf"\b{cat}\b", text):
            categories.append(cat)

    return categories


def _first_marker(text: str, priority) -> str:
    for marker, value in priority:
        if marker in text:
            return value
    return ""


def extract_stream_type(text: str) -> str:
    return _first_marker(text, STREAM_TYPE_PRIORITY)


def extract_stream_language(text: str) -> str:
    return _first_marker(text, STREAM_LANGUAGE_PRIORITY)


def extract_country(flag_url: str) -> str:
    """Derive the 2-letter country code from a flag image URL.

    ".../flags/B_be.png" -> "BE", ".../w580/fr.png" -> "FR".
    """
    if not flag_url:
        return ""
    filename = basename(urlparse(flag_url).path)
    m = FLAG_FILENAME_PATTERN.match(filename)
    if not m:
        return ""
    code = m.group(1).split("_")[-1]
    return code[:2].upper()


def extract_stream_links(entry) -> list[str]:
    """Every anchor href in the entry, in document order."""
    links = []
    for a in entry.find_all("a", href=True):
        href = a["href"].strip()
        if not href or href.lower().startswith("javascript:"):
            continue
        if href.startswith("//"):
            href = "https:" + href
        links.append(href)
    return links


def extract_notes(entry) -> str:
    """Join the text of every <em> element with " | "."""
    notes = [em.get_text(strip=True) for em in entry.find_all("em")]
    return " | ".join(note for note in notes if note)


def _clock(raw: str) -> str:
    """Rewrite dotted clock notation: 12.40 becomes 12:40:00 UTC."""
    hours, minutes = raw.split(".", 1)
    return f"{int(hours):02d}:{minutes}:00 UTC"


def extract_time_slots(text: str) -> list[TimeSlot]:
    """Extract category-tagged time slots, or a single untagged slot."""
    slots = [
        TimeSlot(category=m.group(1), clock_time=_clock(m.group(2)), duration=m.group(3).strip())
        for m in TAGGED_TIME_PATTERN.finditer(text)
    ]
    if slots:
        return slots

    m = UNTAGGED_TIME_PATTERN.search(text)
    if m:
        return [TimeSlot(category="", clock_time=_clock(m.group(1)), duration=m.group(2).strip())]
    return []


def default_duration(slots: list[TimeSlot]) -> str:
    """Record-level duration: the first slot's, when there is one."""
    return slots[0].duration if slots else ""
