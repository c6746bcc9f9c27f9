"""Recover a race's display name and stage from entry text.

The listing packs the title between a date prefix and a tail of stream,
link and time annotations:

  "Friday 6th February - Volta ao Algarve (ME) - stage 3 (of 5) - 12.40 UTC (3 hrs) - LIVE - Link (Spanish)"

Each cleanup step removes one kind of noise and returns a new string.
Steps run in CLEANUP_STEPS order; later patterns assume the earlier noise
is already gone (the time clause pattern swallows everything to the end of
the string, so stream annotations must be stripped first).
"""

from __future__ import annotations

import re

from race_feed.config import CATEGORY_WHITELIST, DAY_PATTERN, STAGE_PATTERN, WEEKDAYS

_WEEKDAY_ALT = "|".join(WEEKDAYS)
_CATEGORY_ALT = "|".join(re.escape(c) for c in sorted(CATEGORY_WHITELIST, key=len, reverse=True))

_STREAM_ANNOTATIONS = [
    re.compile(r"\s*-\s*POSSIBLE LIVE\b[^-]*"),
    re.compile(r"\s*-\s*PROBABLE LIVE\b[^-]*"),
    re.compile(r"\s*-\s*LIVE\b[^-]*"),
    re.compile(r"\s*-\s*RECORDED\b[^-]*"),
]

_LINK_ANNOTATIONS = [
    re.compile(r"\s*-\s*(?:<strong>)?Stream Page(?:</strong>)?[^-]*"),
    re.compile(
        r"\s*-\s*(?:<strong>)?(?:<a[^>]*>)?Link\b(?:</a>)?(?:</strong>)?\s*(?:\([^)]*\))?[^-]*"
    ),
]

_DATE_PREFIX = re.compile(
    rf"^(?:{_WEEKDAY_ALT})\s+\d+(?:st|nd|rd|th)\s+\w+(?:\s+for\s+\d+\s+days?)?\s*-\s*"
)

_INFO_SUFFIX = re.compile(r"\s*-\s*(?:<strong>)?(?:<a[^>]*>)?Info(?:</a>)?(?:</strong>)?\s*$")

_TIME_CLAUSE = re.compile(r"\s*-\s*(?:(?:WE|ME|track|MTB)\s+)?\d+(?:[.:]\d+)?\s+UTC.*", re.DOTALL)
_TBA_CLAUSE = re.compile(r"\s*-\s*times? TBA\b[^-]*")

_CATEGORY_LIST = re.compile(rf"\s*\((?:{_CATEGORY_ALT})(?:,\s*(?:{_CATEGORY_ALT}))*\)\s*")


def strip_stream_annotations(text: str) -> str:
    for pattern in _STREAM_ANNOTATIONS:
        text = pattern.sub("", text)
    return text


def strip_link_annotations(text: str) -> str:
    for pattern in _LINK_ANNOTATIONS:
        text = pattern.sub("", text)
    return text


def strip_date_prefix(text: str) -> str:
    return _DATE_PREFIX.sub("", text.lstrip())


def strip_info_suffix(text: str) -> str:
    return _INFO_SUFFIX.sub("", text)


def strip_time_clause(text: str) -> str:
    return _TIME_CLAUSE.sub("", _TBA_CLAUSE.sub("", text))


def strip_category_lists(text: str) -> str:
    return _CATEGORY_LIST.sub(" ", text)


CLEANUP_STEPS = (
    strip_stream_annotations,
    strip_link_annotations,
    strip_date_prefix,
    strip_info_suffix,
    strip_time_clause,
    strip_category_lists,
)


def resolve_name(text: str) -> str:
    """Run every cleanup step and trim residual dashes and whitespace."""
    name = text
    for step in CLEANUP_STEPS:
        name = step(name)
    return name.strip("- \t\r\n")


def resolve_stage(text: str) -> str:
    """Return "stage N (of M)" or "day N (of M)"; a day descriptor wins over a stage."""
    stage = ""
    m = STAGE_PATTERN.search(text)
    if m:
        stage = f"stage {m.group(1)} (of {m.group(2)})"
    m = DAY_PATTERN.search(text)
    if m:
        stage = f"day {m.group(1)} (of {m.group(2)})"
    return stage


def resolve_name_and_stage(text: str) -> tuple[str, str]:
    return resolve_name(text), resolve_stage(text)
