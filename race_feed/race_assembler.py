"""Assemble normalized RaceRecords from a Tiz listing document."""

from __future__ import annotations

import logging
import re
from datetime import date

from bs4 import BeautifulSoup

from race_feed.errors import ListingStructureError
from race_feed.field_extractors import (
    default_duration,
    extract_categories,
    extract_country,
    extract_notes,
    extract_stream_language,
    extract_stream_links,
    extract_stream_type,
    extract_time_slots,
    is_time_tba,
    parse_date_range,
)
from race_feed.models import RaceRecord
from race_feed.name_resolver import resolve_name_and_stage
from race_feed.section_scanner import ENTRY, flatten_text, scan_sections

logger = logging.getLogger(__name__)

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def _usable_scope(scope: str) -> str:
    """Only a resolved ISO date can stand in for a missing entry date."""
    return scope if _ISO_DATE.match(scope or "") else ""


def assemble_race(entry, scope: str = "", year: int | None = None) -> RaceRecord | None:
    """Build one RaceRecord from an entry <li>.

    Returns None when no display name survives the cleanup.
    """
    year = year or date.today().year
    text = flatten_text(entry)

    img = entry.find("img")
    flag_url = img.get("src", "").strip() if img else ""

    start_date, end_date = parse_date_range(text, year)
    if not start_date:
        fallback = _usable_scope(scope)
        start_date, end_date = fallback, fallback

    times = extract_time_slots(text)
    all_day = is_time_tba(text) or not times
    if all_day and times:
        # TBA clears any partial times
        times = []

    name, stage = resolve_name_and_stage(text)
    if not name:
        logger.warning(f"Parsed race but name is empty: {text!r}")
        return None

    return RaceRecord(
        name=name,
        stage=stage,
        start_date=start_date,
        end_date=end_date,
        all_day=all_day,
        times=tuple(times),
        country=extract_country(flag_url),
        country_flag_url=flag_url,
        categories=tuple(extract_categories(text)),
        stream_type=extract_stream_type(text),
        stream_links=tuple(extract_stream_links(entry)),
        stream_language=extract_stream_language(text),
        notes=extract_notes(entry),
        duration=default_duration(times),
    )


def parse_listing(html: str, year: int | None = None) -> list[RaceRecord]:
    """Parse a listing document into RaceRecords.

    Raises:
        ListingStructureError: If the document contains no list items.
    """
    soup = BeautifulSoup(html, "html.parser")
    items = soup.find_all("li")
    if not items:
        raise ListingStructureError("No <li> elements found in listing document")

    logger.info(f"Found {len(items)} list items in listing document")

    races = []
    for item in scan_sections(items, year or date.today().year):
        if item.kind != ENTRY:
            continue
        race = assemble_race(item.node, item.scope, year)
        if race is not None:
            logger.debug(f"Parsed race {race.name!r}")
            races.append(race)

    logger.info(f"Finished parsing listing: {len(races)} races")
    return races
