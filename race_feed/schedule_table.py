"""Parse the older table-based schedule into race records.

One race per line, tab-separated columns:

  date (DD/MM) | unused | "title | stage" | start (HH:MM) | end (HH:MM)

  "05/07\t2.UWT\tTour de France | Stage 1\t13:40\t17:55"

Rows with "-" as start time have no schedule yet and are skipped.
"""

from __future__ import annotations

import logging
from datetime import date

from race_feed.models import RaceRecord, TimeSlot

logger = logging.getLogger(__name__)

NO_START_TIME = "-"


def _parse_day_month(value: str, year: int) -> date:
    day, month = value.strip().split("/")
    return date(year, int(month), int(day))


def _parse_clock(value: str) -> tuple[int, int]:
    hours, minutes = value.strip().split(":")
    hour, minute = int(hours), int(minutes)
    if not (0 <= hour < 24 and 0 <= minute < 60):
        raise ValueError(f"invalid time: {value!r}")
    return hour, minute


def _duration_between(start: tuple[int, int], end: tuple[int, int]) -> str:
    """Minutes from start to end; an earlier end wraps past midnight."""
    minutes = (end[0] * 60 + end[1]) - (start[0] * 60 + start[1])
    if minutes == 0:
        return ""
    if minutes < 0:
        minutes += 24 * 60
    return f"{minutes} mins"


def parse_row(row: str, year: int) -> RaceRecord | None:
    """Parse one table row, or return None if it is unscheduled or malformed."""
    columns = row.split("\t")
    if len(columns) < 4:
        logger.debug(f"Skipping short schedule row: {row!r}")
        return None

    start_raw = columns[3].strip()
    if start_raw == NO_START_TIME:
        return None

    title, _, stage = columns[2].partition("|")
    title = title.strip()
    if not title:
        return None

    try:
        day = _parse_day_month(columns[0], year)
        start = _parse_clock(start_raw)
    except ValueError as e:
        logger.warning(f"Skipping schedule row {title!r}: {e}")
        return None

    duration = ""
    end_raw = columns[4].strip() if len(columns) > 4 else ""
    if end_raw and end_raw != NO_START_TIME:
        try:
            duration = _duration_between(start, _parse_clock(end_raw))
        except ValueError:
            logger.debug(f"Ignoring unparseable end time {end_raw!r} for {title!r}")

    slot = TimeSlot(category="", clock_time=f"{start[0]:02d}:{start[1]:02d}:00 UTC", duration=duration)
    return RaceRecord(
        name=title,
        stage=stage.strip(),
        start_date=day.isoformat(),
        end_date=day.isoformat(),
        all_day=False,
        times=(slot,),
        duration=duration,
    )


def parse_schedule_table(text: str, year: int | None = None) -> list[RaceRecord]:
    """Parse every row of a table-format schedule."""
    year = year or date.today().year
    races = []
    for row in text.splitlines():
        if not row.strip():
            continue
        race = parse_row(row, year)
        if race is not None:
            races.append(race)
    logger.info(f"Parsed {len(races)} races from schedule table")
    return races
