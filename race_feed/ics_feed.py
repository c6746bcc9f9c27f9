"""Encode race records as a subscribable .ics calendar feed.

The feed is regenerated on every refresh; calendar apps subscribe to the
hosted file and pick up changes through REFRESH-INTERVAL.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta, timezone
from pathlib import Path

from race_feed.config import (
    CALENDAR_NAME,
    CALENDAR_PRODID,
    CATEGORY_DISPLAY_NAMES,
    DEFAULT_EVENT_HOURS,
    DURATION_PATTERN,
    OUTPUT_PATH,
    STREAM_LINK_MARKERS,
)
from race_feed.models import RaceRecord

logger = logging.getLogger(__name__)

FOLD_LIMIT = 75


def _escape_ics(text: str) -> str:
    """Escape text per RFC 5545 section 3.3.11."""
    if not text:
        return ""
    return (
        text.replace("\\", "\\\\")
        .replace(";", "\\;")
        .replace(",", "\\,")
        .replace("\r", "")
        .replace("\n", "\\n")
        .replace("\t", " ")
    )


def _fold(line: str) -> str:
    """Fold a content line at 75 octets, continuations prefixed by one space.

    Splits fall on character boundaries so multi-byte UTF-8 sequences
    stay intact. Returns the folded line with its CRLF terminator.
    """
    if len(line.encode("utf-8")) <= FOLD_LIMIT:
        return line + "\r\n"

    chunks = []
    current = ""
    current_len = 0
    limit = FOLD_LIMIT
    for char in line:
        size = len(char.encode("utf-8"))
        if current_len + size > limit:
            chunks.append(current)
            current = ""
            current_len = 0
            limit = FOLD_LIMIT - 1  # room for the leading space
        current += char
        current_len += size
    chunks.append(current)

    return "\r\n ".join(chunks) + "\r\n"


def _format_date(iso_date: str) -> str:
    """Convert YYYY-MM-DD to YYYYMMDD."""
    return date.fromisoformat(iso_date).strftime("%Y%m%d")


def _format_instant(dt: datetime) -> str:
    return dt.astimezone(timezone.utc).strftime("%Y%m%dT%H%M%SZ")


def display_categories(categories) -> list[str]:
    """Map category tags to display names; unknown tags pass through."""
    return [CATEGORY_DISPLAY_NAMES.get(cat, cat) for cat in categories]


def parse_duration_minutes(duration: str) -> int:
    """Minutes in "90 mins", "2 hrs" or "3.25 hrs"; 0 when unparseable."""
    m = DURATION_PATTERN.search(duration or "")
    if not m:
        return 0
    value = float(m.group(1))
    if m.group(2).lower().startswith("m"):
        return int(value)
    return int(value * 60)


def parse_start_instant(clock_time: str, start_date: str) -> datetime:
    """Combine "14:00:00 UTC" with "2026-02-04" into a UTC datetime.

    Raises:
        ValueError: If the date or time cannot be parsed.
    """
    day = date.fromisoformat(start_date)
    clean = clock_time.strip()
    if clean.endswith("UTC"):
        clean = clean[:-3].strip()
    parts = clean.split(":")
    if len(parts) < 2:
        raise ValueError(f"invalid time format: {clock_time!r}")
    hour, minute = int(parts[0]), int(parts[1])
    second = int(parts[2]) if len(parts) > 2 else 0
    return datetime(day.year, day.month, day.day, hour, minute, second, tzinfo=timezone.utc)


def info_link(race: RaceRecord) -> str:
    """First link that is not a stream page, else the first link."""
    for link in race.stream_links:
        if not any(marker in link for marker in STREAM_LINK_MARKERS):
            return link
    return race.stream_links[0] if race.stream_links else ""


def build_summary(race: RaceRecord) -> str:
    summary = race.name
    if race.stage:
        summary += f" | {race.stage}"
    if race.categories:
        summary += f" ({', '.join(display_categories(race.categories))})"
    return summary


def build_description_lines(race: RaceRecord) -> list[str]:
    """Build the description lines, skipping fields the race lacks."""
    lines = []
    if race.country:
        lines.append(f"Country: {race.country}")
    if race.categories:
        lines.append(f"Categories: {', '.join(display_categories(race.categories))}")
    if race.stream_type:
        lines.append(f"Stream: {race.stream_type}")
    if race.stream_language:
        lines.append(f"Commentary: {race.stream_language}")
    if race.duration:
        lines.append(f"Duration: {race.duration}")
    if race.times:
        lines.append("Time slots:")
        for slot in race.times:
            label = f"{slot.category}: " if slot.category else ""
            lines.append(f"  {label}{slot.clock_time} ({slot.duration})")
    if race.notes:
        lines.append(f"Note: {race.notes}")
    if race.stream_links:
        lines.append("Stream links:")
        for link in race.stream_links:
            lines.append(f"  - {link}")
    link = info_link(race)
    if link:
        lines.append(f"More info: {link}")
    return lines


def build_description(race: RaceRecord) -> str:
    """Escaped description joined by the literal two-character \\n sequence."""
    return "\\n".join(_escape_ics(line) for line in build_description_lines(race))


def _event_window(race: RaceRecord) -> tuple[str, str]:
    """Return the DTSTART and DTEND content lines for a race.

    Raises:
        ValueError: If the start cannot be resolved.
    """
    if race.all_day:
        start = _format_date(race.start_date)
        try:
            end = _format_date(race.end_date)
        except ValueError:
            logger.debug(f"Unparseable end date {race.end_date!r} for {race.name!r}, using start")
            end = start
        return f"DTSTART;VALUE=DATE:{start}", f"DTEND;VALUE=DATE:{end}"

    if not race.times:
        raise ValueError("no start time")

    start = parse_start_instant(race.times[0].clock_time, race.start_date)
    minutes = parse_duration_minutes(race.duration)
    if minutes > 0:
        end = start + timedelta(minutes=minutes)
    else:
        end = start + timedelta(hours=DEFAULT_EVENT_HOURS)
    return f"DTSTART:{_format_instant(start)}", f"DTEND:{_format_instant(end)}"


def generate_feed(
    races: list[RaceRecord],
    calendar_name: str = CALENDAR_NAME,
    generated_at: datetime | None = None,
) -> str:
    """Generate .ics content from race records.

    Races whose start cannot be resolved are skipped; the header and
    footer are always present.

    Returns:
        The .ics content as a string with CRLF line endings.
    """
    generated_at = generated_at or datetime.now(timezone.utc)
    dtstamp = _format_instant(generated_at)

    lines = [
        "BEGIN:VCALENDAR",
        "VERSION:2.0",
        f"PRODID:{CALENDAR_PRODID}",
        f"NAME:{_escape_ics(calendar_name)}",
        f"X-WR-CALNAME:{_escape_ics(calendar_name)}",
        f"DESCRIPTION:{_escape_ics('Cycling Calendar: ' + calendar_name)}",
        f"X-WR-CALDESC:{_escape_ics('Cycling Calendar: ' + calendar_name)}",
        "REFRESH-INTERVAL;VALUE=DURATION:PT1H",
    ]

    written = 0
    for race in races:
        try:
            dtstart, dtend = _event_window(race)
        except ValueError as e:
            logger.error(
                f"Skipping race {race.name!r}: cannot resolve start "
                f"(date={race.start_date!r}): {e}"
            )
            continue

        lines.append("BEGIN:VEVENT")
        # name + stage only, so identically named races share a UID
        lines.append(f"UID:{_escape_ics(race.name + race.stage)}")
        lines.append(f"DTSTAMP:{dtstamp}")
        lines.append(dtstart)
        lines.append(dtend)
        lines.append(f"SUMMARY:{_escape_ics(build_summary(race))}")
        lines.append(f"DESCRIPTION:{build_description(race)}")
        if race.stream_links:
            lines.append(f"URL:{race.stream_links[0]}")
        lines.append("END:VEVENT")
        written += 1

    lines.append("END:VCALENDAR")

    logger.info(f"Generated ICS content with {written} of {len(races)} races")
    return "".join(_fold(line) for line in lines)


def write_feed(content: str, output_path: Path = OUTPUT_PATH) -> Path:
    """Write feed content, preserving CRLF line endings."""
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w", newline="", encoding="utf-8") as f:
        f.write(content)
    return output_path
