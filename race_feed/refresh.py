"""Refresh the cycling calendar feed.

Fetches the Tiz race listing (or reads a table-format schedule), filters
by the requested categories, and writes site/cycling-calendar.ics.

Usage:
    python3 -m race_feed.refresh                        # All races
    python3 -m race_feed.refresh --class WE --class ME  # Elite races only
    python3 -m race_feed.refresh --table schedule.tsv   # Older table format
    python3 -m race_feed.refresh --output /tmp/cal.ics --name "My Races"
    python3 -m race_feed.refresh --watch 3600           # Rebuild hourly until interrupted
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
import threading
from pathlib import Path

from race_feed.category_filter import filter_by_categories, validate_categories
from race_feed.config import CALENDAR_NAME, LOG_LEVEL, OUTPUT_PATH, TIZ_URL
from race_feed.errors import InvalidCategoryError
from race_feed.ics_feed import generate_feed, write_feed
from race_feed.race_cache import RaceCache
from race_feed.schedule_table import parse_schedule_table
from race_feed.tiz_fetcher import fetch_races

logger = logging.getLogger(__name__)

RACE_CACHE = RaceCache()


class JsonFormatter(logging.Formatter):
    """One JSON object per log record."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
        }
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_data)


def setup_logging(log_level: str = LOG_LEVEL) -> None:
    """Configure the root logger with the JSON formatter."""
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))


def load_races(table_path: Path | None = None, url: str = TIZ_URL, cache: RaceCache = RACE_CACHE) -> list:
    """Load races through the cache, from a schedule table file or the Tiz listing."""
    if table_path is not None:
        return cache.get(str(table_path), lambda: parse_schedule_table(table_path.read_text(encoding="utf-8")))
    return cache.get(url, lambda: fetch_races(url))


def build_calendar(
    classes=None,
    calendar_name: str = CALENDAR_NAME,
    table_path: Path | None = None,
    url: str = TIZ_URL,
    cache: RaceCache = RACE_CACHE,
) -> tuple[str, int]:
    """Build the feed for the requested categories.

    Returns:
        (ics content, number of races after filtering)

    Raises:
        InvalidCategoryError: If a requested class is not whitelisted.
    """
    classes = validate_categories(classes)
    logger.info(f"Received class filters: {classes}")

    races = load_races(table_path, url, cache)
    filtered = filter_by_categories(races, classes)
    logger.info(f"Filtered races: {len(filtered)} of {len(races)}")

    return generate_feed(filtered, calendar_name), len(filtered)


def watch(
    classes=None,
    calendar_name: str = CALENDAR_NAME,
    table_path: Path | None = None,
    output: Path = OUTPUT_PATH,
    interval: float = 3600,
    cache: RaceCache = RACE_CACHE,
    stop: threading.Event | None = None,
) -> int:
    """Rebuild and rewrite the feed every interval seconds until stop is set.

    Races come through the cache, so rebuilds inside the TTL reuse the last
    load. The cache's eviction thread runs for as long as the loop does.

    Returns:
        Number of feeds written.
    """
    stop = stop or threading.Event()
    cache.start_eviction()
    written = 0
    try:
        while True:
            content, count = build_calendar(classes, calendar_name, table_path, cache=cache)
            write_feed(content, output)
            written += 1
            logger.info(f"Wrote {count} races to {output} (run {written})")
            if stop.wait(interval):
                break
    finally:
        cache.stop()
    return written


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Generate the cycling race calendar feed.")
    parser.add_argument("--class", dest="classes", action="append", default=[],
                        help="Category tag to include (repeatable), e.g. WE, ME, MTB")
    parser.add_argument("--table", type=Path, help="Read a table-format schedule file instead of fetching")
    parser.add_argument("--output", type=Path, default=OUTPUT_PATH, help="Where to write the .ics file")
    parser.add_argument("--name", default=CALENDAR_NAME, help="Calendar display name")
    parser.add_argument("--log-level", default=LOG_LEVEL)
    parser.add_argument("--watch", type=float, metavar="SECONDS",
                        help="Keep running, rebuilding the feed every SECONDS")
    args = parser.parse_args(argv)

    setup_logging(args.log_level)

    try:
        if args.watch:
            try:
                watch(args.classes, args.name, args.table, args.output, args.watch)
            except KeyboardInterrupt:
                print("Stopped watching")
            return 0
        content, count = build_calendar(args.classes, args.name, args.table)
    except InvalidCategoryError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    write_feed(content, args.output)
    print(f"Wrote {count} races to {args.output}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
