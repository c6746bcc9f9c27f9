"""Central configuration for the cycling race calendar feed."""

import os
import re
from pathlib import Path

# --- Paths ---
PROJECT_ROOT = Path(__file__).resolve().parent.parent
SITE_DIR = PROJECT_ROOT / "site"
OUTPUT_PATH = SITE_DIR / "cycling-calendar.ics"

# --- Tiz listing ---
TIZ_URL = os.environ.get("TIZ_URL", "https://cyclingtiz.live/sys-parse.php?file=db/races.txt")
FETCH_TIMEOUT_SECONDS = int(os.environ.get("FETCH_TIMEOUT_SECONDS", "30"))

# The endpoint only answers requests that look like the site's own XHR calls
REQUEST_HEADERS = {
    "User-Agent": "Mozilla/5.0 (X11; Linux x86_64; rv:147.0) Gecko/20100101 Firefox/147.0",
    "Accept": "*/*",
    "Accept-Language": "en-US,en;q=0.9",
    "X-Requested-With": "XMLHttpRequest",
    "Referer": "https://cyclingtiz.live/",
    "Connection": "keep-alive",
}

# --- Cache ---
CACHE_TTL_SECONDS = int(float(os.environ.get("CACHE_TTL_HOURS", "24")) * 3600)
CACHE_EVICTION_INTERVAL_SECONDS = CACHE_TTL_SECONDS

# --- Logging ---
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

# --- Calendar ---
CALENDAR_NAME = os.environ.get("CALENDAR_NAME", "Cycling Calendar")
CALENDAR_PRODID = "-//github.com/qypol342 //Cycling Calendar//EN"
DEFAULT_EVENT_HOURS = 3

# --- Categories ---
CATEGORY_WHITELIST = (
    "WE",
    "ME",
    "track",
    "MTB",
    "NC",
    "JR",
    "WC",
    "Elite",
    "Women Elite",
    "Men Elite",
    "Women",
    "Men",
)

# Recognised outside parentheses too
STANDALONE_CATEGORIES = ("Women Elite", "Men Elite")

CATEGORY_DISPLAY_NAMES = {
    "WE": "Women Elite",
    "ME": "Men Elite",
    "track": "Track",
    "MTB": "Mountain Bike",
    "NC": "National Championships",
    "JR": "Junior",
    "WC": "World Championships",
}

# --- Dates ---
MONTH_NUMBERS = {
    "January": 1, "February": 2, "March": 3, "April": 4,
    "May": 5, "June": 6, "July": 7, "August": 8,
    "September": 9, "October": 10, "November": 11, "December": 12,
}

WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")

_WEEKDAY_ALT = "|".join(WEEKDAYS)
_MONTH_ALT = "|".join(MONTH_NUMBERS)

# "Friday 6th February"
ENTRY_DATE_PATTERN = re.compile(
    rf"(?:{_WEEKDAY_ALT})\s+(\d+)(?:st|nd|rd|th)\s+({_MONTH_ALT})"
)

# "4th February" inside a section header, weekday optional
HEADER_DATE_PATTERN = re.compile(rf"(\d+)(?:st|nd|rd|th)\s+({_MONTH_ALT})")

# "for 3 days"
MULTI_DAY_PATTERN = re.compile(r"for\s+(\d+)\s+days?")

# --- Section headers ---
SECTION_TODAY = "TODAY"
SECTION_TOMORROW = "TOMORROW"
SECTION_UPCOMING = "UPCOMING"
SECTION_TOKENS = (SECTION_TODAY, SECTION_TOMORROW, SECTION_UPCOMING)

# --- Stream metadata (order matters: "LIVE" is a substring of the first two) ---
STREAM_TYPE_PRIORITY = (
    ("POSSIBLE LIVE", "POSSIBLE LIVE"),
    ("PROBABLE LIVE", "PROBABLE LIVE"),
    ("LIVE", "LIVE"),
    ("RECORDED", "RECORDED"),
)

STREAM_LANGUAGE_PRIORITY = (
    ("(English or Spanish)", "English or Spanish"),
    ("(Spanish)", "Spanish"),
    ("(Slovenian)", "Slovenian"),
    ("(Flemish)", "Flemish"),
    ("(Arabic)", "Arabic"),
)

TBA_MARKERS = ("times TBA", "time TBA")

# --- Time slots ---
# "WE 12.40 UTC (60 mins)"
TAGGED_TIME_PATTERN = re.compile(r"(WE|ME)\s+(\d+\.\d+)\s+UTC\s+\(([^)]+)\)")
# "14.45 UTC (90 mins)"
UNTAGGED_TIME_PATTERN = re.compile(r"(\d+\.\d+)\s+UTC\s+\(([^)]+)\)")

# "90 mins", "2 hrs", "3.25 hrs"
DURATION_PATTERN = re.compile(r"(\d+(?:\.\d+)?)\s*(mins?|minutes?|hrs?|hours?)", re.IGNORECASE)

# --- Country flags ---
# "B_be.png", "UAE_ae.webp", "fr.png"
FLAG_FILENAME_PATTERN = re.compile(r"^([A-Z]+(?:_[A-Za-z]+)+|[a-z]{2})\.(?:png|webp|svg|gif|jpe?g)$")

# --- Stage descriptors ---
STAGE_PATTERN = re.compile(r"stage\s+(\d+)\s*\(of\s+(\d+)\)")
DAY_PATTERN = re.compile(r"day\s+(\d+)\s*\(of\s+(\d+)\)")

# Links containing these are stream pages, not race information
STREAM_LINK_MARKERS = ("stream", "cyclingtiz")
