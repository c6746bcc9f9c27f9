"""Data models for normalized race records."""
from dataclasses import dataclass, field
from typing import Tuple


@dataclass(frozen=True)
class TimeSlot:
    """One broadcast window within a race day."""
    category: str
    clock_time: str
    duration: str


@dataclass(frozen=True)
class RaceRecord:
    """Normalized race entry ready for filtering and encoding."""
    name: str
    stage: str = ""
    start_date: str = ""
    end_date: str = ""
    all_day: bool = False
    times: Tuple[TimeSlot, ...] = field(default_factory=tuple)
    country: str = ""
    country_flag_url: str = ""
    categories: Tuple[str, ...] = field(default_factory=tuple)
    stream_type: str = ""
    stream_links: Tuple[str, ...] = field(default_factory=tuple)
    stream_language: str = ""
    notes: str = ""
    duration: str = ""
