"""Restrict race records to requested category tags."""

from __future__ import annotations

from race_feed.config import CATEGORY_WHITELIST
from race_feed.errors import InvalidCategoryError
from race_feed.models import RaceRecord


def validate_categories(requested) -> list[str]:
    """Return the requested tags, rejecting any outside the whitelist.

    Raises:
        InvalidCategoryError: If any tag is not whitelisted (exact match).
    """
    requested = list(requested or [])
    invalid = [c for c in requested if c not in CATEGORY_WHITELIST]
    if invalid:
        raise InvalidCategoryError(invalid)
    return requested


def matches_categories(race_categories, requested) -> bool:
    """True if any race category equals any requested tag, ignoring case."""
    wanted = {c.lower() for c in requested}
    return any(c.lower() in wanted for c in race_categories)


def filter_by_categories(races: list[RaceRecord], requested) -> list[RaceRecord]:
    """Keep races tagged with at least one requested category.

    An empty request applies no filter.
    """
    if not requested:
        return list(races)
    return [race for race in races if matches_categories(race.categories, requested)]
