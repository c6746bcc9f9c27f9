"""Exceptions raised by the race feed pipeline."""


class RaceFeedError(Exception):
    """Base class for race feed failures."""


class ListingStructureError(RaceFeedError):
    """The listing document lacks the structure races are read from."""


class InvalidCategoryError(RaceFeedError, ValueError):
    """Requested category tags outside the whitelist."""

    def __init__(self, invalid):
        self.invalid = list(invalid)
        super().__init__(f"Category not allowed: {', '.join(self.invalid)}")
