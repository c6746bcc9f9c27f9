"""Fetch the Tiz race listing and parse it into race records."""

import logging

import requests

from race_feed.config import FETCH_TIMEOUT_SECONDS, REQUEST_HEADERS, TIZ_URL
from race_feed.race_assembler import parse_listing

logger = logging.getLogger(__name__)


def fetch_listing(url: str = TIZ_URL, timeout: int = FETCH_TIMEOUT_SECONDS) -> str:
    """Fetch the listing HTML.

    Raises:
        requests.RequestException: On connection errors or non-2xx responses.
    """
    logger.info(f"Fetching race listing from {url}")
    resp = requests.get(url, headers=REQUEST_HEADERS, timeout=timeout)
    resp.raise_for_status()
    logger.info(f"Listing response: {len(resp.text)} characters")
    return resp.text


def fetch_races(url: str = TIZ_URL, timeout: int = FETCH_TIMEOUT_SECONDS) -> list:
    """Fetch the listing and return parsed RaceRecords."""
    return parse_listing(fetch_listing(url, timeout))
