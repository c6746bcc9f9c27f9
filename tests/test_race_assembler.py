"""Tests for assembling RaceRecords from a listing document."""

from datetime import date

import pytest
from bs4 import BeautifulSoup

from race_feed.errors import ListingStructureError
from race_feed.field_extractors import extract_time_slots, parse_date_range
from race_feed.models import TimeSlot
from race_feed.name_resolver import resolve_name
from race_feed.race_assembler import assemble_race, parse_listing

LISTING_HTML = """
<ul class="races">
  <li><strong>TODAY Wednesday 4th February</strong></li>
  <li><img src="https://tiz-cycling.io/flags/B_be.png"> Exact Cross Maldegem - Parkcross 2026 (WE, ME)
      - WE 12.40 UTC (60 mins) - ME 14.00 UTC (90 mins) - LIVE -
      <strong><a href="//tiz-cycling.live/stream/maldegem">Stream Page</a></strong>
      <em>Replay available</em></li>
  <li>Schedule subject to change, check back regularly for updates</li>
  <li><strong>TOMORROW</strong></li>
  <li><img src="https://flagpedia.net/data/flags/w580/fr.png"> Etoile de Besseges (ME) - stage 2 (of 5)
      - 12.15 UTC (2.5 hrs) - POSSIBLE LIVE - <a href="https://example.com/besseges">Link</a> (Spanish)</li>
  <li><strong>UPCOMING</strong></li>
  <li><img src="https://tiz-cycling.io/flags/E_es.png"> Friday 6th February for 3 days
      - Vuelta a Murcia (Women Elite) - times TBA - RECORDED</li>
  <li><img src="https://tiz-cycling.io/flags/UAE_ae.png"> Tour Without Date (ME) - 10.00 UTC (3 hrs) - LIVE</li>
  <li><img src="https://tiz-cycling.io/flags/B_be.png"> - LIVE</li>
</ul>
"""


def _li(html):
    return BeautifulSoup(html, "html.parser").find("li")


@pytest.fixture
def races():
    return parse_listing(LISTING_HTML, year=2026)


class TestParseListing:
    def test_headers_skipped_and_empty_names_dropped(self, races):
        assert [r.name for r in races] == [
            "Exact Cross Maldegem - Parkcross 2026",
            "Etoile de Besseges - stage 2 (of 5)",
            "Vuelta a Murcia",
            "Tour Without Date",
        ]

    def test_today_entry(self, races):
        race = races[0]
        assert race.country == "BE"
        assert race.country_flag_url == "https://tiz-cycling.io/flags/B_be.png"
        assert race.start_date == "2026-02-04"
        assert race.end_date == "2026-02-04"
        assert race.categories == ("WE", "ME")
        assert race.stream_type == "LIVE"
        assert race.stream_links == ("https://tiz-cycling.live/stream/maldegem",)
        assert race.notes == "Replay available"
        assert race.times == (
            TimeSlot("WE", "12:40:00 UTC", "60 mins"),
            TimeSlot("ME", "14:00:00 UTC", "90 mins"),
        )
        assert race.duration == "60 mins"
        assert race.all_day is False

    def test_tomorrow_entry(self, races):
        race = races[1]
        assert race.start_date == "2026-02-05"
        assert race.stage == "stage 2 (of 5)"
        assert race.country == "FR"
        assert race.stream_type == "POSSIBLE LIVE"
        assert race.stream_language == "Spanish"
        assert race.times == (TimeSlot("", "12:15:00 UTC", "2.5 hrs"),)

    def test_upcoming_entry_with_own_date(self, races):
        race = races[2]
        assert race.start_date == "2026-02-06"
        assert race.end_date == "2026-02-08"
        assert race.all_day is True
        assert race.times == ()
        assert race.categories == ("Women Elite",)
        assert race.stream_type == "RECORDED"
        assert race.country == "ES"

    def test_upcoming_entry_without_date(self, races):
        race = races[3]
        assert race.start_date == ""
        assert race.end_date == ""

    def test_no_list_items_is_structural_failure(self):
        with pytest.raises(ListingStructureError):
            parse_listing("<html><body><p>Maintenance</p></body></html>")

    def test_only_headers_yields_no_races(self):
        assert parse_listing("<ul><li>TODAY Wednesday 4th February</li><li>UPCOMING</li></ul>") == []


class TestScenarioB:
    def test_entry_inherits_today_date(self):
        html = (
            "<ul><li>TODAY Wednesday 4th February</li>"
            '<li><img src="fr.png"> Grand Prix (ME) - 11.00 UTC (4 hrs) - LIVE</li></ul>'
        )
        year = date.today().year
        races = parse_listing(html)
        assert races[0].start_date == f"{year}-02-04"


class TestAssembleRace:
    def test_unresolved_tomorrow_scope_gives_no_date(self):
        race = assemble_race(_li('<li><img src="fr.png"> Race (ME)</li>'), "TOMORROW", 2026)
        assert race.start_date == ""

    def test_explicit_date_beats_scope(self):
        race = assemble_race(_li('<li><img src="fr.png"> Sunday 8th March - Race</li>'), "2026-02-04", 2026)
        assert race.start_date == "2026-03-08"

    def test_no_times_is_all_day(self):
        race = assemble_race(_li('<li><img src="fr.png"> Race (MTB) - LIVE</li>'), "2026-02-04", 2026)
        assert race.all_day is True
        assert race.times == ()

    def test_tba_clears_partial_times(self):
        race = assemble_race(
            _li('<li><img src="fr.png"> Race - WE 10.00 UTC (2 hrs) - ME times TBA</li>'), "2026-02-04", 2026
        )
        assert race.all_day is True
        assert race.times == ()
        assert race.duration == ""

    def test_empty_name_returns_none(self):
        assert assemble_race(_li('<li><img src="fr.png"> - POSSIBLE LIVE</li>'), "2026-02-04", 2026) is None

    def test_records_are_immutable(self):
        race = assemble_race(_li('<li><img src="fr.png"> Race</li>'), "2026-02-04", 2026)
        with pytest.raises(AttributeError):
            race.name = "Other"


def _ordinal(day):
    if 11 <= day % 100 <= 13:
        return f"{day}th"
    return f"{day}{ {1: 'st', 2: 'nd', 3: 'rd'}.get(day % 10, 'th') }"


@pytest.mark.parametrize(
    "day, duration, category, name",
    [
        (date(2026, 3, 14), "90 mins", "WE", "Ronde van Drenthe"),
        (date(2026, 2, 10), "3 hrs", "ME", "Tour of Oman"),
        (date(2026, 10, 22), "2.5 hrs", "WE", "Omloop Het Nieuwsblad"),
    ],
)
def test_synthesized_entry_round_trip(day, duration, category, name):
    text = (
        f"{day.strftime('%A')} {_ordinal(day.day)} {day.strftime('%B')} - {name} ({category}) - "
        f"{category} 13.05 UTC ({duration}) - LIVE"
    )

    assert parse_date_range(text, day.year)[0] == day.isoformat()
    slots = extract_time_slots(text)
    assert [(s.category, s.duration) for s in slots] == [(category, duration)]
    assert resolve_name(text) == name
