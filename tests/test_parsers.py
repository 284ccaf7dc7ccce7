"""Tests for ODPT record parsing and field fallbacks."""

from datetime import UTC, datetime
from zoneinfo import ZoneInfo

import pytest

from odpt_departures.adapters.odpt_api.field_extraction import (
    DESTINATION_FIELDS,
    OCCUPANCY_FIELDS,
    STATUS_FIELDS,
    extract_non_negative_int,
    extract_text,
    parse_timestamp,
)
from odpt_departures.adapters.odpt_api.odpt_timetable_repository import OdptTimetableRepository
from odpt_departures.adapters.odpt_api.parsers import OdptParser, infer_route_id
from odpt_departures.domain.models import OccupancyLevel
from odpt_departures.domain.occupancy import occupancy_level_from_ratio, occupancy_ratio_from_text

TOKYO = ZoneInfo("Asia/Tokyo")


class TestFieldExtraction:
    """Tests for ordered-fallback field extraction."""

    def test_preferred_key_wins(self) -> None:
        """Given several aliases, then the first preferred one is used."""
        record = {"odpt:destination": "Shinonome", "odpt:destinationSign": "Toyosu"}

        assert extract_text(record, DESTINATION_FIELDS) == "Toyosu"

    def test_falls_back_to_matching_key(self) -> None:
        """Given no preferred key, then any key matching the pattern is scanned."""
        record = {"odpt:ext:crowdLevel": "混雑"}

        assert extract_text(record, OCCUPANCY_FIELDS) == "混雑"

    def test_ignores_non_scalar_values(self) -> None:
        """Given a nested value under a matching key, then it is skipped."""
        record = {"odpt:occupancyDetail": {"car": 1}, "odpt:congestion": 3}

        assert extract_text(record, OCCUPANCY_FIELDS) == "3"

    def test_status_fallback(self) -> None:
        """Given only a remark-like key, then it is used as status text."""
        assert extract_text({"odpt:ext:remarks": "終車"}, STATUS_FIELDS) == "終車"
        assert extract_text({}, STATUS_FIELDS) == ""

    def test_parse_timestamp_handles_zulu_and_naive(self) -> None:
        """Zulu timestamps are UTC; naive ones are operator local time."""
        assert parse_timestamp("2026-04-01T01:00:00Z", TOKYO) == datetime(
            2026, 4, 1, 1, 0, tzinfo=UTC
        )
        assert parse_timestamp("2026-04-01T10:00:00", TOKYO) == datetime(
            2026, 4, 1, 10, 0, tzinfo=TOKYO
        )
        assert parse_timestamp("yesterday", TOKYO) is None

    def test_delay_is_floored_at_zero(self) -> None:
        """Negative, missing and non-numeric delays read as zero."""
        assert extract_non_negative_int({"odpt:delay": 120}, "odpt:delay") == 120
        assert extract_non_negative_int({"odpt:delay": -30}, "odpt:delay") == 0
        assert extract_non_negative_int({"odpt:delay": "late"}, "odpt:delay") == 0
        assert extract_non_negative_int({}, "odpt:delay") == 0


class TestOccupancy:
    """Tests for occupancy text interpretation."""

    def test_literal_percentage_wins(self) -> None:
        assert occupancy_ratio_from_text("約65%") == 65
        assert occupancy_ratio_from_text("250") == 100

    def test_keywords_map_to_fixed_ratios(self) -> None:
        assert occupancy_ratio_from_text("混雑") == 85
        assert occupancy_ratio_from_text("Moderate") == 55
        assert occupancy_ratio_from_text("空いています") == 25
        assert occupancy_ratio_from_text("???") is None

    def test_levels(self) -> None:
        assert occupancy_level_from_ratio(39) is OccupancyLevel.LOW
        assert occupancy_level_from_ratio(40) is OccupancyLevel.MEDIUM
        assert occupancy_level_from_ratio(69) is OccupancyLevel.MEDIUM
        assert occupancy_level_from_ratio(70) is OccupancyLevel.HIGH
        assert occupancy_level_from_ratio(None) is OccupancyLevel.UNKNOWN


class TestOdptParser:
    """Tests for OdptParser."""

    def test_infer_route_id(self) -> None:
        assert infer_route_id("odpt.BusroutePattern:Toei.Umi01.1001.1") == (
            "odpt.Busroute:Toei.Umi01"
        )
        assert infer_route_id("garbage") == ""

    def test_parse_stop_pole(self) -> None:
        """Given a BusstopPole record, then id, title and patterns are extracted."""
        pole = OdptParser.parse_stop_pole(
            {
                "owl:sameAs": "odpt.BusstopPole:Toei.Toyosueki.1",
                "dc:title": "豊洲駅前",
                "odpt:busroutePattern": ["p1", "p2", "p1"],
                "odpt:busstopPoleNumber": "1",
            }
        )

        assert pole is not None
        assert pole.id == "odpt.BusstopPole:Toei.Toyosueki.1"
        assert pole.pattern_ids == ("p1", "p2")
        assert pole.pole_number == "1"
        assert OdptParser.parse_stop_pole({"dc:title": "x"}) is None

    def test_parse_route_pattern_infers_route(self) -> None:
        """Given a pattern without odpt:busroute, then the route id is inferred."""
        pattern = OdptParser.parse_route_pattern(
            {
                "owl:sameAs": "odpt.BusroutePattern:Toei.Umi01.1001.1",
                "dc:title": "海01",
                "odpt:busstopPoleOrder": [
                    {"odpt:busstopPole": "a", "odpt:note": "門前仲町:1", "odpt:index": 1},
                    {"odpt:busstopPole": "b", "odpt:note": "豊洲駅前:2", "odpt:index": 2},
                ],
            }
        )

        assert pattern is not None
        assert pattern.route_id == "odpt.Busroute:Toei.Umi01"
        assert [s.note for s in pattern.stops] == ["門前仲町", "豊洲駅前"]

    def test_parse_timetable(self) -> None:
        """Given a timetable record, then visits keep their order and status is extracted."""
        entry = OdptParser.parse_timetable(
            {
                "owl:sameAs": "tt1",
                "odpt:busroutePattern": "odpt.BusroutePattern:Toei.Umi01.1001.1",
                "dc:title": "海01",
                "odpt:note": "終車",
                "odpt:busTimetableObject": [
                    {"odpt:busstopPole": "a", "odpt:departureTime": "23:50"},
                    {"odpt:busstopPole": "b", "odpt:arrivalTime": "00:05", "odpt:isMidnight": True},
                ],
            }
        )

        assert entry.route_id == "odpt.Busroute:Toei.Umi01"
        assert entry.status_text == "終車"
        assert [v.scheduled_time for v in entry.visits] == ["23:50", "00:05"]
        assert entry.visits[1].is_midnight is True

    def test_parse_vehicle(self) -> None:
        """Given an odpt:Bus record, then a sample with ratio and prediction is built."""
        sample = OdptParser.parse_vehicle(
            {
                "odpt:busroute": "r1",
                "dc:date": "2026-04-01T10:00:00+09:00",
                "odpt:delay": 90,
                "odpt:occupancyStatus": "混雑",
                "odpt:destinationSign": "豊洲駅前",
                "odpt:predictedArrivalTime": "2026-04-01T10:20:00+09:00",
            },
            TOKYO,
        )

        assert sample is not None
        assert sample.key == "r1"
        assert sample.delay_seconds == 90
        assert sample.occupancy_ratio == 85
        assert sample.predicted_arrival == datetime(2026, 4, 1, 10, 20, tzinfo=TOKYO)
        assert OdptParser.parse_vehicle({"dc:date": "x"}, TOKYO) is None


class RecordingGateway:
    """Gateway fake that records requests and serves fixed records."""

    has_credential = True

    def __init__(self, records: list[dict]) -> None:
        self.records = records
        self.requests: list[tuple[str, dict[str, str] | None]] = []

    async def fetch_collection(self, resource: str, filters: dict[str, str] | None = None):
        self.requests.append((resource, filters))
        return self.records


class TestOdptTimetableRepository:
    """Tests for OdptTimetableRepository."""

    RECORD = {
        "owl:sameAs": "tt1",
        "odpt:busroute": "odpt.Busroute:Toei.To16",
        "odpt:busroutePattern": "odpt.BusroutePattern:Toei.To16.1.1",
        "odpt:busTimetableObject": [{"odpt:busstopPole": "a", "odpt:departureTime": "10:30"}],
    }

    @pytest.mark.asyncio
    async def test_get_by_pattern_filters_on_pattern(self) -> None:
        gateway = RecordingGateway([self.RECORD])

        [entry] = await OdptTimetableRepository(gateway).get_by_pattern("P1")

        assert gateway.requests == [("odpt:BusTimetable", {"odpt:busroutePattern": "P1"})]
        assert entry.id == "tt1"

    @pytest.mark.asyncio
    async def test_get_by_route_filters_on_route(self) -> None:
        gateway = RecordingGateway([self.RECORD])

        [entry] = await OdptTimetableRepository(gateway).get_by_route("R1")

        assert gateway.requests == [("odpt:BusTimetable", {"odpt:busroute": "R1"})]
        assert entry.route_id == "odpt.Busroute:Toei.To16"
