"""Tests for departure aggregation."""

from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

from odpt_departures.application.services.departure_aggregator import (
    aggregate,
    build_route_key,
    dedupe_departures,
)
from odpt_departures.application.services.timetable_projector import ProjectedDeparture
from odpt_departures.domain.models import Departure, QuerySettings

TOKYO = ZoneInfo("Asia/Tokyo")
NOW = datetime(2026, 4, 1, 22, 0, tzinfo=TOKYO)


def projected(
    minutes: int, route_name: str = "東16", status_is_last: bool = False
) -> ProjectedDeparture:
    departure_at = NOW + timedelta(minutes=minutes)
    departure = Departure(
        id=f"{route_name}-{minutes}",
        route_name=route_name,
        route_id="R",
        pattern_id="P",
        origin_stop_name="豊洲駅前",
        origin_pole_name="豊洲駅前",
        dest_stop_name="東京駅",
        scheduled_time=departure_at.strftime("%H:%M"),
        scheduled_at=departure_at,
        delay_minutes=0,
        departure_time=departure_at.strftime("%H:%M"),
        departure_at=departure_at,
        eta_minutes=max(0, minutes),
    )
    return ProjectedDeparture(
        departure=departure,
        route_key=build_route_key(route_name, "R", "P"),
        status_is_last=status_is_last,
    )


def minutes_of(departures: list[Departure]) -> list[int]:
    return [int((d.departure_at - NOW).total_seconds() // 60) for d in departures]


class TestBuildRouteKey:
    """Tests for build_route_key."""

    def test_strips_branch_suffix(self) -> None:
        assert build_route_key("都05-1", "", "") == "都05"
        assert build_route_key("都05–2", "", "") == "都05"
        assert build_route_key("東16", "", "") == "東"

    def test_falls_back_to_pattern_then_route(self) -> None:
        assert build_route_key("", "R", "odpt.BusroutePattern:Toei.To05.1") == (
            "odpt.BusroutePattern:Toei.To05"
        )
        assert build_route_key("", "R", "") == "R"
        assert build_route_key("123", "", "") == "123"


class TestDedupe:
    """Tests for dedupe_departures."""

    def test_keeps_later_of_close_departures(self) -> None:
        items = [projected(10), projected(12), projected(14), projected(30)]

        deduped = dedupe_departures(items)

        assert minutes_of([p.departure for p in deduped]) == [14, 30]

    def test_is_idempotent(self) -> None:
        items = [projected(m) for m in (5, 7, 8, 20, 23, 40)] + [projected(6, "都05-1")]

        once = dedupe_departures(items)

        assert dedupe_departures(once) == once

    def test_branches_of_one_line_are_merged(self) -> None:
        items = [projected(10, "都05-1"), projected(11, "都05-2")]

        assert len(dedupe_departures(items)) == 1


class TestAggregate:
    """Tests for aggregate."""

    def test_drops_past_and_caps_per_route(self) -> None:
        items = [projected(-5), projected(10), projected(20), projected(40), projected(15, "海01")]

        result = aggregate(items, NOW, QuerySettings())

        assert minutes_of(result) == [10, 15, 20]
        times = [d.departure_at for d in result]
        assert times == sorted(times)

    def test_last_departure_of_service_day_is_flagged(self) -> None:
        """Given runs before and after midnight, then the last one today is flagged."""
        items = [projected(60), projected(100), projected(150)]

        result = aggregate(items, NOW, QuerySettings(max_departures_per_route=3))

        assert [(m, d.is_last) for m, d in zip(minutes_of(result), result)] == [
            (60, False),
            (100, True),
            (150, False),
        ]

    def test_status_marker_flags_last_even_with_later_runs(self) -> None:
        items = [projected(10, status_is_last=True), projected(30), projected(20, "海01")]

        result = aggregate(items, NOW, QuerySettings())

        assert [(d.route_name, d.is_last) for d in result] == [
            ("東16", True),
            ("海01", True),
            ("東16", True),
        ]
