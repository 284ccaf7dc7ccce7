"""Departure aggregation: filtering, deduplication, per-route caps and last-run flags."""

import logging
import re
from collections.abc import Callable
from dataclasses import replace
from datetime import date, datetime, timedelta
from typing import TYPE_CHECKING, TypeVar
from zoneinfo import ZoneInfo

from odpt_departures.domain.models.departure import Departure
from odpt_departures.domain.models.query_settings import QuerySettings

if TYPE_CHECKING:
    from odpt_departures.application.services.timetable_projector import ProjectedDeparture

logger = logging.getLogger(__name__)

_BRANCH_SUFFIX = re.compile(r"[-‐‑–—]?\d+$")
_PATTERN_BRANCH = re.compile(r"\.[^.]+$")

T = TypeVar("T")


def build_route_key(route_name: str, route_id: str, pattern_id: str) -> str:
    """Key that merges branch variants of one line.

    The trailing number of the display name, with an optional dash, is the
    branch: "都05-1" and "都05-2" both become "都05". Without a usable name the
    pattern id minus its last segment is used, then the route id.
    """
    base_name = _BRANCH_SUFFIX.sub("", route_name.strip())
    if base_name:
        return base_name
    base_pattern = _PATTERN_BRANCH.sub("", pattern_id or "")
    if base_pattern:
        return base_pattern
    if route_id:
        return route_id
    return route_name or pattern_id


def dedupe_by_time(
    items: list[T],
    key: Callable[[T], str],
    time_of: Callable[[T], datetime],
    window: timedelta,
) -> list[T]:
    """Collapse entries of one key closer than the window, keeping the later one.

    Groups keep first-seen order; each group is sorted by time. Applying this
    to its own output returns the same list.
    """
    groups: dict[str, list[T]] = {}
    for item in items:
        groups.setdefault(key(item), []).append(item)

    merged: list[T] = []
    for group in groups.values():
        reduced: list[T] = []
        for item in sorted(group, key=time_of):
            if reduced and time_of(item) - time_of(reduced[-1]) <= window:
                reduced[-1] = item
            else:
                reduced.append(item)
        merged.extend(reduced)
    return merged


def dedupe_departures(
    departures: "list[ProjectedDeparture]", window: timedelta = timedelta(minutes=3)
) -> "list[ProjectedDeparture]":
    """Merge departures of one route key that lie within the window of each other."""
    return dedupe_by_time(
        departures,
        key=lambda p: p.route_key,
        time_of=lambda p: p.departure.departure_at,
        window=window,
    )


def _service_day(value: datetime, tz: ZoneInfo) -> date:
    return value.astimezone(tz).date()


def aggregate(
    projected: "list[ProjectedDeparture]", now: datetime, settings: QuerySettings
) -> list[Departure]:
    """Turn projected departures into the final ranked answer.

    Past departures are dropped, near-duplicates merged and each route key
    capped. A departure is flagged last when its status says so or it is the
    route key's latest departure on the current service day.
    """
    tz = ZoneInfo(settings.timezone)
    upcoming = [p for p in projected if p.departure.departure_at >= now]
    deduped = dedupe_departures(upcoming, timedelta(minutes=settings.dedupe_window_minutes))
    deduped.sort(key=lambda p: p.departure.departure_at)

    today = _service_day(now, tz)
    last_today: dict[str, datetime] = {}
    for item in deduped:
        departure_at = item.departure.departure_at
        if _service_day(departure_at, tz) != today:
            continue
        current = last_today.get(item.route_key)
        if current is None or departure_at > current:
            last_today[item.route_key] = departure_at

    by_route: dict[str, list["ProjectedDeparture"]] = {}
    for item in deduped:
        by_route.setdefault(item.route_key, []).append(item)

    kept: list["ProjectedDeparture"] = []
    for items in by_route.values():
        kept.extend(items[: settings.max_departures_per_route])
    kept.sort(key=lambda p: p.departure.departure_at)

    logger.debug(
        f"Aggregated {len(projected)} projected departures into {len(kept)} "
        f"across {len(by_route)} route keys"
    )
    return [
        replace(
            item.departure,
            is_last=item.status_is_last
            or item.departure.departure_at == last_today.get(item.route_key),
        )
        for item in kept
    ]
