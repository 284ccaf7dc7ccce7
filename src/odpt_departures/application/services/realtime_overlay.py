"""Realtime overlay: index build from the live feed and its application to departures."""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta

from odpt_departures.domain.models.realtime_index import RealtimeIndex, TurnaroundObservation
from odpt_departures.domain.models.vehicle_sample import (
    OccupancyLevel,
    OccupancySample,
    VehicleSample,
)
from odpt_departures.domain.occupancy import occupancy_level_from_ratio, occupancy_ratio_from_text
from odpt_departures.domain.stop_names import normalize_stop_name

logger = logging.getLogger(__name__)


def _timestamp(observed_at: datetime | None) -> float:
    """Sort key for observations; unknown times sort first."""
    return observed_at.timestamp() if observed_at else 0.0


def build_realtime_index(samples: list[VehicleSample]) -> RealtimeIndex:
    """Build delay, turnaround and occupancy tables in one pass over a feed snapshot."""
    delays: dict[str, tuple[int, float]] = {}
    turnarounds: dict[tuple[str, str], TurnaroundObservation] = {}
    occupancy: dict[str, list[OccupancySample]] = {}
    seen: dict[str, set[tuple[float, str]]] = {}

    for sample in samples:
        key = sample.key
        if not key:
            continue
        ts = _timestamp(sample.observed_at)

        existing_delay = delays.get(key)
        if existing_delay is None or ts >= existing_delay[1]:
            delays[key] = (sample.delay_seconds, ts)

        if sample.destination_sign and sample.predicted_arrival:
            turn_key = (key, normalize_stop_name(sample.destination_sign))
            existing_turn = turnarounds.get(turn_key)
            if existing_turn is None or ts >= _timestamp(existing_turn.observed_at):
                turnarounds[turn_key] = TurnaroundObservation(
                    predicted_arrival=sample.predicted_arrival,
                    observed_at=sample.observed_at,
                )

        if not sample.occupancy_text:
            continue
        reading = OccupancySample(
            observed_at=sample.observed_at,
            text=sample.occupancy_text,
            ratio=sample.occupancy_ratio,
        )
        for sample_key in (sample.route_id, sample.pattern_id):
            if not sample_key:
                continue
            fingerprint = (ts, sample.occupancy_text)
            if fingerprint in seen.setdefault(sample_key, set()):
                continue
            seen[sample_key].add(fingerprint)
            occupancy.setdefault(sample_key, []).append(reading)

    index = RealtimeIndex(
        delay_by_key={key: delay for key, (delay, _ts) in delays.items()},
        samples_by_key={
            key: tuple(sorted(readings, key=lambda r: _timestamp(r.observed_at)))
            for key, readings in occupancy.items()
        },
        turnaround_by_key=turnarounds,
        vehicle_count=len(samples),
    )
    logger.debug(
        f"Built realtime index from {len(samples)} vehicles: {len(index.delay_by_key)} delay keys, "
        f"{len(index.samples_by_key)} occupancy keys, {len(turnarounds)} turnarounds"
    )
    return index


def find_closest_sample(
    samples: tuple[OccupancySample, ...], target: datetime, window: timedelta
) -> OccupancySample | None:
    """Sample closest in time to target within the window; the earliest wins ties."""
    best: OccupancySample | None = None
    best_diff = window.total_seconds()
    target_ts = target.timestamp()
    for sample in samples:
        if sample.observed_at is None:
            continue
        diff = abs(sample.observed_at.timestamp() - target_ts)
        if diff > window.total_seconds():
            continue
        if best is None or diff < best_diff:
            best = sample
            best_diff = diff
    return best


@dataclass(frozen=True)
class OccupancyReading:
    """Occupancy attached to one departure."""

    text: str | None = None
    ratio: int | None = None
    level: OccupancyLevel = OccupancyLevel.UNKNOWN


@dataclass(frozen=True)
class AdjustedTime:
    """A scheduled time after the realtime overlay."""

    departure_at: datetime
    delay_seconds: int
    turnaround_applied: bool


class RealtimeOverlay:
    """Applies a realtime index to projected departures."""

    def __init__(self, occupancy_match_window: timedelta = timedelta(minutes=10)) -> None:
        """Initialize with the maximum distance between an occupancy sample and a departure."""
        self._occupancy_match_window = occupancy_match_window

    def adjust(
        self,
        index: RealtimeIndex,
        scheduled_at: datetime,
        route_id: str,
        pattern_id: str,
        origin_name: str,
    ) -> AdjustedTime:
        """Add the reported delay, then snap to a later turnaround prediction if any.

        The result is never earlier than the schedule: delays are floored at
        zero and a turnaround prediction is only used when it is later.
        """
        delay_seconds = index.delay_for(route_id, pattern_id)
        adjusted = scheduled_at + timedelta(seconds=delay_seconds)

        turnaround = index.turnaround_for(route_id or pattern_id, normalize_stop_name(origin_name))
        if turnaround and turnaround.predicted_arrival > adjusted:
            return AdjustedTime(
                departure_at=turnaround.predicted_arrival.astimezone(scheduled_at.tzinfo),
                delay_seconds=delay_seconds,
                turnaround_applied=True,
            )
        return AdjustedTime(
            departure_at=adjusted, delay_seconds=delay_seconds, turnaround_applied=False
        )

    def occupancy(
        self, index: RealtimeIndex, departure_at: datetime, route_id: str, pattern_id: str
    ) -> OccupancyReading:
        """Occupancy of the sample closest to the departure, or unknown."""
        samples = index.samples_for(route_id, pattern_id)
        best = find_closest_sample(samples, departure_at, self._occupancy_match_window)
        if best is None:
            return OccupancyReading()

        ratio = best.ratio
        if ratio is None:
            ratio = occupancy_ratio_from_text(best.text)
        return OccupancyReading(
            text=best.text, ratio=ratio, level=occupancy_level_from_ratio(ratio)
        )
