"""Route pattern matching between an origin and a destination."""

import logging
from collections.abc import Sequence
from typing import Protocol

from odpt_departures.domain.models.route_pattern import CandidatePattern, RoutePattern
from odpt_departures.domain.stop_names import note_matches_names

logger = logging.getLogger(__name__)


class _StopLike(Protocol):
    stop_id: str
    note: str


def find_stop_index(stops: Sequence[_StopLike], ids: set[str], names: list[str]) -> int:
    """Index of the first stop matching by id, or by note when no ids are known.

    Returns -1 when no stop matches. Id matching takes precedence whenever
    any ids exist, so generic note text cannot produce false positives.
    """
    for index, stop in enumerate(stops):
        if ids:
            if stop.stop_id in ids:
                return index
        elif note_matches_names(stop.note, names):
            return index
    return -1


class PatternMatcher:
    """Finds route patterns on which the origin stop precedes the destination stop."""

    def match(
        self,
        patterns: list[RoutePattern],
        origin_ids: set[str],
        origin_names: list[str],
        destination_ids: set[str],
        destination_names: list[str],
    ) -> list[CandidatePattern]:
        """Return every pattern where origin index < destination index."""
        candidates = []
        for pattern in patterns:
            origin_index = find_stop_index(pattern.stops, origin_ids, origin_names)
            destination_index = find_stop_index(pattern.stops, destination_ids, destination_names)
            if origin_index < 0 or destination_index < 0 or origin_index >= destination_index:
                continue
            candidates.append(
                CandidatePattern(
                    pattern_id=pattern.id,
                    route_id=pattern.route_id,
                    title=pattern.title,
                    origin_index=origin_index,
                    destination_index=destination_index,
                )
            )

        logger.debug(f"Matched {len(candidates)} of {len(patterns)} route patterns")
        return candidates
