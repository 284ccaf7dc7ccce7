"""Tests for route pattern matching."""

from odpt_departures.application.services.pattern_matcher import PatternMatcher, find_stop_index
from odpt_departures.domain.models import RoutePattern, StopReference


def stops(*entries: tuple[str, str]) -> tuple[StopReference, ...]:
    return tuple(StopReference(stop_id=s, note=n, index=i) for i, (s, n) in enumerate(entries))


class TestFindStopIndex:
    """Tests for find_stop_index."""

    def test_matches_first_id(self) -> None:
        sequence = stops(("a", "A"), ("b", "B"), ("b", "B"))

        assert find_stop_index(sequence, {"b"}, []) == 1

    def test_ids_take_precedence_over_notes(self) -> None:
        """Given known ids, then a note with the same name does not match."""
        sequence = stops(("x", "豊洲駅前"), ("a", "Other"))

        assert find_stop_index(sequence, {"a"}, ["豊洲駅前"]) == 1
        assert find_stop_index(sequence, {"zzz"}, ["豊洲駅前"]) == -1

    def test_notes_match_when_no_ids(self) -> None:
        sequence = stops(("x", "豊洲 駅前"), ("a", "Other"))

        assert find_stop_index(sequence, set(), ["豊洲駅前"]) == 0


class TestPatternMatcher:
    """Tests for PatternMatcher."""

    def test_origin_must_precede_destination(self) -> None:
        """Given patterns in both directions, then only the forward one matches."""
        forward = RoutePattern("P1", "R1", "東16", stops(("o", ""), ("m", ""), ("d", "")))
        backward = RoutePattern("P2", "R1", "東16", stops(("d", ""), ("m", ""), ("o", "")))
        unrelated = RoutePattern("P3", "R3", "海01", stops(("x", ""), ("d", "")))

        candidates = PatternMatcher().match(
            [forward, backward, unrelated], {"o"}, ["Origin"], {"d"}, ["Dest"]
        )

        assert [(c.pattern_id, c.origin_index, c.destination_index) for c in candidates] == [
            ("P1", 0, 2)
        ]
        assert candidates[0].route_id == "R1"

    def test_loop_pattern_uses_first_occurrences(self) -> None:
        """Given a loop visiting the destination twice, then the first visits are used."""
        loop = RoutePattern("L", "R", "循環", stops(("d", ""), ("o", ""), ("d", "")))

        assert PatternMatcher().match([loop], {"o"}, [], {"d"}, []) == []
