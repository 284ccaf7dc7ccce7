"""Stop name resolution and stop suggestions."""

import logging

from odpt_departures.domain.contracts.cache_provider import CacheProviderProtocol
from odpt_departures.domain.models.query_settings import QuerySettings
from odpt_departures.domain.models.stop_pole import StopPole
from odpt_departures.domain.ports.stop_repository import StopRepository
from odpt_departures.domain.stop_names import collapse_whitespace, normalize_stop_name

logger = logging.getLogger(__name__)

ROSTER_KEY = "all"


def build_query_variants(name: str, station_suffixes: tuple[str, ...]) -> list[str]:
    """Title variants to search for, with and without each station qualifier.

    "Toyosu" -> ["Toyosu", "Toyosu駅前", "Toyosu駅"]; "Toyosu駅" -> [..., "Toyosu"].
    """
    variants: dict[str, None] = {}

    def push(value: str) -> None:
        value = value.strip()
        if value:
            variants[value] = None

    trimmed = name.strip()
    push(trimmed)
    for suffix in station_suffixes:
        if trimmed.endswith(suffix):
            push(trimmed[: -len(suffix)])
        else:
            push(f"{trimmed}{suffix}")
    return list(variants)


def build_name_variants(name: str, poles: list[StopPole]) -> list[str]:
    """Names a stop may be written as in notes: the typed name plus every pole title."""
    names: dict[str, None] = {}
    for candidate in [name, *(p.title for p in poles)]:
        candidate = candidate.strip()
        if candidate:
            names[candidate] = None
    return list(names)


def _merge_pole(matches: dict[str, StopPole], pole: StopPole) -> None:
    """Add a pole, unioning pattern ids with an already known pole of the same id."""
    existing = matches.get(pole.id)
    if existing is None:
        matches[pole.id] = pole
        return
    merged = tuple(dict.fromkeys((*existing.pattern_ids, *pole.pattern_ids)))
    matches[pole.id] = StopPole(
        id=existing.id,
        title=existing.title,
        pattern_ids=merged,
        pole_number=existing.pole_number,
    )


class StopResolver:
    """Maps free-text stop names to stop poles and suggests stop titles."""

    def __init__(
        self,
        stop_repository: StopRepository,
        caches: CacheProviderProtocol,
        settings: QuerySettings,
    ) -> None:
        """Initialize with a stop repository, the shared caches and query settings."""
        self._stop_repository = stop_repository
        self._caches = caches
        self._settings = settings

    async def get_stop_list(self) -> list[StopPole]:
        """The operator's stop roster, read through the stop-list cache."""
        return await self._caches.stop_list.get_or_build(
            ROSTER_KEY, self._stop_repository.list_all
        )

    async def resolve(self, name: str) -> list[StopPole]:
        """Resolve a free-text stop name to matching stop poles.

        Results are cached per whitespace-collapsed name.
        """
        key = collapse_whitespace(name)
        if not key:
            return []
        return await self._caches.stop_resolution.get_or_build(key, lambda: self._lookup(key))

    async def _lookup(self, name: str) -> list[StopPole]:
        normalized = normalize_stop_name(name)
        matches: dict[str, StopPole] = {}

        for query in build_query_variants(name, self._settings.station_suffixes):
            for pole in await self._stop_repository.search_by_title(query):
                if normalized in normalize_stop_name(pole.title):
                    _merge_pole(matches, pole)

        if not matches:
            logger.debug(f"No title search match for '{name}', scanning the stop roster")
            roster = await self.get_stop_list()
            hits = [p for p in roster if normalized in normalize_stop_name(p.title)]
            for pole in hits[: self._settings.roster_fallback_limit]:
                _merge_pole(matches, pole)

        logger.debug(f"Resolved '{name}' to {len(matches)} stop pole(s)")
        return list(matches.values())

    async def _anchor_patterns(self, anchor: str, roster: list[StopPole]) -> set[str]:
        """Pattern ids serving any stop named like the anchor."""
        normalized_anchor = normalize_stop_name(anchor)
        patterns: set[str] = set()
        for pole in roster:
            if normalized_anchor in normalize_stop_name(pole.title):
                patterns.update(pole.pattern_ids)
        for pole in await self.resolve(anchor):
            patterns.update(pole.pattern_ids)
        return patterns

    def _clamp_limit(self, limit: int | None) -> int:
        if limit is None:
            return self._settings.default_suggestion_limit
        return max(1, min(limit, self._settings.max_suggestion_limit))

    async def suggest(
        self, query: str, anchor: str | None = None, limit: int | None = None
    ) -> list[str]:
        """Suggest stop titles containing the query.

        When an anchor stop is given, only stops sharing a route pattern with it
        are suggested. Prefix matches rank first, then shorter titles, then
        alphabetical order. Titles are unique.
        """
        trimmed_query = query.strip()
        if not trimmed_query:
            return []

        roster = await self.get_stop_list()
        candidates = roster

        anchor = (anchor or "").strip()
        if anchor:
            anchor_patterns = await self._anchor_patterns(anchor, roster)
            if anchor_patterns:
                candidates = [
                    p for p in candidates if any(pid in anchor_patterns for pid in p.pattern_ids)
                ]

        normalized_query = normalize_stop_name(trimmed_query)
        scored = []
        for pole in candidates:
            name = normalize_stop_name(pole.title)
            if normalized_query not in name:
                continue
            score = 0 if name.startswith(normalized_query) else 1
            scored.append((score, len(pole.title), pole.title))
        scored.sort()

        max_results = self._clamp_limit(limit)
        titles: list[str] = []
        for _score, _length, title in scored:
            if len(titles) >= max_results:
                break
            if title not in titles:
                titles.append(title)
        return titles
