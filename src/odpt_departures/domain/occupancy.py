"""Occupancy text interpretation."""

import re

from odpt_departures.domain.models.vehicle_sample import OccupancyLevel

_PERCENTAGE = re.compile(r"(\d{1,3})")

# Representative ratio for qualitative occupancy wording, checked in order
OCCUPANCY_KEYWORD_RATIOS: tuple[tuple[int, tuple[str, ...]], ...] = (
    (85, ("満", "混雑", "full", "high", "crowd", "congest")),
    (55, ("多", "moderate", "medium", "normal")),
    (25, ("少", "空", "sparse", "low", "empty")),
)

HIGH_OCCUPANCY_THRESHOLD = 70
MEDIUM_OCCUPANCY_THRESHOLD = 40


def occupancy_ratio_from_text(text: str | None) -> int | None:
    """Convert operator occupancy text to a 0-100 ratio.

    A literal number wins; otherwise qualitative keywords map to fixed ratios.
    Returns None when the text carries no usable information.
    """
    if not text:
        return None
    value = str(text)
    match = _PERCENTAGE.search(value)
    if match:
        return max(0, min(100, int(match.group(1))))

    lowered = value.lower()
    for ratio, keywords in OCCUPANCY_KEYWORD_RATIOS:
        if any(keyword in lowered for keyword in keywords):
            return ratio
    return None


def occupancy_level_from_ratio(ratio: int | None) -> OccupancyLevel:
    """Bucket a ratio into low (<40), medium (40-69) or high (>=70)."""
    if ratio is None:
        return OccupancyLevel.UNKNOWN
    if ratio >= HIGH_OCCUPANCY_THRESHOLD:
        return OccupancyLevel.HIGH
    if ratio >= MEDIUM_OCCUPANCY_THRESHOLD:
        return OccupancyLevel.MEDIUM
    return OccupancyLevel.LOW
