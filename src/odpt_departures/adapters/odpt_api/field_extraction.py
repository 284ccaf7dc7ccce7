"""Ordered-fallback extraction of loosely specified ODPT record fields.

The upstream schema varies by feed generation, so one concept may live under
several field names. Each concept is described as data: the preferred field
names in order, plus an optional key pattern scanned when none of them is set.
"""

import logging
import math
import re
from dataclasses import dataclass
from datetime import datetime, tzinfo
from typing import Any

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FieldFallback:
    """Where to look for one concept in a record."""

    keys: tuple[str, ...]
    key_pattern: re.Pattern[str] | None = None


DESTINATION_FIELDS = FieldFallback(
    keys=("odpt:destinationSign", "odpt:destination", "odpt:destinationSignText"),
    key_pattern=re.compile(r"destination", re.IGNORECASE),
)

OCCUPANCY_FIELDS = FieldFallback(
    keys=(
        "odpt:occupancy",
        "odpt:occupancyStatus",
        "odpt:ext:occupancy",
        "odpt:ext:occupancyStatus",
    ),
    key_pattern=re.compile(r"occupancy|crowd|congestion", re.IGNORECASE),
)

STATUS_FIELDS = FieldFallback(
    keys=(
        "odpt:note",
        "odpt:remark",
        "odpt:status",
        "odpt:busrouteStatus",
        "odpt:trainInformationStatus",
        "odpt:operationStatus",
    ),
    key_pattern=re.compile(r"status|note|remark", re.IGNORECASE),
)

OBSERVED_AT_FIELDS = FieldFallback(
    keys=("dc:date", "dcterms:created", "dcterms:modified", "odpt:date", "odpt:time"),
)

PREDICTED_ARRIVAL_FIELDS = FieldFallback(
    keys=(
        "odpt:predictedArrivalTime",
        "odpt:predictedDepartureTime",
        "odpt:arrivalTime",
        "odpt:departureTime",
    ),
)

ID_FIELDS = FieldFallback(keys=("owl:sameAs", "@id"))


def _scalar_text(value: Any) -> str:
    """Stripped text of a scalar value, or "" for anything else."""
    if isinstance(value, str | int | float | bool):
        return str(value).strip()
    return ""


def extract_text(record: dict[str, Any], fallback: FieldFallback) -> str:
    """First non-empty value among the preferred keys, then among matching keys."""
    for key in fallback.keys:
        text = _scalar_text(record.get(key))
        if text:
            return text

    if fallback.key_pattern is None:
        return ""
    for key, value in record.items():
        if key in fallback.keys or not fallback.key_pattern.search(key):
            continue
        text = _scalar_text(value)
        if text:
            return text
    return ""


def parse_timestamp(value: str, default_tz: tzinfo) -> datetime | None:
    """Parse an ISO 8601 timestamp; naive values are taken as operator local time."""
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        logger.debug(f"Ignoring unparseable timestamp {value!r}")
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=default_tz)
    return parsed


def extract_timestamp(
    record: dict[str, Any], fallback: FieldFallback, default_tz: tzinfo
) -> datetime | None:
    """First preferred timestamp field that is set, parsed to an aware datetime."""
    return parse_timestamp(extract_text(record, fallback), default_tz)


def extract_string_list(record: dict[str, Any], key: str) -> tuple[str, ...]:
    """A list-valued field as unique non-empty strings, order preserved."""
    values = record.get(key)
    if not isinstance(values, list):
        return ()
    return tuple(dict.fromkeys(str(v) for v in values if v))


def extract_non_negative_int(record: dict[str, Any], key: str) -> int:
    """Numeric field floored at zero; missing or non-numeric values count as zero."""
    try:
        value = float(record.get(key) or 0)
    except (TypeError, ValueError):
        return 0
    if not math.isfinite(value):
        return 0
    return max(0, int(value))
