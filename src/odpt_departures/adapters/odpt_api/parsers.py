"""Parsers for ODPT JSON-LD records into domain models."""

import logging
import re
from datetime import tzinfo
from typing import Any

from odpt_departures.adapters.odpt_api.field_extraction import (
    DESTINATION_FIELDS,
    ID_FIELDS,
    OBSERVED_AT_FIELDS,
    OCCUPANCY_FIELDS,
    PREDICTED_ARRIVAL_FIELDS,
    STATUS_FIELDS,
    extract_non_negative_int,
    extract_string_list,
    extract_text,
    extract_timestamp,
)
from odpt_departures.domain.models.route_pattern import RoutePattern, StopReference
from odpt_departures.domain.models.stop_pole import StopPole
from odpt_departures.domain.models.timetable import StopVisit, TimetableEntry
from odpt_departures.domain.models.vehicle_sample import VehicleSample
from odpt_departures.domain.occupancy import occupancy_ratio_from_text
from odpt_departures.domain.stop_names import note_stop_name

logger = logging.getLogger(__name__)

_PATTERN_ID = re.compile(r"^odpt\.BusroutePattern:([^.]+)\.([^.]+)\.")


def infer_route_id(pattern_id: str) -> str:
    """Derive the route id from a pattern id.

    "odpt.BusroutePattern:Toei.Umi01.1001.1" -> "odpt.Busroute:Toei.Umi01"
    """
    match = _PATTERN_ID.match(pattern_id or "")
    return f"odpt.Busroute:{match.group(1)}.{match.group(2)}" if match else ""


class OdptParser:
    """Parses ODPT records into domain objects."""

    @staticmethod
    def parse_stop_pole(record: dict[str, Any]) -> StopPole | None:
        """Parse an odpt:BusstopPole record; records without id or title are dropped."""
        pole_id = extract_text(record, ID_FIELDS)
        title = str(record.get("dc:title") or "").strip()
        if not pole_id or not title:
            return None
        pole_number = record.get("odpt:busstopPoleNumber")
        return StopPole(
            id=pole_id,
            title=title,
            pattern_ids=extract_string_list(record, "odpt:busroutePattern"),
            pole_number=str(pole_number) if pole_number else None,
        )

    @staticmethod
    def parse_route_pattern(record: dict[str, Any]) -> RoutePattern | None:
        """Parse an odpt:BusroutePattern record."""
        pattern_id = extract_text(record, ID_FIELDS)
        if not pattern_id:
            return None

        orders = record.get("odpt:busstopPoleOrder")
        stops = []
        if isinstance(orders, list):
            for position, order in enumerate(orders):
                if not isinstance(order, dict):
                    continue
                index = order.get("odpt:index")
                stops.append(
                    StopReference(
                        stop_id=str(order.get("odpt:busstopPole") or ""),
                        note=note_stop_name(order.get("odpt:note")),
                        index=index if isinstance(index, int) else position,
                    )
                )

        return RoutePattern(
            id=pattern_id,
            route_id=str(record.get("odpt:busroute") or "") or infer_route_id(pattern_id),
            title=str(record.get("dc:title") or ""),
            stops=tuple(stops),
        )

    @staticmethod
    def _parse_stop_visit(obj: dict[str, Any]) -> StopVisit:
        """Parse one entry of odpt:busTimetableObject."""
        return StopVisit(
            stop_id=str(obj.get("odpt:busstopPole") or ""),
            note=note_stop_name(obj.get("odpt:note")),
            arrival_time=str(obj.get("odpt:arrivalTime") or ""),
            departure_time=str(obj.get("odpt:departureTime") or ""),
            is_midnight=bool(obj.get("odpt:isMidnight")),
        )

    @staticmethod
    def parse_timetable(record: dict[str, Any]) -> TimetableEntry:
        """Parse an odpt:BusTimetable record."""
        objects = record.get("odpt:busTimetableObject")
        visits = (
            tuple(OdptParser._parse_stop_visit(o) for o in objects if isinstance(o, dict))
            if isinstance(objects, list)
            else ()
        )
        pattern_id = str(record.get("odpt:busroutePattern") or "")
        return TimetableEntry(
            id=extract_text(record, ID_FIELDS),
            pattern_id=pattern_id,
            route_id=str(record.get("odpt:busroute") or "") or infer_route_id(pattern_id),
            title=str(record.get("dc:title") or ""),
            visits=visits,
            status_text=extract_text(record, STATUS_FIELDS),
        )

    @staticmethod
    def parse_vehicle(record: dict[str, Any], default_tz: tzinfo) -> VehicleSample | None:
        """Parse an odpt:Bus record; vehicles without route or pattern are dropped."""
        route_id = str(record.get("odpt:busroute") or "")
        pattern_id = str(record.get("odpt:busroutePattern") or "")
        if not route_id and not pattern_id:
            return None

        occupancy_text = extract_text(record, OCCUPANCY_FIELDS) or None
        return VehicleSample(
            route_id=route_id,
            pattern_id=pattern_id,
            observed_at=extract_timestamp(record, OBSERVED_AT_FIELDS, default_tz),
            occupancy_text=occupancy_text,
            occupancy_ratio=occupancy_ratio_from_text(occupancy_text),
            delay_seconds=extract_non_negative_int(record, "odpt:delay"),
            destination_sign=extract_text(record, DESTINATION_FIELDS) or None,
            predicted_arrival=extract_timestamp(record, PREDICTED_ARRIVAL_FIELDS, default_tz),
        )
