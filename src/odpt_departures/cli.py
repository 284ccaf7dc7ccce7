"""Command line interface for querying stop suggestions and next bus departures."""

import argparse
import asyncio
import json
import sys

from odpt_departures.adapters.config import AppConfig
from odpt_departures.domain.models.departure import Departure
from odpt_departures.main import configure_logging, open_departure_service


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Next bus departures between two stops from ODPT open data",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Suggest stops
  odpt-departures suggest "豊洲"

  # Suggest destinations reachable from an origin
  odpt-departures suggest "東京" --anchor "豊洲駅前"

  # Next departures
  odpt-departures departures "豊洲駅前" "東京駅丸の内南口"
        """,
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    parser.add_argument("--config", help="Path to a TOML config file")

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    suggest_parser = subparsers.add_parser("suggest", help="Suggest stop names")
    suggest_parser.add_argument("query", help="Partial stop name")
    suggest_parser.add_argument(
        "--anchor", help="Only suggest stops sharing a route with this stop"
    )
    suggest_parser.add_argument("--limit", type=int, help="Maximum number of suggestions (<= 50)")
    suggest_parser.add_argument("--json", action="store_true", help="Output as JSON")

    departures_parser = subparsers.add_parser("departures", help="Show next departures")
    departures_parser.add_argument("origin", help="Origin stop name")
    departures_parser.add_argument("dest", help="Destination stop name")
    departures_parser.add_argument("--json", action="store_true", help="Output as JSON")
    departures_parser.add_argument(
        "--debug", action="store_true", help="Include occupancy sample statistics"
    )
    return parser


def format_departure(departure: Departure) -> str:
    """One human readable line for a departure."""
    line = f"{departure.departure_time}  {departure.display_name}"
    line += f"  from {departure.origin_pole_name}"
    if departure.delay_minutes:
        line += f"  (scheduled {departure.scheduled_time}, +{departure.delay_minutes} min)"
    line += f"  in {departure.eta_minutes} min"
    if departure.occupancy_level.value != "unknown":
        line += f"  [{departure.occupancy_level.value}]"
    if departure.is_last:
        line += "  LAST"
    return line


def load_config(config_file: str | None) -> AppConfig:
    config = AppConfig()
    if config_file:
        config.config_file = config_file
    if config.config_file:
        config.apply_config_file()
    return config


async def main() -> None:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    configure_logging(args.verbose)

    try:
        config = load_config(args.config)
        async with open_departure_service(config) as service:
            if args.command == "suggest":
                titles = await service.suggest_stops(
                    args.query, anchor=args.anchor, limit=args.limit
                )
                if args.json:
                    print(json.dumps(titles, indent=2, ensure_ascii=False))
                elif not titles:
                    print(f"No stops found for '{args.query}'", file=sys.stderr)
                    sys.exit(1)
                else:
                    for title in titles:
                        print(title)

            elif args.command == "departures":
                departures = await service.next_departures_safe(args.origin, args.dest)
                payload = {
                    "origin": args.origin,
                    "dest": args.dest,
                    "results": [d.to_dict() for d in departures],
                }
                if args.debug:
                    stats = await service.get_occupancy_sample_stats(
                        [d.route_id for d in departures], [d.pattern_id for d in departures]
                    )
                    payload["debug"] = stats.to_dict()

                if args.json:
                    print(json.dumps(payload, indent=2, ensure_ascii=False))
                else:
                    if not departures:
                        print(
                            f"No departures found from '{args.origin}' to '{args.dest}'",
                            file=sys.stderr,
                        )
                    for departure in departures:
                        print(format_departure(departure))
                    if args.debug:
                        print(json.dumps(payload["debug"], indent=2, ensure_ascii=False))

    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


def cli_main() -> None:
    """Synchronous entry point for the CLI command."""
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    cli_main()
