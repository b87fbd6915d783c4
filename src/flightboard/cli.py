"""CLI for the airport arrivals/departures board."""

import argparse
import logging
import sys
from datetime import datetime, timezone

from flightboard.errors import FlightBoardError
from flightboard.models import Mode
from flightboard.normalize import Provider
from flightboard.service import BoardService
from flightboard.sources import AviationstackSource, Flightradar24Source
from flightboard.stats import compute_stats

logger = logging.getLogger(__name__)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description="Show upcoming arrivals or departures for an airport"
    )
    parser.add_argument(
        "--provider",
        "-p",
        choices=[p.value for p in Provider],
        default=Provider.FLIGHTRADAR24.value,
        help="Data provider (aviationstack needs AVIATIONSTACK_API_KEY)",
    )
    parser.add_argument(
        "--airport",
        "-a",
        default="ZRH",
        help="IATA code of the airport (default: ZRH)",
    )
    parser.add_argument(
        "--mode",
        "-m",
        choices=[m.value for m in Mode],
        default=Mode.ARRIVALS.value,
    )
    parser.add_argument(
        "--hours",
        "-H",
        type=int,
        choices=[1, 3, 5],
        default=3,
        help="Look-ahead window in hours",
    )
    parser.add_argument(
        "--search",
        "-s",
        default="",
        help="Filter by flight number, city or airline",
    )
    parser.add_argument(
        "--stats",
        action="store_true",
        help="Include statistics summary",
    )
    parser.add_argument(
        "--output",
        "-o",
        help="Write results to CSV file",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )
    return parser.parse_args(argv)


def build_source(provider: str, airport: str):
    if Provider(provider) is Provider.AVIATIONSTACK:
        return AviationstackSource(airport=airport)
    return Flightradar24Source(airport=airport)


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        source = build_source(args.provider, args.airport)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    service = BoardService(source=source)
    try:
        service.refresh(Mode(args.mode))
    except FlightBoardError as e:
        logger.debug("Refresh failed", exc_info=True)
        print(f"Unable to load flights: {e}", file=sys.stderr)
        sys.exit(1)

    result = service.board(datetime.now(timezone.utc), args.hours, args.search)

    if args.stats:
        stats = compute_stats(result.flights, result.mode)
        print(f"\nTotal flights: {stats.total_flights} ({stats.delayed} delayed)")
        if stats.by_status:
            print("\nBy status:")
            for status, count in sorted(stats.by_status.items(), key=lambda x: -x[1]):
                print(f"  {status}: {count}")
        if stats.by_airline:
            print("\nBy airline:")
            print(stats.airline_table().to_string(index=False))
        if stats.by_hour:
            print("\nBy hour (UTC):")
            print(stats.hourly_table().to_string(index=False))
        print()

    df = result.to_dataframe()
    if df.empty:
        print(
            f"No flights found in the next {args.hours} hour(s) matching your criteria.",
            file=sys.stderr,
        )
    else:
        print(df.to_string(index=False))

    if args.output and not df.empty:
        df.to_csv(args.output, index=False)
        print(f"\nWrote {len(df)} rows to {args.output}", file=sys.stderr)


if __name__ == "__main__":
    main()
