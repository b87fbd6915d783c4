"""Time-window and search derivation for the airport board."""

from datetime import datetime, timezone
from typing import Iterable, List, Union

from flightboard.models import BoardResult, FlightRecord, Mode

LOOKBACK_MINUTES = 60

Instant = Union[int, datetime]


def to_epoch_millis(now: Instant) -> int:
    """Epoch ms for ``now``; a naive datetime is read as UTC, like provider times."""
    if isinstance(now, datetime):
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)
        return int(round(now.timestamp() * 1000))
    return int(now)


def derive_board(
    records: Iterable[FlightRecord],
    now: Instant,
    mode: Mode,
    window_hours: int,
    search_term: str = "",
) -> List[FlightRecord]:
    """Filter records to [now - 60min, now + window_hours], sort by reference time, then search.

    The reference time is the estimated time of the endpoint at the viewed
    airport, falling back to scheduled; records with neither are dropped.
    """
    mode = Mode(mode)
    now_ms = to_epoch_millis(now)
    range_start = now_ms - LOOKBACK_MINUTES * 60_000
    range_end = now_ms + int(window_hours * 3_600_000)

    in_window = []
    for record in records:
        ref = record.reference_time(mode)
        if ref and range_start <= ref <= range_end:
            in_window.append((ref, record))

    # sorted() is stable, so equal reference times keep input order
    flights = [record for _, record in sorted(in_window, key=lambda pair: pair[0])]

    if search_term:
        needle = search_term.lower()
        flights = [f for f in flights if _matches(f, needle, mode)]
    return flights


def _matches(record: FlightRecord, needle: str, mode: Mode) -> bool:
    fields = [
        record.flight.iata,
        record.flight.number,
        record.departure.airport,
        record.airline.name,
    ]
    if mode is Mode.DEPARTURES:
        fields.append(record.arrival.airport)
    return any(needle in (value or "").lower() for value in fields)


def build_board(
    records: Iterable[FlightRecord],
    now: Instant,
    mode: Mode,
    window_hours: int,
    search_term: str = "",
) -> BoardResult:
    """Derive the board and wrap it with the parameters that produced it."""
    mode = Mode(mode)
    return BoardResult(
        flights=derive_board(records, now, mode, window_hours, search_term),
        mode=mode,
        window_hours=window_hours,
        search_term=search_term,
    )
