"""Flightradar24 airport schedule adapter.

The schedule plugin of the airport endpoint lists flights per board side:

    result.response.airport.pluginData.schedule.{arrivals|departures}.data[].flight

Timestamps are epoch seconds. The schedule carries no live position, so
``live`` is always None for records produced here.
"""

import logging
import time
from typing import Any, List, Optional

from flightboard.errors import MalformedResponse
from flightboard.models import (
    Aircraft,
    Airline,
    Endpoint,
    FlightIdentifier,
    FlightRecord,
    Mode,
)
from flightboard.sources.base import (
    UNKNOWN_DESTINATION,
    UNKNOWN_ORIGIN,
    airport_display_name,
    compute_delay,
    dig,
    first_present,
    first_truthy,
    flight_date_from,
    get_json,
    parse_status,
    raise_for_provider_error,
    text_or_empty,
    to_millis,
)

logger = logging.getLogger(__name__)

BASE_URL = "https://api.flightradar24.com/common/v1/airport.json"
DEFAULT_AIRPORT = "ZRH"
DEFAULT_LIMIT = 100
USER_AGENT = "Mozilla/5.0 (flightboard)"


class Flightradar24Source:
    """Flight data source using the Flightradar24 airport schedule."""

    def __init__(
        self,
        airport: str = DEFAULT_AIRPORT,
        base_url: str = BASE_URL,
        timeout: int = 30,
        limit: int = DEFAULT_LIMIT,
    ):
        self.airport = airport.upper()
        self.base_url = base_url
        self.timeout = timeout
        self.limit = limit

    def fetch_payload(self, mode: Mode) -> Any:
        """Fetch the first schedule page for the airport and board side."""
        mode = Mode(mode)
        params = {
            "code": self.airport.lower(),
            "plugin[]": "schedule",
            "plugin-setting[schedule][mode]": mode.value,
            "plugin-setting[schedule][timestamp]": str(int(time.time())),
            "page": "1",
            "limit": str(self.limit),
        }
        return get_json(
            self.base_url, params, self.timeout, headers={"User-Agent": USER_AGENT}
        )

    def parse_flights(self, payload: Any, mode: Mode) -> List[FlightRecord]:
        return parse_schedule(payload, mode, home_airport=self.airport)


def parse_schedule(
    payload: Any, mode: Mode, home_airport: Optional[str] = None
) -> List[FlightRecord]:
    """Normalize a schedule payload. Items that cannot be read are logged and skipped."""
    mode = Mode(mode)
    raise_for_provider_error(payload)

    items = dig(payload, "result", "response", "airport", "pluginData", "schedule", mode.value, "data")
    if not isinstance(items, list):
        raise MalformedResponse(f"Flightradar24 payload has no {mode.value} schedule list")

    records = []
    for index, item in enumerate(items):
        try:
            record = _parse_item(item, mode, home_airport)
        except (AttributeError, TypeError, ValueError, OverflowError, OSError) as exc:
            logger.warning("Skipping malformed schedule item %d: %s", index, exc)
            continue
        if record is None:
            logger.warning("Skipping schedule item %d without a flight number", index)
            continue
        records.append(record)
    return records


def _parse_item(item: Any, mode: Mode, home_airport: Optional[str]) -> Optional[FlightRecord]:
    flight = item.get("flight") if isinstance(item, dict) else None
    if not isinstance(flight, dict):
        raise ValueError("item has no flight object")

    ident = flight.get("identification") or {}
    number = first_present(dig(ident, "number", "default"), dig(ident, "number", "alternative"))
    if not number:
        return None

    times = flight.get("time") or {}
    sched_dep = to_millis(dig(times, "scheduled", "departure"))
    sched_arr = to_millis(dig(times, "scheduled", "arrival"))
    est_dep = first_truthy(to_millis(dig(times, "estimated", "departure")), sched_dep)
    if mode is Mode.ARRIVALS:
        est_arr = first_truthy(
            to_millis(dig(times, "estimated", "arrival")),
            to_millis(dig(times, "other", "eta")),
            sched_arr,
        )
    else:
        est_arr = first_truthy(to_millis(dig(times, "estimated", "arrival")), sched_arr)

    airports = flight.get("airport") or {}
    departure = _endpoint(
        airports.get("origin"),
        scheduled=sched_dep,
        estimated=est_dep,
        actual=to_millis(dig(times, "real", "departure")) or None,
        fallback_name=UNKNOWN_ORIGIN,
        home_airport=home_airport if mode is Mode.DEPARTURES else None,
        with_baggage=False,
    )
    arrival = _endpoint(
        airports.get("destination"),
        scheduled=sched_arr,
        estimated=est_arr,
        actual=to_millis(dig(times, "real", "arrival")) or None,
        fallback_name=UNKNOWN_DESTINATION,
        home_airport=home_airport if mode is Mode.ARRIVALS else None,
        with_baggage=True,
    )

    status_text = first_present(
        dig(flight, "status", "text"), dig(flight, "status", "generic", "status", "text")
    )
    aircraft = flight.get("aircraft") or {}
    codeshare = ident.get("codeshare")

    return FlightRecord(
        flight_date=flight_date_from(
            sched_arr if mode is Mode.ARRIVALS else sched_dep, sched_dep, sched_arr
        ),
        status=parse_status(status_text),
        departure=departure,
        arrival=arrival,
        airline=Airline(
            name=text_or_empty(dig(flight, "airline", "name"), dig(flight, "owner", "name")),
            iata=text_or_empty(dig(flight, "airline", "code", "iata")),
            icao=text_or_empty(dig(flight, "airline", "code", "icao")),
        ),
        flight=FlightIdentifier(
            number=number,
            iata=number,
            icao=text_or_empty(ident.get("callsign")),
            codeshared=codeshare if isinstance(codeshare, str) and codeshare else None,
        ),
        aircraft=Aircraft(
            registration=text_or_empty(aircraft.get("registration")),
            icao=text_or_empty(dig(aircraft, "model", "code")),
            icao24=first_present(aircraft.get("hex")),
        ),
        live=None,
    )


def _endpoint(
    airport: Any,
    scheduled: int,
    estimated: int,
    actual: Optional[int],
    fallback_name: str,
    home_airport: Optional[str],
    with_baggage: bool,
) -> Endpoint:
    airport = airport if isinstance(airport, dict) else {}
    info = airport.get("info") or {}
    iata = text_or_empty(dig(airport, "code", "iata"), home_airport)
    return Endpoint(
        airport=airport_display_name(
            dig(airport, "position", "region", "city"),
            airport.get("name"),
            iata,
            fallback_name,
        ),
        iata=iata,
        icao=text_or_empty(dig(airport, "code", "icao")),
        timezone=text_or_empty(dig(airport, "timezone", "name")),
        terminal=first_present(info.get("terminal")),
        gate=first_present(info.get("gate")),
        baggage=first_present(info.get("baggage")) if with_baggage else None,
        delay=compute_delay(scheduled, estimated),
        scheduled=scheduled,
        estimated=estimated,
        actual=actual,
    )
