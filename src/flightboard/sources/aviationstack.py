"""Aviationstack flights adapter.

Endpoint: /v1/flights filtered by ``arr_iata`` or ``dep_iata``.
Requires an access key (set AVIATIONSTACK_API_KEY env var). The free tier
only serves plain HTTP.

Unlike the schedule feed, this endpoint can carry a ``live`` block with the
aircraft position, which feeds the map markers.
"""

import logging
import math
import os
from typing import Any, List, Optional

from flightboard.errors import MalformedResponse
from flightboard.models import (
    Aircraft,
    Airline,
    Endpoint,
    FlightIdentifier,
    FlightRecord,
    LiveTelemetry,
    Mode,
)
from flightboard.sources.base import (
    UNKNOWN_DESTINATION,
    UNKNOWN_ORIGIN,
    airport_display_name,
    compute_delay,
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

BASE_URL = "http://api.aviationstack.com/v1/flights"
DEFAULT_AIRPORT = "ZRH"
DEFAULT_LIMIT = 100


class AviationstackSource:
    """Flight data source for one airport via the Aviationstack API."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        airport: str = DEFAULT_AIRPORT,
        base_url: str = BASE_URL,
        timeout: int = 30,
        limit: int = DEFAULT_LIMIT,
    ):
        self.api_key = api_key or os.environ.get("AVIATIONSTACK_API_KEY", "")
        self.airport = airport.upper()
        self.base_url = base_url
        self.timeout = timeout
        self.limit = limit
        if not self.api_key:
            raise ValueError(
                "Aviationstack access key required. Set AVIATIONSTACK_API_KEY env var "
                "or pass api_key parameter."
            )

    def fetch_payload(self, mode: Mode) -> Any:
        """Fetch flights arriving at or departing from the airport."""
        side = "arr_iata" if Mode(mode) is Mode.ARRIVALS else "dep_iata"
        params = {
            "access_key": self.api_key,
            side: self.airport,
            "limit": str(self.limit),
        }
        return get_json(self.base_url, params, self.timeout)

    def parse_flights(self, payload: Any, mode: Mode) -> List[FlightRecord]:
        return parse_flights(payload, mode)


def parse_flights(payload: Any, mode: Mode) -> List[FlightRecord]:
    """Normalize a /v1/flights payload. Items that cannot be read are logged and skipped."""
    mode = Mode(mode)
    raise_for_provider_error(payload)

    items = payload.get("data") if isinstance(payload, dict) else None
    if not isinstance(items, list):
        raise MalformedResponse("Aviationstack payload has no data list")

    records = []
    for index, item in enumerate(items):
        try:
            record = _parse_item(item, mode)
        except (AttributeError, TypeError, ValueError, OverflowError, OSError) as exc:
            logger.warning("Skipping malformed flight item %d: %s", index, exc)
            continue
        if record is None:
            logger.warning("Skipping flight item %d without a flight number", index)
            continue
        records.append(record)
    return records


def _parse_item(item: Any, mode: Mode) -> Optional[FlightRecord]:
    if not isinstance(item, dict):
        raise ValueError(f"expected object, got {type(item).__name__}")

    flight = item.get("flight") or {}
    number = first_present(flight.get("number"), flight.get("iata"))
    if not number:
        return None

    departure = _endpoint(item.get("departure"), UNKNOWN_ORIGIN, with_baggage=False)
    arrival = _endpoint(item.get("arrival"), UNKNOWN_DESTINATION, with_baggage=True)
    relevant = arrival if mode is Mode.ARRIVALS else departure

    airline = item.get("airline") or {}
    aircraft = item.get("aircraft") or {}
    codeshared = flight.get("codeshared")
    if isinstance(codeshared, dict):
        codeshared = first_present(codeshared.get("flight_iata"), codeshared.get("flight_number"))
        codeshared = codeshared.upper() if codeshared else None

    return FlightRecord(
        flight_date=(
            flight_date_from(relevant.scheduled, departure.scheduled, arrival.scheduled)
            or text_or_empty(item.get("flight_date"))
        ),
        status=parse_status(item.get("flight_status")),
        departure=departure,
        arrival=arrival,
        airline=Airline(
            name=text_or_empty(airline.get("name")),
            iata=text_or_empty(airline.get("iata")),
            icao=text_or_empty(airline.get("icao")),
        ),
        flight=FlightIdentifier(
            number=number,
            iata=text_or_empty(flight.get("iata"), number),
            icao=text_or_empty(flight.get("icao")),
            codeshared=codeshared if isinstance(codeshared, str) else None,
        ),
        aircraft=Aircraft(
            registration=text_or_empty(aircraft.get("registration")),
            iata=text_or_empty(aircraft.get("iata")),
            icao=text_or_empty(aircraft.get("icao")),
            icao24=first_present(aircraft.get("icao24")),
        ),
        live=_live(item.get("live")),
    )


def _endpoint(side: Any, fallback_name: str, with_baggage: bool) -> Endpoint:
    side = side if isinstance(side, dict) else {}
    scheduled = to_millis(side.get("scheduled"))
    estimated = first_truthy(to_millis(side.get("estimated")), scheduled)
    iata = text_or_empty(side.get("iata"))
    return Endpoint(
        airport=airport_display_name(side.get("city"), side.get("airport"), iata, fallback_name),
        iata=iata,
        icao=text_or_empty(side.get("icao")),
        timezone=text_or_empty(side.get("timezone")),
        terminal=first_present(side.get("terminal")),
        gate=first_present(side.get("gate")),
        baggage=first_present(side.get("baggage")) if with_baggage else None,
        delay=compute_delay(scheduled, estimated),
        scheduled=scheduled,
        estimated=estimated,
        actual=to_millis(side.get("actual")) or None,
    )


def _live(live: Any) -> Optional[LiveTelemetry]:
    if not isinstance(live, dict):
        return None
    return LiveTelemetry(
        latitude=_float(live.get("latitude")),
        longitude=_float(live.get("longitude")),
        direction=_float(live.get("direction")) or 0.0,
        altitude=_float(live.get("altitude")) or 0.0,
        speed_horizontal=_float(live.get("speed_horizontal")) or 0.0,
        updated=to_millis(live.get("updated")) or None,
    )


def _float(v: Any) -> Optional[float]:
    """Parse a number; blanks and NaN/infinity mean no value."""
    if v is None or v == "":
        return None
    f = float(v)
    return f if math.isfinite(f) else None
