"""Canonical flight records shared by every provider adapter."""

import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

DELAY_LABEL_THRESHOLD = 15


class Mode(str, Enum):
    """Which side of the airport board is being viewed."""

    ARRIVALS = "arrivals"
    DEPARTURES = "departures"


class FlightStatus(str, Enum):
    SCHEDULED = "scheduled"
    ACTIVE = "active"
    LANDED = "landed"
    CANCELLED = "cancelled"
    DIVERTED = "diverted"
    BOARDING = "boarding"
    ON_GROUND = "on_ground"


_STATUS_LABELS = {
    FlightStatus.SCHEDULED: "On Time",
    FlightStatus.ACTIVE: "In Air",
    FlightStatus.LANDED: "Landed",
    FlightStatus.CANCELLED: "Cancelled",
    FlightStatus.DIVERTED: "Diverted",
    FlightStatus.BOARDING: "Boarding",
    FlightStatus.ON_GROUND: "On Ground",
}


def millis_to_datetime(value: Optional[int]) -> Optional[datetime]:
    """Convert an epoch-millisecond instant to an aware UTC datetime (0/None -> None)."""
    if not value:
        return None
    return datetime.fromtimestamp(value / 1000, tz=timezone.utc)


@dataclass(frozen=True)
class Endpoint:
    """Departure- or arrival-side details of a flight.

    Instants are epoch milliseconds; ``0`` means the provider did not supply one.
    """

    airport: str
    iata: str = ""
    icao: str = ""
    timezone: str = ""
    terminal: Optional[str] = None
    gate: Optional[str] = None
    baggage: Optional[str] = None
    delay: Optional[int] = None
    scheduled: int = 0
    estimated: int = 0
    actual: Optional[int] = None

    @property
    def reference_time(self) -> Optional[int]:
        """Estimated time if known, else scheduled; None when neither is usable."""
        return self.estimated or self.scheduled or None

    @property
    def scheduled_at(self) -> Optional[datetime]:
        return millis_to_datetime(self.scheduled)

    @property
    def estimated_at(self) -> Optional[datetime]:
        return millis_to_datetime(self.estimated)

    @property
    def actual_at(self) -> Optional[datetime]:
        return millis_to_datetime(self.actual)


@dataclass(frozen=True)
class Airline:
    name: str
    iata: str = ""
    icao: str = ""


@dataclass(frozen=True)
class FlightIdentifier:
    number: str
    iata: str = ""
    icao: str = ""
    codeshared: Optional[str] = None

    @property
    def key(self) -> str:
        """Stable key for the flight: IATA code, else the raw number."""
        return self.iata or self.number


@dataclass(frozen=True)
class Aircraft:
    registration: str = ""
    iata: str = ""
    icao: str = ""
    icao24: Optional[str] = None

    @property
    def model(self) -> str:
        return self.iata or self.icao


@dataclass(frozen=True)
class LiveTelemetry:
    """Real-time position of an airborne aircraft."""

    latitude: Optional[float]
    longitude: Optional[float]
    direction: float = 0.0
    altitude: float = 0.0
    speed_horizontal: float = 0.0
    updated: Optional[int] = None

    @property
    def has_position(self) -> bool:
        return all(
            v is not None and math.isfinite(v) for v in (self.latitude, self.longitude)
        )


@dataclass(frozen=True)
class FlightRecord:
    """Normalized, provider-agnostic flight movement."""

    flight_date: str
    status: FlightStatus
    departure: Endpoint
    arrival: Endpoint
    airline: Airline
    flight: FlightIdentifier
    aircraft: Aircraft = field(default_factory=Aircraft)
    live: Optional[LiveTelemetry] = None

    @property
    def key(self) -> str:
        return self.flight.key

    def endpoint_for(self, mode: Mode) -> Endpoint:
        """Endpoint at the viewed airport: arrival side for arrivals, departure side otherwise."""
        return self.arrival if Mode(mode) is Mode.ARRIVALS else self.departure

    def counterpart_for(self, mode: Mode) -> Endpoint:
        """The other end of the trip: origin for arrivals, destination for departures."""
        return self.departure if Mode(mode) is Mode.ARRIVALS else self.arrival

    def reference_time(self, mode: Mode) -> Optional[int]:
        return self.endpoint_for(mode).reference_time

    def status_label(self, mode: Mode = Mode.ARRIVALS) -> str:
        """Short board label; long delays override everything but cancelled/landed."""
        delay = self.endpoint_for(mode).delay
        if (
            delay
            and delay > DELAY_LABEL_THRESHOLD
            and self.status not in (FlightStatus.CANCELLED, FlightStatus.LANDED)
        ):
            return f"Delayed (+{delay}m)"
        return _STATUS_LABELS[self.status]


BOARD_COLUMNS = ["time", "flight", "airport", "airline", "aircraft", "status", "delay"]


@dataclass
class BoardResult:
    """Derived, display-ready list of flights plus the parameters that produced it."""

    flights: List[FlightRecord] = field(default_factory=list)
    mode: Mode = Mode.ARRIVALS
    window_hours: int = 1
    search_term: str = ""

    def __len__(self) -> int:
        return len(self.flights)

    def to_dataframe(self):
        """Convert to pandas DataFrame."""
        import pandas as pd

        if not self.flights:
            return pd.DataFrame(columns=BOARD_COLUMNS)
        return pd.DataFrame(
            [
                {
                    "time": millis_to_datetime(f.reference_time(self.mode)),
                    "flight": f.key,
                    "airport": f.counterpart_for(self.mode).airport,
                    "airline": f.airline.name,
                    "aircraft": f.aircraft.model or "-",
                    "status": f.status_label(self.mode),
                    "delay": f.endpoint_for(self.mode).delay,
                }
                for f in self.flights
            ],
            columns=BOARD_COLUMNS,
        )
