"""Provider-tagged entry point for normalizing raw payloads."""

from enum import Enum
from typing import Any, List, Optional

from flightboard.models import FlightRecord, Mode
from flightboard.sources import aviationstack, flightradar24


class Provider(str, Enum):
    FLIGHTRADAR24 = "flightradar24"
    AVIATIONSTACK = "aviationstack"


def normalize(
    provider: Provider, payload: Any, mode: Mode, home_airport: Optional[str] = None
) -> List[FlightRecord]:
    """Normalize ``payload`` from ``provider`` into canonical records.

    Raises ProviderError for an error envelope and MalformedResponse when the
    flight list is missing. ``home_airport`` fills in the viewed airport's code
    on schedule feeds that omit it.
    """
    provider = Provider(provider)
    if provider is Provider.FLIGHTRADAR24:
        return flightradar24.parse_schedule(payload, mode, home_airport=home_airport)
    return aviationstack.parse_flights(payload, mode)
