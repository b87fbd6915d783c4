"""Shared interface and field resolvers for provider adapters."""

import logging
import math
from datetime import datetime, timezone
from typing import Any, List, Optional, Protocol, runtime_checkable

import requests

from flightboard.errors import MalformedResponse, ProviderError, TransportError
from flightboard.models import FlightRecord, FlightStatus, Mode

logger = logging.getLogger(__name__)

UNKNOWN_ORIGIN = "Unknown Origin"
UNKNOWN_DESTINATION = "Unknown Destination"

# 9999-12-31T23:59:59Z, the last instant datetime can represent
MAX_EPOCH_SECONDS = 253_402_300_799

# First match wins; providers combine tokens such as "estimated, delayed".
_STATUS_TOKENS = [
    (("landed",), FlightStatus.LANDED),
    (("cancelled",), FlightStatus.CANCELLED),
    (("diverted",), FlightStatus.DIVERTED),
    (("estimated", "delayed", "active", "departed"), FlightStatus.ACTIVE),
    (("boarding",), FlightStatus.BOARDING),
    (("on ground",), FlightStatus.ON_GROUND),
]


@runtime_checkable
class FlightSource(Protocol):
    """Protocol for pluggable provider sources."""

    def fetch_payload(self, mode: Mode) -> Any:
        """Fetch the raw JSON payload for the configured airport and mode."""
        ...

    def parse_flights(self, payload: Any, mode: Mode) -> List[FlightRecord]:
        """Normalize a raw payload into canonical records."""
        ...


def dig(d: Any, *path: str) -> Any:
    """Walk nested dicts, returning None as soon as a level is missing."""
    for key in path:
        if not isinstance(d, dict):
            return None
        d = d.get(key)
    return d


def first_present(*candidates: Any) -> Optional[str]:
    """Return the first candidate that is a non-blank value, stripped, as str."""
    for v in candidates:
        if v is None or isinstance(v, (dict, list)):
            continue
        s = str(v).strip()
        if s:
            return s
    return None


def text_or_empty(*candidates: Any) -> str:
    return first_present(*candidates) or ""


def first_truthy(*candidates: Any) -> Any:
    """Return the first truthy candidate, or the last one if none are truthy."""
    value = None
    for value in candidates:
        if value:
            return value
    return value


def airport_display_name(city: Any, name: Any, iata: Any, fallback: str) -> str:
    """City/region name, then airport name, then IATA code, then a literal placeholder."""
    return first_present(city, name, iata) or fallback


def parse_status(text: Optional[str]) -> FlightStatus:
    """Map a free-text provider status onto FlightStatus by substring tokens."""
    s = (text or "").lower()
    for tokens, status in _STATUS_TOKENS:
        if any(t in s for t in tokens):
            return status
    return FlightStatus.SCHEDULED


def to_millis(value: Any) -> int:
    """Convert epoch seconds (number or numeric string) or an ISO-8601 string to epoch ms.

    Missing values become 0, which downstream code treats as unknown. Numbers that
    are not finite or fall outside 1970..9999 raise ValueError.
    """
    if value is None or value == "" or isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        return _seconds_to_millis(value)
    s = str(value).strip()
    try:
        seconds = float(s)
    except ValueError:
        pass
    else:
        return _seconds_to_millis(seconds)
    try:
        dt = datetime.fromisoformat(s.replace("Z", "+00:00"))
    except ValueError:
        logger.debug("Unparseable timestamp %r treated as unknown", value)
        return 0
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return int(round(dt.timestamp() * 1000))


def _seconds_to_millis(seconds: float) -> int:
    if not math.isfinite(seconds) or not 0 <= seconds <= MAX_EPOCH_SECONDS:
        raise ValueError(f"timestamp {seconds!r} out of range")
    return int(round(seconds * 1000))


def compute_delay(scheduled: int, estimated: int) -> Optional[int]:
    """Minutes late, rounded half up; None unless estimated is strictly after scheduled."""
    if not scheduled or not estimated or estimated <= scheduled:
        return None
    return int((estimated - scheduled + 30_000) // 60_000)


def flight_date_from(*instants: int) -> str:
    """ISO calendar date (UTC) of the first known instant, or empty string."""
    for ms in instants:
        if ms:
            return datetime.fromtimestamp(ms / 1000, tz=timezone.utc).date().isoformat()
    return ""


def raise_for_provider_error(payload: Any) -> None:
    """Raise ProviderError when the payload carries an explicit error envelope."""
    if not isinstance(payload, dict):
        return
    err = payload.get("error") or payload.get("errors")
    if not err:
        return
    if isinstance(err, dict):
        code = first_present(err.get("code"), err.get("type"))
        message = first_present(err.get("message"), err.get("info"), code) or "Unknown error"
    else:
        code = None
        message = str(err)
    logger.error("Provider error %s: %s", code or "-", message)
    raise ProviderError(message, code=code)


def get_json(url: str, params: dict, timeout: int, headers: Optional[dict] = None) -> Any:
    """GET a JSON document, wrapping transport failures in TransportError."""
    logger.debug("GET %s params=%s", url, {k: v for k, v in params.items() if "key" not in k})
    try:
        resp = requests.get(url, params=params, headers=headers, timeout=timeout)
        resp.raise_for_status()
    except requests.HTTPError as exc:
        status = exc.response.status_code if exc.response is not None else None
        raise TransportError(f"Network error: HTTP {status} from {url}", status_code=status) from exc
    except requests.RequestException as exc:
        raise TransportError(f"Network error: {exc}") from exc
    try:
        return resp.json()
    except ValueError as exc:
        raise MalformedResponse(f"Response from {url} is not valid JSON") from exc
