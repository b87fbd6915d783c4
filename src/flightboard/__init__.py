"""Airport arrivals/departures board package."""

from flightboard.board import build_board, derive_board
from flightboard.errors import FlightBoardError, MalformedResponse, ProviderError, TransportError
from flightboard.markers import MarkerHandle, MarkerReconciler
from flightboard.models import (
    Aircraft,
    Airline,
    BoardResult,
    Endpoint,
    FlightIdentifier,
    FlightRecord,
    FlightStatus,
    LiveTelemetry,
    Mode,
)
from flightboard.normalize import Provider, normalize
from flightboard.service import BoardService

__all__ = [
    "Aircraft",
    "Airline",
    "BoardResult",
    "BoardService",
    "Endpoint",
    "FlightBoardError",
    "FlightIdentifier",
    "FlightRecord",
    "FlightStatus",
    "LiveTelemetry",
    "MalformedResponse",
    "MarkerHandle",
    "MarkerReconciler",
    "Mode",
    "Provider",
    "ProviderError",
    "TransportError",
    "build_board",
    "derive_board",
    "normalize",
]
