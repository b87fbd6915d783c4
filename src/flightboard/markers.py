"""Live-marker reconciliation for the map view.

One ``MarkerReconciler`` lives as long as its map widget. It owns the table of
flight id -> marker handle and is the only writer of it. Each snapshot upserts
handles for flights with a live position and removes every other handle, so
after ``apply`` the handle ids equal the snapshot's live flight ids.
"""

import logging
import math
from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, Optional, Protocol, Set

from flightboard.models import FlightRecord

logger = logging.getLogger(__name__)

# The plane icon's nose points 45 degrees clockwise from north.
ICON_ROTATION_OFFSET = 45.0


@dataclass(frozen=True)
class MarkerContent:
    """Popup text shown for a marker."""

    title: str
    airline: str
    origin: str
    altitude_m: int
    speed_kmh: int


@dataclass
class MarkerHandle:
    """Persistent position indicator for one flight across polls."""

    flight_id: str
    latitude: float
    longitude: float
    rotation: float
    content: MarkerContent


class MapSurface(Protocol):
    """Map widget the handles are drawn on."""

    def add(self, handle: MarkerHandle) -> None:
        ...

    def update(self, handle: MarkerHandle) -> None:
        ...

    def remove(self, handle: MarkerHandle) -> None:
        ...


def marker_content(record: FlightRecord) -> MarkerContent:
    live = record.live
    return MarkerContent(
        title=record.key,
        airline=record.airline.name,
        origin=record.departure.airport or record.departure.iata,
        altitude_m=int(round(_finite(live.altitude))),
        speed_kmh=int(round(_finite(live.speed_horizontal))),
    )


def marker_rotation(direction: Optional[float]) -> float:
    return _finite(direction) - ICON_ROTATION_OFFSET


def _finite(value: Optional[float]) -> float:
    """Missing or non-finite readings count as 0."""
    if value is None or not math.isfinite(value):
        return 0.0
    return value


class MarkerReconciler:
    """Keeps one marker handle per flight that currently has a live position."""

    def __init__(self, surface: Optional[MapSurface] = None):
        self._surface = surface
        self._handles: Dict[str, MarkerHandle] = {}
        self._last_sequence: Optional[int] = None

    def __len__(self) -> int:
        return len(self._handles)

    def __contains__(self, flight_id: str) -> bool:
        return flight_id in self._handles

    def __iter__(self) -> Iterator[MarkerHandle]:
        return iter(list(self._handles.values()))

    @property
    def ids(self) -> Set[str]:
        return set(self._handles)

    def get(self, flight_id: str) -> Optional[MarkerHandle]:
        return self._handles.get(flight_id)

    def apply(self, records: Iterable[FlightRecord], sequence: Optional[int] = None) -> bool:
        """Reconcile handles against a snapshot.

        Snapshots tagged with a ``sequence`` older than the last applied one are
        ignored and False is returned.
        """
        if sequence is not None:
            if self._last_sequence is not None and sequence < self._last_sequence:
                logger.debug(
                    "Ignoring stale snapshot %d (last applied %d)", sequence, self._last_sequence
                )
                return False
            self._last_sequence = sequence

        active: Dict[str, FlightRecord] = {}
        for record in records:
            if record.live is not None and record.live.has_position:
                active[record.key] = record

        for flight_id, record in active.items():
            self._upsert(flight_id, record)

        for flight_id in [i for i in self._handles if i not in active]:
            self._release(flight_id)

        logger.debug("Markers reconciled: %d live", len(self._handles))
        return True

    def clear(self) -> None:
        """Remove every handle; the reconciler stays usable for later snapshots."""
        for flight_id in list(self._handles):
            self._release(flight_id)

    def _upsert(self, flight_id: str, record: FlightRecord) -> None:
        live = record.live
        rotation = marker_rotation(live.direction)
        content = marker_content(record)
        handle = self._handles.get(flight_id)
        if handle is None:
            handle = MarkerHandle(
                flight_id=flight_id,
                latitude=live.latitude,
                longitude=live.longitude,
                rotation=rotation,
                content=content,
            )
            self._handles[flight_id] = handle
            if self._surface is not None:
                self._surface.add(handle)
            return

        changed = (
            handle.latitude != live.latitude
            or handle.longitude != live.longitude
            or handle.rotation != rotation
            or handle.content != content
        )
        if not changed:
            return
        handle.latitude = live.latitude
        handle.longitude = live.longitude
        handle.rotation = rotation
        handle.content = content
        if self._surface is not None:
            self._surface.update(handle)

    def _release(self, flight_id: str) -> None:
        handle = self._handles.pop(flight_id)
        if self._surface is not None:
            self._surface.remove(handle)
