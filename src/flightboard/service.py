"""Board service - one poll cycle of fetch, normalize and derive."""

import logging
from datetime import datetime, timezone
from typing import List, Optional

from flightboard.board import Instant, build_board
from flightboard.markers import MarkerReconciler
from flightboard.models import BoardResult, FlightRecord, Mode
from flightboard.sources.flightradar24 import Flightradar24Source

logger = logging.getLogger(__name__)


class BoardService:
    """Holds the latest completed snapshot of one airport's board.

    Every refresh is tagged with an increasing sequence number. A result that
    completes after a newer one has already been applied is dropped.
    """

    def __init__(self, source=None):
        self._source = source or Flightradar24Source()
        self._records: List[FlightRecord] = []
        self._mode = Mode.ARRIVALS
        self._issued = 0
        self._applied = 0
        self.last_updated: Optional[datetime] = None

    @property
    def records(self) -> List[FlightRecord]:
        return list(self._records)

    @property
    def mode(self) -> Mode:
        return self._mode

    @property
    def sequence(self) -> int:
        """Sequence number of the snapshot currently held."""
        return self._applied

    def next_sequence(self) -> int:
        self._issued += 1
        return self._issued

    def refresh(self, mode: Mode = Mode.ARRIVALS) -> List[FlightRecord]:
        """Fetch and normalize a fresh snapshot. Source errors propagate unchanged."""
        mode = Mode(mode)
        sequence = self.next_sequence()
        payload = self._source.fetch_payload(mode)
        records = self._source.parse_flights(payload, mode)
        self.accept(sequence, mode, records)
        return records

    def accept(self, sequence: int, mode: Mode, records: List[FlightRecord]) -> bool:
        """Install a completed snapshot unless a newer one is already in place."""
        if sequence < self._applied:
            logger.info("Dropping stale snapshot %d (holding %d)", sequence, self._applied)
            return False
        self._records = list(records)
        self._mode = Mode(mode)
        self._applied = sequence
        self.last_updated = datetime.now(timezone.utc)
        logger.info("Loaded %d %s (snapshot %d)", len(self._records), self._mode.value, sequence)
        return True

    def board(
        self,
        now: Instant,
        window_hours: int,
        search_term: str = "",
        mode: Optional[Mode] = None,
    ) -> BoardResult:
        """Derive the display list from the held snapshot."""
        return build_board(self._records, now, mode or self._mode, window_hours, search_term)

    def sync_markers(self, reconciler: MarkerReconciler) -> bool:
        """Push the held snapshot's live positions to a marker reconciler."""
        return reconciler.apply(self._records, sequence=self._applied)
