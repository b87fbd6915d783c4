"""Summary counters for a derived board."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List

import pandas as pd

from flightboard.models import FlightRecord, Mode, millis_to_datetime


@dataclass
class BoardStats:
    """Counts over the flights currently on the board.

    ``by_hour`` is keyed by the UTC start of the hour holding each flight's
    reference time, so buckets stay ordered across midnight.
    """

    total_flights: int = 0
    delayed: int = 0
    by_airline: Dict[str, int] = field(default_factory=dict)
    by_status: Dict[str, int] = field(default_factory=dict)
    by_hour: Dict[datetime, int] = field(default_factory=dict)

    def airline_table(self) -> pd.DataFrame:
        """Flights per airline, busiest first."""
        table = pd.DataFrame(list(self.by_airline.items()), columns=["airline", "flights"])
        return table.sort_values(
            ["flights", "airline"], ascending=[False, True], ignore_index=True
        )

    def hourly_table(self) -> pd.DataFrame:
        """Flights per hour from the first to the last busy hour, quiet hours as 0."""
        if not self.by_hour:
            return pd.DataFrame(columns=["hour", "flights"])
        counts = pd.Series(self.by_hour)
        hours = pd.date_range(counts.index.min(), counts.index.max(), freq=pd.Timedelta(hours=1))
        counts = counts.reindex(hours, fill_value=0)
        return pd.DataFrame(
            {"hour": counts.index.strftime("%H:00"), "flights": counts.to_numpy()}
        )


def compute_stats(flights: List[FlightRecord], mode: Mode = Mode.ARRIVALS) -> BoardStats:
    """Compute statistics from a list of flights, seen from the ``mode`` side."""
    stats = BoardStats()

    if not flights:
        return stats

    stats.total_flights = len(flights)

    for f in flights:
        if f.airline.name:
            stats.by_airline[f.airline.name] = stats.by_airline.get(f.airline.name, 0) + 1

        status = f.status.value
        stats.by_status[status] = stats.by_status.get(status, 0) + 1

        when = millis_to_datetime(f.reference_time(mode))
        if when:
            hour = when.replace(minute=0, second=0, microsecond=0)
            stats.by_hour[hour] = stats.by_hour.get(hour, 0) + 1

        if f.endpoint_for(mode).delay:
            stats.delayed += 1

    return stats
