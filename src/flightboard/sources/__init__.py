"""Pluggable provider sources."""

from flightboard.sources.aviationstack import AviationstackSource
from flightboard.sources.base import FlightSource
from flightboard.sources.flightradar24 import Flightradar24Source

__all__ = ["AviationstackSource", "FlightSource", "Flightradar24Source"]
