"""Errors raised while ingesting provider payloads."""

from typing import Optional


class FlightBoardError(Exception):
    """Base class for ingestion failures. None of them are retried internally."""


class TransportError(FlightBoardError):
    """Network failure or non-2xx response from the provider."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ProviderError(FlightBoardError):
    """The provider answered with an explicit error object."""

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.code = code


class MalformedResponse(FlightBoardError):
    """The payload does not contain the expected flight array."""
