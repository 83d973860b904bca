"""
Error taxonomy for the flight logging pipeline.

Every error raised on purpose by the pipeline derives from HangarError and
carries the HTTP status the API layer answers with. Messages are safe to show
to end users; provider error bodies never end up in them.
"""

from datetime import datetime
from typing import Optional


class HangarError(Exception):
    """Base class for user-facing pipeline errors."""
    status_code = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self) -> dict:
        return {'error': self.message}


class ParseError(HangarError):
    """A flight identifier or flight number could not be parsed."""
    status_code = 400

    def __init__(self, ident: str, message: Optional[str] = None):
        super().__init__(message or f'Invalid flight identifier format: {ident}')
        self.ident = ident


class UnparseableIdentError(ParseError):
    """The ident of an inbound flight payload matches no known pattern."""

    def __init__(self, ident: str):
        super().__init__(
            ident,
            f'Unable to identify airline from flight number "{ident}". '
            'Use formats like "EK221", "EK 221" or "Emirates 221".',
        )


class InsufficientDataError(HangarError):
    """Upstream data lacks the fields needed to resolve an entity."""
    status_code = 400


class InsufficientAircraftDataError(InsufficientDataError):
    def __init__(self, message: str = 'Insufficient aircraft information provided by the flight data source.'):
        super().__init__(message)


class InsufficientAirportDataError(InsufficientDataError):
    def __init__(self, message: str = 'Insufficient airport information provided by the flight data source.'):
        super().__init__(message)


class InvalidInputError(HangarError):
    """Malformed user input (seat, notes, timestamps)."""
    status_code = 400


class NotFoundError(HangarError):
    status_code = 404


class DuplicateFlightError(HangarError):
    """The user already logged this flight on the same calendar day."""
    status_code = 409

    def __init__(self, ident: str, flight_date: datetime):
        super().__init__(
            f'Flight {ident} on {flight_date.strftime("%a %b %d %Y")} is already in your hangar'
        )
        self.ident = ident
        self.flight_date = flight_date


class EntityCreationRaceError(HangarError):
    """
    An insert hit a unique constraint but the conflicting row could not be
    re-fetched. Internal only; the API answers with a generic message.
    """
    status_code = 500

    def __init__(self, entity: str, keys: dict):
        super().__init__(f'Could not create or fetch {entity} for {keys}')
        self.entity = entity
        self.keys = keys

    def to_dict(self) -> dict:
        return {'error': 'Failed to add flight to hangar. Please try again.'}


class FlightLookupError(HangarError):
    """The primary flight data provider failed; cannot be degraded."""
    status_code = 503


class UnauthorizedError(HangarError):
    """No authenticated user on the request."""
    status_code = 401

    def __init__(self, message: str = 'Authentication required'):
        super().__init__(message)
