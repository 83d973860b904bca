"""
Flight assembly - turns an external flight payload into a logged Flight.

Pipeline for create_flight():
1. Parse the ident into airline code + flight number
2. Resolve the airline
3. Resolve the aircraft (with the airline as operator)
4. Resolve origin and destination airports in parallel
5. Normalize the time fields that are present
6. Derive the flight date (scheduled > estimated > actual departure > now)
7. Reject a flight already logged by the user on the same UTC day
8. Persist with the raw payload kept for audit

Steps 2-4 commit as they go. A failure later leaves those entities in place;
they are reused on retry.
"""

import logging
import re
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timedelta, timezone
from typing import Optional, List, Tuple

from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker

from hangar.errors import (
    InsufficientDataError,
    InsufficientAirportDataError,
    InvalidInputError,
    DuplicateFlightError,
    NotFoundError,
    ParseError,
    UnparseableIdentError,
)
from hangar.models import Flight, SessionLocal, utcnow
from hangar.models.base import get_session, isoformat
from hangar.services.aircraft_resolver import AircraftResolver
from hangar.services.airline_resolver import AirlineResolver
from hangar.services.airport_resolver import AirportResolver
from hangar.services.ident_parser import parse_flight_ident
from hangar.services.persistence import load

logger = logging.getLogger(__name__)

SEAT_PATTERN = re.compile(r'^[0-9]{1,3}[A-Z]?$')
MAX_NOTES_LENGTH = 1000

# (group, payload departure key, payload arrival key)
TIME_FIELDS = (
    ('scheduled', 'scheduledDeparture', 'scheduledArrival'),
    ('estimated', 'estimatedDeparture', 'estimatedArrival'),
    ('actual', 'actualDeparture', 'actualArrival'),
)

_UNSET = object()


def parse_timestamp(value) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp into naive UTC. Naive input is taken as UTC."""
    if value is None or value == '':
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            parsed = datetime.fromisoformat(str(value).strip().replace('Z', '+00:00'))
        except ValueError:
            raise InvalidInputError(f'Invalid timestamp: {value}')
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def normalize_times(payload: dict) -> dict:
    """
    Group departure/arrival times by kind.

    Only fields present in the payload appear in the result; a group with
    no fields is omitted entirely.
    """
    times = {}
    for group, departure_key, arrival_key in TIME_FIELDS:
        entry = {}
        departure = parse_timestamp(payload.get(departure_key))
        arrival = parse_timestamp(payload.get(arrival_key))
        if departure:
            entry['departure'] = isoformat(departure)
        if arrival:
            entry['arrival'] = isoformat(arrival)
        if entry:
            times[group] = entry
    return times


def flight_date_from_payload(payload: dict) -> datetime:
    """First available departure time; the current time if none is given."""
    for _, departure_key, _ in TIME_FIELDS:
        departure = parse_timestamp(payload.get(departure_key))
        if departure:
            return departure

    logger.warning(f'No departure time in payload for {payload.get("ident")}, using current time as flight date')
    return utcnow()


def day_bounds(value: datetime) -> Tuple[datetime, datetime]:
    start = value.replace(hour=0, minute=0, second=0, microsecond=0)
    return start, start + timedelta(days=1)


def summarize(flight: Flight) -> dict:
    """Short description returned to the client after logging a flight."""
    return {
        'flightNumber': flight.display_flight_number,
        'route': flight.route,
        'aircraft': flight.aircraft.display_name if flight.aircraft else None,
        'date': isoformat(flight.date),
        'seat': flight.seat,
        'notes': flight.notes,
    }


def validate_seat(seat) -> Optional[str]:
    if seat is None:
        return None
    if not isinstance(seat, str):
        raise InvalidInputError('Seat must be a string')
    normalized = seat.strip().upper()
    if not normalized:
        return None
    if not SEAT_PATTERN.match(normalized):
        raise InvalidInputError('Seat must look like "12A" (1-3 digits and an optional letter)')
    return normalized


def validate_notes(notes) -> Optional[str]:
    if notes is None:
        return None
    if not isinstance(notes, str):
        raise InvalidInputError('Notes must be a string')
    notes = notes.strip()
    if len(notes) > MAX_NOTES_LENGTH:
        raise InvalidInputError(f'Notes must be at most {MAX_NOTES_LENGTH} characters')
    return notes or None


class FlightService:
    """
    Creates and manages flights in a user's hangar.

    Resolvers are injected so tests can swap their collaborators
    (airport info, image search, executor).
    """

    def __init__(
        self,
        session_factory: Optional[sessionmaker] = None,
        airline_resolver: Optional[AirlineResolver] = None,
        airport_resolver: Optional[AirportResolver] = None,
        aircraft_resolver: Optional[AircraftResolver] = None,
    ):
        self._session_factory = session_factory or SessionLocal
        self.airlines = airline_resolver or AirlineResolver(self._session_factory)
        self.airports = airport_resolver or AirportResolver(self._session_factory)
        self.aircraft = aircraft_resolver or AircraftResolver(self._session_factory)

    def create_flight(
        self,
        user_id: str,
        payload: dict,
        seat: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> Flight:
        """
        Log a flight from an external payload.

        Raises:
            UnparseableIdentError: ident matches no known pattern
            InsufficientAircraftDataError / InsufficientAirportDataError
            InvalidInputError: bad seat, notes or timestamp
            DuplicateFlightError: same flight already logged that day
        """
        if not user_id:
            raise InvalidInputError('User id is required')
        if not payload or not isinstance(payload, dict) or not payload.get('ident'):
            raise InsufficientDataError('Flight data with an ident is required')

        seat = validate_seat(seat)
        notes = validate_notes(notes)

        ident = payload['ident']
        try:
            parsed = parse_flight_ident(ident)
        except ParseError:
            raise UnparseableIdentError(ident)

        airline = self.airlines.resolve(parsed.airline_code)
        aircraft = self.aircraft.resolve(payload.get('aircraft'), airline)
        origin, destination = self._resolve_airports(payload)

        times = normalize_times(payload)
        flight_date = flight_date_from_payload(payload)
        display_ident = f'{airline.iata_code}{parsed.flight_number}'

        logger.info(
            f'Creating flight {display_ident} for user {user_id}: '
            f'{origin.iata_code} -> {destination.iata_code} on {flight_date.date()}'
        )

        with self._session_factory() as session:
            existing = self._find_duplicate(session, user_id, airline.id, parsed.flight_number, flight_date)
            if existing:
                logger.info(f'Duplicate flight {display_ident} on {existing.date.date()} for user {user_id}')
                raise DuplicateFlightError(display_ident, existing.date)

            flight = Flight(
                user_id=user_id,
                flight_number=parsed.flight_number,
                airline_id=airline.id,
                origin_airport_id=origin.id,
                destination_airport_id=destination.id,
                aircraft_id=aircraft.id,
                date=flight_date,
                flight_day=flight_date.date(),
                times=times,
                seat=seat,
                notes=notes,
                raw_source_data=payload,
            )
            session.add(flight)
            try:
                session.commit()
            except IntegrityError:
                # Lost a race against a concurrent submission of the same flight
                session.rollback()
                logger.info(f'Duplicate flight {display_ident} detected on insert for user {user_id}')
                raise DuplicateFlightError(display_ident, flight_date)

            flight = load(session, Flight, flight.id)

        logger.info(f'Flight {display_ident} added to hangar of user {user_id} (id={flight.id})')
        return flight

    def _resolve_airports(self, payload: dict):
        origin_data = payload.get('origin')
        destination_data = payload.get('destination')
        if not origin_data:
            raise InsufficientAirportDataError('Origin airport information is missing from the flight data.')
        if not destination_data:
            raise InsufficientAirportDataError('Destination airport information is missing from the flight data.')

        with ThreadPoolExecutor(max_workers=2, thread_name_prefix='airport-resolve') as executor:
            origin_future = executor.submit(self.airports.resolve, origin_data)
            destination_future = executor.submit(self.airports.resolve, destination_data)
            return origin_future.result(), destination_future.result()

    @staticmethod
    def _find_duplicate(session, user_id: str, airline_id: int, flight_number: str, flight_date: datetime) -> Optional[Flight]:
        start, end = day_bounds(flight_date)
        stmt = select(Flight).where(
            Flight.user_id == user_id,
            Flight.airline_id == airline_id,
            Flight.flight_number == flight_number,
            Flight.date >= start,
            Flight.date < end,
        )
        return session.scalars(stmt).first()

    # -------------------------------------------------------------------------
    # Hangar operations
    # -------------------------------------------------------------------------

    def list_hangar(self, user_id: str) -> Tuple[List[Flight], dict]:
        """All flights of a user, newest first, with summary stats."""
        with self._session_factory() as session:
            stmt = (
                select(Flight)
                .where(Flight.user_id == user_id)
                .order_by(Flight.date.desc(), Flight.id.desc())
            )
            flights = list(session.scalars(stmt).unique())

        airports = set()
        for flight in flights:
            airports.add(flight.origin_airport_id)
            airports.add(flight.destination_airport_id)

        stats = {
            'totalFlights': len(flights),
            'uniqueAircraft': len({flight.aircraft_id for flight in flights}),
            'uniqueAirlines': len({flight.airline_id for flight in flights}),
            'uniqueAirports': len(airports),
        }
        return flights, stats

    def get_flight(self, user_id: str, flight_id: int, include_raw: bool = False) -> Flight:
        with self._session_factory() as session:
            flight = self._owned_flight(session, user_id, flight_id)
            if include_raw:
                # Deferred column; load it before the session closes
                _ = flight.raw_source_data
            return flight

    def update_flight(self, user_id: str, flight_id: int, seat=_UNSET, notes=_UNSET) -> Flight:
        """Edit seat and/or notes; all other fields are fixed once logged."""
        with self._session_factory() as session:
            flight = self._owned_flight(session, user_id, flight_id)
            if seat is not _UNSET:
                flight.seat = validate_seat(seat)
            if notes is not _UNSET:
                flight.notes = validate_notes(notes)
            session.commit()
            logger.info(f'Updated flight {flight_id} for user {user_id}')
            return load(session, Flight, flight_id)

    def delete_flight(self, user_id: str, flight_id: int) -> None:
        with get_session(self._session_factory) as session:
            flight = self._owned_flight(session, user_id, flight_id)
            session.delete(flight)
        logger.info(f'Deleted flight {flight_id} for user {user_id}')

    @staticmethod
    def _owned_flight(session, user_id: str, flight_id: int) -> Flight:
        flight = session.scalars(
            select(Flight).where(Flight.id == flight_id, Flight.user_id == user_id)
        ).first()
        if flight is None:
            raise NotFoundError('Flight not found')
        return flight

    def count_flights_for_aircraft(self, aircraft_id: int) -> int:
        with self._session_factory() as session:
            return session.scalar(select(func.count(Flight.id)).where(Flight.aircraft_id == aircraft_id))
