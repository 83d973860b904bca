"""
FlightAware AeroAPI client - the primary flight data source.

Provides:
- Flight searches by flight number, optionally scoped to a date and time
- Airport lookups by ICAO, IATA or LID code

Flight search failures raise FlightLookupError since nothing can be logged
without flight data. Airport lookups are enrichment only and degrade to None.
"""

import logging
import re
from datetime import date, datetime, time, timedelta, timezone
from typing import Optional, Union

import requests

from hangar.codes import AIRLINE_NAME_ALIASES, airline_info_by_icao
from hangar.config import config
from hangar.errors import FlightLookupError, InvalidInputError, ParseError

logger = logging.getLogger(__name__)

# Glued airline name, 2-letter or 3-letter code, each followed by digits
FLIGHT_NUMBER_PATTERNS = (
    re.compile(r'^([A-Z]+(?:AIRLINES?|AIRWAYS?)?)(\d+)$'),
    re.compile(r'^([A-Z]{2})(\d+)$'),
    re.compile(r'^([A-Z]{3})(\d+)$'),
)
FALLBACK_FLIGHT_NUMBER = re.compile(r'^[A-Z0-9]{2,7}$')

SEARCH_WINDOW = timedelta(days=2)

DateLike = Union[str, date, datetime, None]


def _to_api_timestamp(value: datetime) -> str:
    """ISO8601 in UTC without fractional seconds, as AeroAPI expects."""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value.replace(microsecond=0).isoformat() + 'Z'


def _parse_date(value: DateLike) -> Optional[date]:
    if value is None or value == '':
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.fromisoformat(str(value).strip().replace('Z', '+00:00')).date()
    except ValueError:
        raise InvalidInputError('Invalid date format')


def _parse_time(value: Union[str, time, None]) -> Optional[time]:
    if value is None or value == '':
        return None
    if isinstance(value, time):
        return value
    text = str(value).strip()
    try:
        if 'T' in text:
            return datetime.fromisoformat(text.replace('Z', '+00:00')).time()
        return time.fromisoformat(text)
    except ValueError:
        logger.warning(f'Ignoring unparseable time: {text}')
        return None


class FlightAwareClient:
    """
    Client for the FlightAware AeroAPI v4.

    Args:
        api_key: AeroAPI key (defaults to FLIGHTAWARE_API_KEY)
        base_url: API root (defaults to FLIGHTAWARE_BASE_URL)
        session: Optional requests.Session (injected in tests)
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        session: Optional[requests.Session] = None,
    ):
        self.api_key = api_key or config.flightaware.api_key
        self.base_url = (base_url or config.flightaware.base_url).rstrip('/')
        self.timeout = config.http.timeout_seconds

        self.session = session or requests.Session()
        self.session.headers.update({
            'x-apikey': self.api_key or '',
            'Accept': 'application/json',
            'User-Agent': config.http.user_agent,
        })

        if not self.api_key:
            logger.warning('FlightAware API key not configured - flight lookups disabled')

    @staticmethod
    def normalize_flight_number(flight_number: str) -> str:
        """
        Normalize user input into an IATA-style flight number.

        Examples:
        - 'Emirates 221' -> 'EK221'
        - 'ek 221'       -> 'EK221'
        - 'UAE221'       -> 'EK221'
        """
        if not flight_number or not isinstance(flight_number, str):
            raise ParseError('', 'Flight number is required')

        cleaned = re.sub(r'\s+', '', flight_number.strip().upper())

        for pattern in FLIGHT_NUMBER_PATTERNS:
            match = pattern.match(cleaned)
            if not match:
                continue
            airline, number = match.groups()
            code = AIRLINE_NAME_ALIASES.get(airline, airline)

            if len(code) == 2 and code.isalpha():
                return f'{code}{number}'
            if len(code) == 3:
                info = airline_info_by_icao(code)
                if info:
                    return f'{info.iata_code}{number}'

        if FALLBACK_FLIGHT_NUMBER.match(cleaned):
            return cleaned

        raise ParseError(
            flight_number,
            'Invalid flight number format. Please use formats like "EK221", "Emirates 221", or "AA123"',
        )

    def search_flights(self, flight_number: str, flight_date: DateLike = None, flight_time=None) -> dict:
        """
        Search flights by number.

        Without a date the window is two days either side of now. Dates
        before today are served by the history endpoint.

        Returns:
            {'searchedFlightNumber', 'flights': [payload, ...], 'totalCount', 'message'}

        Raises:
            ParseError: flight number cannot be normalized
            FlightLookupError: provider unreachable or answered with an error
        """
        normalized = self.normalize_flight_number(flight_number)
        day = _parse_date(flight_date)
        params = {'max_pages': 1}

        if day:
            start_time = _parse_time(flight_time) or time.min
            params['start'] = _to_api_timestamp(datetime.combine(day, start_time))
            params['end'] = _to_api_timestamp(datetime.combine(day, time(23, 59, 59)))
        else:
            now = datetime.now(timezone.utc)
            params['start'] = _to_api_timestamp(now - SEARCH_WINDOW)
            params['end'] = _to_api_timestamp(now + SEARCH_WINDOW)

        endpoint = f'/flights/{normalized}'
        if day and day < datetime.now(timezone.utc).date():
            endpoint = f'/history{endpoint}'

        if not self.api_key:
            raise FlightLookupError('Flight lookup service is not configured')

        logger.info(f'FlightAware request: {endpoint} {params}')
        try:
            response = self.session.get(f'{self.base_url}{endpoint}', params=params, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error(f'FlightAware request failed: {e}')
            raise FlightLookupError('Flight lookup service temporarily unavailable')

        if response.status_code != 200:
            logger.error(f'FlightAware API error {response.status_code} for {normalized}: {response.text[:200]}')
            raise self._lookup_error(response.status_code, flight_number)

        try:
            data = response.json()
        except ValueError:
            logger.error(f'FlightAware returned invalid JSON for {normalized}')
            raise FlightLookupError('Flight lookup service temporarily unavailable')

        return self.process_flight_data(data, normalized)

    @staticmethod
    def _lookup_error(status_code: int, flight_number: str) -> FlightLookupError:
        if status_code == 401:
            return FlightLookupError('FlightAware API authentication failed', 500)
        if status_code == 404:
            return FlightLookupError(f'No flights found for flight number: {flight_number}', 404)
        if status_code == 429:
            return FlightLookupError('FlightAware API rate limit exceeded. Please try again later.', 429)
        return FlightLookupError('Flight lookup service temporarily unavailable')

    def process_flight_data(self, api_response: dict, searched_flight_number: str) -> dict:
        """Normalize AeroAPI flights into the payload shape the hangar consumes."""
        flights = (api_response or {}).get('flights') or []

        if not flights:
            return {
                'searchedFlightNumber': searched_flight_number,
                'flights': [],
                'totalCount': 0,
                'message': 'No flights found for the specified criteria',
            }

        processed = [self._process_flight(flight) for flight in flights]
        return {
            'searchedFlightNumber': searched_flight_number,
            'flights': processed,
            'totalCount': len(processed),
            'message': f'Found {len(processed)} flight(s) for {searched_flight_number}',
        }

    @staticmethod
    def _process_airport(airport: Optional[dict]) -> Optional[dict]:
        if not airport:
            return None
        return {
            'code': airport.get('code'),
            'codeIcao': airport.get('code_icao'),
            'codeIata': airport.get('code_iata'),
            'name': airport.get('name'),
            'city': airport.get('city'),
            'timezone': airport.get('timezone'),
        }

    def _process_flight(self, flight: dict) -> dict:
        return {
            'faFlightId': flight.get('fa_flight_id'),
            'ident': flight.get('ident'),
            'identIcao': flight.get('ident_icao'),
            'identIata': flight.get('ident_iata'),
            'aircraft': {
                'type': flight.get('aircraft_type'),
                'registration': flight.get('registration'),
            },
            'origin': self._process_airport(flight.get('origin')),
            'destination': self._process_airport(flight.get('destination')),
            'scheduledDeparture': flight.get('scheduled_out'),
            'estimatedDeparture': flight.get('estimated_out'),
            'actualDeparture': flight.get('actual_out'),
            'scheduledArrival': flight.get('scheduled_in'),
            'estimatedArrival': flight.get('estimated_in'),
            'actualArrival': flight.get('actual_in'),
            'status': flight.get('status'),
            'progressPercent': flight.get('progress_percent'),
            'route': flight.get('route'),
            'distance': flight.get('route_distance'),
            'departureDelay': flight.get('departure_delay'),
            'arrivalDelay': flight.get('arrival_delay'),
        }

    def get_airport_info(self, airport_code: str) -> Optional[dict]:
        """
        Look up an airport by ICAO, IATA or LID code.

        Returns None when the airport is unknown or the lookup fails.
        """
        if not airport_code or not self.api_key:
            return None

        code = airport_code.strip().upper()
        logger.info(f'Looking up airport information for: {code}')

        try:
            response = self.session.get(f'{self.base_url}/airports/{code}', timeout=self.timeout)
        except requests.RequestException as e:
            logger.warning(f'Airport lookup failed for {code}: {e}')
            return None

        if response.status_code == 404:
            logger.info(f'Airport {code} not found in FlightAware database')
            return None
        if response.status_code != 200:
            logger.warning(f'Airport lookup for {code} returned {response.status_code}')
            return None

        try:
            airport = response.json()
        except ValueError:
            logger.warning(f'Airport lookup for {code} returned invalid JSON')
            return None
        if not airport:
            return None

        return {
            'code': airport.get('code') or code,
            'codeIcao': airport.get('code_icao'),
            'codeIata': airport.get('code_iata'),
            'name': airport.get('name'),
            'city': airport.get('city'),
            'country': airport.get('country_code'),
            'timezone': airport.get('timezone'),
            'latitude': airport.get('latitude'),
            'longitude': airport.get('longitude'),
        }
