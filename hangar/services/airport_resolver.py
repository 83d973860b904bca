"""
Airport resolution - finds or creates Airports from mixed-format code data.

Payloads may carry any subset of code/codeIata/codeIcao/name/city
(snake_case variants are accepted too). Code priority:

    explicit IATA > explicit ICAO > generic 'code' (3 letters IATA, 4 ICAO)

When only an ICAO code is known the IATA code is derived from, in order:
1. The airport info service (best-effort; failures count as "no data")
2. The static ICAO -> IATA table
3. A synthetic code: the ICAO code with its first letter replaced by 'I'
   (VOGO -> IOGO). Not guaranteed unique; marked code_source='synthetic'.

Existing rows are back-filled with values they lack; present values are
never overwritten.
"""

import logging
import re
from typing import Optional, Tuple

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker

from hangar.codes import icao_to_iata_airport
from hangar.errors import InsufficientAirportDataError
from hangar.models import Airport, CodeSource, SessionLocal
from hangar.models.airport import (
    UNKNOWN_CITY, UNKNOWN_COUNTRY, DEFAULT_TIMEZONE, placeholder_name,
)
from hangar.services.persistence import create_or_fetch, load

logger = logging.getLogger(__name__)

IATA_PATTERN = re.compile(r'^[A-Z0-9]{3}$')


def _normalize(code: Optional[str]) -> Optional[str]:
    if not code or not isinstance(code, str):
        return None
    return code.strip().upper() or None


def synthetic_iata_code(icao_code: str) -> str:
    """Fallback IATA code for an unmapped ICAO code (VOGO -> IOGO)."""
    return f'I{icao_code[1:]}'.upper()


class AirportResolver:
    """
    Idempotent, race-safe airport find-or-create.

    Args:
        session_factory: Database session factory
        airport_info: Object with get_airport_info(code) -> dict | None
                      (FlightAwareClient in production)
    """

    def __init__(self, session_factory: Optional[sessionmaker] = None, airport_info=None):
        self._session_factory = session_factory or SessionLocal
        self._airport_info = airport_info

    def resolve(self, airport_data: Optional[dict]) -> Airport:
        """Return the Airport described by the payload, creating it if needed."""
        if not airport_data:
            raise InsufficientAirportDataError('Airport data is required')

        iata_code, icao_code = self._codes_from_payload(airport_data)
        if not iata_code and not icao_code:
            raise InsufficientAirportDataError('Airport code (IATA or ICAO) is required')

        details = {
            'name': airport_data.get('name'),
            'city': airport_data.get('city'),
            'country': airport_data.get('country'),
            'timezone': airport_data.get('timezone'),
        }
        code_source = CodeSource.PROVIDED

        if not iata_code:
            iata_code, code_source, looked_up = self._derive_iata(icao_code)
            for key, value in looked_up.items():
                if not details.get(key):
                    details[key] = value

        logger.info(
            f'Finding or creating airport: resolved IATA={iata_code} ICAO={icao_code} '
            f'name={details["name"]} city={details["city"]}'
        )

        with self._session_factory() as session:
            if iata_code:
                airport = session.scalars(select(Airport).where(Airport.iata_code == iata_code)).first()
            else:
                airport = session.scalars(select(Airport).where(Airport.icao_code == icao_code)).first()

            if airport:
                logger.info(f'Found existing airport: {airport.name} ({airport.iata_code})')
                return self._backfill(session, airport, icao_code, details)

        if not iata_code:
            iata_code = synthetic_iata_code(icao_code)
            code_source = CodeSource.SYNTHETIC
            logger.warning(f'Creating synthetic IATA code for unmapped airport {icao_code}: {iata_code}')

        values = {
            'name': details['name'] or placeholder_name(iata_code),
            'city': details['city'] or UNKNOWN_CITY,
            'country': details['country'] or UNKNOWN_COUNTRY,
            'timezone': details['timezone'] or DEFAULT_TIMEZONE,
            'iata_code': iata_code,
            'icao_code': icao_code,
            'latitude': details.get('latitude'),
            'longitude': details.get('longitude'),
            'code_source': code_source,
        }
        airport, created = create_or_fetch(
            self._session_factory,
            Airport,
            values,
            conflict_keys=('iata_code', 'icao_code'),
        )
        if created:
            logger.info(f'Created new airport: {airport.name} ({airport.iata_code}, source: {airport.code_source})')
            return airport

        # Insert lost to an existing row, possibly one matched on ICAO only
        with self._session_factory() as session:
            airport = load(session, Airport, airport.id)
            return self._backfill(session, airport, icao_code, details)

    def _codes_from_payload(self, airport_data: dict) -> Tuple[Optional[str], Optional[str]]:
        iata_code = _normalize(airport_data.get('codeIata') or airport_data.get('code_iata'))
        icao_code = _normalize(airport_data.get('codeIcao') or airport_data.get('code_icao'))

        if not iata_code and not icao_code:
            code = _normalize(airport_data.get('code'))
            if code and len(code) == 3:
                iata_code = code
            elif code and len(code) == 4:
                icao_code = code

        return iata_code, icao_code

    def _derive_iata(self, icao_code: str) -> Tuple[Optional[str], str, dict]:
        """
        Derive an IATA code for an ICAO-only airport.

        Returns (iata_code or None, code_source, details from the info service).
        """
        details = {}
        info = self._lookup_airport_info(icao_code)
        if info:
            details = {
                'name': info.get('name'),
                'city': info.get('city'),
                'country': info.get('country'),
                'timezone': info.get('timezone'),
                'latitude': info.get('latitude'),
                'longitude': info.get('longitude'),
            }
            derived = _normalize(info.get('codeIata'))
            if not derived:
                # Some responses only carry the LID/IATA in 'code'
                candidate = _normalize(info.get('code'))
                if candidate and candidate != icao_code and IATA_PATTERN.match(candidate):
                    derived = candidate
            if derived:
                logger.info(f'Airport info service provided IATA code: {icao_code} -> {derived}')
                return derived, CodeSource.LOOKUP, details

        iata_code = icao_to_iata_airport(icao_code)
        if iata_code:
            logger.info(f'Reference table provided IATA code: {icao_code} -> {iata_code}')
            return iata_code, CodeSource.REFERENCE, details

        return None, CodeSource.SYNTHETIC, details

    def _lookup_airport_info(self, code: str) -> Optional[dict]:
        """Query the airport info service; any failure is downgraded to None."""
        if self._airport_info is None:
            return None
        try:
            return self._airport_info.get_airport_info(code)
        except Exception as e:
            logger.warning(f'Airport info lookup failed for {code}: {e}')
            return None

    def _backfill(self, session, airport: Airport, icao_code: Optional[str], details: dict) -> Airport:
        """Fill fields the stored airport lacks; placeholders count as missing."""
        updated = False

        if not airport.icao_code and icao_code:
            airport.icao_code = icao_code
            updated = True
        if airport.has_placeholder_name and details.get('name'):
            airport.name = details['name']
            updated = True
        if airport.has_placeholder_city and details.get('city'):
            airport.city = details['city']
            updated = True
        if airport.country in (None, UNKNOWN_COUNTRY) and details.get('country'):
            airport.country = details['country']
            updated = True
        if airport.timezone in (None, DEFAULT_TIMEZONE) and details.get('timezone'):
            airport.timezone = details['timezone']
            updated = True
        if airport.latitude is None and details.get('latitude') is not None and details.get('longitude') is not None:
            airport.latitude = details['latitude']
            airport.longitude = details['longitude']
            updated = True

        if not updated:
            return airport

        try:
            session.commit()
            logger.info(f'Updated airport data for {airport.iata_code}')
        except IntegrityError as e:
            # ICAO code already claimed by another row; keep the stored data
            session.rollback()
            logger.warning(f'Could not back-fill airport {airport.iata_code}: {e.orig}')
        return load(session, Airport, airport.id)
