"""
Airline resolution - finds or creates the Airline behind a flight ident.

Resolution order for a code:
1. Stored airline with that IATA code
2. Stored airline with that ICAO code
3. Reference table by IATA code
4. Reference table by ICAO code (reverse lookup)
5. Synthetic entry named 'Airline <code>'

Unmapped 3-letter codes are stored as IATA codes even though IATA airline
codes are normally 2 letters; codes of 4+ letters are stored as ICAO with
the first two letters guessed as IATA.
"""

import logging
from typing import Optional

from sqlalchemy import select, or_, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker

from hangar.codes import airline_info, airline_info_by_icao
from hangar.errors import InsufficientDataError
from hangar.models import Airline, CodeSource, SessionLocal
from hangar.services.persistence import create_or_fetch

logger = logging.getLogger(__name__)


class AirlineResolver:
    """Idempotent, race-safe airline find-or-create."""

    def __init__(self, session_factory: Optional[sessionmaker] = None):
        self._session_factory = session_factory or SessionLocal

    def resolve(self, airline_code: str) -> Airline:
        """Return the Airline for an IATA or ICAO code, creating it if needed."""
        if not airline_code or not airline_code.strip():
            raise InsufficientDataError('Airline code is required')

        code = airline_code.strip().upper()
        logger.info(f'Finding or creating airline: {code}')

        with self._session_factory() as session:
            airline = session.scalars(select(Airline).where(Airline.iata_code == code)).first()
            if airline:
                logger.info(f'Found existing airline by IATA: {airline.name} ({airline.iata_code})')
                return self._backfill(session, airline)

            airline = session.scalars(select(Airline).where(Airline.icao_code == code)).first()
            if airline:
                logger.info(f'Found existing airline by ICAO: {airline.name} ({airline.icao_code})')
                return airline

        values = self._creation_values(code)
        airline, created = create_or_fetch(
            self._session_factory,
            Airline,
            values,
            conflict_keys=('iata_code', 'icao_code'),
        )
        if created:
            logger.info(
                f'Created new airline: {airline.name} '
                f'(IATA: {airline.iata_code}, ICAO: {airline.icao_code}, source: {airline.code_source})'
            )
        return airline

    def _creation_values(self, code: str) -> dict:
        info = airline_info(code)
        if info:
            logger.info(f'Found airline in IATA mapping: {code} -> {info.name}')
            return {
                'name': info.name,
                'iata_code': info.iata_code,
                'icao_code': info.icao_code,
                'code_source': CodeSource.REFERENCE,
            }

        info = airline_info_by_icao(code)
        if info:
            logger.info(f'Found airline in ICAO reverse lookup: {code} -> {info.iata_code} ({info.name})')
            return {
                'name': info.name,
                'iata_code': info.iata_code,
                'icao_code': info.icao_code,
                'code_source': CodeSource.REFERENCE,
            }

        logger.warning(f'No mapping found for airline code: {code}. Creating generic entry.')
        if len(code) <= 3:
            iata_code, icao_code = code, None
        else:
            iata_code, icao_code = code[:2], code

        return {
            'name': f'Airline {code}',
            'iata_code': iata_code,
            'icao_code': icao_code,
            'code_source': CodeSource.SYNTHETIC,
        }

    def _backfill(self, session, airline: Airline) -> Airline:
        """Fill a missing ICAO code or placeholder name from the reference table."""
        info = airline_info(airline.iata_code)
        if not info:
            return airline

        updated = False
        if not airline.icao_code and info.icao_code:
            airline.icao_code = info.icao_code
            updated = True
        if airline.name == f'Airline {airline.iata_code}':
            airline.name = info.name
            updated = True

        if updated:
            try:
                session.commit()
                logger.info(f'Back-filled airline data for {airline.iata_code}')
            except IntegrityError as e:
                session.rollback()
                logger.warning(f'Could not back-fill airline {airline.iata_code}: {e}')
                session.refresh(airline)
        return airline

    def search(self, query: str, limit: int = 20) -> list:
        """Case-insensitive search by name, IATA or ICAO code."""
        term = (query or '').strip()
        if not term:
            return []
        pattern = f'%{term.lower()}%'
        code = term.upper()
        with self._session_factory() as session:
            stmt = (
                select(Airline)
                .where(or_(
                    func.lower(Airline.name).like(pattern),
                    Airline.iata_code == code,
                    Airline.icao_code == code,
                ))
                .order_by(Airline.name)
                .limit(limit)
            )
            return list(session.scalars(stmt))
