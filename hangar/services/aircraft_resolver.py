"""
Aircraft resolution and photo enrichment.

Resolution:
- Registration present: find by upper-cased tail number, back-filling
  missing type/airline/manufacturer/model; create when unknown.
- Type only: create an aircraft with a synthetic tail number
  'UNKNOWN-<type>-<epoch ms>'. It never matches a later lookup.
- Neither: InsufficientAircraftDataError.

Photo enrichment runs on a background executor after an aircraft is created
or found stale. It never raises into resolve(): search errors are logged and
photo_last_updated is always stamped so the cooldown applies.
"""

import logging
import re
import time
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from typing import Optional, List

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from hangar.codes import aircraft_manufacturer, aircraft_model
from hangar.config import config
from hangar.errors import InsufficientAircraftDataError
from hangar.models import Aircraft, AircraftPhoto, Airline, CodeSource, SessionLocal, utcnow
from hangar.models.aircraft import SYNTHETIC_TAIL_PREFIX
from hangar.services.persistence import create_or_fetch, load

logger = logging.getLogger(__name__)

TAIL_NUMBER_PATTERN = re.compile(r'^[A-Z0-9-]+$')
UNKNOWN_TYPE = 'Unknown'
DEFAULT_PHOTOGRAPHER = 'Flickr User'


def normalize_tail_number(registration: Optional[str]) -> Optional[str]:
    """Upper-case a registration and drop whitespace; None if unusable."""
    if not registration or not isinstance(registration, str):
        return None
    tail = re.sub(r'\s+', '', registration).upper()
    if not tail or not TAIL_NUMBER_PATTERN.match(tail):
        return None
    return tail


def synthetic_tail_number(aircraft_type: str) -> str:
    type_code = re.sub(r'[^A-Z0-9]', '', aircraft_type.upper()) or 'TYPE'
    return f'{SYNTHETIC_TAIL_PREFIX}{type_code}-{int(time.time() * 1000)}'


class AircraftResolver:
    """
    Idempotent, race-safe aircraft find-or-create with background photos.

    Args:
        session_factory: Database session factory
        image_search: Object with search_aircraft_images(registration,
                      aircraft_type, airline) -> list and optionally
                      clear_cached_result(...) (FlickrClient in production)
        executor: Executor for photo refreshes; a small thread pool by default
    """

    def __init__(
        self,
        session_factory: Optional[sessionmaker] = None,
        image_search=None,
        executor: Optional[Executor] = None,
    ):
        self._session_factory = session_factory or SessionLocal
        self._image_search = image_search
        self._executor = executor or ThreadPoolExecutor(
            max_workers=config.photos.workers,
            thread_name_prefix='photo-refresh',
        )

    def resolve(self, aircraft_data: Optional[dict], airline: Optional[Airline] = None) -> Aircraft:
        """Return the Aircraft described by the payload, creating it if needed."""
        if not aircraft_data:
            raise InsufficientAircraftDataError('Aircraft data is required')

        raw_registration = aircraft_data.get('registration')
        tail_number = normalize_tail_number(raw_registration)
        if raw_registration and not tail_number:
            logger.warning(f'Ignoring malformed aircraft registration: {raw_registration!r}')

        aircraft_type = (aircraft_data.get('type') or '').strip() or None
        airline_id = airline.id if airline else None

        if tail_number:
            return self._resolve_registered(tail_number, aircraft_type, airline_id)

        if aircraft_type:
            tail_number = synthetic_tail_number(aircraft_type)
            logger.info(f'No registration provided, creating aircraft with synthetic tail {tail_number}')
            return self._create(tail_number, aircraft_type, airline_id, CodeSource.SYNTHETIC)

        raise InsufficientAircraftDataError('Either aircraft registration or type is required')

    def get_by_tail_number(self, tail_number: str) -> Optional[Aircraft]:
        tail_number = normalize_tail_number(tail_number)
        if not tail_number:
            return None
        with self._session_factory() as session:
            return session.scalars(select(Aircraft).where(Aircraft.tail_number == tail_number)).first()

    def _resolve_registered(self, tail_number: str, aircraft_type: Optional[str], airline_id: Optional[int]) -> Aircraft:
        logger.info(f'Finding or creating aircraft: {tail_number} ({aircraft_type or "unknown type"})')

        with self._session_factory() as session:
            aircraft = session.scalars(select(Aircraft).where(Aircraft.tail_number == tail_number)).first()
            if aircraft:
                logger.info(f'Found existing aircraft: {tail_number}')
                aircraft = self._backfill(session, aircraft, aircraft_type, airline_id)

        if aircraft:
            if aircraft.needs_photo_update():
                self.schedule_photo_refresh(aircraft.id)
            return aircraft

        return self._create(tail_number, aircraft_type, airline_id, CodeSource.PROVIDED)

    def _create(self, tail_number: str, aircraft_type: Optional[str], airline_id: Optional[int], code_source: str) -> Aircraft:
        values = {
            'tail_number': tail_number,
            'aircraft_type': aircraft_type or UNKNOWN_TYPE,
            'airline_id': airline_id,
            'manufacturer': aircraft_manufacturer(aircraft_type),
            'model': aircraft_model(aircraft_type),
            'code_source': code_source,
        }
        aircraft, created = create_or_fetch(
            self._session_factory,
            Aircraft,
            values,
            conflict_keys=('tail_number',),
        )

        if created:
            logger.info(f'Created new aircraft: {aircraft.tail_number} ({aircraft.display_name})')
            self.schedule_photo_refresh(aircraft.id)
            return aircraft

        with self._session_factory() as session:
            aircraft = load(session, Aircraft, aircraft.id)
            aircraft = self._backfill(session, aircraft, aircraft_type, airline_id)
        if not aircraft.photos and aircraft.needs_photo_update():
            self.schedule_photo_refresh(aircraft.id)
        return aircraft

    def _backfill(self, session, aircraft: Aircraft, aircraft_type: Optional[str], airline_id: Optional[int]) -> Aircraft:
        """Fill fields the stored aircraft lacks; never overwrites present values."""
        updated = False

        if aircraft_type and aircraft.aircraft_type in (None, '', UNKNOWN_TYPE):
            aircraft.aircraft_type = aircraft_type
            updated = True
        if airline_id and not aircraft.airline_id:
            aircraft.airline_id = airline_id
            updated = True
        if not aircraft.manufacturer and aircraft_manufacturer(aircraft.aircraft_type):
            aircraft.manufacturer = aircraft_manufacturer(aircraft.aircraft_type)
            updated = True
        if not aircraft.model and aircraft.aircraft_type != UNKNOWN_TYPE:
            aircraft.model = aircraft_model(aircraft.aircraft_type)
            updated = True

        if not updated:
            return aircraft

        session.commit()
        logger.info(f'Updated aircraft data for {aircraft.tail_number}')
        return load(session, Aircraft, aircraft.id)

    # -------------------------------------------------------------------------
    # Photo enrichment
    # -------------------------------------------------------------------------

    def schedule_photo_refresh(self, aircraft_id: int) -> Optional[Future]:
        """Queue a background photo refresh; never raises."""
        if self._image_search is None:
            return None
        try:
            return self._executor.submit(self._refresh_in_background, aircraft_id)
        except RuntimeError as e:
            # Executor already shut down
            logger.warning(f'Could not schedule photo refresh for aircraft {aircraft_id}: {e}')
            return None

    def _refresh_in_background(self, aircraft_id: int) -> None:
        try:
            self.refresh_photos(aircraft_id)
        except Exception as e:
            logger.error(f'Background photo refresh failed for aircraft {aircraft_id}: {e}')

    def refresh_photos(self, aircraft_id: int, force: bool = False) -> Optional[Aircraft]:
        """
        Search for photos and attach new ones to the aircraft.

        First attempt queries tail number, type name and airline; a second
        attempt with the tail number alone runs only if the first finds
        nothing. photo_last_updated is stamped whatever the outcome.

        Returns:
            The refreshed Aircraft, or None if it does not exist
        """
        with self._session_factory() as session:
            aircraft = load(session, Aircraft, aircraft_id)
        if aircraft is None:
            return None

        if not force and not aircraft.needs_photo_update():
            logger.info(f'Aircraft {aircraft.tail_number} photos checked recently, skipping fetch')
            return aircraft

        if self._image_search is None:
            return aircraft

        tail_number = aircraft.tail_number
        type_name = aircraft.display_name
        airline_name = aircraft.airline.name if aircraft.airline else None
        logger.info(f'Fetching photos for aircraft: {tail_number} ({type_name}) operated by {airline_name or "Unknown"}')

        photos: List[dict] = []
        attempts = 0
        try:
            if force and hasattr(self._image_search, 'clear_cached_result'):
                self._image_search.clear_cached_result(tail_number, type_name, airline_name)
                self._image_search.clear_cached_result(tail_number)

            while attempts < config.photos.max_attempts and not photos:
                attempts += 1
                if attempts == 1:
                    photos = self._image_search.search_aircraft_images(tail_number, type_name, airline_name) or []
                else:
                    logger.info(f'Retrying photo search for {tail_number} with registration only')
                    photos = self._image_search.search_aircraft_images(tail_number) or []
        except Exception as e:
            logger.error(f'Error fetching photos for aircraft {tail_number}: {e}')
            photos = []

        if photos:
            logger.info(f'Found {len(photos)} photo(s) for aircraft {tail_number}')
        else:
            logger.warning(f'No photos found for aircraft {tail_number} after {attempts} attempt(s)')

        return self._save_photos(aircraft_id, photos)

    def _save_photos(self, aircraft_id: int, photos: List[dict]) -> Optional[Aircraft]:
        """Append unseen photos and stamp photo_last_updated."""
        with self._session_factory() as session:
            aircraft = load(session, Aircraft, aircraft_id)
            if aircraft is None:
                return None

            added = 0
            seen = {photo.source_id for photo in aircraft.photos}
            for photo in photos:
                source_id = str(photo.get('id') or '')
                if not source_id or source_id in seen or not photo.get('url'):
                    continue
                aircraft.photos.append(AircraftPhoto(
                    url=photo['url'],
                    photographer=photo.get('attribution') or DEFAULT_PHOTOGRAPHER,
                    source_id=source_id,
                    license=photo.get('license') or 'Unknown',
                ))
                seen.add(source_id)
                added += 1
            aircraft.photo_last_updated = utcnow()

            try:
                session.commit()
                if added:
                    logger.info(f'Saved {added} photo(s) for aircraft {aircraft.tail_number}')
            except IntegrityError as e:
                # A concurrent refresh attached the same photo; keep its rows
                session.rollback()
                logger.warning(f'Photo save conflicted for aircraft {aircraft_id}: {e.orig}')
                return self._stamp_photo_attempt(aircraft_id)

            return load(session, Aircraft, aircraft_id)

    def _stamp_photo_attempt(self, aircraft_id: int) -> Optional[Aircraft]:
        with self._session_factory() as session:
            aircraft = load(session, Aircraft, aircraft_id)
            if aircraft is None:
                return None
            aircraft.photo_last_updated = utcnow()
            try:
                session.commit()
            except SQLAlchemyError as e:
                session.rollback()
                logger.error(f'Failed to update photo_last_updated for aircraft {aircraft_id}: {e}')
            return load(session, Aircraft, aircraft_id)

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)
