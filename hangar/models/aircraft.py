"""
Aircraft model - individual airframes keyed by tail number.

An aircraft is created the first time a logged flight references its
registration and is reused by every later flight on the same airframe.
Photos come from the image search service and are attached best-effort.
"""

from datetime import datetime, timedelta
from typing import Optional, List

from sqlalchemy import String, DateTime, ForeignKey, Index, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hangar.config import config
from hangar.models.base import Base, utcnow, isoformat
from hangar.models.airline import Airline, CodeSource

SYNTHETIC_TAIL_PREFIX = 'UNKNOWN-'


class Aircraft(Base):
    """
    Airframe identified by its registration.

    Fields:
        tail_number: Upper-case registration (e.g., 'A6-EQA'); unique, immutable
        aircraft_type: ICAO type designator (e.g., 'B77W')
        manufacturer: Derived from the type code (e.g., 'Boeing')
        model: Derived from the type code (e.g., '777-300ER')
        photo_last_updated: Last enrichment attempt, successful or not
        code_source: 'synthetic' when the tail number was fabricated
    """

    __tablename__ = 'aircraft'

    id: Mapped[int] = mapped_column(primary_key=True)

    tail_number: Mapped[str] = mapped_column(
        String(64),
        unique=True,
        nullable=False,
        comment='Aircraft registration (tail number)'
    )

    airline_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey('airlines.id'),
        nullable=True,
        index=True,
    )

    aircraft_type: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        default='Unknown',
        comment='ICAO type designator (e.g., B738)'
    )

    manufacturer: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    model: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    photo_last_updated: Mapped[Optional[datetime]] = mapped_column(
        DateTime,
        nullable=True,
        comment='Last photo enrichment attempt'
    )

    code_source: Mapped[str] = mapped_column(String(16), default=CodeSource.PROVIDED)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, onupdate=utcnow)

    airline: Mapped[Optional[Airline]] = relationship(lazy='joined')

    photos: Mapped[List['AircraftPhoto']] = relationship(
        back_populates='aircraft',
        lazy='selectin',
        order_by='AircraftPhoto.id',
        cascade='all, delete-orphan',
    )

    __table_args__ = (
        Index('ix_aircraft_type_manufacturer', 'aircraft_type', 'manufacturer'),
    )

    def __repr__(self) -> str:
        return f'<Aircraft {self.tail_number} {self.aircraft_type or "?"}>'

    @property
    def display_name(self) -> str:
        """Manufacturer and model for display, falling back to the type code."""
        model = self.model or self.aircraft_type
        return f'{self.manufacturer or ""} {model or ""}'.strip()

    @property
    def primary_photo(self) -> Optional['AircraftPhoto']:
        return self.photos[0] if self.photos else None

    @property
    def is_synthetic(self) -> bool:
        return self.tail_number.startswith(SYNTHETIC_TAIL_PREFIX)

    def needs_photo_update(
        self,
        now: Optional[datetime] = None,
        refresh_days: int = None,
        retry_seconds: int = None,
    ) -> bool:
        """
        Check whether photo enrichment is due.

        Aircraft with photos refresh after refresh_days; aircraft whose last
        search found nothing retry after retry_seconds.
        """
        if self.photo_last_updated is None:
            return True

        now = now or utcnow()
        if self.photos:
            cooldown = timedelta(days=config.photos.refresh_days if refresh_days is None else refresh_days)
        else:
            cooldown = timedelta(seconds=config.photos.retry_seconds if retry_seconds is None else retry_seconds)
        return now - self.photo_last_updated >= cooldown

    def to_dict(self, include_photos: bool = True) -> dict:
        result = {
            'id': self.id,
            'tailNumber': self.tail_number,
            'aircraftType': self.aircraft_type,
            'manufacturer': self.manufacturer,
            'model': self.model,
            'displayName': self.display_name,
            'airline': self.airline.to_dict() if self.airline else None,
            'photoLastUpdated': isoformat(self.photo_last_updated),
            'codeSource': self.code_source,
        }
        if include_photos:
            result['photos'] = [photo.to_dict() for photo in self.photos]
            result['primaryPhoto'] = self.primary_photo.to_dict() if self.primary_photo else None
        return result


class AircraftPhoto(Base):
    """A photo attached to an aircraft; unique per (aircraft, source photo id)."""

    __tablename__ = 'aircraft_photos'

    id: Mapped[int] = mapped_column(primary_key=True)

    aircraft_id: Mapped[int] = mapped_column(
        ForeignKey('aircraft.id', ondelete='CASCADE'),
        nullable=False,
        index=True,
    )

    url: Mapped[str] = mapped_column(String(500), nullable=False)
    photographer: Mapped[str] = mapped_column(String(200), nullable=False)
    source_id: Mapped[str] = mapped_column(String(64), nullable=False, comment='Provider photo id')
    license: Mapped[str] = mapped_column(String(64), nullable=False, default='Unknown')
    added_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)

    aircraft: Mapped[Aircraft] = relationship(back_populates='photos')

    __table_args__ = (
        UniqueConstraint('aircraft_id', 'source_id', name='uq_aircraft_photo_source'),
    )

    def __repr__(self) -> str:
        return f'<AircraftPhoto {self.source_id}>'

    def to_dict(self) -> dict:
        return {
            'url': self.url,
            'photographer': self.photographer,
            'sourceId': self.source_id,
            'license': self.license,
            'addedAt': isoformat(self.added_at),
        }
