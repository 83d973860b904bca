"""
Airport model - origin and destination airports of logged flights.

Every airport has an IATA code, synthesized when no real one can be found.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import String, Float, DateTime, Index
from sqlalchemy.orm import Mapped, mapped_column

from hangar.models.base import Base, utcnow, isoformat
from hangar.models.airline import CodeSource

UNKNOWN_CITY = 'Unknown'
UNKNOWN_COUNTRY = 'Unknown'
DEFAULT_TIMEZONE = 'UTC'


def placeholder_name(iata_code: str) -> str:
    return f'Airport {iata_code}'


class Airport(Base):
    """
    Airport keyed for lookup by IATA code.

    country/timezone default to 'Unknown'/'UTC' when no source supplies
    them; those defaults are a known data-quality gap, not an error.
    """

    __tablename__ = 'airports'

    id: Mapped[int] = mapped_column(primary_key=True)

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    city: Mapped[str] = mapped_column(String(100), nullable=False, default=UNKNOWN_CITY)
    country: Mapped[str] = mapped_column(String(100), nullable=False, default=UNKNOWN_COUNTRY)

    iata_code: Mapped[str] = mapped_column(
        String(4),
        unique=True,
        nullable=False,
        comment='IATA airport code (e.g., DXB)'
    )

    icao_code: Mapped[Optional[str]] = mapped_column(
        String(4),
        unique=True,
        nullable=True,
        comment='ICAO location indicator (e.g., OMDB)'
    )

    timezone: Mapped[str] = mapped_column(String(64), nullable=False, default=DEFAULT_TIMEZONE)

    latitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    longitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)

    code_source: Mapped[str] = mapped_column(
        String(16),
        default=CodeSource.PROVIDED,
        comment='Provenance of iata_code'
    )

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        Index('ix_airports_lat_lng', 'latitude', 'longitude'),
    )

    def __repr__(self) -> str:
        return f'<Airport {self.iata_code} {self.icao_code or "?"}>'

    @property
    def has_placeholder_name(self) -> bool:
        return not self.name or self.name == placeholder_name(self.iata_code)

    @property
    def has_placeholder_city(self) -> bool:
        return not self.city or self.city == UNKNOWN_CITY

    def to_dict(self) -> dict:
        coordinates = None
        if self.latitude is not None and self.longitude is not None:
            coordinates = {'lat': self.latitude, 'lng': self.longitude}
        return {
            'id': self.id,
            'name': self.name,
            'city': self.city,
            'country': self.country,
            'iataCode': self.iata_code,
            'icaoCode': self.icao_code,
            'timezone': self.timezone,
            'coordinates': coordinates,
            'codeSource': self.code_source,
            'createdAt': isoformat(self.created_at),
        }
