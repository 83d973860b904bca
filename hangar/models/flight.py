"""
Flight model - a flight logged by a user into their hangar.

Design notes:
- One row per (user, airline, flight number, UTC calendar day); the unique
  index backs the duplicate check done before insert
- References to airline, airports and aircraft are many-to-one and never
  cascade
- The raw provider payload is kept verbatim for audit but deferred, so
  default reads never load or return it
"""

from datetime import date as calendar_date, datetime
from typing import Optional

from sqlalchemy import String, Text, Date, DateTime, ForeignKey, Index, UniqueConstraint, JSON
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hangar.models.base import Base, utcnow, isoformat
from hangar.models.airline import Airline
from hangar.models.airport import Airport
from hangar.models.aircraft import Aircraft


class Flight(Base):
    """
    A user's logged flight.

    times holds ISO-8601 strings grouped as
    {'scheduled': {...}, 'estimated': {...}, 'actual': {...}} where each group
    has optional 'departure'/'arrival' keys; groups absent from the source
    payload are omitted.
    """

    __tablename__ = 'flights'

    id: Mapped[int] = mapped_column(primary_key=True)

    user_id: Mapped[str] = mapped_column(String(64), nullable=False, comment='Owning user')

    flight_number: Mapped[str] = mapped_column(
        String(8),
        nullable=False,
        comment='Flight number without airline prefix (e.g., 221)'
    )

    airline_id: Mapped[int] = mapped_column(ForeignKey('airlines.id'), nullable=False)
    origin_airport_id: Mapped[int] = mapped_column(ForeignKey('airports.id'), nullable=False)
    destination_airport_id: Mapped[int] = mapped_column(ForeignKey('airports.id'), nullable=False)
    aircraft_id: Mapped[int] = mapped_column(ForeignKey('aircraft.id'), nullable=False, index=True)

    date: Mapped[datetime] = mapped_column(DateTime, nullable=False, comment='Departure time (UTC)')
    flight_day: Mapped[calendar_date] = mapped_column(Date, nullable=False, comment='UTC calendar day of date')

    times: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)

    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    seat: Mapped[Optional[str]] = mapped_column(String(4), nullable=True)

    raw_source_data: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True, deferred=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, onupdate=utcnow)

    airline: Mapped[Airline] = relationship(lazy='joined')
    origin_airport: Mapped[Airport] = relationship(foreign_keys=[origin_airport_id], lazy='joined')
    destination_airport: Mapped[Airport] = relationship(foreign_keys=[destination_airport_id], lazy='joined')
    aircraft: Mapped[Aircraft] = relationship(lazy='joined')

    __table_args__ = (
        UniqueConstraint(
            'user_id', 'airline_id', 'flight_number', 'flight_day',
            name='uq_flight_user_airline_number_day',
        ),
        Index('ix_flights_user_date', 'user_id', 'date'),
        Index('ix_flights_airline_number_date', 'airline_id', 'flight_number', 'date'),
    )

    def __repr__(self) -> str:
        return f'<Flight {self.display_flight_number} {self.flight_day} user={self.user_id}>'

    @property
    def display_flight_number(self) -> str:
        prefix = self.airline.iata_code if self.airline else ''
        return f'{prefix}{self.flight_number}'

    @property
    def route(self) -> Optional[str]:
        if self.origin_airport and self.destination_airport:
            return f'{self.origin_airport.iata_code} → {self.destination_airport.iata_code}'
        return None

    def to_dict(self, include_raw: bool = False) -> dict:
        result = {
            'id': self.id,
            'userId': self.user_id,
            'flightNumber': self.flight_number,
            'displayFlightNumber': self.display_flight_number,
            'date': isoformat(self.date),
            'route': self.route,
            'airline': self.airline.to_dict() if self.airline else None,
            'originAirport': self.origin_airport.to_dict() if self.origin_airport else None,
            'destinationAirport': self.destination_airport.to_dict() if self.destination_airport else None,
            'aircraft': self.aircraft.to_dict() if self.aircraft else None,
            'times': self.times,
            'notes': self.notes,
            'seat': self.seat,
            'createdAt': isoformat(self.created_at),
            'updatedAt': isoformat(self.updated_at),
        }
        if include_raw:
            result['rawSourceData'] = self.raw_source_data
        return result
