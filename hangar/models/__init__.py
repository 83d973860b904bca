"""
Database models for Hangar.

Schema designed around natural keys with unique indexes:
1. Airlines by IATA code (ICAO unique when present)
2. Airports by IATA code (ICAO unique when present)
3. Aircraft by tail number, photos unique per provider photo id
4. Flights unique per user, airline, flight number and UTC day
"""

from hangar.models.base import (
    Base, engine, SessionLocal, init_db, get_session, make_engine, make_session_factory, utcnow,
)
from hangar.models.airline import Airline, CodeSource
from hangar.models.airport import Airport
from hangar.models.aircraft import Aircraft, AircraftPhoto
from hangar.models.flight import Flight

__all__ = [
    'Base',
    'engine',
    'SessionLocal',
    'init_db',
    'get_session',
    'make_engine',
    'make_session_factory',
    'utcnow',
    'Airline',
    'CodeSource',
    'Airport',
    'Aircraft',
    'AircraftPhoto',
    'Flight',
]
