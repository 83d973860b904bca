"""
Hangar Backend Package.

Flight logging backend built with Flask and SQLAlchemy. Resolves loosely
structured flight data into normalized airlines, airports and aircraft,
and keeps each user's logged flights free of duplicates.

Modules:
    api/         REST endpoints for flights, aircraft and airlines
    models/      SQLAlchemy ORM models (Airline, Airport, Aircraft, Flight)
    services/    Ident parsing, entity resolvers, flight assembly, provider clients
    codes.py     Static airline, airport and aircraft type reference tables
    cache.py     Thread-safe TTL cache for image search results
    config.py    Centralized configuration from environment variables
    errors.py    Error taxonomy with HTTP status codes
"""

__version__ = '1.0.0'
