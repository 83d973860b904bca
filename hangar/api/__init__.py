"""
API module for Hangar.

Provides REST endpoints for:
- Flight lookup and the user's hangar
- Aircraft profiles and photos
- Airline search
"""

from hangar.api.flights import flights_bp
from hangar.api.aircraft import aircraft_bp
from hangar.api.airlines import airlines_bp

__all__ = ['flights_bp', 'aircraft_bp', 'airlines_bp']
