"""
Flight logging services.

Entity resolvers turn loosely structured provider data into normalized
Airline, Airport and Aircraft rows; FlightService assembles them into
flights. External clients degrade gracefully where the data is enrichment
only (airport info, photos).
"""

from hangar.services.ident_parser import ParsedIdent, parse_flight_ident
from hangar.services.airline_resolver import AirlineResolver
from hangar.services.airport_resolver import AirportResolver
from hangar.services.aircraft_resolver import AircraftResolver
from hangar.services.flight_service import FlightService, summarize
from hangar.services.flightaware import FlightAwareClient
from hangar.services.flickr import FlickrClient

__all__ = [
    'ParsedIdent',
    'parse_flight_ident',
    'AirlineResolver',
    'AirportResolver',
    'AircraftResolver',
    'FlightService',
    'summarize',
    'FlightAwareClient',
    'FlickrClient',
]
