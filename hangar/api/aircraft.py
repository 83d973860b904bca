"""
Aircraft API endpoints.

Provides endpoints for:
- GET /api/aircraft/<tail> - Aircraft profile with photos and flight count
- GET /api/aircraft/<tail>/photos - Live image search (empty list on failure)
- POST /api/aircraft/<tail>/fetch-photos - Force a photo refresh
"""

import logging

from flask import Blueprint, jsonify, request

from hangar.api.context import current_user_id, service, validate_tail_number
from hangar.errors import NotFoundError

logger = logging.getLogger(__name__)

aircraft_bp = Blueprint('aircraft', __name__, url_prefix='/api/aircraft')


def _get_aircraft(tail_number: str):
    aircraft = service('AIRCRAFT_RESOLVER').get_by_tail_number(tail_number)
    if aircraft is None:
        raise NotFoundError(f'Aircraft {tail_number} not found')
    return aircraft


@aircraft_bp.route('/<tail_number>', methods=['GET'])
def get_aircraft(tail_number: str):
    current_user_id()
    tail_number = validate_tail_number(tail_number)
    aircraft = _get_aircraft(tail_number)

    result = aircraft.to_dict()
    result['flightCount'] = service('FLIGHT_SERVICE').count_flights_for_aircraft(aircraft.id)
    return jsonify(result)


@aircraft_bp.route('/<tail_number>/photos', methods=['GET'])
def search_photos(tail_number: str):
    """
    Search for photos without storing them.

    Query parameters:
    - type: aircraft type name (optional)
    - airline: airline name (optional)
    """
    current_user_id()
    tail_number = validate_tail_number(tail_number)

    photos = service('IMAGE_CLIENT').search_aircraft_images(
        tail_number,
        request.args.get('type'),
        request.args.get('airline'),
    )
    return jsonify({
        'tailNumber': tail_number,
        'photos': photos,
        'count': len(photos),
    })


@aircraft_bp.route('/<tail_number>/fetch-photos', methods=['POST'])
def fetch_photos(tail_number: str):
    """Bypass the refresh cooldown and search for new photos now."""
    current_user_id()
    tail_number = validate_tail_number(tail_number)
    aircraft = _get_aircraft(tail_number)

    logger.info(f'Manual photo refresh requested for {tail_number}')
    aircraft = service('AIRCRAFT_RESOLVER').refresh_photos(aircraft.id, force=True)

    return jsonify({
        'message': f'Found {len(aircraft.photos)} photo(s) for {tail_number}',
        'aircraft': aircraft.to_dict(),
    })
