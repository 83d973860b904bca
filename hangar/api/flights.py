"""
Flight API endpoints.

Provides endpoints for:
- POST /api/flights/lookup - Search the flight data provider
- POST /api/flights - Add a flight to the user's hangar
- GET /api/flights - List the user's hangar with stats
- GET /api/flights/<id> - Get a single logged flight
- PUT /api/flights/<id> - Edit seat and notes
- DELETE /api/flights/<id> - Remove a flight from the hangar
"""

import logging
import time
from datetime import datetime, timezone

from flask import Blueprint, jsonify, request

from hangar.api.context import current_user_id, json_body, service
from hangar.services.flight_service import summarize

logger = logging.getLogger(__name__)

flights_bp = Blueprint('flights', __name__, url_prefix='/api/flights')


@flights_bp.route('/lookup', methods=['POST'])
def lookup_flights():
    """
    Search flights by number.

    Body:
    - flightNumber: e.g. 'EK221', 'Emirates 221' (required)
    - date: YYYY-MM-DD (optional, defaults to +/- 2 days around now)
    - time: HH:MM (optional, narrows the window to after this time)
    """
    current_user_id()
    start_time = time.perf_counter()
    data = json_body()

    flight_number = data.get('flightNumber')
    if not flight_number:
        return jsonify({'error': 'Flight number is required'}), 400

    result = service('FLIGHT_DATA_CLIENT').search_flights(flight_number, data.get('date'), data.get('time'))

    query_time_ms = (time.perf_counter() - start_time) * 1000
    result['query_time_ms'] = round(query_time_ms, 2)
    return jsonify(result)


@flights_bp.route('', methods=['POST'])
def create_flight():
    """
    Add a flight to the hangar.

    Body:
    - flight: a payload returned by /lookup (required)
    - seatNumber: e.g. '12A' (optional)
    - notes: free text, at most 1000 characters (optional)
    """
    user_id = current_user_id()
    data = json_body()

    flight_data = data.get('flight')
    if not flight_data:
        return jsonify({'error': 'Flight data is required'}), 400

    flight = service('FLIGHT_SERVICE').create_flight(
        user_id,
        flight_data,
        seat=data.get('seatNumber'),
        notes=data.get('notes'),
    )

    return jsonify({
        'message': 'Flight added to hangar successfully',
        'flight': flight.to_dict(),
        'summary': summarize(flight),
    }), 201


@flights_bp.route('', methods=['GET'])
def list_flights():
    """List the user's flights, newest first, with hangar statistics."""
    user_id = current_user_id()
    start_time = time.perf_counter()

    flights, stats = service('FLIGHT_SERVICE').list_hangar(user_id)

    query_time_ms = (time.perf_counter() - start_time) * 1000
    return jsonify({
        'flights': [flight.to_dict() for flight in flights],
        'stats': stats,
        'count': len(flights),
        'timestamp': datetime.now(timezone.utc).isoformat(),
        'query_time_ms': round(query_time_ms, 2),
    })


@flights_bp.route('/<int:flight_id>', methods=['GET'])
def get_flight(flight_id: int):
    """
    Get a single logged flight.

    Query parameters:
    - include_raw: boolean, include the provider payload (default false)
    """
    user_id = current_user_id()
    include_raw = request.args.get('include_raw', 'false').lower() == 'true'

    flight = service('FLIGHT_SERVICE').get_flight(user_id, flight_id, include_raw=include_raw)
    return jsonify(flight.to_dict(include_raw=include_raw))


@flights_bp.route('/<int:flight_id>', methods=['PUT'])
def update_flight(flight_id: int):
    """Edit seat and/or notes. Other fields cannot change once logged."""
    user_id = current_user_id()
    data = json_body()

    changes = {}
    if 'seatNumber' in data:
        changes['seat'] = data['seatNumber']
    if 'notes' in data:
        changes['notes'] = data['notes']

    flight = service('FLIGHT_SERVICE').update_flight(user_id, flight_id, **changes)
    return jsonify({'message': 'Flight updated', 'flight': flight.to_dict()})


@flights_bp.route('/<int:flight_id>', methods=['DELETE'])
def delete_flight(flight_id: int):
    user_id = current_user_id()
    service('FLIGHT_SERVICE').delete_flight(user_id, flight_id)
    return '', 204
