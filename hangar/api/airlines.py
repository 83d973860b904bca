"""
Airline API endpoints.

Provides endpoints for:
- GET /api/airlines/search?q= - Search airlines by name or code
"""

from flask import Blueprint, jsonify, request

from hangar.api.context import current_user_id, service

airlines_bp = Blueprint('airlines', __name__, url_prefix='/api/airlines')

MAX_RESULTS = 20


@airlines_bp.route('/search', methods=['GET'])
def search_airlines():
    current_user_id()
    query = request.args.get('q', '').strip()
    if len(query) < 2:
        return jsonify({'error': 'Search query must be at least 2 characters'}), 400

    airlines = service('AIRLINE_RESOLVER').search(query, limit=MAX_RESULTS)
    return jsonify({
        'airlines': [airline.to_dict() for airline in airlines],
        'count': len(airlines),
    })
