"""
Request helpers shared by the API blueprints.

Services are created once by the app factory and stored in app.config;
the authenticated user comes from the X-User-Id header set by the auth
layer in front of this service.
"""

import re

from flask import current_app, request

from hangar.errors import InvalidInputError, UnauthorizedError

USER_ID_HEADER = 'X-User-Id'

TAIL_NUMBER_PATH = re.compile(r'^[A-Z0-9](?:[A-Z0-9]|-(?!-))*[A-Z0-9]$')


def current_user_id() -> str:
    user_id = (request.headers.get(USER_ID_HEADER) or '').strip()
    if not user_id:
        raise UnauthorizedError()
    return user_id


def service(name: str):
    """Fetch a service registered by create_app (e.g. 'FLIGHT_SERVICE')."""
    return current_app.config[name]


def json_body() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise InvalidInputError('JSON body required')
    return data


def validate_tail_number(tail_number: str) -> str:
    """2-10 characters of A-Z, 0-9 and single inner hyphens."""
    tail = (tail_number or '').strip().upper()
    if not 2 <= len(tail) <= 10 or not TAIL_NUMBER_PATH.match(tail):
        raise InvalidInputError('Invalid tail number format')
    return tail
