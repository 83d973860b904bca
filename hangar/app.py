"""
Hangar Flask Application.

Main entry point for the web application. Initializes:
- Database schema
- External clients (FlightAware, Flickr)
- Entity resolvers and the flight service
- API routes and error handlers

Usage:
    python -m hangar.app

Or with gunicorn:
    gunicorn 'hangar.app:create_app()'
"""

import logging
import os
from concurrent.futures import Executor
from typing import Optional

from flask import Flask
from flask_cors import CORS
from sqlalchemy.engine import Engine

from hangar.api import flights_bp, aircraft_bp, airlines_bp
from hangar.cache import TTLCache
from hangar.config import config
from hangar.errors import HangarError
from hangar.models import init_db, make_session_factory, SessionLocal
from hangar.services import (
    AirlineResolver,
    AirportResolver,
    AircraftResolver,
    FlightService,
    FlightAwareClient,
    FlickrClient,
)

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if config.debug else logging.INFO,
    format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S',
)
logger = logging.getLogger(__name__)


def create_app(
    db_engine: Optional[Engine] = None,
    flight_data_client=None,
    image_client=None,
    photo_executor: Optional[Executor] = None,
) -> Flask:
    """
    Application factory for Flask.

    Args:
        db_engine: Engine to use instead of the configured DATABASE_URL
        flight_data_client: Flight search / airport info client (FlightAwareClient)
        image_client: Aircraft image search client (FlickrClient)
        photo_executor: Executor for background photo refreshes

    Returns:
        Configured Flask application instance.
    """
    app = Flask(__name__)

    # Configuration
    app.config['SECRET_KEY'] = config.secret_key

    # Enable CORS for API endpoints
    CORS(app, resources={r'/api/*': {'origins': '*'}})

    # Initialize database
    logger.info('Initializing database...')
    init_db(db_engine)
    session_factory = make_session_factory(db_engine) if db_engine is not None else SessionLocal

    # External clients
    flight_data_client = flight_data_client or FlightAwareClient()
    image_client = image_client or FlickrClient(cache=TTLCache())

    # Services
    airline_resolver = AirlineResolver(session_factory)
    airport_resolver = AirportResolver(session_factory, airport_info=flight_data_client)
    aircraft_resolver = AircraftResolver(session_factory, image_search=image_client, executor=photo_executor)
    flight_service = FlightService(session_factory, airline_resolver, airport_resolver, aircraft_resolver)

    app.config['FLIGHT_DATA_CLIENT'] = flight_data_client
    app.config['IMAGE_CLIENT'] = image_client
    app.config['AIRLINE_RESOLVER'] = airline_resolver
    app.config['AIRCRAFT_RESOLVER'] = aircraft_resolver
    app.config['FLIGHT_SERVICE'] = flight_service

    # Register API blueprints
    app.register_blueprint(flights_bp)
    app.register_blueprint(aircraft_bp)
    app.register_blueprint(airlines_bp)

    @app.route('/health')
    def health():
        """Simple health check endpoint."""
        return {'status': 'ok'}

    # -------------------------------------------------------------------------
    # Error handlers
    # -------------------------------------------------------------------------

    @app.errorhandler(HangarError)
    def hangar_error(e: HangarError):
        if e.status_code >= 500:
            logger.error(f'{type(e).__name__}: {e.message}')
        else:
            logger.info(f'{type(e).__name__}: {e.message}')
        return e.to_dict(), e.status_code

    @app.errorhandler(404)
    def not_found(e):
        return {'error': 'Not found'}, 404

    @app.errorhandler(500)
    def server_error(e):
        logger.error(f'Server error: {e}')
        return {'error': 'Internal server error'}, 500

    return app


def run_development_server():
    """Run the development server."""
    app = create_app()

    # Get port from environment or default
    port = int(os.environ.get('PORT', 5000))

    logger.info(f'Starting Hangar on http://localhost:{port}')

    app.run(
        host='0.0.0.0',
        port=port,
        debug=config.debug,
        use_reloader=False,  # Reloader would start a second photo executor
    )


if __name__ == '__main__':
    run_development_server()
