from concurrent.futures import Executor, Future

import pytest

from hangar.app import create_app
from hangar.models import init_db, make_engine, make_session_factory
from hangar.services import AirlineResolver, AirportResolver, AircraftResolver, FlightService


class InlineExecutor(Executor):
    """Runs submitted work immediately so background refreshes are deterministic."""

    def __init__(self):
        self.submitted = 0

    def submit(self, fn, *args, **kwargs):
        self.submitted += 1
        future = Future()
        try:
            future.set_result(fn(*args, **kwargs))
        except Exception as e:
            future.set_exception(e)
        return future

    def shutdown(self, wait=True, **kwargs):
        pass


class FakeAirportInfo:
    def __init__(self, airports=None, error=None):
        self.airports = airports or {}
        self.error = error
        self.calls = []

    def get_airport_info(self, code):
        self.calls.append(code)
        if self.error:
            raise self.error
        return self.airports.get(code)


class FakeFlightData(FakeAirportInfo):
    def __init__(self, flights=None, **kwargs):
        super().__init__(**kwargs)
        self.flights = flights or []
        self.searches = []

    def search_flights(self, flight_number, flight_date=None, flight_time=None):
        self.searches.append((flight_number, flight_date, flight_time))
        return {
            'searchedFlightNumber': flight_number,
            'flights': self.flights,
            'totalCount': len(self.flights),
            'message': f'Found {len(self.flights)} flight(s) for {flight_number}',
        }


class FakeImageSearch:
    """Returns queued results per call; raises when given an error."""

    def __init__(self, responses=None, error=None):
        self.responses = list(responses or [])
        self.error = error
        self.calls = []
        self.cleared = []

    def search_aircraft_images(self, registration=None, aircraft_type=None, airline=None):
        self.calls.append((registration, aircraft_type, airline))
        if self.error:
            raise self.error
        if self.responses:
            return self.responses.pop(0)
        return []

    def clear_cached_result(self, registration=None, aircraft_type=None, airline=None):
        self.cleared.append((registration, aircraft_type, airline))
        return True


def photo(photo_id, url=None, attribution='Photo by spotter'):
    return {
        'id': photo_id,
        'url': url or f'https://live.staticflickr.com/1/{photo_id}_b.jpg',
        'attribution': attribution,
    }


SCENARIO_PAYLOAD = {
    'ident': 'EK221',
    'aircraft': {'registration': 'A6-EQA', 'type': 'B77W'},
    'origin': {'codeIcao': 'OMDB'},
    'destination': {'codeIcao': 'KJFK'},
    'scheduledDeparture': '2024-05-01T10:00:00Z',
    'scheduledArrival': '2024-05-01T20:00:00Z',
}


@pytest.fixture
def engine(tmp_path):
    db_engine = make_engine(f'sqlite:///{tmp_path / "hangar.db"}')
    init_db(db_engine)
    yield db_engine
    db_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return make_session_factory(engine)


@pytest.fixture
def airport_info():
    return FakeAirportInfo()


@pytest.fixture
def image_search():
    return FakeImageSearch()


@pytest.fixture
def executor():
    return InlineExecutor()


@pytest.fixture
def airline_resolver(session_factory):
    return AirlineResolver(session_factory)


@pytest.fixture
def airport_resolver(session_factory, airport_info):
    return AirportResolver(session_factory, airport_info=airport_info)


@pytest.fixture
def aircraft_resolver(session_factory, image_search, executor):
    return AircraftResolver(session_factory, image_search=image_search, executor=executor)


@pytest.fixture
def flight_service(session_factory, airline_resolver, airport_resolver, aircraft_resolver):
    return FlightService(session_factory, airline_resolver, airport_resolver, aircraft_resolver)


@pytest.fixture
def flight_data():
    return FakeFlightData(flights=[dict(SCENARIO_PAYLOAD)])


@pytest.fixture
def app(engine, flight_data, image_search):
    application = create_app(
        db_engine=engine,
        flight_data_client=flight_data,
        image_client=image_search,
        photo_executor=InlineExecutor(),
    )
    application.config['TESTING'] = True
    return application


@pytest.fixture
def client(app):
    return app.test_client()
