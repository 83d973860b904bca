from datetime import date, datetime

import pytest
from sqlalchemy import func, select

from hangar.errors import (
    DuplicateFlightError,
    InsufficientAircraftDataError,
    InsufficientAirportDataError,
    InvalidInputError,
    NotFoundError,
    UnparseableIdentError,
)
from hangar.models import Aircraft, Airline, Airport, Flight, CodeSource, utcnow
from hangar.services.flight_service import flight_date_from_payload, normalize_times, summarize

from conftest import SCENARIO_PAYLOAD


def _counts(session_factory) -> dict:
    with session_factory() as session:
        return {
            model.__name__: session.scalar(select(func.count(model.id)))
            for model in (Airline, Airport, Aircraft, Flight)
        }


def test_scenario_creates_all_entities(flight_service, session_factory) -> None:
    flight = flight_service.create_flight('user-1', dict(SCENARIO_PAYLOAD), seat='12a', notes='Window seat')

    assert flight.airline.iata_code == 'EK'
    assert flight.airline.name == 'Emirates'
    assert flight.aircraft.tail_number == 'A6-EQA'
    assert flight.aircraft.display_name == 'Boeing 777-300ER'
    assert flight.origin_airport.iata_code == 'DXB'
    assert flight.origin_airport.code_source == CodeSource.REFERENCE
    assert flight.destination_airport.iata_code == 'JFK'
    assert flight.flight_number == '221'
    assert flight.flight_day == date(2024, 5, 1)
    assert flight.date == datetime(2024, 5, 1, 10, 0)
    assert flight.seat == '12A'
    assert flight.times == {
        'scheduled': {'departure': '2024-05-01T10:00:00Z', 'arrival': '2024-05-01T20:00:00Z'},
    }
    assert _counts(session_factory) == {'Airline': 1, 'Airport': 2, 'Aircraft': 1, 'Flight': 1}


def test_duplicate_submission_is_rejected_without_new_rows(flight_service, session_factory) -> None:
    flight_service.create_flight('user-1', dict(SCENARIO_PAYLOAD))
    before = _counts(session_factory)

    with pytest.raises(DuplicateFlightError) as exc_info:
        flight_service.create_flight('user-1', dict(SCENARIO_PAYLOAD))

    assert exc_info.value.status_code == 409
    assert 'EK221' in exc_info.value.message
    assert 'Wed May 01 2024' in exc_info.value.message
    assert _counts(session_factory) == before


def test_same_day_different_time_is_duplicate(flight_service) -> None:
    flight_service.create_flight('user-1', dict(SCENARIO_PAYLOAD))
    later = dict(SCENARIO_PAYLOAD, scheduledDeparture='2024-05-01T23:30:00Z')

    with pytest.raises(DuplicateFlightError):
        flight_service.create_flight('user-1', later)


def test_different_day_succeeds(flight_service) -> None:
    first = flight_service.create_flight('user-1', dict(SCENARIO_PAYLOAD))
    next_day = dict(SCENARIO_PAYLOAD, scheduledDeparture='2024-05-02T10:00:00Z', scheduledArrival=None)

    second = flight_service.create_flight('user-1', next_day)

    assert second.id != first.id
    assert second.aircraft_id == first.aircraft_id


def test_different_user_is_not_a_duplicate(flight_service) -> None:
    flight_service.create_flight('user-1', dict(SCENARIO_PAYLOAD))
    other = flight_service.create_flight('user-2', dict(SCENARIO_PAYLOAD))
    assert other.user_id == 'user-2'


def test_ident_formats_deduplicate_together(flight_service) -> None:
    flight_service.create_flight('user-1', dict(SCENARIO_PAYLOAD))
    with pytest.raises(DuplicateFlightError):
        flight_service.create_flight('user-1', dict(SCENARIO_PAYLOAD, ident='Emirates 221'))


def test_unparseable_ident(flight_service) -> None:
    with pytest.raises(UnparseableIdentError) as exc_info:
        flight_service.create_flight('user-1', dict(SCENARIO_PAYLOAD, ident='12345'))
    assert '12345' in exc_info.value.message
    assert exc_info.value.status_code == 400


def test_missing_aircraft(flight_service) -> None:
    payload = dict(SCENARIO_PAYLOAD)
    del payload['aircraft']
    with pytest.raises(InsufficientAircraftDataError):
        flight_service.create_flight('user-1', payload)


@pytest.mark.parametrize('missing', ['origin', 'destination'])
def test_missing_airport(flight_service, session_factory, missing) -> None:
    payload = dict(SCENARIO_PAYLOAD)
    del payload[missing]
    with pytest.raises(InsufficientAirportDataError):
        flight_service.create_flight('user-1', payload)
    assert _counts(session_factory)['Flight'] == 0


def test_invalid_seat_is_rejected(flight_service) -> None:
    with pytest.raises(InvalidInputError):
        flight_service.create_flight('user-1', dict(SCENARIO_PAYLOAD), seat='Aisle')


def test_invalid_timestamp_is_rejected(flight_service) -> None:
    with pytest.raises(InvalidInputError):
        flight_service.create_flight('user-1', dict(SCENARIO_PAYLOAD, scheduledDeparture='yesterday'))


def test_normalize_times_omits_absent_fields() -> None:
    times = normalize_times({
        'scheduledDeparture': '2024-05-01T10:00:00Z',
        'actualArrival': '2024-05-01T20:15:00+00:00',
        'estimatedDeparture': None,
    })
    assert times == {
        'scheduled': {'departure': '2024-05-01T10:00:00Z'},
        'actual': {'arrival': '2024-05-01T20:15:00Z'},
    }
    assert normalize_times({}) == {}


def test_flight_date_priority() -> None:
    payload = {
        'estimatedDeparture': '2024-05-01T10:20:00Z',
        'actualDeparture': '2024-05-01T10:35:00Z',
    }
    assert flight_date_from_payload(payload) == datetime(2024, 5, 1, 10, 20)

    payload['scheduledDeparture'] = '2024-05-01T12:00:00+02:00'
    assert flight_date_from_payload(payload) == datetime(2024, 5, 1, 10, 0)


def test_flight_date_falls_back_to_now(flight_service) -> None:
    payload = {key: value for key, value in SCENARIO_PAYLOAD.items() if not key.startswith('scheduled')}
    before = utcnow()

    flight = flight_service.create_flight('user-1', payload)

    assert flight.date >= before.replace(microsecond=0)
    assert flight.times == {}


def test_raw_payload_is_kept_but_hidden(flight_service) -> None:
    created = flight_service.create_flight('user-1', dict(SCENARIO_PAYLOAD))
    assert 'rawSourceData' not in created.to_dict()

    flight = flight_service.get_flight('user-1', created.id, include_raw=True)
    assert flight.to_dict(include_raw=True)['rawSourceData']['ident'] == 'EK221'


def test_summary(flight_service) -> None:
    flight = flight_service.create_flight('user-1', dict(SCENARIO_PAYLOAD), seat='1A')
    assert summarize(flight) == {
        'flightNumber': 'EK221',
        'route': 'DXB → JFK',
        'aircraft': 'Boeing 777-300ER',
        'date': '2024-05-01T10:00:00Z',
        'seat': '1A',
        'notes': None,
    }


def test_list_hangar_with_stats(flight_service) -> None:
    flight_service.create_flight('user-1', dict(SCENARIO_PAYLOAD))
    flight_service.create_flight('user-1', dict(
        SCENARIO_PAYLOAD,
        ident='BA117',
        aircraft={'registration': 'G-XLEA', 'type': 'A388'},
        origin={'code': 'LHR'},
        destination={'codeIcao': 'KJFK'},
        scheduledDeparture='2024-06-01T11:00:00Z',
    ))
    flight_service.create_flight('user-2', dict(SCENARIO_PAYLOAD))

    flights, stats = flight_service.list_hangar('user-1')

    assert [f.display_flight_number for f in flights] == ['BA117', 'EK221']
    assert stats == {'totalFlights': 2, 'uniqueAircraft': 2, 'uniqueAirlines': 2, 'uniqueAirports': 3}


def test_get_flight_of_other_user_is_not_found(flight_service) -> None:
    flight = flight_service.create_flight('user-1', dict(SCENARIO_PAYLOAD))
    with pytest.raises(NotFoundError):
        flight_service.get_flight('user-2', flight.id)


def test_update_seat_and_notes(flight_service) -> None:
    flight = flight_service.create_flight('user-1', dict(SCENARIO_PAYLOAD), seat='12A', notes='Old')

    updated = flight_service.update_flight('user-1', flight.id, notes='Upgraded to business')
    assert updated.seat == '12A'
    assert updated.notes == 'Upgraded to business'

    updated = flight_service.update_flight('user-1', flight.id, seat='3k')
    assert updated.seat == '3K'

    with pytest.raises(InvalidInputError):
        flight_service.update_flight('user-1', flight.id, notes='x' * 1001)


def test_delete_flight(flight_service, session_factory) -> None:
    flight = flight_service.create_flight('user-1', dict(SCENARIO_PAYLOAD))

    with pytest.raises(NotFoundError):
        flight_service.delete_flight('user-2', flight.id)

    flight_service.delete_flight('user-1', flight.id)
    counts = _counts(session_factory)
    assert counts['Flight'] == 0
    assert counts['Aircraft'] == 1
