import pytest

from conftest import SCENARIO_PAYLOAD, photo

HEADERS = {'X-User-Id': 'user-1'}


def _add_flight(client, payload=None, **extra):
    body = {'flight': payload or dict(SCENARIO_PAYLOAD)}
    body.update(extra)
    return client.post('/api/flights', json=body, headers=HEADERS)


def test_health(client) -> None:
    response = client.get('/health')
    assert response.status_code == 200
    assert response.get_json() == {'status': 'ok'}


def test_requests_without_user_are_rejected(client) -> None:
    response = client.get('/api/flights')
    assert response.status_code == 401
    assert response.get_json() == {'error': 'Authentication required'}


def test_lookup(client, flight_data) -> None:
    response = client.post('/api/flights/lookup', json={'flightNumber': 'EK221', 'date': '2024-05-01'}, headers=HEADERS)

    assert response.status_code == 200
    assert response.get_json()['totalCount'] == 1
    assert flight_data.searches == [('EK221', '2024-05-01', None)]


def test_lookup_requires_flight_number(client) -> None:
    response = client.post('/api/flights/lookup', json={}, headers=HEADERS)
    assert response.status_code == 400


def test_create_flight(client) -> None:
    response = _add_flight(client, seatNumber='12A', notes='Window')

    assert response.status_code == 201
    data = response.get_json()
    assert data['summary']['flightNumber'] == 'EK221'
    assert data['summary']['route'] == 'DXB → JFK'
    assert data['flight']['aircraft']['displayName'] == 'Boeing 777-300ER'
    assert data['flight']['seat'] == '12A'
    assert 'rawSourceData' not in data['flight']


def test_duplicate_flight_is_409(client) -> None:
    _add_flight(client)
    response = _add_flight(client)

    assert response.status_code == 409
    assert 'already in your hangar' in response.get_json()['error']


def test_unparseable_ident_is_400(client) -> None:
    response = _add_flight(client, dict(SCENARIO_PAYLOAD, ident='12345'))
    assert response.status_code == 400
    assert '12345' in response.get_json()['error']


def test_create_requires_flight_data(client) -> None:
    response = client.post('/api/flights', json={'seatNumber': '1A'}, headers=HEADERS)
    assert response.status_code == 400


def test_list_get_update_delete(client) -> None:
    flight_id = _add_flight(client).get_json()['flight']['id']

    listing = client.get('/api/flights', headers=HEADERS).get_json()
    assert listing['count'] == 1
    assert listing['stats']['uniqueAirports'] == 2

    detail = client.get(f'/api/flights/{flight_id}?include_raw=true', headers=HEADERS).get_json()
    assert detail['rawSourceData']['ident'] == 'EK221'

    updated = client.put(f'/api/flights/{flight_id}', json={'seatNumber': '2b'}, headers=HEADERS)
    assert updated.status_code == 200
    assert updated.get_json()['flight']['seat'] == '2B'

    bad = client.put(f'/api/flights/{flight_id}', json={'seatNumber': 'window'}, headers=HEADERS)
    assert bad.status_code == 400

    other_user = client.get(f'/api/flights/{flight_id}', headers={'X-User-Id': 'user-2'})
    assert other_user.status_code == 404

    deleted = client.delete(f'/api/flights/{flight_id}', headers=HEADERS)
    assert deleted.status_code == 204
    assert client.get(f'/api/flights/{flight_id}', headers=HEADERS).status_code == 404


def test_aircraft_profile(client) -> None:
    _add_flight(client)

    response = client.get('/api/aircraft/a6-eqa', headers=HEADERS)

    assert response.status_code == 200
    data = response.get_json()
    assert data['tailNumber'] == 'A6-EQA'
    assert data['flightCount'] == 1


@pytest.mark.parametrize('tail', ['-A6EQA', 'A6EQA-', 'A6--EQA', 'A', 'ABCDEFGHIJK', 'A6_EQA'])
def test_invalid_tail_numbers_are_rejected(client, tail) -> None:
    response = client.get(f'/api/aircraft/{tail}', headers=HEADERS)
    assert response.status_code == 400


def test_unknown_aircraft_is_404(client) -> None:
    assert client.get('/api/aircraft/N12345', headers=HEADERS).status_code == 404


def test_photo_search(client, image_search) -> None:
    image_search.responses = [[photo('111')]]

    response = client.get('/api/aircraft/A6-EQA/photos?type=B77W', headers=HEADERS)

    assert response.status_code == 200
    assert response.get_json()['count'] == 1
    assert image_search.calls == [('A6-EQA', 'B77W', None)]


def test_fetch_photos_forces_refresh(client, image_search) -> None:
    _add_flight(client)
    image_search.responses = [[photo('777')]]

    response = client.post('/api/aircraft/A6-EQA/fetch-photos', headers=HEADERS)

    assert response.status_code == 200
    photos = response.get_json()['aircraft']['photos']
    assert [p['sourceId'] for p in photos] == ['777']


def test_airline_search(client) -> None:
    _add_flight(client)

    response = client.get('/api/airlines/search?q=emir', headers=HEADERS)
    assert response.get_json()['airlines'][0]['iataCode'] == 'EK'

    assert client.get('/api/airlines/search?q=e', headers=HEADERS).status_code == 400


def test_unknown_route_is_json_404(client) -> None:
    response = client.get('/api/nowhere')
    assert response.status_code == 404
    assert response.get_json() == {'error': 'Not found'}
