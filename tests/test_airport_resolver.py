import pytest
import requests
from sqlalchemy import func, select

from hangar.errors import InsufficientAirportDataError
from hangar.models import Airport, CodeSource
from hangar.services.airport_resolver import AirportResolver

from conftest import FakeAirportInfo


def _airport_count(session_factory) -> int:
    with session_factory() as session:
        return session.scalar(select(func.count(Airport.id)))


def test_icao_only_airport_uses_reference_table(airport_resolver, airport_info) -> None:
    airport = airport_resolver.resolve({'codeIcao': 'OMDB'})

    assert airport.iata_code == 'DXB'
    assert airport.icao_code == 'OMDB'
    assert airport.code_source == CodeSource.REFERENCE
    assert airport.name == 'Airport DXB'
    assert airport.city == 'Unknown'
    assert airport.country == 'Unknown'
    assert airport.timezone == 'UTC'
    assert airport_info.calls == ['OMDB']


def test_lookup_service_takes_priority_over_table(session_factory) -> None:
    info = FakeAirportInfo(airports={'OMDB': {
        'code': 'OMDB',
        'codeIata': 'DXB',
        'codeIcao': 'OMDB',
        'name': 'Dubai Intl',
        'city': 'Dubai',
        'country': 'AE',
        'timezone': 'Asia/Dubai',
        'latitude': 25.25,
        'longitude': 55.36,
    }})
    resolver = AirportResolver(session_factory, airport_info=info)

    airport = resolver.resolve({'codeIcao': 'OMDB'})

    assert airport.iata_code == 'DXB'
    assert airport.code_source == CodeSource.LOOKUP
    assert airport.name == 'Dubai Intl'
    assert airport.city == 'Dubai'
    assert airport.country == 'AE'
    assert airport.timezone == 'Asia/Dubai'
    assert airport.to_dict()['coordinates'] == {'lat': 25.25, 'lng': 55.36}


def test_lookup_failure_is_downgraded_to_no_data(session_factory) -> None:
    info = FakeAirportInfo(error=requests.ConnectionError('provider down'))
    resolver = AirportResolver(session_factory, airport_info=info)

    airport = resolver.resolve({'codeIcao': 'KJFK'})

    assert airport.iata_code == 'JFK'
    assert airport.code_source == CodeSource.REFERENCE


def test_unmapped_icao_gets_synthetic_iata(airport_resolver, session_factory) -> None:
    airport = airport_resolver.resolve({'codeIcao': 'VOGO', 'name': 'Goa Intl'})

    assert airport.iata_code == 'IOGO'
    assert airport.icao_code == 'VOGO'
    assert airport.code_source == CodeSource.SYNTHETIC
    assert airport.name == 'Goa Intl'

    again = airport_resolver.resolve({'codeIcao': 'VOGO'})
    assert again.id == airport.id
    assert _airport_count(session_factory) == 1


def test_explicit_iata_is_provided(airport_resolver) -> None:
    airport = airport_resolver.resolve({'codeIata': 'dxb', 'name': 'Dubai Intl', 'city': 'Dubai'})

    assert airport.iata_code == 'DXB'
    assert airport.icao_code is None
    assert airport.code_source == CodeSource.PROVIDED
    assert airport.city == 'Dubai'


def test_generic_code_is_disambiguated_by_length(airport_resolver) -> None:
    assert airport_resolver.resolve({'code': 'LHR'}).iata_code == 'LHR'
    heathrow = airport_resolver.resolve({'code': 'EGLL'})
    assert heathrow.iata_code == 'LHR'
    assert heathrow.icao_code == 'EGLL'


def test_snake_case_keys_are_accepted(airport_resolver) -> None:
    airport = airport_resolver.resolve({'code_icao': 'OMDB'})
    assert airport.iata_code == 'DXB'


@pytest.mark.parametrize('payload', [None, {}, {'name': 'Somewhere'}, {'code': 'TOOLONG'}])
def test_missing_code_raises(airport_resolver, payload) -> None:
    with pytest.raises(InsufficientAirportDataError):
        airport_resolver.resolve(payload)


def test_resolution_is_idempotent_across_code_formats(airport_resolver, session_factory) -> None:
    by_iata = airport_resolver.resolve({'codeIata': 'DXB'})
    by_icao = airport_resolver.resolve({'codeIcao': 'OMDB'})

    assert by_iata.id == by_icao.id
    assert by_icao.icao_code == 'OMDB'
    assert _airport_count(session_factory) == 1


def test_backfill_never_clears_existing_city(airport_resolver) -> None:
    created = airport_resolver.resolve({'codeIata': 'DXB', 'name': 'Dubai Intl', 'city': 'Dubai'})
    resolved = airport_resolver.resolve({'codeIata': 'DXB'})

    assert resolved.id == created.id
    assert resolved.city == 'Dubai'
    assert resolved.name == 'Dubai Intl'


def test_backfill_does_not_overwrite_present_values(airport_resolver) -> None:
    airport_resolver.resolve({'codeIata': 'DXB', 'name': 'Dubai Intl', 'city': 'Dubai'})
    resolved = airport_resolver.resolve({'codeIata': 'DXB', 'name': 'Other', 'city': 'Elsewhere'})

    assert resolved.name == 'Dubai Intl'
    assert resolved.city == 'Dubai'


def test_backfill_replaces_placeholders(airport_resolver) -> None:
    placeholder = airport_resolver.resolve({'codeIcao': 'OMDB'})
    assert placeholder.name == 'Airport DXB'

    resolved = airport_resolver.resolve({'codeIata': 'DXB', 'name': 'Dubai Intl', 'city': 'Dubai'})

    assert resolved.id == placeholder.id
    assert resolved.name == 'Dubai Intl'
    assert resolved.city == 'Dubai'
    assert resolved.icao_code == 'OMDB'


def test_icao_conflict_backfills_synthetic_airport(airport_resolver, session_factory) -> None:
    synthetic = airport_resolver.resolve({'codeIcao': 'VOGO'})
    assert synthetic.iata_code == 'IOGO'
    assert synthetic.name == 'Airport IOGO'

    resolved = airport_resolver.resolve({'codeIata': 'GOI', 'codeIcao': 'VOGO', 'name': 'Goa', 'city': 'Dabolim'})

    assert resolved.id == synthetic.id
    assert resolved.iata_code == 'IOGO'
    assert resolved.name == 'Goa'
    assert resolved.city == 'Dabolim'
    assert _airport_count(session_factory) == 1
