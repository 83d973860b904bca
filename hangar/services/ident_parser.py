"""
Flight identifier parsing.

Turns free-form idents as reported by tracking sources or typed by users
into (airline code, flight number). Pure and deterministic: no I/O.

Patterns, tried in order (first match wins):
1. Code glued to number:      'EK221', 'UAE221', 'AA1234A'
2. Airline name and number:   'Emirates 221', 'American Airlines 100'
3. Code, space, number:       'EK 221'

Pattern 2 only matches when the name resolves through the airline table;
otherwise parsing falls through to pattern 3.
"""

import logging
import re
from dataclasses import dataclass

from hangar.codes import find_airline_code_by_name
from hangar.errors import ParseError

logger = logging.getLogger(__name__)

GLUED_PATTERN = re.compile(r'^([A-Z]{2,3})(\d+[A-Z]?)$')
NAME_PATTERN = re.compile(r'^([A-Z][A-Z\s]+?)\s+(\d+[A-Z]?)$')
SPACED_PATTERN = re.compile(r'^([A-Z]{2,3})\s+(\d+[A-Z]?)$')


@dataclass(frozen=True)
class ParsedIdent:
    """Result of parsing a flight identifier."""
    airline_code: str
    flight_number: str
    original_ident: str


def parse_flight_ident(flight_ident: str) -> ParsedIdent:
    """
    Parse a flight identifier into airline code and flight number.

    Raises:
        ParseError: if no pattern matches (message includes the input)
    """
    if not flight_ident or not flight_ident.strip():
        raise ParseError(flight_ident or '', 'Flight identifier is required')

    original = flight_ident.strip()
    cleaned = original.upper()

    match = GLUED_PATTERN.match(cleaned)
    if match:
        airline_code, flight_number = match.groups()
        logger.debug(f'Standard pattern matched: {airline_code} {flight_number}')
        return ParsedIdent(airline_code, flight_number, original)

    match = NAME_PATTERN.match(cleaned)
    if match:
        airline_name, flight_number = match.groups()
        airline_code = find_airline_code_by_name(airline_name)
        if airline_code:
            logger.debug(f'Name pattern matched: {airline_name.strip()} -> {airline_code} {flight_number}')
            return ParsedIdent(airline_code, flight_number, original)

    match = SPACED_PATTERN.match(cleaned)
    if match:
        airline_code, flight_number = match.groups()
        logger.debug(f'Space pattern matched: {airline_code} {flight_number}')
        return ParsedIdent(airline_code, flight_number, original)

    logger.warning(f'Could not parse flight identifier: {cleaned}')
    raise ParseError(original)
