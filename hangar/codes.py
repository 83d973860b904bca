"""
Static aviation code reference tables.

Read-only lookup data loaded once at import:
- IATA airline code -> airline name and ICAO code
- ICAO airport code -> IATA airport code
- ICAO aircraft type designator -> manufacturer and model

Usage:
    from hangar.codes import airline_info, icao_to_iata_airport, aircraft_model

    airline_info('EK').name      # 'Emirates'
    icao_to_iata_airport('OMDB') # 'DXB'
    aircraft_model('B77W')       # '777-300ER'
"""

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Optional, Tuple

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AirlineInfo:
    """Canonical airline data from the reference table."""
    iata_code: str
    name: str
    icao_code: str


def _airlines(*rows: Tuple[str, str, str]) -> Mapping[str, AirlineInfo]:
    return MappingProxyType({iata: AirlineInfo(iata, name, icao) for iata, name, icao in rows})


# (IATA code, Name, ICAO code)
AIRLINES: Mapping[str, AirlineInfo] = _airlines(
    # Major airlines
    ('EK', 'Emirates', 'UAE'),
    ('AA', 'American Airlines', 'AAL'),
    ('DL', 'Delta Air Lines', 'DAL'),
    ('UA', 'United Airlines', 'UAL'),
    ('BA', 'British Airways', 'BAW'),
    ('LH', 'Lufthansa', 'DLH'),
    ('AF', 'Air France', 'AFR'),
    ('KL', 'KLM Royal Dutch Airlines', 'KLM'),
    ('SQ', 'Singapore Airlines', 'SIA'),
    ('QF', 'Qantas', 'QFA'),
    ('CX', 'Cathay Pacific', 'CPA'),
    ('JL', 'Japan Airlines', 'JAL'),
    ('NH', 'All Nippon Airways', 'ANA'),
    ('TK', 'Turkish Airlines', 'THY'),
    ('EY', 'Etihad Airways', 'ETD'),
    ('QR', 'Qatar Airways', 'QTR'),
    ('SV', 'Saudia', 'SVA'),
    ('LX', 'Swiss International Air Lines', 'SWR'),
    ('OS', 'Austrian Airlines', 'AUA'),
    ('SK', 'Scandinavian Airlines', 'SAS'),
    ('AY', 'Finnair', 'FIN'),
    ('IB', 'Iberia', 'IBE'),
    ('TP', 'TAP Air Portugal', 'TAP'),
    ('AI', 'Air India', 'AIC'),
    ('AC', 'Air Canada', 'ACA'),
    ('WS', 'WestJet', 'WJA'),
    ('VS', 'Virgin Atlantic', 'VIR'),
    ('VY', 'Vueling', 'VLG'),
    ('FR', 'Ryanair', 'RYR'),
    ('U2', 'easyJet', 'EZY'),
    ('WN', 'Southwest Airlines', 'SWA'),
    ('B6', 'JetBlue Airways', 'JBU'),
    ('AS', 'Alaska Airlines', 'ASA'),
    ('F9', 'Frontier Airlines', 'FFT'),
    ('NK', 'Spirit Airlines', 'NKS'),
    # Regional and other airlines
    ('OO', 'SkyWest Airlines', 'SKW'),
    ('YV', 'Mesa Airlines', 'ASH'),
    ('OH', 'PSA Airlines', 'JIA'),
    ('MQ', 'Envoy Air', 'ENY'),
    ('YX', 'Republic Airways', 'RPA'),
    ('G7', 'Allegiant Air', 'AAY'),
    ('SY', 'Sun Country Airlines', 'SCX'),
)

_AIRLINES_BY_ICAO: Mapping[str, AirlineInfo] = MappingProxyType(
    {info.icao_code: info for info in AIRLINES.values()}
)

# Airline names as users type them glued to the flight number (EMIRATES221)
AIRLINE_NAME_ALIASES: Mapping[str, str] = MappingProxyType({
    'EMIRATES': 'EK',
    'AMERICAN': 'AA',
    'AMERICANAIRLINES': 'AA',
    'DELTA': 'DL',
    'DELTAAIRLINES': 'DL',
    'UNITED': 'UA',
    'UNITEDAIRLINES': 'UA',
    'LUFTHANSA': 'LH',
    'BRITISH': 'BA',
    'BRITISHAIRWAYS': 'BA',
    'QATAR': 'QR',
    'QATARAIRWAYS': 'QR',
    'SINGAPORE': 'SQ',
    'SINGAPOREAIRLINES': 'SQ',
    'CATHAY': 'CX',
    'CATHAYPACIFIC': 'CX',
    'ETIHAD': 'EY',
    'ETIHADAIRWAYS': 'EY',
    'TURKISH': 'TK',
    'TURKISHAIRLINES': 'TK',
    'AIRFRANCE': 'AF',
    'KLM': 'KL',
    'SOUTHWEST': 'WN',
    'SOUTHWESTAIRLINES': 'WN',
    'JETBLUE': 'B6',
    'JETBLUEAIRWAYS': 'B6',
    'ALASKA': 'AS',
    'ALASKAAIRLINES': 'AS',
    'VIRGIN': 'VS',
    'VIRGINATLANTIC': 'VS',
    'NORWEGIAN': 'DY',
    'NORWEGIANAIR': 'DY',
    'RYANAIR': 'FR',
    'EASYJET': 'U2',
    'AIRCANADA': 'AC',
    'WESTJET': 'WS',
    'JAPANAIRLINES': 'JL',
    'ALLNIPPONAIRWAYS': 'NH',
    'KOREANAIR': 'KE',
    'ASIANA': 'OZ',
    'CHINAAIRLINES': 'CI',
    'THAIAIRWAYS': 'TG',
    'MALAYSIAAIRLINES': 'MH',
    'PHILIPPINEAIRLINES': 'PR',
    'GARUDA': 'GA',
    'QANTAS': 'QF',
    'JETSTAR': 'JQ',
    'VIRGINAUSTRALIA': 'VA',
    'AIRASIA': 'AK',
    'CEBU': '5J',
    'INDIGO': '6E',
    'SPICEJET': 'SG',
    'VISTARA': 'UK',
    'GOAIR': 'G8',
    'AIRINDIA': 'AI',
})

AIRPORT_ICAO_TO_IATA: Mapping[str, str] = MappingProxyType({
    # Major US airports
    'KJFK': 'JFK',
    'KLAX': 'LAX',
    'KORD': 'ORD',
    'KATL': 'ATL',
    'KDFW': 'DFW',
    'KDEN': 'DEN',
    'KSFO': 'SFO',
    'KLAS': 'LAS',
    'KMIA': 'MIA',
    'KBOS': 'BOS',
    'KSEA': 'SEA',
    'KPHX': 'PHX',
    'KIAH': 'IAH',
    'KDTW': 'DTW',
    'KMSP': 'MSP',
    'KPHL': 'PHL',
    'KCLT': 'CLT',
    # Europe
    'EGLL': 'LHR',
    'EGKK': 'LGW',
    'LFPG': 'CDG',
    'EDDF': 'FRA',
    'EHAM': 'AMS',
    'LEMD': 'MAD',
    'LEBL': 'BCN',
    'LIRF': 'FCO',
    'LOWW': 'VIE',
    'LSZH': 'ZRH',
    'ESSA': 'ARN',
    'EKCH': 'CPH',
    'ENGM': 'OSL',
    'EFHK': 'HEL',
    # Middle East
    'OMDB': 'DXB',
    'OMAA': 'AUH',
    'OERK': 'RUH',
    'OTHH': 'DOH',
    'HECA': 'CAI',
    'LTFM': 'IST',
    # Asia Pacific
    'RJAA': 'NRT',
    'RJTT': 'HND',
    'RKSI': 'ICN',
    'VHHH': 'HKG',
    'WSSS': 'SIN',
    'WMKK': 'KUL',
    'VTBS': 'BKK',
    'YSSY': 'SYD',
    'YMML': 'MEL',
    'NZAA': 'AKL',
    # India
    'VIDP': 'DEL',
    'VABB': 'BOM',
    'VOBL': 'BLR',
    'VOMM': 'MAA',
    'VECC': 'CCU',
    'VOHS': 'HYD',
    'VAAH': 'AMD',
    'VOCI': 'COK',
    'VOTV': 'TRV',
    'VAGO': 'GOI',
    'VOGA': 'GOX',
    # Canada
    'CYYZ': 'YYZ',
    'CYVR': 'YVR',
    'CYUL': 'YUL',
    'CYYC': 'YYC',
    'CYOW': 'YOW',
    'CYWG': 'YWG',
    # South America
    'SBGR': 'GRU',
    'SCEL': 'SCL',
    'SAEZ': 'EZE',
    'SKBO': 'BOG',
    'SPJC': 'LIM',
})

# ICAO type designator -> (manufacturer, model)
AIRCRAFT_TYPES: Mapping[str, Tuple[str, str]] = MappingProxyType({
    'A318': ('Airbus', 'A318'),
    'A319': ('Airbus', 'A319'),
    'A320': ('Airbus', 'A320'),
    'A321': ('Airbus', 'A321'),
    'A19N': ('Airbus', 'A319neo'),
    'A20N': ('Airbus', 'A320neo'),
    'A21N': ('Airbus', 'A321neo'),
    'A332': ('Airbus', 'A330-200'),
    'A333': ('Airbus', 'A330-300'),
    'A338': ('Airbus', 'A330-800neo'),
    'A339': ('Airbus', 'A330-900neo'),
    'A343': ('Airbus', 'A340-300'),
    'A346': ('Airbus', 'A340-600'),
    'A359': ('Airbus', 'A350-900'),
    'A35K': ('Airbus', 'A350-1000'),
    'A380': ('Airbus', 'A380'),
    'A388': ('Airbus', 'A380-800'),
    'B712': ('Boeing', '717-200'),
    'B732': ('Boeing', '737-200'),
    'B733': ('Boeing', '737-300'),
    'B734': ('Boeing', '737-400'),
    'B735': ('Boeing', '737-500'),
    'B736': ('Boeing', '737-600'),
    'B737': ('Boeing', '737-700'),
    'B738': ('Boeing', '737-800'),
    'B739': ('Boeing', '737-900'),
    'B37M': ('Boeing', '737 MAX 7'),
    'B38M': ('Boeing', '737 MAX 8'),
    'B39M': ('Boeing', '737 MAX 9'),
    'B3XM': ('Boeing', '737 MAX 10'),
    'B744': ('Boeing', '747-400'),
    'B748': ('Boeing', '747-8'),
    'B752': ('Boeing', '757-200'),
    'B753': ('Boeing', '757-300'),
    'B762': ('Boeing', '767-200'),
    'B763': ('Boeing', '767-300'),
    'B764': ('Boeing', '767-400'),
    'B772': ('Boeing', '777-200'),
    'B773': ('Boeing', '777-300'),
    'B77L': ('Boeing', '777-200LR'),
    'B77W': ('Boeing', '777-300ER'),
    'B778': ('Boeing', '777-8'),
    'B779': ('Boeing', '777-9'),
    'B788': ('Boeing', '787-8'),
    'B789': ('Boeing', '787-9'),
    'B78X': ('Boeing', '787-10'),
    'CRJ2': ('Bombardier', 'CRJ-200'),
    'CRJ7': ('Bombardier', 'CRJ-700'),
    'CRJ9': ('Bombardier', 'CRJ-900'),
    'CRJX': ('Bombardier', 'CRJ-1000'),
    'E135': ('Embraer', 'ERJ-135'),
    'E145': ('Embraer', 'ERJ-145'),
    'E170': ('Embraer', 'E170'),
    'E175': ('Embraer', 'E175'),
    'E190': ('Embraer', 'E190'),
    'E195': ('Embraer', 'E195'),
    'E290': ('Embraer', 'E190-E2'),
    'E295': ('Embraer', 'E195-E2'),
    'E75L': ('Embraer', 'E175 (Long Wing)'),
    'E75S': ('Embraer', 'E175 (Short Wing)'),
    'DH8A': ('De Havilland Canada', 'Dash 8-100'),
    'DH8B': ('De Havilland Canada', 'Dash 8-200'),
    'DH8C': ('De Havilland Canada', 'Dash 8-300'),
    'DH8D': ('De Havilland Canada', 'Dash 8-400'),
    'AT43': ('ATR', '42-300'),
    'AT45': ('ATR', '42-500'),
    'AT46': ('ATR', '42-600'),
    'AT72': ('ATR', '72-200'),
    'AT75': ('ATR', '72-500'),
    'AT76': ('ATR', '72-600'),
    'MD11': ('McDonnell Douglas', 'MD-11'),
    'MD80': ('McDonnell Douglas', 'MD-80'),
    'MD82': ('McDonnell Douglas', 'MD-82'),
    'MD83': ('McDonnell Douglas', 'MD-83'),
    'MD88': ('McDonnell Douglas', 'MD-88'),
    'MD90': ('McDonnell Douglas', 'MD-90'),
    'DC10': ('McDonnell Douglas', 'DC-10'),
    'C172': ('Cessna', '172 Skyhawk'),
    'C208': ('Cessna', '208 Caravan'),
    'C25A': ('Cessna', 'Citation CJ2'),
    'C25B': ('Cessna', 'Citation CJ3'),
    'C510': ('Cessna', 'Citation Mustang'),
    'C525': ('Cessna', 'CitationJet'),
    'C680': ('Cessna', 'Citation Sovereign'),
    'PC12': ('Pilatus', 'PC-12'),
    'PC24': ('Pilatus', 'PC-24'),
    'GLEX': ('Bombardier', 'Global Express'),
    'GL7T': ('Bombardier', 'Global 7500'),
    'GLF5': ('Gulfstream', 'G-V'),
    'GLF6': ('Gulfstream', 'G650'),
})

# Checked in order; multi-letter prefixes first so 'AT72' is not read as Airbus
MANUFACTURER_HINTS: Tuple[Tuple[str, str], ...] = (
    ('BOEING', 'Boeing'),
    ('AIRBUS', 'Airbus'),
    ('EMBRAER', 'Embraer'),
    ('BOMBARDIER', 'Bombardier'),
    ('MCDONNELL', 'McDonnell Douglas'),
    ('ATR', 'ATR'),
    ('DASH', 'De Havilland Canada'),
    ('DHC', 'De Havilland Canada'),
)

MANUFACTURER_PREFIXES: Tuple[Tuple[str, str], ...] = (
    ('MD', 'McDonnell Douglas'),
    ('DC', 'McDonnell Douglas'),
    ('AT', 'ATR'),
    ('DH', 'De Havilland Canada'),
    ('CRJ', 'Bombardier'),
    ('B', 'Boeing'),
    ('A', 'Airbus'),
    ('E', 'Embraer'),
)


def airline_info(iata_code: str) -> Optional[AirlineInfo]:
    """Look up an airline by IATA code."""
    if not iata_code:
        return None
    return AIRLINES.get(iata_code.strip().upper())


def airline_info_by_icao(icao_code: str) -> Optional[AirlineInfo]:
    """Reverse lookup: find the airline whose ICAO code matches."""
    if not icao_code:
        return None
    return _AIRLINES_BY_ICAO.get(icao_code.strip().upper())


def find_airline_code_by_name(airline_name: str) -> Optional[str]:
    """
    Find an IATA code by (partial) airline name.

    Case-insensitive containment in either direction, first table entry wins:
    'Emirates' and 'Emirates Airline' both resolve to 'EK'.
    """
    if not airline_name:
        return None
    normalized = airline_name.strip().lower()
    for code, info in AIRLINES.items():
        name = info.name.lower()
        if normalized in name or name in normalized:
            return code
    return None


def icao_to_iata_airport(icao_code: str) -> Optional[str]:
    """Convert an ICAO airport code to its IATA code if known."""
    if not icao_code:
        return None
    normalized = icao_code.strip().upper()
    iata = AIRPORT_ICAO_TO_IATA.get(normalized)
    if iata:
        logger.debug(f'Airport ICAO to IATA conversion: {normalized} -> {iata}')
    return iata


def aircraft_manufacturer(aircraft_type: Optional[str]) -> Optional[str]:
    """Derive the manufacturer from a type designator or free-form type name."""
    if not aircraft_type:
        return None
    code = aircraft_type.strip().upper()

    if code in AIRCRAFT_TYPES:
        return AIRCRAFT_TYPES[code][0]

    for hint, manufacturer in MANUFACTURER_HINTS:
        if hint in code:
            return manufacturer

    for prefix, manufacturer in MANUFACTURER_PREFIXES:
        if code.startswith(prefix):
            return manufacturer

    return None


def aircraft_model(aircraft_type: Optional[str]) -> Optional[str]:
    """Derive the model from a type designator; unknown codes pass through unchanged."""
    if not aircraft_type:
        return None
    entry = AIRCRAFT_TYPES.get(aircraft_type.strip().upper())
    return entry[1] if entry else aircraft_type


def aircraft_display_name(aircraft_type: Optional[str]) -> str:
    """Human readable type name such as 'Boeing 777-300ER'."""
    if not aircraft_type:
        return 'Unknown'
    manufacturer = aircraft_manufacturer(aircraft_type)
    model = aircraft_model(aircraft_type)
    if manufacturer and model:
        return f'{manufacturer} {model}'
    return aircraft_type
