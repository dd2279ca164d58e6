"""Read-only reference tables for BCBP codes, airlines and airports."""

# Standard imports
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, NamedTuple

UNKNOWN_CLASS = "Unknown Class"
UNKNOWN_STATUS = "Unknown Status"
UNKNOWN_DOCUMENT = "Unknown Document"

class AirportInfo(NamedTuple):
    """Display details for an airport."""
    name: str
    city: str
    country: str


COMPARTMENTS = {
    'F': "First Class",
    'A': "First Class Discounted",
    'P': "First Class Premium",
    'J': "Business Class",
    'C': "Business Class",
    'D': "Business Class Discounted",
    'I': "Business Class Discounted",
    'Z': "Business Class Discounted",
    'W': "Premium Economy",
    'S': "Economy Class",
    'Y': "Economy Class",
    'B': "Economy Class",
    'H': "Economy Class",
    'K': "Economy Class",
    'L': "Economy Class",
    'M': "Economy Class",
    'N': "Economy Class",
    'Q': "Economy Class",
    'T': "Economy Class",
    'V': "Economy Class",
    'X': "Economy Class",
    'E': "Shuttle Service",
    'U': "Shuttle Service",
    'G': "Shuttle Service",
    'O': "Shuttle Service",
}

PASSENGER_STATUSES = {
    '0': "Ticketed and confirmed",
    '1': "Ticketed and not confirmed",
    '2': "Waitlisted",
    '3': "Standby",
    '4': "Boarding Pass issued",
    '5': "Boarding Pass re-issued",
    '6': "Original Boarding Pass",
    '7': "Ticketed, confirmed, checked-in",
    '8': "Ticketed, confirmed, checked-in (re-issued)",
}

DOCUMENT_TYPES = {
    'B': "Boarding Pass",
    'I': "Itinerary Receipt",
}

AIRLINES = {
    # United Kingdom
    'BA': "British Airways",
    'U2': "easyJet",
    'EZY': "easyJet",
    'VS': "Virgin Atlantic",
    'LS': "Jet2.com",
    'FR': "Ryanair",
    'RYR': "Ryanair",
    'LM': "Loganair",
    # Europe
    'LH': "Lufthansa",
    'AF': "Air France",
    'KL': "KLM Royal Dutch Airlines",
    'SK': "SAS Scandinavian Airlines",
    'LX': "SWISS",
    'OS': "Austrian Airlines",
    'IB': "Iberia",
    'AY': "Finnair",
    'AZ': "ITA Airways",
    'TP': "TAP Air Portugal",
    'EI': "Aer Lingus",
    'LO': "LOT Polish Airlines",
    'SN': "Brussels Airlines",
    'VY': "Vueling",
    'W6': "Wizz Air",
    'DY': "Norwegian Air Shuttle",
    # Middle East
    'EK': "Emirates",
    'QR': "Qatar Airways",
    'EY': "Etihad Airways",
    'TK': "Turkish Airlines",
    # Americas and Asia-Pacific
    'AA': "American Airlines",
    'DL': "Delta Air Lines",
    'UA': "United Airlines",
    'WN': "Southwest Airlines",
    'AC': "Air Canada",
    'QF': "Qantas",
    'NZ': "Air New Zealand",
    'SQ': "Singapore Airlines",
    'CX': "Cathay Pacific",
    'NH': "All Nippon Airways",
    'JL': "Japan Airlines",
}

AIRPORTS = {
    'LHR': AirportInfo("Heathrow Airport", "London", "United Kingdom"),
    'LGW': AirportInfo("Gatwick Airport", "London", "United Kingdom"),
    'MAN': AirportInfo("Manchester Airport", "Manchester", "United Kingdom"),
    'EDI': AirportInfo("Edinburgh Airport", "Edinburgh", "United Kingdom"),
    'AMS': AirportInfo("Amsterdam Airport Schiphol", "Amsterdam", "Netherlands"),
    'CDG': AirportInfo("Charles de Gaulle Airport", "Paris", "France"),
    'FRA': AirportInfo("Frankfurt Airport", "Frankfurt", "Germany"),
    'MUC': AirportInfo("Munich Airport", "Munich", "Germany"),
    'MAD': AirportInfo("Adolfo Suárez Madrid–Barajas Airport", "Madrid", "Spain"),
    'ZRH': AirportInfo("Zurich Airport", "Zurich", "Switzerland"),
    'DUB': AirportInfo("Dublin Airport", "Dublin", "Ireland"),
    'IST': AirportInfo("Istanbul Airport", "Istanbul", "Turkey"),
    'DXB': AirportInfo("Dubai International Airport", "Dubai", "UAE"),
    'DOH': AirportInfo("Hamad International Airport", "Doha", "Qatar"),
    'JFK': AirportInfo(
        "John F. Kennedy International Airport", "New York", "USA"
    ),
    'EWR': AirportInfo(
        "Newark Liberty International Airport", "Newark", "USA"
    ),
    'LAX': AirportInfo(
        "Los Angeles International Airport", "Los Angeles", "USA"
    ),
    'ORD': AirportInfo("O'Hare International Airport", "Chicago", "USA"),
    'ATL': AirportInfo(
        "Hartsfield–Jackson Atlanta International Airport", "Atlanta", "USA"
    ),
    'DFW': AirportInfo(
        "Dallas/Fort Worth International Airport", "Dallas", "USA"
    ),
    'SIN': AirportInfo("Singapore Changi Airport", "Singapore", "Singapore"),
    'HKG': AirportInfo(
        "Hong Kong International Airport", "Hong Kong", "Hong Kong"
    ),
    'HND': AirportInfo("Haneda Airport", "Tokyo", "Japan"),
    'SYD': AirportInfo("Sydney Kingsford Smith Airport", "Sydney", "Australia"),
}

def _frozen(mapping: Mapping) -> Mapping:
    """Wraps a mapping in a read-only proxy."""
    return MappingProxyType(dict(mapping))

@dataclass(frozen=True)
class ReferenceTables:
    """
    Code lookups used while decoding and displaying a boarding pass.

    These tables are partial. Every lookup falls back to a literal
    description (or the code itself) when a code is missing, so larger
    or regional tables can be passed in without touching the decoder.
    """
    compartments: Mapping[str, str] = field(
        default_factory=lambda: _frozen(COMPARTMENTS)
    )
    passenger_statuses: Mapping[str, str] = field(
        default_factory=lambda: _frozen(PASSENGER_STATUSES)
    )
    document_types: Mapping[str, str] = field(
        default_factory=lambda: _frozen(DOCUMENT_TYPES)
    )
    airlines: Mapping[str, str] = field(
        default_factory=lambda: _frozen(AIRLINES)
    )
    airports: Mapping[str, AirportInfo] = field(
        default_factory=lambda: _frozen(AIRPORTS)
    )

    def __post_init__(self):
        # Callers may pass plain dicts.
        for name in (
            'compartments', 'passenger_statuses', 'document_types',
            'airlines', 'airports',
        ):
            value = getattr(self, name)
            if not isinstance(value, MappingProxyType):
                object.__setattr__(self, name, _frozen(value))

    def compartment(self, code: str | None) -> str | None:
        """Describes a compartment (class of service) code."""
        if code is None:
            return None
        return self.compartments.get(code.strip().upper(), UNKNOWN_CLASS)

    def passenger_status(self, code: str | None) -> str | None:
        """Describes a passenger status code."""
        if code is None:
            return None
        return self.passenger_statuses.get(code.strip(), UNKNOWN_STATUS)

    def document_type(self, code: str | None) -> str | None:
        """Describes a document type code."""
        if code is None:
            return None
        return self.document_types.get(code.strip().upper(), UNKNOWN_DOCUMENT)

    def airline_name(self, code: str | None) -> str | None:
        """Gets an airline name, falling back to the code."""
        if code is None:
            return None
        code = code.strip().upper()
        return self.airlines.get(code, code)

    def airport(self, code: str | None) -> AirportInfo | None:
        """Gets airport details, or None if the code is not known."""
        if code is None:
            return None
        return self.airports.get(code.strip().upper())

    def airport_label(self, code: str | None) -> str | None:
        """Gets an airport display label, falling back to the code."""
        info = self.airport(code)
        if info is None:
            return code
        return f"{info.name}, {info.city}"


DEFAULT_REFERENCE = ReferenceTables()
