"""Tools for decoding Bar-Coded Boarding Pass (BCBP) strings."""

# Standard imports
import logging
import re
from dataclasses import dataclass
from datetime import datetime, date

# Project imports
import bcbpdecoder.semantics as sem
from bcbpdecoder.extractor import (
    FieldExtractor, Segment,
    HEADER, LEG_MANDATORY, CONDITIONAL_UNIQUE, CONDITIONAL_LEG, SECURITY,
)
from bcbpdecoder.reference import ReferenceTables, DEFAULT_REFERENCE

logger = logging.getLogger(__name__)

MIN_LENGTH = 60 # Mandatory unique block plus one mandatory leg block
FORMAT_CODE = "M"
LEG_MANDATORY_LENGTH = 37
BAG_TAG_LENGTH = 13
MAX_BAG_TAGS = 2
GENDER_VERSION = 8
UNIQUE_START = ">"
SECURITY_START = "^"

AIRPORT_PATTERN = re.compile(r"^[A-Z]{3}$")
CARRIER_PATTERN = re.compile(r"^[A-Z0-9]{2,3}$")
FLIGHT_NUMBER_PATTERN = re.compile(r"^\d{1,5}$")

# Field layouts: (key, label, length, description)
HEADER_FIELDS = (
    ('format_code', "Format Code", 1, "Format code, always 'M'"),
    ('number_of_legs', "Number of Legs Encoded", 1,
        "Number of flight legs on this pass"),
    ('passenger_name', "Passenger Name", 20, "Surname/given name"),
    ('electronic_ticket_indicator', "Electronic Ticket Indicator", 1,
        "'E' for an electronic ticket"),
)
LEG_FIELDS = (
    ('pnr', "Operating Carrier PNR Code", 7, "Booking reference"),
    ('departure_airport', "From City Airport Code", 3,
        "Departure airport IATA code"),
    ('arrival_airport', "To City Airport Code", 3,
        "Arrival airport IATA code"),
    ('operating_carrier', "Operating Carrier Designator", 3,
        "Airline operating the flight"),
    ('flight_number', "Flight Number", 5, "Operating flight number"),
    ('date_of_flight', "Date of Flight", 3, "Day of year (Julian date)"),
    ('compartment_code', "Compartment Code", 1, "Class of service"),
    ('seat_number', "Seat Number", 4, "Assigned seat"),
    ('check_in_sequence', "Check-in Sequence Number", 5,
        "Order in which the passenger checked in"),
    ('passenger_status', "Passenger Status", 1, "Passenger status code"),
    ('conditional_size', "Field Size of Variable Size Field", 2,
        "Hexadecimal length of the conditional data that follows"),
)
UNIQUE_HEAD_FIELDS = (
    ('unique_start', "Beginning of Version Number", 1,
        "'>' marks the start of the unique conditional section"),
    ('version', "Version Number", 1, "BCBP version"),
    ('unique_size', "Field Size of Following Structured Message - Unique", 2,
        "Hexadecimal length of the unique conditional data"),
)
UNIQUE_FIELDS = (
    ('passenger_description', "Passenger Description", 1,
        "Adult, child, infant and so on"),
    ('check_in_source', "Source of Check-in", 1,
        "Where the passenger checked in"),
    ('issuance_source', "Source of Boarding Pass Issuance", 1,
        "Where the boarding pass was issued"),
    ('issuance_date', "Date of Issue of Boarding Pass", 4,
        "Day of year followed by the last digit of the year"),
    ('document_type', "Document Type", 1,
        "Boarding pass or itinerary receipt"),
    ('issuer_code', "Airline Designator of Boarding Pass Issuer", 3,
        "Airline that issued the boarding pass"),
)
LEG_CONDITIONAL_FIELDS = (
    ('airline_numeric_code', "Airline Numeric Code", 3,
        "Numeric code of the ticketing airline"),
    ('document_serial_number', "Document Form/Serial Number", 10,
        "Ticket number without the airline code"),
    ('selectee_indicator', "Selectee Indicator", 1,
        "Secondary security screening indicator"),
    ('international_document_verification',
        "International Documentation Verification", 1,
        "Whether travel documents have been verified"),
    ('marketing_carrier', "Marketing Carrier Designator", 3,
        "Airline that sold the flight"),
    ('frequent_flyer_airline', "Frequent Flyer Airline Designator", 3,
        "Airline of the frequent flyer programme"),
    ('frequent_flyer_number', "Frequent Flyer Number", 16,
        "Frequent flyer membership number"),
    ('id_adherence_indicator', "ID/AD Indicator", 1,
        "Industry discount or adherence indicator"),
    ('free_baggage_allowance', "Free Baggage Allowance", 3,
        "Checked baggage allowance"),
    ('fast_track', "Fast Track", 1, "'Y' if entitled to fast track"),
)
SECURITY_FIELDS = (
    ('security_start', "Beginning of Security Data", 1,
        "'^' marks the start of the security section"),
    ('security_type', "Type of Security Data", 1, "Security data format"),
    ('security_size', "Length of Security Data", 2,
        "Hexadecimal length of the security data"),
)

class BcbpError(ValueError):
    """Raised when a string cannot be decoded as a boarding pass."""


@dataclass(frozen=True)
class BaggageTag:
    """A baggage tag license plate from the unique conditional section."""
    leading_digit: str
    airline_code: str
    serial_number: str
    counter: str
    bag_count: int | None

    @classmethod
    def from_raw(cls, raw: str, version: int | None):
        """
        Creates a BaggageTag from a 13-character tag field.

        Returns None for a blank field.
        """
        tag = raw.strip()
        if tag == "":
            return None
        raw = raw.ljust(BAG_TAG_LENGTH)
        counter = raw[10:13].strip()
        return cls(
            leading_digit=raw[0:1].strip(),
            airline_code=raw[1:4].strip(),
            serial_number=raw[4:10].strip(),
            counter=counter,
            bag_count=sem.bag_count(counter, version),
        )


@dataclass(frozen=True)
class IssuanceDate:
    """Date the boarding pass was issued."""
    day_of_year: int
    year_digit: int
    year: int

    @property
    def date(self) -> date | None:
        """Calendar date, or None if the day does not exist that year."""
        return sem.ordinal_date(self.year, self.day_of_year)


@dataclass(frozen=True)
class SecurityData:
    """Trailing security section."""
    security_type: str | None
    size: int | None
    payload: str | None


class Leg():
    """Represents one flight leg of a boarding pass."""

    def __init__(self,
        fields: dict[str, Segment],
        reference: ReferenceTables = DEFAULT_REFERENCE,
        pass_dt: datetime | None = None,
    ):
        self._fields = fields
        self._reference = reference
        self._pass_dt = pass_dt

        # Mandatory items
        self.pnr: str | None = self._value('pnr')
        self.departure_airport: str | None = self._value('departure_airport')
        self.arrival_airport: str | None = self._value('arrival_airport')
        self.operating_carrier: str | None = self._value('operating_carrier')
        self.flight_number: str | None = sem.strip_leading_zeros(
            self._value('flight_number')
        )
        self.date_of_flight: int | None = sem.parse_day_of_year(
            self._value('date_of_flight')
        )
        self.compartment_code: str | None = self._value('compartment_code')
        self.compartment_description: str | None = reference.compartment(
            self.compartment_code
        )
        self.seat_number: str | None = sem.strip_leading_zeros(
            self._value('seat_number')
        )
        self.check_in_sequence: str | None = sem.strip_leading_zeros(
            self._value('check_in_sequence')
        )
        self.passenger_status: str | None = self._value('passenger_status')
        self.passenger_status_description: str | None = \
            reference.passenger_status(self.passenger_status)
        self.conditional_size: int | None = sem.parse_hex(
            self._value('conditional_size')
        )

        # Conditional items
        self.airline_numeric_code: str | None = self._value(
            'airline_numeric_code'
        )
        self.document_serial_number: str | None = self._value(
            'document_serial_number'
        )
        self.selectee_indicator: str | None = self._value('selectee_indicator')
        self.international_document_verification: str | None = self._value(
            'international_document_verification'
        )
        self.marketing_carrier: str | None = self._value('marketing_carrier')
        self.frequent_flyer_airline: str | None = self._value(
            'frequent_flyer_airline'
        )
        self.frequent_flyer_number: str | None = self._value(
            'frequent_flyer_number'
        )
        self.id_adherence_indicator: str | None = self._value(
            'id_adherence_indicator'
        )
        self.free_baggage_allowance: str | None = self._value(
            'free_baggage_allowance'
        )
        self.fast_track: bool | None = sem.parse_flag(self._value('fast_track'))

    def __repr__(self):
        return (
            f"Leg({self.date_of_flight} {self.operating_carrier} "
            f"{self.flight_number} "
            f"{self.departure_airport} → {self.arrival_airport})"
        )

    def __str__(self):
        return (
            f"{self.operating_carrier} {self.flight_number} "
            f"{self.departure_airport} → {self.arrival_airport}"
        )

    @property
    def segments(self) -> tuple[Segment, ...]:
        """Segments read for this leg, in offset order."""
        return tuple(sorted(self._fields.values(), key=lambda s: s.start))

    def segment(self, key: str) -> Segment | None:
        """Gets the segment a field was decoded from."""
        return self._fields.get(key)

    def resolve_flight_date(self, now: datetime | None = None) -> date | None:
        """Finds the calendar date of the flight."""
        return sem.resolve_day_of_year(self.date_of_flight, self._pass_dt, now)

    def _value(self, key: str) -> str | None:
        """Gets the trimmed value of a field, or None if it was not read."""
        segment = self._fields.get(key)
        if segment is None:
            return None
        return segment.value


class BoardingPass():
    """
    Represents a decoded Bar-Coded Boarding Pass (BCBP).

    Decoding happens on creation. Raises BcbpError if the text is too
    short, does not use format code 'M', or its first leg does not look
    like a flight. Other problems degrade softly: the affected fields
    are None and a message is added to warnings.
    """

    def __init__(self,
        bcbp_str: str,
        pass_dt: datetime | None = None,
        reference: ReferenceTables = DEFAULT_REFERENCE,
        reference_year: int | None = None,
    ):
        self.bcbp_str: str = bcbp_str
        self.pass_dt: datetime | None = pass_dt
        self.reference: ReferenceTables = reference
        if reference_year is None:
            reference_year = (pass_dt or datetime.now()).year
        self.reference_year: int = reference_year
        self.warnings: list[str] = []

        self._extractor: FieldExtractor | None = None
        self._header: dict[str, Segment] = {}
        self._unique: dict[str, Segment] = {}
        self._security: dict[str, Segment] = {}
        self._leg_fields: list[dict[str, Segment]] = []
        self.number_of_legs: int = 1
        self._decode()

        # Mandatory unique items
        self.format_code: str | None = self._value(self._header, 'format_code')
        self.passenger_name: str | None = self._value(
            self._header, 'passenger_name'
        )
        self.electronic_ticket_indicator: str | None = self._value(
            self._header, 'electronic_ticket_indicator'
        )
        self.legs: list[Leg] = [
            Leg(fields, reference, pass_dt) for fields in self._leg_fields
        ]

        # Conditional unique items
        self.version: int | None = sem.parse_int(
            self._value(self._unique, 'version')
        )
        self.passenger_description: str | None = self._value(
            self._unique, 'passenger_description'
        )
        self.check_in_source: str | None = self._value(
            self._unique, 'check_in_source'
        )
        self.issuance_source: str | None = self._value(
            self._unique, 'issuance_source'
        )
        self.issuance_date: IssuanceDate | None = self._parse_issuance_date()
        self.document_type: str | None = self._value(
            self._unique, 'document_type'
        )
        self.document_type_description: str | None = reference.document_type(
            self.document_type
        )
        self.issuer_code: str | None = self._value(self._unique, 'issuer_code')
        self.baggage_tags: list[BaggageTag] = self._parse_baggage_tags()
        self.gender: str | None = sem.normalize_gender(
            self._value(self._unique, 'gender')
        )

        # Security
        self.security_data: SecurityData | None = self._parse_security_data()

        self.segments: tuple[Segment, ...] = tuple(self._extractor.segments)

    def __str__(self):
        return self.bcbp_str.replace(" ", "·")

    @property
    def consumed_length(self) -> int:
        """Number of characters covered by segments."""
        if len(self.segments) == 0:
            return 0
        return self.segments[-1].end

    @property
    def has_unique_section(self) -> bool:
        """Checks whether a unique conditional section was found."""
        return len(self._unique) > 0

    def segment(self, key: str) -> Segment | None:
        """Gets the segment a header or unique field was decoded from."""
        for fields in (self._header, self._unique, self._security):
            if key in fields:
                return fields[key]
        return None

    def segment_at(self, offset: int) -> Segment | None:
        """Finds the segment covering an offset in the BCBP text."""
        return self._extractor.segment_at(offset)

    # Decoding

    def _decode(self) -> None:
        """Reads all sections of the BCBP text into segments."""
        if self.bcbp_str is None or len(self.bcbp_str) < MIN_LENGTH:
            length = 0 if self.bcbp_str is None else len(self.bcbp_str)
            raise BcbpError(
                f"Boarding pass data is {length} characters long; at least "
                f"{MIN_LENGTH} are required."
            )
        self._extractor = FieldExtractor(self.bcbp_str)

        # Mandatory unique block
        self._read_fields(HEADER_FIELDS, HEADER, self._header)
        format_code = self._header['format_code'].value
        if format_code != FORMAT_CODE:
            raise BcbpError(
                f"Format code '{format_code}' is not supported; only "
                f"'{FORMAT_CODE}' boarding passes can be decoded."
            )
        self.number_of_legs = self._parse_leg_count()

        # Loop through legs.
        for leg_index in range(self.number_of_legs):
            if self._extractor.remaining < LEG_MANDATORY_LENGTH:
                self._warn(
                    f"Data ends before leg {leg_index + 1} of "
                    f"{self.number_of_legs}."
                )
                break
            fields = {}
            self._read_fields(LEG_FIELDS, LEG_MANDATORY, fields)
            if leg_index == 0:
                self._check_first_leg(fields)
            self._decode_conditional(leg_index, fields)
            self._leg_fields.append(fields)

        self._decode_security()

    def _parse_leg_count(self) -> int:
        """Parses the number of legs, defaulting to 1."""
        raw = self._value(self._header, 'number_of_legs')
        leg_count = sem.parse_int(raw)
        if leg_count is None or leg_count < 1:
            self._warn(f"Number of legs '{raw}' is not valid; assuming 1.")
            return 1
        return leg_count

    def _check_first_leg(self, fields: dict[str, Segment]) -> None:
        """Checks that the first leg looks like a flight."""
        checks = [
            ('departure_airport', AIRPORT_PATTERN),
            ('arrival_airport', AIRPORT_PATTERN),
            ('operating_carrier', CARRIER_PATTERN),
            ('flight_number', FLIGHT_NUMBER_PATTERN),
        ]
        for key, pattern in checks:
            segment = fields[key]
            if not pattern.match(segment.value):
                raise BcbpError(
                    f"{segment.label} '{segment.value}' is not valid; this "
                    "does not look like a boarding pass."
                )

    def _decode_conditional(self,
        leg_index: int, fields: dict[str, Segment]
    ) -> None:
        """Reads the variable size field following a mandatory leg."""
        size = self._parse_size(fields.get('conditional_size'))
        block_end = self._extractor.position() + size
        if block_end > len(self.bcbp_str):
            self._warn(
                f"Leg {leg_index + 1} declares {size} characters of "
                f"conditional data but only {self._extractor.remaining} "
                "remain."
            )
            block_end = len(self.bcbp_str)

        # Unique conditional section, once per pass
        if (not self.has_unique_section
            and self._extractor.position() < block_end
            and self._extractor.peek(1) == UNIQUE_START
        ):
            self._decode_unique(block_end)

        # Repeated conditional section
        if self._extractor.position() < block_end:
            self._decode_leg_conditional(fields, block_end)

        # Anything left belongs to the airline.
        if self._extractor.position() < block_end:
            fields['airline_use'] = self._extractor.read(
                block_end - self._extractor.position(),
                'airline_use', "For Individual Airline Use", CONDITIONAL_LEG,
                "Airline-specific data", limit=block_end,
            )

    def _decode_unique(self, block_end: int) -> None:
        """Reads the unique conditional section."""
        self._read_fields(
            UNIQUE_HEAD_FIELDS, CONDITIONAL_UNIQUE, self._unique,
            limit=block_end,
        )
        size = self._parse_size(self._unique.get('unique_size'))
        if size == 0:
            return
        section_end = min(self._extractor.position() + size, block_end)
        self._read_fields(
            UNIQUE_FIELDS, CONDITIONAL_UNIQUE, self._unique,
            limit=section_end,
        )

        for tag_index in range(MAX_BAG_TAGS):
            if section_end - self._extractor.position() < BAG_TAG_LENGTH:
                break
            key = f"baggage_tag_{tag_index + 1}"
            self._unique[key] = self._extractor.read(
                BAG_TAG_LENGTH, key, f"Baggage Tag {tag_index + 1}",
                CONDITIONAL_UNIQUE, "Baggage tag license plate number",
                limit=section_end,
            )

        version = sem.parse_int(self._value(self._unique, 'version'))
        if (version is not None and version >= GENDER_VERSION
            and self._extractor.position() < section_end
        ):
            self._unique['gender'] = self._extractor.read(
                1, 'gender', "Passenger Gender", CONDITIONAL_UNIQUE,
                "M, F, X or U (undisclosed)", limit=section_end,
            )

        if self._extractor.position() < section_end:
            self._unique['reserved'] = self._extractor.read(
                section_end - self._extractor.position(),
                'reserved', "Reserved", CONDITIONAL_UNIQUE,
                "Unrecognized unique conditional data", limit=section_end,
            )

    def _decode_leg_conditional(self,
        fields: dict[str, Segment], block_end: int
    ) -> None:
        """Reads the repeated conditional section of a leg."""
        size_segment = self._extractor.read(
            2, 'leg_conditional_size',
            "Field Size of Following Structured Message - Repeated",
            CONDITIONAL_LEG,
            "Hexadecimal length of the repeated conditional data",
            limit=block_end,
        )
        fields['leg_conditional_size'] = size_segment
        size = self._parse_size(size_segment)
        if size == 0:
            return
        section_end = min(self._extractor.position() + size, block_end)
        self._read_fields(
            LEG_CONDITIONAL_FIELDS, CONDITIONAL_LEG, fields, limit=section_end,
        )
        if self._extractor.position() < section_end:
            fields['reserved'] = self._extractor.read(
                section_end - self._extractor.position(),
                'reserved', "Reserved", CONDITIONAL_LEG,
                "Unrecognized repeated conditional data", limit=section_end,
            )

    def _decode_security(self) -> None:
        """Reads the security section, if present."""
        if self._extractor.peek(1) != SECURITY_START:
            return
        self._read_fields(SECURITY_FIELDS, SECURITY, self._security)
        size = self._parse_size(self._security.get('security_size'))
        if size == 0:
            return
        segment = self._extractor.read(
            size, 'security_data', "Security Data", SECURITY,
            "Airline digital signature",
        )
        if segment is None:
            return
        self._security['security_data'] = segment
        if len(segment) < size:
            self._warn(
                f"Security data declares {size} characters but only "
                f"{len(segment)} are present."
            )

    def _read_fields(self,
        layout: tuple,
        section: str,
        target: dict[str, Segment],
        limit: int | None = None,
    ) -> None:
        """Reads a run of fixed-width fields into target."""
        for key, label, length, description in layout:
            segment = self._extractor.read(
                length, key, label, section, description, limit
            )
            if segment is None:
                return
            if len(segment) < length:
                self._warn(
                    f"{label} is truncated to {len(segment)} of {length} "
                    "characters."
                )
            target[key] = segment

    def _parse_size(self, segment: Segment | None) -> int:
        """Parses a hexadecimal size field, defaulting to 0."""
        if segment is None:
            return 0
        size = sem.parse_hex(segment.value)
        if size is None:
            self._warn(
                f"{segment.label} '{segment.raw}' is not hexadecimal; "
                "treating as 0."
            )
            return 0
        return size

    # Field semantics

    def _parse_issuance_date(self) -> IssuanceDate | None:
        """Parses the date of issue of the boarding pass."""
        segment = self._unique.get('issuance_date')
        self._check_issuance_date_scan(segment)
        if segment is None:
            return None
        day_of_year = sem.parse_day_of_year(segment.raw[0:3])
        year_digit = sem.parse_int(segment.raw[3:4])
        if day_of_year is None or year_digit is None:
            if segment.value != "":
                self._warn(f"Date of issue '{segment.raw}' is not valid.")
            return None
        return IssuanceDate(
            day_of_year=day_of_year,
            year_digit=year_digit,
            year=sem.issuance_year(year_digit, self.reference_year),
        )

    def _check_issuance_date_scan(self, segment: Segment | None) -> None:
        """
        Flags passes where the first run of four digits in the unique
        section is not the fixed-position date of issue.
        """
        body = "".join(
            s.raw for k, s in self._unique.items()
            if k not in ('unique_start', 'version', 'unique_size')
        )
        match = re.search(r"\d{4}", body)
        if match is None:
            return
        if segment is None or match.group() != segment.raw:
            self._warn(
                f"Unique conditional data contains '{match.group()}', which "
                "could be read as the date of issue; using the fixed-position "
                "field instead."
            )

    def _parse_baggage_tags(self) -> list[BaggageTag]:
        """Parses baggage tag license plates."""
        tags = []
        for tag_index in range(MAX_BAG_TAGS):
            segment = self._unique.get(f"baggage_tag_{tag_index + 1}")
            if segment is None:
                continue
            tag = BaggageTag.from_raw(segment.raw, self.version)
            if tag is not None:
                tags.append(tag)
        return tags

    def _parse_security_data(self) -> SecurityData | None:
        """Parses the security section."""
        if len(self._security) == 0:
            return None
        return SecurityData(
            security_type=self._value(self._security, 'security_type'),
            size=sem.parse_hex(self._value(self._security, 'security_size')),
            payload=self._value(self._security, 'security_data'),
        )

    def _warn(self, message: str) -> None:
        """Records a soft decoding problem."""
        logger.debug(message)
        self.warnings.append(message)

    @staticmethod
    def _value(fields: dict[str, Segment], key: str) -> str | None:
        """Gets the trimmed value of a field, or None if it was not read."""
        segment = fields.get(key)
        if segment is None:
            return None
        return segment.value


@dataclass(frozen=True)
class DecodeOutcome:
    """Either a decoded boarding pass or the reason decoding failed."""
    boarding_pass: BoardingPass | None = None
    error: str | None = None

    @property
    def valid(self) -> bool:
        """Checks whether decoding succeeded."""
        return self.boarding_pass is not None


def decode(
    bcbp_str: str,
    pass_dt: datetime | None = None,
    reference: ReferenceTables = DEFAULT_REFERENCE,
    reference_year: int | None = None,
) -> DecodeOutcome:
    """
    Decodes a BCBP string.

    Never raises: rejected input and unexpected errors both produce an
    outcome carrying an error message.
    """
    try:
        boarding_pass = BoardingPass(
            bcbp_str,
            pass_dt=pass_dt,
            reference=reference,
            reference_year=reference_year,
        )
    except BcbpError as err:
        logger.debug("Rejected boarding pass data: %s", err)
        return DecodeOutcome(error=str(err))
    except Exception as err: # pylint: disable=broad-exception-caught
        logger.warning(
            "Unexpected error decoding boarding pass data", exc_info=True
        )
        return DecodeOutcome(error=str(err) or type(err).__name__)
    return DecodeOutcome(boarding_pass=boarding_pass)
