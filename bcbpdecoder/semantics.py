"""Normalization of raw BCBP field values into typed values."""

# Standard imports
import calendar
import re
from datetime import datetime, date, timedelta

GENDER_CODES = frozenset({"M", "F", "X", "U"})
UNDISCLOSED_GENDER = "U"

HEX_PATTERN = re.compile(r"[0-9A-Fa-f]+")
DIGITS_PATTERN = re.compile(r"[0-9]+")

# First BCBP version whose bag tag counter is the bag count itself.
BAG_COUNT_DIRECT_VERSION = 7

def strip_leading_zeros(value: str | None) -> str | None:
    """
    Strips whitespace and leading zeros.

    An all-zero value becomes an empty string, not "0".
    """
    if value is None:
        return None
    return value.strip().lstrip("0")

def parse_hex(hex_str: str | None) -> int | None:
    """Parses a hexadecimal string."""
    if hex_str is None:
        return None
    hex_str = hex_str.strip()
    if not HEX_PATTERN.fullmatch(hex_str):
        return None
    return int(hex_str, 16)

def parse_int(num_str: str | None) -> int | None:
    """Parses a string of decimal digits."""
    if num_str is None:
        return None
    num_str = num_str.strip()
    if not DIGITS_PATTERN.fullmatch(num_str):
        return None
    return int(num_str)

def parse_day_of_year(raw: str | None) -> int | None:
    """Parses a 3-digit day of year, returning None if out of range."""
    day_of_year = parse_int(raw)
    if day_of_year is None or day_of_year < 1 or day_of_year > 366:
        return None
    return day_of_year

def parse_flag(raw: str | None, true_value: str = "Y") -> bool | None:
    """Parses a single-character flag."""
    if raw is None:
        return None
    return raw.strip().upper() == true_value

def normalize_gender(raw: str | None) -> str | None:
    """Coerces a gender code to M, F, X or U."""
    if raw is None:
        return None
    code = raw.strip().upper()
    if code in GENDER_CODES:
        return code
    return UNDISCLOSED_GENDER

def bag_count(counter: str | None, version: int | None) -> int | None:
    """
    Calculates the number of bags from a bag tag counter.

    Version 7 and later store the number of bags ("001" is one bag).
    Earlier or unknown versions store the number of additional bags
    ("000" is one bag).
    """
    value = parse_int(counter)
    if value is None:
        return None
    if version is not None and version >= BAG_COUNT_DIRECT_VERSION:
        return value
    return value + 1

def issuance_year(year_digit: int, reference_year: int) -> int:
    """
    Reconstructs a full year from its last digit.

    The digit is placed in the decade of the reference year. There is no
    correction across decade boundaries, so a pass issued in 2029 and
    decoded in 2030 resolves to 2039.
    """
    return (reference_year // 10) * 10 + year_digit

def ordinal_date(year: int, day_of_year: int) -> date | None:
    """Creates a date from a year and day of year."""
    if day_of_year < 1 or day_of_year > 366:
        return None
    if day_of_year == 366 and not calendar.isleap(year):
        return None
    return date(year, 1, 1) + timedelta(days=day_of_year-1)

def resolve_day_of_year(
    day_of_year: int | None,
    pass_dt: datetime | None = None,
    now: datetime | None = None,
) -> date | None:
    """
    Finds the calendar date for a day of year.

    Without a pass datetime, assumes the flight is up to 3 days in the
    future, or else the most recent date matching this ordinal in the
    past. With a pass datetime, returns the matching date closest to it.
    """
    if day_of_year is None or day_of_year < 1 or day_of_year > 366:
        return None
    if pass_dt is None:
        if now is None:
            now = datetime.now()
        latest_date = (now + timedelta(days=3)).date()
        # Searches 8 years since leap years can be up to 8 years apart.
        for year in range(latest_date.year, latest_date.year - 8, -1):
            test_date = ordinal_date(year, day_of_year)
            if test_date is None:
                # The ordinal was larger than the number of days this
                # year.
                continue
            if test_date > latest_date:
                continue
            return test_date
        return None

    # The departure airport's timezone is not known, so its local date
    # could fall in the year before or after the pass year.
    years = [pass_dt.year - 1, pass_dt.year, pass_dt.year + 1]
    if day_of_year == 366:
        years = [y for y in years if calendar.isleap(y)]
        if len(years) == 0:
            return None
    dates = [ordinal_date(y, day_of_year) for y in years]
    date_diffs = {
        i: abs(d - pass_dt.date())
        for i, d in enumerate(dates)
    }
    return dates[min(date_diffs, key=date_diffs.get)]
