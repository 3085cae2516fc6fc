"""Date handling for partial, qualified and free-form genealogical dates."""

from datetime import date
import re

# Month name mappings (handle abbreviations and full names)
MONTH_MAP = {
    "JAN": 1,
    "JANUARY": 1,
    "FEB": 2,
    "FEBRUARY": 2,
    "MAR": 3,
    "MARCH": 3,
    "APR": 4,
    "APRIL": 4,
    "MAY": 5,
    "JUN": 6,
    "JUNE": 6,
    "JUL": 7,
    "JULY": 7,
    "AUG": 8,
    "AUGUST": 8,
    "SEP": 9,
    "SEPT": 9,
    "SEPTEMBER": 9,
    "OCT": 10,
    "OCTOBER": 10,
    "NOV": 11,
    "NOVEMBER": 11,
    "DEC": 12,
    "DECEMBER": 12,
}

_QUALIFIER_RE = re.compile(
    r"^(ABT\.?|ABOUT|BEF\.?|BEFORE|AFT\.?|AFTER|EST\.?|CAL\.?|FROM|TO|BET\.?|AND"
    r"|CIRCA|CA\.?|C\.|AROUND|~):?\s*",
    flags=re.IGNORECASE,
)
_ANY_YEAR_RE = re.compile(r"(?<!\d)(\d{3,4})(?!\d)")

_ISO_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")
_YEAR_MONTH_RE = re.compile(r"^(\d{4})-(\d{2})$")
_DAY_MONTH_YEAR_RE = re.compile(r"^(\d{1,2})\s+([A-Za-z]+)\.?\s*(\d{4})$")
_MONTH_YEAR_RE = re.compile(r"^([A-Za-z]+)\.?,?\s*(\d{4})$")
_YEAR_RE = re.compile(r"^(\d{4})$")
_NUMERIC_MDY_RE = re.compile(r"^(\d{1,2})[-/](\d{1,2})[-/](\d{4})$")
_SPACED_MDY_RE = re.compile(r"^(\d{1,2})\s+(\d{1,2})\s+(\d{4})$")
_MONTH_DAY_YEAR_RE = re.compile(r"^([A-Za-z]+)\.?\s*(\d{1,2}),?\s*(\d{4})$")


def _clean(date_str: str) -> str:
    s = date_str.strip()
    s = s.strip("()")
    s = s.rstrip("?")
    s = _QUALIFIER_RE.sub("", s)
    return s.strip()


def _month(name: str) -> int | None:
    return MONTH_MAP.get(name.upper().rstrip("."))


def _valid(year: int, month: int | None, day: int | None) -> date | None:
    try:
        return date(year, month or 1, day or 1)
    except ValueError:
        return None


def parse_date_string(date_str: str | None) -> date | None:
    """
    Parse a genealogical date string into a date.
    Missing month/day default to 1. Returns None if the date cannot be parsed.

    Handles formats like:
    - "1839-08-29" and "1746-00-00"
    - "1850-03"
    - "25 NOV 1954"
    - "NOV 1954", "May, 1837"
    - "1698"
    - "ABT 1905", "(around 1855)", "(1789?)"
    - "01-27-1920", "05/15/1923", "04 05 1911" (month first)
    - "April 17, 1850", "SEPT. 17,1910"
    """
    if not date_str:
        return None

    s = _clean(str(date_str))
    if not s:
        return None

    match = _ISO_RE.match(s)
    if match:
        # 00 month/day are placeholders for unknown parts
        month = int(match.group(2)) or None
        day = int(match.group(3)) or None
        return _valid(int(match.group(1)), month, day)

    match = _YEAR_MONTH_RE.match(s)
    if match:
        return _valid(int(match.group(1)), int(match.group(2)) or None, None)

    match = _DAY_MONTH_YEAR_RE.match(s)
    if match:
        month = _month(match.group(2))
        if month:
            return _valid(int(match.group(3)), month, int(match.group(1)))

    match = _MONTH_YEAR_RE.match(s)
    if match:
        month = _month(match.group(1))
        if month:
            return _valid(int(match.group(2)), month, None)

    match = _YEAR_RE.match(s)
    if match:
        return _valid(int(match.group(1)), None, None)

    for pattern in (_NUMERIC_MDY_RE, _SPACED_MDY_RE):
        match = pattern.match(s)
        if match:
            return _valid(int(match.group(3)), int(match.group(1)), int(match.group(2)))

    match = _MONTH_DAY_YEAR_RE.match(s)
    if match:
        month = _month(match.group(1))
        if month:
            return _valid(int(match.group(3)), month, int(match.group(2)))

    return None


def extract_year(date_str: str | None) -> int | None:
    """
    Best-effort year for a date string.

    Falls back to the first 3-4 digit number when the full date cannot be parsed,
    so ranges like "BET 1850 AND 1860" resolve to their lower bound.
    """
    if not date_str:
        return None

    parsed = parse_date_string(date_str)
    if parsed is not None:
        return parsed.year

    match = _ANY_YEAR_RE.search(str(date_str))
    if match:
        year = int(match.group(1))
        if year > 0:
            return year
    return None
