"""
Document validity classification.

Expiry dates arrive either as MRZ ``YYMMDD`` digits or as ``DD/MM/YYYY`` text from the chip.
Two-digit years are expanded with a fixed pivot: 00-30 are 20xx, 31-99 are 19xx.
"""

from __future__ import annotations

import logging
import re
from datetime import date

from mrtd_reader.exceptions import InvalidDateFormatError
from mrtd_reader.models.passport import ValidityState, ValidityStatus

logger = logging.getLogger(__name__)

EXPIRING_SOON_DAYS = 90
CENTURY_PIVOT = 30

_YYMMDD = re.compile(r"^(\d{2})(\d{2})(\d{2})$")
_DD_MM_YYYY = re.compile(r"^(\d{2})/(\d{2})/(\d{4})$")


def expand_year(two_digit_year: int, pivot: int = CENTURY_PIVOT) -> int:
    return 2000 + two_digit_year if two_digit_year <= pivot else 1900 + two_digit_year


def parse_expiry_date(value: str) -> date:
    """
    Parse an expiry date string.

    Raises:
        InvalidDateFormatError: If ``value`` matches neither format or is not a calendar date
    """
    text = value.strip()

    short_match = _YYMMDD.match(text)
    long_match = _DD_MM_YYYY.match(text)
    if short_match:
        year = expand_year(int(short_match.group(1)))
        month, day = int(short_match.group(2)), int(short_match.group(3))
    elif long_match:
        day, month, year = (int(part) for part in long_match.groups())
    else:
        raise InvalidDateFormatError(value)

    try:
        return date(year, month, day)
    except ValueError as exc:
        raise InvalidDateFormatError(value) from exc


def classify(days_remaining: int, warning_days: int = EXPIRING_SOON_DAYS) -> ValidityState:
    if days_remaining < 0:
        return ValidityState.EXPIRED
    if days_remaining < warning_days:
        return ValidityState.EXPIRING_SOON
    return ValidityState.VALID


def check_validity(
    expiry: date, today: date, warning_days: int = EXPIRING_SOON_DAYS
) -> ValidityStatus:
    """Classify an expiry date relative to ``today``, counting whole calendar days."""
    days_remaining = (expiry - today).days
    return ValidityStatus(
        state=classify(days_remaining, warning_days), days_remaining=days_remaining
    )


def assess_expiry(
    value: str, today: date, warning_days: int = EXPIRING_SOON_DAYS
) -> ValidityStatus:
    """
    Parse and classify an expiry string, treating unparseable input as expired.

    The returned status has ``days_remaining=None`` when the date could not be parsed.
    """
    try:
        expiry = parse_expiry_date(value)
    except InvalidDateFormatError:
        logger.warning("Cannot parse expiry date %r, treating document as expired", value)
        return ValidityStatus(state=ValidityState.EXPIRED, days_remaining=None)
    return check_validity(expiry, today, warning_days)


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}" if count == 1 else f"{count} {unit}s"


def format_time_remaining(days_remaining: int | None) -> str:
    """Human-readable countdown, e.g. ``23 days remaining`` or ``Expired 14 days ago``."""
    if days_remaining is None:
        return "Expiry date unknown"
    if days_remaining < 0:
        return f"Expired {_plural(-days_remaining, 'day')} ago"
    if days_remaining == 0:
        return "Expires today"
    return f"{_plural(days_remaining, 'day')} remaining"


def format_time_remaining_compact(days_remaining: int | None) -> str:
    if days_remaining is None or days_remaining < 0:
        return "Expired"
    if days_remaining == 0:
        return "Today"
    return f"{days_remaining}d"
