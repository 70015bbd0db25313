from datetime import date, timedelta

import pytest

from mrtd_reader.exceptions import InvalidDateFormatError
from mrtd_reader.models import ValidityState
from mrtd_reader.validity import (
    assess_expiry,
    check_validity,
    expand_year,
    format_time_remaining,
    format_time_remaining_compact,
    parse_expiry_date,
)


@pytest.mark.parametrize(
    ("offset", "state"),
    [
        (365, ValidityState.VALID),
        (90, ValidityState.VALID),
        (89, ValidityState.EXPIRING_SOON),
        (1, ValidityState.EXPIRING_SOON),
        (0, ValidityState.EXPIRING_SOON),
        (-1, ValidityState.EXPIRED),
        (-400, ValidityState.EXPIRED),
    ],
)
def test_check_validity_boundaries(today, offset, state):
    status = check_validity(today + timedelta(days=offset), today)

    assert status.state is state
    assert status.days_remaining == offset


def test_custom_warning_window(today):
    status = check_validity(today + timedelta(days=45), today, warning_days=30)

    assert status.state is ValidityState.VALID


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("120415", date(2012, 4, 15)),
        ("300101", date(2030, 1, 1)),
        ("310101", date(1931, 1, 1)),
        ("000229", date(2000, 2, 29)),
        ("15/04/2012", date(2012, 4, 15)),
        (" 01/01/2031 ", date(2031, 1, 1)),
    ],
)
def test_parse_expiry_date(value, expected):
    assert parse_expiry_date(value) == expected


@pytest.mark.parametrize("value", ["", "2012-04-15", "1204159", "991332", "31/02/2030", "Unknown"])
def test_parse_expiry_date_rejects_invalid(value):
    with pytest.raises(InvalidDateFormatError):
        parse_expiry_date(value)


def test_expand_year_pivot():
    assert expand_year(0) == 2000
    assert expand_year(30) == 2030
    assert expand_year(31) == 1931
    assert expand_year(99) == 1999


def test_assess_expiry_from_mrz_digits(today):
    expiry = (today + timedelta(days=89)).strftime("%y%m%d")

    status = assess_expiry(expiry, today)

    assert status.state is ValidityState.EXPIRING_SOON
    assert status.days_remaining == 89


def test_assess_expiry_yesterday(today):
    status = assess_expiry((today - timedelta(days=1)).strftime("%d/%m/%Y"), today)

    assert status.state is ValidityState.EXPIRED
    assert status.days_remaining == -1


def test_unparseable_expiry_is_expired(today):
    status = assess_expiry("not a date", today)

    assert status.state is ValidityState.EXPIRED
    assert status.days_remaining is None
    assert not status.is_valid


@pytest.mark.parametrize(
    ("days", "text", "compact"),
    [
        (None, "Expiry date unknown", "Expired"),
        (-14, "Expired 14 days ago", "Expired"),
        (-1, "Expired 1 day ago", "Expired"),
        (0, "Expires today", "Today"),
        (1, "1 day remaining", "1d"),
        (23, "23 days remaining", "23d"),
    ],
)
def test_time_remaining_text(days, text, compact):
    assert format_time_remaining(days) == text
    assert format_time_remaining_compact(days) == compact


def test_state_descriptions():
    assert ValidityState.VALID.description == "Valid"
    assert ValidityState.EXPIRING_SOON.description == "Expires Soon"
    assert ValidityState.EXPIRED.description == "Expired"
