"""ICAO Doc 9303 check digit helpers.

Used for diagnostics only: a record whose check digits disagree is still returned to the caller,
because the OCR correction step only repairs the sex field.
"""

from __future__ import annotations

import itertools
import string

WEIGHT_PATTERN = (7, 3, 1)

# '<' and anything unrecognised count as zero
CHARACTER_VALUES: dict[str, int] = {
    **{digit: int(digit) for digit in string.digits},
    **{letter: value for value, letter in enumerate(string.ascii_uppercase, start=10)},
}


def compute_check_digit(data: str) -> str:
    """Weighted 7-3-1 sum of the character values of ``data``, modulo 10."""
    weights = itertools.cycle(WEIGHT_PATTERN)
    total = sum(
        CHARACTER_VALUES.get(char.upper(), 0) * weight for char, weight in zip(data, weights)
    )
    return str(total % 10)


def validate_check_digit(data: str, check_digit: str) -> bool:
    return compute_check_digit(data) == check_digit


def td3_check_digit_report(line: str) -> dict[str, bool]:
    """Check the four TD3 data line check digits (document, birth, expiry, composite)."""
    composite_data = line[0:10] + line[13:20] + line[21:43]
    return {
        "document_number": validate_check_digit(line[0:9], line[9]),
        "date_of_birth": validate_check_digit(line[13:19], line[19]),
        "expiry_date": validate_check_digit(line[21:27], line[27]),
        "composite": validate_check_digit(composite_data, line[43]),
    }
