"""
Fixed-width field extraction from corrected MRZ data lines.

Two field layouts have been used for the BAC inputs over time. Each is a named, versioned
:class:`FieldLayout`; a record always carries the name of the layout that produced it, and the two
are never mixed within one decode.

Offsets follow the TD3 data line of ICAO Doc 9303 Part 4::

    0         1         2         3         4
    01234567890123456789012345678901234567890123
    L898902C36UTO7408122F1204159ZE184226B<<<<<10
    |--doc--|c|nat|-dob-|cs|-exp-|c|-personal--|cc
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from mrtd_reader.exceptions import ConfigurationError, EmptyFieldError, TooShortError
from mrtd_reader.models.mrz import FILLER, MRZ_LINE_LENGTH, MRZRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class FieldLayout:
    """Offsets of the three BAC fields inside a data line."""

    name: str
    document_number: slice
    date_of_birth: slice
    expiry_date: slice


CHECK_DIGIT_INCLUSIVE_LAYOUT = FieldLayout(
    name="check-digit-inclusive-v2",
    document_number=slice(0, 10),
    date_of_birth=slice(13, 20),
    expiry_date=slice(21, 28),
)

LEGACY_LAYOUT = FieldLayout(
    name="legacy-v1",
    document_number=slice(0, 9),
    date_of_birth=slice(13, 19),
    expiry_date=slice(21, 27),
)

LAYOUTS = {layout.name: layout for layout in (CHECK_DIGIT_INCLUSIVE_LAYOUT, LEGACY_LAYOUT)}


def get_layout(name: str) -> FieldLayout:
    try:
        return LAYOUTS[name]
    except KeyError as exc:
        msg = f"Unknown MRZ field layout '{name}'. Available layouts: {sorted(LAYOUTS)}"
        raise ConfigurationError(msg) from exc


def extract_record(line: str, layout: FieldLayout = CHECK_DIGIT_INCLUSIVE_LAYOUT) -> MRZRecord:
    """
    Decode the BAC fields of a corrected data line.

    Args:
        line: Corrected 44-character data line
        layout: Field layout to decode with

    Returns:
        MRZRecord with the raw fixed-offset substrings

    Raises:
        TooShortError: If the line is shorter than 44 characters
        EmptyFieldError: If any field contains only fillers
    """
    if len(line) < MRZ_LINE_LENGTH:
        raise TooShortError(len(line), MRZ_LINE_LENGTH)
    line = line[:MRZ_LINE_LENGTH]

    document_number = line[layout.document_number].rstrip(FILLER)
    date_of_birth = line[layout.date_of_birth]
    expiry_date = line[layout.expiry_date]

    for field_name, value in (
        ("documentNumber", document_number),
        ("dateOfBirth", date_of_birth),
        ("expiryDate", expiry_date),
    ):
        if not value.strip(FILLER):
            raise EmptyFieldError(field_name)

    return MRZRecord(
        document_number=document_number,
        date_of_birth=date_of_birth,
        expiry_date=expiry_date,
        raw_line=line,
        field_layout=layout.name,
    )


def select_data_line(text: str) -> str:
    """
    Pick the TD3 data line out of MRZ text.

    A single line is returned as-is (trimmed). For a multi-line block the second non-empty line is
    the data line.
    """
    lines = [line.strip() for line in text.strip().splitlines() if line.strip()]
    if len(lines) >= 2:
        return lines[1]
    return lines[0] if lines else ""


def _names(name_line: str) -> tuple[str, str]:
    surname_part, _, given_part = name_line[5:].partition(FILLER * 2)
    surname = " ".join(surname_part.replace(FILLER, " ").split())
    given_names = " ".join(given_part.replace(FILLER, " ").split())
    return surname, given_names


def mrz_personal_fields(data_line: str, name_line: str | None = None) -> dict[str, str]:
    """
    Derive display fields from TD3 MRZ lines.

    Keys match the ``PersonalDetails`` field names. Fields that only the first MRZ line carries
    are included when ``name_line`` is given. Empty values are omitted.
    """
    fields = {
        "document_number": data_line[0:9].replace(FILLER, ""),
        "nationality": data_line[10:13].replace(FILLER, ""),
        "date_of_birth": data_line[13:19],
        "sex": data_line[20:21].replace(FILLER, ""),
        "expiry_date": data_line[21:27],
    }

    if name_line and len(name_line) >= 5:
        surname, given_names = _names(name_line)
        fields.update(
            {
                "document_type": name_line[0:2].replace(FILLER, ""),
                "issuing_country": name_line[2:5].replace(FILLER, ""),
                "surname": surname,
                "given_names": given_names,
                "full_name": " ".join(part for part in (given_names, surname) if part),
            }
        )

    return {key: value for key, value in fields.items() if value}
