"""
Machine Readable Zone (MRZ) data models.

Only the TD3 data line (the second line of a passport MRZ) is modelled here: it carries every
field needed to unlock the chip.
"""

from __future__ import annotations

from typing import NamedTuple

from pydantic import BaseModel, field_validator

MRZ_LINE_LENGTH = 44
FILLER = "<"
DEFAULT_FIELD_LAYOUT = "check-digit-inclusive-v2"


def camel_case(snake_str: str) -> str:
    """Convert snake_case to camelCase."""
    components = snake_str.split("_")
    return components[0] + "".join(x.title() for x in components[1:])


class LineStatistics(NamedTuple):
    length: int
    digits: int
    letters: int
    fillers: int


def line_statistics(line: str) -> LineStatistics:
    """Count the character classes the MRZ heuristics look at."""
    return LineStatistics(
        length=len(line),
        digits=sum(1 for char in line if char.isdigit()),
        letters=sum(1 for char in line if char.isalpha()),
        fillers=line.count(FILLER),
    )


def is_mrz_line(line: str) -> bool:
    """Check the invariants of a corrected TD3 data line."""
    stats = line_statistics(line)
    return (
        stats.length == MRZ_LINE_LENGTH
        and stats.fillers >= 1
        and stats.digits >= 8
        and stats.letters >= 3
    )


class MRZRecord(BaseModel):
    """Fields decoded from one corrected MRZ data line."""

    document_number: str
    date_of_birth: str
    expiry_date: str
    raw_line: str
    field_layout: str = DEFAULT_FIELD_LAYOUT

    model_config = {
        "frozen": True,
        "extra": "forbid",
        "populate_by_name": True,
        "alias_generator": camel_case,
    }

    @field_validator("document_number", "date_of_birth", "expiry_date")
    @classmethod
    def validate_not_empty(cls, v):
        if not v:
            msg = "MRZ fields must not be empty"
            raise ValueError(msg)
        return v

    @field_validator("raw_line")
    @classmethod
    def validate_line_length(cls, v):
        if len(v) != MRZ_LINE_LENGTH:
            msg = f"MRZ line must be exactly {MRZ_LINE_LENGTH} characters long"
            raise ValueError(msg)
        return v

    @property
    def access_key(self) -> str:
        """Plaintext key handed to the chip transport to seed BAC."""
        from mrtd_reader.mrz.access_key import build_access_key

        return build_access_key(self)

    def check_digit_report(self) -> dict[str, bool]:
        """Report which ICAO check digits of the raw line are consistent."""
        from mrtd_reader.mrz.check_digit import td3_check_digit_report

        return td3_check_digit_report(self.raw_line)

    def to_dict(self) -> dict:
        """Convert to dictionary with camelCase keys."""
        return self.model_dump(by_alias=True)

    @classmethod
    def from_dict(cls, data: dict) -> MRZRecord:
        """Create an instance from a dictionary with camelCase keys."""
        return cls.model_validate(data)
