"""BAC access key construction."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from mrtd_reader.models.mrz import MRZRecord


def build_access_key(record: MRZRecord) -> str:
    """
    Concatenate document number, date of birth and expiry date, in that order.

    No normalisation or hashing is applied: the chip transport derives the actual BAC keys from
    this string, check digits included.
    """
    return record.document_number + record.date_of_birth + record.expiry_date
