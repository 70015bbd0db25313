"""
Merging of MRZ-derived and chip-reported values into one passport record.

Every ``PersonalDetails`` field is resolved the same way: the chip value if it is non-empty,
otherwise the MRZ-derived value, otherwise ``"Unknown"``. The optional place of birth is the one
exception: it is omitted rather than set to ``"Unknown"``, because only the chip carries it.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Mapping
from datetime import datetime
from typing import Any

from mrtd_reader.models.mrz import MRZRecord
from mrtd_reader.models.passport import (
    UNKNOWN,
    AuthenticationStatus,
    PassportRecord,
    PersonalDetails,
)
from mrtd_reader.mrz.extractor import mrz_personal_fields

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = (
    "full_name",
    "surname",
    "given_names",
    "nationality",
    "date_of_birth",
    "sex",
    "document_number",
    "document_type",
    "issuing_country",
    "expiry_date",
)


def _first_present(*values: str | None) -> str | None:
    for value in values:
        if value is not None and value.strip():
            return value
    return None


class RecordReconciler:
    """Builds immutable :class:`PassportRecord` values and round-trips them for storage."""

    def merge_personal_details(
        self,
        chip_fields: Mapping[str, str] | None,
        mrz_fields: Mapping[str, str] | None,
    ) -> PersonalDetails:
        """Resolve every field chip-first, then MRZ, then ``"Unknown"``."""
        chip_fields = chip_fields or {}
        mrz_fields = mrz_fields or {}

        resolved: dict[str, Any] = {}
        for name in REQUIRED_FIELDS:
            value = _first_present(chip_fields.get(name), mrz_fields.get(name))
            resolved[name] = value if value is not None else UNKNOWN

        place_of_birth = _first_present(
            chip_fields.get("place_of_birth"), mrz_fields.get("place_of_birth")
        )
        if place_of_birth is not None:
            resolved["place_of_birth"] = place_of_birth

        return PersonalDetails(**resolved)

    def reconcile(
        self,
        mrz: MRZRecord,
        *,
        chip_fields: Mapping[str, str] | None = None,
        name_line: str | None = None,
        authentication: AuthenticationStatus | None = None,
        reading_errors: Iterable[str] = (),
        photo: bytes | None = None,
        additional_info: Mapping[str, str] | None = None,
        created_at: datetime | None = None,
    ) -> PassportRecord:
        """
        Assemble the passport record for one read.

        Args:
            mrz: Record decoded from the scanned data line
            chip_fields: Personal fields reported by the chip, if it was read
            name_line: First MRZ line, when the scan captured it
            authentication: Trust flags from the chip session
            reading_errors: Transport messages, carried through verbatim
            photo: Facial image bytes
            additional_info: Free-form key/value pairs
            created_at: Creation timestamp; defaults to now (UTC)
        """
        mrz_fields = mrz_personal_fields(mrz.raw_line, name_line)
        details = self.merge_personal_details(chip_fields, mrz_fields)

        values: dict[str, Any] = {
            "mrz": mrz,
            "personal_details": details,
            "authentication": authentication or AuthenticationStatus(),
            "photo": photo,
            "additional_info": dict(additional_info or {}),
            "reading_errors": tuple(reading_errors),
        }
        if created_at is not None:
            values["created_at"] = created_at

        record = PassportRecord(**values)
        logger.info(
            "Passport record %s assembled (chip fields: %d, errors: %d)",
            record.id,
            len(chip_fields or {}),
            len(record.reading_errors),
        )
        return record

    @staticmethod
    def serialize(record: PassportRecord) -> dict[str, Any]:
        """
        Convert a record to a JSON-compatible dictionary with camelCase keys.

        Optional values that are not set are left out entirely; the photo is base64 text.
        """
        return record.model_dump(mode="json", by_alias=True, exclude_none=True)

    @staticmethod
    def deserialize(data: Mapping[str, Any]) -> PassportRecord:
        return PassportRecord.model_validate(dict(data))

    def to_json(self, record: PassportRecord) -> str:
        return json.dumps(self.serialize(record), sort_keys=True, separators=(",", ":"))

    def from_json(self, payload: str | bytes) -> PassportRecord:
        return self.deserialize(json.loads(payload))
