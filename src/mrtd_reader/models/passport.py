"""
Passport data models for the MRTD reader.

These models describe what the reading pipeline hands to storage and presentation. They are
immutable once built; persistence owns anything that changes afterwards.
"""

from __future__ import annotations

import base64
import logging
from collections.abc import Mapping
from datetime import datetime, timezone
from enum import Enum
from types import MappingProxyType
from typing import Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field, field_serializer, field_validator, model_validator

from mrtd_reader.models.mrz import MRZRecord, camel_case

logger = logging.getLogger(__name__)

UNKNOWN = "Unknown"


class DataGroupTag(str, Enum):
    """Elementary files a chip transport may return, as defined in ICAO Doc 9303."""

    COM = "COM"  # Common data
    SOD = "SOD"  # Document Security Object
    DG1 = "DG1"  # Machine Readable Zone (MRZ)
    DG2 = "DG2"  # Encoded Facial Image
    DG11 = "DG11"  # Additional Personal Details
    DG12 = "DG12"  # Additional Document Details
    DG13 = "DG13"  # Optional Details
    DG14 = "DG14"  # Security Options
    DG15 = "DG15"  # Active Authentication Public Key Info


DataGroupSet = Mapping[DataGroupTag, bytes]


def make_data_group_set(groups: Mapping[str | DataGroupTag, bytes]) -> DataGroupSet:
    """
    Build a read-only data group set from transport output.

    Args:
        groups: Mapping of tag (enum or its name, e.g. ``"DG1"``) to raw bytes

    Returns:
        Immutable mapping keyed by ``DataGroupTag``

    Raises:
        ValueError: If a tag is not part of the supported enumeration
    """
    normalized: dict[DataGroupTag, bytes] = {}
    for key, content in groups.items():
        tag = key if isinstance(key, DataGroupTag) else DataGroupTag(str(key).upper())
        normalized[tag] = bytes(content)
    return MappingProxyType(normalized)


class SignatureCheck(str, Enum):
    """Outcome of the document signature (PKI) check."""

    VERIFIED = "verified"
    FAILED = "failed"
    NOT_IMPLEMENTED = "not_implemented"

    @property
    def is_verified(self) -> bool:
        return self is SignatureCheck.VERIFIED


class AuthenticationStatus(BaseModel):
    """Trust level reached while reading the chip."""

    bac_success: bool = False
    chip_auth_success: bool = False
    digital_signature_verified: bool = False
    hash_algorithm: Optional[str] = None
    signature_check: SignatureCheck = SignatureCheck.NOT_IMPLEMENTED

    model_config = {
        "frozen": True,
        "extra": "forbid",
        "populate_by_name": True,
        "alias_generator": camel_case,
    }

    @model_validator(mode="before")
    @classmethod
    def derive_signature_flag(cls, values):
        """Fill ``digital_signature_verified`` from ``signature_check`` when it is not given."""
        if not isinstance(values, dict):
            return values
        if "digital_signature_verified" in values or "digitalSignatureVerified" in values:
            return values
        check = values.get("signature_check", values.get("signatureCheck"))
        if check is None:
            return values
        try:
            verified = SignatureCheck(check).is_verified
        except ValueError:
            return values
        return {**values, "digital_signature_verified": verified}

    @model_validator(mode="after")
    def match_signature_check(self):
        if self.digital_signature_verified != self.signature_check.is_verified:
            msg = "digital_signature_verified must match signature_check"
            raise ValueError(msg)
        return self

    @property
    def is_authenticated(self) -> bool:
        return self.bac_success and self.chip_auth_success


class PersonalDetails(BaseModel):
    """Canonical holder record merged from chip and MRZ sources."""

    full_name: str
    surname: str
    given_names: str
    nationality: str
    date_of_birth: str
    place_of_birth: Optional[str] = None
    sex: str
    document_number: str
    document_type: str
    issuing_country: str
    expiry_date: str

    model_config = {
        "frozen": True,
        "extra": "forbid",
        "populate_by_name": True,
        "alias_generator": camel_case,
    }


class ValidityState(str, Enum):
    """Document expiry classification."""

    VALID = "valid"
    EXPIRING_SOON = "expiring_soon"
    EXPIRED = "expired"

    @property
    def description(self) -> str:
        descriptions = {
            ValidityState.VALID: "Valid",
            ValidityState.EXPIRING_SOON: "Expires Soon",
            ValidityState.EXPIRED: "Expired",
        }
        return descriptions[self]


class ValidityStatus(BaseModel):
    """Expiry classification with the day count it was derived from.

    ``days_remaining`` is ``None`` only when the expiry date could not be parsed.
    """

    state: ValidityState
    days_remaining: Optional[int] = None

    model_config = {"frozen": True, "extra": "forbid"}

    @property
    def is_valid(self) -> bool:
        return self.state is not ValidityState.EXPIRED


class PassportRecord(BaseModel):
    """Aggregate produced once per successful document read."""

    id: UUID = Field(default_factory=uuid4)
    mrz: MRZRecord
    personal_details: Optional[PersonalDetails] = None
    authentication: AuthenticationStatus = Field(default_factory=AuthenticationStatus)
    photo: Optional[bytes] = None
    additional_info: Mapping[str, str] = Field(default_factory=lambda: MappingProxyType({}))
    reading_errors: tuple[str, ...] = ()
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    model_config = {
        "frozen": True,
        "extra": "forbid",
        "populate_by_name": True,
        "alias_generator": camel_case,
    }

    @field_validator("photo", mode="before")
    @classmethod
    def decode_photo(cls, v):
        if isinstance(v, str):
            try:
                return base64.b64decode(v, validate=True)
            except ValueError as exc:
                msg = "Photo must be base64 encoded"
                raise ValueError(msg) from exc
        return v

    @field_validator("additional_info")
    @classmethod
    def freeze_additional_info(cls, v: Mapping[str, str]) -> Mapping[str, str]:
        return MappingProxyType(dict(v))

    @field_serializer("photo", when_used="json-unless-none")
    def encode_photo(self, v: bytes) -> str:
        return base64.b64encode(v).decode("ascii")

    @field_serializer("additional_info")
    def dump_additional_info(self, v: Mapping[str, str]) -> dict[str, str]:
        return dict(v)

    @property
    def has_photo(self) -> bool:
        return self.photo is not None

    @property
    def display_name(self) -> str:
        if self.personal_details is None:
            return UNKNOWN
        return self.personal_details.full_name

    @property
    def expiry_date(self) -> str:
        """Expiry date as shown to the user, falling back to the MRZ YYMMDD digits."""
        if self.personal_details is not None:
            return self.personal_details.expiry_date
        return self.mrz.expiry_date[:6]
