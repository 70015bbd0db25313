"""Data models shared by the reading pipeline."""

from .mrz import (
    DEFAULT_FIELD_LAYOUT,
    FILLER,
    MRZ_LINE_LENGTH,
    LineStatistics,
    MRZRecord,
    is_mrz_line,
    line_statistics,
)
from .passport import (
    UNKNOWN,
    AuthenticationStatus,
    DataGroupSet,
    DataGroupTag,
    PassportRecord,
    PersonalDetails,
    SignatureCheck,
    ValidityState,
    ValidityStatus,
    make_data_group_set,
)

__all__ = [
    "DEFAULT_FIELD_LAYOUT",
    "FILLER",
    "MRZ_LINE_LENGTH",
    "UNKNOWN",
    "AuthenticationStatus",
    "DataGroupSet",
    "DataGroupTag",
    "LineStatistics",
    "MRZRecord",
    "PassportRecord",
    "PersonalDetails",
    "SignatureCheck",
    "ValidityState",
    "ValidityStatus",
    "is_mrz_line",
    "line_statistics",
    "make_data_group_set",
]
