"""Travel document MRZ decoding and chip data verification."""

from .crypto import IntegrityResult, IntegrityVerifier
from .exceptions import (
    ConfigurationError,
    EmptyFieldError,
    ErrorCode,
    InvalidDateFormatError,
    InvalidSessionTransitionError,
    MalformedLineError,
    MissingDataGroupError,
    MRZError,
    MrtdReaderError,
    PersistenceError,
    TooShortError,
    TransportError,
    TransportErrorKind,
)
from .models import (
    AuthenticationStatus,
    DataGroupTag,
    MRZRecord,
    PassportRecord,
    PersonalDetails,
    SignatureCheck,
    ValidityState,
    ValidityStatus,
    make_data_group_set,
)
from .mrz import FieldCorrector, PatternDetector, ScanGate, build_access_key, extract_record
from .reader import PassportReader
from .reconciler import RecordReconciler
from .session import ChipReadResult, ChipTransport, ReadSession, SessionState

__version__ = "0.1.0"

__all__ = [
    "AuthenticationStatus",
    "ChipReadResult",
    "ChipTransport",
    "ConfigurationError",
    "DataGroupTag",
    "EmptyFieldError",
    "ErrorCode",
    "FieldCorrector",
    "IntegrityResult",
    "IntegrityVerifier",
    "InvalidDateFormatError",
    "InvalidSessionTransitionError",
    "MalformedLineError",
    "MRZError",
    "MRZRecord",
    "MissingDataGroupError",
    "MrtdReaderError",
    "PassportReader",
    "PassportRecord",
    "PatternDetector",
    "PersistenceError",
    "PersonalDetails",
    "ReadSession",
    "RecordReconciler",
    "ScanGate",
    "SessionState",
    "SignatureCheck",
    "TooShortError",
    "TransportError",
    "TransportErrorKind",
    "ValidityState",
    "ValidityStatus",
    "build_access_key",
    "extract_record",
    "make_data_group_set",
]
