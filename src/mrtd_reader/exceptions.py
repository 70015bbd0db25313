"""
Custom exceptions for the MRTD reader.
"""

from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    """Stable error codes attached to every reader exception."""

    TOO_SHORT = "TOO_SHORT"
    MALFORMED_LINE = "MALFORMED_LINE"
    EMPTY_FIELD = "EMPTY_FIELD"
    MISSING_DATA_GROUP = "MISSING_DATA_GROUP"
    INVALID_DATE_FORMAT = "INVALID_DATE_FORMAT"
    TRANSPORT = "TRANSPORT"
    PERSISTENCE = "PERSISTENCE"
    INVALID_TRANSITION = "INVALID_TRANSITION"
    CONFIGURATION = "CONFIGURATION"
    INTERNAL = "INTERNAL"


class TransportErrorKind(str, Enum):
    """Failure categories reported by the contactless chip transport."""

    CONNECTION_FAILURE = "connection_failure"
    INVALID_KEY = "invalid_key"
    MULTIPLE_TAGS = "multiple_tags"
    NO_CHIP_FOUND = "no_chip_found"
    MALFORMED_RESPONSE = "malformed_response"
    UNSUPPORTED_DEVICE = "unsupported_device"
    INVALID_TAG = "invalid_tag"
    UNKNOWN = "unknown"

    @property
    def user_message(self) -> str:
        """Message suitable for showing to the person holding the document."""
        return _TRANSPORT_MESSAGES[self]


_TRANSPORT_MESSAGES = {
    TransportErrorKind.CONNECTION_FAILURE: "Connection to the chip was lost. Hold the document still and try again.",
    TransportErrorKind.INVALID_KEY: "The chip rejected the access key. Rescan the machine readable zone.",
    TransportErrorKind.MULTIPLE_TAGS: "More than one chip was detected. Present a single document.",
    TransportErrorKind.NO_CHIP_FOUND: "No chip was found. Make sure the document has an electronic chip.",
    TransportErrorKind.MALFORMED_RESPONSE: "The chip returned unreadable data. Try again.",
    TransportErrorKind.UNSUPPORTED_DEVICE: "This device cannot read document chips.",
    TransportErrorKind.INVALID_TAG: "The presented chip is not a travel document.",
    TransportErrorKind.UNKNOWN: "An unknown error occurred while reading the chip.",
}


class MrtdReaderError(Exception):
    """Base exception class for the MRTD reader."""

    def __init__(self, message: str, error_code: ErrorCode = ErrorCode.INTERNAL) -> None:
        super().__init__(message)
        self.message = message
        self.error_code = error_code


class MRZError(MrtdReaderError):
    """Raised when a machine readable zone line cannot be decoded."""


class TooShortError(MRZError):
    """Raised when an MRZ candidate line is shorter than a TD3 data line."""

    def __init__(self, length: int, required: int = 44) -> None:
        super().__init__(
            f"MRZ line has {length} characters, at least {required} required",
            ErrorCode.TOO_SHORT,
        )
        self.length = length
        self.required = required


class MalformedLineError(MRZError):
    """Raised when a corrected line no longer looks like a TD3 data line."""

    def __init__(self, line: str) -> None:
        super().__init__(
            "Corrected MRZ line is not a TD3 data line", ErrorCode.MALFORMED_LINE
        )
        self.line = line


class EmptyFieldError(MRZError):
    """Raised when a fixed-offset MRZ field contains only fillers."""

    def __init__(self, field_name: str) -> None:
        super().__init__(f"MRZ field '{field_name}' is empty", ErrorCode.EMPTY_FIELD)
        self.field_name = field_name


class MissingDataGroupError(MrtdReaderError):
    """Raised when a data group required for verification was not read."""

    def __init__(self, tag: str) -> None:
        super().__init__(f"Required data group {tag} is missing", ErrorCode.MISSING_DATA_GROUP)
        self.tag = tag


class InvalidDateFormatError(MrtdReaderError):
    """Raised when a date is neither YYMMDD nor DD/MM/YYYY."""

    def __init__(self, value: str) -> None:
        super().__init__(f"Unrecognised date format: {value!r}", ErrorCode.INVALID_DATE_FORMAT)
        self.value = value


class TransportError(MrtdReaderError):
    """Raised by the chip transport when a read session fails."""

    def __init__(self, kind: TransportErrorKind, detail: str | None = None) -> None:
        message = kind.user_message if detail is None else f"{kind.user_message} ({detail})"
        super().__init__(message, ErrorCode.TRANSPORT)
        self.kind = kind
        self.detail = detail

    @property
    def user_message(self) -> str:
        return self.kind.user_message


class PersistenceError(MrtdReaderError):
    """Raised when a passport record could not be stored or loaded."""

    def __init__(self, message: str) -> None:
        super().__init__(message, ErrorCode.PERSISTENCE)


class InvalidSessionTransitionError(MrtdReaderError):
    """Raised when a read session is driven out of order."""

    def __init__(self, state: str, event: str) -> None:
        super().__init__(
            f"Event '{event}' is not allowed in session state '{state}'",
            ErrorCode.INVALID_TRANSITION,
        )
        self.state = state
        self.event = event


class ConfigurationError(MrtdReaderError):
    """Exception raised for configuration-related errors."""

    def __init__(self, message: str) -> None:
        super().__init__(message, ErrorCode.CONFIGURATION)
