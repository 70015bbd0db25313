"""MRZ detection, correction and decoding."""

from .access_key import build_access_key
from .check_digit import compute_check_digit, td3_check_digit_report, validate_check_digit
from .corrector import (
    DEFAULT_RULES,
    GENDER_RULE,
    CorrectionResult,
    FieldCorrector,
    SubstitutionRule,
)
from .detector import DEFAULT_CRITERIA, DetectionCriteria, PatternDetector, ScanGate, clean_line
from .extractor import (
    CHECK_DIGIT_INCLUSIVE_LAYOUT,
    LAYOUTS,
    LEGACY_LAYOUT,
    FieldLayout,
    extract_record,
    get_layout,
    mrz_personal_fields,
    select_data_line,
)

__all__ = [
    "CHECK_DIGIT_INCLUSIVE_LAYOUT",
    "DEFAULT_CRITERIA",
    "DEFAULT_RULES",
    "GENDER_RULE",
    "LAYOUTS",
    "LEGACY_LAYOUT",
    "CorrectionResult",
    "DetectionCriteria",
    "FieldCorrector",
    "FieldLayout",
    "PatternDetector",
    "ScanGate",
    "SubstitutionRule",
    "build_access_key",
    "clean_line",
    "compute_check_digit",
    "extract_record",
    "get_layout",
    "mrz_personal_fields",
    "select_data_line",
    "td3_check_digit_report",
    "validate_check_digit",
]
