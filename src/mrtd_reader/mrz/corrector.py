"""
OCR error correction for MRZ data lines.

Corrections are expressed as declarative :class:`SubstitutionRule` tables keyed by character
offset, so new fields or locale-specific confusions can be added without new branching code.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

from mrtd_reader.exceptions import MalformedLineError, TooShortError
from mrtd_reader.models.mrz import MRZ_LINE_LENGTH, is_mrz_line

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SubstitutionRule:
    """Repair policy for the single character at ``offset``."""

    name: str
    offset: int
    valid: frozenset[str]
    substitutions: Mapping[str, str] = field(default_factory=dict)
    default: str | None = None

    def apply(self, char: str) -> str:
        if char in self.valid:
            return char
        if char in self.substitutions:
            return self.substitutions[char]
        if self.default is not None:
            return self.default
        return char


def _table(groups: Mapping[str, Iterable[str]]) -> dict[str, str]:
    return {source: target for target, sources in groups.items() for source in sources}


GENDER_RULE = SubstitutionRule(
    name="sex",
    offset=20,
    valid=frozenset({"M", "F"}),
    substitutions=_table(
        {
            "M": ("9", "0", "Q", "H", "8"),
            "F": ("1", "I", "l"),
        }
    ),
    default="M",
)

DEFAULT_RULES: tuple[SubstitutionRule, ...] = (GENDER_RULE,)


@dataclass(frozen=True)
class CorrectionResult:
    """Corrected line plus diagnostics of what changed."""

    line: str
    corrections: tuple[tuple[str, str, str], ...] = ()

    @property
    def corrected(self) -> bool:
        return bool(self.corrections)


class FieldCorrector:
    """Apply substitution rules to a detector-selected MRZ line."""

    def __init__(self, rules: Iterable[SubstitutionRule] = DEFAULT_RULES) -> None:
        self.rules = tuple(rules)

    def correct(self, line: str) -> CorrectionResult:
        """
        Repair known OCR confusions.

        Lines longer than a TD3 data line are truncated to its 44 characters.

        Raises:
            TooShortError: If ``line`` has fewer than 44 characters
            MalformedLineError: If the truncated, corrected line fails the data line checks
        """
        if len(line) < MRZ_LINE_LENGTH:
            raise TooShortError(len(line), MRZ_LINE_LENGTH)

        chars = list(line[:MRZ_LINE_LENGTH])
        corrections: list[tuple[str, str, str]] = []

        for rule in self.rules:
            original = chars[rule.offset]
            replacement = rule.apply(original)
            if replacement != original:
                chars[rule.offset] = replacement
                corrections.append((rule.name, original, replacement))
                logger.debug(
                    "Corrected %s at offset %d: %r -> %r",
                    rule.name,
                    rule.offset,
                    original,
                    replacement,
                )

        corrected = "".join(chars)
        if not is_mrz_line(corrected):
            raise MalformedLineError(corrected)
        return CorrectionResult(line=corrected, corrections=tuple(corrections))
