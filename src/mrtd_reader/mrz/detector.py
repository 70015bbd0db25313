"""
MRZ candidate detection over recognised text.

The text recognition collaborator delivers one block of text per video frame. Detection itself is
a pure function; the only shared state is the :class:`ScanGate` that makes a successful detection
happen at most once per scanning session, even when frames are processed concurrently.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass

from mrtd_reader.models.mrz import FILLER, line_statistics

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class DetectionCriteria:
    """Thresholds a cleaned line must meet to count as an MRZ data line candidate."""

    min_length: int = 40
    min_digits: int = 8
    min_letters: int = 3
    filler: str = FILLER


DEFAULT_CRITERIA = DetectionCriteria()


def clean_line(line: str) -> str:
    """Remove all whitespace and uppercase a recognised line."""
    return "".join(line.split()).upper()


class ScanGate:
    """Single "still scanning" flag with single-winner claim semantics."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._open = True
        self._logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    @property
    def is_open(self) -> bool:
        with self._lock:
            return self._open

    def try_claim(self) -> bool:
        """Close the gate; returns True only for the caller that actually closed it."""
        with self._lock:
            if not self._open:
                return False
            self._open = False
        self._logger.debug("Scan gate closed")
        return True

    def reopen(self) -> None:
        with self._lock:
            self._open = True
        self._logger.debug("Scan gate reopened")


class PatternDetector:
    """Find the first MRZ data line candidate in a frame of recognised text."""

    def __init__(self, criteria: DetectionCriteria = DEFAULT_CRITERIA) -> None:
        self.criteria = criteria

    def is_candidate(self, line: str) -> bool:
        """Check an already cleaned line against the detection criteria."""
        stats = line_statistics(line)
        return (
            stats.length >= self.criteria.min_length
            and stats.digits >= self.criteria.min_digits
            and stats.letters >= self.criteria.min_letters
            and self.criteria.filler in line
        )

    def find_candidate(self, text: str) -> str | None:
        """
        Return the first qualifying line of ``text`` (cleaned), or None.

        Does not touch any shared state; safe to call repeatedly on the same text.
        """
        for raw_line in text.splitlines():
            line = clean_line(raw_line)
            if self.is_candidate(line):
                return line
        return None

    def detect(self, text: str, gate: ScanGate) -> str | None:
        """
        Detect a candidate and claim the scan gate for it.

        Returns the candidate only to the single caller that closes the gate. Calls made after the
        gate has closed are no-ops.
        """
        if not gate.is_open:
            return None

        candidate = self.find_candidate(text)
        if candidate is None:
            return None

        if not gate.try_claim():
            logger.debug("Discarding MRZ candidate found after scanning stopped")
            return None

        logger.info("MRZ candidate detected (%d characters)", len(candidate))
        return candidate
