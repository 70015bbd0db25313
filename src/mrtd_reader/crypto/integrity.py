"""
Data Group integrity verification against the Document Security Object.

The SOD is not parsed structurally here: the DG1 digest is searched for as a contiguous byte
sequence inside the SOD blob, under each supported algorithm in a fixed priority order. The
document signature itself is not checked yet (see :meth:`IntegrityVerifier.verify_digital_signature`).
"""

from __future__ import annotations

import hashlib
import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any, ClassVar

from mrtd_reader.exceptions import MissingDataGroupError
from mrtd_reader.models.passport import DataGroupSet, DataGroupTag, SignatureCheck

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IntegrityResult:
    """Outcome of the DG1-in-SOD digest search."""

    chip_auth_success: bool
    algorithm: str | None = None
    digest: bytes | None = None
    offset: int | None = None

    @property
    def digest_hex(self) -> str | None:
        return self.digest.hex().upper() if self.digest else None


class IntegrityVerifier:
    """
    Checks chip-reported DG1 bytes against the digests held in the SOD.

    Algorithms are tried in priority order; the first one whose DG1 digest occurs inside the SOD
    wins.
    """

    HASH_ALGORITHMS: ClassVar[tuple[tuple[str, Callable[..., Any]], ...]] = (
        ("sha256", hashlib.sha256),
        ("sha1", hashlib.sha1),
        ("sha384", hashlib.sha384),
        ("sha512", hashlib.sha512),
    )

    def __init__(self) -> None:
        self.logger = logger

    @staticmethod
    def _require(data_groups: Mapping[DataGroupTag, bytes], tag: DataGroupTag) -> bytes:
        content = data_groups.get(tag)
        if content is None:
            raise MissingDataGroupError(tag.value)
        return content

    def compute_digests(self, content: bytes) -> dict[str, bytes]:
        """Digest ``content`` under every supported algorithm, in priority order."""
        return {name: hash_func(content).digest() for name, hash_func in self.HASH_ALGORITHMS}

    def verify(self, data_groups: DataGroupSet) -> IntegrityResult:
        """
        Verify DG1 integrity using the SOD.

        Args:
            data_groups: Data group set returned by the chip transport

        Returns:
            IntegrityResult; ``chip_auth_success`` is False when no digest matched

        Raises:
            MissingDataGroupError: If SOD or DG1 is absent
        """
        sod = self._require(data_groups, DataGroupTag.SOD)
        dg1 = self._require(data_groups, DataGroupTag.DG1)

        for name, digest in self.compute_digests(dg1).items():
            offset = sod.find(digest)
            self.logger.debug("DG1 %s digest %s found=%s", name, digest.hex(), offset >= 0)
            if offset >= 0:
                self.logger.info("DG1 digest matched in SOD using %s", name)
                return IntegrityResult(
                    chip_auth_success=True, algorithm=name, digest=digest, offset=offset
                )

        self.logger.warning("No DG1 digest found in SOD (%d bytes)", len(sod))
        return IntegrityResult(chip_auth_success=False)

    def verify_digital_signature(self, data_groups: DataGroupSet) -> SignatureCheck:
        """
        Check the SOD signature against the document signer certificate chain.

        Certificate chain validation is not implemented: the result is always
        ``SignatureCheck.NOT_IMPLEMENTED``, which never counts as verified.

        Raises:
            MissingDataGroupError: If SOD is absent
        """
        self._require(data_groups, DataGroupTag.SOD)
        return SignatureCheck.NOT_IMPLEMENTED
