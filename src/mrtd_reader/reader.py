"""
Passport reading orchestration.

:class:`PassportReader` owns the scanning gate and the read session, and calls the pure pipeline
components in order: detect, correct and extract on camera text; then, once the chip transport has
returned its data groups, verify, reconcile and classify.
"""

from __future__ import annotations

import logging
from datetime import date

from mrtd_reader.config import ReaderSettings
from mrtd_reader.crypto.integrity import IntegrityVerifier
from mrtd_reader.exceptions import (
    MissingDataGroupError,
    MRZError,
    TransportError,
    TransportErrorKind,
)
from mrtd_reader.lds import DataGroupParsingError, chip_personal_fields, extract_face_image
from mrtd_reader.models.mrz import MRZRecord
from mrtd_reader.models.passport import (
    AuthenticationStatus,
    DataGroupTag,
    PassportRecord,
    SignatureCheck,
    ValidityStatus,
)
from mrtd_reader.mrz.corrector import FieldCorrector
from mrtd_reader.mrz.detector import PatternDetector, ScanGate
from mrtd_reader.mrz.extractor import (
    CHECK_DIGIT_INCLUSIVE_LAYOUT,
    FieldLayout,
    extract_record,
    get_layout,
)
from mrtd_reader.reconciler import RecordReconciler
from mrtd_reader.session import (
    ChipReadResult,
    ChipTransport,
    ReadSession,
    ReadSucceeded,
    SessionState,
)
from mrtd_reader.validity import EXPIRING_SOON_DAYS, assess_expiry

logger = logging.getLogger(__name__)


class PassportReader:
    """Drives one scan-then-read cycle against an external chip transport."""

    def __init__(
        self,
        transport: ChipTransport,
        *,
        layout: FieldLayout = CHECK_DIGIT_INCLUSIVE_LAYOUT,
        detector: PatternDetector | None = None,
        corrector: FieldCorrector | None = None,
        verifier: IntegrityVerifier | None = None,
        reconciler: RecordReconciler | None = None,
        required_data_groups: tuple[DataGroupTag, ...] = (DataGroupTag.DG1,),
        expiry_warning_days: int = EXPIRING_SOON_DAYS,
    ) -> None:
        self._transport = transport
        self.layout = layout
        self.detector = detector or PatternDetector()
        self.corrector = corrector or FieldCorrector()
        self.verifier = verifier or IntegrityVerifier()
        self.reconciler = reconciler or RecordReconciler()
        self.expiry_warning_days = expiry_warning_days
        self.gate = ScanGate()
        self.session = ReadSession(required_data_groups)
        self._logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    @classmethod
    def from_settings(cls, transport: ChipTransport, settings: ReaderSettings) -> PassportReader:
        return cls(
            transport,
            layout=get_layout(settings.field_layout),
            required_data_groups=tuple(
                DataGroupTag(name.upper()) for name in settings.required_data_groups
            ),
            expiry_warning_days=settings.expiry_warning_days,
        )

    # ------------------------------------------------------------------
    # Camera side
    # ------------------------------------------------------------------
    def decode_line(self, candidate: str) -> MRZRecord:
        """Correct and decode a detector-selected line.

        Raises:
            MRZError: If the line is too short or a field is empty
        """
        correction = self.corrector.correct(candidate)
        if correction.corrected:
            self._logger.info("Applied %d OCR corrections", len(correction.corrections))
        record = extract_record(correction.line, self.layout)
        self._logger.debug("Access key: %s", record.access_key)
        return record

    def process_frame(self, text: str) -> MRZRecord | None:
        """
        Run detection and decoding on one frame of recognised text.

        At most one frame per scanning session yields a record. A structurally malformed candidate
        reopens the gate so scanning can continue.
        """
        candidate = self.detector.detect(text, self.gate)
        if candidate is None:
            return None

        try:
            return self.decode_line(candidate)
        except MRZError as exc:
            self._logger.warning("Discarding MRZ candidate: %s", exc.message)
            self.gate.reopen()
            return None

    # ------------------------------------------------------------------
    # Chip side
    # ------------------------------------------------------------------
    def _authenticate(self, result: ChipReadResult) -> tuple[AuthenticationStatus, list[str]]:
        errors: list[str] = []
        chip_auth_success = False
        hash_algorithm = None
        signature_check = SignatureCheck.NOT_IMPLEMENTED

        try:
            integrity = self.verifier.verify(result.data_groups)
            chip_auth_success = integrity.chip_auth_success
            hash_algorithm = integrity.algorithm
            if not chip_auth_success:
                errors.append("DG1 digest not found in SOD")
        except MissingDataGroupError as exc:
            self._logger.warning("Integrity check skipped: %s", exc.message)
            errors.append(exc.message)

        try:
            signature_check = self.verifier.verify_digital_signature(result.data_groups)
        except MissingDataGroupError as exc:
            self._logger.debug("Signature check skipped: %s", exc.message)

        status = AuthenticationStatus(
            bac_success=result.bac_success,
            chip_auth_success=chip_auth_success,
            hash_algorithm=hash_algorithm,
            signature_check=signature_check,
        )
        return status, errors

    def _chip_fields(self, result: ChipReadResult) -> tuple[dict[str, str], list[str]]:
        fields: dict[str, str] = {}
        errors: list[str] = []
        dg1 = result.data_groups.get(DataGroupTag.DG1)
        if dg1 is not None:
            try:
                fields.update(chip_personal_fields(dg1))
            except DataGroupParsingError as exc:
                self._logger.warning("Could not decode DG1: %s", exc)
                errors.append(str(exc))
        fields.update({key: value for key, value in result.personal_fields.items() if value})
        return fields, errors

    async def read_chip(self, record: MRZRecord, name_line: str | None = None) -> PassportRecord:
        """
        Read the chip with the record's access key and build the passport record.

        Verification failures lower the trust flags but still produce a record.

        Raises:
            TransportError: If the transport fails; the session is left in FAILED
            InvalidSessionTransitionError: If a previous session was not reset
        """
        self.session.begin()
        try:
            result = await self._transport.read_passport(record.access_key, self.session.handle)
        except TransportError as exc:
            self._logger.error("Chip read failed: %s", exc.message)
            self.session.fail(exc)
            raise
        except Exception as exc:
            error = TransportError(TransportErrorKind.UNKNOWN, str(exc))
            self._logger.exception("Chip transport raised an unexpected error")
            self.session.fail(error)
            raise error from exc

        if self.session.state is not SessionState.COMPLETED:
            self.session.handle(ReadSucceeded())
        if self.session.state is SessionState.FAILED:
            error = self.session.error or TransportError(TransportErrorKind.UNKNOWN)
            self._logger.error("Chip read incomplete: %s", error.message)
            raise error

        authentication, auth_errors = self._authenticate(result)
        chip_fields, field_errors = self._chip_fields(result)

        photo = result.photo
        dg2 = result.data_groups.get(DataGroupTag.DG2)
        if photo is None and dg2 is not None:
            photo = extract_face_image(dg2)

        return self.reconciler.reconcile(
            record,
            chip_fields=chip_fields,
            name_line=name_line,
            authentication=authentication,
            reading_errors=[*result.reading_errors, *field_errors, *auth_errors],
            photo=photo,
            additional_info=result.additional_info,
        )

    def mrz_only_record(
        self, record: MRZRecord, reading_errors: tuple[str, ...] = (), name_line: str | None = None
    ) -> PassportRecord:
        """Degraded record built from the MRZ alone, for when the chip cannot be read."""
        return self.reconciler.reconcile(
            record, name_line=name_line, reading_errors=reading_errors
        )

    def validity(self, record: PassportRecord, today: date) -> ValidityStatus:
        return assess_expiry(record.expiry_date, today, self.expiry_warning_days)

    def reset(self) -> None:
        """User-initiated restart: reopen scanning and return the session to READY."""
        self.session.reset()
        self.gate.reopen()
