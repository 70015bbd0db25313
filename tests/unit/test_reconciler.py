import base64
import json
from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from mrtd_reader.models import AuthenticationStatus, PassportRecord
from mrtd_reader.mrz import extract_record
from mrtd_reader.reconciler import RecordReconciler

JPEG = b"\xff\xd8\xff\xe0fake-face\xff\xd9"


@pytest.fixture
def mrz(data_line):
    return extract_record(data_line)


@pytest.fixture
def reconciler():
    return RecordReconciler()


def test_chip_value_wins(reconciler):
    details = reconciler.merge_personal_details(
        {"surname": "ERIKSSON-CHIP"}, {"surname": "ERIKSSON"}
    )

    assert details.surname == "ERIKSSON-CHIP"


@pytest.mark.parametrize("chip_value", [None, "", "   "])
def test_empty_chip_value_falls_back_to_mrz(reconciler, chip_value):
    chip = {} if chip_value is None else {"nationality": chip_value}

    details = reconciler.merge_personal_details(chip, {"nationality": "UTO"})

    assert details.nationality == "UTO"


def test_missing_values_become_unknown(reconciler):
    details = reconciler.merge_personal_details({}, {})

    assert details.full_name == "Unknown"
    assert details.expiry_date == "Unknown"
    assert details.place_of_birth is None


def test_place_of_birth_only_from_chip(reconciler):
    details = reconciler.merge_personal_details({"place_of_birth": "ZENITH"}, {})

    assert details.place_of_birth == "ZENITH"


def test_mrz_only_record(reconciler, mrz):
    record = reconciler.reconcile(mrz)
    details = record.personal_details

    assert details.document_number == "L898902C3"
    assert details.nationality == "UTO"
    assert details.date_of_birth == "740812"
    assert details.sex == "F"
    assert details.expiry_date == "120415"
    assert details.full_name == "Unknown"
    assert not record.authentication.is_authenticated
    assert record.photo is None


def test_name_line_fills_names(reconciler, mrz, name_line):
    record = reconciler.reconcile(mrz, name_line=name_line)

    assert record.display_name == "ANNA MARIA ERIKSSON"
    assert record.personal_details.document_type == "P"


def test_reading_errors_are_kept_verbatim(reconciler, mrz):
    errors = ["Tag connection lost", "DG2 read timed out"]

    record = reconciler.reconcile(mrz, reading_errors=errors)

    assert record.reading_errors == ("Tag connection lost", "DG2 read timed out")


def test_record_is_immutable(reconciler, mrz):
    record = reconciler.reconcile(mrz)

    with pytest.raises(ValidationError):
        record.photo = JPEG


def test_additional_info_is_read_only(reconciler, mrz):
    source = {"chipId": "04A224"}
    record = reconciler.reconcile(mrz, additional_info=source)
    source["chipId"] = "changed"

    with pytest.raises(TypeError):
        record.additional_info["a"] = "tampered"
    with pytest.raises(TypeError):
        PassportRecord(mrz=mrz).additional_info["a"] = "tampered"

    assert record.additional_info == {"chipId": "04A224"}
    assert reconciler.serialize(record)["additionalInfo"] == {"chipId": "04A224"}


def test_signature_flag_follows_signature_check():
    assert not AuthenticationStatus().digital_signature_verified
    assert AuthenticationStatus(signature_check="verified").digital_signature_verified

    with pytest.raises(ValidationError):
        AuthenticationStatus(digital_signature_verified=True)
    with pytest.raises(ValidationError):
        AuthenticationStatus.model_validate(
            {"digitalSignatureVerified": True, "signatureCheck": "not_implemented"}
        )


def test_deserialize_rejects_inconsistent_signature_flag(reconciler, mrz):
    payload = reconciler.serialize(reconciler.reconcile(mrz))
    assert payload["authentication"]["digitalSignatureVerified"] is False
    payload["authentication"]["digitalSignatureVerified"] = True

    with pytest.raises(ValidationError):
        reconciler.deserialize(payload)


def test_serialize_uses_camel_case_and_omits_absent_values(reconciler, mrz):
    payload = reconciler.serialize(reconciler.reconcile(mrz))

    assert payload["mrz"]["documentNumber"] == "L898902C36"
    assert "personalDetails" in payload
    assert "placeOfBirth" not in payload["personalDetails"]
    assert "photo" not in payload
    assert "hashAlgorithm" not in payload["authentication"]
    assert payload["readingErrors"] == []


def test_round_trip(reconciler, mrz, name_line):
    record = reconciler.reconcile(
        mrz,
        chip_fields={"place_of_birth": "ZENITH"},
        name_line=name_line,
        authentication=AuthenticationStatus(
            bac_success=True, chip_auth_success=True, hash_algorithm="sha256"
        ),
        reading_errors=["DG11 not present"],
        photo=JPEG,
        additional_info={"chipId": "04A224"},
        created_at=datetime(2025, 1, 1, 12, 30, tzinfo=timezone.utc),
    )

    restored = reconciler.deserialize(reconciler.serialize(record))

    assert restored == record
    assert restored.photo == JPEG
    assert restored.authentication.is_authenticated


def test_json_round_trip(reconciler, mrz):
    record = reconciler.reconcile(mrz, photo=JPEG)

    payload = reconciler.to_json(record)
    restored = reconciler.from_json(payload)

    assert json.loads(payload)["photo"] == base64.b64encode(JPEG).decode("ascii")
    assert restored == record


def test_deserialize_rejects_bad_photo(reconciler, mrz):
    payload = reconciler.serialize(reconciler.reconcile(mrz))
    payload["photo"] = "not base64!"

    with pytest.raises(ValidationError):
        reconciler.deserialize(payload)


def test_expiry_date_falls_back_to_mrz(mrz):
    assert PassportRecord(mrz=mrz).expiry_date == "120415"
