"""
Logical Data Structure helpers for chip-reported data groups.

DG1 holds the chip's copy of the MRZ (tag 0x61 wrapping tag 0x5F1F); DG2 embeds the facial image
inside ISO/IEC 19794-5 biometric templates.
"""

from __future__ import annotations

import logging

from asn1crypto import parser

from mrtd_reader.mrz.extractor import mrz_personal_fields

logger = logging.getLogger(__name__)

CLASS_APPLICATION = 1
DG1_TAG = 1  # 0x61
MRZ_INFO_TAG = 31  # 0x5F1F

TD3_LINE_LENGTH = 44

JPEG_MAGIC = b"\xff\xd8\xff"
JPEG2000_MAGICS = (
    b"\x00\x00\x00\x0cjP  \r\n\x87\n",  # JP2 container
    b"\xff\x4f\xff\x51",  # raw codestream
)


class DataGroupParsingError(ValueError):
    """Raised when a data group does not have the expected structure."""


def _unwrap(data: bytes, expected_tag: int, label: str) -> bytes:
    try:
        class_, _method, tag, _header, contents, _trailer = parser.parse(data, strict=False)
    except ValueError as exc:
        msg = f"Invalid {label}: {exc}"
        raise DataGroupParsingError(msg) from exc

    if class_ != CLASS_APPLICATION or tag != expected_tag:
        msg = f"Invalid {label}: unexpected tag class={class_} number={tag}"
        raise DataGroupParsingError(msg)
    return contents


def parse_dg1_mrz(dg1_data: bytes) -> str:
    """
    Extract the MRZ text stored in DG1.

    Args:
        dg1_data: Raw DG1 bytes

    Returns:
        MRZ characters as stored on the chip (no line separators)

    Raises:
        DataGroupParsingError: If the TLV structure is not a DG1 MRZ
    """
    if not dg1_data:
        msg = "Invalid DG1 data: empty"
        raise DataGroupParsingError(msg)

    inner = _unwrap(dg1_data, DG1_TAG, "DG1 data")
    mrz_bytes = _unwrap(inner, MRZ_INFO_TAG, "DG1 MRZ info")

    try:
        return mrz_bytes.decode("ascii")
    except UnicodeDecodeError as exc:
        msg = "Invalid DG1 data: MRZ is not ASCII"
        raise DataGroupParsingError(msg) from exc


def chip_personal_fields(dg1_data: bytes) -> dict[str, str]:
    """
    Turn a TD3 DG1 into ``PersonalDetails`` field values.

    Raises:
        DataGroupParsingError: If DG1 is malformed or not a two-line TD3 MRZ
    """
    mrz = parse_dg1_mrz(dg1_data)
    if len(mrz) != 2 * TD3_LINE_LENGTH:
        msg = f"Unsupported DG1 MRZ length {len(mrz)}, expected {2 * TD3_LINE_LENGTH}"
        raise DataGroupParsingError(msg)

    name_line, data_line = mrz[:TD3_LINE_LENGTH], mrz[TD3_LINE_LENGTH:]
    fields = mrz_personal_fields(data_line, name_line)
    logger.debug("Decoded %d personal fields from DG1", len(fields))
    return fields


def extract_face_image(dg2_data: bytes) -> bytes | None:
    """
    Locate the facial image embedded in DG2.

    Returns the bytes from the first JPEG or JPEG 2000 signature to the end of the data group, or
    None if no image signature is present.
    """
    candidates = [dg2_data.find(magic) for magic in (JPEG_MAGIC, *JPEG2000_MAGICS)]
    offsets = [offset for offset in candidates if offset >= 0]
    if not offsets:
        logger.warning("No facial image found in DG2 (%d bytes)", len(dg2_data))
        return None
    return dg2_data[min(offsets) :]
