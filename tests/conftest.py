"""
Test configuration for the MRTD reader test suite.
"""

import hashlib
from datetime import date

import pytest

# ICAO Doc 9303 Part 4 specimen passport
SPECIMEN_NAME_LINE = "P<UTOERIKSSON<<ANNA<MARIA" + "<" * 19
SPECIMEN_DATA_LINE = "L898902C36UTO7408122F1204159ZE184226B<<<<<10"

# DG1 of the specimen: tag 0x61 wrapping tag 0x5F1F with the 88 MRZ characters
SPECIMEN_DG1 = bytes.fromhex(
    "615B5f1f58503c55544f4552494b53534f4e3c3c414e4e413c4d415249413c3c3c3c3c3c3c3c3c3c3c3c3c3c3c3c3c3c3c4c38393839303243333655544f3734303831323246313230343135395a45313834323236423c3c3c3c3c3130"
)


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: mark test as a unit test")
    config.addinivalue_line("markers", "mrz: mark test as MRZ related")
    config.addinivalue_line("markers", "crypto: mark test as chip data verification related")
    config.addinivalue_line("markers", "persistence: mark test as storage related")


def pytest_collection_modifyitems(config, items):
    """Modify test collection to add markers."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        if "mrz" in str(item.fspath) or "mrz" in item.name.lower():
            item.add_marker(pytest.mark.mrz)
        if "crypto" in str(item.fspath):
            item.add_marker(pytest.mark.crypto)
        if "infrastructure" in str(item.fspath):
            item.add_marker(pytest.mark.persistence)


def build_sod(*digests: bytes) -> bytes:
    """Stand-in SOD blob: opaque bytes with the given digests embedded."""
    return b"\x77\x82\x01\x00SIGNED-DATA-HEADER" + b"\x04\x20".join(digests) + b"TRAILER"


@pytest.fixture
def name_line():
    return SPECIMEN_NAME_LINE


@pytest.fixture
def data_line():
    return SPECIMEN_DATA_LINE


@pytest.fixture
def dg1_bytes():
    return SPECIMEN_DG1


@pytest.fixture
def sod_bytes(dg1_bytes):
    return build_sod(hashlib.sha256(dg1_bytes).digest())


@pytest.fixture
def today():
    return date(2025, 1, 1)


@pytest.fixture
def make_sod():
    return build_sod
