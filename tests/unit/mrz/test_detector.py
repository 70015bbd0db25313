import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from mrtd_reader.mrz.detector import (
    DetectionCriteria,
    PatternDetector,
    ScanGate,
    clean_line,
)


def test_clean_line_removes_whitespace_and_uppercases():
    assert clean_line(" l898 902c36\tUTO ") == "L898902C36UTO"


@pytest.mark.parametrize(
    "text",
    [
        "L898902C36UTO7408122F1204159ZE184226B<<<<<10",
        "L898 902C36 UTO7408122F 1204159ZE184226B<<<<<10",
        "l898902c36uto7408122f1204159ze184226b<<<<<10",
    ],
)
def test_find_candidate_normalises_line(text, data_line):
    assert PatternDetector().find_candidate(text) == data_line


def test_find_candidate_skips_name_line(name_line, data_line):
    text = f"PASSPORT\n{name_line}\n{data_line}\n"

    assert PatternDetector().find_candidate(text) == data_line


@pytest.mark.parametrize(
    "text",
    [
        "",
        "L898902C36<<",
        # no filler
        "L898902C36UTO7408122F1204159ZE184226B0000010",
        # fewer than three letters
        "1234567890<123456789012345678901234567890123",
        # fewer than eight digits
        "ABCDEFGHIJ<KLMNOPQRSTUVWXYZ1234567ABCDEFGHIJ",
    ],
)
def test_find_candidate_rejects_non_mrz_text(text):
    assert PatternDetector().find_candidate(text) is None


def test_criteria_are_configurable(data_line):
    strict = PatternDetector(DetectionCriteria(min_length=45))

    assert strict.find_candidate(data_line) is None


def test_detect_claims_gate_once(data_line):
    detector = PatternDetector()
    gate = ScanGate()

    assert detector.detect(data_line, gate) == data_line
    assert not gate.is_open
    assert detector.detect(data_line, gate) is None
    # detection itself stays pure
    assert detector.find_candidate(data_line) == data_line


def test_detect_without_candidate_keeps_gate_open():
    gate = ScanGate()

    assert PatternDetector().detect("no machine readable zone here", gate) is None
    assert gate.is_open


def test_gate_reopen_allows_new_detection(data_line):
    detector = PatternDetector()
    gate = ScanGate()
    detector.detect(data_line, gate)

    gate.reopen()

    assert detector.detect(data_line, gate) == data_line


def test_concurrent_frames_yield_single_detection(data_line):
    detector = PatternDetector()
    gate = ScanGate()
    workers = 16
    barrier = threading.Barrier(workers)

    def process_frame(_):
        barrier.wait()
        return detector.detect(data_line, gate)

    with ThreadPoolExecutor(max_workers=workers) as executor:
        results = list(executor.map(process_frame, range(workers)))

    winners = [result for result in results if result is not None]
    assert winners == [data_line]


def test_try_claim_has_single_winner():
    gate = ScanGate()

    assert gate.try_claim() is True
    assert gate.try_claim() is False
