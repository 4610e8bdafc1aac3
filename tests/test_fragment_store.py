"""
Tests for fragment files and per-line transcription checks.

Usage:
    python -m pytest tests/test_fragment_store.py
"""

import pytest

from recovery.corpus.diagnostics import (
    LineStatus,
    check_lines,
    classify_line,
    find_next_ambiguous,
)
from recovery.corpus.store import (
    fragment_path,
    latest_sequence_number,
    read_fragment,
    save_fragment,
)


def test_save_and_read_fragment(tmp_path):
    path = save_fragment(tmp_path, 7, "QUJD\r\n")
    assert path.name == "page007.txt"
    assert read_fragment(tmp_path, 7) == "QUJD \n"
    assert read_fragment(tmp_path, 8) is None


def test_fragment_path_rejects_negative_numbers(tmp_path):
    with pytest.raises(ValueError):
        fragment_path(tmp_path, -1)


def test_latest_sequence_number(tmp_path):
    assert latest_sequence_number(tmp_path) == 0
    for number in (1, 12, 3):
        save_fragment(tmp_path, number, "")
    (tmp_path / "pageXYZ.txt").write_text("")
    (tmp_path / "page999.bak").write_text("")
    assert latest_sequence_number(tmp_path) == 12


def test_classify_line():
    assert classify_line("A" * 76) is LineStatus.FULL
    assert classify_line("  " + "A" * 76 + "  ") is LineStatus.FULL
    assert classify_line("QUJD==") is LineStatus.PARTIAL
    assert classify_line("QU JD") is LineStatus.PARTIAL
    assert classify_line("QU#D") is LineStatus.INVALID
    assert classify_line("A" * 75 + ".") is LineStatus.INVALID


def test_check_lines_summary():
    text = "\n".join(["B" * 76, "B" * 76, "B" * 40, "B?B"])
    summary = check_lines(text)

    assert summary.counts == {
        LineStatus.FULL: 2,
        LineStatus.PARTIAL: 1,
        LineStatus.INVALID: 1,
    }
    assert summary.suspicious_lines == [2, 3]
    assert summary.reports[3].invalid_count == 1


def test_find_next_ambiguous():
    text = "AIBlC1"
    assert find_next_ambiguous(text, 0) == 1
    assert find_next_ambiguous(text, 1) == 3
    assert find_next_ambiguous(text, 3) == 5
    assert find_next_ambiguous(text, 5) is None
    assert find_next_ambiguous("Iab", -1) == 0
