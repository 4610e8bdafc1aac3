"""
Tests for mapping binary offsets back to fragment positions.

Usage:
    python -m pytest tests/test_offset_locator.py
"""

import pytest

from recovery.corpus.loader import corpus_from_texts, load_corpus
from recovery.locator.offset_locator import (
    HexOffsetError,
    LocatorStatus,
    byte_offset_to_encoded_index,
    locate_encoded_index,
    locate_offset,
    parse_hex_offset,
)
from recovery.stream.sanitizer import BASE64_DATA_CHARS

# 4 + 8 + 6 = 18 data characters spread over three pages
FRAGMENTS = {
    "page003.txt": "  RUZH\nSE=\n",
    "page001.txt": "\n QUJD ",
    "page002.txt": "== REVG\r\nR0hJ",
}


@pytest.fixture
def corpus():
    return corpus_from_texts(FRAGMENTS)


def _count_before(corpus, sequence_number, char_index):
    count = 0
    for fragment in corpus:
        if fragment.sequence_number == sequence_number:
            return count + sum(
                1 for c in fragment.raw_text[:char_index] if c in BASE64_DATA_CHARS
            )
        count += sum(1 for c in fragment.raw_text if c in BASE64_DATA_CHARS)
    raise AssertionError("fragment not found")


def test_parse_hex_offset():
    assert parse_hex_offset("2E1B") == 0x2E1B
    assert parse_hex_offset("0x2e1b") == 0x2E1B
    assert parse_hex_offset("  0X10 ") == 16
    assert parse_hex_offset("0") == 0


@pytest.mark.parametrize("value", ["", "0x", "xyz", "-10", "1_0", "0x 10", "12g"])
def test_parse_hex_offset_rejects_malformed(value):
    with pytest.raises(HexOffsetError):
        parse_hex_offset(value)


def test_byte_offset_maps_to_group_start():
    assert byte_offset_to_encoded_index(0) == 0
    assert byte_offset_to_encoded_index(2) == 0
    assert byte_offset_to_encoded_index(3) == 4
    assert byte_offset_to_encoded_index(0x2E1B) == (0x2E1B // 3) * 4


def test_zero_offset_is_first_data_character(corpus):
    result = locate_offset(corpus, "0x0")

    assert result.status is LocatorStatus.FOUND
    assert result.fragment_sequence_number == 1
    assert result.character_index == 2
    assert result.page_index == 0
    assert result.message == "Found on Page 1, Char 2"


def test_offset_in_later_fragment(corpus):
    # byte 3 → data char 4, the first character of page002's "REVG"
    result = locate_offset(corpus, "3")
    assert result.fragment_sequence_number == 2
    assert result.character_index == 3
    assert result.target_index == 4
    assert result.byte_offset == 3


@pytest.mark.parametrize("offset", [0, 3, 6, 9, 12])
def test_recount_matches_target(corpus, offset):
    result = locate_offset(corpus, hex(offset))
    assert result.found
    recount = _count_before(
        corpus, result.fragment_sequence_number, result.character_index
    )
    assert recount == (offset // 3) * 4


def test_out_of_bounds_reports_true_total(corpus):
    result = locate_offset(corpus, "0xFFFFFF")

    assert result.status is LocatorStatus.OUT_OF_BOUNDS
    assert result.max_count == 18
    assert result.fragment_sequence_number is None
    assert result.message == "Offset out of bounds. Max Base64 len: 18"


def test_target_equal_to_total_is_out_of_bounds(corpus):
    assert locate_encoded_index(corpus, 17).found
    result = locate_encoded_index(corpus, 18)
    assert result.status is LocatorStatus.OUT_OF_BOUNDS
    assert result.max_count == 18


def test_malformed_input_is_distinct_from_bounds(corpus):
    result = locate_offset(corpus, "not hex")
    assert result.status is LocatorStatus.INVALID_HEX
    assert result.message == "Invalid Hexadecimal"
    assert result.max_count == 0


def test_empty_corpus_is_out_of_bounds():
    result = locate_offset(corpus_from_texts({}), "0")
    assert result.status is LocatorStatus.OUT_OF_BOUNDS
    assert result.max_count == 0


def test_unnumbered_fragment_message():
    corpus = corpus_from_texts({"pageX.txt": "QUJD"})
    result = locate_offset(corpus, "0")
    assert result.page_index is None
    assert result.message == "Found in pageX.txt, Char 0"


def test_crlf_file_on_disk_counts_raw_characters(tmp_path):
    (tmp_path / "page001.txt").write_bytes(b"QUJD\r\nREVG")

    result = locate_offset(load_corpus(tmp_path), "0x3")

    assert result.found
    assert result.character_index == 6
    assert result.message == "Found on Page 1, Char 6"
