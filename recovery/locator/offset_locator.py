"""
Offset locator: binary byte offset → fragment and character position.

Every 3 bytes of the original binary are 4 Base64 characters, so a byte
offset maps to the start of its 4-character group.  The corpus is then
walked in order, counting only Base64 data characters, until that many
have been passed.  The reported character index counts *every*
character of the fragment so a cursor can be placed on it directly.
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional

from recovery.corpus.models import FragmentCorpus
from recovery.stream.sanitizer import BASE64_DATA_CHARS

logger = logging.getLogger(__name__)

_RE_HEX = re.compile(r"[0-9a-fA-F]+")


class HexOffsetError(ValueError):
    """The offset string is not a hexadecimal number."""


class LocatorStatus(Enum):
    FOUND = auto()
    OUT_OF_BOUNDS = auto()
    INVALID_HEX = auto()


@dataclass
class LocatorResult:
    """
    Outcome of a locate request.

    ``fragment_sequence_number`` and ``character_index`` are set only
    when the status is ``FOUND``.  ``max_count`` is the number of data
    characters walked, i.e. the corpus total when out of bounds.
    """

    status: LocatorStatus
    byte_offset: Optional[int] = None
    target_index: Optional[int] = None
    fragment_sequence_number: Optional[int] = None
    fragment_identifier: str = ""
    character_index: Optional[int] = None
    page_index: Optional[int] = None
    max_count: int = 0

    @property
    def found(self) -> bool:
        return self.status is LocatorStatus.FOUND

    @property
    def message(self) -> str:
        if self.status is LocatorStatus.INVALID_HEX:
            return "Invalid Hexadecimal"
        if self.status is LocatorStatus.OUT_OF_BOUNDS:
            return f"Offset out of bounds. Max Base64 len: {self.max_count}"
        if self.page_index is not None:
            return f"Found on Page {self.page_index + 1}, Char {self.character_index}"
        return f"Found in {self.fragment_identifier}, Char {self.character_index}"


def parse_hex_offset(value: str) -> int:
    """
    Parse a hexadecimal offset such as ``"2E1B"`` or ``"0x2E1B"``.

    Raises:
        HexOffsetError: On empty or non-hexadecimal input.
    """
    text = value.strip()
    if text[:2] in ("0x", "0X"):
        text = text[2:]
    if not _RE_HEX.fullmatch(text):
        raise HexOffsetError(f"Invalid hexadecimal offset: {value!r}")
    return int(text, 16)


def byte_offset_to_encoded_index(offset: int) -> int:
    """Start of the 4-character group that encodes byte *offset*."""
    if offset < 0:
        raise ValueError(f"Byte offset must be >= 0, got {offset}")
    return (offset // 3) * 4


def locate_encoded_index(corpus: FragmentCorpus, target_index: int) -> LocatorResult:
    """
    Find the data character number *target_index* (0-based) in *corpus*.

    Returns:
        A ``FOUND`` result with fragment and in-fragment index, or an
        ``OUT_OF_BOUNDS`` result carrying the total data-character count.
    """
    count = 0
    for fragment in corpus:
        for char_index, c in enumerate(fragment.raw_text):
            if c not in BASE64_DATA_CHARS:
                continue
            if count == target_index:
                return LocatorResult(
                    status=LocatorStatus.FOUND,
                    target_index=target_index,
                    fragment_sequence_number=fragment.sequence_number,
                    fragment_identifier=fragment.identifier,
                    character_index=char_index,
                    page_index=fragment.page_index,
                    max_count=count,
                )
            count += 1

    return LocatorResult(
        status=LocatorStatus.OUT_OF_BOUNDS,
        target_index=target_index,
        max_count=count,
    )


def locate_offset(corpus: FragmentCorpus, hex_offset: str) -> LocatorResult:
    """
    Map a hexadecimal byte offset of the original binary to a fragment
    position.

    Malformed input yields an ``INVALID_HEX`` result without touching the
    corpus.  Read-only.
    """
    try:
        offset = parse_hex_offset(hex_offset)
    except HexOffsetError as e:
        logger.warning("%s", e)
        return LocatorResult(status=LocatorStatus.INVALID_HEX)

    target = byte_offset_to_encoded_index(offset)
    logger.info("Seeking Hex 0x%X -> Base64 Index %d", offset, target)

    result = locate_encoded_index(corpus, target)
    result.byte_offset = offset
    logger.info(result.message)
    return result
