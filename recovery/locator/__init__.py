"""Mapping binary offsets back to transcription positions."""

from .offset_locator import (
    HexOffsetError,
    LocatorResult,
    LocatorStatus,
    byte_offset_to_encoded_index,
    locate_encoded_index,
    locate_offset,
    parse_hex_offset,
)

__all__ = [
    "HexOffsetError",
    "LocatorResult",
    "LocatorStatus",
    "byte_offset_to_encoded_index",
    "locate_encoded_index",
    "locate_offset",
    "parse_hex_offset",
]
