"""Stream sanitising and permissive Base64 decoding."""

from .decoder import (
    PERMISSIVE,
    STRICT,
    DecoderPolicy,
    StreamDecodeError,
    dangling_offset,
    decode_permissive,
)
from .sanitizer import BASE64_DATA_CHARS, CleanStream, sanitize, sanitize_indexed

__all__ = [
    "BASE64_DATA_CHARS",
    "CleanStream",
    "DecoderPolicy",
    "PERMISSIVE",
    "STRICT",
    "StreamDecodeError",
    "dangling_offset",
    "decode_permissive",
    "sanitize",
    "sanitize_indexed",
]
