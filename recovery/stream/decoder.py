"""
Permissive Base64 decoding.

Transcribed streams routinely lose their padding and pick up a wrong
last character, so the decoder can be told to tolerate both.  What
it tolerates is an explicit :class:`DecoderPolicy`.
"""

import binascii
import logging
import re
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)

_RE_BASE64_PADDED = re.compile(r"([A-Za-z0-9+/]*?)(=*)")

_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789+/"
_VALUE = {c: i for i, c in enumerate(_ALPHABET)}


class StreamDecodeError(ValueError):
    """The stream cannot be decoded under the active policy."""


@dataclass(frozen=True)
class DecoderPolicy:
    """
    Tolerance settings for :func:`decode_permissive`.

    Attributes:
        allow_missing_padding: Synthesise absent ``=`` padding instead of
                               rejecting a stream whose length is not a
                               multiple of 4.
        allow_trailing_bits:   Accept a final group whose unused low-order
                               bits are non-zero, discarding them.
        drop_dangling_char:    Discard a lone final character (length
                               ``4n+1``), which carries less than one byte.
                               Off by default; such a stream is otherwise
                               unrecoverable.
    """

    allow_missing_padding: bool = True
    allow_trailing_bits: bool = True
    drop_dangling_char: bool = False

    @classmethod
    def strict(cls) -> "DecoderPolicy":
        return cls(allow_missing_padding=False, allow_trailing_bits=False)


PERMISSIVE = DecoderPolicy()
STRICT = DecoderPolicy.strict()


def _split_padding(stream: str):
    match = _RE_BASE64_PADDED.fullmatch(stream)
    if match is None:
        bad = next(
            (i for i, c in enumerate(stream) if c not in _VALUE and c != "="), None
        )
        if bad is None:
            raise StreamDecodeError("Invalid padding placement")
        raise StreamDecodeError(
            f"Invalid symbol {stream[bad]!r} at offset {bad}"
        )
    return match.group(1), match.group(2)


def _has_trailing_bits(body: str) -> bool:
    remainder = len(body) % 4
    if remainder == 0:
        return False
    last = _VALUE[body[-1]]
    # 2 chars → 12 bits carry 8, 3 chars → 18 bits carry 16
    unused_mask = 0b1111 if remainder == 2 else 0b11
    return bool(last & unused_mask)


def dangling_offset(stream: str) -> Optional[int]:
    """
    Offset of a lone final data character, or ``None``.

    A stream of 4n+1 data characters ends in a symbol that carries less
    than one byte.
    """
    body = stream.rstrip("=")
    if len(body) % 4 == 1:
        return len(body) - 1
    return None


def decode_permissive(stream: str, policy: DecoderPolicy = PERMISSIVE) -> bytes:
    """
    Decode a Base64 *stream* under *policy*.

    The stream may carry trailing ``=`` padding but nothing else outside
    the alphabet; sanitise it first.

    Raises:
        StreamDecodeError: On a non-alphabet character, a dangling final
            character, or a padding/trailing-bit violation the policy
            does not allow.
    """
    body, padding = _split_padding(stream)

    remainder = len(body) % 4
    if remainder == 1:
        if not policy.drop_dangling_char:
            raise StreamDecodeError(
                f"Invalid length: {len(body)} data characters leave a dangling "
                f"final symbol {body[-1]!r} at offset {len(body) - 1}"
            )
        logger.debug("Dropping dangling final symbol at offset %d", len(body) - 1)
        body = body[:-1]
        remainder = 0
        padding = ""

    needed = (4 - remainder) % 4
    if padding:
        if len(padding) != needed:
            if not policy.allow_missing_padding:
                raise StreamDecodeError(
                    f"Invalid padding: expected {needed} '=' but found {len(padding)}"
                )
    elif needed and not policy.allow_missing_padding:
        raise StreamDecodeError(
            f"Invalid padding: stream of {len(body)} characters is missing {needed} '='"
        )

    if not policy.allow_trailing_bits and _has_trailing_bits(body):
        raise StreamDecodeError(
            f"Invalid last symbol {body[-1]!r} at offset {len(body) - 1}: "
            "non-zero trailing bits"
        )

    try:
        # a2b_base64 discards the unused low bits of the final group
        return binascii.a2b_base64(body + "=" * needed)
    except binascii.Error as e:
        raise StreamDecodeError(str(e)) from e
