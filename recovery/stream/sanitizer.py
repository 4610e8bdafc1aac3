"""
Base64 stream sanitising.

Keeps only the 64 data characters.  Padding (``=``) is dropped as well:
the permissive decoder re-synthesises whatever padding it needs.
"""

from dataclasses import dataclass, field
from typing import List

BASE64_DATA_CHARS = frozenset(
    "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789+/"
)


def sanitize(text: str) -> str:
    """Return *text* with every non-data character removed."""
    return "".join(c for c in text if c in BASE64_DATA_CHARS)


@dataclass
class CleanStream:
    """
    Sanitised stream plus a map back to the source text.

    ``source_index[i]`` is the position in the raw stream of clean
    character ``i``.
    """

    text: str = ""
    source_index: List[int] = field(default_factory=list)
    raw_length: int = 0

    def __len__(self) -> int:
        return len(self.text)

    @property
    def dropped(self) -> int:
        return self.raw_length - len(self.text)


def sanitize_indexed(raw: str) -> CleanStream:
    """Sanitise *raw*, recording where each kept character came from."""
    kept = []
    positions = []
    for position, c in enumerate(raw):
        if c in BASE64_DATA_CHARS:
            kept.append(c)
            positions.append(position)
    return CleanStream(text="".join(kept), source_index=positions, raw_length=len(raw))
