"""
Data models for the fragment corpus.

A fragment is one transcribed page of Base64 text.  Fragments are kept
in ascending sequence-number order; identifiers that carry no number
sort last behind every valid fragment.
"""

import sys
from dataclasses import dataclass, field
from typing import Iterator, List, Optional

# Sequence number given to identifiers without a parseable number
UNNUMBERED_SEQUENCE = sys.maxsize


@dataclass
class Fragment:
    """A single transcribed text fragment."""

    sequence_number: int
    raw_text: str
    identifier: str = ""

    @property
    def is_numbered(self) -> bool:
        return self.sequence_number != UNNUMBERED_SEQUENCE

    @property
    def page_index(self) -> Optional[int]:
        """0-based PDF page index (file names are 1-based)."""
        if not self.is_numbered:
            return None
        return max(self.sequence_number - 1, 0)

    def __len__(self) -> int:
        return len(self.raw_text)

    def __repr__(self) -> str:
        return (
            f"Fragment(seq={self.sequence_number}, "
            f"id='{self.identifier}', chars={len(self.raw_text)})"
        )


@dataclass
class FragmentCorpus:
    """
    Ordered snapshot of all fragments.

    ``diagnostics`` collects non-fatal messages produced while the corpus
    was assembled (skipped files, duplicate numbers).
    """

    fragments: List[Fragment] = field(default_factory=list)
    diagnostics: List[str] = field(default_factory=list)

    @property
    def encoded_stream(self) -> str:
        """All fragment texts concatenated in corpus order."""
        return "".join(f.raw_text for f in self.fragments)

    @property
    def sequence_numbers(self) -> List[int]:
        return [f.sequence_number for f in self.fragments]

    def __iter__(self) -> Iterator[Fragment]:
        return iter(self.fragments)

    def __len__(self) -> int:
        return len(self.fragments)

    def __bool__(self) -> bool:
        return bool(self.fragments)
