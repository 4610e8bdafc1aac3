"""
Per-line transcription checks.

Base64 bodies are conventionally wrapped at 76 characters (MIME), so a
line of exactly that length is a good sign and any other length marks a
line worth re-checking.
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Dict, List, Optional

MIME_LINE_LENGTH = 76

# Characters tolerated on a transcribed line (padding and spaces included)
LINE_ALPHABET = frozenset(
    "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789+/= "
)

# Glyphs most often confused when reading Base64 off a page
AMBIGUOUS_GLYPHS = ("I", "l", "1")


class LineStatus(Enum):
    INVALID = auto()  # contains characters outside the alphabet
    FULL = auto()  # exactly one MIME line
    PARTIAL = auto()  # any other length


@dataclass
class LineReport:
    line_number: int  # 0-based
    length: int
    invalid_count: int
    status: LineStatus


@dataclass
class FragmentLineSummary:
    reports: List[LineReport] = field(default_factory=list)

    @property
    def counts(self) -> Dict[LineStatus, int]:
        counts = {status: 0 for status in LineStatus}
        for report in self.reports:
            counts[report.status] += 1
        return counts

    @property
    def suspicious_lines(self) -> List[int]:
        """Line numbers that are not a full, clean MIME line."""
        return [r.line_number for r in self.reports if r.status is not LineStatus.FULL]


def classify_line(line: str, line_length: int = MIME_LINE_LENGTH) -> LineStatus:
    trimmed = line.strip()
    if any(c not in LINE_ALPHABET for c in trimmed):
        return LineStatus.INVALID
    if len(trimmed) == line_length:
        return LineStatus.FULL
    return LineStatus.PARTIAL


def check_lines(text: str, line_length: int = MIME_LINE_LENGTH) -> FragmentLineSummary:
    """Classify every line of *text*."""
    summary = FragmentLineSummary()
    for number, line in enumerate(text.splitlines()):
        trimmed = line.strip()
        summary.reports.append(
            LineReport(
                line_number=number,
                length=len(trimmed),
                invalid_count=sum(1 for c in trimmed if c not in LINE_ALPHABET),
                status=classify_line(line, line_length),
            )
        )
    return summary


def find_next_ambiguous(text: str, cursor: int = 0) -> Optional[int]:
    """
    Index of the next ``I``, ``l`` or ``1`` strictly after *cursor*.

    Returns ``None`` when there is none.
    """
    for index in range(max(cursor + 1, 0), len(text)):
        if text[index] in AMBIGUOUS_GLYPHS:
            return index
    return None
