"""
Data models for recovered payloads.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Tuple

import numpy as np


class ScanMode(Enum):
    """How the decoded buffer is searched for images."""

    WHOLE_BUFFER = "whole"  # one attempt over the entire buffer
    MARKERS = "markers"  # one attempt per start-of-image marker


@dataclass
class RecoveredPayload:
    """
    An image decoded from (part of) the byte stream.

    ``pixels`` is an ``H x W x 3`` ``uint8`` RGB array ready for display.
    """

    offset: int
    length: int
    width: int
    height: int
    mode: str
    pixels: np.ndarray = field(repr=False)
    status: str = ""

    @property
    def size(self) -> Tuple[int, int]:
        return self.width, self.height


@dataclass
class ScanReport:
    """Payloads recovered by one scan plus a log line per attempt."""

    payloads: List[RecoveredPayload] = field(default_factory=list)
    logs: List[str] = field(default_factory=list)
    attempts: int = 0

    @property
    def failures(self) -> int:
        return self.attempts - len(self.payloads)
