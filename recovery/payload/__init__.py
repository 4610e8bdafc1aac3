"""Embedded image recovery from decoded bytes."""

from .models import RecoveredPayload, ScanMode, ScanReport
from .scanner import SOI_MARKER, decode_jpeg, find_markers, scan_payloads, segment_by_markers

__all__ = [
    "RecoveredPayload",
    "SOI_MARKER",
    "ScanMode",
    "ScanReport",
    "decode_jpeg",
    "find_markers",
    "scan_payloads",
    "segment_by_markers",
]
