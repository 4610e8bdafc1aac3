"""
JPEG payload recovery from a decoded byte buffer.

In the default mode the whole buffer is handed to the JPEG decoder,
which surfaces at most the first interpretable image.  Marker mode
splits the buffer at every start-of-image marker and decodes each
segment on its own, reporting one outcome per segment.
"""

import io
import logging
from contextlib import contextmanager
from typing import Iterator, List, Tuple

import numpy as np
from PIL import Image, ImageFile, UnidentifiedImageError

from .models import RecoveredPayload, ScanMode, ScanReport

logger = logging.getLogger(__name__)

# SOI (FF D8) followed by the first segment marker byte
SOI_MARKER = b"\xff\xd8\xff"

_IMAGE_ERRORS = (
    UnidentifiedImageError,
    Image.DecompressionBombError,
    OSError,
    SyntaxError,
    ValueError,
)


@contextmanager
def _truncated_images(allow: bool) -> Iterator[None]:
    """Temporarily set Pillow's truncated-image tolerance."""
    previous = ImageFile.LOAD_TRUNCATED_IMAGES
    ImageFile.LOAD_TRUNCATED_IMAGES = allow
    try:
        yield
    finally:
        ImageFile.LOAD_TRUNCATED_IMAGES = previous


def decode_jpeg(data: bytes, allow_truncated: bool = False) -> Image.Image:
    """
    Decode *data* as a JPEG and return the fully loaded image.

    Raises:
        PIL.UnidentifiedImageError: If *data* does not start like a JPEG.
        OSError: If the JPEG is truncated or corrupt.
    """
    with _truncated_images(allow_truncated):
        img = Image.open(io.BytesIO(data), formats=["JPEG"])
        img.load()
    return img


def find_markers(data: bytes) -> List[int]:
    """Offsets of every start-of-image marker in *data*, nested ones included."""
    offsets = []
    start = data.find(SOI_MARKER)
    while start != -1:
        offsets.append(start)
        start = data.find(SOI_MARKER, start + 1)
    return offsets


def header_end(data: bytes, start: int) -> int:
    """
    Offset where the header segments of the JPEG at *start* end.

    Walks the length-prefixed segments after SOI up to the start of
    scan.  Anything before that offset (an EXIF thumbnail in APP1, say)
    belongs to this image's headers.
    """
    pos = start + 2
    while pos + 4 <= len(data) and data[pos] == 0xFF:
        marker = data[pos + 1]
        if marker in (0xDA, 0xD9) or marker < 0xC0 or marker == 0xFF:
            break
        if 0xD0 <= marker <= 0xD8:
            pos += 2
            continue
        length = int.from_bytes(data[pos + 2 : pos + 4], "big")
        if length < 2:
            break
        pos += 2 + length
    return min(pos, len(data))


def segment_by_markers(data: bytes) -> List[Tuple[int, int]]:
    """
    Split *data* into ``(offset, length)`` spans, one per image.

    Markers inside the header segments of the previous image are
    skipped.  Each span runs from its marker up to the next top-level
    marker or the end of the buffer.
    """
    offsets = []
    nested_until = 0
    for offset in find_markers(data):
        if offset < nested_until:
            continue
        offsets.append(offset)
        nested_until = header_end(data, offset)
    bounds = offsets[1:] + [len(data)]
    return [(start, end - start) for start, end in zip(offsets, bounds)]


def _attempt(
    data: bytes,
    offset: int,
    length: int,
    allow_truncated: bool,
    report: ScanReport,
    label: str,
) -> None:
    report.attempts += 1
    span = data[offset : offset + length]
    try:
        img = decode_jpeg(span, allow_truncated=allow_truncated)
        rgb = img.convert("RGB")
        pixels = np.asarray(rgb, dtype=np.uint8)
    except _IMAGE_ERRORS as e:
        line = f"-> FAILED to decode image{label}: {e}"
        report.logs.append(line)
        logger.warning(line)
        return

    line = f"-> SUCCESS: Recovered image{label} ({img.width}x{img.height}, {img.mode})"
    report.payloads.append(
        RecoveredPayload(
            offset=offset,
            length=length,
            width=img.width,
            height=img.height,
            mode=img.mode,
            pixels=pixels,
            status=line,
        )
    )
    report.logs.append(line)
    logger.info(line)


def scan_payloads(
    data: bytes,
    mode: ScanMode = ScanMode.WHOLE_BUFFER,
    allow_truncated: bool = False,
) -> ScanReport:
    """
    Look for JPEG images in a decoded buffer.

    Args:
        data:            Decoded bytes.
        mode:            Whole-buffer attempt or per-marker segmentation.
        allow_truncated: Let Pillow fill in a truncated tail.

    Returns:
        :class:`ScanReport` with the recovered payloads and log lines.
        Decode failures are reported, never raised.
    """
    report = ScanReport()

    if mode is ScanMode.WHOLE_BUFFER:
        _attempt(data, 0, len(data), allow_truncated, report, "")
        return report

    segments = segment_by_markers(data)
    if not segments:
        line = "-> No start-of-image markers found"
        report.logs.append(line)
        logger.warning(line)
        return report

    logger.debug("Found %d start-of-image markers", len(segments))
    for number, (offset, length) in enumerate(segments, start=1):
        label = f" #{number} at 0x{offset:X}"
        _attempt(data, offset, length, allow_truncated, report, label)
    return report
