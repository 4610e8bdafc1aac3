"""
Reading and writing individual fragment files.

Fragments are plain UTF-8 text named ``<prefix><NNN><suffix>`` with a
zero-padded, 1-based sequence number (``page001.txt`` is PDF page 0).
"""

import logging
from pathlib import Path
from typing import Optional, Union

from .loader import (
    DEFAULT_PREFIX,
    DEFAULT_SUFFIX,
    is_fragment_name,
    normalize_fragment_text,
    parse_sequence_number,
)
from .models import UNNUMBERED_SEQUENCE

logger = logging.getLogger(__name__)


def fragment_path(
    directory: Union[str, Path],
    sequence_number: int,
    prefix: str = DEFAULT_PREFIX,
    suffix: str = DEFAULT_SUFFIX,
) -> Path:
    """Return the file path for *sequence_number*, e.g. ``page007.txt``."""
    if sequence_number < 0:
        raise ValueError(f"Sequence number must be >= 0, got {sequence_number}")
    return Path(directory) / f"{prefix}{sequence_number:03d}{suffix}"


def save_fragment(
    directory: Union[str, Path],
    sequence_number: int,
    text: str,
    prefix: str = DEFAULT_PREFIX,
    suffix: str = DEFAULT_SUFFIX,
) -> Path:
    """
    Write *text* as the fragment for *sequence_number*.

    Raises:
        OSError: If the file cannot be written.
    """
    path = fragment_path(directory, sequence_number, prefix, suffix)
    path.write_bytes(text.encode("utf-8"))
    logger.info("Saved text to %s", path.name)
    return path


def read_fragment(
    directory: Union[str, Path],
    sequence_number: int,
    prefix: str = DEFAULT_PREFIX,
    suffix: str = DEFAULT_SUFFIX,
) -> Optional[str]:
    """Return the normalised fragment text, or ``None`` when absent or unreadable."""
    path = fragment_path(directory, sequence_number, prefix, suffix)
    try:
        text = path.read_bytes().decode("utf-8")
    except FileNotFoundError:
        return None
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("Could not read %s: %s", path.name, e)
        return None
    logger.debug("Loading file %s", path.name)
    return normalize_fragment_text(text)


def latest_sequence_number(
    directory: Union[str, Path],
    prefix: str = DEFAULT_PREFIX,
    suffix: str = DEFAULT_SUFFIX,
) -> int:
    """
    Highest sequence number among the fragments in *directory*.

    Used to resume transcription where it was left off.  Returns 0 when
    there are no numbered fragments.
    """
    latest = 0
    try:
        entries = list(Path(directory).iterdir())
    except OSError:
        return latest
    for entry in entries:
        if not is_fragment_name(entry.name, prefix, suffix):
            continue
        number = parse_sequence_number(entry.name)
        if number != UNNUMBERED_SEQUENCE and number > latest:
            latest = number
    return latest
