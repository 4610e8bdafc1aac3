"""
Fragment discovery and ordering.

Fragments live as ``page###.txt`` files in a corpus directory.  The
sequence number is the first run of decimal digits in the identifier;
enumeration order of the filesystem is never trusted.
"""

import logging
import re
from pathlib import Path
from typing import Iterable, List, Mapping, Optional, Tuple, Union

from tqdm import tqdm

from .models import UNNUMBERED_SEQUENCE, Fragment, FragmentCorpus

logger = logging.getLogger(__name__)

DEFAULT_PREFIX = "page"
DEFAULT_SUFFIX = ".txt"

_RE_DIGIT_RUN = re.compile(r"[0-9]+")


def parse_sequence_number(identifier: str) -> int:
    """
    Extract the sequence number from a fragment identifier.

    Takes the first contiguous run of ASCII digits, e.g. ``page012.txt``
    → 12.  Identifiers with no digits return
    :data:`UNNUMBERED_SEQUENCE` so they sort after every numbered
    fragment.
    """
    match = _RE_DIGIT_RUN.search(Path(identifier).name)
    if match is None:
        return UNNUMBERED_SEQUENCE
    return int(match.group(0))


def normalize_fragment_text(text: str) -> str:
    """Replace carriage returns with spaces, as the editor displays them."""
    return text.replace("\r", " ")


def is_fragment_name(name: str, prefix: str = DEFAULT_PREFIX, suffix: str = DEFAULT_SUFFIX) -> bool:
    return name.startswith(prefix) and name.endswith(suffix)


def discover_fragment_paths(
    directory: Union[str, Path],
    prefix: str = DEFAULT_PREFIX,
    suffix: str = DEFAULT_SUFFIX,
) -> List[Path]:
    """
    List fragment files in *directory*, ordered by sequence number.

    Ties (duplicate numbers) fall back to the file name so the order is
    still deterministic.
    """
    directory = Path(directory)
    paths = [
        p for p in directory.iterdir() if p.is_file() and is_fragment_name(p.name, prefix, suffix)
    ]
    return sorted(paths, key=lambda p: (parse_sequence_number(p.name), p.name))


def order_fragments(fragments: Iterable[Fragment]) -> List[Fragment]:
    """Sort fragments ascending by sequence number, then identifier."""
    return sorted(fragments, key=lambda f: (f.sequence_number, f.identifier))


def _duplicate_diagnostics(fragments: List[Fragment]) -> List[str]:
    messages = []
    seen = {}
    for fragment in fragments:
        if not fragment.is_numbered:
            continue
        first = seen.setdefault(fragment.sequence_number, fragment.identifier)
        if first != fragment.identifier:
            messages.append(
                f"Duplicate sequence number {fragment.sequence_number}: "
                f"{first} and {fragment.identifier}"
            )
    return messages


def load_corpus(
    directory: Union[str, Path],
    prefix: str = DEFAULT_PREFIX,
    suffix: str = DEFAULT_SUFFIX,
    disable_tqdm: bool = True,
) -> FragmentCorpus:
    """
    Read every fragment file in *directory* into a :class:`FragmentCorpus`.

    Unreadable files are skipped with a diagnostic entry; a missing
    directory yields an empty corpus with one diagnostic.

    Args:
        directory:    Folder holding the fragment files.
        prefix:       File name prefix of a fragment.
        suffix:       File name suffix of a fragment.
        disable_tqdm: Suppress the progress bar.

    Returns:
        The ordered corpus.
    """
    corpus = FragmentCorpus()
    try:
        paths = discover_fragment_paths(directory, prefix, suffix)
    except OSError as e:
        corpus.diagnostics.append(f"Cannot scan corpus directory {directory}: {e}")
        logger.warning("Cannot scan corpus directory %s: %s", directory, e)
        return corpus

    fragments = []
    for path in tqdm(paths, desc="Loading fragments", unit="file", disable=disable_tqdm):
        try:
            text = path.read_bytes().decode("utf-8")
        except (OSError, UnicodeDecodeError) as e:
            corpus.diagnostics.append(f"Skipped: {path.name} ({e})")
            logger.warning("Skipping unreadable fragment %s: %s", path.name, e)
            continue
        fragments.append(
            Fragment(
                sequence_number=parse_sequence_number(path.name),
                raw_text=normalize_fragment_text(text),
                identifier=path.name,
            )
        )

    corpus.fragments = order_fragments(fragments)
    corpus.diagnostics.extend(_duplicate_diagnostics(corpus.fragments))
    logger.debug("Loaded %d fragments from %s", len(corpus), directory)
    return corpus


def corpus_from_texts(
    sources: Union[Mapping[str, Optional[str]], Iterable[Tuple[str, Optional[str]]]],
) -> FragmentCorpus:
    """
    Build a corpus from in-memory ``(identifier, text)`` pairs.

    The pairs may arrive in any order.  A ``None`` text stands for a
    source that could not be read and is skipped with a diagnostic.
    """
    items = sources.items() if isinstance(sources, Mapping) else sources
    corpus = FragmentCorpus()
    fragments = []
    for identifier, text in items:
        if text is None:
            corpus.diagnostics.append(f"Skipped: {identifier} (unreadable)")
            continue
        fragments.append(
            Fragment(
                sequence_number=parse_sequence_number(identifier),
                raw_text=normalize_fragment_text(text),
                identifier=identifier,
            )
        )
    corpus.fragments = order_fragments(fragments)
    corpus.diagnostics.extend(_duplicate_diagnostics(corpus.fragments))
    return corpus
