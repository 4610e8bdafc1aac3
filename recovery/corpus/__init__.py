"""Fragment corpus: discovery, ordering, storage and line checks."""

from .diagnostics import (
    LineStatus,
    check_lines,
    classify_line,
    find_next_ambiguous,
)
from .loader import (
    corpus_from_texts,
    load_corpus,
    parse_sequence_number,
)
from .models import UNNUMBERED_SEQUENCE, Fragment, FragmentCorpus
from .seeding import fragment_or_pdf_text, seed_fragments
from .store import latest_sequence_number, read_fragment, save_fragment

__all__ = [
    "Fragment",
    "FragmentCorpus",
    "LineStatus",
    "UNNUMBERED_SEQUENCE",
    "check_lines",
    "classify_line",
    "corpus_from_texts",
    "find_next_ambiguous",
    "fragment_or_pdf_text",
    "latest_sequence_number",
    "load_corpus",
    "parse_sequence_number",
    "read_fragment",
    "save_fragment",
    "seed_fragments",
]
