"""
Seeding fragments from the PDF text layer.

A page that has no saved fragment yet starts from whatever text the
PDF itself carries.
"""

import logging
from pathlib import Path
from typing import List, Union

from recovery.utils.pdf_adapter import PDFTextAdapter

from .loader import DEFAULT_PREFIX, DEFAULT_SUFFIX, normalize_fragment_text
from .store import fragment_path, read_fragment, save_fragment

logger = logging.getLogger(__name__)


def fragment_or_pdf_text(
    pdf: PDFTextAdapter,
    directory: Union[str, Path],
    page_index: int,
    prefix: str = DEFAULT_PREFIX,
    suffix: str = DEFAULT_SUFFIX,
) -> str:
    """
    Text for *page_index*: the saved fragment if present, the PDF page
    text otherwise.  Carriage returns become spaces either way.
    """
    saved = read_fragment(directory, page_index + 1, prefix, suffix)
    if saved is not None:
        return saved
    return normalize_fragment_text(pdf.text(page_index))


def seed_fragments(
    pdf: PDFTextAdapter,
    directory: Union[str, Path],
    prefix: str = DEFAULT_PREFIX,
    suffix: str = DEFAULT_SUFFIX,
) -> List[Path]:
    """
    Write a fragment for every PDF page that lacks one.

    Existing fragments are never overwritten.

    Returns:
        Paths of the fragments written.
    """
    written = []
    for page_index, page_text in pdf.pages():
        if fragment_path(directory, page_index + 1, prefix, suffix).exists():
            continue
        text = normalize_fragment_text(page_text)
        written.append(save_fragment(directory, page_index + 1, text, prefix, suffix))
    logger.info("Seeded %d fragments from %s", len(written), pdf.pdf_path)
    return written
