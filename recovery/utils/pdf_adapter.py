"""
PDF text access for transcription seeding.

Uses fitz (PyMuPDF) directly to pull the plain text layer of a page,
which serves as the starting point for a fragment that has not been
transcribed by hand yet.
"""

from pathlib import Path
from typing import Iterator, Optional, Tuple, Union

import fitz


class PDFTextAdapter:
    """
    Read-only view of a PDF's text layer, one page at a time.

    Usage::

        with PDFTextAdapter("book.pdf") as pdf:
            for page_index, text in pdf.pages():
                ...
    """

    def __init__(self, pdf_path: Union[str, Path]):
        self.pdf_path = str(pdf_path)
        try:
            self.doc: Optional[fitz.Document] = fitz.open(self.pdf_path)
        except Exception as e:
            raise RuntimeError(f"Cannot read text layer of '{self.pdf_path}': {e}") from e
        self.page_count: int = self.doc.page_count

    def text(self, page_index: int) -> str:
        """
        Plain text of *page_index* (0-based).

        Raises:
            IndexError: If the page does not exist.
        """
        if not 0 <= page_index < self.page_count:
            raise IndexError(
                f"No page {page_index} in '{self.pdf_path}' "
                f"({self.page_count} pages)"
            )
        return self.doc.load_page(page_index).get_text()

    def pages(self) -> Iterator[Tuple[int, str]]:
        """Yield ``(page_index, text)`` for every page in order."""
        for page_index in range(self.page_count):
            yield page_index, self.text(page_index)

    def __len__(self) -> int:
        return self.page_count

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        if self.doc is not None:
            self.doc.close()
            self.doc = None
        return False
