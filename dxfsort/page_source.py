"""
Page Source
===========
Reads drawing pages with PyMuPDF (fitz).

For every page it provides the plain text (for classification and part
identifiers) and the positioned text runs (for the title block label).
Positions are converted back to PDF user space, the coordinate system the
label zones are defined in.
"""

from __future__ import annotations

import logging
import os
import threading
from typing import Protocol

import fitz  # PyMuPDF

from .errors import PageDecodeError, PdfOpenError
from .models import PageContent, PositionedFragment

logger = logging.getLogger(__name__)

COORD_PRECISION = 3


class PageTextSource(Protocol):
    """Anything that can hand out page contents by 1-indexed page number."""

    @property
    def page_count(self) -> int: ...

    def read_page(self, page_number: int) -> PageContent: ...


class PdfPageSource:
    """
    PageTextSource backed by a PDF file.

    PyMuPDF documents must not be used from several threads at once, so
    page decoding is serialized. The returned PageContent is plain data
    and can be processed concurrently.
    """

    def __init__(self, pdf_path: str):
        self.pdf_path = os.path.abspath(pdf_path)

        if not os.path.exists(self.pdf_path):
            raise PdfOpenError(f"PDF not found: {self.pdf_path}")

        try:
            self._doc = fitz.open(self.pdf_path)
        except Exception as e:
            raise PdfOpenError(f"Cannot open PDF {self.pdf_path}: {e}") from e

        self._lock = threading.Lock()
        logger.info(f"Opened {self.pdf_path} ({self._doc.page_count} pages)")

    @property
    def page_count(self) -> int:
        return self._doc.page_count

    @property
    def metadata(self) -> dict:
        return self._doc.metadata or {}

    def read_page(self, page_number: int) -> PageContent:
        """
        Extract text and fragments of one page.

        Raises:
            PageDecodeError: If the page is out of range or cannot be decoded.
        """
        if not 1 <= page_number <= self.page_count:
            raise PageDecodeError(
                page_number, f"out of range (1..{self.page_count})"
            )

        with self._lock:
            try:
                page = self._doc[page_number - 1]
                text = page.get_text("text")
                fragments = self._extract_fragments(page)
            except Exception as e:
                raise PageDecodeError(page_number, str(e)) from e

        return PageContent(page_number=page_number, text=text, fragments=fragments)

    def _extract_fragments(self, page: fitz.Page) -> list[PositionedFragment]:
        """Text spans in content stream order, positioned at their origin."""
        to_pdf_space = ~page.transformation_matrix
        page_dict = page.get_text("dict", flags=fitz.TEXT_PRESERVE_WHITESPACE)

        fragments = []
        for block in page_dict.get("blocks", []):
            if block.get("type") != 0:  # Text
                continue
            for line in block.get("lines", []):
                for span in line.get("spans", []):
                    if not span["text"].strip():
                        continue
                    origin = fitz.Point(span["origin"]) * to_pdf_space
                    fragments.append(PositionedFragment(
                        text=span["text"],
                        x=round(origin.x, COORD_PRECISION),
                        y=round(origin.y, COORD_PRECISION),
                    ))
        return fragments

    def close(self):
        self._doc.close()

    def __enter__(self) -> PdfPageSource:
        return self

    def __exit__(self, *exc_info):
        self.close()
