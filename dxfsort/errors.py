"""
Error Types
===========
Fatal conditions of a sort run. Page skips and unmatched identifiers are
not errors and never raise.
"""

from __future__ import annotations


class DxfSortError(RuntimeError):
    """Base class for fatal sorter errors."""


class PdfOpenError(DxfSortError):
    """The source PDF is missing or cannot be opened."""


class PageDecodeError(DxfSortError):
    """Text of a page could not be extracted."""

    def __init__(self, page_number: int, message: str):
        super().__init__(f"page {page_number}: {message}")
        self.page_number = page_number


class IndexBuildError(DxfSortError):
    """The cutting file directory could not be walked."""


class OutputError(DxfSortError):
    """Creating an output directory or copying a file failed."""


class PageProcessingError(DxfSortError):
    """A page failed with an error that is not a recognized skip."""

    def __init__(self, page_number: int, cause: BaseException):
        super().__init__(f"page {page_number} failed: {cause}")
        self.page_number = page_number
        self.cause = cause
