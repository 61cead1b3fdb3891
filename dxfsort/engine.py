"""
Sort Engine
===========
Main orchestrator that combines the file index, page classification,
label and identifier extraction, reconciliation and output into a
complete sort run.

Usage:
    engine = SortEngine(config)
    summary = engine.run("path/to/drawings.pdf")

Architecture:
    dxf/ → FileIndex (built once)
    PDF → PageSource → PageContent → Classifier ─┬→ skip
                                                 └→ LabelExtractor +
                                                    IdentifierExtractor →
                                                    Reconciler → OutputWriter
"""

from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from .classifier import classify
from .errors import PageProcessingError
from .file_index import (
    DEFAULT_KEY_POLICY,
    DXF_EXTENSION,
    EXCLUDED_PREFIXES,
    FileIndex,
    build_index,
)
from .identifiers import extract_identifiers
from .label_extractor import (
    DEFAULT_LAYOUT,
    DEFAULT_MIN_GAP,
    DEFAULT_TRAILING_FILLER,
    DEFAULT_X_TOLERANCE,
    LabelExtractor,
)
from .models import PageContent, PageOutcome, RunSummary
from .output_writer import OutputWriter
from .page_source import PageTextSource, PdfPageSource
from .reconciler import FALLBACK_CODES, FALLBACK_OFFSET, Reconciler
from .reporter import ProgressReporter

logger = logging.getLogger(__name__)

LOG_FORMAT = "[%(asctime)s] %(levelname)-8s %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


@dataclass
class SortConfig:
    """Configuration for the sort engine."""

    # Paths
    dxf_dir: str = "dxf"
    output_dir: str = "out"

    # File index
    extension: str = DXF_EXTENSION
    excluded_prefixes: tuple[str, ...] = EXCLUDED_PREFIXES
    key_policy: str = DEFAULT_KEY_POLICY

    # Matching
    fallback_codes: tuple[str, ...] = FALLBACK_CODES
    fallback_offset: int = FALLBACK_OFFSET

    # Label extraction
    label_layout: str = DEFAULT_LAYOUT
    x_tolerance: float = DEFAULT_X_TOLERANCE
    min_gap: float = DEFAULT_MIN_GAP
    trailing_filler: str = DEFAULT_TRAILING_FILLER

    # Processing
    max_workers: int = 4
    page_range: Optional[tuple[int, int]] = None

    # Logging
    log_level: str = "INFO"
    log_file: Optional[str] = None


class SortEngine:
    """
    Main sort engine.

    Orchestrates the full pipeline:
        1. File index construction
        2. Page classification
        3. Label and identifier extraction
        4. Reconciliation
        5. Output

    Pages run on a bounded thread pool. The first page that fails with a
    fatal error stops the run.
    """

    def __init__(
        self,
        config: Optional[SortConfig] = None,
        reporter: Optional[ProgressReporter] = None,
    ):
        self.config = config or SortConfig()
        self.reporter = reporter or ProgressReporter()
        self.label_extractor = LabelExtractor.for_layout(
            self.config.label_layout,
            x_tolerance=self.config.x_tolerance,
            min_gap=self.config.min_gap,
            trailing_filler=self.config.trailing_filler,
        )
        self._setup_logging()

    def _setup_logging(self):
        """Configure logging based on config."""
        log_level = getattr(logging, self.config.log_level.upper(), logging.INFO)

        # Configure root logger for the dxfsort package
        pkg_logger = logging.getLogger("dxfsort")
        pkg_logger.setLevel(log_level)

        # Console handler
        if not pkg_logger.handlers:
            console = logging.StreamHandler()
            console.setLevel(log_level)
            console.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
            pkg_logger.addHandler(console)

        # File handler
        if self.config.log_file:
            log_dir = Path(self.config.log_file).parent
            log_dir.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(self.config.log_file, encoding="utf-8")
            file_handler.setLevel(log_level)
            file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
            pkg_logger.addHandler(file_handler)

    def build_index(self) -> FileIndex:
        return build_index(
            self.config.dxf_dir,
            extension=self.config.extension,
            excluded_prefixes=self.config.excluded_prefixes,
            key_policy=self.config.key_policy,
        )

    def run(
        self,
        pdf_path: str,
        progress_callback: Optional[Callable[[int, int], None]] = None,
    ) -> RunSummary:
        """
        Sort the cutting files referenced by a drawing PDF.

        Args:
            pdf_path: Path to the drawing PDF.
            progress_callback: Callback(done, total) called after each page.

        Returns:
            RunSummary with one PageOutcome per processed page.

        Raises:
            PdfOpenError: If the PDF is missing or cannot be opened.
            IndexBuildError: If the cutting file directory cannot be read.
            PageProcessingError: If any page fails fatally.
        """
        # The index is complete before any page is read.
        index = self.build_index()
        with PdfPageSource(pdf_path) as source:
            return self.run_source(
                source,
                index,
                source_name=Path(pdf_path).name,
                progress_callback=progress_callback,
            )

    def run_source(
        self,
        source: PageTextSource,
        index: FileIndex,
        source_name: str = "",
        progress_callback: Optional[Callable[[int, int], None]] = None,
        cancel: Optional[threading.Event] = None,
    ) -> RunSummary:
        """
        Process every page of ``source`` against a prebuilt index.

        Setting ``cancel`` stops pages that have not reached the output step
        yet. It is also set by the engine when a page fails.
        """
        start_time = time.time()
        pages = self._page_numbers(source.page_count)
        logger.info(
            f"Processing {len(pages)} pages with {self.config.max_workers} workers"
        )

        reconciler = Reconciler(
            index,
            codes=self.config.fallback_codes,
            offset=self.config.fallback_offset,
        )
        writer = OutputWriter(self.config.output_dir, reporter=self.reporter)
        cancel = cancel or threading.Event()

        outcomes: list[PageOutcome] = []
        failures: dict[int, BaseException] = {}
        done = 0

        with ThreadPoolExecutor(
            max_workers=max(1, self.config.max_workers),
            thread_name_prefix="dxfsort-page",
        ) as pool:
            futures = {
                pool.submit(
                    self._run_page, source, page_number, reconciler, writer, cancel
                ): page_number
                for page_number in pages
            }

            for future in as_completed(futures):
                page_number = futures[future]
                if future.cancelled():
                    continue

                error = future.exception()
                if error is not None:
                    logger.error(f"Page {page_number} failed: {error}")
                    failures[page_number] = error
                    cancel.set()
                    for pending in futures:
                        pending.cancel()
                    continue

                outcome = future.result()
                if outcome is not None:
                    outcomes.append(outcome)

                done += 1
                if progress_callback:
                    progress_callback(done, len(pages))

        if failures:
            first = min(failures)
            raise PageProcessingError(first, failures[first]) from failures[first]

        outcomes.sort(key=lambda o: o.page_number)
        summary = RunSummary(
            source_pdf=source_name,
            total_pages=source.page_count,
            index_size=len(index),
            elapsed_seconds=round(time.time() - start_time, 3),
            pages=outcomes,
        )

        logger.info(
            f"Sort complete in {summary.elapsed_seconds:.2f}s: "
            f"{summary.pages_processed} pages processed, "
            f"{summary.pages_skipped} skipped, "
            f"{summary.files_copied} files copied"
        )
        return summary

    def analyze_page(self, content: PageContent, reconciler: Reconciler) -> PageOutcome:
        """Classify, extract and reconcile one page. No filesystem access."""
        verdict = classify(content.text)
        if not verdict.proceed:
            return PageOutcome(page_number=content.page_number, verdict=verdict)

        label = self.label_extractor.extract(content.fragments)
        identifiers = extract_identifiers(content.text)
        logger.debug(
            f"Page {content.page_number}: label={label!r}, "
            f"{len(identifiers)} identifiers"
        )

        return PageOutcome(
            page_number=content.page_number,
            verdict=verdict,
            label=label,
            identifiers=identifiers,
            matches=reconciler.resolve_all(identifiers),
        )

    def _run_page(
        self,
        source: PageTextSource,
        page_number: int,
        reconciler: Reconciler,
        writer: OutputWriter,
        cancel: threading.Event,
    ) -> Optional[PageOutcome]:
        if cancel.is_set():
            return None

        content = source.read_page(page_number)
        outcome = self.analyze_page(content, reconciler)

        if not outcome.verdict.proceed:
            self.reporter.page_skipped(page_number, outcome.verdict.reason)
            return outcome

        if cancel.is_set():
            return None

        outcome.records = writer.write(outcome.label, outcome.matches)
        return outcome

    def _page_numbers(self, total_pages: int) -> list[int]:
        """1-indexed page numbers to process, honoring the page range."""
        start_page, end_page = 1, total_pages
        if self.config.page_range:
            start_page = max(1, self.config.page_range[0])
            end_page = min(total_pages, self.config.page_range[1])
        return list(range(start_page, end_page + 1))
