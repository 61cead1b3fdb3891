"""
Progress Reporter
=================
Line-oriented progress output of a sort run.

Tags:
    [c]  file copied (exact match)
    [r]  file copied under a fallback material code
    [s]  destination already present, copy skipped
    [n]  identifier not found in the file index
    [i]  page skipped
"""

from __future__ import annotations

from typing import Optional

from rich.console import Console
from rich.text import Text

from .models import SkipReason


class ProgressReporter:
    """Writes tagged progress lines to a rich console."""

    def __init__(self, console: Optional[Console] = None, quiet: bool = False):
        self.console = console or Console(highlight=False)
        self.quiet = quiet

    def copied(self, identifier: str, target: str):
        self._line("[c]", "green", f"{identifier} -> {target}")

    def remapped(self, tried_key: str, identifier: str, target: str):
        self._line("[r]", "yellow", f"{tried_key} ({identifier}) -> {target}")

    def present(self, identifier: str, target: str):
        self._line("[s]", "dim", f"{identifier} -> {target} already present")

    def not_found(self, identifier: str):
        self._line("[n]", "red", f"{identifier} not found")

    def page_skipped(self, page_number: int, reason: SkipReason):
        self._line("[i]", "cyan", f"page {page_number} skipped: {reason.value}")

    def _line(self, tag: str, style: str, message: str):
        if self.quiet:
            return
        self.console.print(Text.assemble((tag, style), " ", message), soft_wrap=True)
