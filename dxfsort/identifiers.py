"""
Identifier Extractor
====================
Finds part identifiers in the plain text of a drawing page.

Parts are printed as a path, e.g. ``ABCD-EF-GH/x/``: four word characters,
a dash, two dash-separated tokens, then a slash-delimited segment. Only
the identifier in front of the path is kept.
"""

from __future__ import annotations

import re
from collections.abc import Iterable

# ─── Pattern ──────────────────────────────────────────────────────────────────

PART_ID_PATTERN = re.compile(r"(\w{4}-\w+-\w+)/\w+/", re.ASCII)


def extract_identifiers(page_text: str) -> list[str]:
    """All distinct identifiers on the page, in order of first occurrence."""
    return unique(m.group(1) for m in PART_ID_PATTERN.finditer(page_text))


def unique(values: Iterable[str]) -> list[str]:
    seen: set[str] = set()
    result = []
    for value in values:
        if value not in seen:
            seen.add(value)
            result.append(value)
    return result
