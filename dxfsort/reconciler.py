"""
Reconciler
==========
Resolves part identifiers against the file index.

The library groups parts by a material code (characters 5 and 6 of the
identifier) that does not always match the code printed on the drawing.
Besides the verbatim lookup, every known equivalent code is tried, so one
identifier may resolve to more than one file.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence

from .models import MatchResult

logger = logging.getLogger(__name__)

FALLBACK_CODES = ("BA", "BB", "BC")
FALLBACK_OFFSET = 5


def remap_key(identifier: str, code: str, offset: int = FALLBACK_OFFSET) -> str:
    """Copy of ``identifier`` with ``code`` written over it at ``offset``."""
    end = offset + len(code)
    if len(identifier) < end:
        raise ValueError(
            f"Identifier {identifier!r} too short for code at offset {offset}"
        )
    return identifier[:offset] + code + identifier[end:]


def fallback_keys(
    identifier: str,
    codes: Iterable[str] = FALLBACK_CODES,
    offset: int = FALLBACK_OFFSET,
) -> list[str]:
    """Distinct fallback keys for ``identifier``, excluding the identifier itself."""
    keys = []
    for code in codes:
        if len(identifier) < offset + len(code):
            continue
        key = remap_key(identifier, code, offset)
        if key != identifier and key not in keys:
            keys.append(key)
    return keys


class Reconciler:
    """Looks identifiers up verbatim and under their fallback codes."""

    def __init__(
        self,
        index: Mapping[str, str],
        codes: Sequence[str] = FALLBACK_CODES,
        offset: int = FALLBACK_OFFSET,
    ):
        self.index = index
        self.codes = tuple(codes)
        self.offset = offset

    def resolve(self, identifier: str) -> list[MatchResult]:
        results: list[MatchResult] = []

        path = self.index.get(identifier)
        if path is not None:
            results.append(MatchResult.exact(identifier, path))

        for key in fallback_keys(identifier, self.codes, self.offset):
            path = self.index.get(key)
            if path is not None:
                logger.debug(f"{identifier} remapped to {key}")
                results.append(MatchResult.remapped(identifier, path, key))

        if not results:
            results.append(MatchResult.not_found(identifier))
        return results

    def resolve_all(self, identifiers: Iterable[str]) -> list[MatchResult]:
        return [r for identifier in identifiers for r in self.resolve(identifier)]


def resolve(identifier: str, index: Mapping[str, str]) -> list[MatchResult]:
    """Resolve one identifier with the default fallback codes."""
    return Reconciler(index).resolve(identifier)
