"""
File Index
==========
Indexes the cutting file library once, before any page is processed.

Cutting files are named ``<job>-<a>-<b>-<c>.dxf``; the last three dash
segments identify the part and are used as the lookup key. Bending aids
and templates living next to the production files are excluded.

Directory Layout:
    dxf/
    ├── 2301-ABCD-EF-GH.dxf     → key "ABCD-EF-GH"
    ├── fp-ABCD-EF-GH.dxf       → excluded (bending template)
    └── block_1/
        └── 2302-WXYZ-BA-01.dxf → key "WXYZ-BA-01"
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Iterator, Mapping
from pathlib import Path
from types import MappingProxyType

from .errors import IndexBuildError

logger = logging.getLogger(__name__)

DXF_EXTENSION = ".dxf"
EXCLUDED_PREFIXES = ("fp", "templ")
KEY_SEGMENTS = 3

KEY_POLICIES = ("last-three", "full-stem")
DEFAULT_KEY_POLICY = "last-three"


def normalize_stem(stem: str, policy: str = DEFAULT_KEY_POLICY) -> str:
    """Lookup key for a file stem under the given key policy."""
    if policy == "full-stem":
        return stem
    if policy == "last-three":
        return "-".join(stem.split("-")[-KEY_SEGMENTS:])
    raise ValueError(
        f"Unknown key policy {policy!r}, expected one of: {', '.join(KEY_POLICIES)}"
    )


class FileIndex(Mapping):
    """
    Read-only mapping of lookup key to absolute file path.

    Safe to share between worker threads: the underlying dict is never
    modified after construction.
    """

    def __init__(self, entries: Mapping[str, str], root: str = ""):
        self._entries = MappingProxyType(dict(entries))
        self.root = root

    def __getitem__(self, key: str) -> str:
        return self._entries[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"FileIndex(root={self.root!r}, entries={len(self)})"


def build_index(
    root_dir: str,
    extension: str = DXF_EXTENSION,
    excluded_prefixes: Iterable[str] = EXCLUDED_PREFIXES,
    key_policy: str = DEFAULT_KEY_POLICY,
) -> FileIndex:
    """
    Walk ``root_dir`` recursively and index every cutting file.

    Raises:
        IndexBuildError: If the directory is missing or cannot be read.
    """
    root = Path(root_dir).absolute()
    if not root.is_dir():
        raise IndexBuildError(f"Cutting file directory not found: {root}")

    excluded = tuple(excluded_prefixes)
    entries: dict[str, str] = {}

    try:
        for dirpath, dirnames, filenames in os.walk(root, onerror=_raise):
            dirnames.sort()
            for filename in sorted(filenames):
                if not filename.endswith(extension):
                    continue
                if filename.startswith(excluded):
                    logger.debug(f"Skipping template: {filename}")
                    continue

                stem = filename[: -len(extension)] if extension else filename
                key = normalize_stem(stem, key_policy)
                path = os.path.join(dirpath, filename)

                previous = entries.get(key)
                if previous is not None:
                    logger.debug(f"Key {key} maps to {path}, replacing {previous}")
                entries[key] = path
    except OSError as e:
        raise IndexBuildError(f"Failed to index {root}: {e}") from e

    logger.info(f"Indexed {len(entries)} cutting files from {root}")
    return FileIndex(entries, root=str(root))


def _raise(error: OSError):
    raise error
