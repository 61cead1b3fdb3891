"""
Output Writer
=============
Copies matched cutting files into one folder per group label.

Directory Layout:
    out/
    └── {label}/           # One folder per group label
        └── {file}.dxf     # Original base name preserved

Re-runs are idempotent: a destination that already exists is never
touched again. A copy is written to a temporary file and linked into
place, so a destination is either complete or absent, and two pages
racing on the same file cannot both publish it.
"""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
from collections.abc import Iterable
from pathlib import Path
from typing import Optional

from .errors import OutputError
from .models import CopyRecord, CopyStatus, MatchKind, MatchResult
from .reporter import ProgressReporter

logger = logging.getLogger(__name__)


class OutputWriter:
    """Persists match results below ``output_dir``."""

    def __init__(
        self,
        output_dir: str = "out",
        reporter: Optional[ProgressReporter] = None,
    ):
        self.output_dir = Path(output_dir)
        self.reporter = reporter or ProgressReporter()

    def label_dir(self, label: str) -> Path:
        name = _sanitize_name(label)
        if name != label:
            logger.warning(f"Label {label!r} written to folder {name!r}")
        return self.output_dir / name

    def write(self, label: str, results: Iterable[MatchResult]) -> list[CopyRecord]:
        """
        Copy every matched file into the label folder.

        Args:
            label: Group label of the page.
            results: Match results of all identifiers on the page.

        Returns:
            One CopyRecord per result, in input order.

        Raises:
            OutputError: If the folder cannot be created or a copy fails.
        """
        target_dir = self.label_dir(label)
        try:
            target_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise OutputError(f"Cannot create {target_dir}: {e}") from e

        return [self._write_one(target_dir, result) for result in results]

    def _write_one(self, target_dir: Path, result: MatchResult) -> CopyRecord:
        if result.kind == MatchKind.NOT_FOUND or result.path is None:
            self.reporter.not_found(result.identifier)
            return CopyRecord(
                identifier=result.identifier,
                status=CopyStatus.NOT_FOUND,
                match_kind=result.kind,
            )

        source = Path(result.path)
        dest = target_dir / source.name
        shown = f"{target_dir.name}/{source.name}"

        copied = copy_if_absent(source, dest)
        if not copied:
            self.reporter.present(result.identifier, shown)
        elif result.kind == MatchKind.REMAPPED:
            self.reporter.remapped(result.tried_key, result.identifier, shown)
        else:
            self.reporter.copied(result.identifier, shown)

        return CopyRecord(
            identifier=result.identifier,
            status=CopyStatus.COPIED if copied else CopyStatus.PRESENT,
            match_kind=result.kind,
            source=str(source),
            destination=str(dest),
            tried_key=result.tried_key,
        )


def copy_if_absent(source: Path, dest: Path) -> bool:
    """
    Copy ``source`` to ``dest`` unless ``dest`` exists.

    The data is written to a temporary file next to ``dest`` and published
    with a hard link, so ``dest`` only ever appears complete.

    Returns:
        True if the file was copied, False if it was already present.
    """
    if dest.exists():
        return False

    tmp_path = None
    try:
        with open(source, "rb") as src, tempfile.NamedTemporaryFile(
            dir=dest.parent, prefix=f".{dest.name}.", suffix=".part", delete=False
        ) as dst:
            tmp_path = dst.name
            shutil.copyfileobj(src, dst)
        shutil.copystat(source, tmp_path)
        os.link(tmp_path, dest)
    except FileExistsError:
        return False
    except OSError as e:
        raise OutputError(f"Failed to copy {source} -> {dest}: {e}") from e
    finally:
        if tmp_path is not None:
            _discard(tmp_path)

    logger.debug(f"Copied {source} -> {dest}")
    return True


def _discard(path: str):
    try:
        os.unlink(path)
    except FileNotFoundError:
        pass
    except OSError as e:
        raise OutputError(f"Failed to remove temporary file {path}: {e}") from e


def _sanitize_name(name: str) -> str:
    """Sanitize a label for filesystem use."""
    return "".join(
        c if c.isalnum() or c in "-_ ." else "_"
        for c in name
    ).strip(" .")[:100] or "_"
