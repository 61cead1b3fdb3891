"""
Data Models
===========
Pydantic models for the page pipeline and the run summary.
All models are serializable to JSON for the --json-output mode.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field


UNKNOWN_LABEL = "unknown"


# ─── Enums ────────────────────────────────────────────────────────────────────


class SkipReason(str, Enum):
    """Why a page was excluded from extraction."""
    PROFILE = "profile"
    PROFILE_BENDING_TABLE = "profile bending table"
    MARKING_PLAN = "block marking type"
    IN_COMING = "in-coming"
    OUT_GOING = "out-going"


class MatchKind(str, Enum):
    """Outcome of looking up one part identifier in the file index."""
    EXACT = "exact"
    REMAPPED = "remapped"
    NOT_FOUND = "not_found"


class CopyStatus(str, Enum):
    """Outcome of one output step."""
    COPIED = "copied"
    PRESENT = "present"
    NOT_FOUND = "not_found"


# ─── Page Models ──────────────────────────────────────────────────────────────


class PositionedFragment(BaseModel):
    """
    A run of text rendered at a fixed position on the page.
    Coordinates are PDF user space (origin bottom-left, y grows upwards).
    """
    model_config = ConfigDict(frozen=True)

    text: str
    x: float
    y: float


class PageContent(BaseModel):
    """Plain text and positioned fragments of a single page."""
    page_number: int = Field(ge=1)
    text: str = ""
    fragments: list[PositionedFragment] = Field(default_factory=list)


class PageVerdict(BaseModel):
    """Classification result: proceed, or skip with a reason."""
    model_config = ConfigDict(frozen=True)

    reason: Optional[SkipReason] = None

    @computed_field
    @property
    def proceed(self) -> bool:
        return self.reason is None

    @classmethod
    def proceed_page(cls) -> PageVerdict:
        return cls()

    @classmethod
    def skip(cls, reason: SkipReason) -> PageVerdict:
        return cls(reason=reason)


# ─── Matching Models ──────────────────────────────────────────────────────────


class MatchResult(BaseModel):
    """
    Result of resolving a part identifier.

    EXACT carries the path, REMAPPED carries the path and the fallback key
    that hit, NOT_FOUND carries neither.
    """
    model_config = ConfigDict(frozen=True)

    identifier: str
    kind: MatchKind
    path: Optional[str] = None
    tried_key: Optional[str] = None

    @classmethod
    def exact(cls, identifier: str, path: str) -> MatchResult:
        return cls(identifier=identifier, kind=MatchKind.EXACT, path=path)

    @classmethod
    def remapped(cls, identifier: str, path: str, tried_key: str) -> MatchResult:
        return cls(
            identifier=identifier,
            kind=MatchKind.REMAPPED,
            path=path,
            tried_key=tried_key,
        )

    @classmethod
    def not_found(cls, identifier: str) -> MatchResult:
        return cls(identifier=identifier, kind=MatchKind.NOT_FOUND)


class CopyRecord(BaseModel):
    """What the output writer did for one match result."""
    identifier: str
    status: CopyStatus
    match_kind: MatchKind
    source: Optional[str] = None
    destination: Optional[str] = None
    tried_key: Optional[str] = None


# ─── Run Models ───────────────────────────────────────────────────────────────


class PageOutcome(BaseModel):
    """Everything produced while processing one page."""
    page_number: int = Field(ge=1)
    verdict: PageVerdict = Field(default_factory=PageVerdict)
    label: Optional[str] = None
    identifiers: list[str] = Field(default_factory=list)
    matches: list[MatchResult] = Field(default_factory=list)
    records: list[CopyRecord] = Field(default_factory=list)


class RunSummary(BaseModel):
    """Aggregated counters of a sort run."""
    source_pdf: str = ""
    total_pages: int = 0
    index_size: int = 0
    elapsed_seconds: float = 0.0
    pages: list[PageOutcome] = Field(default_factory=list)

    @computed_field
    @property
    def pages_processed(self) -> int:
        return sum(1 for p in self.pages if p.verdict.proceed)

    @computed_field
    @property
    def pages_skipped(self) -> int:
        return sum(1 for p in self.pages if not p.verdict.proceed)

    @computed_field
    @property
    def skip_breakdown(self) -> dict[str, int]:
        counts: dict[str, int] = {}
        for p in self.pages:
            if p.verdict.reason is not None:
                key = p.verdict.reason.value
                counts[key] = counts.get(key, 0) + 1
        return counts

    @computed_field
    @property
    def labels(self) -> list[str]:
        return sorted({p.label for p in self.pages if p.label})

    @computed_field
    @property
    def files_copied(self) -> int:
        return self._count(CopyStatus.COPIED)

    @computed_field
    @property
    def files_present(self) -> int:
        return self._count(CopyStatus.PRESENT)

    @computed_field
    @property
    def files_remapped(self) -> int:
        return sum(
            1
            for p in self.pages
            for r in p.records
            if r.match_kind == MatchKind.REMAPPED
            and r.status == CopyStatus.COPIED
        )

    @computed_field
    @property
    def identifiers_not_found(self) -> int:
        return self._count(CopyStatus.NOT_FOUND)

    def _count(self, status: CopyStatus) -> int:
        return sum(
            1 for p in self.pages for r in p.records if r.status == status
        )
