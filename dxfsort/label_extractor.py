"""
Label Extractor
===============
Builds the group label of a drawing page from its title block.

The title block field holding the label sits at one of a few fixed
x-coordinates depending on the sheet layout revision. Fragments starting
at those coordinates are concatenated in page order. A field spanning
several lines yields one fragment per line; the same line emitted twice
(overlapping runs) is dropped by requiring a minimum vertical gap to the
previously accepted fragment.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from functools import reduce
from typing import Optional

from .models import UNKNOWN_LABEL, PositionedFragment

logger = logging.getLogger(__name__)

DEFAULT_X_TOLERANCE = 0.01
DEFAULT_MIN_GAP = 2.0
DEFAULT_TRAILING_FILLER = "-_.*"


@dataclass(frozen=True)
class LabelZone:
    """A title block position that contributes to the label."""

    x: float
    # Fragments above this y belong to another field.
    max_y: Optional[float] = None
    dedupe: bool = True

    def matches_x(self, x: float, tolerance: float) -> bool:
        return abs(x - self.x) <= tolerance


# ─── Layouts ──────────────────────────────────────────────────────────────────

LABEL_LAYOUTS: dict[str, tuple[LabelZone, ...]] = {
    # Material map name, two stacked fields of the title block.
    "material": (
        LabelZone(x=520.56, max_y=200.0),
        LabelZone(x=736.735),
    ),
    # NC name column on the left border.
    "nc-name": (
        LabelZone(x=73.8),
    ),
}

DEFAULT_LAYOUT = "material"


@dataclass(frozen=True)
class _LabelState:
    last_y: Optional[float] = None
    parts: tuple[str, ...] = ()


class LabelExtractor:
    """Folds positioned fragments into a group label."""

    def __init__(
        self,
        zones: Iterable[LabelZone] = LABEL_LAYOUTS[DEFAULT_LAYOUT],
        x_tolerance: float = DEFAULT_X_TOLERANCE,
        min_gap: float = DEFAULT_MIN_GAP,
        trailing_filler: str = DEFAULT_TRAILING_FILLER,
    ):
        self.zones = tuple(zones)
        self.x_tolerance = x_tolerance
        self.min_gap = min_gap
        self.trailing_filler = trailing_filler

    @classmethod
    def for_layout(cls, name: str, **kwargs) -> LabelExtractor:
        try:
            zones = LABEL_LAYOUTS[name]
        except KeyError:
            raise ValueError(
                f"Unknown label layout {name!r}, "
                f"expected one of: {', '.join(sorted(LABEL_LAYOUTS))}"
            ) from None
        return cls(zones, **kwargs)

    def extract(self, fragments: Iterable[PositionedFragment]) -> str:
        state = reduce(self._step, fragments, _LabelState())
        return self._finish("".join(state.parts))

    def _zone_for(self, fragment: PositionedFragment) -> Optional[LabelZone]:
        for zone in self.zones:
            if zone.matches_x(fragment.x, self.x_tolerance):
                return zone
        return None

    def _step(self, state: _LabelState, fragment: PositionedFragment) -> _LabelState:
        zone = self._zone_for(fragment)
        if zone is None:
            return state

        if zone.max_y is not None and fragment.y > zone.max_y:
            return state

        if (
            zone.dedupe
            and state.last_y is not None
            and abs(fragment.y - state.last_y) <= self.min_gap
        ):
            logger.debug(
                f"Dropping overlapping fragment {fragment.text!r} at y={fragment.y}"
            )
            return state

        return _LabelState(last_y=fragment.y, parts=state.parts + (fragment.text,))

    def _finish(self, raw: str) -> str:
        label = raw.rstrip(self.trailing_filler + " \t\r\n").strip()
        return label or UNKNOWN_LABEL


def extract_group_label(
    fragments: Iterable[PositionedFragment],
    layout: str = DEFAULT_LAYOUT,
) -> str:
    """Group label of a page using one of the built-in layouts."""
    return LabelExtractor.for_layout(layout).extract(fragments)
