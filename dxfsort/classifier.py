"""
Page Classifier
===============
Decides whether a drawing page carries cutting parts at all.

Profile sheets, bending tables, block marking plans and transport
(in-coming / out-going) sheets reference parts too, but their parts are
handled elsewhere, so those pages are skipped.
"""

from __future__ import annotations

import logging

from .models import PageVerdict, SkipReason

logger = logging.getLogger(__name__)

# ─── Skip Markers ─────────────────────────────────────────────────────────────

# Checked in order, first hit wins.
SKIP_MARKERS: tuple[tuple[str, SkipReason], ...] = (
    ("END A", SkipReason.PROFILE),
    ("MARKING PLAN", SkipReason.MARKING_PLAN),
    ("IN - COMING", SkipReason.IN_COMING),
    ("OUT - GOING", SkipReason.OUT_GOING),
    ("BENDING TABLE", SkipReason.PROFILE_BENDING_TABLE),
)


def classify(page_text: str) -> PageVerdict:
    """Return a skip verdict for the first marker found in the text."""
    for marker, reason in SKIP_MARKERS:
        if marker in page_text:
            logger.debug(f"Marker {marker!r} found, skipping as {reason.value}")
            return PageVerdict.skip(reason)
    return PageVerdict.proceed_page()
