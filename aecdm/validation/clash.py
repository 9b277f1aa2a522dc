"""Clash detection — pairwise element comparison using AABB overlap.

Pure Python bounding box math, no mesh tessellation.  Boxes that merely
touch along a face or edge are never reported as clashing.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterator, Sequence

from aecdm.config import CLASH_TOLERANCE, DEFAULT_CLASH_THRESHOLD, MAJOR_INTERSECTION_VOLUME
from aecdm.errors import ComputationError
from aecdm.models.element import BoundingBox, ClashResult, ClashType, Vertex

logger = logging.getLogger(__name__)


def _axes_overlap(a: BoundingBox, b: BoundingBox, tol: float) -> bool:
    for a_lo, a_hi, b_lo, b_hi in zip(a.mins, a.maxs, b.mins, b.maxs):
        if not ((a_hi - tol) > b_lo and (b_hi - tol) > a_lo):
            return False
    return True


def intersection_extents(
    a: BoundingBox, b: BoundingBox
) -> tuple[tuple[float, float, float], tuple[float, float, float]]:
    """Return the (lower, upper) corners of the region shared by *a* and *b*."""
    lower = tuple(max(lo_a, lo_b) for lo_a, lo_b in zip(a.mins, b.mins))
    upper = tuple(min(hi_a, hi_b) for hi_a, hi_b in zip(a.maxs, b.maxs))
    return lower, upper  # type: ignore[return-value]


def detect_clash(
    box_a: BoundingBox,
    box_b: BoundingBox,
    threshold_volume: float = DEFAULT_CLASH_THRESHOLD,
) -> ClashResult | None:
    """Decide whether two boxes clash.

    Returns a :class:`ClashResult` when the boxes overlap on all three axes
    by more than ``CLASH_TOLERANCE`` and the shared volume reaches
    *threshold_volume*; otherwise *None*.
    """
    tol = CLASH_TOLERANCE
    if not _axes_overlap(box_a, box_b, tol):
        return None

    lower, upper = intersection_extents(box_a, box_b)
    extents = [hi - lo for lo, hi in zip(lower, upper)]
    if any(e <= tol for e in extents):
        return None

    volume = extents[0] * extents[1] * extents[2]
    if volume < threshold_volume:
        return None

    if not math.isfinite(volume) or box_a.volume <= 0 or box_b.volume <= 0:
        raise ComputationError(
            f"Cannot size overlap of {box_a.element_id} / {box_b.element_id}"
        )

    clash_type = (
        ClashType.MAJOR_INTERSECTION
        if volume > MAJOR_INTERSECTION_VOLUME
        else ClashType.MINOR_OVERLAP
    )
    center = Vertex(
        x=(lower[0] + upper[0]) / 2,
        y=(lower[1] + upper[1]) / 2,
        z=(lower[2] + upper[2]) / 2,
    )
    return ClashResult(
        first=box_a,
        second=box_b,
        clash_type=clash_type,
        intersection_volume=volume,
        contact_center=center,
        volume_percent_of_first=volume / box_a.volume * 100,
        volume_percent_of_second=volume / box_b.volume * 100,
    )


def iter_pairs(count: int) -> Iterator[tuple[int, int]]:
    """Yield every unordered index pair ``(i, j)`` with ``i < j``."""
    for i in range(count):
        for j in range(i + 1, count):
            yield i, j


class ClashDetector:
    """Run :func:`detect_clash` over every unordered pair of boxes.

    Parameters
    ----------
    threshold_volume:
        Minimum shared volume, in cubic model units, reported as a clash.
    """

    def __init__(self, threshold_volume: float = DEFAULT_CLASH_THRESHOLD) -> None:
        if not math.isfinite(threshold_volume) or threshold_volume < 0:
            raise ValueError("threshold_volume must be a non-negative number")
        self.threshold_volume = threshold_volume

    def check_pair(self, box_a: BoundingBox, box_b: BoundingBox) -> ClashResult | None:
        """Compare one pair; a failing comparison counts as no clash."""
        try:
            return detect_clash(box_a, box_b, self.threshold_volume)
        except Exception:
            logger.warning(
                "Clash check failed for %s / %s, treating as no clash",
                box_a.element_id,
                box_b.element_id,
                exc_info=True,
            )
            return None

    def detect(self, boxes: Sequence[BoundingBox]) -> tuple[list[ClashResult], int]:
        """Compare all pairs in index order.

        Returns the clashes found and the number of pairs checked.
        """
        clashes: list[ClashResult] = []
        pairs_checked = 0

        # O(n^2) pairwise comparison
        for i, j in iter_pairs(len(boxes)):
            pairs_checked += 1
            result = self.check_pair(boxes[i], boxes[j])
            if result is not None:
                clashes.append(result)

        return clashes, pairs_checked
