"""Spatial containment — classify candidate boxes against a container box.

Containment uses a looser tolerance than clash detection to absorb the
modelling imprecision typical of architectural models (walls slightly
proud of a room, furniture resting on the floor slab, etc.).
"""

from __future__ import annotations

import logging

from aecdm.config import (
    CONTAINMENT_TOLERANCE,
    PARTIAL_CONTAINMENT_FRACTION,
    UNKNOWN_CATEGORY,
)
from aecdm.models.element import BoundingBox, ContainmentResult, ContainmentType

logger = logging.getLogger(__name__)

# Ordered keyword rules: every keyword in a rule must appear in the name.
# The first matching rule wins.
_CATEGORY_RULES: list[tuple[tuple[str, ...], str]] = [
    (("wall",), "Walls"),
    (("door",), "Doors"),
    (("window",), "Windows"),
    (("floor",), "Floors"),
    (("ceiling",), "Ceilings"),
    (("roof",), "Roofs"),
    (("furniture",), "Furniture"),
    (("electrical",), "Electrical Equipment"),
    (("structural", "framing"), "Structural Framing"),
    (("structural", "column"), "Structural Columns"),
    (("rebar",), "Structural Rebar"),
]


def infer_category(element_name: str | None) -> str:
    """Guess a category from an element's display name.

    This is a keyword heuristic, not authoritative metadata: it never looks
    at the element's real category property.  Names with no keyword match
    fall back to ``"Unknown Category"``.
    """
    if not element_name:
        return UNKNOWN_CATEGORY
    lowered = element_name.lower()
    for keywords, category in _CATEGORY_RULES:
        if all(k in lowered for k in keywords):
            return category
    return UNKNOWN_CATEGORY


def _fully_inside(container: BoundingBox, candidate: BoundingBox, tol: float) -> bool:
    return all(
        c_lo >= box_lo - tol and c_hi <= box_hi + tol
        for c_lo, c_hi, box_lo, box_hi in zip(
            candidate.mins, candidate.maxs, container.mins, container.maxs
        )
    )


def _overlap_volume(container: BoundingBox, candidate: BoundingBox, tol: float) -> float:
    """Shared volume, or 0.0 when any axis overlaps by no more than *tol*."""
    volume = 1.0
    for c_lo, c_hi, box_lo, box_hi in zip(
        candidate.mins, candidate.maxs, container.mins, container.maxs
    ):
        if not (c_hi > box_lo + tol and c_lo < box_hi - tol):
            return 0.0
        extent = min(c_hi, box_hi) - max(c_lo, box_lo)
        if extent <= tol:
            return 0.0
        volume *= extent
    return volume


def classify(container: BoundingBox, candidate: BoundingBox) -> ContainmentType:
    """Classify how much of *candidate* lies inside *container*.

    - ``FullyContained`` when every candidate bound is within the container
      bounds padded outward by ``CONTAINMENT_TOLERANCE``.
    - ``PartiallyContained`` when the boxes share more than
      ``PARTIAL_CONTAINMENT_FRACTION`` of the candidate's own volume.
    - ``Outside`` otherwise.
    """
    tol = CONTAINMENT_TOLERANCE
    if _fully_inside(container, candidate, tol):
        return ContainmentType.FULLY_CONTAINED

    shared = _overlap_volume(container, candidate, tol)
    if shared > PARTIAL_CONTAINMENT_FRACTION * candidate.volume:
        return ContainmentType.PARTIALLY_CONTAINED
    return ContainmentType.OUTSIDE


def classify_result(container: BoundingBox, candidate: BoundingBox) -> ContainmentResult:
    """Classify *candidate* and wrap it with its inferred category.

    A failing computation is logged and reported as ``Outside``.
    """
    try:
        containment = classify(container, candidate)
    except Exception:
        logger.warning(
            "Containment check failed for %s, treating as outside",
            candidate.element_id,
            exc_info=True,
        )
        containment = ContainmentType.OUTSIDE

    return ContainmentResult(
        element_id=candidate.element_id,
        element_name=candidate.element_name,
        category=infer_category(candidate.element_name),
        containment_type=containment,
        bounding_box=candidate,
    )
