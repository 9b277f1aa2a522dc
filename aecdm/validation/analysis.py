"""Pairwise analysis — drive clash and containment checks over element sets.

Usage::

    from aecdm.validation.analysis import compute_clashes

    report = compute_clashes(elements, threshold_volume=0.01)
    print(report.to_text())

Both entry points are pure: they take already-fetched geometry and perform
no I/O.
"""

from __future__ import annotations

import logging
import math
from collections import Counter
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from aecdm.config import DEFAULT_CLASH_THRESHOLD
from aecdm.errors import GeometryUnavailable, MissingContainer, ValidationError
from aecdm.extraction.geometry import bounding_box_for, mesh_summary
from aecdm.models.element import BoundingBox, ElementGeometry
from aecdm.validation.clash import ClashDetector
from aecdm.validation.containment import classify_result
from aecdm.validation.report import ClashReport, ContainmentMode, ContainmentReport

logger = logging.getLogger(__name__)

__all__ = [
    "ContainmentMode",
    "compute_clashes",
    "compute_containment",
    "ensure_unique_ids",
]


def _as_element(raw: ElementGeometry | Mapping[str, Any]) -> ElementGeometry:
    if isinstance(raw, ElementGeometry):
        return raw
    return ElementGeometry.model_validate(raw)


def ensure_unique_ids(element_ids: Iterable[str]) -> None:
    """Raise :class:`ValidationError` naming any id that appears twice."""
    counts = Counter(element_ids)
    duplicates = sorted(eid for eid, n in counts.items() if n > 1)
    if duplicates:
        raise ValidationError(
            "Duplicate element id(s) in candidate list: " + ", ".join(duplicates)
        )


def _normalize(
    elements: Iterable[ElementGeometry],
) -> tuple[list[BoundingBox], list[dict[str, str]]]:
    """Build one box per element, collecting elements without geometry."""
    boxes: list[BoundingBox] = []
    skipped: list[dict[str, str]] = []
    for element in elements:
        try:
            boxes.append(bounding_box_for(element))
        except GeometryUnavailable as exc:
            logger.warning("Skipping element %s: %s", element.id, exc.reason)
            skipped.append({"element_id": element.id, "reason": exc.reason})
    return boxes, skipped


def compute_clashes(
    elements: Sequence[ElementGeometry | Mapping[str, Any]],
    threshold_volume: float = DEFAULT_CLASH_THRESHOLD,
    *,
    missing: Iterable[str] = (),
) -> ClashReport:
    """Check every unordered pair of elements for bounding box clashes.

    Parameters
    ----------
    elements:
        Elements with their mesh geometry.
    threshold_volume:
        Minimum shared volume reported as a clash.
    missing:
        Ids the caller could not resolve to geometry; listed as skipped.

    Returns
    -------
    ClashReport
        ``total_pairs`` is ``n * (n - 1) / 2`` over the *n* elements that
        produced a box.

    Raises
    ------
    ValidationError
        If the threshold is negative or not finite, or an id appears twice.
    """
    if not math.isfinite(threshold_volume) or threshold_volume < 0:
        raise ValidationError("threshold_volume must be a non-negative number")

    parsed = [_as_element(e) for e in elements]
    missing = list(missing)
    ensure_unique_ids([e.id for e in parsed] + missing)
    logger.info("Clash analysis over %d elements", len(parsed))

    boxes, skipped = _normalize(parsed)
    skipped.extend(
        {"element_id": eid, "reason": "could not be retrieved"} for eid in missing
    )

    detector = ClashDetector(threshold_volume)
    clashes, total_pairs = detector.detect(boxes)

    logger.info(
        "Clash analysis complete: %d clashes in %d pairs", len(clashes), total_pairs
    )
    return ClashReport(
        threshold_volume=threshold_volume,
        boxes=boxes,
        clashes=clashes,
        total_pairs=total_pairs,
        mesh_summaries=[mesh_summary(e) for e in parsed],
        skipped=skipped,
    )


def compute_containment(
    container: ElementGeometry | Mapping[str, Any],
    candidates: Sequence[ElementGeometry | Mapping[str, Any]],
    mode: ContainmentMode | str = ContainmentMode.EXPLICIT_LIST,
    *,
    missing: Iterable[str] = (),
) -> ContainmentReport:
    """Classify each candidate against the container element.

    In ``ExplicitList`` mode duplicate candidate ids reject the whole call.
    In ``CategorySearch`` mode the container is dropped from its own
    candidate set.  Candidates with no usable geometry are listed in
    ``missing`` alongside the ids passed in by the caller.

    Raises
    ------
    MissingContainer
        If the container has no usable geometry.
    ValidationError
        On duplicate candidate ids in ``ExplicitList`` mode.
    """
    mode = ContainmentMode(mode)
    container_elem = _as_element(container)
    parsed = [_as_element(c) for c in candidates]

    if mode is ContainmentMode.EXPLICIT_LIST:
        ensure_unique_ids([c.id for c in parsed] + list(missing))
    else:
        parsed = [c for c in parsed if c.id != container_elem.id]

    try:
        container_box = bounding_box_for(container_elem)
    except GeometryUnavailable as exc:
        raise MissingContainer(container_elem.id) from exc

    logger.info(
        "Containment analysis (%s): %d candidates in %s",
        mode.value,
        len(parsed),
        container_elem.id,
    )

    boxes, skipped = _normalize(parsed)
    results = [classify_result(container_box, box) for box in boxes]

    report = ContainmentReport(
        container=container_box,
        mode=mode,
        results=results,
        missing=list(missing) + [s["element_id"] for s in skipped],
    )
    logger.info("Containment analysis complete: %s", report.counts)
    return report
