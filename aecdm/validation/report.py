"""ClashReport and ContainmentReport — structured and text renderings."""

from __future__ import annotations

import json
from collections import Counter
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from aecdm.models.element import BoundingBox, ClashResult, ContainmentResult, ContainmentType

# Status glyphs used in the text rendering
NO_CLASH_MARK = "✅"
CLASH_MARK = "⚠️"
CONTAINMENT_MARKS: dict[ContainmentType, str] = {
    ContainmentType.FULLY_CONTAINED: "🟢",
    ContainmentType.PARTIALLY_CONTAINED: "🟡",
    ContainmentType.OUTSIDE: "❌",
}


class ContainmentMode(str, Enum):
    """How candidates were chosen for a containment analysis."""

    CATEGORY_SEARCH = "CategorySearch"
    EXPLICIT_LIST = "ExplicitList"


def _box_dict(box: BoundingBox) -> dict[str, Any]:
    data = box.model_dump(mode="json")
    data["center"] = list(box.center.as_tuple())
    return data


def _point(values: tuple[float, float, float]) -> str:
    return "(" + ", ".join(f"{v:.3f}" for v in values) + ")"


class ClashReport:
    """Result of an all-pairs clash analysis."""

    def __init__(
        self,
        threshold_volume: float,
        boxes: list[BoundingBox] | None = None,
        clashes: list[ClashResult] | None = None,
        total_pairs: int = 0,
        mesh_summaries: list[dict[str, Any]] | None = None,
        skipped: list[dict[str, str]] | None = None,
        analyzed_at: datetime | None = None,
    ) -> None:
        self.threshold_volume = threshold_volume
        self.boxes = boxes or []
        self.clashes = clashes or []
        self.total_pairs = total_pairs
        self.mesh_summaries = mesh_summaries or []
        self.skipped = skipped or []
        self.analyzed_at = analyzed_at or datetime.now(timezone.utc)

    @property
    def clash_count(self) -> int:
        return len(self.clashes)

    @property
    def has_clashes(self) -> bool:
        return bool(self.clashes)

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-serializable dict representation."""
        return {
            "analyzed_at": self.analyzed_at.isoformat(),
            "threshold_volume": self.threshold_volume,
            "total_pairs": self.total_pairs,
            "clash_count": self.clash_count,
            "mesh_summaries": self.mesh_summaries,
            "bounding_boxes": [_box_dict(b) for b in self.boxes],
            "clashes": [
                {
                    "first": {"id": c.first.element_id, "name": c.first.element_name},
                    "second": {"id": c.second.element_id, "name": c.second.element_name},
                    "clash_type": c.clash_type.value,
                    "intersection_volume": c.intersection_volume,
                    "contact_center": list(c.contact_center.as_tuple()),
                    "volume_percent_of_first": c.volume_percent_of_first,
                    "volume_percent_of_second": c.volume_percent_of_second,
                }
                for c in self.clashes
            ],
            "skipped": self.skipped,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2, ensure_ascii=False)

    def to_text(self) -> str:
        """Render the human-readable report returned by the clash tool."""
        lines: list[str] = []

        lines.append("=== CLASH DETECTION ===")
        lines.append(
            f"Elements analyzed: {len(self.boxes)} "
            f"(threshold: {self.threshold_volume:.4f} cubic units)"
        )
        for summary in self.mesh_summaries:
            lines.append(
                f"  - {summary['element_name']} (ID: {summary['element_id']}): "
                f"{summary['usable_mesh_count']}/{summary['mesh_count']} meshes, "
                f"{summary['vertex_count']} vertices"
            )
        for box in self.boxes:
            lines.append(f"    BBox {box.element_id}: {box.describe()}")
        lines.append("")

        if self.skipped:
            lines.append("=== SKIPPED ===")
            for item in self.skipped:
                lines.append(f"  - {item['element_id']}: {item['reason']}")
            lines.append("")

        lines.append("=== RESULTS ===")
        lines.append(f"Pairs checked: {self.total_pairs}")
        if not self.clashes:
            lines.append(f"{NO_CLASH_MARK} No clashes found.")
            return "\n".join(lines)

        lines.append(f"{CLASH_MARK} Clashes found: {self.clash_count}")
        lines.append("")
        for n, clash in enumerate(self.clashes, start=1):
            a, b = clash.first, clash.second
            lines.append(
                f"[{n}] {clash.clash_type.value}: {a.element_name} (ID: {a.element_id})"
                f" <-> {b.element_name} (ID: {b.element_id})"
            )
            lines.append(f"    Intersection volume: {clash.intersection_volume:.4f}")
            lines.append(f"    Contact center: {_point(clash.contact_center.as_tuple())}")
            lines.append(
                f"    Overlap: {clash.volume_percent_of_first:.1f}% of {a.element_name}, "
                f"{clash.volume_percent_of_second:.1f}% of {b.element_name}"
            )
        return "\n".join(lines)


class ContainmentReport:
    """Result of checking candidates against one container element.

    ``results`` keeps every classified candidate, ``Outside`` included, so
    the counts and the listing come from the same list.  In category-search
    mode the listing omits ``Outside`` candidates.
    """

    def __init__(
        self,
        container: BoundingBox,
        mode: ContainmentMode,
        results: list[ContainmentResult] | None = None,
        missing: list[str] | None = None,
        analyzed_at: datetime | None = None,
    ) -> None:
        self.container = container
        self.mode = mode
        self.results = results or []
        self.missing = missing or []
        self.analyzed_at = analyzed_at or datetime.now(timezone.utc)

    @property
    def reported(self) -> list[ContainmentResult]:
        if self.mode is ContainmentMode.CATEGORY_SEARCH:
            return [
                r for r in self.results if r.containment_type is not ContainmentType.OUTSIDE
            ]
        return list(self.results)

    @property
    def counts(self) -> dict[str, int]:
        tally = Counter(r.containment_type for r in self.results)
        return {
            "total_candidates": len(self.results),
            "fully_contained": tally[ContainmentType.FULLY_CONTAINED],
            "partially_contained": tally[ContainmentType.PARTIALLY_CONTAINED],
            "outside": tally[ContainmentType.OUTSIDE],
            "missing": len(self.missing),
        }

    def by_category(self) -> dict[str, list[ContainmentResult]]:
        """Group the reported results by inferred category, in first-seen order."""
        grouped: dict[str, list[ContainmentResult]] = {}
        for result in self.reported:
            grouped.setdefault(result.category, []).append(result)
        return grouped

    def to_dict(self) -> dict[str, Any]:
        return {
            "analyzed_at": self.analyzed_at.isoformat(),
            "mode": self.mode.value,
            "container": _box_dict(self.container),
            "counts": self.counts,
            "results": [
                {
                    "element_id": r.element_id,
                    "element_name": r.element_name,
                    "category": r.category,
                    "containment_type": r.containment_type.value,
                    "bounding_box": _box_dict(r.bounding_box),
                }
                for r in self.reported
            ],
            "missing": self.missing,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2, ensure_ascii=False)

    def to_text(self) -> str:
        """Render the human-readable report returned by the containment tools."""
        counts = self.counts
        lines: list[str] = []

        lines.append("=== SPATIAL CONTAINMENT ===")
        lines.append(
            f"Container: {self.container.element_name} (ID: {self.container.element_id})"
        )
        lines.append(f"  BBox: {self.container.describe()}")
        lines.append("")

        lines.append("=== RESULTS ===")
        lines.append(f"Candidates checked: {counts['total_candidates']}")
        lines.append(
            f"  {CONTAINMENT_MARKS[ContainmentType.FULLY_CONTAINED]} Fully contained: "
            f"{counts['fully_contained']}"
        )
        lines.append(
            f"  {CONTAINMENT_MARKS[ContainmentType.PARTIALLY_CONTAINED]} Partially contained: "
            f"{counts['partially_contained']}"
        )
        lines.append(
            f"  {CONTAINMENT_MARKS[ContainmentType.OUTSIDE]} Outside: {counts['outside']}"
        )
        lines.append("")

        grouped = self.by_category()
        if not grouped:
            lines.append("No contained elements.")
        for category, items in grouped.items():
            lines.append(f"{category} ({len(items)}):")
            for item in items:
                mark = CONTAINMENT_MARKS[item.containment_type]
                lines.append(
                    f"  {mark} [{item.containment_type.value}] {item.element_name} "
                    f"(ID: {item.element_id})"
                )
                lines.append(f"      BBox: {item.bounding_box.describe()}")
            lines.append("")

        if self.missing:
            lines.append("=== MISSING ===")
            lines.append("No geometry could be resolved for:")
            for element_id in self.missing:
                lines.append(f"  - {element_id}")

        lines.append(
            "Note: categories are inferred from element names and may not match "
            "the model's category properties."
        )
        return "\n".join(lines).rstrip()
