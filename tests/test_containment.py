"""Tests for containment classification and category inference."""

from __future__ import annotations

import pytest

from aecdm.models.element import BoundingBox, ContainmentType
from aecdm.validation import containment as containment_module
from aecdm.validation.containment import classify, classify_result, infer_category


def _box(
    eid: str,
    lo: tuple[float, float, float],
    hi: tuple[float, float, float],
    name: str | None = None,
) -> BoundingBox:
    return BoundingBox(
        element_id=eid,
        element_name=name or "",
        min_x=lo[0], min_y=lo[1], min_z=lo[2],
        max_x=hi[0], max_y=hi[1], max_z=hi[2],
    )


ROOM = _box("ROOM", (0, 0, 0), (10, 10, 10), "Room 101")


# ---------------------------------------------------------------------------
# classify
# ---------------------------------------------------------------------------

class TestClassify:

    def test_fully_contained(self):
        assert classify(ROOM, _box("c", (1, 1, 1), (2, 2, 2))) is ContainmentType.FULLY_CONTAINED

    def test_partially_contained(self):
        candidate = _box("c", (9, 9, 9), (12, 12, 12))
        assert classify(ROOM, candidate) is ContainmentType.PARTIALLY_CONTAINED

    def test_outside(self):
        assert classify(ROOM, _box("c", (20, 20, 20), (21, 21, 21))) is ContainmentType.OUTSIDE

    def test_tolerance_padding_keeps_full_containment(self):
        proud = _box("c", (-0.005, 1, 1), (10.005, 2, 2))
        assert classify(ROOM, proud) is ContainmentType.FULLY_CONTAINED

    def test_beyond_tolerance_is_partial(self):
        proud = _box("c", (-0.5, 1, 1), (5, 2, 2))
        assert classify(ROOM, proud) is ContainmentType.PARTIALLY_CONTAINED

    def test_same_box_is_fully_contained(self):
        assert classify(ROOM, ROOM) is ContainmentType.FULLY_CONTAINED

    def test_face_touching_is_outside(self):
        neighbour = _box("c", (10, 0, 0), (12, 10, 10))
        assert classify(ROOM, neighbour) is ContainmentType.OUTSIDE

    def test_sliver_below_one_percent_is_outside(self):
        # 0.05 of a 20.05 long beam lies inside: about 0.25 %
        beam = _box("c", (9.95, 1, 1), (30, 2, 2))
        assert classify(ROOM, beam) is ContainmentType.OUTSIDE

    def test_container_inside_candidate_is_partial(self):
        # The candidate encloses the room; the room is 1000/1331 of it
        shell = _box("c", (-0.5, -0.5, -0.5), (10.5, 10.5, 10.5))
        assert classify(ROOM, shell) is ContainmentType.PARTIALLY_CONTAINED

    def test_no_overlap_is_always_outside(self):
        for offset in (10.5, 50, -15):
            far = _box("c", (offset, offset, offset), (offset + 1, offset + 1, offset + 1))
            assert classify(ROOM, far) is ContainmentType.OUTSIDE


# ---------------------------------------------------------------------------
# classify_result
# ---------------------------------------------------------------------------

class TestClassifyResult:

    def test_carries_category_and_box(self):
        door = _box("D1", (1, 1, 0), (2, 1.2, 2.1), "Single-Flush Door 900")
        result = classify_result(ROOM, door)
        assert result.element_id == "D1"
        assert result.element_name == "Single-Flush Door 900"
        assert result.category == "Doors"
        assert result.containment_type is ContainmentType.FULLY_CONTAINED
        assert result.bounding_box == door

    def test_failure_reported_as_outside(self, monkeypatch):
        def broken(container, candidate):
            raise ZeroDivisionError("bad box")

        monkeypatch.setattr(containment_module, "classify", broken)
        result = classify_result(ROOM, _box("c", (1, 1, 1), (2, 2, 2)))
        assert result.containment_type is ContainmentType.OUTSIDE


# ---------------------------------------------------------------------------
# infer_category
# ---------------------------------------------------------------------------

class TestInferCategory:

    @pytest.mark.parametrize("name, expected", [
        ("Basic Wall: Generic - 200mm", "Walls"),
        ("DOOR-01", "Doors"),
        ("Fixed Window 1200x900", "Windows"),
        ("Floor: Concrete 150", "Floors"),
        ("Compound Ceiling", "Ceilings"),
        ("Basic Roof", "Roofs"),
        ("Office Furniture Desk", "Furniture"),
        ("Electrical Panel", "Electrical Equipment"),
        ("Structural Framing W12x26", "Structural Framing"),
        ("structural column 300x300", "Structural Columns"),
        ("Rebar Bar 12M", "Structural Rebar"),
        ("Chair", "Unknown Category"),
        ("Structural Foundation", "Unknown Category"),
        ("", "Unknown Category"),
        (None, "Unknown Category"),
    ])
    def test_keywords(self, name, expected):
        assert infer_category(name) == expected

    def test_first_match_wins(self):
        assert infer_category("Door in Curtain Wall") == "Walls"
        assert infer_category("Floor Window") == "Windows"
