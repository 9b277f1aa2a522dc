"""Tests for the IFC geometry source.

Builds a synthetic IFC in memory with ifcopenshell's API, as the element
extraction tests do.
"""

from __future__ import annotations

import pytest

ifcopenshell = pytest.importorskip("ifcopenshell")
import ifcopenshell.api  # noqa: E402

from aecdm.errors import GeometryUnavailable  # noqa: E402
from aecdm.extraction.ifc import IfcGeometrySource, mesh_from_verts  # noqa: E402


def _build_ifc() -> tuple[ifcopenshell.file, str]:
    """Return an IFC4 file holding a single wall without a representation."""
    f = ifcopenshell.file(schema="IFC4")
    ifcopenshell.api.run("root.create_entity", f, ifc_class="IfcProject", name="Synthetic")
    wall = ifcopenshell.api.run("root.create_entity", f, ifc_class="IfcWall", name="Bare Wall")
    return f, wall.GlobalId


class TestMeshFromVerts:

    def test_splits_triples(self):
        assert mesh_from_verts((0, 1, 2, 3, 4, 5)) == [[0, 1, 2], [3, 4, 5]]

    def test_drops_trailing_partial_vertex(self):
        assert mesh_from_verts([0, 1, 2, 3]) == [[0, 1, 2]]

    def test_empty(self):
        assert mesh_from_verts([]) == []


class TestIfcGeometrySource:

    def test_element_ids(self):
        f, wall_id = _build_ifc()
        assert IfcGeometrySource(f).element_ids() == [wall_id]

    def test_element_without_representation(self):
        f, wall_id = _build_ifc()
        with pytest.raises(GeometryUnavailable, match="no representation"):
            IfcGeometrySource(f).fetch(wall_id)

    def test_unknown_guid(self):
        f, _ = _build_ifc()
        with pytest.raises(GeometryUnavailable, match="not found"):
            IfcGeometrySource(f).fetch("0000000000000000000000")

    def test_opens_path(self, tmp_path):
        f, wall_id = _build_ifc()
        path = tmp_path / "model.ifc"
        f.write(str(path))
        assert IfcGeometrySource(path).element_ids() == [wall_id]
