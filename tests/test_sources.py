"""Tests for geometry sources and concurrent retrieval."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path

import pytest

from aecdm.client.sources import (
    FolderGeometrySource,
    GeometrySource,
    InMemoryGeometrySource,
    fetch_elements,
)
from aecdm.errors import GeometryUnavailable
from aecdm.models.element import ElementGeometry

_TRIANGLE = [[0, 0, 0], [1, 0, 0], [0, 1, 0]]


def _write_element(root: Path, element_id: str, **data) -> Path:
    path = root / f"{element_id}.json"
    path.write_text(json.dumps({"id": element_id, **data}), encoding="utf-8")
    return path


class TestInMemorySource:

    def test_fetch(self):
        source = InMemoryGeometrySource({"A": ElementGeometry(id="A", meshes=[_TRIANGLE])})
        assert source.fetch("A").id == "A"

    def test_unknown_id(self):
        with pytest.raises(GeometryUnavailable):
            InMemoryGeometrySource().fetch("nope")

    def test_add(self):
        source = InMemoryGeometrySource()
        source.add(ElementGeometry(id="B"))
        assert source.fetch("B").meshes == []


class TestFolderSource:

    def test_reads_meshes(self, tmp_path: Path):
        _write_element(tmp_path, "W1", name="Basic Wall", meshes=[_TRIANGLE])
        element = FolderGeometrySource(tmp_path).fetch("W1")
        assert element.name == "Basic Wall"
        assert element.meshes == [_TRIANGLE]

    def test_object_vertices(self, tmp_path: Path):
        mesh = [{"x": 0, "y": 0, "z": 0}, {"x": 1, "y": 0, "z": 0}, {"x": 0, "y": 1, "z": 0}]
        _write_element(tmp_path, "W2", meshes=[mesh])
        element = FolderGeometrySource(tmp_path).fetch("W2")
        assert element.meshes[0][1] == {"x": 1, "y": 0, "z": 0}
        assert element.name is None

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(GeometryUnavailable, match="not found"):
            FolderGeometrySource(tmp_path).fetch("X")

    def test_corrupt_file(self, tmp_path: Path):
        (tmp_path / "BAD.json").write_text("{not json", encoding="utf-8")
        with pytest.raises(GeometryUnavailable, match="unreadable"):
            FolderGeometrySource(tmp_path).fetch("BAD")

    def test_ids_are_sanitized(self, tmp_path: Path):
        (tmp_path / "a_b.json").write_text(json.dumps({"meshes": []}), encoding="utf-8")
        element = FolderGeometrySource(tmp_path).fetch("a/b")
        assert element.id == "a/b"


class _FlakySource(GeometrySource):
    """Raises an unexpected error for one id."""

    def fetch(self, element_id: str) -> ElementGeometry:
        if element_id == "boom":
            raise RuntimeError("connection reset")
        if element_id == "gone":
            raise GeometryUnavailable(element_id, "not found")
        return ElementGeometry(id=element_id, meshes=[_TRIANGLE])


class TestFetchElements:

    def test_preserves_order_and_collects_missing(self):
        found, missing = asyncio.run(
            fetch_elements(_FlakySource(), ["a", "boom", "b", "gone", "c"])
        )
        assert [e.id for e in found] == ["a", "b", "c"]
        assert missing == ["boom", "gone"]

    def test_empty(self):
        found, missing = asyncio.run(fetch_elements(_FlakySource(), []))
        assert found == []
        assert missing == []
