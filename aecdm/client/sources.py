"""Geometry sources — resolve element ids to raw mesh geometry.

A source is any blocking lookup from element id to
:class:`~aecdm.models.element.ElementGeometry`.  :func:`fetch_elements`
fans the lookups out concurrently and joins them before analysis starts.
"""

from __future__ import annotations

import abc
import asyncio
import json
import logging
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from aecdm.errors import GeometryUnavailable
from aecdm.models.element import ElementGeometry

logger = logging.getLogger(__name__)


class GeometrySource(abc.ABC):
    """Base class for element geometry lookups."""

    @abc.abstractmethod
    def fetch(self, element_id: str) -> ElementGeometry:
        """Return the geometry of *element_id*.

        Raises :class:`GeometryUnavailable` if the source has none.
        """


class InMemoryGeometrySource(GeometrySource):
    """Serve geometry from a dict keyed by element id."""

    def __init__(self, elements: dict[str, ElementGeometry] | None = None) -> None:
        self.elements = dict(elements or {})

    def add(self, element: ElementGeometry) -> None:
        self.elements[element.id] = element

    def fetch(self, element_id: str) -> ElementGeometry:
        try:
            return self.elements[element_id]
        except KeyError:
            raise GeometryUnavailable(element_id, "not found") from None


class FolderGeometrySource(GeometrySource):
    """Read ``<root>/<element_id>.json`` mesh files.

    Each file holds ``{"id", "name", "meshes"}`` where ``meshes`` is a list
    of vertex lists; a vertex is ``[x, y, z]`` or ``{"x", "y", "z"}``.
    """

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)

    def _path_for(self, element_id: str) -> Path:
        safe = "".join(c if c.isalnum() or c in "-_." else "_" for c in element_id)
        return self.root / f"{safe}.json"

    def fetch(self, element_id: str) -> ElementGeometry:
        path = self._path_for(element_id)
        if not path.is_file():
            raise GeometryUnavailable(element_id, "not found")
        try:
            data: dict[str, Any] = json.loads(path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as exc:
            raise GeometryUnavailable(element_id, f"unreadable geometry file: {exc}") from exc

        return ElementGeometry(
            id=element_id,
            name=data.get("name"),
            meshes=data.get("meshes") or [],
        )


async def fetch_elements(
    source: GeometrySource,
    element_ids: Sequence[str],
) -> tuple[list[ElementGeometry], list[str]]:
    """Fetch every id concurrently and join.

    Returns the resolved elements in input order, plus the ids that could
    not be resolved.  One failed lookup never aborts the others.
    """

    async def _one(element_id: str) -> ElementGeometry | None:
        try:
            return await asyncio.to_thread(source.fetch, element_id)
        except GeometryUnavailable as exc:
            logger.warning("No geometry for %s: %s", element_id, exc.reason)
        except Exception:
            logger.warning("Geometry retrieval failed for %s", element_id, exc_info=True)
        return None

    results = await asyncio.gather(*(_one(eid) for eid in element_ids))

    found: list[ElementGeometry] = []
    missing: list[str] = []
    for element_id, element in zip(element_ids, results):
        if element is None:
            missing.append(element_id)
        else:
            found.append(element)
    return found, missing
