"""Normalize raw mesh geometry into one bounding box per element.

An element may contribute several disjoint meshes; every vertex of every
valid mesh feeds a single combined box.  Invalid input is filtered here so
the clash and containment math only ever sees well-formed boxes.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Sequence
from typing import Any

from aecdm.config import BOX_EXPANSION, MIN_BOX_EXTENT, MIN_MESH_VERTICES
from aecdm.errors import GeometryUnavailable
from aecdm.models.element import BoundingBox, ElementGeometry, Vertex

logger = logging.getLogger(__name__)


def coerce_mesh(raw_mesh: Iterable[Any]) -> list[Vertex] | None:
    """Return the mesh as typed vertices, or *None* if it is unusable.

    A single malformed vertex discards the whole mesh, as does a mesh with
    fewer than ``MIN_MESH_VERTICES`` vertices.
    """
    try:
        vertices = [Vertex.coerce(v) for v in raw_mesh]
    except (TypeError, ValueError) as exc:
        logger.debug("Discarding mesh with malformed vertex: %s", exc)
        return None

    if len(vertices) < MIN_MESH_VERTICES:
        logger.debug("Discarding mesh with %d vertices", len(vertices))
        return None
    return vertices


def _expand(lo: float, hi: float) -> tuple[float, float]:
    """Pad a degenerate extent so the box keeps a non-zero volume."""
    if hi - lo >= MIN_BOX_EXTENT:
        return lo, hi
    lo, hi = lo - BOX_EXPANSION, hi + BOX_EXPANSION
    # Rounding far from the origin can leave the padded extent a hair short.
    while hi - lo < MIN_BOX_EXTENT:
        hi = math.nextafter(hi, math.inf)
    return lo, hi


def bounding_box_from_meshes(
    element_id: str,
    meshes: Sequence[Iterable[Any]],
    element_name: str | None = None,
) -> BoundingBox:
    """Fold every vertex of every valid mesh into one bounding box.

    Parameters
    ----------
    element_id:
        External identifier of the element.
    meshes:
        One iterable of raw vertex values per mesh.
    element_name:
        Display label; defaults to ``Element_<id>``.

    Raises
    ------
    GeometryUnavailable
        If no mesh contributes a usable vertex.
    """
    min_x = min_y = min_z = math.inf
    max_x = max_y = max_z = -math.inf
    used_meshes = 0

    for raw_mesh in meshes:
        vertices = coerce_mesh(raw_mesh)
        if vertices is None:
            continue
        used_meshes += 1
        for v in vertices:
            min_x = min(min_x, v.x)
            min_y = min(min_y, v.y)
            min_z = min(min_z, v.z)
            max_x = max(max_x, v.x)
            max_y = max(max_y, v.y)
            max_z = max(max_z, v.z)

    if used_meshes == 0 or min_x == math.inf:
        raise GeometryUnavailable(element_id)

    min_x, max_x = _expand(min_x, max_x)
    min_y, max_y = _expand(min_y, max_y)
    min_z, max_z = _expand(min_z, max_z)

    logger.debug(
        "Element %s: %d of %d meshes used", element_id, used_meshes, len(meshes)
    )
    return BoundingBox(
        element_id=element_id,
        element_name=element_name or "",
        min_x=min_x,
        min_y=min_y,
        min_z=min_z,
        max_x=max_x,
        max_y=max_y,
        max_z=max_z,
    )


def bounding_box_for(element: ElementGeometry) -> BoundingBox:
    """Shortcut for :func:`bounding_box_from_meshes` on an ElementGeometry."""
    return bounding_box_from_meshes(element.id, element.meshes, element.name)


def mesh_summary(element: ElementGeometry) -> dict[str, Any]:
    """Count total and usable meshes and vertices for reporting."""
    usable = [m for m in (coerce_mesh(raw) for raw in element.meshes) if m is not None]
    return {
        "element_id": element.id,
        "element_name": element.display_name,
        "mesh_count": len(element.meshes),
        "usable_mesh_count": len(usable),
        "vertex_count": sum(len(m) for m in usable),
    }
