"""IFC geometry source — triangulated element meshes via ifcopenshell.

Each building element with a body representation becomes one mesh in world
coordinates, keyed by its GlobalId.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import ifcopenshell
import ifcopenshell.geom

from aecdm.client.sources import GeometrySource
from aecdm.errors import GeometryUnavailable
from aecdm.models.element import ElementGeometry

logger = logging.getLogger(__name__)

# Base class covering IfcWall, IfcDoor, IfcSlab, etc.
ELEMENT_BASE_CLASS = "IfcBuildingElement"


def _settings() -> Any:
    """Return ifcopenshell geometry settings."""
    settings = ifcopenshell.geom.settings()
    settings.set("use-world-coords", True)
    return settings


def mesh_from_verts(verts: Any) -> list[list[float]]:
    """Split a flat ``x0, y0, z0, x1, ...`` buffer into vertex triples."""
    flat = list(verts)
    return [flat[i:i + 3] for i in range(0, len(flat) - len(flat) % 3, 3)]


class IfcGeometrySource(GeometrySource):
    """Serve element geometry from an IFC2x3 or IFC4 file.

    Parameters
    ----------
    ifc:
        Path to an IFC file, or an already opened ``ifcopenshell.file``.
    """

    def __init__(self, ifc: str | Path | ifcopenshell.file) -> None:
        if isinstance(ifc, ifcopenshell.file):
            self.ifc_file = ifc
        else:
            logger.info("Opening %s", ifc)
            self.ifc_file = ifcopenshell.open(str(ifc))

    def element_ids(self) -> list[str]:
        """GlobalIds of every building element in the file."""
        return [e.GlobalId for e in self.ifc_file.by_type(ELEMENT_BASE_CLASS)]

    def fetch(self, element_id: str) -> ElementGeometry:
        try:
            element = self.ifc_file.by_guid(element_id)
        except (RuntimeError, KeyError):
            raise GeometryUnavailable(element_id, "not found") from None

        if element.Representation is None:
            raise GeometryUnavailable(element_id, "no representation")

        try:
            shape = ifcopenshell.geom.create_shape(_settings(), element)
        except Exception as exc:
            logger.debug("Geometry creation failed for %s", element_id, exc_info=True)
            raise GeometryUnavailable(element_id, f"tessellation failed: {exc}") from exc

        return ElementGeometry(
            id=element_id,
            name=element.Name,
            meshes=[mesh_from_verts(shape.geometry.verts)],
        )
