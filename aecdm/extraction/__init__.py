"""Geometry extraction — raw meshes to bounding boxes."""

from aecdm.extraction.geometry import bounding_box_for, bounding_box_from_meshes

__all__ = ["bounding_box_for", "bounding_box_from_meshes"]
