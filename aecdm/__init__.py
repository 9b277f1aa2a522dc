"""AECDM MCP — spatial analysis tools for the Autodesk AEC Data Model."""

__version__ = "1.0.0"

from aecdm.errors import (
    AecdmError,
    ComputationError,
    GeometryUnavailable,
    MissingContainer,
    ValidationError,
)
from aecdm.extraction.geometry import bounding_box_from_meshes
from aecdm.models.element import (
    BoundingBox,
    ClashResult,
    ClashType,
    ContainmentResult,
    ContainmentType,
    ElementGeometry,
    Vertex,
)
from aecdm.validation.analysis import ContainmentMode, compute_clashes, compute_containment
from aecdm.validation.clash import detect_clash
from aecdm.validation.containment import classify, infer_category
from aecdm.validation.report import ClashReport, ContainmentReport

__all__ = [
    "__version__",
    # Models
    "BoundingBox",
    "ClashResult",
    "ClashType",
    "ContainmentResult",
    "ContainmentType",
    "ElementGeometry",
    "Vertex",
    # Errors
    "AecdmError",
    "ComputationError",
    "GeometryUnavailable",
    "MissingContainer",
    "ValidationError",
    # Analysis
    "ClashReport",
    "ContainmentMode",
    "ContainmentReport",
    "bounding_box_from_meshes",
    "classify",
    "compute_clashes",
    "compute_containment",
    "detect_clash",
    "infer_category",
]
