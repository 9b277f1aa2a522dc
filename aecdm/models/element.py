"""Value objects for element geometry and spatial relationships.

Every model here is frozen: a box or result is created once by an analysis
run and never mutated afterwards.
"""

from __future__ import annotations

import math
from collections.abc import Mapping, Sequence
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator


class Vertex(BaseModel):
    """A single mesh vertex in model units."""

    model_config = ConfigDict(frozen=True)

    x: float
    y: float
    z: float

    @classmethod
    def coerce(cls, raw: Any) -> Vertex:
        """Build a Vertex from a loosely typed source value.

        Accepts an existing Vertex, a 3-item sequence, or a mapping with
        ``x``/``y``/``z`` keys (either case).  Raises ``ValueError`` or
        ``TypeError`` when the value cannot be read as three finite floats.
        """
        if isinstance(raw, Vertex):
            return raw
        if isinstance(raw, Mapping):
            coords = [_lookup(raw, axis) for axis in ("x", "y", "z")]
        elif isinstance(raw, Sequence) and not isinstance(raw, (str, bytes)):
            if len(raw) != 3:
                raise ValueError(f"Expected 3 coordinates, got {len(raw)}")
            coords = list(raw)
        else:
            raise TypeError(f"Cannot read a vertex from {type(raw).__name__}")

        values = [float(c) for c in coords]
        if not all(math.isfinite(v) for v in values):
            raise ValueError(f"Non-finite vertex coordinate in {values}")
        return cls(x=values[0], y=values[1], z=values[2])

    def as_tuple(self) -> tuple[float, float, float]:
        return (self.x, self.y, self.z)


def _lookup(raw: Mapping[str, Any], axis: str) -> Any:
    if axis in raw:
        return raw[axis]
    if axis.upper() in raw:
        return raw[axis.upper()]
    raise ValueError(f"Vertex is missing the {axis} coordinate")


class ElementGeometry(BaseModel):
    """Raw per-element input handed over by a geometry source.

    ``meshes`` holds one list of vertex values per mesh.  Vertices stay
    loosely typed here; they are coerced to :class:`Vertex` by the
    geometry normalizer so a single bad value only discards its mesh.
    """

    id: str
    name: str | None = None
    meshes: list[list[Any]] = Field(default_factory=list)

    @property
    def display_name(self) -> str:
        return self.name or f"Element_{self.id}"


class BoundingBox(BaseModel):
    """Axis-aligned bounding box of one element."""

    model_config = ConfigDict(frozen=True)

    element_id: str
    element_name: str = ""
    min_x: float
    min_y: float
    min_z: float
    max_x: float
    max_y: float
    max_z: float

    @model_validator(mode="before")
    @classmethod
    def _default_name(cls, data: Any) -> Any:
        if isinstance(data, dict) and not data.get("element_name"):
            data = dict(data)
            data["element_name"] = f"Element_{data.get('element_id', '')}"
        return data

    @computed_field  # type: ignore[prop-decorator]
    @property
    def volume(self) -> float:
        return (
            abs(self.max_x - self.min_x)
            * abs(self.max_y - self.min_y)
            * abs(self.max_z - self.min_z)
        )

    @property
    def center(self) -> Vertex:
        return Vertex(
            x=(self.min_x + self.max_x) / 2,
            y=(self.min_y + self.max_y) / 2,
            z=(self.min_z + self.max_z) / 2,
        )

    @property
    def mins(self) -> tuple[float, float, float]:
        return (self.min_x, self.min_y, self.min_z)

    @property
    def maxs(self) -> tuple[float, float, float]:
        return (self.max_x, self.max_y, self.max_z)

    def describe(self) -> str:
        """One-line ``(min) -> (max) | Volume`` summary."""
        return (
            f"({self.min_x:.2f}, {self.min_y:.2f}, {self.min_z:.2f}) -> "
            f"({self.max_x:.2f}, {self.max_y:.2f}, {self.max_z:.2f}) | "
            f"Volume: {self.volume:.3f}"
        )


class ClashType(str, Enum):
    """Severity of an overlap between two boxes."""

    MINOR_OVERLAP = "MinorOverlap"
    MAJOR_INTERSECTION = "MajorIntersection"


class ContainmentType(str, Enum):
    """How much of a candidate box lies inside a container box."""

    OUTSIDE = "Outside"
    PARTIALLY_CONTAINED = "PartiallyContained"
    FULLY_CONTAINED = "FullyContained"


class ClashResult(BaseModel):
    """Overlap between an unordered pair of boxes."""

    model_config = ConfigDict(frozen=True)

    first: BoundingBox
    second: BoundingBox
    clash_type: ClashType
    intersection_volume: float
    contact_center: Vertex
    volume_percent_of_first: float
    volume_percent_of_second: float


class ContainmentResult(BaseModel):
    """Relationship of one candidate element to a container."""

    model_config = ConfigDict(frozen=True)

    element_id: str
    element_name: str
    category: str
    containment_type: ContainmentType
    bounding_box: BoundingBox
