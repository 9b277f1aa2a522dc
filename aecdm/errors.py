"""Exception types raised by the analysis core and its collaborators."""

from __future__ import annotations


class AecdmError(Exception):
    """Base class for all AECDM errors."""


class GeometryUnavailable(AecdmError):
    """Raised when an element has no usable mesh vertices."""

    def __init__(self, element_id: str, reason: str = "no usable mesh vertices") -> None:
        super().__init__(f"Geometry unavailable for {element_id}: {reason}")
        self.element_id = element_id
        self.reason = reason


class ValidationError(AecdmError):
    """Raised when a request is malformed and must be rejected as a whole."""


class ComputationError(AecdmError):
    """Raised when a single box, clash, or containment computation fails."""


class MissingContainer(AecdmError):
    """Raised when the container element resolves to no geometry."""

    def __init__(self, element_id: str) -> None:
        super().__init__(
            f"Container element {element_id} has no geometry to analyze against"
        )
        self.element_id = element_id
