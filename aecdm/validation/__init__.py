"""Spatial analysis suite — clash detection and containment.

Pairwise bounding box analysis over elements fetched from the AEC Data
Model or any other geometry source.
"""

from aecdm.validation.analysis import compute_clashes, compute_containment
from aecdm.validation.clash import ClashDetector, detect_clash
from aecdm.validation.containment import classify, infer_category
from aecdm.validation.report import ClashReport, ContainmentMode, ContainmentReport

__all__ = [
    "ClashDetector",
    "ClashReport",
    "ContainmentMode",
    "ContainmentReport",
    "classify",
    "compute_clashes",
    "compute_containment",
    "detect_clash",
    "infer_category",
]
