"""Data models: detector identities, evaluation records, dependency graphs."""

from z_detector.models.detector import DetectorStatus, DetectorType, NameVersion, StatusType
from z_detector.models.evaluation import (
    DetectableResult,
    DetectorEvaluation,
    EvaluationState,
    Extraction,
    ExtractionResultType,
)
from z_detector.models.graph import (
    CodeLocation,
    DependencyComponent,
    DependencyGraph,
    MutableDependencyGraph,
)

__all__ = [
    "CodeLocation",
    "DependencyComponent",
    "DependencyGraph",
    "DetectableResult",
    "DetectorEvaluation",
    "DetectorStatus",
    "DetectorType",
    "EvaluationState",
    "Extraction",
    "ExtractionResultType",
    "MutableDependencyGraph",
    "NameVersion",
    "StatusType",
]
