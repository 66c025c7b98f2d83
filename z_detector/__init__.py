"""Z-Detector: package-manager detection and dependency graph extraction."""

from z_detector.aggregator import DetectorToolResult
from z_detector.detectables import create_default_rule_set
from z_detector.finder import DetectorFinderOptions
from z_detector.tool import DetectorTool

__version__ = "0.1.0"

__all__ = [
    "DetectorFinderOptions",
    "DetectorTool",
    "DetectorToolResult",
    "create_default_rule_set",
]
