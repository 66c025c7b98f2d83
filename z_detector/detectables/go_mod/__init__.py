"""Go modules via the go command line (``go list`` / ``go mod graph``)."""

from z_detector.detectables.go_mod.detectable import GoModCliDetectable
from z_detector.detectables.go_mod.extractor import GoModCliExtractor, parse_go_version
from z_detector.detectables.go_mod.graph_parser import GoModGraphParser, parse_module_token
from z_detector.detectables.go_mod.replacements import apply_replacements, extract_replacements

__all__ = [
    "GoModCliDetectable",
    "GoModCliExtractor",
    "GoModGraphParser",
    "apply_replacements",
    "extract_replacements",
    "parse_go_version",
    "parse_module_token",
]
