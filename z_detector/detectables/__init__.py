"""Detectables: per-ecosystem applicability checks and extractors."""

from z_detector.detectables.base import Detectable, DetectableEnvironment
from z_detector.detectables.registry import create_default_rule_set

__all__ = ["Detectable", "DetectableEnvironment", "create_default_rule_set"]
