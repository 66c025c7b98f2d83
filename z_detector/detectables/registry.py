"""The built-in detector rule set."""

from __future__ import annotations

from z_detector.detectables.base import DetectableEnvironment
from z_detector.detectables.go_mod import GoModCliDetectable, GoModCliExtractor, GoModGraphParser
from z_detector.executable import ExecutableResolver, ExecutableRunner
from z_detector.models.detector import DetectorType
from z_detector.rules import DetectorRule, DetectorRuleSet


def create_default_rule_set(
    runner: ExecutableRunner | None = None,
    resolver: ExecutableResolver | None = None,
) -> DetectorRuleSet:
    """Rule set with every built-in detector, in evaluation order."""
    runner = runner or ExecutableRunner()
    resolver = resolver or ExecutableResolver()
    go_extractor = GoModCliExtractor(runner, GoModGraphParser())

    def go_mod_cli(environment: DetectableEnvironment) -> GoModCliDetectable:
        return GoModCliDetectable(environment, resolver, go_extractor)

    return DetectorRuleSet(
        [
            DetectorRule(
                detector_type=DetectorType.GO_MOD,
                name="Go Mod Cli",
                factory=go_mod_cli,
            ),
        ]
    )
