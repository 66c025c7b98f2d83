"""Tests for DetectorRuleSet and the search policy."""

from __future__ import annotations

from pathlib import Path

import pytest

from z_detector.detectables.registry import create_default_rule_set
from z_detector.models.detector import DetectorType
from z_detector.models.evaluation import DetectableResult, DetectorEvaluation
from z_detector.rules import DetectorRuleSet, evaluate_searchable


def _applied(rule) -> DetectorEvaluation:
    evaluation = DetectorEvaluation(rule, Path("/src"), 0)
    evaluation.record_searchable(DetectableResult.ok())
    evaluation.record_applicable(DetectableResult.ok())
    return evaluation


class TestDetectorRuleSet:
    def test_register_and_get(self, make_rule):
        rule = make_rule("Npm Cli", "package.json")
        rule_set = DetectorRuleSet([rule])
        assert rule_set.get("Npm Cli") is rule
        assert rule_set.get("nonexistent") is None
        assert rule in rule_set
        assert len(rule_set) == 1

    def test_duplicate_name_rejected(self, make_rule):
        rule_set = DetectorRuleSet([make_rule("Npm Cli", "package.json")])
        with pytest.raises(ValueError, match="already registered"):
            rule_set.register(make_rule("Npm Cli", "package-lock.json"))

    def test_order_preserved(self, make_rule):
        rules = [make_rule(name, "x") for name in ("c", "a", "b")]
        assert DetectorRuleSet(rules).ordered_rules() == rules

    def test_find_by_type(self, make_rule):
        npm = make_rule("Npm", "package.json")
        pip = make_rule("Pip", "setup.py", detector_type=DetectorType.PIP)
        rule_set = DetectorRuleSet([npm, pip])
        assert rule_set.find_by_type(DetectorType.PIP) == [pip]
        assert rule_set.find_by_type(DetectorType.CARGO) == []

    def test_descriptive_name(self, make_rule):
        assert make_rule("Go Mod Cli", "go.mod", DetectorType.GO_MOD).descriptive_name == (
            "GO_MOD - Go Mod Cli"
        )

    def test_default_rule_set(self):
        rule_set = create_default_rule_set()
        assert [r.descriptive_name for r in rule_set] == ["GO_MOD - Go Mod Cli"]


class TestEvaluateSearchable:
    def test_passes_without_constraints(self, make_rule):
        result = evaluate_searchable(make_rule("a", "x"), 3, [], [])
        assert result.passed
        assert result.description == "Search passed."

    def test_max_depth(self, make_rule):
        rule = make_rule("a", "x", max_depth=1)
        assert evaluate_searchable(rule, 1, [], []).passed
        result = evaluate_searchable(rule, 2, [], [])
        assert not result.passed
        assert result.description == "Maximum search depth 1 exceeded (depth 2)."

    def test_yields_to_type_applied_here(self, make_rule):
        yarn = make_rule("Yarn", "yarn.lock", DetectorType.YARN)
        npm = make_rule("Npm", "package.json", yields_to=frozenset({DetectorType.YARN}))
        result = evaluate_searchable(npm, 0, [_applied(yarn)], [])
        assert not result.passed
        assert result.description == "Yielded to detector YARN - Yarn."

    def test_yield_ignores_other_types(self, make_rule):
        pip = make_rule("Pip", "setup.py", DetectorType.PIP)
        npm = make_rule("Npm", "package.json", yields_to=frozenset({DetectorType.YARN}))
        assert evaluate_searchable(npm, 0, [_applied(pip)], []).passed

    def test_not_nestable(self, make_rule):
        parent = make_rule("Maven", "pom.xml", DetectorType.MAVEN)
        rule = make_rule("Gradle", "build.gradle", DetectorType.GRADLE, nestable=False)
        result = evaluate_searchable(rule, 1, [], [_applied(parent)])
        assert not result.passed
        assert "Not nestable" in result.description
        assert "MAVEN - Maven" in result.description

    def test_nestable_by_default(self, make_rule):
        parent = make_rule("Maven", "pom.xml", DetectorType.MAVEN)
        rule = make_rule("Gradle", "build.gradle", DetectorType.GRADLE)
        assert evaluate_searchable(rule, 1, [], [_applied(parent)]).passed

    def test_yields_to_nested_rule_applied_here(self, make_rule):
        inner = make_rule("Inner", "inner.txt")
        outer = make_rule("Outer", "outer.txt", nested=DetectorRuleSet([inner]))
        result = evaluate_searchable(outer, 1, [_applied(inner)], [])
        assert not result.passed
        assert result.description == "Yielded to nested detector NPM - Inner."
