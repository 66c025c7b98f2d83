"""Tests for status derivation, code location conversion and result aggregation."""

from __future__ import annotations

from pathlib import Path

from z_detector.aggregator import (
    DefaultCodeLocationConverter,
    NameVersionDecider,
    ResultAggregator,
    extract_status,
)
from z_detector.models.detector import DetectorType, NameVersion, StatusType
from z_detector.models.evaluation import DetectableResult, DetectorEvaluation, Extraction
from z_detector.models.graph import CodeLocation, DependencyComponent, MutableDependencyGraph
from z_detector.tree import DetectorEvaluationTree

ROOT = Path("/src")


def _evaluation(
    rule,
    directory: Path = ROOT,
    depth: int = 0,
    applicable: bool = True,
    extractable: bool = True,
    extraction: Extraction | None = None,
) -> DetectorEvaluation:
    evaluation = DetectorEvaluation(rule, directory, depth)
    evaluation.record_searchable(DetectableResult.ok())
    evaluation.record_applicable(
        DetectableResult.ok() if applicable else DetectableResult.fail("No marker.")
    )
    if not applicable:
        return evaluation
    evaluation.record_extractable(
        DetectableResult.ok() if extractable else DetectableResult.fail("No tool.")
    )
    if extractable and extraction is not None:
        evaluation.record_extraction(extraction)
    return evaluation


def _location(name: str) -> CodeLocation:
    graph = MutableDependencyGraph()
    graph.add_root(DependencyComponent(name))
    return CodeLocation(graph=graph.build())


class TestExtractStatus:
    def test_any_success_wins(self, make_rule):
        rule = make_rule("Npm", "package.json")
        evaluations = [
            _evaluation(rule, extraction=Extraction.failure("broken")),
            _evaluation(rule, ROOT / "b", 1, extraction=Extraction.success()),
            _evaluation(rule, ROOT / "c", 1, extraction=Extraction.exception(RuntimeError())),
        ]
        assert extract_status(evaluations) == {DetectorType.NPM: StatusType.SUCCESS}

    def test_not_extractable_is_failure(self, make_rule):
        rule = make_rule("Pip", "setup.py", DetectorType.PIP)
        assert extract_status([_evaluation(rule, extractable=False)]) == {
            DetectorType.PIP: StatusType.FAILURE
        }

    def test_not_applicable_has_no_status(self, make_rule):
        rule = make_rule("Pip", "setup.py", DetectorType.PIP)
        assert extract_status([_evaluation(rule, applicable=False)]) == {}

    def test_missing_extraction_counts_as_failure(self, make_rule, caplog):
        rule = make_rule("Cargo", "Cargo.toml", DetectorType.CARGO)
        with caplog.at_level("WARNING", logger="z_detector.aggregator"):
            status = extract_status([_evaluation(rule)])
        assert status == {DetectorType.CARGO: StatusType.FAILURE}
        assert "Unknown evaluation status" in caplog.text

    def test_types_independent(self, make_rule):
        npm = make_rule("Npm", "package.json")
        pip = make_rule("Pip", "setup.py", DetectorType.PIP)
        status = extract_status(
            [
                _evaluation(npm, extraction=Extraction.success()),
                _evaluation(pip, extraction=Extraction.failure("x")),
            ]
        )
        assert status == {DetectorType.NPM: StatusType.SUCCESS, DetectorType.PIP: StatusType.FAILURE}


class TestDefaultCodeLocationConverter:
    def test_keys_and_defaults(self, make_rule):
        rule = make_rule("Go Mod Cli", "go.mod", DetectorType.GO_MOD)
        evaluation = _evaluation(
            rule,
            ROOT / "svc",
            1,
            extraction=Extraction.success([_location("a"), _location("b")]),
        )
        converted = DefaultCodeLocationConverter().to_code_locations(ROOT, evaluation)
        assert list(converted) == ["svc/GO_MOD", "svc/GO_MOD#2"]
        first = converted["svc/GO_MOD"]
        assert first.source_path == ROOT / "svc"
        assert first.detector_type is DetectorType.GO_MOD

    def test_root_directory_key(self, make_rule):
        rule = make_rule("Npm", "package.json")
        evaluation = _evaluation(rule, extraction=Extraction.success([_location("a")]))
        assert list(DefaultCodeLocationConverter().to_code_locations(ROOT, evaluation)) == ["./NPM"]

    def test_existing_source_path_kept(self, make_rule):
        rule = make_rule("Npm", "package.json")
        location = CodeLocation(graph=_location("a").graph, source_path=Path("/elsewhere"))
        evaluation = _evaluation(rule, extraction=Extraction.success([location]))
        converted = DefaultCodeLocationConverter().to_code_locations(ROOT, evaluation)
        assert converted["./NPM"].source_path == Path("/elsewhere")


class TestNameVersionDecider:
    def test_preferred_type_wins(self, make_rule):
        npm = make_rule("Npm", "package.json")
        pip = make_rule("Pip", "setup.py", DetectorType.PIP)
        evaluations = [
            _evaluation(npm, extraction=Extraction.success(project_name="web", project_version="1.0")),
            _evaluation(pip, ROOT / "py", 1, extraction=Extraction.success(project_name="tool")),
        ]
        decided = NameVersionDecider().decide(evaluations, DetectorType.PIP)
        assert decided == NameVersion("tool")

    def test_preferred_type_missing(self, make_rule):
        npm = make_rule("Npm", "package.json")
        evaluations = [_evaluation(npm, extraction=Extraction.success(project_name="web"))]
        assert NameVersionDecider().decide(evaluations, DetectorType.PIP) is None

    def test_shallowest_agreeing(self, make_rule):
        npm = make_rule("Npm", "package.json")
        evaluations = [
            _evaluation(npm, extraction=Extraction.success(project_name="web", project_version="2")),
            _evaluation(npm, ROOT / "a", 1, extraction=Extraction.success(project_name="deep")),
        ]
        assert NameVersionDecider().decide(evaluations) == NameVersion("web", "2")

    def test_conflict_at_same_depth(self, make_rule):
        npm = make_rule("Npm", "package.json")
        pip = make_rule("Pip", "setup.py", DetectorType.PIP)
        evaluations = [
            _evaluation(npm, extraction=Extraction.success(project_name="web")),
            _evaluation(pip, extraction=Extraction.success(project_name="tool")),
        ]
        assert NameVersionDecider().decide(evaluations) is None

    def test_no_names(self, make_rule):
        npm = make_rule("Npm", "package.json")
        assert NameVersionDecider().decide([_evaluation(npm, extraction=Extraction.success())]) is None


class TestResultAggregator:
    def test_aggregate(self, make_rule):
        npm = make_rule("Npm", "package.json")
        pip = make_rule("Pip", "setup.py", DetectorType.PIP)
        cargo = make_rule("Cargo", "Cargo.toml", DetectorType.CARGO)

        root = DetectorEvaluationTree(ROOT)
        child = root.add_child(ROOT / "py")
        root.evaluations.append(
            _evaluation(npm, extraction=Extraction.success([_location("web")], project_name="web"))
        )
        root.evaluations.append(_evaluation(cargo, applicable=False))
        child.evaluations.append(_evaluation(pip, ROOT / "py", 1, extractable=False))

        result = ResultAggregator().aggregate(ROOT, root)
        assert result.root_tree is root
        assert result.applicable_detector_types == {DetectorType.NPM, DetectorType.PIP}
        assert result.extraction_count == 1
        assert result.status_map == {
            DetectorType.NPM: StatusType.SUCCESS,
            DetectorType.PIP: StatusType.FAILURE,
        }
        assert list(result.code_location_map) == ["./NPM"]
        assert result.code_locations == [result.code_location_map["./NPM"]]
        assert result.project_name_version == NameVersion("web")
        assert len(result.evaluations) == 3

    def test_aggregate_empty(self):
        result = ResultAggregator().aggregate(ROOT, None)
        assert result.root_tree is None
        assert result.code_locations == []
        assert result.status_map == {}

    def test_to_dict(self, make_rule):
        npm = make_rule("Npm", "package.json")
        root = DetectorEvaluationTree(ROOT)
        root.evaluations.append(_evaluation(npm, extraction=Extraction.success([_location("web")])))
        data = ResultAggregator().aggregate(ROOT, root).to_dict()
        assert data["status"] == {"NPM": "success"}
        assert data["applicable_detector_types"] == ["NPM"]
        assert data["code_locations"]["./NPM"]["graph"]["roots"] == ["web"]
        assert data["code_locations"]["./NPM"]["source_path"] == str(ROOT)
