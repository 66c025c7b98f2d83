"""DetectorEvaluator: the three evaluation phases over the search tree.

Phase 1: search + applicable (top-down, creates the evaluations)
Phase 2: extractable
Phase 3: extraction

Phases run strictly one after another over the whole tree. A negative
result stops later phases for that evaluation only.
"""

from __future__ import annotations

import os
from typing import Callable

import structlog

from z_detector.detectables.base import DetectableEnvironment
from z_detector.environment import ExtractionEnvironment
from z_detector.events import EventKind, EventSystem
from z_detector.models.evaluation import DetectableResult, DetectorEvaluation, Extraction
from z_detector.rules import DetectorRule, DetectorRuleSet, evaluate_searchable
from z_detector.tree import DetectorEvaluationTree

log = structlog.get_logger("z_detector.engine")

EnvironmentFactory = Callable[[DetectorEvaluationTree], ExtractionEnvironment]


class DetectorEvaluator:
    """Drive every evaluation of a tree through the phases."""

    def __init__(self, rule_set: DetectorRuleSet, events: EventSystem | None = None) -> None:
        self.rule_set = rule_set
        self.events = events or EventSystem()

    # ── phase 1 ──────────────────────────────────────────────────────────

    def search_and_applicable_evaluation(
        self,
        root: DetectorEvaluationTree,
        visited: set[str] | None = None,
    ) -> None:
        """Create and search/apply evaluations for *root* and its subtree."""
        self._search_node(root, set() if visited is None else visited)
        self.events.publish(EventKind.SEARCH_COMPLETED, root)

    def _search_node(self, node: DetectorEvaluationTree, visited: set[str]) -> None:
        identity = os.path.realpath(node.directory)
        if identity in visited:
            log.debug("evaluator.directory_revisited", directory=str(node.directory))
            return
        visited.add(identity)

        applied_above = node.applied_in_ancestors()
        for rule in self._candidate_rules(applied_above):
            evaluation = DetectorEvaluation(rule, node.directory, node.depth)
            node.evaluations.append(evaluation)

            searchable = evaluate_searchable(
                rule, node.depth, node.applied_evaluations(), applied_above
            )
            evaluation.record_searchable(searchable)
            if not searchable.passed:
                continue

            applicable = self._checked(
                evaluation, "applicable", lambda: self._applicable(evaluation)
            )
            evaluation.record_applicable(applicable)
            if applicable.passed:
                log.debug(
                    "evaluator.applied",
                    detector=rule.descriptive_name,
                    directory=str(node.directory),
                )

        for child in node.children:
            self._search_node(child, visited)

    def _candidate_rules(self, applied_above: list[DetectorEvaluation]) -> list[DetectorRule]:
        """Nested rules unlocked by ancestors first, then the base rule set."""
        candidates: list[DetectorRule] = []
        for evaluation in applied_above:
            for nested in evaluation.rule.nested_rules():
                if not any(nested is c for c in candidates):
                    candidates.append(nested)
        for rule in self.rule_set.ordered_rules():
            if not any(rule is c for c in candidates):
                candidates.append(rule)
        return candidates

    @staticmethod
    def _applicable(evaluation: DetectorEvaluation) -> DetectableResult:
        evaluation.detectable = evaluation.rule.factory(
            DetectableEnvironment(directory=evaluation.directory)
        )
        return evaluation.detectable.applicable()

    @staticmethod
    def _checked(
        evaluation: DetectorEvaluation,
        phase: str,
        check: Callable[[], DetectableResult],
    ) -> DetectableResult:
        """Run a phase check; an exception becomes a failed result."""
        try:
            return check()
        except Exception as exc:
            log.warning(
                "evaluator.check_exception",
                phase=phase,
                detector=evaluation.rule.descriptive_name,
                directory=str(evaluation.directory),
                exc_info=True,
            )
            return DetectableResult.fail(f"{type(exc).__name__}: {exc}")

    # ── phase 2 ──────────────────────────────────────────────────────────

    def extractable_evaluation(self, root: DetectorEvaluationTree) -> None:
        for evaluation in root.all_evaluations():
            if not evaluation.is_applicable() or evaluation.detectable is None:
                continue
            result = self._checked(evaluation, "extractable", evaluation.detectable.extractable)
            evaluation.record_extractable(result)
            if not result.passed:
                log.info(
                    "evaluator.not_extractable",
                    detector=evaluation.rule.descriptive_name,
                    directory=str(evaluation.directory),
                    reason=result.description,
                )
        self.events.publish(EventKind.PREPARATION_COMPLETED, root)

    # ── phase 3 ──────────────────────────────────────────────────────────

    def extraction_evaluation(
        self,
        root: DetectorEvaluationTree,
        environment_factory: EnvironmentFactory,
    ) -> None:
        extractable = [e for e in root.all_evaluations() if e.is_extractable()]
        self.events.publish(EventKind.EXTRACTION_COUNT, len(extractable))

        for node in root.as_flat_list():
            for evaluation in node.evaluations:
                if evaluation.is_extractable() and not evaluation.was_extraction_attempted():
                    self._extract(node, evaluation, environment_factory)

        self.events.publish(EventKind.EXTRACTIONS_COMPLETED, root)

    def _extract(
        self,
        node: DetectorEvaluationTree,
        evaluation: DetectorEvaluation,
        environment_factory: EnvironmentFactory,
    ) -> None:
        self.events.publish(EventKind.EXTRACTION_STARTED, evaluation)
        log.info(
            "evaluator.extraction_started",
            detector=evaluation.rule.descriptive_name,
            directory=str(evaluation.directory),
        )
        try:
            environment = environment_factory(node)
            evaluation.extraction_environment = environment
            extraction = evaluation.detectable.extract(environment)
            if not isinstance(extraction, Extraction):
                extraction = Extraction.failure(
                    f"Detectable returned {type(extraction).__name__} instead of an extraction."
                )
        except Exception as exc:
            log.warning(
                "evaluator.extraction_exception",
                detector=evaluation.rule.descriptive_name,
                directory=str(evaluation.directory),
                exc_info=True,
            )
            extraction = Extraction.exception(exc)

        evaluation.record_extraction(extraction)
        log.info(
            "evaluator.extraction_ended",
            detector=evaluation.rule.descriptive_name,
            directory=str(evaluation.directory),
            result=extraction.result.value,
            code_locations=len(extraction.code_locations),
        )
        self.events.publish(EventKind.EXTRACTION_ENDED, evaluation)
