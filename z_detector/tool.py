"""Detector tool: run the whole detection pipeline over one directory."""

from __future__ import annotations

from pathlib import Path

import structlog

from z_detector.aggregator import CodeLocationConverter, DetectorToolResult, ResultAggregator
from z_detector.environment import ExtractionEnvironmentProvider
from z_detector.evaluator import DetectorEvaluator
from z_detector.events import EventKind, EventSystem
from z_detector.finder import DetectorFinderOptions, DirectoryTreeBuilder
from z_detector.models.detector import DetectorStatus, DetectorType
from z_detector.rules import DetectorRuleSet

log = structlog.get_logger("z_detector.engine")


class DetectorTool:
    """
    Orchestrate a detector run.

    Step 1: DirectoryTreeBuilder.build()
    Step 2: search + applicable
    Step 3: extractable
    Step 4: extraction
    Step 5: aggregate, publish statuses and the final result
    """

    def __init__(
        self,
        rule_set: DetectorRuleSet,
        environment_provider: ExtractionEnvironmentProvider,
        events: EventSystem | None = None,
        converter: CodeLocationConverter | None = None,
    ) -> None:
        self.rule_set = rule_set
        self.environment_provider = environment_provider
        self.events = events or EventSystem()
        self.aggregator = ResultAggregator(converter=converter)

    def run(
        self,
        directory: str | Path,
        options: DetectorFinderOptions | None = None,
        preferred_detector_type: DetectorType | None = None,
    ) -> DetectorToolResult:
        """
        Detect and extract every applicable ecosystem under *directory*.

        Raises:
            DirectoryListError: a directory in the tree could not be listed.
        """
        source_root = Path(directory)
        with structlog.contextvars.bound_contextvars(scan_root=str(source_root)):
            return self._run(source_root, options, preferred_detector_type)

    def _run(
        self,
        source_root: Path,
        options: DetectorFinderOptions | None,
        preferred_detector_type: DetectorType | None,
    ) -> DetectorToolResult:
        log.info("tool.started", directory=str(source_root), rules=len(self.rule_set))

        root = DirectoryTreeBuilder(options).build(source_root)
        if root is None:
            log.warning("tool.no_search_tree", directory=str(source_root))
            result = DetectorToolResult()
            self.events.publish(EventKind.DETECTORS_COMPLETE, result)
            return result

        evaluator = DetectorEvaluator(self.rule_set, self.events)
        evaluator.search_and_applicable_evaluation(root)
        log.info(
            "tool.search_completed",
            applied=sorted(t.name for t in _applied_types(root)),
        )
        evaluator.extractable_evaluation(root)
        evaluator.extraction_evaluation(root, self.environment_provider.create_environment)

        result = self.aggregator.aggregate(source_root, root, preferred_detector_type)
        for detector_type, status in result.status_map.items():
            self.events.publish(
                EventKind.STATUS_SUMMARY, DetectorStatus(detector_type, status)
            )
        self.events.publish(EventKind.DETECTORS_COMPLETE, result)

        log.info(
            "tool.completed",
            extractions=result.extraction_count,
            code_locations=len(result.code_locations),
            status={t.name: s.value for t, s in result.status_map.items()},
        )
        return result


def _applied_types(root) -> set[DetectorType]:
    return {e.rule.detector_type for e in root.all_evaluations() if e.is_applicable()}
