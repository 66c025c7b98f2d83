"""Aggregate evaluated trees into the final detector result."""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

from z_detector.models.detector import DetectorType, NameVersion, StatusType
from z_detector.models.evaluation import DetectorEvaluation
from z_detector.models.graph import CodeLocation, DependencyGraph
from z_detector.tree import DetectorEvaluationTree

logger = logging.getLogger(__name__)


@dataclass
class DetectorToolResult:
    """Everything a detector run hands to reporting."""

    root_tree: DetectorEvaluationTree | None = None
    applicable_detector_types: set[DetectorType] = field(default_factory=set)
    code_locations: list[CodeLocation] = field(default_factory=list)
    code_location_map: dict[str, CodeLocation] = field(default_factory=dict)
    project_name_version: NameVersion | None = None
    extraction_count: int = 0
    status_map: dict[DetectorType, StatusType] = field(default_factory=dict)
    evaluations: list[DetectorEvaluation] = field(default_factory=list)

    @property
    def graphs(self) -> dict[str, DependencyGraph]:
        return {key: location.graph for key, location in self.code_location_map.items()}

    def to_dict(self) -> dict:
        """JSON-friendly summary."""
        return {
            "applicable_detector_types": sorted(t.name for t in self.applicable_detector_types),
            "extraction_count": self.extraction_count,
            "status": {t.name: s.value for t, s in sorted(
                self.status_map.items(), key=lambda item: item[0].name
            )},
            "project": (
                dataclasses.asdict(self.project_name_version)
                if self.project_name_version
                else None
            ),
            "code_locations": {
                key: {
                    "detector_type": location.detector_type.name
                    if location.detector_type
                    else None,
                    "source_path": str(location.source_path) if location.source_path else None,
                    "graph": location.graph.to_dict(),
                }
                for key, location in self.code_location_map.items()
            },
        }


class CodeLocationConverter(Protocol):
    def to_code_locations(
        self, source_root: Path, evaluation: DetectorEvaluation
    ) -> dict[str, CodeLocation]: ...


class DefaultCodeLocationConverter:
    """
    Key each code location by ``<relative dir>/<DETECTOR_TYPE>``.

    Locations missing a source path or detector type inherit them from the
    evaluation. A second location from the same evaluation gets a ``#n``
    suffix.
    """

    def to_code_locations(
        self, source_root: Path, evaluation: DetectorEvaluation
    ) -> dict[str, CodeLocation]:
        if evaluation.extraction is None:
            return {}
        detector_type = evaluation.rule.detector_type
        try:
            relative = evaluation.directory.relative_to(source_root).as_posix()
        except ValueError:
            relative = str(evaluation.directory)

        converted: dict[str, CodeLocation] = {}
        for index, location in enumerate(evaluation.extraction.code_locations):
            key = f"{relative}/{detector_type.name}"
            if index:
                key = f"{key}#{index + 1}"
            converted[key] = dataclasses.replace(
                location,
                source_path=location.source_path or evaluation.directory,
                detector_type=location.detector_type or detector_type,
            )
        return converted


def flatten(root: DetectorEvaluationTree | None) -> list[DetectorEvaluation]:
    return root.all_evaluations() if root is not None else []


def extract_status(evaluations: list[DetectorEvaluation]) -> dict[DetectorType, StatusType]:
    """
    Per-ecosystem status across the run.

    SUCCESS when any applicable evaluation of the type extracted
    successfully; FAILURE for every other applicable type. An evaluation
    that is extractable but carries no recognised extraction outcome is
    logged and counted as a failure.
    """
    status_map: dict[DetectorType, StatusType] = {}
    for evaluation in evaluations:
        if not evaluation.is_applicable():
            continue
        detector_type = evaluation.rule.detector_type

        if not evaluation.is_extractable():
            status = StatusType.FAILURE
        elif evaluation.was_extraction_successful():
            status = StatusType.SUCCESS
        elif evaluation.was_extraction_failure() or evaluation.was_extraction_exception():
            status = StatusType.FAILURE
        else:
            logger.warning(
                "Unknown evaluation status for %s in %s (state %s); reporting failure.",
                evaluation.rule.descriptive_name,
                evaluation.directory,
                evaluation.state.name,
            )
            status = StatusType.FAILURE

        if status_map.get(detector_type) is not StatusType.SUCCESS:
            status_map[detector_type] = status
    return status_map


class NameVersionDecider:
    """Suggest a project name/version from extractions that report one."""

    def decide(
        self,
        evaluations: list[DetectorEvaluation],
        preferred_detector_type: DetectorType | None = None,
    ) -> NameVersion | None:
        candidates = [
            e
            for e in evaluations
            if e.was_extraction_successful() and e.extraction.project_name
        ]
        if not candidates:
            logger.debug("No extraction reported a project name.")
            return None

        if preferred_detector_type is not None:
            preferred = [
                e for e in candidates if e.rule.detector_type is preferred_detector_type
            ]
            if not preferred:
                logger.info(
                    "Preferred detector %s reported no project name.",
                    preferred_detector_type.name,
                )
                return None
            chosen = min(preferred, key=lambda e: e.depth)
            return NameVersion(chosen.extraction.project_name, chosen.extraction.project_version)

        shallowest = min(e.depth for e in candidates)
        distinct = {
            NameVersion(e.extraction.project_name, e.extraction.project_version)
            for e in candidates
            if e.depth == shallowest
        }
        if len(distinct) == 1:
            return distinct.pop()
        logger.info(
            "Multiple detectors reported different project names at depth %d; "
            "set a preferred detector to choose one.",
            shallowest,
        )
        return None


class ResultAggregator:
    def __init__(
        self,
        converter: CodeLocationConverter | None = None,
        name_version_decider: NameVersionDecider | None = None,
    ) -> None:
        self._converter = converter or DefaultCodeLocationConverter()
        self._decider = name_version_decider or NameVersionDecider()

    def aggregate(
        self,
        source_root: Path,
        root: DetectorEvaluationTree | None,
        preferred_detector_type: DetectorType | None = None,
    ) -> DetectorToolResult:
        evaluations = flatten(root)
        result = DetectorToolResult(
            root_tree=root,
            evaluations=evaluations,
            status_map=extract_status(evaluations),
            extraction_count=sum(1 for e in evaluations if e.is_extractable()),
            applicable_detector_types={
                e.rule.detector_type for e in evaluations if e.is_applicable()
            },
        )

        for evaluation in evaluations:
            if not evaluation.was_extraction_successful():
                continue
            for key, location in self._converter.to_code_locations(
                source_root, evaluation
            ).items():
                if key in result.code_location_map:
                    logger.warning("Duplicate code location key %s; keeping the first.", key)
                    continue
                result.code_location_map[key] = location

        result.code_locations = list(result.code_location_map.values())
        result.project_name_version = self._decider.decide(
            evaluations, preferred_detector_type
        )
        return result
