"""Per-phase results, extraction outcomes and the evaluation record."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum
from pathlib import Path
from typing import TYPE_CHECKING

from z_detector.exceptions import EvaluationStateError
from z_detector.models.graph import CodeLocation

if TYPE_CHECKING:
    from z_detector.detectables.base import Detectable
    from z_detector.environment import ExtractionEnvironment
    from z_detector.rules import DetectorRule


@dataclass(frozen=True)
class DetectableResult:
    """Outcome of one phase predicate: pass/fail plus a reason."""

    passed: bool
    description: str

    @classmethod
    def ok(cls, description: str = "Passed.") -> DetectableResult:
        return cls(passed=True, description=description)

    @classmethod
    def fail(cls, description: str) -> DetectableResult:
        return cls(passed=False, description=description)


class ExtractionResultType(Enum):
    SUCCESS = "success"
    FAILURE = "failure"
    EXCEPTION = "exception"


@dataclass(frozen=True)
class Extraction:
    """Tagged result of one extraction attempt."""

    result: ExtractionResultType
    code_locations: tuple[CodeLocation, ...] = ()
    description: str = ""
    error: BaseException | None = None
    project_name: str | None = None
    project_version: str | None = None

    @classmethod
    def success(
        cls,
        code_locations: list[CodeLocation] | tuple[CodeLocation, ...] = (),
        project_name: str | None = None,
        project_version: str | None = None,
    ) -> Extraction:
        return cls(
            result=ExtractionResultType.SUCCESS,
            code_locations=tuple(code_locations),
            description="Extraction succeeded.",
            project_name=project_name,
            project_version=project_version,
        )

    @classmethod
    def failure(cls, description: str) -> Extraction:
        return cls(result=ExtractionResultType.FAILURE, description=description)

    @classmethod
    def exception(cls, error: BaseException) -> Extraction:
        return cls(
            result=ExtractionResultType.EXCEPTION,
            description=f"{type(error).__name__}: {error}",
            error=error,
        )

    @property
    def is_success(self) -> bool:
        return self.result is ExtractionResultType.SUCCESS


class EvaluationState(IntEnum):
    """Furthest phase an evaluation has passed."""

    UNEVALUATED = 0
    SEARCHED = 1
    APPLIED = 2
    EXTRACTABILITY_CHECKED = 3
    EXTRACTED = 4


class DetectorEvaluation:
    """
    One (rule, directory) pairing and its progress through the phases.

    ``state`` only moves forward one phase at a time. A failed phase
    check leaves ``state`` where it was and sets ``halted_at`` to the phase
    that was refused, which is terminal. Extraction can only be recorded
    after the extractability phase passed, so "extracted" always implies
    applicable and extractable.
    """

    def __init__(self, rule: DetectorRule, directory: Path, depth: int) -> None:
        self.rule = rule
        self.directory = directory
        self.depth = depth
        self.state = EvaluationState.UNEVALUATED
        self.halted_at: EvaluationState | None = None
        self.detectable: Detectable | None = None
        self.extraction: Extraction | None = None
        self.extraction_environment: ExtractionEnvironment | None = None
        self._reasons: dict[EvaluationState, str] = {}

    def __repr__(self) -> str:
        return (
            f"DetectorEvaluation(rule={self.rule.name!r}, directory={str(self.directory)!r}, "
            f"state={self.state.name}, halted_at={self.halted_at.name if self.halted_at else None})"
        )

    # ── transitions ──────────────────────────────────────────────────────

    def record_searchable(self, result: DetectableResult) -> None:
        self._advance(EvaluationState.SEARCHED, result)

    def record_applicable(self, result: DetectableResult) -> None:
        self._advance(EvaluationState.APPLIED, result)

    def record_extractable(self, result: DetectableResult) -> None:
        self._advance(EvaluationState.EXTRACTABILITY_CHECKED, result)

    def record_extraction(self, extraction: Extraction) -> None:
        self._advance(
            EvaluationState.EXTRACTED, DetectableResult.ok(extraction.description)
        )
        self.extraction = extraction

    def _advance(self, target: EvaluationState, result: DetectableResult) -> None:
        if self.halted_at is not None:
            raise EvaluationStateError(
                f"{self.rule.name} in {self.directory} halted at {self.halted_at.name}; "
                f"cannot record {target.name}"
            )
        if self.state != target - 1:
            raise EvaluationStateError(
                f"{self.rule.name} in {self.directory} is {self.state.name}; "
                f"cannot record {target.name}"
            )
        self._reasons[target] = result.description
        if result.passed:
            self.state = target
        else:
            self.halted_at = target

    # ── queries ──────────────────────────────────────────────────────────

    @property
    def is_terminal(self) -> bool:
        return self.halted_at is not None or self.state is EvaluationState.EXTRACTED

    def is_searchable(self) -> bool:
        return self.state >= EvaluationState.SEARCHED

    def is_applicable(self) -> bool:
        return self.state >= EvaluationState.APPLIED

    def is_extractable(self) -> bool:
        return self.state >= EvaluationState.EXTRACTABILITY_CHECKED

    def was_extraction_attempted(self) -> bool:
        return self.state is EvaluationState.EXTRACTED

    def was_extraction_successful(self) -> bool:
        return self.extraction is not None and self.extraction.is_success

    def was_extraction_failure(self) -> bool:
        return (
            self.extraction is not None
            and self.extraction.result is ExtractionResultType.FAILURE
        )

    def was_extraction_exception(self) -> bool:
        return (
            self.extraction is not None
            and self.extraction.result is ExtractionResultType.EXCEPTION
        )

    def reason(self, phase: EvaluationState) -> str:
        return self._reasons.get(phase, "")

    @property
    def searchability_message(self) -> str:
        return self.reason(EvaluationState.SEARCHED)

    @property
    def applicability_message(self) -> str:
        return self.reason(EvaluationState.APPLIED)

    @property
    def extractability_message(self) -> str:
        return self.reason(EvaluationState.EXTRACTABILITY_CHECKED)
