"""Detector rule registry and the search (yield/nesting/depth) policy."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable

from z_detector.models.detector import DetectorType
from z_detector.models.evaluation import DetectableResult, DetectorEvaluation

if TYPE_CHECKING:
    from z_detector.detectables.base import Detectable, DetectableEnvironment

logger = logging.getLogger(__name__)

DetectableFactory = Callable[["DetectableEnvironment"], "Detectable"]


@dataclass(frozen=True, eq=False)
class DetectorRule:
    """
    Registered identity, factory and search policy of one detector.

    Attributes:
        detector_type: Ecosystem this rule reports under.
        name: Unique descriptive name, e.g. "Go Mod Cli".
        factory: Builds a fresh detectable for a directory.
        max_depth: Deepest directory (root = 0) the rule is searched in;
            ``None`` means unlimited.
        nestable: Whether the rule may apply below a directory where any
            detector already applied.
        yields_to: Detector types that, when applied in the same directory,
            suppress this rule.
        nested: Rules tried only below directories where this rule applied.
            When one of them applies somewhere, this rule yields there.
    """

    detector_type: DetectorType
    name: str
    factory: DetectableFactory
    max_depth: int | None = None
    nestable: bool = True
    yields_to: frozenset[DetectorType] = frozenset()
    nested: DetectorRuleSet | None = None

    def __repr__(self) -> str:
        return f"DetectorRule({self.name!r}, {self.detector_type.name})"

    @property
    def descriptive_name(self) -> str:
        return f"{self.detector_type.name} - {self.name}"

    def nested_rules(self) -> list[DetectorRule]:
        return self.nested.ordered_rules() if self.nested is not None else []


class DetectorRuleSet:
    """Ordered collection of detector rules; order is evaluation order."""

    def __init__(self, rules: Iterable[DetectorRule] = ()) -> None:
        self._rules: dict[str, DetectorRule] = {}
        for rule in rules:
            self.register(rule)

    def register(self, rule: DetectorRule) -> None:
        if rule.name in self._rules:
            raise ValueError(f"Detector rule already registered: {rule.name}")
        self._rules[rule.name] = rule
        logger.debug("Registered detector rule: %s", rule.descriptive_name)

    def get(self, name: str) -> DetectorRule | None:
        return self._rules.get(name)

    def ordered_rules(self) -> list[DetectorRule]:
        return list(self._rules.values())

    def find_by_type(self, detector_type: DetectorType) -> list[DetectorRule]:
        return [r for r in self._rules.values() if r.detector_type is detector_type]

    def __iter__(self) -> Iterator[DetectorRule]:
        return iter(self._rules.values())

    def __len__(self) -> int:
        return len(self._rules)

    def __contains__(self, rule: object) -> bool:
        return any(r is rule for r in self._rules.values())


def evaluate_searchable(
    rule: DetectorRule,
    depth: int,
    applied_here: list[DetectorEvaluation],
    applied_above: list[DetectorEvaluation],
) -> DetectableResult:
    """Decide whether *rule* may be attempted in a directory.

    Args:
        rule: Candidate rule.
        depth: Directory depth below the search root.
        applied_here: Evaluations already applicable in this directory.
        applied_above: Applicable evaluations in ancestor directories.
    """
    if rule.max_depth is not None and depth > rule.max_depth:
        return DetectableResult.fail(
            f"Maximum search depth {rule.max_depth} exceeded (depth {depth})."
        )

    for evaluation in applied_here:
        if rule.nested is not None and evaluation.rule in rule.nested:
            return DetectableResult.fail(
                f"Yielded to nested detector {evaluation.rule.descriptive_name}."
            )

    for evaluation in applied_here:
        if evaluation.rule.detector_type in rule.yields_to:
            return DetectableResult.fail(
                f"Yielded to detector {evaluation.rule.descriptive_name}."
            )

    if not rule.nestable and applied_above:
        claimed_by = applied_above[0].rule.descriptive_name
        return DetectableResult.fail(
            f"Not nestable and detector {claimed_by} applied in a parent directory."
        )

    return DetectableResult.ok("Search passed.")

