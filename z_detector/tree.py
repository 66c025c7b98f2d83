"""The in-memory search tree: one node per directory."""

from __future__ import annotations

import weakref
from collections.abc import Iterator
from pathlib import Path

from z_detector.models.detector import DetectorType
from z_detector.models.evaluation import DetectorEvaluation


class DetectorEvaluationTree:
    """
    A directory node.

    Owns its evaluations and its children. The parent is held through a
    weak reference so the tree has no ownership cycles; it is only used
    for upward queries.
    """

    def __init__(
        self,
        directory: Path,
        depth: int = 0,
        parent: DetectorEvaluationTree | None = None,
    ) -> None:
        self.directory = directory
        self.depth = depth
        self.children: list[DetectorEvaluationTree] = []
        self.evaluations: list[DetectorEvaluation] = []
        self._parent = weakref.ref(parent) if parent is not None else None

    def __repr__(self) -> str:
        return f"DetectorEvaluationTree({str(self.directory)!r}, depth={self.depth})"

    @property
    def parent(self) -> DetectorEvaluationTree | None:
        return self._parent() if self._parent is not None else None

    def add_child(self, directory: Path) -> DetectorEvaluationTree:
        child = DetectorEvaluationTree(directory, depth=self.depth + 1, parent=self)
        self.children.append(child)
        return child

    def ancestors(self) -> Iterator[DetectorEvaluationTree]:
        """Yield parent, grandparent, ... up to the root."""
        node = self.parent
        while node is not None:
            yield node
            node = node.parent

    def as_flat_list(self) -> list[DetectorEvaluationTree]:
        """This node and all descendants, depth-first pre-order."""
        flat: list[DetectorEvaluationTree] = []
        stack: list[DetectorEvaluationTree] = [self]
        while stack:
            node = stack.pop()
            flat.append(node)
            stack.extend(reversed(node.children))
        return flat

    def all_evaluations(self) -> list[DetectorEvaluation]:
        """Evaluations of this subtree in tree order."""
        return [e for node in self.as_flat_list() for e in node.evaluations]

    def applied_evaluations(self) -> list[DetectorEvaluation]:
        return [e for e in self.evaluations if e.is_applicable()]

    def applied_detector_types(self) -> set[DetectorType]:
        return {e.rule.detector_type for e in self.applied_evaluations()}

    def applied_in_ancestors(self) -> list[DetectorEvaluation]:
        return [e for node in self.ancestors() for e in node.applied_evaluations()]

    def relative_path(self, root: Path) -> str:
        try:
            relative = self.directory.relative_to(root)
        except ValueError:
            return str(self.directory)
        return relative.as_posix() if relative.parts else "."
