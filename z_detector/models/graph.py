"""Dependency graph model: components, edges, roots and code locations."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from z_detector.models.detector import DetectorType


@dataclass(frozen=True)
class DependencyComponent:
    """
    Ecosystem-qualified component identity.

    Identity is namespace + name + version; ``forge`` only says which
    ecosystem the component came from and takes no part in equality.
    The version is an opaque string and is never parsed.
    """

    name: str
    version: str | None = None
    namespace: str | None = None
    forge: str = field(default="", compare=False)

    @property
    def external_id(self) -> str:
        prefix = f"{self.forge}:" if self.forge else ""
        qualified = f"{self.namespace}/{self.name}" if self.namespace else self.name
        suffix = f"@{self.version}" if self.version else ""
        return f"{prefix}{qualified}{suffix}"

    def __str__(self) -> str:
        return self.external_id


@dataclass(frozen=True)
class DependencyGraph:
    """
    Immutable dependency graph.

    Build one with :class:`MutableDependencyGraph`; every edge endpoint
    is guaranteed to be a node and every root is a node.
    """

    nodes: frozenset[DependencyComponent] = frozenset()
    edges: frozenset[tuple[DependencyComponent, DependencyComponent]] = frozenset()
    roots: frozenset[DependencyComponent] = frozenset()

    def children_of(self, parent: DependencyComponent) -> set[DependencyComponent]:
        return {child for p, child in self.edges if p == parent}

    def parents_of(self, child: DependencyComponent) -> set[DependencyComponent]:
        return {parent for parent, c in self.edges if c == child}

    def has_component(self, component: DependencyComponent) -> bool:
        return component in self.nodes

    def is_empty(self) -> bool:
        return not self.nodes

    def to_dict(self) -> dict:
        """JSON-friendly rendering, sorted for stable output."""
        return {
            "roots": sorted(c.external_id for c in self.roots),
            "components": sorted(c.external_id for c in self.nodes),
            "relationships": sorted(
                [parent.external_id, child.external_id] for parent, child in self.edges
            ),
        }


class MutableDependencyGraph:
    """Graph under construction; :meth:`build` freezes it."""

    def __init__(self) -> None:
        # dicts keep first-insertion order, so the same input builds the same graph
        self._nodes: dict[DependencyComponent, None] = {}
        self._edges: dict[tuple[DependencyComponent, DependencyComponent], None] = {}
        self._roots: dict[DependencyComponent, None] = {}

    def add_node(self, component: DependencyComponent) -> None:
        self._nodes.setdefault(component, None)

    def add_root(self, component: DependencyComponent) -> None:
        self.add_node(component)
        self._roots.setdefault(component, None)

    def add_edge(self, parent: DependencyComponent, child: DependencyComponent) -> None:
        """Add ``parent -> child``, inserting either endpoint first if unseen."""
        self.add_node(parent)
        self.add_node(child)
        self._edges.setdefault((parent, child), None)

    def has_component(self, component: DependencyComponent) -> bool:
        return component in self._nodes

    def build(self) -> DependencyGraph:
        return DependencyGraph(
            nodes=frozenset(self._nodes),
            edges=frozenset(self._edges),
            roots=frozenset(self._roots),
        )


@dataclass(frozen=True)
class CodeLocation:
    """A dependency graph tagged with where it came from."""

    graph: DependencyGraph
    source_path: Path | None = None
    detector_type: DetectorType | None = None
