"""Parse ``go list -m`` and ``go mod graph`` output into a dependency graph."""

from __future__ import annotations

import logging
from pathlib import Path

from z_detector.models.detector import DetectorType
from z_detector.models.graph import CodeLocation, DependencyComponent, MutableDependencyGraph

logger = logging.getLogger(__name__)

GO_FORGE = "golang"


def parse_module_token(token: str) -> DependencyComponent:
    """``name@version`` -> component; a bare name has no version."""
    name, _, version = token.strip().partition("@")
    return DependencyComponent(name=name, version=version or None, forge=GO_FORGE)


class GoModGraphParser:
    """
    Build one graph from the workspace module list and the module graph.

    Workspace modules (``go list -m``) become roots. Each graph line
    ``parent@version child@version`` adds both components and the edge
    ``parent -> child``. Self edges are dropped.
    """

    def parse_list_and_graph(
        self,
        list_output: list[str],
        graph_output: list[str],
        source_path: Path | None = None,
    ) -> CodeLocation:
        graph = MutableDependencyGraph()

        for line in list_output:
            if line.strip():
                graph.add_root(parse_module_token(line))

        for line in graph_output:
            parts = line.split()
            if len(parts) < 2:
                if parts:
                    logger.debug("Skipping malformed go mod graph line: %r", line)
                continue
            parent = parse_module_token(parts[0])
            child = parse_module_token(parts[1])
            if parent == child:
                graph.add_node(parent)
                continue
            graph.add_edge(parent, child)

        return CodeLocation(
            graph=graph.build(),
            source_path=source_path,
            detector_type=DetectorType.GO_MOD,
        )
