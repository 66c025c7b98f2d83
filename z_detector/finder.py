"""Directory tree builder: walks a project and lays out the search tree."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from fnmatch import fnmatchcase
from pathlib import Path

from z_detector.core.config import DEFAULT_EXCLUDED_DIRS, DEFAULT_MAX_DEPTH
from z_detector.exceptions import DirectoryListError
from z_detector.tree import DetectorEvaluationTree

logger = logging.getLogger(__name__)


@dataclass
class DetectorFinderOptions:
    """Traversal options for :class:`DirectoryTreeBuilder`.

    ``max_depth`` counts from the root (depth 0); directories deeper than
    it are not added to the tree at all.
    """

    max_depth: int = DEFAULT_MAX_DEPTH
    excluded_directory_names: list[str] = field(
        default_factory=lambda: list(DEFAULT_EXCLUDED_DIRS)
    )
    excluded_path_patterns: list[str] = field(default_factory=list)
    follow_symlinks: bool = False
    sort_children: bool = True


class DirectoryTreeBuilder:
    """Build a :class:`DetectorEvaluationTree` with one node per directory."""

    def __init__(self, options: DetectorFinderOptions | None = None) -> None:
        self.options = options or DetectorFinderOptions()

    def build(self, root: str | Path) -> DetectorEvaluationTree | None:
        """
        Walk *root* and return the tree skeleton.

        Returns None when the root is missing, unreadable or excluded.

        Raises:
            DirectoryListError: a directory below the root could not be listed.
        """
        root_path = Path(root)
        if not root_path.is_dir():
            logger.warning("Search root is not a directory: %s", root_path)
            return None
        if not os.access(root_path, os.R_OK | os.X_OK):
            logger.warning("Search root is not readable: %s", root_path)
            return None
        if self._is_excluded(root_path, root_path):
            logger.info("Search root is excluded: %s", root_path)
            return None

        tree = DetectorEvaluationTree(root_path, depth=0)
        visited = {self._identity(root_path)}
        self._add_children(tree, root_path, visited)
        logger.debug(
            "Built search tree for %s with %d directories",
            root_path,
            len(tree.as_flat_list()),
        )
        return tree

    def _add_children(
        self, node: DetectorEvaluationTree, root: Path, visited: set[str]
    ) -> None:
        if node.depth >= self.options.max_depth:
            return

        try:
            with os.scandir(node.directory) as entries:
                subdirectories = [
                    Path(entry.path)
                    for entry in entries
                    if entry.is_dir(follow_symlinks=self.options.follow_symlinks)
                ]
        except OSError as exc:
            raise DirectoryListError(node.directory, exc) from exc

        if self.options.sort_children:
            subdirectories.sort(key=lambda p: p.name)

        for directory in subdirectories:
            if self._is_excluded(directory, root):
                logger.debug("Skipping excluded directory: %s", directory)
                continue
            identity = self._identity(directory)
            if identity in visited:
                logger.debug("Skipping already visited directory: %s", directory)
                continue
            visited.add(identity)
            child = node.add_child(directory)
            self._add_children(child, root, visited)

    def _is_excluded(self, directory: Path, root: Path) -> bool:
        if directory != root and directory.name in self.options.excluded_directory_names:
            return True
        if not self.options.excluded_path_patterns:
            return False
        relative = directory.relative_to(root).as_posix() if directory != root else "."
        return any(
            fnmatchcase(relative, pattern) or fnmatchcase(directory.name, pattern)
            for pattern in self.options.excluded_path_patterns
        )

    @staticmethod
    def _identity(directory: Path) -> str:
        return os.path.realpath(directory)
