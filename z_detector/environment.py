"""Per-directory extraction environments (scratch output directories)."""

from __future__ import annotations

import logging
import re
import shutil
import tempfile
from dataclasses import dataclass
from pathlib import Path

from z_detector.tree import DetectorEvaluationTree

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


@dataclass(frozen=True)
class ExtractionEnvironment:
    """Scratch space owned by one extraction."""

    output_directory: Path


class ExtractionEnvironmentProvider:
    """
    Hand out a fresh scratch directory per extraction.

    Directories live under *base_dir* (a private temp directory when not
    given). The caller owns the lifecycle: call :meth:`close` or use the
    provider as a context manager to remove directories it created.
    """

    def __init__(self, base_dir: Path | None = None, keep: bool = False) -> None:
        self._owns_base = base_dir is None
        self.base_dir = Path(tempfile.mkdtemp(prefix="z-detect-")) if base_dir is None else base_dir
        self.base_dir.mkdir(parents=True, exist_ok=True)
        self._keep = keep
        self._created: list[Path] = []

    def __enter__(self) -> ExtractionEnvironmentProvider:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def create_environment(self, tree: DetectorEvaluationTree) -> ExtractionEnvironment:
        label = _UNSAFE_CHARS.sub("_", tree.directory.name) or "root"
        output = Path(tempfile.mkdtemp(prefix=f"extraction-{label}-", dir=self.base_dir))
        self._created.append(output)
        return ExtractionEnvironment(output_directory=output)

    def close(self) -> None:
        if self._keep:
            logger.info("Keeping extraction output in %s", self.base_dir)
            return
        for directory in self._created:
            shutil.rmtree(directory, ignore_errors=True)
        self._created.clear()
        if self._owns_base:
            shutil.rmtree(self.base_dir, ignore_errors=True)
