"""Shared pytest fixtures for z-detector tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from z_detector.detectables.base import Detectable, DetectableEnvironment
from z_detector.environment import ExtractionEnvironment
from z_detector.models.detector import DetectorType
from z_detector.models.evaluation import DetectableResult, Extraction
from z_detector.models.graph import CodeLocation, DependencyGraph
from z_detector.rules import DetectorRule


class StubDetectable(Detectable):
    """Applies when *marker* exists; scripted extractable/extract outcomes.

    An exception passed as *extractable* or *applicable_error* is raised by
    that check.
    """

    def __init__(
        self,
        environment: DetectableEnvironment,
        marker: str,
        extractable: bool | BaseException = True,
        outcome: Extraction | BaseException | None = None,
        log: list | None = None,
        applicable_error: BaseException | None = None,
    ) -> None:
        super().__init__(environment)
        self._marker = marker
        self._extractable = extractable
        self._outcome = outcome
        self._log = log if log is not None else []
        self._applicable_error = applicable_error

    def applicable(self) -> DetectableResult:
        self._log.append(("applicable", self._marker, self.directory))
        if self._applicable_error is not None:
            raise self._applicable_error
        return self.file_result(self._marker)

    def extractable(self) -> DetectableResult:
        self._log.append(("extractable", self._marker, self.directory))
        if isinstance(self._extractable, BaseException):
            raise self._extractable
        if self._extractable:
            return DetectableResult.ok()
        return DetectableResult.fail("Required tool is missing.")

    def extract(self, extraction_environment: ExtractionEnvironment) -> Extraction:
        self._log.append(("extract", self._marker, self.directory))
        if isinstance(self._outcome, BaseException):
            raise self._outcome
        if self._outcome is not None:
            return self._outcome
        return Extraction.success([CodeLocation(graph=DependencyGraph())])


@pytest.fixture
def call_log() -> list:
    """(phase, marker, directory) tuples recorded by stub detectables."""
    return []


@pytest.fixture
def make_rule(call_log):
    def _make(
        name: str,
        marker: str,
        detector_type: DetectorType = DetectorType.NPM,
        extractable: bool | BaseException = True,
        outcome: Extraction | BaseException | None = None,
        applicable_error: BaseException | None = None,
        **rule_kwargs,
    ) -> DetectorRule:
        def factory(environment: DetectableEnvironment) -> StubDetectable:
            return StubDetectable(
                environment, marker, extractable, outcome, call_log, applicable_error
            )

        return DetectorRule(detector_type=detector_type, name=name, factory=factory, **rule_kwargs)

    return _make


@pytest.fixture
def write_files():
    """Create files (and parent dirs) under a root: ``{"a/go.mod": "module a"}``."""

    def _write(root: Path, files: dict[str, str]) -> Path:
        for relative, content in files.items():
            path = root / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content)
        return root

    return _write


# Outputs of the go tool for a module with one replaced dependency.
GO_VERSION = "go version go1.21.5 linux/amd64"

GO_LIST_JSON = """\
{
\t"Path": "example.com/app",
\t"Main": true
}

{
\t"Path": "github.com/libX",
\t"Version": "v1.0.0",
\t"Replace": {
\t\t"Path": "github.com/libX",
\t\t"Version": "v2.0.0"
\t}
}
"""

GO_MOD_GRAPH = """\
example.com/app github.com/libX@v1.0.0
example.com/app github.com/libZ@v0.3.0
github.com/libX@v1.0.0 github.com/libZ@v0.3.0
"""


@pytest.fixture
def go_responses() -> dict[tuple[str, ...], str]:
    return {
        ("list", "-m"): "example.com/app\n",
        ("version",): GO_VERSION,
        ("list", "-mod=readonly", "-m", "-u", "-json", "all"): GO_LIST_JSON,
        ("mod", "graph"): GO_MOD_GRAPH,
    }
