"""Go module extraction through the ``go`` command line."""

from __future__ import annotations

import logging
import re
from pathlib import Path

from z_detector.detectables.go_mod.graph_parser import GoModGraphParser
from z_detector.detectables.go_mod.replacements import apply_replacements, extract_replacements
from z_detector.exceptions import DetectableError
from z_detector.executable import ExecutableRunner
from z_detector.models.evaluation import Extraction

logger = logging.getLogger(__name__)

_VERSION_RE = re.compile(r"\d+\.[\d.]+")

# `go list -mod=readonly` is understood from go 1.14 on
_READONLY_MIN_VERSION = (1, 14)


def parse_go_version(version_output: list[str]) -> tuple[int, int] | None:
    """Extract ``(major, minor)`` from ``go version`` output.

    Only the first line is inspected, e.g.
    ``go version go1.21.5 linux/amd64`` -> ``(1, 21)``.
    """
    if not version_output:
        return None
    match = _VERSION_RE.search(version_output[0])
    if not match:
        return None
    parts = match.group().split(".")
    major = int(parts[0])
    minor = int(parts[1]) if len(parts) > 1 and parts[1] else 0
    return major, minor


class GoModCliExtractor:
    """
    Run the go tool and turn its output into a code location.

    Steps:
        go list -m                         -> workspace modules (graph roots)
        go version                         -> decides the listing flags
        go list [-mod=readonly] -m -u -json all -> replace directives
        go mod graph                       -> edges, with replacements applied

    No project name/version is derived here.
    """

    def __init__(
        self,
        runner: ExecutableRunner,
        parser: GoModGraphParser | None = None,
    ) -> None:
        self._runner = runner
        self._parser = parser or GoModGraphParser()

    def extract(self, directory: Path, go_exe: Path) -> Extraction:
        try:
            list_output = self._execute(
                directory, go_exe, "Querying go for the list of modules failed: ", "list", "-m"
            )
            list_json_output = self._list_json_output(directory, go_exe)
            if list_json_output:
                graph_output = self._graph_output_with_replacements(
                    directory, go_exe, list_json_output
                )
            else:
                graph_output = self._execute(
                    directory, go_exe, "Querying for the go mod graph failed: ", "mod", "graph"
                )
            code_location = self._parser.parse_list_and_graph(
                list_output, graph_output, source_path=directory
            )
            return Extraction.success([code_location])
        except Exception as exc:
            logger.debug("Go mod extraction failed in %s", directory, exc_info=True)
            return Extraction.exception(exc)

    def _execute(
        self, directory: Path, go_exe: Path, failure_message: str, *args: str
    ) -> list[str]:
        output = self._runner.execute(directory, go_exe, *args)
        if output.return_code != 0:
            raise DetectableError(f"{failure_message}{output.return_code}")
        return output.standard_output_lines

    def _list_json_output(self, directory: Path, go_exe: Path) -> list[str]:
        version_output = self._execute(
            directory, go_exe, "Querying for the version failed: ", "version"
        )
        version = parse_go_version(version_output)
        if version is None:
            logger.debug("No go version found in %r; skipping replacements", version_output)
            return []
        major, minor = version
        if major > _READONLY_MIN_VERSION[0] or (
            major == _READONLY_MIN_VERSION[0] and minor >= _READONLY_MIN_VERSION[1]
        ):
            args = ("list", "-mod=readonly", "-m", "-u", "-json", "all")
        else:
            args = ("list", "-m", "-u", "-json", "all")
        return self._execute(
            directory, go_exe, "Querying for the go module listing failed: ", *args
        )

    def _graph_output_with_replacements(
        self, directory: Path, go_exe: Path, list_json_output: list[str]
    ) -> list[str]:
        graph_output = self._execute(
            directory, go_exe, "Querying for the go mod graph failed: ", "mod", "graph"
        )
        replacements = extract_replacements(list_json_output)
        if replacements:
            logger.debug("Applying %d go module replacements", len(replacements))
        return apply_replacements(graph_output, replacements)
