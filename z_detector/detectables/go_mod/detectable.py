"""Go module detectable: applies to directories holding a go.mod."""

from __future__ import annotations

from pathlib import Path

from z_detector.detectables.base import Detectable, DetectableEnvironment
from z_detector.detectables.go_mod.extractor import GoModCliExtractor
from z_detector.environment import ExtractionEnvironment
from z_detector.executable import ExecutableResolver
from z_detector.models.evaluation import DetectableResult, Extraction

GO_MOD_FILENAME = "go.mod"


class GoModCliDetectable(Detectable):
    def __init__(
        self,
        environment: DetectableEnvironment,
        resolver: ExecutableResolver,
        extractor: GoModCliExtractor,
    ) -> None:
        super().__init__(environment)
        self._resolver = resolver
        self._extractor = extractor
        self._go_exe: Path | None = None

    def applicable(self) -> DetectableResult:
        return self.file_result(GO_MOD_FILENAME)

    def extractable(self) -> DetectableResult:
        self._go_exe = self._resolver.resolve("go")
        if self._go_exe is None:
            return DetectableResult.fail("No go executable was found.")
        return DetectableResult.ok(f"Found go executable {self._go_exe}.")

    def extract(self, extraction_environment: ExtractionEnvironment) -> Extraction:
        if self._go_exe is None:
            return Extraction.failure("The go executable was not resolved before extraction.")
        return self._extractor.extract(self.directory, self._go_exe)
