"""Abstract base class for detectables."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path

from z_detector.environment import ExtractionEnvironment
from z_detector.models.evaluation import DetectableResult, Extraction


@dataclass(frozen=True)
class DetectableEnvironment:
    """What a detectable is told about the directory it is built for."""

    directory: Path


class Detectable(ABC):
    """
    Recognizes one ecosystem in one directory and extracts its dependencies.

    Instances are created by a rule's factory, one per evaluation.
    ``applicable`` must only read the filesystem. ``extractable`` checks
    preconditions (tools, readable files) without doing the expensive work.
    ``extract`` does the work and reports problems as an :class:`Extraction`
    rather than raising.
    """

    def __init__(self, environment: DetectableEnvironment) -> None:
        self.environment = environment

    @property
    def directory(self) -> Path:
        return self.environment.directory

    @abstractmethod
    def applicable(self) -> DetectableResult:
        """Whether the ecosystem's marker files are present."""
        ...

    @abstractmethod
    def extractable(self) -> DetectableResult:
        """Whether extraction can run here."""
        ...

    @abstractmethod
    def extract(self, extraction_environment: ExtractionEnvironment) -> Extraction:
        """Produce code locations for this directory."""
        ...

    def file_result(self, filename: str) -> DetectableResult:
        """Pass when *filename* exists in the directory."""
        if (self.directory / filename).is_file():
            return DetectableResult.ok(f"Found {filename}.")
        return DetectableResult.fail(f"No {filename} was located in {self.directory}.")
