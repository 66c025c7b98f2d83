"""Custom exceptions for z-detector."""

from __future__ import annotations

from pathlib import Path


class DetectorError(Exception):
    """Base exception for all detector errors."""


class DirectoryListError(DetectorError):
    """Raised when a directory cannot be listed while building the search tree.

    Fatal for the whole run: a partial tree would silently under-report.
    """

    def __init__(self, directory: Path, cause: OSError | None = None):
        self.directory = directory
        self.cause = cause
        detail = f": {cause}" if cause else ""
        super().__init__(f"Unable to list directory {directory}{detail}")


class ExecutableRunnerError(DetectorError):
    """Raised when an external executable cannot be started."""


class DetectableError(DetectorError):
    """Raised by a detectable when its extraction cannot proceed."""


class EvaluationStateError(DetectorError):
    """Raised on an illegal phase transition of a detector evaluation."""
