"""External process execution and executable lookup."""

from __future__ import annotations

import logging
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path

from z_detector.exceptions import ExecutableRunnerError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExecutableOutput:
    """Captured result of one process run. Exit codes are not interpreted here."""

    return_code: int
    standard_output: str
    error_output: str = ""

    @property
    def standard_output_lines(self) -> list[str]:
        return self.standard_output.splitlines()


class ExecutableRunner:
    """Run a process synchronously and capture its output in memory."""

    def __init__(self, timeout: float | None = None) -> None:
        self._timeout = timeout

    def execute(self, directory: Path, executable: Path, *args: str) -> ExecutableOutput:
        """Run ``executable args...`` in *directory* and wait for it to exit.

        Raises:
            ExecutableRunnerError: the process could not be started or timed out.
        """
        cmd = [str(executable), *args]
        logger.debug("Running %s in %s", " ".join(cmd), directory)
        try:
            result = subprocess.run(
                cmd,
                cwd=str(directory),
                capture_output=True,
                text=True,
                timeout=self._timeout,
            )
        except (OSError, subprocess.SubprocessError) as exc:
            raise ExecutableRunnerError(f"Failed to run {' '.join(cmd)}: {exc}") from exc

        if result.returncode != 0:
            logger.debug("%s exited with %d: %s", cmd[0], result.returncode, result.stderr.strip())
        return ExecutableOutput(
            return_code=result.returncode,
            standard_output=result.stdout,
            error_output=result.stderr,
        )


class ExecutableResolver:
    """Locate tool executables: explicit override first, then ``PATH``."""

    def __init__(self, overrides: dict[str, str | None] | None = None) -> None:
        self._overrides = {k: v for k, v in (overrides or {}).items() if v}

    def resolve(self, name: str) -> Path | None:
        override = self._overrides.get(name)
        if override:
            path = Path(override)
            if path.is_file():
                return path
            logger.warning("Configured %s executable not found: %s", name, override)
            return None
        found = shutil.which(name)
        return Path(found) if found else None
