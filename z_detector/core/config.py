"""Runtime settings read from the environment.

Every value has a CLI flag that overrides it; see ``z_detector.cli``.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

DEFAULT_MAX_DEPTH = 0

# Directories never worth descending into when looking for build files.
DEFAULT_EXCLUDED_DIRS: tuple[str, ...] = (
    ".git",
    ".svn",
    ".hg",
    "node_modules",
    "__pycache__",
    ".tox",
    ".venv",
    "venv",
    ".idea",
)


def _env_int(key: str, default: int) -> int:
    return int(os.environ.get(key, default))


def _env_float(key: str) -> float | None:
    value = os.environ.get(key)
    return float(value) if value else None


def _env_bool(key: str, default: bool = False) -> bool:
    value = os.environ.get(key)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_list(key: str, default: tuple[str, ...]) -> list[str]:
    value = os.environ.get(key)
    if value is None:
        return list(default)
    return [item.strip() for item in value.split(",") if item.strip()]


@dataclass
class DetectorSettings:
    """Settings for one detector run."""

    max_depth: int = DEFAULT_MAX_DEPTH
    excluded_directory_names: list[str] = field(
        default_factory=lambda: list(DEFAULT_EXCLUDED_DIRS)
    )
    follow_symlinks: bool = False
    go_path: str | None = None
    output_dir: Path | None = None
    project_detector: str | None = None
    process_timeout: float | None = None

    @classmethod
    def from_env(cls) -> DetectorSettings:
        """Build settings from ``Z_DETECTOR_*`` environment variables."""
        output_dir = os.environ.get("Z_DETECTOR_OUTPUT_DIR")
        return cls(
            max_depth=_env_int("Z_DETECTOR_MAX_DEPTH", DEFAULT_MAX_DEPTH),
            excluded_directory_names=_env_list(
                "Z_DETECTOR_EXCLUDED_DIRS", DEFAULT_EXCLUDED_DIRS
            ),
            follow_symlinks=_env_bool("Z_DETECTOR_FOLLOW_SYMLINKS"),
            go_path=os.environ.get("Z_DETECTOR_GO_PATH") or None,
            output_dir=Path(output_dir) if output_dir else None,
            project_detector=os.environ.get("Z_DETECTOR_PROJECT_DETECTOR") or None,
            process_timeout=_env_float("Z_DETECTOR_PROCESS_TIMEOUT"),
        )
