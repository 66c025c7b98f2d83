"""Detector identities and per-ecosystem run status."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class DetectorType(Enum):
    """Ecosystem identity a detector rule reports under."""

    BITBAKE = "bitbake"
    CARGO = "cargo"
    COCOAPODS = "cocoapods"
    CONDA = "conda"
    GO_DEP = "go_dep"
    GO_MOD = "go_mod"
    GO_VENDOR = "go_vendor"
    GRADLE = "gradle"
    MAVEN = "maven"
    NPM = "npm"
    NUGET = "nuget"
    PIP = "pip"
    POETRY = "poetry"
    YARN = "yarn"


class StatusType(Enum):
    SUCCESS = "success"
    FAILURE = "failure"


@dataclass(frozen=True)
class DetectorStatus:
    """Outcome of one ecosystem across the whole run."""

    detector_type: DetectorType
    status: StatusType


@dataclass(frozen=True)
class NameVersion:
    """Suggested project name and version."""

    name: str
    version: str | None = None
