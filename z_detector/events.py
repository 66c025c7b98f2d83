"""Event publishing for detector runs.

Listeners subscribe per :class:`EventKind`; every kind has one payload
type, checked on publish. Dispatch is synchronous on the calling thread.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable

from z_detector.models.detector import DetectorStatus
from z_detector.models.evaluation import DetectorEvaluation
from z_detector.tree import DetectorEvaluationTree

logger = logging.getLogger(__name__)


class EventKind(Enum):
    SEARCH_COMPLETED = "search_completed"
    PREPARATION_COMPLETED = "preparation_completed"
    EXTRACTION_COUNT = "extraction_count"
    EXTRACTION_STARTED = "extraction_started"
    EXTRACTION_ENDED = "extraction_ended"
    EXTRACTIONS_COMPLETED = "extractions_completed"
    STATUS_SUMMARY = "status_summary"
    DETECTORS_COMPLETE = "detectors_complete"


def _payload_types() -> dict[EventKind, type]:
    from z_detector.aggregator import DetectorToolResult

    return {
        EventKind.SEARCH_COMPLETED: DetectorEvaluationTree,
        EventKind.PREPARATION_COMPLETED: DetectorEvaluationTree,
        EventKind.EXTRACTION_COUNT: int,
        EventKind.EXTRACTION_STARTED: DetectorEvaluation,
        EventKind.EXTRACTION_ENDED: DetectorEvaluation,
        EventKind.EXTRACTIONS_COMPLETED: DetectorEvaluationTree,
        EventKind.STATUS_SUMMARY: DetectorStatus,
        EventKind.DETECTORS_COMPLETE: DetectorToolResult,
    }


@dataclass(frozen=True)
class Event:
    kind: EventKind
    payload: Any


Listener = Callable[[Event], None]


class EventSystem:
    """Listener registry keyed by event kind."""

    def __init__(self) -> None:
        self._listeners: dict[EventKind, list[Listener]] = {kind: [] for kind in EventKind}
        self._payload_types: dict[EventKind, type] | None = None

    def subscribe(self, kind: EventKind, listener: Listener) -> None:
        self._listeners[kind].append(listener)

    def subscribe_all(self, listener: Listener) -> None:
        for kind in EventKind:
            self.subscribe(kind, listener)

    def listeners(self, kind: EventKind) -> list[Listener]:
        return list(self._listeners[kind])

    def publish(self, kind: EventKind, payload: Any) -> None:
        """Deliver *payload* to every listener of *kind*.

        Raises:
            TypeError: the payload does not match the kind's payload type.
        """
        if self._payload_types is None:
            self._payload_types = _payload_types()
        expected = self._payload_types[kind]
        if not isinstance(payload, expected) or (expected is int and isinstance(payload, bool)):
            raise TypeError(
                f"{kind.name} expects {expected.__name__}, got {type(payload).__name__}"
            )

        event = Event(kind=kind, payload=payload)
        for listener in self._listeners[kind]:
            try:
                listener(event)
            except Exception:
                logger.debug("Event listener error for %s", kind.name, exc_info=True)

