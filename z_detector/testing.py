"""Test doubles for z_detector: use in integration tests.

Usage::

    from z_detector.testing import EventRecorder, FakeExecutableRunner

    runner = FakeExecutableRunner({("version",): "go version go1.21.0 linux/amd64"})
    rule_set = create_default_rule_set(runner=runner, resolver=FakeExecutableResolver())
"""

from __future__ import annotations

from pathlib import Path

from z_detector.events import Event, EventKind, EventSystem
from z_detector.executable import ExecutableOutput, ExecutableResolver, ExecutableRunner


class FakeExecutableRunner(ExecutableRunner):
    """Drop-in ExecutableRunner that answers from a script instead of spawning.

    Parameters
    ----------
    responses:
        Maps an argument tuple (without the executable) to either a string
        (stdout, exit code 0) or a full :class:`ExecutableOutput`. Unknown
        argument tuples exit with code 1.
    """

    def __init__(self, responses: dict[tuple[str, ...], str | ExecutableOutput] | None = None) -> None:
        super().__init__()
        self.responses = dict(responses or {})
        self._calls: list[tuple[Path, Path, tuple[str, ...]]] = []

    @property
    def calls(self) -> list[tuple[Path, Path, tuple[str, ...]]]:
        """(directory, executable, args) per invocation."""
        return self._calls

    @property
    def invoked_args(self) -> list[tuple[str, ...]]:
        return [args for _, _, args in self._calls]

    def execute(self, directory: Path, executable: Path, *args: str) -> ExecutableOutput:
        self._calls.append((directory, executable, args))
        response = self.responses.get(args)
        if response is None:
            return ExecutableOutput(1, "", f"unexpected invocation: {' '.join(args)}")
        if isinstance(response, ExecutableOutput):
            return response
        return ExecutableOutput(0, response)


class FakeExecutableResolver(ExecutableResolver):
    """Resolves every name to ``/usr/bin/<name>`` unless listed as missing."""

    def __init__(self, missing: set[str] | None = None) -> None:
        super().__init__()
        self.missing = missing or set()

    def resolve(self, name: str) -> Path | None:
        if name in self.missing:
            return None
        return Path("/usr/bin") / name


class EventRecorder:
    """Subscribe to every event kind and keep what was published."""

    def __init__(self, events: EventSystem) -> None:
        self.events: list[Event] = []
        events.subscribe_all(self.events.append)

    @property
    def kinds(self) -> list[EventKind]:
        return [event.kind for event in self.events]

    def payloads(self, kind: EventKind) -> list:
        return [event.payload for event in self.events if event.kind is kind]
