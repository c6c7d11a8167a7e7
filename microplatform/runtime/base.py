"""
Runtime protocol and the no-op runtime.

A runtime creates, starts and stops platform units. The server only
configures units (command, args, env, port, retries, secrets); scheduling
and restart-on-crash are the runtime's business.
"""

import logging
from typing import Protocol, runtime_checkable

from microplatform.errors import RuntimeFailure
from microplatform.launch import LaunchSpec


logger = logging.getLogger(__name__)


@runtime_checkable
class Runtime(Protocol):
    """
    Protocol for execution runtimes.

    Failures are raised as exceptions (RuntimeFailure by convention).
    """

    def create(self, spec: LaunchSpec) -> None:
        """
        Register a unit with the runtime.

        Args:
            spec: Launch spec of the unit

        Raises:
            RuntimeFailure: If the unit cannot be registered
        """
        ...

    def start(self) -> None:
        """Start every registered unit."""
        ...

    def stop(self) -> None:
        """Stop every running unit."""
        ...


class NoOpRuntime:
    """
    No-op runtime for dry runs and testing.

    Records what it is asked to do without spawning anything.
    """

    def __init__(self) -> None:
        self.created: list[LaunchSpec] = []
        self.started = False
        self.stopped = False

    def create(self, spec: LaunchSpec) -> None:
        if any(existing.name == spec.name for existing in self.created):
            raise RuntimeFailure(f"Unit already registered: {spec.name}")
        self.created.append(spec)
        logger.debug(f"[noop] created {spec.name}: {' '.join(spec.args)}")

    def start(self) -> None:
        self.started = True
        logger.info(f"[noop] started {len(self.created)} units")

    def stop(self) -> None:
        self.stopped = True
        logger.info("[noop] stopped")
