"""
Local runtime: every unit runs as a child process of the server.

Units share the host, so the launch spec port is ignored. Secrets are
exported to the child as environment variables. Restarting crashed units
is not handled here; the retry budget is only carried on the launch spec.
"""

import logging
import os
import subprocess
from typing import Callable, Dict, Mapping, Optional

from microplatform.errors import RuntimeFailure
from microplatform.launch import LaunchSpec


logger = logging.getLogger(__name__)


class LocalRuntime:
    """Runtime spawning units as local subprocesses."""

    def __init__(
        self,
        stop_timeout: float = 5.0,
        environ: Optional[Mapping[str, str]] = None,
        popen: Callable[..., subprocess.Popen] = subprocess.Popen,
    ):
        """
        Initialize the local runtime.

        Args:
            stop_timeout: Seconds to wait for a unit to exit after SIGTERM before killing it
            environ: Base environment of every unit (defaults to os.environ at start time)
            popen: Process factory, replaceable in tests
        """
        self.stop_timeout = stop_timeout
        self._environ = environ
        self._popen = popen
        self._specs: Dict[str, LaunchSpec] = {}
        self._processes: Dict[str, subprocess.Popen] = {}

    @property
    def specs(self) -> Dict[str, LaunchSpec]:
        """Registered launch specs by name, in registration order."""
        return dict(self._specs)

    @property
    def processes(self) -> Dict[str, subprocess.Popen]:
        """Running child processes by unit name."""
        return dict(self._processes)

    def create(self, spec: LaunchSpec) -> None:
        if spec.name in self._specs:
            raise RuntimeFailure(f"Unit already registered: {spec.name}")
        self._specs[spec.name] = spec
        logger.debug(
            f"Created {spec.name} (version {spec.version}, retries {spec.retries})",
            extra={"service": spec.name, "event": "unit_created"},
        )

    def start(self) -> None:
        """
        Spawn every registered unit not already running.

        If a unit fails to spawn, the units spawned so far are stopped
        before the error propagates.

        Raises:
            RuntimeFailure: If a unit could not be spawned
        """
        for name, spec in self._specs.items():
            if name in self._processes:
                continue
            try:
                self._processes[name] = self._spawn(spec)
            except RuntimeFailure:
                logger.error(
                    f"Failed to start {name}, stopping {len(self._processes)} started unit(s)",
                    extra={"service": name, "event": "unit_start_failed"},
                )
                self.stop()
                raise

    def stop(self) -> None:
        processes = list(self._processes.items())
        self._processes.clear()

        for name, proc in processes:
            if proc.poll() is None:
                proc.terminate()

        for name, proc in processes:
            try:
                proc.wait(timeout=self.stop_timeout)
            except subprocess.TimeoutExpired:
                logger.warning(
                    f"{name} did not exit within {self.stop_timeout}s, killing",
                    extra={"service": name, "event": "unit_killed"},
                )
                proc.kill()
                proc.wait()

            logger.info(
                f"Stopped {name}",
                extra={"service": name, "event": "unit_stopped", "metadata": {"returncode": proc.returncode}},
            )

    def build_env(self, spec: LaunchSpec) -> Dict[str, str]:
        """Environment of a unit: base environment, spec env, then secrets."""
        base = os.environ if self._environ is None else self._environ
        env = dict(base)
        env.update(spec.env_dict())
        env.update(spec.secrets)
        return env

    def _spawn(self, spec: LaunchSpec) -> subprocess.Popen:
        command = [spec.command, *spec.args]
        try:
            proc = self._popen(command, env=self.build_env(spec))
        except OSError as e:
            raise RuntimeFailure(f"Failed to start {spec.name}: {e}") from e

        logger.info(
            f"Started {spec.name} (pid {proc.pid})",
            extra={"service": spec.name, "event": "unit_started", "metadata": {"pid": proc.pid}},
        )
        return proc
