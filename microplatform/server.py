"""
The micro server: boots the whole platform and supervises its lifecycle.

Server.run() walks one fixed sequence:

    Idle -> Registering -> Running -> Stopping -> Terminated

1. Filter the MICRO_* environment handed down to services
2. Build and submit a launch spec for every service, then every client
3. Start the runtime
4. Block until a termination signal arrives
5. Stop the runtime and wait a short grace period

Registration is fail-fast with no rollback: the first unit the runtime
rejects aborts the run, and the units submitted before it stay registered
with the runtime. That partial state is an accepted outcome.
"""

import logging
import os
import signal
import sys
import time
from dataclasses import dataclass
from typing import Callable, Mapping, Optional, Sequence, Tuple

from microplatform.auth import AuthProvider
from microplatform.environ import filter_environment
from microplatform.launch import CLIENTS, SERVICES, LaunchSpec, LaunchSpecBuilder
from microplatform.runtime import Runtime
from microplatform.signals import SignalWaiter


logger = logging.getLogger(__name__)

DEFAULT_ADDRESS = ":10001"
DEFAULT_IMAGE = "micro/micro:latest"
GRACE_PERIOD_SECONDS = 1.0


@dataclass(frozen=True)
class ServerOptions:
    """Resolved options of one `micro server` invocation."""
    address: str = DEFAULT_ADDRESS
    image: str = DEFAULT_IMAGE
    profile: Optional[str] = None
    proxy_address: Optional[str] = None
    global_args: Tuple[str, ...] = ()


class Server:
    """
    Orchestrates the platform services and clients on a runtime.

    Every collaborator is passed in, so tests can substitute fakes for the
    runtime, auth provider, signal source, environment and clock.
    """

    def __init__(
        self,
        runtime: Runtime,
        auth: AuthProvider,
        signal_waiter: Optional[SignalWaiter] = None,
        services: Sequence[str] = SERVICES,
        clients: Sequence[str] = CLIENTS,
        command: Optional[str] = None,
        environ: Optional[Mapping[str, str]] = None,
        grace_period: float = GRACE_PERIOD_SECONDS,
        sleep: Optional[Callable[[float], None]] = None,
    ):
        """
        Initialize the server.

        Args:
            runtime: Runtime receiving the launch specs
            auth: Auth provider supplying service secrets
            signal_waiter: Signal source the server blocks on
            services: Service names in registration order
            clients: Client names in registration order
            command: Executable every unit runs (defaults to sys.argv[0])
            environ: Environment snapshot to propagate (defaults to os.environ)
            grace_period: Seconds to wait after stopping the runtime
            sleep: Sleep function used for the grace period (defaults to time.sleep)
        """
        self.runtime = runtime
        self.auth = auth
        self.signal_waiter = signal_waiter or SignalWaiter()
        self.services = tuple(services)
        self.clients = tuple(clients)
        self.command = command or sys.argv[0]
        self.environ = environ
        self.grace_period = grace_period
        self.sleep = sleep or time.sleep

    def run(self, options: Optional[ServerOptions] = None) -> None:
        """
        Run the entire platform until a termination signal arrives.

        Args:
            options: Resolved invocation options

        Raises:
            Exception: The first error raised by runtime.create(), unchanged.
                Units registered before it remain registered.
            Exception: The error raised by runtime.start()
        """
        options = options or ServerOptions()

        logger.info("Starting server", extra={"event": "server_starting"})
        logger.debug(f"Server address {options.address}, image {options.image}")

        envvars = filter_environment(os.environ if self.environ is None else self.environ)

        builder = LaunchSpecBuilder(
            command=self.command,
            auth=self.auth,
            profile=options.profile,
            proxy_address=options.proxy_address,
            global_args=options.global_args,
        )

        for service in self.services:
            self._register(builder.build_service(service, envvars))

        for client in self.clients:
            self._register(builder.build_client(client))

        self.signal_waiter.install()
        try:
            logger.info("Starting server runtime", extra={"event": "runtime_starting"})
            try:
                self.runtime.start()
            except Exception as e:
                logger.critical(
                    f"Failed to start server runtime: {e}",
                    extra={"event": "runtime_start_failed"},
                )
                raise

            signum = self.signal_waiter.wait()
        finally:
            self.signal_waiter.restore()

        logger.info(
            f"Received {_signal_name(signum)}, stopping server",
            extra={"event": "server_stopping"},
        )

        # best effort: stop failures do not change the outcome of the run
        try:
            self.runtime.stop()
        except Exception as e:
            logger.warning(f"Failed to stop server runtime: {e}", extra={"event": "runtime_stop_failed"})

        logger.info("Stopped server", extra={"event": "server_stopped"})

        self.sleep(self.grace_period)

    def _register(self, spec: LaunchSpec) -> None:
        logger.info(f"Registering {spec.name}", extra={"service": spec.name, "event": "unit_registering"})
        try:
            self.runtime.create(spec)
        except Exception as e:
            logger.error(
                f"Failed to create runtime environment: {e}",
                extra={"service": spec.name, "event": "unit_create_failed"},
            )
            raise


def _signal_name(signum: int) -> str:
    try:
        return signal.Signals(signum).name
    except ValueError:
        return f"signal {signum}"
