"""
Launch specs for platform services and clients.

A LaunchSpec is the unit handed to the runtime. It captures everything the
runtime needs to spawn a unit: command, argument vector, environment,
exposed port, retry budget and secrets. Specs are frozen and handed over
by value; the runtime never holds a reference back to the server.

All services are launched as `micro service [global flags] <name>`,
clients as `micro <name>`.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, Optional, Sequence, Tuple

from microplatform.auth import PRIVATE_KEY_SECRET, PUBLIC_KEY_SECRET, AuthProvider
from microplatform.environ import PROFILE_ENV, PROXY_ENV


# Services managed by the server, in registration order
SERVICES: Tuple[str, ...] = (
    "registry",  # :8000
    "broker",    # :8003
    "network",   # :8443
    "runtime",   # :8088
    "config",    # :8001
    "store",     # :8002
    "events",    # :unset
    "auth",      # :8010
    "proxy",     # :8081
    "api",       # :8080
)

# Clients managed by the server
CLIENTS: Tuple[str, ...] = (
    "web",
)

SERVICE_COMMAND = "service"

# The network service is the proxy every other service dials
NETWORK_SERVICE = "network"
DEFAULT_PROXY_ADDRESS = "127.0.0.1:8443"

# Only honoured by isolated runtimes (e.g. one container per unit); local
# units share a host and would conflict on it
SERVICE_PORT = "8080"

DEFAULT_RETRIES = 10

# Version pinning is not in effect; runtimes treat this as the latest release
LATEST_VERSION = "latest"


@dataclass(frozen=True)
class LaunchSpec:
    """
    A launchable unit submitted to the runtime.

    Attributes:
        name: Service or client name
        command: Executable to run
        args: Argument vector passed to the command
        env: KEY=VALUE entries added to the unit's environment
        port: Port the unit binds in isolated runtimes (None for clients)
        retries: Number of restarts the runtime may attempt on crash
        secrets: Secret name -> value injected into the unit
        version: Version sentinel, always "latest"
    """
    name: str
    command: str
    args: Tuple[str, ...] = ()
    env: Tuple[str, ...] = ()
    port: Optional[str] = None
    retries: int = DEFAULT_RETRIES
    secrets: Dict[str, str] = field(default_factory=dict)
    version: str = LATEST_VERSION

    def env_dict(self) -> Dict[str, str]:
        """Environment entries as a mapping (later entries win)."""
        result = {}
        for entry in self.env:
            key, _, value = entry.partition("=")
            result[key] = value
        return result


class LaunchSpecBuilder:
    """
    Builds launch specs for the services and clients of one server run.

    Pure data assembly; nothing here raises. Failures surface when the
    spec is submitted to the runtime.
    """

    def __init__(
        self,
        command: str,
        auth: AuthProvider,
        profile: Optional[str] = None,
        proxy_address: Optional[str] = None,
        global_args: Sequence[str] = (),
    ):
        """
        Initialize the builder.

        Args:
            command: Path of the executable every unit runs (the current program)
            auth: Auth provider supplying the key pair for service secrets
            profile: Profile handed to every service as MICRO_PROFILE
            proxy_address: Proxy handed to services as MICRO_PROXY
            global_args: Re-serialized global flags of the parent invocation
        """
        self.command = command
        self.auth = auth
        self.profile = profile
        self.proxy_address = proxy_address
        self.global_args = tuple(global_args)

    def build_service(self, name: str, base_env: Iterable[str]) -> LaunchSpec:
        """Build the launch spec for a platform service."""
        env = list(base_env)
        env.append(f"{PROFILE_ENV}={self.profile or ''}")

        # set the proxy address, default to the network running locally
        if name != NETWORK_SERVICE:
            proxy = self.proxy_address or DEFAULT_PROXY_ADDRESS
            env.append(f"{PROXY_ENV}={proxy}")

        args = (SERVICE_COMMAND, *self.global_args, name)

        keys = self.auth.key_pair()
        secrets = {
            PUBLIC_KEY_SECRET: keys.public_key,
            PRIVATE_KEY_SECRET: keys.private_key,
        }

        return LaunchSpec(
            name=name,
            command=self.command,
            args=args,
            env=tuple(env),
            port=SERVICE_PORT,
            retries=DEFAULT_RETRIES,
            secrets=secrets,
        )

    def build_client(self, name: str) -> LaunchSpec:
        """Build the launch spec for a client."""
        return LaunchSpec(
            name=name,
            command=self.command,
            args=(name,),
            retries=DEFAULT_RETRIES,
        )
