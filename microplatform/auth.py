"""
Auth key material for platform services.

Every service receives the platform key pair as two secrets. The
orchestrator only reads the current pair; issuing and rotating keys is
the auth service's job.
"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional, Protocol, runtime_checkable

from microplatform.config import PlatformConfig


PUBLIC_KEY_SECRET = "MICRO_AUTH_PUBLIC_KEY"
PRIVATE_KEY_SECRET = "MICRO_AUTH_PRIVATE_KEY"


@dataclass(frozen=True)
class KeyPair:
    """Public and private key material."""
    public_key: str = ""
    private_key: str = ""


@runtime_checkable
class AuthProvider(Protocol):
    """
    Protocol for the authentication collaborator.

    Keeps the orchestrator free of any auth implementation details so the
    provider can be swapped in tests.
    """

    def key_pair(self) -> KeyPair:
        """Return the currently configured key pair."""
        ...


class StaticAuth:
    """Auth provider holding a fixed key pair."""

    def __init__(self, keys: Optional[KeyPair] = None):
        self._keys = keys or KeyPair()

    def key_pair(self) -> KeyPair:
        return self._keys


def load_auth(
    config: PlatformConfig,
    environ: Optional[Mapping[str, str]] = None,
) -> StaticAuth:
    """
    Build the auth provider for a server run.

    Keys come from MICRO_AUTH_PUBLIC_KEY / MICRO_AUTH_PRIVATE_KEY when set,
    otherwise from the config file.
    """
    if environ is None:
        environ = os.environ

    return StaticAuth(KeyPair(
        public_key=environ.get(PUBLIC_KEY_SECRET) or config.auth_public_key,
        private_key=environ.get(PRIVATE_KEY_SECRET) or config.auth_private_key,
    ))
