"""
Runtime backends for microplatform.

The server only talks to the Runtime protocol:
- local: units run as child processes of the server
- noop: nothing is spawned; useful for dry runs and tests

Usage:
    from microplatform.runtime import get_runtime

    runtime = get_runtime("local", stop_timeout=5.0)
"""

from typing import Any, Callable, Dict

from microplatform.errors import ConfigError
from microplatform.runtime.base import NoOpRuntime, Runtime
from microplatform.runtime.local import LocalRuntime


RUNTIMES: Dict[str, Callable[..., Runtime]] = {
    "local": LocalRuntime,
    "noop": NoOpRuntime,
}


def get_runtime(name: str, **kwargs: Any) -> Runtime:
    """
    Build a runtime by backend name.

    Args:
        name: Backend name (local, noop)
        **kwargs: Passed to the local runtime; ignored by noop

    Raises:
        ConfigError: If no runtime is registered under name
    """
    if name not in RUNTIMES:
        raise ConfigError(
            f"Unknown runtime: {name}. Available: {', '.join(sorted(RUNTIMES))}"
        )

    if name == "noop":
        return NoOpRuntime()
    return RUNTIMES[name](**kwargs)


__all__ = [
    "Runtime",
    "NoOpRuntime",
    "LocalRuntime",
    "RUNTIMES",
    "get_runtime",
]
