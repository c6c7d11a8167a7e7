"""
Error classes for microplatform.

These error types mark the boundaries where the CLI turns a failure into
an exit status:
- ConfigError: Invalid or unreadable configuration
- RuntimeFailure: The execution runtime could not create, start or stop a unit
- UnitNotFoundError: No installed implementation for a service or client name

The orchestrator never retries. Retry semantics belong to the runtime,
which receives a retry budget on every launch spec.
"""


class PlatformError(Exception):
    """Base exception for microplatform."""
    pass


class ConfigError(PlatformError):
    """Configuration validation error."""
    pass


class RuntimeFailure(PlatformError):
    """
    Runtime operation failed.

    Examples:
    - Unit already registered under the same name
    - Executable not found when spawning a unit
    - Unknown runtime backend requested
    """
    pass


class UnitNotFoundError(PlatformError):
    """
    No implementation installed for a service or client.

    Services and clients are provided by installed packages through
    entry points. Raised when a name has no matching entry point.
    """

    def __init__(self, group: str, name: str):
        self.group = group
        self.name = name
        super().__init__(f"No implementation registered for '{name}' in {group}")
