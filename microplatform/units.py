"""
Discovery of service and client implementations.

The server launches `micro service <name>` and `micro <client>`; the code
behind those names is provided by installed packages via entrypoints:

    [project.entry-points."microplatform.services"]
    registry = "my_registry.main:run"

    [project.entry-points."microplatform.clients"]
    web = "my_web.main:run"

Each entrypoint is a zero-argument callable. Configuration reaches it
through the MICRO_* environment set up by the server.
"""

import logging
from importlib.metadata import EntryPoint, entry_points
from typing import Callable, Dict

from microplatform.errors import UnitNotFoundError


logger = logging.getLogger(__name__)

SERVICE_GROUP = "microplatform.services"
CLIENT_GROUP = "microplatform.clients"


def discover_units(group: str) -> Dict[str, EntryPoint]:
    """
    Discover unit implementations registered under an entrypoint group.

    Entrypoints are not loaded; callers load the one they run.

    Returns:
        {"registry": <EntryPoint>, ...}
    """
    return {ep.name: ep for ep in entry_points().select(group=group)}


def get_unit(group: str, name: str) -> Callable[[], None]:
    """
    Load the implementation of a unit.

    Raises:
        UnitNotFoundError: If nothing is registered under name
    """
    units = discover_units(group)
    if name not in units:
        raise UnitNotFoundError(group, name)
    return units[name].load()


def run_unit(group: str, name: str) -> None:
    """Run a service or client in the current process."""
    unit = get_unit(group, name)

    logger.info(f"Running {name}", extra={"service": name, "event": "unit_running"})
    unit()
