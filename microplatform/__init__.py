"""
microplatform - Platform orchestrator

Boots the platform services and clients on an execution runtime and
supervises them until the process receives a termination signal.
"""

__version__ = "0.1.0"
__author__ = "Local Platform Team"


__all__ = ["PlatformConfig", "load_config", "get_micro_home", "Server", "ServerOptions"]

from .config import PlatformConfig, load_config, get_micro_home
from .server import Server, ServerOptions
