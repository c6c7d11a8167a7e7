"""
Environment propagation for platform units.

Only MICRO_* variables are handed down to the services the server
launches. MICRO_PROFILE and MICRO_PROXY are excluded here because the
launch spec builder computes a per-service value for each of them.
"""

import os
from typing import List, Mapping, Optional


ENV_PREFIX = "MICRO_"

PROFILE_ENV = "MICRO_PROFILE"
PROXY_ENV = "MICRO_PROXY"

RESERVED_ENV = frozenset({PROFILE_ENV, PROXY_ENV})


def filter_environment(environ: Optional[Mapping[str, str]] = None) -> List[str]:
    """
    Extract the platform environment as KEY=VALUE entries.

    Entries that do not split into exactly one key and one value on "="
    are dropped silently, so a value containing "=" is not propagated.

    Args:
        environ: Environment mapping (defaults to os.environ)

    Returns:
        KEY=VALUE strings in the order the environment enumerates them
    """
    if environ is None:
        environ = os.environ

    envvars = []
    for key, value in environ.items():
        entry = f"{key}={value}"
        comps = entry.split("=")
        if len(comps) != 2:
            continue

        if not comps[0].startswith(ENV_PREFIX):
            continue

        # set per service by the launch spec builder
        if comps[0] in RESERVED_ENV:
            continue

        envvars.append(entry)

    return envvars
