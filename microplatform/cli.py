"""
CLI interface for the micro platform.

Provides commands to run the whole platform (server), a single platform
service (service), the platform clients, and to inspect and initialize the
local setup.

Launching the micro server ('micro server') registers every platform
service and client with the configured runtime and supervises them until
the process receives SIGINT, SIGTERM or SIGQUIT.
"""

import os
from pathlib import Path
from typing import Any, Optional, Tuple

import click
from click.core import ParameterSource

from microplatform import __version__
from microplatform.auth import load_auth
from microplatform.config import PlatformConfig, get_micro_home, load_config
from microplatform.environ import PROFILE_ENV, PROXY_ENV
from microplatform.errors import PlatformError
from microplatform.launch import CLIENTS, SERVICES
from microplatform.runtime import RUNTIMES, get_runtime
from microplatform.server import DEFAULT_ADDRESS, DEFAULT_IMAGE, Server, ServerOptions
from microplatform.units import CLIENT_GROUP, SERVICE_GROUP, discover_units, run_unit
from microplatform.utils import print_error, print_info, print_success, print_warning, setup_logging


LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

# Options accepted by the root command and re-accepted by `micro service`,
# since the server hands them down to every service it launches
GLOBAL_OPTIONS = [
    click.option(
        "--profile",
        envvar=PROFILE_ENV,
        help="Profile handed to platform services",
    ),
    click.option(
        "--proxy-address",
        envvar=PROXY_ENV,
        help="Proxy address for platform services (default: the local network service)",
    ),
    click.option(
        "--runtime",
        "runtime_name",
        envvar="MICRO_RUNTIME",
        type=click.Choice(sorted(RUNTIMES)),
        help="Runtime the server launches units on (default: local)",
    ),
    click.option(
        "--log-level",
        envvar="MICRO_LOG_LEVEL",
        type=click.Choice(LOG_LEVELS, case_sensitive=False),
        help="Logging level (default: INFO)",
    ),
    click.option(
        "--config",
        "config_path",
        envvar="MICRO_CONFIG",
        type=click.Path(dir_okay=False, path_type=Path),
        help="Configuration file (default: $MICRO_HOME/config.yaml)",
    ),
]


def global_options(f):
    for option in reversed(GLOBAL_OPTIONS):
        f = option(f)
    return f


def lookup_option(ctx: click.Context, name: str) -> Any:
    """Resolve an option value walking up the context lineage, own value first."""
    while ctx is not None:
        value = ctx.params.get(name)
        if value is not None:
            return value
        ctx = ctx.parent
    return None


def serialize_global_flags(ctx: click.Context) -> Tuple[str, ...]:
    """
    Re-serialize the options explicitly set on the parent command.

    Only options given on the command line or through their environment
    variable are passed on, as `--flag value` pairs (bare `--flag` for
    switches that are on).
    """
    parent = ctx.parent
    if parent is None:
        return ()

    args = []
    for param in parent.command.params:
        if not isinstance(param, click.Option) or not param.expose_value:
            continue

        source = parent.get_parameter_source(param.name)
        if source not in (ParameterSource.COMMANDLINE, ParameterSource.ENVIRONMENT):
            continue

        value = parent.params.get(param.name)
        if value is None:
            continue

        flag = next((opt for opt in param.opts if opt.startswith("--")), param.opts[0])
        if param.is_flag:
            if value:
                args.append(flag)
            continue

        args.extend([flag, str(value)])

    return tuple(args)


def _bootstrap(ctx: click.Context) -> PlatformConfig:
    """Load configuration and set up logging for a command."""
    config_path: Optional[Path] = lookup_option(ctx, "config_path")
    try:
        config = load_config(config_path)
    except PlatformError as e:
        print_error(f"Invalid configuration: {e}")
        raise SystemExit(1)

    log_level = lookup_option(ctx, "log_level") or config.log_level
    setup_logging(
        log_level=log_level,
        log_format=config.log_format,
        log_file=config.get_log_file_path(),
    )
    config.load_env_file()
    return config


@click.group()
@click.version_option(version=__version__, prog_name="micro")
@global_options
@click.pass_context
def main(ctx, profile, proxy_address, runtime_name, log_level, config_path):
    """
    micro - Platform orchestrator.

    Runs the platform services and clients as one platform.
    """
    ctx.ensure_object(dict)


@main.command("server", context_settings={"allow_extra_args": True})
@click.option(
    "--address",
    envvar="MICRO_SERVER_ADDRESS",
    default=DEFAULT_ADDRESS,
    show_default=True,
    help="Set the micro server address",
)
@click.option(
    "--image",
    envvar="MICRO_SERVER_IMAGE",
    default=DEFAULT_IMAGE,
    show_default=True,
    help="Set the micro server image",
)
@click.pass_context
def server(ctx, address: str, image: str):
    """
    Run the micro server.

    Launching the micro server ('micro server') starts every platform
    service and client, and stops them again on SIGINT, SIGTERM or
    SIGQUIT.

    Examples:

        micro server

        micro --profile dev server

        micro --runtime noop server --address :10002
    """
    if ctx.args:
        click.echo(ctx.get_help())
        ctx.exit(1)

    config = _bootstrap(ctx)

    runtime_name = lookup_option(ctx, "runtime_name") or config.runtime
    try:
        runtime = get_runtime(runtime_name, stop_timeout=config.stop_timeout)
    except PlatformError as e:
        print_error(str(e))
        raise SystemExit(1)

    options = ServerOptions(
        address=address,
        image=image,
        profile=lookup_option(ctx, "profile") or config.profile,
        proxy_address=lookup_option(ctx, "proxy_address") or config.proxy_address,
        global_args=serialize_global_flags(ctx),
    )

    platform = Server(
        runtime=runtime,
        auth=load_auth(config),
        grace_period=config.grace_period,
    )

    try:
        platform.run(options)
    except Exception as e:
        print_error(f"Server failed: {e}")
        raise SystemExit(1)


@main.command("service")
@global_options
@click.argument("name")
@click.pass_context
def service(ctx, name: str, profile, proxy_address, runtime_name, log_level, config_path):
    """
    Run a single platform service.

    NAME is the service name. Its implementation is looked up in the
    'microplatform.services' entrypoint group.

    Examples:

        micro service registry

        micro service --profile dev broker
    """
    _bootstrap(ctx)

    # services read their settings from the environment
    if profile is not None:
        os.environ[PROFILE_ENV] = profile
    if proxy_address is not None:
        os.environ[PROXY_ENV] = proxy_address

    _run_unit_or_exit(SERVICE_GROUP, name)


def _run_unit_or_exit(group: str, name: str) -> None:
    try:
        run_unit(group, name)
    except PlatformError as e:
        print_error(str(e))
        raise SystemExit(1)


def _client_command(name: str) -> click.Command:
    @click.command(name, help=f"Run the {name} client.")
    @click.pass_context
    def command(ctx):
        _bootstrap(ctx)
        _run_unit_or_exit(CLIENT_GROUP, name)

    return command


for _client in CLIENTS:
    main.add_command(_client_command(_client))


@main.command("services")
def list_services():
    """List the platform services and clients."""
    installed_services = discover_units(SERVICE_GROUP)
    installed_clients = discover_units(CLIENT_GROUP)

    click.echo("services:")
    for name in SERVICES:
        status = "installed" if name in installed_services else "missing"
        click.echo(f"  {name:<10} {status}")

    click.echo("clients:")
    for name in CLIENTS:
        status = "installed" if name in installed_clients else "missing"
        click.echo(f"  {name:<10} {status}")

    missing = [name for name in SERVICES if name not in installed_services]
    missing += [name for name in CLIENTS if name not in installed_clients]
    if missing:
        print_warning(f"Not installed: {', '.join(missing)}")


@main.command("init")
@click.option("--force", is_flag=True, help="Overwrite existing configuration")
def init(force: bool):
    """Initialize micro configuration."""
    import yaml

    home = get_micro_home()
    if not home.exists():
        home.mkdir(parents=True)

    cfg_path = home / "config.yaml"
    if cfg_path.exists() and not force:
        click.echo(f"Config already exists at {cfg_path}. Use --force to overwrite.", err=True)
        raise SystemExit(1)

    default_cfg = {
        "profile": None,
        "proxy_address": None,
        "runtime": "local",
        "log_level": "INFO",
        "log_format": "pretty",
        "log_file": None,
        "env_file": str(home / ".env"),
        "stop_timeout": 5.0,
        "grace_period": 1.0,
    }
    cfg_path.write_text(yaml.safe_dump(default_cfg, sort_keys=False))

    env_path = home / ".env"
    if not env_path.exists():
        env_path.write_text("# MICRO_AUTH_PUBLIC_KEY=...\n# MICRO_AUTH_PRIVATE_KEY=...\n")

    print_success(f"Initialized micro config at {cfg_path}")
    print_info("Run 'micro server' to start the platform.")


if __name__ == "__main__":
    main()
