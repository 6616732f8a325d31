"""
CLI entry point for Netproxy Server.

Parses the proxy server flags, validates the resulting options and hands the
validated configuration to the server bootstrap.
"""

import sys
from typing import Any, Optional

import click
from click.core import ParameterSource

from netproxy._version import __version__
from netproxy.cli.context import CLIContext, pass_context
from netproxy.cli.flags import DEPRECATED_FLAGS, GoStyleCommand, bind_flags
from netproxy.config.printer import print_options
from netproxy.config.settings import build_options
from netproxy.config.validation import validate_options
from netproxy.exceptions import NetproxyError
from netproxy.logging_config import (
    bind_server_id,
    get_logger,
    log_deprecated_flag,
    setup_logging,
)


def _warn_deprecated_flags(click_ctx: click.Context) -> None:
    logger = get_logger(__name__)
    for flag, notice in DEPRECATED_FLAGS.items():
        source = click_ctx.get_parameter_source(flag.replace("-", "_"))
        if source == ParameterSource.COMMANDLINE:
            log_deprecated_flag(logger, flag, notice)


@click.command(cls=GoStyleCommand, name="netproxy-server")
@bind_flags
@click.option(
    '--log-level',
    '-l',
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'], case_sensitive=False),
    default='INFO',
    help='Set logging level',
)
@click.option(
    '--log-format',
    type=click.Choice(['console', 'json'], case_sensitive=False),
    default='console',
    help='Render log events for a terminal or as JSON lines',
)
@click.option(
    '--verbose',
    '-v',
    is_flag=True,
    help='Enable verbose output, including the effective configuration',
)
@click.version_option(version=__version__, prog_name='netproxy-server')
@pass_context
def cli(
    ctx: CLIContext,
    log_level: str,
    log_format: str,
    verbose: bool,
    warn_on_channel_limit: bool,
    **flag_values: Any,
):
    """
    Netproxy Server - network proxy between an API server and its agents.

    Validates the startup configuration given by the flags below before any
    listener is opened.
    """
    ctx.verbose = verbose
    click_ctx = click.get_current_context()

    try:
        setup_logging(
            level="DEBUG" if verbose else log_level.upper(),
            json_format=log_format.lower() == "json",
        )
    except Exception as e:
        click.echo(f"Error: Failed to set up logging: {e}", err=True)
        sys.exit(1)

    logger = get_logger(__name__)
    # warn-on-channel-limit is accepted for compatibility and otherwise ignored.
    _warn_deprecated_flags(click_ctx)

    try:
        options = build_options(**flag_values)
        validated = validate_options(options)
    except NetproxyError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    bind_server_id(options.server_id)
    print_options(options)
    ctx.config = validated

    if ctx.bootstrap is None:
        logger.info("configuration accepted, no server bootstrap registered")
        return

    ctx.bootstrap(validated)


def main(args: Optional[list] = None) -> None:
    """Console script entry point."""
    cli(args=args, prog_name="netproxy-server")


if __name__ == '__main__':
    main()
