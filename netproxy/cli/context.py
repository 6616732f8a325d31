"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
Netproxy, a product of Garudex Labs

CLI context for Netproxy Server.

Provides shared context object and decorators for CLI commands.
"""

from typing import Callable, Optional

import click

from netproxy.config.validation import ValidatedConfig


class CLIContext:
    """
    Context object for CLI commands.

    Attributes:
        config: Validated configuration, set once startup validation passed
        bootstrap: Callable that starts the proxy server from the validated
            configuration; when None the command stops after validation
        verbose: Whether verbose output was requested
    """

    def __init__(self, bootstrap: Optional[Callable[[ValidatedConfig], None]] = None):
        self.config: Optional[ValidatedConfig] = None
        self.bootstrap = bootstrap
        self.verbose = False


pass_context = click.make_pass_decorator(CLIContext, ensure=True)
