"""
Configuration management for Netproxy Server.

Handles defaulting, building and validation of the proxy server options.
"""

from netproxy.config.printer import format_options, print_options
from netproxy.config.settings import (
    SERVER_ID_ENV_VAR,
    ProxyRunOptions,
    build_options,
    default_server_id,
    get_default_options,
    option_names,
)
from netproxy.config.validation import (
    VALIDATION_RULES,
    ValidatedConfig,
    ValidationFailure,
    ValidationRule,
    find_violation,
    rule_names,
    validate_options,
)

__all__ = [
    "ProxyRunOptions",
    "SERVER_ID_ENV_VAR",
    "VALIDATION_RULES",
    "ValidatedConfig",
    "ValidationFailure",
    "ValidationRule",
    "build_options",
    "default_server_id",
    "find_violation",
    "format_options",
    "get_default_options",
    "option_names",
    "print_options",
    "rule_names",
    "validate_options",
]
