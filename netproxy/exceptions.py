"""
Exception hierarchy for Netproxy Server.

All custom exceptions inherit from NetproxyError base class.
"""

from typing import Optional


class NetproxyError(Exception):
    """Base exception for all Netproxy Server errors."""
    pass


# Configuration Errors
class ConfigurationError(NetproxyError):
    """Base exception for configuration-related errors."""
    pass


class InvalidConfigurationError(ConfigurationError):
    """
    Raised when the server configuration fails validation.

    Attributes:
        rule: Name of the validation rule that rejected the configuration,
            or None when the error was not produced by a named rule.
    """

    def __init__(self, message: str, rule: Optional[str] = None):
        super().__init__(message)
        self.rule = rule


class ProxyStrategyError(ConfigurationError):
    """Raised when a proxy strategy list is empty or names an unknown strategy."""
    pass


class LabelSelectorError(ConfigurationError):
    """Raised when a label selector string cannot be parsed."""
    pass
