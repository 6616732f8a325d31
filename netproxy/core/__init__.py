"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
Netproxy, a product of Garudex Labs

Core primitives consulted while validating the server configuration.

This module contains:
- Transport mode constants
- Go-style duration strings
- Proxy strategy parsing
- Accepted TLS cipher suites
- Label selector parsing
"""

from netproxy.core.ciphers import get_accepted_ciphers, to_openssl_cipher_string
from netproxy.core.durations import format_duration, parse_duration
from netproxy.core.labels import LabelSelector, Requirement, parse_label_selector
from netproxy.core.modes import MODE_GRPC, MODE_HTTP_CONNECT, SUPPORTED_MODES
from netproxy.core.proxy_strategies import (
    ProxyStrategyType,
    parse_proxy_strategies,
    parse_proxy_strategy,
)

__all__ = [
    "LabelSelector",
    "MODE_GRPC",
    "MODE_HTTP_CONNECT",
    "ProxyStrategyType",
    "Requirement",
    "SUPPORTED_MODES",
    "format_duration",
    "get_accepted_ciphers",
    "parse_duration",
    "parse_label_selector",
    "parse_proxy_strategies",
    "parse_proxy_strategy",
    "to_openssl_cipher_string",
]
