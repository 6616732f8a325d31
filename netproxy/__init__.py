"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
Netproxy, a product of Garudex Labs

Netproxy Server - startup configuration for the API server network proxy.

Netproxy defines, defaults and validates the configuration of a proxy server
that tunnels traffic between an API-server-like frontend and remote agents.
"""

from netproxy._version import __version__

__all__ = ["__version__"]
