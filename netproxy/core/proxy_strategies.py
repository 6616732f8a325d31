"""
Proxy strategies used by the server to pick an agent tunnel for a request.

The order of a strategy list matters: for "destHost,default" the server first
looks for a backend associated with the destination host and falls back to a
random backend when none is found.
"""

from enum import Enum
from typing import List

from netproxy.exceptions import ProxyStrategyError


class ProxyStrategyType(str, Enum):
    """Known backend selection strategies."""

    # Pick a random backend.
    DEFAULT = "default"
    # Pick a backend that serves the destination host.
    DEST_HOST = "destHost"
    # Pick a backend that advertises itself as the default route.
    DEFAULT_ROUTE = "defaultRoute"

    def __str__(self) -> str:
        return self.value


def parse_proxy_strategy(name: str) -> ProxyStrategyType:
    """
    Parse a single strategy name.

    Raises:
        ProxyStrategyError: If the name is not a known strategy
    """
    try:
        return ProxyStrategyType(name)
    except ValueError:
        raise ProxyStrategyError(f"unknown proxy strategy: {name}")


def parse_proxy_strategies(proxy_strategies: str) -> List[ProxyStrategyType]:
    """
    Parse a comma-separated, ordered list of strategy names.

    Blank entries are skipped, so "destHost,,default" is accepted.

    Args:
        proxy_strategies: Comma-separated strategy names

    Returns:
        Strategies in the order given

    Raises:
        ProxyStrategyError: If an entry is unknown or the list is empty
    """
    result: List[ProxyStrategyType] = []
    for entry in proxy_strategies.split(","):
        entry = entry.strip()
        if not entry:
            continue
        result.append(parse_proxy_strategy(entry))

    if not result:
        raise ProxyStrategyError("proxy strategies cannot be empty")

    return result
