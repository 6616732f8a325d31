"""
Configuration model for Netproxy Server.

ProxyRunOptions holds every tunable of the proxy server. Instances are
immutable: defaults come from get_default_options() and parsed command-line
values are applied with build_options(), which returns a new instance.
"""

import os
import uuid
from dataclasses import dataclass, field, fields, replace
from datetime import timedelta
from typing import Any, Optional, Tuple

from netproxy.core.modes import MODE_GRPC
from netproxy.exceptions import ConfigurationError
from netproxy.logging_config import get_logger

logger = get_logger(__name__)

SERVER_ID_ENV_VAR = "PROXY_SERVER_ID"

CONTENT_TYPE_PROTOBUF = "application/vnd.kubernetes.protobuf"

DEFAULT_SERVER_PORT = 8090
DEFAULT_AGENT_PORT = 8091
DEFAULT_HEALTH_PORT = 8092
DEFAULT_ADMIN_PORT = 8095
DEFAULT_ADMIN_BIND_ADDRESS = "127.0.0.1"
DEFAULT_KEEPALIVE_TIME = timedelta(hours=1)
DEFAULT_LEASE_NAMESPACE = "kube-system"
DEFAULT_LEASE_LABEL = "k8s-app=konnectivity-server"


def default_server_id() -> str:
    """
    Resolve the default server ID.

    The PROXY_SERVER_ID environment variable wins when set; otherwise a random
    UUID is generated, so two calls normally return different IDs.
    """
    server_id = os.environ.get(SERVER_ID_ENV_VAR)
    if server_id:
        return server_id
    return str(uuid.uuid4())


@dataclass(frozen=True)
class ProxyRunOptions:
    """
    Startup options of the proxy server.

    Empty strings mean "unset". Nothing is checked at construction time; use
    netproxy.config.validation.validate_options() before handing the options
    to the server.
    """

    # Certificate setup for securing communication to the frontend client.
    server_cert: str = ""
    server_key: str = ""
    server_ca_cert: str = ""
    # Certificate setup for securing communication to the agents.
    cluster_cert: str = ""
    cluster_key: str = ""
    cluster_ca_cert: str = ""
    # "grpc" or "http-connect"
    mode: str = MODE_GRPC
    # Setting a name serves frontend connections on a unix domain socket.
    uds_name: str = ""
    delete_uds_file: bool = True
    server_port: int = DEFAULT_SERVER_PORT
    server_bind_address: str = ""
    agent_port: int = DEFAULT_AGENT_PORT
    agent_bind_address: str = ""
    admin_port: int = DEFAULT_ADMIN_PORT
    admin_bind_address: str = DEFAULT_ADMIN_BIND_ADDRESS
    health_port: int = DEFAULT_HEALTH_PORT
    health_bind_address: str = ""
    # Idle time after which the server pings the peer to check the transport.
    keepalive_time: timedelta = DEFAULT_KEEPALIVE_TIME
    frontend_keepalive_time: timedelta = DEFAULT_KEEPALIVE_TIME
    enable_profiling: bool = False
    enable_contention_profiling: bool = False
    server_id: str = field(default_factory=default_server_id)
    # Should be 1 unless this is an HA proxy server.
    server_count: int = 1
    # Token-based agent authentication.
    agent_namespace: str = ""
    agent_service_account: str = ""
    authentication_audience: str = ""
    kubeconfig_path: str = ""
    kubeconfig_qps: float = 0.0
    kubeconfig_burst: int = 0
    api_content_type: str = CONTENT_TYPE_PROTOBUF
    # Ordered, comma separated; see netproxy.core.proxy_strategies.
    proxy_strategies: str = "default"
    # Empty means the TLS library default. No effect on TLS 1.3.
    cipher_suites: Tuple[str, ...] = ()
    xfr_channel_size: int = 10
    enable_lease_controller: bool = False
    lease_namespace: str = DEFAULT_LEASE_NAMESPACE
    lease_label: str = DEFAULT_LEASE_LABEL


def get_default_options() -> ProxyRunOptions:
    """
    Get the default proxy server options.

    Returns:
        ProxyRunOptions with default values and a freshly resolved server ID
    """
    return ProxyRunOptions()


def option_names() -> Tuple[str, ...]:
    """Field names of ProxyRunOptions in declaration order."""
    return tuple(f.name for f in fields(ProxyRunOptions))


def build_options(base: Optional[ProxyRunOptions] = None, **overrides: Any) -> ProxyRunOptions:
    """
    Apply parsed values on top of a set of options.

    Overrides whose value is None are treated as "not given" and leave the
    base value in place.

    Args:
        base: Options to start from (default: get_default_options())
        **overrides: Field values keyed by ProxyRunOptions field name

    Returns:
        New ProxyRunOptions; base is left unchanged

    Raises:
        ConfigurationError: If an override names an unknown option
    """
    if base is None:
        base = get_default_options()

    known = set(option_names())
    unknown = sorted(name for name in overrides if name not in known)
    if unknown:
        raise ConfigurationError(f"unknown proxy server options: {', '.join(unknown)}")

    changes = {name: value for name, value in overrides.items() if value is not None}
    if "cipher_suites" in changes:
        changes["cipher_suites"] = tuple(changes["cipher_suites"])

    logger.debug("building proxy server options", overridden=sorted(changes))
    return replace(base, **changes)
