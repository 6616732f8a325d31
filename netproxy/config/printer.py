"""
Diagnostics dump of the effective proxy server options.
"""

import json
from typing import Any, List, Optional, Tuple

import structlog

from netproxy.config.settings import ProxyRunOptions
from netproxy.core.durations import format_duration
from netproxy.logging_config import get_logger

logger = get_logger(__name__)


def _quoted(value: Any) -> str:
    return json.dumps(str(value), ensure_ascii=False)


def _cipher_list(value: Tuple[str, ...]) -> str:
    return "[" + " ".join(_quoted(cipher) for cipher in value) + "]"


def format_options(options: ProxyRunOptions) -> List[str]:
    """
    Render one line per option, grouped in declaration order.

    Strings are quoted so that empty values stay visible.
    """
    o = options
    return [
        f"ServerCert set to {_quoted(o.server_cert)}.",
        f"ServerKey set to {_quoted(o.server_key)}.",
        f"ServerCACert set to {_quoted(o.server_ca_cert)}.",
        f"ClusterCert set to {_quoted(o.cluster_cert)}.",
        f"ClusterKey set to {_quoted(o.cluster_key)}.",
        f"ClusterCACert set to {_quoted(o.cluster_ca_cert)}.",
        f"Mode set to {_quoted(o.mode)}.",
        f"UDSName set to {_quoted(o.uds_name)}.",
        f"DeleteUDSFile set to {str(o.delete_uds_file).lower()}.",
        f"Server port set to {o.server_port}.",
        f"Server bind address set to {_quoted(o.server_bind_address)}.",
        f"Agent port set to {o.agent_port}.",
        f"Agent bind address set to {_quoted(o.agent_bind_address)}.",
        f"Admin port set to {o.admin_port}.",
        f"Admin bind address set to {_quoted(o.admin_bind_address)}.",
        f"Health port set to {o.health_port}.",
        f"Health bind address set to {_quoted(o.health_bind_address)}.",
        f"Keepalive time set to {format_duration(o.keepalive_time)}.",
        f"Frontend keepalive time set to {format_duration(o.frontend_keepalive_time)}.",
        f"EnableProfiling set to {str(o.enable_profiling).lower()}.",
        f"EnableContentionProfiling set to {str(o.enable_contention_profiling).lower()}.",
        f"ServerID set to {o.server_id}.",
        f"ServerCount set to {o.server_count}.",
        f"AgentNamespace set to {_quoted(o.agent_namespace)}.",
        f"AgentServiceAccount set to {_quoted(o.agent_service_account)}.",
        f"AuthenticationAudience set to {_quoted(o.authentication_audience)}.",
        f"KubeconfigPath set to {_quoted(o.kubeconfig_path)}.",
        f"KubeconfigQPS set to {o.kubeconfig_qps:f}.",
        f"KubeconfigBurst set to {o.kubeconfig_burst}.",
        f"APIContentType set to {o.api_content_type}.",
        f"ProxyStrategies set to {_quoted(o.proxy_strategies)}.",
        f"CipherSuites set to {_cipher_list(o.cipher_suites)}.",
        f"XfrChannelSize set to {o.xfr_channel_size}.",
        f"EnableLeaseController set to {str(o.enable_lease_controller).lower()}.",
        f"LeaseNamespace set to {o.lease_namespace}.",
        f"LeaseLabel set to {o.lease_label}.",
    ]


def print_options(
    options: ProxyRunOptions,
    log: Optional[structlog.stdlib.BoundLogger] = None,
) -> None:
    """
    Log every option at DEBUG level.

    Call only after the options passed validation. Nothing is returned and
    the options are not inspected beyond formatting.

    Args:
        options: Options to dump
        log: Logger to write to (default: this module's logger)
    """
    log = log or logger
    for line in format_options(options):
        log.debug(line)
