"""
Validation of proxy server options.

Rules are evaluated in a fixed order and evaluation stops at the first
violation, so the error reported for a given set of options is deterministic.
Each rule is a named check returning an error message, or None when the
options satisfy it.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional, Tuple

from netproxy.config.settings import ProxyRunOptions
from netproxy.core.ciphers import get_accepted_ciphers
from netproxy.core.labels import parse_label_selector
from netproxy.core.modes import MODE_GRPC, MODE_HTTP_CONNECT
from netproxy.core.proxy_strategies import ProxyStrategyType, parse_proxy_strategies
from netproxy.exceptions import (
    InvalidConfigurationError,
    LabelSelectorError,
    ProxyStrategyError,
)
from netproxy.logging_config import get_logger, log_validation_failure

logger = get_logger(__name__)

# Ports above this are in the ephemeral range.
MAX_PORT = 49151
# Ports at or below this are reserved.
MIN_PORT = 1024

Check = Callable[[ProxyRunOptions], Optional[str]]


@dataclass(frozen=True)
class ValidationRule:
    """A named check over ProxyRunOptions."""

    name: str
    check: Check


@dataclass(frozen=True)
class ValidationFailure:
    """The first rule rejected by find_violation()."""

    rule: str
    message: str


@dataclass(frozen=True)
class ValidatedConfig:
    """
    Proxy server options that passed validation.

    Attributes:
        options: The accepted options
        proxy_strategies: Parsed strategies, in the configured order
    """

    options: ProxyRunOptions
    proxy_strategies: Tuple[ProxyStrategyType, ...]

    @property
    def using_service_account_auth(self) -> bool:
        return uses_service_account_auth(self.options)

    @property
    def needs_kubernetes_client(self) -> bool:
        """True when agent token review or the lease controller needs a cluster client."""
        return self.using_service_account_auth or self.options.enable_lease_controller


def uses_service_account_auth(options: ProxyRunOptions) -> bool:
    return bool(
        options.agent_namespace
        or options.agent_service_account
        or options.authentication_audience
    )


def _missing(path: str) -> bool:
    return not Path(path).exists()


# TLS material

def _key_pair_check(role: str, key_attr: str, cert_attr: str) -> Tuple[Check, Check]:
    def check_key(options: ProxyRunOptions) -> Optional[str]:
        key = getattr(options, key_attr)
        if not key:
            return None
        if _missing(key):
            return f"error checking {role} key {key}, got no such file or directory"
        if not getattr(options, cert_attr):
            return f"cannot have {role} cert empty when {role} key is set to {key!r}"
        return None

    def check_cert(options: ProxyRunOptions) -> Optional[str]:
        cert = getattr(options, cert_attr)
        if not cert:
            return None
        if _missing(cert):
            return f"error checking {role} cert {cert}, got no such file or directory"
        if not getattr(options, key_attr):
            return f"cannot have {role} key empty when {role} cert is set to {cert!r}"
        return None

    return check_key, check_cert


def _ca_check(role: str, ca_attr: str) -> Check:
    def check_ca(options: ProxyRunOptions) -> Optional[str]:
        ca_cert = getattr(options, ca_attr)
        if ca_cert and _missing(ca_cert):
            return f"error checking {role} CA cert {ca_cert}, got no such file or directory"
        return None

    return check_ca


_check_server_key, _check_server_cert = _key_pair_check("server", "server_key", "server_cert")
_check_cluster_key, _check_cluster_cert = _key_pair_check("cluster", "cluster_key", "cluster_cert")


def _check_mode(options: ProxyRunOptions) -> Optional[str]:
    if options.mode not in (MODE_GRPC, MODE_HTTP_CONNECT):
        return f"mode must be set to either '{MODE_GRPC}' or '{MODE_HTTP_CONNECT}' not {options.mode!r}"
    return None


def _check_uds(options: ProxyRunOptions) -> Optional[str]:
    if not options.uds_name:
        return None
    if options.server_port != 0:
        return f"server port should be set to 0 not {options.server_port} for UDS"
    if options.server_key:
        return "server key should not be set for UDS"
    if options.server_cert:
        return "server cert should not be set for UDS"
    if options.server_ca_cert:
        return "server ca cert should not be set for UDS"
    return None


# Listener ports

def _ephemeral_port_check(listener: str) -> Check:
    attr = f"{listener}_port"

    def check(options: ProxyRunOptions) -> Optional[str]:
        port = getattr(options, attr)
        if port > MAX_PORT:
            return f"please do not try to use ephemeral port {port} for the {listener} port"
        return None

    return check


def _reserved_port_check(listener: str) -> Check:
    attr = f"{listener}_port"

    def check(options: ProxyRunOptions) -> Optional[str]:
        port = getattr(options, attr)
        # The UDS rule has already pinned the server port to 0.
        if listener == "server" and options.uds_name:
            return None
        if port <= MIN_PORT:
            return f"please do not try to use reserved port {port} for the {listener} port"
        return None

    return check


def _check_profiling(options: ProxyRunOptions) -> Optional[str]:
    if options.enable_contention_profiling and not options.enable_profiling:
        return "if --enable-contention-profiling is set, --enable-profiling must also be set"
    return None


def _check_service_account_auth(options: ProxyRunOptions) -> Optional[str]:
    if not uses_service_account_auth(options):
        return None
    if options.cluster_ca_cert:
        return "--cluster-ca-cert can not be used when agent authentication is enabled"
    if not options.agent_namespace:
        return "--agent-namespace cannot be empty when agent authentication is enabled"
    if not options.agent_service_account:
        return "--agent-service-account cannot be empty when agent authentication is enabled"
    if not options.authentication_audience:
        return "--authentication-audience cannot be empty when agent authentication is enabled"
    return None


def _check_kubeconfig(options: ProxyRunOptions) -> Optional[str]:
    if options.kubeconfig_path and _missing(options.kubeconfig_path):
        return f"checking KubeconfigPath {options.kubeconfig_path!r}, got no such file or directory"
    return None


def _check_proxy_strategies(options: ProxyRunOptions) -> Optional[str]:
    if not options.proxy_strategies:
        return "ProxyStrategies cannot be empty"
    try:
        parse_proxy_strategies(options.proxy_strategies)
    except ProxyStrategyError as e:
        return f"invalid proxy strategies: {e}"
    return None


def _check_channel_size(options: ProxyRunOptions) -> Optional[str]:
    if options.xfr_channel_size <= 0:
        return f"channel size {options.xfr_channel_size} must be greater than 0"
    return None


def _check_cipher_suites(options: ProxyRunOptions) -> Optional[str]:
    if not options.cipher_suites:
        return None
    accepted = get_accepted_ciphers()
    for cipher in options.cipher_suites:
        if cipher not in accepted:
            return f"cipher suite {cipher} not supported, doesn't exist or considered as insecure"
    return None


def _check_lease_label(options: ProxyRunOptions) -> Optional[str]:
    if not options.enable_lease_controller:
        return None
    try:
        parse_label_selector(options.lease_label)
    except LabelSelectorError as e:
        return f"invalid lease label {options.lease_label!r}: {e}"
    return None


_LISTENERS = ("server", "agent", "admin", "health")

VALIDATION_RULES: Tuple[ValidationRule, ...] = (
    ValidationRule("server-key", _check_server_key),
    ValidationRule("server-cert", _check_server_cert),
    ValidationRule("server-ca-cert", _ca_check("server", "server_ca_cert")),
    ValidationRule("cluster-key", _check_cluster_key),
    ValidationRule("cluster-cert", _check_cluster_cert),
    ValidationRule("cluster-ca-cert", _ca_check("cluster", "cluster_ca_cert")),
    ValidationRule("mode", _check_mode),
    ValidationRule("uds", _check_uds),
    *(ValidationRule(f"{name}-port-ephemeral", _ephemeral_port_check(name)) for name in _LISTENERS),
    *(ValidationRule(f"{name}-port-reserved", _reserved_port_check(name)) for name in _LISTENERS),
    ValidationRule("contention-profiling", _check_profiling),
    ValidationRule("service-account-auth", _check_service_account_auth),
    ValidationRule("kubeconfig", _check_kubeconfig),
    ValidationRule("proxy-strategies", _check_proxy_strategies),
    ValidationRule("xfr-channel-size", _check_channel_size),
    ValidationRule("cipher-suites", _check_cipher_suites),
    ValidationRule("lease-label", _check_lease_label),
)


def rule_names() -> List[str]:
    """Names of the validation rules in evaluation order."""
    return [rule.name for rule in VALIDATION_RULES]


def find_violation(options: ProxyRunOptions) -> Optional[ValidationFailure]:
    """
    Evaluate the rules in order and return the first one that fails.

    Returns:
        The failing rule and its message, or None if every rule passes
    """
    for rule in VALIDATION_RULES:
        message = rule.check(options)
        if message is not None:
            return ValidationFailure(rule=rule.name, message=message)
    return None


def validate_options(options: ProxyRunOptions) -> ValidatedConfig:
    """
    Validate proxy server options.

    Args:
        options: Options to validate

    Returns:
        ValidatedConfig wrapping the accepted options

    Raises:
        InvalidConfigurationError: On the first violated rule; the rule name
            is available as the error's ``rule`` attribute
    """
    failure = find_violation(options)
    if failure is not None:
        log_validation_failure(logger, failure.rule, failure.message)
        raise InvalidConfigurationError(failure.message, rule=failure.rule)

    validated = ValidatedConfig(
        options=options,
        proxy_strategies=tuple(parse_proxy_strategies(options.proxy_strategies)),
    )
    logger.info(
        "configuration_validated",
        server_id=options.server_id,
        mode=options.mode,
        needs_kubernetes_client=validated.needs_kubernetes_client,
    )
    return validated
