"""
Unit tests for proxy server option validation.

Tests rule order, TLS pairing, UDS exclusivity, port boundaries, agent
authentication and the remaining single-field checks.
"""

import dataclasses

import pytest

from netproxy.config.settings import build_options, get_default_options
from netproxy.config.validation import (
    VALIDATION_RULES,
    ValidatedConfig,
    find_violation,
    rule_names,
    validate_options,
)
from netproxy.core.proxy_strategies import ProxyStrategyType
from netproxy.exceptions import ConfigurationError, InvalidConfigurationError


def assert_rejected(options, rule, fragment):
    """Validate options and check which rule failed and what it said."""
    with pytest.raises(InvalidConfigurationError) as exc_info:
        validate_options(options)
    assert exc_info.value.rule == rule
    assert fragment in str(exc_info.value)


class TestDefaults:
    """Test validation of the default options."""

    def test_default_options_are_valid(self):
        """Test default options pass without needing a cluster client."""
        validated = validate_options(get_default_options())

        assert isinstance(validated, ValidatedConfig)
        assert validated.needs_kubernetes_client is False
        assert validated.using_service_account_auth is False
        assert validated.proxy_strategies == (ProxyStrategyType.DEFAULT,)

    def test_find_violation_returns_none_for_defaults(self):
        """Test find_violation reports nothing for valid options."""
        assert find_violation(get_default_options()) is None

    def test_validated_config_is_immutable(self):
        """Test the validated value cannot be modified."""
        validated = validate_options(get_default_options())

        with pytest.raises(dataclasses.FrozenInstanceError):
            validated.options = get_default_options()
        with pytest.raises(dataclasses.FrozenInstanceError):
            validated.options.server_port = 9000

    def test_validation_error_is_configuration_error(self):
        """Test callers can catch validation failures as configuration errors."""
        with pytest.raises(ConfigurationError):
            validate_options(build_options(mode="tcp"))


class TestRuleOrder:
    """Test the fixed evaluation order of the rules."""

    def test_rule_names_in_order(self):
        """Test the rule list is evaluated in the documented order."""
        assert rule_names() == [
            "server-key",
            "server-cert",
            "server-ca-cert",
            "cluster-key",
            "cluster-cert",
            "cluster-ca-cert",
            "mode",
            "uds",
            "server-port-ephemeral",
            "agent-port-ephemeral",
            "admin-port-ephemeral",
            "health-port-ephemeral",
            "server-port-reserved",
            "agent-port-reserved",
            "admin-port-reserved",
            "health-port-reserved",
            "contention-profiling",
            "service-account-auth",
            "kubeconfig",
            "proxy-strategies",
            "xfr-channel-size",
            "cipher-suites",
            "lease-label",
        ]
        assert len(VALIDATION_RULES) == len(set(rule_names()))

    def test_first_violation_wins(self):
        """Test only the earliest failing rule is reported."""
        options = build_options(
            mode="tcp",
            agent_port=80,
            xfr_channel_size=0,
            proxy_strategies="",
        )
        failure = find_violation(options)

        assert failure.rule == "mode"
        assert "not 'tcp'" in failure.message

    def test_tls_checked_before_mode(self, temp_dir):
        """Test a missing server key is reported before a bad mode."""
        options = build_options(server_key=str(temp_dir / "missing.key"), mode="tcp")

        assert_rejected(options, "server-key", "error checking server key")

    def test_ephemeral_ports_checked_before_reserved_ports(self):
        """Test every listener's upper bound is checked before any lower bound."""
        options = build_options(server_port=1000, agent_port=50000)

        assert_rejected(options, "agent-port-ephemeral", "ephemeral port 50000 for the agent port")

    def test_listeners_checked_in_order(self):
        """Test server, agent, admin and health are checked in that order."""
        options = build_options(admin_port=80, health_port=81)

        assert_rejected(options, "admin-port-reserved", "reserved port 80 for the admin port")

    def test_channel_size_checked_before_ciphers(self):
        """Test channel size is reported before an unknown cipher."""
        options = build_options(xfr_channel_size=0, cipher_suites=("TLS_RSA_WITH_RC4_128_SHA",))

        assert_rejected(options, "xfr-channel-size", "channel size 0")


class TestTLSPairing:
    """Test certificate and key pairing for both listeners."""

    @pytest.mark.parametrize("role", ["server", "cluster"])
    def test_key_without_cert_fails(self, role, tls_files):
        """Test a key alone is rejected."""
        options = build_options(**{f"{role}_key": tls_files[f"{role}.key"]})

        assert_rejected(options, f"{role}-key", f"cannot have {role} cert empty")

    @pytest.mark.parametrize("role", ["server", "cluster"])
    def test_cert_without_key_fails(self, role, tls_files):
        """Test a cert alone is rejected."""
        options = build_options(**{f"{role}_cert": tls_files[f"{role}.crt"]})

        assert_rejected(options, f"{role}-cert", f"cannot have {role} key empty")

    @pytest.mark.parametrize("role", ["server", "cluster"])
    def test_cert_and_key_pass(self, role, tls_files):
        """Test a complete pair with a CA is accepted."""
        options = build_options(**{
            f"{role}_cert": tls_files[f"{role}.crt"],
            f"{role}_key": tls_files[f"{role}.key"],
            f"{role}_ca_cert": tls_files[f"{role}-ca.crt"],
        })

        assert find_violation(options) is None

    @pytest.mark.parametrize("field, rule", [
        ("server_key", "server-key"),
        ("server_cert", "server-cert"),
        ("server_ca_cert", "server-ca-cert"),
        ("cluster_key", "cluster-key"),
        ("cluster_cert", "cluster-cert"),
        ("cluster_ca_cert", "cluster-ca-cert"),
    ])
    def test_missing_file_fails(self, field, rule, temp_dir):
        """Test every TLS path must exist on disk."""
        missing = str(temp_dir / "does-not-exist.pem")

        assert_rejected(build_options(**{field: missing}), rule, missing)

    def test_missing_key_reported_before_missing_cert(self, temp_dir):
        """Test the key is checked before the cert."""
        options = build_options(
            server_key=str(temp_dir / "missing.key"),
            server_cert=str(temp_dir / "missing.crt"),
        )

        assert_rejected(options, "server-key", "missing.key")


class TestMode:
    """Test transport mode validation."""

    @pytest.mark.parametrize("mode", ["grpc", "http-connect"])
    def test_supported_modes_pass(self, mode):
        """Test both transport modes are accepted."""
        assert find_violation(build_options(mode=mode)) is None

    @pytest.mark.parametrize("mode", ["", "GRPC", "http"])
    def test_unknown_mode_fails(self, mode):
        """Test anything else is rejected."""
        assert_rejected(build_options(mode=mode), "mode", "mode must be set to either")


class TestUnixDomainSocket:
    """Test UDS exclusivity rules."""

    def test_uds_with_default_server_port_fails(self):
        """Test UDS requires the server port to be 0."""
        options = build_options(uds_name="/run/netproxy/socket")

        assert_rejected(options, "uds", "server port should be set to 0 not 8090 for UDS")

    def test_uds_with_port_zero_passes(self):
        """Test UDS with server port 0 is accepted."""
        options = build_options(uds_name="/run/netproxy/socket", server_port=0)

        assert find_violation(options) is None

    def test_uds_with_server_tls_fails(self, tls_files):
        """Test UDS cannot be combined with a server key and cert."""
        options = build_options(
            uds_name="/run/netproxy/socket",
            server_port=0,
            server_cert=tls_files["server.crt"],
            server_key=tls_files["server.key"],
        )

        assert_rejected(options, "uds", "server key should not be set for UDS")

    def test_uds_with_server_ca_fails(self, tls_files):
        """Test UDS cannot be combined with a server CA."""
        options = build_options(
            uds_name="/run/netproxy/socket",
            server_port=0,
            server_ca_cert=tls_files["server-ca.crt"],
        )

        assert_rejected(options, "uds", "server ca cert should not be set for UDS")

    def test_uds_allows_cluster_tls(self, tls_files):
        """Test agent-side TLS is unaffected by UDS."""
        options = build_options(
            uds_name="/run/netproxy/socket",
            server_port=0,
            cluster_cert=tls_files["cluster.crt"],
            cluster_key=tls_files["cluster.key"],
        )

        assert find_violation(options) is None


class TestPorts:
    """Test listener port boundaries."""

    @pytest.mark.parametrize("listener", ["server", "agent", "admin", "health"])
    @pytest.mark.parametrize("port", [1025, 8080, 49151])
    def test_ports_in_range_pass(self, listener, port):
        """Test ports in (1024, 49151] are accepted."""
        assert find_violation(build_options(**{f"{listener}_port": port})) is None

    @pytest.mark.parametrize("listener", ["server", "agent", "admin", "health"])
    @pytest.mark.parametrize("port", [1024, 443, 0, -1])
    def test_reserved_ports_fail(self, listener, port):
        """Test 1024 and below are rejected."""
        assert_rejected(
            build_options(**{f"{listener}_port": port}),
            f"{listener}-port-reserved",
            f"reserved port {port} for the {listener} port",
        )

    @pytest.mark.parametrize("listener", ["server", "agent", "admin", "health"])
    @pytest.mark.parametrize("port", [49152, 65535])
    def test_ephemeral_ports_fail(self, listener, port):
        """Test ports above 49151 are rejected."""
        assert_rejected(
            build_options(**{f"{listener}_port": port}),
            f"{listener}-port-ephemeral",
            f"ephemeral port {port} for the {listener} port",
        )

    @pytest.mark.parametrize("listener", ["agent", "admin", "health"])
    def test_port_zero_under_uds_only_for_server(self, listener):
        """Test UDS only relaxes the server port."""
        options = build_options(uds_name="/run/netproxy/socket", server_port=0, **{f"{listener}_port": 0})

        assert_rejected(options, f"{listener}-port-reserved", "reserved port 0")


class TestProfiling:
    """Test profiling flags."""

    def test_contention_without_profiling_fails(self):
        """Test contention profiling requires profiling."""
        options = build_options(enable_contention_profiling=True)

        assert_rejected(options, "contention-profiling", "--enable-profiling must also be set")

    def test_contention_with_profiling_passes(self):
        """Test both flags together are accepted."""
        options = build_options(enable_profiling=True, enable_contention_profiling=True)

        assert find_violation(options) is None

    def test_profiling_alone_passes(self):
        """Test profiling without contention profiling is accepted."""
        assert find_violation(build_options(enable_profiling=True)) is None


class TestServiceAccountAuth:
    """Test token-based agent authentication settings."""

    AUTH = {
        "agent_namespace": "kube-system",
        "agent_service_account": "konnectivity-agent",
        "authentication_audience": "system:konnectivity-server",
    }

    @pytest.mark.parametrize("given, message", [
        (("agent_namespace",), "--agent-service-account cannot be empty"),
        (("agent_service_account",), "--agent-namespace cannot be empty"),
        (("authentication_audience",), "--agent-namespace cannot be empty"),
        (("agent_namespace", "agent_service_account"), "--authentication-audience cannot be empty"),
        (("agent_namespace", "authentication_audience"), "--agent-service-account cannot be empty"),
        (("agent_service_account", "authentication_audience"), "--agent-namespace cannot be empty"),
    ])
    def test_partial_settings_fail(self, given, message):
        """Test namespace, service account and audience are all-or-nothing."""
        options = build_options(**{name: self.AUTH[name] for name in given})

        assert_rejected(options, "service-account-auth", message)

    def test_cluster_ca_not_allowed(self, tls_files):
        """Test a cluster CA cannot be combined with token authentication."""
        options = build_options(cluster_ca_cert=tls_files["cluster-ca.crt"], **self.AUTH)

        assert_rejected(options, "service-account-auth", "--cluster-ca-cert can not be used")

    def test_cluster_ca_reported_before_missing_fields(self, tls_files):
        """Test the cluster CA conflict is reported first."""
        options = build_options(
            cluster_ca_cert=tls_files["cluster-ca.crt"],
            agent_namespace="kube-system",
        )

        assert_rejected(options, "service-account-auth", "--cluster-ca-cert")

    def test_complete_settings_need_cluster_client(self):
        """Test full token authentication settings pass and need a client."""
        validated = validate_options(build_options(**self.AUTH))

        assert validated.using_service_account_auth is True
        assert validated.needs_kubernetes_client is True


class TestKubeconfig:
    """Test kubeconfig path checking."""

    def test_missing_kubeconfig_fails(self, temp_dir):
        """Test a kubeconfig path must exist."""
        path = str(temp_dir / "nope.kubeconfig")

        assert_rejected(build_options(kubeconfig_path=path), "kubeconfig", path)

    def test_existing_kubeconfig_passes(self, kubeconfig_file):
        """Test an existing kubeconfig is accepted without needing a client."""
        validated = validate_options(build_options(kubeconfig_path=kubeconfig_file))

        assert validated.needs_kubernetes_client is False


class TestProxyStrategies:
    """Test proxy strategy validation."""

    def test_empty_fails(self):
        """Test the strategy list cannot be empty."""
        assert_rejected(build_options(proxy_strategies=""), "proxy-strategies", "ProxyStrategies cannot be empty")

    def test_only_separators_fail(self):
        """Test a list of blank entries is rejected by the parser."""
        assert_rejected(
            build_options(proxy_strategies=",,"),
            "proxy-strategies",
            "invalid proxy strategies: proxy strategies cannot be empty",
        )

    def test_unknown_strategy_fails(self):
        """Test unknown strategy names are rejected."""
        assert_rejected(
            build_options(proxy_strategies="bogus-strategy"),
            "proxy-strategies",
            "unknown proxy strategy: bogus-strategy",
        )

    def test_strategy_order_preserved(self):
        """Test the validated config keeps the configured order."""
        validated = validate_options(build_options(proxy_strategies="destHost,defaultRoute,default"))

        assert validated.proxy_strategies == (
            ProxyStrategyType.DEST_HOST,
            ProxyStrategyType.DEFAULT_ROUTE,
            ProxyStrategyType.DEFAULT,
        )


class TestChannelSize:
    """Test transfer channel sizing."""

    @pytest.mark.parametrize("size", [0, -1, -100])
    def test_non_positive_fails(self, size):
        """Test channel size must be positive."""
        assert_rejected(build_options(xfr_channel_size=size), "xfr-channel-size", f"channel size {size}")

    @pytest.mark.parametrize("size", [1, 10, 4096])
    def test_positive_passes(self, size):
        """Test positive sizes are accepted."""
        assert find_violation(build_options(xfr_channel_size=size)) is None


class TestCipherSuites:
    """Test cipher suite allow-list."""

    def test_empty_list_passes(self):
        """Test no cipher suites defers to the TLS library default."""
        assert find_violation(build_options(cipher_suites=())) is None

    def test_accepted_ciphers_pass(self):
        """Test accepted cipher suites pass."""
        options = build_options(cipher_suites=(
            "TLS_ECDHE_RSA_WITH_AES_128_GCM_SHA256",
            "TLS_AES_256_GCM_SHA384",
        ))

        assert find_violation(options) is None

    def test_static_rsa_cipher_passes(self):
        """Test RSA key exchange suites stay usable for existing deployments."""
        options = build_options(cipher_suites=("TLS_RSA_WITH_AES_128_GCM_SHA256",))

        assert find_violation(options) is None

    @pytest.mark.parametrize("cipher", ["TLS_RSA_WITH_RC4_128_SHA", "NOT_A_CIPHER", ""])
    def test_unknown_cipher_fails(self, cipher):
        """Test insecure or unknown cipher suites are rejected."""
        options = build_options(cipher_suites=("TLS_AES_128_GCM_SHA256", cipher))

        assert_rejected(options, "cipher-suites", f"cipher suite {cipher} not supported")


class TestLeaseLabel:
    """Test lease controller label validation."""

    def test_valid_label_passes_and_needs_client(self):
        """Test a parseable label with the lease controller enabled."""
        validated = validate_options(build_options(enable_lease_controller=True, lease_label="k8s-app=my-app"))

        assert validated.needs_kubernetes_client is True
        assert validated.using_service_account_auth is False

    def test_default_label_passes(self):
        """Test the default lease label is parseable."""
        assert find_violation(build_options(enable_lease_controller=True)) is None

    @pytest.mark.parametrize("label", ["k8s-app=my app", "k8s-app in (", "", "-bad-=x"])
    def test_unparsable_label_fails(self, label):
        """Test an unparsable label is rejected when the controller is enabled."""
        options = build_options(enable_lease_controller=True, lease_label=label)

        assert_rejected(options, "lease-label", "invalid lease label")

    def test_label_ignored_when_controller_disabled(self):
        """Test the label is only checked when the lease controller is enabled."""
        assert find_violation(build_options(lease_label="k8s-app in (")) is None
