"""
Command-line flag surface of the proxy server.

Every ProxyRunOptions field is bound to one switch. Flag names, help texts and
the "--flag=value" spelling of boolean switches follow the flag set the proxy
server has always exposed, so existing deployment manifests keep working.
"""

from datetime import timedelta
from typing import Any, Callable, List, NamedTuple, Optional

import click

from netproxy.config.settings import get_default_options
from netproxy.core.durations import format_duration, parse_duration

WARN_ON_CHANNEL_LIMIT_NOTICE = (
    "This behavior is now thread safe and always on. "
    "This flag will be removed in a future release."
)

_TRUE_VALUES = ("1", "t", "true", "y", "yes", "on")
_FALSE_VALUES = ("0", "f", "false", "n", "no", "off")


class DurationParamType(click.ParamType):
    """Go-style duration such as "1h", "30m" or "1h30m"."""

    name = "duration"

    def convert(self, value, param, ctx):
        if isinstance(value, timedelta):
            return value
        try:
            return parse_duration(value)
        except ValueError:
            self.fail(f"{value!r} is not a valid duration (e.g. 1h, 30m, 10s)", param, ctx)


class CommaSeparatedParamType(click.ParamType):
    """Comma separated list of strings; blank entries are dropped."""

    name = "strings"

    def convert(self, value, param, ctx):
        if isinstance(value, (list, tuple)):
            return tuple(value)
        return tuple(item.strip() for item in value.split(",") if item.strip())


DURATION = DurationParamType()
COMMA_SEPARATED = CommaSeparatedParamType()


class FlagSpec(NamedTuple):
    """
    One command-line switch.

    Attributes:
        flag: Switch name without leading dashes
        field: ProxyRunOptions field the switch writes to, or None for
            switches that are accepted but ignored
        type: click parameter type, or bool for on/off switches
        help: One-line description
    """

    flag: str
    field: Optional[str]
    type: Any
    help: str


FLAG_SPECS: List[FlagSpec] = [
    FlagSpec("server-cert", "server_cert", click.STRING,
             "If non-empty secure communication with this cert."),
    FlagSpec("server-key", "server_key", click.STRING,
             "If non-empty secure communication with this key."),
    FlagSpec("server-ca-cert", "server_ca_cert", click.STRING,
             "If non-empty the CA we use to validate KAS clients."),
    FlagSpec("cluster-cert", "cluster_cert", click.STRING,
             "If non-empty secure communication with this cert."),
    FlagSpec("cluster-key", "cluster_key", click.STRING,
             "If non-empty secure communication with this key."),
    FlagSpec("cluster-ca-cert", "cluster_ca_cert", click.STRING,
             "If non-empty the CA we use to validate Agent clients."),
    FlagSpec("mode", "mode", click.STRING,
             "mode can be either 'grpc' or 'http-connect'."),
    FlagSpec("uds-name", "uds_name", click.STRING,
             "uds-name should be empty for TCP traffic. For UDS set to its name."),
    FlagSpec("delete-existing-uds-file", "delete_uds_file", bool,
             "If true and if file UdsName already exists, delete the file before listen on that UDS file."),
    FlagSpec("server-port", "server_port", click.INT,
             "Port we listen for server connections on. Set to 0 for UDS."),
    FlagSpec("server-bind-address", "server_bind_address", click.STRING,
             "Bind address for server connections. If empty, we will bind to all interfaces."),
    FlagSpec("agent-port", "agent_port", click.INT,
             "Port we listen for agent connections on."),
    FlagSpec("agent-bind-address", "agent_bind_address", click.STRING,
             "Bind address for agent connections. If empty, we will bind to all interfaces."),
    FlagSpec("admin-port", "admin_port", click.INT,
             "Port we listen for admin connections on."),
    FlagSpec("admin-bind-address", "admin_bind_address", click.STRING,
             "Bind address for admin connections. If empty, we will bind to localhost."),
    FlagSpec("health-port", "health_port", click.INT,
             "Port we listen for health connections on."),
    FlagSpec("health-bind-address", "health_bind_address", click.STRING,
             "Bind address for health connections. If empty, we will bind to all interfaces."),
    FlagSpec("keepalive-time", "keepalive_time", DURATION,
             "Time for gRPC agent server keepalive."),
    FlagSpec("frontend-keepalive-time", "frontend_keepalive_time", DURATION,
             "Time for gRPC frontend server keepalive."),
    FlagSpec("enable-profiling", "enable_profiling", bool,
             "enable pprof at host:admin-port/debug/pprof"),
    FlagSpec("enable-contention-profiling", "enable_contention_profiling", bool,
             "enable contention profiling at host:admin-port/debug/pprof/block. "
             "\"--enable-profiling\" must also be set."),
    FlagSpec("server-id", "server_id", click.STRING,
             "The unique ID of this server. Can also be set by the 'PROXY_SERVER_ID' environment variable."),
    FlagSpec("server-count", "server_count", click.INT,
             "The number of proxy server instances, should be 1 unless it is an HA server."),
    FlagSpec("agent-namespace", "agent_namespace", click.STRING,
             "Expected agent's namespace during agent authentication "
             "(used with agent-service-account, authentication-audience, kubeconfig)."),
    FlagSpec("agent-service-account", "agent_service_account", click.STRING,
             "Expected agent's service account during agent authentication "
             "(used with agent-namespace, authentication-audience, kubeconfig)."),
    FlagSpec("kubeconfig", "kubeconfig_path", click.STRING,
             "absolute path to the kubeconfig file "
             "(used with agent-namespace, agent-service-account, authentication-audience)."),
    FlagSpec("kubeconfig-qps", "kubeconfig_qps", click.FLOAT,
             "Maximum client QPS (proxy server uses this client to authenticate agent tokens)."),
    FlagSpec("kubeconfig-burst", "kubeconfig_burst", click.INT,
             "Maximum client burst (proxy server uses this client to authenticate agent tokens)."),
    FlagSpec("kube-api-content-type", "api_content_type", click.STRING,
             "Content type of requests sent to apiserver."),
    FlagSpec("authentication-audience", "authentication_audience", click.STRING,
             "Expected agent's token authentication audience "
             "(used with agent-namespace, agent-service-account, kubeconfig)."),
    FlagSpec("proxy-strategies", "proxy_strategies", click.STRING,
             "The list of proxy strategies used by the server to pick an agent/tunnel, "
             "available strategies are: default, destHost, defaultRoute."),
    FlagSpec("cipher-suites", "cipher_suites", COMMA_SEPARATED,
             "The comma separated list of allowed cipher suites. Has no effect on TLS1.3. "
             "Empty means allow default list."),
    FlagSpec("xfr-channel-size", "xfr_channel_size", click.INT,
             "The size of the two server channels used for transferring data. One channel is "
             "for data coming from the API server, and the other one is for data coming from the agent."),
    FlagSpec("enable-lease-controller", "enable_lease_controller", bool,
             "Enable lease controller to publish and garbage collect proxy server leases."),
    FlagSpec("lease-namespace", "lease_namespace", click.STRING,
             "The namespace where lease objects are managed by the controller."),
    FlagSpec("lease-label", "lease_label", click.STRING,
             "The labels on which the lease objects are managed."),
    FlagSpec("warn-on-channel-limit", None, bool,
             f"(DEPRECATED: {WARN_ON_CHANNEL_LIMIT_NOTICE})"),
]

DEPRECATED_FLAGS = {"warn-on-channel-limit": WARN_ON_CHANNEL_LIMIT_NOTICE}


def param_name(spec: FlagSpec) -> str:
    """Keyword the command receives the switch value under."""
    return spec.field or spec.flag.replace("-", "_")


def _shown_default(value: Any) -> Any:
    if isinstance(value, timedelta):
        return format_duration(value)
    if value in ("", (), None):
        return False
    return str(value)


def _make_option(spec: FlagSpec, defaults: Any) -> Callable:
    if spec.type is bool:
        default = getattr(defaults, spec.field) if spec.field else True
        return click.option(
            f"--{spec.flag}/--no-{spec.flag}",
            param_name(spec),
            default=default,
            show_default=True,
            help=spec.help,
        )

    # server-id is generated per process; do not advertise one.
    shown = False if spec.field == "server_id" else _shown_default(getattr(defaults, spec.field))
    return click.option(
        f"--{spec.flag}",
        param_name(spec),
        type=spec.type,
        default=None,
        show_default=shown,
        help=spec.help,
    )


def bind_flags(command: Callable) -> Callable:
    """
    Decorate a click command with one option per FLAG_SPECS entry.

    Unset non-boolean switches arrive as None so that the options builder
    keeps the default. Boolean switches always arrive as a bool.
    """
    defaults = get_default_options()
    for spec in reversed(FLAG_SPECS):
        command = _make_option(spec, defaults)(command)
    return command


class GoStyleCommand(click.Command):
    """
    click command that also accepts "--flag=true" and "--flag=false" for
    boolean switches.
    """

    def parse_args(self, ctx: click.Context, args: List[str]) -> List[str]:
        switches = {}
        for param in self.params:
            if isinstance(param, click.Option) and param.is_flag and param.secondary_opts:
                for opt in param.opts:
                    switches[opt] = param.secondary_opts[0]

        rewritten = []
        for index, arg in enumerate(args):
            if arg == "--":
                rewritten.extend(args[index:])
                break
            name, sep, value = arg.partition("=")
            if sep and name in switches:
                lowered = value.lower()
                if lowered in _TRUE_VALUES:
                    arg = name
                elif lowered in _FALSE_VALUES:
                    arg = switches[name]
                else:
                    raise click.UsageError(
                        f"invalid argument {value!r} for {name}: expected true or false",
                        ctx=ctx,
                    )
            rewritten.append(arg)

        return super().parse_args(ctx, rewritten)
