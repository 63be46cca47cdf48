from __future__ import annotations

import os
import re
from dataclasses import dataclass, field


NETWORK_NAME = "apps-internal"
MANAGED_PROJECT_PREFIX = "ix-"
COMPOSE_PROJECT_LABEL = "com.docker.compose.project"
COMPOSE_SERVICE_LABEL = "com.docker.compose.service"
DNS_SUFFIX = "svc.cluster.local"
HOSTS_FILE = "/etc/hosts"

DEFAULT_HOST_GATEWAY_ALIASES = ["host-gateway.svc.cluster.local"]

_ALIAS_SPLIT_RE = re.compile(r"[,\s]+")
HOSTNAME_RE = re.compile(r"^[A-Za-z0-9_][A-Za-z0-9_-]{0,62}(\.[A-Za-z0-9_][A-Za-z0-9_-]{0,62})*$")


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def validate_alias(alias: str) -> None:
    if not HOSTNAME_RE.match(alias):
        raise ValueError(
            f"Invalid host gateway alias {alias!r}. Use hostname labels (letters, digits, '-', '_') separated by dots."
        )


def parse_host_gateway_aliases(value: str | None) -> list[str]:
    """Split a comma/whitespace separated alias list.

    Empty input, or input made only of separators, yields the built-in default.

    Raises ValueError for a token that is not a hostname.
    """
    if not value:
        return list(DEFAULT_HOST_GATEWAY_ALIASES)
    aliases = [a.strip() for a in _ALIAS_SPLIT_RE.split(value)]
    aliases = [a for a in aliases if a]
    for alias in aliases:
        validate_alias(alias)
    return aliases or list(DEFAULT_HOST_GATEWAY_ALIASES)


@dataclass
class HostGatewayConfig:
    enabled: bool
    aliases: list[str] = field(default_factory=lambda: list(DEFAULT_HOST_GATEWAY_ALIASES))
    # Resolved once at startup from the managed network's IPAM config.
    gateway_ip: str | None = None

    @property
    def active(self) -> bool:
        return self.enabled and bool(self.gateway_ip)


def get_host_gateway_config_from_env() -> HostGatewayConfig:
    # Anything but the literal "false" keeps the feature on.
    enabled = os.getenv("ENABLE_HOST_GATEWAY_ALIAS", "true").lower() != "false"
    aliases = parse_host_gateway_aliases(os.getenv("HOST_GATEWAY_ALIASES"))
    return HostGatewayConfig(enabled=enabled, aliases=aliases)


@dataclass(frozen=True)
class Settings:
    log_level: str = "info"
    exec_poll_interval_s: float = 0.1
    # 0 disables the per-exec deadline.
    exec_timeout_s: float = 0.0
    events_reconnect_delay_s: float = 5.0


def load_settings() -> Settings:
    return Settings(
        log_level=os.getenv("APPSNET_LOG_LEVEL", "info"),
        exec_poll_interval_s=max(0.01, _env_float("APPSNET_EXEC_POLL_INTERVAL_S", 0.1)),
        exec_timeout_s=max(0.0, _env_float("APPSNET_EXEC_TIMEOUT_S", 0.0)),
        events_reconnect_delay_s=max(0.0, _env_float("APPSNET_EVENTS_RECONNECT_DELAY_S", 5.0)),
    )
