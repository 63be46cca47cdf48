from __future__ import annotations

import logging

from .docker_ops import DockerRuntime
from .settings import NETWORK_NAME

log = logging.getLogger(__name__)


async def ensure_network(runtime: DockerRuntime, name: str = NETWORK_NAME) -> bool:
    """Create the internal bridge network unless exactly one already exists.

    Returns True when a network was created. Creation errors propagate: nothing
    else works without the network.
    """
    log.info(f"Setting up network {name}")
    existing = [n for n in await runtime.list_networks(name) if n == name]
    if len(existing) == 1:
        log.info("Network already exists")
        return False

    await runtime.create_network(name, driver="bridge", internal=True)
    log.info("Network created")
    return True


async def resolve_gateway_ip(runtime: DockerRuntime, name: str = NETWORK_NAME) -> str | None:
    details = await runtime.inspect_network(name)
    ipam_configs = (details.get("IPAM") or {}).get("Config") or []
    for cfg in ipam_configs:
        gateway = (cfg or {}).get("Gateway")
        if gateway:
            return gateway
    return None
