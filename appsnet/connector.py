from __future__ import annotations

import logging

from .docker_ops import RUNTIME_ERRORS, DockerRuntime
from .eligibility import get_dns_name, is_prohibited_network_mode
from .models import ContainerRecord
from .settings import NETWORK_NAME

log = logging.getLogger(__name__)


async def connect_container(runtime: DockerRuntime, container: ContainerRecord) -> bool:
    """Attach ``container`` to the managed network under its DNS name.

    Callers must check membership first: connecting a container that is already
    attached is an error at the daemon. Failures are logged and reported as
    False; nothing is retried here.
    """
    if is_prohibited_network_mode(container.network_mode):
        log.debug(f"Container {container.id} is using network mode {container.network_mode}, skipping")
        return False

    alias = get_dns_name(container)
    log.debug(f"Connecting container {container.id} to network as {alias}")
    try:
        await runtime.connect_container(NETWORK_NAME, container.id, aliases=[alias])
    except RUNTIME_ERRORS as e:
        log.error(f"Failed to connect container {container.id} to network: {e}")
        return False

    log.info(f"Container {container.id} (aka {container.display_names}) connected to network as {alias}")
    return True
