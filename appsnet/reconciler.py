from __future__ import annotations

import asyncio
import logging
import time

from .aliases import inject_aliases
from .connector import connect_container
from .docker_ops import DockerRuntime
from .eligibility import get_dns_name, is_already_member, is_eligible_container, is_managed_project
from .events import EventFeed
from .models import ContainerEvent, ContainerRecord
from .network import ensure_network, resolve_gateway_ip
from .settings import COMPOSE_PROJECT_LABEL, NETWORK_NAME, HostGatewayConfig, Settings

log = logging.getLogger(__name__)

CONTAINER_START = "container.start"


class Reconciler:
    """Keeps managed app containers attached to the internal network.

    One pass over the running containers at startup, then one step per
    container start event for the life of the process. Every step re-reads the
    container and checks membership right before acting, so a container seen
    both in the startup snapshot and as an event is only connected once.
    """

    def __init__(
        self,
        runtime: DockerRuntime,
        config: HostGatewayConfig,
        settings: Settings | None = None,
        events: EventFeed | None = None,
    ):
        self.runtime = runtime
        self.config = config
        self.settings = settings or Settings()
        self.events = events
        self._handlers: set[asyncio.Task] = set()

    async def setup(self) -> None:
        await ensure_network(self.runtime)
        if not self.config.enabled:
            return
        self.config.gateway_ip = await resolve_gateway_ip(self.runtime)
        if not self.config.gateway_ip:
            log.warning(f"Host gateway alias is enabled, but {NETWORK_NAME} gateway IP could not be determined")
        else:
            log.info(f"Host gateway alias enabled: {', '.join(self.config.aliases)} -> {self.config.gateway_ip}")

    async def reconcile_container(self, container: ContainerRecord) -> None:
        if is_already_member(container):
            log.info(
                f"Container {container.id} (aka {container.display_names}) already connected "
                f"to network as {get_dns_name(container)}"
            )
        else:
            await connect_container(self.runtime, container)
        await self._inject(container)

    async def reconcile_existing(self) -> int:
        """Process every running managed container, one at a time. Returns how many."""
        log.debug("Connecting existing app containers to network")
        containers = await self.runtime.list_containers({"label": [COMPOSE_PROJECT_LABEL]})
        app_containers = [c for c in containers if is_eligible_container(c)]
        for container in app_containers:
            await self._reconcile_safely(container)
        log.info("All existing app containers connected to network")
        return len(app_containers)

    async def handle_container_start(self, event: ContainerEvent) -> None:
        if not is_managed_project(event.attributes.get(COMPOSE_PROJECT_LABEL)):
            return

        # The event payload may be stale; act on the daemon's current view.
        container = await self.runtime.get_container(event.actor_id)
        if container is None:
            log.warning(f"Container {event.actor_id} not found")
            return
        if not is_already_member(container):
            log.debug(f"New container started: {container.id}")
        await self.reconcile_container(container)

    async def run(self) -> None:
        await self.setup()

        # Events from here on are replayed once the snapshot is done.
        since = int(time.time())
        await self.reconcile_existing()

        feed = self.events or EventFeed(
            self.runtime,
            reconnect_delay_s=self.settings.events_reconnect_delay_s,
            since=since,
        )
        async for event in feed.subscribe(CONTAINER_START):
            self._spawn(event)

    def _spawn(self, event: ContainerEvent) -> asyncio.Task:
        task = asyncio.create_task(self._handle_safely(event))
        self._handlers.add(task)
        task.add_done_callback(self._handlers.discard)
        return task

    async def _reconcile_safely(self, container: ContainerRecord) -> None:
        try:
            await self.reconcile_container(container)
        except Exception:
            log.exception(f"Failed to reconcile container {container.id}")

    async def _handle_safely(self, event: ContainerEvent) -> None:
        try:
            await self.handle_container_start(event)
        except Exception:
            log.exception(f"Failed to handle {event.key} for container {event.actor_id}")

    async def _inject(self, container: ContainerRecord) -> bool:
        return await inject_aliases(
            self.runtime,
            container,
            self.config,
            poll_interval_s=self.settings.exec_poll_interval_s,
            timeout_s=self.settings.exec_timeout_s or None,
        )
