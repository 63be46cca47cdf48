"""Async wrapper around the docker-py SDK.

Every call runs through ``asyncio.to_thread`` so the reconciler's event loop is
never blocked by the daemon. Only the operations the reconciler needs are
exposed; the raw SDK client stays reachable as ``DockerRuntime.client``.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Iterator

import docker
from docker.errors import DockerException
from requests.exceptions import RequestException

from .models import ContainerRecord

log = logging.getLogger(__name__)

# What a single daemon call can raise: API errors, or transport errors the SDK
# lets through unwrapped.
RUNTIME_ERRORS = (DockerException, RequestException)


class RuntimeUnavailable(RuntimeError):
    """The Docker daemon could not be reached."""


class DockerRuntime:
    def __init__(self, client: docker.DockerClient):
        self.client = client

    @classmethod
    def from_env(cls, timeout: int | None = None) -> "DockerRuntime":
        kwargs: dict[str, Any] = {}
        if timeout is not None:
            kwargs["timeout"] = timeout
        try:
            client = docker.from_env(**kwargs)
            client.ping()
        except RUNTIME_ERRORS as e:
            raise RuntimeUnavailable(f"Failed to connect to Docker: {e}") from e
        log.debug("Docker client initialized")
        return cls(client)

    async def ping(self) -> bool:
        try:
            return bool(await asyncio.to_thread(self.client.ping))
        except RUNTIME_ERRORS:
            return False

    # Networks

    async def list_networks(self, name: str) -> list[str]:
        """Names of networks matching ``name`` (the daemon filter is not exact)."""
        networks = await asyncio.to_thread(self.client.networks.list, names=[name])
        return [n.name for n in networks]

    async def create_network(self, name: str, driver: str = "bridge", internal: bool = False) -> None:
        await asyncio.to_thread(self.client.networks.create, name, driver=driver, internal=internal)

    async def inspect_network(self, name: str) -> dict[str, Any]:
        return await asyncio.to_thread(self.client.api.inspect_network, name)

    async def connect_container(self, network: str, container_id: str, aliases: list[str]) -> None:
        await asyncio.to_thread(
            self.client.api.connect_container_to_network,
            container_id,
            network,
            aliases=aliases,
        )

    # Containers

    async def list_containers(self, filters: dict[str, Any] | None = None) -> list[ContainerRecord]:
        """Running containers matching ``filters``, with no result limit."""

        def _list() -> list[dict[str, Any]]:
            return [c.attrs for c in self.client.containers.list(sparse=True, filters=filters or {})]

        return [ContainerRecord.from_attrs(attrs) for attrs in await asyncio.to_thread(_list)]

    async def get_container(self, container_id: str) -> ContainerRecord | None:
        matches = await self.list_containers({"id": [container_id]})
        for c in matches:
            if c.id == container_id:
                return c
        return matches[0] if matches else None

    # Exec

    async def exec_create(self, container_id: str, command: list[str], user: str = "0") -> str:
        resp = await asyncio.to_thread(
            self.client.api.exec_create,
            container_id,
            command,
            stdout=False,
            stderr=False,
            user=user,
        )
        return resp["Id"]

    async def exec_start(self, exec_id: str) -> None:
        await asyncio.to_thread(self.client.api.exec_start, exec_id, detach=True, tty=False)

    async def exec_inspect(self, exec_id: str) -> dict[str, Any]:
        return await asyncio.to_thread(self.client.api.exec_inspect, exec_id)

    # Events

    def events(self, filters: dict[str, Any] | None = None, since: int | None = None) -> Iterator[dict[str, Any]]:
        """Blocking stream of decoded event payloads. Consume it off the event loop."""
        return self.client.events(decode=True, filters=filters, since=since)
