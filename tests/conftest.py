from __future__ import annotations

from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from appsnet.models import ContainerRecord
from appsnet.settings import COMPOSE_PROJECT_LABEL, COMPOSE_SERVICE_LABEL


def _container_attrs(
    container_id: str = "c0ffee",
    project: str | None = "ix-myapp",
    service: str | None = "web",
    network_mode: str = "bridge",
    networks: list[str] | None = None,
    names: list[str] | None = None,
) -> dict[str, Any]:
    labels: dict[str, str] = {}
    if project is not None:
        labels[COMPOSE_PROJECT_LABEL] = project
    if service is not None:
        labels[COMPOSE_SERVICE_LABEL] = service
    return {
        "Id": container_id,
        "Names": names if names is not None else [f"/{project}-{service}-1"],
        "Labels": labels,
        "HostConfig": {"NetworkMode": network_mode},
        "NetworkSettings": {"Networks": {n: {} for n in (networks if networks is not None else ["bridge"])}},
    }


def _start_event(container_id: str = "c0ffee", project: str | None = "ix-myapp", time: int = 1700000000) -> dict[str, Any]:
    attributes = {"name": "web"}
    if project is not None:
        attributes[COMPOSE_PROJECT_LABEL] = project
    return {
        "Type": "container",
        "Action": "start",
        "Actor": {"ID": container_id, "Attributes": attributes},
        "time": time,
    }


@pytest.fixture
def container_attrs():
    """Builder for a container payload shaped like an entry of GET /containers/json."""
    return _container_attrs


@pytest.fixture
def make_container():
    def _make(**kwargs: Any) -> ContainerRecord:
        return ContainerRecord.from_attrs(_container_attrs(**kwargs))

    return _make


@pytest.fixture
def start_event():
    """Builder for a decoded container start event."""
    return _start_event


@pytest.fixture
def runtime() -> MagicMock:
    """A DockerRuntime stand-in whose calls all succeed by default."""
    rt = MagicMock(name="runtime")
    rt.list_networks = AsyncMock(return_value=[])
    rt.create_network = AsyncMock(return_value=None)
    rt.inspect_network = AsyncMock(return_value={"IPAM": {"Config": [{"Subnet": "172.30.0.0/16", "Gateway": "172.30.0.1"}]}})
    rt.connect_container = AsyncMock(return_value=None)
    rt.list_containers = AsyncMock(return_value=[])
    rt.get_container = AsyncMock(return_value=None)
    rt.exec_create = AsyncMock(return_value="exec-1")
    rt.exec_start = AsyncMock(return_value=None)
    rt.exec_inspect = AsyncMock(return_value={"Running": False, "ExitCode": 0})
    return rt
