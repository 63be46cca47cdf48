from __future__ import annotations

from .models import ContainerRecord
from .settings import (
    COMPOSE_PROJECT_LABEL,
    COMPOSE_SERVICE_LABEL,
    DNS_SUFFIX,
    MANAGED_PROJECT_PREFIX,
    NETWORK_NAME,
)

PROHIBITED_NETWORK_MODES = {"none", "host"}
# Modes that join another container's (or service's) network namespace.
SHARED_NAMESPACE_PREFIXES = ("container:", "service:")


def is_managed_project(project: str | None) -> bool:
    return bool(project) and project.startswith(MANAGED_PROJECT_PREFIX)


def is_eligible_container(container: ContainerRecord) -> bool:
    return is_managed_project(container.labels.get(COMPOSE_PROJECT_LABEL))


def is_prohibited_network_mode(mode: str) -> bool:
    return mode in PROHIBITED_NETWORK_MODES or mode.startswith(SHARED_NAMESPACE_PREFIXES)


def is_already_member(container: ContainerRecord) -> bool:
    return NETWORK_NAME in container.networks


def dns_name(service: str | None, project: str | None) -> str:
    return f"{service}.{project}.{DNS_SUFFIX}"


def get_dns_name(container: ContainerRecord) -> str:
    return dns_name(container.labels.get(COMPOSE_SERVICE_LABEL), container.labels.get(COMPOSE_PROJECT_LABEL))
