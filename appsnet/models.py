from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ContainerRecord(BaseModel):
    """Point-in-time snapshot of one container, as listed by the daemon."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Full container id")
    names: list[str] = Field(default_factory=list, description="Display names without the leading '/'")
    labels: dict[str, str] = Field(default_factory=dict)
    network_mode: str = Field("default", description="HostConfig.NetworkMode")
    networks: list[str] = Field(default_factory=list, description="Names of attached networks")

    @classmethod
    def from_attrs(cls, attrs: dict[str, Any]) -> "ContainerRecord":
        """Build a record from a container list payload (or full inspect payload)."""
        names = attrs.get("Names")
        if names is None and attrs.get("Name"):
            names = [attrs["Name"]]
        host_config = attrs.get("HostConfig") or {}
        network_settings = attrs.get("NetworkSettings") or {}
        return cls(
            id=attrs["Id"],
            names=[n.lstrip("/") for n in names or []],
            labels=attrs.get("Labels") or (attrs.get("Config") or {}).get("Labels") or {},
            network_mode=host_config.get("NetworkMode") or "default",
            networks=list((network_settings.get("Networks") or {}).keys()),
        )

    @property
    def display_names(self) -> str:
        return ", ".join(self.names)


class ContainerEvent(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: str
    action: str
    actor_id: str
    attributes: dict[str, str] = Field(default_factory=dict)
    time: int | None = Field(None, description="Unix seconds, as reported by the daemon")

    @property
    def key(self) -> str:
        return f"{self.type}.{self.action}"

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "ContainerEvent":
        actor = payload.get("Actor") or {}
        return cls(
            type=payload.get("Type") or "",
            action=payload.get("Action") or payload.get("status") or "",
            actor_id=actor.get("ID") or payload.get("id") or "",
            attributes=actor.get("Attributes") or {},
            time=payload.get("time"),
        )
