"""Container and volume models resolved from the Docker API."""

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field


class ContainerRef(BaseModel):
    """A running container resolved for the duration of one run."""
    model_config = ConfigDict(extra="ignore")

    id: str = Field(..., description="Full container ID")
    name: Optional[str] = None
    image: Optional[str] = None
    labels: Dict[str, str] = Field(default_factory=dict)
    env: List[str] = Field(default_factory=list)
    mounts: List[str] = Field(default_factory=list, description="Mount destinations")
    volumes_from: List[str] = Field(default_factory=list)

    @classmethod
    def from_inspect(cls, data: Dict[str, Any]) -> "ContainerRef":
        """Build from a `GET /containers/{id}/json` payload."""
        config = data.get("Config") or {}
        host_config = data.get("HostConfig") or {}
        return cls(
            id=data["Id"],
            name=(data.get("Name") or "").lstrip("/") or None,
            image=config.get("Image") or data.get("Image"),
            labels=config.get("Labels") or {},
            env=config.get("Env") or [],
            mounts=[m["Destination"] for m in data.get("Mounts") or [] if "Destination" in m],
            volumes_from=host_config.get("VolumesFrom") or [],
        )

    @classmethod
    def from_listing(cls, data: Dict[str, Any]) -> "ContainerRef":
        """Build from one entry of a `GET /containers/json` payload."""
        names = data.get("Names") or []
        return cls(
            id=data["Id"],
            name=names[0].lstrip("/") if names else None,
            image=data.get("Image"),
            labels=data.get("Labels") or {},
            mounts=[m["Destination"] for m in data.get("Mounts") or [] if "Destination" in m],
        )

    def has_env(self, name: str) -> bool:
        """Check whether an environment variable is set in the container."""
        prefix = f"{name}="
        return any(entry.startswith(prefix) for entry in self.env)


class MountRequirement(BaseModel):
    """A directory that must be an externally mounted, writable volume."""
    path: str
    mounted: bool = False
    writable: bool = False
