"""Pydantic models for configuration and runtime state."""

from acme_companion.models.config import (
    CompanionConfig,
    DockerConfig,
    ContainersConfig,
    DHParamConfig,
    PathsConfig,
    AcmeConfig,
)
from acme_companion.models.container import ContainerRef, MountRequirement
from acme_companion.models.lock import GenerationLockRecord

__all__ = [
    "CompanionConfig",
    "DockerConfig",
    "ContainersConfig",
    "DHParamConfig",
    "PathsConfig",
    "AcmeConfig",
    "ContainerRef",
    "MountRequirement",
    "GenerationLockRecord",
]
