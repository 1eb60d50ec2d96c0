"""Readiness verification of the companion's runtime environment."""

import logging
import os
import stat
from pathlib import Path
from typing import List

from acme_companion.errors import (
    ConfigRendererNotFound,
    DirectoryMissing,
    DirectoryUnwritable,
    ProxyContainerNotFound,
    RuntimeSocketUnavailable,
    SelfIdentityUnresolved,
)
from acme_companion.models.config import CompanionConfig
from acme_companion.models.container import ContainerRef, MountRequirement
from acme_companion.runtime.inspector import RuntimeInspector


logger = logging.getLogger(__name__)

WRITE_PROBE = ".check_writable"


class ReadinessVerifier:
    """Hard gates that must pass before any provisioning happens.

    Checks run in a fixed order and the first failure raises a
    CompanionError. Mount metadata from the Docker API is advisory only:
    the filesystem probe decides whether a directory is usable.
    """

    def __init__(self, config: CompanionConfig, inspector: RuntimeInspector):
        """Initialize readiness verifier."""
        self.config = config
        self.inspector = inspector

    def verify(self) -> List[MountRequirement]:
        """Run every check; returns the evaluated mount requirements."""
        self.check_runtime_socket()
        own = self.check_self_identity()
        self.check_siblings()
        return [self.check_directory(Path(path), own) for path in self.config.paths.required_dirs]

    def check_runtime_socket(self) -> None:
        """A unix:// Docker host must point at an existing socket."""
        socket_path = self.config.docker.socket_path
        if socket_path is None:
            return

        try:
            mode = os.stat(socket_path).st_mode
        except OSError:
            raise RuntimeSocketUnavailable(socket_path)

        if not stat.S_ISSOCK(mode):
            raise RuntimeSocketUnavailable(socket_path)

    def check_self_identity(self) -> ContainerRef:
        """The companion must know its own container."""
        container_id = self.inspector.self_container_id()
        if not container_id:
            raise SelfIdentityUnresolved()

        own = self.inspector.inspect(container_id)
        if own is None:
            # The ID came from /proc but the daemon doesn't know it
            logger.warning(f"Own container {container_id} could not be inspected")
            own = ContainerRef(id=container_id)
        logger.debug(f"Own container ID: {container_id}")
        return own

    def check_siblings(self) -> None:
        """nginx-proxy must exist, and docker-gen either alone or bundled."""
        containers = self.config.containers

        proxy = self.inspector.proxy_container()
        if proxy is None:
            raise ProxyContainerNotFound(containers.proxy_label)
        logger.debug(f"nginx-proxy container: {proxy.name or proxy.id}")

        renderer = self.inspector.renderer_container()
        if renderer is None and not self.inspector.bundles_renderer(proxy):
            unlabeled = self.inspector.containers_by_image(containers.renderer_image)
            raise ConfigRendererNotFound(
                containers.renderer_label,
                [c.name or c.id for c in unlabeled],
            )
        if renderer is not None:
            logger.debug(f"docker-gen container: {renderer.name or renderer.id}")

    def check_directory(self, path: Path, own: ContainerRef) -> MountRequirement:
        """A required directory must exist and accept writes."""
        requirement = MountRequirement(path=str(path))

        requirement.mounted = str(path) in own.mounts
        if not requirement.mounted:
            logger.warning(f"'{path}' does not appear to be a mounted volume.")

        if not path.is_dir():
            raise DirectoryMissing(path)

        probe = path / WRITE_PROBE
        try:
            probe.touch()
        except OSError:
            raise DirectoryUnwritable(path)
        probe.unlink(missing_ok=True)
        requirement.writable = True

        return requirement
