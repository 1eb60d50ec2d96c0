"""Resolution of the companion's own container and its siblings."""

import logging
import re
import socket
from pathlib import Path
from typing import Callable, List, Optional

from acme_companion.errors import RuntimeApiError
from acme_companion.models.config import ContainersConfig
from acme_companion.models.container import ContainerRef
from acme_companion.runtime.client import DockerClient


logger = logging.getLogger(__name__)

CONTAINER_ID_RE = re.compile(r"[0-9a-f]{64}")
# cgroup v2 hosts only expose the ID through overlay/bind mount sources
MOUNTINFO_ID_RE = re.compile(r"/containers/([0-9a-f]{64})/")

PROXY_ENV_MARKER = "NGINX_VERSION"
RENDERER_ENV_MARKER = "DOCKER_GEN_VERSION"


class RuntimeInspector:
    """Point-in-time Docker queries for one provisioning run."""

    def __init__(
        self,
        client: DockerClient,
        config: ContainersConfig,
        proc_root: Path = Path("/proc"),
        hostname: Optional[Callable[[], str]] = None,
    ):
        """Initialize runtime inspector."""
        self.client = client
        self.config = config
        self.proc_root = Path(proc_root)
        self._hostname = hostname or socket.gethostname
        self._self_id: Optional[str] = None

    def self_container_id(self) -> Optional[str]:
        """Resolve this container's ID from the kernel, then the Docker API."""
        if self._self_id:
            return self._self_id

        for source, pattern in (
            ("1/cpuset", CONTAINER_ID_RE),
            ("self/cgroup", CONTAINER_ID_RE),
            ("self/mountinfo", MOUNTINFO_ID_RE),
        ):
            container_id = self._scan_proc(source, pattern)
            if container_id:
                logger.debug(f"Resolved own container ID from /proc/{source}")
                self._self_id = container_id
                return container_id

        # Docker defaults the hostname to the short container ID
        ref = self.inspect(self._hostname())
        if ref:
            logger.debug("Resolved own container ID from the Docker API")
            self._self_id = ref.id
        return self._self_id

    def _scan_proc(self, source: str, pattern: "re.Pattern[str]") -> Optional[str]:
        """Find the first container ID in a /proc file."""
        path = self.proc_root / source
        try:
            content = path.read_text(errors="ignore")
        except OSError:
            return None

        match = pattern.search(content)
        if not match:
            return None
        return match.group(1) if pattern.groups else match.group(0)

    def inspect(self, container_id: str) -> Optional[ContainerRef]:
        """Inspect a container by ID or name."""
        if not container_id:
            return None
        try:
            data = self.client.inspect_container(container_id)
        except RuntimeApiError as e:
            logger.debug(f"Failed to inspect container {container_id}: {e}")
            return None
        return ContainerRef.from_inspect(data) if data else None

    def self_container(self) -> Optional[ContainerRef]:
        """Inspect this container."""
        container_id = self.self_container_id()
        return self.inspect(container_id) if container_id else None

    def containers_by_label(self, label: str) -> List[ContainerRef]:
        """Running containers carrying a label, whatever its value."""
        try:
            listing = self.client.list_containers({"label": [label]})
        except RuntimeApiError as e:
            logger.debug(f"Failed to list containers with label {label}: {e}")
            return []
        # Filter again locally in case the daemon ignored the filter
        return [
            ContainerRef.from_listing(item)
            for item in listing
            if label in (item.get("Labels") or {})
        ]

    def labeled_container(self, label: str) -> Optional[ContainerRef]:
        """First running container carrying a label."""
        matches = self.containers_by_label(label)
        if len(matches) > 1:
            logger.warning(
                f"Several containers carry the label {label}, using {matches[0].name or matches[0].id}"
            )
        return matches[0] if matches else None

    def containers_by_image(self, substring: str) -> List[ContainerRef]:
        """Running containers whose image name contains a substring."""
        try:
            listing = self.client.list_containers()
        except RuntimeApiError as e:
            logger.debug(f"Failed to list containers: {e}")
            return []
        return [
            ContainerRef.from_listing(item)
            for item in listing
            if substring in (item.get("Image") or "")
        ]

    def proxy_container(self) -> Optional[ContainerRef]:
        """Resolve the nginx-proxy container.

        Order: NGINX_PROXY_CONTAINER, the nginx_proxy label, then containers
        this one mounts volumes from that run nginx.
        """
        if self.config.proxy:
            ref = self.inspect(self.config.proxy)
            if ref:
                return ref
            logger.warning(f"NGINX_PROXY_CONTAINER is set to {self.config.proxy} but no such container exists")

        labeled = self.labeled_container(self.config.proxy_label)
        if labeled:
            return self.inspect(labeled.id) or labeled

        own = self.self_container()
        for source in own.volumes_from if own else []:
            # Remote docker-compose appends :ro or :rw
            candidate = self.inspect(source.split(":", 1)[0])
            if candidate and candidate.has_env(PROXY_ENV_MARKER):
                return candidate

        return None

    def renderer_container(self) -> Optional[ContainerRef]:
        """Resolve a standalone docker-gen container."""
        if self.config.renderer:
            ref = self.inspect(self.config.renderer)
            if ref:
                return ref
            logger.warning(
                f"NGINX_DOCKER_GEN_CONTAINER is set to {self.config.renderer} but no such container exists"
            )

        labeled = self.labeled_container(self.config.renderer_label)
        if labeled:
            return self.inspect(labeled.id) or labeled
        return None

    def bundles_renderer(self, container: ContainerRef) -> bool:
        """Whether a container runs docker-gen itself (two container setup).

        The label and the docker-gen env marker are explicit; the image name
        match is a last resort kept for images that carry neither.
        """
        if self.config.renderer_label in container.labels:
            return True
        if container.has_env(RENDERER_ENV_MARKER):
            return True
        hint = self.config.renderer_image_hint
        if hint and container.image and hint in container.image:
            logger.debug(f"Assuming {container.image} bundles docker-gen from its image name")
            return True
        return False
