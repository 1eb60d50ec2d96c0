"""Shared fixtures: temporary filesystem contract and a fake Docker API."""

import json
import re
from pathlib import Path
from typing import Any, Dict, List, Optional

import httpx
import pytest

from acme_companion.models.config import CompanionConfig


DEFAULT_DHPARAM = (
    "-----BEGIN DH PARAMETERS-----\n"
    "MIIBCAKCAQEA//////////+t+FRYortKmq/cViAnPTzx2LnFg84tNpWp4TZBFGQz\n"
    "+8yTnc4kmz75fS/jY2MMddj2gbICrsRhetPfHtXV/WVhJDP1H18GbtCFY2VVPe0a\n"
    "-----END DH PARAMETERS-----\n"
)

SELF_ID = "5d2c9e0b" * 8
PROXY_ID = "a1b2c3d4" * 8
RENDERER_ID = "0f1e2d3c" * 8


def container_payload(
    container_id: str,
    name: str,
    image: str = "nginx:alpine",
    labels: Optional[Dict[str, str]] = None,
    env: Optional[List[str]] = None,
    mounts: Optional[List[str]] = None,
    volumes_from: Optional[List[str]] = None,
) -> Dict[str, Any]:
    """A trimmed `GET /containers/{id}/json` payload."""
    return {
        "Id": container_id,
        "Name": f"/{name}",
        "Image": "sha256:" + "0" * 64,
        "Config": {
            "Image": image,
            "Labels": labels or {},
            "Env": env or [],
        },
        "HostConfig": {"VolumesFrom": volumes_from},
        "Mounts": [{"Destination": m} for m in mounts or []],
    }


class FakeDockerApi:
    """In-memory Docker Engine API served through httpx.MockTransport."""

    def __init__(self, containers: List[Dict[str, Any]], exec_exit_code: int = 0):
        self.containers = {c["Id"]: c for c in containers}
        self.exec_exit_code = exec_exit_code
        self.requests: List[httpx.Request] = []
        self.killed: List[tuple] = []
        self.executed: List[tuple] = []

    def find(self, key: str) -> Optional[Dict[str, Any]]:
        for container in self.containers.values():
            if container["Id"].startswith(key) or container["Name"].lstrip("/") == key:
                return container
        return None

    def listing(self, container: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "Id": container["Id"],
            "Names": [container["Name"]],
            "Image": container["Config"]["Image"],
            "Labels": container["Config"]["Labels"],
            "Mounts": container["Mounts"],
        }

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if path == "/containers/json":
            filters = json.loads(request.url.params.get("filters", "{}"))
            labels = filters.get("label", [])
            items = [
                self.listing(c)
                for c in self.containers.values()
                if all(label in c["Config"]["Labels"] for label in labels)
            ]
            return httpx.Response(200, json=items)

        match = re.match(r"^/containers/([^/]+)/(json|kill|exec)$", path)
        if match:
            container = self.find(match.group(1))
            if container is None:
                return httpx.Response(404, json={"message": "No such container"})
            action = match.group(2)
            if action == "json":
                return httpx.Response(200, json=container)
            if action == "kill":
                self.killed.append((container["Id"], request.url.params["signal"]))
                return httpx.Response(204)
            body = json.loads(request.content)
            self.executed.append((container["Id"], body["Cmd"]))
            return httpx.Response(201, json={"Id": "exec-1"})

        if path == "/exec/exec-1/start":
            return httpx.Response(200, content=b"reloaded\n")
        if path == "/exec/exec-1/json":
            return httpx.Response(200, json={"ExitCode": self.exec_exit_code})

        return httpx.Response(404, json={"message": f"unexpected path {path}"})

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def volume_dirs(tmp_path) -> List[Path]:
    """The three required volumes, created and writable."""
    dirs = [tmp_path / "certs", tmp_path / "vhost.d", tmp_path / "html"]
    for directory in dirs:
        directory.mkdir()
    return dirs


@pytest.fixture
def pregenerated(tmp_path) -> Path:
    """Bundled fallback dhparam file."""
    app_dir = tmp_path / "app"
    app_dir.mkdir()
    path = app_dir / "dhparam.pem.default"
    path.write_text(DEFAULT_DHPARAM)
    return path


@pytest.fixture
def companion_config(tmp_path, volume_dirs, pregenerated) -> CompanionConfig:
    """Configuration pointing every path at the temporary directory."""
    return CompanionConfig(
        docker={"host": "tcp://docker:2375"},
        paths={
            "dhparam_file": str(volume_dirs[0] / "dhparam.pem"),
            "pregenerated_dhparam": str(pregenerated),
            "lock_file": str(tmp_path / "le_companion_dhparam_generating.lock"),
            "required_dirs": [str(d) for d in volume_dirs],
        },
    )


@pytest.fixture
def proc_root(tmp_path) -> Path:
    """A fake /proc exposing this container's ID through cgroups."""
    root = tmp_path / "proc"
    (root / "self").mkdir(parents=True)
    (root / "self" / "cgroup").write_text(f"0::/system.slice/docker-{SELF_ID}.scope\n")
    return root
