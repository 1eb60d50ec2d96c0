"""HTTP client for the Docker Engine API over a Unix socket or TCP."""

import json
import logging
from typing import Any, Dict, List, Optional

import httpx

from acme_companion.errors import RuntimeApiError
from acme_companion.models.config import DockerConfig


logger = logging.getLogger(__name__)


class DockerClient:
    """Minimal synchronous Docker Engine API client."""

    def __init__(self, config: DockerConfig, transport: Optional[httpx.BaseTransport] = None):
        """Initialize Docker client."""
        self.config = config
        self.socket_path = config.socket_path

        if transport is not None:
            self.base_url = "http://docker"
            self.transport = transport
        elif self.socket_path:
            # Use Unix socket
            self.base_url = "http://localhost"
            self.transport = httpx.HTTPTransport(uds=self.socket_path)
        else:
            self.base_url = f"http://{config.host.split('://', 1)[1]}"
            self.transport = None  # Default TCP transport

        if config.api_version:
            self.base_url = f"{self.base_url}/v{config.api_version.lstrip('v')}"

    def request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json_body: Optional[Dict[str, Any]] = None,
        allow_missing: bool = False,
    ) -> Any:
        """Send a request and return the decoded JSON body, if any."""
        try:
            with httpx.Client(
                transport=self.transport,
                base_url=self.base_url,
                timeout=self.config.timeout,
            ) as client:
                response = client.request(method, path, params=params, json=json_body)
                if allow_missing and response.status_code == 404:
                    return None
                response.raise_for_status()
                if not response.content:
                    return None
                return response.json()

        except httpx.RequestError as e:
            raise RuntimeApiError(f"Connection error: {e}")
        except httpx.HTTPStatusError as e:
            raise RuntimeApiError(f"HTTP error {e.response.status_code}: {e.response.text}")
        except ValueError as e:
            raise RuntimeApiError(f"Invalid JSON from Docker API: {e}")

    def inspect_container(self, container_id: str) -> Optional[Dict[str, Any]]:
        """Inspect a container by ID or name; None if it does not exist."""
        return self.request("GET", f"/containers/{container_id}/json", allow_missing=True)

    def list_containers(self, filters: Optional[Dict[str, List[str]]] = None) -> List[Dict[str, Any]]:
        """List running containers, optionally filtered server-side."""
        params = {"filters": json.dumps(filters)} if filters else None
        return self.request("GET", "/containers/json", params=params) or []

    def kill_container(self, container_id: str, signal: str) -> None:
        """Send a signal to a container's main process."""
        self.request("POST", f"/containers/{container_id}/kill", params={"signal": signal})

    def exec_in_container(self, container_id: str, command: List[str]) -> Dict[str, Any]:
        """Run a command inside a container and wait for it to finish."""
        created = self.request(
            "POST",
            f"/containers/{container_id}/exec",
            json_body={
                "AttachStdin": False,
                "AttachStdout": True,
                "AttachStderr": True,
                "Tty": False,
                "Cmd": command,
            },
        )
        exec_id = (created or {}).get("Id")
        if not exec_id:
            raise RuntimeApiError(f"Can't exec command {command} in container {container_id}")

        try:
            with httpx.Client(
                transport=self.transport,
                base_url=self.base_url,
                timeout=None,
            ) as client:
                response = client.post(f"/exec/{exec_id}/start", json={"Detach": False, "Tty": False})
                response.raise_for_status()
                output = response.content.decode(errors="replace")
        except httpx.RequestError as e:
            raise RuntimeApiError(f"Connection error: {e}")
        except httpx.HTTPStatusError as e:
            raise RuntimeApiError(f"HTTP error {e.response.status_code}: {e.response.text}")

        details = self.request("GET", f"/exec/{exec_id}/json") or {}
        return {
            "exit_code": details.get("ExitCode"),
            "output": output,
        }
