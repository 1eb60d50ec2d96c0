"""Docker runtime access for sibling container discovery."""

from acme_companion.runtime.client import DockerClient
from acme_companion.runtime.inspector import RuntimeInspector
from acme_companion.runtime.reload import ProxyReloader

__all__ = [
    "DockerClient",
    "RuntimeInspector",
    "ProxyReloader",
]
