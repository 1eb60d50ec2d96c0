"""
ACME Companion - TLS environment preparation for nginx-proxy.

Verifies that the companion container is wired to its sibling containers and
volumes, and provisions Diffie-Hellman parameters before handing control to
the companion service.
"""

__version__ = "1.0.0"
__author__ = "ACME Companion Development Team"

# Re-export key components for easier access
from acme_companion.models.config import CompanionConfig
from acme_companion.models.container import ContainerRef, MountRequirement
from acme_companion.errors import CompanionError

__all__ = [
    "CompanionConfig",
    "ContainerRef",
    "MountRequirement",
    "CompanionError",
]
