"""Diffie-Hellman parameter provisioning."""

from acme_companion.dhparam.lock import GenerationLock
from acme_companion.dhparam.provisioner import DHParamProvisioner, DHParamState

__all__ = [
    "GenerationLock",
    "DHParamProvisioner",
    "DHParamState",
]
