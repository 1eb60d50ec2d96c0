"""Ordered startup sequence run before the companion service."""

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from acme_companion.dhparam.provisioner import DHParamProvisioner, DHParamState
from acme_companion.models.config import CompanionConfig
from acme_companion.models.container import MountRequirement
from acme_companion.preflight.acme import check_acme_endpoint
from acme_companion.preflight.notices import emit_deprecation_notices
from acme_companion.preflight.verifier import ReadinessVerifier
from acme_companion.runtime.client import DockerClient
from acme_companion.runtime.inspector import RuntimeInspector


logger = logging.getLogger(__name__)


@dataclass
class PreflightReport:
    """What the startup sequence found and did."""
    mounts: List[MountRequirement] = field(default_factory=list)
    deprecated: List[str] = field(default_factory=list)
    dhparam_state: Optional[DHParamState] = None


def build_verifier(config: CompanionConfig) -> ReadinessVerifier:
    """Wire a verifier to the configured Docker endpoint."""
    inspector = RuntimeInspector(DockerClient(config.docker), config.containers)
    return ReadinessVerifier(config, inspector)


def verify_environment(
    config: CompanionConfig,
    verifier: Optional[ReadinessVerifier] = None,
) -> List[MountRequirement]:
    """ACME guard then readiness gates; raises CompanionError on failure."""
    check_acme_endpoint(config.acme.ca_uri)
    verifier = verifier or build_verifier(config)
    return verifier.verify()


def run_preflight(
    config: CompanionConfig,
    verifier: Optional[ReadinessVerifier] = None,
    launcher: Optional[Callable[[int], None]] = None,
) -> PreflightReport:
    """Full startup sequence; returns once nginx can use the dhparam file.

    Background dhparam generation may still be running when this returns.
    """
    report = PreflightReport()
    report.mounts = verify_environment(config, verifier)
    report.deprecated = emit_deprecation_notices(config.deprecated_env)
    report.dhparam_state = DHParamProvisioner(config, launcher=launcher).provision()
    logger.debug(f"Preflight completed: {report}")
    return report
