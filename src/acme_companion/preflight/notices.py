"""Advisory notices for obsolete configuration inputs."""

import logging
from typing import Dict, List, Mapping


logger = logging.getLogger(__name__)


# Environment variable -> notice lines. Add an entry to deprecate another input.
DEPRECATED_INPUTS: Dict[str, List[str]] = {
    "ACME_TOS_HASH": [
        "the ACME_TOS_HASH environment variable is no longer used by simp_le and has been deprecated.",
        "simp_le now implicitly agree to the ACME CA ToS.",
    ],
}


def emit_deprecation_notices(env: Mapping[str, str]) -> List[str]:
    """Log a notice for every deprecated input that is set.

    Returns the names of the inputs that triggered a notice. Never raises on
    account of the inputs themselves.
    """
    triggered = []
    for name, lines in DEPRECATED_INPUTS.items():
        if not env.get(name):
            continue
        for line in lines:
            logger.info(line)
        triggered.append(name)
    return triggered
