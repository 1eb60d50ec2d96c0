"""Diffie-Hellman parameter provisioning state machine."""

import logging
import re
import subprocess
import sys
from enum import Enum
from pathlib import Path
from typing import Callable, Optional

from acme_companion.errors import CompanionError, InvalidParameterSize
from acme_companion.dhparam.lock import GenerationLock
from acme_companion.models.config import CompanionConfig
from acme_companion.utils.files import atomic_copy, file_digest


logger = logging.getLogger(__name__)

BITS_RE = re.compile(r"^[0-9]+$")


class DHParamState(Enum):
    """State of the canonical dhparam file."""
    NO_FILE = "no_file"
    DEFAULT_IN_PLACE = "default_in_place"
    CUSTOM_IN_PLACE = "custom_in_place"
    GENERATING = "generating"
    READY = "ready"


def validate_bits(value: str) -> int:
    """Parse DHPARAM_BITS; only positive decimal integers are accepted."""
    if value is None or not BITS_RE.fullmatch(value) or int(value) <= 0:
        raise InvalidParameterSize(value)
    return int(value)


def spawn_generation_worker(bits: int) -> None:
    """Start the background generation as a detached process.

    The process is not waited on and survives the exec of the service
    command; it releases the lock itself when done.
    """
    cmd = [sys.executable, "-m", "acme_companion", "dhparam-worker", "--bits", str(bits)]
    process = subprocess.Popen(
        cmd,
        stdin=subprocess.DEVNULL,
        start_new_session=True,
        close_fds=True,
    )
    logger.debug(f"Started dhparam worker with pid {process.pid}")


class DHParamProvisioner:
    """Keeps a usable dhparam file in place and strengthens it in the background.

    A pre-generated group is copied into place so nginx can start at once,
    then a fresh group of the configured size is generated by a detached
    worker which swaps it in and reloads nginx. A file that differs from
    the pre-generated one is an operator override and is left alone.
    """

    def __init__(
        self,
        config: CompanionConfig,
        launcher: Optional[Callable[[int], None]] = None,
    ):
        """Initialize provisioner."""
        self.config = config
        self.dhparam_file = Path(config.paths.dhparam_file)
        self.pregenerated = Path(config.paths.pregenerated_dhparam)
        self.lock = GenerationLock(Path(config.paths.lock_file), config.dhparam.lock_timeout)
        self.launcher = launcher or spawn_generation_worker

    def state(self) -> DHParamState:
        """Inspect the canonical file and the generation lock."""
        if not self.dhparam_file.exists():
            return DHParamState.NO_FILE

        if file_digest(self.dhparam_file) != self._pregenerated_digest():
            return DHParamState.CUSTOM_IN_PLACE

        if self.lock.is_held():
            return DHParamState.GENERATING

        return DHParamState.DEFAULT_IN_PLACE

    def _pregenerated_digest(self) -> str:
        if not self.pregenerated.is_file():
            raise CompanionError(
                f"pre-generated Diffie-Hellman group not found at {self.pregenerated} !"
            )
        return file_digest(self.pregenerated)

    def provision(self) -> DHParamState:
        """Make sure a dhparam file is in place; start generation if needed."""
        # Fail before touching any file
        bits = validate_bits(self.config.dhparam.bits)

        state = self.state()
        if state == DHParamState.CUSTOM_IN_PLACE:
            # There is already a dhparam, and it's not the default
            logger.info("Custom Diffie-Hellman group found, generation skipped.")
            return state

        if state == DHParamState.GENERATING:
            logger.debug("Diffie-Hellman group generation already in progress")
            return state

        logger.info("Creating Diffie-Hellman group in the background.")
        logger.info(
            "A pre-generated Diffie-Hellman group will be used for now while the new one is being created."
        )

        # Put the default dhparam file in place so nginx can start immediately
        atomic_copy(self.pregenerated, self.dhparam_file)

        if not self.lock.acquire():
            logger.info("Another Diffie-Hellman group generation took the lock first")
            return DHParamState.GENERATING

        try:
            self.launcher(bits)
        except OSError as e:
            self.lock.release()
            logger.error(f"Failed to start Diffie-Hellman group generation: {e}")
            return DHParamState.DEFAULT_IN_PLACE

        return DHParamState.GENERATING
