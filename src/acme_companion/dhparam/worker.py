"""Background dhparam generation task."""

import asyncio
import logging
import re
from pathlib import Path
from typing import List, Optional

from acme_companion.dhparam.lock import GenerationLock
from acme_companion.dhparam.provisioner import DHParamState
from acme_companion.models.config import CompanionConfig
from acme_companion.runtime.client import DockerClient
from acme_companion.runtime.inspector import RuntimeInspector
from acme_companion.runtime.reload import ProxyReloader
from acme_companion.utils.files import atomic_replace, temp_path_beside
from acme_companion.utils.process import capture_command


logger = logging.getLogger(__name__)

PROGRESS_RE = re.compile(r"^[.+*]+")


def strip_progress(output: str) -> str:
    """Drop openssl's progress indicator lines."""
    return "\n".join(
        line for line in output.splitlines()
        if line.strip() and not PROGRESS_RE.match(line)
    )


class DHParamGenerator:
    """Generates a fresh group, swaps it in atomically, then reloads nginx."""

    def __init__(
        self,
        config: CompanionConfig,
        lock: GenerationLock,
        reloader: Optional[ProxyReloader] = None,
    ):
        """Initialize generator."""
        self.config = config
        self.lock = lock
        self.reloader = reloader
        self.dhparam_file = Path(config.paths.dhparam_file)

    def build_command(self, output: Path, bits: int) -> List[str]:
        """openssl invocation at low scheduling priority."""
        return [
            "nice", "-n", str(self.config.dhparam.nice),
            "openssl", "dhparam", "-out", str(output), str(bits),
        ]

    async def run(self, bits: int) -> DHParamState:
        """Generate and install a group; the lock is always released."""
        tmp: Optional[Path] = None
        try:
            await asyncio.to_thread(self.lock.adopt)
            tmp = await asyncio.to_thread(temp_path_beside, self.dhparam_file)
            result = await capture_command(self.build_command(tmp, bits))

            if result.returncode != 0:
                details = strip_progress(result.stderr) or strip_progress(result.stdout)
                logger.error(
                    f"Diffie-Hellman group creation failed with exit code {result.returncode}, "
                    f"keeping the current group: {details}"
                )
                return DHParamState.DEFAULT_IN_PLACE

            await asyncio.to_thread(atomic_replace, tmp, self.dhparam_file)
            tmp = None
            logger.info("Diffie-Hellman group creation complete, reloading nginx.")

            if self.reloader:
                await asyncio.to_thread(self.reloader.reload)
            return DHParamState.READY

        except Exception as e:
            logger.error(f"Diffie-Hellman group creation failed: {e}", exc_info=True)
            return DHParamState.DEFAULT_IN_PLACE

        finally:
            if tmp is not None:
                await asyncio.to_thread(tmp.unlink, missing_ok=True)
            self.lock.release()


def run_worker(config: CompanionConfig, bits: int) -> DHParamState:
    """Entry point of the detached worker process."""
    lock = GenerationLock(Path(config.paths.lock_file), config.dhparam.lock_timeout)
    inspector = RuntimeInspector(DockerClient(config.docker), config.containers)
    generator = DHParamGenerator(config, lock, ProxyReloader(inspector))
    return asyncio.run(generator.run(bits))
