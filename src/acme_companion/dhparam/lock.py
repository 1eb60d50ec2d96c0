"""Disk-resident lock guarding background dhparam generation."""

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from acme_companion.models.lock import GenerationLockRecord
from acme_companion.utils.files import atomic_replace, temp_path_beside


logger = logging.getLogger(__name__)


class GenerationLock:
    """At most one dhparam generation may hold this lock.

    The lock outlives the process that took it (it lives on disk across
    container restarts), so it records who took it and when. A lock older
    than `timeout` seconds is considered abandoned and may be reclaimed;
    a timeout of 0 means locks never go stale.
    """

    def __init__(self, path: Path, timeout: int = 0):
        """Initialize generation lock."""
        self.path = Path(path)
        self.timeout = timeout

    def exists(self) -> bool:
        """Whether a lock file is present, stale or not."""
        return self.path.exists()

    def read(self) -> Optional[GenerationLockRecord]:
        """Current lock record, or None when unlocked."""
        try:
            content = self.path.read_text()
            mtime = self.path.stat().st_mtime
        except FileNotFoundError:
            return None

        if content.strip():
            try:
                return GenerationLockRecord.model_validate_json(content)
            except ValidationError:
                logger.debug(f"Unreadable lock record in {self.path}, falling back to its mtime")

        # Bare sentinel left by an older companion, or a partial record
        return GenerationLockRecord(
            owner_pid=0,
            hostname="unknown",
            created_at=datetime.fromtimestamp(mtime, tz=timezone.utc),
        )

    def is_stale(self, record: GenerationLockRecord) -> bool:
        """Whether a lock record is old enough to be abandoned."""
        return bool(self.timeout) and record.age() > self.timeout

    def is_held(self) -> bool:
        """Whether a generation is believed to be in flight."""
        record = self.read()
        return record is not None and not self.is_stale(record)

    def acquire(self) -> bool:
        """Take the lock; returns False if a live lock is already held."""
        record = GenerationLockRecord.new()
        for _ in range(2):
            try:
                with open(self.path, "x") as f:
                    f.write(record.model_dump_json())
                logger.debug(f"Acquired generation lock {self.path}")
                return True
            except FileExistsError:
                current = self.read()
                if current is not None and not self.is_stale(current):
                    return False
                if current is not None:
                    logger.warning(
                        f"Reclaiming stale generation lock {self.path} taken by pid "
                        f"{current.owner_pid} on {current.hostname} at {current.created_at.isoformat()}"
                    )
                self.path.unlink(missing_ok=True)
        return False

    def adopt(self) -> None:
        """Name the current process as holder, keeping the original timestamp.

        The provisioning process takes the lock and then execs into the
        companion service, so the detached worker records itself once it runs.
        """
        current = self.read()
        record = GenerationLockRecord.new(current.created_at if current else None)
        tmp = temp_path_beside(self.path)
        try:
            tmp.write_text(record.model_dump_json())
            atomic_replace(tmp, self.path)
        except Exception:
            tmp.unlink(missing_ok=True)
            raise
        logger.debug(f"Generation lock {self.path} now held by pid {record.owner_pid}")

    def release(self) -> None:
        """Remove the lock, whoever holds it."""
        self.path.unlink(missing_ok=True)
        logger.debug(f"Released generation lock {self.path}")
