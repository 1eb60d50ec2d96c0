"""Generation lock record model."""

import os
import socket
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class GenerationLockRecord(BaseModel):
    """Owner identity stored inside the dhparam generation lock file.

    Every field is required when parsing, so a partial record on disk is
    rejected rather than silently dated to the moment it was read.
    """
    owner_pid: int
    hostname: str
    created_at: datetime

    @classmethod
    def new(cls, created_at: Optional[datetime] = None) -> "GenerationLockRecord":
        """Record naming the current process as the lock holder."""
        return cls(
            owner_pid=os.getpid(),
            hostname=socket.gethostname(),
            created_at=created_at or _utcnow(),
        )

    def age(self, now: Optional[datetime] = None) -> float:
        """Seconds elapsed since the lock was taken."""
        now = now or _utcnow()
        created = self.created_at
        if created.tzinfo is None:
            created = created.replace(tzinfo=timezone.utc)
        return (now - created).total_seconds()
