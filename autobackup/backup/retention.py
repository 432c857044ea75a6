"""Retention policy: which backups to evict, oldest first."""

from dataclasses import dataclass
from typing import List, Optional, Sequence

from .models import BackupRecord


@dataclass(frozen=True)
class RetentionPolicy:
    """Count and size ceilings for retained backups.

    Args:
        max_backups: Maximum number of records kept
        max_total_size: Optional ceiling on the summed record size. Size
            eviction never removes the newest record.
    """

    max_backups: int
    max_total_size: Optional[int] = None

    def select_evictions(self, history: Sequence[BackupRecord]) -> List[str]:
        """Return ids to evict, oldest first.

        Records are dropped one at a time from the oldest end until the
        remaining history fits both ceilings.
        """
        remaining = sorted(history, key=lambda r: r.timestamp)
        total = sum(r.size for r in remaining)
        evicted = []

        while remaining and self._over_limits(len(remaining), total):
            oldest = remaining.pop(0)
            total -= oldest.size
            evicted.append(oldest.id)

        return evicted

    def _over_limits(self, count: int, total: int) -> bool:
        # max_backups below 1 still keeps the newest record
        if count > max(self.max_backups, 1):
            return True
        if self.max_total_size is not None and total > self.max_total_size and count > 1:
            return True
        return False
