"""Dependency injection for FastAPI."""

from fastapi import Request
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from autobackup.backup import BackupStore, BackupScheduler


async def get_backup_store(request: Request) -> "BackupStore":
    """Get the backup store from app state."""
    return request.app.state.backup_store


async def get_scheduler(request: Request) -> Optional["BackupScheduler"]:
    """Get the backup scheduler from app state if running."""
    return getattr(request.app.state, "scheduler", None)
