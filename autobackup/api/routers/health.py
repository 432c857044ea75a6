"""Health check endpoints."""

from fastapi import APIRouter, Depends

from ..dependencies import get_backup_store, get_scheduler
from autobackup.backup import BackupScheduler, BackupStore
from autobackup.backup.errors import BackupError

router = APIRouter(prefix="/health", tags=["health"])


async def check_storage(store: BackupStore) -> bool:
    """Check that the backup container is reachable."""
    try:
        container = store.storage.container_for(store.settings.backup_path)
        await store.storage.list(container)
        return True
    except BackupError:
        return False


@router.get("")
async def health_check(
    store: BackupStore = Depends(get_backup_store),
    scheduler: BackupScheduler = Depends(get_scheduler)
) -> dict:
    storage_ok = await check_storage(store)
    return {
        "status": "healthy" if storage_ok else "degraded",
        "storage": {"backend": store.storage.backend_name, "healthy": storage_ok},
        "scheduler": {"running": bool(scheduler and scheduler.running)},
        "backups": len(store.state.backup_history),
    }
