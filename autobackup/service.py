"""Wiring of the backup engine, done once at application startup."""

from typing import Tuple

from ._storage import StorageFactory
from ._utils import logger
from .backup import BackupScheduler, BackupStateRepository, BackupStore
from .backup.collaborators import StateExporter, StateMerger
from .config import AutoBackupConfig

STATE_NAMESPACE = "autobackup_state"


async def build_backup_service(
    config: AutoBackupConfig,
    exporter: StateExporter,
    merger: StateMerger,
) -> Tuple[BackupStore, BackupScheduler]:
    """Create the store and scheduler and load persisted state.

    The store is handed to callers by reference; nothing else keeps a
    global handle on it.
    """
    storage = StorageFactory.create_backup_storage(config)
    state_kv = StorageFactory.create_kv_storage(
        config.storage.kv_backend, STATE_NAMESPACE, config.to_dict()
    )

    store = BackupStore(
        storage=storage,
        exporter=exporter,
        merger=merger,
        repository=BackupStateRepository(state_kv),
        max_total_size=config.max_total_size,
    )
    await store.load()

    scheduler = BackupScheduler(
        store,
        interval_seconds=config.scheduler.check_interval_seconds,
        run_on_start=config.scheduler.run_on_start,
    )
    logger.info(f"Backup service ready with {storage.backend_name} storage")
    return store, scheduler
