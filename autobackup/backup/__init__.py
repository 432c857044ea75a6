from .errors import BackupError, InvalidFormatError, NotFoundError, SizeLimitExceeded, StorageError
from .models import (
    BackupBlob,
    BackupRecord,
    BackupRuntimeState,
    BackupSettings,
    BackupStatus,
    ExportedState,
    OperationResult,
    SkipReason,
    SnapshotStats,
)
from .repository import BackupStateRepository
from .scheduler import BackupScheduler
from .store import BackupStore

__all__ = [
    "BackupStore",
    "BackupScheduler",
    "BackupStateRepository",
    "BackupBlob",
    "BackupRecord",
    "BackupRuntimeState",
    "BackupSettings",
    "BackupStatus",
    "ExportedState",
    "OperationResult",
    "SkipReason",
    "SnapshotStats",
    "BackupError",
    "InvalidFormatError",
    "NotFoundError",
    "SizeLimitExceeded",
    "StorageError",
]
