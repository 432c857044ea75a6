"""Error kinds raised and reported by the backup engine."""


class BackupError(Exception):
    """Base class for backup engine failures."""
    pass


class StorageError(BackupError):
    """Backend unreachable, permission denied, disk full."""
    pass


class NotFoundError(BackupError):
    def __init__(self, backup_id: str, detail: str = "no record"):
        self.backup_id = backup_id
        super().__init__(f"Backup {backup_id} not found ({detail})")


class InvalidFormatError(BackupError):
    """Restored content failed structural validation."""
    pass


class SizeLimitExceeded(BackupError):
    """Soft skip: retained backups already exceed the size ceiling."""

    def __init__(self, total_size: int, limit: int):
        self.total_size = total_size
        self.limit = limit
        super().__init__(f"Retained backups use {total_size:,} bytes, above the {limit:,} byte ceiling")
