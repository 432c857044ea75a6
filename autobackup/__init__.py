from .backup import BackupStore, BackupScheduler

__version__ = "0.2.0"
__author__ = "autobackup contributors"

__all__ = ["BackupStore", "BackupScheduler", "__version__"]
