"""Base test suites for all storage types."""

from .kv_suite import BaseKVStorageTestSuite, KVStorageContract
from .backup_suite import BaseBackupStorageTestSuite, BackupStorageContract
from .fixtures import temp_storage_dir, mock_global_config

__all__ = [
    "BaseKVStorageTestSuite",
    "BaseBackupStorageTestSuite",
    "KVStorageContract",
    "BackupStorageContract",
    "temp_storage_dir",
    "mock_global_config"
]
