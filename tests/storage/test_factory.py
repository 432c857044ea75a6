"""Tests for storage factory."""

import pytest
from unittest.mock import patch

from autobackup._storage.factory import StorageFactory, _register_backends
from autobackup.config import AutoBackupConfig, StorageConfig


def _config(tmp_path, **storage_kwargs) -> AutoBackupConfig:
    return AutoBackupConfig(storage=StorageConfig(data_dir=str(tmp_path), **storage_kwargs))


class TestStorageFactory:

    def test_register_backends(self):
        _register_backends()

        assert {"file", "kv"} <= set(StorageFactory._backup_backends)
        assert {"json", "redis"} <= set(StorageFactory._kv_backends)

    def test_register_invalid_backup_backend(self):
        with pytest.raises(ValueError, match="not in allowed backup backends"):
            StorageFactory.register_backup("s3", lambda: None)

    def test_register_invalid_kv_backend(self):
        with pytest.raises(ValueError, match="not in allowed KV backends"):
            StorageFactory.register_kv("sqlite", lambda: None)

    def test_unknown_kv_backend(self, tmp_path):
        with pytest.raises(ValueError, match="Unknown KV backend"):
            StorageFactory.create_kv_storage("sqlite", "ns", {"working_dir": str(tmp_path)})

    def test_native_host_gets_file_storage(self, tmp_path):
        from autobackup._storage.backup_file import FileBackupStorage

        storage = StorageFactory.create_backup_storage(_config(tmp_path, native_filesystem=True))

        assert isinstance(storage, FileBackupStorage)
        assert storage.container_for("") == str(tmp_path / "AutoBackups")

    def test_non_native_host_gets_kv_storage(self, tmp_path):
        from autobackup._storage.backup_kv import KVBackupStorage
        from autobackup._storage.kv_json import JsonKVStorage

        storage = StorageFactory.create_backup_storage(_config(tmp_path, native_filesystem=False))

        assert isinstance(storage, KVBackupStorage)
        assert isinstance(storage.kv, JsonKVStorage)
        assert storage.kv.namespace == "autobackups"

    def test_explicit_backend_overrides_host(self, tmp_path):
        from autobackup._storage.backup_kv import KVBackupStorage

        storage = StorageFactory.create_backup_storage(
            _config(tmp_path, backup_backend="kv", native_filesystem=True)
        )

        assert isinstance(storage, KVBackupStorage)

    def test_redis_kv_is_lazy(self, tmp_path):
        with patch('autobackup._storage.kv_redis.aioredis') as mock_redis:
            storage = StorageFactory.create_kv_storage(
                "redis", "autobackup_state", {"redis_url": "redis://cache:6379"}
            )

            assert storage.redis_url == "redis://cache:6379"
            # No connection until first use
            mock_redis.ConnectionPool.from_url.assert_not_called()
