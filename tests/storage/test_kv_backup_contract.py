"""Contract-based tests for KV-backed backup storage."""

import pytest
import pytest_asyncio
from unittest.mock import AsyncMock

from tests.storage.base import BaseBackupStorageTestSuite, BackupStorageContract
from autobackup._storage.backup_kv import KVBackupStorage
from autobackup._storage.kv_json import JsonKVStorage
from autobackup.backup.errors import StorageError


class TestKVBackupContract(BaseBackupStorageTestSuite):
    """KV backup storage contract tests over the JSON KV store."""

    @pytest_asyncio.fixture
    async def storage(self, mock_global_config):
        kv = JsonKVStorage(namespace="autobackups", global_config=mock_global_config)
        yield KVBackupStorage(global_config=mock_global_config, kv=kv)

    @pytest.fixture
    def contract(self):
        return BackupStorageContract(honors_backup_path=False)

    def test_requires_kv(self, mock_global_config):
        with pytest.raises(ValueError):
            KVBackupStorage(global_config=mock_global_config)

    def test_container_is_namespace(self, storage):
        assert storage.container_for("/ignored/path") == "autobackups"

    def test_key_uses_record_id(self, storage):
        assert storage.key_for("autobackups", "abcd1234", "AutoBackup-x-abcd1234.json") == "autobackup-abcd1234"

    def test_backend_name(self, storage):
        assert storage.backend_name == "kv:json"

    @pytest.mark.asyncio
    async def test_write_is_flushed(self, storage, mock_global_config):
        await storage.write("autobackup-abcd1234", '{"chat": {}}')

        reloaded = JsonKVStorage(namespace="autobackups", global_config=mock_global_config)
        assert await reloaded.get_by_id("autobackup-abcd1234") == '{"chat": {}}'

    @pytest.mark.asyncio
    async def test_list_ignores_foreign_keys(self, storage):
        await storage.kv.upsert({"unrelated": "x"})
        await storage.write("autobackup-abcd1234", "{}")

        assert await storage.list("autobackups") == ["autobackup-abcd1234"]

    @pytest.mark.asyncio
    async def test_backend_failure_raises_storage_error(self, storage):
        storage.kv.upsert = AsyncMock(side_effect=RuntimeError("quota exceeded"))

        with pytest.raises(StorageError, match="quota exceeded"):
            await storage.write("autobackup-abcd1234", "{}")

    @pytest.mark.asyncio
    async def test_delete_failure_raises_storage_error(self, storage):
        storage.kv.delete = AsyncMock(side_effect=RuntimeError("locked"))

        with pytest.raises(StorageError):
            await storage.delete("autobackup-abcd1234")
