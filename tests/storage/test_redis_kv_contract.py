"""Contract-based tests for Redis KV storage."""

import pytest
import pytest_asyncio
from unittest.mock import AsyncMock, MagicMock, patch
from redis.exceptions import ConnectionError as RedisConnectionError

from tests.storage.base import BaseKVStorageTestSuite, KVStorageContract
from autobackup._storage.backup_kv import KVBackupStorage
from autobackup._storage.kv_redis import RedisKVStorage
from autobackup.backup.errors import StorageError


def build_mock_client(mock_hashes):
    """Redis client double backed by a dict of hashes."""
    mock_client = AsyncMock()
    mock_client.ping = AsyncMock(return_value=True)

    async def mock_hget(name, key):
        return mock_hashes.get(name, {}).get(key)
    mock_client.hget = AsyncMock(side_effect=mock_hget)

    async def mock_hset(name, mapping=None):
        mock_hashes.setdefault(name, {}).update(mapping or {})
        return len(mapping or {})
    mock_client.hset = AsyncMock(side_effect=mock_hset)

    async def mock_hdel(name, *keys):
        fields = mock_hashes.get(name, {})
        return sum(1 for k in keys if fields.pop(k, None) is not None)
    mock_client.hdel = AsyncMock(side_effect=mock_hdel)

    async def mock_hkeys(name):
        return list(mock_hashes.get(name, {}).keys())
    mock_client.hkeys = AsyncMock(side_effect=mock_hkeys)

    mock_client.close = AsyncMock()
    return mock_client


class TestRedisKVContract(BaseKVStorageTestSuite):
    """Redis KV storage contract tests with mocks."""

    @pytest_asyncio.fixture
    async def storage(self):
        config = {
            "redis_url": "redis://localhost:6379",
            "redis_max_connections": 10,
            "redis_connection_timeout": 5.0,
            "redis_socket_timeout": 5.0,
            "redis_health_check_interval": 30
        }
        mock_hashes = {}
        mock_client = build_mock_client(mock_hashes)

        with patch('autobackup._storage.kv_redis.aioredis') as mock_redis_module:
            mock_redis_module.ConnectionPool.from_url.return_value = MagicMock(disconnect=AsyncMock())
            mock_redis_module.Redis.return_value = mock_client

            storage = RedisKVStorage(namespace="test", global_config=config)
            storage._mock_hashes = mock_hashes
            storage._mock_client = mock_client
            storage._mock_redis_module = mock_redis_module

            yield storage

            await storage.close()

    @pytest.fixture
    def contract(self):
        return KVStorageContract(
            supports_persistence=True,
            max_value_size=512 * 1024 * 1024  # Redis string limit
        )

    @pytest.mark.asyncio
    async def test_namespace_is_one_hash(self, storage):
        await storage.upsert({"autobackup-abcd1234": "{}"})

        assert list(storage._mock_hashes) == ["autobackup:test"]

    @pytest.mark.asyncio
    async def test_blobs_stored_raw(self, storage):
        blob = '{"chat": {"sessions": []}}'
        await storage.upsert({"autobackup-abcd1234": blob})

        assert storage._mock_hashes["autobackup:test"]["autobackup-abcd1234"] == blob

    @pytest.mark.asyncio
    async def test_documents_stored_as_json(self, storage):
        await storage.upsert({"autobackup": {"version": 2}})

        stored = storage._mock_hashes["autobackup:test"]["autobackup"]
        assert stored == RedisKVStorage.JSON_MARKER + '{"version": 2}'

    @pytest.mark.asyncio
    async def test_values_never_expire(self, storage):
        await storage.upsert({"k": {"v": 1}})

        storage._mock_client.expire.assert_not_called()
        storage._mock_client.setex.assert_not_called()

    @pytest.mark.asyncio
    async def test_connects_lazily_once(self, storage):
        storage._mock_redis_module.ConnectionPool.from_url.assert_not_called()

        await storage.get_by_id("a")
        await storage.get_by_id("b")

        storage._mock_redis_module.ConnectionPool.from_url.assert_called_once()
        storage._mock_client.ping.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_index_start_checks_reachability(self, storage):
        await storage.get_by_id("warm-up")
        storage._mock_client.ping = AsyncMock(side_effect=RedisConnectionError("refused"))

        with pytest.raises(RedisConnectionError):
            await storage.index_start_callback()

    @pytest.mark.asyncio
    async def test_unreachable_redis_fails_backup_container(self, storage):
        await storage.get_by_id("warm-up")
        storage._mock_client.ping = AsyncMock(side_effect=RedisConnectionError("refused"))
        backup_storage = KVBackupStorage(global_config={}, kv=storage)

        with pytest.raises(StorageError, match="refused"):
            await backup_storage.ensure_container(backup_storage.container_for(""))

    @pytest.mark.asyncio
    async def test_close_resets_connection(self, storage):
        await storage.get_by_id("a")

        await storage.close()

        storage._mock_client.close.assert_awaited()
        assert storage._initialized is False

