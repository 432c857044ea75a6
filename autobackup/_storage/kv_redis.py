"""Redis-based Key-Value storage backend for server deployments."""

import json
from dataclasses import dataclass, field
from typing import Optional, Dict, Any, List
import asyncio

import redis.asyncio as aioredis
from redis.backoff import ExponentialBackoff
from redis.retry import Retry
from redis.exceptions import RedisError, ConnectionError as RedisConnectionError

from ..base import BaseKVStorage
from .._utils import logger


@dataclass
class RedisKVStorage(BaseKVStorage):
    """One Redis hash per namespace, ``autobackup:<namespace>``.

    Strings (backup blobs) are stored as-is; any other value (the state
    document) is stored as JSON. Entries never expire.
    """

    _redis_client: Optional[Any] = field(init=False, default=None)
    _connection_pool: Optional[Any] = field(init=False, default=None)
    _initialized: bool = field(init=False, default=False)

    # Prefix of JSON-encoded values
    JSON_MARKER = "\x00json:"

    def __post_init__(self):
        self._hash_key = f"autobackup:{self.namespace}"

        self.redis_url = self.global_config.get("redis_url", "redis://localhost:6379")
        self.redis_password = self.global_config.get("redis_password", None)
        self.max_connections = self.global_config.get("redis_max_connections", 10)
        self.socket_timeout = self.global_config.get("redis_socket_timeout", 5.0)
        self.connection_timeout = self.global_config.get("redis_connection_timeout", 5.0)
        self.health_check_interval = self.global_config.get("redis_health_check_interval", 30)

    async def _ensure_initialized(self):
        if self._initialized:
            return

        retry = Retry(
            ExponentialBackoff(cap=10, base=1),
            retries=3,
            supported_errors=(RedisConnectionError, TimeoutError, ConnectionError)
        )

        self._connection_pool = aioredis.ConnectionPool.from_url(
            self.redis_url,
            password=self.redis_password,
            max_connections=self.max_connections,
            socket_timeout=self.socket_timeout,
            socket_connect_timeout=self.connection_timeout,
            decode_responses=True,
            retry=retry,
            health_check_interval=self.health_check_interval
        )
        self._redis_client = aioredis.Redis(
            connection_pool=self._connection_pool,
            auto_close_connection_pool=False
        )

        try:
            await self._redis_client.ping()
        except RedisError as e:
            logger.error(f"Redis connection failed for {self.namespace}: {e}")
            raise

        logger.info(f"Connected to Redis for namespace: {self.namespace}")
        self._initialized = True

    def _encode(self, value: Any) -> str:
        if isinstance(value, str):
            return value
        return self.JSON_MARKER + json.dumps(value, ensure_ascii=False)

    def _decode(self, raw: Optional[str]) -> Any:
        if raw is None or not raw.startswith(self.JSON_MARKER):
            return raw
        return json.loads(raw[len(self.JSON_MARKER):])

    async def index_start_callback(self):
        """Reachability check before a write batch."""
        await self._ensure_initialized()
        await self._redis_client.ping()

    async def all_keys(self) -> List[str]:
        await self._ensure_initialized()
        return list(await self._redis_client.hkeys(self._hash_key))

    async def get_by_id(self, id: str) -> Optional[Any]:
        await self._ensure_initialized()
        return self._decode(await self._redis_client.hget(self._hash_key, id))

    async def upsert(self, data: Dict[str, Any]) -> None:
        if not data:
            return

        await self._ensure_initialized()
        await self._redis_client.hset(
            self._hash_key, mapping={id: self._encode(value) for id, value in data.items()}
        )
        logger.debug(f"Upserted {len(data)} items to Redis namespace: {self.namespace}")

    async def delete(self, ids: List[str]) -> None:
        if not ids:
            return

        await self._ensure_initialized()
        await self._redis_client.hdel(self._hash_key, *ids)

    async def close(self) -> None:
        """Close Redis connections."""
        if self._redis_client:
            await self._redis_client.close()
        if self._connection_pool:
            await self._connection_pool.disconnect()
        self._initialized = False

    def __del__(self):
        if self._initialized and self._redis_client:
            try:
                asyncio.get_running_loop().create_task(self.close())
            except RuntimeError:
                # Event loop not available, skip cleanup
                pass
