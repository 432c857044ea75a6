"""Key-value backed backup storage for hosts without filesystem access."""

from dataclasses import dataclass, field
from typing import List, Optional

from ..base import BaseBackupStorage, BaseKVStorage
from ..backup.errors import NotFoundError, StorageError

KEY_PREFIX = "autobackup-"


@dataclass
class KVBackupStorage(BaseBackupStorage):
    """Backups stored as ``autobackup-<id>`` entries of a KV storage."""

    kv: Optional[BaseKVStorage] = field(default=None)

    def __post_init__(self):
        if self.kv is None:
            raise ValueError("KVBackupStorage requires a KV storage instance")

    def container_for(self, backup_path: Optional[str] = None) -> str:
        # backup_path only applies to the filesystem backend
        return self.kv.namespace

    def key_for(self, container: str, record_id: str, file_name: str) -> str:
        return f"{KEY_PREFIX}{record_id}"

    async def ensure_container(self, container: str) -> None:
        try:
            await self.kv.index_start_callback()
        except Exception as e:
            raise StorageError(f"KV storage {container} unavailable: {e}") from e

    async def write(self, key: str, content: str) -> None:
        try:
            await self.kv.upsert({key: content})
            await self.kv.index_done_callback()
        except Exception as e:
            raise StorageError(f"Cannot store backup {key}: {e}") from e

    async def read(self, key: str) -> str:
        try:
            content = await self.kv.get_by_id(key)
        except Exception as e:
            raise StorageError(f"Cannot read backup {key}: {e}") from e
        if content is None:
            raise NotFoundError(key[len(KEY_PREFIX):], "no blob")
        return content

    async def delete(self, key: str) -> None:
        try:
            await self.kv.delete([key])
            await self.kv.index_done_callback()
        except Exception as e:
            raise StorageError(f"Cannot delete backup {key}: {e}") from e

    async def list(self, container: str) -> List[str]:
        try:
            keys = await self.kv.all_keys()
        except Exception as e:
            raise StorageError(f"Cannot list KV storage {container}: {e}") from e
        return sorted(k for k in keys if k.startswith(KEY_PREFIX))

    @property
    def backend_name(self) -> str:
        return f"kv:{type(self.kv).__name__.replace('KVStorage', '').lower()}"
