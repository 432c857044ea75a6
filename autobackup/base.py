from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union


@dataclass
class StorageNameSpace:
    namespace: str
    global_config: dict

    async def index_start_callback(self):
        """Called before a batch of writes begins."""
        pass

    async def index_done_callback(self):
        """Commit the storage operations after a batch of writes."""
        pass


@dataclass
class BaseKVStorage(StorageNameSpace):
    async def all_keys(self) -> List[str]:
        raise NotImplementedError

    async def get_by_id(self, id: str) -> Union[Any, None]:
        raise NotImplementedError

    async def upsert(self, data: Dict[str, Any]) -> None:
        raise NotImplementedError

    async def delete(self, ids: List[str]) -> None:
        """Remove ``ids``. Missing keys are ignored."""
        raise NotImplementedError


@dataclass
class BaseBackupStorage(ABC):
    """Durable blob store for backup snapshots.

    The backup store only ever talks to this interface. A backend decides
    where a backup lives (``container_for``) and under which key
    (``key_for``); callers treat both values as opaque strings.
    """

    global_config: dict = field(default_factory=dict)

    @abstractmethod
    def container_for(self, backup_path: Optional[str] = None) -> str:
        """Resolve the container (directory, namespace) for backups."""

    @abstractmethod
    def key_for(self, container: str, record_id: str, file_name: str) -> str:
        """Storage key for a single backup blob."""

    @abstractmethod
    async def ensure_container(self, container: str) -> None:
        """Create the container if needed. Must be idempotent."""

    @abstractmethod
    async def write(self, key: str, content: str) -> None:
        ...

    @abstractmethod
    async def read(self, key: str) -> str:
        """Read a blob.

        Raises:
            NotFoundError: If no blob is stored under ``key``
        """

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Delete a blob. Deleting a missing blob is not an error."""

    @abstractmethod
    async def list(self, container: str) -> List[str]:
        """List blob keys in ``container``."""

    @property
    def backend_name(self) -> str:
        return type(self).__name__.replace("BackupStorage", "").lower()
