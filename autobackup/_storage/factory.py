"""Storage factory for centralized backend creation."""

from typing import Type, Dict, Callable

from autobackup.base import BaseBackupStorage, BaseKVStorage
from autobackup.config import AutoBackupConfig


class StorageFactory:
    """Factory for creating storage backends with validation and registration."""

    _backup_backends: Dict[str, Callable[[], Type[BaseBackupStorage]]] = {}
    _kv_backends: Dict[str, Callable[[], Type[BaseKVStorage]]] = {}

    ALLOWED_BACKUP = {"file", "kv"}
    ALLOWED_KV = {"json", "redis"}

    @classmethod
    def register_backup(cls, name: str, backend_loader: Callable[[], Type[BaseBackupStorage]]) -> None:
        """Register a backup storage backend.

        Args:
            name: Backend name (must be in ALLOWED_BACKUP)
            backend_loader: Function that returns the backup storage class

        Raises:
            ValueError: If backend name not in allowed list
        """
        if name not in cls.ALLOWED_BACKUP:
            raise ValueError(f"Backend {name} not in allowed backup backends: {cls.ALLOWED_BACKUP}")
        cls._backup_backends[name] = backend_loader

    @classmethod
    def register_kv(cls, name: str, backend_loader: Callable[[], Type[BaseKVStorage]]) -> None:
        """Register a KV storage backend.

        Args:
            name: Backend name (must be in ALLOWED_KV)
            backend_loader: Function that returns the KV storage class

        Raises:
            ValueError: If backend name not in allowed list
        """
        if name not in cls.ALLOWED_KV:
            raise ValueError(f"Backend {name} not in allowed KV backends: {cls.ALLOWED_KV}")
        cls._kv_backends[name] = backend_loader

    @classmethod
    def create_kv_storage(
        cls,
        backend: str,
        namespace: str,
        global_config: dict,
        **kwargs
    ) -> BaseKVStorage:
        """Create a KV storage instance.

        Raises:
            ValueError: If backend not registered
        """
        if backend not in cls._kv_backends:
            _register_backends()
            if backend not in cls._kv_backends:
                raise ValueError(f"Unknown KV backend: {backend}. Available: {list(cls._kv_backends.keys())}")

        backend_class = cls._kv_backends[backend]()
        return backend_class(
            namespace=namespace,
            global_config=global_config,
            **kwargs
        )

    @classmethod
    def create_backup_storage(
        cls,
        config: AutoBackupConfig,
        namespace: str = "autobackups",
    ) -> BaseBackupStorage:
        """Create the backup storage for this host.

        This is the only place that looks at the host environment: hosts
        with a native filesystem get file storage, everything else gets
        the embedded key-value store.

        Args:
            config: Complete autobackup configuration
            namespace: KV namespace used by the key-value variant

        Returns:
            Initialized backup storage instance
        """
        backend = config.storage.resolved_backup_backend
        if backend not in cls._backup_backends:
            _register_backends()
            if backend not in cls._backup_backends:
                raise ValueError(f"Unknown backup backend: {backend}. Available: {list(cls._backup_backends.keys())}")

        global_config = config.to_dict()
        backend_class = cls._backup_backends[backend]()
        if backend == "kv":
            kv = cls.create_kv_storage(config.storage.kv_backend, namespace, global_config)
            return backend_class(global_config=global_config, kv=kv)
        return backend_class(global_config=global_config)


def _get_file_backup_storage():
    """Lazy loader for file backup storage."""
    from .backup_file import FileBackupStorage
    return FileBackupStorage


def _get_kv_backup_storage():
    """Lazy loader for KV backup storage."""
    from .backup_kv import KVBackupStorage
    return KVBackupStorage


def _get_json_storage():
    """Lazy loader for JSON KV storage."""
    from .kv_json import JsonKVStorage
    return JsonKVStorage


def _get_redis_storage():
    """Lazy loader for Redis KV storage."""
    from .kv_redis import RedisKVStorage
    return RedisKVStorage


def _register_backends():
    """Register built-in backends with lazy loaders. Called when factory is first used."""
    if not StorageFactory._backup_backends:
        StorageFactory.register_backup("file", _get_file_backup_storage)
        StorageFactory.register_backup("kv", _get_kv_backup_storage)

    if not StorageFactory._kv_backends:
        StorageFactory.register_kv("json", _get_json_storage)
        StorageFactory.register_kv("redis", _get_redis_storage)
