"""Storage module with lazy loading support."""

from typing import TYPE_CHECKING

# Always import factory and registration (lightweight)
from .factory import StorageFactory, _register_backends

if TYPE_CHECKING:
    from .backup_file import FileBackupStorage
    from .backup_kv import KVBackupStorage
    from .kv_json import JsonKVStorage
    from .kv_redis import RedisKVStorage


def __getattr__(name):
    """Lazy import storage backends."""
    if name == "FileBackupStorage":
        from .backup_file import FileBackupStorage
        return FileBackupStorage
    elif name == "KVBackupStorage":
        from .backup_kv import KVBackupStorage
        return KVBackupStorage
    elif name == "JsonKVStorage":
        from .kv_json import JsonKVStorage
        return JsonKVStorage
    elif name == "RedisKVStorage":
        from .kv_redis import RedisKVStorage
        return RedisKVStorage
    else:
        raise AttributeError(f"module '{__name__}' has no attribute '{name}'")


__all__ = [
    "StorageFactory",
    "_register_backends",
    "FileBackupStorage",
    "KVBackupStorage",
    "JsonKVStorage",
    "RedisKVStorage",
]
