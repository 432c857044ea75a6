"""Configuration management for autobackup."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional


APP_NAME = "autobackup"
DEFAULT_MAX_TOTAL_SIZE = 100 * 1024 * 1024  # 100 MiB hard ceiling

# Ranges for user-editable backup settings
MIN_INTERVAL_HOURS = 1
MAX_INTERVAL_HOURS = 168
DEFAULT_INTERVAL_HOURS = 24
MIN_MAX_BACKUPS = 1
MAX_MAX_BACKUPS = 50
DEFAULT_MAX_BACKUPS = 10


def default_data_dir() -> str:
    """Platform application data directory."""
    if os.name == "nt":
        base = os.getenv("APPDATA", str(Path.home() / "AppData" / "Roaming"))
    else:
        base = os.getenv("XDG_DATA_HOME", str(Path.home() / ".local" / "share"))
    return str(Path(base) / APP_NAME)


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


@dataclass(frozen=True)
class StorageConfig:
    """Storage backend configuration."""
    backup_backend: str = "auto"  # auto, file, kv
    native_filesystem: bool = True
    data_dir: str = field(default_factory=default_data_dir)
    kv_backend: str = "json"  # json, redis

    # Redis specific settings
    redis_url: str = "redis://localhost:6379"
    redis_password: Optional[str] = None
    redis_max_connections: int = 10
    redis_connection_timeout: float = 5.0
    redis_socket_timeout: float = 5.0
    redis_health_check_interval: int = 30

    @classmethod
    def from_env(cls) -> 'StorageConfig':
        """Create config from environment variables."""
        return cls(
            backup_backend=os.getenv("AUTOBACKUP_BACKEND", "auto"),
            native_filesystem=_env_bool("AUTOBACKUP_NATIVE_FS", "true"),
            data_dir=os.getenv("AUTOBACKUP_DATA_DIR", default_data_dir()),
            kv_backend=os.getenv("AUTOBACKUP_KV_BACKEND", "json"),
            redis_url=os.getenv("REDIS_URL", "redis://localhost:6379"),
            redis_password=os.getenv("REDIS_PASSWORD", None),
            redis_max_connections=int(os.getenv("REDIS_MAX_CONNECTIONS", "10")),
            redis_connection_timeout=float(os.getenv("REDIS_CONNECTION_TIMEOUT", "5.0")),
            redis_socket_timeout=float(os.getenv("REDIS_SOCKET_TIMEOUT", "5.0")),
            redis_health_check_interval=int(os.getenv("REDIS_HEALTH_CHECK_INTERVAL", "30")),
        )

    def __post_init__(self):
        """Validate configuration."""
        valid_backup_backends = {"auto", "file", "kv"}
        valid_kv_backends = {"json", "redis"}

        if self.backup_backend not in valid_backup_backends:
            raise ValueError(f"Unknown backup backend: {self.backup_backend}. Available: {valid_backup_backends}")
        if self.kv_backend not in valid_kv_backends:
            raise ValueError(f"Unknown KV backend: {self.kv_backend}. Available: {valid_kv_backends}")
        if self.redis_max_connections <= 0:
            raise ValueError(f"redis_max_connections must be positive, got {self.redis_max_connections}")

    @property
    def resolved_backup_backend(self) -> str:
        """The single host-dependent backend decision."""
        if self.backup_backend == "auto":
            return "file" if self.native_filesystem else "kv"
        return self.backup_backend


@dataclass(frozen=True)
class SchedulerConfig:
    """Periodic backup check configuration."""
    check_interval_seconds: float = 300.0  # 5 minutes
    run_on_start: bool = True

    @classmethod
    def from_env(cls) -> 'SchedulerConfig':
        """Create config from environment variables."""
        return cls(
            check_interval_seconds=float(os.getenv("AUTOBACKUP_CHECK_INTERVAL_SECONDS", "300")),
            run_on_start=_env_bool("AUTOBACKUP_RUN_ON_START", "true"),
        )

    def __post_init__(self):
        """Validate configuration."""
        if self.check_interval_seconds <= 0:
            raise ValueError(f"check_interval_seconds must be positive, got {self.check_interval_seconds}")


@dataclass(frozen=True)
class AutoBackupConfig:
    """Main autobackup configuration."""
    storage: StorageConfig = field(default_factory=StorageConfig)
    scheduler: SchedulerConfig = field(default_factory=SchedulerConfig)
    max_total_size: int = DEFAULT_MAX_TOTAL_SIZE

    @classmethod
    def from_env(cls) -> 'AutoBackupConfig':
        """Create complete config from environment variables."""
        return cls(
            storage=StorageConfig.from_env(),
            scheduler=SchedulerConfig.from_env(),
            max_total_size=int(os.getenv("AUTOBACKUP_MAX_TOTAL_SIZE", str(DEFAULT_MAX_TOTAL_SIZE))),
        )

    def __post_init__(self):
        """Validate configuration."""
        if self.max_total_size <= 0:
            raise ValueError(f"max_total_size must be positive, got {self.max_total_size}")

    def to_dict(self) -> dict:
        """Flatten into the ``global_config`` dict handed to storages."""
        return {
            "working_dir": self.storage.data_dir,
            "default_backup_dir": str(Path(self.storage.data_dir) / "AutoBackups"),
            "redis_url": self.storage.redis_url,
            "redis_password": self.storage.redis_password,
            "redis_max_connections": self.storage.redis_max_connections,
            "redis_connection_timeout": self.storage.redis_connection_timeout,
            "redis_socket_timeout": self.storage.redis_socket_timeout,
            "redis_health_check_interval": self.storage.redis_health_check_interval,
        }
