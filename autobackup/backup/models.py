"""Data models for backup operations."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from ..config import (
    DEFAULT_INTERVAL_HOURS,
    DEFAULT_MAX_BACKUPS,
    MAX_INTERVAL_HOURS,
    MAX_MAX_BACKUPS,
    MIN_INTERVAL_HOURS,
    MIN_MAX_BACKUPS,
)
from .._utils import clamp
from .errors import BackupError

T = TypeVar("T")


class _CamelModel(BaseModel):
    # Persisted documents use camelCase keys
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class BackupRecord(_CamelModel):
    """Metadata entry describing one stored snapshot."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: str = Field(..., description="Unique backup identifier")
    timestamp: int = Field(..., description="Creation time, epoch millis")
    file_name: str = Field(..., description="Storage file name derived from timestamp and id")
    size: int = Field(..., ge=0, description="Blob size in bytes")
    session_count: int = 0
    message_count: int = 0


class BackupSettings(_CamelModel):
    """User-editable settings. Ranges are clamped whenever a model is built."""

    enabled: bool = False
    interval_hours: int = DEFAULT_INTERVAL_HOURS
    max_backups: int = DEFAULT_MAX_BACKUPS
    backup_path: str = ""

    @field_validator("interval_hours", mode="before")
    @classmethod
    def clamp_interval(cls, v):
        return clamp(v, MIN_INTERVAL_HOURS, MAX_INTERVAL_HOURS, DEFAULT_INTERVAL_HOURS)

    @field_validator("max_backups", mode="before")
    @classmethod
    def clamp_max_backups(cls, v):
        return clamp(v, MIN_MAX_BACKUPS, MAX_MAX_BACKUPS, DEFAULT_MAX_BACKUPS)

    @field_validator("backup_path", mode="before")
    @classmethod
    def normalize_path(cls, v):
        return (v or "").strip()


class BackupRuntimeState(_CamelModel):
    """Engine-owned state. Only the backup store mutates it."""

    last_backup_time: int = 0
    last_backup_hash: str = ""
    backup_history: List[BackupRecord] = Field(default_factory=list)
    total_size: int = 0

    def recompute_total_size(self) -> None:
        self.total_size = sum(record.size for record in self.backup_history)


class SnapshotStats(_CamelModel):
    session_count: int = 0
    message_count: int = 0
    total_size: int = 0


class ExportedState(BaseModel):
    """What the state exporter hands over for one backup."""

    content: str
    stats: SnapshotStats = Field(default_factory=SnapshotStats)


class BackupBlob(BaseModel):
    """Raw backup content ready for a download or save collaborator."""

    file_name: str
    content: str
    media_type: str = "application/json"

    @property
    def size(self) -> int:
        return len(self.content.encode("utf-8"))


class SkipReason(str, Enum):
    DISABLED = "disabled"
    SIZE_LIMIT_EXCEEDED = "size_limit_exceeded"
    INTERVAL_NOT_ELAPSED = "interval_not_elapsed"
    UNCHANGED = "unchanged"
    EXPORT_FAILED = "export_failed"


class BackupStatus(BaseModel):
    """Snapshot of settings and runtime state for API responses."""

    settings: BackupSettings
    state: BackupRuntimeState
    backend: str
    busy: bool
    skip_reason: Optional[SkipReason] = None


@dataclass(frozen=True)
class OperationResult(Generic[T]):
    """Outcome of a store operation. Failures carry a typed ``BackupError``."""

    ok: bool
    value: Optional[T] = None
    error: Optional[BackupError] = None

    @classmethod
    def success(cls, value: Any = None) -> "OperationResult":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, error: BackupError) -> "OperationResult":
        return cls(ok=False, error=error)

    def unwrap(self) -> T:
        if not self.ok:
            raise self.error
        return self.value
