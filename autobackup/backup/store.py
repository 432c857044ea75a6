"""Backup store: the single owner of backup settings and history."""

import asyncio
import inspect
import json
from typing import Any, Callable, List, Optional, Sequence

from ..base import BaseBackupStorage
from ..config import (
    DEFAULT_INTERVAL_HOURS,
    DEFAULT_MAX_BACKUPS,
    DEFAULT_MAX_TOTAL_SIZE,
    MAX_INTERVAL_HOURS,
    MAX_MAX_BACKUPS,
    MIN_INTERVAL_HOURS,
    MIN_MAX_BACKUPS,
)
from .._utils import clamp, format_bytes, iso_timestamp, logger, now_ms, short_id
from .collaborators import StateExporter, StateMerger
from .errors import BackupError, InvalidFormatError, NotFoundError, SizeLimitExceeded, StorageError
from .fingerprint import fingerprint
from .models import (
    BackupBlob,
    BackupRecord,
    BackupRuntimeState,
    BackupSettings,
    BackupStatus,
    ExportedState,
    OperationResult,
    SkipReason,
)
from .repository import BackupStateRepository
from .retention import RetentionPolicy

# Top-level sections every restorable snapshot must carry
REQUIRED_SECTIONS = ("chat", "config", "access")

HOUR_MS = 60 * 60 * 1000


def backup_file_name(timestamp_ms: int, backup_id: str) -> str:
    """``AutoBackup-<ISO timestamp, ':' and '.' -> '_'>-<id>.json``"""
    stamp = iso_timestamp(timestamp_ms).replace(":", "_").replace(".", "_")
    return f"AutoBackup-{stamp}-{backup_id}.json"


class BackupStore:
    """Create, list, restore, export and delete backups.

    All mutations of settings and history go through this object. Create,
    delete, clear and restore share one lock, so at most one of them runs
    at any time.
    """

    def __init__(
        self,
        storage: BaseBackupStorage,
        exporter: StateExporter,
        merger: StateMerger,
        repository: Optional[BackupStateRepository] = None,
        max_total_size: int = DEFAULT_MAX_TOTAL_SIZE,
        required_sections: Sequence[str] = REQUIRED_SECTIONS,
        clock: Callable[[], int] = now_ms,
    ):
        """Initialize backup store.

        Args:
            storage: Backup storage selected for this host
            exporter: Produces the snapshot and its statistics
            merger: Merges a restored snapshot into the live state
            repository: Persists settings and history; in-memory only if None
            max_total_size: Hard ceiling in bytes for retained backups
            required_sections: Top-level keys a snapshot needs to be restorable
            clock: Epoch-millis time source
        """
        self.storage = storage
        self.exporter = exporter
        self.merger = merger
        self.repository = repository
        self.max_total_size = max_total_size
        self.required_sections = tuple(required_sections)
        self._clock = clock

        self.settings = BackupSettings()
        self.state = BackupRuntimeState()
        self._lock = asyncio.Lock()
        self._restore_listeners: List[Callable[[], Any]] = []

    @property
    def is_busy(self) -> bool:
        return self._lock.locked()

    async def load(self) -> None:
        """Load the persisted document, migrating legacy layouts."""
        if self.repository is None:
            return
        self.settings, self.state = await self.repository.load()
        logger.info(
            f"Loaded backup state: {len(self.state.backup_history)} backups, "
            f"{format_bytes(self.state.total_size)}"
        )

    async def _persist(self) -> None:
        if self.repository is None:
            return
        try:
            await self.repository.save(self.settings, self.state)
        except StorageError as e:
            # In-memory state stays authoritative until the next successful save
            logger.error(f"Failed to persist backup state: {e}")

    # Settings

    async def update_settings(self, **updates) -> BackupSettings:
        """Merge a partial settings update. Out-of-range values are clamped."""
        merged = {**self.settings.model_dump(), **updates}
        self.settings = BackupSettings.model_validate(merged)
        await self._persist()
        logger.info(f"Backup settings updated: {updates}")
        return self.settings

    # Decision

    def check_backup_due(self) -> Optional[SkipReason]:
        """Why no backup is due right now, or None if one is."""
        if not self.settings.enabled:
            return SkipReason.DISABLED

        if self.state.total_size > self.max_total_size:
            return SkipReason.SIZE_LIMIT_EXCEEDED

        interval_hours = clamp(self.settings.interval_hours, MIN_INTERVAL_HOURS, MAX_INTERVAL_HOURS, DEFAULT_INTERVAL_HOURS)
        if self._clock() - self.state.last_backup_time < interval_hours * HOUR_MS:
            return SkipReason.INTERVAL_NOT_ELAPSED

        try:
            exported = self.exporter.export_app_state()
        except Exception as e:
            logger.error(f"State export failed during backup check: {e}")
            return SkipReason.EXPORT_FAILED
        current_hash = fingerprint(
            len(exported.content),
            self.state.last_backup_time,
            exported.stats.session_count,
            exported.stats.message_count,
        )
        if current_hash == self.state.last_backup_hash:
            return SkipReason.UNCHANGED

        return None

    def should_create_backup(self) -> bool:
        return self.check_backup_due() is None

    async def run_if_due(self) -> OperationResult:
        """Create a backup when one is due.

        The value is the new record, or None if nothing was due. Going over
        the size ceiling is reported as a ``SizeLimitExceeded`` failure, a
        state export that fails during the check as a ``BackupError``.
        """
        reason = self.check_backup_due()
        if reason == SkipReason.SIZE_LIMIT_EXCEEDED:
            error = SizeLimitExceeded(self.state.total_size, self.max_total_size)
            logger.warning(f"Skipping backup: {error}")
            return OperationResult.failure(error)
        if reason == SkipReason.EXPORT_FAILED:
            return OperationResult.failure(BackupError("State export failed, backup check skipped"))
        if reason is not None:
            logger.debug(f"No backup due: {reason.value}")
            return OperationResult.success(None)
        return await self.create_backup()

    # Create

    async def create_backup(self) -> OperationResult:
        """Export state, store it and record the backup.

        Returns:
            OperationResult holding the new BackupRecord
        """
        async with self._lock:
            try:
                record = await self._create_unlocked()
            except BackupError as e:
                logger.error(f"Failed to create backup: {e}")
                return OperationResult.failure(e)

            await self._enforce_retention()
            await self._persist()

        logger.info(f"Backup created: {record.file_name} ({format_bytes(record.size)})")
        return OperationResult.success(record)

    async def _create_unlocked(self) -> BackupRecord:
        try:
            exported = self.exporter.export_app_state()
        except Exception as e:
            raise BackupError(f"State export failed: {e}") from e
        if not isinstance(exported, ExportedState):
            raise BackupError(f"State exporter returned {type(exported).__name__}, expected ExportedState")

        timestamp = self._clock()
        backup_id = short_id()
        file_name = backup_file_name(timestamp, backup_id)

        container = self.storage.container_for(self.settings.backup_path)
        await self.storage.ensure_container(container)
        await self.storage.write(self.storage.key_for(container, backup_id, file_name), exported.content)

        record = BackupRecord(
            id=backup_id,
            timestamp=timestamp,
            file_name=file_name,
            size=len(exported.content.encode("utf-8")),
            session_count=exported.stats.session_count,
            message_count=exported.stats.message_count,
        )

        # Nothing below can fail, so the record is all-or-nothing
        self.state.backup_history.append(record)
        self.state.backup_history.sort(key=lambda r: r.timestamp)
        self.state.recompute_total_size()
        self.state.last_backup_hash = fingerprint(
            len(exported.content), timestamp, exported.stats.session_count, exported.stats.message_count
        )
        self.state.last_backup_time = timestamp
        return record

    async def _enforce_retention(self) -> None:
        policy = RetentionPolicy(
            max_backups=clamp(self.settings.max_backups, MIN_MAX_BACKUPS, MAX_MAX_BACKUPS, DEFAULT_MAX_BACKUPS),
            max_total_size=self.max_total_size,
        )
        for backup_id in policy.select_evictions(self.state.backup_history):
            try:
                await self._delete_unlocked(backup_id)
                logger.info(f"Evicted old backup: {backup_id}")
            except BackupError as e:
                logger.error(f"Failed to evict backup {backup_id}: {e}")

    # Delete

    async def delete_backup(self, backup_id: str) -> OperationResult:
        """Delete one backup. Unknown ids are a successful no-op."""
        async with self._lock:
            try:
                deleted = await self._delete_unlocked(backup_id)
            except BackupError as e:
                logger.error(f"Failed to delete backup {backup_id}: {e}")
                return OperationResult.failure(e)
            if deleted:
                await self._persist()
        return OperationResult.success(deleted)

    async def _delete_unlocked(self, backup_id: str) -> bool:
        record = self.get_record(backup_id)
        if record is None:
            return False

        container = self.storage.container_for(self.settings.backup_path)
        # Blob first: a failed delete keeps the record pointing at it
        await self.storage.delete(self.storage.key_for(container, record.id, record.file_name))

        self.state.backup_history = [r for r in self.state.backup_history if r.id != backup_id]
        self.state.recompute_total_size()
        logger.debug(f"Deleted backup: {record.file_name}")
        return True

    async def clear_all_backups(self) -> OperationResult:
        """Delete every backup and reset the runtime state."""
        async with self._lock:
            failures = []
            for record in list(self.state.backup_history):
                try:
                    await self._delete_unlocked(record.id)
                except BackupError as e:
                    logger.error(f"Failed to delete backup {record.id}: {e}")
                    failures.append(e)

            if failures:
                await self._persist()
                return OperationResult.failure(StorageError(
                    f"{len(failures)} backup(s) could not be deleted: {failures[0]}"
                ))

            self.state = BackupRuntimeState()
            await self._persist()

        logger.info("All backups cleared")
        return OperationResult.success()

    # Read

    def get_record(self, backup_id: str) -> Optional[BackupRecord]:
        for record in self.state.backup_history:
            if record.id == backup_id:
                return record
        return None

    def list_backups(self) -> List[BackupRecord]:
        """Backups newest first."""
        return sorted(self.state.backup_history, key=lambda r: r.timestamp, reverse=True)

    def get_status(self) -> BackupStatus:
        return BackupStatus(
            settings=self.settings,
            state=self.state,
            backend=self.storage.backend_name,
            busy=self.is_busy,
            skip_reason=self.check_backup_due(),
        )

    async def load_backup_content(self, backup_id: str) -> str:
        """Read a backup blob from the current backend.

        Raises:
            NotFoundError: If the record or its blob is missing
            StorageError: If the backend fails
        """
        record = self.get_record(backup_id)
        if record is None:
            raise NotFoundError(backup_id)
        container = self.storage.container_for(self.settings.backup_path)
        return await self.storage.read(self.storage.key_for(container, record.id, record.file_name))

    async def export_backup(self, backup_id: str) -> OperationResult:
        """Raw backup content for a download collaborator.

        Returns:
            OperationResult holding a BackupBlob
        """
        try:
            content = await self.load_backup_content(backup_id)
        except BackupError as e:
            logger.error(f"Failed to export backup {backup_id}: {e}")
            return OperationResult.failure(e)
        return OperationResult.success(BackupBlob(file_name=self.get_record(backup_id).file_name, content=content))

    # Restore

    def add_restore_listener(self, listener: Callable[[], Any]) -> None:
        """Register a callback run after a successful restore.

        Dependent state must be reloaded when it fires.
        """
        self._restore_listeners.append(listener)

    async def restore_backup(self, backup_id: str) -> OperationResult:
        """Merge a stored backup into the live application state.

        Returns:
            OperationResult whose value is True: a reload is required
        """
        async with self._lock:
            try:
                content = await self.load_backup_content(backup_id)
                self._apply_restore(content)
            except BackupError as e:
                logger.error(f"Failed to restore backup {backup_id}: {e}")
                return OperationResult.failure(e)

        logger.info(f"Backup restored: {backup_id}")
        await self._notify_restored()
        return OperationResult.success(True)

    async def restore_from_content(self, content: str) -> OperationResult:
        """Restore from externally supplied backup content."""
        async with self._lock:
            try:
                self._apply_restore(content)
            except BackupError as e:
                logger.error(f"Failed to restore uploaded backup: {e}")
                return OperationResult.failure(e)

        logger.info("Backup restored from uploaded content")
        await self._notify_restored()
        return OperationResult.success(True)

    def parse_snapshot(self, content: str) -> dict:
        """Parse and validate snapshot content.

        Raises:
            InvalidFormatError: If it is not a JSON object with all required sections
        """
        try:
            snapshot = json.loads(content)
        except (TypeError, ValueError) as e:
            raise InvalidFormatError(f"Backup is not valid JSON: {e}") from e

        if not isinstance(snapshot, dict):
            raise InvalidFormatError("Backup must be a JSON object")

        missing = [section for section in self.required_sections if section not in snapshot]
        if missing:
            raise InvalidFormatError(f"Backup is missing sections: {', '.join(missing)}")
        return snapshot

    def _apply_restore(self, content: str) -> None:
        restored = self.parse_snapshot(content)
        try:
            local = self.merger.get_local_app_state()
            merged = self.merger.merge_app_state(local, restored)
            self.merger.set_local_app_state(merged)
        except BackupError:
            raise
        except Exception as e:
            raise BackupError(f"Merging restored state failed: {e}") from e

    async def _notify_restored(self) -> None:
        for listener in self._restore_listeners:
            try:
                result = listener()
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                logger.warning(f"Restore listener failed: {e}")
