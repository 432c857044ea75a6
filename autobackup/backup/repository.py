"""Persistence of the backup settings and runtime document."""

from typing import Tuple

from ..base import BaseKVStorage
from .._utils import logger
from .errors import StorageError
from .migration import dump_document, load_document
from .models import BackupRuntimeState, BackupSettings


class BackupStateRepository:
    """Load and save the versioned backup document through a KV storage."""

    DOCUMENT_KEY = "autobackup"

    def __init__(self, kv: BaseKVStorage):
        self.kv = kv

    async def load(self) -> Tuple[BackupSettings, BackupRuntimeState]:
        try:
            raw = await self.kv.get_by_id(self.DOCUMENT_KEY)
        except Exception as e:
            raise StorageError(f"Cannot load backup state: {e}") from e

        if not isinstance(raw, dict):
            logger.info("No persisted backup state, using defaults")
            return BackupSettings(), BackupRuntimeState()
        return load_document(raw)

    async def save(self, settings: BackupSettings, state: BackupRuntimeState) -> None:
        try:
            await self.kv.upsert({self.DOCUMENT_KEY: dump_document(settings, state)})
            await self.kv.index_done_callback()
        except Exception as e:
            raise StorageError(f"Cannot persist backup state: {e}") from e
