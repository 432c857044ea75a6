"""Directory-backed backup storage for hosts with a native filesystem."""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

import aiofiles
import aiofiles.os

from ..base import BaseBackupStorage
from ..backup.errors import NotFoundError, StorageError
from .._utils import logger


@dataclass
class FileBackupStorage(BaseBackupStorage):
    """One JSON file per backup inside a backup directory.

    The directory is ``backup_path`` when the user configured one, else
    ``<app-data-dir>/AutoBackups``.
    """

    def container_for(self, backup_path: Optional[str] = None) -> str:
        if backup_path:
            return str(Path(backup_path).expanduser())
        default_dir = self.global_config.get("default_backup_dir")
        if not default_dir:
            default_dir = str(Path(self.global_config.get("working_dir", ".")) / "AutoBackups")
        return default_dir

    def key_for(self, container: str, record_id: str, file_name: str) -> str:
        return str(Path(container) / file_name)

    async def ensure_container(self, container: str) -> None:
        try:
            await aiofiles.os.makedirs(container, exist_ok=True)
        except OSError as e:
            raise StorageError(f"Cannot create backup directory {container}: {e}") from e

    async def write(self, key: str, content: str) -> None:
        try:
            async with aiofiles.open(key, "w", encoding="utf-8") as f:
                await f.write(content)
        except OSError as e:
            raise StorageError(f"Cannot write backup {key}: {e}") from e
        logger.debug(f"Wrote backup file: {key}")

    async def read(self, key: str) -> str:
        try:
            async with aiofiles.open(key, "r", encoding="utf-8") as f:
                return await f.read()
        except FileNotFoundError as e:
            raise NotFoundError(os.path.basename(key), "no blob") from e
        except OSError as e:
            raise StorageError(f"Cannot read backup {key}: {e}") from e

    async def delete(self, key: str) -> None:
        try:
            await aiofiles.os.remove(key)
        except FileNotFoundError:
            logger.debug(f"Backup file already gone: {key}")
        except OSError as e:
            raise StorageError(f"Cannot delete backup {key}: {e}") from e

    async def list(self, container: str) -> List[str]:
        if not await aiofiles.os.path.isdir(container):
            return []
        try:
            names = await aiofiles.os.listdir(container)
        except OSError as e:
            raise StorageError(f"Cannot list backup directory {container}: {e}") from e
        return sorted(
            str(Path(container) / name) for name in names
            if name.startswith("AutoBackup-") and name.endswith(".json")
        )
