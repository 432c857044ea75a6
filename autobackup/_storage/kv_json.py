"""Embedded JSON-file Key-Value storage."""

import json
import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import aiofiles
import aiofiles.os

from ..base import BaseKVStorage
from ..backup.errors import StorageError
from .._utils import logger, now_ms


def load_json(file_name: str) -> Optional[Dict[str, Any]]:
    """Read a namespace file.

    Raises:
        StorageError: If the file exists but is not a readable JSON object
    """
    if not os.path.exists(file_name):
        return None
    try:
        with open(file_name, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        raise StorageError(f"Cannot read {file_name}: {e}") from e
    if not isinstance(data, dict):
        raise StorageError(f"Cannot read {file_name}: expected a JSON object")
    return data


@dataclass
class JsonKVStorage(BaseKVStorage):
    """Whole namespace held in memory and flushed to ``kv_store_<namespace>.json``.

    Flushes go through a temp file and an atomic rename, so the namespace
    file is always either the previous or the new version. A file that
    cannot be read is moved aside to ``<file>.corrupt-<epoch ms>`` and the
    namespace starts empty.
    """

    _data: Dict[str, Any] = field(init=False, default_factory=dict)

    def __post_init__(self):
        working_dir = self.global_config["working_dir"]
        self._file_name = os.path.join(working_dir, f"kv_store_{self.namespace}.json")
        try:
            self._data = load_json(self._file_name) or {}
        except StorageError as e:
            quarantine = f"{self._file_name}.corrupt-{now_ms()}"
            logger.error(f"{e}; moved to {quarantine}, starting {self.namespace} empty")
            os.replace(self._file_name, quarantine)
            self._data = {}
        logger.info(f"Load KV {self.namespace} with {len(self._data)} data")

    async def all_keys(self) -> List[str]:
        return list(self._data.keys())

    async def index_done_callback(self):
        await aiofiles.os.makedirs(os.path.dirname(self._file_name), exist_ok=True)
        tmp_name = f"{self._file_name}.tmp"
        async with aiofiles.open(tmp_name, "w", encoding="utf-8") as f:
            await f.write(json.dumps(self._data, indent=2, ensure_ascii=False))
        await aiofiles.os.replace(tmp_name, self._file_name)

    async def get_by_id(self, id):
        return self._data.get(id, None)

    async def upsert(self, data: Dict[str, Any]):
        self._data.update(data)

    async def delete(self, ids: List[str]) -> None:
        for id in ids:
            self._data.pop(id, None)
