"""Versioned persisted document and migration of legacy shapes.

Two legacy layouts exist in the wild:

* ``< 1.1``: ``intervalHours`` may be missing or zero.
* ``1.2``: the minimal layout without ``backupHistory``, ``maxBackups``
  or ``totalSize``.

Both migrate into the canonical full-history layout, ``CURRENT_VERSION``.
"""

from typing import Any, Dict, Tuple

from pydantic import ValidationError

from ..config import DEFAULT_INTERVAL_HOURS, DEFAULT_MAX_BACKUPS
from .._utils import logger
from .models import BackupRecord, BackupRuntimeState, BackupSettings

CURRENT_VERSION = 2


def unwrap_document(raw: Dict[str, Any]) -> Tuple[Dict[str, Any], float]:
    """Split a stored payload into its fields and schema version.

    Accepts both the flat layout and the ``{"state": ..., "version": ...}``
    envelope used by older persisted stores.
    """
    if isinstance(raw.get("state"), dict):
        fields = dict(raw["state"])
        version = raw.get("version", fields.pop("version", 0))
    else:
        fields = dict(raw)
        version = fields.pop("version", 0)
    try:
        version = float(version)
    except (TypeError, ValueError):
        version = 0.0
    return fields, version


def migrate_document(fields: Dict[str, Any], version: float) -> Dict[str, Any]:
    """Bring ``fields`` up to ``CURRENT_VERSION``."""
    doc = dict(fields)

    if version < 1.1:
        interval = doc.get("intervalHours")
        if not isinstance(interval, (int, float)) or interval <= 0:
            doc["intervalHours"] = DEFAULT_INTERVAL_HOURS

    if version < CURRENT_VERSION:
        # The minimal layout dropped history; start a fresh one
        if not isinstance(doc.get("backupHistory"), list):
            doc["backupHistory"] = []
        doc.setdefault("maxBackups", DEFAULT_MAX_BACKUPS)

    if version > CURRENT_VERSION:
        logger.warning(f"Backup document version {version} is newer than {CURRENT_VERSION}")

    return doc


def _parse_history(entries) -> list:
    history = []
    for entry in entries or []:
        try:
            history.append(BackupRecord.model_validate(entry))
        except ValidationError as e:
            logger.warning(f"Dropping malformed backup record {entry!r}: {e}")
    history.sort(key=lambda r: r.timestamp)
    return history


def load_document(raw: Dict[str, Any]) -> Tuple[BackupSettings, BackupRuntimeState]:
    """Parse any known document shape into settings and runtime state."""
    fields, version = unwrap_document(raw)
    doc = migrate_document(fields, version)

    settings = BackupSettings.model_validate({
        key: doc[key] for key in ("enabled", "intervalHours", "maxBackups", "backupPath") if key in doc
    })

    last_backup_time = doc.get("lastBackupTime", 0)
    state = BackupRuntimeState(
        last_backup_time=last_backup_time if isinstance(last_backup_time, int) else 0,
        last_backup_hash=str(doc.get("lastBackupHash") or ""),
        backup_history=_parse_history(doc.get("backupHistory")),
    )
    # Never trust a stored total
    state.recompute_total_size()
    return settings, state


def dump_document(settings: BackupSettings, state: BackupRuntimeState) -> Dict[str, Any]:
    """Serialize into the canonical layout."""
    return {
        "version": CURRENT_VERSION,
        **settings.model_dump(by_alias=True),
        **state.model_dump(by_alias=True),
    }
