"""Backup and restore API endpoints."""

from typing import List, Optional

from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import Response
from pydantic import BaseModel

from ..dependencies import get_backup_store
from ..exceptions import InvalidBackupError, to_http_error
from autobackup.backup import BackupRecord, BackupSettings, BackupStatus, BackupStore, OperationResult
from autobackup._utils import logger

router = APIRouter(prefix="/backup", tags=["backup"])


class SettingsUpdate(BaseModel):
    """Partial settings update. Omitted fields keep their value."""

    enabled: Optional[bool] = None
    interval_hours: Optional[int] = None
    max_backups: Optional[int] = None
    backup_path: Optional[str] = None


class RestoreResponse(BaseModel):
    restored: bool
    reload_required: bool


def _unwrap(result: OperationResult):
    if not result.ok:
        raise to_http_error(result.error)
    return result.value


@router.get("", response_model=List[BackupRecord])
async def list_backups(store: BackupStore = Depends(get_backup_store)) -> List[BackupRecord]:
    """List retained backups, newest first."""
    return store.list_backups()


@router.post("", response_model=BackupRecord)
async def create_backup(store: BackupStore = Depends(get_backup_store)) -> BackupRecord:
    """Create a backup now, regardless of interval and change detection."""
    return _unwrap(await store.create_backup())


@router.delete("")
async def clear_backups(store: BackupStore = Depends(get_backup_store)) -> dict:
    """Delete every backup and reset backup history."""
    _unwrap(await store.clear_all_backups())
    return {"status": "cleared"}


@router.get("/status", response_model=BackupStatus)
async def backup_status(store: BackupStore = Depends(get_backup_store)) -> BackupStatus:
    return store.get_status()


@router.patch("/settings", response_model=BackupSettings)
async def update_settings(
    update: SettingsUpdate,
    store: BackupStore = Depends(get_backup_store)
) -> BackupSettings:
    return await store.update_settings(**update.model_dump(exclude_none=True))


@router.post("/restore", response_model=RestoreResponse)
async def restore_upload(
    file: UploadFile = File(...),
    store: BackupStore = Depends(get_backup_store)
) -> RestoreResponse:
    """Restore from an uploaded backup file."""
    raw = await file.read()
    try:
        content = raw.decode("utf-8")
    except UnicodeDecodeError:
        raise InvalidBackupError("Backup file must be UTF-8 encoded JSON")

    logger.info(f"Uploaded backup file: {file.filename} ({len(raw):,} bytes)")
    _unwrap(await store.restore_from_content(content))
    return RestoreResponse(restored=True, reload_required=True)


@router.post("/{backup_id}/restore", response_model=RestoreResponse)
async def restore_backup(backup_id: str, store: BackupStore = Depends(get_backup_store)) -> RestoreResponse:
    reload_required = _unwrap(await store.restore_backup(backup_id))
    return RestoreResponse(restored=True, reload_required=bool(reload_required))


@router.get("/{backup_id}/download")
async def download_backup(backup_id: str, store: BackupStore = Depends(get_backup_store)) -> Response:
    """Download a backup as a JSON attachment."""
    blob = _unwrap(await store.export_backup(backup_id))
    return Response(
        content=blob.content,
        media_type=blob.media_type,
        headers={"Content-Disposition": f"attachment; filename={blob.file_name}"}
    )


@router.delete("/{backup_id}")
async def delete_backup(backup_id: str, store: BackupStore = Depends(get_backup_store)) -> dict:
    """Delete a backup. Unknown ids are ignored."""
    deleted = _unwrap(await store.delete_backup(backup_id))
    return {"status": "deleted" if deleted else "not_found", "backup_id": backup_id}
