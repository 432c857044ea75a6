"""Custom exceptions for FastAPI application."""

from fastapi import HTTPException
from starlette.status import (
    HTTP_404_NOT_FOUND,
    HTTP_422_UNPROCESSABLE_ENTITY,
    HTTP_500_INTERNAL_SERVER_ERROR,
    HTTP_503_SERVICE_UNAVAILABLE,
)

from autobackup.backup.errors import BackupError, InvalidFormatError, NotFoundError, StorageError


class AutoBackupAPIError(HTTPException):
    """Base exception for autobackup API errors."""
    pass


class BackupNotFoundError(AutoBackupAPIError):
    def __init__(self, detail: str):
        super().__init__(HTTP_404_NOT_FOUND, detail)


class InvalidBackupError(AutoBackupAPIError):
    def __init__(self, detail: str):
        super().__init__(HTTP_422_UNPROCESSABLE_ENTITY, detail)


class StorageUnavailableError(AutoBackupAPIError):
    def __init__(self, detail: str):
        super().__init__(HTTP_503_SERVICE_UNAVAILABLE, f"Backup storage unavailable: {detail}")


class BackupFailedError(AutoBackupAPIError):
    def __init__(self, detail: str):
        super().__init__(HTTP_500_INTERNAL_SERVER_ERROR, detail)


def to_http_error(error: BackupError) -> AutoBackupAPIError:
    """Map an engine error kind onto an HTTP error."""
    if isinstance(error, NotFoundError):
        return BackupNotFoundError(str(error))
    if isinstance(error, InvalidFormatError):
        return InvalidBackupError(str(error))
    if isinstance(error, StorageError):
        return StorageUnavailableError(str(error))
    return BackupFailedError(str(error))
