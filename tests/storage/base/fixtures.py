"""Shared fixtures for storage testing."""

import pytest
import tempfile
from pathlib import Path
from typing import Dict, Any


@pytest.fixture
def temp_storage_dir():
    """Temporary directory for storage tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def mock_global_config(temp_storage_dir) -> Dict[str, Any]:
    """Global configuration dict as produced by ``AutoBackupConfig.to_dict``."""
    return {
        "working_dir": str(temp_storage_dir),
        "default_backup_dir": str(temp_storage_dir / "AutoBackups"),
        "redis_url": "redis://localhost:6379",
        "redis_max_connections": 10,
        "redis_connection_timeout": 5.0,
        "redis_socket_timeout": 5.0,
        "redis_health_check_interval": 30,
    }
