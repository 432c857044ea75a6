"""Global pytest configuration and fixtures."""

import pytest
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from autobackup._storage.backup_file import FileBackupStorage
from autobackup._storage.kv_json import JsonKVStorage
from autobackup.backup import BackupStateRepository, BackupStore

# Import fixtures from storage base to make them globally available
from tests.storage.base.fixtures import temp_storage_dir, mock_global_config
from tests.utils import FakeAppState, FakeClock

__all__ = ["temp_storage_dir", "mock_global_config"]


@pytest.fixture
def app_state():
    return FakeAppState()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def file_storage(mock_global_config):
    return FileBackupStorage(global_config=mock_global_config)


@pytest.fixture
def state_kv(mock_global_config):
    return JsonKVStorage(namespace="autobackup_state", global_config=mock_global_config)


@pytest.fixture
def store(file_storage, app_state, clock, state_kv):
    """Enabled store on file storage with a persisted state document."""
    backup_store = BackupStore(
        storage=file_storage,
        exporter=app_state,
        merger=app_state,
        repository=BackupStateRepository(state_kv),
        clock=clock,
    )
    backup_store.settings = backup_store.settings.model_copy(update={"enabled": True})
    return backup_store
