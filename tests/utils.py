"""Test utilities for autobackup tests."""
import copy
import json
from typing import Any, Dict, Optional

from autobackup.backup.models import BackupRecord, ExportedState, SnapshotStats

HOUR_MS = 60 * 60 * 1000
START_MS = 1_700_000_000_000


def make_app_state(sessions: int = 1, messages_per_session: int = 2) -> Dict[str, Any]:
    """Application state with the three restorable sections."""
    return {
        "chat": {
            "sessions": [
                {
                    "id": f"s{i}",
                    "topic": f"Session {i}",
                    "messages": [{"role": "user", "content": f"msg {i}-{j}"} for j in range(messages_per_session)],
                }
                for i in range(sessions)
            ]
        },
        "config": {"theme": "dark", "fontSize": 14},
        "access": {"accessCode": "secret"},
    }


class FakeAppState:
    """In-memory exporter and merger."""

    def __init__(self, state: Optional[Dict[str, Any]] = None):
        self.state = state if state is not None else make_app_state()
        self.export_calls = 0
        self.set_calls = 0
        self.fail_export = False

    def export_app_state(self) -> ExportedState:
        self.export_calls += 1
        if self.fail_export:
            raise RuntimeError("export exploded")
        content = json.dumps(self.state)
        sessions = self.state.get("chat", {}).get("sessions", [])
        return ExportedState(
            content=content,
            stats=SnapshotStats(
                session_count=len(sessions),
                message_count=sum(len(s["messages"]) for s in sessions),
                total_size=len(content.encode("utf-8")),
            ),
        )

    def get_local_app_state(self) -> Dict[str, Any]:
        return copy.deepcopy(self.state)

    def set_local_app_state(self, state: Dict[str, Any]) -> None:
        self.set_calls += 1
        self.state = state

    def merge_app_state(self, local: Dict[str, Any], restored: Dict[str, Any]) -> Dict[str, Any]:
        # Restored snapshot replaces local sections wholesale
        return {**local, **restored}

    def add_message(self, session_index: int = 0, content: str = "another one") -> None:
        self.state["chat"]["sessions"][session_index]["messages"].append(
            {"role": "user", "content": content}
        )


class FakeClock:
    """Controllable epoch-millis clock."""

    def __init__(self, now: int = START_MS):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, hours: float = 0, ms: int = 0) -> None:
        self.now += int(hours * HOUR_MS) + ms


def make_record(id: str, timestamp: int, size: int = 100, **kwargs) -> BackupRecord:
    return BackupRecord(
        id=id,
        timestamp=timestamp,
        file_name=kwargs.pop("file_name", f"AutoBackup-{timestamp}-{id}.json"),
        size=size,
        **kwargs,
    )
