"""Reference state collaborator backed by a JSON document on disk.

The live application state looks like::

    {
        "chat": {"sessions": [{"id": "...", "messages": [...]}, ...]},
        "config": {...},
        "access": {...}
    }

Hosts with their own state plug in their own exporter and merger instead.
"""

import json
import os
from pathlib import Path
from typing import Any, Dict

from ._utils import logger
from .backup.collaborators import AppState
from .backup.models import ExportedState, SnapshotStats


def _sessions(state: AppState) -> list:
    chat = state.get("chat")
    if not isinstance(chat, dict):
        return []
    sessions = chat.get("sessions")
    return sessions if isinstance(sessions, list) else []


def snapshot_stats(state: AppState, content: str) -> SnapshotStats:
    sessions = _sessions(state)
    return SnapshotStats(
        session_count=len(sessions),
        message_count=sum(len(s.get("messages") or []) for s in sessions if isinstance(s, dict)),
        total_size=len(content.encode("utf-8")),
    )


def merge_sessions(local: list, restored: list) -> list:
    """Union by session id; the restored copy of a shared session wins."""
    merged: Dict[Any, dict] = {}
    for session in list(restored) + list(local):
        if not isinstance(session, dict):
            continue
        merged.setdefault(session.get("id"), session)
    return list(merged.values())


class JsonFileAppState:
    """Exporter and merger over a single JSON file."""

    def __init__(self, path: str):
        self.path = Path(path)

    def get_local_app_state(self) -> AppState:
        if not self.path.exists():
            return {}
        with open(self.path, encoding="utf-8") as f:
            return json.load(f)

    def set_local_app_state(self, state: AppState) -> None:
        os.makedirs(self.path.parent, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(state, f, ensure_ascii=False)
        os.replace(tmp_path, self.path)
        logger.debug(f"Local app state written: {self.path}")

    def export_app_state(self) -> ExportedState:
        state = self.get_local_app_state()
        content = json.dumps(state, ensure_ascii=False)
        return ExportedState(content=content, stats=snapshot_stats(state, content))

    def merge_app_state(self, local: AppState, restored: AppState) -> AppState:
        merged = dict(local)
        for section, value in restored.items():
            current = merged.get(section)
            if section == "chat" and isinstance(value, dict) and isinstance(current, dict):
                chat = {**current, **value}
                chat["sessions"] = merge_sessions(_sessions(local), _sessions(restored))
                merged[section] = chat
            elif isinstance(value, dict) and isinstance(current, dict):
                merged[section] = {**current, **value}
            else:
                merged[section] = value
        return merged
