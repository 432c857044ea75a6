"""Interfaces of the application-side collaborators."""

from typing import Any, Dict, Protocol, runtime_checkable

from .models import ExportedState

AppState = Dict[str, Any]


@runtime_checkable
class StateExporter(Protocol):
    def export_app_state(self) -> ExportedState:
        """Serialize the live state. Called on every scheduler tick, so keep it cheap and side-effect free."""
        ...


@runtime_checkable
class StateMerger(Protocol):
    def get_local_app_state(self) -> AppState:
        ...

    def set_local_app_state(self, state: AppState) -> None:
        ...

    def merge_app_state(self, local: AppState, restored: AppState) -> AppState:
        ...
