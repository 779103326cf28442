from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

from .models import DocumentCatalog, DocumentRecord

WorkflowPhase = Literal["idle", "loading", "selecting", "choosing_action", "executing"]
ActionOutcome = Literal["reload", "reselect", "exit"]


@dataclass
class WorkflowState:
    phase: WorkflowPhase = "idle"
    catalog: DocumentCatalog = ()
    selected: DocumentRecord | None = None
    action: int = -1
    loads: int = 0
    empty_catalog: bool = False
    history: list[WorkflowPhase] = field(default_factory=list)

    def _enter(self, phase: WorkflowPhase) -> None:
        self.history.append(self.phase)
        self.phase = phase


def new_workflow_state() -> WorkflowState:
    return WorkflowState()


def apply_workflow_event(state: WorkflowState, event: dict[str, Any]) -> None:
    """Advance the workflow phase for one event.

    Events that do not apply to the current phase are ignored so a stray
    event can never skip the reload after a mutating action.
    """
    etype = str(event.get("type", ""))

    if etype == "start" and state.phase == "idle":
        state.catalog = ()
        state.selected = None
        state.action = -1
        state.empty_catalog = False
        state._enter("loading")
        return

    if etype == "catalog_loaded" and state.phase == "loading":
        state.catalog = tuple(event.get("catalog", ()))
        state.selected = None
        state.action = -1
        state.loads += 1
        state.empty_catalog = not state.catalog
        state._enter("idle" if state.empty_catalog else "selecting")
        return

    if etype == "document_selected" and state.phase == "selecting":
        state.selected = event.get("document")
        state._enter("choosing_action")
        return

    if etype == "selection_aborted" and state.phase == "selecting":
        state.selected = None
        state._enter("idle")
        return

    if etype == "action_chosen" and state.phase == "choosing_action":
        try:
            state.action = int(event.get("action", -1))
        except (TypeError, ValueError):
            state.action = -1
        state._enter("executing")
        return

    if etype == "action_done" and state.phase == "executing":
        outcome = str(event.get("outcome", "exit"))
        state.action = -1
        if outcome == "reload":
            # The snapshot is stale after a mutation; drop it before refetching.
            state.catalog = ()
            state.selected = None
            state._enter("loading")
        elif outcome == "reselect":
            state.selected = None
            state._enter("selecting")
        else:
            state.selected = None
            state._enter("idle")
        return
