from __future__ import annotations

from typing import Sequence

from .catalog import CatalogLoader
from .errors import FATAL_ERRORS, AbortError, DoctransError
from .logstore import LogStore
from .models import (
    ACTION_CANCEL,
    ACTION_DELETE,
    ACTION_TRANSLATE,
    ACTION_VIEW,
    DEFAULT_ACTIONS,
    ActionItem,
    DocumentRecord,
    SessionSummary,
)
from .prompts import Terminal, choose_action, select_document
from .service import DocumentService
from .state import ActionOutcome, WorkflowState, apply_workflow_event, new_workflow_state
from .submit import submit_document

SELECT_LABEL = "Documents"


class WorkflowController:
    """Drives load -> select -> act until the operator leaves.

    This is the only place that turns a fatal error into an exit code. It
    never patches the catalog after a delete; it reloads instead.
    """

    def __init__(
        self,
        terminal: Terminal,
        loader: CatalogLoader,
        service: DocumentService,
        logstore: LogStore,
        actions: Sequence[ActionItem] = DEFAULT_ACTIONS,
    ) -> None:
        self.terminal = terminal
        self.loader = loader
        self.service = service
        self.logstore = logstore
        self.actions = tuple(actions)
        self.state: WorkflowState = new_workflow_state()
        self.summary = SessionSummary(command="documents")

    def run(self) -> int:
        self.state = new_workflow_state()
        apply_workflow_event(self.state, {"type": "start"})
        try:
            while self.state.phase != "idle":
                self._step()
        except FATAL_ERRORS as exc:
            return self._fatal(exc)
        self.summary.loads = self.state.loads
        return 0

    def _step(self) -> None:
        phase = self.state.phase
        if phase == "loading":
            self._log("info", "Fetching Documents list...", "catalog")
            catalog = self.loader.load()
            apply_workflow_event(self.state, {"type": "catalog_loaded", "catalog": catalog})
            if self.state.empty_catalog:
                self._log("warn", "No documents found.", "catalog")
            return

        if phase == "selecting":
            doc, err = select_document(self.terminal, self.state.catalog, SELECT_LABEL)
            if err is not None or doc is None:
                self.logstore.append("info", "select", f"selection ended: {err}", category="prompt")
                apply_workflow_event(self.state, {"type": "selection_aborted"})
                return
            apply_workflow_event(self.state, {"type": "document_selected", "document": doc})
            return

        if phase == "choosing_action":
            index = choose_action(self.terminal, self.actions)
            apply_workflow_event(self.state, {"type": "action_chosen", "action": self.actions[index].value})
            return

        if phase == "executing":
            outcome = self._execute(self.state.action, self.state.selected)
            apply_workflow_event(self.state, {"type": "action_done", "outcome": outcome})

    def _execute(self, action: int, doc: DocumentRecord | None) -> ActionOutcome:
        if action == ACTION_VIEW and doc is not None:
            try:
                self.terminal.show_document(doc)
            except AbortError:
                self.logstore.append("info", "view", "detail view closed with cancel", category="prompt")
            return "reselect"
        if action == ACTION_DELETE and doc is not None:
            self._log("info", f"Deleting {doc.filename} ({doc.document_id})...", "workflow")
            self.service.delete_document(doc.document_id)
            self.summary.deleted.append(doc.document_id)
            self._log("info", f"Deleted {doc.document_id}.", "workflow")
            return "reload"
        if action == ACTION_TRANSLATE:
            document_id = submit_document(self.terminal, self.service, self.logstore)
            if document_id:
                self.summary.submitted.append(document_id)
            return "reload"
        if action != ACTION_CANCEL:
            self.logstore.append("warn", "execute", f"unknown action value {action}", category="workflow")
        return "exit"

    def _fatal(self, exc: DoctransError) -> int:
        message = f"{type(exc).__name__}: {exc}"
        self.logstore.append("error", self.state.phase, message, category="workflow")
        self.terminal.message("error", message)
        self.summary.exit_code = 1
        self.summary.error = message
        self.summary.loads = self.state.loads
        return 1

    def _log(self, level: str, message: str, category: str) -> None:
        self.logstore.append(level, self.state.phase, message, category=category)
        self.terminal.message(level, message)
