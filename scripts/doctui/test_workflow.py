from __future__ import annotations

import io
import json
import tempfile
import unittest
from pathlib import Path
from typing import Any, Sequence

from scripts.doctrans import run_command
from scripts.doctui.catalog import CatalogLoader
from scripts.doctui.config import ServiceConfig, load_config
from scripts.doctui.controller import WorkflowController
from scripts.doctui.errors import AbortError, InputFailure, TransportError, UnsupportedFileError
from scripts.doctui.logstore import LogStore
from scripts.doctui.models import DEFAULT_ACTIONS, ActionItem, PromptSpec
from scripts.doctui.plain import PlainTerminal
from scripts.doctui.prompts import choose_action, prompt_input, prompt_select_with_add, select_document
from scripts.doctui.selector import ListSelector, document_searcher
from scripts.doctui.state import apply_workflow_event, new_workflow_state
from scripts.doctui.submit import accept_type, build_translate_request, configure
from scripts.doctui.test_core import make_doc

VIEW, DELETE, TRANSLATE, CANCEL = 0, 1, 2, 3


class ScriptedTerminal:
    """Terminal double that replays scripted answers and records every prompt.

    A document pick may be an index, an exception to raise, or a list of keys
    fed through a real ``ListSelector``.
    """

    def __init__(
        self,
        lines: Sequence[Any] = (),
        choices: Sequence[Any] = (),
        adds: Sequence[Any] = (),
        picks: Sequence[Any] = (),
    ) -> None:
        self.lines = list(lines)
        self.choices = list(choices)
        self.adds = list(adds)
        self.picks = list(picks)
        self.calls: list[tuple[Any, ...]] = []
        self.messages: list[tuple[str, str]] = []
        self.shown: list[str] = []
        self.visible_after_keys: list[list[str]] = []

    @staticmethod
    def _next(queue: list[Any], name: str) -> Any:
        if not queue:
            raise InputFailure(f"{name}: script exhausted")
        item = queue.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    def read_line(self, label: str, default: str = "", error: str = "") -> str:
        self.calls.append(("read_line", label, default, error))
        return self._next(self.lines, "read_line")

    def choose(self, label: str, items: Sequence[str], size: int = 3) -> int:
        self.calls.append(("choose", label, list(items)))
        return self._next(self.choices, "choose")

    def choose_or_add(self, label: str, items: Sequence[str], add_label: str = "Other") -> tuple[int, str]:
        self.calls.append(("choose_or_add", label, list(items)))
        return self._next(self.adds, "choose_or_add")

    def pick_document(self, label: str, docs: Sequence[Any], size: int = 4) -> int:
        self.calls.append(("pick_document", label, [doc.document_id for doc in docs]))
        item = self._next(self.picks, "pick_document")
        if not isinstance(item, list):
            return item
        selector = ListSelector(docs, size=size, searcher=document_searcher(docs))
        for key in item:
            outcome = selector.handle_key(key)
            self.visible_after_keys.append([docs[idx].document_id for idx in selector.visible])
            if outcome == "abort":
                raise AbortError()
            if outcome == "select":
                assert selector.highlighted is not None
                return selector.highlighted
        raise InputFailure("keys ended without a selection")

    def show_document(self, doc: Any) -> None:
        self.shown.append(doc.document_id)

    def message(self, level: str, text: str) -> None:
        self.messages.append((level, text))

    def prompts(self, kind: str) -> list[tuple[Any, ...]]:
        return [call for call in self.calls if call[0] == kind]


class FakeService:
    def __init__(self, docs: list[dict]) -> None:
        self.docs = list(docs)
        self.list_calls = 0
        self.deleted: list[str] = []
        self.submitted: list[Any] = []
        self.list_error: Exception | None = None

    def list_documents(self) -> bytes:
        self.list_calls += 1
        if self.list_error is not None:
            raise self.list_error
        return json.dumps({"documents": self.docs}).encode()

    def delete_document(self, document_id: str) -> None:
        self.deleted.append(document_id)
        self.docs = [doc for doc in self.docs if doc["document_id"] != document_id]

    def translate(self, request: Any) -> bytes:
        self.submitted.append(request)
        self.docs.append(make_doc("C", request.filename, "2022-03-02T00:00:00Z"))
        return b'{"document_id": "C", "status": "processing"}'


class PromptTests(unittest.TestCase):
    def test_empty_input_reprompts_with_error(self) -> None:
        term = ScriptedTerminal(lines=["", "report.pdf"])
        spec = PromptSpec(label="File Name", error_msg="You must provide the filename")
        self.assertEqual(prompt_input(term, spec, default="draft"), "report.pdf")
        calls = term.prompts("read_line")
        self.assertEqual(calls[0], ("read_line", "File Name", "draft", ""))
        self.assertEqual(calls[1][3], "You must provide the filename")

    def test_abort_in_input_is_fatal(self) -> None:
        term = ScriptedTerminal(lines=[AbortError()])
        with self.assertRaises(InputFailure):
            prompt_input(term, PromptSpec("File Name", "required"))

    def test_other_value_is_confirmed_before_return(self) -> None:
        options = ["en", "zh", "ja"]
        term = ScriptedTerminal(adds=[(-1, "fr"), (3, "fr")])
        result = prompt_select_with_add(term, PromptSpec("Source Language", "required"), options)
        self.assertEqual(result, "fr")
        presented = [call[2] for call in term.prompts("choose_or_add")]
        self.assertEqual(presented, [["en", "zh", "ja"], ["en", "zh", "ja", "fr"]])
        self.assertEqual(options, ["en", "zh", "ja"])

    def test_existing_option_returns_immediately(self) -> None:
        term = ScriptedTerminal(adds=[(1, "zh")])
        self.assertEqual(prompt_select_with_add(term, PromptSpec("Source Language", "required"), ["en", "zh"]), "zh")
        self.assertEqual(len(term.prompts("choose_or_add")), 1)

    def test_duplicate_additions_are_kept(self) -> None:
        term = ScriptedTerminal(adds=[(-1, "en"), (2, "en")])
        self.assertEqual(prompt_select_with_add(term, PromptSpec("Source Language", "required"), ["en", "zh"]), "en")
        self.assertEqual(term.prompts("choose_or_add")[1][2], ["en", "zh", "en"])

    def test_action_menu(self) -> None:
        term = ScriptedTerminal(choices=[1])
        self.assertEqual(choose_action(term, DEFAULT_ACTIONS), 1)
        self.assertEqual(term.calls[0], ("choose", "Action", [a.name for a in DEFAULT_ACTIONS]))
        with self.assertRaises(InputFailure):
            choose_action(ScriptedTerminal(choices=[AbortError()]), DEFAULT_ACTIONS)

    def test_document_selection_abort_is_recoverable(self) -> None:
        catalog = CatalogLoader(FakeService([make_doc("A", "report.pdf")])).load()
        doc, err = select_document(ScriptedTerminal(picks=[AbortError()]), catalog, "Documents")
        self.assertIsNone(doc)
        self.assertIsInstance(err, AbortError)
        doc, err = select_document(ScriptedTerminal(picks=[0]), catalog, "Documents")
        self.assertEqual(doc, catalog[0])
        self.assertIsNone(err)


class StateReducerTests(unittest.TestCase):
    def test_empty_catalog_goes_idle(self) -> None:
        state = new_workflow_state()
        apply_workflow_event(state, {"type": "start"})
        apply_workflow_event(state, {"type": "catalog_loaded", "catalog": ()})
        self.assertEqual(state.phase, "idle")
        self.assertTrue(state.empty_catalog)

    def test_events_out_of_phase_are_ignored(self) -> None:
        state = new_workflow_state()
        apply_workflow_event(state, {"type": "start"})
        apply_workflow_event(state, {"type": "action_done", "outcome": "exit"})
        apply_workflow_event(state, {"type": "document_selected", "document": None})
        self.assertEqual(state.phase, "loading")

    def test_reload_drops_snapshot(self) -> None:
        catalog = CatalogLoader(FakeService([make_doc("A", "report.pdf")])).load()
        state = new_workflow_state()
        for event in (
            {"type": "start"},
            {"type": "catalog_loaded", "catalog": catalog},
            {"type": "document_selected", "document": catalog[0]},
            {"type": "action_chosen", "action": DELETE},
        ):
            apply_workflow_event(state, event)
        self.assertEqual(state.phase, "executing")
        apply_workflow_event(state, {"type": "action_done", "outcome": "reload"})
        self.assertEqual(state.phase, "loading")
        self.assertEqual(state.catalog, ())
        self.assertIsNone(state.selected)


class ControllerTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.logstore = LogStore(max_entries=256, log_dir=Path(self._tmp.name))

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def _controller(self, service: FakeService, term: ScriptedTerminal, actions=DEFAULT_ACTIONS) -> WorkflowController:
        loader = CatalogLoader(service, self.logstore)  # type: ignore[arg-type]
        return WorkflowController(term, loader, service, self.logstore, actions)  # type: ignore[arg-type]

    def test_search_select_delete_then_reload(self) -> None:
        service = FakeService(
            [
                make_doc("B", "notes.txt", "2022-03-01T09:00:00Z"),
                make_doc("A", "report.pdf", "2022-03-01T10:00:00Z"),
            ]
        )
        term = ScriptedTerminal(
            picks=[["/", "r", "e", "p", "\n", "\n"], AbortError()],
            choices=[DELETE],
        )
        code = self._controller(service, term).run()

        self.assertEqual(code, 0)
        picks = term.prompts("pick_document")
        self.assertEqual(picks[0][2], ["A", "B"])
        self.assertIn(["A"], term.visible_after_keys)
        self.assertEqual(service.deleted, ["A"])
        self.assertEqual(service.list_calls, 2)
        self.assertEqual(picks[1][2], ["B"])

    def test_empty_catalog_skips_selector(self) -> None:
        service = FakeService([])
        term = ScriptedTerminal()
        controller = self._controller(service, term)
        self.assertEqual(controller.run(), 0)
        self.assertEqual(term.prompts("pick_document"), [])
        self.assertIn(("warn", "No documents found."), term.messages)
        self.assertEqual(controller.state.phase, "idle")

    def test_view_details_reselects_without_reload(self) -> None:
        service = FakeService([make_doc("A", "report.pdf")])
        term = ScriptedTerminal(picks=[0, AbortError()], choices=[VIEW])
        self.assertEqual(self._controller(service, term).run(), 0)
        self.assertEqual(term.shown, ["A"])
        self.assertEqual(service.list_calls, 1)
        self.assertEqual(len(term.prompts("pick_document")), 2)

    def test_cancelled_detail_view_goes_back_to_selection(self) -> None:
        class CancellingViewTerminal(ScriptedTerminal):
            def show_document(self, doc: Any) -> None:
                super().show_document(doc)
                raise AbortError()

        service = FakeService([make_doc("A", "report.pdf")])
        term = CancellingViewTerminal(picks=[0, AbortError()], choices=[VIEW])
        controller = self._controller(service, term)
        self.assertEqual(controller.run(), 0)
        self.assertEqual(term.shown, ["A"])
        self.assertEqual(len(term.prompts("pick_document")), 2)
        self.assertEqual(controller.summary.exit_code, 0)

    def test_cancel_ends_workflow(self) -> None:
        service = FakeService([make_doc("A", "report.pdf")])
        term = ScriptedTerminal(picks=[0], choices=[CANCEL])
        controller = self._controller(service, term)
        self.assertEqual(controller.run(), 0)
        self.assertEqual(service.deleted, [])
        self.assertEqual(controller.state.history, ["idle", "loading", "selecting", "choosing_action", "executing"])

    def test_translate_action_submits_and_reloads(self) -> None:
        service = FakeService([make_doc("A", "report.pdf", "2022-03-01T10:00:00Z")])
        with tempfile.TemporaryDirectory() as td:
            path = Path(td) / "slides.pptx"
            path.write_bytes(b"pptx")
            term = ScriptedTerminal(
                picks=[0, AbortError()],
                choices=[TRANSLATE],
                lines=[str(path)],
                adds=[(0, "en"), (0, "zh-TW")],
            )
            controller = self._controller(service, term)
            self.assertEqual(controller.run(), 0)
        self.assertEqual(service.list_calls, 2)
        self.assertEqual(controller.summary.submitted, ["C"])
        self.assertEqual(term.prompts("pick_document")[1][2], ["C", "A"])
        request = service.submitted[0]
        self.assertEqual((request.source, request.target), ("en", "zh-TW"))

    def test_custom_action_values_are_dispatched(self) -> None:
        service = FakeService([make_doc("A", "report.pdf")])
        actions = (ActionItem("Remove", DELETE), ActionItem("Quit", CANCEL))
        term = ScriptedTerminal(picks=[0, AbortError()], choices=[0])
        self.assertEqual(self._controller(service, term, actions).run(), 0)
        self.assertEqual(service.deleted, ["A"])
        self.assertEqual(term.prompts("choose")[0][2], ["Remove", "Quit"])

    def test_transport_error_is_fatal(self) -> None:
        service = FakeService([])
        service.list_error = TransportError("GET /v3/documents returned status 500", status=500)
        term = ScriptedTerminal()
        controller = self._controller(service, term)
        self.assertEqual(controller.run(), 1)
        self.assertEqual(term.messages[-1][0], "error")
        self.assertIn("status 500", controller.summary.error)

    def test_unparseable_catalog_is_fatal(self) -> None:
        service = FakeService([{"document_id": "A", "filename": "x.txt"}])
        self.assertEqual(self._controller(service, ScriptedTerminal()).run(), 1)

    def test_action_menu_abort_is_fatal(self) -> None:
        service = FakeService([make_doc("A", "report.pdf")])
        term = ScriptedTerminal(picks=[0], choices=[AbortError()])
        self.assertEqual(self._controller(service, term).run(), 1)
        self.assertEqual(service.deleted, [])


class SubmitTests(unittest.TestCase):
    def test_accept_type(self) -> None:
        self.assertEqual(accept_type("Report.PDF"), "application/pdf")
        with self.assertRaises(UnsupportedFileError):
            accept_type("archive.zip")

    def test_missing_file_is_reprompted(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            path = Path(td) / "notes.txt"
            path.write_text("hi", encoding="utf-8")
            term = ScriptedTerminal(lines=[str(Path(td) / "absent.txt"), str(path)], adds=[(0, "en"), (0, "zh-TW")])
            request = build_translate_request(term)
        self.assertEqual(request.accept, "text/plain")
        self.assertIn("no such file", term.prompts("read_line")[1][3])

    def test_configure_writes_prompted_values(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            path = Path(td) / "config.json"
            term = ScriptedTerminal(lines=["2018-05-01", "key-1", "https://api.example/"])
            updated, written = configure(term, ServiceConfig(), path)
            self.assertEqual(written, path)
            self.assertEqual(load_config(path, env={}), updated)
        self.assertEqual(updated.url, "https://api.example")
        self.assertEqual(term.prompts("read_line")[0][2], "2018-05-01")


class PlainTerminalTests(unittest.TestCase):
    def _terminal(self, answers: list[str]) -> tuple[PlainTerminal, io.StringIO]:
        feed = iter(answers)
        out = io.StringIO()

        def fake_input(_prompt: str) -> str:
            try:
                return next(feed)
            except StopIteration:
                raise EOFError from None

        return PlainTerminal(input_fn=fake_input, out=out), out

    def test_pick_document_with_search(self) -> None:
        catalog = CatalogLoader(
            FakeService([make_doc("A", "report.pdf", "2022-03-02T00:00:00Z"), make_doc("B", "notes.txt")])
        ).load()
        term, out = self._terminal(["/rep", ""])
        self.assertEqual(term.pick_document("Documents", catalog), 0)
        self.assertIn("search: rep", out.getvalue())

    def test_choose_or_add_other(self) -> None:
        term, _ = self._terminal(["0", "fr"])
        self.assertEqual(term.choose_or_add("Source Language", ["en"]), (-1, "fr"))

    def test_read_line_uses_default_and_eof_fails(self) -> None:
        term, _ = self._terminal([""])
        self.assertEqual(term.read_line("Version", "2018-05-01"), "2018-05-01")
        with self.assertRaises(InputFailure):
            term.read_line("Version")


class CommandTests(unittest.TestCase):
    def test_documents_without_credentials_fails(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            logstore = LogStore(max_entries=32, log_dir=Path(td))
            term = ScriptedTerminal()
            code = run_command("documents", term, ServiceConfig(), None, logstore)
            summary = json.loads(logstore.summary_path.read_text(encoding="utf-8"))
        self.assertEqual(code, 1)
        self.assertIn("ConfigError", term.messages[-1][1])
        self.assertEqual(summary["exit_code"], 1)


if __name__ == "__main__":
    unittest.main()
