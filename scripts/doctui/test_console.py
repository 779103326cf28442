from __future__ import annotations

import curses
import io
import json
import tempfile
import unittest
from pathlib import Path
from typing import Any
from unittest import mock

from scripts.doctui.catalog import CatalogLoader, parse_documents
from scripts.doctui.console import CursesTerminal
from scripts.doctui.controller import WorkflowController
from scripts.doctui.errors import AbortError, InputFailure
from scripts.doctui.logstore import LogStore
from scripts.doctui.models import DocumentCatalog
from scripts.doctui.plain import PlainTerminal
from scripts.doctui.test_core import make_doc
from scripts.doctui.test_workflow import FakeService
from scripts.doctui.views import document_details

DETAIL_LABELS = {label for label, _ in document_details(parse_documents(json.dumps({"documents": [make_doc("X", "x.txt")]}))[0])}


def sample_docs() -> list[dict]:
    return [
        make_doc("A", "report.pdf", "2022-03-03T00:00:00Z"),
        make_doc("B", "notes.txt", "2022-03-02T00:00:00Z"),
        make_doc("C", "report-final.docx", "2022-03-01T00:00:00Z"),
    ]


def sample_catalog() -> DocumentCatalog:
    return CatalogLoader(FakeService(sample_docs())).load()  # type: ignore[arg-type]


class FakeScreen:
    """Stand-in for a curses window that keeps one cell map per drawn frame."""

    def __init__(self, keys: list[Any], size: tuple[int, int] = (30, 100)) -> None:
        self.keys = list(keys)
        self.size = size
        self.frames: list[dict[tuple[int, int], str]] = []

    def getmaxyx(self) -> tuple[int, int]:
        return self.size

    def erase(self) -> None:
        self.frames.append({})

    def addnstr(self, y: int, x: int, text: str, n: int, attr: int = 0) -> None:
        self.frames[-1][(y, x)] = text[:n]

    def derwin(self, *args: int) -> mock.MagicMock:
        return mock.MagicMock()

    def refresh(self) -> None:
        pass

    def move(self, y: int, x: int) -> None:
        pass

    def get_wch(self) -> Any:
        if not self.keys:
            raise curses.error("no input")
        key = self.keys.pop(0)
        if isinstance(key, BaseException):
            raise key
        return key


def detail_id(frame: dict[tuple[int, int], str]) -> str | None:
    for (y, x), text in frame.items():
        if x == 2 and text == "DocumentID:":
            return frame.get((y, 20))
    return None


class CursesTerminalTests(unittest.TestCase):
    def test_details_follow_highlight_through_search_and_moves(self) -> None:
        screen = FakeScreen(["j", "/", "r", "e", "p", "\n", "j", "\n"])
        term = CursesTerminal(screen)  # type: ignore[arg-type]
        self.assertEqual(term.pick_document("Documents", sample_catalog()), 2)
        self.assertEqual([detail_id(f) for f in screen.frames], ["A", "B", "B", "A", "A", "A", "A", "C"])
        self.assertEqual(screen.frames[5][(3, 4 + len("Documents"))], "search: rep")

    def test_detail_panel_stops_above_status_footer(self) -> None:
        screen = FakeScreen(["\n"], size=(16, 80))
        term = CursesTerminal(screen)  # type: ignore[arg-type]
        term.pick_document("Documents", sample_catalog())
        frame = screen.frames[0]
        detail_rows = [y for (y, x), text in frame.items() if x == 2 and text in DETAIL_LABELS]
        self.assertEqual(detail_id(frame), "A")
        self.assertLess(max(detail_rows), 16 - 3)

    def test_interrupt_keys_abort_the_picker(self) -> None:
        for key in ("\x03", KeyboardInterrupt()):
            term = CursesTerminal(FakeScreen([key]))  # type: ignore[arg-type]
            with self.assertRaises(AbortError):
                term.pick_document("Documents", sample_catalog())

    def test_broken_input_is_input_failure(self) -> None:
        term = CursesTerminal(FakeScreen([]))  # type: ignore[arg-type]
        with self.assertRaises(InputFailure):
            term.pick_document("Documents", sample_catalog())
        with self.assertRaises(InputFailure):
            term.show_document(sample_catalog()[0])

    def test_detail_view_returns_on_any_key(self) -> None:
        for key in ("\x03", "\x1b", KeyboardInterrupt(), "x"):
            screen = FakeScreen([key])
            CursesTerminal(screen).show_document(sample_catalog()[0])  # type: ignore[arg-type]
            self.assertEqual(detail_id(screen.frames[-1]), "A")
            self.assertEqual(screen.keys, [])

    def test_cancel_in_detail_view_returns_to_selection(self) -> None:
        service = FakeService(sample_docs())
        # pick A, choose "View details", Ctrl+C in the view, Esc in the picker.
        screen = FakeScreen(["\n", "\n", "\x03", "\x1b"])
        term = CursesTerminal(screen)  # type: ignore[arg-type]
        with tempfile.TemporaryDirectory() as td:
            logstore = LogStore(max_entries=64, log_dir=Path(td))
            controller = WorkflowController(term, CatalogLoader(service, logstore), service, logstore)  # type: ignore[arg-type]
            self.assertEqual(controller.run(), 0)
        self.assertEqual(controller.summary.exit_code, 0)
        self.assertEqual(service.list_calls, 1)
        self.assertIn("DOCUMENT :: report.pdf", [f.get((1, 2)) for f in screen.frames])


class PlainPickerTests(unittest.TestCase):
    def _terminal(self, answers: list[Any]) -> tuple[PlainTerminal, io.StringIO]:
        feed = iter(answers)
        out = io.StringIO()

        def fake_input(_prompt: str) -> str:
            answer = next(feed, None)
            if answer is None:
                raise EOFError
            if isinstance(answer, BaseException):
                raise answer
            return answer

        return PlainTerminal(input_fn=fake_input, out=out), out

    @staticmethod
    def _shown_ids(output: str) -> list[str]:
        return [line.split()[-1] for line in output.splitlines() if line.strip().startswith("DocumentID:")]

    def test_details_follow_highlight_through_search_and_moves(self) -> None:
        term, out = self._terminal(["j", "/rep", "j", ""])
        self.assertEqual(term.pick_document("Documents", sample_catalog()), 2)
        self.assertEqual(self._shown_ids(out.getvalue()), ["A", "B", "A", "C"])

    def test_next_page_numbers_do_not_overlap(self) -> None:
        docs = [make_doc(str(i), f"file-{i}.txt", f"2022-03-{20 - i:02d}T00:00:00Z") for i in range(7)]
        catalog = CatalogLoader(FakeService(docs)).load()  # type: ignore[arg-type]
        term, _ = self._terminal(["n", "1"])
        self.assertEqual(term.pick_document("Documents", catalog), 4)

    def test_interrupt_aborts(self) -> None:
        term, _ = self._terminal([KeyboardInterrupt()])
        with self.assertRaises(AbortError):
            term.pick_document("Documents", sample_catalog())


if __name__ == "__main__":
    unittest.main()
