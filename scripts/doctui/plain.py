from __future__ import annotations

import sys
from typing import Callable, Sequence, TextIO

from .errors import AbortError, InputFailure
from .models import ACTION_PAGE_SIZE, DOCUMENT_PAGE_SIZE, OTHER_LABEL, DocumentRecord
from .selector import ListSelector, document_searcher
from .views import details_lines, document_row, selected_row

InputFn = Callable[[str], str]


class PlainTerminal:
    """Line-based terminal for dumb consoles and pipes (``--plain``)."""

    def __init__(self, input_fn: InputFn = input, out: TextIO | None = None) -> None:
        self.input_fn = input_fn
        self.out = out or sys.stdout

    def _print(self, text: str = "") -> None:
        print(text, file=self.out)

    def _ask(self, prompt: str) -> str:
        try:
            return self.input_fn(prompt)
        except KeyboardInterrupt as exc:
            raise AbortError() from exc
        except EOFError as exc:
            raise InputFailure("EOF") from exc

    def read_line(self, label: str, default: str = "", error: str = "") -> str:
        if error:
            self._print(f"✗ {error}")
        suffix = f" [{default}]" if default else ""
        raw = self._ask(f"{label}{suffix}: ").strip()
        return raw or default

    def choose(self, label: str, items: Sequence[str], size: int = ACTION_PAGE_SIZE) -> int:
        if not items:
            raise InputFailure(f"{label}: nothing to choose from")
        while True:
            self._print(f"\n{label}?")
            for idx, item in enumerate(items, start=1):
                self._print(f"{idx}) {item}")
            raw = self._ask("Select number (q to cancel): ").strip().lower()
            if raw == "q":
                raise AbortError()
            if raw.isdigit() and 1 <= int(raw) <= len(items):
                return int(raw) - 1
            self._print("Invalid selection.")

    def choose_or_add(self, label: str, items: Sequence[str], add_label: str = OTHER_LABEL) -> tuple[int, str]:
        while True:
            self._print(f"\n{label}?")
            self._print(f"0) {add_label}")
            for idx, item in enumerate(items, start=1):
                self._print(f"{idx}) {item}")
            raw = self._ask("Select number (q to cancel): ").strip().lower()
            if raw == "q":
                raise AbortError()
            if raw == "0":
                value = self._ask(f"{add_label}: ").strip()
                if value:
                    return -1, value
                self._print("Empty value ignored.")
                continue
            if raw.isdigit() and 1 <= int(raw) <= len(items):
                return int(raw) - 1, items[int(raw) - 1]
            self._print("Invalid selection.")

    def pick_document(self, label: str, docs: Sequence[DocumentRecord], size: int = DOCUMENT_PAGE_SIZE) -> int:
        selector: ListSelector[DocumentRecord] = ListSelector(docs, size=size, searcher=document_searcher(docs))
        while True:
            self._print(f"\n{label}?" + (f"  search: {selector.query}" if selector.query else ""))
            rows = selector.page()
            if not rows:
                self._print("  No documents match current filter.")
            highlighted = selector.highlighted
            for pos, idx in enumerate(rows, start=1):
                self._print(f"{pos}) {document_row(docs[idx], active=idx == highlighted)}")
            if highlighted is not None:
                for line in details_lines(docs[highlighted]):
                    self._print(f"   {line}")
            raw = self._ask("Number selects | j/k move | /text search | n/p page | Enter select | q back: ").strip()
            if raw.lower() == "q":
                raise AbortError()
            if raw.startswith("/"):
                selector.set_query(raw[1:])
                continue
            if raw.lower() in ("j", "k"):
                selector.move(1 if raw.lower() == "j" else -1)
                continue
            if raw.lower() == "n":
                selector.page_down()
                continue
            if raw.lower() == "p":
                selector.page_up()
                continue
            if raw == "" and highlighted is not None:
                self._print(selected_row(docs[highlighted]))
                return highlighted
            if raw.isdigit():
                chosen = selector.select_visible(int(raw) - 1)
                if chosen is not None:
                    self._print(selected_row(docs[chosen]))
                    return chosen
            self._print("Invalid selection.")

    def show_document(self, doc: DocumentRecord) -> None:
        self._print()
        for line in details_lines(doc):
            self._print(line)

    def message(self, level: str, text: str) -> None:
        prefix = "" if level == "info" else f"[{level.upper()}] "
        self._print(f"{prefix}{text}")
