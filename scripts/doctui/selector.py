from __future__ import annotations

import curses
from dataclasses import dataclass, field
from typing import Callable, Generic, Literal, Sequence, TypeVar

from .keys import KEY_DOWN, KEY_UP, is_backspace, is_enter, is_escape, is_interrupt, is_printable
from .models import DocumentRecord

T = TypeVar("T")

Searcher = Callable[[str, int], bool]
KeyOutcome = Literal["select", "abort", ""]


def normalize(text: str) -> str:
    return text.lower().replace(" ", "")


def document_matches(query: str, doc: DocumentRecord) -> bool:
    return normalize(query) in normalize(doc.filename)


def document_searcher(docs: Sequence[DocumentRecord]) -> Searcher:
    def searcher(query: str, index: int) -> bool:
        return document_matches(query, docs[index])

    return searcher


@dataclass
class ListSelector(Generic[T]):
    """Cursor, paging and live-filter state for one list prompt.

    ``cursor`` indexes the visible (filtered) rows; ``top`` is the first
    visible row rendered in the current page.
    """

    items: Sequence[T]
    size: int = 4
    searcher: Searcher | None = None
    query: str = ""
    searching: bool = False
    cursor: int = 0
    top: int = 0
    _visible: list[int] = field(default_factory=list, init=False, repr=False)

    def __post_init__(self) -> None:
        self.size = max(1, self.size)
        self._refilter()

    def _refilter(self) -> None:
        if self.searcher is None or not self.query:
            self._visible = list(range(len(self.items)))
        else:
            self._visible = [idx for idx in range(len(self.items)) if self.searcher(self.query, idx)]
        self.cursor = 0
        self.top = 0

    @property
    def visible(self) -> list[int]:
        return list(self._visible)

    @property
    def highlighted(self) -> int | None:
        if not self._visible:
            return None
        self.cursor = max(0, min(self.cursor, len(self._visible) - 1))
        return self._visible[self.cursor]

    def highlighted_item(self) -> T | None:
        idx = self.highlighted
        return None if idx is None else self.items[idx]

    def page(self) -> list[int]:
        return self._visible[self.top : self.top + self.size]

    def move(self, delta: int) -> None:
        if not self._visible:
            return
        self.cursor = max(0, min(self.cursor + delta, len(self._visible) - 1))
        if self.cursor < self.top:
            self.top = self.cursor
        elif self.cursor >= self.top + self.size:
            self.top = self.cursor - self.size + 1

    def page_down(self) -> None:
        """Jump to the next page boundary; the last page stays put."""
        start = (self.top // self.size + 1) * self.size
        if start < len(self._visible):
            self.top = self.cursor = start

    def page_up(self) -> None:
        start = max(0, (self.top - 1) // self.size * self.size) if self.top > 0 else 0
        self.top = self.cursor = start

    def set_query(self, query: str) -> None:
        self.query = query
        self._refilter()

    def select_visible(self, position: int) -> int | None:
        """Map a 0-based position on the current page to an item index."""
        rows = self.page()
        if 0 <= position < len(rows):
            self.cursor = self.top + position
            return rows[position]
        return None

    def handle_key(self, key: object) -> KeyOutcome:
        if is_interrupt(key):
            return "abort"
        if self.searching:
            return self._handle_search_key(key)
        if is_escape(key):
            return "abort"
        if is_enter(key):
            return "select" if self.highlighted is not None else ""
        if key == "/" and self.searcher is not None:
            self.searching = True
            return ""
        if key in KEY_DOWN:
            self.move(1)
        elif key in KEY_UP:
            self.move(-1)
        elif key in (curses.KEY_NPAGE, curses.KEY_RIGHT, "l"):
            self.page_down()
        elif key in (curses.KEY_PPAGE, curses.KEY_LEFT, "h"):
            self.page_up()
        return ""

    def _handle_search_key(self, key: object) -> KeyOutcome:
        if is_escape(key):
            self.searching = False
            self.set_query("")
            return ""
        if is_enter(key):
            self.searching = False
            return ""
        if key in (curses.KEY_DOWN, curses.KEY_UP):
            self.move(1 if key == curses.KEY_DOWN else -1)
            return ""
        if is_backspace(key):
            self.set_query(self.query[:-1])
            return ""
        if is_printable(key):
            self.set_query(self.query + str(key))
        return ""
