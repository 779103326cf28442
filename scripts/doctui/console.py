from __future__ import annotations

import curses
from collections import deque
from typing import Sequence

from .errors import AbortError, InputFailure
from .keys import CTRL_U, is_backspace, is_enter, is_escape, is_interrupt, is_printable
from .models import ACTION_PAGE_SIZE, DOCUMENT_PAGE_SIZE, OTHER_LABEL, DocumentRecord
from .selector import ListSelector, document_searcher
from .theme import Theme
from .views import ACTIVE_MARKER, DETAILS_TITLE, clamp, document_columns, document_details

MIN_HEIGHT = 16
MIN_WIDTH = 64
MAX_INPUT = 2048


def put(win: curses.window, y: int, x: int, text: str, attr: int = 0) -> None:
    """Write ``text`` clipped to the window; never raises on the last cell."""
    h, w = win.getmaxyx()
    if not 0 <= y < h or x >= w or not text:
        return
    if x < 0:
        text, x = text[-x:], 0
    room = w - x - 1
    if room > 0:
        try:
            win.addnstr(y, x, text, room, attr)
        except curses.error:
            pass


def frame_box(win: curses.window, y: int, x: int, h: int, w: int, title: str = "", attr: int = 0) -> None:
    if h < 2 or w < 2:
        return
    try:
        sub = win.derwin(h, w, y, x)
        sub.attrset(attr)
        sub.border()
        sub.attrset(0)
    except curses.error:
        return
    if title:
        put(win, y, x + 2, f" {title} ", attr)


class CursesTerminal:
    """Full-screen curses front end; one dialog is active at a time."""

    def __init__(self, stdscr: curses.window, theme: Theme | None = None) -> None:
        self.stdscr = stdscr
        self.theme = theme or Theme(has_color=False)
        self.messages: deque[tuple[str, str]] = deque(maxlen=3)
        self.status_line = "Ready."

    def setup(self) -> None:
        curses.curs_set(0)
        curses.raw()
        self.stdscr.keypad(True)
        self.stdscr.timeout(-1)
        self.theme = Theme.init()

    def _get_key(self) -> object:
        try:
            key = self.stdscr.get_wch()
        except KeyboardInterrupt as exc:
            raise AbortError() from exc
        except curses.error as exc:
            raise InputFailure(f"terminal read failed: {exc}") from exc
        if is_interrupt(key):
            raise AbortError()
        return key

    def _frame(self, title: str) -> tuple[int, int]:
        self.stdscr.erase()
        h, w = self.stdscr.getmaxyx()
        if h < MIN_HEIGHT or w < MIN_WIDTH:
            put(self.stdscr, 0, 0, f"Terminal too small. Resize to at least {MIN_WIDTH}x{MIN_HEIGHT}.", self.theme.attrs.error)
            return h, w
        put(self.stdscr, 0, 2, "DOCUMENT TRANSLATOR", self.theme.attrs.heading)
        put(self.stdscr, 1, 2, title, self.theme.attrs.muted)
        self._draw_footer(h, w)
        return h, w

    def _footer_top(self, h: int) -> int:
        return h - 3 - len(self.messages)

    def _draw_footer(self, h: int, w: int) -> None:
        frame_box(self.stdscr, self._footer_top(h), 0, 3 + len(self.messages), w, "STATUS", self.theme.attrs.panel)
        row = h - 2 - len(self.messages)
        for level, text in self.messages:
            attr = self.theme.attrs.error if level in {"error", "warn"} else self.theme.attrs.success
            put(self.stdscr, row, 2, text[: max(0, w - 4)], attr)
            row += 1
        put(self.stdscr, row, 2, self.status_line[: max(0, w - 4)], self.theme.attrs.muted)

    def read_line(self, label: str, default: str = "", error: str = "") -> str:
        buf = list(default)
        cur = len(buf)
        self.status_line = "Enter=Accept  Esc=Cancel  Ctrl+U=Clear"
        curses.curs_set(1)
        try:
            while True:
                h, w = self._frame(f"INPUT :: {label}")
                win_w = max(40, int(w * 0.75))
                y, x = 3, 2
                frame_box(self.stdscr, y, x, 5, win_w, label, self.theme.attrs.panel)
                max_len = win_w - 4
                text = "".join(buf)
                offset = max(0, cur - max_len + 1) if len(text) > max_len else 0
                attr = self.theme.attrs.invalid if error or not text else self.theme.attrs.valid
                put(self.stdscr, y + 1, x + 2, f"{label} ", self.theme.attrs.heading)
                put(self.stdscr, y + 2, x + 2, text[offset : offset + max_len], attr)
                if error:
                    put(self.stdscr, y + 3, x + 2, f"✗ {error}"[:max_len], self.theme.attrs.error)
                self.stdscr.move(y + 2, x + 2 + clamp(cur - offset, 0, max_len - 1))
                self.stdscr.refresh()
                key = self._get_key()
                if is_enter(key):
                    return "".join(buf).strip()
                if is_escape(key):
                    raise AbortError()
                error = ""
                if key == CTRL_U:
                    buf = []
                    cur = 0
                elif key == curses.KEY_LEFT:
                    cur = max(0, cur - 1)
                elif key == curses.KEY_RIGHT:
                    cur = min(len(buf), cur + 1)
                elif key == curses.KEY_HOME:
                    cur = 0
                elif key == curses.KEY_END:
                    cur = len(buf)
                elif key == curses.KEY_DC and cur < len(buf):
                    del buf[cur]
                elif is_backspace(key):
                    if cur > 0:
                        cur -= 1
                        del buf[cur]
                elif is_printable(key) and len(buf) < MAX_INPUT:
                    buf.insert(cur, str(key))
                    cur += 1
        finally:
            curses.curs_set(0)

    def choose(self, label: str, items: Sequence[str], size: int = ACTION_PAGE_SIZE) -> int:
        if not items:
            raise InputFailure(f"{label}: nothing to choose from")
        selector: ListSelector[str] = ListSelector(items, size=size)
        self.status_line = "Arrows move | Enter select | Esc cancel"
        while True:
            self._frame(f"SELECT :: {label}")
            self._draw_list(label, selector, lambda item, active: (item, self.theme.attrs.focus if active else self.theme.attrs.filename))
            self.stdscr.refresh()
            outcome = selector.handle_key(self._get_key())
            if outcome == "abort":
                raise AbortError()
            if outcome == "select":
                idx = selector.highlighted
                assert idx is not None
                return idx

    def choose_or_add(self, label: str, items: Sequence[str], add_label: str = OTHER_LABEL) -> tuple[int, str]:
        entries = [*items, add_label]
        idx = self.choose(label, entries, size=max(ACTION_PAGE_SIZE, min(len(entries), 8)))
        if idx < len(items):
            return idx, items[idx]
        value = self.read_line(add_label)
        while not value:
            value = self.read_line(add_label, "", f"{add_label} must not be empty")
        return -1, value

    def pick_document(self, label: str, docs: Sequence[DocumentRecord], size: int = DOCUMENT_PAGE_SIZE) -> int:
        if not docs:
            raise InputFailure(f"{label}: no documents to select")
        selector: ListSelector[DocumentRecord] = ListSelector(docs, size=size, searcher=document_searcher(docs))
        while True:
            self.status_line = (
                "Type to filter | Enter apply | Esc clear"
                if selector.searching
                else "Arrows move | / search | Enter select | Esc back"
            )
            h, w = self._frame(f"SELECT :: {label}")
            bottom = self._draw_document_list(label, selector)
            doc = selector.highlighted_item()
            if doc is not None:
                self._draw_details(bottom + 1, doc, w, self._footer_top(h))
            self.stdscr.refresh()
            outcome = selector.handle_key(self._get_key())
            if outcome == "abort":
                raise AbortError()
            if outcome == "select":
                idx = selector.highlighted
                assert idx is not None
                self.status_line = f"{ACTIVE_MARKER} {docs[idx].filename}"
                return idx

    def _draw_list(self, label: str, selector: ListSelector, render) -> int:
        put(self.stdscr, 3, 2, f"{label}?", self.theme.attrs.heading)
        row = 4
        highlighted = selector.highlighted
        for idx in selector.page():
            text, attr = render(selector.items[idx], idx == highlighted)
            marker = ACTIVE_MARKER if idx == highlighted else " "
            put(self.stdscr, row, 2, marker, attr)
            put(self.stdscr, row, 5, text, attr)
            row += 1
        return row

    def _draw_document_list(self, label: str, selector: ListSelector[DocumentRecord]) -> int:
        put(self.stdscr, 3, 2, f"{label}?", self.theme.attrs.heading)
        if selector.searching or selector.query:
            put(self.stdscr, 3, 4 + len(label), f"search: {selector.query}", self.theme.attrs.muted)
        row = 4
        rows = selector.page()
        if not rows:
            put(self.stdscr, row, 5, "No documents match current filter.", self.theme.attrs.error)
            return row + 1
        highlighted = selector.highlighted
        for idx in rows:
            doc = selector.items[idx]
            active = idx == highlighted
            filename, langs, status = document_columns(doc)
            put(self.stdscr, row, 2, ACTIVE_MARKER if active else " ", self.theme.attrs.heading)
            put(self.stdscr, row, 5, filename, self.theme.attrs.focus if active else self.theme.attrs.filename)
            put(self.stdscr, row, 6 + len(filename), langs, self.theme.attrs.languages if active else self.theme.attrs.panel)
            put(self.stdscr, row, 7 + len(filename) + len(langs), status, self.theme.attrs.status)
            row += 1
        return row

    def _draw_details(self, y: int, doc: DocumentRecord, w: int, limit: int) -> None:
        """Draw the detail panel from row ``y``, stopping above row ``limit``."""
        if y >= limit:
            return
        put(self.stdscr, y, 2, DETAILS_TITLE, self.theme.attrs.panel)
        for offset, (name, value) in enumerate(document_details(doc), start=1):
            if y + offset >= limit:
                break
            put(self.stdscr, y + offset, 2, name, self.theme.attrs.muted)
            put(self.stdscr, y + offset, 20, value[: max(0, w - 24)], self.theme.attrs.panel)

    def show_document(self, doc: DocumentRecord) -> None:
        self.status_line = "Press any key to return"
        h, w = self._frame(f"DOCUMENT :: {doc.filename}")
        self._draw_details(3, doc, w, self._footer_top(h))
        self.stdscr.refresh()
        # Any key returns, Ctrl+C and Esc included.
        try:
            self._get_key()
        except AbortError:
            pass

    def message(self, level: str, text: str) -> None:
        self.messages.append((level, text))
