from __future__ import annotations

import curses


KEY_ENTER = {10, 13, curses.KEY_ENTER}
KEY_BACK = {curses.KEY_BACKSPACE, 127, 8}
KEY_ESCAPE = {27, curses.KEY_EXIT}
KEY_UP = {curses.KEY_UP, "k"}
KEY_DOWN = {curses.KEY_DOWN, "j"}
CTRL_C = "\x03"
CTRL_U = "\x15"


def is_enter(key: object) -> bool:
    return isinstance(key, int) and key in KEY_ENTER or key in ("\n", "\r")


def is_backspace(key: object) -> bool:
    return isinstance(key, int) and key in KEY_BACK or key in ("\x7f", "\b")


def is_escape(key: object) -> bool:
    return isinstance(key, int) and key in KEY_ESCAPE or key == "\x1b"


def is_interrupt(key: object) -> bool:
    return key == CTRL_C or key == 3


def is_printable(key: object) -> bool:
    return isinstance(key, str) and len(key) == 1 and key.isprintable()
