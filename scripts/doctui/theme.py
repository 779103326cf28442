from __future__ import annotations

import curses
from dataclasses import dataclass

# pair number -> (foreground, background); -1 keeps the terminal default.
PALETTE: dict[int, tuple[int, int]] = {
    1: (curses.COLOR_WHITE, -1),
    2: (curses.COLOR_CYAN, -1),
    3: (curses.COLOR_YELLOW, -1),
    4: (curses.COLOR_RED, -1),
    5: (curses.COLOR_GREEN, -1),
    6: (curses.COLOR_BLACK, curses.COLOR_CYAN),
}


@dataclass(frozen=True)
class ThemeAttrs:
    panel: int = 0
    heading: int = curses.A_BOLD
    muted: int = curses.A_DIM
    filename: int = 0
    languages: int = 0
    status: int = curses.A_BOLD
    focus: int = curses.A_REVERSE
    valid: int = 0
    invalid: int = curses.A_BOLD
    success: int = curses.A_BOLD
    error: int = curses.A_BOLD


class Theme:
    """Attribute set for the console; monochrome unless ``init`` finds colors."""

    def __init__(self, has_color: bool) -> None:
        self.has_color = has_color
        self.attrs = ThemeAttrs()

    @classmethod
    def init(cls) -> "Theme":
        theme = cls(has_color=curses.has_colors())
        if not theme.has_color:
            return theme

        curses.start_color()
        curses.use_default_colors()
        for pair, (fg, bg) in PALETTE.items():
            curses.init_pair(pair, fg, bg)

        red = curses.color_pair(4)
        green = curses.color_pair(5)
        theme.attrs = ThemeAttrs(
            panel=curses.color_pair(1),
            heading=curses.color_pair(1) | curses.A_BOLD,
            filename=curses.color_pair(2),
            languages=curses.color_pair(3),
            status=red,
            focus=curses.color_pair(6) | curses.A_BOLD,
            valid=green,
            invalid=red | curses.A_BOLD,
            success=green | curses.A_BOLD,
            error=red | curses.A_BOLD,
        )
        return theme
