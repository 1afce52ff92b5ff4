from __future__ import annotations

import curses
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union


class IntentKind(str, Enum):
    CHAR = "char"
    BACKSPACE = "backspace"
    DELETE = "delete"
    CYCLE = "cycle"
    COMMIT = "commit"
    ESCAPE = "escape"
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"


@dataclass(frozen=True)
class Intent:
    kind: IntentKind
    char: str = ""

    @classmethod
    def key(cls, ch: str) -> "Intent":
        return cls(IntentKind.CHAR, ch)


BACKSPACE = Intent(IntentKind.BACKSPACE)
DELETE = Intent(IntentKind.DELETE)
CYCLE = Intent(IntentKind.CYCLE)
COMMIT = Intent(IntentKind.COMMIT)
ESCAPE = Intent(IntentKind.ESCAPE)
UP = Intent(IntentKind.UP)
DOWN = Intent(IntentKind.DOWN)
LEFT = Intent(IntentKind.LEFT)
RIGHT = Intent(IntentKind.RIGHT)

_SPECIAL_CHARS = {
    "\t": CYCLE,
    "\n": COMMIT,
    "\r": COMMIT,
    "\x1b": ESCAPE,
    "\x7f": BACKSPACE,
    "\b": BACKSPACE,
}

_SPECIAL_CODES = {
    curses.KEY_BACKSPACE: BACKSPACE,
    curses.KEY_DC: DELETE,
    curses.KEY_ENTER: COMMIT,
    curses.KEY_UP: UP,
    curses.KEY_DOWN: DOWN,
    curses.KEY_LEFT: LEFT,
    curses.KEY_RIGHT: RIGHT,
    curses.KEY_BTAB: CYCLE,
    9: CYCLE,
    10: COMMIT,
    13: COMMIT,
    27: ESCAPE,
    127: BACKSPACE,
    8: BACKSPACE,
}


def decode_key(key: Union[int, str]) -> Optional[Intent]:
    """
    Map a curses key (from getch or get_wch) to an intent.

    Returns None for keys with no meaning to the tracker (resize, function
    keys, mouse).
    """
    if isinstance(key, str):
        if key in _SPECIAL_CHARS:
            return _SPECIAL_CHARS[key]
        if len(key) == 1 and key.isprintable():
            return Intent.key(key)
        return None
    if key in _SPECIAL_CODES:
        return _SPECIAL_CODES[key]
    if 32 <= key <= 126:
        return Intent.key(chr(key))
    return None
