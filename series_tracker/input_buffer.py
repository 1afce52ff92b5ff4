from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Tuple

from .data_model import SeriesStore
from .errors import InputValidationError

logger = logging.getLogger(__name__)

DEFAULT_MAX_LEN = 5
ALLOWED_CHARS = frozenset("0123456789.-")

MSG_ENTER_X = "Enter X coordinate"
MSG_ENTER_Y = "Enter Y coordinate"
MSG_INVALID = "Error: enter valid numbers for both X and Y"


class InputField(str, Enum):
    X = "x"
    Y = "y"


def _parse_coord(text: str) -> float:
    text = text.strip()
    if not text:
        raise InputValidationError(MSG_INVALID)
    try:
        v = float(text)
    except ValueError:
        raise InputValidationError(MSG_INVALID) from None
    if not math.isfinite(v):
        raise InputValidationError(MSG_INVALID)
    return v


@dataclass
class InputBuffer:
    """
    Two text fields typed one character at a time.

    Text is kept raw while typing so partial entries like "-" or "3." are
    allowed; numbers are only parsed on commit.
    """

    max_len: int = DEFAULT_MAX_LEN
    active: bool = False
    field: InputField = InputField.X
    x_text: str = ""
    y_text: str = ""

    def clear(self) -> None:
        self.x_text = ""
        self.y_text = ""

    def start(self) -> str:
        self.active = True
        self.field = InputField.X
        self.clear()
        return MSG_ENTER_X

    def cancel(self) -> None:
        self.active = False
        self.field = InputField.X
        self.clear()

    @property
    def text(self) -> str:
        return self.x_text if self.field == InputField.X else self.y_text

    @text.setter
    def text(self, value: str) -> None:
        if self.field == InputField.X:
            self.x_text = value
        else:
            self.y_text = value

    def append(self, ch: str) -> bool:
        if len(ch) != 1 or ch not in ALLOWED_CHARS:
            return False
        if len(self.text) >= self.max_len:
            return False
        self.text = self.text + ch
        return True

    def backspace(self) -> None:
        if self.text:
            self.text = self.text[:-1]

    def cycle_field(self) -> str:
        if self.field == InputField.X:
            self.field = InputField.Y
            return MSG_ENTER_Y
        self.field = InputField.X
        return MSG_ENTER_X

    def parse(self) -> Tuple[float, float]:
        return _parse_coord(self.x_text), _parse_coord(self.y_text)

    def commit(self, store: SeriesStore, series_index: int) -> str:
        """
        Parse both fields and insert the point.

        On failure nothing changes: the buffers and Insert state are kept and
        InputValidationError carries the message to show.
        """
        x, y = self.parse()
        store.insert_point(series_index, x, y)
        self.cancel()
        logger.debug("Committed point (%s, %s) to series %d", x, y, series_index)
        return f"Added point ({x:.2f}, {y:.2f})"
