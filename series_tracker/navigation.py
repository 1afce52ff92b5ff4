from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass
class RowSelection:
    """Optional selected row over a table of `n` rows, wrapping at both ends."""

    row: Optional[int] = None

    def reset(self) -> None:
        self.row = None

    def next(self, n: int) -> Optional[int]:
        if n <= 0:
            return self.row
        if self.row is None:
            self.row = 0
        else:
            self.row = (self.row + 1) % n
        return self.row

    def previous(self, n: int) -> Optional[int]:
        if n <= 0:
            return self.row
        if self.row is None:
            self.row = 0
        else:
            self.row = (self.row - 1) % n
        return self.row

    def is_actionable(self, n: int) -> bool:
        return self.row is not None and 0 <= self.row < n

    def after_delete(self, n: int) -> None:
        # n is the row count after the deletion
        if self.row is None:
            return
        if n <= 0:
            self.row = None
        elif self.row >= n:
            self.row = n - 1
