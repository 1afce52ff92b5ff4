from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional, Tuple

from .data_model import Point, SeriesStore
from .errors import IndexOutOfRange, InputValidationError, PersistenceSaveError
from .input_buffer import DEFAULT_MAX_LEN, InputBuffer, InputField
from .intents import Intent, IntentKind
from .navigation import RowSelection
from .store_csv import save_store

logger = logging.getLogger(__name__)


class ViewMode(str, Enum):
    GRAPH = "graph"
    TABLE = "table"
    MENU = "menu"
    HELP = "help"


class ConfirmChoice(str, Enum):
    DELETE = "delete"
    CANCEL = "cancel"


class MenuItem(str, Enum):
    GRAPH = "Graph"
    TABLE = "Table"
    HELP = "Help"
    NEW_SERIES = "New series"
    QUIT = "Quit"


MENU_ITEMS: Tuple[MenuItem, ...] = tuple(MenuItem)

# Letters understood outside text entry and delete confirmation
MODE_KEYS = {
    "g": ViewMode.GRAPH,
    "t": ViewMode.TABLE,
    "m": ViewMode.MENU,
    "h": ViewMode.HELP,
    "?": ViewMode.HELP,
}
QUIT_KEY = "q"
INSERT_KEYS = ("a", "i")
DELETE_KEY = "d"
NEW_SERIES_KEY = "n"
PREV_SERIES_KEY = "["
NEXT_SERIES_KEY = "]"

START_MESSAGE = "Press 'a' to add a point, 'm' for menu, 'q' to quit"


@dataclass
class ConfirmState:
    row: int
    choice: ConfirmChoice = ConfirmChoice.DELETE

    def toggle(self) -> None:
        if self.choice == ConfirmChoice.DELETE:
            self.choice = ConfirmChoice.CANCEL
        else:
            self.choice = ConfirmChoice.DELETE


@dataclass(frozen=True)
class Frame:
    """Everything a renderer needs for one frame. Read-only."""

    mode: ViewMode
    inserting: bool
    input_field: InputField
    x_text: str
    y_text: str
    confirm_choice: Optional[ConfirmChoice]
    menu_index: int
    series_index: int
    series_name: str
    series_names: Tuple[str, ...]
    points: Tuple[Point, ...]
    extent: Tuple[float, float, float, float]
    selected_row: Optional[int]
    status: str
    exit: bool


@dataclass
class TrackerApp:
    """
    Top-level state machine.

    Owns the store and all transient UI state. `handle` processes one intent
    to completion; the caller renders `frame()` afterwards.
    """

    store: SeriesStore
    data_path: Optional[Path] = None
    mode: ViewMode = ViewMode.GRAPH
    input: InputBuffer = field(default_factory=InputBuffer)
    selection: RowSelection = field(default_factory=RowSelection)
    confirm: Optional[ConfirmState] = None
    menu_index: int = 0
    status: str = START_MESSAGE
    exit: bool = False

    @classmethod
    def create(
        cls,
        store: SeriesStore,
        data_path: Optional[Path] = None,
        *,
        input_max_len: int = DEFAULT_MAX_LEN,
        status: Optional[str] = None,
    ) -> "TrackerApp":
        app = cls(store=store, data_path=data_path, input=InputBuffer(max_len=input_max_len))
        if status:
            app.status = status
        return app

    # ---------- Dispatch ----------

    def handle(self, intent: Optional[Intent]) -> None:
        if intent is None or self.exit:
            return
        if self.input.active:
            self._handle_insert(intent)
        elif self.confirm is not None:
            self._handle_confirm(intent)
        elif self.mode == ViewMode.GRAPH:
            self._handle_graph(intent)
        elif self.mode == ViewMode.TABLE:
            self._handle_table(intent)
        elif self.mode == ViewMode.MENU:
            self._handle_menu(intent)
        else:
            self._handle_help(intent)

    def set_mode(self, mode: ViewMode) -> None:
        if mode == self.mode:
            return
        logger.debug("Mode %s -> %s", self.mode.value, mode.value)
        if self.mode == ViewMode.TABLE:
            self.selection.reset()
        self.mode = mode

    def request_exit(self) -> None:
        self.exit = True

    def _handle_common(self, intent: Intent) -> bool:
        """Keys shared by Graph, Table and Help. Returns True when consumed."""
        if intent.kind == IntentKind.ESCAPE:
            self.set_mode(ViewMode.MENU)
            return True
        if intent.kind != IntentKind.CHAR:
            return False
        ch = intent.char
        if ch == QUIT_KEY:
            self.request_exit()
            return True
        if ch in MODE_KEYS:
            self.set_mode(MODE_KEYS[ch])
            return True
        return False

    def _switch_series(self, step: int) -> None:
        self.store.select_next(step)
        self.selection.reset()
        self.status = f"Series: {self.store.active.name}"

    def _handle_series_keys(self, intent: Intent) -> bool:
        if intent.kind != IntentKind.CHAR:
            return False
        if intent.char == PREV_SERIES_KEY:
            self._switch_series(-1)
            return True
        if intent.char == NEXT_SERIES_KEY:
            self._switch_series(1)
            return True
        return False

    # ---------- Graph / Insert ----------

    def _handle_graph(self, intent: Intent) -> None:
        if intent.kind == IntentKind.CHAR and intent.char in INSERT_KEYS:
            self.status = self.input.start()
            return
        if self._handle_series_keys(intent):
            return
        self._handle_common(intent)

    def _handle_insert(self, intent: Intent) -> None:
        kind = intent.kind
        if kind == IntentKind.CHAR:
            self.input.append(intent.char)
        elif kind == IntentKind.BACKSPACE:
            self.input.backspace()
        elif kind == IntentKind.CYCLE:
            self.status = self.input.cycle_field()
        elif kind == IntentKind.COMMIT:
            try:
                self.status = self.input.commit(self.store, self.store.selected_index)
            except InputValidationError as e:
                self.status = str(e)
        elif kind == IntentKind.ESCAPE:
            self.input.cancel()
            self.status = ""

    # ---------- Table / ConfirmDelete ----------

    def _row_count(self) -> int:
        return len(self.store.active.data)

    def _handle_table(self, intent: Intent) -> None:
        kind = intent.kind
        n = self._row_count()
        if kind == IntentKind.DOWN or (kind == IntentKind.CHAR and intent.char == "j"):
            self.selection.next(n)
        elif kind == IntentKind.UP or (kind == IntentKind.CHAR and intent.char == "k"):
            self.selection.previous(n)
        elif kind == IntentKind.DELETE or (kind == IntentKind.CHAR and intent.char == DELETE_KEY):
            self.request_delete()
        elif not self._handle_series_keys(intent):
            self._handle_common(intent)

    def request_delete(self) -> None:
        if not self.selection.is_actionable(self._row_count()):
            return
        self.confirm = ConfirmState(row=self.selection.row)
        self.status = "Delete this point? (Tab/arrows to choose, Enter to confirm)"

    def _handle_confirm(self, intent: Intent) -> None:
        kind = intent.kind
        if kind in (IntentKind.LEFT, IntentKind.RIGHT, IntentKind.CYCLE):
            self.confirm.toggle()
        elif kind == IntentKind.COMMIT:
            self._confirm_delete()
        elif kind == IntentKind.ESCAPE:
            self.confirm = None
            self.status = "Delete cancelled"

    def _confirm_delete(self) -> None:
        confirm = self.confirm
        self.confirm = None
        if confirm.choice != ConfirmChoice.DELETE:
            self.status = "Delete cancelled"
            return
        try:
            p = self.store.delete_point(self.store.selected_index, confirm.row)
        except IndexOutOfRange:
            self.status = f"Error: no point at row {confirm.row}"
            self.selection.after_delete(self._row_count())
            return
        self.selection.after_delete(self._row_count())
        logger.debug("Deleted row %d from '%s'", confirm.row, self.store.active.name)
        self.status = f"Deleted point ({p.x:.2f}, {p.y:.2f})"

    # ---------- Menu / Help ----------

    def _handle_menu(self, intent: Intent) -> None:
        kind = intent.kind
        if kind == IntentKind.DOWN:
            self.menu_index = (self.menu_index + 1) % len(MENU_ITEMS)
        elif kind == IntentKind.UP:
            self.menu_index = (self.menu_index - 1) % len(MENU_ITEMS)
        elif kind == IntentKind.COMMIT:
            self.activate_menu_item(MENU_ITEMS[self.menu_index])
        elif kind == IntentKind.CHAR and intent.char == NEW_SERIES_KEY:
            self.activate_menu_item(MenuItem.NEW_SERIES)
        elif kind == IntentKind.CHAR:
            # Escape is a no-op here; only letters are shared
            self._handle_common(intent)

    def activate_menu_item(self, item: MenuItem) -> None:
        if item == MenuItem.GRAPH:
            self.set_mode(ViewMode.GRAPH)
        elif item == MenuItem.TABLE:
            self.set_mode(ViewMode.TABLE)
        elif item == MenuItem.HELP:
            self.set_mode(ViewMode.HELP)
        elif item == MenuItem.NEW_SERIES:
            self.store.add_series()
            self.selection.reset()
            self.status = f"Created series '{self.store.active.name}'"
        elif item == MenuItem.QUIT:
            self.request_exit()

    def _handle_help(self, intent: Intent) -> None:
        self._handle_common(intent)

    # ---------- Render / shutdown ----------

    def frame(self) -> Frame:
        s = self.store.active
        return Frame(
            mode=self.mode,
            inserting=self.input.active,
            input_field=self.input.field,
            x_text=self.input.x_text,
            y_text=self.input.y_text,
            confirm_choice=self.confirm.choice if self.confirm is not None else None,
            menu_index=self.menu_index,
            series_index=self.store.selected_index,
            series_name=s.name,
            series_names=tuple(self.store.series_names()),
            points=tuple(s.data),
            extent=self.store.extent(self.store.selected_index),
            selected_row=self.selection.row,
            status=self.status,
            exit=self.exit,
        )

    def finish(self) -> Optional[str]:
        """Final save. Returns the failure message (also set as status) or None."""
        if self.data_path is None:
            return None
        try:
            save_store(self.store, self.data_path)
        except PersistenceSaveError as e:
            self.status = f"{e} (press any key to exit)"
            return str(e)
        return None
