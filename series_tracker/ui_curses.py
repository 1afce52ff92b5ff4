from __future__ import annotations

import curses
import logging
from typing import List, Optional

from .app_state import MENU_ITEMS, ConfirmChoice, Frame, TrackerApp, ViewMode
from .chart import axis_labels, axis_range, grid_to_lines, rasterize
from .input_buffer import InputField
from .intents import decode_key

logger = logging.getLogger(__name__)

# Color pairs
COLOR_TITLE = 1
COLOR_PLOT = 2
COLOR_ACTIVE = 3
COLOR_ERROR = 4
COLOR_SELECTED = 5

INPUT_HEIGHT = 3
STATUS_HEIGHT = 3
Y_LABEL_WIDTH = 8

HELP_LINES = [
    "Graph:  a / i  add a point     [ / ]  previous / next series",
    "Insert: digits . -  type       Tab  switch X/Y field",
    "        Enter  add point       Backspace  erase     Esc  cancel",
    "Table:  Up/Down or j/k  select row   d / Del  delete selected point",
    "        Confirm: Tab/Left/Right choose, Enter confirm, Esc cancel",
    "Menu:   Up/Down  move          Enter  open          n  new series",
    "Any:    g graph   t table   m menu   h help   q quit (saves data)",
    "        Esc returns to the menu",
]

MODE_HINTS = {
    ViewMode.GRAPH: "'a' add point  '[' ']' series  't' table  'm' menu  'q' quit",
    ViewMode.TABLE: "Up/Down select  'd' delete  '[' ']' series  'g' graph  'q' quit",
    ViewMode.MENU: "Up/Down move  Enter open  'n' new series  'q' quit",
    ViewMode.HELP: "Esc or 'm' back to menu  'q' quit",
}


def init_colors() -> None:
    if not curses.has_colors():
        return
    curses.start_color()
    try:
        curses.use_default_colors()
    except curses.error:
        pass
    curses.init_pair(COLOR_TITLE, curses.COLOR_CYAN, -1)
    curses.init_pair(COLOR_PLOT, curses.COLOR_CYAN, -1)
    curses.init_pair(COLOR_ACTIVE, curses.COLOR_YELLOW, -1)
    curses.init_pair(COLOR_ERROR, curses.COLOR_RED, -1)
    curses.init_pair(COLOR_SELECTED, curses.COLOR_BLACK, curses.COLOR_CYAN)


class CursesRenderer:
    def __init__(self, stdscr) -> None:
        self.scr = stdscr

    def _put(self, row: int, col: int, text: str, attr: int = 0) -> None:
        h, w = self.scr.getmaxyx()
        if row < 0 or row >= h or col < 0 or col >= w:
            return
        try:
            self.scr.addnstr(row, col, text, w - col, attr)
        except curses.error:
            # writing the bottom-right cell moves the cursor off screen
            pass

    def _box(self, top: int, left: int, height: int, width: int, title: str = "", attr: int = 0) -> None:
        if height < 2 or width < 2:
            return
        self._put(top, left, "┌" + "─" * (width - 2) + "┐", attr)
        for r in range(top + 1, top + height - 1):
            self._put(r, left, "│", attr)
            self._put(r, left + width - 1, "│", attr)
        self._put(top + height - 1, left, "└" + "─" * (width - 2) + "┘", attr)
        if title:
            self._put(top, left + 2, f" {title} "[: max(0, width - 4)], attr)

    def draw(self, frame: Frame) -> None:
        self.scr.erase()
        h, w = self.scr.getmaxyx()
        body_h = max(0, h - STATUS_HEIGHT)

        if frame.mode == ViewMode.GRAPH:
            chart_h = max(0, body_h - INPUT_HEIGHT)
            self._draw_graph(frame, 0, chart_h, w)
            self._draw_input(frame, chart_h, w)
        elif frame.mode == ViewMode.TABLE:
            self._draw_table(frame, 0, body_h, w)
        elif frame.mode == ViewMode.MENU:
            self._draw_menu(frame, 0, body_h, w)
        else:
            self._draw_help(0, body_h, w)

        self._draw_status(frame, body_h, w)
        self._place_cursor(frame, body_h, w)
        self.scr.refresh()

    # ---------- Graph ----------

    def _draw_graph(self, frame: Frame, top: int, height: int, width: int) -> None:
        title = f"{frame.series_name} ({len(frame.points)} pts)"
        self._box(top, 0, height, width, title, curses.color_pair(COLOR_TITLE))
        inner_h = height - 3  # border plus x label row
        inner_w = width - 2 - Y_LABEL_WIDTH
        if inner_h <= 0 or inner_w <= 0:
            return

        min_x, max_x, min_y, max_y = frame.extent
        x_range = axis_range(min_x, max_x)
        y_range = axis_range(min_y, max_y)
        grid = rasterize(frame.points, inner_w, inner_h, x_range, y_range)
        left = 1 + Y_LABEL_WIDTH
        for i, line in enumerate(grid_to_lines(grid)):
            self._put(top + 1 + i, left, line, curses.color_pair(COLOR_PLOT))

        x_labels = axis_labels(*x_range, len(frame.points))
        y_labels = axis_labels(*y_range, len(frame.points))
        self._draw_y_labels(y_labels, top + 1, inner_h)
        self._draw_x_labels(x_labels, top + 1 + inner_h, left, inner_w)

    def _draw_y_labels(self, labels: List[str], top: int, height: int) -> None:
        n = len(labels) - 1
        for i, label in enumerate(labels):
            row = top + (height - 1) - round(i / n * (height - 1))
            self._put(row, 1, label[: Y_LABEL_WIDTH - 1].rjust(Y_LABEL_WIDTH - 1))

    def _draw_x_labels(self, labels: List[str], row: int, left: int, width: int) -> None:
        n = len(labels) - 1
        last_end = -1
        for i, label in enumerate(labels):
            col = left + round(i / n * (width - 1))
            col = min(col, left + width - len(label))
            if col <= last_end:
                continue
            self._put(row, col, label)
            last_end = col + len(label)

    def _draw_input(self, frame: Frame, top: int, width: int) -> None:
        half = width // 2
        for i, (fld, text) in enumerate(((InputField.X, frame.x_text), (InputField.Y, frame.y_text))):
            active = frame.inserting and frame.input_field == fld
            title = f"{fld.value.upper()} Coordinate" + (" [Active]" if active else "")
            attr = curses.color_pair(COLOR_ACTIVE) if active else 0
            left = i * half
            box_w = half if i == 0 else width - half
            self._box(top, left, INPUT_HEIGHT, box_w, title, attr)
            self._put(top + 1, left + 1, text, attr)

    # ---------- Table ----------

    def _draw_table(self, frame: Frame, top: int, height: int, width: int) -> None:
        title = f"{frame.series_name} [{frame.series_index + 1}/{len(frame.series_names)}]"
        self._box(top, 0, height, width, title, curses.color_pair(COLOR_TITLE))
        self._put(top + 1, 2, f"{'#':>4}  {'X':>12}  {'Y':>12}", curses.A_BOLD)

        visible = max(0, height - 3)
        if not frame.points:
            self._put(top + 2, 2, "(no points)")
        else:
            sel = frame.selected_row
            start = 0
            if sel is not None and sel >= visible:
                start = sel - visible + 1
            for r, (x, y) in enumerate(frame.points[start:start + visible], start=start):
                attr = curses.color_pair(COLOR_SELECTED) if r == sel else 0
                self._put(top + 2 + r - start, 2, f"{r:>4}  {x:>12.4g}  {y:>12.4g}", attr)

        if frame.confirm_choice is not None:
            self._draw_confirm(frame, top, height, width)

    def _draw_confirm(self, frame: Frame, top: int, height: int, width: int) -> None:
        box_w, box_h = 32, 5
        left = max(0, (width - box_w) // 2)
        row = top + max(0, (height - box_h) // 2)
        for r in range(row, row + box_h):
            self._put(r, left, " " * box_w)
        self._box(row, left, box_h, box_w, "Delete point?", curses.color_pair(COLOR_ERROR))
        col = left + 6
        for choice in ConfirmChoice:
            label = f"[ {choice.value.capitalize()} ]"
            attr = curses.color_pair(COLOR_SELECTED) if choice == frame.confirm_choice else 0
            self._put(row + 2, col, label, attr)
            col += len(label) + 4

    # ---------- Menu / Help ----------

    def _draw_menu(self, frame: Frame, top: int, height: int, width: int) -> None:
        self._box(top, 0, height, width, "Menu", curses.color_pair(COLOR_TITLE))
        for i, item in enumerate(MENU_ITEMS):
            attr = curses.color_pair(COLOR_SELECTED) if i == frame.menu_index else 0
            self._put(top + 2 + i, 4, f" {item.value} ", attr)
        row = top + 3 + len(MENU_ITEMS)
        self._put(row, 4, "Series:", curses.A_BOLD)
        for i, name in enumerate(frame.series_names):
            marker = ">" if i == frame.series_index else " "
            self._put(row + 1 + i, 4, f"{marker} {name}")

    def _draw_help(self, top: int, height: int, width: int) -> None:
        self._box(top, 0, height, width, "Help", curses.color_pair(COLOR_TITLE))
        for i, line in enumerate(HELP_LINES):
            self._put(top + 2 + i, 2, line)

    # ---------- Status ----------

    def _draw_status(self, frame: Frame, top: int, width: int) -> None:
        self._box(top, 0, STATUS_HEIGHT, width, MODE_HINTS[frame.mode])
        attr = curses.color_pair(COLOR_ERROR) if frame.status.lower().startswith(("error", "load failed", "save failed")) else 0
        self._put(top + 1, 1, frame.status, attr)

    def _place_cursor(self, frame: Frame, body_h: int, width: int) -> None:
        if not (frame.inserting and frame.mode == ViewMode.GRAPH):
            _set_cursor(0)
            return
        _set_cursor(1)
        top = max(0, body_h - INPUT_HEIGHT)
        if frame.input_field == InputField.X:
            col = 1 + len(frame.x_text)
        else:
            col = width // 2 + 1 + len(frame.y_text)
        try:
            self.scr.move(top + 1, col)
        except curses.error:
            pass


def _set_cursor(visibility: int) -> None:
    try:
        curses.curs_set(visibility)
    except curses.error:
        pass


def _read_key(stdscr):
    try:
        return stdscr.get_wch()
    except curses.error:
        return None


def run_session(stdscr, app: TrackerApp) -> Optional[str]:
    """
    Blocking loop: draw, wait for a key, apply it. Saves once on exit.

    Returns the save failure message, if any, after showing it and waiting
    for one more key.
    """
    init_colors()
    stdscr.keypad(True)
    if hasattr(curses, "set_escdelay"):
        curses.set_escdelay(25)
    renderer = CursesRenderer(stdscr)

    while not app.exit:
        renderer.draw(app.frame())
        try:
            key = _read_key(stdscr)
        except KeyboardInterrupt:
            logger.info("Interrupted, saving before exit")
            app.request_exit()
            break
        if key is None:
            continue
        app.handle(decode_key(key))

    error = app.finish()
    if error is not None:
        renderer.draw(app.frame())
        try:
            _read_key(stdscr)
        except KeyboardInterrupt:
            pass
    return error
