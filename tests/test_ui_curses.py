"""Tests for the curses renderer and run loop in ui_curses.py.

A fake screen records what is drawn and replays a fixed key sequence, so
the loop runs without a terminal. curses calls that need an initialised
terminal are patched out.
"""

import curses

import pytest

from series_tracker import ui_curses
from series_tracker.app_state import ConfirmChoice, TrackerApp, ViewMode
from series_tracker.data_model import DataSeries, Point, SeriesStore
from series_tracker.store_csv import load_store


class FakeScreen:
    """Minimal stand-in for a curses window."""

    def __init__(self, keys=(), height=24, width=80):
        self.keys = list(keys)
        self.height = height
        self.width = width
        self.rows = {}
        self.reads = 0

    def getmaxyx(self):
        return self.height, self.width

    def erase(self):
        self.rows = {}

    def addnstr(self, row, col, text, n, attr=0):
        line = self.rows.get(row, " " * self.width)
        text = text[:n]
        self.rows[row] = (line[:col] + text + line[col + len(text):])[: self.width]

    def refresh(self):
        pass

    def move(self, row, col):
        pass

    def keypad(self, flag):
        pass

    def get_wch(self):
        self.reads += 1
        if not self.keys:
            raise AssertionError("run loop asked for more keys than scripted")
        return self.keys.pop(0)

    def text(self):
        return "\n".join(self.rows[r] for r in sorted(self.rows))


@pytest.fixture(autouse=True)
def no_terminal(monkeypatch):
    monkeypatch.setattr(ui_curses, "init_colors", lambda: None)
    monkeypatch.setattr(ui_curses.curses, "color_pair", lambda n: 0)
    monkeypatch.setattr(ui_curses.curses, "curs_set", lambda v: None)
    monkeypatch.setattr(ui_curses.curses, "set_escdelay", lambda d: None, raising=False)


def _app(points=(), **kwargs):
    return TrackerApp.create(SeriesStore([DataSeries("Graph", list(points))]), **kwargs)


class TestRenderer:
    """Tests for what each mode draws."""

    def test_graph_mode(self):
        scr = FakeScreen()
        app = _app([Point(1, 2), Point(3, 4)])
        app.handle(ui_curses.decode_key("a"))
        ui_curses.CursesRenderer(scr).draw(app.frame())
        out = scr.text()
        assert "Graph (2 pts)" in out
        assert "X Coordinate [Active]" in out
        assert "Enter X coordinate" in out
        assert "•" in out

    def test_negative_points_label_plotted_range(self):
        scr = FakeScreen()
        ui_curses.CursesRenderer(scr).draw(_app([Point(-10, -10), Point(5, 5)]).frame())
        out = scr.text()
        assert "-10.0" in out
        assert "5.0" in out

    def test_table_mode_empty(self):
        scr = FakeScreen()
        app = _app()
        app.mode = ViewMode.TABLE
        ui_curses.CursesRenderer(scr).draw(app.frame())
        assert "(no points)" in scr.text()

    def test_table_confirm_dialog(self):
        scr = FakeScreen()
        app = _app([Point(1, 2)])
        app.mode = ViewMode.TABLE
        app.selection.next(1)
        app.request_delete()
        assert app.frame().confirm_choice == ConfirmChoice.DELETE
        ui_curses.CursesRenderer(scr).draw(app.frame())
        out = scr.text()
        assert "Delete point?" in out
        assert "[ Delete ]" in out
        assert "[ Cancel ]" in out

    def test_menu_and_help(self):
        scr = FakeScreen()
        app = _app()
        app.mode = ViewMode.MENU
        ui_curses.CursesRenderer(scr).draw(app.frame())
        assert "New series" in scr.text()
        app.mode = ViewMode.HELP
        ui_curses.CursesRenderer(scr).draw(app.frame())
        assert "Esc returns to the menu" in scr.text()

    def test_tiny_screen(self):
        scr = FakeScreen(height=4, width=6)
        ui_curses.CursesRenderer(scr).draw(_app([Point(1, 1)]).frame())


class TestRunSession:
    """Tests for the blocking loop and shutdown."""

    def test_add_point_and_quit_saves(self, tmp_path):
        path = tmp_path / "data.csv"
        scr = FakeScreen(keys=["a", "1", "\t", "2", "\n", "q"])
        app = _app(data_path=path)
        assert ui_curses.run_session(scr, app) is None
        store, message = load_store(path)
        assert message is None
        assert store.active.data == [Point(1, 2)]

    def test_unknown_keys_are_ignored(self, tmp_path):
        scr = FakeScreen(keys=[curses.KEY_RESIZE, "q"])
        app = _app(data_path=tmp_path / "data.csv")
        assert ui_curses.run_session(scr, app) is None
        assert scr.reads == 2

    def test_save_failure_waits_for_key(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("x", encoding="utf-8")
        scr = FakeScreen(keys=["q", " "])
        app = _app([Point(1, 1)], data_path=blocker / "data.csv")
        error = ui_curses.run_session(scr, app)
        assert error is not None
        assert scr.reads == 2
        assert "Save failed" in scr.text()
