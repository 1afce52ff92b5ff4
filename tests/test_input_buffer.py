"""Tests for InputBuffer in input_buffer.py.

Covers character filtering and the length cap, backspace, field cycling,
and commit success/failure against a store.
"""

import pytest

from series_tracker.data_model import Point, SeriesStore
from series_tracker.errors import InputValidationError
from series_tracker.input_buffer import InputBuffer, InputField


def _typed(buf, text):
    for ch in text:
        buf.append(ch)


class TestEditing:
    """Tests for typing into the active field."""

    def test_start_clears_and_selects_x(self):
        buf = InputBuffer(x_text="12", y_text="3", field=InputField.Y)
        assert buf.start() == "Enter X coordinate"
        assert buf.active
        assert buf.field == InputField.X
        assert (buf.x_text, buf.y_text) == ("", "")

    def test_only_numeric_characters_accepted(self):
        buf = InputBuffer()
        buf.start()
        _typed(buf, "1a.b-2 ")
        assert buf.x_text == "1.-2"

    def test_length_cap(self):
        buf = InputBuffer(max_len=5)
        buf.start()
        _typed(buf, "1234567")
        assert buf.x_text == "12345"

    def test_custom_cap(self):
        buf = InputBuffer(max_len=2)
        buf.start()
        _typed(buf, "999")
        assert buf.x_text == "99"

    def test_append_reports_acceptance(self):
        buf = InputBuffer()
        buf.start()
        assert buf.append("7") is True
        assert buf.append("x") is False

    def test_backspace(self):
        buf = InputBuffer()
        buf.start()
        _typed(buf, "42")
        buf.backspace()
        assert buf.x_text == "4"
        buf.backspace()
        buf.backspace()
        assert buf.x_text == ""

    def test_cycle_keeps_content(self):
        buf = InputBuffer()
        buf.start()
        _typed(buf, "1")
        assert buf.cycle_field() == "Enter Y coordinate"
        _typed(buf, "2")
        assert buf.cycle_field() == "Enter X coordinate"
        assert (buf.x_text, buf.y_text) == ("1", "2")

    def test_backspace_only_touches_active_field(self):
        buf = InputBuffer()
        buf.start()
        _typed(buf, "5")
        buf.cycle_field()
        buf.backspace()
        assert buf.x_text == "5"

    def test_cancel(self):
        buf = InputBuffer()
        buf.start()
        _typed(buf, "5")
        buf.cancel()
        assert not buf.active
        assert buf.x_text == ""


class TestCommit:
    """Tests for commit against a store."""

    def test_commit_success(self):
        store = SeriesStore()
        buf = InputBuffer()
        buf.start()
        _typed(buf, "3.5")
        buf.cycle_field()
        _typed(buf, "-2")
        assert buf.commit(store, 0) == "Added point (3.50, -2.00)"
        assert store.active.data == [Point(3.5, -2.0)]
        assert not buf.active
        assert (buf.x_text, buf.y_text) == ("", "")

    @pytest.mark.parametrize("x,y", [("", "1"), ("1", ""), ("-", "1"), ("1", "."), ("1-2", "3"), ("..", "1")])
    def test_commit_failure_keeps_state(self, x, y):
        store = SeriesStore()
        buf = InputBuffer(active=True, x_text=x, y_text=y, field=InputField.Y)
        with pytest.raises(InputValidationError):
            buf.commit(store, 0)
        assert store.active.data == []
        assert buf.active
        assert (buf.x_text, buf.y_text) == (x, y)
        assert buf.field == InputField.Y

    def test_partial_input_allowed_while_typing(self):
        buf = InputBuffer()
        buf.start()
        _typed(buf, "3.")
        assert buf.x_text == "3."
        buf.cycle_field()
        _typed(buf, "-")
        assert buf.y_text == "-"
        buf.cycle_field()
        _typed(buf, "5")
        buf.cycle_field()
        _typed(buf, "1")
        assert buf.parse() == (3.5, -1.0)
