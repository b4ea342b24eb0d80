"""Tests for the print-based logger."""

import io

import pytest

from brainfusion.utils import get_logger, set_log_level, get_log_level


@pytest.fixture(autouse=True)
def restore_level():
    yield
    set_log_level("INFO")


class TestLogger:
    def test_header_and_message(self, capsys):
        log = get_logger("test")
        log.info("Loaded %d neurons", 12)
        out = capsys.readouterr().out
        assert "brainfusion:test INFO [" in out
        assert "Loaded 12 neurons" in out

    def test_debug_hidden_by_default(self, capsys):
        get_logger("test").debug("hidden")
        assert "hidden" not in capsys.readouterr().out

    def test_debug_enabled(self, capsys):
        set_log_level("debug")
        assert get_log_level() == "DEBUG"
        get_logger("test").debug("shown %s", "now")
        assert "shown now" in capsys.readouterr().out

    def test_warning_threshold(self, capsys):
        set_log_level("WARNING")
        log = get_logger("test")
        log.info("quiet")
        log.error("loud")
        out = capsys.readouterr().out
        assert "quiet" not in out
        assert "brainfusion:test ERROR" in out

    def test_unknown_level(self):
        with pytest.raises(KeyError, match="Available"):
            set_log_level("TRACE")

    def test_extra_stream(self, capsys):
        extra = io.StringIO()
        get_logger("test", out=extra).warning("to both")
        assert "to both" in extra.getvalue()
        assert "to both" in capsys.readouterr().out

    def test_unformattable_message_printed_verbatim(self, capsys):
        get_logger("test").info("%d items", "many")
        assert "%d items" in capsys.readouterr().out
