"""Tests for EventLog level filtering, coloring and the file sink."""

import contextlib
import io

import pytest

from zoograph.logging_utils import (
    ALL_LEVELS,
    Color,
    EventLog,
    Level,
    colored,
    levels_from,
)


def capture(fn) -> str:
    buf = io.StringIO()
    with contextlib.redirect_stdout(buf):
        fn()
    return buf.getvalue()


def test_colored_respects_no_color(monkeypatch):
    monkeypatch.delenv("ZOO_NO_COLOR", raising=False)
    assert colored("hi", Color.RED) == f"{Color.RED.value}hi{Color.RESET.value}"
    assert colored("hi", Color.RED, bold=True).startswith(Color.BOLD.value)

    monkeypatch.setenv("ZOO_NO_COLOR", "1")
    assert colored("hi", Color.RED) == "hi"


def test_levels_print_with_labels(monkeypatch):
    monkeypatch.setenv("ZOO_NO_COLOR", "1")
    log = EventLog()

    out = capture(lambda: (log.debug("d"), log.info("i"), log.warn("w"), log.error("e")))
    assert out.splitlines() == ["[DEBUG] d", "[INFO] i", "[WARN] w", "[ERROR] e"]


def test_disable_and_enable_individual_levels(monkeypatch):
    monkeypatch.setenv("ZOO_NO_COLOR", "1")
    log = EventLog()

    capture(lambda: log.disable(Level.DEBUG | Level.INFO))
    assert not log.is_enabled(Level.DEBUG)
    assert log.is_enabled(Level.WARN)

    out = capture(lambda: (log.info("hidden"), log.warn("shown")))
    assert "hidden" not in out
    assert "[WARN] shown" in out

    out = capture(lambda: log.enable(Level.INFO))
    assert "Enabled log levels: INFO" in out
    assert log.is_enabled(Level.INFO)
    assert not log.is_enabled(Level.DEBUG)


def test_silent_log_prints_nothing():
    log = EventLog.silent()
    assert capture(lambda: log.error("boom")) == ""


def test_levels_from_minimum():
    assert levels_from(Level.DEBUG) == ALL_LEVELS
    assert levels_from(Level.WARN) == Level.WARN | Level.ERROR


def test_level_parse():
    assert Level.parse("warning") is Level.WARN
    assert Level.parse(" info ") is Level.INFO
    with pytest.raises(ValueError):
        Level.parse("loud")


def test_file_sink_writes_plain_timestamped_lines(tmp_path, monkeypatch):
    monkeypatch.delenv("ZOO_NO_COLOR", raising=False)
    log_file = tmp_path / "logs" / "zoo.log"
    log = EventLog(log_file=log_file, console=False)

    log.info("opened")
    log.warn("careful")
    log.close()
    log.close()

    lines = log_file.read_text().splitlines()
    assert len(lines) == 2
    assert lines[0].endswith("[INFO] opened")
    assert "\033[" not in lines[0]
    assert lines[1].endswith("[WARN] careful")


def test_from_config_uses_log_level(monkeypatch):
    from zoograph.config import Config

    monkeypatch.setattr(Config, "LOG_LEVEL", "ERROR")
    monkeypatch.setattr(Config, "LOG_FILE", None)
    log = EventLog.from_config()

    assert log.is_enabled(Level.ERROR)
    assert not log.is_enabled(Level.WARN)
