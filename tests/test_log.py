import io

from recraft.log import LogManager, LogType
from recraft.screen import Key


def test_info_is_yellow():
    out = io.StringIO()
    LogManager(out).log("hi", LogType.INFO)
    assert out.getvalue() == "\x1b[33mhi\x1b[0m\n"


def test_warning_is_red():
    out = io.StringIO()
    LogManager(out).log("bad", LogType.WARNING)
    assert out.getvalue() == "\x1b[31mbad\x1b[0m\n"


def test_normal_is_default():
    out = io.StringIO()
    LogManager(out).log("plain")
    assert out.getvalue() == "\x1b[0mplain\n"


def test_l_and_r_toggle_logging():
    out = io.StringIO()
    manager = LogManager(out)
    manager.update(Key.L | Key.R)
    assert manager.enabled is False
    assert out.getvalue() == ""
    manager.update(Key.L | Key.R)
    assert manager.enabled is True
    assert "Logging enabled" in out.getvalue()


def test_disabled_logger_writes_nothing():
    out = io.StringIO()
    manager = LogManager(out)
    manager.enabled = False
    manager.log("ignored", LogType.WARNING)
    assert out.getvalue() == ""


def test_single_shoulder_does_not_toggle():
    manager = LogManager(io.StringIO())
    manager.update(Key.L)
    manager.update(Key.R | Key.A)
    assert manager.enabled is True