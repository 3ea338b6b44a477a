"""Tests for start-up checks and logging setup."""

import logging
import sys

import pytest

from mnemo.runtime import configure_logging, ensure_supported_python, python_version_ok


def test_python_version_ok():
    assert python_version_ok((3, 11, 0)) is True
    assert python_version_ok((3, 13, 1)) is True
    assert python_version_ok((4, 0)) is True
    assert python_version_ok((3, 10, 14)) is False
    assert python_version_ok((2, 7, 18)) is False


def test_running_interpreter_is_supported():
    assert python_version_ok() is True
    ensure_supported_python()


def test_unsupported_python_exits(capsys):
    """Test that an old interpreter stops the process with exit code 1."""
    with pytest.raises(SystemExit) as exc_info:
        ensure_supported_python((3, 9, 7))

    assert exc_info.value.code == 1
    err = capsys.readouterr().err
    assert "requires Python 3.11" in err
    assert "3.9.7" in err


def test_configure_logging_uses_stderr():
    """Test that diagnostics never go to stdout."""
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    try:
        configure_logging("debug")

        assert root.level == logging.DEBUG
        stream_handlers = [h for h in root.handlers if isinstance(h, logging.StreamHandler)]
        assert stream_handlers
        assert all(h.stream is sys.stderr for h in stream_handlers)
    finally:
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)


def test_configure_logging_unknown_level_defaults_to_info():
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    try:
        configure_logging("chatty")

        assert root.level == logging.INFO
    finally:
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)
