"""Tests for error types and message sanitization."""

import sqlite3

from mnemo.errors import (
    ConfigError,
    InvalidArgumentsError,
    MnemoError,
    StorageError,
    sanitize_error_message,
)


def test_hierarchy():
    assert issubclass(InvalidArgumentsError, MnemoError)
    assert issubclass(StorageError, MnemoError)
    assert issubclass(ConfigError, MnemoError)


def test_storage_error_message_is_generic():
    error = StorageError("remember")

    assert str(error) == "Storage operation failed: remember"
    assert error.operation == "remember"


def test_storage_error_ignores_cause():
    """Test that the wrapped engine error never leaks."""
    error = StorageError("list memory")
    error.__cause__ = sqlite3.OperationalError("database is locked: /var/data/memory.db")

    assert sanitize_error_message(error) == "Storage operation failed: list memory"


def test_sanitize_strips_paths():
    message = sanitize_error_message(ValueError("cannot open /home/alice/.mnemo/memory.db now"))

    assert message == "cannot open <path> now"


def test_sanitize_strips_windows_paths():
    message = sanitize_error_message(ValueError(r"cannot open C:\Users\bob\memory.db"))

    assert "bob" not in message
    assert "<path>" in message


def test_sanitize_strips_sql():
    message = sanitize_error_message(
        RuntimeError("near 'x': syntax error in SELECT * FROM working_memory WHERE key = 'x'")
    )

    assert message == "near 'x': syntax error in <query>"


def test_sanitize_keeps_ordinary_words():
    """Test that lower-case SQL-like words in prose survive."""
    message = sanitize_error_message(InvalidArgumentsError("select a category to update"))

    assert message == "select a category to update"


def test_sanitize_empty_message_uses_type_name():
    assert sanitize_error_message(KeyError()) == "KeyError"
    assert sanitize_error_message(RuntimeError("/only/a/path")) == "<path>"
