"""Error channels: where the importer sends user-facing errors.

Severity is always "error" today; message keys come from
ErrorKind.message_key.
"""

from __future__ import annotations

from typing import Protocol

from loguru import logger


class ErrorReporter(Protocol):
    def show(self, severity: str, message_key: str) -> None: ...


class RecordingReporter:
    """Keeps every reported (severity, message_key) pair."""

    def __init__(self) -> None:
        self.messages: list[tuple[str, str]] = []

    def show(self, severity: str, message_key: str) -> None:
        self.messages.append((severity, message_key))


class LogReporter:
    """Writes reported errors to the log."""

    def show(self, severity: str, message_key: str) -> None:
        logger.error(f"[{severity}] {message_key}")
