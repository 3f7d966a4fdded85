"""Log handlers used by the roster.

- ``RichConsoleHandler``: coloured output for the CLI and development runs
- ``SafeRotatingFileHandler``: rotating file that creates its directory
- ``BufferingHandler``: in-memory capture, used by tests
- ``StreamHandlerWithFlush``: flushes after every record (CI logs)
"""

from __future__ import annotations

import logging
import sys
from collections import deque
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import IO

from rich.console import Console
from rich.text import Text


class RichConsoleHandler(logging.Handler):
    """Writes records to a Rich console with a styled level column."""

    LEVEL_STYLES = {
        "DEBUG": "dim",
        "INFO": "cyan",
        "WARNING": "yellow",
        "ERROR": "red bold",
        "CRITICAL": "red bold reverse",
    }

    def __init__(self, console: Console | None = None, show_path: bool = False) -> None:
        super().__init__()
        self.console = console or Console(stderr=True)
        self.show_path = show_path

    def emit(self, record: logging.LogRecord) -> None:
        try:
            message = self.format(record)
            text = Text(f"[{record.levelname:8}] ", style=self.LEVEL_STYLES.get(record.levelname, ""))
            text.append(message)
            if self.show_path:
                text.append(f" ({record.filename}:{record.lineno})", style="dim")
            self.console.print(text)
        except Exception:
            self.handleError(record)


class SafeRotatingFileHandler(RotatingFileHandler):
    """``RotatingFileHandler`` that creates the log directory and writes UTF-8."""

    def __init__(
        self,
        filename: str | Path,
        max_bytes: int = 5 * 1024 * 1024,
        backup_count: int = 3,
        encoding: str = "utf-8",
    ) -> None:
        log_path = Path(filename)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        super().__init__(
            filename=str(log_path),
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding=encoding,
        )


class BufferingHandler(logging.Handler):
    """Keeps the last ``capacity`` records in memory."""

    def __init__(self, capacity: int = 1000) -> None:
        super().__init__()
        self.capacity = capacity
        self.buffer: deque[logging.LogRecord] = deque(maxlen=capacity)

    def emit(self, record: logging.LogRecord) -> None:
        self.buffer.append(record)

    def get_records(self) -> list[logging.LogRecord]:
        return list(self.buffer)

    def messages(self) -> list[str]:
        return [record.getMessage() for record in self.buffer]

    def clear(self) -> None:
        self.buffer.clear()


class StreamHandlerWithFlush(logging.StreamHandler):
    """StreamHandler that flushes after each record."""

    def __init__(self, stream: IO[str] | None = None) -> None:
        super().__init__(stream or sys.stderr)

    def emit(self, record: logging.LogRecord) -> None:
        try:
            super().emit(record)
            self.flush()
        except Exception:
            self.handleError(record)
