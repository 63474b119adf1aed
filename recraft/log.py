"""Coloured console logging that can be switched off with L+R."""

from __future__ import annotations

import sys
from enum import Enum
from typing import TextIO

from recraft.screen import Key


class LogType(Enum):
    NORMAL = "normal"
    INFO = "info"
    WARNING = "warning"


_FORMATS = {
    LogType.NORMAL: "\x1b[0m{}\n",
    LogType.INFO: "\x1b[33m{}\x1b[0m\n",
    LogType.WARNING: "\x1b[31m{}\x1b[0m\n",
}


class LogManager:
    """Writes coloured messages to a text stream while enabled."""

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream
        self.enabled = True

    def log(self, message: str, log_type: LogType = LogType.NORMAL) -> None:
        if not self.enabled:
            return
        stream = self._stream if self._stream is not None else sys.stdout
        stream.write(_FORMATS[log_type].format(message))

    def update(self, keys: Key) -> None:
        """Toggle logging when L and R are pressed together."""
        if Key.L in keys and Key.R in keys:
            self.enabled = not self.enabled
            self.log(
                "Logging enabled" if self.enabled else "Logging disabled", LogType.INFO
            )