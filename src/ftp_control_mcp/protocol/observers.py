"""Stock communication observers."""

from __future__ import annotations

import logging


class LoggingObserver:
    """Logs every line sent (``>``) and received (``<``) on a channel."""

    def __init__(self, logger: logging.Logger | None = None, level: int = logging.DEBUG) -> None:
        self._logger = logger or logging.getLogger("ftp_control_mcp.traffic")
        self._level = level

    def on_sent(self, line: str) -> None:
        self._logger.log(self._level, "> %s", line)

    def on_received(self, line: str) -> None:
        self._logger.log(self._level, "< %s", line)
