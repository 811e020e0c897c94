from __future__ import annotations

import logging
from typing import Optional, TextIO

from ifdef.logging.helpers import get_logger, setup_base_logger


class DefaultLoggerFactory:
    """`LoggerFactoryProtocol` implementation used by the CLI.

    Every factory applies its output mode (text or JSON) to the 'ifdef'
    handler when it hands out its first logger; loggers obtained earlier
    from `get_logger` follow the new mode since they share that handler.
    """

    def __init__(self, *, json_logs: bool = False, level: int = logging.INFO,
                 stream: Optional[TextIO] = None) -> None:
        self.json_logs = bool(json_logs)
        self._level = int(level)
        self._stream = stream
        self._applied = False

    def get_logger(self, name: str) -> logging.Logger:
        if not self._applied:
            setup_base_logger(json_logs=self.json_logs, level=self._level, stream=self._stream)
            self._applied = True
        return get_logger(name)
