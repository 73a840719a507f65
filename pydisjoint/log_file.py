"""Per-run log file, kept only when something goes wrong."""

import logging
import tempfile
import time
from pathlib import Path
from typing import Optional

from . import LOG_DATE_FORMAT, LOG_FORMAT

LOGGER_NAME = "pydisjoint"


class LogFile:
    """Capture every log record of one run in a file in the temp dir."""

    def __init__(self, path: Optional[Path] = None):
        if path is None:
            path = Path(tempfile.gettempdir()) / f"git-disjoint-{time.time_ns()}.log"
        self.path = Path(path)
        self._handler: Optional[logging.FileHandler] = None

    def __str__(self) -> str:
        return str(self.path)

    def attach(self) -> None:
        """Start writing DEBUG and above from the pydisjoint loggers."""
        if self._handler is not None:
            return
        handler = logging.FileHandler(self.path, encoding="utf-8", delay=True)
        handler.setLevel(logging.DEBUG)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, LOG_DATE_FORMAT))
        logger = logging.getLogger(LOGGER_NAME)
        logger.setLevel(logging.DEBUG)
        logger.addHandler(handler)
        self._handler = handler

    def detach(self) -> None:
        if self._handler is None:
            return
        logging.getLogger(LOGGER_NAME).removeHandler(self._handler)
        self._handler.close()
        self._handler = None

    def contents(self) -> str:
        """Everything logged so far, or an empty string if nothing was."""
        if self._handler is not None:
            self._handler.flush()
        try:
            return self.path.read_text(encoding="utf-8", errors="replace")
        except FileNotFoundError:
            return ""

    def delete(self) -> None:
        """Stop logging and remove the file.

        Raises:
            OSError: If the file exists but cannot be removed
        """
        self.detach()
        if self.path.exists():
            self.path.unlink()

    def __enter__(self) -> 'LogFile':
        self.attach()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.detach()
