"""
Logging setup and an interaction event log.
"""

import logging
import logging.handlers
import os
import time
from typing import Optional

from ..core.events import EventBus, Events


def setup_logging(level="INFO", log_file=None, max_size_mb=10, backup_count=3):
    """Configure console (and optional rotating file) logging for the application."""
    console_format = "%(asctime)s  %(levelname)-5s  %(message)s"
    file_format = "%(asctime)s [%(levelname)-7s] %(name)-40s | %(message)s"
    date_format = "%H:%M:%S"

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, str(level).upper(), logging.INFO))

    root_logger.handlers.clear()

    console = logging.StreamHandler()
    console.setLevel(root_logger.level)
    console.setFormatter(logging.Formatter(console_format, datefmt=date_format))
    root_logger.addHandler(console)

    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=max_size_mb * 1024 * 1024,
            backupCount=backup_count,
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(file_format, datefmt=date_format))
        root_logger.addHandler(file_handler)

    return root_logger


class InteractionLogger:
    """Records mode changes and clicks published on the event bus."""

    def __init__(self):
        self.logger = logging.getLogger("interaction_events")
        self._history = []

    def attach(self, bus: EventBus) -> "InteractionLogger":
        bus.subscribe(Events.MODE_CHANGED, self.log_mode_change)
        bus.subscribe(Events.CLICK, self.log_click)
        return self

    def log_mode_change(self, mode, timestamp: Optional[float] = None, **_):
        self._history.append({
            "event": Events.MODE_CHANGED,
            "timestamp": timestamp if timestamp is not None else time.time(),
            "mode": mode.name,
        })
        self.logger.info("Mode: %s", mode.name)

    def log_click(self, timestamp: float, pointer=None, **_):
        self._history.append({
            "event": Events.CLICK,
            "timestamp": timestamp,
            "pointer": pointer,
        })
        if pointer is not None:
            self.logger.info("Click at (%.3f, %.3f)", pointer[0], pointer[1])
        else:
            self.logger.info("Click (no pointer)")

    def get_history(self, last_n=None):
        """Get recent interaction events."""
        if last_n:
            return self._history[-last_n:]
        return self._history.copy()

    @property
    def total_clicks(self):
        return sum(1 for e in self._history if e["event"] == Events.CLICK)

    @property
    def total_mode_changes(self):
        return sum(1 for e in self._history if e["event"] == Events.MODE_CHANGED)
