"""Lifecycle, panel and error events plus the listener registry they travel through.

Listeners are plain callables taking a single event argument.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, List, Optional


LOGGER = logging.getLogger(__name__)


class ExecEventType(Enum):
    SCRIPT_RUN_SETUP_FAILURE = "script_run_setup_failure"
    SCRIPT_RUN = "script_run"
    SCRIPT_RUN_FAILURE = "script_run_failure"
    SCRIPT_RUN_SUCCESS = "script_run_success"
    SCRIPT_STOP = "script_stop"
    SCRIPT_FINISHED = "script_finished"


class PanelEventType(Enum):
    SCRIPT_LOAD_SUCCESS = "script_load_success"
    SCRIPT_LOAD_FAILURE = "script_load_failure"
    SCRIPT_SAVE_SUCCESS = "script_save_success"
    SCRIPT_SAVE_FAILURE = "script_save_failure"
    OUTPUT_CLEARED = "output_cleared"
    OUTPUT_SAVE_SUCCESS = "output_save_success"
    OUTPUT_SAVE_FAILURE = "output_save_failure"


@dataclass(frozen=True)
class ExecEvent:
    source: Any
    type: ExecEventType

    def __str__(self):
        return f"ExecEvent({self.type.name})"


@dataclass(frozen=True)
class PanelEvent:
    source: Any
    type: PanelEventType
    path: Optional[str] = None

    def __str__(self):
        if self.path:
            return f"PanelEvent({self.type.name}, path={self.path})"
        return f"PanelEvent({self.type.name})"


@dataclass(frozen=True)
class ErrorEvent:
    source: Any
    message: str
    exception: Optional[BaseException] = None

    @property
    def has_exception(self) -> bool:
        return self.exception is not None

    def __str__(self):
        return f"ErrorEvent(message={self.message!r}, exception={self.exception!r})"


Listener = Callable[[Any], None]


class ListenerList:
    """Ordered, duplicate-free collection of listeners.

    ``notify`` works on a snapshot, so listeners may add or remove listeners
    (including themselves) while being notified.
    """

    def __init__(self):
        self._listeners: List[Listener] = []
        self._lock = threading.RLock()

    def add(self, listener: Listener) -> None:
        if not callable(listener):
            raise TypeError(f"Listener must be callable: {listener!r}")
        with self._lock:
            if listener not in self._listeners:
                self._listeners.append(listener)

    def remove(self, listener: Listener) -> None:
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def notify(self, event) -> None:
        with self._lock:
            snapshot = list(self._listeners)
            for listener in snapshot:
                try:
                    listener(event)
                except Exception:
                    LOGGER.exception("Listener %r failed on %s", listener, event)

    def __len__(self):
        with self._lock:
            return len(self._listeners)

    def __bool__(self):
        return len(self) > 0

    def __iter__(self):
        with self._lock:
            return iter(list(self._listeners))
