"""
Single-slot observation sinks for diagnostics.

Each slot keeps only the most recent value for the lifetime of the process
(e.g. the last unlock attempt or the last webhook body). Writers race with
last-write-wins semantics.
"""

from __future__ import annotations

import threading
from typing import Any, Optional


class ObservationSlot:
    """
    Thread-safe holder for the most recent observation.

    Attributes:
        name: Label used in logs and diagnostics
        _value: Most recent observation, or None before the first record()

    Example:
        >>> slot = ObservationSlot("last_unlock")
        >>> slot.record({"result": "stub-ok"})
        >>> slot.latest()
        {'result': 'stub-ok'}
    """

    def __init__(self, name: str):
        self.name = name
        self._value: Optional[dict[str, Any]] = None
        self._lock = threading.Lock()

    def record(self, value: dict[str, Any]) -> None:
        """Overwrite the slot with ``value``."""
        with self._lock:
            self._value = dict(value)

    def latest(self) -> Optional[dict[str, Any]]:
        """Return a copy of the most recent observation, or None."""
        with self._lock:
            return dict(self._value) if self._value is not None else None

    def clear(self) -> None:
        with self._lock:
            self._value = None


# Process-wide default slots, injected through str_access.dependencies
last_unlock_slot = ObservationSlot("last_unlock")
last_webhook_slot = ObservationSlot("last_hospitable_webhook")
