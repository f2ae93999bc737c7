"""Per-request events that collect fields and are logged once when finished."""

from __future__ import annotations

import logging
import threading
import time
from contextvars import ContextVar
from datetime import datetime
from typing import Any, Mapping, Optional

logger = logging.getLogger("bramble.instrumentation")

_current_event: ContextVar[Optional["Event"]] = ContextVar("bramble_event", default=None)


def _format_fraction(value: int, unit: int) -> str:
    whole, rest = divmod(value, unit)
    if not rest:
        return str(whole)
    digits = len(str(unit)) - 1
    return f"{whole}.{rest:0{digits}d}".rstrip("0")


def _format_duration(seconds: float) -> str:
    """Render a duration the way the gateway logs it, e.g. ``1.5ms`` or ``2m3s``."""
    nanos = int(round(seconds * 1e9))
    if nanos == 0:
        return "0s"
    sign = "-" if nanos < 0 else ""
    nanos = abs(nanos)
    if nanos < 1_000:
        return f"{sign}{nanos}ns"
    if nanos < 1_000_000:
        return f"{sign}{_format_fraction(nanos, 1_000)}µs"
    if nanos < 1_000_000_000:
        return f"{sign}{_format_fraction(nanos, 1_000_000)}ms"
    hours, rest = divmod(nanos, 3600 * 1_000_000_000)
    minutes, rest = divmod(rest, 60 * 1_000_000_000)
    text = _format_fraction(rest, 1_000_000_000) + "s"
    if hours or minutes:
        text = f"{minutes}m" + text
    if hours:
        text = f"{hours}h" + text
    return sign + text


class Event:
    """A named event that gathers fields and writes a single log record."""

    def __init__(self, name: str) -> None:
        self.name = name
        self.timestamp = datetime.now().astimezone()
        self.fields: dict[str, Any] = {}
        self._started = time.perf_counter()
        self._fields_lock = threading.Lock()
        self._finish_lock = threading.Lock()
        self._finished = False

    def add_field(self, name: str, value: Any) -> None:
        """Record one field on the event."""
        with self._fields_lock:
            self.fields[name] = value

    def add_fields(self, fields: Mapping[str, Any]) -> None:
        """Record several fields on the event."""
        with self._fields_lock:
            self.fields.update(fields)

    def finish(self) -> None:
        """Log the event with its timing and fields; later calls do nothing."""
        with self._finish_lock:
            if self._finished:
                return
            self._finished = True
        with self._fields_lock:
            record_fields = {
                "timestamp": self.timestamp.isoformat(),
                "duration": _format_duration(time.perf_counter() - self._started),
            }
            record_fields.update(self.fields)
        logger.info(self.name, extra={"fields": record_fields})


def start_event(name: str) -> Event:
    """Create an event and make it the current one for this context."""
    event = Event(name)
    _current_event.set(event)
    return event


def get_event() -> Optional[Event]:
    """The event of the current context, if any."""
    return _current_event.get()


def add_field(name: str, value: Any) -> None:
    """Add a field to the current event; dropped when there is none."""
    event = get_event()
    if event is not None:
        event.add_field(name, value)


def add_fields(fields: Mapping[str, Any]) -> None:
    """Add fields to the current event; dropped when there is none."""
    event = get_event()
    if event is not None:
        event.add_fields(fields)