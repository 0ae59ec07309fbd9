"""Test utilities for the cmark_batch test suite.

This module provides a fake rendering engine with recording and fault
injection, so dispatch behavior can be tested without the cmark library.
"""

import threading
import time
from typing import Dict, Iterable, Optional


class FakeEngine:
    """Recording engine with per-document delays and failures.

    Parameters
    ----------
    delays : dict, optional
        Seconds to sleep before rendering a given source
    fail_on : iterable of str, optional
        Sources for which ``render`` raises RuntimeError
    exception : Exception, optional
        Raised for every call instead of rendering

    """

    def __init__(
        self,
        delays: Optional[Dict[str, float]] = None,
        fail_on: Optional[Iterable[str]] = None,
        exception: Optional[Exception] = None,
    ):
        self.delays = dict(delays or {})
        self.fail_on = set(fail_on or ())
        self.exception = exception
        self.calls: list[tuple[str, int, int]] = []
        self.thread_names: list[str] = []
        self.active = 0
        self.max_active = 0
        self._lock = threading.Lock()

    @staticmethod
    def expected(source: str, option_bits: int = 0, format_code: int = 1) -> str:
        """Return what ``render`` produces for the given inputs."""
        return f"{format_code}|{option_bits}|{source}"

    def render(self, source: str, option_bits: int, format_code: int) -> str:
        with self._lock:
            self.calls.append((source, option_bits, format_code))
            self.thread_names.append(threading.current_thread().name)
            self.active += 1
            self.max_active = max(self.max_active, self.active)
        try:
            delay = self.delays.get(source, 0)
            if delay:
                time.sleep(delay)
            if self.exception is not None:
                raise self.exception
            if source in self.fail_on:
                raise RuntimeError(f"cannot render {source!r}")
            return self.expected(source, option_bits, format_code)
        finally:
            with self._lock:
                self.active -= 1

    @property
    def sources(self) -> list[str]:
        """Sources rendered so far, in call order."""
        return [source for source, _, _ in self.calls]


class ProgressTracker:
    """Helper class to track progress events during testing."""

    def __init__(self):
        self.events = []
        self._lock = threading.Lock()

    def callback(self, event) -> None:
        """Record progress event."""
        with self._lock:
            self.events.append(event)

    def of_type(self, event_type: str) -> list:
        """Get all events of a specific type."""
        return [e for e in self.events if e.event_type == event_type]
