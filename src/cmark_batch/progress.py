#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/cmark_batch/progress.py
"""Progress callback system for batch rendering.

Batches are rendered concurrently, so a caller rendering thousands of
documents has no other view of how far along the join is. Passing a progress
callback to any batch API reports each completed document as it finishes.

Examples
--------
    >>> from cmark_batch import to_html
    >>> from cmark_batch.progress import ProgressEvent
    >>>
    >>> def on_progress(event: ProgressEvent):
    ...     print(event)
    >>>
    >>> html = to_html(["# One", "# Two"], progress_callback=on_progress)

"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Literal

EventType = Literal["started", "item_done", "error", "finished"]


@dataclass
class ProgressEvent:
    """Progress event for batch rendering.

    Parameters
    ----------
    event_type : EventType
        Type of progress event:

        - "started": The batch has been scheduled; ``total`` is the batch size.
        - "item_done": One document rendered; ``metadata["index"]`` is its position.
        - "error": One document failed; ``metadata`` holds ``index`` and ``error``.
        - "finished": Every unit has completed; ``current == total``.

    message : str
        Human-readable description of the event
    current : int, default 0
        Number of documents completed so far, in completion order
    total : int, default 0
        Number of documents in the batch
    metadata : dict, default empty
        Additional event-specific information

    Notes
    -----
    ``current`` counts completions, not positions: with concurrent rendering
    the third "item_done" event may well be for index 0.

    """

    event_type: EventType
    message: str
    current: int = 0
    total: int = 0
    metadata: dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        """Return human-readable string representation."""
        progress = f"({self.current}/{self.total})" if self.total > 0 else ""
        return f"[{self.event_type.upper()}] {self.message} {progress}".strip()


ProgressCallback = Callable[[ProgressEvent], None]
"""Type alias for progress callback functions.

Exceptions raised by a progress callback are logged and otherwise ignored.
"""
