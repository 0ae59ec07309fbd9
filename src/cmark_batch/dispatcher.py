#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/cmark_batch/dispatcher.py
"""Concurrent fan-out/fan-in of documents to the rendering engine.

Every document of a batch is rendered as an independent unit of work on a
thread pool. Results are written into a pre-sized list at the document's
position, so the returned outcomes line up with the input no matter which
unit finishes first. The call blocks until every unit has completed.

Examples
--------
    >>> from cmark_batch.dispatcher import BatchDispatcher, unwrap_outcomes
    >>> outcomes = BatchDispatcher().render_all(["*a*", "b"], option_bits=0, format_code=1)
    >>> unwrap_outcomes(outcomes)
    ['<p><em>a</em></p>\\n', '<p>b</p>\\n']

"""

from __future__ import annotations

import logging
import os
import time
from concurrent.futures import FIRST_COMPLETED, CancelledError, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, replace
from typing import Any, Optional, Sequence, cast

from cmark_batch.config import BatchConfig, get_default_config
from cmark_batch.constants import DEFAULT_MAX_WORKERS_CAP
from cmark_batch.engine import RenderEngine, SerializedEngine, get_default_engine
from cmark_batch.exceptions import RenderError
from cmark_batch.progress import ProgressCallback, ProgressEvent
from cmark_batch.renderer import Document, render_document

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RenderOutcome:
    """Result of one unit of work: rendered text or the error that replaced it.

    Parameters
    ----------
    index : int
        Position of the document in its batch
    value : Any, optional
        Rendered text, or a per-item callback's return value once adapted
    error : Exception, optional
        RenderError or CallbackError when the item failed

    """

    index: int
    value: Any = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        """Whether the item succeeded."""
        return self.error is None

    def unwrap(self) -> Any:
        """Return the value, or raise the stored error."""
        if self.error is not None:
            raise self.error
        return self.value

    def with_value(self, value: Any) -> RenderOutcome:
        """Return a copy carrying ``value``."""
        return replace(self, value=value)

    def with_error(self, error: Exception) -> RenderOutcome:
        """Return a failed copy carrying ``error``."""
        return replace(self, value=None, error=error)


def unwrap_outcomes(outcomes: Sequence[RenderOutcome]) -> list[Any]:
    """Return every value, or raise the error of the lowest failed index.

    Parameters
    ----------
    outcomes : sequence of RenderOutcome
        Outcomes in index order

    Returns
    -------
    list
        Values in index order

    Raises
    ------
    RenderError or CallbackError
        The first failure by position, not by completion time

    """
    return [outcome.unwrap() for outcome in outcomes]


def _default_worker_count(batch_size: int) -> int:
    return max(1, min(DEFAULT_MAX_WORKERS_CAP, batch_size, (os.cpu_count() or 1) + 4))


class BatchDispatcher:
    """Render batches of documents concurrently, preserving input order.

    Parameters
    ----------
    engine : RenderEngine, optional
        Engine to render with. Defaults to the process-wide engine; without
        an installed engine, ``config.width`` sets the built-in CmarkEngine's
        wrap width.
    config : BatchConfig, optional
        Pool size, join timeout and engine serialization settings.
        Defaults to :func:`cmark_batch.config.get_default_config`.
    progress_callback : ProgressCallback, optional
        Receives started/item_done/error/finished events

    """

    def __init__(
        self,
        engine: RenderEngine | None = None,
        config: BatchConfig | None = None,
        progress_callback: ProgressCallback | None = None,
    ):
        """Initialize the dispatcher."""
        self.config = config if config is not None else get_default_config()
        if engine is None:
            engine = get_default_engine(width=self.config.width)
        if self.config.serialize_engine and not isinstance(engine, SerializedEngine):
            engine = SerializedEngine(engine)
        self.engine = engine
        self.progress_callback = progress_callback

    def _emit(self, event: ProgressEvent) -> None:
        if self.progress_callback is None:
            return
        try:
            self.progress_callback(event)
        except Exception as e:
            logger.warning(f"Progress callback raised on {event.event_type!r} event: {e}")

    def _run_unit(
        self, document: Document, option_bits: int, format_code: int, index: int, error_index: int | None
    ) -> RenderOutcome:
        try:
            text = render_document(document, option_bits, format_code, engine=self.engine, index=error_index)
        except RenderError as e:
            return RenderOutcome(index=index, error=e)
        return RenderOutcome(index=index, value=text)

    def _record(self, outcome: RenderOutcome, completed: int, total: int) -> None:
        if outcome.ok:
            self._emit(
                ProgressEvent(
                    "item_done",
                    f"Rendered document {outcome.index}",
                    current=completed,
                    total=total,
                    metadata={"index": outcome.index},
                )
            )
        else:
            logger.debug(f"Document {outcome.index} failed: {outcome.error}")
            self._emit(
                ProgressEvent(
                    "error",
                    f"Failed to render document {outcome.index}",
                    current=completed,
                    total=total,
                    metadata={"index": outcome.index, "error": str(outcome.error)},
                )
            )

    def render_all(
        self, documents: Sequence[Document], option_bits: int, format_code: int, *, single: bool = False
    ) -> list[RenderOutcome]:
        """Render every document and return one outcome per input position.

        Parameters
        ----------
        documents : sequence of str or bytes
            The batch, in order
        option_bits : int
            Encoded options
        format_code : int
            Encoded output format
        single : bool, default False
            ``documents`` holds one document that was not passed as a batch.
            Errors then carry ``index=None``.

        Returns
        -------
        list[RenderOutcome]
            ``outcomes[i]`` belongs to ``documents[i]``. Failures are stored
            in place; sibling successes are unaffected.

        Raises
        ------
        DependencyError
            If the engine's native library is missing
        ValueError
            If ``single`` is set for anything but one document

        """
        total = len(documents)
        if single and total != 1:
            raise ValueError(f"single=True requires exactly one document, got {total}")
        if total == 0:
            return []

        self._emit(ProgressEvent("started", f"Rendering {total} documents", current=0, total=total))

        # A lone document runs inline unless a timeout has to be enforced
        if total == 1 and self.config.timeout is None:
            outcome = self._run_unit(documents[0], option_bits, format_code, 0, None if single else 0)
            self._record(outcome, 1, total)
            outcomes = [outcome]
        else:
            outcomes = self._render_concurrently(documents, option_bits, format_code, single)

        failed = sum(1 for outcome in outcomes if not outcome.ok)
        self._emit(
            ProgressEvent(
                "finished",
                f"Rendered {total - failed} of {total} documents",
                current=total,
                total=total,
                metadata={"failed": failed},
            )
        )
        return outcomes

    def _render_concurrently(
        self, documents: Sequence[Document], option_bits: int, format_code: int, single: bool
    ) -> list[RenderOutcome]:
        total = len(documents)
        workers = self.config.max_workers or _default_worker_count(total)
        timeout = self.config.timeout
        logger.debug(f"Dispatching {total} documents to {workers} workers (timeout={timeout})")

        outcomes: list[Optional[RenderOutcome]] = [None] * total
        executor = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="cmark-batch")
        timed_out = False
        try:
            futures: dict[Future[RenderOutcome], int] = {
                executor.submit(
                    self._run_unit, document, option_bits, format_code, index, None if single else index
                ): index
                for index, document in enumerate(documents)
            }
            deadline = None if timeout is None else time.monotonic() + timeout
            pending = set(futures)
            completed = 0

            while pending:
                remaining = None if deadline is None else max(0.0, deadline - time.monotonic())
                done, pending = wait(pending, timeout=remaining, return_when=FIRST_COMPLETED)
                for future in done:
                    index = futures[future]
                    outcome = self._collect(future, index, format_code, single)
                    outcomes[index] = outcome
                    completed += 1
                    self._record(outcome, completed, total)
                if not done and pending:
                    timed_out = True
                    break

            if timed_out:
                for future in pending:
                    index = futures[future]
                    cancelled = future.cancel()
                    outcome = self._abandoned(index, format_code, timeout, cancelled, single)
                    outcomes[index] = outcome
                    completed += 1
                    self._record(outcome, completed, total)
                logger.warning(f"{len(pending)} of {total} documents did not finish within {timeout}s")
        finally:
            # Running units cannot be interrupted; don't block on them after a timeout
            executor.shutdown(wait=not timed_out, cancel_futures=timed_out)

        missing = [index for index, outcome in enumerate(outcomes) if outcome is None]
        assert not missing, f"No outcome recorded for documents {missing}"
        return cast("list[RenderOutcome]", outcomes)

    @staticmethod
    def _collect(future: Future[RenderOutcome], index: int, format_code: int, single: bool) -> RenderOutcome:
        try:
            return future.result()
        except CancelledError as e:
            return RenderOutcome(
                index=index,
                error=RenderError(
                    f"Rendering of document {index} was cancelled",
                    index=None if single else index,
                    format_code=format_code,
                    original_error=e,
                ),
            )

    @staticmethod
    def _abandoned(
        index: int, format_code: int, timeout: float | None, cancelled: bool, single: bool
    ) -> RenderOutcome:
        cause: Exception
        if cancelled:
            cause = CancelledError()
            message = f"Rendering of document {index} was cancelled after the {timeout}s timeout"
        else:
            cause = TimeoutError(f"Document {index} did not finish within {timeout}s")
            message = str(cause)
        return RenderOutcome(
            index=index,
            error=RenderError(
                message, index=None if single else index, format_code=format_code, original_error=cause
            ),
        )


__all__ = ["BatchDispatcher", "RenderOutcome", "unwrap_outcomes"]
