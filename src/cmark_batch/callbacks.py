#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/cmark_batch/callbacks.py
"""Post-processing of rendered results with caller-supplied callbacks.

Two modes are supported:

- Whole-batch: the callback is called once with everything that was
  rendered (a single text, or the ordered list of texts) and its return
  value is handed back verbatim.
- Per-item: the callback is called once for each successfully rendered
  item, in input order, and each return value replaces that item's text.

Callbacks only ever see text from renders that succeeded.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Sequence

from cmark_batch.dispatcher import RenderOutcome
from cmark_batch.exceptions import CallbackError

logger = logging.getLogger(__name__)

Callback = Callable[[Any], Any]


def _callback_name(callback: Callback) -> str:
    return getattr(callback, "__qualname__", None) or type(callback).__name__


def apply_batch_callback(callback: Callback, result: Any) -> Any:
    """Call ``callback`` once with the complete result.

    Parameters
    ----------
    callback : callable
        Caller-owned transformation
    result : str or list[str]
        Rendered text of a single document, or the ordered batch

    Returns
    -------
    Any
        Whatever the callback returned

    Raises
    ------
    CallbackError
        If the callback raises; the original exception is chained

    """
    try:
        return callback(result)
    except CallbackError:
        raise
    except Exception as e:
        raise CallbackError(
            f"Callback {_callback_name(callback)} failed on the batch result: {e}", original_error=e
        ) from e


def apply_each_callback(callback: Callback, outcomes: Sequence[RenderOutcome]) -> list[RenderOutcome]:
    """Call ``callback`` for each successful outcome, in index order.

    Parameters
    ----------
    callback : callable
        Caller-owned transformation applied to one rendered text at a time
    outcomes : sequence of RenderOutcome
        Outcomes from :meth:`BatchDispatcher.render_all`

    Returns
    -------
    list[RenderOutcome]
        Same positions as ``outcomes``. Successful items carry the callback's
        return value, items whose callback raised carry a CallbackError, and
        failed renders are passed through untouched.

    """
    adapted: list[RenderOutcome] = []
    for outcome in outcomes:
        if not outcome.ok:
            adapted.append(outcome)
            continue
        try:
            adapted.append(outcome.with_value(callback(outcome.value)))
        except Exception as e:
            logger.debug(f"Callback failed on item {outcome.index}: {e}")
            error = CallbackError(
                f"Callback {_callback_name(callback)} failed on item {outcome.index}: {e}",
                index=outcome.index,
                original_error=e,
            )
            error.__cause__ = e
            adapted.append(outcome.with_error(error))
    return adapted


__all__ = ["Callback", "apply_batch_callback", "apply_each_callback"]
