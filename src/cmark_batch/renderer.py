#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/cmark_batch/renderer.py
"""Single-document rendering through the engine."""

from __future__ import annotations

import logging
from typing import Union

from cmark_batch.engine import RenderEngine, get_default_engine
from cmark_batch.exceptions import DependencyError, RenderError
from cmark_batch.utils.decorators import debug_timer

logger = logging.getLogger(__name__)

Document = Union[str, bytes]


def _describe(index: int | None) -> str:
    return "document" if index is None else f"document {index}"


def _decode(document: Document, index: int | None, format_code: int) -> str:
    if isinstance(document, str):
        return document
    if isinstance(document, (bytes, bytearray)):
        try:
            return bytes(document).decode("utf-8")
        except UnicodeDecodeError as e:
            raise RenderError(
                f"Failed to decode {_describe(index)} as UTF-8: {e}",
                index=index,
                format_code=format_code,
                original_error=e,
            ) from e
    raise RenderError(
        f"Cannot render {_describe(index)} of type {type(document).__name__}; expected str or bytes",
        index=index,
        format_code=format_code,
    )


def render_document(
    document: Document,
    option_bits: int,
    format_code: int,
    *,
    engine: RenderEngine | None = None,
    index: int | None = None,
) -> str:
    """Render one document with already-encoded options and format.

    Parameters
    ----------
    document : str or bytes
        Markdown source; bytes are decoded as UTF-8
    option_bits : int
        Bitmask from :func:`cmark_batch.options.encode_options`
    format_code : int
        Code from :func:`cmark_batch.options.encode_format`
    engine : RenderEngine, optional
        Engine to call; defaults to :func:`cmark_batch.engine.get_default_engine`
    index : int, optional
        Position of the document in its batch, recorded on errors

    Returns
    -------
    str
        Rendered text

    Raises
    ------
    RenderError
        If the document cannot be decoded, the engine raises, or the engine
        returns something other than text
    DependencyError
        If the engine's native library is not installed

    """
    source = _decode(document, index, format_code)
    engine = engine if engine is not None else get_default_engine()

    try:
        with debug_timer(logger, f"Rendering {_describe(index)} (format {format_code})"):
            result = engine.render(source, option_bits, format_code)
    except DependencyError:
        raise
    except Exception as e:
        raise RenderError(
            f"Engine failed on {_describe(index)}: {e}",
            index=index,
            format_code=format_code,
            original_error=e,
        ) from e

    if not isinstance(result, str):
        raise RenderError(
            f"Engine returned {type(result).__name__} for {_describe(index)}; expected str",
            index=index,
            format_code=format_code,
        )
    return result


__all__ = ["Document", "render_document"]
