"""The exported API functions for rendering Markdown documents."""

#  Copyright (c) 2025 Tom Villani, Ph.D.
# src/cmark_batch/api.py
import logging
from collections.abc import Iterable, Mapping
from typing import Any, Optional, Union

from cmark_batch.callbacks import Callback, apply_batch_callback, apply_each_callback
from cmark_batch.config import BatchConfig, get_default_config
from cmark_batch.dispatcher import BatchDispatcher, RenderOutcome, unwrap_outcomes
from cmark_batch.engine import RenderEngine
from cmark_batch.exceptions import BatchError, ValidationError
from cmark_batch.options import FormatLike, OptionsLike, encode_format, encode_options
from cmark_batch.progress import ProgressCallback
from cmark_batch.renderer import Document
from cmark_batch.utils.decorators import debug_timer

logger = logging.getLogger(__name__)

DocumentData = Union[Document, Iterable[Document]]


def _split_options_or_callback(
    options_or_callback: Union[OptionsLike, Callback], options: OptionsLike
) -> tuple[Optional[Callback], OptionsLike]:
    """Tell a callback apart from an option set by its shape.

    Returns
    -------
    tuple
        (callback or None, option tags)

    Raises
    ------
    ValidationError
        If both arguments are given and the first of them is not callable

    """
    if callable(options_or_callback):
        return options_or_callback, options
    if options is None:
        return None, options_or_callback
    if options_or_callback is None:
        return None, options
    raise ValidationError(
        "When options are passed separately, the second argument must be a callback, "
        f"got {type(options_or_callback).__name__}",
        parameter_name="callback",
        parameter_value=options_or_callback,
    )


def _normalize_data(data: Any) -> tuple[bool, list[Document]]:
    """Return (is_batch, documents) for a single document or a batch."""
    if isinstance(data, (str, bytes, bytearray)):
        return False, [data]
    if isinstance(data, Iterable) and not isinstance(data, Mapping):
        return True, list(data)
    raise ValidationError(
        f"Expected a document (str or bytes) or a list of documents, got {type(data).__name__}",
        parameter_name="data",
        parameter_value=data,
    )


def _encode(target_format: FormatLike, options: OptionsLike, config: BatchConfig) -> tuple[int, int]:
    format_code = encode_format(target_format)
    option_bits = encode_options(options) | encode_options(config.default_options)
    logger.debug(f"Encoded format {target_format!r} as {format_code}, options {options!r} as {option_bits}")
    return format_code, option_bits


def _dispatch(
    documents: list[Document],
    format_code: int,
    option_bits: int,
    engine: Optional[RenderEngine],
    config: BatchConfig,
    progress_callback: Optional[ProgressCallback],
    is_batch: bool = True,
) -> list[RenderOutcome]:
    dispatcher = BatchDispatcher(engine=engine, config=config, progress_callback=progress_callback)
    with debug_timer(logger, f"Rendering {len(documents)} document(s) (format {format_code})"):
        return dispatcher.render_all(documents, option_bits, format_code, single=not is_batch)


def convert(
    data: DocumentData,
    target_format: FormatLike,
    options_or_callback: Union[OptionsLike, Callback] = None,
    options: OptionsLike = None,
    *,
    engine: Optional[RenderEngine] = None,
    config: Optional[BatchConfig] = None,
    progress_callback: Optional[ProgressCallback] = None,
) -> Any:
    """Render one or more Markdown documents to ``target_format``.

    This is the entry point behind every ``to_<format>`` function. The
    result mirrors the input: a single document gives a single text, a list
    of documents gives a list of texts in the same order.

    Parameters
    ----------
    data : str, bytes, or iterable of those
        One document, or a batch rendered concurrently
    target_format : OutputFormat or str
        One of "html", "xml", "man", "commonmark", "latex"
    options_or_callback : options or callable, optional
        Either the option tags, or a callback applied once to the whole
        result. A callable is always treated as the callback.
    options : options, optional
        Option tags, when ``options_or_callback`` is the callback
    engine : RenderEngine, optional
        Engine override; defaults to the process-wide engine
    config : BatchConfig, optional
        Dispatcher settings; defaults to :func:`cmark_batch.config.get_default_config`
    progress_callback : ProgressCallback, optional
        Receives batch progress events

    Returns
    -------
    Any
        Rendered text, list of texts, or whatever the callback returned

    Raises
    ------
    UnknownFormatError
        If ``target_format`` is not supported
    UnknownOptionError
        If an option tag is not recognized
    ValidationError
        If ``data`` or the argument combination has the wrong shape
    RenderError
        If any document fails; the lowest failing index is reported and the
        callback is not called
    CallbackError
        If the callback raises

    Examples
    --------
        >>> convert("test", "html")
        '<p>test</p>\\n'

        >>> convert(["list", "test"], "html", lambda rs: "<hr>".join(r.strip() for r in rs))
        '<p>list</p><hr><p>test</p>'

    """
    cfg = config if config is not None else get_default_config()
    callback, option_tags = _split_options_or_callback(options_or_callback, options)
    format_code, option_bits = _encode(target_format, option_tags, cfg)
    is_batch, documents = _normalize_data(data)

    if is_batch and not documents:
        return []

    outcomes = _dispatch(documents, format_code, option_bits, engine, cfg, progress_callback, is_batch)
    texts = unwrap_outcomes(outcomes)
    result: Any = texts if is_batch else texts[0]

    if callback is None:
        return result
    return apply_batch_callback(callback, result)


def convert_each(
    data: Iterable[Document],
    target_format: FormatLike,
    callback: Callback,
    options: OptionsLike = None,
    *,
    engine: Optional[RenderEngine] = None,
    config: Optional[BatchConfig] = None,
    progress_callback: Optional[ProgressCallback] = None,
) -> list[Any]:
    """Render a batch and apply ``callback`` to each rendered item.

    Every document is rendered even if some fail, and the callback runs for
    every document that rendered, in input order.

    Parameters
    ----------
    data : iterable of str or bytes
        The batch; a single document is rejected
    target_format : OutputFormat or str
        Output format
    callback : callable
        Applied to each rendered text
    options : options, optional
        Option tags; defaults to ``default``
    engine, config, progress_callback
        See :func:`convert`

    Returns
    -------
    list
        The callback's return values, in input order

    Raises
    ------
    ValidationError
        If ``data`` is a single document or ``callback`` is not callable
    BatchError
        If any render or callback failed. ``outcomes`` on the error holds
        every item, including the successful ones.

    """
    if not callable(callback):
        raise ValidationError(
            f"Per-item rendering requires a callable callback, got {type(callback).__name__}",
            parameter_name="callback",
            parameter_value=callback,
        )
    adapted = render_outcomes(
        data,
        target_format,
        options,
        engine=engine,
        config=config,
        progress_callback=progress_callback,
        require_batch=True,
    )
    adapted = apply_each_callback(callback, adapted)

    if any(not outcome.ok for outcome in adapted):
        raise BatchError(adapted)
    return [outcome.value for outcome in adapted]


def render_outcomes(
    data: DocumentData,
    target_format: FormatLike,
    options: OptionsLike = None,
    *,
    engine: Optional[RenderEngine] = None,
    config: Optional[BatchConfig] = None,
    progress_callback: Optional[ProgressCallback] = None,
    require_batch: bool = False,
) -> list[RenderOutcome]:
    """Render documents and return one outcome per document without raising.

    Parameters
    ----------
    data : str, bytes, or iterable of those
        One document (giving a one-element list) or a batch
    target_format : OutputFormat or str
        Output format
    options : options, optional
        Option tags
    engine, config, progress_callback
        See :func:`convert`
    require_batch : bool, default False
        Reject a single document with ValidationError

    Returns
    -------
    list[RenderOutcome]
        ``outcomes[i].value`` is the text of document ``i``, or
        ``outcomes[i].error`` the RenderError it failed with

    """
    cfg = config if config is not None else get_default_config()
    format_code, option_bits = _encode(target_format, options, cfg)
    is_batch, documents = _normalize_data(data)
    if require_batch and not is_batch:
        raise ValidationError(
            "Per-item rendering requires a list of documents, got a single document",
            parameter_name="data",
            parameter_value=data,
        )
    if not documents:
        return []
    return _dispatch(documents, format_code, option_bits, engine, cfg, progress_callback, is_batch)


# ---------------------------------------------------------------------------
# HTML
# ---------------------------------------------------------------------------


def to_html(
    data: DocumentData,
    options_or_callback: Union[OptionsLike, Callback] = None,
    options: OptionsLike = None,
    *,
    engine: Optional[RenderEngine] = None,
    config: Optional[BatchConfig] = None,
    progress_callback: Optional[ProgressCallback] = None,
) -> Any:
    """Render one or more Markdown documents to HTML.

    Available options:

    * ``sourcepos`` - Include a ``data-sourcepos`` attribute on all block elements.
    * ``hardbreaks`` - Render softbreak elements as hard line breaks.
    * ``normalize`` - Consolidate adjacent text nodes.
    * ``smart`` - Convert straight quotes to curly, ``---`` to em dashes, ``--`` to en dashes.
    * ``validate_utf8`` - Replace illegal UTF-8 sequences with U+FFFD before parsing.
    * ``safe`` - Suppress raw HTML and unsafe links (``javascript:``, ``vbscript:``,
      ``file:``, and most ``data:`` URLs).

    Examples
    --------
        >>> to_html("test")
        '<p>test</p>\\n'

        >>> to_html(["test 1", "test 2"])
        ['<p>test 1</p>\\n', '<p>test 2</p>\\n']

        >>> to_html('Use option to enable "smart" quotes.', ["smart"])
        '<p>Use option to enable “smart” quotes.</p>\\n'

        >>> to_html("test", lambda result: f"HTML is {result}".strip())
        'HTML is <p>test</p>'

        >>> join = lambda results: "<hr>".join(r.strip() for r in results)
        >>> to_html(["en-dash --", "ellipsis..."], join, ["smart"])
        '<p>en-dash –</p><hr><p>ellipsis…</p>'

    See :func:`convert` for parameters, return values and errors.

    """
    return convert(
        data,
        "html",
        options_or_callback,
        options,
        engine=engine,
        config=config,
        progress_callback=progress_callback,
    )


def to_html_each(
    data: Iterable[Document],
    callback: Callback,
    options: OptionsLike = None,
    *,
    engine: Optional[RenderEngine] = None,
    config: Optional[BatchConfig] = None,
    progress_callback: Optional[ProgressCallback] = None,
) -> list[Any]:
    """Render a list of Markdown documents to HTML and call ``callback`` for each.

    Examples
    --------
        >>> to_html_each(["list", "test"], lambda r: f"HTML is {r.strip()}")
        ['HTML is <p>list</p>', 'HTML is <p>test</p>']

    See :func:`convert_each` for parameters, return values and errors.

    """
    return convert_each(
        data, "html", callback, options, engine=engine, config=config, progress_callback=progress_callback
    )


# ---------------------------------------------------------------------------
# XML
# ---------------------------------------------------------------------------


def to_xml(
    data: DocumentData,
    options_or_callback: Union[OptionsLike, Callback] = None,
    options: OptionsLike = None,
    *,
    engine: Optional[RenderEngine] = None,
    config: Optional[BatchConfig] = None,
    progress_callback: Optional[ProgressCallback] = None,
) -> Any:
    """Render one or more Markdown documents to the CommonMark XML tree format.

    Options are the same as for :func:`to_html`.
    """
    return convert(
        data,
        "xml",
        options_or_callback,
        options,
        engine=engine,
        config=config,
        progress_callback=progress_callback,
    )


def to_xml_each(
    data: Iterable[Document],
    callback: Callback,
    options: OptionsLike = None,
    *,
    engine: Optional[RenderEngine] = None,
    config: Optional[BatchConfig] = None,
    progress_callback: Optional[ProgressCallback] = None,
) -> list[Any]:
    """Render a list of Markdown documents to XML and call ``callback`` for each."""
    return convert_each(
        data, "xml", callback, options, engine=engine, config=config, progress_callback=progress_callback
    )


# ---------------------------------------------------------------------------
# Manpage
# ---------------------------------------------------------------------------


def to_man(
    data: DocumentData,
    options_or_callback: Union[OptionsLike, Callback] = None,
    options: OptionsLike = None,
    *,
    engine: Optional[RenderEngine] = None,
    config: Optional[BatchConfig] = None,
    progress_callback: Optional[ProgressCallback] = None,
) -> Any:
    """Render one or more Markdown documents to groff man (troff) source.

    Examples
    --------
        >>> to_man("test")
        '.PP\\ntest\\n'

    """
    return convert(
        data,
        "man",
        options_or_callback,
        options,
        engine=engine,
        config=config,
        progress_callback=progress_callback,
    )


def to_man_each(
    data: Iterable[Document],
    callback: Callback,
    options: OptionsLike = None,
    *,
    engine: Optional[RenderEngine] = None,
    config: Optional[BatchConfig] = None,
    progress_callback: Optional[ProgressCallback] = None,
) -> list[Any]:
    """Render a list of Markdown documents to man source and call ``callback`` for each."""
    return convert_each(
        data, "man", callback, options, engine=engine, config=config, progress_callback=progress_callback
    )


# ---------------------------------------------------------------------------
# CommonMark
# ---------------------------------------------------------------------------


def to_commonmark(
    data: DocumentData,
    options_or_callback: Union[OptionsLike, Callback] = None,
    options: OptionsLike = None,
    *,
    engine: Optional[RenderEngine] = None,
    config: Optional[BatchConfig] = None,
    progress_callback: Optional[ProgressCallback] = None,
) -> Any:
    """Render one or more Markdown documents to normalized CommonMark.

    Examples
    --------
        >>> to_commonmark("test")
        'test\\n'

        >>> to_commonmark(["en-dash --", "ellipsis..."], ["smart"])
        ['en-dash –\\n', 'ellipsis…\\n']

    """
    return convert(
        data,
        "commonmark",
        options_or_callback,
        options,
        engine=engine,
        config=config,
        progress_callback=progress_callback,
    )


def to_commonmark_each(
    data: Iterable[Document],
    callback: Callback,
    options: OptionsLike = None,
    *,
    engine: Optional[RenderEngine] = None,
    config: Optional[BatchConfig] = None,
    progress_callback: Optional[ProgressCallback] = None,
) -> list[Any]:
    """Render a list of Markdown documents to CommonMark and call ``callback`` for each."""
    return convert_each(
        data, "commonmark", callback, options, engine=engine, config=config, progress_callback=progress_callback
    )


# ---------------------------------------------------------------------------
# LaTeX
# ---------------------------------------------------------------------------


def to_latex(
    data: DocumentData,
    options_or_callback: Union[OptionsLike, Callback] = None,
    options: OptionsLike = None,
    *,
    engine: Optional[RenderEngine] = None,
    config: Optional[BatchConfig] = None,
    progress_callback: Optional[ProgressCallback] = None,
) -> Any:
    """Render one or more Markdown documents to LaTeX.

    Examples
    --------
        >>> to_latex("test")
        'test\\n'

        >>> to_latex('Use option to enable "smart" quotes.', ["smart"])
        "Use option to enable ``smart'' quotes.\\n"

    """
    return convert(
        data,
        "latex",
        options_or_callback,
        options,
        engine=engine,
        config=config,
        progress_callback=progress_callback,
    )


def to_latex_each(
    data: Iterable[Document],
    callback: Callback,
    options: OptionsLike = None,
    *,
    engine: Optional[RenderEngine] = None,
    config: Optional[BatchConfig] = None,
    progress_callback: Optional[ProgressCallback] = None,
) -> list[Any]:
    """Render a list of Markdown documents to LaTeX and call ``callback`` for each."""
    return convert_each(
        data, "latex", callback, options, engine=engine, config=config, progress_callback=progress_callback
    )


__all__ = [
    "convert",
    "convert_each",
    "render_outcomes",
    "to_html",
    "to_html_each",
    "to_xml",
    "to_xml_each",
    "to_man",
    "to_man_each",
    "to_commonmark",
    "to_commonmark_each",
    "to_latex",
    "to_latex_each",
]
