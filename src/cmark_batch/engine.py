#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/cmark_batch/engine.py
"""Rendering engine boundary.

The Markdown parsing and serialization itself is delegated to an engine: any
object with a ``render(source, option_bits, format_code) -> str`` method.
The library ships :class:`CmarkEngine`, backed by the cmark reference
implementation through the ``paka.cmark`` package, and
:class:`SerializedEngine` for wrapping engines that must not be called from
several threads at once.

Examples
--------
Swapping the process-wide default engine:

    >>> from cmark_batch.engine import SerializedEngine, set_default_engine
    >>> set_default_engine(SerializedEngine(MyEngine()))

"""

from __future__ import annotations

import logging
import threading
from typing import Any, Protocol, runtime_checkable

from cmark_batch.constants import DEFAULT_WRAP_WIDTH, DEPS_CMARK
from cmark_batch.options import OutputFormat, RenderOption, decode_options
from cmark_batch.utils.decorators import requires_dependencies

logger = logging.getLogger(__name__)

_RENDER_FUNCTIONS: dict[OutputFormat, str] = {
    OutputFormat.HTML: "to_html",
    OutputFormat.XML: "to_xml",
    OutputFormat.MAN: "to_man",
    OutputFormat.COMMONMARK: "to_commonmark",
    OutputFormat.LATEX: "to_latex",
}

# Only the tree formats carry source positions; the text formats take a wrap width
_SOURCEPOS_FORMATS = frozenset({OutputFormat.HTML, OutputFormat.XML})


@runtime_checkable
class RenderEngine(Protocol):
    """Protocol every rendering engine satisfies.

    Implementations must be pure with respect to their inputs: the same
    ``(source, option_bits, format_code)`` triple always renders the same
    text. Unless wrapped in :class:`SerializedEngine`, ``render`` is called
    concurrently from worker threads.
    """

    def render(self, source: str, option_bits: int, format_code: int) -> str:
        """Render one Markdown document."""
        ...


class CmarkEngine:
    """Engine backed by cmark via ``paka.cmark``.

    Each call owns its own parse tree, so the engine is safe to call from
    multiple threads.

    Parameters
    ----------
    width : int, default 0
        Wrap width for man, CommonMark and LaTeX output; 0 disables wrapping

    Notes
    -----
    ``paka.cmark`` turns soft breaks into spaces unless asked to keep them,
    so renders without ``hardbreaks`` pass ``breaks=True`` to keep cmark's
    usual newline. ``normalize`` and ``validate_utf8`` need no keyword:
    sources reach the engine as decoded ``str`` and cmark merges adjacent
    text nodes on its own.

    """

    def __init__(self, width: int = DEFAULT_WRAP_WIDTH):
        """Initialize the engine with a wrap width."""
        if width < 0:
            raise ValueError(f"width must be non-negative, got {width}")
        self.width = width

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(width={self.width})"

    @staticmethod
    def translate_options(option_bits: int) -> dict[str, Any]:
        """Translate the option bitmask into ``paka.cmark`` keyword arguments.

        Parameters
        ----------
        option_bits : int
            Bitmask produced by :func:`cmark_batch.options.encode_options`

        Returns
        -------
        dict
            ``breaks``, ``safe``, ``smart`` and ``sourcepos`` keywords

        Raises
        ------
        UnknownOptionError
            If ``option_bits`` carries bits outside the option table

        """
        members = decode_options(option_bits)
        return {
            "breaks": "hard" if RenderOption.HARDBREAKS in members else True,
            "safe": RenderOption.SAFE in members,
            "smart": RenderOption.SMART in members,
            "sourcepos": RenderOption.SOURCEPOS in members,
        }

    def render_kwargs(self, option_bits: int, target: OutputFormat) -> dict[str, Any]:
        """Return the keyword arguments for the ``paka.cmark`` function rendering ``target``."""
        kwargs = self.translate_options(option_bits)
        sourcepos = kwargs.pop("sourcepos")
        if target in _SOURCEPOS_FORMATS:
            if sourcepos:
                kwargs["sourcepos"] = True
        else:
            kwargs["width"] = self.width
        return kwargs

    @requires_dependencies("cmark", DEPS_CMARK)
    def render(self, source: str, option_bits: int, format_code: int) -> str:
        """Parse ``source`` and serialize it in the requested format.

        Raises
        ------
        ValueError
            If ``format_code`` is unknown or the reserved ``none`` code
        UnknownOptionError
            If ``option_bits`` carries bits outside the option table
        DependencyError
            If ``paka.cmark`` is not installed

        """
        from paka import cmark

        target = OutputFormat(format_code)
        if target is OutputFormat.NONE:
            raise ValueError("Format code 0 (none) cannot be rendered")

        render_function = getattr(cmark, _RENDER_FUNCTIONS[target])
        return render_function(source, **self.render_kwargs(option_bits, target))


class SerializedEngine:
    """Wrap an engine so that only one render runs at a time.

    Use this for engines with global mutable state. Batches still fan out to
    worker threads, but every engine call goes through one lock.

    Parameters
    ----------
    engine : RenderEngine
        The engine to guard

    """

    def __init__(self, engine: RenderEngine):
        """Initialize the wrapper around ``engine``."""
        self.engine = engine
        self._lock = threading.Lock()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.engine!r})"

    def render(self, source: str, option_bits: int, format_code: int) -> str:
        """Render through the wrapped engine while holding the lock."""
        with self._lock:
            return self.engine.render(source, option_bits, format_code)


_installed_engine: RenderEngine | None = None
_builtin_engine: CmarkEngine | None = None
_default_engine_lock = threading.Lock()


def get_default_engine(width: int = DEFAULT_WRAP_WIDTH) -> RenderEngine:
    """Return the process-wide default engine.

    Parameters
    ----------
    width : int, default 0
        Wrap width wanted by the caller. It only selects between built-in
        CmarkEngines; an engine installed with :func:`set_default_engine` is
        returned as is.

    Returns
    -------
    RenderEngine
        The installed engine, else a CmarkEngine created on first use

    """
    global _builtin_engine
    with _default_engine_lock:
        if _installed_engine is not None:
            return _installed_engine
        if width:
            return CmarkEngine(width=width)
        if _builtin_engine is None:
            _builtin_engine = CmarkEngine()
            logger.debug(f"Created default engine {_builtin_engine!r}")
        return _builtin_engine


def set_default_engine(engine: RenderEngine | None) -> None:
    """Replace the process-wide default engine.

    Parameters
    ----------
    engine : RenderEngine or None
        New default; None restores the lazily created CmarkEngine

    Raises
    ------
    TypeError
        If ``engine`` has no ``render`` method

    """
    global _installed_engine
    if engine is not None and not isinstance(engine, RenderEngine):
        raise TypeError(f"Engine must define render(source, option_bits, format_code), got {type(engine).__name__}")
    with _default_engine_lock:
        _installed_engine = engine


__all__ = [
    "RenderEngine",
    "CmarkEngine",
    "SerializedEngine",
    "get_default_engine",
    "set_default_engine",
]
