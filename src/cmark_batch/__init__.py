"""cmark_batch - Concurrent batch rendering of CommonMark documents.

cmark_batch renders Markdown to HTML, XML, groff man, normalized CommonMark
and LaTeX through the cmark reference implementation. A single document is rendered and returned
as text; a list of documents is fanned out to a thread pool and the rendered
texts come back in input order, however the work interleaved.

Key Features
------------
- One ``to_<format>`` function per output format, accepting one document or a batch
- Order-preserving concurrent rendering with a configurable pool and deadline
- Whole-batch and per-item callbacks for post-processing results
- A fixed, validated option vocabulary (``smart``, ``safe``, ``sourcepos``, ...)
- Pluggable rendering engines behind a small protocol
- Configuration from TOML, YAML, JSON, ``pyproject.toml`` or the environment

Requirements
------------
- Python 3.10+
- paka.cmark (cmark bindings)

Examples
--------
Rendering a single document:

    >>> from cmark_batch import to_html
    >>> to_html("test")
    '<p>test</p>\\n'

Rendering a batch with options:

    >>> from cmark_batch import to_commonmark
    >>> to_commonmark(["en-dash --", "ellipsis..."], ["smart"])
    ['en-dash –\\n', 'ellipsis…\\n']

Post-processing each item:

    >>> from cmark_batch import to_html_each
    >>> to_html_each(["list", "test"], str.strip)
    ['<p>list</p>', '<p>test</p>']

See Also
--------
cmark_batch.dispatcher : Concurrent fan-out/fan-in of documents
cmark_batch.engine : Rendering engine protocol and implementations

"""

#  Copyright (c) 2025 Tom Villani, Ph.D.

# Check Python version before any imports
import sys

if sys.version_info < (3, 10):
    raise ImportError(
        "cmark_batch requires Python 3.10 or later. "
        f"You are using Python {sys.version_info.major}.{sys.version_info.minor}."
    )

__version__ = "1.0.0"

from cmark_batch.api import (  # noqa: E402
    convert,
    convert_each,
    render_outcomes,
    to_commonmark,
    to_commonmark_each,
    to_html,
    to_html_each,
    to_latex,
    to_latex_each,
    to_man,
    to_man_each,
    to_xml,
    to_xml_each,
)
from cmark_batch.config import BatchConfig, load_config  # noqa: E402
from cmark_batch.dispatcher import BatchDispatcher, RenderOutcome  # noqa: E402
from cmark_batch.engine import (  # noqa: E402
    CmarkEngine,
    RenderEngine,
    SerializedEngine,
    get_default_engine,
    set_default_engine,
)
from cmark_batch.exceptions import (  # noqa: E402
    BatchError,
    CallbackError,
    CmarkBatchError,
    DependencyError,
    FormatError,
    RenderError,
    UnknownFormatError,
    UnknownOptionError,
    ValidationError,
)
from cmark_batch.logging_utils import configure_logging  # noqa: E402
from cmark_batch.options import (  # noqa: E402
    OutputFormat,
    RenderOption,
    decode_options,
    encode_format,
    encode_options,
)
from cmark_batch.progress import ProgressCallback, ProgressEvent  # noqa: E402

__all__ = [
    "__version__",
    # Rendering
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
    "convert",
    "convert_each",
    "render_outcomes",
    # Options
    "RenderOption",
    "OutputFormat",
    "encode_options",
    "decode_options",
    "encode_format",
    # Engines and dispatch
    "RenderEngine",
    "CmarkEngine",
    "SerializedEngine",
    "get_default_engine",
    "set_default_engine",
    "BatchDispatcher",
    "RenderOutcome",
    # Configuration
    "BatchConfig",
    "load_config",
    "configure_logging",
    # Progress
    "ProgressEvent",
    "ProgressCallback",
    # Exceptions
    "CmarkBatchError",
    "ValidationError",
    "UnknownOptionError",
    "FormatError",
    "UnknownFormatError",
    "RenderError",
    "CallbackError",
    "BatchError",
    "DependencyError",
]
