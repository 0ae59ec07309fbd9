#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/cmark_batch/options.py
"""Option and format encoding for the rendering engine.

The engine takes two integers alongside each document: a bitmask of
rendering options and a code selecting the output format. This module maps
the symbolic vocabulary callers use onto those integers.

Examples
--------
    >>> from cmark_batch.options import RenderOption, encode_format, encode_options
    >>> encode_options(["smart", RenderOption.SAFE])
    40
    >>> encode_format("latex")
    5

"""

from __future__ import annotations

from enum import IntEnum, IntFlag
from typing import Iterable, Mapping, Union

from cmark_batch.constants import FORMAT_CODES, OPTION_BITS, TARGET_FORMATS
from cmark_batch.exceptions import UnknownFormatError, UnknownOptionError, ValidationError


class RenderOption(IntFlag):
    """Rendering flags understood by the engine."""

    DEFAULT = OPTION_BITS["default"]
    SOURCEPOS = OPTION_BITS["sourcepos"]
    HARDBREAKS = OPTION_BITS["hardbreaks"]
    NORMALIZE = OPTION_BITS["normalize"]
    SMART = OPTION_BITS["smart"]
    VALIDATE_UTF8 = OPTION_BITS["validate_utf8"]
    SAFE = OPTION_BITS["safe"]


class OutputFormat(IntEnum):
    """Output formats understood by the engine.

    ``NONE`` is reserved by the engine and is never accepted from callers.
    """

    NONE = FORMAT_CODES["none"]
    HTML = FORMAT_CODES["html"]
    XML = FORMAT_CODES["xml"]
    MAN = FORMAT_CODES["man"]
    COMMONMARK = FORMAT_CODES["commonmark"]
    LATEX = FORMAT_CODES["latex"]


OptionTag = Union[RenderOption, str]
OptionsLike = Union[OptionTag, Iterable[OptionTag], None]
FormatLike = Union[OutputFormat, str]

_ALL_OPTION_BITS = 0
for _bit in OPTION_BITS.values():
    _ALL_OPTION_BITS |= _bit


def _normalize_name(tag: str) -> str:
    # ":smart" symbol spelling is accepted as well
    return tag.strip().lstrip(":").lower()


def parse_option(tag: object) -> RenderOption:
    """Resolve one option tag to its :class:`RenderOption` member.

    Parameters
    ----------
    tag : RenderOption or str
        Enum member or option name (case-insensitive)

    Returns
    -------
    RenderOption
        The matching member

    Raises
    ------
    UnknownOptionError
        If the tag is not part of the option vocabulary

    """
    if isinstance(tag, RenderOption):
        return tag
    if isinstance(tag, str):
        name = _normalize_name(tag)
        if name in OPTION_BITS:
            return RenderOption[name.upper()]
    raise UnknownOptionError(tag, supported_options=list(OPTION_BITS))


def _iter_tags(options: OptionsLike) -> Iterable[object]:
    if options is None:
        return ()
    if isinstance(options, (str, RenderOption)):
        return (options,)
    if isinstance(options, (bytes, bytearray, Mapping)):
        raise ValidationError(
            f"Options must be an option name or a list of option names, got {type(options).__name__}",
            parameter_name="options",
            parameter_value=options,
        )
    if isinstance(options, Iterable):
        return options
    # A bare int or other scalar is not a tag we know about
    return (options,)


def encode_options(options: OptionsLike = None) -> int:
    """Encode a set of option tags into the engine bitmask.

    Parameters
    ----------
    options : RenderOption, str, iterable of those, or None
        Option tags. ``None`` or an empty iterable mean ``default``.
        Order does not matter and duplicates are harmless.

    Returns
    -------
    int
        Bitwise OR of every tag's bit

    Raises
    ------
    UnknownOptionError
        On the first tag outside the vocabulary
    ValidationError
        If ``options`` is bytes or a mapping

    Examples
    --------
        >>> encode_options(["sourcepos", "hardbreaks"])
        3
        >>> encode_options(None)
        0

    """
    bitmask = 0
    for tag in _iter_tags(options):
        bitmask |= int(parse_option(tag))
    return bitmask


def decode_options(bitmask: int) -> frozenset[RenderOption]:
    """Expand an engine bitmask back into its option members.

    Parameters
    ----------
    bitmask : int
        Value produced by :func:`encode_options`

    Returns
    -------
    frozenset[RenderOption]
        Members whose bit is set; empty for ``default``

    Raises
    ------
    UnknownOptionError
        If the bitmask is negative or carries bits outside the table

    """
    if bitmask < 0 or bitmask & ~_ALL_OPTION_BITS:
        raise UnknownOptionError(bitmask, supported_options=list(OPTION_BITS))
    return frozenset(RenderOption[name.upper()] for name, bit in OPTION_BITS.items() if bit and bitmask & bit)


def parse_format(fmt: object) -> OutputFormat:
    """Resolve a format tag to its :class:`OutputFormat` member.

    Raises
    ------
    UnknownFormatError
        If the tag is unknown or names the reserved ``none`` format

    """
    member: OutputFormat | None = None
    if isinstance(fmt, OutputFormat):
        member = fmt
    elif isinstance(fmt, str):
        name = _normalize_name(fmt)
        if name in FORMAT_CODES:
            member = OutputFormat[name.upper()]

    if member is None or member is OutputFormat.NONE:
        label = fmt.name.lower() if isinstance(fmt, OutputFormat) else str(fmt)
        raise UnknownFormatError(format_type=label, supported_formats=list(TARGET_FORMATS))
    return member


def encode_format(fmt: FormatLike) -> int:
    """Encode an output format into the engine format code.

    Parameters
    ----------
    fmt : OutputFormat or str
        One of html, xml, man, commonmark, latex

    Returns
    -------
    int
        Engine format code

    Raises
    ------
    UnknownFormatError
        If the format is not supported

    """
    return int(parse_format(fmt))


__all__ = [
    "RenderOption",
    "OutputFormat",
    "OptionsLike",
    "FormatLike",
    "parse_option",
    "parse_format",
    "encode_options",
    "decode_options",
    "encode_format",
]
