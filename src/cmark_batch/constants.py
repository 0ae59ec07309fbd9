#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Constants and default values for cmark_batch.

This module centralizes the fixed tables shared with the rendering engine and
the default configuration values used across the library.

Constants are organized by category:
1. Type Definitions - Literal types and type aliases
2. Engine Wire Contract - Option bit table and format code table
3. Dispatcher Defaults - Worker pool and timeout settings
4. Configuration - Config file names and environment variables
"""

from __future__ import annotations

from typing import Literal

# =============================================================================
# Type Definitions
# =============================================================================

OptionName = Literal["default", "sourcepos", "hardbreaks", "normalize", "smart", "validate_utf8", "safe"]

# "none" is understood by the engine but never accepted from callers
TargetFormat = Literal["html", "xml", "man", "commonmark", "latex"]

# =============================================================================
# Engine Wire Contract
# =============================================================================

# Must match the engine exactly
OPTION_BITS: dict[str, int] = {
    "default": 0,
    "sourcepos": 1,
    "hardbreaks": 2,
    "normalize": 4,
    "smart": 8,
    "validate_utf8": 16,
    "safe": 32,
}

FORMAT_CODES: dict[str, int] = {
    "none": 0,
    "html": 1,
    "xml": 2,
    "man": 3,
    "commonmark": 4,
    "latex": 5,
}

TARGET_FORMATS: tuple[TargetFormat, ...] = ("html", "xml", "man", "commonmark", "latex")

# =============================================================================
# Dispatcher Defaults
# =============================================================================

# Same ceiling concurrent.futures.ThreadPoolExecutor applies on its own
DEFAULT_MAX_WORKERS_CAP = 32
DEFAULT_TIMEOUT: float | None = None
DEFAULT_SERIALIZE_ENGINE = False
DEFAULT_WRAP_WIDTH = 0

# paka.cmark exposes to_html/to_xml/to_man/to_commonmark/to_latex
PAKA_CMARK_VERSION_SPEC = ">=2.0"
DEPS_CMARK: list[tuple[str, str, str]] = [("paka.cmark", "paka.cmark", PAKA_CMARK_VERSION_SPEC)]

# =============================================================================
# Configuration
# =============================================================================

CONFIG_SECTION = "cmark_batch"
CONFIG_FILENAMES = [".cmark_batch.toml", ".cmark_batch.yaml", ".cmark_batch.yml", ".cmark_batch.json"]

ENV_PREFIX = "CMARK_BATCH_"
ENV_CONFIG_PATH = f"{ENV_PREFIX}CONFIG"
ENV_MAX_WORKERS = f"{ENV_PREFIX}MAX_WORKERS"
ENV_TIMEOUT = f"{ENV_PREFIX}TIMEOUT"
ENV_SERIALIZE_ENGINE = f"{ENV_PREFIX}SERIALIZE_ENGINE"
ENV_DEFAULT_OPTIONS = f"{ENV_PREFIX}DEFAULT_OPTIONS"
ENV_WIDTH = f"{ENV_PREFIX}WIDTH"

TRUTHY_VALUES = ("true", "1", "yes", "on")
FALSY_VALUES = ("false", "0", "no", "off", "")
