#  Copyright (c) 2025 Tom Villani, Ph.D.

"""Dispatcher configuration and configuration file loading.

Settings can come from, in increasing priority:

1. The defaults on :class:`BatchConfig`
2. A configuration file (TOML, YAML, JSON, or the ``[tool.cmark_batch]``
   table of ``pyproject.toml``)
3. ``CMARK_BATCH_*`` environment variables

Example ``.cmark_batch.toml``::

    max_workers = 8
    timeout = 30
    default_options = ["smart", "safe"]

"""

from __future__ import annotations

import json
import logging
import os
import sys
from dataclasses import dataclass, fields, replace
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib  # type: ignore[import-not-found,unused-ignore]

import yaml

from cmark_batch.constants import (
    CONFIG_FILENAMES,
    CONFIG_SECTION,
    DEFAULT_SERIALIZE_ENGINE,
    DEFAULT_TIMEOUT,
    DEFAULT_WRAP_WIDTH,
    ENV_CONFIG_PATH,
    ENV_DEFAULT_OPTIONS,
    ENV_MAX_WORKERS,
    ENV_SERIALIZE_ENGINE,
    ENV_TIMEOUT,
    ENV_WIDTH,
    FALSY_VALUES,
    TRUTHY_VALUES,
)
from cmark_batch.exceptions import ValidationError
from cmark_batch.options import RenderOption, parse_option

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BatchConfig:
    """Settings for the batch dispatcher.

    Parameters
    ----------
    max_workers : int or None, default None
        Thread pool size. None sizes the pool as ``min(32, batch size, cpu + 4)``.
    timeout : float or None, default None
        Seconds the dispatcher waits for a batch to complete once dispatched.
        Documents still unfinished at the deadline fail with a RenderError.
        None waits indefinitely.
    serialize_engine : bool, default False
        Guard every engine call with a single lock, for engines that are not
        safe to call concurrently.
    default_options : tuple of RenderOption, default ()
        Options OR-ed into every render on top of the per-call options.
    width : int, default 0
        Wrap width passed to the default CmarkEngine (0 disables wrapping).

    """

    max_workers: Optional[int] = None
    timeout: Optional[float] = DEFAULT_TIMEOUT
    serialize_engine: bool = DEFAULT_SERIALIZE_ENGINE
    default_options: tuple[RenderOption, ...] = ()
    width: int = DEFAULT_WRAP_WIDTH

    def __post_init__(self) -> None:
        """Validate numeric ranges and normalize option tags.

        Raises
        ------
        ValueError
            If any field value is outside its valid range.
        UnknownOptionError
            If ``default_options`` holds a tag outside the vocabulary.

        """
        if self.max_workers is not None and self.max_workers <= 0:
            raise ValueError(f"max_workers must be positive, got {self.max_workers}")
        if self.timeout is not None and self.timeout <= 0:
            raise ValueError(f"timeout must be positive, got {self.timeout}")
        if self.width < 0:
            raise ValueError(f"width must be non-negative, got {self.width}")
        tags = (self.default_options,) if isinstance(self.default_options, str) else self.default_options
        object.__setattr__(self, "default_options", tuple(parse_option(tag) for tag in tags))

    def create_updated(self, **kwargs: Any) -> BatchConfig:
        """Create a new config with updated field values."""
        return replace(self, **kwargs)


def _load_pyproject_section(pyproject_path: Path) -> Dict[str, Any]:
    with open(pyproject_path, "rb") as f:
        data = tomllib.load(f)
    section = data.get("tool", {}).get(CONFIG_SECTION, {})
    if not isinstance(section, dict):
        raise ValidationError(
            f"[tool.{CONFIG_SECTION}] section in {pyproject_path} must be a table, got {type(section).__name__}",
            parameter_name="config_path",
            parameter_value=str(pyproject_path),
        )
    return section


def find_config_in_parents(start_dir: Optional[Path] = None) -> Optional[Path]:
    """Find a configuration file by searching parent directories.

    Each directory from ``start_dir`` up to the filesystem root is checked
    for the dedicated config files first, then for a ``pyproject.toml`` that
    has a ``[tool.cmark_batch]`` table.

    Parameters
    ----------
    start_dir : Path, optional
        Starting directory for search, defaults to current working directory

    Returns
    -------
    Path or None
        Path to first config file found, or None if not found

    """
    current = (start_dir or Path.cwd()).resolve()

    while True:
        for filename in CONFIG_FILENAMES:
            config_path = current / filename
            if config_path.is_file():
                return config_path

        pyproject_path = current / "pyproject.toml"
        if pyproject_path.is_file():
            try:
                if _load_pyproject_section(pyproject_path):
                    return pyproject_path
            except (tomllib.TOMLDecodeError, ValidationError) as e:
                logger.warning(f"Ignoring unreadable {pyproject_path}: {e}")

        parent = current.parent
        if parent == current:
            return None
        current = parent


def load_config_file(config_path: Path | str) -> Dict[str, Any]:
    """Load raw settings from a JSON, TOML, YAML, or pyproject.toml file.

    Parameters
    ----------
    config_path : Path or str
        Path to the configuration file

    Returns
    -------
    dict
        Settings mapping as read from the file

    Raises
    ------
    ValidationError
        If the file is missing, cannot be parsed, or has an unsupported extension

    """
    config_path = Path(config_path)

    if not config_path.is_file():
        raise ValidationError(
            f"Configuration file does not exist: {config_path}",
            parameter_name="config_path",
            parameter_value=str(config_path),
        )

    ext = config_path.suffix.lower()
    try:
        if config_path.name.lower() == "pyproject.toml":
            return _load_pyproject_section(config_path)
        if ext == ".toml":
            with open(config_path, "rb") as f:
                data = tomllib.load(f)
        elif ext in (".yaml", ".yml"):
            with open(config_path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        elif ext == ".json":
            with open(config_path, encoding="utf-8") as f:
                data = json.load(f)
        else:
            raise ValidationError(
                f"Unsupported config file format: {ext}. Use .json, .toml, or .yaml",
                parameter_name="config_path",
                parameter_value=str(config_path),
            )
    except ValidationError:
        raise
    except (OSError, tomllib.TOMLDecodeError, yaml.YAMLError, json.JSONDecodeError) as e:
        raise ValidationError(
            f"Error reading config file {config_path}: {e}",
            parameter_name="config_path",
            parameter_value=str(config_path),
            original_error=e,
        ) from e

    if not isinstance(data, dict):
        raise ValidationError(
            f"Configuration file {config_path} must contain a mapping, got {type(data).__name__}",
            parameter_name="config_path",
            parameter_value=str(config_path),
        )
    return data


def _parse_bool(name: str, value: str) -> bool:
    normalized = value.strip().lower()
    if normalized in TRUTHY_VALUES:
        return True
    if normalized in FALSY_VALUES:
        return False
    raise ValidationError(f"{name} must be a boolean, got {value!r}", parameter_name=name, parameter_value=value)


def _env_overrides(environ: Mapping[str, str]) -> Dict[str, Any]:
    overrides: Dict[str, Any] = {}
    if ENV_MAX_WORKERS in environ:
        overrides["max_workers"] = environ[ENV_MAX_WORKERS]
    if ENV_TIMEOUT in environ:
        overrides["timeout"] = environ[ENV_TIMEOUT]
    if ENV_SERIALIZE_ENGINE in environ:
        overrides["serialize_engine"] = _parse_bool(ENV_SERIALIZE_ENGINE, environ[ENV_SERIALIZE_ENGINE])
    if ENV_DEFAULT_OPTIONS in environ:
        overrides["default_options"] = [tag for tag in environ[ENV_DEFAULT_OPTIONS].split(",") if tag.strip()]
    if ENV_WIDTH in environ:
        overrides["width"] = environ[ENV_WIDTH]
    return overrides


def _coerce(name: str, value: Any) -> Any:
    if name in ("max_workers", "timeout") and value in (None, "", "none"):
        return None
    try:
        if name in ("max_workers", "width"):
            if isinstance(value, bool):
                raise TypeError("booleans are not integers here")
            return int(value)
        if name == "timeout":
            return float(value)
    except (TypeError, ValueError) as e:
        raise ValidationError(
            f"Invalid value for {name}: {value!r}", parameter_name=name, parameter_value=value, original_error=e
        ) from e
    if name == "serialize_engine" and isinstance(value, str):
        return _parse_bool(name, value)
    if name == "serialize_engine":
        return bool(value)
    if name == "default_options" and isinstance(value, str):
        return (value,)
    if name == "default_options":
        return tuple(value)
    return value


def build_config(settings: Mapping[str, Any], base: Optional[BatchConfig] = None) -> BatchConfig:
    """Build a :class:`BatchConfig` from a settings mapping.

    Parameters
    ----------
    settings : Mapping
        Field names to raw values, as read from a file or the environment.
        Dashes in keys are accepted in place of underscores.
    base : BatchConfig, optional
        Config to update; defaults to a fresh BatchConfig

    Returns
    -------
    BatchConfig
        The merged configuration

    Raises
    ------
    ValidationError
        On unknown keys or values that cannot be converted

    """
    known = {f.name for f in fields(BatchConfig)}
    updates: Dict[str, Any] = {}
    for raw_key, value in settings.items():
        key = str(raw_key).replace("-", "_")
        if key not in known:
            raise ValidationError(
                f"Unknown configuration key: {raw_key!r}. Known keys: {', '.join(sorted(known))}",
                parameter_name=str(raw_key),
                parameter_value=value,
            )
        updates[key] = _coerce(key, value)

    base = base or BatchConfig()
    try:
        return base.create_updated(**updates)
    except ValueError as e:
        raise ValidationError(str(e), parameter_name="config", original_error=e) from e


def load_config(
    path: Path | str | None = None,
    *,
    discover: bool = False,
    environ: Optional[Mapping[str, str]] = None,
) -> BatchConfig:
    """Load the dispatcher configuration.

    Parameters
    ----------
    path : Path or str, optional
        Explicit configuration file. Without it, ``CMARK_BATCH_CONFIG`` is
        consulted, then (with ``discover=True``) the parent directories of
        the working directory.
    discover : bool, default False
        Search parent directories for a configuration file
    environ : Mapping, optional
        Environment to read; defaults to ``os.environ``

    Returns
    -------
    BatchConfig
        Defaults, overlaid with the file, overlaid with the environment

    Raises
    ------
    ValidationError
        If the file cannot be read or holds invalid settings

    """
    environ = os.environ if environ is None else environ

    if path is None and environ.get(ENV_CONFIG_PATH):
        path = environ[ENV_CONFIG_PATH]
    if path is None and discover:
        path = find_config_in_parents()

    config = BatchConfig()
    if path is not None:
        logger.debug(f"Loading configuration from {path}")
        config = build_config(load_config_file(path), config)

    overrides = _env_overrides(environ)
    if overrides:
        config = build_config(overrides, config)
    return config


@lru_cache(maxsize=1)
def get_default_config() -> BatchConfig:
    """Return the cached configuration used when no ``config`` is passed."""
    return load_config()


def reset_default_config() -> None:
    """Clear the cached default configuration."""
    get_default_config.cache_clear()


__all__ = [
    "BatchConfig",
    "build_config",
    "find_config_in_parents",
    "load_config",
    "load_config_file",
    "get_default_config",
    "reset_default_config",
]
