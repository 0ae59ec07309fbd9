#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Custom exceptions for the cmark_batch library.

This module defines the exception classes raised while encoding options,
dispatching documents to the rendering engine, and applying caller callbacks.

Exception Hierarchy
-------------------
- CmarkBatchError (base exception)

  - ValidationError (argument shape and option validation)
    - UnknownOptionError (option tag outside the fixed vocabulary)

  - FormatError (unsupported/unknown output formats)
    - UnknownFormatError (format tag outside the fixed vocabulary)

  - RenderError (the engine failed on one document)

  - CallbackError (a caller-supplied callback raised)

  - BatchError (one or more items of a per-item batch failed)

  - DependencyError (missing/incompatible engine packages)

"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Sequence

if TYPE_CHECKING:
    from cmark_batch.dispatcher import RenderOutcome


class CmarkBatchError(Exception):
    """Base exception class for all cmark_batch-specific errors.

    Catching this will catch every error raised by the library itself.
    Errors raised by caller-owned code are always wrapped (see
    :class:`CallbackError`) so they are also covered.

    Parameters
    ----------
    message : str
        Human-readable description of the error
    original_error : Exception, optional
        The original exception that caused this error, if applicable

    Attributes
    ----------
    message : str
        The error message
    original_error : Exception or None
        The wrapped original exception, if any

    """

    def __init__(self, message: str, original_error: Exception | None = None):
        """Initialize the error with a message and optional original exception."""
        super().__init__(message)
        self.message = message
        self.original_error = original_error


class ValidationError(CmarkBatchError):
    """Exception raised for invalid input parameters or options.

    This covers argument-shape problems at the public API, such as passing a
    single document to a per-item API or a non-callable where a callback is
    required, as well as malformed configuration values.

    Parameters
    ----------
    message : str
        Description of the validation error
    parameter_name : str, optional
        Name of the invalid parameter
    parameter_value : any, optional
        The invalid value that was provided
    original_error : Exception, optional
        The original exception that caused this error

    Attributes
    ----------
    parameter_name : str or None
        The name of the problematic parameter
    parameter_value : any
        The value that caused the error

    """

    def __init__(
        self,
        message: str,
        parameter_name: str | None = None,
        parameter_value: Any = None,
        original_error: Exception | None = None,
    ):
        """Initialize the validation error with parameter details."""
        super().__init__(message, original_error=original_error)
        self.parameter_name = parameter_name
        self.parameter_value = parameter_value


class UnknownOptionError(ValidationError):
    """Exception raised when an option tag is not part of the vocabulary.

    Unknown tags are rejected instead of ignored so that a typo such as
    ``"smrat"`` never silently renders with the wrong flags.

    Parameters
    ----------
    option : any
        The offending option tag
    supported_options : list[str], optional
        Names of the accepted option tags
    message : str, optional
        Custom error message. If not provided, one is generated

    Attributes
    ----------
    option : any
        The offending option tag
    supported_options : list[str]
        Accepted option tags

    """

    def __init__(self, option: Any, supported_options: Sequence[str] | None = None, message: str | None = None):
        """Initialize the unknown option error."""
        supported = list(supported_options or [])
        if message is None:
            message = f"Unknown option: {option!r}"
            if supported:
                message += f". Supported options: {', '.join(supported)}"
        super().__init__(message, parameter_name="options", parameter_value=option)
        self.option = option
        self.supported_options = supported


class FormatError(CmarkBatchError):
    """Exception raised when an output format is not supported.

    Parameters
    ----------
    message : str, optional
        Custom error message
    format_type : str, optional
        The unsupported format
    supported_formats : list[str], optional
        List of supported formats for reference
    original_error : Exception, optional
        The original exception that caused this error

    Attributes
    ----------
    format_type : str or None
        The format that was not supported
    supported_formats : list[str] or None
        Available supported formats

    """

    def __init__(
        self,
        message: str | None = None,
        format_type: str | None = None,
        supported_formats: list[str] | None = None,
        original_error: Exception | None = None,
    ):
        """Initialize the format error."""
        if message is None:
            if format_type:
                message = f"Unsupported format: '{format_type}'"
                if supported_formats:
                    message += f". Supported formats: {', '.join(supported_formats)}"
            else:
                message = "Output format is not supported"

        super().__init__(message, original_error=original_error)
        self.format_type = format_type
        self.supported_formats = supported_formats


class UnknownFormatError(FormatError):
    """Exception raised when a format tag is not part of the vocabulary."""


class RenderError(CmarkBatchError):
    """Exception raised when the rendering engine fails on a document.

    Parameters
    ----------
    message : str
        Description of the rendering failure
    index : int, optional
        Position of the document in its batch; None for a single document
    format_code : int, optional
        Engine format code the render was attempted with
    original_error : Exception, optional
        The underlying engine exception

    Attributes
    ----------
    index : int or None
        Batch position of the failed document
    format_code : int or None
        Engine format code

    """

    def __init__(
        self,
        message: str,
        index: int | None = None,
        format_code: int | None = None,
        original_error: Exception | None = None,
    ):
        """Initialize the render error."""
        super().__init__(message, original_error)
        self.index = index
        self.format_code = format_code


class CallbackError(CmarkBatchError):
    """Exception raised when a caller-supplied callback fails.

    Parameters
    ----------
    message : str
        Description of the failure
    index : int, optional
        Item position for per-item callbacks; None for whole-batch callbacks
    original_error : Exception, optional
        The exception raised by the callback

    """

    def __init__(self, message: str, index: int | None = None, original_error: Exception | None = None):
        """Initialize the callback error."""
        super().__init__(message, original_error)
        self.index = index


class BatchError(CmarkBatchError):
    """Exception raised when some items of a per-item batch failed.

    The full list of outcomes travels with the exception, so sibling
    successes remain available to the caller.

    Parameters
    ----------
    outcomes : list[RenderOutcome]
        One outcome per input document, in input order

    Attributes
    ----------
    outcomes : list[RenderOutcome]
        Per-index outcomes
    failed_indices : list[int]
        Indices whose outcome holds an error

    """

    def __init__(self, outcomes: list[RenderOutcome], message: str | None = None):
        """Initialize the batch error from per-index outcomes."""
        failed = [outcome.index for outcome in outcomes if not outcome.ok]
        if message is None:
            message = f"{len(failed)} of {len(outcomes)} documents failed (indices: {failed})"
        first_error = next((outcome.error for outcome in outcomes if outcome.error is not None), None)
        super().__init__(message, original_error=first_error)
        self.outcomes = outcomes
        self.failed_indices = failed

    @property
    def errors(self) -> dict[int, Exception]:
        """Map each failed index to its error."""
        return {outcome.index: outcome.error for outcome in self.outcomes if outcome.error is not None}


class DependencyError(CmarkBatchError):
    """Exception raised when the engine's packages are not available.

    Parameters
    ----------
    converter_name : str
        Name of the component requiring dependencies
    missing_packages : list[tuple[str, str]]
        List of (package_name, version_spec) tuples for missing packages
    version_mismatches : list[tuple[str, str, str]], optional
        List of (package_name, required_version, installed_version) tuples
    install_command : str, optional
        Suggested pip install command to resolve the issue
    message : str, optional
        Custom error message. If not provided, generates a helpful message

    """

    def __init__(
        self,
        converter_name: str,
        missing_packages: list[tuple[str, str]],
        version_mismatches: list[tuple[str, str, str]] | None = None,
        install_command: str = "",
        message: str | None = None,
        original_import_error: ImportError | None = None,
    ):
        """Initialize the dependency error with package details."""
        version_mismatches = version_mismatches or []
        self.original_import_error = original_import_error
        if message is None:
            message_parts = []

            if missing_packages:
                pkg_list = ", ".join(f"'{name}{spec}'" if spec else f"'{name}'" for name, spec in missing_packages)
                message_parts.append(f"{converter_name.upper()} engine requires the following packages: {pkg_list}")

            if version_mismatches:
                mismatch_str = ", ".join(
                    f"'{name}' (requires {required}, but {installed} is installed)"
                    for name, required, installed in version_mismatches
                )
                message_parts.append(f"{converter_name.upper()} engine has version mismatches: {mismatch_str}")

            message = "\n".join(message_parts)

            if install_command:
                message += f"\nInstall with: {install_command}"
            else:
                all_packages = missing_packages + [(name, req) for name, req, _ in version_mismatches]
                if all_packages:
                    packages_str = " ".join(f'"{name}{spec}"' if spec else name for name, spec in all_packages)
                    message += f"\nInstall with: pip install --upgrade {packages_str}"

        super().__init__(message)
        self.converter_name = converter_name
        self.missing_packages = missing_packages
        self.version_mismatches = version_mismatches
        self.install_command = install_command
