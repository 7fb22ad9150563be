#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Custom exceptions for the html2blocks library.

Exception Hierarchy
-------------------
- Html2BlocksError (base exception)

  - ValidationError (option, mapping and allow-list validation)

  - ConfigError (configuration file discovery and loading)

  - DependencyError (missing optional parser backends)

  - MediaUploadError (media storage service failures)
    - NetworkSecurityError (URL, host, size or content-type violations)

Conversion itself never raises for content reasons: a node that cannot be
turned into a block is dropped, and a run that produces nothing returns the
raw input. These exceptions surface from configuration and from the media
store, where callers may want to handle them.

"""

from __future__ import annotations

from typing import Any


class Html2BlocksError(Exception):
    """Base exception class for all html2blocks-specific errors.

    Parameters
    ----------
    message : str
        Human-readable description of the error
    original_error : Exception, optional
        The original exception that caused this error, if applicable

    """

    def __init__(self, message: str, original_error: Exception | None = None):
        """Initialize the error with a message and optional original exception."""
        super().__init__(message)
        self.message = message
        self.original_error = original_error


class ValidationError(Html2BlocksError):
    """Exception raised for invalid options, mapping entries or policy entries.

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


class ConfigError(Html2BlocksError):
    """Exception raised when a configuration file cannot be read or parsed.

    Parameters
    ----------
    message : str
        Description of the configuration problem
    config_path : str, optional
        Path of the offending configuration file
    original_error : Exception, optional
        The original exception that caused this error

    """

    def __init__(self, message: str, config_path: str | None = None, original_error: Exception | None = None):
        """Initialize the configuration error."""
        super().__init__(message, original_error=original_error)
        self.config_path = config_path


class DependencyError(Html2BlocksError):
    """Exception raised when an optional parser backend is not installed.

    Parameters
    ----------
    message : str
        Description of the missing dependency
    missing_packages : list of str, optional
        Names of the packages to install
    original_error : Exception, optional
        The original exception that caused this error

    """

    def __init__(
        self,
        message: str,
        missing_packages: list[str] | None = None,
        original_error: Exception | None = None,
    ):
        """Initialize the dependency error."""
        self.missing_packages = missing_packages or []
        if self.missing_packages:
            message = f"{message}\nInstall with: pip install {' '.join(self.missing_packages)}"
        super().__init__(message, original_error=original_error)


class MediaUploadError(Html2BlocksError):
    """Exception raised when the media store cannot store an image.

    Parameters
    ----------
    message : str
        Description of the upload failure
    source_url : str, optional
        The image URL that was being stored
    original_error : Exception, optional
        The original exception that caused this error

    """

    def __init__(self, message: str, source_url: str | None = None, original_error: Exception | None = None):
        """Initialize the upload error."""
        super().__init__(message, original_error=original_error)
        self.source_url = source_url


class NetworkSecurityError(MediaUploadError):
    """Exception raised when a fetch violates network security constraints.

    Covers disallowed schemes or hosts, private network targets, oversize
    responses and unexpected content types.
    """


__all__ = [
    "Html2BlocksError",
    "ValidationError",
    "ConfigError",
    "DependencyError",
    "MediaUploadError",
    "NetworkSecurityError",
]
