"""Domain-specific exceptions for model_state.

This module defines the exception hierarchy for errors that occur while
loading, validating and persisting the model preference document.
"""

from __future__ import annotations

from pathlib import PurePath
from typing import Optional


class ModelStateError(Exception):
    """Base exception for all model_state errors.

    All domain-specific exceptions should inherit from this class.
    """


class CorruptStateError(ModelStateError):
    """Exception raised when an existing state file cannot be decoded.

    This covers invalid JSON, a top-level value that is not an object,
    and a missing or malformed ``recent`` field. The file on disk is
    never repaired or removed when this is raised.
    """

    def __init__(self, message: str, path: Optional[PurePath] = None) -> None:
        super().__init__(message)
        self.path = path


class PersistenceError(ModelStateError):
    """Exception raised when the state file cannot be written.

    This includes failures creating the state directory, writing the
    temporary file, or renaming it over the destination.
    """

    def __init__(self, message: str, path: Optional[PurePath] = None) -> None:
        super().__init__(message)
        self.path = path


class VariantKeyError(ModelStateError, ValueError):
    """Exception raised when a variant key is not of the form provider/model."""
