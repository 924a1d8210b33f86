"""
Error types raised by docbinder.

Fatal errors (a missing content root or index, a tree that fails validation)
stop the pipeline; the others are caught at the component that raises them,
logged, and replaced with a default or recorded as a per-document failure.
"""

from pathlib import Path
from typing import Optional


class DocBinderError(Exception):
    """Base class for all docbinder errors."""


class RecoverableParseError(DocBinderError):
    """Malformed metadata, folder metadata or checksum store; callers substitute a default."""

    def __init__(self, message: str, path: Optional[Path] = None):
        super().__init__(message)
        self.message = message
        self.path = path

    def __str__(self) -> str:
        if self.path is not None:
            return f"{self.message} ({self.path})"
        return self.message


class MissingResourceError(DocBinderError):
    """A required file or directory does not exist."""

    def __init__(self, message: str, path: Optional[Path] = None):
        super().__init__(message)
        self.message = message
        self.path = path

    def __str__(self) -> str:
        if self.path is not None:
            return f"{self.message}: {self.path}"
        return self.message


class TreeValidationError(DocBinderError):
    """A content tree violates a structural invariant."""

    def __init__(self, message: str, label_path: str = ""):
        super().__init__(message)
        self.message = message
        self.label_path = label_path

    def __str__(self) -> str:
        if self.label_path:
            return f"{self.message} at '{self.label_path}'"
        return self.message


class ConversionError(DocBinderError):
    """Rendering a single document failed."""

    def __init__(self, message: str, path: Optional[Path] = None,
                 original: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        self.path = path
        self.original = original

    def __str__(self) -> str:
        parts = [self.message]
        if self.path is not None:
            parts.append(f"Path: {self.path}")
        if self.original is not None:
            parts.append(f"Original: {type(self.original).__name__}: {self.original}")
        return " | ".join(parts)
