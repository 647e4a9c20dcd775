"""Exceptions for soft delete operations."""

from typing import Optional


class SoftDeleteError(Exception):
    """Base exception for soft delete operations."""

    def __init__(self, message: str, model_name: Optional[str] = None):
        self.model_name = model_name
        super().__init__(message)


class MissingArgumentError(SoftDeleteError, TypeError):
    """Raised when a mandatory argument is absent or of the wrong kind."""

    def __init__(self, message: str, model_name: Optional[str] = None):
        super().__init__(message, model_name=model_name)


class SchemaError(SoftDeleteError):
    """Raised when a model or document is used in a way its schema cannot serve."""

    def __init__(self, message: str, model_name: Optional[str] = None):
        super().__init__(message, model_name=model_name)
