"""
SupportSphere error taxonomy.

Hierarchy:
    SupportSphereError (base)
    ├── AuthRequired        (no authenticated actor)
    ├── ValidationError     (missing or empty required input)
    ├── PersistenceError    (Supabase call failed)
    └── InvalidTransition   (status change not allowed)

A missing single entity is not an error: reads return ``None``.
"""
from typing import Any, Dict, Optional


class SupportSphereError(Exception):
    """Base class for every error raised by the data layer."""

    def __init__(self, message: str, code: Optional[str] = None):
        self.message = message
        self.code = code or self.__class__.__name__
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": self.code,
            "message": self.message,
        }


class AuthRequired(SupportSphereError):
    """Raised by write operations when the session has no actor."""

    def __init__(self, message: str = "Not authenticated"):
        super().__init__(message)


class ValidationError(SupportSphereError):
    """Input failed validation before any network call was made."""

    def __init__(self, message: str, field: Optional[str] = None):
        self.field = field
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        result = super().to_dict()
        if self.field:
            result["field"] = self.field
        return result


class PersistenceError(SupportSphereError):
    """
    A primary gateway call failed.

    ``message`` is the raw gateway error text; ``operation`` names the
    repository step that issued the call.
    """

    def __init__(self, message: str, operation: Optional[str] = None):
        self.operation = operation
        super().__init__(message)


class InvalidTransition(SupportSphereError):
    """Requested status is not reachable from the ticket's current status."""

    def __init__(self, current: str, requested: str):
        self.current = current
        self.requested = requested
        super().__init__(f"Invalid ticket status transition: {current} -> {requested}")
