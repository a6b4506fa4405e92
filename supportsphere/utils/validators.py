"""
Input validation utilities
"""
from typing import Optional

from supportsphere.exceptions import ValidationError


def sanitize_input(text: str, max_length: Optional[int] = 10000) -> str:
    """
    Sanitize user input

    Args:
        text: Input text to sanitize
        max_length: Maximum allowed length (None keeps the full text)

    Returns:
        Sanitized text
    """
    # Remove null bytes
    text = text.replace('\x00', '')

    # Truncate to max length
    if max_length is not None and len(text) > max_length:
        text = text[:max_length]

    return text.strip()


def require_text(value: Optional[str], field: str) -> str:
    """
    Return the sanitized value or raise if nothing is left.

    Raises:
        ValidationError: If value is None, empty or whitespace only
    """
    if value is None:
        raise ValidationError(f"{field} is required", field=field)
    cleaned = sanitize_input(value, max_length=None)
    if not cleaned:
        raise ValidationError(f"{field} must not be empty", field=field)
    return cleaned


def truncate_preview(text: str, length: int = 100) -> str:
    """First ``length`` characters of a message body, for audit details."""
    return text[:length]
