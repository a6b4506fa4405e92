"""
Utility functions
"""
from supportsphere.utils.logger import setup_logger, get_logger
from supportsphere.utils.validators import (
    require_text,
    sanitize_input,
    truncate_preview,
)

__all__ = [
    "setup_logger",
    "get_logger",
    "require_text",
    "sanitize_input",
    "truncate_preview",
]
