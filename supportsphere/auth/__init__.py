"""
Identity for the data layer
"""
from supportsphere.auth.session import Session

__all__ = ["Session"]
