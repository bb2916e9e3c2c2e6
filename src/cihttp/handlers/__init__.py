"""
Request handlers.
"""

from .files import FileResponder

__all__ = ["FileResponder"]
