"""
Video metadata persistence.
"""

from .repository import InMemoryVideoRepository

__all__ = ["InMemoryVideoRepository"]
