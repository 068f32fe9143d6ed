"""
Memory Adapter - Process-local caches.
"""

from .cache import TTLCache

__all__ = ["TTLCache"]
