"""
Interfaces - User-facing applications.

- api: FastAPI REST API
- cli: Command-line interface
"""

__all__ = ["api", "cli"]
