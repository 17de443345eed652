"""Lightweight package init for app.

Avoid importing the FastAPI application at import time so tests that only
need configs, models or services stay free of startup side effects.
"""

__all__ = []
