"""Command implementations for blog-digest."""

from . import summarize

__all__ = ["summarize"]
