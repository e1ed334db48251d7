"""Textual-based TUI for watching queries"""

from .app import QueryListApp

__all__ = ["QueryListApp"]
