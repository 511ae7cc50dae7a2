"""Curses music player with a local library, helper-driven online search and download, and synced lyrics."""

__version__ = "0.1.0"