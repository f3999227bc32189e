"""Telegram personality profiling quiz bot."""

__version__ = "1.0.0"
