"""Unified diff parsing, CI build information and review comment writers."""

__version__ = "0.1.0"