"""Concurrent multi-document word-frequency pipeline."""

__version__ = "0.1.0"
