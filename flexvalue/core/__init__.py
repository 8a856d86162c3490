"""Core data structures and constants."""

from . import canon, types

__all__ = ["canon", "types"]
