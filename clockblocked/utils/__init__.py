"""Utility modules for the ClockBlocked alarm engine."""

from . import formatting

__all__ = ["formatting"]
