"""Scheduling engines."""

from .base import BaseScheduler
from .optimal import OptimalScheduler

__all__ = [
    "BaseScheduler",
    "OptimalScheduler",
]
