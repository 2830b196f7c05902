"""Configuration loading utility (re-exported for the I/O layer)."""

from production_scheduler.config import SchedulerConfig, load_config

__all__ = ["load_config", "SchedulerConfig"]
