"""Production task scheduler for cabinet manufacturing.

Modules:
- config: load and validate configuration (YAML or JSON)
- domain: task, employee, slot and result models
- services: calendar, priority scoring, slot search, capacity, dependencies
- engine: multi-phase assignment engine
- validator: post-generation audits
- io: CSV import/export helpers
- cli: command-line interface entrypoints
"""

from production_scheduler.config import SchedulerConfig, load_config
from production_scheduler.engine import OptimalScheduler

__all__ = [
    "OptimalScheduler",
    "SchedulerConfig",
    "load_config",
]
