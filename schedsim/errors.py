from __future__ import annotations


class SchedulerError(Exception):
    """Base class for scheduling failures reported to callers."""


class ConfigurationError(SchedulerError, ValueError):
    """The run was rejected before simulation (algorithm, quantum, priorities, ids)."""


class InternalConsistencyError(SchedulerError, RuntimeError):
    """The simulation clock stopped advancing while work remained."""
