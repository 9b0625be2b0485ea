"""
CPU scheduling simulator.

Computes the execution timeline and performance metrics of a fixed job set
under FCFS, SJF, SRTF, non-preemptive and preemptive Priority, and Round
Robin scheduling. The `schedsim` command line wraps the engine.
"""

from .algorithms import ALGORITHMS, run_algorithm
from .models import Job, Outcome, ScheduleResult, TimeSlice
from .policies import Algorithm

__all__ = [
    "ALGORITHMS",
    "Algorithm",
    "Job",
    "Outcome",
    "ScheduleResult",
    "TimeSlice",
    "run_algorithm",
]
