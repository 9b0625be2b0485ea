from __future__ import annotations

from typing import Dict, List

from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .models import TimeSlice

COLORS = ["red", "green", "yellow", "blue", "magenta", "cyan"]


def build_rich_gantt(slices: List[TimeSlice]) -> tuple[Panel, str]:
    """
    Build a Rich Panel containing a colored Gantt chart and a string with time marks.

    Idle slices are drawn as dotted gaps.
    """
    if not slices:
        panel = Panel("No execution", title="Gantt Chart")
        return panel, ""

    job_to_color: Dict[str, str] = {}

    def job_color(job_id: str) -> str:
        if job_id not in job_to_color:
            job_to_color[job_id] = COLORS[len(job_to_color) % len(COLORS)]
        return job_to_color[job_id]

    timeline = Text()
    labels = Text()
    time_marks = str(slices[0].start_time)

    for sl in slices:
        width = max(1, sl.duration)
        if sl.is_idle:
            timeline.append("." * width, style="dim")
            labels.append(" " * width)
        else:
            timeline.append(" " * width, style=f"on {job_color(sl.job_id)}")
            labels.append(sl.job_id[:width].ljust(width), style="bold")
        time_marks += f"{sl.end_time:>{max(3, width)}}"

    table = Table.grid(padding=(0, 0))
    table.add_row(timeline)
    table.add_row(labels)

    panel = Panel.fit(table, title="Gantt Chart")
    return panel, time_marks
