from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .algorithms import run_algorithm
from .config import Settings
from .errors import ConfigurationError, InternalConsistencyError
from .gantt import build_rich_gantt
from .models import NOT_AVAILABLE, Job, ScheduleResult
from .policies import Algorithm
from .workload_io import load_workload

EXIT_OK = 0
EXIT_CONFIGURATION_ERROR = 2
EXIT_INTERNAL_ERROR = 3

ALGORITHM_IDS = [a.value for a in Algorithm]


def build_parser(settings: Settings) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="schedsim",
        description="CPU scheduling simulator (FCFS, SJF, SRTF, Priority, preemptive Priority, Round Robin).",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Log every scheduling decision (DEBUG level).",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser("run", help="Run a scheduling algorithm on a workload file.")
    run_parser.add_argument(
        "--algorithm",
        "-a",
        default=settings.default_algorithm,
        help=f"Algorithm to use ({', '.join(ALGORITHM_IDS)}; default: {settings.default_algorithm}).",
    )
    run_parser.add_argument(
        "--workload",
        "-w",
        required=True,
        help="Path to JSON or CSV workload file.",
    )
    run_parser.add_argument(
        "--quantum",
        "-q",
        type=int,
        default=settings.default_quantum,
        help=f"Time quantum for round robin (ignored by the others; default: {settings.default_quantum}).",
    )
    run_parser.add_argument(
        "--json",
        action="store_true",
        help="Print the timeline and metrics as JSON instead of tables.",
    )

    compare_parser = subparsers.add_parser(
        "compare",
        help="Run multiple algorithms on the same workload and compare average metrics.",
    )
    compare_parser.add_argument(
        "--workload",
        "-w",
        required=True,
        help="Path to JSON or CSV workload file.",
    )
    compare_parser.add_argument(
        "--algorithms",
        "-a",
        nargs="+",
        default=ALGORITHM_IDS,
        help=f"Algorithms to compare (default: {' '.join(ALGORITHM_IDS)}).",
    )
    compare_parser.add_argument(
        "--quantum",
        "-q",
        type=int,
        default=settings.default_quantum,
        help=f"Time quantum used for round robin when included (default: {settings.default_quantum}).",
    )

    subparsers.add_parser("list", help="List the available algorithms.")

    return parser


def configure_logging(level: int) -> None:
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _fmt(value) -> str:
    return NOT_AVAILABLE if value is None else str(value)


def _print_result(result: ScheduleResult, console: Console) -> None:
    console.print(f"[bold]Algorithm:[/bold] {result.algorithm}")
    if result.quantum is not None:
        console.print(f"[bold]Quantum:[/bold] {result.quantum}")

    console.print()

    panel, time_marks = build_rich_gantt(result.timeline)
    console.print(panel)
    if time_marks:
        console.print(time_marks)

    console.print()

    headers = [
        "Job",
        "Arrive",
        "Burst",
        "Complete",
        "Turnaround",
        "Wait",
        "Response",
        "Priority",
    ]

    job_table = Table(title="Per-job metrics", box=box.SIMPLE_HEAVY)
    for h in headers:
        justify = "center" if h in {"Job", "Priority"} else "right"
        job_table.add_column(h, justify=justify)

    for m in result.metrics.per_job:
        job_table.add_row(
            m.id,
            str(m.arrival_time),
            str(m.burst_time),
            _fmt(m.completion_time),
            _fmt(m.turnaround_time),
            _fmt(m.waiting_time),
            _fmt(m.response_time),
            "" if m.priority is None else str(m.priority),
        )

    console.print(job_table)
    console.print()

    average = result.metrics.average
    sys_table = Table(title="System metrics", box=box.SIMPLE_HEAVY)
    sys_table.add_column("Metric")
    sys_table.add_column("Value", justify="right")

    if average.meaningful:
        sys_table.add_row("Avg turnaround", f"{average.avg_turnaround_time:.2f}")
        sys_table.add_row("Avg waiting", f"{average.avg_waiting_time:.2f}")
    else:
        sys_table.add_row("Avg turnaround", NOT_AVAILABLE)
        sys_table.add_row("Avg waiting", NOT_AVAILABLE)
    sys_table.add_row("Completed jobs", f"{average.completed_count}/{len(result.metrics.per_job)}")

    if result.system:
        system = result.system
        sys_table.add_row("Avg response", f"{system.avg_response_time:.2f}")
        sys_table.add_row("Makespan", str(system.makespan))
        sys_table.add_row("Throughput (jobs/time)", f"{system.throughput:.3f}")
        sys_table.add_row("CPU utilization", f"{system.cpu_utilization*100:.1f}%")
        sys_table.add_row("Starvation count", str(system.starvation_count))

    console.print(sys_table)

    for note in result.anomalies:
        console.print(f"[yellow]Warning:[/yellow] {note}")


def _exit_code(result: ScheduleResult, console: Console) -> int:
    try:
        result.raise_for_outcome()
    except ConfigurationError as exc:
        console.print(f"[red]Configuration error:[/red] {exc}")
        return EXIT_CONFIGURATION_ERROR
    except InternalConsistencyError as exc:
        console.print(f"[red]Internal error:[/red] {exc}")
        return EXIT_INTERNAL_ERROR
    return EXIT_OK


def _load(path: str, settings: Settings, console: Console) -> Optional[List[Job]]:
    try:
        return load_workload(Path(path), max_jobs=settings.max_jobs)
    except (OSError, ValueError) as exc:
        console.print(f"[red]Cannot load workload {path}:[/red] {exc}")
        return None


def _run(args: argparse.Namespace, settings: Settings, console: Console) -> int:
    jobs = _load(args.workload, settings, console)
    if jobs is None:
        return EXIT_CONFIGURATION_ERROR

    result = run_algorithm(args.algorithm, jobs, quantum=args.quantum)
    if args.json:
        sys.stdout.write(json.dumps(result.to_dict(), indent=2) + "\n")
        return _exit_code(result, Console(stderr=True))

    _print_result(result, console)
    return _exit_code(result, console)


def _compare(args: argparse.Namespace, settings: Settings, console: Console) -> int:
    jobs = _load(args.workload, settings, console)
    if jobs is None:
        return EXIT_CONFIGURATION_ERROR

    summary_table = Table(title="Algorithm comparison", box=box.SIMPLE_HEAVY)
    summary_table.add_column("Algorithm", no_wrap=True)
    summary_table.add_column("Quantum", justify="right")
    summary_table.add_column("Avg waiting", justify="right")
    summary_table.add_column("Avg turnaround", justify="right")
    summary_table.add_column("Avg response", justify="right")
    summary_table.add_column("Outcome")

    for alg in args.algorithms:
        result = run_algorithm(alg, jobs, quantum=args.quantum)
        average = result.metrics.average
        if average.meaningful:
            waiting = f"{average.avg_waiting_time:.2f}"
            turnaround = f"{average.avg_turnaround_time:.2f}"
            response = f"{result.system.avg_response_time:.2f}"
        else:
            waiting = turnaround = response = NOT_AVAILABLE
        summary_table.add_row(
            result.algorithm,
            "" if result.quantum is None else str(result.quantum),
            waiting,
            turnaround,
            response,
            result.outcome.value,
        )

    console.print(summary_table)
    return EXIT_OK


def _list(console: Console) -> int:
    table = Table(title="Algorithms", box=box.SIMPLE_HEAVY)
    table.add_column("Id", no_wrap=True)
    table.add_column("Name", no_wrap=True)
    table.add_column("Characteristics")
    for alg in Algorithm:
        table.add_row(alg.value, alg.label, alg.description)
    console.print(table)
    return EXIT_OK


def main(argv: list[str] | None = None) -> int:
    settings = Settings.from_env()
    parser = build_parser(settings)
    args = parser.parse_args(argv)

    configure_logging(logging.DEBUG if args.verbose else settings.effective_log_level)
    console = Console()

    if args.command == "run":
        return _run(args, settings, console)

    if args.command == "compare":
        return _compare(args, settings, console)

    if args.command == "list":
        return _list(console)

    parser.error(f"Unknown command: {args.command}")
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
