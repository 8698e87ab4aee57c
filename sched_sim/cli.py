from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import List, NoReturn, Optional, Sequence

from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .algorithms import DEFAULT_ORDER, run_all
from .errors import InvalidArgsError, SchedulerError
from .gantt import build_rich_gantt, render_gantt
from .metrics import summarize
from .models import ScheduleResult
from .policies import DEFAULT_QUANTUM
from .workload_io import load_workload

logger = logging.getLogger(__name__)


class _ArgumentParser(argparse.ArgumentParser):
    """argparse variant that raises instead of exiting on bad arguments."""

    def error(self, message: str) -> NoReturn:
        raise InvalidArgsError(message)


def build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        prog="sched-sim",
        description="CPU scheduling simulator (FCFS, SRTF, Priority, Round-robin).",
    )
    parser.add_argument(
        "workload",
        help="Path to the process file (CSV rows id,burst,arrival[,priority] or a JSON list).",
    )
    parser.add_argument(
        "--quantum",
        "-q",
        type=int,
        default=DEFAULT_QUANTUM,
        help=f"Time quantum for round-robin (default: {DEFAULT_QUANTUM}).",
    )
    parser.add_argument(
        "--algorithms",
        "-a",
        nargs="+",
        default=list(DEFAULT_ORDER),
        help="Algorithms to run, in order (default: fcfs srtf priority rr; 'sjf' is an alias of srtf).",
    )
    parser.add_argument(
        "--compare",
        action="store_true",
        help="Finish with a table comparing the averages of every run.",
    )
    parser.add_argument(
        "--plain",
        action="store_true",
        help="Print the Gantt chart as plain text instead of a colored panel.",
    )
    parser.add_argument(
        "--legacy-fcfs",
        action="store_true",
        help="FCFS: a non-first process arriving at t=0 reports the previous process's wait (legacy report numbers).",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Log every admission, switch and completion.",
    )
    return parser


def configure_logging(verbose: bool = False) -> None:
    package_logger = logging.getLogger("sched_sim")
    package_logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    if not any(isinstance(h, RichHandler) for h in package_logger.handlers):
        handler = RichHandler(console=Console(stderr=True), show_path=False, show_time=False)
        handler.setFormatter(logging.Formatter("%(message)s"))
        package_logger.addHandler(handler)


def _print_title(console: Console, title: str) -> None:
    console.rule(f"[bold]{title}[/bold]")


def _print_result(result: ScheduleResult, console: Console, plain: bool = False) -> None:
    title = result.algorithm
    if result.quantum is not None:
        title += f" (quantum {result.quantum})"
    _print_title(console, title)

    if plain:
        console.print(render_gantt(result.timeline), highlight=False)
    else:
        panel, time_marks = build_rich_gantt(result.timeline)
        console.print(panel)
        if time_marks:
            console.print(time_marks, highlight=False)

    console.print()

    metrics = result.metrics
    footer = {
        "Wait": f"Average\n{metrics.average_wait:.2f}" if metrics else "",
        "Turnaround": f"Average\n{metrics.average_turnaround:.2f}" if metrics else "",
        "Exit": f"Throughput\n{metrics.throughput:.2f}/t" if metrics else "",
    }

    headers = ["ID", "Priority", "Burst", "Arrival", "Wait", "Turnaround", "Exit"]
    table = Table(title="Schedule table", box=box.SIMPLE_HEAVY, show_footer=True)
    for h in headers:
        justify = "center" if h in {"ID", "Priority"} else "right"
        table.add_column(h, justify=justify, footer=footer.get(h, ""))

    for p in result.processes:
        table.add_row(
            str(p.pid),
            str(p.priority),
            str(p.burst_time),
            str(p.arrival_time),
            str(p.waiting_time),
            str(p.turnaround_time),
            str(p.completion_time),
        )

    console.print(table)
    console.print()


def _print_comparison(results: List[ScheduleResult], console: Console) -> None:
    summary_table = Table(title="Algorithm comparison", box=box.SIMPLE_HEAVY)
    summary_table.add_column("Algorithm")
    summary_table.add_column("Quantum", justify="right")
    summary_table.add_column("Avg waiting", justify="right")
    summary_table.add_column("Avg turnaround", justify="right")
    summary_table.add_column("Throughput", justify="right")

    for row in summarize(results):
        summary_table.add_row(
            row["algorithm"],
            "" if row["quantum"] is None else str(row["quantum"]),
            f"{row['avg_waiting']:.2f}",
            f"{row['avg_turnaround']:.2f}",
            f"{row['throughput']:.2f}/t",
        )

    console.print(summary_table)


def main(argv: Optional[Sequence[str]] = None, console: Optional[Console] = None) -> int:
    console = console or Console()
    parser = build_parser()

    try:
        args = parser.parse_args(argv)
    except InvalidArgsError as exc:
        configure_logging()
        logger.error("%s", exc)
        parser.print_usage()
        return 2

    configure_logging(args.verbose)

    try:
        processes = load_workload(Path(args.workload))
        results = run_all(
            processes,
            quantum=args.quantum,
            algorithms=args.algorithms,
            legacy_fcfs=args.legacy_fcfs,
        )
    except (SchedulerError, ValueError, OSError) as exc:
        logger.error("%s: %s", args.workload, exc)
        return 1

    for result in results:
        _print_result(result, console, plain=args.plain)

    if args.compare:
        _print_comparison(results, console)

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
