from __future__ import annotations

from typing import Dict, Iterator, List, NamedTuple, Optional, Sequence

from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .models import ScheduledSlice

CELL_WIDTH = 8
IDLE_LABEL = "-"
COLORS = ["red", "green", "yellow", "blue", "magenta", "cyan"]


class GanttCell(NamedTuple):
    pid: Optional[int]  # None for idle CPU
    start: int
    end: int

    @property
    def label(self) -> str:
        return IDLE_LABEL if self.pid is None else str(self.pid)


def gantt_cells(slices: Sequence[ScheduledSlice]) -> Iterator[GanttCell]:
    """
    Walk the timeline from t=0, yielding one cell per slice and an idle cell
    for every stretch where no process held the CPU.
    """
    last_time = 0
    for sl in sorted(slices, key=lambda s: (s.start_time, s.end_time)):
        if sl.start_time > last_time:
            yield GanttCell(None, last_time, sl.start_time)
        yield GanttCell(sl.pid, sl.start_time, sl.end_time)
        last_time = sl.end_time


def _time_marks(cells: List[GanttCell]) -> str:
    marks = [str(cell.start).ljust(CELL_WIDTH + 1) for cell in cells]
    marks.append(str(cells[-1].end))
    return "".join(marks)


def render_gantt(slices: Sequence[ScheduledSlice]) -> str:
    """
    Plain-text Gantt chart: one centered cell per slice, start times below.
    Idle stretches show up as a ``-`` cell.
    """
    cells = list(gantt_cells(slices))
    if not cells:
        return "(no execution)"

    return "\n".join(
        [
            "Gantt schedule",
            "|" + "|".join(cell.label.center(CELL_WIDTH) for cell in cells) + "|",
            _time_marks(cells),
        ]
    )


def build_rich_gantt(slices: Sequence[ScheduledSlice]) -> tuple[Panel, str]:
    """
    Colored version of ``render_gantt``: same cells and time marks, each
    process in its own background color, idle time dimmed.
    """
    cells = list(gantt_cells(slices))
    if not cells:
        return Panel("No execution", title="Gantt Chart"), ""

    pid_to_color: Dict[int, str] = {}
    bar = Text("|")
    for cell in cells:
        if cell.pid is None:
            style = "dim"
        else:
            color = pid_to_color.setdefault(cell.pid, COLORS[len(pid_to_color) % len(COLORS)])
            style = f"bold on {color}"
        bar.append(cell.label.center(CELL_WIDTH), style=style)
        bar.append("|")

    table = Table.grid(padding=(0, 0))
    table.add_row(bar)

    return Panel.fit(table, title="Gantt Chart"), _time_marks(cells)
