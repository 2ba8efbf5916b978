"""Plain-text summary of a computed schedule."""

from __future__ import annotations

from .models import PHASE_LEVEL, TASK_LEVEL, WORKSTREAM_LEVEL, Task, format_date
from .schedule import Schedule

RULE_WIDTH = 80


class SummaryFormatter:
    """Render a Schedule as an indented phase / workstream / task outline."""

    def __init__(self, schedule: Schedule):
        self.schedule = schedule
        self.lines: list[str] = []

    def render(self) -> str:
        self.lines = []
        self._add_header()
        for phase in self._children(PHASE_LEVEL, None):
            self._add_summary_task(phase, indent="")
            for ws in self._children(WORKSTREAM_LEVEL, phase.id):
                self._add_summary_task(ws, indent="   ")
                for task in self._children(TASK_LEVEL, ws.id):
                    self._add_task(task)
        self.lines.append("")
        self.lines.append("=" * RULE_WIDTH)
        return "\n".join(self.lines) + "\n"

    def _children(self, level: int, parent_id: str | None) -> list[Task]:
        return [
            task
            for task in self.schedule.tasks.values()
            if task.level == level and (parent_id is None or task.parent_id == parent_id)
        ]

    def _add_header(self) -> None:
        project = self.schedule.project
        dates = self.schedule.get_project_dates()

        self.lines.append("=" * RULE_WIDTH)
        header = f"PROJECT: {project.name}"
        if project.id:
            header += f" [{project.id}]"
        self.lines.append(header)
        self.lines.append(f"Status: {project.status.value.upper()} | Updated: {project.updated}")
        self.lines.append("-" * RULE_WIDTH)
        self.lines.append(
            f"Start: {format_date(dates.start)} | End: {format_date(dates.end)} "
            f"| Duration: {dates.duration}d"
        )
        if project.status_summary:
            self.lines.append("")
            self.lines.append(project.status_summary.strip())
        self.lines.append("=" * RULE_WIDTH)

    def _add_summary_task(self, task: Task, indent: str) -> None:
        self.lines.append("")
        self.lines.append(f"{indent}{task.name} [{task.id}]")
        self.lines.append(f"{indent}   {_span(task)}")
        self.lines.append(f"{indent}   Progress: {task.progress}% | Status: {task.status.value}")

    def _add_task(self, task: Task) -> None:
        flags = []
        if task.is_critical:
            flags.append("CRITICAL")
        if task.milestone:
            flags.append("MILESTONE")
        title = f"      - {task.name} [{task.id}]"
        if flags:
            title += " " + " ".join(flags)
        self.lines.append(title)

        span = _span(task)
        variance = self.schedule.get_variance(task)
        if variance is not None:
            span += f" (variance {variance:+d}d)"
        self.lines.append(f"        {span}")
        self.lines.append(
            f"        Progress: {task.progress}% | Float: {task.float_days}d "
            f"| Status: {task.status.value}"
        )
        if task.status_note:
            self.lines.append(f"        Note: {task.status_note}")


def _span(task: Task) -> str:
    return f"{format_date(task.start_date)} -> {format_date(task.end_date)} ({task.duration}d)"


def format_summary(schedule: Schedule) -> str:
    """Return the text summary for ``schedule``."""
    return SummaryFormatter(schedule).render()
