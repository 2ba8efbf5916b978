"""Rollup of leaf task dates, progress and status into workstreams and phases."""

from __future__ import annotations

import math
from collections.abc import Mapping, Sequence

from .logger import get_logger
from .models import PHASE_LEVEL, STATUS_SEVERITY, TASK_LEVEL, WORKSTREAM_LEVEL, Task, TaskStatus
from .workcalendar import Calendar

logger = get_logger()


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up (not banker's rounding)."""
    return math.floor(value + 0.5)


def worst_status(children: Sequence[Task]) -> TaskStatus:
    """Pick the most severe status among ``children``."""
    worst = TaskStatus.NOT_STARTED
    for child in children:
        if STATUS_SEVERITY[child.status] > STATUS_SEVERITY[worst]:
            worst = child.status
    return worst


def weighted_progress(children: Sequence[Task]) -> int | None:
    """Duration-weighted mean progress; None when the total weight is zero."""
    total_duration = sum(child.duration for child in children)
    if total_duration <= 0:
        return None
    weighted = sum(child.progress * child.duration for child in children)
    return round_half_up(weighted / total_duration)


def aggregate(parent: Task, children: Sequence[Task], calendar: Calendar) -> None:
    """Overwrite a summary task's dates, duration, progress and status from its children."""
    starts = [child.start_date for child in children if child.start_date is not None]
    ends = [child.end_date for child in children if child.end_date is not None]

    if starts:
        parent.start_date = min(starts)
    if ends:
        parent.end_date = max(ends)
    if parent.start_date is not None and parent.end_date is not None:
        parent.duration = calendar.working_days_between(parent.start_date, parent.end_date)

    progress = weighted_progress(children)
    if progress is not None:
        parent.progress = progress

    parent.status = worst_status(children)


def rollup_summaries(
    tasks: Mapping[str, Task],
    phase_ids: Sequence[str],
    workstream_ids: Sequence[str],
    calendar: Calendar,
) -> None:
    """Roll leaf tasks up into workstreams, then workstreams up into phases.

    Phase rollup reads the workstreams' computed fields, so the order matters.
    """
    for ws_id in workstream_ids:
        children = [
            t for t in tasks.values() if t.workstream_id == ws_id and t.level == TASK_LEVEL
        ]
        if children:
            aggregate(tasks[ws_id], children, calendar)

    for phase_id in phase_ids:
        children = [
            t for t in tasks.values() if t.phase_id == phase_id and t.level == WORKSTREAM_LEVEL
        ]
        if children:
            aggregate(tasks[phase_id], children, calendar)

    for task in tasks.values():
        if task.level in (PHASE_LEVEL, WORKSTREAM_LEVEL) and task.start_date is not None:
            logger.debug(
                f"  rollup {task.id}: {task.start_date} -> {task.end_date}, "
                f"{task.progress}% {task.status.value}"
            )
