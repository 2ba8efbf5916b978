"""Answer query commands against a computed schedule."""

from __future__ import annotations

from collections import Counter
from typing import Any

from ..models import Task, format_date
from ..schedule import Schedule
from .commands import Intent, ParsedCommand


def _task_row(task: Task) -> dict[str, Any]:
    return {
        "id": task.id,
        "name": task.name,
        "start_date": format_date(task.start_date),
        "end_date": format_date(task.end_date),
        "float_days": task.float_days,
        "status": task.status.value,
    }


def critical_path(schedule: Schedule) -> dict[str, Any]:
    return {"tasks": [_task_row(task) for task in schedule.critical_path()]}


def milestones(schedule: Schedule) -> dict[str, Any]:
    return {
        "milestones": [
            {
                "id": task.id,
                "name": task.name,
                "date": format_date(task.end_date),
                "status": task.status.value,
                "is_critical": task.is_critical,
            }
            for task in schedule.milestones()
        ]
    }


def variance(schedule: Schedule) -> dict[str, Any]:
    """Baseline finish vs current end for every baselined task, latest slips first."""
    rows = []
    for task in schedule.leaf_tasks():
        days = schedule.get_variance(task)
        if days is None or task.baseline is None:
            continue
        rows.append(
            {
                "id": task.id,
                "name": task.name,
                "baseline_finish": format_date(task.baseline.finish),
                "end_date": format_date(task.end_date),
                "variance_days": days,
            }
        )
    rows.sort(key=lambda row: row["variance_days"], reverse=True)
    return {"baseline_captured_on": format_date(schedule.baseline_captured_on), "tasks": rows}


def status(schedule: Schedule) -> dict[str, Any]:
    dates = schedule.get_project_dates()
    leaves = schedule.leaf_tasks()
    counts = Counter(task.status.value for task in leaves)
    return {
        "project": schedule.project.name,
        "status": schedule.project.status.value,
        "status_summary": schedule.project.status_summary,
        "start": format_date(dates.start),
        "end": format_date(dates.end),
        "duration": dates.duration,
        "task_count": len(leaves),
        "critical_count": sum(1 for task in leaves if task.is_critical),
        "status_counts": dict(sorted(counts.items())),
    }


def what_if(schedule: Schedule, task_id: str | None, slip_days: int) -> dict[str, Any]:
    """Simulate a slip and report how the project end moves.

    Raises:
        ValueError: If the task is missing or not a level-3 task
    """
    if task_id is None:
        raise ValueError("What-if needs a task to slip")
    result = schedule.what_if(task_id, slip_days)
    return {
        "task_id": result.task_id,
        "slip_days": result.slip_days,
        "original_end": format_date(result.original_end),
        "projected_end": format_date(result.projected_end),
        "delay_days": result.delay_days,
        "newly_critical": result.newly_critical,
    }


def answer_query(schedule: Schedule, command: ParsedCommand) -> dict[str, Any]:
    """Answer a query command; raises ValueError for modifying commands."""
    if command.intent == Intent.SHOW_CRITICAL_PATH:
        answer = critical_path(schedule)
    elif command.intent == Intent.SHOW_MILESTONES:
        answer = milestones(schedule)
    elif command.intent == Intent.SHOW_VARIANCE:
        answer = variance(schedule)
    elif command.intent == Intent.SHOW_STATUS:
        answer = status(schedule)
    elif command.intent == Intent.WHAT_IF:
        answer = what_if(schedule, command.task_id, command.value or 0)
    else:
        raise ValueError(f"Not a query: {command.intent.value}")
    return {"query": command.intent.value, **answer}
