"""Structural validation of parsed schedules.

Checks run in a fixed order and the first violation raises, so a document
with several problems always reports the same one.
"""

from __future__ import annotations

from collections.abc import Sequence

from .exceptions import CircularDependencyError, MissingReferenceError, ValidationError
from .graph import find_cycle
from .logger import get_logger
from .models import Task

logger = get_logger()


def validate_tasks(tasks: Sequence[Task]) -> None:
    """Validate ids, references, cycles, milestones and progress.

    Args:
        tasks: Every phase, workstream and task in document order

    Raises:
        ValidationError: On the first invariant violation found
    """
    _check_missing_ids(tasks)
    _check_duplicate_ids(tasks)
    _check_references(tasks)
    _check_circular_dependencies(tasks)
    _check_milestones(tasks)
    _check_progress(tasks)
    logger.checks(f"Validated {len(tasks)} schedule entries")


def _check_missing_ids(tasks: Sequence[Task]) -> None:
    for task in tasks:
        if not task.id:
            raise ValidationError(f"Task missing ID: {task.name or '<unnamed>'}")


def _check_duplicate_ids(tasks: Sequence[Task]) -> None:
    seen: set[str] = set()
    for task in tasks:
        if task.id in seen:
            raise ValidationError(f"Duplicate task ID: {task.id}")
        seen.add(task.id)


def _check_references(tasks: Sequence[Task]) -> None:
    all_ids = {task.id for task in tasks}
    for task in tasks:
        for dep_id in task.dependency_ids:
            if dep_id not in all_ids:
                raise MissingReferenceError(
                    f"Task {task.id} depends on non-existent task: {dep_id}"
                )


def _check_circular_dependencies(tasks: Sequence[Task]) -> None:
    graph = {task.id: task.dependency_ids for task in tasks}
    cycle = find_cycle(graph)
    if cycle:
        raise CircularDependencyError(f"Circular dependency detected: {' -> '.join(cycle)}")


def _check_milestones(tasks: Sequence[Task]) -> None:
    for task in tasks:
        if task.milestone and task.duration != 0:
            raise ValidationError(f"Milestone {task.id} must have duration=0")


def _check_progress(tasks: Sequence[Task]) -> None:
    for task in tasks:
        if task.progress < 0 or task.progress > 100:
            raise ValidationError(f"Task {task.id} progress must be 0-100, got {task.progress}")
