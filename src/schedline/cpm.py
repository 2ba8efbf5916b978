"""Critical Path Method passes over a validated task map.

The forward pass computes early dates for leaf tasks; phases and workstreams
get their dates from the rollup instead. The backward pass runs after the
rollup and computes late dates, float and criticality.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from datetime import date

from .graph import dependency_graph, successor_graph, topological_order
from .logger import debug_enabled, get_logger
from .models import Task
from .workcalendar import Calendar

logger = get_logger()


class CriticalPathCalculator:
    """Runs the forward and backward passes for one schedule.

    Args:
        tasks: Task map keyed by id; must already be validated (acyclic)
        calendar: Working-day calendar for all date arithmetic
        project_start: Default early start for tasks without predecessors
        today: Reference date for forecasting in-progress tasks
    """

    def __init__(
        self,
        tasks: Mapping[str, Task],
        calendar: Calendar,
        project_start: date,
        today: date,
    ):
        self.tasks = tasks
        self.calendar = calendar
        self.project_start = project_start
        self.today = today

    def add_duration(self, start: date, days: int) -> date:
        """Shift ``start`` by a (possibly negative) number of duration units."""
        if days == 0:
            return start
        return self.calendar.add_working_days(start, days)

    # ------------------------------------------------------------------
    # Forward pass
    # ------------------------------------------------------------------

    def forward_pass(self) -> None:
        """Compute ``start_date``/``end_date`` for every leaf task."""
        for task_id in topological_order(dependency_graph(self.tasks)):
            task = self.tasks[task_id]
            if task.is_leaf:
                self._compute_early_dates(task)

    def _compute_early_dates(self, task: Task) -> None:
        if task.actual_finish is not None:
            task.end_date = task.actual_finish
            task.start_date = task.actual_start or self.add_duration(
                task.actual_finish, -task.duration
            )
            logger.debug(f"  {task.id}: finished {task.end_date} (actual)")
            return

        early_start = self._early_start(task)
        task.start_date = early_start

        if task.progress == 100:
            task.end_date = self.add_duration(early_start, task.duration)
        elif task.progress > 0 and task.actual_start is not None:
            # Remaining work is forecast from today, not from the original start
            remaining = math.ceil(task.duration * (100 - task.progress) / 100)
            task.end_date = self.calendar.add_working_days(self.today, remaining)
        else:
            task.end_date = self.add_duration(early_start, task.duration)

        if debug_enabled():
            logger.debug(f"  {task.id}: {task.start_date} -> {task.end_date} ({task.duration}d)")

    def _early_start(self, task: Task) -> date:
        early_start = self.project_start

        if task.actual_start is not None:
            early_start = task.actual_start
        elif task.start is not None and not task.dependencies:
            early_start = task.start
        elif task.dependencies:
            # Summary predecessors have no dates until the rollup; they are skipped
            latest: date | None = None
            for dep in task.dependencies:
                predecessor_end = self.tasks[dep.task_id].end_date
                if predecessor_end is None:
                    continue
                candidate = self.calendar.add_working_days(predecessor_end, dep.lag)
                if latest is None or candidate > latest:
                    latest = candidate
            if latest is not None:
                early_start = latest

        if task.constraint is not None and task.constraint.type == "no_earlier_than":
            if early_start < task.constraint.date:
                logger.checks(
                    f"  {task.id}: start moved from {early_start} to "
                    f"{task.constraint.date} (no_earlier_than)"
                )
                early_start = task.constraint.date

        return early_start

    # ------------------------------------------------------------------
    # Backward pass
    # ------------------------------------------------------------------

    def project_end(self) -> date | None:
        """Latest leaf end date, or None when nothing was scheduled."""
        end_dates = [t.end_date for t in self.tasks.values() if t.is_leaf and t.end_date]
        return max(end_dates) if end_dates else None

    def backward_pass(self) -> None:
        """Compute late dates, float and criticality for every leaf task."""
        project_end = self.project_end()
        if project_end is None:
            return

        for task_id in topological_order(successor_graph(self.tasks)):
            task = self.tasks[task_id]
            if task.is_leaf:
                self._compute_late_dates(task, project_end)

        critical = [t.id for t in self.tasks.values() if t.is_leaf and t.is_critical]
        logger.checks(f"Critical tasks: {', '.join(critical) or 'none'}")

    def _compute_late_dates(self, task: Task, project_end: date) -> None:
        late_finish = project_end
        for successor_id in task.successors:
            successor = self.tasks[successor_id]
            if successor.late_start is None:
                continue
            lag = successor.lag_to(task.id)
            successor_bound = self.calendar.add_working_days(successor.late_start, -lag)
            late_finish = min(late_finish, successor_bound)

        task.late_finish = late_finish
        task.late_start = self.add_duration(late_finish, -task.duration)

        if task.end_date is not None:
            task.float_days = self.calendar.working_days_between(task.end_date, late_finish)
            task.is_critical = task.float_days <= 0
