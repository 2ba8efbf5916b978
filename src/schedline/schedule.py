"""Computed hierarchical schedule: the load pipeline, queries and export."""

from __future__ import annotations

import copy
import json
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Any

from .config import SchedlineConfig, discover_config
from .cpm import CriticalPathCalculator
from .exceptions import ParseError
from .graph import build_successors
from .logger import get_logger
from .models import (
    PHASE_LEVEL,
    TASK_LEVEL,
    ProjectDates,
    Task,
    format_date,
)
from .parser import ScheduleParser, find_spec_entry, load_yaml_text, read_spec_file
from .rollup import rollup_summaries
from .validator import validate_tasks

logger = get_logger()


@dataclass(frozen=True)
class WhatIfResult:
    """Outcome of simulating a slip on one task."""

    task_id: str
    slip_days: int
    original_end: date
    projected_end: date
    delay_days: int  # Working days the project end moves
    newly_critical: list[str]


class Schedule:
    """A fully computed schedule built from one specification document.

    Everything is computed eagerly in the constructor, in a fixed order:
    validate -> forward pass -> rollup -> backward pass. Edits are never made
    on a Schedule; build a new one from the edited specification instead.

    Args:
        data: Specification as loaded from YAML
        today: Reference date for forecasting in-progress work (defaults to today)
        config: Optional configuration (defaults apply when omitted)
    """

    def __init__(
        self,
        data: dict[str, Any],
        *,
        today: date | None = None,
        config: SchedlineConfig | None = None,
    ):
        self.config = config or SchedlineConfig()
        self.today = today or date.today()  # noqa: DTZ011
        self._data = copy.deepcopy(data)

        parsed = ScheduleParser(self.config.default_project_start).parse_data(data)
        validate_tasks(parsed.tasks)

        self.project = parsed.project
        if not self.project.updated:
            self.project.updated = self.today.isoformat()
        self.calendar = parsed.calendar
        self.baseline_captured_on = parsed.baseline_captured_on
        self.phases = parsed.phase_ids
        self.workstreams = parsed.workstream_ids
        self.tasks: dict[str, Task] = {task.id: task for task in parsed.tasks}

        build_successors(self.tasks)
        assert self.project.start_date is not None
        calculator = CriticalPathCalculator(
            self.tasks, self.calendar, self.project.start_date, self.today
        )
        calculator.forward_pass()
        rollup_summaries(self.tasks, self.phases, self.workstreams, self.calendar)
        calculator.backward_pass()

        dates = self.get_project_dates()
        logger.changes(
            f"Scheduled {self.project.name}: {dates.start} -> {dates.end} ({dates.duration}d)"
        )

    @property
    def project_start(self) -> date:
        assert self.project.start_date is not None
        return self.project.start_date

    def leaf_tasks(self) -> list[Task]:
        """All level-3 tasks in document order."""
        return [task for task in self.tasks.values() if task.level == TASK_LEVEL]

    def get_task(self, task_id: str) -> Task | None:
        return self.tasks.get(task_id)

    def get_project_dates(self) -> ProjectDates:
        """Project span from the phases, falling back to the project start."""
        phases = [task for task in self.tasks.values() if task.level == PHASE_LEVEL]
        starts = [p.start_date for p in phases if p.start_date is not None]
        ends = [p.end_date for p in phases if p.end_date is not None]

        start = min(starts) if starts else self.project_start
        end = max(ends) if ends else self.project_start
        return ProjectDates(start=start, end=end, duration=self.calendar.working_days_between(start, end))

    def get_variance(self, task: Task) -> int | None:
        """Working days between the baseline finish and the current end date.

        Positive values mean the task now finishes later than planned.
        """
        if task.baseline is None or task.end_date is None:
            return None
        return self.calendar.working_days_between(task.baseline.finish, task.end_date)

    def critical_path(self) -> list[Task]:
        """Critical leaf tasks ordered by start date."""
        critical = [task for task in self.leaf_tasks() if task.is_critical]
        return sorted(critical, key=lambda t: (t.start_date or self.project_start))

    def milestones(self) -> list[Task]:
        """Milestone tasks ordered by end date."""
        milestones = [task for task in self.leaf_tasks() if task.milestone]
        return sorted(milestones, key=lambda t: (t.end_date or self.project_start))

    def what_if(self, task_id: str, slip_days: int) -> WhatIfResult:
        """Simulate ``task_id`` slipping by ``slip_days`` working days.

        Durations grow by the slip; milestones (which must keep duration 0)
        get a no-earlier-than constraint after their current date instead.
        The schedule itself is left untouched.

        Raises:
            ValueError: If the task is not a leaf task of this schedule
        """
        task = self.tasks.get(task_id)
        if task is None or task.level != TASK_LEVEL:
            raise ValueError(f"Unknown task: {task_id}")

        data = copy.deepcopy(self._data)
        entry = find_spec_entry(data, task_id)
        assert entry is not None
        if task.milestone:
            assert task.start_date is not None
            slipped = self.calendar.add_working_days(task.start_date, slip_days)
            entry["constraint"] = {"type": "no_earlier_than", "date": slipped.isoformat()}
        else:
            entry["duration"] = task.duration + slip_days

        simulated = Schedule(data, today=self.today, config=self.config)
        original_end = self.get_project_dates().end
        projected_end = simulated.get_project_dates().end
        newly_critical = [
            t.id
            for t in simulated.leaf_tasks()
            if t.is_critical and not self.tasks[t.id].is_critical
        ]
        return WhatIfResult(
            task_id=task_id,
            slip_days=slip_days,
            original_end=original_end,
            projected_end=projected_end,
            delay_days=self.calendar.working_days_between(original_end, projected_end),
            newly_critical=newly_critical,
        )

    def to_dict(self, level: int = TASK_LEVEL) -> dict[str, Any]:
        """Export the computed schedule, keeping tasks at or above ``level``."""
        dates = self.get_project_dates()
        return {
            "project": {
                "name": self.project.name,
                "id": self.project.id,
                "updated": self.project.updated,
                "status": self.project.status.value,
                "status_summary": self.project.status_summary,
                "start": format_date(dates.start),
                "end": format_date(dates.end),
                "duration": dates.duration,
            },
            "calendar": {
                "working_days": list(self.calendar.working_days),
                "holidays": [format_date(h) for h in sorted(self.calendar.holidays)],
                "duration_unit": self.calendar.duration_unit.value,
            },
            "baseline_captured_on": format_date(self.baseline_captured_on),
            "tasks": [task.to_dict() for task in self.tasks.values() if task.level <= level],
        }

    def export_json(self, level: int = TASK_LEVEL, indent: int | None = None) -> str:
        """Serialize ``to_dict(level)`` as JSON text."""
        if indent is None:
            indent = self.config.export.indent
        return json.dumps(self.to_dict(level), indent=indent)


def load(
    spec_text: str,
    *,
    today: date | None = None,
    config: SchedlineConfig | None = None,
) -> Schedule:
    """Build a Schedule from specification text.

    Raises:
        ParseError: If the text is not a YAML mapping
        ValidationError: If the specification violates a structural invariant
    """
    return Schedule(load_yaml_text(spec_text), today=today, config=config)


def load_file(
    path: Path | str,
    *,
    today: date | None = None,
    config: SchedlineConfig | None = None,
) -> Schedule:
    """Build a Schedule from a specification file, discovering config if not given."""
    if config is None:
        config = discover_config(path)
    try:
        text = read_spec_file(path)
    except OSError as e:
        raise ParseError(f"Failed to read {path}: {e}") from e
    return load(text, today=today, config=config)
