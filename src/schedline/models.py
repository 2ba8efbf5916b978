"""Data models for schedline."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any

# Hierarchy levels
PHASE_LEVEL = 1
WORKSTREAM_LEVEL = 2
TASK_LEVEL = 3

DATE_FORMAT = "%Y-%m-%d"


class TaskStatus(str, Enum):
    """Tracking status of a task."""

    NOT_STARTED = "not_started"
    ON_TRACK = "on_track"
    AT_RISK = "at_risk"
    DELAYED = "delayed"
    COMPLETE = "complete"


# Worst-case ordering used by the rollup
STATUS_SEVERITY: dict[TaskStatus, int] = {
    TaskStatus.DELAYED: 4,
    TaskStatus.AT_RISK: 3,
    TaskStatus.ON_TRACK: 2,
    TaskStatus.COMPLETE: 1,
    TaskStatus.NOT_STARTED: 0,
}


class ProjectStatus(str, Enum):
    """Overall RAG status of the project."""

    GREEN = "green"
    YELLOW = "yellow"
    RED = "red"


def format_date(value: date | None) -> str | None:
    """Format a date as yyyy-MM-dd, passing None through."""
    if value is None:
        return None
    return value.strftime(DATE_FORMAT)


@dataclass(frozen=True)
class Dependency:
    """A finish-to-start dependency on another task.

    The lag is the number of working days that must pass after the
    predecessor finishes before the dependent task can start.
    """

    task_id: str
    lag: int = 0

    @classmethod
    def parse(cls, raw: str) -> Dependency:
        """Parse a bare ``depends_on`` id (no lag)."""
        return cls(task_id=raw.strip())

    def to_dict(self) -> dict[str, Any]:
        return {"task_id": self.task_id, "lag": self.lag}


@dataclass(frozen=True)
class Constraint:
    """A date constraint on a task's start."""

    date: date
    type: str = "no_earlier_than"
    reason: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "date": format_date(self.date), "reason": self.reason}


@dataclass(frozen=True)
class BaselineDates:
    """Frozen planned dates used for variance comparison."""

    start: date
    finish: date

    def to_dict(self) -> dict[str, Any]:
        return {"start": format_date(self.start), "finish": format_date(self.finish)}


def _default_dependencies() -> list[Dependency]:
    return []


def _default_str_list() -> list[str]:
    return []


@dataclass
class Task:
    """Unified model for phases (level 1), workstreams (level 2) and tasks (level 3).

    Planning inputs come from the specification; the computed fields at the
    bottom are written only by the scheduling pipeline.
    """

    id: str
    name: str
    level: int
    duration: int = 0
    parent_id: str | None = None
    phase_id: str | None = None
    workstream_id: str | None = None
    dependencies: list[Dependency] = field(default_factory=_default_dependencies)
    constraint: Constraint | None = None
    owner: str | None = None
    start: date | None = None  # Explicit start override (input)
    actual_start: date | None = None
    actual_finish: date | None = None
    progress: float = 0
    status: TaskStatus = TaskStatus.NOT_STARTED
    status_note: str = ""
    milestone: bool = False
    baseline: BaselineDates | None = None

    # Computed by the pipeline
    start_date: date | None = None
    end_date: date | None = None
    late_start: date | None = None
    late_finish: date | None = None
    float_days: int = 0
    is_critical: bool = False
    successors: list[str] = field(default_factory=_default_str_list)

    @property
    def is_leaf(self) -> bool:
        return self.level == TASK_LEVEL

    @property
    def dependency_ids(self) -> list[str]:
        """Get just the predecessor ids, in declaration order."""
        return [dep.task_id for dep in self.dependencies]

    def lag_to(self, predecessor_id: str) -> int:
        """Return the lag declared on the dependency pointing at ``predecessor_id``."""
        for dep in self.dependencies:
            if dep.task_id == predecessor_id:
                return dep.lag
        return 0

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-ready dictionary with yyyy-MM-dd dates."""
        return {
            "id": self.id,
            "name": self.name,
            "level": self.level,
            "duration": self.duration,
            "parent_id": self.parent_id,
            "phase_id": self.phase_id,
            "workstream_id": self.workstream_id,
            "dependencies": [dep.to_dict() for dep in self.dependencies],
            "successors": list(self.successors),
            "owner": self.owner,
            "start_date": format_date(self.start_date),
            "end_date": format_date(self.end_date),
            "late_start": format_date(self.late_start),
            "late_finish": format_date(self.late_finish),
            "actual_start": format_date(self.actual_start),
            "actual_finish": format_date(self.actual_finish),
            "progress": self.progress,
            "status": self.status.value,
            "status_note": self.status_note,
            "milestone": self.milestone,
            "constraint": self.constraint.to_dict() if self.constraint else None,
            "is_critical": self.is_critical,
            "float_days": self.float_days,
            "baseline": self.baseline.to_dict() if self.baseline else None,
        }


@dataclass
class ProjectInfo:
    """Project-level metadata from the ``project`` section."""

    name: str = "Project"
    id: str = ""
    updated: str = ""
    start_date: date | None = None
    status: ProjectStatus = ProjectStatus.GREEN
    status_summary: str = ""


@dataclass(frozen=True)
class ProjectDates:
    """Overall project span."""

    start: date
    end: date
    duration: int
