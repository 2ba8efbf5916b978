"""Pydantic schemas for schedule YAML validation.

These only check shapes and types. Structural invariants (unique ids,
resolvable dependencies, cycles, milestone and progress rules) are checked by
``schedline.validator`` so they can be reported in a fixed order.
"""

from __future__ import annotations

from datetime import date
from typing import Annotated, Any, Literal

from pydantic import BaseModel, BeforeValidator, Field, field_validator, model_validator

from .models import ProjectStatus, TaskStatus
from .workcalendar import DEFAULT_WORKING_DAYS, DurationUnit, as_day


def _day(value: Any) -> Any:
    """Truncate YAML timestamps to plain dates."""
    if isinstance(value, date):
        return as_day(value)
    return value


Day = Annotated[date, BeforeValidator(_day)]


class _NullTolerantModel(BaseModel):
    """Treat explicit YAML nulls as "use the default"."""

    @model_validator(mode="before")
    @classmethod
    def drop_nulls(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {key: value for key, value in data.items() if value is not None}  # type: ignore[misc]
        return data


class DependencySchema(_NullTolerantModel):
    """Dependency written as a mapping: ``{id: TASK, lag: 2}``."""

    id: str
    lag: int = 0

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> str:
        return str(v)


class ConstraintSchema(_NullTolerantModel):
    """Start constraint on a task."""

    type: Literal["no_earlier_than"] = "no_earlier_than"
    date: Day
    reason: str | None = None


class TaskSchema(_NullTolerantModel):
    """Schema for a leaf task entry."""

    id: str | None = None
    name: str = ""
    duration: int = 0
    progress: int | float = 0
    status: TaskStatus = TaskStatus.NOT_STARTED
    status_note: str = ""
    milestone: bool = False
    owner: str | None = None
    depends_on: list[str | DependencySchema] = Field(default_factory=list)
    actual_start: Day | None = None
    actual_finish: Day | None = None
    constraint: ConstraintSchema | None = None
    start: Day | None = None

    @field_validator("id", "name", "status_note", "owner", mode="before")
    @classmethod
    def coerce_to_string(cls, v: Any) -> str:
        """Keep YAML numbers and booleans (`name: 2025`, `owner: yes`) as text."""
        return str(v)

    @field_validator("depends_on", mode="before")
    @classmethod
    def ensure_list(cls, v: Any) -> list[Any]:
        """Accept a single dependency as well as a list; coerce numeric ids."""
        items: list[Any] = v if isinstance(v, list) else [v]  # type: ignore[assignment]
        return [str(item) if isinstance(item, (int, float)) else item for item in items]


class WorkstreamSchema(_NullTolerantModel):
    """Schema for a workstream and its tasks."""

    id: str | None = None
    name: str = ""
    tasks: list[TaskSchema] = Field(default_factory=list)

    @field_validator("id", "name", mode="before")
    @classmethod
    def coerce_to_string(cls, v: Any) -> str:
        return str(v)


class PhaseSchema(_NullTolerantModel):
    """Schema for a phase and its workstreams."""

    id: str | None = None
    name: str = ""
    workstreams: list[WorkstreamSchema] = Field(default_factory=list)

    @field_validator("id", "name", mode="before")
    @classmethod
    def coerce_to_string(cls, v: Any) -> str:
        return str(v)


class ProjectSchema(_NullTolerantModel):
    """Schema for the ``project`` section."""

    name: str = "Project"
    id: str = ""
    updated: str | None = None
    start_date: Day | None = None
    status: ProjectStatus = ProjectStatus.GREEN
    status_summary: str = ""

    @field_validator("id", "name", "updated", "status_summary", mode="before")
    @classmethod
    def coerce_to_string(cls, v: Any) -> str:
        """Convert ids, YAML dates and scalar names to strings."""
        return str(v)


class CalendarSchema(_NullTolerantModel):
    """Schema for the ``calendar`` section."""

    working_days: list[str] = Field(default_factory=lambda: list(DEFAULT_WORKING_DAYS))
    holidays: list[Day] = Field(default_factory=list)
    duration_unit: DurationUnit = DurationUnit.WORKING_DAYS

    @field_validator("working_days", mode="before")
    @classmethod
    def normalize_weekdays(cls, v: Any) -> list[str]:
        """Accept ``mon``, ``Monday`` etc. and keep the three-letter form."""
        items: list[Any] = v if isinstance(v, list) else [v]  # type: ignore[assignment]
        return [str(item).strip()[:3].title() for item in items]


class BaselineTaskSchema(BaseModel):
    """Baseline dates for one task."""

    start: Day
    finish: Day


class BaselineSchema(_NullTolerantModel):
    """Schema for the optional ``baseline`` section."""

    captured_on: Day | None = None
    tasks: dict[str, BaselineTaskSchema] = Field(default_factory=dict)

    @field_validator("tasks", mode="before")
    @classmethod
    def coerce_keys(cls, v: Any) -> Any:
        if isinstance(v, dict):
            return {str(key): value for key, value in v.items()}  # type: ignore[misc]
        return v


class ScheduleSchema(_NullTolerantModel):
    """Schema for the entire schedule document."""

    project: ProjectSchema = Field(default_factory=ProjectSchema)
    calendar: CalendarSchema = Field(default_factory=CalendarSchema)
    baseline: BaselineSchema | None = None
    phases: list[PhaseSchema] = Field(default_factory=list)
