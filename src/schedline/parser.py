"""YAML parser for hierarchical schedule specifications."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError as PydanticValidationError

from .exceptions import ParseError, ValidationError
from .logger import get_logger
from .models import (
    PHASE_LEVEL,
    TASK_LEVEL,
    WORKSTREAM_LEVEL,
    BaselineDates,
    Constraint,
    Dependency,
    ProjectInfo,
    Task,
)
from .schemas import BaselineTaskSchema, DependencySchema, ScheduleSchema, TaskSchema
from .workcalendar import Calendar

logger = get_logger()

# Used when the specification has no project.start_date, so output stays deterministic
DEFAULT_PROJECT_START = date(2025, 1, 15)


def _default_task_list() -> list[Task]:
    return []


def _default_str_list() -> list[str]:
    return []


@dataclass
class ParsedSchedule:
    """Result of parsing: flat task list in document order plus hierarchy ids.

    The list may still contain duplicate or missing ids; the validator checks
    those before a map keyed by id is built.
    """

    project: ProjectInfo
    calendar: Calendar
    baseline_captured_on: date | None = None
    tasks: list[Task] = field(default_factory=_default_task_list)
    phase_ids: list[str] = field(default_factory=_default_str_list)
    workstream_ids: list[str] = field(default_factory=_default_str_list)


def load_yaml_text(text: str) -> dict[str, Any]:
    """Load YAML text, requiring a mapping at the root."""
    try:
        data: Any = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ParseError(f"Failed to parse YAML: {e}") from e

    if not isinstance(data, dict):
        raise ParseError("YAML must contain a dictionary at the root level")
    return data  # type: ignore[return-value]


def read_spec_file(file_path: Path | str) -> str:
    """Read a specification file as text."""
    path = Path(file_path)
    if not path.exists():
        raise ParseError(f"File not found: {file_path}")
    return path.read_text(encoding="utf-8")


class ScheduleParser:
    """Parser for schedule YAML documents.

    Only handles YAML parsing and task creation. Validation and date
    computation happen in ``schedline.schedule.Schedule``.
    """

    def __init__(self, default_project_start: date = DEFAULT_PROJECT_START):
        self.default_project_start = default_project_start

    def parse_file(self, file_path: Path | str) -> ParsedSchedule:
        """Parse a YAML file into a ParsedSchedule."""
        return self.parse_text(read_spec_file(file_path))

    def parse_text(self, text: str) -> ParsedSchedule:
        """Parse YAML text into a ParsedSchedule."""
        return self.parse_data(load_yaml_text(text))

    def parse_data(self, data: dict[str, Any]) -> ParsedSchedule:
        """Parse already-loaded YAML data into a ParsedSchedule."""
        try:
            schema = ScheduleSchema.model_validate(data)
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid YAML structure: {e}") from e

        project = ProjectInfo(
            name=schema.project.name,
            id=schema.project.id,
            updated=schema.project.updated or "",
            start_date=schema.project.start_date or self.default_project_start,
            status=schema.project.status,
            status_summary=schema.project.status_summary,
        )

        try:
            calendar = Calendar(
                working_days=tuple(schema.calendar.working_days),
                holidays=frozenset(schema.calendar.holidays),
                duration_unit=schema.calendar.duration_unit,
            )
        except ValueError as e:
            raise ValidationError(f"Invalid calendar: {e}") from e

        baseline_tasks: dict[str, BaselineTaskSchema] = {}
        captured_on = None
        if schema.baseline is not None:
            captured_on = schema.baseline.captured_on
            baseline_tasks = schema.baseline.tasks

        parsed = ParsedSchedule(project=project, calendar=calendar, baseline_captured_on=captured_on)

        for phase in schema.phases:
            phase_id = phase.id or ""
            parsed.phase_ids.append(phase_id)
            parsed.tasks.append(Task(id=phase_id, name=phase.name, level=PHASE_LEVEL))

            for ws in phase.workstreams:
                ws_id = ws.id or ""
                parsed.workstream_ids.append(ws_id)
                parsed.tasks.append(
                    Task(
                        id=ws_id,
                        name=ws.name,
                        level=WORKSTREAM_LEVEL,
                        parent_id=phase_id,
                        phase_id=phase_id,
                    )
                )

                for task_data in ws.tasks:
                    parsed.tasks.append(
                        self._parse_task(task_data, phase_id, ws_id, baseline_tasks)
                    )

        logger.checks(
            f"Parsed {len(parsed.phase_ids)} phase(s), {len(parsed.workstream_ids)} "
            f"workstream(s), {len(parsed.tasks)} schedule entries"
        )
        return parsed

    def _parse_task(
        self,
        task_data: TaskSchema,
        phase_id: str,
        ws_id: str,
        baseline_tasks: dict[str, BaselineTaskSchema],
    ) -> Task:
        task_id = task_data.id or ""

        constraint = None
        if task_data.constraint is not None:
            constraint = Constraint(
                date=task_data.constraint.date,
                type=task_data.constraint.type,
                reason=task_data.constraint.reason,
            )

        baseline = None
        if task_id in baseline_tasks:
            entry = baseline_tasks[task_id]
            baseline = BaselineDates(start=entry.start, finish=entry.finish)

        return Task(
            id=task_id,
            name=task_data.name,
            level=TASK_LEVEL,
            duration=task_data.duration,
            parent_id=ws_id,
            phase_id=phase_id,
            workstream_id=ws_id,
            dependencies=[_to_dependency(dep) for dep in task_data.depends_on],
            constraint=constraint,
            owner=task_data.owner,
            start=task_data.start,
            actual_start=task_data.actual_start,
            actual_finish=task_data.actual_finish,
            progress=task_data.progress,
            status=task_data.status,
            status_note=task_data.status_note,
            milestone=task_data.milestone,
            baseline=baseline,
        )


def _to_dependency(dep: str | DependencySchema) -> Dependency:
    if isinstance(dep, DependencySchema):
        return Dependency(task_id=dep.id, lag=dep.lag)
    return Dependency.parse(dep)


def iter_spec_entries(data: dict[str, Any]) -> Iterator[tuple[int, dict[str, Any]]]:
    """Walk the raw document, yielding ``(level, entry)`` for phases, workstreams and tasks.

    Works on both PyYAML and ruamel.yaml round-trip documents and never
    validates, so it is safe to use on specifications that fail to load.
    """
    for phase in data.get("phases") or []:
        if not isinstance(phase, dict):
            continue
        yield PHASE_LEVEL, phase
        for ws in phase.get("workstreams") or []:
            if not isinstance(ws, dict):
                continue
            yield WORKSTREAM_LEVEL, ws
            for task in ws.get("tasks") or []:
                if isinstance(task, dict):
                    yield TASK_LEVEL, task


def find_spec_entry(data: dict[str, Any], task_id: str) -> dict[str, Any] | None:
    """Return the raw mapping for ``task_id`` (phase, workstream or task), if present."""
    for _, entry in iter_spec_entries(data):
        if str(entry.get("id")) == task_id:
            return entry
    return None
