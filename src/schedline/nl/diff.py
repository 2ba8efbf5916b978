"""Field-level diffs against the raw specification, and applying them."""

from __future__ import annotations

import io
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import date
from typing import Any

from ruamel.yaml import YAML

from ..logger import get_logger
from ..models import TaskStatus
from ..parser import find_spec_entry
from .commands import Intent, ParsedCommand

logger = get_logger()

_DURATION_INTENTS = frozenset(
    {Intent.EXTEND_DURATION, Intent.SHORTEN_DURATION, Intent.SET_DURATION}
)


@dataclass
class Diff:
    """One proposed change to one field of one specification entry."""

    task_id: str
    field: str
    old_value: Any
    new_value: Any
    description: str
    impact: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "description": self.description,
            "task_id": self.task_id,
            "field": self.field,
            "old_value": to_plain(self.old_value),
            "new_value": to_plain(self.new_value),
            "impact": self.impact,
        }


def to_plain(value: Any) -> Any:
    """Convert round-trip YAML containers and dates into JSON-ready values."""
    if isinstance(value, Mapping):
        return {str(k): to_plain(v) for k, v in value.items()}  # type: ignore[misc]
    if isinstance(value, Sequence) and not isinstance(value, str):
        return [to_plain(v) for v in value]  # type: ignore[misc]
    if isinstance(value, date):
        return value.isoformat()
    return value


def make_round_trip_yaml() -> YAML:
    """ruamel.yaml instance that keeps comments and key order on re-serialization."""
    yaml_rt = YAML()
    yaml_rt.preserve_quotes = False  # type: ignore[assignment]
    yaml_rt.indent(mapping=2, sequence=4, offset=2)
    yaml_rt.width = 4096  # type: ignore[assignment]
    return yaml_rt


class DiffEngine:
    """Generate and apply diffs against a round-trip specification document.

    The document is mutated in place by ``apply_diff``, so diffs from
    successive commands accumulate until the text is re-serialized.
    """

    def __init__(self, document: dict[str, Any], yaml_rt: YAML | None = None):
        self.document = document
        self.yaml_rt = yaml_rt or make_round_trip_yaml()

    def generate_diff(self, command: ParsedCommand) -> list[Diff]:
        """Build the diffs for a modifying command.

        Returns an empty list for queries, unknown commands, commands whose
        task could not be found in the raw document, and duration changes to
        milestones (which must keep duration 0).
        """
        if command.is_query or command.task_id is None:
            return []

        entry = find_spec_entry(self.document, command.task_id)
        if entry is None:
            logger.checks(f"No entry for {command.task_id}; nothing to change")
            return []
        if entry.get("milestone") and command.intent in _DURATION_INTENTS:
            logger.checks(f"{command.task_id} is a milestone; its duration stays 0")
            return []

        task_id = command.task_id
        value = command.value
        diffs: list[Diff] = []

        def add(field: str, new_value: Any, description: str, old_value: Any = None) -> None:
            old = entry.get(field)
            if old is None:
                old = old_value
            diffs.append(
                Diff(
                    task_id=task_id,
                    field=field,
                    old_value=to_plain(old),
                    new_value=new_value,
                    description=description,
                )
            )

        old_duration = entry.get("duration") or 0
        old_deps = to_plain(entry.get("depends_on") or [])

        if command.intent == Intent.SET_PROGRESS:
            add("progress", value, f"Set progress to {value}%", old_value=0)
        elif command.intent == Intent.MARK_COMPLETE:
            add("progress", 100, "Mark as complete", old_value=0)
            add(
                "status",
                TaskStatus.COMPLETE.value,
                "Set status to complete",
                old_value=TaskStatus.NOT_STARTED.value,
            )
        elif command.intent == Intent.EXTEND_DURATION:
            add(
                "duration",
                old_duration + value,
                f"Extend duration by {value} days",
                old_value=0,
            )
        elif command.intent == Intent.SHORTEN_DURATION:
            add(
                "duration",
                max(0, old_duration - value),
                f"Shorten duration by {value} days",
                old_value=0,
            )
        elif command.intent == Intent.SET_DURATION:
            add("duration", value, f"Set duration to {value} days", old_value=0)
        elif command.intent == Intent.ADD_RISK:
            add("status_note", value, f"Add risk note: {value}", old_value="")
            add(
                "status",
                TaskStatus.AT_RISK.value,
                "Set status to at_risk",
                old_value=TaskStatus.NOT_STARTED.value,
            )
        elif command.intent == Intent.SET_ACTUAL_START:
            add("actual_start", value, f"Set actual start to {value}")
        elif command.intent == Intent.SET_ACTUAL_FINISH:
            add("actual_finish", value, f"Set actual finish to {value}")
        elif command.intent == Intent.ADD_LAG:
            add(
                "depends_on",
                [*old_deps, {"id": command.value2, "lag": value}],
                f"Add {value} day lag after {command.value2}",
                old_value=[],
            )
        elif command.intent == Intent.ADD_DEPENDENCY:
            add(
                "depends_on",
                [*old_deps, value],
                f"Add dependency on {value}",
                old_value=[],
            )
        elif command.intent == Intent.ADD_CONSTRAINT:
            add(
                "constraint",
                {"type": "no_earlier_than", "date": value},
                f"Add constraint: no earlier than {value}",
            )

        return diffs

    def apply_diff(self, diffs: Sequence[Diff]) -> str:
        """Apply ``diffs`` to the document and return the re-serialized text.

        Diffs for ids that no longer exist are skipped. Apply the full list
        from one ``generate_diff`` call together; compound edits are only
        consistent as a set.
        """
        for diff in diffs:
            entry = find_spec_entry(self.document, diff.task_id)
            if entry is None:
                logger.warning(f"Skipping change to {diff.task_id}.{diff.field}: task not found")
                continue
            entry[diff.field] = diff.new_value
            logger.changes(f"{diff.task_id}: {diff.description}")

        return self.dump()

    def dump(self) -> str:
        stream = io.StringIO()
        self.yaml_rt.dump(self.document, stream)  # type: ignore[no-untyped-call]
        return stream.getvalue()
