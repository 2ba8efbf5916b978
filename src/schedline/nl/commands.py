"""Parsed natural-language commands."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class Intent(str, Enum):
    """What a command asks for."""

    SET_PROGRESS = "set_progress"
    MARK_COMPLETE = "mark_complete"
    EXTEND_DURATION = "extend_duration"
    SHORTEN_DURATION = "shorten_duration"
    SET_DURATION = "set_duration"
    ADD_RISK = "add_risk"
    SET_ACTUAL_START = "set_actual_start"
    SET_ACTUAL_FINISH = "set_actual_finish"
    ADD_DEPENDENCY = "add_dependency"
    ADD_LAG = "add_lag"
    ADD_CONSTRAINT = "add_constraint"
    WHAT_IF = "what_if"
    SHOW_CRITICAL_PATH = "show_critical_path"
    SHOW_MILESTONES = "show_milestones"
    SHOW_VARIANCE = "show_variance"
    SHOW_STATUS = "show_status"
    UNKNOWN = "unknown"


# Intents that read the schedule and never produce diffs
QUERY_INTENTS = frozenset(
    {
        Intent.WHAT_IF,
        Intent.SHOW_CRITICAL_PATH,
        Intent.SHOW_MILESTONES,
        Intent.SHOW_VARIANCE,
        Intent.SHOW_STATUS,
    }
)


@dataclass
class ParsedCommand:
    """Result of interpreting one command string.

    ``value`` and ``value2`` carry the intent's payload (see ``Intent``);
    ``task_id`` is None when the command names no task or the name could
    not be resolved.
    """

    intent: Intent
    confidence: float
    matched_pattern: str = ""
    task_id: str | None = None
    task_name: str | None = None
    value: Any = None
    value2: Any = None

    @property
    def is_query(self) -> bool:
        return self.intent in QUERY_INTENTS

    @classmethod
    def unknown(cls) -> ParsedCommand:
        return cls(intent=Intent.UNKNOWN, confidence=0.0)

    def to_dict(self) -> dict[str, Any]:
        return {
            "intent": self.intent.value,
            "task_id": self.task_id,
            "task_name": self.task_name,
            "value": self.value,
            "value2": self.value2,
            "confidence": self.confidence,
            "matched_pattern": self.matched_pattern,
            "is_query": self.is_query,
        }
