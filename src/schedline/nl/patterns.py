"""Ordered rule table for command interpretation.

Every rule is tried against the cleaned command; the interpreter keeps the
match with the highest final confidence, and on a tie the earlier rule wins.
Duration rules therefore sit ahead of the bare-number progress rules, and the
query rules come last and only match at the start of the command.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from .commands import Intent

_DATE = r"(\d{4}-\d{2}-\d{2})"


@dataclass(frozen=True)
class CommandRule:
    """One pattern in the table.

    Group numbers refer to the pattern's capture groups; None means the rule
    does not capture that part.
    """

    pattern: re.Pattern[str]
    intent: Intent
    base_confidence: float
    entity_group: int | None = 1
    value_group: int | None = 2
    value2_group: int | None = None


def _rule(
    pattern: str,
    intent: Intent,
    base_confidence: float,
    entity_group: int | None = 1,
    value_group: int | None = 2,
    value2_group: int | None = None,
) -> CommandRule:
    return CommandRule(
        pattern=re.compile(pattern),
        intent=intent,
        base_confidence=base_confidence,
        entity_group=entity_group,
        value_group=value_group,
        value2_group=value2_group,
    )


COMMAND_RULES: tuple[CommandRule, ...] = (
    # Completion
    _rule(r"mark\s+(\w+)\s+(?:as\s+)?complete", Intent.MARK_COMPLETE, 0.98, value_group=None),
    _rule(r"(\w+)\s+is\s+(?:done|complete|finished)", Intent.MARK_COMPLETE, 0.95, value_group=None),
    _rule(r"complete\s+(\w+)", Intent.MARK_COMPLETE, 0.95, value_group=None),
    # Duration changes
    _rule(r"extend\s+(\w+)\s+by\s+(\d+)\s*(?:days?|d)", Intent.EXTEND_DURATION, 0.98),
    _rule(r"(\w+)\s+needs\s+(\d+)\s+more\s+days?", Intent.EXTEND_DURATION, 0.90),
    _rule(
        r"add\s+(\d+)\s+days?\s+to\s+(\w+)",
        Intent.EXTEND_DURATION,
        0.95,
        entity_group=2,
        value_group=1,
    ),
    _rule(r"shorten\s+(\w+)\s+by\s+(\d+)\s*(?:days?|d)", Intent.SHORTEN_DURATION, 0.98),
    _rule(r"reduce\s+(\w+)\s+by\s+(\d+)\s*(?:days?|d)", Intent.SHORTEN_DURATION, 0.98),
    _rule(
        r"set\s+(\w+)\s+(?:to\s+|duration\s+)?(\d+)\s+(?:days?|d)", Intent.SET_DURATION, 0.96
    ),
    _rule(r"(\w+)\s+duration\s+(?:is\s+)?(\d+)\s*(?:days?|d)?", Intent.SET_DURATION, 0.95),
    # Progress
    _rule(r"(?:set\s+)?(\w+)\s+(?:is\s+|to\s+)?(\d+)%", Intent.SET_PROGRESS, 0.95),
    _rule(r"(\w+)\s+progress\s+(?:is\s+)?(\d+)%?", Intent.SET_PROGRESS, 0.95),
    _rule(r"set\s+(\w+)\s+to\s+(\d+)\b(?!\s*days?)", Intent.SET_PROGRESS, 0.85),
    _rule(r"(\w+)\s+is\s+(\d+)\b(?!\s*days?)", Intent.SET_PROGRESS, 0.80),
    # Actuals
    _rule(rf"(\w+)\s+started\s+{_DATE}", Intent.SET_ACTUAL_START, 0.98),
    _rule(rf"(\w+)\s+finished\s+{_DATE}", Intent.SET_ACTUAL_FINISH, 0.98),
    # Dependencies
    _rule(
        r"(\w+)\s+starts\s+(\d+)\s+days?\s+after\s+(\w+)", Intent.ADD_LAG, 0.95, value2_group=3
    ),
    _rule(r"(\w+)\s+depends\s+on\s+(\w+)", Intent.ADD_DEPENDENCY, 0.95),
    _rule(r"move\s+(\w+)\s+after\s+(\w+)", Intent.ADD_DEPENDENCY, 0.95),
    # Constraints
    _rule(rf"(\w+)\s+no\s+earlier\s+than\s+{_DATE}", Intent.ADD_CONSTRAINT, 0.98),
    # Risk
    _rule(r"risk\s+for\s+(\w+)(?::\s*(.+))?", Intent.ADD_RISK, 0.90),
    _rule(r"(\w+)\s+(?:is\s+)?at\s+risk(?::\s*(.+))?", Intent.ADD_RISK, 0.90),
    _rule(r"flag\s+(\w+)(?:\s+as\s+)?at\s+risk(?::\s*(.+))?", Intent.ADD_RISK, 0.90),
    # What-if
    _rule(
        r"what\s+if\s+(\w+)\s+slips?\s+(?:by\s+)?(\d+)\s*(?:days?|d|weeks?)",
        Intent.WHAT_IF,
        1.00,
    ),
    # Queries, anchored at the start of the command
    _rule(
        r"^(?:show\s+)?(?:critical\s+path|what.*driving.*end)",
        Intent.SHOW_CRITICAL_PATH,
        1.00,
        entity_group=None,
        value_group=None,
    ),
    _rule(
        r"^(?:show\s+)?milestones?\b",
        Intent.SHOW_MILESTONES,
        1.00,
        entity_group=None,
        value_group=None,
    ),
    _rule(
        r"^(?:show\s+)?variance\b", Intent.SHOW_VARIANCE, 1.00, entity_group=None, value_group=None
    ),
    _rule(
        r"^(?:show\s+)?status\b|^summary\b|^how\s+are\s+we",
        Intent.SHOW_STATUS,
        1.00,
        entity_group=None,
        value_group=None,
    ),
)
