"""Natural-language command interpreter for schedule specifications."""

from __future__ import annotations

import re
from collections.abc import Sequence
from typing import Any

from ruamel.yaml import YAMLError

from ..config import InterpreterConfig
from ..exceptions import ParseError
from ..logger import get_logger
from .commands import Intent, ParsedCommand
from .diff import Diff, DiffEngine, make_round_trip_yaml
from .patterns import COMMAND_RULES, CommandRule
from .resolver import EntityResolver

logger = get_logger()

DEFAULT_RISK_NOTE = "At risk"
WORKING_DAYS_PER_WEEK = 5

_INT_INTENTS = frozenset(
    {
        Intent.SET_PROGRESS,
        Intent.EXTEND_DURATION,
        Intent.SHORTEN_DURATION,
        Intent.SET_DURATION,
        Intent.ADD_LAG,
        Intent.WHAT_IF,
    }
)


class CommandInterpreter:
    """Turn short commands into ParsedCommands and diffs for one specification.

    Example:
        >>> interpreter = CommandInterpreter(spec_text)
        >>> command = interpreter.parse_command("SW_IMPL is 75%")
        >>> new_text = interpreter.apply_diff(interpreter.generate_diff(command))

    Args:
        spec_text: YAML specification text
        config: Interpreter tuning (fuzzy threshold and exact-match boost)

    Raises:
        ParseError: If the text is not a YAML mapping
    """

    def __init__(self, spec_text: str, config: InterpreterConfig | None = None):
        self.config = config or InterpreterConfig()
        yaml_rt = make_round_trip_yaml()
        try:
            document: Any = yaml_rt.load(spec_text)  # type: ignore[no-untyped-call]
        except YAMLError as e:
            raise ParseError(f"Failed to parse YAML: {e}") from e
        if not isinstance(document, dict):
            raise ParseError("YAML must contain a dictionary at the root level")

        self.resolver = EntityResolver(document, threshold=self.config.fuzzy_threshold)
        self.diff_engine = DiffEngine(document, yaml_rt)  # type: ignore[arg-type]

    def parse_command(self, command: str) -> ParsedCommand:
        """Interpret ``command``; unrecognized text gives intent ``unknown``."""
        original = command.strip()
        cleaned = original.lower()

        best: ParsedCommand | None = None
        for rule in COMMAND_RULES:
            match = rule.pattern.search(cleaned)
            if match is None:
                continue
            parsed = self._from_match(rule, match, original, cleaned)
            if parsed is None:
                continue
            logger.debug(
                f"  {rule.intent.value} matched '{rule.pattern.pattern}' "
                f"(confidence {parsed.confidence:.3f})"
            )
            # Strict comparison keeps the earlier rule on ties
            if best is None or parsed.confidence > best.confidence:
                best = parsed

        if best is None:
            logger.checks(f"No rule matched '{cleaned}'")
            return ParsedCommand.unknown()

        logger.checks(
            f"Parsed '{cleaned}' as {best.intent.value} "
            f"(task={best.task_id}, confidence={best.confidence:.2f})"
        )
        return best

    def generate_diff(self, command: ParsedCommand) -> list[Diff]:
        return self.diff_engine.generate_diff(command)

    def apply_diff(self, diffs: Sequence[Diff]) -> str:
        return self.diff_engine.apply_diff(diffs)

    def get_yaml(self) -> str:
        """Current specification text, including any applied diffs."""
        return self.diff_engine.dump()

    def _from_match(
        self, rule: CommandRule, match: re.Match[str], original: str, cleaned: str
    ) -> ParsedCommand | None:
        confidence = rule.base_confidence
        task_id: str | None = None
        task_name: str | None = None

        candidate = match.group(rule.entity_group) if rule.entity_group else None
        if candidate:
            entity = self.resolver.resolve(candidate)
            if entity is None:
                logger.debug(f"  '{candidate}' does not name a known task")
            elif entity.exact:
                task_id = entity.id
                confidence = min(1.0, confidence + self.config.exact_match_boost)
            else:
                task_id = entity.id
                task_name = entity.name
                confidence = min(1.0, confidence * entity.score)

        parsed = ParsedCommand(
            intent=rule.intent,
            confidence=confidence,
            matched_pattern=rule.pattern.pattern,
            task_id=task_id,
            task_name=task_name,
        )

        raw_value = match.group(rule.value_group) if rule.value_group else None
        if rule.intent in _INT_INTENTS:
            parsed.value = int(raw_value) if raw_value is not None else None
            if rule.intent == Intent.WHAT_IF and "week" in cleaned and parsed.value is not None:
                parsed.value *= WORKING_DAYS_PER_WEEK
            if rule.intent == Intent.SET_PROGRESS and (parsed.value or 0) > 100:
                logger.debug(f"  progress {parsed.value} is out of range, ignoring match")
                return None
        elif rule.intent == Intent.ADD_RISK:
            parsed.value = DEFAULT_RISK_NOTE
            if raw_value:
                parsed.value = _original_span(original, cleaned, match, rule.value_group).strip()
        elif rule.intent == Intent.ADD_DEPENDENCY:
            parsed.value = self._resolve_id(raw_value)
        else:
            parsed.value = raw_value

        if rule.value2_group:
            parsed.value2 = self._resolve_id(match.group(rule.value2_group))
        return parsed

    def _resolve_id(self, candidate: str | None) -> str | None:
        """Resolve a referenced predecessor, keeping the upper-cased word if unknown."""
        if candidate is None:
            return None
        entity = self.resolver.resolve(candidate)
        if entity is None:
            return candidate.upper()
        return entity.id


def _original_span(original: str, cleaned: str, match: re.Match[str], group: int | None) -> str:
    """Return a captured group with the user's original casing when possible."""
    text = match.group(group) or ""
    if len(original) != len(cleaned):
        return text
    start, end = match.span(group)
    return original[start:end]
