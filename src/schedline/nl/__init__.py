"""Natural-language editing: command interpretation, diffs and queries."""

from .commands import Intent, ParsedCommand
from .diff import Diff, DiffEngine
from .interpreter import CommandInterpreter

__all__ = ["CommandInterpreter", "Diff", "DiffEngine", "Intent", "ParsedCommand"]
