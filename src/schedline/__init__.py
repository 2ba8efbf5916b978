"""Hierarchical project scheduling with a natural-language editor."""

from .exceptions import (
    CircularDependencyError,
    MissingReferenceError,
    ParseError,
    SchedlineError,
    ValidationError,
)
from .nl.interpreter import CommandInterpreter
from .schedule import Schedule, load, load_file

__version__ = "0.1.0"

__all__ = [
    "CircularDependencyError",
    "CommandInterpreter",
    "MissingReferenceError",
    "ParseError",
    "Schedule",
    "SchedlineError",
    "ValidationError",
    "load",
    "load_file",
]
