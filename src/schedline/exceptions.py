"""Custom exceptions for schedline."""


class SchedlineError(Exception):
    """Base exception for all schedline errors."""

    pass


class ValidationError(SchedlineError):
    """Raised when a schedule specification violates a structural invariant."""

    pass


class CircularDependencyError(ValidationError):
    """Raised when a circular dependency is detected."""

    pass


class MissingReferenceError(ValidationError):
    """Raised when a dependency references a task that does not exist."""

    pass


class ParseError(SchedlineError):
    """Raised when YAML parsing fails."""

    pass
