"""Process-wide CLI state."""

from __future__ import annotations

from pathlib import Path


class _Context:
    """Holds options set once by the CLI callback."""

    def __init__(self) -> None:
        self.config_path: Path | None = None


# Singleton instance
_context = _Context()


def get_config_path() -> Path | None:
    """Get the config path given with --config, if any."""
    return _context.config_path


def set_config_path(path: Path | None) -> None:
    """Set the config path given with --config."""
    _context.config_path = path
