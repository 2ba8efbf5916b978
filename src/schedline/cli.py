"""Command-line interface for schedline."""

from __future__ import annotations

import json
from datetime import date
from pathlib import Path
from typing import Annotated, Any

import typer

from . import context
from .config import SchedlineConfig, discover_config
from .exceptions import SchedlineError
from .logger import setup_logger
from .nl.commands import Intent
from .nl.interpreter import CommandInterpreter
from .nl.queries import answer_query, what_if
from .parser import read_spec_file
from .schedule import Schedule, load
from .summary import format_summary

app = typer.Typer(
    name="schedline",
    help="Hierarchical project scheduling with critical path analysis and a natural-language editor",
    add_completion=False,
)

FileArgument = Annotated[Path, typer.Argument(help="Path to the schedule YAML file")]
CurrentDateOption = Annotated[
    str | None,
    typer.Option(
        "--current-date",
        help="As-of date for forecasting in-progress tasks (YYYY-MM-DD). Defaults to today",
    ),
]


@app.callback()
def main_callback(
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose",
            "-v",
            help="Verbosity level: 0=silent (default), 1=show changes, 2=show all checks, 3=debug",
            min=0,
            max=3,
        ),
    ] = 0,
    config: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to config file (default: schedline_config.yaml)",
        ),
    ] = None,
) -> None:
    """Global options for schedline commands."""
    setup_logger(verbose)
    context.set_config_path(config)


def _parse_current_date(current_date: str | None) -> date | None:
    if not current_date:
        return None
    try:
        return date.fromisoformat(current_date)
    except ValueError as e:
        typer.echo(f"Error: Invalid date format '{current_date}'. Use YYYY-MM-DD", err=True)
        raise typer.Exit(1) from e


def _load(file: Path, current_date: str | None) -> tuple[str, SchedlineConfig, Schedule]:
    today = _parse_current_date(current_date)
    config = discover_config(file)
    text = read_spec_file(file)
    return text, config, load(text, today=today, config=config)


def _emit(text: str, output: Path | None) -> None:
    if output:
        output.write_text(text, encoding="utf-8")
        typer.echo(f"Output written to {output}")
    else:
        typer.echo(text)


def _json(data: Any) -> str:
    return json.dumps(data, indent=2)


@app.command()
def show(
    file: FileArgument,
    *,
    current_date: CurrentDateOption = None,
) -> None:
    """Print a text summary of the computed schedule."""
    try:
        _, _, schedule = _load(file, current_date)
        typer.echo(format_summary(schedule), nl=False)
    except SchedlineError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None


@app.command()
def export(
    file: FileArgument,
    *,
    level: Annotated[
        int | None,
        typer.Option(
            "--level",
            "-l",
            help="Deepest level to include: 1=phases, 2=workstreams, 3=tasks",
            min=1,
            max=3,
        ),
    ] = None,
    output: Annotated[Path | None, typer.Option("--output", "-o", help="Output file path")] = None,
    current_date: CurrentDateOption = None,
) -> None:
    """Export the computed schedule as JSON."""
    try:
        _, config, schedule = _load(file, current_date)
        export_level = level if level is not None else config.export.default_level
        _emit(schedule.export_json(export_level), output)
    except SchedlineError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None


@app.command()
def parse(
    file: FileArgument,
    command: Annotated[str, typer.Argument(help="Natural-language command")],
    *,
    current_date: CurrentDateOption = None,
) -> None:
    """Interpret a command and print it with its proposed diffs as JSON.

    Query commands (critical path, milestones, variance, status, what-if) are
    answered against the computed schedule instead.
    """
    try:
        config = discover_config(file)
        text = read_spec_file(file)
        interpreter = CommandInterpreter(text, config.interpreter)
        parsed = interpreter.parse_command(command)

        result: dict[str, Any] = {"command": parsed.to_dict()}
        if parsed.is_query:
            schedule = load(text, today=_parse_current_date(current_date), config=config)
            result["answer"] = answer_query(schedule, parsed)
        else:
            result["diffs"] = [diff.to_dict() for diff in interpreter.generate_diff(parsed)]
        typer.echo(_json(result))
    except (SchedlineError, ValueError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None


@app.command()
def edit(  # noqa: PLR0913 - CLI command needs multiple options
    file: FileArgument,
    command: Annotated[str, typer.Argument(help="Natural-language edit command")],
    *,
    apply: Annotated[
        bool, typer.Option("--apply", help="Write the change (default is a dry run)")
    ] = False,
    min_confidence: Annotated[
        float,
        typer.Option(
            "--min-confidence",
            help="Refuse commands interpreted with lower confidence",
            min=0.0,
            max=1.0,
        ),
    ] = 0.0,
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Write the updated YAML here instead of FILE"),
    ] = None,
) -> None:
    """Show the diffs a command would make, and optionally apply them."""
    try:
        config = discover_config(file)
        interpreter = CommandInterpreter(read_spec_file(file), config.interpreter)
        parsed = interpreter.parse_command(command)

        if parsed.intent == Intent.UNKNOWN:
            typer.echo(f"Error: Could not understand '{command}'", err=True)
            raise typer.Exit(1)
        if parsed.is_query:
            typer.echo(
                f"Error: '{command}' is a query ({parsed.intent.value}); use 'schedline parse'",
                err=True,
            )
            raise typer.Exit(1)
        if parsed.confidence < min_confidence:
            typer.echo(
                f"Error: Confidence {parsed.confidence:.2f} is below {min_confidence:.2f}",
                err=True,
            )
            raise typer.Exit(1)

        diffs = interpreter.generate_diff(parsed)
        if not diffs:
            typer.echo(f"No changes: no task matches '{command}'")
            return

        typer.echo(f"{parsed.intent.value} (confidence {parsed.confidence:.2f})")
        for diff in diffs:
            typer.echo(
                f"  {diff.task_id}.{diff.field}: {diff.old_value!r} -> {diff.new_value!r}"
                f"  # {diff.description}"
            )

        if not apply:
            typer.echo("\nDry run - no changes made. Use --apply to write them.")
            return

        new_text = interpreter.apply_diff(diffs)
        # Refuse to write a specification that no longer loads
        load(new_text, config=config)
        target = output or file
        target.write_text(new_text, encoding="utf-8")
        typer.echo(f"\n✓ Changes written to {target}")
    except SchedlineError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None


@app.command(name="what-if")
def what_if_command(
    file: FileArgument,
    task: Annotated[str, typer.Argument(help="Id of the task that slips")],
    days: Annotated[int, typer.Argument(help="Working days of slip", min=0)],
    *,
    current_date: CurrentDateOption = None,
) -> None:
    """Simulate a task slipping and report the effect on the project end."""
    try:
        _, _, schedule = _load(file, current_date)
        result = what_if(schedule, task, days)
        typer.echo(
            f"{task} slips {days}d: project end {result['original_end']} -> "
            f"{result['projected_end']} ({result['delay_days']:+d} working days)"
        )
        if result["newly_critical"]:
            typer.echo(f"Newly critical: {', '.join(result['newly_critical'])}")
    except (SchedlineError, ValueError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None


def main() -> int:
    """Main entry point."""
    app()
    return 0


if __name__ == "__main__":
    main()
