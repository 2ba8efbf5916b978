"""Tests for diff generation and application against the raw specification."""

from datetime import date
from io import StringIO

import pytest

from schedline import load
from schedline.logger import setup_logger
from schedline.models import Dependency, TaskStatus
from schedline.nl import CommandInterpreter, Diff, Intent, ParsedCommand


@pytest.fixture
def interpreter(editor_yaml: str) -> CommandInterpreter:
    return CommandInterpreter(editor_yaml)


def _diffs(interpreter: CommandInterpreter, text: str) -> list[Diff]:
    return interpreter.generate_diff(interpreter.parse_command(text))


class TestGenerateDiff:
    """Test the diffs produced for each modifying intent."""

    def test_set_progress(self, interpreter: CommandInterpreter) -> None:
        """Test the progress diff carries the old and new values."""
        diffs = _diffs(interpreter, "SW_IMPL is 75%")

        assert len(diffs) == 1
        diff = diffs[0]
        assert diff.task_id == "SW_IMPL"
        assert diff.field == "progress"
        assert diff.old_value == 50
        assert diff.new_value == 75
        assert diff.description == "Set progress to 75%"

    def test_mark_complete(self, interpreter: CommandInterpreter) -> None:
        """Test that completing a task sets progress and status."""
        diffs = _diffs(interpreter, "mark HW_PROTO complete")

        assert [(d.field, d.old_value, d.new_value) for d in diffs] == [
            ("progress", 0, 100),
            ("status", "not_started", "complete"),
        ]

    def test_extend_duration(self, interpreter: CommandInterpreter) -> None:
        """Test extending adds to the current duration."""
        diff = _diffs(interpreter, "extend SW_IMPL by 10 days")[0]

        assert diff.field == "duration"
        assert (diff.old_value, diff.new_value) == (45, 55)
        assert diff.description == "Extend duration by 10 days"

    def test_shorten_never_negative(self, interpreter: CommandInterpreter) -> None:
        """Test that shortening stops at zero."""
        diff = _diffs(interpreter, "shorten HW_PROTO by 30 days")[0]
        assert (diff.old_value, diff.new_value) == (20, 0)

    def test_set_duration(self, interpreter: CommandInterpreter) -> None:
        """Test setting an absolute duration."""
        diff = _diffs(interpreter, "set SW_IMPL to 30 days")[0]
        assert (diff.field, diff.new_value) == ("duration", 30)

    def test_add_risk(self, interpreter: CommandInterpreter) -> None:
        """Test that a risk note also moves the status to at_risk."""
        diffs = _diffs(interpreter, "flag SW_IMPL at risk: Supplier Delay")

        assert [(d.field, d.old_value, d.new_value) for d in diffs] == [
            ("status_note", "", "Supplier Delay"),
            ("status", "on_track", "at_risk"),
        ]
        assert diffs[0].description == "Add risk note: Supplier Delay"

    def test_actual_start(self, interpreter: CommandInterpreter) -> None:
        """Test recording an actual start date."""
        diff = _diffs(interpreter, "SW_IMPL started 2025-01-20")[0]

        assert diff.field == "actual_start"
        assert diff.old_value is None
        assert diff.new_value == "2025-01-20"

    def test_add_dependency_appends(self, interpreter: CommandInterpreter) -> None:
        """Test adding a plain predecessor."""
        diff = _diffs(interpreter, "HW_PROTO depends on SW_DESIGN")[0]

        assert diff.field == "depends_on"
        assert diff.old_value == []
        assert diff.new_value == ["SW_DESIGN"]
        assert diff.description == "Add dependency on SW_DESIGN"

    def test_add_lag(self, interpreter: CommandInterpreter) -> None:
        """Test adding a predecessor with lag."""
        diff = _diffs(interpreter, "HW_PROTO starts 3 days after SW_DESIGN")[0]

        assert diff.new_value == [{"id": "SW_DESIGN", "lag": 3}]
        assert diff.description == "Add 3 day lag after SW_DESIGN"

    def test_add_constraint(self, interpreter: CommandInterpreter) -> None:
        """Test adding a no-earlier-than constraint."""
        diff = _diffs(interpreter, "HW_PROTO no earlier than 2025-03-03")[0]

        assert diff.field == "constraint"
        assert diff.new_value == {"type": "no_earlier_than", "date": "2025-03-03"}

    def test_queries_produce_no_diffs(self, interpreter: CommandInterpreter) -> None:
        """Test that queries never propose edits."""
        assert _diffs(interpreter, "show critical path") == []
        assert _diffs(interpreter, "what if SW_IMPL slips 5 days") == []

    def test_unresolved_task_produces_no_diffs(self, interpreter: CommandInterpreter) -> None:
        """Test that an unknown task gives no diffs."""
        assert _diffs(interpreter, "XYZZY is 75%") == []

    @pytest.mark.parametrize(
        "text", ["extend TASK_C by 5 days", "set TASK_C to 3 days", "shorten TASK_C by 1 day"]
    )
    def test_milestone_duration_unchanged(self, complex_yaml: str, text: str) -> None:
        """Test that duration edits on a milestone give no diffs."""
        interpreter = CommandInterpreter(complex_yaml)
        command = interpreter.parse_command(text)

        assert command.task_id == "TASK_C"
        assert interpreter.generate_diff(command) == []

    def test_milestone_progress_still_editable(self, complex_yaml: str, today: date) -> None:
        """Test that a milestone can still be marked complete."""
        interpreter = CommandInterpreter(complex_yaml)
        text = interpreter.apply_diff(_diffs(interpreter, "mark TASK_C complete"))

        assert load(text, today=today).tasks["TASK_C"].progress == 100

    def test_diff_to_dict(self, interpreter: CommandInterpreter) -> None:
        """Test the JSON form of a diff."""
        assert _diffs(interpreter, "SW_IMPL is 75%")[0].to_dict() == {
            "description": "Set progress to 75%",
            "task_id": "SW_IMPL",
            "field": "progress",
            "old_value": 50,
            "new_value": 75,
            "impact": None,
        }


class TestApplyDiff:
    """Test applying diffs and re-loading the edited text."""

    def test_apply_and_reload(self, interpreter: CommandInterpreter, today: date) -> None:
        """Test that applied text loads with the new value."""
        text = interpreter.apply_diff(_diffs(interpreter, "SW_IMPL is 75%"))

        assert "progress: 75" in text
        assert load(text, today=today).tasks["SW_IMPL"].progress == 75

    def test_comments_and_order_preserved(self, interpreter: CommandInterpreter) -> None:
        """Test that comments and key order survive an edit."""
        text = interpreter.apply_diff(_diffs(interpreter, "extend SW_IMPL by 10 days"))

        assert "# Program schedule" in text
        assert "# reviewed weekly" in text
        assert text.index("SW_IMPL") < text.index("HW_PROTO") < text.index("SW_DESIGN")
        assert "duration: 55" in text

    def test_edits_accumulate(self, interpreter: CommandInterpreter, today: date) -> None:
        """Test that successive edits build on each other."""
        interpreter.apply_diff(_diffs(interpreter, "SW_IMPL is 75%"))
        interpreter.apply_diff(_diffs(interpreter, "mark HW_PROTO complete"))

        schedule = load(interpreter.get_yaml(), today=today)
        assert schedule.tasks["SW_IMPL"].progress == 75
        assert schedule.tasks["HW_PROTO"].progress == 100
        assert schedule.tasks["HW_PROTO"].status == TaskStatus.COMPLETE

    def test_dependency_with_lag_reloads(
        self, interpreter: CommandInterpreter, today: date
    ) -> None:
        """Test that a lagged dependency reloads and shifts the start."""
        diffs = _diffs(interpreter, "HW_PROTO starts 3 days after SW_DESIGN")
        text = interpreter.apply_diff(diffs)
        task = load(text, today=today).tasks["HW_PROTO"]

        assert task.dependencies == [Dependency(task_id="SW_DESIGN", lag=3)]
        # SW_DESIGN finishes 2025-02-05, plus three working days
        assert task.start_date == date(2025, 2, 10)

    def test_plain_dependency_reloads(self, interpreter: CommandInterpreter, today: date) -> None:
        """Test that an added dependency schedules after its predecessor."""
        text = interpreter.apply_diff(_diffs(interpreter, "HW_PROTO depends on SW_DESIGN"))
        task = load(text, today=today).tasks["HW_PROTO"]

        assert task.dependency_ids == ["SW_DESIGN"]
        assert task.start_date == date(2025, 2, 5)

    def test_constraint_reloads(self, interpreter: CommandInterpreter, today: date) -> None:
        """Test that an added constraint moves the start date."""
        text = interpreter.apply_diff(_diffs(interpreter, "HW_PROTO no earlier than 2025-03-03"))
        task = load(text, today=today).tasks["HW_PROTO"]

        assert task.constraint is not None
        assert task.constraint.date == date(2025, 3, 3)
        assert task.start_date == date(2025, 3, 3)

    def test_actual_finish_reloads(self, interpreter: CommandInterpreter, today: date) -> None:
        """Test that an actual finish becomes the end date."""
        text = interpreter.apply_diff(_diffs(interpreter, "SW_DESIGN finished 2025-02-10"))
        assert load(text, today=today).tasks["SW_DESIGN"].end_date == date(2025, 2, 10)

    def test_missing_task_skipped(self, interpreter: CommandInterpreter) -> None:
        """Test that a diff for a missing task is logged and skipped."""
        stream = StringIO()
        setup_logger(1, stream=stream)
        before = interpreter.get_yaml()

        ghost = Diff(
            task_id="GHOST",
            field="progress",
            old_value=0,
            new_value=50,
            description="Set progress to 50%",
        )
        assert interpreter.apply_diff([ghost]) == before
        assert "Skipping change to GHOST.progress" in stream.getvalue()

    def test_applied_changes_logged(self, interpreter: CommandInterpreter) -> None:
        """Test that each applied change is logged."""
        stream = StringIO()
        setup_logger(1, stream=stream)

        interpreter.apply_diff(_diffs(interpreter, "SW_IMPL is 75%"))
        assert "SW_IMPL: Set progress to 75%" in stream.getvalue()

    def test_empty_diff_list_round_trips(self, interpreter: CommandInterpreter) -> None:
        """Test that applying nothing leaves the text intact."""
        command = ParsedCommand(intent=Intent.SHOW_STATUS, confidence=1.0)
        text = interpreter.apply_diff(interpreter.generate_diff(command))

        assert "# Program schedule" in text
        assert "depends_on: []" in text
