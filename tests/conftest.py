"""Pytest configuration and fixtures for schedline tests."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from datetime import date
from pathlib import Path

import pytest

from schedline import context
from schedline.logger import reset_logger

# Fixed "today" so forecasts of in-progress tasks are reproducible
TODAY = date(2025, 2, 3)

BASIC_YAML = """
project:
  name: Test Project
  id: TEST001
  updated: 2025-01-08
  start_date: 2025-01-15
  status: green
  status_summary: On track

calendar:
  working_days: [Mon, Tue, Wed, Thu, Fri]
  holidays: []
  duration_unit: working_days

phases:
  - id: PHASE1
    name: Phase 1
    workstreams:
      - id: WS1
        name: Workstream 1
        tasks:
          - id: TASK1
            name: Task 1
            duration: 5
          - id: TASK2
            name: Task 2
            duration: 10
            depends_on: [TASK1]
"""

COMPLEX_YAML = """
project:
  name: Complex Project
  id: COMPLEX001
  updated: 2025-01-08
  start_date: 2025-01-15
  status: yellow

calendar:
  working_days: [Mon, Tue, Wed, Thu, Fri]
  holidays:
    - 2025-02-14
    - 2025-02-17
  duration_unit: working_days

baseline:
  captured_on: 2025-01-15
  tasks:
    TASK_A:
      start: 2025-01-15
      finish: 2025-01-22
    TASK_B:
      start: 2025-01-23
      finish: 2025-02-05

phases:
  - id: PHASE1
    name: Phase 1
    workstreams:
      - id: WS1
        name: Workstream 1
        tasks:
          - id: TASK_A
            name: Task A
            duration: 5
            progress: 100
            status: complete
            actual_start: 2025-01-15
            actual_finish: 2025-01-22
          - id: TASK_B
            name: Task B
            duration: 10
            depends_on:
              - id: TASK_A
                lag: 2
            progress: 60
            status: on_track
          - id: TASK_C
            name: Task C
            duration: 0
            depends_on: [TASK_B]
            constraint:
              type: no_earlier_than
              date: 2025-03-01
              reason: External dependency
            milestone: true
"""

EDITOR_YAML = """
# Program schedule
project:
  name: Test Project
  id: TEST001
  updated: 2025-01-08
  start_date: 2025-01-15
  status: green

calendar:
  working_days: [Mon, Tue, Wed, Thu, Fri]
  holidays: []
  duration_unit: working_days

phases:
  - id: PHASE1
    name: Phase 1
    workstreams:
      - id: WS1
        name: Workstream 1
        tasks:
          - id: SW_IMPL
            name: Software Implementation
            duration: 45
            progress: 50
            status: on_track  # reviewed weekly
          - id: HW_PROTO
            name: Hardware Prototype
            duration: 20
            progress: 0
            status: not_started
            depends_on: []
          - id: SW_DESIGN
            name: Software Design
            duration: 15
            progress: 100
            status: complete
"""


@pytest.fixture(autouse=True)
def clean_global_state() -> Iterator[None]:
    """Reset the logger and CLI config path around each test."""
    reset_logger()
    context.set_config_path(None)
    yield
    reset_logger()
    context.set_config_path(None)


@pytest.fixture
def basic_yaml() -> str:
    return BASIC_YAML


@pytest.fixture
def complex_yaml() -> str:
    return COMPLEX_YAML


@pytest.fixture
def editor_yaml() -> str:
    return EDITOR_YAML


@pytest.fixture
def write_spec(tmp_path: Path) -> Callable[..., Path]:
    """Factory writing schedule text to a file under tmp_path."""

    def _write(text: str, name: str = "schedule.yaml") -> Path:
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def today() -> date:
    return TODAY
