# services/stages.py: the installation pipeline as a linear state machine
from __future__ import annotations
from typing import NamedTuple

PROJECT_STAGES: list[str] = [
    "Advance payment done",
    "Approvals to be received",
    "Approvals Received/shared to customer",
    "First payment collected/loan process started",
    "Loan Approved",
    "Structure ordered/panels ordered",
    "Structure arrived/panels arrived",
    "2nd payment collected",
    "Installation pending",
    "Installation Done",
    "Net meter Application(yet to start)",
    "Net meter Application(If applicable)",
    "Net Meter Received",
    "Net Meter Installation completed",
    "Inspection pending",
    "Approved Inspection",
    "Subsidy(in progress)",
    "Subsidy disbursed",
    "Handover of Docs",
    "Final payment(done)/completed",
]

FIRST_STAGE = PROJECT_STAGES[0]
LAST_STAGE = PROJECT_STAGES[-1]

# Reporting buckets; every stage belongs to exactly one group.
STAGE_GROUPS: list[tuple[str, list[str]]] = [
    ("Initial Phase", PROJECT_STAGES[0:3]),
    ("Procurement", PROJECT_STAGES[3:8]),
    ("Installation", PROJECT_STAGES[8:10]),
    ("Net Metering", PROJECT_STAGES[10:14]),
    ("Completion", PROJECT_STAGES[14:20]),
]

ACTIVE = "active"
COMPLETED = "completed"
DELETED = "deleted"


class StageMove(NamedTuple):
    stage: str
    status: str
    changed: bool


def stage_index(stage: str | None) -> int:
    """Position of ``stage`` in the pipeline; unknown names count as the first stage."""
    try:
        return PROJECT_STAGES.index(stage)
    except ValueError:
        return 0


def _move(stage: str | None, status: str, step: int) -> StageMove:
    current = stage_index(stage)
    target = min(max(current + step, 0), len(PROJECT_STAGES) - 1)
    if target == current:
        return StageMove(PROJECT_STAGES[current], status, False)

    new_status = status
    if target == len(PROJECT_STAGES) - 1:
        new_status = COMPLETED
    elif current == len(PROJECT_STAGES) - 1:
        new_status = ACTIVE
    return StageMove(PROJECT_STAGES[target], new_status, True)


def next_stage(stage: str | None, status: str) -> StageMove:
    return _move(stage, status, +1)


def previous_stage(stage: str | None, status: str) -> StageMove:
    return _move(stage, status, -1)


def stage_progress(stage: str | None) -> int:
    """Percent complete, as shown on the project detail progress bar."""
    return round(stage_index(stage) * 100 / (len(PROJECT_STAGES) - 1))
