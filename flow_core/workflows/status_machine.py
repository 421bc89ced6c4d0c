# flow_core/workflows/status_machine.py
from __future__ import annotations

from typing import Dict, FrozenSet, List

from .enums import Department, WorkStatus
from .rules import QA_REQUESTING_DEPARTMENTS


S = WorkStatus

# ===============================================================
# Work status transitions (per history entry)
# ===============================================================
STATUS_TRANSITIONS: Dict[WorkStatus, FrozenSet[WorkStatus]] = {
    S.NOT_STARTED: frozenset({S.IN_PROGRESS, S.ON_HOLD}),
    S.IN_PROGRESS: frozenset(
        {
            S.COMPLETED,
            S.ON_HOLD,
            S.CORRECTIONS_NEEDED,
            S.PENDING_CLIENT_APPROVAL,
            S.QA_TESTING,
        }
    ),
    S.CORRECTIONS_NEEDED: frozenset({S.IN_PROGRESS, S.BUGFIX_IN_PROGRESS}),
    S.COMPLETED: frozenset({S.PENDING_CLIENT_APPROVAL, S.QA_TESTING, S.BEFORE_LIVE_QA}),
    S.ON_HOLD: frozenset({S.IN_PROGRESS}),
    S.PENDING_CLIENT_APPROVAL: frozenset({S.COMPLETED, S.CLIENT_REJECTED}),
    S.CLIENT_REJECTED: frozenset({S.IN_PROGRESS}),
    S.QA_TESTING: frozenset({S.COMPLETED, S.QA_REJECTED}),
    S.QA_REJECTED: frozenset({S.BUGFIX_IN_PROGRESS}),
    S.BUGFIX_IN_PROGRESS: frozenset({S.QA_TESTING, S.IN_PROGRESS}),
    S.BEFORE_LIVE_QA: frozenset({S.READY_FOR_DELIVERY, S.QA_REJECTED}),
    S.READY_FOR_DELIVERY: frozenset(),
}


def allowed_next_statuses(current) -> List[WorkStatus]:
    return sorted(STATUS_TRANSITIONS.get(current, frozenset()))


def is_legal_status_transition(current, new) -> bool:
    return new in STATUS_TRANSITIONS.get(current, frozenset())


def illegal_status_message(current, new) -> str:
    return f"Invalid work status transition: {current} -> {new}"


def side_constraint_violations(current, new, department) -> List[str]:
    """
    Constraints that hold on top of the transition table.
    Returns an empty list when none are violated.
    """
    problems = []

    if new == S.PENDING_CLIENT_APPROVAL and department != Department.DESIGN:
        problems.append(
            f"{S.PENDING_CLIENT_APPROVAL} can only be requested in {Department.DESIGN} "
            f"(project is in {department})"
        )

    if new == S.QA_TESTING and department not in QA_REQUESTING_DEPARTMENTS:
        allowed = ", ".join(sorted(QA_REQUESTING_DEPARTMENTS))
        problems.append(
            f"{S.QA_TESTING} can only be requested from {allowed} (project is in {department})"
        )

    if new == S.COMPLETED and current != S.IN_PROGRESS:
        problems.append(
            f"{S.COMPLETED} can only be set from {S.IN_PROGRESS} (currently {current})"
        )

    return problems
