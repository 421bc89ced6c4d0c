# flow_core/workflows/gates.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Tuple

from .enums import ApprovalStatus
from .rules import DEFAULT_RULES, WorkflowRules


@dataclass(frozen=True)
class GateResult:
    satisfied: bool
    missing: Tuple[str, ...] = ()


def missing_approval_message(approval_type) -> str:
    return f"missing {approval_type} approval"


def are_gates_satisfied(
    department,
    current_status,
    approvals: Iterable,
    qa_rounds: Iterable,
    *,
    rules: WorkflowRules = DEFAULT_RULES,
) -> GateResult:
    """
    Pure gate check for one department occupancy.

    `approvals` and `qa_rounds` are any objects exposing `approval_type`/`status`
    and `status` respectively (model instances or plain records). Nothing is
    loaded here; callers supply the records.
    """
    gate = rules.approval_gate(department)
    if gate is None:
        return GateResult(satisfied=True)

    approvals = list(approvals)
    qa_rounds = list(qa_rounds)
    missing = []

    if gate.minimum_work_status and current_status != gate.minimum_work_status:
        missing.append(
            f"work status must be {gate.minimum_work_status} (currently {current_status})"
        )

    for approval_type in gate.required_approval_types:
        if not any(
            a.approval_type == approval_type and a.status == ApprovalStatus.APPROVED
            for a in approvals
        ):
            missing.append(missing_approval_message(approval_type))

    if gate.required_qa_status:
        if not any(r.status == gate.required_qa_status for r in qa_rounds):
            missing.append(f"requires a QA round with status {gate.required_qa_status}")

    return GateResult(satisfied=not missing, missing=tuple(missing))
