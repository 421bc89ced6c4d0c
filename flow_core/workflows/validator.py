# flow_core/workflows/validator.py
"""
Read-only validation of department moves and work status updates.

Every function here returns a ValidationResult listing all problems found;
none of them mutate or lock anything. The services call them again inside
their transaction after locking the project row, which is the authoritative
check.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Tuple

from flow_core.models import DepartmentHistory, Project

from .enums import Department, QAStatus, WorkflowAction, WorkStatus, parse_choice
from .exceptions import ErrorKind, ValidationResult, WorkflowNotFound
from .gates import are_gates_satisfied
from .permissions import action_allowed, role_permissions
from .rules import DEFAULT_RULES, WorkflowRules
from .status_machine import (
    illegal_status_message,
    is_legal_status_transition,
    side_constraint_violations,
)

logger = logging.getLogger(__name__)


# ===============================================================
# Loading helpers
# ===============================================================

def current_entry(project) -> Optional[DepartmentHistory]:
    """
    Latest history entry, or None when the newest row does not belong to the
    project's current department.
    """
    entry = DepartmentHistory.objects.latest_for(project.pk)
    if entry is None or entry.to_department != project.current_department:
        return None
    return entry


def _project_state(project) -> Tuple[Optional[DepartmentHistory], str, list, list]:
    entry = current_entry(project)
    if entry is None:
        return None, WorkStatus.NOT_STARTED, [], []
    return entry, entry.work_status, list(entry.approvals.all()), list(entry.qa_rounds.all())


def _not_found(project_id) -> ValidationResult:
    return ValidationResult().add(ErrorKind.NOT_FOUND, f"Project {project_id} not found")


# ===============================================================
# Department moves
# ===============================================================

def validate_transition(
    project_id,
    target_department,
    actor,
    *,
    rules: WorkflowRules = DEFAULT_RULES,
) -> ValidationResult:
    result = ValidationResult()

    project = Project.objects.filter(pk=project_id).first()
    if project is None:
        return _not_found(project_id)

    try:
        target = parse_choice(Department, target_department, field="department")
    except ValueError as exc:
        return result.add(ErrorKind.INVALID_TRANSITION, str(exc))

    current = project.current_department

    if not role_permissions(actor.role, current).can_move_department:
        result.add(
            ErrorKind.FORBIDDEN,
            f"Role {actor.role} cannot move projects out of department {current}",
        )

    requirement = rules.transition_requirements(current, target)
    if requirement is None:
        allowed = ", ".join(rules.allowed_next_departments(current)) or "none"
        return result.add(
            ErrorKind.INVALID_TRANSITION,
            f"Invalid department transition: {current} -> {target} (allowed: {allowed})",
        )

    _, status, approvals, qa_rounds = _project_state(project)

    if requirement.required_status and status != requirement.required_status:
        result.add(
            ErrorKind.PRECONDITION_FAILED,
            f"{current} work status must be {requirement.required_status} before moving "
            f"to {target} (currently {status})",
        )

    if requirement.requires_approval:
        gate = are_gates_satisfied(current, status, approvals, qa_rounds, rules=rules)
        for message in gate.missing:
            result.add(ErrorKind.GATE_UNSATISFIED, f"{current} gate: {message}")

    if requirement.requires_qa_passing:
        if not any(r.status == QAStatus.PASSED for r in qa_rounds):
            result.add(
                ErrorKind.GATE_UNSATISFIED,
                f"{current} gate: requires a QA round with status {QAStatus.PASSED}",
            )

    return result


# ===============================================================
# Work status updates
# ===============================================================

def validate_status_update(
    project_id,
    new_status,
    actor,
    *,
    rules: WorkflowRules = DEFAULT_RULES,
) -> ValidationResult:
    result = ValidationResult()

    project = Project.objects.filter(pk=project_id).first()
    if project is None:
        return _not_found(project_id)

    try:
        new = parse_choice(WorkStatus, new_status, field="work status")
    except ValueError as exc:
        return result.add(ErrorKind.INVALID_TRANSITION, str(exc))

    department = project.current_department
    _, current, _, _ = _project_state(project)

    if not is_legal_status_transition(current, new):
        result.add(ErrorKind.INVALID_TRANSITION, illegal_status_message(current, new))

    if not role_permissions(actor.role, department).can_update_status:
        result.add(
            ErrorKind.FORBIDDEN,
            f"Role {actor.role} cannot update work status in department {department}",
        )

    for message in side_constraint_violations(current, new, department):
        result.add(ErrorKind.PRECONDITION_FAILED, message)

    return result


def validate_workflow_permission(project_id, action, actor) -> ValidationResult:
    result = ValidationResult()

    project = Project.objects.filter(pk=project_id).first()
    if project is None:
        return _not_found(project_id)

    try:
        action = parse_choice(WorkflowAction, action, field="action")
    except ValueError as exc:
        return result.add(ErrorKind.INVALID_TRANSITION, str(exc))

    if not action_allowed(actor.role, project.current_department, action):
        if action == WorkflowAction.START_QA:
            message = f"Role {actor.role} cannot {action}; only ADMIN or PROJECT_MANAGER may"
        else:
            message = (
                f"Role {actor.role} cannot {action} in department {project.current_department}"
            )
        result.add(ErrorKind.FORBIDDEN, message)

    return result


# ===============================================================
# Read-only queries
# ===============================================================

def get_allowed_next_departments(project_id, *, rules: WorkflowRules = DEFAULT_RULES) -> List[str]:
    project = Project.objects.filter(pk=project_id).first()
    if project is None:
        raise WorkflowNotFound(f"Project {project_id} not found")
    return list(rules.allowed_next_departments(project.current_department))


def get_workflow_validation_status(
    project_id,
    actor=None,
    *,
    rules: WorkflowRules = DEFAULT_RULES,
) -> Dict:
    project = Project.objects.filter(pk=project_id).first()
    if project is None:
        raise WorkflowNotFound(f"Project {project_id} not found")

    current = project.current_department
    _, status, approvals, qa_rounds = _project_state(project)

    gate_def = rules.approval_gate(current)
    gate = are_gates_satisfied(current, status, approvals, qa_rounds, rules=rules)
    allowed = rules.allowed_next_departments(current)

    payload = {
        "project_id": project.pk,
        "current_department": current,
        "current_status": status,
        "allowed_next_departments": list(allowed),
        "workflow_sequence": list(rules.workflow_sequence(project.category)),
        "approval_gate": {
            "required": gate_def is not None,
            "satisfied": gate.satisfied,
            "missing_requirements": list(gate.missing),
        },
        "can_proceed": gate.satisfied and bool(allowed),
    }

    if actor is not None:
        perms = role_permissions(actor.role, current)
        payload["permissions"] = {
            "can_update_status": perms.can_update_status,
            "can_move_department": perms.can_move_department,
            "can_approve": perms.can_approve,
        }

    return payload
