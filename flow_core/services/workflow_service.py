# flow_core/services/workflow_service.py
"""
Authoritative department workflow execution.

All department moves and work status updates MUST go through this service.
Never update current_department, project_code or work_status directly in
views or serializers; the model write guard rejects it.
"""

from __future__ import annotations

import logging
from typing import Optional

from django.db import transaction
from django.utils import timezone

from flow_core.models import DepartmentHistory, Project
from flow_core.workflows.analytics import elapsed_days
from flow_core.workflows.enums import Department, WorkflowAction, WorkStatus
from flow_core.workflows.exceptions import raise_for_result
from flow_core.workflows.project_code import generate_code
from flow_core.workflows.rules import DEFAULT_RULES, WorkflowRules
from flow_core.workflows.validator import (
    validate_status_update,
    validate_transition,
    validate_workflow_permission,
)

from .common import apply_entry_status, lock_current_entry, lock_project, parse_field

logger = logging.getLogger(__name__)

MISSING_ENTRY_NOTE = "Auto-created missing department history record"


def _next_in_sequence(category: str, department, rules: WorkflowRules) -> Optional[Department]:
    sequence = rules.workflow_sequence(category)
    if department not in sequence:
        return None
    idx = sequence.index(department)
    return sequence[idx + 1] if idx + 1 < len(sequence) else None


# ===============================================================
# Department moves
# ===============================================================

def move_to_department(
    *,
    project_id,
    target_department,
    actor,
    notes: str = "",
    estimated_days: Optional[int] = None,
    permission_granted_by=None,
    rules: WorkflowRules = DEFAULT_RULES,
) -> dict:
    """
    Atomically:
      1) Lock the project and its current entry
      2) Re-validate permission and transition against locked state
      3) Insert the new history entry (NOT_STARTED)
      4) Update current_department, next_department and project_code

    The code is computed from the history as it stood before the move; the
    new entry cannot contribute until it completes.
    """
    target = parse_field(Department, target_department, field="target department")

    with transaction.atomic():
        project = lock_project(project_id)
        lock_current_entry(project)

        raise_for_result(
            validate_workflow_permission(project.pk, WorkflowAction.MOVE_DEPARTMENT, actor)
        )
        raise_for_result(validate_transition(project.pk, target, actor, rules=rules))

        from_department = project.current_department
        code = generate_code(DepartmentHistory.objects.filter(project_id=project.pk))

        entry = DepartmentHistory.objects.create(
            project=project,
            from_department=from_department,
            to_department=target,
            work_status=WorkStatus.NOT_STARTED,
            estimated_days=estimated_days,
            moved_by=actor.user,
            permission_granted_by=permission_granted_by,
            notes=notes or "",
        )

        Project.objects.filter(pk=project.pk).update(
            current_department=target,
            next_department=_next_in_sequence(project.category, target, rules),
            project_code=code,
            updated_at=timezone.now(),
        )

    logger.info(
        "Project %s moved %s -> %s by %s (history %s)",
        project.pk,
        from_department,
        target,
        actor.user_id,
        entry.pk,
    )

    return {
        "changed": True,
        "project_id": project.pk,
        "from_department": from_department,
        "to_department": target,
        "history_id": entry.pk,
        "project_code": code,
    }


# ===============================================================
# Work status updates
# ===============================================================

def update_department_work_status(
    *,
    project_id,
    status,
    actor,
    work_start_date=None,
    work_end_date=None,
    estimated_days: Optional[int] = None,
    notes: Optional[str] = None,
    rules: WorkflowRules = DEFAULT_RULES,
) -> dict:
    new_status = parse_field(WorkStatus, status, field="status")

    with transaction.atomic():
        project = lock_project(project_id)

        raise_for_result(validate_status_update(project.pk, new_status, actor, rules=rules))

        entry = lock_current_entry(project)
        if entry is None or entry.to_department != project.current_department:
            entry = DepartmentHistory.objects.create(
                project=project,
                from_department=entry.to_department if entry else None,
                to_department=project.current_department,
                work_status=WorkStatus.NOT_STARTED,
                moved_by=actor.user,
                notes=MISSING_ENTRY_NOTE,
            )
            logger.warning(
                "Project %s had no history for %s; created entry %s",
                project.pk,
                project.current_department,
                entry.pk,
            )

        from_status = entry.work_status
        fields = {}

        if work_start_date is not None:
            fields["work_start_date"] = work_start_date
        elif new_status == WorkStatus.IN_PROGRESS and entry.work_start_date is None:
            fields["work_start_date"] = timezone.now()

        if work_end_date is not None:
            fields["work_end_date"] = work_end_date

        if estimated_days is not None:
            fields["estimated_days"] = estimated_days

        if notes:
            fields["notes"] = f"{entry.notes}\n{notes}" if entry.notes else notes

        if new_status == WorkStatus.COMPLETED and work_start_date and work_end_date:
            fields["actual_days"] = elapsed_days(work_start_date, work_end_date)

        code = apply_entry_status(project, entry, new_status, **fields)

    logger.info(
        "Project %s %s status %s -> %s by %s",
        project.pk,
        entry.to_department,
        from_status,
        new_status,
        actor.user_id,
    )

    return {
        "changed": from_status != new_status,
        "project_id": project.pk,
        "history_id": entry.pk,
        "department": entry.to_department,
        "from_status": from_status,
        "to_status": new_status,
        "actual_days": entry.actual_days,
        "project_code": code,
    }
