# flow_core/services/project_service.py
"""
Project creation and lifecycle status.

Creation is split into the primary insert and independent best-effort
bookkeeping steps. Each step runs in its own savepoint and reports a
SideEffectResult; a failed step never removes the project.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from django.db import transaction
from django.utils import timezone
from rest_framework.exceptions import ValidationError

from flow_core.models import AssignmentHistory, DepartmentHistory, Project
from flow_core.workflows.enums import AssignmentType, Department, ProjectStatus, Role, WorkStatus
from flow_core.workflows.exceptions import WorkflowForbidden

from .common import lock_project, parse_field

logger = logging.getLogger(__name__)

SEED_HISTORY_NOTE = "Initial project creation"


@dataclass(frozen=True)
class SideEffectResult:
    step: str
    ok: bool
    error: Optional[str] = None


@dataclass
class ProjectCreationResult:
    project: Project
    side_effects: List[SideEffectResult] = field(default_factory=list)

    @property
    def failed_steps(self) -> List[str]:
        return [s.step for s in self.side_effects if not s.ok]


# ===============================================================
# Best-effort steps
# ===============================================================

def _run_best_effort(step: str, project: Project, fn: Callable[[], object]) -> SideEffectResult:
    try:
        with transaction.atomic():
            fn()
    except Exception as exc:
        logger.exception("Best-effort step %s failed for project %s", step, project.pk)
        return SideEffectResult(step=step, ok=False, error=str(exc))
    return SideEffectResult(step=step, ok=True)


def _seed_history(project: Project, actor) -> DepartmentHistory:
    return DepartmentHistory.objects.create(
        project=project,
        from_department=None,
        to_department=project.current_department,
        work_status=WorkStatus.NOT_STARTED,
        moved_by=actor.user,
        notes=SEED_HISTORY_NOTE,
    )


def _record_initial_assignment(project: Project, actor, assignment_type, user) -> AssignmentHistory:
    return AssignmentHistory.objects.create(
        project=project,
        assignment_type=assignment_type,
        previous_user=None,
        new_user=user,
        assigned_by=actor.user,
        reason=SEED_HISTORY_NOTE,
    )


# ===============================================================
# Public API
# ===============================================================

def create_project(
    *,
    actor,
    name: str,
    category: str,
    initial_department=Department.PMO,
    client_name: str = "",
    project_coordinator=None,
    pc_team_lead=None,
    start_date=None,
    target_date=None,
    observations: str = "",
    next_department=None,
) -> ProjectCreationResult:
    name = (name or "").strip()
    category = (category or "").strip()
    if not name:
        raise ValidationError({"name": "This field is required."})
    if not category:
        raise ValidationError({"category": "This field is required."})

    department = parse_field(Department, initial_department, field="initial department")
    next_dept = parse_field(Department, next_department, field="next department") if next_department else None

    with transaction.atomic():
        project = Project.objects.create(
            name=name,
            category=category,
            client_name=client_name or "",
            current_department=department,
            next_department=next_dept,
            status=ProjectStatus.ACTIVE,
            owner=actor.user,
            project_coordinator=project_coordinator,
            pc_team_lead=pc_team_lead,
            start_date=start_date,
            target_date=target_date,
            observations=observations or "",
        )

    logger.info("Project %s created in %s by %s", project.pk, department, actor.user_id)

    side_effects = [
        _run_best_effort("seed_history", project, lambda: _seed_history(project, actor)),
    ]
    if project_coordinator is not None:
        side_effects.append(
            _run_best_effort(
                "coordinator_assignment",
                project,
                lambda: _record_initial_assignment(
                    project, actor, AssignmentType.PROJECT_COORDINATOR, project_coordinator
                ),
            )
        )
    if pc_team_lead is not None:
        side_effects.append(
            _run_best_effort(
                "team_lead_assignment",
                project,
                lambda: _record_initial_assignment(
                    project, actor, AssignmentType.PC_TEAM_LEAD, pc_team_lead
                ),
            )
        )

    return ProjectCreationResult(project=project, side_effects=side_effects)


def update_project_status(*, project_id, status, reason: str, actor) -> dict:
    """
    Admin-only lifecycle change. The reason is appended to observations with
    a timestamp so the project carries its own status audit trail.
    """
    if actor.role != Role.ADMIN:
        raise WorkflowForbidden(f"Role {actor.role} cannot change project lifecycle status")

    new_status = parse_field(ProjectStatus, status, field="status")
    reason = (reason or "").strip()
    if not reason:
        raise ValidationError({"reason": "This field is required."})

    with transaction.atomic():
        project = lock_project(project_id)
        old_status = project.status
        now = timezone.now()

        line = f"[Status Change {now.isoformat()}]: {reason}"
        observations = f"{project.observations}\n{line}" if project.observations else line

        Project.objects.filter(pk=project.pk).update(
            status=new_status,
            observations=observations,
            updated_at=now,
        )

    logger.info("Project %s status %s -> %s by %s", project.pk, old_status, new_status, actor.user_id)

    return {
        "changed": old_status != new_status,
        "project_id": project.pk,
        "from_status": old_status,
        "to_status": new_status,
    }
