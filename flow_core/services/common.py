# flow_core/services/common.py
"""
Shared building blocks for the orchestrator services.

Lock order inside every mutating operation: project row first, then the
history row, then approval or QA rows.
"""

from __future__ import annotations

import logging

from django.contrib.auth import get_user_model
from django.utils import timezone
from rest_framework.exceptions import ValidationError

from flow_core.models import DepartmentHistory, Project
from flow_core.workflows.enums import WorkStatus, parse_choice
from flow_core.workflows.exceptions import PreconditionFailed, WorkflowNotFound
from flow_core.workflows.project_code import generate_code

logger = logging.getLogger(__name__)


def parse_field(enum_cls, value, *, field: str):
    """
    Parse an external string into an enum member, as a 400 on failure.
    """
    try:
        return parse_choice(enum_cls, value, field=field)
    except ValueError as exc:
        raise ValidationError({field.replace(" ", "_"): str(exc)}) from exc


def lock_project(project_id) -> Project:
    project = Project.objects.select_for_update().filter(pk=project_id).first()
    if project is None:
        raise WorkflowNotFound(f"Project {project_id} not found")
    return project


def lock_current_entry(project):
    """
    Lock and return the newest history entry of a locked project, or None.
    """
    latest = DepartmentHistory.objects.latest_for(project.pk)
    if latest is None:
        return None
    return DepartmentHistory.objects.select_for_update().get(pk=latest.pk)


def require_current_entry(project):
    entry = lock_current_entry(project)
    if entry is None or entry.to_department != project.current_department:
        raise PreconditionFailed(
            f"Project {project.pk} has no history entry for department {project.current_department}"
        )
    return entry


def ensure_entry_is_current(entry) -> None:
    latest = DepartmentHistory.objects.latest_for(entry.project_id)
    if latest is None or latest.pk != entry.pk:
        raise PreconditionFailed(
            f"History entry {entry.pk} has been superseded; only the current entry may change"
        )


def get_user(user_id):
    User = get_user_model()
    user = User.objects.filter(pk=user_id).first()
    if user is None:
        raise WorkflowNotFound(f"User {user_id} not found")
    return user


def set_entry_status(entry, status, **fields) -> None:
    entry.work_status = status
    for name, value in fields.items():
        setattr(entry, name, value)
    entry.save(_workflow_bypass=True)


def refresh_project_code(project) -> str:
    """
    Recompute project_code from the full history and persist it.
    """
    code = generate_code(DepartmentHistory.objects.filter(project_id=project.pk))
    if code != project.project_code:
        Project.objects.filter(pk=project.pk).update(project_code=code, updated_at=timezone.now())
        logger.info("Project %s code %r -> %r", project.pk, project.project_code, code)
        project.project_code = code
    return code


def apply_entry_status(project, entry, status, **fields) -> str:
    """
    Set an entry's status and refresh the project code when it enters or
    leaves COMPLETED. Returns the project's current code.
    """
    previous = entry.work_status
    set_entry_status(entry, status, **fields)
    if WorkStatus.COMPLETED in (previous, status):
        return refresh_project_code(project)
    return project.project_code
