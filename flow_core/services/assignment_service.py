# flow_core/services/assignment_service.py
from __future__ import annotations

import logging

from django.db import transaction
from django.utils import timezone

from flow_core.models import AssignmentHistory, Project, StaffProfile
from flow_core.workflows.enums import AssignmentType, Department, Role
from flow_core.workflows.exceptions import PreconditionFailed, WorkflowForbidden

from .common import get_user, lock_project, parse_field

logger = logging.getLogger(__name__)


ASSIGNMENT_FIELDS = {
    AssignmentType.PROJECT_COORDINATOR: "project_coordinator",
    AssignmentType.PC_TEAM_LEAD: "pc_team_lead",
}

# Sub-roles a PMO member must hold to take each assignment.
ASSIGNMENT_ROLES = {
    AssignmentType.PROJECT_COORDINATOR: frozenset({Role.PC}),
    AssignmentType.PC_TEAM_LEAD: frozenset({Role.PC_TL1, Role.PC_TL2}),
}


def reassign_coordinator_or_lead(
    *,
    project_id,
    assignment_type,
    new_user_id,
    actor,
    reason: str = "",
) -> AssignmentHistory:
    assignment_type = parse_field(AssignmentType, assignment_type, field="assignment type")

    if actor.department != Department.PMO:
        raise WorkflowForbidden(
            f"Only {Department.PMO} members may reassign coordinators or team leads "
            f"(actor department: {actor.department or 'none'})"
        )

    new_user = get_user(new_user_id)
    profile = StaffProfile.objects.filter(user=new_user).first()

    if profile is None or profile.department != Department.PMO:
        raise PreconditionFailed(f"User {new_user.pk} is not a member of {Department.PMO}")

    allowed_roles = ASSIGNMENT_ROLES[assignment_type]
    if profile.role not in allowed_roles:
        raise PreconditionFailed(
            f"User {new_user.pk} has role {profile.role}; {assignment_type} requires "
            f"{' or '.join(sorted(allowed_roles))}"
        )

    field_name = ASSIGNMENT_FIELDS[assignment_type]

    with transaction.atomic():
        project = lock_project(project_id)
        previous = getattr(project, field_name)

        record = AssignmentHistory.objects.create(
            project=project,
            assignment_type=assignment_type,
            previous_user=previous,
            new_user=new_user,
            assigned_by=actor.user,
            reason=reason or "",
        )
        Project.objects.filter(pk=project.pk).update(
            **{field_name: new_user, "updated_at": timezone.now()}
        )

    logger.info(
        "Project %s %s reassigned %s -> %s by %s",
        project.pk,
        assignment_type,
        getattr(previous, "pk", None),
        new_user.pk,
        actor.user_id,
    )
    return record
