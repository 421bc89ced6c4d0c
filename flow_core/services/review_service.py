# flow_core/services/review_service.py
"""
Corrections, approvals and manager review.

Each decision that changes a history entry's work status does so in the same
transaction as the record it decides on.
"""

from __future__ import annotations

import logging
from typing import Optional

from django.db import transaction
from django.db.models import F, Sum
from django.utils import timezone

from flow_core.models import Approval, Correction, DepartmentHistory, Project, QATestingRound
from flow_core.workflows.enums import (
    TERMINAL_APPROVAL_STATUSES,
    TERMINAL_CORRECTION_STATUSES,
    ApprovalStatus,
    ApprovalType,
    CorrectionStatus,
    ManagerDecision,
    Priority,
    ProjectStatus,
    QAStatus,
    Role,
    WorkStatus,
)
from flow_core.workflows.exceptions import (
    InvalidTransition,
    PreconditionFailed,
    WorkflowForbidden,
    WorkflowNotFound,
)
from flow_core.workflows.permissions import is_highest_privilege, role_permissions
from flow_core.workflows.rules import DEFAULT_RULES, WorkflowRules

from .common import (
    apply_entry_status,
    ensure_entry_is_current,
    lock_project,
    parse_field,
    refresh_project_code,
    require_current_entry,
)

logger = logging.getLogger(__name__)

MANAGER_REVIEW_REQUESTERS = frozenset(
    {
        Role.ADMIN,
        Role.PROJECT_MANAGER,
        Role.PROJECT_COORDINATOR,
        Role.PC,
        Role.QA_TESTER,
    }
)


def _lock_by_entry(model, pk, label: str):
    """
    Lock project, then the record hanging off one of its history entries.
    """
    row = model.objects.select_related("history_entry").filter(pk=pk).first()
    if row is None:
        raise WorkflowNotFound(f"{label} {pk} not found")
    project = lock_project(row.history_entry.project_id)
    row = model.objects.select_for_update().select_related("history_entry").get(pk=pk)
    entry = DepartmentHistory.objects.select_for_update().get(pk=row.history_entry_id)
    return project, entry, row


# ===============================================================
# Corrections
# ===============================================================

def create_correction(
    *,
    project_id,
    actor,
    correction_type: str,
    description: str,
    priority=Priority.MEDIUM,
    assigned_to=None,
    estimated_hours=None,
) -> Correction:
    """
    Raise a correction on the current entry and put it in CORRECTIONS_NEEDED.
    Only roles that may update status or approve in the project's department
    can raise one.
    """
    priority = parse_field(Priority, priority, field="priority")

    with transaction.atomic():
        project = lock_project(project_id)

        perms = role_permissions(actor.role, project.current_department)
        if not (perms.can_update_status or perms.can_approve):
            raise WorkflowForbidden(
                f"Role {actor.role} cannot raise corrections in department {project.current_department}"
            )

        entry = require_current_entry(project)
        was_completed = entry.work_status == WorkStatus.COMPLETED

        correction = Correction.objects.create(
            history_entry=entry,
            correction_type=correction_type,
            description=description,
            priority=priority,
            requested_by=actor.user,
            assigned_to=assigned_to,
            estimated_hours=estimated_hours,
        )

        DepartmentHistory.objects.filter(pk=entry.pk).update(
            corrections_count=F("corrections_count") + 1,
            work_status=WorkStatus.CORRECTIONS_NEEDED,
            updated_at=timezone.now(),
        )

        if was_completed:
            refresh_project_code(project)

    logger.info(
        "Correction %s raised on project %s (%s) by %s",
        correction.pk,
        project.pk,
        entry.to_department,
        actor.user_id,
    )
    return correction


def update_correction(
    *,
    correction_id,
    actor,
    status=None,
    resolution_notes: Optional[str] = None,
    actual_hours=None,
) -> Correction:
    new_status = parse_field(CorrectionStatus, status, field="status") if status else None

    with transaction.atomic():
        _, _, correction = _lock_by_entry(Correction, correction_id, "Correction")

        is_assignee = correction.assigned_to_id is not None and correction.assigned_to_id == actor.user_id
        if not (is_assignee or is_highest_privilege(actor.role)):
            raise WorkflowForbidden(
                f"Only the assignee or ADMIN/PROJECT_MANAGER may update correction {correction.pk}"
            )

        if correction.status in TERMINAL_CORRECTION_STATUSES:
            raise InvalidTransition(
                f"Correction {correction.pk} is already {correction.status}"
            )

        if new_status is not None:
            correction.status = new_status
            if new_status == CorrectionStatus.RESOLVED:
                correction.resolved_at = timezone.now()
        if resolution_notes is not None:
            correction.resolution_notes = resolution_notes
        if actual_hours is not None:
            correction.actual_hours = actual_hours

        correction.save()

    logger.info("Correction %s now %s (by %s)", correction.pk, correction.status, actor.user_id)
    return correction


# ===============================================================
# Approvals
# ===============================================================

def request_approval(
    *,
    project_id,
    approval_type,
    actor,
    comments: str = "",
    attachments=None,
) -> Approval:
    approval_type = parse_field(ApprovalType, approval_type, field="approval type")
    if approval_type == ApprovalType.MANAGER_REVIEW:
        raise PreconditionFailed("Manager reviews are requested through the manager review operation")

    with transaction.atomic():
        project = lock_project(project_id)

        if not role_permissions(actor.role, project.current_department).can_update_status:
            raise WorkflowForbidden(
                f"Role {actor.role} cannot request approvals in department {project.current_department}"
            )

        entry = require_current_entry(project)

        if entry.approvals.filter(approval_type=approval_type, status=ApprovalStatus.PENDING).exists():
            raise PreconditionFailed(
                f"A {approval_type} approval is already pending for {entry.to_department}"
            )

        approval = Approval.objects.create(
            history_entry=entry,
            approval_type=approval_type,
            requested_by=actor.user,
            comments=comments or "",
            attachments=list(attachments or []),
        )

    logger.info("Approval %s (%s) requested on project %s", approval.pk, approval_type, project.pk)
    return approval


def submit_approval(
    *,
    approval_id,
    status,
    actor,
    comments: Optional[str] = None,
    rejection_reason: str = "",
) -> dict:
    """
    Decide a pending approval and recompute the owning entry's work status:
      APPROVED -> COMPLETED
      REJECTED -> CLIENT_REJECTED (client sign-off) or QA_REJECTED (others)
      PENDING / CANCELLED -> status unchanged
    """
    decision = parse_field(ApprovalStatus, status, field="status")

    with transaction.atomic():
        project, entry, approval = _lock_by_entry(Approval, approval_id, "Approval")

        if approval.approval_type == ApprovalType.MANAGER_REVIEW:
            raise PreconditionFailed("Manager reviews are decided through the manager review operation")

        if approval.status in TERMINAL_APPROVAL_STATUSES:
            raise InvalidTransition(f"Approval {approval.pk} is already {approval.status}")

        if not role_permissions(actor.role, entry.to_department).can_approve:
            raise WorkflowForbidden(
                f"Role {actor.role} cannot approve in department {entry.to_department}"
            )

        new_entry_status = None
        if decision == ApprovalStatus.APPROVED:
            new_entry_status = WorkStatus.COMPLETED
        elif decision == ApprovalStatus.REJECTED:
            if approval.approval_type == ApprovalType.CLIENT_APPROVAL:
                new_entry_status = WorkStatus.CLIENT_REJECTED
            else:
                new_entry_status = WorkStatus.QA_REJECTED

        if new_entry_status is not None:
            ensure_entry_is_current(entry)

        approval.status = decision
        approval.reviewed_by = actor.user
        approval.reviewed_at = timezone.now()
        if comments is not None:
            approval.comments = comments
        if decision == ApprovalStatus.REJECTED:
            approval.rejection_reason = rejection_reason or ""
        approval.save()

        code = project.project_code
        if new_entry_status is not None:
            code = apply_entry_status(project, entry, new_entry_status)

    logger.info(
        "Approval %s %s by %s; entry %s -> %s",
        approval.pk,
        decision,
        actor.user_id,
        entry.pk,
        entry.work_status,
    )

    return {
        "approval_id": approval.pk,
        "status": approval.status,
        "history_id": entry.pk,
        "work_status": entry.work_status,
        "project_code": code,
    }


# ===============================================================
# Manager review
# ===============================================================

def review_counts(project_id) -> dict:
    rejections = (
        Approval.objects.filter(
            history_entry__project_id=project_id,
            status=ApprovalStatus.REJECTED,
        )
        .exclude(approval_type=ApprovalType.MANAGER_REVIEW)
        .count()
    )
    rounds = QATestingRound.objects.filter(history_entry__project_id=project_id)
    rejections += rounds.filter(status=QAStatus.FAILED).count()
    critical = rounds.aggregate(total=Sum("critical_bugs_count"))["total"] or 0
    return {"rejection_count": rejections, "critical_bug_count": critical}


def request_manager_review(
    *,
    project_id,
    actor,
    comments: str = "",
    rules: WorkflowRules = DEFAULT_RULES,
) -> dict:
    if actor.role not in MANAGER_REVIEW_REQUESTERS:
        raise WorkflowForbidden(f"Role {actor.role} cannot request a manager review")

    with transaction.atomic():
        project = lock_project(project_id)
        counts = review_counts(project.pk)

        if not rules.requires_manager_review(counts["rejection_count"], counts["critical_bug_count"]):
            raise PreconditionFailed(
                "Manager review not required "
                f"(rejections={counts['rejection_count']}, "
                f"critical bugs={counts['critical_bug_count']})"
            )

        entry = require_current_entry(project)

        if Approval.objects.filter(
            history_entry__project_id=project.pk,
            approval_type=ApprovalType.MANAGER_REVIEW,
            status=ApprovalStatus.PENDING,
        ).exists():
            raise PreconditionFailed(f"A manager review is already pending for project {project.pk}")

        approval = Approval.objects.create(
            history_entry=entry,
            approval_type=ApprovalType.MANAGER_REVIEW,
            requested_by=actor.user,
            comments=comments or "",
        )

    logger.info("Manager review %s requested for project %s (%s)", approval.pk, project.pk, counts)

    return {"approval_id": approval.pk, "project_id": project.pk, **counts}


def submit_manager_review(
    *,
    approval_id,
    decision,
    actor,
    comments: str = "",
) -> dict:
    """
    PROCEED: approval APPROVED, project ACTIVE, entry READY_FOR_DELIVERY
    REVISE:  approval REJECTED, project ACTIVE, entry CORRECTIONS_NEEDED
    CANCEL:  approval REJECTED, project CANCELLED, entry unchanged
    """
    if not is_highest_privilege(actor.role):
        raise WorkflowForbidden(f"Role {actor.role} cannot submit a manager review")

    decision = parse_field(ManagerDecision, decision, field="decision")

    with transaction.atomic():
        project, entry, approval = _lock_by_entry(Approval, approval_id, "Approval")

        if approval.approval_type != ApprovalType.MANAGER_REVIEW:
            raise PreconditionFailed(f"Approval {approval.pk} is not a manager review")
        if approval.status in TERMINAL_APPROVAL_STATUSES:
            raise InvalidTransition(f"Approval {approval.pk} is already {approval.status}")

        now = timezone.now()
        approval.status = (
            ApprovalStatus.APPROVED if decision == ManagerDecision.PROCEED else ApprovalStatus.REJECTED
        )
        approval.reviewed_by = actor.user
        approval.reviewed_at = now
        if comments:
            approval.comments = comments
        approval.save()

        if decision == ManagerDecision.CANCEL:
            project_status = ProjectStatus.CANCELLED
        else:
            project_status = ProjectStatus.ACTIVE
            ensure_entry_is_current(entry)
            apply_entry_status(
                project,
                entry,
                WorkStatus.READY_FOR_DELIVERY
                if decision == ManagerDecision.PROCEED
                else WorkStatus.CORRECTIONS_NEEDED,
            )

        Project.objects.filter(pk=project.pk).update(status=project_status, updated_at=now)

    logger.info(
        "Manager review %s decided %s by %s; project %s -> %s",
        approval.pk,
        decision,
        actor.user_id,
        project.pk,
        project_status,
    )

    return {
        "approval_id": approval.pk,
        "decision": decision,
        "project_status": project_status,
        "work_status": entry.work_status,
    }
