# flow_core/services/qa_service.py
from __future__ import annotations

import logging

from django.db import transaction
from django.db.models import Max
from django.utils import timezone

from flow_core.models import DepartmentHistory, QABug, QATestingRound
from flow_core.workflows.bug_routing import DEFAULT_ROUTER, BugRouter, assignment_annotation
from flow_core.workflows.enums import BugSeverity, Department, QAStatus, QAType, WorkflowAction, WorkStatus
from flow_core.workflows.exceptions import (
    InvalidTransition,
    PreconditionFailed,
    WorkflowForbidden,
    WorkflowNotFound,
    raise_for_result,
)
from flow_core.workflows.permissions import is_highest_privilege
from flow_core.workflows.rules import DEFAULT_RULES, QA_REQUESTING_DEPARTMENTS, WorkflowRules
from flow_core.workflows.status_machine import illegal_status_message, is_legal_status_transition
from flow_core.workflows.validator import validate_workflow_permission

from .common import (
    apply_entry_status,
    ensure_entry_is_current,
    lock_project,
    parse_field,
    require_current_entry,
)

logger = logging.getLogger(__name__)

COMPLETION_STATUSES = frozenset({QAStatus.PASSED, QAStatus.FAILED})

QA_DEPARTMENTS = QA_REQUESTING_DEPARTMENTS | {Department.QA}


def status_after_round(qa_type, status, critical_bugs_count: int):
    if status == QAStatus.PASSED:
        if qa_type == QAType.BEFORE_LIVE_QA:
            return WorkStatus.READY_FOR_DELIVERY
        return WorkStatus.COMPLETED
    if critical_bugs_count > 0:
        return WorkStatus.QA_REJECTED
    return WorkStatus.BUGFIX_IN_PROGRESS


def start_qa_testing(*, project_id, qa_type, actor, tester=None) -> QATestingRound:
    """
    Open the next QA round on the current entry and put it in QA_TESTING.
    The entry must be allowed to enter QA_TESTING from its current status and
    sit in a markup, build or QA department.
    Round numbers are previous max + 1 per entry, computed under the project lock.
    """
    qa_type = parse_field(QAType, qa_type, field="qa type")

    with transaction.atomic():
        project = lock_project(project_id)
        raise_for_result(validate_workflow_permission(project.pk, WorkflowAction.START_QA, actor))

        entry = require_current_entry(project)

        if entry.qa_rounds.filter(status=QAStatus.IN_PROGRESS).exists():
            raise PreconditionFailed(
                f"A QA round is already in progress for {entry.to_department}"
            )

        if not is_legal_status_transition(entry.work_status, WorkStatus.QA_TESTING):
            raise InvalidTransition(illegal_status_message(entry.work_status, WorkStatus.QA_TESTING))

        if entry.to_department not in QA_DEPARTMENTS:
            allowed = ", ".join(sorted(QA_DEPARTMENTS))
            raise PreconditionFailed(
                f"QA can only be started from {allowed} (project is in {entry.to_department})"
            )

        last = entry.qa_rounds.aggregate(m=Max("round_number"))["m"] or 0

        qa_round = QATestingRound.objects.create(
            history_entry=entry,
            round_number=last + 1,
            qa_type=qa_type,
            tester=tester or actor.user,
        )
        apply_entry_status(project, entry, WorkStatus.QA_TESTING)

    logger.info(
        "QA round %s (#%s, %s) started on project %s",
        qa_round.pk,
        qa_round.round_number,
        qa_type,
        project.pk,
    )
    return qa_round


def complete_qa_testing_round(
    *,
    round_id,
    status,
    actor,
    bugs_count: int = 0,
    critical_bugs_count: int = 0,
    test_results: str = "",
    rejection_reason: str = "",
) -> dict:
    """
    Close an IN_PROGRESS round and recompute the entry status:
      PASSED + BEFORE_LIVE_QA -> READY_FOR_DELIVERY
      PASSED + other type     -> COMPLETED
      FAILED + critical bugs  -> QA_REJECTED
      FAILED otherwise        -> BUGFIX_IN_PROGRESS

    A round that is already terminal is rejected; nothing changes.
    """
    new_status = parse_field(QAStatus, status, field="status")
    if new_status not in COMPLETION_STATUSES:
        raise InvalidTransition(f"A QA round can only be completed as PASSED or FAILED, not {new_status}")

    qa_round = QATestingRound.objects.select_related("history_entry").filter(pk=round_id).first()
    if qa_round is None:
        raise WorkflowNotFound(f"QA round {round_id} not found")

    with transaction.atomic():
        project = lock_project(qa_round.history_entry.project_id)
        qa_round = QATestingRound.objects.select_for_update().get(pk=round_id)
        entry = DepartmentHistory.objects.select_for_update().get(pk=qa_round.history_entry_id)

        if qa_round.status != QAStatus.IN_PROGRESS:
            raise InvalidTransition(f"QA round {qa_round.pk} is already {qa_round.status}")

        if not (qa_round.tester_id == actor.user_id or is_highest_privilege(actor.role)):
            raise WorkflowForbidden(
                f"Only the tester or ADMIN/PROJECT_MANAGER may complete QA round {qa_round.pk}"
            )

        ensure_entry_is_current(entry)

        qa_round.status = new_status
        qa_round.bugs_count = max(0, int(bugs_count or 0))
        qa_round.critical_bugs_count = max(0, int(critical_bugs_count or 0))
        qa_round.test_results = test_results or ""
        if new_status == QAStatus.FAILED:
            qa_round.rejection_reason = rejection_reason or ""
        qa_round.completed_at = timezone.now()
        qa_round.save()

        entry_status = status_after_round(qa_round.qa_type, new_status, qa_round.critical_bugs_count)
        code = apply_entry_status(project, entry, entry_status)

    logger.info(
        "QA round %s %s (bugs=%s critical=%s); entry %s -> %s",
        qa_round.pk,
        new_status,
        qa_round.bugs_count,
        qa_round.critical_bugs_count,
        entry.pk,
        entry_status,
    )

    return {
        "round_id": qa_round.pk,
        "round_number": qa_round.round_number,
        "status": new_status,
        "history_id": entry.pk,
        "work_status": entry_status,
        "project_code": code,
    }


def create_qa_bug(
    *,
    round_id,
    actor,
    title: str,
    description: str = "",
    severity=BugSeverity.MEDIUM,
    steps_to_reproduce: str = "",
    assigned_to=None,
    screenshot_url: str = "",
    router: BugRouter = DEFAULT_ROUTER,
    rules: WorkflowRules = DEFAULT_RULES,
) -> QABug:
    """
    Record a bug and route it to a department. Routing is advisory only.
    """
    severity = parse_field(BugSeverity, severity, field="severity")

    qa_round = (
        QATestingRound.objects.select_related("history_entry__project").filter(pk=round_id).first()
    )
    if qa_round is None:
        raise WorkflowNotFound(f"QA round {round_id} not found")

    category = qa_round.history_entry.project.category
    department = router.route(title, description, category=category, workflow_rules=rules)

    annotation = assignment_annotation(department)
    steps = (steps_to_reproduce or "").rstrip()
    steps = f"{steps}\n\n{annotation}" if steps else annotation

    with transaction.atomic():
        bug = QABug.objects.create(
            qa_round=qa_round,
            title=title,
            description=description or "",
            severity=severity,
            assigned_to=assigned_to,
            assigned_department=department,
            steps_to_reproduce=steps,
            screenshot_url=screenshot_url or "",
        )

    logger.info("QA bug %s on round %s routed to %s by %s", bug.pk, qa_round.pk, department, actor.user_id)
    return bug
