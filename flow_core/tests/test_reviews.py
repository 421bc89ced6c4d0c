# flow_core/tests/test_reviews.py
from __future__ import annotations

from decimal import Decimal

import pytest

from flow_core.models import Approval, Correction, Project
from flow_core.services import (
    complete_qa_testing_round,
    create_correction,
    move_to_department,
    request_approval,
    request_manager_review,
    start_qa_testing,
    submit_approval,
    submit_manager_review,
    update_correction,
    update_department_work_status,
)
from flow_core.services.review_service import review_counts
from flow_core.workflows.enums import (
    ApprovalStatus,
    ApprovalType,
    CorrectionStatus,
    Department,
    ProjectStatus,
    WorkStatus,
)
from flow_core.workflows.exceptions import (
    InvalidTransition,
    PreconditionFailed,
    WorkflowForbidden,
    WorkflowNotFound,
)

pytestmark = pytest.mark.django_db


# ---------------------------------------------------------------------
# Corrections
# ---------------------------------------------------------------------

def test_correction_marks_entry_and_counts(project_factory, client_actor, designer, current_entry):
    project = project_factory(department=Department.DESIGN)

    correction = create_correction(
        project_id=project.pk,
        actor=client_actor,
        correction_type="copy",
        description="Headline wording",
        priority="high",
        assigned_to=designer.user,
        estimated_hours=Decimal("1.5"),
    )

    assert correction.status == CorrectionStatus.OPEN
    assert correction.priority == "HIGH"

    entry = current_entry(project)
    assert entry.corrections_count == 1
    assert entry.work_status == WorkStatus.CORRECTIONS_NEEDED

    create_correction(project_id=project.pk, actor=client_actor, correction_type="color", description="Too dark")
    assert current_entry(project).corrections_count == 2


def test_assignee_resolves_correction(project_factory, client_actor, designer):
    project = project_factory(department=Department.DESIGN)
    correction = create_correction(
        project_id=project.pk,
        actor=client_actor,
        correction_type="copy",
        description="Typo",
        assigned_to=designer.user,
    )

    updated = update_correction(
        correction_id=correction.pk,
        actor=designer,
        status="RESOLVED",
        resolution_notes="Fixed",
        actual_hours=Decimal("0.5"),
    )

    assert updated.status == CorrectionStatus.RESOLVED
    assert updated.resolved_at is not None
    assert Correction.objects.get(pk=correction.pk).resolution_notes == "Fixed"

    with pytest.raises(InvalidTransition):
        update_correction(correction_id=correction.pk, actor=designer, status="IN_PROGRESS")


def test_only_assignee_or_manager_updates_correction(project_factory, client_actor, designer, make_actor, pm):
    project = project_factory(department=Department.DESIGN)
    correction = create_correction(
        project_id=project.pk,
        actor=client_actor,
        correction_type="copy",
        description="Typo",
        assigned_to=designer.user,
    )
    other_designer = make_actor("DESIGNER", Department.DESIGN)

    with pytest.raises(WorkflowForbidden):
        update_correction(correction_id=correction.pk, actor=other_designer, status="IN_PROGRESS")

    assert update_correction(correction_id=correction.pk, actor=pm, status="IN_PROGRESS").status == "IN_PROGRESS"


@pytest.mark.parametrize(
    "role,department,project_department",
    [
        ("CLIENT", "", Department.PMO),
        ("DEVELOPER", Department.REACT, Department.DESIGN),
        ("QA_TESTER", Department.QA, Department.HTML),
    ],
)
def test_correction_requires_status_or_approval_rights(
    project_factory, make_actor, current_entry, role, department, project_department
):
    project = project_factory(department=project_department)

    with pytest.raises(WorkflowForbidden):
        create_correction(
            project_id=project.pk,
            actor=make_actor(role, department),
            correction_type="copy",
            description="Not mine to raise",
        )

    assert not Correction.objects.filter(history_entry__project=project).exists()
    assert current_entry(project).work_status == WorkStatus.NOT_STARTED


def test_correction_on_completed_entry_recomputes_code(started_project, admin):
    project = started_project(department=Department.HTML)
    update_department_work_status(project_id=project.pk, status="COMPLETED", actor=admin)
    project.refresh_from_db()
    assert project.project_code == "H"

    create_correction(project_id=project.pk, actor=admin, correction_type="layout", description="Footer gap")

    project.refresh_from_db()
    assert project.project_code == ""


def test_unknown_correction(db, admin):
    with pytest.raises(WorkflowNotFound):
        update_correction(correction_id=424242, actor=admin, status="RESOLVED")


# ---------------------------------------------------------------------
# Approvals
# ---------------------------------------------------------------------

def test_client_rejection_sets_client_rejected(project_factory, designer, client_actor, current_entry):
    project = project_factory(department=Department.DESIGN)
    approval = request_approval(
        project_id=project.pk,
        approval_type="CLIENT_APPROVAL",
        actor=designer,
        attachments=["https://files.example.test/mockup-v1.png"],
    )
    assert approval.status == ApprovalStatus.PENDING
    assert approval.attachments == ["https://files.example.test/mockup-v1.png"]

    out = submit_approval(
        approval_id=approval.pk,
        status="REJECTED",
        actor=client_actor,
        rejection_reason="Wrong palette",
    )

    assert out["work_status"] == WorkStatus.CLIENT_REJECTED
    assert current_entry(project).work_status == WorkStatus.CLIENT_REJECTED

    approval.refresh_from_db()
    assert approval.rejection_reason == "Wrong palette"
    assert approval.reviewed_by == client_actor.user
    assert approval.reviewed_at is not None


def test_non_client_rejection_sets_qa_rejected(project_factory, admin, current_entry):
    project = project_factory(department=Department.QA)
    approval = request_approval(project_id=project.pk, approval_type="QA_APPROVAL", actor=admin)

    submit_approval(approval_id=approval.pk, status="REJECTED", actor=admin)
    assert current_entry(project).work_status == WorkStatus.QA_REJECTED


def test_decided_approval_cannot_be_resubmitted(project_factory, admin, current_entry):
    project = project_factory(department=Department.DESIGN)
    approval = request_approval(project_id=project.pk, approval_type="CLIENT_APPROVAL", actor=admin)
    submit_approval(approval_id=approval.pk, status="APPROVED", actor=admin)

    with pytest.raises(InvalidTransition):
        submit_approval(approval_id=approval.pk, status="REJECTED", actor=admin)

    assert Approval.objects.get(pk=approval.pk).status == ApprovalStatus.APPROVED
    assert current_entry(project).work_status == WorkStatus.COMPLETED


def test_approval_outside_scope_is_forbidden(project_factory, admin, client_actor, developer):
    project = project_factory()
    approval = request_approval(project_id=project.pk, approval_type="CLIENT_APPROVAL", actor=admin)

    # client may approve only in DESIGN
    with pytest.raises(WorkflowForbidden):
        submit_approval(approval_id=approval.pk, status="APPROVED", actor=client_actor)

    with pytest.raises(WorkflowForbidden):
        request_approval(project_id=project.pk, approval_type="QA_APPROVAL", actor=developer)


def test_duplicate_pending_approval_is_refused(project_factory, admin):
    project = project_factory()
    request_approval(project_id=project.pk, approval_type="CLIENT_APPROVAL", actor=admin)

    with pytest.raises(PreconditionFailed):
        request_approval(project_id=project.pk, approval_type="CLIENT_APPROVAL", actor=admin)


def test_manager_review_not_requestable_as_plain_approval(project_factory, admin):
    project = project_factory()

    with pytest.raises(PreconditionFailed):
        request_approval(project_id=project.pk, approval_type=ApprovalType.MANAGER_REVIEW, actor=admin)


def test_cancelled_approval_leaves_status(project_factory, admin, current_entry):
    project = project_factory(department=Department.DESIGN)
    approval = request_approval(project_id=project.pk, approval_type="CLIENT_APPROVAL", actor=admin)

    out = submit_approval(approval_id=approval.pk, status="CANCELLED", actor=admin)
    assert out["status"] == ApprovalStatus.CANCELLED
    assert current_entry(project).work_status == WorkStatus.NOT_STARTED


# ---------------------------------------------------------------------
# Manager review
# ---------------------------------------------------------------------

def _reject_once(project, admin):
    approval = request_approval(project_id=project.pk, approval_type="CLIENT_APPROVAL", actor=admin)
    submit_approval(approval_id=approval.pk, status="REJECTED", actor=admin)


def test_manager_review_not_required_without_rejections(project_factory, pm):
    project = project_factory(department=Department.DESIGN)

    with pytest.raises(PreconditionFailed) as exc:
        request_manager_review(project_id=project.pk, actor=pm)
    assert "not required" in str(exc.value)


def test_manager_review_counts(project_factory, admin):
    project = project_factory(department=Department.HTML)
    _reject_once(project, admin)
    update_department_work_status(project_id=project.pk, status="IN_PROGRESS", actor=admin)

    qa_round = start_qa_testing(project_id=project.pk, qa_type="HTML_QA", actor=admin)
    complete_qa_testing_round(round_id=qa_round.pk, status="FAILED", actor=admin, critical_bugs_count=2)

    assert review_counts(project.pk) == {"rejection_count": 2, "critical_bug_count": 2}


def test_critical_bugs_alone_trigger_review(started_project, admin, pm):
    project = started_project(department=Department.HTML)
    qa_round = start_qa_testing(project_id=project.pk, qa_type="HTML_QA", actor=admin)
    complete_qa_testing_round(round_id=qa_round.pk, status="PASSED", actor=admin, critical_bugs_count=3)

    out = request_manager_review(project_id=project.pk, actor=pm)
    assert out["rejection_count"] == 0
    assert out["critical_bug_count"] == 3


def test_manager_review_proceed(project_factory, admin, pm, current_entry):
    project = project_factory(department=Department.DESIGN)
    _reject_once(project, admin)

    requested = request_manager_review(project_id=project.pk, actor=pm, comments="Two rounds of pushback")
    with pytest.raises(PreconditionFailed):
        request_manager_review(project_id=project.pk, actor=pm)

    out = submit_manager_review(approval_id=requested["approval_id"], decision="PROCEED", actor=pm)

    assert out["project_status"] == ProjectStatus.ACTIVE
    assert out["work_status"] == WorkStatus.READY_FOR_DELIVERY
    assert Approval.objects.get(pk=requested["approval_id"]).status == ApprovalStatus.APPROVED
    assert current_entry(project).work_status == WorkStatus.READY_FOR_DELIVERY

    with pytest.raises(InvalidTransition):
        submit_manager_review(approval_id=requested["approval_id"], decision="CANCEL", actor=pm)


def test_manager_review_revise(project_factory, admin, pm, current_entry):
    project = project_factory(department=Department.DESIGN)
    _reject_once(project, admin)
    requested = request_manager_review(project_id=project.pk, actor=pm)

    out = submit_manager_review(approval_id=requested["approval_id"], decision="revise", actor=admin)

    assert out["work_status"] == WorkStatus.CORRECTIONS_NEEDED
    assert Approval.objects.get(pk=requested["approval_id"]).status == ApprovalStatus.REJECTED
    assert Project.objects.get(pk=project.pk).status == ProjectStatus.ACTIVE


def test_manager_review_cancel(project_factory, admin, pm, current_entry):
    project = project_factory(department=Department.DESIGN)
    _reject_once(project, admin)
    requested = request_manager_review(project_id=project.pk, actor=pm)

    submit_manager_review(approval_id=requested["approval_id"], decision="CANCEL", actor=pm)

    assert Project.objects.get(pk=project.pk).status == ProjectStatus.CANCELLED
    assert current_entry(project).work_status == WorkStatus.CLIENT_REJECTED


def test_manager_review_decision_is_highest_privilege_only(project_factory, admin, pm, designer):
    project = project_factory(department=Department.DESIGN)
    _reject_once(project, admin)
    requested = request_manager_review(project_id=project.pk, actor=pm)

    with pytest.raises(WorkflowForbidden):
        submit_manager_review(approval_id=requested["approval_id"], decision="PROCEED", actor=designer)

    with pytest.raises(WorkflowForbidden):
        request_manager_review(project_id=project.pk, actor=designer)


def test_manager_review_not_decidable_as_plain_approval(project_factory, admin, pm):
    project = project_factory(department=Department.DESIGN)
    _reject_once(project, admin)
    requested = request_manager_review(project_id=project.pk, actor=pm)

    with pytest.raises(PreconditionFailed):
        submit_approval(approval_id=requested["approval_id"], status="APPROVED", actor=admin)


def test_superseded_entry_cannot_be_approved(project_factory, admin):
    project = project_factory()
    update_department_work_status(project_id=project.pk, status="IN_PROGRESS", actor=admin)
    stale = request_approval(project_id=project.pk, approval_type="QA_APPROVAL", actor=admin)
    client = request_approval(project_id=project.pk, approval_type="CLIENT_APPROVAL", actor=admin)
    submit_approval(approval_id=client.pk, status="APPROVED", actor=admin)

    move_to_department(project_id=project.pk, target_department="DESIGN", actor=admin)

    with pytest.raises(PreconditionFailed):
        submit_approval(approval_id=stale.pk, status="APPROVED", actor=admin)
