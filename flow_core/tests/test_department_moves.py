# flow_core/tests/test_department_moves.py
from __future__ import annotations

import pytest
from django.db import DatabaseError
from django.db.models.query import QuerySet

from flow_core.models import DepartmentHistory, Project
from flow_core.services import (
    move_to_department,
    request_approval,
    submit_approval,
    update_department_work_status,
)
from flow_core.workflows.enums import ApprovalType, Department, WorkStatus
from flow_core.workflows.exceptions import (
    ErrorKind,
    InvalidTransition,
    PreconditionFailed,
    WorkflowForbidden,
    WorkflowNotFound,
)
from flow_core.workflows.rules import DEFAULT_RULES
from flow_core.workflows.validator import (
    get_allowed_next_departments,
    get_workflow_validation_status,
    validate_transition,
)

pytestmark = pytest.mark.django_db


def _client_sign_off(project, requester, approver):
    approval = request_approval(
        project_id=project.pk,
        approval_type=ApprovalType.CLIENT_APPROVAL,
        actor=requester,
    )
    return submit_approval(approval_id=approval.pk, status="APPROVED", actor=approver)


# ---------------------------------------------------------------------
# Preconditions and gates
# ---------------------------------------------------------------------

def test_move_out_of_unfinished_pmo_is_precondition_failure(project_factory, admin):
    project = project_factory()

    result = validate_transition(project.pk, Department.DESIGN, admin)
    assert not result.valid
    assert result.has(ErrorKind.PRECONDITION_FAILED)

    with pytest.raises(PreconditionFailed) as exc:
        move_to_department(project_id=project.pk, target_department="DESIGN", actor=admin)

    assert "must be COMPLETED" in str(exc.value)

    project.refresh_from_db()
    assert project.current_department == Department.PMO
    assert DepartmentHistory.objects.filter(project=project).count() == 1


def test_completed_design_without_client_approval_is_gated(project_factory, admin, set_work_status):
    project = project_factory(department=Department.DESIGN)
    set_work_status(project, WorkStatus.COMPLETED)

    result = validate_transition(project.pk, Department.HTML, admin)
    assert result.has(ErrorKind.GATE_UNSATISFIED)
    assert not result.has(ErrorKind.PRECONDITION_FAILED)
    assert "DESIGN gate: missing CLIENT_APPROVAL approval" in result.messages

    with pytest.raises(InvalidTransition) as exc:
        move_to_department(project_id=project.pk, target_department=Department.HTML, actor=admin)
    assert "missing CLIENT_APPROVAL approval" in exc.value.message


def test_client_approval_opens_design_gate(project_factory, admin, designer, client_actor):
    project = project_factory(department=Department.DESIGN)
    update_department_work_status(project_id=project.pk, status="IN_PROGRESS", actor=designer)

    out = _client_sign_off(project, designer, client_actor)
    assert out["work_status"] == WorkStatus.COMPLETED

    assert validate_transition(project.pk, Department.HTML, admin).valid

    moved = move_to_department(project_id=project.pk, target_department="HTML", actor=admin)
    assert moved["from_department"] == Department.DESIGN
    assert moved["to_department"] == Department.HTML


@pytest.mark.parametrize("src", list(Department))
def test_every_undeclared_pair_is_invalid_transition(project_factory, admin, src):
    project = project_factory(department=src)

    for dst in Department:
        if DEFAULT_RULES.is_valid_transition(src, dst):
            continue
        result = validate_transition(project.pk, dst, admin)
        assert result.has(ErrorKind.INVALID_TRANSITION), (src, dst)


def test_move_to_same_department_is_rejected(project_factory, admin, set_work_status):
    project = project_factory()
    set_work_status(project, WorkStatus.COMPLETED)

    with pytest.raises(InvalidTransition):
        move_to_department(project_id=project.pk, target_department="PMO", actor=admin)


def test_non_manager_cannot_move(project_factory, designer):
    project = project_factory(department=Department.DESIGN)

    result = validate_transition(project.pk, Department.HTML, designer)
    assert result.has(ErrorKind.FORBIDDEN)

    with pytest.raises(WorkflowForbidden):
        move_to_department(project_id=project.pk, target_department="HTML", actor=designer)


def test_unknown_project_is_not_found(db, admin):
    result = validate_transition(999999, Department.DESIGN, admin)
    assert result.has(ErrorKind.NOT_FOUND)

    with pytest.raises(WorkflowNotFound):
        move_to_department(project_id=999999, target_department="DESIGN", actor=admin)

    with pytest.raises(WorkflowNotFound):
        get_allowed_next_departments(999999)


# ---------------------------------------------------------------------
# Successful moves
# ---------------------------------------------------------------------

def test_full_pmo_to_design_move(project_factory, admin):
    project = project_factory(category="React web app")

    update_department_work_status(project_id=project.pk, status="IN_PROGRESS", actor=admin)
    out = _client_sign_off(project, admin, admin)
    assert out["project_code"] == "P"

    moved = move_to_department(
        project_id=project.pk,
        target_department="DESIGN",
        actor=admin,
        notes="kickoff done",
        estimated_days=5,
    )

    assert moved["changed"] is True
    assert moved["project_code"] == "P"

    project.refresh_from_db()
    assert project.current_department == Department.DESIGN
    assert project.next_department == Department.HTML
    assert project.project_code == "P"

    entry = DepartmentHistory.objects.latest_for(project.pk)
    assert entry.pk == moved["history_id"]
    assert entry.from_department == Department.PMO
    assert entry.to_department == Department.DESIGN
    assert entry.work_status == WorkStatus.NOT_STARTED
    assert entry.estimated_days == 5
    assert entry.moved_by == admin.user


def test_validation_status_payload(project_factory, admin, set_work_status):
    project = project_factory(department=Department.DESIGN, category="Custom PHP portal")
    set_work_status(project, WorkStatus.COMPLETED)

    payload = get_workflow_validation_status(project.pk, admin)

    assert payload["current_department"] == Department.DESIGN
    assert payload["current_status"] == WorkStatus.COMPLETED
    assert payload["allowed_next_departments"] == [Department.HTML]
    assert payload["workflow_sequence"][3] == Department.PHP
    assert payload["approval_gate"]["required"] is True
    assert payload["approval_gate"]["satisfied"] is False
    assert "missing CLIENT_APPROVAL approval" in payload["approval_gate"]["missing_requirements"]
    assert payload["can_proceed"] is False
    assert payload["permissions"]["can_move_department"] is True


def test_allowed_next_departments_for_project(project_factory):
    project = project_factory(department=Department.HTML)
    assert set(get_allowed_next_departments(project.pk)) == {
        Department.DESIGN,
        Department.PHP,
        Department.REACT,
        Department.WORDPRESS,
    }


def test_project_row_untouched_when_move_fails(project_factory, admin):
    project = project_factory()
    before = Project.objects.values().get(pk=project.pk)

    with pytest.raises(PreconditionFailed):
        move_to_department(project_id=project.pk, target_department="DESIGN", actor=admin)

    assert Project.objects.values().get(pk=project.pk) == before


def _ready_pmo_project(project_factory, admin):
    project = project_factory()
    update_department_work_status(project_id=project.pk, status="IN_PROGRESS", actor=admin)
    _client_sign_off(project, admin, admin)
    return project


def test_repeated_move_is_revalidated_against_new_state(project_factory, admin):
    project = _ready_pmo_project(project_factory, admin)

    move_to_department(project_id=project.pk, target_department="DESIGN", actor=admin)

    with pytest.raises((InvalidTransition, PreconditionFailed)):
        move_to_department(project_id=project.pk, target_department="DESIGN", actor=admin)

    project.refresh_from_db()
    assert project.current_department == Department.DESIGN
    assert DepartmentHistory.objects.filter(project=project).count() == 2
    assert DepartmentHistory.objects.filter(project=project, to_department=Department.DESIGN).count() == 1


def test_failure_after_history_insert_rolls_back_move(project_factory, admin, monkeypatch):
    project = _ready_pmo_project(project_factory, admin)
    before = Project.objects.values().get(pk=project.pk)
    history_ids = list(DepartmentHistory.objects.filter(project=project).values_list("pk", flat=True))

    original_update = QuerySet.update

    def _failing_update(queryset, **kwargs):
        if queryset.model is Project and "current_department" in kwargs:
            raise DatabaseError("project row write failed")
        return original_update(queryset, **kwargs)

    monkeypatch.setattr(QuerySet, "update", _failing_update)

    with pytest.raises(DatabaseError):
        move_to_department(project_id=project.pk, target_department="DESIGN", actor=admin)

    monkeypatch.undo()

    assert Project.objects.values().get(pk=project.pk) == before
    assert list(DepartmentHistory.objects.filter(project=project).values_list("pk", flat=True)) == history_ids
