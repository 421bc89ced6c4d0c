# flow_core/tests/test_public_api_contract.py
import pytest

import flow_core.services as services
import flow_core.workflows as workflows
from flow_core.identity import Actor, resolve_actor
from flow_core.workflows.enums import Department, Role
from flow_core.workflows.exceptions import WorkflowForbidden


def test_services_exports_are_callable():
    for name in services.__all__:
        assert hasattr(services, name), name
    for name in (
        "create_project",
        "move_to_department",
        "update_department_work_status",
        "start_qa_testing",
        "complete_qa_testing_round",
        "submit_approval",
    ):
        assert callable(getattr(services, name))


def test_workflow_layer_exports():
    for name in workflows.__all__:
        assert hasattr(workflows, name), name


def test_actor_parse():
    actor = Actor.parse(object(), "project manager", "design")
    assert actor.role == Role.PROJECT_MANAGER
    assert actor.department == Department.DESIGN

    with pytest.raises(ValueError):
        Actor.parse(object(), "ADMIN", "ACCOUNTING")


@pytest.mark.django_db
def test_resolve_actor(make_user):
    assert resolve_actor(make_user(role=None, superuser=True)).role == Role.ADMIN
    assert resolve_actor(make_user("SU_ADMIN")).role == Role.ADMIN

    designer = resolve_actor(make_user(Role.DESIGNER, Department.DESIGN))
    assert designer.department == Department.DESIGN

    with pytest.raises(WorkflowForbidden):
        resolve_actor(make_user(role=None))

    with pytest.raises(WorkflowForbidden):
        resolve_actor(make_user("JANITOR"))
