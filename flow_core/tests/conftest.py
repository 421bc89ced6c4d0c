# flow_core/tests/conftest.py

from __future__ import annotations

import uuid
from typing import Callable, Optional

import pytest
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient

from flow_core.identity import Actor, resolve_actor
from flow_core.models import DepartmentHistory, Project, StaffProfile
from flow_core.services import create_project
from flow_core.workflows.enums import Department, Role, WorkStatus


def _rand(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


@pytest.fixture
def api_client() -> APIClient:
    return APIClient()


@pytest.fixture
def make_user(db) -> Callable:
    """
    Create a user with a StaffProfile. Pass role=None for a user without one.
    """

    def _factory(role: Optional[str] = Role.DEVELOPER, department: str = "", *, superuser: bool = False):
        User = get_user_model()
        user = User.objects.create_user(
            username=_rand("user"),
            password="pass123",
            is_superuser=superuser,
            is_staff=superuser,
        )
        if role is not None:
            StaffProfile.objects.create(user=user, role=role, department=department)
        return user

    return _factory


@pytest.fixture
def make_actor(make_user) -> Callable[..., Actor]:
    def _factory(role=Role.DEVELOPER, department: str = "") -> Actor:
        return resolve_actor(make_user(role, department))

    return _factory


@pytest.fixture
def admin(make_actor) -> Actor:
    return make_actor(Role.ADMIN)


@pytest.fixture
def pm(make_actor) -> Actor:
    return make_actor(Role.PROJECT_MANAGER, Department.PMO)


@pytest.fixture
def designer(make_actor) -> Actor:
    return make_actor(Role.DESIGNER, Department.DESIGN)


@pytest.fixture
def client_actor(make_actor) -> Actor:
    return make_actor(Role.CLIENT)


@pytest.fixture
def developer(make_actor) -> Actor:
    return make_actor(Role.DEVELOPER, Department.REACT)


@pytest.fixture
def html_dev(make_actor) -> Actor:
    return make_actor(Role.HTML_DEVELOPER, Department.HTML)


@pytest.fixture
def project_factory(admin) -> Callable[..., Project]:
    """
    Create a project through the orchestrator (seed history included).
    """

    def _factory(
        *,
        department=Department.PMO,
        category: str = "React web app",
        actor: Optional[Actor] = None,
        **extra,
    ) -> Project:
        result = create_project(
            actor=actor or admin,
            name=_rand("Project"),
            category=category,
            initial_department=department,
            **extra,
        )
        return result.project

    return _factory


@pytest.fixture
def set_work_status() -> Callable:
    """
    Force the current entry's work status, bypassing the workflow.
    Test setup only.
    """

    def _set(project: Project, status) -> DepartmentHistory:
        entry = DepartmentHistory.objects.latest_for(project.pk)
        DepartmentHistory.objects.filter(pk=entry.pk).update(work_status=status)
        entry.refresh_from_db()
        return entry

    return _set


@pytest.fixture
def current_entry() -> Callable[[Project], DepartmentHistory]:
    def _get(project: Project) -> DepartmentHistory:
        return DepartmentHistory.objects.latest_for(project.pk)

    return _get


@pytest.fixture
def started_project(project_factory, set_work_status) -> Callable[..., Project]:
    """
    A project whose seeded entry is already IN_PROGRESS.
    """

    def _factory(**kwargs) -> Project:
        project = project_factory(**kwargs)
        set_work_status(project, WorkStatus.IN_PROGRESS)
        return project

    return _factory
