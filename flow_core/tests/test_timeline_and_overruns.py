# flow_core/tests/test_timeline_and_overruns.py
from __future__ import annotations

from datetime import datetime, timedelta, timezone as dt_timezone
from io import StringIO

import pytest
from django.core.management import call_command
from django.utils import timezone

from flow_core.models import DepartmentHistory
from flow_core.services import update_project_status
from flow_core.tasks import scan_department_overruns
from flow_core.workflows.analytics import (
    elapsed_days,
    find_department_overruns,
    get_timeline_analytics,
    get_workflow_status,
)
from flow_core.workflows.enums import Department, WorkStatus
from flow_core.workflows.exceptions import WorkflowNotFound

pytestmark = pytest.mark.django_db

T0 = datetime(2024, 3, 1, tzinfo=dt_timezone.utc)


def _age_entry(project, *, days_ago: int, estimated_days, status=WorkStatus.IN_PROGRESS):
    """
    created_at defaults to now; rewrite it (and the estimate) after creation.
    """
    entry = DepartmentHistory.objects.latest_for(project.pk)
    DepartmentHistory.objects.filter(pk=entry.pk).update(
        created_at=timezone.now() - timedelta(days=days_ago),
        estimated_days=estimated_days,
        work_status=status,
    )
    return entry


@pytest.mark.parametrize(
    "end,expected",
    [
        (T0, 0),
        (T0 + timedelta(seconds=1), 1),
        (T0 + timedelta(days=1), 1),
        (T0 + timedelta(days=2, hours=1), 3),
        (T0 - timedelta(days=4), 0),
    ],
)
def test_elapsed_days(end, expected):
    assert elapsed_days(T0, end) == expected


def test_timeline_reports_overrun(project_factory):
    project = project_factory(department=Department.DESIGN)
    _age_entry(project, days_ago=5, estimated_days=2)

    data = get_timeline_analytics(project.pk)

    assert data["project_id"] == project.pk
    [row] = data["entries"]
    assert row["department"] == Department.DESIGN
    assert row["days_spent"] >= 5
    assert row["overrun"] is True
    assert data["totals"]["estimated_days"] == 2
    assert data["totals"]["overruns"] == 1


def test_actual_days_win_over_elapsed(project_factory):
    project = project_factory()
    entry = _age_entry(project, days_ago=30, estimated_days=10, status=WorkStatus.COMPLETED)
    DepartmentHistory.objects.filter(pk=entry.pk).update(actual_days=4)

    [row] = get_timeline_analytics(project.pk)["entries"]
    assert row["days_spent"] == 4
    assert row["overrun"] is False


def test_workflow_status_lists_history(project_factory, admin):
    project = project_factory()

    data = get_workflow_status(project.pk)

    assert data["current_department"] == Department.PMO
    assert len(data["history"]) == 1
    assert data["history"][0]["approvals"] == []
    assert data["history"][0]["qa_rounds"] == []

    with pytest.raises(WorkflowNotFound):
        get_workflow_status(123456789)


# ---------------------------------------------------------------------
# Overrun scan
# ---------------------------------------------------------------------

def test_overrun_scan_skips_finished_and_inactive(project_factory, admin):
    late = project_factory(department=Department.HTML)
    _age_entry(late, days_ago=6, estimated_days=3)

    on_time = project_factory(department=Department.HTML)
    _age_entry(on_time, days_ago=1, estimated_days=3)

    done = project_factory(department=Department.HTML)
    _age_entry(done, days_ago=9, estimated_days=3, status=WorkStatus.COMPLETED)

    held = project_factory(department=Department.HTML)
    _age_entry(held, days_ago=9, estimated_days=3)
    update_project_status(project_id=held.pk, status="HOLD", reason="Budget review", actor=admin)

    no_estimate = project_factory(department=Department.HTML)
    _age_entry(no_estimate, days_ago=9, estimated_days=None)

    rows = find_department_overruns()

    assert [r["project_id"] for r in rows] == [late.pk]
    assert rows[0]["department"] == Department.HTML


def test_scan_task_logs_and_counts(project_factory, caplog):
    project = project_factory()
    _age_entry(project, days_ago=10, estimated_days=1)

    with caplog.at_level("WARNING", logger="flow_core.tasks"):
        count = scan_department_overruns()

    assert count == 1
    assert any(f"project={project.pk}" in r.getMessage() for r in caplog.records)


def test_overrun_command(project_factory):
    project = project_factory()
    _age_entry(project, days_ago=10, estimated_days=1)

    out = StringIO()
    call_command("check_department_overruns", stdout=out)

    text = out.getvalue()
    assert f"project={project.pk}" in text
    assert "1 overrun(s) found" in text
