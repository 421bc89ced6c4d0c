# flow_core/workflows/analytics.py
from __future__ import annotations

import math
from typing import Any, Dict, List, Optional

from django.db.models import Prefetch
from django.utils import timezone

from flow_core.models import Approval, DepartmentHistory, Project, QATestingRound

from .enums import ProjectStatus, WorkStatus
from .exceptions import WorkflowNotFound


def elapsed_days(start, end) -> int:
    """
    Whole days between two datetimes, rounded up. Never negative.
    """
    seconds = (end - start).total_seconds()
    return max(0, math.ceil(seconds / 86400))


def _get_project(project_id) -> Project:
    project = Project.objects.filter(pk=project_id).first()
    if project is None:
        raise WorkflowNotFound(f"Project {project_id} not found")
    return project


def _days_spent(entry, now) -> Optional[int]:
    if entry.actual_days is not None:
        return entry.actual_days
    start = entry.work_start_date or entry.created_at
    end = entry.work_end_date or now
    return elapsed_days(start, end)


def entry_timeline(entry, *, now=None) -> Dict[str, Any]:
    now = now or timezone.now()
    spent = _days_spent(entry, now)
    overrun = bool(entry.estimated_days is not None and spent is not None and spent > entry.estimated_days)

    return {
        "history_id": entry.pk,
        "department": entry.to_department,
        "work_status": entry.work_status,
        "estimated_days": entry.estimated_days,
        "actual_days": entry.actual_days,
        "days_spent": spent,
        "overrun": overrun,
        "corrections_count": entry.corrections_count,
        "started_at": entry.work_start_date,
        "ended_at": entry.work_end_date,
    }


# ===============================================================
# Project-level queries
# ===============================================================

def get_workflow_status(project_id) -> Dict[str, Any]:
    """
    Full history of a project with approvals and QA rounds, oldest first.
    """
    project = _get_project(project_id)

    entries = (
        DepartmentHistory.objects.filter(project=project)
        .chronological()
        .prefetch_related(
            Prefetch("approvals", queryset=Approval.objects.order_by("requested_at", "id")),
            Prefetch("qa_rounds", queryset=QATestingRound.objects.order_by("round_number")),
        )
    )

    history: List[Dict[str, Any]] = []
    for entry in entries:
        history.append(
            {
                "id": entry.pk,
                "from_department": entry.from_department,
                "to_department": entry.to_department,
                "work_status": entry.work_status,
                "corrections_count": entry.corrections_count,
                "created_at": entry.created_at,
                "approvals": [
                    {
                        "id": a.pk,
                        "approval_type": a.approval_type,
                        "status": a.status,
                        "reviewed_at": a.reviewed_at,
                    }
                    for a in entry.approvals.all()
                ],
                "qa_rounds": [
                    {
                        "id": r.pk,
                        "round_number": r.round_number,
                        "qa_type": r.qa_type,
                        "status": r.status,
                        "bugs_count": r.bugs_count,
                        "critical_bugs_count": r.critical_bugs_count,
                    }
                    for r in entry.qa_rounds.all()
                ],
            }
        )

    return {
        "project_id": project.pk,
        "current_department": project.current_department,
        "status": project.status,
        "project_code": project.project_code,
        "history": history,
    }


def get_timeline_analytics(project_id, *, now=None) -> Dict[str, Any]:
    project = _get_project(project_id)
    now = now or timezone.now()

    rows = [
        entry_timeline(e, now=now)
        for e in DepartmentHistory.objects.filter(project=project).chronological()
    ]

    return {
        "project_id": project.pk,
        "entries": rows,
        "totals": {
            "estimated_days": sum(r["estimated_days"] or 0 for r in rows),
            "days_spent": sum(r["days_spent"] or 0 for r in rows),
            "corrections": sum(r["corrections_count"] for r in rows),
            "overruns": sum(1 for r in rows if r["overrun"]),
        },
    }


# ===============================================================
# Overrun scan (read-only)
# ===============================================================

def find_department_overruns(*, now=None) -> List[Dict[str, Any]]:
    """
    Current entries of ACTIVE projects that have run past their estimate
    without completing.
    """
    now = now or timezone.now()
    found: List[Dict[str, Any]] = []

    for project in Project.objects.filter(status=ProjectStatus.ACTIVE).order_by("id"):
        entry = DepartmentHistory.objects.latest_for(project.pk)
        if entry is None or entry.estimated_days is None:
            continue
        if entry.work_status in {WorkStatus.COMPLETED, WorkStatus.READY_FOR_DELIVERY}:
            continue

        row = entry_timeline(entry, now=now)
        if row["overrun"]:
            row["project_id"] = project.pk
            found.append(row)

    return found
