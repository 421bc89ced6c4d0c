# flow_core/tasks.py
from __future__ import annotations

import logging

from celery import shared_task

from flow_core.workflows.analytics import find_department_overruns

logger = logging.getLogger(__name__)


@shared_task
def scan_department_overruns() -> int:
    """
    Log one warning per current department entry that has overrun its
    estimate. Read-only; returns the number found.
    """
    overruns = find_department_overruns()
    for row in overruns:
        logger.warning(
            "Department overrun: project=%s department=%s status=%s spent=%s estimated=%s",
            row["project_id"],
            row["department"],
            row["work_status"],
            row["days_spent"],
            row["estimated_days"],
        )
    return len(overruns)
