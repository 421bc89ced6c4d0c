# flow_core/signals.py
from __future__ import annotations

import logging

from django.db.models.signals import post_save
from django.dispatch import receiver

from flow_core.models import DepartmentHistory

audit_logger = logging.getLogger("flow_core.audit")


def _safe_username(user) -> str:
    if not user:
        return "system"
    return getattr(user, "username", None) or str(user.pk)


# ===============================================================
# DEPARTMENT HISTORY audit
# ===============================================================
@receiver(post_save, sender=DepartmentHistory)
def audit_department_history(sender, instance: DepartmentHistory, created: bool, **kwargs):
    """
    One audit line per new history entry. Runs inside the orchestrator's
    transaction, so it only logs.
    """
    if not created:
        return

    audit_logger.info(
        "HISTORY project=%s %s -> %s status=%s by=%s entry=%s",
        instance.project_id,
        instance.from_department or "-",
        instance.to_department,
        instance.work_status,
        _safe_username(instance.moved_by),
        instance.pk,
    )
