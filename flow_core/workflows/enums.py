# flow_core/workflows/enums.py
"""
Closed vocabularies for the department workflow.

Pure data: safe to import before Django settings are configured.
Values are stored verbatim in the database, so never rename a member.
"""

from __future__ import annotations

from django.db import models


class Department(models.TextChoices):
    PMO = "PMO"
    DESIGN = "DESIGN"
    HTML = "HTML"
    PHP = "PHP"
    REACT = "REACT"
    WORDPRESS = "WORDPRESS"
    QA = "QA"
    DELIVERY = "DELIVERY"
    MANAGER = "MANAGER"


class WorkStatus(models.TextChoices):
    NOT_STARTED = "NOT_STARTED"
    IN_PROGRESS = "IN_PROGRESS"
    CORRECTIONS_NEEDED = "CORRECTIONS_NEEDED"
    COMPLETED = "COMPLETED"
    ON_HOLD = "ON_HOLD"
    PENDING_CLIENT_APPROVAL = "PENDING_CLIENT_APPROVAL"
    CLIENT_REJECTED = "CLIENT_REJECTED"
    QA_TESTING = "QA_TESTING"
    QA_REJECTED = "QA_REJECTED"
    BUGFIX_IN_PROGRESS = "BUGFIX_IN_PROGRESS"
    BEFORE_LIVE_QA = "BEFORE_LIVE_QA"
    READY_FOR_DELIVERY = "READY_FOR_DELIVERY"


class ProjectStatus(models.TextChoices):
    ACTIVE = "ACTIVE"
    HOLD = "HOLD"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class Role(models.TextChoices):
    ADMIN = "ADMIN"
    SU_ADMIN = "SU_ADMIN"
    PROJECT_MANAGER = "PROJECT_MANAGER"
    PROJECT_COORDINATOR = "PROJECT_COORDINATOR"
    DEVELOPER = "DEVELOPER"
    DESIGNER = "DESIGNER"
    HTML_DEVELOPER = "HTML_DEVELOPER"
    QA_TESTER = "QA_TESTER"
    CLIENT = "CLIENT"
    PC = "PC"
    TESTER = "TESTER"
    PHP_TL1 = "PHP_TL1"
    PHP_TL2 = "PHP_TL2"
    REACT_TL = "REACT_TL"
    HTML_TL = "HTML_TL"
    PC_TL1 = "PC_TL1"
    PC_TL2 = "PC_TL2"
    DESIGN_TL = "DESIGN_TL"


class ApprovalType(models.TextChoices):
    CLIENT_APPROVAL = "CLIENT_APPROVAL"
    QA_APPROVAL = "QA_APPROVAL"
    BEFORE_LIVE_QA = "BEFORE_LIVE_QA"
    MANAGER_REVIEW = "MANAGER_REVIEW"


class ApprovalStatus(models.TextChoices):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    CANCELLED = "CANCELLED"


class QAType(models.TextChoices):
    HTML_QA = "HTML_QA"
    DEV_QA = "DEV_QA"
    BEFORE_LIVE_QA = "BEFORE_LIVE_QA"


class QAStatus(models.TextChoices):
    IN_PROGRESS = "IN_PROGRESS"
    PASSED = "PASSED"
    FAILED = "FAILED"
    CANCELLED = "CANCELLED"


class CorrectionStatus(models.TextChoices):
    OPEN = "OPEN"
    IN_PROGRESS = "IN_PROGRESS"
    RESOLVED = "RESOLVED"
    REJECTED = "REJECTED"


class Priority(models.TextChoices):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    URGENT = "URGENT"


class BugSeverity(models.TextChoices):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class BugStatus(models.TextChoices):
    OPEN = "OPEN"
    IN_PROGRESS = "IN_PROGRESS"
    FIXED = "FIXED"
    VERIFIED = "VERIFIED"
    CLOSED = "CLOSED"


class AssignmentType(models.TextChoices):
    PROJECT_COORDINATOR = "PROJECT_COORDINATOR"
    PC_TEAM_LEAD = "PC_TEAM_LEAD"


class ManagerDecision(models.TextChoices):
    PROCEED = "PROCEED"
    REVISE = "REVISE"
    CANCEL = "CANCEL"


class WorkflowAction(models.TextChoices):
    MOVE_DEPARTMENT = "move_department"
    UPDATE_STATUS = "update_status"
    APPROVE = "approve"
    START_QA = "start_qa"


TERMINAL_QA_STATUSES = frozenset({QAStatus.PASSED, QAStatus.FAILED, QAStatus.CANCELLED})
TERMINAL_APPROVAL_STATUSES = frozenset(
    {ApprovalStatus.APPROVED, ApprovalStatus.REJECTED, ApprovalStatus.CANCELLED}
)
TERMINAL_CORRECTION_STATUSES = frozenset({CorrectionStatus.RESOLVED, CorrectionStatus.REJECTED})


def parse_choice(enum_cls, value, *, field: str):
    """
    Parse an untrusted string into a member of a TextChoices enum.

    Raises ValueError naming the field and the accepted values.
    """
    raw = str(value or "").strip()
    try:
        return enum_cls(raw)
    except ValueError:
        pass
    try:
        return enum_cls(raw.upper())
    except ValueError:
        allowed = ", ".join(enum_cls.values)
        raise ValueError(f"Unknown {field}: {raw!r}. Allowed: {allowed}") from None
