# flow_core/models/core.py

from django.conf import settings
from django.db import models
from django.utils import timezone

from flow_core.workflows.enums import Department, ProjectStatus, Role, WorkStatus
from flow_core.workflows.guards import WorkflowWriteGuardMixin


# ============================================================
# Base
# ============================================================
class TimeStampedModel(models.Model):
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


# ============================================================
# Staff profile (identity collaborator)
# ============================================================
class StaffProfile(TimeStampedModel):
    """
    Role and department membership of a user.
    The workflow engine reads nothing else about identity.
    """

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="staff_profile",
    )
    role = models.CharField(max_length=32, choices=Role.choices)
    department = models.CharField(
        max_length=16,
        choices=Department.choices,
        blank=True,
        default="",
    )

    def __str__(self):
        return f"{self.user} ({self.role}/{self.department or '-'})"


# ============================================================
# Project
# ============================================================
class Project(WorkflowWriteGuardMixin, TimeStampedModel):
    WORKFLOW_FIELDS = ("current_department", "project_code")

    name = models.CharField(max_length=255)
    category = models.CharField(max_length=100)
    client_name = models.CharField(max_length=255, blank=True)

    current_department = models.CharField(
        max_length=16,
        choices=Department.choices,
        default=Department.PMO,
    )
    next_department = models.CharField(
        max_length=16,
        choices=Department.choices,
        null=True,
        blank=True,
    )
    status = models.CharField(
        max_length=16,
        choices=ProjectStatus.choices,
        default=ProjectStatus.ACTIVE,
        db_index=True,
    )
    project_code = models.CharField(max_length=32, blank=True, default="")

    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="owned_projects",
    )
    project_coordinator = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="coordinated_projects",
    )
    pc_team_lead = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="led_projects",
    )

    start_date = models.DateField(null=True, blank=True)
    target_date = models.DateField(null=True, blank=True)
    observations = models.TextField(blank=True)

    class Meta:
        ordering = ["-created_at", "-id"]

    def __str__(self):
        return self.name


# ============================================================
# Department history
# ============================================================
class DepartmentHistoryQuerySet(models.QuerySet):
    def chronological(self):
        return self.order_by("created_at", "id")

    def latest_for(self, project_id):
        """
        Current entry of a project: newest by (created_at, id).
        Department identity is never used to find it.
        """
        return self.filter(project_id=project_id).order_by("-created_at", "-id").first()


class DepartmentHistory(WorkflowWriteGuardMixin, models.Model):
    WORKFLOW_FIELDS = ("work_status",)

    project = models.ForeignKey(
        Project,
        on_delete=models.PROTECT,
        related_name="department_history",
    )
    from_department = models.CharField(
        max_length=16,
        choices=Department.choices,
        null=True,
        blank=True,
    )
    to_department = models.CharField(max_length=16, choices=Department.choices)
    work_status = models.CharField(
        max_length=32,
        choices=WorkStatus.choices,
        default=WorkStatus.NOT_STARTED,
    )

    estimated_days = models.PositiveIntegerField(null=True, blank=True)
    actual_days = models.PositiveIntegerField(null=True, blank=True)
    work_start_date = models.DateTimeField(null=True, blank=True)
    work_end_date = models.DateTimeField(null=True, blank=True)
    corrections_count = models.PositiveIntegerField(default=0)

    moved_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="department_moves",
    )
    permission_granted_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="department_moves_granted",
    )
    notes = models.TextField(blank=True)

    created_at = models.DateTimeField(default=timezone.now, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = DepartmentHistoryQuerySet.as_manager()

    class Meta:
        ordering = ["created_at", "id"]
        indexes = [
            models.Index(fields=["project", "created_at"], name="flow_hist_project_created_idx"),
        ]

    def __str__(self):
        return (
            f"{self.project_id}: {self.from_department or '-'} -> "
            f"{self.to_department} [{self.work_status}]"
        )
