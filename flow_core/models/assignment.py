from django.conf import settings
from django.db import models

from flow_core.workflows.enums import AssignmentType

from .core import Project


class AssignmentHistory(models.Model):
    """
    Immutable record of a coordinator or team-lead change.
    """

    project = models.ForeignKey(
        Project,
        on_delete=models.CASCADE,
        related_name="assignment_history",
    )
    assignment_type = models.CharField(max_length=32, choices=AssignmentType.choices)
    previous_user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    new_user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    assigned_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    reason = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at", "-id"]

    def __str__(self):
        return f"{self.project_id} {self.assignment_type}: {self.previous_user_id} -> {self.new_user_id}"
