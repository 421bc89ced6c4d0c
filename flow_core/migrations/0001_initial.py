# Generated manually for initial schema.
from __future__ import annotations

from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion
import django.utils.timezone


DEPARTMENT_CHOICES = [
    ("PMO", "Pmo"),
    ("DESIGN", "Design"),
    ("HTML", "Html"),
    ("PHP", "Php"),
    ("REACT", "React"),
    ("WORDPRESS", "Wordpress"),
    ("QA", "Qa"),
    ("DELIVERY", "Delivery"),
    ("MANAGER", "Manager"),
]

WORK_STATUS_CHOICES = [
    ("NOT_STARTED", "Not Started"),
    ("IN_PROGRESS", "In Progress"),
    ("CORRECTIONS_NEEDED", "Corrections Needed"),
    ("COMPLETED", "Completed"),
    ("ON_HOLD", "On Hold"),
    ("PENDING_CLIENT_APPROVAL", "Pending Client Approval"),
    ("CLIENT_REJECTED", "Client Rejected"),
    ("QA_TESTING", "Qa Testing"),
    ("QA_REJECTED", "Qa Rejected"),
    ("BUGFIX_IN_PROGRESS", "Bugfix In Progress"),
    ("BEFORE_LIVE_QA", "Before Live Qa"),
    ("READY_FOR_DELIVERY", "Ready For Delivery"),
]

PROJECT_STATUS_CHOICES = [
    ("ACTIVE", "Active"),
    ("HOLD", "Hold"),
    ("COMPLETED", "Completed"),
    ("CANCELLED", "Cancelled"),
]

ROLE_CHOICES = [
    ("ADMIN", "Admin"),
    ("SU_ADMIN", "Su Admin"),
    ("PROJECT_MANAGER", "Project Manager"),
    ("PROJECT_COORDINATOR", "Project Coordinator"),
    ("DEVELOPER", "Developer"),
    ("DESIGNER", "Designer"),
    ("HTML_DEVELOPER", "Html Developer"),
    ("QA_TESTER", "Qa Tester"),
    ("CLIENT", "Client"),
    ("PC", "Pc"),
    ("TESTER", "Tester"),
    ("PHP_TL1", "Php Tl1"),
    ("PHP_TL2", "Php Tl2"),
    ("REACT_TL", "React Tl"),
    ("HTML_TL", "Html Tl"),
    ("PC_TL1", "Pc Tl1"),
    ("PC_TL2", "Pc Tl2"),
    ("DESIGN_TL", "Design Tl"),
]

PRIORITY_CHOICES = [
    ("LOW", "Low"),
    ("MEDIUM", "Medium"),
    ("HIGH", "High"),
    ("URGENT", "Urgent"),
]

CORRECTION_STATUS_CHOICES = [
    ("OPEN", "Open"),
    ("IN_PROGRESS", "In Progress"),
    ("RESOLVED", "Resolved"),
    ("REJECTED", "Rejected"),
]

APPROVAL_TYPE_CHOICES = [
    ("CLIENT_APPROVAL", "Client Approval"),
    ("QA_APPROVAL", "Qa Approval"),
    ("BEFORE_LIVE_QA", "Before Live Qa"),
    ("MANAGER_REVIEW", "Manager Review"),
]

APPROVAL_STATUS_CHOICES = [
    ("PENDING", "Pending"),
    ("APPROVED", "Approved"),
    ("REJECTED", "Rejected"),
    ("CANCELLED", "Cancelled"),
]

QA_TYPE_CHOICES = [
    ("HTML_QA", "Html Qa"),
    ("DEV_QA", "Dev Qa"),
    ("BEFORE_LIVE_QA", "Before Live Qa"),
]

QA_STATUS_CHOICES = [
    ("IN_PROGRESS", "In Progress"),
    ("PASSED", "Passed"),
    ("FAILED", "Failed"),
    ("CANCELLED", "Cancelled"),
]

BUG_SEVERITY_CHOICES = [
    ("LOW", "Low"),
    ("MEDIUM", "Medium"),
    ("HIGH", "High"),
    ("CRITICAL", "Critical"),
]

BUG_STATUS_CHOICES = [
    ("OPEN", "Open"),
    ("IN_PROGRESS", "In Progress"),
    ("FIXED", "Fixed"),
    ("VERIFIED", "Verified"),
    ("CLOSED", "Closed"),
]

ASSIGNMENT_TYPE_CHOICES = [
    ("PROJECT_COORDINATOR", "Project Coordinator"),
    ("PC_TEAM_LEAD", "Pc Team Lead"),
]


def _user_fk(related_name, on_delete=django.db.models.deletion.SET_NULL, null=True):
    return models.ForeignKey(
        blank=null,
        null=null,
        on_delete=on_delete,
        related_name=related_name,
        to=settings.AUTH_USER_MODEL,
    )


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="StaffProfile",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("role", models.CharField(choices=ROLE_CHOICES, max_length=32)),
                ("department", models.CharField(blank=True, choices=DEPARTMENT_CHOICES, default="", max_length=16)),
                (
                    "user",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="staff_profile",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={"abstract": False},
        ),
        migrations.CreateModel(
            name="Project",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("name", models.CharField(max_length=255)),
                ("category", models.CharField(max_length=100)),
                ("client_name", models.CharField(blank=True, max_length=255)),
                ("current_department", models.CharField(choices=DEPARTMENT_CHOICES, default="PMO", max_length=16)),
                ("next_department", models.CharField(blank=True, choices=DEPARTMENT_CHOICES, max_length=16, null=True)),
                (
                    "status",
                    models.CharField(choices=PROJECT_STATUS_CHOICES, db_index=True, default="ACTIVE", max_length=16),
                ),
                ("project_code", models.CharField(blank=True, default="", max_length=32)),
                ("start_date", models.DateField(blank=True, null=True)),
                ("target_date", models.DateField(blank=True, null=True)),
                ("observations", models.TextField(blank=True)),
                (
                    "owner",
                    _user_fk("owned_projects", on_delete=django.db.models.deletion.PROTECT, null=False),
                ),
                ("project_coordinator", _user_fk("coordinated_projects")),
                ("pc_team_lead", _user_fk("led_projects")),
            ],
            options={"ordering": ["-created_at", "-id"]},
        ),
        migrations.CreateModel(
            name="DepartmentHistory",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("from_department", models.CharField(blank=True, choices=DEPARTMENT_CHOICES, max_length=16, null=True)),
                ("to_department", models.CharField(choices=DEPARTMENT_CHOICES, max_length=16)),
                ("work_status", models.CharField(choices=WORK_STATUS_CHOICES, default="NOT_STARTED", max_length=32)),
                ("estimated_days", models.PositiveIntegerField(blank=True, null=True)),
                ("actual_days", models.PositiveIntegerField(blank=True, null=True)),
                ("work_start_date", models.DateTimeField(blank=True, null=True)),
                ("work_end_date", models.DateTimeField(blank=True, null=True)),
                ("corrections_count", models.PositiveIntegerField(default=0)),
                ("notes", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "project",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="department_history",
                        to="flow_core.project",
                    ),
                ),
                ("moved_by", _user_fk("department_moves")),
                ("permission_granted_by", _user_fk("department_moves_granted")),
            ],
            options={
                "ordering": ["created_at", "id"],
                "indexes": [
                    models.Index(fields=["project", "created_at"], name="flow_hist_project_created_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Correction",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("correction_type", models.CharField(max_length=100)),
                ("description", models.TextField()),
                ("priority", models.CharField(choices=PRIORITY_CHOICES, default="MEDIUM", max_length=16)),
                ("status", models.CharField(choices=CORRECTION_STATUS_CHOICES, default="OPEN", max_length=16)),
                ("estimated_hours", models.DecimalField(blank=True, decimal_places=2, max_digits=6, null=True)),
                ("actual_hours", models.DecimalField(blank=True, decimal_places=2, max_digits=6, null=True)),
                ("resolution_notes", models.TextField(blank=True)),
                ("resolved_at", models.DateTimeField(blank=True, null=True)),
                (
                    "history_entry",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="corrections",
                        to="flow_core.departmenthistory",
                    ),
                ),
                ("requested_by", _user_fk("corrections_requested")),
                ("assigned_to", _user_fk("corrections_assigned")),
            ],
            options={"ordering": ["-created_at", "-id"]},
        ),
        migrations.CreateModel(
            name="Approval",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("approval_type", models.CharField(choices=APPROVAL_TYPE_CHOICES, max_length=32)),
                ("status", models.CharField(choices=APPROVAL_STATUS_CHOICES, default="PENDING", max_length=16)),
                ("comments", models.TextField(blank=True)),
                ("rejection_reason", models.TextField(blank=True)),
                ("attachments", models.JSONField(blank=True, default=list)),
                ("requested_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("reviewed_at", models.DateTimeField(blank=True, null=True)),
                (
                    "history_entry",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="approvals",
                        to="flow_core.departmenthistory",
                    ),
                ),
                ("requested_by", _user_fk("approvals_requested")),
                ("reviewed_by", _user_fk("approvals_reviewed")),
            ],
            options={"ordering": ["-requested_at", "-id"]},
        ),
        migrations.CreateModel(
            name="QATestingRound",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("round_number", models.PositiveIntegerField()),
                ("qa_type", models.CharField(choices=QA_TYPE_CHOICES, max_length=32)),
                ("status", models.CharField(choices=QA_STATUS_CHOICES, default="IN_PROGRESS", max_length=16)),
                ("bugs_count", models.PositiveIntegerField(default=0)),
                ("critical_bugs_count", models.PositiveIntegerField(default=0)),
                ("test_results", models.TextField(blank=True)),
                ("rejection_reason", models.TextField(blank=True)),
                ("started_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("completed_at", models.DateTimeField(blank=True, null=True)),
                (
                    "history_entry",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="qa_rounds",
                        to="flow_core.departmenthistory",
                    ),
                ),
                ("tester", _user_fk("qa_rounds")),
            ],
            options={
                "ordering": ["history_entry_id", "round_number"],
                "unique_together": {("history_entry", "round_number")},
            },
        ),
        migrations.CreateModel(
            name="QABug",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("title", models.CharField(max_length=255)),
                ("description", models.TextField(blank=True)),
                ("severity", models.CharField(choices=BUG_SEVERITY_CHOICES, default="MEDIUM", max_length=16)),
                ("status", models.CharField(choices=BUG_STATUS_CHOICES, default="OPEN", max_length=16)),
                ("assigned_department", models.CharField(choices=DEPARTMENT_CHOICES, max_length=16)),
                ("steps_to_reproduce", models.TextField(blank=True)),
                ("screenshot_url", models.CharField(blank=True, max_length=500)),
                ("discovered_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("fixed_at", models.DateTimeField(blank=True, null=True)),
                (
                    "qa_round",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="bugs",
                        to="flow_core.qatestinground",
                    ),
                ),
                ("assigned_to", _user_fk("qa_bugs_assigned")),
            ],
            options={"ordering": ["-discovered_at", "-id"]},
        ),
        migrations.CreateModel(
            name="AssignmentHistory",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("assignment_type", models.CharField(choices=ASSIGNMENT_TYPE_CHOICES, max_length=32)),
                ("reason", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "project",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="assignment_history",
                        to="flow_core.project",
                    ),
                ),
                ("previous_user", _user_fk("+")),
                ("new_user", _user_fk("+")),
                ("assigned_by", _user_fk("+")),
            ],
            options={"ordering": ["-created_at", "-id"]},
        ),
    ]
