# flow_core/admin.py

from django.contrib import admin

from .models import (
    Approval,
    AssignmentHistory,
    Correction,
    DepartmentHistory,
    Project,
    QABug,
    QATestingRound,
    StaffProfile,
)


# =============================================================
# Staff profiles
# =============================================================

@admin.register(StaffProfile)
class StaffProfileAdmin(admin.ModelAdmin):
    list_display = ("user", "role", "department")
    list_filter = ("role", "department")
    search_fields = ("user__username",)


# =============================================================
# Projects (workflow fields are read-only here)
# =============================================================

class DepartmentHistoryInline(admin.TabularInline):
    model = DepartmentHistory
    extra = 0
    can_delete = False
    fields = ("created_at", "from_department", "to_department", "work_status", "corrections_count", "moved_by")
    readonly_fields = fields
    ordering = ("created_at", "id")

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Project)
class ProjectAdmin(admin.ModelAdmin):
    list_display = ("name", "category", "current_department", "status", "project_code", "owner", "created_at")
    list_filter = ("status", "current_department")
    search_fields = ("name", "client_name", "project_code")
    readonly_fields = ("current_department", "project_code", "created_at", "updated_at")
    inlines = [DepartmentHistoryInline]


# =============================================================
# Department history (READ-ONLY AUDIT LOG)
# =============================================================

@admin.register(DepartmentHistory)
class DepartmentHistoryAdmin(admin.ModelAdmin):
    list_display = ("project", "from_department", "to_department", "work_status", "moved_by", "created_at")
    list_filter = ("to_department", "work_status")
    search_fields = ("project__name",)
    ordering = ("-created_at", "-id")

    readonly_fields = [f.name for f in DepartmentHistory._meta.fields]

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(Approval)
class ApprovalAdmin(admin.ModelAdmin):
    list_display = ("history_entry", "approval_type", "status", "requested_by", "reviewed_by", "reviewed_at")
    list_filter = ("approval_type", "status")
    readonly_fields = [f.name for f in Approval._meta.fields]


@admin.register(QATestingRound)
class QATestingRoundAdmin(admin.ModelAdmin):
    list_display = ("history_entry", "round_number", "qa_type", "status", "bugs_count", "critical_bugs_count")
    list_filter = ("qa_type", "status")
    readonly_fields = [f.name for f in QATestingRound._meta.fields]


@admin.register(QABug)
class QABugAdmin(admin.ModelAdmin):
    list_display = ("title", "severity", "status", "assigned_department", "discovered_at")
    list_filter = ("severity", "status", "assigned_department")
    search_fields = ("title",)


@admin.register(Correction)
class CorrectionAdmin(admin.ModelAdmin):
    list_display = ("correction_type", "priority", "status", "assigned_to", "created_at")
    list_filter = ("priority", "status")


@admin.register(AssignmentHistory)
class AssignmentHistoryAdmin(admin.ModelAdmin):
    list_display = ("project", "assignment_type", "previous_user", "new_user", "assigned_by", "created_at")
    list_filter = ("assignment_type",)
    readonly_fields = [f.name for f in AssignmentHistory._meta.fields]
