# flow_core/urls.py

from django.urls import include, path
from rest_framework.routers import DefaultRouter

# -------------------------------------------------
# Core API ViewSets
# -------------------------------------------------
from .views import HealthCheckView, ProjectViewSet

# -------------------------------------------------
# Workflow APIs
# -------------------------------------------------
from .views_workflow_api import (
    ApprovalSubmitView,
    CorrectionDetailView,
    ManagerReviewSubmitView,
    ProjectAllowedDepartmentsView,
    ProjectApprovalsView,
    ProjectCorrectionsView,
    ProjectLifecycleStatusView,
    ProjectManagerReviewView,
    ProjectMoveView,
    ProjectQARoundsView,
    ProjectReassignView,
    ProjectTimelineView,
    ProjectValidationStatusView,
    ProjectWorkflowStatusView,
    ProjectWorkStatusView,
    QARoundBugsView,
    QARoundCompleteView,
    WorkflowDefinitionView,
)

router = DefaultRouter()
router.register(r"projects", ProjectViewSet, basename="project")

urlpatterns = [
    path("health/", HealthCheckView.as_view(), name="health"),

    # -------------------------------------------------
    # Workflow definition (static metadata)
    # -------------------------------------------------
    path("workflow/definition/", WorkflowDefinitionView.as_view(), name="workflow-definition"),

    # -------------------------------------------------
    # Per-project workflow
    # -------------------------------------------------
    path("projects/<int:pk>/move/", ProjectMoveView.as_view(), name="project-move"),
    path("projects/<int:pk>/work-status/", ProjectWorkStatusView.as_view(), name="project-work-status"),
    path("projects/<int:pk>/status/", ProjectLifecycleStatusView.as_view(), name="project-lifecycle-status"),
    path("projects/<int:pk>/history/", ProjectWorkflowStatusView.as_view(), name="project-history"),
    path("projects/<int:pk>/validation/", ProjectValidationStatusView.as_view(), name="project-validation"),
    path(
        "projects/<int:pk>/allowed-departments/",
        ProjectAllowedDepartmentsView.as_view(),
        name="project-allowed-departments",
    ),
    path("projects/<int:pk>/timeline/", ProjectTimelineView.as_view(), name="project-timeline"),
    path("projects/<int:pk>/corrections/", ProjectCorrectionsView.as_view(), name="project-corrections"),
    path("projects/<int:pk>/approvals/", ProjectApprovalsView.as_view(), name="project-approvals"),
    path("projects/<int:pk>/qa-rounds/", ProjectQARoundsView.as_view(), name="project-qa-rounds"),
    path("projects/<int:pk>/manager-review/", ProjectManagerReviewView.as_view(), name="project-manager-review"),
    path("projects/<int:pk>/reassign/", ProjectReassignView.as_view(), name="project-reassign"),

    # -------------------------------------------------
    # Record-level actions
    # -------------------------------------------------
    path("corrections/<int:pk>/", CorrectionDetailView.as_view(), name="correction-detail"),
    path("approvals/<int:pk>/submit/", ApprovalSubmitView.as_view(), name="approval-submit"),
    path("qa-rounds/<int:pk>/complete/", QARoundCompleteView.as_view(), name="qa-round-complete"),
    path("qa-rounds/<int:pk>/bugs/", QARoundBugsView.as_view(), name="qa-round-bugs"),
    path(
        "manager-reviews/<int:pk>/submit/",
        ManagerReviewSubmitView.as_view(),
        name="manager-review-submit",
    ),

    path("", include(router.urls)),
]
