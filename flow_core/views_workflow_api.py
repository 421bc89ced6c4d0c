# flow_core/views_workflow_api.py
"""
HTTP surface for the workflow orchestrator.

Views only authenticate, shape the payload and call one service. Every
workflow rule lives in flow_core.services / flow_core.workflows; the
WorkflowError subclasses raised there map to 400/403/404/409 through DRF's
normal exception handling.
"""

from __future__ import annotations

from rest_framework import status
from rest_framework.exceptions import NotAuthenticated
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from flow_core import services
from flow_core.identity import resolve_actor
from flow_core.models import Correction
from flow_core.serializers import (
    ApprovalSerializer,
    AssignmentHistorySerializer,
    CorrectionSerializer,
    QABugSerializer,
    QATestingRoundSerializer,
)
from flow_core.serializers_workflow import (
    ApprovalRequestSerializer,
    ApprovalSubmitSerializer,
    CorrectionCreateSerializer,
    CorrectionUpdateSerializer,
    ManagerReviewRequestSerializer,
    ManagerReviewSubmitSerializer,
    MoveDepartmentSerializer,
    ProjectStatusSerializer,
    QABugCreateSerializer,
    QACompleteSerializer,
    QAStartSerializer,
    ReassignSerializer,
    WorkStatusUpdateSerializer,
)
from flow_core.workflows.analytics import get_timeline_analytics, get_workflow_status
from flow_core.workflows.project_code import all_department_codes
from flow_core.workflows.rules import DEFAULT_RULES
from flow_core.workflows.status_machine import STATUS_TRANSITIONS
from flow_core.workflows.validator import (
    get_allowed_next_departments,
    get_workflow_validation_status,
)


# =============================================================
# Helpers
# =============================================================

def _require_auth(user) -> None:
    """
    Enforce authentication in a way that returns DRF's normal 401/403
    instead of Django login redirects (302) under session-based setups.
    """
    if not user or not getattr(user, "is_authenticated", False):
        raise NotAuthenticated("Authentication credentials were not provided.")


def _actor(request):
    _require_auth(request.user)
    return resolve_actor(request.user)


def _validated(serializer_cls, request):
    s = serializer_cls(data=request.data or {})
    s.is_valid(raise_exception=True)
    return s.validated_data


class WorkflowAPIView(APIView):
    # AllowAny plus explicit _require_auth: unauthenticated calls get 401
    # rather than a login redirect.
    permission_classes = [AllowAny]


# =============================================================
# Definition (static)
# =============================================================

class WorkflowDefinitionView(WorkflowAPIView):
    """
    GET /flow/workflow/definition/
    """

    def get(self, request):
        _require_auth(request.user)
        payload = DEFAULT_RULES.definition()
        payload["status_transitions"] = {
            str(k): sorted(v) for k, v in STATUS_TRANSITIONS.items()
        }
        payload["department_codes"] = all_department_codes()
        return Response(payload)


# =============================================================
# Read-only project queries
# =============================================================

class ProjectWorkflowStatusView(WorkflowAPIView):
    """
    GET /flow/projects/<pk>/history/
    """

    def get(self, request, pk: int):
        _require_auth(request.user)
        return Response(get_workflow_status(pk))


class ProjectValidationStatusView(WorkflowAPIView):
    """
    GET /flow/projects/<pk>/validation/
    """

    def get(self, request, pk: int):
        actor = _actor(request)
        return Response(get_workflow_validation_status(pk, actor))


class ProjectAllowedDepartmentsView(WorkflowAPIView):
    """
    GET /flow/projects/<pk>/allowed-departments/
    """

    def get(self, request, pk: int):
        _require_auth(request.user)
        return Response({"project_id": pk, "allowed": get_allowed_next_departments(pk)})


class ProjectTimelineView(WorkflowAPIView):
    """
    GET /flow/projects/<pk>/timeline/
    """

    def get(self, request, pk: int):
        _require_auth(request.user)
        return Response(get_timeline_analytics(pk))


# =============================================================
# Department moves and work status (AUTHORITATIVE)
# =============================================================

class ProjectMoveView(WorkflowAPIView):
    """
    POST /flow/projects/<pk>/move/

    Body:
        { "target_department": "DESIGN", "notes": "...", "estimated_days": 5 }
    """

    def post(self, request, pk: int):
        actor = _actor(request)
        data = _validated(MoveDepartmentSerializer, request)
        result = services.move_to_department(project_id=pk, actor=actor, **data)
        return Response(result)


class ProjectWorkStatusView(WorkflowAPIView):
    """
    POST /flow/projects/<pk>/work-status/

    Body:
        { "status": "COMPLETED", "work_start_date": "...", "work_end_date": "..." }
    """

    def post(self, request, pk: int):
        actor = _actor(request)
        data = _validated(WorkStatusUpdateSerializer, request)
        result = services.update_department_work_status(project_id=pk, actor=actor, **data)
        return Response(result)


class ProjectLifecycleStatusView(WorkflowAPIView):
    """
    POST /flow/projects/<pk>/status/   (ADMIN only)
    """

    def post(self, request, pk: int):
        actor = _actor(request)
        data = _validated(ProjectStatusSerializer, request)
        return Response(services.update_project_status(project_id=pk, actor=actor, **data))


# =============================================================
# Corrections
# =============================================================

class ProjectCorrectionsView(WorkflowAPIView):
    """
    GET  /flow/projects/<pk>/corrections/
    POST /flow/projects/<pk>/corrections/
    """

    def get(self, request, pk: int):
        _require_auth(request.user)
        qs = Correction.objects.filter(history_entry__project_id=pk).order_by("-created_at", "-id")
        return Response(CorrectionSerializer(qs, many=True).data)

    def post(self, request, pk: int):
        actor = _actor(request)
        data = _validated(CorrectionCreateSerializer, request)
        correction = services.create_correction(project_id=pk, actor=actor, **data)
        return Response(CorrectionSerializer(correction).data, status=status.HTTP_201_CREATED)


class CorrectionDetailView(WorkflowAPIView):
    """
    PATCH /flow/corrections/<pk>/
    """

    def patch(self, request, pk: int):
        actor = _actor(request)
        data = _validated(CorrectionUpdateSerializer, request)
        correction = services.update_correction(correction_id=pk, actor=actor, **data)
        return Response(CorrectionSerializer(correction).data)


# =============================================================
# Approvals
# =============================================================

class ProjectApprovalsView(WorkflowAPIView):
    """
    POST /flow/projects/<pk>/approvals/
    """

    def post(self, request, pk: int):
        actor = _actor(request)
        data = _validated(ApprovalRequestSerializer, request)
        approval = services.request_approval(project_id=pk, actor=actor, **data)
        return Response(ApprovalSerializer(approval).data, status=status.HTTP_201_CREATED)


class ApprovalSubmitView(WorkflowAPIView):
    """
    POST /flow/approvals/<pk>/submit/
    """

    def post(self, request, pk: int):
        actor = _actor(request)
        data = _validated(ApprovalSubmitSerializer, request)
        return Response(services.submit_approval(approval_id=pk, actor=actor, **data))


# =============================================================
# QA rounds and bugs
# =============================================================

class ProjectQARoundsView(WorkflowAPIView):
    """
    POST /flow/projects/<pk>/qa-rounds/
    """

    def post(self, request, pk: int):
        actor = _actor(request)
        data = _validated(QAStartSerializer, request)
        qa_round = services.start_qa_testing(project_id=pk, actor=actor, **data)
        return Response(QATestingRoundSerializer(qa_round).data, status=status.HTTP_201_CREATED)


class QARoundCompleteView(WorkflowAPIView):
    """
    POST /flow/qa-rounds/<pk>/complete/
    """

    def post(self, request, pk: int):
        actor = _actor(request)
        data = _validated(QACompleteSerializer, request)
        return Response(services.complete_qa_testing_round(round_id=pk, actor=actor, **data))


class QARoundBugsView(WorkflowAPIView):
    """
    POST /flow/qa-rounds/<pk>/bugs/
    """

    def post(self, request, pk: int):
        actor = _actor(request)
        data = _validated(QABugCreateSerializer, request)
        bug = services.create_qa_bug(round_id=pk, actor=actor, **data)
        return Response(QABugSerializer(bug).data, status=status.HTTP_201_CREATED)


# =============================================================
# Manager review
# =============================================================

class ProjectManagerReviewView(WorkflowAPIView):
    """
    POST /flow/projects/<pk>/manager-review/
    """

    def post(self, request, pk: int):
        actor = _actor(request)
        data = _validated(ManagerReviewRequestSerializer, request)
        result = services.request_manager_review(project_id=pk, actor=actor, **data)
        return Response(result, status=status.HTTP_201_CREATED)


class ManagerReviewSubmitView(WorkflowAPIView):
    """
    POST /flow/manager-reviews/<pk>/submit/
    """

    def post(self, request, pk: int):
        actor = _actor(request)
        data = _validated(ManagerReviewSubmitSerializer, request)
        return Response(services.submit_manager_review(approval_id=pk, actor=actor, **data))


# =============================================================
# Reassignment
# =============================================================

class ProjectReassignView(WorkflowAPIView):
    """
    POST /flow/projects/<pk>/reassign/
    """

    def post(self, request, pk: int):
        actor = _actor(request)
        data = _validated(ReassignSerializer, request)
        record = services.reassign_coordinator_or_lead(project_id=pk, actor=actor, **data)
        return Response(AssignmentHistorySerializer(record).data, status=status.HTTP_201_CREATED)
