# flow_core/views.py
from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework import mixins, status, viewsets
from rest_framework.exceptions import NotAuthenticated
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from .filters import ProjectFilter
from .identity import resolve_actor
from .models import Project
from .serializers import ProjectCreateSerializer, ProjectSerializer
from .services import create_project
from .workflows.exceptions import WorkflowForbidden
from .workflows.permissions import is_highest_privilege


# ===============================================================
# Utilities
# ===============================================================
def _require_auth(request):
    user = getattr(request, "user", None)
    if not user or not user.is_authenticated:
        raise NotAuthenticated("Authentication credentials were not provided.")
    return user


# ===============================================================
# Health
# ===============================================================
class HealthCheckView(APIView):
    permission_classes = [AllowAny]

    @extend_schema(tags=["System"])
    def get(self, request):
        return Response({"status": "ok", "service": "agency-flow"})


# ===============================================================
# Projects
# ===============================================================
class ProjectViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.UpdateModelMixin,
    viewsets.GenericViewSet,
):
    """
    Projects are created through the orchestrator and never deleted here.
    Updates only touch descriptive fields; see ProjectSerializer.
    """

    queryset = Project.objects.select_related("owner").all()
    serializer_class = ProjectSerializer
    permission_classes = [IsAuthenticated]
    filterset_class = ProjectFilter

    def get_queryset(self):
        return super().get_queryset().order_by("-created_at", "-id")

    def perform_update(self, serializer):
        # category selects the build branch; ADMIN/PROJECT_MANAGER only
        category = serializer.validated_data.get("category")
        if category is not None and category != serializer.instance.category:
            actor = resolve_actor(self.request.user)
            if not is_highest_privilege(actor.role):
                raise WorkflowForbidden(f"Role {actor.role} cannot change the project category")
        serializer.save()

    @extend_schema(request=ProjectCreateSerializer, responses=ProjectSerializer)
    def create(self, request, *args, **kwargs):
        user = _require_auth(request)
        actor = resolve_actor(user)

        payload = ProjectCreateSerializer(data=request.data)
        payload.is_valid(raise_exception=True)

        result = create_project(actor=actor, **payload.validated_data)

        data = ProjectSerializer(result.project).data
        data["side_effects"] = [
            {"step": s.step, "ok": s.ok, "error": s.error} for s in result.side_effects
        ]
        return Response(data, status=status.HTTP_201_CREATED)
