from rest_framework.response import Response
from rest_framework.views import APIView


class ApiHomeView(APIView):
    authentication_classes = []
    permission_classes = []

    def get(self, request):
        return Response(
            {
                "message": "Department workflow API",
                "endpoints": {
                    "admin": "/admin/",
                    "token_obtain": "/api/token/",
                    "token_refresh": "/api/token/refresh/",
                    "schema": "/api/schema/",
                    "swagger": "/api/schema/swagger-ui/",
                    "redoc": "/api/schema/redoc/",
                    "health": "/flow/health/",
                    "projects": "/flow/projects/",
                    "workflow_definition": "/flow/workflow/definition/",
                },
            }
        )
