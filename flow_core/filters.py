# flow_core/filters.py
import django_filters as df

from .models import Project


class ProjectFilter(df.FilterSet):
    name = df.CharFilter(field_name="name", lookup_expr="icontains")
    category = df.CharFilter(field_name="category", lookup_expr="icontains")
    client_name = df.CharFilter(field_name="client_name", lookup_expr="icontains")
    start_date = df.DateFromToRangeFilter()
    target_date = df.DateFromToRangeFilter()

    class Meta:
        model = Project
        fields = [
            "name",
            "category",
            "client_name",
            "current_department",
            "status",
            "owner",
            "project_coordinator",
            "pc_team_lead",
            "start_date",
            "target_date",
        ]
