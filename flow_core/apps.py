# flow_core/apps.py

from django.apps import AppConfig


class FlowCoreConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "flow_core"
    verbose_name = "Department workflow"

    def ready(self):
        from . import signals  # noqa
