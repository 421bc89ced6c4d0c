# flow_core/workflows/guards.py

from django.core.exceptions import PermissionDenied
from django.db import models


class WorkflowWriteGuardMixin(models.Model):
    """
    Prevent direct modification of workflow-controlled fields outside the
    orchestrator services.

    Direct .save() changes to any name in WORKFLOW_FIELDS are blocked on
    existing rows. Creation is unrestricted.

    Escape hatch:
      - pass _workflow_bypass=True to save(), OR
      - set instance._workflow_bypass = True
    The services use the first form; queryset .update() skips save() entirely.
    """

    WORKFLOW_FIELDS = ()
    WORKFLOW_BYPASS_KWARG = "_workflow_bypass"

    class Meta:
        abstract = True

    def save(self, *args, **kwargs):
        bypass = bool(
            kwargs.pop(self.WORKFLOW_BYPASS_KWARG, False)
            or getattr(self, "_workflow_bypass", False)
        )

        if not bypass and self.pk is not None and self.WORKFLOW_FIELDS:
            old = (
                self.__class__.objects.filter(pk=self.pk)
                .values(*self.WORKFLOW_FIELDS)
                .first()
            )
            if old is not None:
                changed = [
                    name for name in self.WORKFLOW_FIELDS
                    if old[name] != getattr(self, name, None)
                ]
                if changed:
                    raise PermissionDenied(
                        f"Direct modification of {', '.join(repr(c) for c in changed)} "
                        "is forbidden. Use workflow services."
                    )

        return super().save(*args, **kwargs)
