# flow_core/identity.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from flow_core.models import StaffProfile
from flow_core.workflows.enums import Department, Role, parse_choice
from flow_core.workflows.exceptions import WorkflowForbidden
from flow_core.workflows.permissions import parse_role


@dataclass(frozen=True)
class Actor:
    """
    The acting user as the engine sees it: parsed role and optional
    department membership.
    """

    user: Any
    role: Role
    department: Optional[Department] = None

    @classmethod
    def parse(cls, user, role, department=None) -> "Actor":
        """
        Build an Actor from untrusted strings. Raises ValueError on unknown values.
        """
        dept = parse_choice(Department, department, field="department") if department else None
        return cls(user=user, role=parse_role(role), department=dept)

    @property
    def user_id(self):
        return getattr(self.user, "pk", None)


def resolve_actor(user) -> Actor:
    """
    Resolve a Django user into an Actor via StaffProfile.

    Superusers are treated as ADMIN. Users without a profile, or whose stored
    role is not recognised, are refused.
    """
    profile = StaffProfile.objects.filter(user=user).first() if user is not None else None
    department = profile.department if profile else None

    if getattr(user, "is_superuser", False):
        return Actor.parse(user, Role.ADMIN, department)

    if profile is None:
        raise WorkflowForbidden("User has no staff profile; workflow role unknown.")

    try:
        return Actor.parse(user, profile.role, department)
    except ValueError as exc:
        raise WorkflowForbidden(str(exc)) from exc
