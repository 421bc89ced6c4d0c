# flow_core/workflows/permissions.py
"""
Department-scoped role permissions.

The same role carries different authority depending on which department the
project currently sits in, so every lookup takes both.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, FrozenSet

from .enums import Department, Role, WorkflowAction, parse_choice


# ===============================================================
# Role normalization
# ===============================================================

ROLE_ALIASES: Dict[str, str] = {
    "SU_ADMIN": "ADMIN",
    "SUPERUSER": "ADMIN",
    "SUPER_ADMIN": "ADMIN",
    "MANAGER": "PROJECT_MANAGER",
    "PM": "PROJECT_MANAGER",
}

HIGHEST_PRIVILEGE_ROLES: FrozenSet[Role] = frozenset({Role.ADMIN, Role.PROJECT_MANAGER})


def normalize_role(value) -> str:
    raw = re.sub(r"[\s\-]+", "_", str(value or "").strip().upper())
    return ROLE_ALIASES.get(raw, raw)


def parse_role(value) -> Role:
    """
    Raises ValueError for anything that is not a known role after aliasing.
    """
    return parse_choice(Role, normalize_role(value), field="role")


def is_highest_privilege(role) -> bool:
    return role in HIGHEST_PRIVILEGE_ROLES


# ===============================================================
# Permission table
# ===============================================================

@dataclass(frozen=True)
class RolePermissions:
    can_update_status: bool = False
    can_move_department: bool = False
    can_approve: bool = False


NO_PERMISSIONS = RolePermissions()
ALL_PERMISSIONS = RolePermissions(True, True, True)

# Roles that may update status, keyed by the departments where they may do so.
STATUS_UPDATE_SCOPES: Dict[Role, FrozenSet[Department]] = {
    Role.DEVELOPER: frozenset({Department.PHP, Department.REACT, Department.WORDPRESS}),
    Role.HTML_DEVELOPER: frozenset({Department.HTML}),
    Role.HTML_TL: frozenset({Department.HTML}),
    Role.PHP_TL1: frozenset({Department.PHP}),
    Role.PHP_TL2: frozenset({Department.PHP}),
    Role.REACT_TL: frozenset({Department.REACT}),
    Role.DESIGNER: frozenset({Department.DESIGN}),
    Role.DESIGN_TL: frozenset({Department.DESIGN}),
}

APPROVAL_SCOPES: Dict[Role, FrozenSet[Department]] = {
    Role.CLIENT: frozenset({Department.DESIGN}),
}


def role_permissions(role, department) -> RolePermissions:
    if role in HIGHEST_PRIVILEGE_ROLES:
        return ALL_PERMISSIONS

    return RolePermissions(
        can_update_status=department in STATUS_UPDATE_SCOPES.get(role, frozenset()),
        can_move_department=False,
        can_approve=department in APPROVAL_SCOPES.get(role, frozenset()),
    )


def action_allowed(role, department, action) -> bool:
    """
    Coarse pre-check for one of the four workflow actions.
    `start_qa` ignores department.
    """
    action = parse_choice(WorkflowAction, action, field="action")

    if action == WorkflowAction.START_QA:
        return is_highest_privilege(role)

    perms = role_permissions(role, department)
    if action == WorkflowAction.MOVE_DEPARTMENT:
        return perms.can_move_department
    if action == WorkflowAction.UPDATE_STATUS:
        return perms.can_update_status
    return perms.can_approve


__all__ = [
    "ROLE_ALIASES",
    "HIGHEST_PRIVILEGE_ROLES",
    "RolePermissions",
    "normalize_role",
    "parse_role",
    "is_highest_privilege",
    "role_permissions",
    "action_allowed",
]
