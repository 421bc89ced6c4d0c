# flow_core/workflows/__init__.py
"""
Pure workflow layer: vocabularies, rule table, gate evaluator, work status
machine, role permissions, project code and bug routing.

Nothing imported here touches the ORM, so models may import from this
package freely. Database-backed validation lives in `validator` and
`analytics`, which are imported explicitly.
"""

from __future__ import annotations

from .enums import (
    ApprovalStatus,
    ApprovalType,
    AssignmentType,
    BugSeverity,
    BugStatus,
    CorrectionStatus,
    Department,
    ManagerDecision,
    Priority,
    ProjectStatus,
    QAStatus,
    QAType,
    Role,
    WorkflowAction,
    WorkStatus,
    parse_choice,
)
from .exceptions import (
    ErrorKind,
    InvalidTransition,
    PreconditionFailed,
    ValidationIssue,
    ValidationResult,
    WorkflowError,
    WorkflowForbidden,
    WorkflowNotFound,
    raise_for_result,
)
from .gates import GateResult, are_gates_satisfied
from .permissions import (
    RolePermissions,
    action_allowed,
    is_highest_privilege,
    normalize_role,
    parse_role,
    role_permissions,
)
from .project_code import all_department_codes, department_code, generate_code
from .rules import DEFAULT_RULES, ApprovalGate, TransitionRule, WorkflowRules
from .status_machine import (
    STATUS_TRANSITIONS,
    allowed_next_statuses,
    is_legal_status_transition,
)
from .bug_routing import BugRouter, BugRoutingRule, route_bug


__all__ = [
    "ApprovalStatus",
    "ApprovalType",
    "AssignmentType",
    "BugSeverity",
    "BugStatus",
    "CorrectionStatus",
    "Department",
    "ManagerDecision",
    "Priority",
    "ProjectStatus",
    "QAStatus",
    "QAType",
    "Role",
    "WorkflowAction",
    "WorkStatus",
    "parse_choice",
    "ErrorKind",
    "InvalidTransition",
    "PreconditionFailed",
    "ValidationIssue",
    "ValidationResult",
    "WorkflowError",
    "WorkflowForbidden",
    "WorkflowNotFound",
    "raise_for_result",
    "GateResult",
    "are_gates_satisfied",
    "RolePermissions",
    "action_allowed",
    "is_highest_privilege",
    "normalize_role",
    "parse_role",
    "role_permissions",
    "all_department_codes",
    "department_code",
    "generate_code",
    "DEFAULT_RULES",
    "ApprovalGate",
    "TransitionRule",
    "WorkflowRules",
    "STATUS_TRANSITIONS",
    "allowed_next_statuses",
    "is_legal_status_transition",
    "BugRouter",
    "BugRoutingRule",
    "route_bug",
]
