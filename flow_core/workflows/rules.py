"""
Authoritative department workflow rules.

Defines:
- Legal department transitions and the preconditions attached to each edge
- Approval gates per department (checked before any edge leaves it)
- Canonical department sequence per project category
- Emergency skip policy and manager-review thresholds

Edges carry the status required to leave; gates carry the approvals and QA
outcome a department must hold regardless of which edge is used.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, FrozenSet, List, Mapping, Optional, Tuple

from .enums import ApprovalType, Department, QAStatus, Role, WorkStatus

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TransitionRule:
    from_department: Department
    to_department: Department
    required_status: Optional[WorkStatus] = None
    requires_approval: bool = False
    requires_qa_passing: bool = False


@dataclass(frozen=True)
class ApprovalGate:
    department: Department
    required_approval_types: Tuple[ApprovalType, ...] = ()
    required_qa_status: Optional[QAStatus] = None
    minimum_work_status: Optional[WorkStatus] = None


# ===============================================================
# BUILD BRANCHES
# ===============================================================
BUILD_DEPARTMENTS: FrozenSet[Department] = frozenset(
    {Department.PHP, Department.REACT, Department.WORDPRESS}
)

# Departments allowed to hand work to QA testing.
QA_REQUESTING_DEPARTMENTS: FrozenSet[Department] = frozenset(
    {Department.HTML} | BUILD_DEPARTMENTS
)

# Never skippable, even in an emergency.
CRITICAL_DEPARTMENTS: FrozenSet[Department] = frozenset({Department.DESIGN, Department.QA})


# ===============================================================
# TRANSITIONS
# ===============================================================
def _forward_transitions() -> List[TransitionRule]:
    rules = [
        TransitionRule(
            Department.PMO,
            Department.DESIGN,
            required_status=WorkStatus.COMPLETED,
            requires_approval=True,
        ),
        TransitionRule(
            Department.DESIGN,
            Department.HTML,
            required_status=WorkStatus.COMPLETED,
            requires_approval=True,
        ),
    ]

    for build in sorted(BUILD_DEPARTMENTS):
        rules.append(
            TransitionRule(
                Department.HTML,
                Department(build),
                required_status=WorkStatus.COMPLETED,
                requires_qa_passing=True,
            )
        )
        rules.append(
            TransitionRule(
                Department(build),
                Department.QA,
                required_status=WorkStatus.COMPLETED,
            )
        )

    rules.append(
        TransitionRule(
            Department.QA,
            Department.DELIVERY,
            required_status=WorkStatus.READY_FOR_DELIVERY,
            requires_approval=True,
        )
    )
    return rules


def _rework_transitions() -> List[TransitionRule]:
    rules = [
        TransitionRule(
            Department.HTML,
            Department.DESIGN,
            required_status=WorkStatus.CORRECTIONS_NEEDED,
        ),
        TransitionRule(
            Department.QA,
            Department.HTML,
            required_status=WorkStatus.BUGFIX_IN_PROGRESS,
        ),
    ]
    for build in sorted(BUILD_DEPARTMENTS):
        rules.append(
            TransitionRule(
                Department.QA,
                Department(build),
                required_status=WorkStatus.BUGFIX_IN_PROGRESS,
            )
        )
    return rules


TRANSITIONS: Tuple[TransitionRule, ...] = tuple(_forward_transitions() + _rework_transitions())


# ===============================================================
# APPROVAL GATES
# ===============================================================
def _default_gates() -> Dict[Department, ApprovalGate]:
    gates = {
        Department.PMO: ApprovalGate(
            Department.PMO,
            required_approval_types=(ApprovalType.CLIENT_APPROVAL,),
            minimum_work_status=WorkStatus.COMPLETED,
        ),
        Department.DESIGN: ApprovalGate(
            Department.DESIGN,
            required_approval_types=(ApprovalType.CLIENT_APPROVAL,),
            minimum_work_status=WorkStatus.COMPLETED,
        ),
        Department.HTML: ApprovalGate(
            Department.HTML,
            required_qa_status=QAStatus.PASSED,
            minimum_work_status=WorkStatus.COMPLETED,
        ),
        Department.QA: ApprovalGate(
            Department.QA,
            minimum_work_status=WorkStatus.READY_FOR_DELIVERY,
        ),
    }
    for build in BUILD_DEPARTMENTS:
        gates[Department(build)] = ApprovalGate(
            Department(build),
            required_qa_status=QAStatus.PASSED,
            minimum_work_status=WorkStatus.COMPLETED,
        )
    return gates


# ===============================================================
# MANAGER REVIEW THRESHOLDS
# ===============================================================
MANAGER_REVIEW_REJECTION_THRESHOLD = 1
MANAGER_REVIEW_CRITICAL_BUG_THRESHOLD = 3


# ===============================================================
# RULE SET
# ===============================================================
@dataclass(frozen=True)
class WorkflowRules:
    """
    Read-only rule set. Construct once and pass by reference; tests may
    build an alternate instance instead of patching module state.
    """

    transitions: Tuple[TransitionRule, ...] = TRANSITIONS
    gates: Mapping[Department, ApprovalGate] = field(
        default_factory=lambda: MappingProxyType(_default_gates())
    )
    rejection_threshold: int = MANAGER_REVIEW_REJECTION_THRESHOLD
    critical_bug_threshold: int = MANAGER_REVIEW_CRITICAL_BUG_THRESHOLD

    def is_valid_transition(self, from_department, to_department) -> bool:
        return self.transition_requirements(from_department, to_department) is not None

    def transition_requirements(self, from_department, to_department) -> Optional[TransitionRule]:
        for rule in self.transitions:
            if rule.from_department == from_department and rule.to_department == to_department:
                return rule
        return None

    def approval_gate(self, department) -> Optional[ApprovalGate]:
        return self.gates.get(department)

    def allowed_next_departments(self, current) -> List[Department]:
        return [r.to_department for r in self.transitions if r.from_department == current]

    def workflow_sequence(self, category: str) -> List[Department]:
        cat = (category or "").strip().upper()

        sequence = [Department.PMO, Department.DESIGN, Department.HTML]

        if "PHP" in cat:
            sequence.append(Department.PHP)
        elif "REACT" in cat or "NEXT" in cat:
            sequence.append(Department.REACT)
        elif "WORDPRESS" in cat or "WP" in cat:
            sequence.append(Department.WORDPRESS)
        else:
            sequence.append(Department.REACT)

        sequence += [Department.QA, Department.DELIVERY]
        return sequence

    def build_department_for(self, category: str) -> Department:
        for dept in self.workflow_sequence(category):
            if dept in BUILD_DEPARTMENTS:
                return dept
        return Department.REACT

    def can_skip_department(self, department, reason: str, actor_role) -> bool:
        allowed = (
            actor_role == Role.ADMIN
            and department not in CRITICAL_DEPARTMENTS
            and "emergency" in (reason or "").lower()
        )
        logger.warning(
            "Department skip check: department=%s role=%s allowed=%s reason=%r",
            department,
            actor_role,
            allowed,
            reason,
        )
        return allowed

    def requires_manager_review(self, rejection_count: int, critical_bug_count: int) -> bool:
        return (
            rejection_count >= self.rejection_threshold
            or critical_bug_count >= self.critical_bug_threshold
        )

    def definition(self) -> Dict:
        """
        Stable JSON-serializable definition for API introspection.
        """
        return {
            "departments": list(Department.values),
            "transitions": [
                {
                    "from": r.from_department,
                    "to": r.to_department,
                    "required_status": r.required_status,
                    "requires_approval": r.requires_approval,
                    "requires_qa_passing": r.requires_qa_passing,
                }
                for r in self.transitions
            ],
            "gates": {
                str(dept): {
                    "required_approval_types": list(gate.required_approval_types),
                    "required_qa_status": gate.required_qa_status,
                    "minimum_work_status": gate.minimum_work_status,
                }
                for dept, gate in self.gates.items()
            },
        }


DEFAULT_RULES = WorkflowRules()


__all__ = [
    "TransitionRule",
    "ApprovalGate",
    "WorkflowRules",
    "DEFAULT_RULES",
    "BUILD_DEPARTMENTS",
    "QA_REQUESTING_DEPARTMENTS",
    "CRITICAL_DEPARTMENTS",
    "MANAGER_REVIEW_REJECTION_THRESHOLD",
    "MANAGER_REVIEW_CRITICAL_BUG_THRESHOLD",
]
