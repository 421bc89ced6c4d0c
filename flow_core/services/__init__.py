# flow_core/services/__init__.py
"""
Workflow orchestrator: the only code allowed to mutate project workflow state.
"""

from .assignment_service import reassign_coordinator_or_lead
from .project_service import (
    ProjectCreationResult,
    SideEffectResult,
    create_project,
    update_project_status,
)
from .qa_service import complete_qa_testing_round, create_qa_bug, start_qa_testing
from .review_service import (
    create_correction,
    request_approval,
    request_manager_review,
    submit_approval,
    submit_manager_review,
    update_correction,
)
from .workflow_service import move_to_department, update_department_work_status

__all__ = [
    "ProjectCreationResult",
    "SideEffectResult",
    "create_project",
    "update_project_status",
    "move_to_department",
    "update_department_work_status",
    "create_correction",
    "update_correction",
    "request_approval",
    "submit_approval",
    "start_qa_testing",
    "complete_qa_testing_round",
    "create_qa_bug",
    "request_manager_review",
    "submit_manager_review",
    "reassign_coordinator_or_lead",
]
