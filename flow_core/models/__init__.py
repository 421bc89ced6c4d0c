from .core import DepartmentHistory, Project, StaffProfile, TimeStampedModel
from .review import Approval, Correction, QABug, QATestingRound
from .assignment import AssignmentHistory

__all__ = [
    "TimeStampedModel",
    "StaffProfile",
    "Project",
    "DepartmentHistory",
    "Correction",
    "Approval",
    "QATestingRound",
    "QABug",
    "AssignmentHistory",
]
