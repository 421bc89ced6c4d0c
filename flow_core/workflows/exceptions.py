# flow_core/workflows/exceptions.py
"""
Workflow error kinds and the DRF exceptions that carry them.

Validators never raise; they return a ValidationResult holding every problem
found. The orchestrator converts a failed result into exactly one exception
via `raise_for_result`, picking the class by precedence.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from rest_framework import status
from rest_framework.exceptions import APIException


class ErrorKind:
    NOT_FOUND = "not_found"
    FORBIDDEN = "forbidden"
    INVALID_TRANSITION = "invalid_transition"
    PRECONDITION_FAILED = "precondition_failed"
    GATE_UNSATISFIED = "gate_unsatisfied"

    PRECEDENCE: Tuple[str, ...] = (
        NOT_FOUND,
        FORBIDDEN,
        INVALID_TRANSITION,
        PRECONDITION_FAILED,
        GATE_UNSATISFIED,
    )


@dataclass(frozen=True)
class ValidationIssue:
    kind: str
    message: str

    def as_dict(self) -> Dict[str, str]:
        return {"kind": self.kind, "message": self.message}


@dataclass
class ValidationResult:
    errors: List[ValidationIssue] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors

    def add(self, kind: str, message: str) -> "ValidationResult":
        self.errors.append(ValidationIssue(kind, message))
        return self

    def extend(self, other: "ValidationResult") -> "ValidationResult":
        self.errors.extend(other.errors)
        return self

    def has(self, kind: str) -> bool:
        return any(e.kind == kind for e in self.errors)

    @property
    def messages(self) -> List[str]:
        return [e.message for e in self.errors]

    def as_dict(self) -> Dict:
        return {"valid": self.valid, "errors": [e.as_dict() for e in self.errors]}


# ===============================================================
# Exceptions
# ===============================================================

class WorkflowError(APIException):
    kind: Optional[str] = None

    def __init__(self, message: Optional[str] = None, *, errors=None):
        if errors is None:
            errors = [ValidationIssue(self.kind, str(message or self.default_detail))]
        self.errors: List[ValidationIssue] = list(errors)
        self.message = "; ".join(e.message for e in self.errors)
        super().__init__(
            detail={
                "detail": self.message,
                "errors": [e.as_dict() for e in self.errors],
            },
            code=self.default_code,
        )

    def __str__(self) -> str:
        return self.message


class WorkflowNotFound(WorkflowError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found."
    default_code = "not_found"
    kind = ErrorKind.NOT_FOUND


class WorkflowForbidden(WorkflowError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "You do not have permission to perform this workflow action."
    default_code = "forbidden"
    kind = ErrorKind.FORBIDDEN


class InvalidTransition(WorkflowError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid workflow transition."
    default_code = "invalid_transition"
    kind = ErrorKind.INVALID_TRANSITION


class PreconditionFailed(WorkflowError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Workflow precondition failed."
    default_code = "precondition_failed"
    kind = ErrorKind.PRECONDITION_FAILED


KIND_EXCEPTIONS = {
    ErrorKind.NOT_FOUND: WorkflowNotFound,
    ErrorKind.FORBIDDEN: WorkflowForbidden,
    ErrorKind.INVALID_TRANSITION: InvalidTransition,
    ErrorKind.PRECONDITION_FAILED: PreconditionFailed,
    ErrorKind.GATE_UNSATISFIED: InvalidTransition,
}


def raise_for_result(result: ValidationResult) -> None:
    if result.valid:
        return
    for kind in ErrorKind.PRECEDENCE:
        if result.has(kind):
            raise KIND_EXCEPTIONS[kind](errors=result.errors)
    raise InvalidTransition(errors=result.errors)
