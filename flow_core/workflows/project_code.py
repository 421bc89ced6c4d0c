# flow_core/workflows/project_code.py
from __future__ import annotations

from typing import Dict, Iterable

from .enums import Department, WorkStatus


DEPARTMENT_CODES: Dict[Department, str] = {
    Department.PMO: "P",
    Department.DESIGN: "D",
    Department.HTML: "H",
    Department.PHP: "F",
    Department.REACT: "R",
    Department.WORDPRESS: "W",
    Department.QA: "Q",
    Department.DELIVERY: "L",
    Department.MANAGER: "M",
}


def department_code(department) -> str:
    return DEPARTMENT_CODES.get(department, "")


def all_department_codes() -> Dict[str, str]:
    return {str(dept): code for dept, code in DEPARTMENT_CODES.items()}


def _sort_key(entry):
    return (entry.created_at, getattr(entry, "id", None) or 0)


def generate_code(entries: Iterable) -> str:
    """
    Concatenate department letters of COMPLETED entries in creation order.

    Input order is never trusted; entries are sorted by (created_at, id)
    before anything else happens.
    """
    ordered = sorted(entries, key=_sort_key)
    return "".join(
        department_code(e.to_department)
        for e in ordered
        if e.work_status == WorkStatus.COMPLETED
    )
