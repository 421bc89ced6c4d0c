# flow_core/tests/test_project_code_and_routing.py
from datetime import datetime, timedelta, timezone as dt_timezone
from types import SimpleNamespace

import pytest

from flow_core.workflows.bug_routing import BugRouter, BugRoutingRule, assignment_annotation, route_bug
from flow_core.workflows.enums import Department, WorkStatus
from flow_core.workflows.project_code import all_department_codes, department_code, generate_code

T0 = datetime(2024, 1, 1, tzinfo=dt_timezone.utc)


def _entry(pk, department, status, *, minutes=None):
    return SimpleNamespace(
        id=pk,
        to_department=department,
        work_status=status,
        created_at=T0 + timedelta(minutes=pk if minutes is None else minutes),
    )


# ---------------------------------------------------------------------
# Project code
# ---------------------------------------------------------------------

def test_code_concatenates_completed_entries_in_order():
    entries = [
        _entry(1, Department.PMO, WorkStatus.COMPLETED),
        _entry(2, Department.DESIGN, WorkStatus.COMPLETED),
        _entry(3, Department.HTML, WorkStatus.IN_PROGRESS),
    ]
    assert generate_code(entries) == "PD"


def test_code_ignores_input_order():
    entries = [
        _entry(3, Department.REACT, WorkStatus.COMPLETED),
        _entry(1, Department.PMO, WorkStatus.COMPLETED),
        _entry(2, Department.HTML, WorkStatus.COMPLETED),
    ]
    assert generate_code(entries) == "PHR"
    assert generate_code(list(reversed(entries))) == "PHR"


def test_code_ties_broken_by_id():
    entries = [
        _entry(9, Department.QA, WorkStatus.COMPLETED, minutes=0),
        _entry(4, Department.PHP, WorkStatus.COMPLETED, minutes=0),
    ]
    assert generate_code(entries) == "FQ"


def test_code_of_empty_history_is_empty():
    assert generate_code([]) == ""


def test_single_completed_entry_gives_one_letter():
    assert generate_code([_entry(1, Department.WORDPRESS, WorkStatus.COMPLETED)]) == "W"


def test_department_letters():
    assert department_code(Department.PHP) == "F"
    assert department_code(Department.DELIVERY) == "L"
    codes = all_department_codes()
    assert len(codes) == len(Department)
    assert len(set(codes.values())) == len(codes)


# ---------------------------------------------------------------------
# Bug routing
# ---------------------------------------------------------------------

@pytest.mark.parametrize(
    "title,description,category,expected",
    [
        ("Broken CSS on header", "", "React app", Department.HTML),
        ("Footer layout shifts", "", "Custom PHP site", Department.HTML),
        ("API returns 500", "", "Custom PHP site", Department.PHP),
        ("Wrong calculation", "totals off by one", "WordPress shop", Department.WORDPRESS),
        ("Login fails", "server logic rejects valid users", "React app", Department.REACT),
        ("Something odd", "", "Custom PHP site", Department.PHP),
    ],
)
def test_route_bug(title, description, category, expected):
    assert route_bug(title, description, category=category) == expected


def test_routing_matches_whole_words_only():
    # "apis" and "builder" are not keywords; falls through to the build branch
    assert route_bug("Apis everywhere", "page builder slow", category="PHP") == Department.PHP
    assert route_bug("Build fails", "database down", category="PHP") == Department.PHP
    assert route_bug("cssfile missing", "", category="PHP") == Department.PHP


def test_markup_keywords_win_over_development():
    assert route_bug("UI shows wrong API data", category="PHP") == Department.HTML


def test_custom_router_default():
    router = BugRouter(
        rules=(BugRoutingRule(frozenset({"copy"}), Department.DESIGN),),
        default=Department.QA,
    )
    assert router.route("Copy typo on landing") == Department.DESIGN
    assert router.route("Crash on submit") == Department.QA


def test_assignment_annotation():
    assert assignment_annotation(Department.HTML) == "[Auto-assigned department: HTML]"
