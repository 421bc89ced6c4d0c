# flow_core/workflows/bug_routing.py
"""
Keyword routing of QA bugs to the department that should fix them.

Routing is advisory: the result is stored on the bug and appended to its
reproduction steps, but never gates a transition.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import FrozenSet, Optional, Sequence

from .enums import Department
from .rules import BUILD_DEPARTMENTS, DEFAULT_RULES, WorkflowRules


@dataclass(frozen=True)
class BugRoutingRule:
    keywords: FrozenSet[str]
    department: Department


MARKUP_KEYWORDS = frozenset(
    {
        "layout",
        "css",
        "styling",
        "responsive",
        "alignment",
        "ui",
        "visual",
        "design",
        "html",
        "frontend",
    }
)

DEVELOPMENT_KEYWORDS = frozenset(
    {
        "function",
        "api",
        "database",
        "backend",
        "logic",
        "validation",
        "calculation",
        "data",
        "server",
    }
)

DEFAULT_ROUTING_RULES: Sequence[BugRoutingRule] = (
    BugRoutingRule(MARKUP_KEYWORDS, Department.HTML),
    # Any build department works here; it is swapped for the project's own branch.
    BugRoutingRule(DEVELOPMENT_KEYWORDS, Department.REACT),
)

_WORD_RE = re.compile(r"[a-z0-9]+")


def _words(*texts: str) -> FrozenSet[str]:
    out = set()
    for text in texts:
        out.update(_WORD_RE.findall((text or "").lower()))
    return frozenset(out)


@dataclass(frozen=True)
class BugRouter:
    rules: Sequence[BugRoutingRule] = DEFAULT_ROUTING_RULES
    # None means "the project's build branch"
    default: Optional[Department] = None

    def route(
        self,
        title: str,
        description: str = "",
        *,
        category: str = "",
        workflow_rules: WorkflowRules = DEFAULT_RULES,
    ) -> Department:
        build = workflow_rules.build_department_for(category)
        words = _words(title, description)

        for rule in self.rules:
            if words & rule.keywords:
                if rule.department in BUILD_DEPARTMENTS:
                    return build
                return rule.department

        return self.default or build


DEFAULT_ROUTER = BugRouter()


def route_bug(title: str, description: str = "", *, category: str = "") -> Department:
    return DEFAULT_ROUTER.route(title, description, category=category)


def assignment_annotation(department) -> str:
    return f"[Auto-assigned department: {department}]"
