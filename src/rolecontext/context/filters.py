"""Role-filtered views over a section list.

Every view returns a new list in the input's relative order. Sections
without role tags are never part of a role view; they are only reachable
through ``unassigned_view`` or by taking the whole list.
"""

from __future__ import annotations

import re
from collections import Counter
from dataclasses import dataclass, field
from enum import Enum

from rolecontext.context.sections import Section

COORDINATOR = "coordinator"
EXECUTOR = "executor"


def filter_by_role(sections: list[Section], role: str) -> list[Section]:
    return [s for s in sections if s.has_role(role)]


def coordinator_view(sections: list[Section]) -> list[Section]:
    return filter_by_role(sections, COORDINATOR)


def executor_view(sections: list[Section]) -> list[Section]:
    return filter_by_role(sections, EXECUTOR)


def shared_view(sections: list[Section]) -> list[Section]:
    """Sections tagged for both the coordinator and the executor."""
    return [s for s in sections if s.has_role(COORDINATOR) and s.has_role(EXECUTOR)]


def unassigned_view(sections: list[Section]) -> list[Section]:
    """Sections carrying no role tag at all."""
    return [s for s in sections if s.roles is None]


def role_stats(sections: list[Section]) -> dict[str, int]:
    """Number of sections tagged with each role."""
    counts: Counter[str] = Counter()
    for section in sections:
        if section.roles:
            counts.update(section.roles)
    return dict(counts)


# ── Analysis ─────────────────────────────────────────────────


@dataclass
class ContentAnalysis:
    """Role distribution of a section list."""

    total: int
    coordinator: int
    executor: int
    shared: int
    unmarked: int
    percentage_coordinator: int
    percentage_executor: int
    percentage_shared: int
    percentage_unmarked: int
    suggestions: list[str] = field(default_factory=list)


def _percent(count: int, total: int) -> int:
    if total == 0:
        return 0
    # Round half up: 1 of 8 is 13, not 12
    return int(count * 100 / total + 0.5)


def _suggestions(coordinator: int, executor: int, shared: int, unmarked: int, total: int) -> list[str]:
    tips: list[str] = []
    if unmarked > total * 0.5:
        tips.append("Consider adding role markings to more sections for better filtering")
    if shared == 0 and coordinator > 0 and executor > 0:
        tips.append("You might want some shared sections for coordination between roles")
    if coordinator == 0:
        tips.append("Consider marking strategic/management content for coordinators")
    if executor == 0:
        tips.append("Consider marking technical/implementation content for executors")
    if not tips:
        tips.append("Good role distribution: content is well organized for filtering")
    return tips


def analyze(sections: list[Section]) -> ContentAnalysis:
    total = len(sections)
    coordinator = len(coordinator_view(sections))
    executor = len(executor_view(sections))
    shared = len(shared_view(sections))
    unmarked = len(unassigned_view(sections))
    return ContentAnalysis(
        total=total,
        coordinator=coordinator,
        executor=executor,
        shared=shared,
        unmarked=unmarked,
        percentage_coordinator=_percent(coordinator, total),
        percentage_executor=_percent(executor, total),
        percentage_shared=_percent(shared, total),
        percentage_unmarked=_percent(unmarked, total),
        suggestions=_suggestions(coordinator, executor, shared, unmarked, total),
    )


# ── Keyword filters ──────────────────────────────────────────


class AgentRole(str, Enum):
    COORDINATOR = "coordinator"
    TASK_EXECUTOR = "task-executor"


@dataclass(frozen=True)
class KeywordFilter:
    """Title keywords an agent role includes and excludes."""

    include: tuple[str, ...]
    exclude: tuple[str, ...] = ()

    def accepts(self, key: str) -> bool:
        if not any(k in key for k in self.include):
            return False
        return not any(k in key for k in self.exclude)


KEYWORD_FILTERS: dict[AgentRole, KeywordFilter] = {
    AgentRole.COORDINATOR: KeywordFilter(
        include=("objectives", "architecture", "progress", "success_criteria", "current_phase"),
        exclude=("implementation_details", "technical_specs"),
    ),
    AgentRole.TASK_EXECUTOR: KeywordFilter(
        include=("current_task", "technical_specs", "success_criteria", "constraints", "deliverables"),
        exclude=("strategic_decisions", "human_approvals"),
    ),
}


def section_key(title: str) -> str:
    """Normalize a title for keyword matching: ``Current Task`` -> ``current_task``."""
    return re.sub(r"\s+", "_", title.strip().lower())


def filter_by_keywords(sections: list[Section], role: AgentRole) -> list[Section]:
    """Select sections by title keywords for an agent role, ignoring role tags."""
    keyword_filter = KEYWORD_FILTERS[AgentRole(role)]
    return [s for s in sections if keyword_filter.accepts(section_key(s.title))]
