"""Section parser — markdown text to an ordered list of headed sections.

Role tags can be written two ways:

    ## Rollout plan [roles: coordinator, executor]

    ## Rollout plan
    <!-- role: coordinator -->

Heading tags are removed from the title; comment tags stay in the content.
Lines before the first heading belong to no section and are dropped.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

_HEADING_RE = re.compile(r"^(#{1,6})\s+(.+)$")
_HEADING_ROLES_RE = re.compile(r"\[roles?:\s*([^\]]+)\]", re.IGNORECASE)
_COMMENT_ROLES_RE = re.compile(r"<!--\s*roles?:\s*(.+?)\s*-->", re.IGNORECASE)


@dataclass(frozen=True)
class Section:
    """A heading plus the raw lines under it."""

    level: int
    title: str
    content: str
    start_line: int
    end_line: int
    roles: frozenset[str] | None = None
    file_name: str | None = None
    is_file_separator: bool = False

    def has_role(self, role: str) -> bool:
        return self.roles is not None and role.lower() in self.roles


def _split_roles(raw: str) -> list[str]:
    return [r.strip().lower() for r in raw.split(",") if r.strip()]


def _dedupe(roles: list[str]) -> list[str]:
    return list(dict.fromkeys(roles))


def extract_heading_roles(text: str) -> list[str]:
    """Collect roles from every ``[role: ...]`` / ``[roles: ...]`` bracket."""
    roles: list[str] = []
    for match in _HEADING_ROLES_RE.finditer(text):
        roles.extend(_split_roles(match.group(1)))
    return _dedupe(roles)


def extract_comment_roles(line: str) -> list[str]:
    """Collect roles from the first ``<!-- role(s): ... -->`` comment on a line."""
    match = _COMMENT_ROLES_RE.search(line)
    if not match:
        return []
    return _dedupe(_split_roles(match.group(1)))


def strip_role_tags(text: str) -> str:
    return _HEADING_ROLES_RE.sub("", text).strip()


def parse(content: str) -> list[Section]:
    """Split markdown into sections, one per ATX heading, in source order."""
    # CRLF input: one trailing \r per line belongs to the line break
    lines = [line[:-1] if line.endswith("\r") else line for line in content.split("\n")]
    sections: list[Section] = []

    # State of the currently open section
    level = 0
    title = ""
    start = -1
    body: list[str] = []
    roles: list[str] | None = None

    def close(end_line: int) -> None:
        sections.append(
            Section(
                level=level,
                title=title,
                content="\n".join(body),
                start_line=start,
                end_line=end_line,
                roles=frozenset(roles) if roles else None,
            )
        )

    for index, line in enumerate(lines):
        heading = _HEADING_RE.match(line)
        if heading:
            if start >= 0:
                close(index - 1)
            text = heading.group(2).strip()
            level = len(heading.group(1))
            title = strip_role_tags(text)
            start = index
            body = []
            roles = extract_heading_roles(text) or None
        elif start >= 0:
            found = extract_comment_roles(line)
            if found:
                roles = _dedupe((roles or []) + found)
            body.append(line)

    if start >= 0:
        close(len(lines) - 1)

    return sections
