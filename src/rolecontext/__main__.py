"""Entry point: python -m rolecontext [view|stats] <path> [role]

- "view":  Print sections of a file (or merged directory), optionally one role's view
- "stats": Print role distribution and authoring suggestions
"""

from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path

from rolecontext.config import load_config
from rolecontext.context.errors import ContextError
from rolecontext.context.filters import analyze, role_stats
from rolecontext.context.sections import Section
from rolecontext.context.store import ContextStore

_PREVIEW_CHARS = 80

_VIEWS = {
    "all": ContextStore.all_context,
    "coordinator": ContextStore.coordinator_context,
    "executor": ContextStore.executor_context,
    "shared": ContextStore.shared_context,
    "unassigned": ContextStore.unassigned_context,
}


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def format_section(section: Section, index: int) -> str:
    roles = f"[{', '.join(sorted(section.roles))}]" if section.roles else "[unassigned]"
    indent = "  " * max(0, section.level - 1)
    lines = [f"{index + 1}. {indent}{section.title} {roles}"]
    preview = " ".join(section.content.split())
    if preview:
        suffix = "..." if len(preview) > _PREVIEW_CHARS else ""
        lines.append(f"   {preview[:_PREVIEW_CHARS]}{suffix}")
    return "\n".join(lines)


async def _load(store: ContextStore, path: Path) -> list[Section]:
    if path.is_dir():
        files = sorted(await store.load_directory(path), key=lambda f: f.file_name)
        return store.merge(files)
    return await store.load_file(path)


async def _view(store: ContextStore, path: Path, role: str) -> None:
    sections = _VIEWS[role](store, await _load(store, path))
    print(f"{role} view of {path}: {len(sections)} sections\n")
    for i, section in enumerate(sections):
        print(format_section(section, i))


async def _stats(store: ContextStore, path: Path) -> None:
    sections = await _load(store, path)
    report = analyze(sections)
    print(f"Total sections: {report.total}")
    print(f"  coordinator: {report.coordinator} ({report.percentage_coordinator}%)")
    print(f"  executor:    {report.executor} ({report.percentage_executor}%)")
    print(f"  shared:      {report.shared} ({report.percentage_shared}%)")
    print(f"  unmarked:    {report.unmarked} ({report.percentage_unmarked}%)")
    for role, count in sorted(role_stats(sections).items()):
        print(f"  role {role}: {count}")
    for tip in report.suggestions:
        print(f"- {tip}")


def _usage() -> None:
    print("Usage: python -m rolecontext [view|stats] <path> [role]")
    print("  view <path> [role]  — Sections of a file or directory; role: " + "|".join(_VIEWS))
    print("  stats <path>        — Role distribution and suggestions")


def main(argv: list[str] | None = None) -> int:
    args = sys.argv[1:] if argv is None else argv
    cmd = args[0] if args else ""

    if cmd not in ("view", "stats") or len(args) < 2:
        _usage()
        return 1
    role = args[2] if len(args) > 2 else "all"
    if cmd == "view" and role not in _VIEWS:
        _usage()
        return 1

    config = load_config()
    _setup_logging(config.log_level)
    store = ContextStore(config.store)
    path = Path(args[1])

    try:
        if cmd == "view":
            asyncio.run(_view(store, path, role))
        else:
            asyncio.run(_stats(store, path))
    except ContextError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
