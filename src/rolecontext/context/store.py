"""Context store — cached markdown loading, directory merge and role views.

Markdown files are the source of truth. Parsed sections are memoized per
absolute path and reused while the file's mtime is unchanged and the entry
is younger than ``cache_max_age_ms``. The cache is an optimization only:
overlapping loads of the same path are last-write-wins.
"""

from __future__ import annotations

import asyncio
import logging
import os
import time
from dataclasses import dataclass, field, replace
from datetime import datetime
from pathlib import Path

import frontmatter

from rolecontext.config import StoreConfig
from rolecontext.context import filters
from rolecontext.context.errors import ContextError, translate_os_error
from rolecontext.context.filters import ContentAnalysis
from rolecontext.context.sections import Section, parse

logger = logging.getLogger(__name__)

MARKDOWN_SUFFIX = ".md"


@dataclass
class CacheEntry:
    """Memoized parse of one file."""

    file_path: str
    last_modified_ms: int
    sections: list[Section]
    cached_at_ms: int
    metadata: dict = field(default_factory=dict)


@dataclass
class MarkdownFile:
    """Sections of one file from a directory load."""

    file_name: str
    sections: list[Section]
    metadata: dict = field(default_factory=dict)


@dataclass
class CacheStats:
    size: int
    entries: list[str]
    max_age_ms: int


def _now_ms() -> int:
    return int(time.time() * 1000)


def _cache_key(path: str | Path) -> str:
    return str(Path(path).absolute())


def _parse_frontmatter(text: str) -> dict:
    """Parse YAML front matter, empty on absence or malformed YAML."""
    try:
        return dict(frontmatter.loads(text).metadata)
    except Exception as e:
        logger.debug("Ignoring unreadable front matter: %s", e)
        return {}


class ContextStore:
    """Loads markdown context files and derives role-filtered views."""

    def __init__(self, config: StoreConfig | None = None) -> None:
        self.config = replace(config) if config else StoreConfig()
        self._cache: dict[str, CacheEntry] = {}
        self.last_failures: dict[str, str] = {}
        self._log("ContextStore initialized (cache max age %dms)", self.config.cache_max_age_ms)

    def _log(self, msg: str, *args: object) -> None:
        level = logging.INFO if self.config.verbose_logging else logging.DEBUG
        logger.log(level, msg, *args)

    def _handle_error(self, operation: str, error: ContextError) -> list:
        if self.config.silent_errors:
            logger.warning("Error during %s: %s (continuing silently)", operation, error)
            return []
        self._log("Error during %s: %s", operation, error)
        raise error

    # ── Single file ──────────────────────────────────────────

    async def load_file(self, path: str | Path) -> list[Section]:
        """Parsed sections of one file, served from cache when still fresh."""
        try:
            entry = await self._load_entry(path)
        except ContextError as e:
            return self._handle_error(f"loading file {path}", e)
        return list(entry.sections)

    async def _load_entry(self, path: str | Path) -> CacheEntry:
        key = _cache_key(path)
        name = os.path.basename(key)

        try:
            stat = await asyncio.to_thread(os.stat, key)
        except OSError as e:
            if isinstance(e, FileNotFoundError):
                self._log("File not found: %s", key)
            raise translate_os_error(e, key) from e

        last_modified = stat.st_mtime_ns // 1_000_000
        now = _now_ms()

        cached = self._cache.get(key)
        if (
            cached
            and cached.last_modified_ms == last_modified
            and now - cached.cached_at_ms < self.config.cache_max_age_ms
        ):
            self._log("Cache hit: %s", name)
            return cached

        self._log("Reading: %s (%s)", name, "cache expired" if cached else "not cached")
        try:
            text = await asyncio.to_thread(self._read_text, key)
        except (OSError, UnicodeDecodeError) as e:
            raise translate_os_error(e, key) from e

        entry = CacheEntry(
            file_path=key,
            last_modified_ms=last_modified,
            sections=parse(text),
            cached_at_ms=now,
            metadata=_parse_frontmatter(text),
        )
        self._cache[key] = entry
        return entry

    def _read_text(self, path: str) -> str:
        return Path(path).read_text(encoding="utf-8")

    # ── Directory ────────────────────────────────────────────

    async def load_directory(self, path: str | Path) -> list[MarkdownFile]:
        """Load every ``.md`` file in a directory, in listing order.

        A file that fails to load is logged, recorded in ``last_failures``
        and left out; only an unlistable directory is an error.
        """
        try:
            return await self._read_directory(path)
        except ContextError as e:
            return self._handle_error(f"loading directory {path}", e)

    async def _read_directory(self, path: str | Path) -> list[MarkdownFile]:
        dir_path = _cache_key(path)
        self.last_failures = {}

        try:
            names = await asyncio.to_thread(os.listdir, dir_path)
        except OSError as e:
            if isinstance(e, FileNotFoundError):
                self._log("Directory not found: %s", dir_path)
            raise translate_os_error(e, dir_path) from e

        markdown_files = [n for n in names if n.endswith(MARKDOWN_SUFFIX)]
        if not markdown_files:
            self._log("No markdown files found in %s", dir_path)
            return []

        results: list[MarkdownFile] = []
        for name in markdown_files:
            try:
                entry = await self._load_entry(os.path.join(dir_path, name))
            except ContextError as e:
                self.last_failures[name] = str(e)
                logger.warning("Failed to read %s: %s", name, e)
                continue
            results.append(
                MarkdownFile(
                    file_name=name,
                    sections=[replace(s, file_name=name) for s in entry.sections],
                    metadata=dict(entry.metadata),
                )
            )

        if self.last_failures:
            logger.warning(
                "Processed %d/%d files in %s (failed: %s)",
                len(results),
                len(markdown_files),
                dir_path,
                ", ".join(self.last_failures),
            )
        return results

    # ── Merge ────────────────────────────────────────────────

    def merge(self, files: list[MarkdownFile]) -> list[Section]:
        """Concatenate files into one list, each under a separator section.

        File order is the caller's; sort ``files`` first for stable output.
        """
        merged: list[Section] = []
        for f in files:
            merged.append(
                Section(
                    level=1,
                    title=f"📄 {f.file_name}",
                    content=f"Contents from {f.file_name}",
                    start_line=0,
                    end_line=0,
                    file_name=f.file_name,
                    is_file_separator=True,
                )
            )
            merged.extend(
                replace(s, level=s.level + 1, file_name=s.file_name or f.file_name)
                for s in f.sections
            )
        return merged

    async def load_merged(self, path: str | Path) -> list[Section]:
        return self.merge(await self.load_directory(path))

    # ── Views ────────────────────────────────────────────────

    def coordinator_context(self, sections: list[Section]) -> list[Section]:
        return filters.coordinator_view(sections)

    def executor_context(self, sections: list[Section]) -> list[Section]:
        return filters.executor_view(sections)

    def shared_context(self, sections: list[Section]) -> list[Section]:
        return filters.shared_view(sections)

    def unassigned_context(self, sections: list[Section]) -> list[Section]:
        return filters.unassigned_view(sections)

    def all_context(self, sections: list[Section]) -> list[Section]:
        """Everything, tagged or not. Not the same as any role view."""
        return list(sections)

    def analyze_content(self, sections: list[Section]) -> ContentAnalysis:
        return filters.analyze(sections)

    # ── Cache management ─────────────────────────────────────

    def clear_cache(self) -> None:
        self._cache.clear()
        self._log("Cache cleared")

    def invalidate(self, path: str | Path) -> None:
        self._cache.pop(_cache_key(path), None)

    def set_cache_max_age(self, milliseconds: int) -> None:
        """Change the max age for future lookups; existing entries stay."""
        self.config.cache_max_age_ms = milliseconds
        self._log("Cache max age set to %ds", round(milliseconds / 1000))

    def cache_stats(self) -> CacheStats:
        return CacheStats(
            size=len(self._cache),
            entries=list(self._cache),
            max_age_ms=self.config.cache_max_age_ms,
        )

    # ── Updates ──────────────────────────────────────────────

    async def append_update(self, path: str | Path, text: str) -> None:
        """Append a timestamped ``## Update`` section and drop the cached parse."""
        key = _cache_key(path)
        stamp = datetime.now().isoformat(timespec="seconds")
        block = f"\n\n## Update - {stamp}\n{text.rstrip()}\n"
        try:
            await asyncio.to_thread(self._append_text, key, block)
        except OSError as e:
            raise translate_os_error(e, key) from e
        self.invalidate(key)
        logger.info("Appended update to %s (%d chars)", os.path.basename(key), len(text))

    @staticmethod
    def _append_text(path: str, block: str) -> None:
        # r+ rather than a: a missing file must not be created
        with open(path, "r+", encoding="utf-8") as f:
            f.seek(0, os.SEEK_END)
            f.write(block)
