"""Discovers memory, settings and project config files on disk."""

from __future__ import annotations

import logging
import os
from datetime import datetime, timezone
from pathlib import Path

from shelf.models.file_record import CATEGORIES, SCOPE_GLOBAL, SCOPE_PROJECT, FileRecord, ScanResult
from shelf.utils import file_id, home_dir, home_relative, is_writable

log = logging.getLogger(__name__)

CONFIG_DIR_NAME = ".claude"

_SKIP_DIRS = frozenset({".git", "node_modules", ".venv", "__pycache__"})
_CONFIG_EXTENSIONS = frozenset({".md", ".json", ".yaml", ".yml", ".txt", ".toml"})
_PROJECT_FILES = frozenset({"claude.md", ".clauderc"})
_PROJECT_DIRS = ("projects", "src", "dev", "code", "workspace", "repos")

# Outside a config tree only look this many directories below a search root.
_MAX_PLAIN_DEPTH = 1


def is_config_file(path: Path) -> bool:
    """Return True if *path* is a file this tool manages."""
    name = path.name
    if name.lower() in _PROJECT_FILES:
        return True
    if CONFIG_DIR_NAME not in path.parts[:-1]:
        return False
    ext = path.suffix.lower()
    if ext in _CONFIG_EXTENSIONS:
        return True
    return ext == "" and not name.startswith(".")


def categorize(display_path: str, name: str) -> str:
    """Assign a category id from a (home-relative) path and file name."""
    path_lower = display_path.lower()
    name_lower = name.lower()
    in_config_dir = CONFIG_DIR_NAME in path_lower

    if "memory" in path_lower or name_lower == "memory.md":
        return "memory"
    if name_lower == "claude.md" and not in_config_dir:
        return "project"
    if name_lower in ("settings.json", ".clauderc"):
        return "settings"
    if "todo" in path_lower:
        return "todos"
    if "plan" in path_lower:
        return "plans"
    if "skill" in path_lower:
        return "skills"
    if name_lower in _PROJECT_FILES:
        return "project"
    return "other"


def project_from_slug(slug: str) -> str:
    """Project name from an encoded project directory like ``-home-me-src-app``."""
    parts = [p for p in slug.split("-") if p]
    return parts[-1] if parts else slug


def scope_of(path: Path, home: Path) -> tuple[str | None, str | None]:
    """Return (scope, project_name) for an absolute path."""
    parts = path.parts
    if CONFIG_DIR_NAME in parts:
        idx = len(parts) - 1 - parts[::-1].index(CONFIG_DIR_NAME)
        sub = parts[idx + 1:]
        if len(sub) > 2 and sub[0] == "projects":
            return SCOPE_PROJECT, project_from_slug(sub[1])
        owner = Path(*parts[:idx])
        if owner != home:
            return SCOPE_PROJECT, owner.name
        return SCOPE_GLOBAL, None
    if path.parent == home:
        return SCOPE_GLOBAL, None
    return SCOPE_PROJECT, path.parent.name


class Scanner:
    """Walks the search paths and builds file records."""

    def __init__(self, root: Path | str | None = None, home: Path | None = None) -> None:
        self.root = Path(root).expanduser().resolve() if root else None
        self.home = home or home_dir()

    def search_paths(self) -> list[Path]:
        """Directories to scan: the explicit root, or well-known locations."""
        if self.root is not None:
            return [self.root]
        paths = [self.home / CONFIG_DIR_NAME]
        for name in _PROJECT_DIRS:
            candidate = self.home / name
            if candidate.is_dir():
                paths.append(candidate)
        paths.append(self.home)
        return paths

    def scan(self) -> ScanResult:
        """Scan every search path, skipping inaccessible ones."""
        files: list[FileRecord] = []
        seen: set[Path] = set()

        for root in self.search_paths():
            if not root.is_dir():
                log.debug("Search path not found: %s", root)
                continue
            files.extend(self._scan_path(root, seen))

        log.info("Scan found %d files", len(files))
        return ScanResult(
            files=files,
            categories=list(CATEGORIES),
            root_path=str(self.root) if self.root else None,
        )

    def _scan_path(self, root: Path, seen: set[Path]) -> list[FileRecord]:
        files: list[FileRecord] = []
        root_is_config = root.name == CONFIG_DIR_NAME

        def on_error(exc: OSError) -> None:
            log.debug("Cannot access: %s", exc.filename)

        for dirpath, dirnames, filenames in os.walk(root, onerror=on_error):
            current = Path(dirpath)
            in_config = root_is_config or CONFIG_DIR_NAME in current.relative_to(root).parts
            depth = len(current.relative_to(root).parts)

            kept = []
            for name in sorted(dirnames):
                if name in _SKIP_DIRS:
                    continue
                if not in_config and name != CONFIG_DIR_NAME:
                    if name.startswith(".") or depth >= _MAX_PLAIN_DEPTH:
                        continue
                kept.append(name)
            dirnames[:] = kept

            for name in sorted(filenames):
                path = (current / name).absolute()
                if not in_config and depth > _MAX_PLAIN_DEPTH:
                    continue
                if not is_config_file(path) or path in seen:
                    continue
                seen.add(path)
                record = self.build_record(path)
                if record is not None:
                    files.append(record)

        return files

    def build_record(self, path: Path) -> FileRecord | None:
        """Stat *path* and build its record, or None when it is inaccessible."""
        try:
            stat = path.stat()
        except OSError:
            log.debug("Cannot stat: %s", path)
            return None

        display = home_relative(path, self.home)
        scope, project = scope_of(path, self.home)
        return FileRecord(
            id=file_id(path),
            path=str(path),
            rel_path=display,
            name=path.name,
            display_name=f"{project}/{path.name}" if scope == SCOPE_PROJECT and project else None,
            category=categorize(display, path.name),
            scope=scope,
            project_name=project,
            size=stat.st_size,
            mod_time=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
            read_only=not is_writable(path),
        )
