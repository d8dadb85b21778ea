"""
Novel projects — resolve, list, and load metadata.

Every novel is a directory under PROJECTS_ROOT containing:
- chapters/ (authored markdown, source of truth)
- _assets/ (authored images, optional)
- novel.json (optional metadata overriding the built-in registry)
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from novelpress import config
from novelpress.config import SiteLayout, CHAPTER_SUFFIX, NOVEL_META_FILENAME
from novelpress.utils.security import validate_novel_id, validate_path_within

logger = logging.getLogger(__name__)


class ProjectNotFoundError(FileNotFoundError):
    """Raised when a novel's chapters directory does not exist."""

    def __init__(self, path: Path):
        self.path = path
        super().__init__(f"Project not found: {path}")


@dataclass(frozen=True)
class NovelInfo:
    """Display metadata for a novel."""

    slug: str
    title: str
    category: str = ""


def get_novel_path(novel_id: str, layout: SiteLayout | None = None) -> Path:
    """Resolve and validate a novel's project directory path."""
    layout = layout or config.default_layout()
    safe_id = validate_novel_id(novel_id)

    path = layout.projects_root.joinpath(safe_id)
    if not validate_path_within(path, layout.projects_root):
        raise ValueError(f"Path traversal detected: {novel_id}")

    return path


def require_chapters_dir(novel_id: str, layout: SiteLayout | None = None) -> Path:
    """Return the novel's chapters directory or raise ProjectNotFoundError."""
    layout = layout or config.default_layout()
    safe_id = get_novel_path(novel_id, layout).name

    chapters_dir = layout.chapters_dir(safe_id)
    if not chapters_dir.is_dir():
        raise ProjectNotFoundError(chapters_dir)
    return chapters_dir


def load_novel_info(
    novel_id: str,
    layout: SiteLayout | None = None,
    project_dir: Path | None = None,
) -> NovelInfo | None:
    """
    Look up display metadata for a novel.

    novel.json in the project directory wins over the built-in registry.
    project_dir overrides where that file is looked up (a chapter passed
    by absolute path carries its own project directory). Returns None for
    a novel known to neither.
    """
    try:
        if project_dir is None:
            project_dir = get_novel_path(novel_id, layout)
        safe_id = validate_novel_id(novel_id)
    except ValueError:
        return None

    meta: dict[str, Any] = dict(config.NOVELS.get(safe_id, {}))
    meta_path = project_dir / NOVEL_META_FILENAME

    if meta_path.is_file():
        try:
            meta.update(json.loads(meta_path.read_text(encoding="utf-8")))
        except json.JSONDecodeError as e:
            logger.warning("Ignoring malformed %s: %s", meta_path, e)

    if not meta.get("title"):
        return None

    return NovelInfo(
        slug=safe_id,
        title=str(meta["title"]),
        category=str(meta.get("category", "")),
    )


def list_novels(layout: SiteLayout | None = None) -> list[dict[str, Any]]:
    """
    List all novels under the projects root.

    Returns list of dicts with id, title, and chapter count.
    """
    layout = layout or config.default_layout()
    if not layout.projects_root.exists():
        return []

    novels = []
    for entry in sorted(layout.projects_root.iterdir()):
        chapters_dir = entry / config.CHAPTERS_DIRNAME
        if not chapters_dir.is_dir():
            continue

        try:
            info = load_novel_info(entry.name, layout)
        except OSError as e:
            logger.warning("Could not read metadata for %s: %s", entry.name, e)
            info = None

        novels.append(
            {
                "id": entry.name,
                "title": info.title if info else "",
                "chapters": len(list(chapters_dir.glob(f"*{CHAPTER_SUFFIX}"))),
                "synced": layout.content_dir(entry.name).is_dir(),
            }
        )

    return novels
