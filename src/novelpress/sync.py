"""
Chapter and asset sync — projects/<novel>/ → site/.

Chapters are regenerated, not patched: every run fully rewrites the
destination file. Only the cover fields survive from the destination;
order is always recomputed from the filename.
"""

import logging
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

from novelpress import config
from novelpress.chapters import list_chapter_files, parse_chapter_name
from novelpress.config import (
    SiteLayout,
    IMAGE_EXTENSIONS,
    PASSTHROUGH_FIELDS,
    PRESERVED_FIELDS,
)
from novelpress.frontmatter import compose_document, parse_front_matter
from novelpress.project import require_chapters_dir

logger = logging.getLogger(__name__)


@dataclass
class SyncReport:
    """Outcome of syncing one novel."""

    novel_id: str
    source_dir: Path
    content_dir: Path
    chapters: list[dict[str, Any]] = field(default_factory=list)
    assets_copied: int = 0


def merge_front_matter(
    filename: str,
    source_fields: Mapping[str, str],
    existing_fields: Mapping[str, str],
) -> dict[str, Any]:
    """
    Build the destination header for one chapter.

    Args:
        filename: Chapter filename (drives order and the fallback title).
        source_fields: Header parsed from the authoring copy.
        existing_fields: Header parsed from the current site copy ({} if none).
    """
    name = parse_chapter_name(filename)

    merged: dict[str, Any] = {
        "title": source_fields.get("title") or existing_fields.get("title") or name.default_title,
        "order": name.order,
    }

    for key in PASSTHROUGH_FIELDS:
        if source_fields.get(key):
            merged[key] = source_fields[key]

    for key in PRESERVED_FIELDS:
        if key in source_fields:
            merged[key] = source_fields[key]
        elif key in existing_fields:
            merged[key] = existing_fields[key]

    return merged


def sync_chapter(src: Path, dest: Path) -> dict[str, Any]:
    """
    Regenerate one chapter at dest from src.

    Returns the header that was written.
    """
    source_fields, body = parse_front_matter(src.read_text(encoding="utf-8"))

    existing_fields: dict[str, str] = {}
    if dest.exists():
        existing_fields, _ = parse_front_matter(dest.read_text(encoding="utf-8"))

    merged = merge_front_matter(src.name, source_fields, existing_fields)

    dest.parent.mkdir(parents=True, exist_ok=True)
    dest.write_text(compose_document(merged, body), encoding="utf-8")

    kept = [k for k in PRESERVED_FIELDS if k in existing_fields and k not in source_fields]
    if kept:
        logger.debug("%s: kept %s from existing site copy", dest.name, ", ".join(kept))

    return merged


def is_image_asset(name: str) -> bool:
    return name.lower().endswith(IMAGE_EXTENSIONS)


def mirror_assets(src_dir: Path, dest_dir: Path) -> int:
    """
    Recursively copy image files from src_dir into dest_dir.

    Non-image files are skipped silently. Returns the number of files
    copied across all levels; a missing src_dir copies nothing.
    """
    if not src_dir.is_dir():
        return 0

    copied = 0
    for entry in sorted(src_dir.iterdir()):
        target = dest_dir / entry.name
        if entry.is_dir():
            copied += mirror_assets(entry, target)
        elif entry.is_file() and is_image_asset(entry.name):
            target.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(entry, target)
            copied += 1

    return copied


def sync_chapters(novel_id: str, layout: SiteLayout | None = None) -> SyncReport:
    """
    Sync every markdown chapter of a novel into the site content tree.

    Raises ProjectNotFoundError if the project's chapters directory is
    missing. Per-file errors propagate and abort the batch.
    """
    layout = layout or config.default_layout()
    source_dir = require_chapters_dir(novel_id, layout)
    novel_id = source_dir.parent.name
    content_dir = layout.content_dir(novel_id)
    content_dir.mkdir(parents=True, exist_ok=True)

    report = SyncReport(novel_id=novel_id, source_dir=source_dir, content_dir=content_dir)

    for src in list_chapter_files(source_dir):
        merged = sync_chapter(src, content_dir / src.name)
        report.chapters.append({"file": src.name, "title": merged["title"], "order": merged["order"]})

    logger.info("[%s] Synced %d chapters to %s", novel_id, len(report.chapters), content_dir)
    return report


def sync_novel(novel_id: str, layout: SiteLayout | None = None) -> SyncReport:
    """Sync chapters, then mirror the novel's image assets."""
    layout = layout or config.default_layout()
    report = sync_chapters(novel_id, layout)

    report.assets_copied = mirror_assets(
        layout.source_assets_dir(report.novel_id),
        layout.public_assets_dir(report.novel_id),
    )
    logger.info("[%s] Mirrored %d assets", report.novel_id, report.assets_copied)
    return report
