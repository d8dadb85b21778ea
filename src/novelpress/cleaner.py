"""
Chapter cleaner — strip authoring metadata from chapter files in place.

Removes:
- <metadata>...</metadata> blocks left by the drafting agent
- Labeled planning bullets (word target, POV, timeline, theme, scene)
- Blank-line runs longer than two lines
"""

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path

from novelpress import config
from novelpress.config import SiteLayout, CHAPTER_SUFFIX
from novelpress.project import require_chapters_dir

logger = logging.getLogger(__name__)

_METADATA_BLOCK_RE = re.compile(r"<metadata>.*?</metadata>\s*", re.IGNORECASE | re.DOTALL)

# Full-width colon, as written in the drafts
METADATA_LABELS: tuple[str, ...] = ("字數目標", "POV", "時間軸", "核心主題", "場景")
_LABELED_BULLET_RES = [
    re.compile(rf"^- \*\*{re.escape(label)}\*\*：.*$", re.MULTILINE)
    for label in METADATA_LABELS
]

_EXCESS_BLANKS_RE = re.compile(r"\n{4,}")
_BLANKS_AFTER_DELIMITER_RE = re.compile(r"(---\n)\n+")


@dataclass
class CleanReport:
    """Outcome of cleaning one novel's chapters."""

    total: int = 0
    cleaned: list[str] = field(default_factory=list)


def remove_metadata_blocks(text: str) -> str:
    return _METADATA_BLOCK_RE.sub("", text)


def remove_labeled_bullets(text: str) -> str:
    """Blank out planning bullets; the line break stays for the collapse pass."""
    for pattern in _LABELED_BULLET_RES:
        text = pattern.sub("", text)
    return text


def collapse_blank_lines(text: str) -> str:
    """At most two consecutive blank lines."""
    return _EXCESS_BLANKS_RE.sub("\n\n\n", text)


def tighten_after_delimiter(text: str) -> str:
    """At most one blank line after a `---` line."""
    return _BLANKS_AFTER_DELIMITER_RE.sub(r"\1\n", text)


def clean_text(text: str) -> str:
    """Apply every cleaning rule in order. Output is a fixed point."""
    text = remove_metadata_blocks(text)
    text = remove_labeled_bullets(text)
    text = collapse_blank_lines(text)
    text = tighten_after_delimiter(text)
    return text


def clean_chapter(path: Path) -> bool:
    """
    Clean one chapter file in place.

    Returns True if the file was rewritten. Read and write errors propagate.
    """
    original = path.read_bytes()
    cleaned = clean_text(original.decode("utf-8")).encode("utf-8")

    if cleaned == original:
        return False

    path.write_bytes(cleaned)
    logger.debug("Cleaned %s (%d → %d bytes)", path, len(original), len(cleaned))
    return True


def clean_novel(novel_id: str, layout: SiteLayout | None = None) -> CleanReport:
    """
    Clean every markdown chapter of a novel.

    Raises ProjectNotFoundError if the chapters directory is missing.
    Per-file errors are not caught: the first failure aborts the batch.
    """
    layout = layout or config.default_layout()
    chapters_dir = require_chapters_dir(novel_id, layout)

    files = sorted(
        p for p in chapters_dir.iterdir()
        if p.is_file() and p.name.endswith(CHAPTER_SUFFIX)
    )
    report = CleanReport(total=len(files))

    for path in files:
        if clean_chapter(path):
            report.cleaned.append(path.name)

    logger.info("[%s] Cleaned %d of %d chapters", novel_id, len(report.cleaned), report.total)
    return report
