"""
Chapter filename conventions — ordering, default titles, slugs.

Convention: Chap_<digits>[-<Letter>]_<authorcode>_<Title_With_Underscores>.md

Files that do not follow it are still processed; they sort last and are
titled by their stem.
"""

import re
from dataclasses import dataclass
from pathlib import Path

from novelpress.config import CHAPTER_SUFFIX, UNORDERED_CHAPTER

_ORDER_RE = re.compile(r"Chap_(\d+)(?:-([A-Z]))?")
_TITLE_RE = re.compile(r"Chap_\d+(?:-[A-Z])?_([^_]+)_(.+)\.md$")


@dataclass(frozen=True)
class ChapterName:
    """A chapter filename broken into its convention parts."""

    filename: str
    stem: str
    main_index: int | None = None
    sub_letter: str | None = None
    author_code: str | None = None
    title_fragment: str | None = None

    @property
    def is_conforming(self) -> bool:
        return self.main_index is not None

    @property
    def order(self) -> int:
        if self.main_index is None:
            return UNORDERED_CHAPTER
        sub = ord(self.sub_letter) - ord("A") + 1 if self.sub_letter else 0
        return self.main_index * 10 + sub

    @property
    def default_title(self) -> str:
        if self.title_fragment:
            return self.title_fragment.replace("_", " ")
        return self.stem

    @property
    def slug(self) -> str:
        return self.stem.lower().replace("_", "-")


def _stem(filename: str) -> str:
    return filename[: -len(CHAPTER_SUFFIX)] if filename.endswith(CHAPTER_SUFFIX) else filename


def parse_chapter_name(filename: str | Path) -> ChapterName:
    """Tokenize a chapter filename. Only the final path component is used."""
    name = Path(filename).name
    stem = _stem(name)

    order_match = _ORDER_RE.search(name)
    title_match = _TITLE_RE.search(name)

    return ChapterName(
        filename=name,
        stem=stem,
        main_index=int(order_match.group(1)) if order_match else None,
        sub_letter=order_match.group(2) if order_match else None,
        author_code=title_match.group(1) if title_match else None,
        title_fragment=title_match.group(2) if title_match else None,
    )


def chapter_order(filename: str | Path) -> int:
    """Sort key: main index * 10 + letter position (A=1); 999 when unparseable."""
    return parse_chapter_name(filename).order


def default_title(filename: str | Path) -> str:
    return parse_chapter_name(filename).default_title


def chapter_slug(filename: str | Path) -> str:
    """URL slug: stem, lower-cased, underscores to hyphens."""
    return parse_chapter_name(filename).slug


def list_chapter_files(directory: Path) -> list[Path]:
    """Markdown chapter files in a directory, in reading order."""
    files = [
        p for p in directory.iterdir()
        if p.is_file() and p.name.endswith(CHAPTER_SUFFIX)
    ]
    return sorted(files, key=lambda p: (chapter_order(p.name), p.name))
