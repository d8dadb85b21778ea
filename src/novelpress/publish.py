"""
WordPress publisher — announce chapters as excerpt posts on the blog.

Each chapter becomes one post: novel-prefixed title, a plain-text excerpt,
a "continue reading" link to the chapter on the novel site, and the
chapter cover as featured image. Files are processed one at a time; a
failure in one file is logged and the batch moves on.
"""

import html
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

import httpx

from novelpress.chapters import parse_chapter_name
from novelpress.config import (
    WordPressSettings,
    ASSETS_DIRNAME,
    CHAPTERS_DIRNAME,
    CHAPTER_SUFFIX,
    COVER_ASSETS_SUBDIR,
    SITE_NAME,
    SiteLayout,
)
from novelpress.frontmatter import parse_front_matter
from novelpress.markdown import create_excerpt, markdown_to_html, rewrite_asset_links
from novelpress.project import NovelInfo, load_novel_info
from novelpress.utils.security import redact_secrets, validate_path_within
from novelpress.wordpress import WordPressClient, MediaResult

logger = logging.getLogger(__name__)

_NOVEL_FROM_PATH_RE = re.compile(r"(?:^|/)projects/([^/]+)/chapters(?:/|$)")

# Progress callback: (event, detail); the CLI turns these into output lines
ProgressFn = Callable[[str, dict], None]


@dataclass
class PostDraft:
    """Everything sent to WordPress for one chapter."""

    title: str
    content: str
    excerpt: str
    slug: str
    chapter_url: str


@dataclass
class PublishOutcome:
    """Result of publishing one file."""

    file: str
    status: str  # created | updated | skipped | failed
    title: str = ""
    link: str = ""
    media_id: int | None = None
    error: str | None = None


@dataclass
class PublishReport:
    """Outcome of one publish run."""

    outcomes: list[PublishOutcome] = field(default_factory=list)

    def count(self, status: str) -> int:
        return sum(1 for o in self.outcomes if o.status == status)

    @property
    def succeeded(self) -> int:
        return self.count("created") + self.count("updated")


def novel_slug_from_path(path: str | Path) -> str | None:
    """Novel ID from a projects/<novel>/chapters/ path, or None."""
    match = _NOVEL_FROM_PATH_RE.search(Path(path).as_posix())
    return match.group(1) if match else None


def project_dir_from_path(path: Path) -> Path | None:
    """The projects/<novel> directory containing a chapter file, or None."""
    for parent in path.parents:
        if parent.name == CHAPTERS_DIRNAME and parent.parent.parent.name == "projects":
            return parent.parent
    return None


def resolve_cover_path(chapter_file: Path, cover: str) -> Path:
    """
    Locate a chapter's cover image on disk.

    A bare filename lives in <project>/_assets/chapters/; anything with a
    slash is relative to the chapter's own directory. Raises ValueError
    if the result escapes the project directory.
    """
    chapter_dir = chapter_file.parent
    project_dir = chapter_dir.parent

    if "/" not in cover:
        path = project_dir / ASSETS_DIRNAME / COVER_ASSETS_SUBDIR / cover
    else:
        path = chapter_dir / cover

    if not validate_path_within(path, project_dir):
        raise ValueError(f"Cover path escapes the project directory: {cover}")
    return path


def post_slug(novel_slug: str, chapter_slug: str) -> str:
    return f"{novel_slug}-{chapter_slug}"


def chapter_url(settings: WordPressSettings, novel_slug: str, chapter_slug: str) -> str:
    return f"{settings.novel_site_url}/novel/{novel_slug}/{chapter_slug}"


def build_post(
    novel: NovelInfo,
    chapter_title: str,
    chapter_file: str | Path,
    body: str,
    settings: WordPressSettings,
    full_body: bool = False,
) -> PostDraft:
    """
    Compose the post for one chapter.

    The default content is the excerpt plus a link to the full chapter on
    the novel site. With full_body the converted chapter replaces the
    excerpt paragraph; the link and attribution stay.
    """
    name = parse_chapter_name(chapter_file)
    url = chapter_url(settings, novel.slug, name.slug)
    excerpt = create_excerpt(body)

    if full_body:
        lead = markdown_to_html(rewrite_asset_links(body, novel.slug, settings.novel_site_url))
    else:
        lead = f"<p>{html.escape(excerpt)}</p>"

    content = "\n\n".join(
        [
            lead,
            f'<p><a href="{url}" target="_blank" rel="noopener"><strong>👉 點此繼續閱讀完整章節</strong></a></p>',
            "<hr>",
            f"<p><em>本章節來自《{novel.title}》，更多精彩內容請前往 "
            f'<a href="{settings.novel_site_url}" target="_blank">{SITE_NAME}</a> 閱讀。</em></p>',
        ]
    )

    return PostDraft(
        title=f"【{novel.title}】{chapter_title}",
        content=content,
        excerpt=excerpt,
        slug=post_slug(novel.slug, name.slug),
        chapter_url=url,
    )


async def publish_chapter(
    path: Path,
    client: WordPressClient,
    settings: WordPressSettings,
    layout: SiteLayout | None = None,
    full_body: bool = False,
    progress: ProgressFn | None = None,
) -> PublishOutcome:
    """
    Publish one chapter file. Exceptions propagate to the caller.
    """
    notify = progress or (lambda event, detail: None)

    novel_id = novel_slug_from_path(path)
    novel = (
        load_novel_info(novel_id, layout, project_dir=project_dir_from_path(path))
        if novel_id
        else None
    )
    if novel is None:
        logger.info("Skipping %s: unknown novel", path)
        return PublishOutcome(file=str(path), status="skipped", error="Unknown novel")

    notify("processing", {"file": path.name})

    fields, body = parse_front_matter(path.read_text(encoding="utf-8"))
    name = parse_chapter_name(path)
    title = fields.get("title") or name.stem

    media: MediaResult | None = None
    cover = fields.get("cover")
    if cover:
        cover_path = resolve_cover_path(path, cover)
        notify("cover", {"cover": cover})
        if not cover_path.is_file():
            notify("cover_missing", {"path": str(cover_path)})
        media = await client.upload_media(cover_path, f"{novel.title} - {title}")
        if media is not None:
            notify("cover_reused" if media.reused else "cover_uploaded", {"id": media.id})

    draft = build_post(novel, title, path, body, settings, full_body=full_body)
    result = await client.upsert_post(
        draft.title,
        draft.content,
        draft.excerpt,
        draft.slug,
        featured_media=media.id if media else None,
    )

    return PublishOutcome(
        file=str(path),
        status="updated" if result.updated else "created",
        title=title,
        link=result.link,
        media_id=media.id if media else None,
    )


async def publish_chapters(
    paths: list[Path],
    settings: WordPressSettings,
    layout: SiteLayout | None = None,
    full_body: bool = False,
    transport: httpx.AsyncBaseTransport | None = None,
    progress: ProgressFn | None = None,
) -> PublishReport:
    """
    Publish chapter files sequentially, isolating failures per file.

    Non-markdown paths are ignored. Credentials must already be checked
    by the caller (see WordPressSettings.missing_credentials).
    """
    notify = progress or (lambda event, detail: None)
    report = PublishReport()
    chapter_paths = [Path(p) for p in paths if str(p).endswith(CHAPTER_SUFFIX)]

    logger.debug("Publishing with settings: %s", redact_secrets(settings.as_dict()))

    async with WordPressClient(settings, transport=transport) as client:
        for path in chapter_paths:
            try:
                outcome = await publish_chapter(
                    path, client, settings,
                    layout=layout, full_body=full_body, progress=progress,
                )
            except Exception as e:
                logger.error("Failed to publish %s: %s", path, e)
                outcome = PublishOutcome(file=str(path), status="failed", error=str(e))

            report.outcomes.append(outcome)
            notify(outcome.status, {"outcome": outcome})

    return report

