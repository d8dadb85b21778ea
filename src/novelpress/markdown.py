"""
Markdown helpers for publishing — asset links, excerpts, HTML.

Each rule is a small pure function. The HTML converter works block by
block; headings and image-only lines are never wrapped in <p>.
"""

import html
import re

from novelpress.config import DEFAULT_EXCERPT_CHARS

_IMAGE_RE = re.compile(r"!\[(.*?)\]\((.*?)\)")
_ASSET_IMAGE_RE = re.compile(r"!\[(.*?)\]\(\.\.?/_assets/(.*?)\)")
_MARKUP_CHARS_RE = re.compile(r"[#*_`]")
_WHITESPACE_RE = re.compile(r"\s+")
_TRAILING_PARTIAL_WORD_RE = re.compile(r"\s+\S*$")

_HEADING_RE = re.compile(r"^(#{1,3}) (.*)$")
_IMAGE_ONLY_RE = re.compile(r"^!\[[^\]]*\]\([^)]*\)$")
_BOLD_ITALIC_RE = re.compile(r"\*\*\*(.+?)\*\*\*")
_BOLD_RE = re.compile(r"\*\*(.+?)\*\*")
_ITALIC_RE = re.compile(r"\*(.+?)\*")
_BLOCK_SPLIT_RE = re.compile(r"\n\s*\n")

IMAGE_STYLE = "max-width:100%;height:auto;"


# ──────────────────────────────────────────────
# Asset links
# ──────────────────────────────────────────────


def rewrite_asset_links(markdown: str, novel_slug: str, site_url: str) -> str:
    """
    Point relative _assets image references at the public novel site.

    ![alt](../_assets/chapters/a.jpg) → ![alt](<site>/assets/<novel>/chapters/a.jpg)
    """
    base = site_url.rstrip("/")

    def _replace(match: re.Match[str]) -> str:
        alt, path = match.group(1), match.group(2)
        return f"![{alt}]({base}/assets/{novel_slug}/{path})"

    return _ASSET_IMAGE_RE.sub(_replace, markdown)


# ──────────────────────────────────────────────
# Excerpts
# ──────────────────────────────────────────────


def strip_markup(markdown: str) -> str:
    """Plain text: no images, no emphasis/heading markers, single spaces."""
    text = _IMAGE_RE.sub("", markdown)
    text = _MARKUP_CHARS_RE.sub("", text)
    return _WHITESPACE_RE.sub(" ", text).strip()


def create_excerpt(markdown: str, max_length: int = DEFAULT_EXCERPT_CHARS) -> str:
    """
    Plain-text excerpt of at most max_length characters plus an ellipsis.

    Cuts at the last whitespace boundary at or before max_length. Text
    with no whitespace in range (e.g. CJK prose) is cut at max_length.
    """
    text = strip_markup(markdown)
    if len(text) <= max_length:
        return text

    head = text[:max_length]
    if text[max_length].isspace():
        head = head.rstrip()
    else:
        head = _TRAILING_PARTIAL_WORD_RE.sub("", head)

    return head + "..."


# ──────────────────────────────────────────────
# HTML
# ──────────────────────────────────────────────


def _image_tag(match: re.Match[str]) -> str:
    alt, src = match.group(1), match.group(2)
    return f'<img src="{src}" alt="{alt}" style="{IMAGE_STYLE}">'


def render_inline(text: str) -> str:
    """Escape HTML, then convert images and emphasis."""
    text = html.escape(text)
    text = _IMAGE_RE.sub(_image_tag, text)
    text = _BOLD_ITALIC_RE.sub(r"<strong><em>\1</em></strong>", text)
    text = _BOLD_RE.sub(r"<strong>\1</strong>", text)
    text = _ITALIC_RE.sub(r"<em>\1</em>", text)
    return text


def _render_block(block: str) -> list[str]:
    parts: list[str] = []
    paragraph: list[str] = []

    def _flush() -> None:
        if paragraph:
            parts.append("<p>" + "<br>".join(paragraph) + "</p>")
            paragraph.clear()

    for line in block.split("\n"):
        line = line.strip()
        if not line:
            continue

        heading = _HEADING_RE.match(line)
        if heading:
            _flush()
            level = len(heading.group(1))
            parts.append(f"<h{level}>{render_inline(heading.group(2))}</h{level}>")
        elif _IMAGE_ONLY_RE.match(line):
            _flush()
            parts.append(render_inline(line))
        else:
            paragraph.append(render_inline(line))

    _flush()
    return parts


def markdown_to_html(markdown: str) -> str:
    """
    Convert chapter markdown to simple HTML.

    Supports headings (#, ##, ###), ***bold italic***, **bold**, *italic*,
    images, blank-line paragraphs and single-newline <br> breaks.
    """
    text = markdown.replace("\r\n", "\n").strip()
    if not text:
        return ""

    parts: list[str] = []
    for block in _BLOCK_SPLIT_RE.split(text):
        parts.extend(_render_block(block))

    return "\n".join(parts)
