"""
WordPress REST client — posts and media via /wp-json/wp/v2.

Authentication: HTTP Basic with a WordPress application password.
No retries; a hung request stalls until the client timeout fires.

Media deduplication is a heuristic: the library is searched by a
normalized filename stem and the first item whose slug contains it is
reused. A renamed upload is missed (re-uploaded) and an unrelated item
with a similar slug can be picked up by mistake.
"""

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any
from urllib.parse import quote

import httpx

from novelpress.config import (
    WordPressSettings,
    MEDIA_CONTENT_TYPES,
    DEFAULT_MEDIA_CONTENT_TYPE,
)
from novelpress.utils.security import sanitize_filename

logger = logging.getLogger(__name__)

_NON_ALNUM_RE = re.compile(r"[^a-zA-Z0-9]")


class WordPressError(Exception):
    """Raised when WordPress rejects a post create/update."""

    def __init__(self, status_code: int, body: str):
        self.status_code = status_code
        self.body = body
        super().__init__(f"WordPress API error: {status_code} - {body}")


@dataclass
class MediaResult:
    """A featured image, freshly uploaded or found in the library."""

    id: int
    reused: bool = False


@dataclass
class PostResult:
    """A created or updated post."""

    id: int
    link: str
    updated: bool


def media_search_term(filename: str) -> str:
    """Filename stem with every non-alphanumeric character replaced by '-'."""
    return _NON_ALNUM_RE.sub("-", Path(filename).stem)


def media_content_type(filename: str) -> str:
    ext = Path(filename).suffix.lstrip(".").lower()
    return MEDIA_CONTENT_TYPES.get(ext, DEFAULT_MEDIA_CONTENT_TYPE)


def content_disposition(filename: str) -> str:
    """attachment header; non-ASCII names go in the RFC 5987 filename* form."""
    safe = sanitize_filename(filename)
    try:
        safe.encode("ascii")
    except UnicodeEncodeError:
        fallback = safe.encode("ascii", "ignore").decode("ascii") or "upload"
        return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(safe)}"
    return f'attachment; filename="{safe}"'


class WordPressClient:
    """Thin async wrapper over the posts and media endpoints."""

    def __init__(
        self,
        settings: WordPressSettings,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the client.

        Args:
            settings: Site URL, credentials and timeout.
            transport: Optional httpx transport (tests pass a MockTransport).
        """
        self.settings = settings
        self._client = httpx.AsyncClient(
            base_url=settings.api_base,
            auth=(settings.wp_user or "", settings.wp_app_password or ""),
            timeout=settings.timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "WordPressClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    # ──────────────────────────────────────────────
    # Posts
    # ──────────────────────────────────────────────

    async def find_post(self, slug: str) -> dict[str, Any] | None:
        """Find a published or draft post by slug."""
        response = await self._client.get(
            "/posts", params={"slug": slug, "status": "publish,draft"}
        )
        if not response.is_success:
            logger.warning("Post lookup for '%s' failed: HTTP %d", slug, response.status_code)
            return None

        posts = response.json()
        return posts[0] if posts else None

    async def upsert_post(
        self,
        title: str,
        content: str,
        excerpt: str,
        slug: str,
        featured_media: int | None = None,
    ) -> PostResult:
        """
        Create the post, or update it if one with this slug exists.

        Always publishes. Raises WordPressError on a non-2xx response.
        """
        existing = await self.find_post(slug)

        payload: dict[str, Any] = {
            "title": title,
            "content": content,
            "excerpt": excerpt,
            "slug": slug,
            "status": "publish",
        }
        if featured_media:
            payload["featured_media"] = featured_media

        if existing:
            response = await self._client.put(f"/posts/{existing['id']}", json=payload)
        else:
            response = await self._client.post("/posts", json=payload)

        if not response.is_success:
            raise WordPressError(response.status_code, response.text)

        data = response.json()
        return PostResult(
            id=data.get("id", existing["id"] if existing else 0),
            link=data.get("link", ""),
            updated=existing is not None,
        )

    # ──────────────────────────────────────────────
    # Media
    # ──────────────────────────────────────────────

    async def find_media(self, filename: str) -> dict[str, Any] | None:
        """Best-effort lookup of an already uploaded image."""
        term = media_search_term(filename)
        response = await self._client.get("/media", params={"search": term})
        if not response.is_success:
            logger.warning("Media search for '%s' failed: HTTP %d", term, response.status_code)
            return None

        needle = term.lower()
        for item in response.json():
            if needle in str(item.get("slug", "")).lower():
                return item
        return None

    async def upload_media(self, path: Path, alt_text: str | None = None) -> MediaResult | None:
        """
        Upload an image unless the library already has it.

        Returns None if the file is unreadable or the upload is rejected.
        """
        try:
            data = path.read_bytes()
        except OSError as e:
            logger.warning("Cover image not readable: %s (%s)", path, e)
            return None

        existing = await self.find_media(path.name)
        if existing:
            logger.info("Reusing media %s for %s", existing["id"], path.name)
            return MediaResult(id=existing["id"], reused=True)

        response = await self._client.post(
            "/media",
            content=data,
            headers={
                "Content-Type": media_content_type(path.name),
                "Content-Disposition": content_disposition(path.name),
            },
        )
        if not response.is_success:
            logger.warning(
                "Upload of %s rejected: HTTP %d %s",
                path.name, response.status_code, response.text,
            )
            return None

        media_id = response.json()["id"]

        if alt_text:
            alt_response = await self._client.put(f"/media/{media_id}", json={"alt_text": alt_text})
            if not alt_response.is_success:
                logger.warning("Could not set alt text on media %s: HTTP %d", media_id, alt_response.status_code)

        logger.info("Uploaded %s as media %s", path.name, media_id)
        return MediaResult(id=media_id)
