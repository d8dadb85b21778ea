"""
Global configuration, constants, and path resolution.

All magic numbers and default values live here.
Tool code imports from config — never hardcodes.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Final, Mapping

# ──────────────────────────────────────────────
# Directory Layout
# ──────────────────────────────────────────────

PROJECTS_ROOT: Final[Path] = Path("projects")
SITE_CONTENT_ROOT: Final[Path] = Path("site/src/content/novels")
SITE_ASSETS_ROOT: Final[Path] = Path("site/public/assets")

CHAPTERS_DIRNAME: Final[str] = "chapters"
ASSETS_DIRNAME: Final[str] = "_assets"
COVER_ASSETS_SUBDIR: Final[str] = "chapters"
NOVEL_META_FILENAME: Final[str] = "novel.json"

DEFAULT_NOVEL: Final[str] = "2028ww3"

# ──────────────────────────────────────────────
# Chapter Conventions
# ──────────────────────────────────────────────

CHAPTER_SUFFIX: Final[str] = ".md"

# Sort key for files that do not follow Chap_<N>[-<L>]_...
UNORDERED_CHAPTER: Final[int] = 999

# Front-matter keys that survive a re-sync when the source omits them
PRESERVED_FIELDS: Final[tuple[str, ...]] = ("cover", "cover_url", "cover_media_id")

# Optional site-schema fields passed through from the source
PASSTHROUGH_FIELDS: Final[tuple[str, ...]] = ("pov", "timeline")

# ──────────────────────────────────────────────
# Asset Mirroring
# ──────────────────────────────────────────────

IMAGE_EXTENSIONS: Final[tuple[str, ...]] = (
    ".jpg",
    ".jpeg",
    ".png",
    ".gif",
    ".webp",
    ".svg",
)

# ──────────────────────────────────────────────
# Publishing Defaults
# ──────────────────────────────────────────────

DEFAULT_WP_URL: Final[str] = "https://blog.cqi365.net"
DEFAULT_NOVEL_SITE_URL: Final[str] = "https://novels.cqi365.net"
DEFAULT_HTTP_TIMEOUT_SEC: Final[float] = 30.0
DEFAULT_EXCERPT_CHARS: Final[int] = 500

SITE_NAME: Final[str] = "Novels365"

MEDIA_CONTENT_TYPES: Final[dict[str, str]] = {
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "gif": "image/gif",
    "webp": "image/webp",
}
DEFAULT_MEDIA_CONTENT_TYPE: Final[str] = "image/jpeg"

# ──────────────────────────────────────────────
# Novel Registry
# ──────────────────────────────────────────────

NOVELS: Final[dict[str, dict[str, str]]] = {
    "2028ww3": {
        "title": "2028 第三次世界大戰",
        "category": "小說連載",
    },
}


@dataclass(frozen=True)
class SiteLayout:
    """Where the authoring tree and the site tree live on disk."""

    projects_root: Path
    content_root: Path
    assets_root: Path

    def chapters_dir(self, novel_id: str) -> Path:
        return self.projects_root / novel_id / CHAPTERS_DIRNAME

    def source_assets_dir(self, novel_id: str) -> Path:
        return self.projects_root / novel_id / ASSETS_DIRNAME

    def content_dir(self, novel_id: str) -> Path:
        return self.content_root / novel_id

    def public_assets_dir(self, novel_id: str) -> Path:
        return self.assets_root / novel_id


def default_layout() -> SiteLayout:
    """Build the layout from the module constants (read at call time)."""
    return SiteLayout(
        projects_root=PROJECTS_ROOT,
        content_root=SITE_CONTENT_ROOT,
        assets_root=SITE_ASSETS_ROOT,
    )


@dataclass(frozen=True)
class WordPressSettings:
    """
    Connection settings for the WordPress publisher.

    Passed explicitly into the publisher; from_env() is the only place
    the process environment is read.
    """

    wp_url: str = DEFAULT_WP_URL
    wp_user: str | None = None
    wp_app_password: str | None = field(default=None, repr=False)
    novel_site_url: str = DEFAULT_NOVEL_SITE_URL
    timeout: float = DEFAULT_HTTP_TIMEOUT_SEC

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "WordPressSettings":
        """Read settings from environment variables, falling back to defaults."""
        env = os.environ if environ is None else environ

        timeout_raw = env.get("WP_TIMEOUT")
        try:
            timeout = float(timeout_raw) if timeout_raw else DEFAULT_HTTP_TIMEOUT_SEC
        except ValueError:
            raise ValueError(f"WP_TIMEOUT must be a number, got '{timeout_raw}'")

        return cls(
            wp_url=(env.get("WP_URL") or DEFAULT_WP_URL).rstrip("/"),
            wp_user=env.get("WP_USER") or None,
            wp_app_password=env.get("WP_APP_PASSWORD") or None,
            novel_site_url=(env.get("NOVEL_SITE_URL") or DEFAULT_NOVEL_SITE_URL).rstrip("/"),
            timeout=timeout,
        )

    def missing_credentials(self) -> list[str]:
        """Names of required environment values that are unset."""
        missing = []
        if not self.wp_user:
            missing.append("WP_USER")
        if not self.wp_app_password:
            missing.append("WP_APP_PASSWORD")
        return missing

    @property
    def api_base(self) -> str:
        return f"{self.wp_url.rstrip('/')}/wp-json/wp/v2"

    def as_dict(self) -> dict[str, object]:
        return {
            "wp_url": self.wp_url,
            "wp_user": self.wp_user,
            "wp_app_password": self.wp_app_password,
            "novel_site_url": self.novel_site_url,
            "timeout": self.timeout,
        }
