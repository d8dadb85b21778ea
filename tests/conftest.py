"""Shared test fixtures for NovelPress."""

import json
import sys
from pathlib import Path

import httpx
import pytest

# Fix ModuleNotFoundError when running locally without editable install
sys.path.insert(0, str(Path(__file__).parents[1] / "src"))

from novelpress.config import SiteLayout, WordPressSettings  # noqa: E402


@pytest.fixture(autouse=True)
def isolate_layout(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> SiteLayout:
    """
    Autouse: redirect the projects and site roots into tmp_path.

    Prevents tests from touching a real authoring tree.
    Returns the temporary layout.
    """
    import novelpress.config as cfg

    layout = SiteLayout(
        projects_root=tmp_path / "projects",
        content_root=tmp_path / "site" / "src" / "content" / "novels",
        assets_root=tmp_path / "site" / "public" / "assets",
    )
    layout.projects_root.mkdir()

    monkeypatch.setattr(cfg, "PROJECTS_ROOT", layout.projects_root)
    monkeypatch.setattr(cfg, "SITE_CONTENT_ROOT", layout.content_root)
    monkeypatch.setattr(cfg, "SITE_ASSETS_ROOT", layout.assets_root)

    for var in ("WP_URL", "WP_USER", "WP_APP_PASSWORD", "NOVEL_SITE_URL", "WP_TIMEOUT"):
        monkeypatch.delenv(var, raising=False)

    return layout


@pytest.fixture
def sample_novel(isolate_layout: SiteLayout) -> dict:
    """
    Create the default novel with two conforming chapters, one
    non-conforming chapter, and a small asset tree.
    """
    novel_id = "2028ww3"
    chapters_dir = isolate_layout.chapters_dir(novel_id)
    chapters_dir.mkdir(parents=True)

    (chapters_dir / "Chap_01_AB_The_Beginning.md").write_text(
        "---\n"
        'title: "序章"\n'
        'pov: "林志明"\n'
        "---\n"
        "\n"
        "第一章的內容。\n",
        encoding="utf-8",
    )
    (chapters_dir / "Chap_01-B_AB_Aftermath.md").write_text(
        "No front matter here.\n\n![map](../_assets/chapters/map.png)\n",
        encoding="utf-8",
    )
    (chapters_dir / "notes.md").write_text("Loose notes.\n", encoding="utf-8")

    assets_dir = isolate_layout.source_assets_dir(novel_id)
    (assets_dir / "chapters").mkdir(parents=True)
    (assets_dir / "chapters" / "map.png").write_bytes(b"\x89PNG-map")
    (assets_dir / "chapters" / "ch01-cover.JPG").write_bytes(b"\xff\xd8cover")
    (assets_dir / "draft.txt").write_text("not an image", encoding="utf-8")

    return {
        "id": novel_id,
        "dir": isolate_layout.projects_root / novel_id,
        "chapters_dir": chapters_dir,
        "layout": isolate_layout,
    }


@pytest.fixture
def wp_settings() -> WordPressSettings:
    """Credentials set, URLs pointing at a fake site."""
    return WordPressSettings(
        wp_url="https://blog.example.test",
        wp_user="editor",
        wp_app_password="abcd efgh ijkl",
        novel_site_url="https://novels.example.test",
    )


class FakeWordPress:
    """
    In-memory stand-in for the /wp-json/wp/v2 posts and media endpoints.

    Records every request so tests can assert on method, path and body.
    """

    def __init__(self) -> None:
        self.posts: dict[int, dict] = {}
        self.media: dict[int, dict] = {}
        self.requests: list[httpx.Request] = []
        self.fail_slugs: set[str] = set()
        self._next_id = 100

    def _new_id(self) -> int:
        self._next_id += 1
        return self._next_id

    def add_post(self, slug: str, status: str = "publish") -> int:
        post_id = self._new_id()
        self.posts[post_id] = {"id": post_id, "slug": slug, "status": status,
                               "link": f"https://blog.example.test/{slug}/"}
        return post_id

    def add_media(self, slug: str) -> int:
        media_id = self._new_id()
        self.media[media_id] = {"id": media_id, "slug": slug}
        return media_id

    def calls(self, method: str, path_suffix: str) -> list[httpx.Request]:
        return [
            r for r in self.requests
            if r.method == method and r.url.path.endswith(path_suffix)
        ]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path.split("/wp-json/wp/v2", 1)[-1]
        parts = [p for p in path.split("/") if p]

        if parts == ["posts"] and request.method == "GET":
            slug = request.url.params.get("slug")
            statuses = request.url.params.get("status", "publish").split(",")
            found = [p for p in self.posts.values()
                     if p["slug"] == slug and p["status"] in statuses]
            return httpx.Response(200, json=found)

        if parts == ["posts"] and request.method == "POST":
            payload = json.loads(request.content)
            if payload["slug"] in self.fail_slugs:
                return httpx.Response(500, text="internal error")
            post_id = self.add_post(payload["slug"])
            self.posts[post_id].update(payload)
            return httpx.Response(201, json=self.posts[post_id])

        if len(parts) == 2 and parts[0] == "posts" and request.method == "PUT":
            post_id = int(parts[1])
            payload = json.loads(request.content)
            self.posts[post_id].update(payload)
            return httpx.Response(200, json=self.posts[post_id])

        if parts == ["media"] and request.method == "GET":
            term = request.url.params.get("search", "").lower()
            found = [m for m in self.media.values() if term in m["slug"]]
            return httpx.Response(200, json=found)

        if parts == ["media"] and request.method == "POST":
            disposition = request.headers.get("Content-Disposition", "")
            name = disposition.split('filename="', 1)[-1].split('"', 1)[0]
            media_id = self.add_media(name.rsplit(".", 1)[0].lower())
            return httpx.Response(201, json=self.media[media_id])

        if len(parts) == 2 and parts[0] == "media" and request.method == "PUT":
            media_id = int(parts[1])
            self.media[media_id].update(json.loads(request.content))
            return httpx.Response(200, json=self.media[media_id])

        return httpx.Response(404, json={"code": "rest_no_route"})

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def fake_wp() -> FakeWordPress:
    return FakeWordPress()


@pytest.fixture
def make_fake_wp():
    """Factory for tests that need more than one fake site."""
    return FakeWordPress
