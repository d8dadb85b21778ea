"""
NovelPress CLI — Click command group.

Commands: clean (strip authoring metadata), sync (chapters + assets into
the site tree), publish (WordPress excerpt posts), list (novels on disk).
"""

import asyncio
import logging
import sys
from pathlib import Path

import click

from novelpress import __version__
from novelpress.config import DEFAULT_NOVEL


# ──────────────────────────────────────────────
# Async helper
# ──────────────────────────────────────────────


def _run_async(coro):
    """Run a publisher coroutine to completion from a Click command."""
    return asyncio.run(coro)


# ──────────────────────────────────────────────
# Main group
# ──────────────────────────────────────────────


@click.group()
@click.version_option(__version__, prog_name="novelpress")
@click.option("-v", "--verbose", count=True, help="Log more (-v info, -vv debug).")
def main(verbose: int) -> None:
    """📚 NovelPress — chapter cleaning, site sync and blog publishing."""
    level = logging.WARNING
    if verbose == 1:
        level = logging.INFO
    elif verbose >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


# ──────────────────────────────────────────────
# Clean
# ──────────────────────────────────────────────


@main.command()
@click.argument("novel", default=DEFAULT_NOVEL)
def clean(novel: str) -> None:
    """Strip authoring metadata from a novel's chapters in place."""
    from novelpress.cleaner import clean_novel
    from novelpress.project import ProjectNotFoundError

    try:
        report = clean_novel(novel)
    except (ProjectNotFoundError, ValueError) as e:
        click.secho(f"✗ {e}", fg="red")
        sys.exit(1)

    click.echo(f"Cleaning {report.total} chapters...")
    for name in report.cleaned:
        click.echo(f"  {click.style('✓', fg='green')} Cleaned: {name}")

    click.echo()
    click.secho(f"Done! {len(report.cleaned)} files cleaned.", fg="green")


# ──────────────────────────────────────────────
# Sync
# ──────────────────────────────────────────────


@main.command()
@click.argument("novel", default=DEFAULT_NOVEL)
def sync(novel: str) -> None:
    """Sync chapters and image assets into the site tree."""
    from novelpress.project import ProjectNotFoundError
    from novelpress.sync import sync_novel

    try:
        report = sync_novel(novel)
    except (ProjectNotFoundError, ValueError) as e:
        click.secho(f"✗ {e}", fg="red")
        sys.exit(1)

    click.echo(f"Syncing {len(report.chapters)} chapters from {novel}...")
    for chapter in report.chapters:
        click.echo(
            f"  {click.style('✓', fg='green')} {chapter['file']} "
            f"(order {chapter['order']}: {chapter['title']})"
        )

    click.echo(f"  Assets: {report.assets_copied} image(s) → {novel}/")
    click.echo()
    click.secho(f"Done! {len(report.chapters)} chapters synced.", fg="green")


# ──────────────────────────────────────────────
# Publish
# ──────────────────────────────────────────────


def _publish_progress(event: str, detail: dict) -> None:
    """Render publisher events as console lines."""
    if event == "processing":
        click.echo(f"Processing: {detail['file']}")
    elif event == "cover":
        click.echo(f"    Cover: {detail['cover']}")
    elif event == "cover_missing":
        click.secho(f"    ⚠ Cover image not found: {detail['path']}", fg="yellow")
    elif event == "cover_reused":
        click.echo(f"    ↻ Cover already exists in WP (ID: {detail['id']})")
    elif event == "cover_uploaded":
        click.echo(f"    {click.style('✓', fg='green')} Cover uploaded (ID: {detail['id']})")
    elif event in ("created", "updated"):
        outcome = detail["outcome"]
        action = "Updated" if event == "updated" else "Created"
        click.echo(f"  {click.style('✓', fg='green')} {action}: {outcome.title}")
        click.echo(f"    URL: {outcome.link}")
        click.echo()
    elif event == "skipped":
        outcome = detail["outcome"]
        click.echo(f"{click.style('⊘', fg='white')} Skipping {outcome.file}: {outcome.error}")
    elif event == "failed":
        outcome = detail["outcome"]
        click.secho(f"  ✗ Failed: {outcome.file}", fg="red", err=True)
        click.echo(f"    Error: {outcome.error}", err=True)
        click.echo()


@main.command()
@click.argument("files", nargs=-1, type=click.Path(path_type=Path))
@click.option("--full-body", is_flag=True,
              help="Send the converted chapter instead of the excerpt.")
def publish(files: tuple[Path, ...], full_body: bool) -> None:
    """Publish chapter files to WordPress as excerpt posts."""
    from novelpress.config import CHAPTER_SUFFIX, WordPressSettings
    from novelpress.publish import publish_chapters

    chapter_files = [f for f in files if f.name.endswith(CHAPTER_SUFFIX)]
    if not chapter_files:
        click.echo("No chapter files to publish.")
        return

    try:
        settings = WordPressSettings.from_env()
    except ValueError as e:
        click.secho(f"Error: {e}", fg="red", err=True)
        sys.exit(1)

    if settings.missing_credentials():
        click.secho(
            "Error: WP_USER and WP_APP_PASSWORD environment variables required.",
            fg="red",
            err=True,
        )
        sys.exit(1)

    click.echo(f"Publishing {len(chapter_files)} chapter(s) to WordPress...")
    click.echo(f"Novel site: {settings.novel_site_url}")
    click.echo()

    report = _run_async(
        publish_chapters(
            chapter_files,
            settings,
            full_body=full_body,
            progress=_publish_progress,
        )
    )

    click.secho(
        f"Done! {report.succeeded} published, {report.count('skipped')} skipped, "
        f"{report.count('failed')} failed.",
        fg="green" if not report.count("failed") else "yellow",
    )


# ──────────────────────────────────────────────
# List
# ──────────────────────────────────────────────


@main.command("list")
def list_novels() -> None:
    """List novels found under the projects directory."""
    from novelpress.project import list_novels as _list

    novels = _list()

    if not novels:
        click.echo("No novels found.")
        click.echo("  Expected: projects/<novel>/chapters/*.md")
        return

    click.echo(f"{'ID':<20} {'Chapters':<10} {'Synced':<8} {'Title'}")
    click.echo("─" * 70)

    for n in novels:
        synced = "yes" if n["synced"] else "no"
        click.echo(f"{n['id']:<20} {n['chapters']:<10} {synced:<8} {n['title']}")


if __name__ == "__main__":
    main()
