"""Main CLI entry point for Mojo Writer."""

import asyncio
import logging
import sys
from datetime import datetime
from pathlib import Path

import click

from .. import __version__
from ..ai.claude_client import ClaudeClient, GenerationRequest
from ..ai.content_generator import ContentGenerator
from ..config import load_config
from ..core.layout import PaneLayoutManager
from ..core.project import Project
from ..editor.coordinator import EditorCoordinator
from ..errors import MojoWriterError, ProviderAuthInvalid
from ..io.chapter_store import FileChapterStore
from ..io.exporter import build_export, render_docx, render_html, render_markdown
from ..io.project_library import ProjectLibrary
from .session import EditorSession, confirm_with_prompt

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


class UnavailableClient:
    """Stands in for the provider when no API key is configured; every request fails."""

    def __init__(self, error: ProviderAuthInvalid):
        self.error = error

    async def generate(self, request: GenerationRequest) -> str:
        raise self.error


def _library(ctx) -> ProjectLibrary:
    config = ctx.obj['config']
    return ProjectLibrary(config.projects_file, history_limit=config.history_limit)


@click.group()
@click.version_option(version=__version__)
@click.option('--config', 'config_path', type=click.Path(dir_okay=False), help='Path to a mojowriter.yaml file')
@click.option('--verbose', is_flag=True, help='Enable debug logging')
@click.pass_context
def cli(ctx, config_path, verbose):
    """Mojo Writer - AI-assisted book writing"""
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING, format=LOG_FORMAT)
    ctx.ensure_object(dict)
    try:
        ctx.obj['config'] = load_config(config_path)
    except MojoWriterError as e:
        click.echo(f"❌ {e}", err=True)
        sys.exit(1)


@cli.group()
def project():
    """Project management commands"""
    pass


@project.command('list')
@click.pass_context
def list_projects(ctx):
    """List saved projects, newest first"""
    try:
        projects = _library(ctx).list_projects()
    except MojoWriterError as e:
        click.echo(f"❌ Error listing projects: {e}", err=True)
        sys.exit(1)

    if not projects:
        click.echo("📭 No projects saved yet.")
        return
    for entry in projects:
        saved = datetime.fromtimestamp(entry['last_modified'] / 1000).strftime('%Y-%m-%d %H:%M')
        click.echo(f"{entry['id']}  {entry['name']}  (last saved {saved})")


@project.command()
@click.argument('project_id')
@click.option('--yes', is_flag=True, help='Do not ask for confirmation')
@click.pass_context
def delete(ctx, project_id, yes):
    """Delete a saved project"""
    if not yes and not click.confirm('Are you sure you want to delete this project? This cannot be undone.'):
        click.echo("Cancelled.")
        return
    try:
        deleted = _library(ctx).delete_project(project_id)
    except MojoWriterError as e:
        click.echo(f"❌ Error deleting project: {e}", err=True)
        sys.exit(1)
    if deleted:
        click.echo(f"✅ Deleted project {project_id}")
    else:
        click.echo(f"❌ Project not found: {project_id}", err=True)
        sys.exit(1)


@project.command('export')
@click.argument('backup_file', type=click.Path(dir_okay=False), required=False)
@click.pass_context
def export_projects(ctx, backup_file):
    """Export all projects to a backup file"""
    backup_file = backup_file or f"mojo-book-writer-backup-{datetime.now().strftime('%Y-%m-%d')}.json"
    try:
        count = _library(ctx).export_all(backup_file)
    except (MojoWriterError, OSError) as e:
        click.echo(f"❌ Error exporting projects: {e}", err=True)
        sys.exit(1)
    click.echo(f"✅ Exported {count} project(s) to {backup_file}")


@project.command('import')
@click.argument('backup_file', type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def import_projects(ctx, backup_file):
    """Import projects from a backup file"""
    try:
        summary = _library(ctx).import_file(backup_file)
    except (MojoWriterError, OSError) as e:
        click.echo(f"❌ Import failed: {e}", err=True)
        sys.exit(1)
    click.echo("✅ Import successful!")
    click.echo(f"  • {summary.added} new project(s) added.")
    click.echo(f"  • {summary.updated} existing project(s) updated.")
    if summary.skipped:
        click.echo(f"  • {summary.skipped} invalid entr{'y' if summary.skipped == 1 else 'ies'} skipped.")


@cli.command()
@click.argument('project_id')
@click.option('--format', 'format_type', type=click.Choice(['html', 'md', 'docx']), default='html',
              help='Output format')
@click.option('--output', type=click.Path(dir_okay=False), help='Output file path')
@click.pass_context
def export(ctx, project_id, format_type, output):
    """Export a project as a printable book"""
    try:
        loaded = _library(ctx).load_project(project_id)
        book = build_export(loaded)
        output_path = Path(output) if output else Path.cwd() / f"{loaded.title.lower().replace(' ', '_')}.{format_type}"
        if format_type == 'html':
            output_path.write_text(render_html(book), encoding='utf-8')
        elif format_type == 'md':
            output_path.write_text(render_markdown(book), encoding='utf-8')
        else:
            render_docx(book, output_path)
    except (MojoWriterError, OSError) as e:
        click.echo(f"❌ Error exporting book: {e}", err=True)
        sys.exit(1)
    click.echo(f"✅ Exported '{book.title}' ({len(book.chapters)} chapters) to {output_path}")


@cli.command()
@click.option('--project', 'project_id', help='Open a saved project')
@click.option('--genre', help='Genre for a new project')
@click.pass_context
def session(ctx, project_id, genre):
    """Start an interactive writing session"""
    config = ctx.obj['config']
    library = _library(ctx)

    try:
        if project_id:
            current = library.load_project(project_id)
        else:
            current = Project(name="", genre=genre or config.genres[0], history_limit=config.history_limit)
    except MojoWriterError as e:
        click.echo(f"❌ Error opening project: {e}", err=True)
        sys.exit(1)

    try:
        client = ClaudeClient(
            api_key=config.api_key,
            model=config.model,
            fast_model=config.fast_model,
            max_tokens=config.max_tokens,
        )
    except ProviderAuthInvalid as e:
        click.echo(f"⚠️  {e.user_message} AI features are disabled.", err=True)
        client = UnavailableClient(e)

    coordinator = EditorCoordinator(
        project=current,
        generator=ContentGenerator(client),
        chapter_store=FileChapterStore(config.chapters_dir),
        confirm=confirm_with_prompt,
    )
    layout = PaneLayoutManager(config.pane_widths, config.pane_min_px, config.container_width)
    asyncio.run(EditorSession(coordinator, layout, library, config.genres).run())


def main():
    cli(obj={})


if __name__ == '__main__':
    main()
