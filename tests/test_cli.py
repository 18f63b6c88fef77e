"""Tests for the command line interface and the interactive session."""

import asyncio
import json

import click
import pytest
from click.testing import CliRunner

from mojowriter import __version__
from mojowriter.cli.main import cli
from mojowriter.cli.session import EditorSession
from mojowriter.core.layout import PaneLayoutManager
from mojowriter.core.project import Project
from mojowriter.editor.coordinator import EditorCoordinator
from mojowriter.io.chapter_store import MemoryChapterStore
from mojowriter.io.project_library import ProjectLibrary


@pytest.fixture
def config_file(tmp_path, monkeypatch):
    for name in ("MOJOWRITER_MODEL", "MOJOWRITER_DATA_DIR"):
        monkeypatch.delenv(name, raising=False)
    path = tmp_path / "mojowriter.yaml"
    path.write_text(f"data_dir: {tmp_path / 'data'}\n", encoding="utf-8")
    return path


@pytest.fixture
def saved_project(tmp_path, project):
    project.chapter_contents.hydrate("ch1", "The keeper climbs the stairs.")
    ProjectLibrary(tmp_path / "data" / "projects.json").save_project(project)
    return project


def invoke(config_file, *args):
    return CliRunner().invoke(cli, ["--config", str(config_file), *args], obj={})


def test_version():
    result = CliRunner().invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_list_without_projects(config_file):
    result = invoke(config_file, "project", "list")
    assert result.exit_code == 0
    assert "No projects saved yet." in result.output


def test_list_shows_saved_project(config_file, saved_project):
    result = invoke(config_file, "project", "list")
    assert result.exit_code == 0
    assert saved_project.id in result.output
    assert "Test Book" in result.output


def test_export_markdown(config_file, saved_project, tmp_path):
    output = tmp_path / "book.md"
    result = invoke(config_file, "export", saved_project.id, "--format", "md", "--output", str(output))

    assert result.exit_code == 0
    text = output.read_text(encoding="utf-8")
    assert text.startswith("# The Clockwork Sea")
    assert "The keeper climbs the stairs." in text


def test_export_unknown_project_fails(config_file):
    result = invoke(config_file, "export", "missing")
    assert result.exit_code == 1


def test_backup_and_import(config_file, saved_project, tmp_path):
    backup = tmp_path / "backup.json"
    result = invoke(config_file, "project", "export", str(backup))
    assert result.exit_code == 0
    assert "Exported 1 project(s)" in result.output

    entries = json.loads(backup.read_text(encoding="utf-8"))
    entries.append({"id": "new", "name": "Imported", "last_modified": 1})
    entries.append({"name": "No id"})
    backup.write_text(json.dumps(entries), encoding="utf-8")

    result = invoke(config_file, "project", "import", str(backup))
    assert result.exit_code == 0
    assert "1 new project(s) added." in result.output
    assert "1 existing project(s) updated." in result.output
    assert "1 invalid entry skipped." in result.output


def test_delete_project(config_file, saved_project):
    result = invoke(config_file, "project", "delete", saved_project.id, "--yes")
    assert result.exit_code == 0
    result = invoke(config_file, "project", "delete", saved_project.id, "--yes")
    assert result.exit_code == 1


@pytest.fixture
def session(coordinator):
    layout = PaneLayoutManager([25, 35, 40], [250, 300, 350], container_width=1000)
    return EditorSession(coordinator, layout, genres=["Fantasy", "Mystery"])


def execute(session, line):
    return asyncio.run(session.execute(line))


def test_session_editing_commands(session, capsys):
    assert execute(session, "select 1")
    assert "Hello world" in capsys.readouterr().out

    execute(session, "append Goodbye")
    assert "Chapter updated." in capsys.readouterr().out
    assert session.coordinator.current_content == "Hello world\nGoodbye"

    execute(session, "undo")
    assert "Undone." in capsys.readouterr().out
    assert session.coordinator.current_content == "Hello world"

    execute(session, "undo")
    assert "Nothing changed." in capsys.readouterr().out


def test_session_generation_and_save(session, store, capsys):
    execute(session, "select 2")
    execute(session, "generate")
    assert "Chapter drafted." in capsys.readouterr().out

    execute(session, "save")
    assert "Chapter saved." in capsys.readouterr().out
    assert store.get("ch2") == "generated text"


def test_session_requires_selection(session, capsys):
    execute(session, "grammar")
    assert "Select a chapter first." in capsys.readouterr().out


def test_session_drag_updates_layout(session, capsys):
    execute(session, "drag 0 50")
    out = capsys.readouterr().out
    assert "30.00%" in out
    assert session.layout.widths[0] == pytest.approx(30)


def test_session_rejects_unknown_genre(session, capsys):
    execute(session, "genre Western")
    assert "Unknown genre" in capsys.readouterr().out
    assert session.project.genre == "Fantasy"


def test_session_quit_and_unknown_command(session, capsys):
    assert execute(session, "frobnicate")
    assert "Unknown command" in capsys.readouterr().out
    assert not execute(session, "quit")


def test_session_store_without_library(session, capsys):
    execute(session, "store")
    assert "No project library configured." in capsys.readouterr().out


def test_session_store_with_library(coordinator, tmp_path, capsys):
    library = ProjectLibrary(tmp_path / "projects.json")
    layout = PaneLayoutManager([50, 50], [100, 100], container_width=800)
    asyncio.run(EditorSession(coordinator, layout, library=library).execute("store"))

    assert isinstance(library.load_project(coordinator.project.id), Project)
    assert "Project stored as" in capsys.readouterr().out


def test_session_open_saved_project(coordinator, tmp_path, capsys):
    library = ProjectLibrary(tmp_path / "projects.json")
    other = Project(name="Second Book")
    library.save_project(other)
    coordinator.select_chapter("ch1")
    layout = PaneLayoutManager([50, 50], [100, 100], container_width=800)
    session = EditorSession(coordinator, layout, library=library)

    asyncio.run(session.execute(f"open {other.id}"))
    assert "Opened 'Second Book'" in capsys.readouterr().out
    assert coordinator.project.id == other.id
    assert coordinator.active_chapter_id is None

    asyncio.run(session.execute("open missing"))
    assert "Project not found" in capsys.readouterr().out


def test_session_reports_corrupt_library_and_keeps_running(coordinator, tmp_path, capsys):
    projects_file = tmp_path / "projects.json"
    projects_file.write_text("{not json", encoding="utf-8")
    layout = PaneLayoutManager([50, 50], [100, 100], container_width=800)
    session = EditorSession(coordinator, layout, library=ProjectLibrary(projects_file))

    assert asyncio.run(session.execute("store"))
    assert "❌ Project library" in capsys.readouterr().err


class FailingStore(MemoryChapterStore):
    def set(self, chapter_id, text):
        raise OSError("disk full")


def test_session_reports_failed_save(project, generator, confirm, capsys):
    coordinator = EditorCoordinator(project, generator, FailingStore({"ch1": "Hello world"}), confirm)
    session = EditorSession(coordinator, PaneLayoutManager([50, 50], [100, 100], container_width=800))
    execute(session, "select 1")
    execute(session, "append More")
    capsys.readouterr()

    assert execute(session, "save")
    assert "❌ disk full" in capsys.readouterr().err
    assert coordinator.current_content == "Hello world\nMore"


def test_session_interrupted_confirmation_cancels_command(project, generator, capsys):
    async def interrupted(message):
        raise click.Abort()

    coordinator = EditorCoordinator(project, generator, MemoryChapterStore({"ch1": "Hello world"}), interrupted)
    session = EditorSession(coordinator, PaneLayoutManager([50, 50], [100, 100], container_width=800))
    execute(session, "select 1")

    assert execute(session, "generate")
    assert "Cancelled." in capsys.readouterr().out
    assert generator.calls == []
    assert not coordinator.is_busy()
