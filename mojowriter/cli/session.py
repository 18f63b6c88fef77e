"""Interactive editing session: the UI layer around EditorCoordinator."""

import inspect
import logging
import shlex
from typing import Callable, Dict, List, Optional

import click

from ..ai.content_generator import ANALYSIS_ASPECTS
from ..core.layout import PaneLayoutManager
from ..core.project import Chapter, Project
from ..editor.coordinator import EditorCoordinator, OperationOutcome
from ..errors import MojoWriterError, ProjectError
from ..io.project_library import ProjectLibrary

logger = logging.getLogger(__name__)

PANE_NAMES = ["Ideas", "Chapters", "Editor"]

HELP_TEXT = """\
Project:   genre [NAME] | ideas | idea N | outline | chapters | add TITLE [-- DESCRIPTION]
           open PROJECT_ID | store | export-preview
Chapter:   select N | show | write | append TEXT | undo | redo | save | revert | delete N
AI:        generate | grammar | humanize | analyze [ASPECT,...] | suggest
Links:     connections | connect N M [DESCRIPTION] | disconnect N M
Layout:    layout | width PX | drag HANDLE DX | reset-layout
Other:     help | quit"""

OUTCOME_MESSAGES = {
    OperationOutcome.ABORTED: "Cancelled.",
    OperationOutcome.BUSY: "Another operation is still running for this chapter.",
    OperationOutcome.NO_CHAPTER: "Select a chapter first.",
    OperationOutcome.UNCHANGED: "Nothing changed.",
}


async def confirm_with_prompt(message: str) -> bool:
    """Confirmation capability backed by a terminal prompt."""
    return click.confirm(message, default=False)


class EditorSession:
    """Reads commands, forwards them to the coordinator and prints the results."""

    def __init__(
        self,
        coordinator: EditorCoordinator,
        layout: PaneLayoutManager,
        library: Optional[ProjectLibrary] = None,
        genres: Optional[List[str]] = None,
    ):
        self.coordinator = coordinator
        self.layout = layout
        self.library = library
        self.genres = genres or []
        self._commands: Dict[str, Callable] = {
            "help": self.cmd_help,
            "genre": self.cmd_genre,
            "ideas": self.cmd_ideas,
            "idea": self.cmd_idea,
            "outline": self.cmd_outline,
            "chapters": self.cmd_chapters,
            "add": self.cmd_add,
            "select": self.cmd_select,
            "show": self.cmd_show,
            "write": self.cmd_write,
            "append": self.cmd_append,
            "undo": self.cmd_undo,
            "redo": self.cmd_redo,
            "save": self.cmd_save,
            "revert": self.cmd_revert,
            "delete": self.cmd_delete,
            "generate": self.cmd_generate,
            "grammar": self.cmd_grammar,
            "humanize": self.cmd_humanize,
            "analyze": self.cmd_analyze,
            "suggest": self.cmd_suggest,
            "connections": self.cmd_connections,
            "connect": self.cmd_connect,
            "disconnect": self.cmd_disconnect,
            "layout": self.cmd_layout,
            "width": self.cmd_width,
            "drag": self.cmd_drag,
            "reset-layout": self.cmd_reset_layout,
            "open": self.cmd_open,
            "store": self.cmd_store,
            "export-preview": self.cmd_export_preview,
        }

    @property
    def project(self) -> Project:
        return self.coordinator.project

    async def run(self) -> None:
        """Prompt for commands until the user quits."""
        click.echo(f"Editing '{self.project.title}'. Type 'help' for commands.")
        while True:
            try:
                line = click.prompt(self._prompt(), prompt_suffix=" ", default="", show_default=False)
            except (EOFError, click.Abort):
                click.echo()
                break
            if not await self.execute(line):
                break

    def _prompt(self) -> str:
        chapter = self.coordinator.active_chapter
        if chapter is None:
            return "mojowriter>"
        return f"[{self.project.chapter_index(chapter.id) + 1}] mojowriter>"

    async def execute(self, line: str) -> bool:
        """Run one command line. Returns False when the session should end."""
        try:
            parts = shlex.split(line)
        except ValueError as e:
            click.echo(f"Could not parse command: {e}")
            return True
        if not parts:
            return True

        name, args = parts[0].lower(), parts[1:]
        if name in ("quit", "exit"):
            return False
        handler = self._commands.get(name)
        if handler is None:
            click.echo(f"Unknown command '{name}'. Type 'help' for commands.")
            return True

        try:
            result = handler(args)
            if inspect.isawaitable(result):
                await result
        except click.Abort:
            click.echo()
            click.echo(OUTCOME_MESSAGES[OperationOutcome.ABORTED])
        except (MojoWriterError, OSError) as e:
            logger.error(f"Command '{name}' failed: {e}")
            click.echo(f"❌ {e}", err=True)
        self._report()
        return True

    def _report(self) -> None:
        if self.coordinator.error:
            click.echo(f"Error: {self.coordinator.error}", err=True)
            self.coordinator.dismiss_error()
        if self.coordinator.notice:
            click.echo(self.coordinator.notice)
            self.coordinator.notice = None

    def _outcome(self, outcome: OperationOutcome, success: str = "") -> None:
        if outcome is OperationOutcome.APPLIED and success:
            click.echo(success)
        elif outcome in OUTCOME_MESSAGES:
            click.echo(OUTCOME_MESSAGES[outcome])

    def _chapter_at(self, value: str) -> Optional[Chapter]:
        try:
            index = int(value) - 1
        except ValueError:
            click.echo(f"Not a chapter number: {value}")
            return None
        if not 0 <= index < len(self.project.chapters):
            click.echo(f"No chapter {value}. There are {len(self.project.chapters)} chapters.")
            return None
        return self.project.chapters[index]

    # Project commands

    def cmd_help(self, args: List[str]) -> None:
        click.echo(HELP_TEXT)

    def cmd_genre(self, args: List[str]) -> None:
        if args:
            genre = " ".join(args)
            if self.genres and genre not in self.genres:
                click.echo(f"Unknown genre. Choose one of: {', '.join(self.genres)}")
                return
            self.project.genre = genre
        click.echo(f"Genre: {self.project.genre}")

    async def cmd_ideas(self, args: List[str]) -> None:
        click.echo(f"Generating {self.project.genre} ideas...")
        outcome = await self.coordinator.generate_ideas()
        self._outcome(outcome)
        if outcome is OperationOutcome.APPLIED:
            for number, idea in enumerate(self.project.ideas, start=1):
                click.echo(f"{number}. {idea.title}\n   {idea.synopsis}")

    def cmd_idea(self, args: List[str]) -> None:
        if not args or not args[0].isdigit() or not 0 < int(args[0]) <= len(self.project.ideas):
            click.echo("Usage: idea N (see 'ideas')")
            return
        idea = self.project.ideas[int(args[0]) - 1]
        self._outcome(self.coordinator.select_idea(idea.id), f"Selected '{idea.title}'.")

    async def cmd_outline(self, args: List[str]) -> None:
        outcome = await self.coordinator.generate_outline()
        self._outcome(outcome)
        if outcome is OperationOutcome.APPLIED:
            self.cmd_chapters([])

    def cmd_chapters(self, args: List[str]) -> None:
        if not self.project.chapters:
            click.echo("No chapters yet. Use 'outline' or 'add'.")
            return
        for number, chapter in enumerate(self.project.chapters, start=1):
            marker = "*" if chapter.id == self.coordinator.active_chapter_id else " "
            click.echo(f"{marker}{number:>3}. {chapter.chapter_title}")
            if chapter.chapter_description:
                click.echo(f"      {chapter.chapter_description}")

    def cmd_add(self, args: List[str]) -> None:
        if not args:
            click.echo("Usage: add TITLE [-- DESCRIPTION]")
            return
        if "--" in args:
            split = args.index("--")
            title, description = " ".join(args[:split]), " ".join(args[split + 1:])
        else:
            title, description = " ".join(args), ""
        self.project.add_chapter(Chapter(chapter_title=title, chapter_description=description))
        click.echo(f"Added chapter {len(self.project.chapters)}: {title}")

    def cmd_open(self, args: List[str]) -> None:
        if self.library is None:
            click.echo("No project library configured.")
            return
        if len(args) != 1:
            click.echo("Usage: open PROJECT_ID (see 'mojowriter project list')")
            return
        try:
            loaded = self.library.load_project(args[0])
        except ProjectError as e:
            click.echo(str(e))
            return
        if not self.coordinator.open_project(loaded):
            click.echo(OUTCOME_MESSAGES[OperationOutcome.BUSY])
            return
        click.echo(f"Opened '{loaded.title}' ({len(loaded.chapters)} chapters).")

    def cmd_store(self, args: List[str]) -> None:
        if self.library is None:
            click.echo("No project library configured.")
            return
        if not self.project.name:
            self.project.name = self.project.title
        self.library.save_project(self.project)
        click.echo(f"Project stored as {self.project.id}.")

    def cmd_export_preview(self, args: List[str]) -> None:
        book = self.coordinator.export_book()
        click.echo(f"{book.title}: {len(book.chapters)} chapters")
        for number, chapter in enumerate(book.chapters, start=1):
            click.echo(f"{number:>3}. {chapter.chapter_title} ({len(chapter.present_text.split())} words)")

    # Chapter commands

    def cmd_select(self, args: List[str]) -> None:
        chapter = self._chapter_at(args[0]) if args else None
        if chapter is None:
            return
        self._outcome(self.coordinator.select_chapter(chapter.id))
        self.cmd_show([])

    def cmd_show(self, args: List[str]) -> None:
        chapter = self.coordinator.active_chapter
        if chapter is None:
            click.echo(OUTCOME_MESSAGES[OperationOutcome.NO_CHAPTER])
            return
        history = self.coordinator.history
        click.echo(f"== {chapter.chapter_title} ==")
        click.echo(self.coordinator.current_content or "(empty)")
        click.echo(
            f"-- undo: {'yes' if history.can_undo(chapter.id) else 'no'}, "
            f"redo: {'yes' if history.can_redo(chapter.id) else 'no'}"
        )
        if self.coordinator.analysis_result:
            click.echo("== AI Writing Assistant ==")
            click.echo(self.coordinator.analysis_result)

    def cmd_write(self, args: List[str]) -> None:
        if self.coordinator.active_chapter is None:
            click.echo(OUTCOME_MESSAGES[OperationOutcome.NO_CHAPTER])
            return
        click.echo("Enter the chapter text. Finish with a line containing only '.'")
        lines = []
        while True:
            line = click.prompt("", prompt_suffix="", default="", show_default=False)
            if line == ".":
                break
            lines.append(line)
        self._outcome(self.coordinator.edit("\n".join(lines)), "Chapter updated.")

    def cmd_append(self, args: List[str]) -> None:
        addition = " ".join(args)
        current = self.coordinator.current_content
        text = f"{current}\n{addition}" if current else addition
        self._outcome(self.coordinator.edit(text), "Chapter updated.")

    def cmd_undo(self, args: List[str]) -> None:
        self._outcome(self.coordinator.undo(), "Undone.")

    def cmd_redo(self, args: List[str]) -> None:
        self._outcome(self.coordinator.redo(), "Redone.")

    def cmd_save(self, args: List[str]) -> None:
        self._outcome(self.coordinator.save())

    async def cmd_revert(self, args: List[str]) -> None:
        self._outcome(await self.coordinator.revert())

    async def cmd_delete(self, args: List[str]) -> None:
        chapter = self._chapter_at(args[0]) if args else None
        if chapter is None:
            return
        self._outcome(await self.coordinator.delete_chapter(chapter.id), f"Deleted '{chapter.chapter_title}'.")

    # AI commands

    async def cmd_generate(self, args: List[str]) -> None:
        self._outcome(await self.coordinator.generate_chapter(), "Chapter drafted. Use 'undo' to go back.")

    async def cmd_grammar(self, args: List[str]) -> None:
        self._outcome(await self.coordinator.fix_grammar(), "Grammar fixed. Use 'undo' to go back.")

    async def cmd_humanize(self, args: List[str]) -> None:
        self._outcome(await self.coordinator.humanize(), "Chapter rewritten. Use 'undo' to go back.")

    async def cmd_analyze(self, args: List[str]) -> None:
        if args:
            aspects = [a.strip() for a in " ".join(args).split(",") if a.strip()]
        else:
            aspects = list(ANALYSIS_ASPECTS)
        self._outcome(await self.coordinator.analyze(aspects))
        if self.coordinator.analysis_result:
            click.echo(self.coordinator.analysis_result)

    async def cmd_suggest(self, args: List[str]) -> None:
        self._outcome(await self.coordinator.suggest_edits())
        if self.coordinator.analysis_result:
            click.echo(self.coordinator.analysis_result)

    # Connection commands

    def cmd_connections(self, args: List[str]) -> None:
        chapter = self.coordinator.active_chapter
        if chapter is None:
            click.echo(OUTCOME_MESSAGES[OperationOutcome.NO_CHAPTER])
            return
        if not chapter.connections:
            click.echo("No connections yet.")
        for conn in chapter.connections:
            target = self.project.get_chapter(conn.target_id)
            title = target.chapter_title if target else "Unknown Chapter"
            click.echo(f"-> {title}: {conn.description or 'No description'}")

    def cmd_connect(self, args: List[str]) -> None:
        if len(args) < 2:
            click.echo("Usage: connect N M [DESCRIPTION]")
            return
        source, target = self._chapter_at(args[0]), self._chapter_at(args[1])
        if source is None or target is None:
            return
        if self.coordinator.add_connection(source.id, target.id, " ".join(args[2:])):
            click.echo(f"Connected '{source.chapter_title}' -> '{target.chapter_title}'.")
        else:
            click.echo("Cannot connect a chapter to itself or add the same connection twice.")

    def cmd_disconnect(self, args: List[str]) -> None:
        if len(args) != 2:
            click.echo("Usage: disconnect N M")
            return
        source, target = self._chapter_at(args[0]), self._chapter_at(args[1])
        if source is None or target is None:
            return
        if self.coordinator.remove_connection(source.id, target.id):
            click.echo("Connection removed.")
        else:
            click.echo("No such connection.")

    # Layout commands

    def cmd_layout(self, args: List[str]) -> None:
        names = PANE_NAMES if len(PANE_NAMES) == self.layout.pane_count else [
            f"Pane {i + 1}" for i in range(self.layout.pane_count)
        ]
        for name, percent, pixels in zip(names, self.layout.widths, self.layout.pixel_widths()):
            click.echo(f"{name:<10} {percent:6.2f}%  {pixels:7.1f}px")

    def cmd_width(self, args: List[str]) -> None:
        try:
            self.layout.set_container_width(float(args[0]))
        except (IndexError, ValueError):
            click.echo("Usage: width PX")
            return
        self.cmd_layout([])

    def cmd_drag(self, args: List[str]) -> None:
        try:
            handle, delta = int(args[0]), float(args[1])
        except (IndexError, ValueError):
            click.echo("Usage: drag HANDLE DX")
            return
        try:
            started = self.layout.begin_drag(handle, 0.0)
        except IndexError as e:
            click.echo(str(e))
            return
        if started:
            self.layout.drag_to(delta)
        self.layout.end_drag()
        self.cmd_layout([])

    def cmd_reset_layout(self, args: List[str]) -> None:
        self.layout.reset()
        self.cmd_layout([])
