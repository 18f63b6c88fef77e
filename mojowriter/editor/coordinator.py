"""Edit, generate, save and revert coordination for the chapter editor."""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, Dict, Optional, Sequence

from ..ai.content_generator import ContentGenerator
from ..core.history import ContentHistoryStore
from ..core.project import BookIdea, Chapter, Project
from ..errors import GenerationError
from ..io.chapter_store import ChapterStore
from ..io.exporter import ExportBook, build_export

logger = logging.getLogger(__name__)

# Key used for operations that act on the whole project rather than one chapter
PROJECT_SCOPE = "__project__"

ConfirmCallback = Callable[[str], Awaitable[bool]]


class OperationKind(Enum):
    GENERATE_IDEAS = "Idea generation"
    GENERATE_OUTLINE = "Chapter outline generation"
    GENERATE_CHAPTER = "Chapter generation"
    FIX_GRAMMAR = "Grammar fix"
    HUMANIZE = "Humanize"
    ANALYZE = "Analysis"
    SUGGEST_EDITS = "Edit suggestions"
    REVERT = "Revert"
    DELETE = "Delete chapter"


class Phase(Enum):
    IDLE = "idle"
    CONFIRM_PENDING = "confirm_pending"
    PENDING = "pending"


@dataclass(frozen=True)
class OperationState:
    """State of one chapter: Idle, ConfirmPending(kind) or Pending(kind)."""

    phase: Phase = Phase.IDLE
    kind: Optional[OperationKind] = None

    @property
    def is_idle(self) -> bool:
        return self.phase is Phase.IDLE


IDLE = OperationState()


class OperationOutcome(Enum):
    APPLIED = "applied"
    UNCHANGED = "unchanged"
    ABORTED = "aborted"
    NO_CONTENT = "no_content"
    NO_CHAPTER = "no_chapter"
    FAILED = "failed"
    BUSY = "busy"


class EditorCoordinator:
    """
    Routes every chapter mutation through the history store.

    Collaborators are injected: a ContentGenerator for AI work, a ChapterStore
    for saved chapter text, and an async ``confirm(message) -> bool``
    capability provided by the UI layer.

    Rules enforced here:

    - replacing non-empty content (chapter generation, grammar fix, humanize)
      and reverting ask for confirmation first; a decline changes nothing and
      makes no provider call;
    - at most one operation is in flight per chapter, and while one is the
      chapter rejects every other operation (manual edits included);
    - provider failures never touch content; they set ``error`` instead;
    - every async path returns its chapter to Idle in a ``finally`` block.

    Selecting a chapter reads saved text only the first time in a session.
    Later selections reuse the in-memory history even if the saved record was
    changed elsewhere; only revert or reopening the project re-reads it.
    """

    def __init__(
        self,
        project: Project,
        generator: ContentGenerator,
        chapter_store: ChapterStore,
        confirm: ConfirmCallback,
    ):
        self.project = project
        self.generator = generator
        self.chapter_store = chapter_store
        self.confirm = confirm
        self.active_chapter_id: Optional[str] = None
        self.analysis_result: str = ""
        self.error: Optional[str] = None
        self.notice: Optional[str] = None
        self._states: Dict[str, OperationState] = {}

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def history(self) -> ContentHistoryStore:
        return self.project.chapter_contents

    @property
    def active_chapter(self) -> Optional[Chapter]:
        if self.active_chapter_id is None:
            return None
        return self.project.get_chapter(self.active_chapter_id)

    @property
    def current_content(self) -> str:
        if self.active_chapter_id is None:
            return ""
        return self.history.get_current(self.active_chapter_id)

    def state(self, scope: str) -> OperationState:
        return self._states.get(scope, IDLE)

    def is_busy(self, scope: Optional[str] = None) -> bool:
        """True when the given scope (or, with no argument, anything) is not Idle."""
        if scope is None:
            return bool(self._states)
        return scope in self._states

    def dismiss_error(self) -> None:
        self.error = None

    def _set_state(self, scope: str, phase: Phase, kind: OperationKind) -> None:
        self._states[scope] = OperationState(phase, kind)

    def _clear_state(self, scope: str) -> None:
        self._states.pop(scope, None)

    def _fail(self, kind: OperationKind, exc: GenerationError) -> OperationOutcome:
        logger.error(f"{kind.value} failed: {exc}")
        self.error = f"{kind.value} failed. {exc.user_message}"
        return OperationOutcome.FAILED

    # ------------------------------------------------------------------
    # Project level
    # ------------------------------------------------------------------

    def open_project(self, project: Project) -> bool:
        """Switch to another project, dropping all session state."""
        if self.is_busy():
            return False
        self.project = project
        self.active_chapter_id = None
        self.analysis_result = ""
        self.error = None
        self.notice = None
        return True

    async def generate_ideas(self, genre: Optional[str] = None) -> OperationOutcome:
        """Ask for new book ideas; on success the idea list and outline are replaced."""
        if self.is_busy():
            return OperationOutcome.BUSY
        genre = genre or self.project.genre
        self._set_state(PROJECT_SCOPE, Phase.PENDING, OperationKind.GENERATE_IDEAS)
        self.error = None
        try:
            ideas = await self.generator.generate_book_ideas(genre)
        except GenerationError as e:
            return self._fail(OperationKind.GENERATE_IDEAS, e)
        finally:
            self._clear_state(PROJECT_SCOPE)

        self.project.genre = genre
        self.project.set_ideas(ideas)
        self.active_chapter_id = None
        self.analysis_result = ""
        logger.info(f"Generated {len(ideas)} {genre} book ideas")
        return OperationOutcome.APPLIED

    def select_idea(self, idea_id: str) -> OperationOutcome:
        """Choose an idea to outline. Clears the current outline."""
        if self.is_busy():
            return OperationOutcome.BUSY
        idea = self.project.find_idea(idea_id)
        if idea is None:
            return OperationOutcome.NO_CHAPTER
        self.project.select_idea(idea)
        self.active_chapter_id = None
        self.analysis_result = ""
        return OperationOutcome.APPLIED

    async def generate_outline(self) -> OperationOutcome:
        """Generate the chapter list for the selected idea."""
        idea: Optional[BookIdea] = self.project.idea
        if idea is None:
            self.notice = "Select a book idea before generating chapters."
            return OperationOutcome.NO_CONTENT
        if self.is_busy():
            return OperationOutcome.BUSY
        self._set_state(PROJECT_SCOPE, Phase.PENDING, OperationKind.GENERATE_OUTLINE)
        self.error = None
        try:
            chapters = await self.generator.generate_chapters(idea.title, idea.synopsis)
        except GenerationError as e:
            return self._fail(OperationKind.GENERATE_OUTLINE, e)
        finally:
            self._clear_state(PROJECT_SCOPE)

        self.project.set_chapters(chapters)
        self.active_chapter_id = None
        self.analysis_result = ""
        logger.info(f"Generated outline with {len(chapters)} chapters for '{idea.title}'")
        return OperationOutcome.APPLIED

    def add_connection(self, source_id: str, target_id: str, description: str = "") -> bool:
        return self.project.add_connection(source_id, target_id, description)

    def remove_connection(self, source_id: str, target_id: str) -> bool:
        return self.project.remove_connection(source_id, target_id)

    def export_book(self) -> ExportBook:
        """Current text of every chapter, for the export renderer."""
        return build_export(self.project)

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    def select_chapter(self, chapter_id: str) -> OperationOutcome:
        """Make a chapter active, hydrating its history from saved text on first use."""
        if self.project.get_chapter(chapter_id) is None:
            return OperationOutcome.NO_CHAPTER
        if not self.history.has_entry(chapter_id):
            saved = self.chapter_store.get(chapter_id)
            self.history.hydrate(chapter_id, saved or "")
            logger.debug(f"Hydrated chapter {chapter_id} ({'saved' if saved else 'empty'})")
        self.active_chapter_id = chapter_id
        self.analysis_result = ""
        return OperationOutcome.APPLIED

    # ------------------------------------------------------------------
    # Synchronous edits
    # ------------------------------------------------------------------

    def _sync_target(self, chapter_id: Optional[str]):
        chapter_id = chapter_id or self.active_chapter_id
        if chapter_id is None or not self.history.has_entry(chapter_id):
            return None, OperationOutcome.NO_CHAPTER
        if self.is_busy(chapter_id):
            return None, OperationOutcome.BUSY
        return chapter_id, None

    def _apply(self, chapter_id: str, step: Callable[[str], None]) -> OperationOutcome:
        before = self.history.get_history(chapter_id)
        step(chapter_id)
        if self.history.get_history(chapter_id) is before:
            return OperationOutcome.UNCHANGED
        return OperationOutcome.APPLIED

    def edit(self, text: str, chapter_id: Optional[str] = None) -> OperationOutcome:
        """Record typed text for the active chapter."""
        target, refusal = self._sync_target(chapter_id)
        if refusal:
            return refusal
        return self._apply(target, lambda cid: self.history.commit_edit(cid, text))

    def undo(self, chapter_id: Optional[str] = None) -> OperationOutcome:
        target, refusal = self._sync_target(chapter_id)
        if refusal:
            return refusal
        return self._apply(target, self.history.undo)

    def redo(self, chapter_id: Optional[str] = None) -> OperationOutcome:
        target, refusal = self._sync_target(chapter_id)
        if refusal:
            return refusal
        return self._apply(target, self.history.redo)

    def save(self, chapter_id: Optional[str] = None) -> OperationOutcome:
        """Write the present text to durable storage. History is untouched."""
        target, refusal = self._sync_target(chapter_id)
        if refusal:
            return refusal
        self.chapter_store.set(target, self.history.get_current(target))
        self.notice = "Chapter saved."
        return OperationOutcome.APPLIED

    # ------------------------------------------------------------------
    # Confirmed operations
    # ------------------------------------------------------------------

    async def revert(self, chapter_id: Optional[str] = None) -> OperationOutcome:
        """Discard in-memory history and reload the saved text, after confirmation."""
        target, refusal = self._sync_target(chapter_id)
        if refusal:
            return refusal
        self._set_state(target, Phase.CONFIRM_PENDING, OperationKind.REVERT)
        try:
            accepted = await self.confirm(
                "Revert to the last saved version? Undo history for this chapter will be lost."
            )
            if not accepted:
                return OperationOutcome.ABORTED
            saved = self.chapter_store.get(target)
            self.history.revert(target, saved or "")
            self.notice = "Chapter reverted to the last saved version."
            return OperationOutcome.APPLIED
        finally:
            self._clear_state(target)

    async def delete_chapter(self, chapter_id: str) -> OperationOutcome:
        """
        Delete a chapter after confirmation.

        The saved record is removed first since it is the only step that can
        fail; the outline entry, history, connections and active pointer then
        go together.
        """
        if self.project.get_chapter(chapter_id) is None:
            return OperationOutcome.NO_CHAPTER
        if self.is_busy(chapter_id) or self.is_busy(PROJECT_SCOPE):
            return OperationOutcome.BUSY
        self._set_state(chapter_id, Phase.CONFIRM_PENDING, OperationKind.DELETE)
        try:
            if not await self.confirm("Delete this chapter? This cannot be undone."):
                return OperationOutcome.ABORTED
            self.chapter_store.delete(chapter_id)
            if self.active_chapter_id == chapter_id:
                self.active_chapter_id = None
                self.analysis_result = ""
            self.project.remove_chapter(chapter_id)
            logger.info(f"Deleted chapter {chapter_id}")
            return OperationOutcome.APPLIED
        finally:
            self._clear_state(chapter_id)

    async def _replace_content(
        self,
        kind: OperationKind,
        produce: Callable[[Chapter, str], Awaitable[str]],
        confirm_message: str,
        requires_content: bool,
    ) -> OperationOutcome:
        chapter = self.active_chapter
        if chapter is None or not self.history.has_entry(chapter.id):
            return OperationOutcome.NO_CHAPTER
        chapter_id = chapter.id
        if self.is_busy(chapter_id) or self.is_busy(PROJECT_SCOPE):
            return OperationOutcome.BUSY

        text = self.history.get_current(chapter_id)
        if requires_content and not text.strip():
            self.notice = f"There is no content for {kind.value.lower()}."
            return OperationOutcome.NO_CONTENT

        try:
            if text.strip():
                self._set_state(chapter_id, Phase.CONFIRM_PENDING, kind)
                if not await self.confirm(confirm_message):
                    return OperationOutcome.ABORTED

            self._set_state(chapter_id, Phase.PENDING, kind)
            self.error = None
            try:
                result = await produce(chapter, text)
            except GenerationError as e:
                return self._fail(kind, e)

            outcome = self._apply(chapter_id, lambda cid: self.history.commit_edit(cid, result))
            logger.info(f"{kind.value} finished for chapter {chapter_id}: {outcome.value}")
            return outcome
        finally:
            self._clear_state(chapter_id)

    async def generate_chapter(self) -> OperationOutcome:
        """Draft the active chapter with AI, replacing its text."""

        async def produce(chapter: Chapter, text: str) -> str:
            idea = self.project.idea
            return await self.generator.generate_chapter_content(
                book_title=self.project.title,
                book_synopsis=idea.synopsis if idea else "",
                chapter_title=chapter.chapter_title,
                chapter_description=chapter.chapter_description,
            )

        return await self._replace_content(
            OperationKind.GENERATE_CHAPTER,
            produce,
            "This will replace the existing chapter content. Continue?",
            requires_content=False,
        )

    async def fix_grammar(self) -> OperationOutcome:
        async def produce(chapter: Chapter, text: str) -> str:
            return await self.generator.fix_grammar(text)

        return await self._replace_content(
            OperationKind.FIX_GRAMMAR,
            produce,
            "Replace the chapter with the grammar-corrected version?",
            requires_content=True,
        )

    async def humanize(self) -> OperationOutcome:
        async def produce(chapter: Chapter, text: str) -> str:
            return await self.generator.humanize(text)

        return await self._replace_content(
            OperationKind.HUMANIZE,
            produce,
            "Replace the chapter with a rewritten version?",
            requires_content=True,
        )

    # ------------------------------------------------------------------
    # Read-only AI feedback
    # ------------------------------------------------------------------

    async def _feedback(
        self,
        kind: OperationKind,
        produce: Callable[[Chapter, str], Awaitable[str]],
        empty_message: str,
    ) -> OperationOutcome:
        chapter = self.active_chapter
        if chapter is None:
            return OperationOutcome.NO_CHAPTER
        chapter_id = chapter.id
        if self.is_busy(chapter_id) or self.is_busy(PROJECT_SCOPE):
            return OperationOutcome.BUSY

        text = self.history.get_current(chapter_id)
        if not text.strip():
            self.analysis_result = empty_message
            return OperationOutcome.NO_CONTENT

        self._set_state(chapter_id, Phase.PENDING, kind)
        self.analysis_result = ""
        self.error = None
        try:
            result = await produce(chapter, text)
        except GenerationError as e:
            return self._fail(kind, e)
        finally:
            self._clear_state(chapter_id)

        # The result belongs to its chapter; do not show it on another one
        if self.active_chapter_id == chapter_id:
            self.analysis_result = result
        return OperationOutcome.APPLIED

    async def analyze(self, aspects: Sequence[str]) -> OperationOutcome:
        """Analyze the active chapter for the given aspects."""
        aspects = list(aspects)
        if self.active_chapter is not None and not aspects:
            self.analysis_result = "Please select at least one aspect to analyze."
            return OperationOutcome.NO_CONTENT

        async def produce(chapter: Chapter, text: str) -> str:
            idea = self.project.idea
            return await self.generator.analyze_content(
                text,
                aspects,
                book_synopsis=idea.synopsis if idea else "",
                chapter_description=chapter.chapter_description,
            )

        return await self._feedback(OperationKind.ANALYZE, produce, "There is no content to analyze.")

    async def suggest_edits(self) -> OperationOutcome:
        async def produce(chapter: Chapter, text: str) -> str:
            return await self.generator.suggest_edits(text)

        return await self._feedback(OperationKind.SUGGEST_EDITS, produce, "There is no content to edit.")
