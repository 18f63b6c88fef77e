"""Shared fakes for Mojo Writer tests."""

import asyncio
from typing import List, Optional

import pytest

from mojowriter.core.project import BookIdea, Chapter, Project
from mojowriter.editor.coordinator import EditorCoordinator
from mojowriter.io.chapter_store import MemoryChapterStore


class CountingStore(MemoryChapterStore):
    """In-memory chapter store that counts reads per chapter."""

    def __init__(self, records=None):
        super().__init__(records)
        self.reads = {}

    def get(self, chapter_id):
        self.reads[chapter_id] = self.reads.get(chapter_id, 0) + 1
        return super().get(chapter_id)


class FakeGenerator:
    """ContentGenerator stand-in returning canned text or raising an error."""

    def __init__(self, result: str = "generated text", error: Optional[Exception] = None):
        self.result = result
        self.error = error
        self.calls: List[str] = []
        self.gate: Optional[asyncio.Event] = None

    async def _respond(self, name: str, value):
        self.calls.append(name)
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return value

    async def generate_book_ideas(self, genre, count=3):
        return await self._respond("ideas", [BookIdea(title=f"{genre} idea {i}") for i in range(count)])

    async def generate_chapters(self, title, synopsis, count=12):
        return await self._respond("chapters", [Chapter(chapter_title=f"Part {i}") for i in range(count)])

    async def generate_chapter_content(self, book_title, book_synopsis, chapter_title, chapter_description):
        return await self._respond("chapter", self.result)

    async def analyze_content(self, text, aspects, book_synopsis="", chapter_description=""):
        return await self._respond("analyze", self.result)

    async def suggest_edits(self, text):
        return await self._respond("suggest", self.result)

    async def fix_grammar(self, text):
        return await self._respond("grammar", self.result)

    async def humanize(self, text):
        return await self._respond("humanize", self.result)


class FakeConfirm:
    """Confirmation capability with a fixed answer that records every question."""

    def __init__(self, answer: bool = True):
        self.answer = answer
        self.questions: List[str] = []

    async def __call__(self, message: str) -> bool:
        self.questions.append(message)
        return self.answer


@pytest.fixture
def project():
    book = Project(name="Test Book")
    book.idea = BookIdea(title="The Clockwork Sea", synopsis="A lighthouse keeper finds a map.")
    book.chapters = [
        Chapter(chapter_title="Arrival", chapter_description="The keeper arrives.", id="ch1"),
        Chapter(chapter_title="The Map", chapter_description="A map is found.", id="ch2"),
        Chapter(chapter_title="Departure", chapter_description="The keeper leaves.", id="ch3"),
    ]
    return book


@pytest.fixture
def store():
    return CountingStore({"ch1": "Hello world"})


@pytest.fixture
def generator():
    return FakeGenerator()


@pytest.fixture
def confirm():
    return FakeConfirm(True)


@pytest.fixture
def coordinator(project, generator, store, confirm):
    return EditorCoordinator(project, generator, store, confirm)
