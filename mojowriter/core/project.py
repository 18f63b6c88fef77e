"""Book project model: ideas, chapter outline, connections and chapter histories."""

import time
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .history import ContentHistoryStore


def new_id() -> str:
    """Generate a new opaque identifier."""
    return uuid.uuid4().hex


def now_millis() -> int:
    return int(time.time() * 1000)


@dataclass
class BookIdea:
    """A generated book idea."""

    title: str
    synopsis: str = ""
    id: str = field(default_factory=new_id)

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "title": self.title, "synopsis": self.synopsis}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BookIdea":
        return cls(
            title=data.get("title", ""),
            synopsis=data.get("synopsis", ""),
            id=data.get("id") or new_id(),
        )


@dataclass
class ChapterConnection:
    """A reference from one chapter to another (e.g. a foreshadowing link)."""

    target_id: str
    description: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {"target_id": self.target_id, "description": self.description}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ChapterConnection":
        return cls(target_id=data["target_id"], description=data.get("description", ""))


@dataclass
class Chapter:
    """One entry of the book outline. Its text lives in the history store."""

    chapter_title: str
    chapter_description: str = ""
    id: str = field(default_factory=new_id)
    connections: List[ChapterConnection] = field(default_factory=list)

    def connects_to(self, chapter_id: str) -> bool:
        return any(conn.target_id == chapter_id for conn in self.connections)

    def to_dict(self) -> Dict[str, Any]:
        """Convert chapter to dictionary for serialization."""
        return {
            "id": self.id,
            "chapter_title": self.chapter_title,
            "chapter_description": self.chapter_description,
            "connections": [conn.to_dict() for conn in self.connections],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Chapter":
        """Create chapter from dictionary."""
        return cls(
            chapter_title=data.get("chapter_title", ""),
            chapter_description=data.get("chapter_description", ""),
            id=data.get("id") or new_id(),
            connections=[ChapterConnection.from_dict(c) for c in data.get("connections", [])],
        )


class Project:
    """Represents one book being written, including its in-memory chapter histories."""

    def __init__(
        self,
        name: str = "",
        genre: str = "Fantasy",
        project_id: Optional[str] = None,
        history_limit: Optional[int] = None,
    ):
        self.id = project_id or new_id()
        self.name = name
        self.genre = genre
        self.topics: List[str] = []
        self.ideas: List[BookIdea] = []
        self.idea: Optional[BookIdea] = None
        self.chapters: List[Chapter] = []
        self.chapter_contents = ContentHistoryStore(history_limit=history_limit)
        self.cover_image: str = ""
        self.last_modified = now_millis()

    @property
    def title(self) -> str:
        """Book title: the selected idea's title, falling back to the project name."""
        if self.idea and self.idea.title:
            return self.idea.title
        return self.name or "Untitled Book"

    def touch(self) -> None:
        self.last_modified = now_millis()

    def get_chapter(self, chapter_id: str) -> Optional[Chapter]:
        """Get a chapter by id."""
        for chapter in self.chapters:
            if chapter.id == chapter_id:
                return chapter
        return None

    def chapter_index(self, chapter_id: str) -> int:
        """Return the 0-based position of a chapter, or -1."""
        for index, chapter in enumerate(self.chapters):
            if chapter.id == chapter_id:
                return index
        return -1

    def find_idea(self, idea_id: str) -> Optional[BookIdea]:
        for idea in self.ideas:
            if idea.id == idea_id:
                return idea
        return None

    def set_ideas(self, ideas: List[BookIdea]) -> None:
        """Replace the idea list; the previous selection and outline are dropped."""
        self.ideas = list(ideas)
        self.select_idea(None)

    def select_idea(self, idea: Optional[BookIdea]) -> None:
        """Choose the idea to outline. Resets the chapter outline and contents."""
        self.idea = idea
        self.set_chapters([])

    def set_chapters(self, chapters: List[Chapter]) -> None:
        """Replace the chapter outline and forget all chapter histories."""
        self.chapters = list(chapters)
        self.chapter_contents.clear()
        self.touch()

    def add_chapter(self, chapter: Chapter, position: Optional[int] = None) -> None:
        """Add a chapter to the outline (at the end unless a position is given)."""
        if position is None:
            self.chapters.append(chapter)
        else:
            self.chapters.insert(position, chapter)
        self.touch()

    def remove_chapter(self, chapter_id: str) -> bool:
        """Remove a chapter and every connection pointing at it."""
        chapter = self.get_chapter(chapter_id)
        if chapter is None:
            return False
        self.chapters = [c for c in self.chapters if c.id != chapter_id]
        for other in self.chapters:
            other.connections = [conn for conn in other.connections if conn.target_id != chapter_id]
        self.chapter_contents.remove(chapter_id)
        self.touch()
        return True

    def add_connection(self, source_id: str, target_id: str, description: str = "") -> bool:
        """Connect two distinct chapters; duplicates are refused."""
        source = self.get_chapter(source_id)
        if source is None or self.get_chapter(target_id) is None:
            return False
        if source_id == target_id or source.connects_to(target_id):
            return False
        source.connections.append(ChapterConnection(target_id, description.strip()))
        self.touch()
        return True

    def remove_connection(self, source_id: str, target_id: str) -> bool:
        source = self.get_chapter(source_id)
        if source is None or not source.connects_to(target_id):
            return False
        source.connections = [conn for conn in source.connections if conn.target_id != target_id]
        self.touch()
        return True

    def to_dict(self) -> Dict[str, Any]:
        """Convert project to dictionary for serialization."""
        return {
            "id": self.id,
            "name": self.name,
            "last_modified": self.last_modified,
            "genre": self.genre,
            "topics": list(self.topics),
            "ideas": [idea.to_dict() for idea in self.ideas],
            "idea": self.idea.to_dict() if self.idea else None,
            "chapters": [chapter.to_dict() for chapter in self.chapters],
            "chapter_contents": self.chapter_contents.to_pairs(),
            "cover_image": self.cover_image,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], history_limit: Optional[int] = None) -> "Project":
        """Create project from dictionary."""
        project = cls(
            name=data.get("name", ""),
            genre=data.get("genre", "Fantasy"),
            project_id=data.get("id"),
            history_limit=history_limit,
        )
        project.topics = list(data.get("topics", []))
        project.ideas = [BookIdea.from_dict(i) for i in data.get("ideas", [])]
        if data.get("idea"):
            project.idea = BookIdea.from_dict(data["idea"])
        project.chapters = [Chapter.from_dict(c) for c in data.get("chapters", [])]
        project.chapter_contents = ContentHistoryStore.from_pairs(
            data.get("chapter_contents", []), history_limit=history_limit
        )
        project.cover_image = data.get("cover_image", "")
        project.last_modified = data.get("last_modified", now_millis())
        return project
