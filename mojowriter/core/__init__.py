"""Core domain models for Mojo Writer."""

from .history import ContentHistory, ContentHistoryStore
from .layout import PaneLayoutManager
from .project import BookIdea, Chapter, ChapterConnection, Project

__all__ = [
    "ContentHistory",
    "ContentHistoryStore",
    "PaneLayoutManager",
    "BookIdea",
    "Chapter",
    "ChapterConnection",
    "Project",
]
