"""
Mojo Writer - an AI-assisted book writing application.
"""

__version__ = "1.0.0"

from .core import ContentHistory, ContentHistoryStore, PaneLayoutManager, Project
from .editor import EditorCoordinator, OperationOutcome

__all__ = [
    "ContentHistory",
    "ContentHistoryStore",
    "PaneLayoutManager",
    "Project",
    "EditorCoordinator",
    "OperationOutcome",
]
