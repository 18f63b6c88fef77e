"""AI integration modules for Mojo Writer."""

from .claude_client import ClaudeClient, GenerationClient, GenerationRequest
from .content_generator import ContentGenerator

__all__ = [
    "ClaudeClient",
    "GenerationClient",
    "GenerationRequest",
    "ContentGenerator",
]
