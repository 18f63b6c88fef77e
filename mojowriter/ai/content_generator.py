"""Prompt construction and result parsing for book content."""

import json
import logging
import re
from typing import Any, Dict, List, Sequence

from ..core.project import BookIdea, Chapter
from ..errors import ProviderGenericFailure
from .claude_client import GenerationClient, GenerationRequest

logger = logging.getLogger(__name__)

ANALYSIS_ASPECTS = [
    "Pacing",
    "Character Development",
    "Dialogue",
    "Tone and Voice",
    "Plot Consistency",
]

IDEA_SCHEMA = {
    "type": "array",
    "items": {
        "type": "object",
        "properties": {
            "title": {"type": "string", "description": "The title of the book idea."},
            "synopsis": {"type": "string", "description": "A one-paragraph synopsis of the book idea."},
        },
        "required": ["title", "synopsis"],
    },
}

CHAPTER_SCHEMA = {
    "type": "array",
    "items": {
        "type": "object",
        "properties": {
            "chapterTitle": {"type": "string", "description": "The title of the chapter."},
            "chapterDescription": {"type": "string", "description": "A one-sentence description of the chapter."},
        },
        "required": ["chapterTitle", "chapterDescription"],
    },
}

_FENCE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL)


def join_aspects(aspects: Sequence[str]) -> str:
    """Join aspect names as an English list ("a, b, and c")."""
    if len(aspects) <= 2:
        return " and ".join(aspects)
    return f"{', '.join(aspects[:-1])}, and {aspects[-1]}"


def parse_json_response(text: str) -> Any:
    """Parse a JSON answer, tolerating a surrounding markdown code fence."""
    cleaned = text.strip()
    match = _FENCE.match(cleaned)
    if match:
        cleaned = match.group(1)
    try:
        return json.loads(cleaned)
    except json.JSONDecodeError as e:
        logger.error(f"Could not parse structured response: {e}")
        raise ProviderGenericFailure(f"Response was not valid JSON: {e}") from e


class ContentGenerator:
    """Generates ideas, outlines, chapters and editorial feedback."""

    def __init__(self, ai_client: GenerationClient):
        self.ai_client = ai_client

    async def _structured(self, prompt: str, schema: Dict[str, Any]) -> Any:
        request = GenerationRequest(prompt=prompt, schema=schema)
        return parse_json_response(await self.ai_client.generate(request))

    async def generate_book_ideas(self, genre: str, count: int = 3) -> List[BookIdea]:
        """Generate book ideas for a genre."""
        prompt = (
            f"Generate {count} unique book ideas in the {genre} genre. "
            "For each idea, provide a compelling title and a one-paragraph synopsis."
        )
        items = await self._structured(prompt, IDEA_SCHEMA)
        if not isinstance(items, list):
            raise ProviderGenericFailure("Expected a list of book ideas")
        return [
            BookIdea(title=str(item.get("title", "")).strip(), synopsis=str(item.get("synopsis", "")).strip())
            for item in items
            if isinstance(item, dict) and item.get("title")
        ]

    async def generate_chapters(self, title: str, synopsis: str, count: int = 12) -> List[Chapter]:
        """Generate a chapter outline for a book."""
        prompt = (
            f'Given the book title "{title}" and synopsis "{synopsis}", generate a list of {count} '
            "chapter titles that outline a coherent story arc. For each chapter, provide a "
            "one-sentence description of its content."
        )
        items = await self._structured(prompt, CHAPTER_SCHEMA)
        if not isinstance(items, list):
            raise ProviderGenericFailure("Expected a list of chapters")
        return [
            Chapter(
                chapter_title=str(item.get("chapterTitle", "")).strip(),
                chapter_description=str(item.get("chapterDescription", "")).strip(),
            )
            for item in items
            if isinstance(item, dict) and item.get("chapterTitle")
        ]

    async def generate_chapter_content(
        self,
        book_title: str,
        book_synopsis: str,
        chapter_title: str,
        chapter_description: str,
    ) -> str:
        """Write a full chapter draft in markdown."""
        prompt = (
            f'You are a creative writer. Based on the book titled "{book_title}" with the synopsis '
            f'"{book_synopsis}", write the content for the chapter titled "{chapter_title}".\n'
            f'The chapter should focus on: "{chapter_description}".\n'
            "Write a compelling and engaging chapter of about 500-700 words. "
            "Use rich descriptions and advance the plot.\n"
            "Output the content in markdown format."
        )
        return (await self.ai_client.generate(GenerationRequest(prompt=prompt))).strip()

    async def analyze_content(
        self,
        text: str,
        aspects: Sequence[str],
        book_synopsis: str = "",
        chapter_description: str = "",
    ) -> str:
        """Produce a markdown analysis of the text for the chosen aspects."""
        prompt = (
            f"Analyze the following text for {join_aspects(aspects)}. Provide a brief, constructive "
            "summary of your analysis for each aspect in markdown format."
        )
        if "Plot Consistency" in aspects:
            prompt += (
                "\n\nWhen analyzing for Plot Consistency, use the following context:\n"
                f'- Book Synopsis: "{book_synopsis}"\n'
                f'- Chapter Description: "{chapter_description}"'
            )
        prompt += f"\n\nText to analyze:\n---\n{text}\n---"
        return (await self.ai_client.generate(GenerationRequest(prompt=prompt, fast=True))).strip()

    async def suggest_edits(self, text: str) -> str:
        """Suggest proofreading edits without changing the text."""
        prompt = (
            "You are an expert editor. Proofread the following text. Suggest edits to improve "
            "grammar, spelling, and flow. Present the suggestions clearly using markdown for "
            "emphasis (e.g., bold for additions, strikethrough for deletions).\n\n"
            f"Text to edit:\n---\n{text}\n---"
        )
        return (await self.ai_client.generate(GenerationRequest(prompt=prompt, fast=True))).strip()

    async def fix_grammar(self, text: str) -> str:
        """Return the text with grammar and spelling corrected."""
        prompt = (
            "Correct the grammar, spelling and punctuation of the following text. Keep the "
            "meaning, voice and markdown formatting. Return only the corrected text.\n\n"
            f"---\n{text}\n---"
        )
        return (await self.ai_client.generate(GenerationRequest(prompt=prompt, fast=True))).strip()

    async def humanize(self, text: str) -> str:
        """Return the text rewritten to read more naturally."""
        prompt = (
            "Rewrite the following text so it reads as if written by a skilled human author: vary "
            "sentence length, remove stock phrases and keep every plot detail. Keep the markdown "
            "formatting. Return only the rewritten text.\n\n"
            f"---\n{text}\n---"
        )
        return (await self.ai_client.generate(GenerationRequest(prompt=prompt))).strip()
