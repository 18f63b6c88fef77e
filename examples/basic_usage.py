"""Basic usage example for Mojo Writer."""

import asyncio

import click

from mojowriter import EditorCoordinator, Project
from mojowriter.ai import ClaudeClient, ContentGenerator
from mojowriter.core import BookIdea, Chapter
from mojowriter.io import MemoryChapterStore


async def confirm(message: str) -> bool:
    return click.confirm(message, default=False)


async def main():
    """Example of drafting and revising one chapter."""

    # Create a project with a single chapter
    project = Project(name="The Time Traveler's Dilemma", genre="Sci-Fi")
    project.select_idea(BookIdea(
        title="The Time Traveler's Dilemma",
        synopsis="A young scientist discovers time travel and must prevent a dystopian future",
    ))
    project.add_chapter(Chapter(
        chapter_title="The Discovery",
        chapter_description="Sarah finds the time machine in her grandmother's attic",
    ))

    # Set up AI client (requires ANTHROPIC_API_KEY environment variable)
    client = ClaudeClient()
    coordinator = EditorCoordinator(project, ContentGenerator(client), MemoryChapterStore(), confirm)

    coordinator.select_chapter(project.chapters[0].id)
    outcome = await coordinator.generate_chapter()
    if coordinator.error:
        print(coordinator.error)
        return

    print(f"Generation: {outcome.value}")
    print(coordinator.current_content)

    await coordinator.fix_grammar()
    coordinator.undo()
    coordinator.save()


if __name__ == "__main__":
    asyncio.run(main())
