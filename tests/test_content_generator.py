"""Tests for prompt construction and response parsing."""

import asyncio
import json

import pytest

from mojowriter.ai.content_generator import ContentGenerator, join_aspects, parse_json_response
from mojowriter.errors import ProviderGenericFailure


class FakeClient:
    def __init__(self, response):
        self.response = response
        self.requests = []

    async def generate(self, request):
        self.requests.append(request)
        return self.response


def test_join_aspects():
    assert join_aspects(["Pacing"]) == "Pacing"
    assert join_aspects(["Pacing", "Dialogue"]) == "Pacing and Dialogue"
    assert join_aspects(["Pacing", "Dialogue", "Tone and Voice"]) == "Pacing, Dialogue, and Tone and Voice"


def test_parse_json_response_strips_code_fence():
    assert parse_json_response('```json\n[{"title": "A"}]\n```') == [{"title": "A"}]
    assert parse_json_response(' {"a": 1} ') == {"a": 1}


def test_parse_json_response_rejects_garbage():
    with pytest.raises(ProviderGenericFailure):
        parse_json_response("Sure! Here are some ideas")


def test_generate_book_ideas():
    client = FakeClient(json.dumps([
        {"title": "The Glass Orchard", "synopsis": "A botanist grows memories."},
        {"title": "", "synopsis": "Dropped because it has no title."},
    ]))
    ideas = asyncio.run(ContentGenerator(client).generate_book_ideas("Fantasy"))

    assert [idea.title for idea in ideas] == ["The Glass Orchard"]
    assert "Fantasy genre" in client.requests[0].prompt
    assert client.requests[0].schema["items"]["required"] == ["title", "synopsis"]
    assert "Respond only with JSON" not in client.requests[0].prompt


def test_generate_chapters_maps_field_names():
    client = FakeClient(json.dumps([
        {"chapterTitle": "Seeds", "chapterDescription": "The orchard is planted."},
    ]))
    chapters = asyncio.run(ContentGenerator(client).generate_chapters("The Glass Orchard", "Memories"))

    assert chapters[0].chapter_title == "Seeds"
    assert chapters[0].chapter_description == "The orchard is planted."


def test_generate_chapters_requires_a_list():
    client = FakeClient('{"chapterTitle": "Seeds"}')
    with pytest.raises(ProviderGenericFailure):
        asyncio.run(ContentGenerator(client).generate_chapters("T", "S"))


def test_analysis_adds_plot_context_only_when_requested():
    client = FakeClient("  ## Pacing\nGood.  ")
    generator = ContentGenerator(client)

    result = asyncio.run(generator.analyze_content("text", ["Pacing"], "Synopsis X", "Description Y"))
    assert result == "## Pacing\nGood."
    assert "Synopsis X" not in client.requests[0].prompt
    assert client.requests[0].fast

    asyncio.run(generator.analyze_content("text", ["Plot Consistency"], "Synopsis X", "Description Y"))
    assert 'Book Synopsis: "Synopsis X"' in client.requests[1].prompt
    assert 'Chapter Description: "Description Y"' in client.requests[1].prompt


def test_chapter_content_prompt_names_the_chapter():
    client = FakeClient("Once upon a time.\n")
    text = asyncio.run(ContentGenerator(client).generate_chapter_content("Book", "Synopsis", "Arrival", "Arrives"))

    assert text == "Once upon a time."
    assert 'chapter titled "Arrival"' in client.requests[0].prompt
