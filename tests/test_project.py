"""Tests for the book project model."""

from mojowriter.core.project import BookIdea, Chapter, Project


def test_project_creation():
    """Test project creation."""
    project = Project(name="Test Book", genre="Mystery")
    assert project.name == "Test Book"
    assert project.genre == "Mystery"
    assert project.chapters == []
    assert project.id


def test_title_prefers_selected_idea():
    project = Project(name="Working Name")
    assert project.title == "Working Name"
    project.idea = BookIdea(title="Final Title")
    assert project.title == "Final Title"
    assert Project().title == "Untitled Book"


def test_chapter_creation():
    """Test chapter creation."""
    chapter = Chapter(chapter_title="Test Chapter", chapter_description="Something happens.")
    assert chapter.chapter_title == "Test Chapter"
    assert chapter.connections == []
    assert chapter.id != Chapter(chapter_title="Other").id


def test_select_idea_resets_outline(project):
    project.chapter_contents.hydrate("ch1", "text")
    project.select_idea(BookIdea(title="Another"))
    assert project.chapters == []
    assert not project.chapter_contents.has_entry("ch1")


def test_add_chapter_at_position(project):
    project.add_chapter(Chapter(chapter_title="Prologue", id="p"), position=0)
    assert project.chapter_index("p") == 0
    assert project.chapter_index("ch1") == 1
    assert project.chapter_index("missing") == -1


def test_connections_refuse_self_links_and_duplicates(project):
    assert project.add_connection("ch1", "ch3", "  Sets up the ending  ")
    assert project.get_chapter("ch1").connections[0].description == "Sets up the ending"
    assert not project.add_connection("ch1", "ch3")
    assert not project.add_connection("ch1", "ch1")
    assert not project.add_connection("ch1", "missing")

    assert project.remove_connection("ch1", "ch3")
    assert not project.remove_connection("ch1", "ch3")


def test_remove_chapter_drops_incoming_connections(project):
    project.add_connection("ch1", "ch2")
    project.add_connection("ch3", "ch2")
    project.chapter_contents.hydrate("ch2", "text")

    assert project.remove_chapter("ch2")
    assert [c.id for c in project.chapters] == ["ch1", "ch3"]
    assert project.get_chapter("ch1").connections == []
    assert project.get_chapter("ch3").connections == []
    assert not project.chapter_contents.has_entry("ch2")
    assert not project.remove_chapter("ch2")


def test_serialization_keeps_histories(project):
    project.ideas = [project.idea]
    project.chapter_contents.hydrate("ch1", "first")
    project.chapter_contents.commit_edit("ch1", "second")
    project.add_connection("ch2", "ch1", "Echo")

    restored = Project.from_dict(project.to_dict())

    assert restored.id == project.id
    assert restored.title == "The Clockwork Sea"
    assert [c.chapter_title for c in restored.chapters] == ["Arrival", "The Map", "Departure"]
    assert restored.get_chapter("ch2").connects_to("ch1")
    history = restored.chapter_contents.get_history("ch1")
    assert history.present == "second"
    assert history.past == ("first",)
