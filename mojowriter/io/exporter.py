"""Book export: collects current chapter text and renders it for printing."""

import base64
import binascii
import io
import re
from dataclasses import dataclass, field
from html import escape
from pathlib import Path
from typing import List, Union

import markdown
from docx import Document as DocxDocument
from docx.shared import Inches

from ..core.project import Project


@dataclass(frozen=True)
class ExportChapter:
    chapter_id: str
    chapter_title: str
    present_text: str


@dataclass
class ExportBook:
    """Everything the print renderer needs: title, cover and chapter text."""

    title: str
    cover_image: str = ""
    chapters: List[ExportChapter] = field(default_factory=list)


def build_export(project: Project) -> ExportBook:
    """Collect the present text of every chapter in outline order."""
    return ExportBook(
        title=project.title,
        cover_image=project.cover_image,
        chapters=[
            ExportChapter(
                chapter_id=chapter.id,
                chapter_title=chapter.chapter_title,
                present_text=project.chapter_contents.get_current(chapter.id),
            )
            for chapter in project.chapters
        ],
    )


_PRINT_CSS = """
body { font-family: Georgia, serif; line-height: 1.6; margin: 0 auto; max-width: 40em; }
.cover { text-align: center; page-break-after: always; }
.cover img { max-width: 100%; max-height: 80vh; }
.chapter { page-break-before: always; }
h1.book-title { font-size: 2.5em; margin-top: 30vh; }
"""


def render_html(book: ExportBook) -> str:
    """Render the book as a standalone printable HTML document."""
    parts = [
        "<!DOCTYPE html>",
        "<html>",
        "<head>",
        '<meta charset="utf-8">',
        f"<title>{escape(book.title)}</title>",
        f"<style>{_PRINT_CSS}</style>",
        "</head>",
        "<body>",
        '<section class="cover">',
    ]
    if book.cover_image:
        parts.append(f'<img src="{escape(book.cover_image, quote=True)}" alt="Cover">')
    parts.append(f'<h1 class="book-title">{escape(book.title)}</h1>')
    parts.append("</section>")

    for number, chapter in enumerate(book.chapters, start=1):
        body = markdown.markdown(chapter.present_text or "")
        parts.append(f'<section class="chapter" id="chapter-{escape(chapter.chapter_id, quote=True)}">')
        parts.append(f"<h2>Chapter {number}: {escape(chapter.chapter_title)}</h2>")
        parts.append(body)
        parts.append("</section>")

    parts.extend(["</body>", "</html>"])
    return "\n".join(parts) + "\n"


def render_markdown(book: ExportBook) -> str:
    """Render the book as one combined markdown document."""
    content = f"# {book.title}\n\n"
    for number, chapter in enumerate(book.chapters, start=1):
        content += f"## Chapter {number}: {chapter.chapter_title}\n\n"
        content += f"{chapter.present_text.strip()}\n\n"
    return content


_DATA_URI = re.compile(r"^data:image/[\w.+-]+;base64,(?P<data>.+)$", re.DOTALL)


def _decode_cover(cover_image: str) -> bytes:
    match = _DATA_URI.match(cover_image or "")
    if not match:
        return b""
    try:
        return base64.b64decode(match.group("data"), validate=True)
    except (binascii.Error, ValueError):
        return b""


def render_docx(book: ExportBook, path: Union[str, Path]) -> None:
    """Export the book as a DOCX file, one chapter per page."""
    doc = DocxDocument()

    cover = _decode_cover(book.cover_image)
    if cover:
        doc.add_picture(io.BytesIO(cover), width=Inches(5))
    doc.add_heading(book.title, level=0)

    for number, chapter in enumerate(book.chapters, start=1):
        doc.add_page_break()
        doc.add_heading(f"Chapter {number}: {chapter.chapter_title}", level=1)
        for paragraph in re.split(r"\n\s*\n", chapter.present_text.strip()):
            if paragraph.strip():
                doc.add_paragraph(paragraph.strip())

    doc.save(str(path))
