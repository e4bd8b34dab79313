"""Content domain models: pure Pydantic v2 data types.

These models represent the editing lifecycle of the two content
producers: blog articles and email newsletters.  Every piece of content
is tracked as a DocumentRecord in the external record store, and edited
through a Document that carries the markdown source, the parallel HTML
source, and which of the two is authoritative.
"""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, Field


class ContentMode(StrEnum):
    """Which representation of a document is the ground truth."""

    MARKDOWN = "markdown"
    HTML = "html"


class DocumentKind(StrEnum):
    """The producer a document belongs to."""

    ARTICLE = "article"
    NEWSLETTER = "newsletter"


class DocumentStatus(StrEnum):
    """Lifecycle status of a stored document."""

    DRAFT = "draft"
    SCHEDULED = "scheduled"
    PUBLISHED = "published"
    SENT = "sent"


class Document(BaseModel):
    """The editable body of an article or newsletter.

    Exactly one of ``markdown_source``/``html_source`` is authoritative
    (named by ``content_mode``).  The other side is either empty or a
    derived rendering; ``html_stale`` is set whenever the HTML side no
    longer reflects the authoritative markdown.
    """

    markdown_source: str = ""
    html_source: str = ""
    content_mode: ContentMode = ContentMode.MARKDOWN
    html_stale: bool = True

    @property
    def authoritative_text(self) -> str:
        if self.content_mode == ContentMode.HTML:
            return self.html_source
        return self.markdown_source


class TemplateDocument(BaseModel):
    """A named newsletter template with ``{{token}}`` placeholders."""

    model_config = {"frozen": True}

    id: str
    name: str
    subject: str
    html: str
    description: str = ""


class RenderedArtifact(BaseModel):
    """Sanitized, render-ready HTML produced for preview or sending."""

    html: str
    subject: str = ""
    rendered_at: datetime


class DocumentRecord(BaseModel):
    """A document as persisted by the record store."""

    id: str
    kind: DocumentKind
    title: str = ""
    subject: str = ""
    preview_text: str = ""
    excerpt: str = ""
    category: str = ""
    tags: list[str] = Field(default_factory=list)
    slug: str = ""
    status: DocumentStatus = DocumentStatus.DRAFT
    markdown_source: str = ""
    html_source: str = ""
    content_mode: ContentMode = ContentMode.MARKDOWN
    reading_time: int = 0
    template_id: str = ""
    author: str = ""
    created_at: datetime
    updated_at: datetime
    scheduled_at: datetime | None = None
    published_at: datetime | None = None

    def to_document(self) -> Document:
        """Build an editable Document from the stored sources."""
        return Document(
            markdown_source=self.markdown_source,
            html_source=self.html_source,
            content_mode=self.content_mode,
            # Stored HTML is only trusted when it is the authoritative side.
            html_stale=self.content_mode == ContentMode.MARKDOWN,
        )
