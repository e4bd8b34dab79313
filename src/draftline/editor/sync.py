"""Keeps a document's markdown and HTML sides consistent.

The side named by ``content_mode`` is the only ground truth.  Editing one
side makes it authoritative; the HTML side is regenerated from markdown on
demand, and HTML is never converted back into markdown.
"""

from __future__ import annotations

import logging

from draftline.models import ContentMode, Document, TemplateDocument
from draftline.render.markdown import RenderEngine, to_html

logger = logging.getLogger(__name__)


class ContentSynchronizer:
    """Owns the authoritative-representation invariant of one Document."""

    def __init__(
        self,
        document: Document | None = None,
        engine: RenderEngine | str = RenderEngine.BASIC,
    ) -> None:
        self.document = document or Document()
        self.engine = RenderEngine(engine)

    @property
    def mode(self) -> ContentMode:
        return self.document.content_mode

    @property
    def text(self) -> str:
        """The authoritative buffer."""
        return self.document.authoritative_text

    def edit_markdown(self, text: str) -> None:
        doc = self.document
        doc.markdown_source = text
        doc.content_mode = ContentMode.MARKDOWN
        doc.html_stale = True

    def edit_html(self, text: str) -> None:
        doc = self.document
        doc.html_source = text
        doc.content_mode = ContentMode.HTML
        doc.html_stale = False

    def edit(self, text: str) -> None:
        """Replace the authoritative buffer for the current mode."""
        if self.mode == ContentMode.HTML:
            self.edit_html(text)
        else:
            self.edit_markdown(text)

    def regenerate_html(self) -> str:
        """Return trustworthy HTML, converting from markdown if it is stale."""
        doc = self.document
        if doc.content_mode == ContentMode.MARKDOWN and doc.html_stale:
            doc.html_source = to_html(doc.markdown_source, self.engine)
            doc.html_stale = False
        return doc.html_source

    def set_mode(self, mode: ContentMode | str) -> None:
        """Switch the authoritative side.

        Switching to HTML regenerates it from markdown first.  Switching
        back to markdown drops any HTML edits: the HTML is regenerated from
        the last authoritative markdown.
        """
        mode = ContentMode(mode)
        doc = self.document
        if mode == doc.content_mode:
            return
        if mode == ContentMode.HTML:
            self.regenerate_html()
            doc.content_mode = ContentMode.HTML
        else:
            doc.content_mode = ContentMode.MARKDOWN
            doc.html_stale = True
            self.regenerate_html()
        logger.debug("Content mode switched to %s", mode)

    def apply_template(
        self,
        template: TemplateDocument,
        mode: ContentMode | str = ContentMode.MARKDOWN,
    ) -> None:
        """Start the document from a template's HTML (copied, not shared).

        In markdown mode the template HTML becomes the markdown source, which
        the converter passes through, so formatting commands and a later
        switch to HTML keep working on it.
        """
        mode = ContentMode(mode)
        doc = self.document
        if mode == ContentMode.MARKDOWN:
            doc.markdown_source = str(template.html)
            doc.content_mode = ContentMode.MARKDOWN
            doc.html_stale = True
        else:
            doc.html_source = str(template.html)
            doc.markdown_source = ""
            doc.content_mode = ContentMode.HTML
            doc.html_stale = False
