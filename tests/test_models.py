"""Tests for domain models and the error report."""

from datetime import UTC, datetime

import pytest
from draftline.errors import DraftlineError, ErrorReport, ValidationError
from draftline.models import (
    ContentMode,
    Document,
    DocumentKind,
    DocumentRecord,
    TemplateDocument,
)


def _record(**kwargs: object) -> DocumentRecord:
    now = datetime.now(tz=UTC)
    data: dict[str, object] = {
        "id": "abc",
        "kind": DocumentKind.ARTICLE,
        "created_at": now,
        "updated_at": now,
    }
    data.update(kwargs)
    return DocumentRecord.model_validate(data)


class TestDocument:
    def test_authoritative_text_follows_mode(self):
        doc = Document(markdown_source="md", html_source="<p>h</p>")
        assert doc.authoritative_text == "md"
        doc.content_mode = ContentMode.HTML
        assert doc.authoritative_text == "<p>h</p>"


class TestDocumentRecord:
    def test_markdown_record_has_stale_html(self):
        doc = _record(markdown_source="# Hi", html_source="<h1>old</h1>").to_document()
        assert doc.content_mode == ContentMode.MARKDOWN
        assert doc.html_stale is True

    def test_html_record_trusts_stored_html(self):
        doc = _record(content_mode="html", html_source="<p>x</p>").to_document()
        assert doc.html_stale is False
        assert doc.authoritative_text == "<p>x</p>"

    def test_round_trips_json(self):
        record = _record(tags=["a", "b"])
        assert DocumentRecord.model_validate_json(record.model_dump_json()) == record


class TestTemplateDocument:
    def test_frozen(self):
        template = TemplateDocument(id="t", name="T", subject="S", html="<p/>")
        with pytest.raises(ValueError):
            template.html = "<p>changed</p>"


class TestErrors:
    def test_validation_error_message(self):
        err = ValidationError(["title", "category"])
        assert isinstance(err, DraftlineError)
        assert err.fields == ["title", "category"]
        assert str(err) == "Missing required fields: title, category"

    def test_error_report(self):
        report = ErrorReport()
        assert not report.has_errors
        report.add_error("autosave", "boom", source="doc-1", error_type="persist_error")
        assert report.has_errors
        assert report.errors[0].source == "doc-1"
        report.clear()
        assert not report.has_errors
