"""Rendering: markdown conversion, sanitization, templates and the email shell."""

from draftline.render.email import BUILTIN_TEMPLATES, build_email_html, get_template
from draftline.render.markdown import RenderEngine, to_html
from draftline.render.sanitizer import (
    EMAIL_POLICY,
    EMBED_PREVIEW_POLICY,
    PREVIEW_POLICY,
    SanitizerPolicy,
    sanitize,
)
from draftline.render.templates import (
    missing_placeholders,
    placeholders,
    render,
    render_subject,
    substitute,
)

__all__ = [
    "BUILTIN_TEMPLATES",
    "EMAIL_POLICY",
    "EMBED_PREVIEW_POLICY",
    "PREVIEW_POLICY",
    "RenderEngine",
    "SanitizerPolicy",
    "build_email_html",
    "get_template",
    "missing_placeholders",
    "placeholders",
    "render",
    "render_subject",
    "sanitize",
    "substitute",
    "to_html",
]
