"""``{{placeholder}}`` substitution for newsletter templates.

A token with no value is left in the output exactly as written, so missing
data stays visible instead of producing blank sections.  Rendering does not
sanitize; callers pass the result through ``sanitize`` before display or
send.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping

from draftline.models import TemplateDocument

logger = logging.getLogger(__name__)

PLACEHOLDER_RE = re.compile(r"\{\{\s*([A-Za-z0-9_.-]+)\s*\}\}")


def substitute(text: str, values: Mapping[str, str]) -> str:
    """Replace every ``{{key}}`` in ``text`` that has an entry in ``values``."""

    def _replace(match: re.Match[str]) -> str:
        key = match.group(1)
        if key in values:
            return str(values[key])
        return match.group(0)

    return PLACEHOLDER_RE.sub(_replace, text)


def placeholders(text: str) -> list[str]:
    """List distinct placeholder keys in order of first appearance."""
    seen: dict[str, None] = {}
    for match in PLACEHOLDER_RE.finditer(text):
        seen.setdefault(match.group(1), None)
    return list(seen)


def missing_placeholders(template: TemplateDocument, values: Mapping[str, str]) -> list[str]:
    """Return the keys used by ``template`` that ``values`` does not provide."""
    keys = placeholders(template.subject + "\n" + template.html)
    return [key for key in keys if key not in values]


def render(template: TemplateDocument, values: Mapping[str, str]) -> str:
    """Render the template body with ``values``."""
    missing = missing_placeholders(template, values)
    if missing:
        logger.warning(
            "Template %s rendered with unresolved placeholders: %s",
            template.id,
            ", ".join(missing),
        )
    return substitute(template.html, values)


def render_subject(template: TemplateDocument, values: Mapping[str, str]) -> str:
    """Render the template subject line with ``values``."""
    return substitute(template.subject, values)
