"""HTML sanitization for preview and outgoing email.

Built on bleach: tags outside the policy's allow-list are stripped while
their text is kept, attributes are filtered per tag, and URLs in ``href``/
``src`` must use an allowed scheme.  Elements whose *content* is itself
dangerous or invisible (script, style, head, embedded frames) are removed
together with their content before bleach runs.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field, replace

import bleach
from bleach.css_sanitizer import CSSSanitizer

BASE_TAGS = frozenset(
    {
        "h1", "h2", "h3", "h4", "h5", "h6",
        "p", "br", "hr",
        "strong", "b", "em", "i", "u", "s", "del",
        "ul", "ol", "li",
        "a", "img",
        "blockquote", "code", "pre",
        "table", "thead", "tbody", "tr", "th", "td",
    }
)

BASE_ATTRIBUTES: dict[str, list[str]] = {
    "a": ["href", "title"],
    "img": ["src", "alt", "title", "width", "height"],
    "th": ["colspan", "rowspan"],
    "td": ["colspan", "rowspan"],
}

SAFE_PROTOCOLS = frozenset({"http", "https", "mailto"})

EMBED_TAGS = frozenset({"iframe", "object", "embed"})
DROP_CONTENT_TAGS = frozenset({"script", "style", "head", "title", "noscript", "template"})

EMAIL_CSS_PROPERTIES = frozenset(
    {
        "background", "background-color", "border", "border-bottom", "border-left",
        "border-radius", "border-top", "color", "display", "font-family", "font-size",
        "font-style", "font-weight", "height", "letter-spacing", "line-height",
        "margin", "margin-bottom", "margin-top", "max-width", "opacity", "overflow",
        "padding", "padding-left", "text-align", "text-decoration", "text-transform",
        "width",
    }
)


@dataclass(frozen=True)
class SanitizerPolicy:
    """Allow-lists applied by ``sanitize``."""

    tags: frozenset[str] = BASE_TAGS
    attributes: dict[str, list[str]] = field(default_factory=lambda: dict(BASE_ATTRIBUTES))
    protocols: frozenset[str] = SAFE_PROTOCOLS
    css_properties: frozenset[str] = frozenset()

    def allowing(self, *tags: str, attributes: dict[str, list[str]] | None = None) -> SanitizerPolicy:
        """Return a copy that also allows ``tags`` (e.g. ``"iframe"``)."""
        merged = dict(self.attributes)
        for tag, attrs in (attributes or {}).items():
            merged[tag] = [*merged.get(tag, []), *attrs]
        return replace(self, tags=self.tags | frozenset(tags), attributes=merged)


PREVIEW_POLICY = SanitizerPolicy()

# Preview policy for hosts that opt into embedded video frames.
EMBED_PREVIEW_POLICY = PREVIEW_POLICY.allowing(
    "iframe",
    attributes={"iframe": ["src", "width", "height", "allowfullscreen", "title"]},
)

EMAIL_POLICY = SanitizerPolicy(
    tags=BASE_TAGS | {"div", "span", "center"},
    attributes={
        **BASE_ATTRIBUTES,
        "*": ["style"],
        "table": ["role", "width", "cellspacing", "cellpadding", "border", "align"],
        "td": ["colspan", "rowspan", "align", "valign", "width"],
        "th": ["colspan", "rowspan", "align", "valign", "width"],
        "div": ["align"],
        "p": ["align"],
    },
    css_properties=EMAIL_CSS_PROPERTIES,
)


def _drop_content_re(tags: frozenset[str]) -> re.Pattern[str]:
    """Match dropped elements with their content.

    Containers in ``DROP_CONTENT_TAGS`` left unclosed run to the end of the
    input, as a browser would parse them.  Embeds may be void, so an
    unclosed one only loses its start tag.
    """
    containers = "|".join(sorted(tags & DROP_CONTENT_TAGS)) or "(?!)"
    embeds = "|".join(sorted(tags - DROP_CONTENT_TAGS)) or "(?!)"
    return re.compile(
        rf"<({containers})\b[^>]*>.*?(?:</\1\s*>|\Z)"
        rf"|<({embeds})\b[^>]*>.*?</\2\s*>|<({embeds})\b[^>]*/?>",
        re.IGNORECASE | re.DOTALL,
    )


def sanitize(html: str, policy: SanitizerPolicy = PREVIEW_POLICY) -> str:
    """Strip unsafe markup from ``html`` according to ``policy``."""
    if not html:
        return ""

    dropped = DROP_CONTENT_TAGS | (EMBED_TAGS - policy.tags)
    cleaned = _drop_content_re(dropped).sub("", html)

    css_sanitizer = (
        CSSSanitizer(allowed_css_properties=policy.css_properties)
        if policy.css_properties
        else None
    )
    return bleach.clean(
        cleaned,
        tags=policy.tags,
        attributes=policy.attributes,
        protocols=policy.protocols,
        strip=True,
        strip_comments=True,
        css_sanitizer=css_sanitizer,
    )
