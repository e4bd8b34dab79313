"""Markdown → HTML conversion.

Two engines are available:

- ``basic``: deterministic pattern substitution that mirrors the syntax the
  formatting commands produce.  Rules run in a fixed order because later
  rules see the output of earlier ones (headings longest-prefix-first, then
  bold, italic, inline code, blockquotes, unordered lists, ordered lists,
  then paragraph/line-break normalization).  Unrecognized syntax passes
  through unchanged.
- ``markdown``: the Python-Markdown library, used when send-time fidelity
  matters more than predictability.

Neither engine is idempotent; never feed converted HTML back in.
"""

from __future__ import annotations

import html
import re
from enum import StrEnum

import markdown as md


class RenderEngine(StrEnum):
    BASIC = "basic"
    MARKDOWN = "markdown"


MARKDOWN_EXTENSIONS = ["tables", "fenced_code", "nl2br"]

_FENCE_RE = re.compile(r"^```[^\n]*\n(.*?)\n?```[ \t]*$", re.MULTILINE | re.DOTALL)
_CODE_TOKEN = "\x00code{}\x00"
_CODE_TOKEN_RE = re.compile(r"\x00code(\d+)\x00")

_H3_RE = re.compile(r"^### (.*)$", re.MULTILINE)
_H2_RE = re.compile(r"^## (.*)$", re.MULTILINE)
_H1_RE = re.compile(r"^# (.*)$", re.MULTILINE)
_HR_RE = re.compile(r"^---[ \t]*$", re.MULTILINE)
_TABLE_RE = re.compile(r"(?:^\|[^\n]*\|[ \t]*(?:\n|$)){2,}", re.MULTILINE)
_TABLE_SEPARATOR_RE = re.compile(r"^\|(?:\s*:?-+:?\s*\|)+\s*$")
_BOLD_RE = re.compile(r"\*\*(.+?)\*\*")
_ITALIC_RE = re.compile(r"\*(.+?)\*")
_STRIKE_RE = re.compile(r"~~(.+?)~~")
_INLINE_CODE_RE = re.compile(r"`([^`\n]+)`")
_IMAGE_RE = re.compile(r"!\[([^\]\n]*)\]\(([^)\s]+)\)")
_LINK_RE = re.compile(r"\[([^\]\n]+)\]\(([^)\s]+)\)")
_QUOTE_RE = re.compile(r"^> (.*)$", re.MULTILINE)
_UL_BLOCK_RE = re.compile(r"(?:^- [^\n]*(?:\n|$))+", re.MULTILINE)
_UL_ITEM_RE = re.compile(r"^- (.*)$")
_OL_BLOCK_RE = re.compile(r"(?:^\d+\. [^\n]*(?:\n|$))+", re.MULTILINE)
_OL_ITEM_RE = re.compile(r"^\d+\. (.*)$")
_PARAGRAPH_SPLIT_RE = re.compile(r"\n[ \t]*\n+")
_BLOCK_LINE_RE = re.compile(
    r"^(?:<(?:h[1-6]|ul|ol|li|blockquote|pre|hr|table|div|p)\b|\x00code\d+\x00)"
)


def _list_block(match: re.Match[str], tag: str, item_re: re.Pattern[str]) -> str:
    block = match.group(0)
    items = [item_re.match(line).group(1) for line in block.splitlines() if line]  # type: ignore[union-attr]
    trailing = "\n" if block.endswith("\n") else ""
    body = "".join(f"<li>{item}</li>" for item in items)
    return f"<{tag}>{body}</{tag}>{trailing}"


def _split_row(line: str) -> list[str]:
    return [cell.strip() for cell in line.strip().strip("|").split("|")]


def _table_block(match: re.Match[str]) -> str:
    block = match.group(0)
    lines = [line for line in block.splitlines() if line.strip()]
    if len(lines) < 2 or not _TABLE_SEPARATOR_RE.match(lines[1].strip()):
        return block
    head = "".join(f"<th>{cell}</th>" for cell in _split_row(lines[0]))
    rows = "".join(
        "<tr>" + "".join(f"<td>{cell}</td>" for cell in _split_row(line)) + "</tr>"
        for line in lines[2:]
    )
    trailing = "\n" if block.endswith("\n") else ""
    return (
        f"<table><thead><tr>{head}</tr></thead><tbody>{rows}</tbody></table>{trailing}"
    )


def _normalize_paragraphs(text: str) -> str:
    """Blank lines separate paragraphs; single newlines become ``<br>``."""
    out: list[str] = []
    for chunk in _PARAGRAPH_SPLIT_RE.split(text.strip("\n")):
        inline: list[str] = []
        for line in chunk.split("\n"):
            if _BLOCK_LINE_RE.match(line.strip()):
                if inline:
                    out.append("<p>" + "<br>".join(inline) + "</p>")
                    inline = []
                out.append(line.strip())
            elif line.strip():
                inline.append(line)
        if inline:
            out.append("<p>" + "<br>".join(inline) + "</p>")
    return "\n".join(out)


def basic_to_html(text: str) -> str:
    """Convert markdown with the deterministic substitution rules."""
    if not text:
        return ""

    code_blocks: list[str] = []

    def _stash(match: re.Match[str]) -> str:
        code_blocks.append(f"<pre><code>{html.escape(match.group(1), quote=False)}</code></pre>")
        return _CODE_TOKEN.format(len(code_blocks) - 1)

    out = text.replace("\r\n", "\n")
    out = _FENCE_RE.sub(_stash, out)

    out = _H3_RE.sub(r"<h3>\1</h3>", out)
    out = _H2_RE.sub(r"<h2>\1</h2>", out)
    out = _H1_RE.sub(r"<h1>\1</h1>", out)
    out = _HR_RE.sub("<hr>", out)
    out = _TABLE_RE.sub(_table_block, out)
    out = _BOLD_RE.sub(r"<strong>\1</strong>", out)
    out = _ITALIC_RE.sub(r"<em>\1</em>", out)
    out = _STRIKE_RE.sub(r"<del>\1</del>", out)
    out = _INLINE_CODE_RE.sub(r"<code>\1</code>", out)
    out = _IMAGE_RE.sub(r'<img src="\2" alt="\1">', out)
    out = _LINK_RE.sub(r'<a href="\2">\1</a>', out)
    out = _QUOTE_RE.sub(r"<blockquote>\1</blockquote>", out)
    out = _UL_BLOCK_RE.sub(lambda m: _list_block(m, "ul", _UL_ITEM_RE), out)
    out = _OL_BLOCK_RE.sub(lambda m: _list_block(m, "ol", _OL_ITEM_RE), out)
    out = _normalize_paragraphs(out)

    return _CODE_TOKEN_RE.sub(lambda m: code_blocks[int(m.group(1))], out)


def markdown_lib_to_html(text: str) -> str:
    """Convert markdown with Python-Markdown."""
    if not text:
        return ""
    return md.markdown(text, extensions=MARKDOWN_EXTENSIONS)


def to_html(text: str, engine: RenderEngine | str = RenderEngine.BASIC) -> str:
    """Render markdown to (unsanitized) HTML with the chosen engine."""
    engine = RenderEngine(engine)
    if engine == RenderEngine.MARKDOWN:
        return markdown_lib_to_html(text)
    return basic_to_html(text)
