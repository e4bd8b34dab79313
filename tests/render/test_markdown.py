"""Tests for the markdown-to-HTML converter."""

import pytest
from draftline.render.markdown import RenderEngine, basic_to_html, to_html


class TestBasicInline:
    @pytest.mark.parametrize(
        ("source", "expected"),
        [
            ("**bold**", "<p><strong>bold</strong></p>"),
            ("*it*", "<p><em>it</em></p>"),
            ("~~gone~~", "<p><del>gone</del></p>"),
            ("`x = 1`", "<p><code>x = 1</code></p>"),
            ("[docs](https://example.com)", '<p><a href="https://example.com">docs</a></p>'),
            ("![cat](cat.png)", '<p><img src="cat.png" alt="cat"></p>'),
        ],
    )
    def test_inline_rules(self, source, expected):
        assert basic_to_html(source) == expected

    def test_bold_before_italic(self):
        assert basic_to_html("**a** and *b*") == "<p><strong>a</strong> and <em>b</em></p>"


class TestBasicBlocks:
    def test_headings(self):
        assert basic_to_html("# One") == "<h1>One</h1>"
        assert basic_to_html("## Two") == "<h2>Two</h2>"
        assert basic_to_html("### Three") == "<h3>Three</h3>"

    def test_heading_followed_by_text(self):
        assert basic_to_html("# T\ntext") == "<h1>T</h1>\n<p>text</p>"

    def test_unordered_list(self):
        assert basic_to_html("- a\n- b") == "<ul><li>a</li><li>b</li></ul>"

    def test_ordered_list(self):
        assert basic_to_html("1. a\n2. b") == "<ol><li>a</li><li>b</li></ol>"

    def test_blockquote(self):
        assert basic_to_html("> wise words") == "<blockquote>wise words</blockquote>"

    def test_horizontal_rule(self):
        assert basic_to_html("a\n\n---\n\nb") == "<p>a</p>\n<hr>\n<p>b</p>"

    def test_table(self):
        source = "| A | B |\n|---|---|\n| 1 | 2 |"
        assert basic_to_html(source) == (
            "<table><thead><tr><th>A</th><th>B</th></tr></thead>"
            "<tbody><tr><td>1</td><td>2</td></tr></tbody></table>"
        )

    def test_fenced_code_is_escaped_and_not_formatted(self):
        source = "```\n**not bold** <b>\n```"
        assert basic_to_html(source) == "<pre><code>**not bold** &lt;b&gt;</code></pre>"


class TestParagraphs:
    def test_single_newline_becomes_break(self):
        assert basic_to_html("line one\nline two") == "<p>line one<br>line two</p>"

    def test_blank_line_separates_paragraphs(self):
        assert basic_to_html("first\n\nsecond") == "<p>first</p>\n<p>second</p>"

    def test_list_between_paragraphs(self):
        assert basic_to_html("Intro\n\n- a\n- b\n\nEnd") == (
            "<p>Intro</p>\n<ul><li>a</li><li>b</li></ul>\n<p>End</p>"
        )


class TestEdgeCases:
    def test_empty_input(self):
        assert basic_to_html("") == ""
        assert to_html("", RenderEngine.MARKDOWN) == ""

    def test_unrecognized_syntax_passes_through(self):
        assert basic_to_html("plain @text #tag") == "<p>plain @text #tag</p>"

    def test_raw_html_is_not_escaped(self):
        # Sanitization happens downstream.
        assert "<script>" in basic_to_html("<script>x</script>")


class TestMarkdownEngine:
    def test_table_extension(self):
        html = to_html("| A | B |\n|---|---|\n| 1 | 2 |", "markdown")
        assert "<table>" in html
        assert "<td>1</td>" in html

    def test_nl2br(self):
        assert "<br" in to_html("a\nb", RenderEngine.MARKDOWN)

    def test_default_engine_is_basic(self):
        assert to_html("**x**") == "<p><strong>x</strong></p>"

    def test_unknown_engine(self):
        with pytest.raises(ValueError):
            to_html("x", "pandoc")
