"""Tests for the bleach-based HTML sanitizer."""

from draftline.render.sanitizer import (
    EMAIL_POLICY,
    EMBED_PREVIEW_POLICY,
    PREVIEW_POLICY,
    sanitize,
)


class TestPreviewPolicy:
    def test_keeps_allowed_markup(self):
        html = "<h2>Title</h2><p><strong>a</strong> <em>b</em></p><ul><li>c</li></ul>"
        assert sanitize(html) == html

    def test_script_removed_with_content(self):
        assert sanitize("<p>hi</p><script>alert(1)</script>") == "<p>hi</p>"

    def test_style_block_removed_with_content(self):
        assert sanitize("<style>p { color: red }</style><p>x</p>") == "<p>x</p>"

    def test_unclosed_style_drops_to_end(self):
        assert sanitize("<p>a</p><style>body { display: none }") == "<p>a</p>"

    def test_unclosed_script_drops_to_end(self):
        assert sanitize("<p>a</p><script>alert(1)") == "<p>a</p>"

    def test_void_embed_keeps_following_content(self):
        assert sanitize('<embed src="https://x.example/a.swf"><p>after</p>') == "<p>after</p>"

    def test_event_handlers_stripped(self):
        html = '<a href="https://example.com" onclick="evil()">x</a>'
        assert sanitize(html) == '<a href="https://example.com">x</a>'

    def test_javascript_url_dropped(self):
        out = sanitize('<a href="javascript:alert(1)">x</a>')
        assert "javascript" not in out
        assert ">x</a>" in out

    def test_data_url_image_dropped(self):
        out = sanitize('<img src="data:image/png;base64,AAAA" alt="x">')
        assert "data:" not in out

    def test_mailto_allowed(self):
        html = '<a href="mailto:hi@example.com">mail</a>'
        assert sanitize(html) == html

    def test_unknown_tag_stripped_text_kept(self):
        assert sanitize("<marquee>hey</marquee>") == "hey"

    def test_inline_style_stripped(self):
        assert sanitize('<p style="color:red">x</p>') == "<p>x</p>"

    def test_comments_stripped(self):
        assert sanitize("<!-- note --><p>x</p>") == "<p>x</p>"

    def test_iframe_removed(self):
        assert sanitize('<iframe src="https://video.example/e/1"></iframe>ok') == "ok"

    def test_empty(self):
        assert sanitize("") == ""

    def test_explicit_policy_matches_default(self):
        html = "<p onclick='x()'>a</p>"
        assert sanitize(html, PREVIEW_POLICY) == sanitize(html)


class TestEmbedPolicy:
    def test_iframe_allowed(self):
        out = sanitize(
            '<iframe src="https://www.youtube.com/embed/abc" onload="x()"></iframe>',
            EMBED_PREVIEW_POLICY,
        )
        assert "<iframe" in out
        assert "youtube.com/embed/abc" in out
        assert "onload" not in out

    def test_base_policy_unchanged(self):
        assert "iframe" not in PREVIEW_POLICY.tags


class TestEmailPolicy:
    def test_keeps_allowed_css(self):
        out = sanitize('<p style="color: red;">x</p>', EMAIL_POLICY)
        assert "color" in out

    def test_drops_disallowed_css(self):
        out = sanitize('<div style="position: fixed; color: red;">x</div>', EMAIL_POLICY)
        assert "position" not in out
        assert "color" in out

    def test_keeps_layout_tables(self):
        out = sanitize(
            '<table role="presentation" width="600"><tr><td align="center">x</td></tr></table>',
            EMAIL_POLICY,
        )
        assert 'role="presentation"' in out
        assert 'align="center"' in out

    def test_still_removes_scripts(self):
        assert "alert" not in sanitize("<div>a<script>alert(1)</script></div>", EMAIL_POLICY)
