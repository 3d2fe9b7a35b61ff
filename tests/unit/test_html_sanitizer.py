# tests/unit/test_html_sanitizer.py
"""Tests for the bleach-backed paste sanitizer."""

from html_sanitizer import BleachSanitizer, NoOpSanitizer
from redirect_rules import strip_outlook_safelinks
from tests.conftest import SAFELINK_URL


class TestBleachSanitizer:
    def test_allowed_markup_preserved(self):
        html = '<p><strong>Bold</strong> and <a href="https://www.ucf.edu/">a link</a></p>'
        assert BleachSanitizer().clean(html) == html

    def test_removes_script_and_style_content(self):
        html = "<style>p { color: red; }</style><p>Hi</p><script>alert('x')</script>"
        assert BleachSanitizer().clean(html) == "<p>Hi</p>"

    def test_strips_disallowed_tags_keeps_text(self):
        assert BleachSanitizer().clean("<section><p>Hi</p></section>") == "<p>Hi</p>"

    def test_removes_disallowed_protocol(self):
        result = BleachSanitizer().clean('<a href="javascript:alert(1)">x</a>')
        assert result == "<a>x</a>"

    def test_link_transform_applied(self):
        sanitizer = BleachSanitizer(link_transform=strip_outlook_safelinks)
        result = sanitizer.clean(f'<a href="{SAFELINK_URL}" title="t">x</a>')
        assert result == '<a href="https://www.ucf.edu/" title="t">x</a>'

    def test_link_transform_skips_anchor_without_href(self):
        calls = []

        def transform(url):
            calls.append(url)
            return url

        BleachSanitizer(link_transform=transform).clean('<a title="t">x</a>')
        assert calls == []

    def test_link_transform_only_touches_anchors(self):
        sanitizer = BleachSanitizer(link_transform=lambda url: "https://changed.example/")
        html = '<img src="https://www.ucf.edu/a.png" alt="a">'
        assert sanitizer.clean(html) == html

    def test_rejects_transform_result_with_disallowed_protocol(self):
        sanitizer = BleachSanitizer(link_transform=lambda url: "javascript:alert(1)")
        html = '<a href="https://www.ucf.edu/">x</a>'
        assert sanitizer.clean(html) == html

    def test_allows_relative_transform_result(self):
        sanitizer = BleachSanitizer(link_transform=lambda url: "/news/")
        assert sanitizer.clean('<a href="https://www.ucf.edu/">x</a>') == '<a href="/news/">x</a>'

    def test_non_string_passes_through(self):
        assert BleachSanitizer().clean(None) is None


class TestNoOpSanitizer:
    def test_returns_input(self):
        html = "<script>alert(1)</script>"
        assert NoOpSanitizer().clean(html) == html
