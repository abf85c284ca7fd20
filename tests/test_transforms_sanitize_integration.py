from __future__ import annotations

import unittest

from stringtools import sanitize


class TestTransformsSanitizeIntegration(unittest.TestCase):
    def test_idn_link_is_punycode_encoded(self) -> None:
        out = sanitize('<a href="http://www.фермаежей.рф">x</a>')
        assert out == '<a href="http://www.xn--80ajbaetq5a8a.xn--p1ai/">x</a>'

    def test_malformed_link_keeps_its_text(self) -> None:
        assert sanitize('<a href="http://[broken">text</a> tail') == "text tail"

    def test_malformed_image_source_unwraps_image(self) -> None:
        assert sanitize('a<img src="http://x:y/">b') == "ab"

    def test_javascript_link_loses_href(self) -> None:
        assert sanitize('<a href="javascript:alert(1)" target="_blank">x</a>') == '<a target="_blank">x</a>'

    def test_iframe_is_unwrapped_without_override(self) -> None:
        assert sanitize('<iframe src="https://www.youtube.com/embed/x"></iframe>ok') == "ok"

    def test_trusted_iframe_is_kept_with_configured_attributes(self) -> None:
        out = sanitize(
            '<iframe src="https://www.youtube.com/embed/x" width="560" onload="x()"></iframe>',
            {"iframe": ["src", "width", "height"]},
        )
        assert out == '<iframe src="https://www.youtube.com/embed/x" width="560"></iframe>'

    def test_untrusted_iframe_is_removed_with_children(self) -> None:
        out = sanitize(
            '<iframe src="https://evil.example/embed"><b>fallback</b></iframe>after',
            {"iframe": ["src"]},
        )
        assert out == "after"

    def test_transformers_see_structurally_clean_children(self) -> None:
        out = sanitize('<a href="/x"><script>bad()</script><span onclick="y">in</span></a>')
        assert out == '<a href="/x"><span>in</span></a>'

    def test_link_inside_unwrapped_container_is_normalized(self) -> None:
        out = sanitize('<font><a href="HTTP://EXAMPLE.COM">x</a></font>')
        assert out == '<a href="http://example.com/">x</a>'
