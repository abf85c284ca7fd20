import unittest

from stringtools import sanitize
from stringtools.config import DEFAULT_CONFIG, AllowlistConfig
from stringtools.errors import MalformedInputError
from stringtools.node import Element
from stringtools.sanitize import Sanitizer, sanitize_fragment, truncate_input
from stringtools.transforms_spec import TransformOutcome
from stringtools.treebuilder import parse_fragment


def _walk_elements(nodes):
    for node in nodes:
        if isinstance(node, Element):
            yield node
            yield from _walk_elements(node.children)


class TestSanitize(unittest.TestCase):
    def test_script_is_removed_with_its_content(self) -> None:
        assert sanitize("<script>alert(1)</script>safe") == "safe"

    def test_no_content_tags_drop_nested_markup(self) -> None:
        assert sanitize("<javascript><b>x</b>y</javascript>z") == "z"
        assert sanitize("<style>p { color: red }</style><p>ok</p>") == "<p>ok</p>"

    def test_unknown_tag_is_unwrapped(self) -> None:
        assert sanitize("<unknown>hello</unknown>") == "hello"

    def test_unwrapped_tag_keeps_allowed_descendants(self) -> None:
        assert sanitize("<section>a <b>b</b> c</section>") == " a <b>b</b> c "

    def test_unwrapped_inline_tag_is_not_padded(self) -> None:
        assert sanitize("x<font>y</font>z") == "xyz"

    def test_comments_are_dropped(self) -> None:
        assert sanitize("a<!-- secret -->b") == "ab"

    def test_disallowed_attributes_are_dropped(self) -> None:
        out = sanitize('<p onclick="x()" align="center" class="c">hi</p>')
        assert out == '<p align="center">hi</p>'

    def test_attribute_free_tags_lose_all_attributes(self) -> None:
        assert sanitize('<b class="x" style="color: red">bold</b>') == "<b>bold</b>"

    def test_style_keeps_only_allowed_properties(self) -> None:
        out = sanitize('<span style="color: red; position: absolute">x</span>')
        assert out.startswith('<span style="')
        assert "color" in out
        assert "position" not in out

    def test_style_with_no_allowed_properties_is_dropped(self) -> None:
        assert sanitize('<span style="position: fixed">x</span>') == "<span>x</span>"

    def test_text_is_escaped(self) -> None:
        assert sanitize("a &lt; b &amp; c") == "a &lt; b &amp; c"

    def test_tables_keep_structure_and_allowed_attributes(self) -> None:
        out = sanitize('<table border="1" onload="x"><tr><td colspan="2" bgcolor="red">c</td></tr></table>')
        assert out == '<table border="1"><tr><td colspan="2">c</td></tr></table>'

    def test_none_and_empty_input(self) -> None:
        assert sanitize(None) == ""
        assert sanitize("") == ""

    def test_bytes_input_is_decoded_as_utf8(self) -> None:
        assert sanitize_fragment("<b>привет</b>".encode()) == "<b>привет</b>"

    def test_undecodable_bytes_raise(self) -> None:
        with self.assertRaises(MalformedInputError):
            sanitize_fragment(b"<b>\xff\xfe</b>")

    def test_pathological_nesting_raises(self) -> None:
        with self.assertRaises(MalformedInputError):
            sanitize("<b>" * (DEFAULT_CONFIG.max_depth + 1) + "x")

    def test_nesting_at_limit_is_sanitized(self) -> None:
        depth = DEFAULT_CONFIG.max_depth
        out = sanitize("<b>" * depth + "x")
        assert out == "<b>" * depth + "x" + "</b>" * depth

    def test_unclosed_siblings_are_closed_implicitly(self) -> None:
        assert sanitize("<p>one<p>two") == "<p>one</p><p>two</p>"
        assert sanitize("<ul><li>a<li>b</ul>") == "<ul><li>a</li><li>b</li></ul>"

    def test_many_unclosed_siblings_do_not_count_as_nesting(self) -> None:
        count = DEFAULT_CONFIG.max_depth + 50
        assert sanitize("<ul>" + "<li>x" * count + "</ul>") == "<ul>" + "<li>x</li>" * count + "</ul>"
        assert sanitize("<p>x" * count) == "<p>x</p>" * count

    def test_sanitize_is_idempotent(self) -> None:
        samples = [
            "<p>Hello <b>world</b></p><script>x()</script>",
            '<a href="http://www.фермаежей.рф/путь?q=a b">link</a>',
            '<a href="http://[broken">text</a> tail',
            '<a href="javascript:alert(1)">x</a>',
            "<section><h1>T</h1><p>p</p></section>",
            '<span style="color: red; position: absolute">x</span>',
            "a &lt; b &amp; c <!-- c -->",
            '<img src="HTTP://Example.COM/a b.png" onerror="x()">',
            "<ul><li>one<li>two</ul>",
        ]
        for x in samples:
            once = sanitize(x)
            assert sanitize(once) == once, x

    def test_output_elements_and_attributes_are_allowlisted(self) -> None:
        x = (
            '<div id="d" align="left"><iframe src="https://evil"></iframe><form action="/x">'
            '<input name="q"><a href="/ok" target="_blank" rel="x">ok</a></form>'
            '<img src="/i.png" alt="a" width="10"></div>'
        )
        out = sanitize(x)
        elements = DEFAULT_CONFIG.element_set()
        for node in _walk_elements(parse_fragment(out)):
            assert node.name in elements, node.name
            assert set(node.attrs) <= DEFAULT_CONFIG.allowed_attributes(node.name), node

    def test_report_callback_sees_removals(self) -> None:
        seen: list[str] = []

        def report(msg: str, *, node=None) -> None:
            _ = node
            seen.append(msg)

        sanitizer = Sanitizer(report=report)
        sanitizer.sanitize('<!-- c --><script>x</script><p onclick="x">a</p><a href="http://[x">b</a>')
        assert "Dropped comment" in seen
        assert "Unsafe tag 'script' (dropped content)" in seen
        assert "Unsafe attribute 'onclick' on <p>" in seen
        assert "LinkNormalizer: unwrap <a>" in seen

    def test_custom_sanitizer_object_is_used(self) -> None:
        class Upper:
            def sanitize(self, text, attributes=None):
                _ = attributes
                return text.upper()

        assert sanitize("<b>x</b>", sanitizer=Upper()) == "<B>X</B>"

    def test_object_without_sanitize_falls_back_to_default(self) -> None:
        assert sanitize("<i>x</i><script>y</script>", sanitizer=object()) == "<i>x</i>"

    def test_custom_transforms_replace_the_default_pipeline(self) -> None:
        def drop_emphasis(node: Element) -> TransformOutcome:
            if node.name == "em":
                return TransformOutcome.REMOVE
            return TransformOutcome.UNCHANGED

        sanitizer = Sanitizer(transforms=[drop_emphasis])
        assert sanitizer.sanitize("a<em>b</em>c") == "ac"

    def test_attribute_overrides_apply_per_call(self) -> None:
        sanitizer = Sanitizer()
        assert sanitizer.sanitize('<a href="/x" title="t">x</a>', {"a": ["title"]}) == '<a title="t">x</a>'
        assert sanitizer.sanitize('<a href="/x" title="t">x</a>') == '<a href="/x">x</a>'


class TestSizeGuard(unittest.TestCase):
    def test_short_input_is_untouched(self) -> None:
        assert truncate_input("abc", 3) == "abc"

    def test_truncation_counts_characters_not_bytes(self) -> None:
        out = truncate_input("привет", 3)
        assert out == "при"
        assert out.encode("utf-8").decode("utf-8") == out

    def test_input_is_truncated_before_parsing(self) -> None:
        config = AllowlistConfig(max_length=8)
        assert sanitize_fragment("<b>abcdef</b>tail", config) == "<b>abcde</b>"

    def test_default_limit(self) -> None:
        assert DEFAULT_CONFIG.max_length == 2**19
        text = "я" * (2**19 + 10)
        assert sanitize(text) == "я" * 2**19
