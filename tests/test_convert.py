"""End-to-end HTML to Markdown conversion tests.

Covers the documented literal scenarios plus the behavior of the default
Markdown dialect for every tag it maps.
"""

from __future__ import annotations

import pytest

from saxdown import Converter, convert


class TestLiteralScenarios:
    """Exact outputs for the reference inputs."""

    def test_bold(self) -> None:
        assert convert("<b>this is a test</b>") == "**this is a test**"

    def test_italics(self) -> None:
        assert convert("<i>this is a test</i>") == "*this is a test*"

    def test_anchor(self) -> None:
        html = '<a href="http://example.org">this is a test</a>'
        assert convert(html) == "[this is a test](http://example.org)"

    def test_image(self) -> None:
        html = '<img src="http://example.org/test.gif" alt="I am a little teapot">'
        assert convert(html) == "![I am a little teapot](http://example.org/test.gif)"

    def test_paragraph(self) -> None:
        assert convert("<p>this is a test</p>") == "this is a test\n\n"

    def test_headings(self) -> None:
        assert convert("<h1>test</h1><h2>test</h2>") == "# test\n\n## test\n\n"

    def test_all_heading_levels(self) -> None:
        html = "".join(f"<h{n}>test</h{n}>" for n in range(1, 7))
        expected = "".join("#" * n + " test\n\n" for n in range(1, 7))
        assert convert(html) == expected


class TestDefaultDialect:
    """Rendering of the remaining default rules."""

    def test_strong_and_em_aliases(self) -> None:
        assert convert("<strong>a</strong> <em>b</em>") == "**a** *b*"

    def test_ordered_list(self) -> None:
        html = "<ol><li> this is the first <li> this is the second</ol>"
        assert convert(html) == "1. this is the first\n1. this is the second\n\n\n"

    def test_unordered_list(self) -> None:
        html = "<ul><li> this is the first <li> this is the second</ul>"
        assert convert(html) == "* this is the first\n* this is the second\n\n\n"

    def test_pre(self) -> None:
        assert convert("<pre>i am a robot</pre>") == "`i am a robot`"

    def test_blockquote(self) -> None:
        html = "<blockquote>I am a little teapot short and stout</blockquote>"
        assert convert(html) == "> I am a little teapot short and stout\n\n"

    def test_code(self) -> None:
        html = "<code>size_t strcspn(const char[]* str, const char[]* del)</code>"
        expected = "```\nsize_t strcspn(const char[]* str, const char[]* del)\n```\n\n"
        assert convert(html) == expected

    def test_horizontal_rule(self) -> None:
        assert convert("<hr>") == "- - -\n\n"

    def test_text_after_horizontal_rule(self) -> None:
        """The rule's marker is not repeated for text that follows it."""
        assert convert("<hr>after") == "- - -\n\nafter"

    def test_pre_wrapping_code_is_one_block(self) -> None:
        assert convert("<pre><code>x = 1</code></pre>") == "```\nx = 1\n```\n\n"

    def test_link_with_inline_markup(self) -> None:
        html = '<a href="u">foo <b>bar</b></a>'
        assert convert(html) == "[foo **bar**](u)"

    def test_linked_image(self) -> None:
        html = '<a href="u"><img src="s" alt="x"></a>'
        assert convert(html) == "[![x](s)](u)"

    def test_text_after_link(self) -> None:
        assert convert('<a href="u">x</a> tail') == "[x](u) tail"

    def test_link_without_href(self) -> None:
        assert convert("<a>x</a>") == "[x]()"

    def test_entities_are_decoded(self) -> None:
        assert convert("<b>fish &amp; chips</b>") == "**fish & chips**"


class TestBlockSpacing:
    """Blank lines between blocks, single breaks inside indented blocks."""

    def test_sibling_blocks_separated_by_one_blank_line(self) -> None:
        assert convert("<p>a</p><p>b</p>") == "a\n\nb\n\n"

    def test_inline_then_block(self) -> None:
        assert convert("<b>a</b><p>b</p>") == "**a**\n\nb\n\n"

    def test_nested_block_separated_by_line_break(self) -> None:
        assert convert("<blockquote>a<p>b</p></blockquote>") == "> a\n> b\n\n\n"

    def test_quote_with_paragraphs(self) -> None:
        """Sibling blocks inside a quote share one line break, no blank line."""
        html = "<blockquote><p>a</p><p>b</p></blockquote>"
        assert convert(html) == ">\n> a\n> b\n\n\n"


class TestLists:
    """List item variants and nesting."""

    def test_nested_unordered_list_is_indented(self) -> None:
        html = "<ul><li>a<ul><li>b</li></ul></li></ul>"
        assert convert(html) == "* a\n\n\t* b\n\n\n\n\n\n"

    def test_item_variant_follows_innermost_list(self) -> None:
        html = "<ul><li>a<ol><li>b</li></ol></li><li>c</li></ul>"
        assert convert(html) == "* a\n\n\t1. b\n\n\n\n* c\n\n\n"

    def test_item_outside_list_passes_through(self) -> None:
        assert convert("<li>x</li>") == "<li>x</li>"

    def test_item_outside_list_stripped(self) -> None:
        assert convert("<li>x</li>", strip_tags=True) == "x"


class TestUnmappedTags:
    """Pass-through and stripping of tags the dialect does not map."""

    def test_pass_through_reconstructs_tags(self) -> None:
        assert convert('<span class="c">x</span>') == '<span class="c">x</span>'

    def test_strip_tags_keeps_text(self) -> None:
        assert convert('<span class="c">x</span>', strip_tags=True) == "x"

    def test_void_element_has_no_end_tag(self) -> None:
        assert convert("a<br>b") == "a<br>b"

    def test_mapped_tags_inside_unmapped(self) -> None:
        assert convert("<div><b>x</b></div>", strip_tags=True) == "**x**"


class TestWhitespace:
    """Source whitespace normalization and output cleanup."""

    def test_newlines_and_tabs_stripped_from_source(self) -> None:
        assert convert("<p>\n\ta</p>") == "a\n\n"

    def test_double_space_collapsed(self) -> None:
        assert convert("<p>a  b</p>") == "a b\n\n"

    def test_space_before_line_break_removed(self) -> None:
        assert convert("<ul><li>a </li></ul>") == "* a\n\n\n"


class TestUnclosedInput:
    """Tags still open at end of input are closed."""

    def test_unclosed_inline(self) -> None:
        assert convert("<b>unclosed") == "**unclosed**"

    def test_unclosed_nested(self) -> None:
        assert convert("<b><i>x") == "***x***"

    def test_unclosed_link(self) -> None:
        assert convert('<a href="u">x') == "[x](u)"


class TestConverterReuse:
    """A converter carries no state between calls."""

    @pytest.mark.parametrize(
        "html",
        [
            "<ul><li>a<li>b",
            '<a href="u">unclosed <b>link',
            "<pre><code>x</code></pre><p>y</p>",
            "<blockquote><ol><li>deep</li></ol>",
        ],
    )
    def test_identical_output_on_repeat(self, html: str) -> None:
        converter = Converter()
        first = converter.write(html)
        second = converter.write(html)
        assert first == second
        assert first == Converter().write(html)

    def test_call_alias(self) -> None:
        converter = Converter()
        assert converter("<b>x</b>") == converter.write("<b>x</b>")

    def test_mapping_dialect(self) -> None:
        converter = Converter(dialect={"b": {"open": "__", "close": "__"}})
        assert converter("<b>x</b><i>y</i>") == "__x__<i>y</i>"
