"""Tests for mdmermaid.escape: entity codec and highlighting stripper."""

import pytest

from mdmermaid.escape import escape_html, strip_highlight_markup, unescape_html


class TestEscapeHtml:
    def test_escapes_all_five_characters(self):
        assert escape_html("& < > \" '") == "&amp; &lt; &gt; &quot; &#39;"

    def test_arrow(self):
        assert escape_html("A-->B") == "A--&gt;B"

    def test_plain_text_unchanged(self):
        assert escape_html("graph TD") == "graph TD"

    def test_empty(self):
        assert escape_html("") == ""


class TestUnescapeHtml:
    def test_decodes_standard_entities(self):
        assert unescape_html("&lt;b&gt; &quot;x&quot; &#39;y&#39;") == "<b> \"x\" 'y'"

    def test_decodes_hex_apostrophe(self):
        assert unescape_html("it&#x27;s") == "it's"

    def test_literal_entity_text_decodes_once(self):
        # "&amp;lt;" is the escaped form of the literal text "&lt;"
        assert unescape_html("&amp;lt;") == "&lt;"

    def test_ampersand(self):
        assert unescape_html("A &amp; B") == "A & B"

    @pytest.mark.parametrize(
        "text",
        [
            "A-->B",
            'A["Hello <world>"]',
            "Alice->>Bob: it's & done",
            "&lt; already looks escaped &amp;",
            "&#39;&quot;&#x27;",
            "",
        ],
    )
    def test_round_trip(self, text):
        assert unescape_html(escape_html(text)) == text


class TestStripHighlightMarkup:
    def test_single_span(self):
        html = '<span class="hljs-keyword">graph</span> TD'
        assert strip_highlight_markup(html) == "graph TD"

    def test_nested_spans(self):
        html = '<span class="hljs-section"><span class="hljs-keyword">graph</span> TD</span>'
        assert strip_highlight_markup(html) == "graph TD"

    def test_keeps_entity_encoded_text(self):
        html = 'A<span class="hljs-operator">--&gt;</span>B'
        assert strip_highlight_markup(html) == "A--&gt;B"

    def test_multiple_classes_on_span(self):
        html = '<span class="token hljs-string">"x"</span>'
        assert strip_highlight_markup(html) == '"x"'

    def test_other_spans_untouched(self):
        html = '<span class="note">keep</span>'
        assert strip_highlight_markup(html) == html

    def test_custom_prefix(self):
        html = '<span class="tok-kw">graph</span> LR'
        assert strip_highlight_markup(html, prefix="tok-") == "graph LR"

    def test_highlight_span_around_plain_span(self):
        html = '<span class="hljs-a"><span class="x">A</span>--&gt;B</span>'
        assert strip_highlight_markup(html) == '<span class="x">A</span>--&gt;B'

    def test_plain_span_around_highlight_span(self):
        html = '<span class="x"><span class="hljs-a">A</span></span>'
        assert strip_highlight_markup(html) == '<span class="x">A</span>'

    def test_deeply_mixed_nesting(self):
        html = (
            '<span class="hljs-section"><span class="note">'
            '<span class="hljs-keyword">graph</span></span> TD</span>'
        )
        assert strip_highlight_markup(html) == '<span class="note">graph</span> TD'

    def test_single_quoted_class(self):
        assert strip_highlight_markup("<span class='hljs-keyword'>pie</span>") == "pie"

    def test_prefix_must_start_a_class_token(self):
        html = '<span class="nohljs">x</span>'
        assert strip_highlight_markup(html) == html

    def test_stray_close_tag_kept(self):
        assert strip_highlight_markup("a</span>b") == "a</span>b"
