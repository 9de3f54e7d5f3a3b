"""
Unit tests for CSS color extraction.

Tests literal matching across notations, deduplication by canonical hex,
frequency ranking and page-title lookup.
"""

from unittest.mock import Mock

import pytest

from prizm.services.colors.extraction import (
    DEFAULT_LIMIT, UNKNOWN_TITLE, USAGE_CSS, USAGE_INLINE, USAGE_STYLE,
    extract_colors, extract_css_colors, extract_from_text, extract_page_title,
    find_color_literals, rank_colors, split_fragments,
)
from prizm.services.colors.parser import parse


class TestLiteralMatching:
    """Test the raw matchers."""

    def test_all_notations_found(self):
        css = (
            "a { color: #3498db; } "
            "b { color: rgb(255 0 0); } "
            "c { color: hsl(120, 100%, 50%); } "
            "d { color: oklch(0.5 0.1 200); } "
            "e { color: hwb(0 0% 0%); } "
            "f { color: navy; } "
            "g { color: lab(50 20 30); }"
        )
        matchers = {m.matcher for m in find_color_literals(css)}
        assert matchers == {"hex", "rgb", "hsl", "oklch", "hwb", "named", "modern"}

    def test_matches_in_document_order(self):
        matches = find_color_literals("x { color: navy; border-color: #fff; }")
        assert [m.text for m in matches] == ["navy", "#fff"]

    def test_html_entities_are_not_hex(self):
        assert find_color_literals("It&#8217;s &#123; fine") == []

    def test_named_color_needs_word_boundaries(self):
        texts = [m.text for m in find_color_literals(".redirect { x: bored; } .btn-red {}")]
        assert texts == []

    def test_comments_and_scripts_ignored(self):
        html = (
            "<!-- #111111 --><script>var c = '#222222';</script>"
            "<style>/* #333333 */ p { color: #444444; }</style>"
        )
        assert [m.text for m in find_color_literals(html)] == ["#444444"]


class TestFragments:
    def test_usage_tags(self):
        html = (
            '<style>h1 { color: #111111; }</style>'
            '<div style="color: #222222">text</div>'
            '<p>#333333</p>'
        )
        usages = {m.text: m.usage for m in find_color_literals(html)}
        assert usages == {"#111111": USAGE_STYLE, "#222222": USAGE_INLINE, "#333333": USAGE_CSS}

    def test_unquoted_style_attribute_is_inline(self):
        (match,) = find_color_literals("<div style=color:#123456>x</div>")
        assert (match.text, match.usage) == ("#123456", USAGE_INLINE)

    def test_matches_ordered_across_fragments(self):
        html = (
            '<div style="color: #111111">one</div>'
            '<style>p { color: #222222; }</style>'
            '<p>#333333 and #444444</p>'
        )
        matches = find_color_literals(html)
        assert [m.text for m in matches] == ["#111111", "#222222", "#333333", "#444444"]
        assert matches[3].position > matches[2].position

    def test_other_attribute_values_scanned_as_css(self):
        (match,) = find_color_literals('<font color="teal">x</font>')
        assert (match.text, match.usage) == ("teal", USAGE_CSS)

    def test_script_attributes_ignored(self):
        assert find_color_literals('<script data-color="#abcdef" src="a.js"></script>') == []

    def test_split_fragments_keeps_remaining_css(self):
        fragments = split_fragments("body { color: red; }")
        assert fragments == [(USAGE_CSS, "body { color: red; }")]

    def test_css_comments_blanked_inside_fragment(self):
        ((usage, text),) = split_fragments("<style>/* #000 */ a { color: #fff; }</style>")
        assert usage == USAGE_STYLE
        assert "#000" not in text
        assert text.index("#fff") == len("/* #000 */ a { color: ")


class TestDedupAndRanking:
    """Test grouping by hex and frequency ordering."""

    def test_equivalent_literals_grouped(self):
        text = "a { color: #FF0000; } b { color: #ff0000; } c { color: rgb(255,0,0); }"
        entries = extract_colors(text)
        assert len(entries) == 1
        assert entries[0].hex == "#ff0000"
        assert entries[0].count == 3

    def test_ranking_with_stable_ties(self):
        a, b, c, d = (parse(x) for x in ("#0000ff", "#00ff00", "#ff0000", "#ffff00"))
        candidates = [(a, USAGE_CSS)] + [(b, USAGE_CSS)] * 3 + [(c, USAGE_CSS)] * 5 + [(d, USAGE_CSS)] * 3
        entries = rank_colors(candidates)
        assert [e.count for e in entries] == [5, 3, 3, 1]
        assert [e.hex for e in entries] == ["#ff0000", "#00ff00", "#ffff00", "#0000ff"]

    def test_first_seen_usage_retained(self):
        html = '<div style="color: #123456"></div><style>p { color: #123456; }</style>'
        (entry,) = extract_colors(html)
        assert entry.count == 2
        assert entry.usage == USAGE_INLINE

    def test_limit(self):
        css = " ".join(f"x {{ color: #{i:02x}0000; }}" for i in range(20))
        assert len(extract_colors(css)) == DEFAULT_LIMIT
        assert len(extract_colors(css, limit=5)) == 5
        assert len(extract_colors(css, limit=None)) == 20

    def test_invalid_literals_rejected(self):
        result = extract_from_text("a { color: rgb(300, 0, 0); } b { color: #00ff00; }")
        assert result.hex_colors() == ["#00ff00"]
        assert result.rejected_matches == 1

    def test_translucent_colors_keep_alpha_in_key(self):
        entries = extract_colors("a { color: rgba(255, 0, 0, 0.5); } b { color: #ff0000; }")
        assert {e.hex for e in entries} == {"#ff000080", "#ff0000"}

    def test_deterministic(self):
        html = "<style>a { color: #abc; } b { color: teal; }</style><p style='color: #abc'>x</p>"
        assert extract_colors(html) == extract_colors(html)

    def test_empty_text(self):
        assert extract_colors("") == []


class TestPageTitle:
    def test_title_tag(self):
        assert extract_page_title("<title> My &amp; Site </title>") == "My & Site"

    def test_og_title_fallback(self):
        html = '<meta property="og:title" content="OG Title">'
        assert extract_page_title(html) == "OG Title"

    def test_twitter_title_fallback(self):
        html = '<meta name="twitter:title" content="Tweet Title">'
        assert extract_page_title(html) == "Tweet Title"

    def test_og_title_with_reversed_attributes(self):
        html = '<meta content="Shop Name" property="og:title">'
        assert extract_page_title(html) == "Shop Name"

    def test_title_preferred_over_meta(self):
        html = '<head><meta property="og:title" content="OG"><title>Real</title></head>'
        assert extract_page_title(html) == "Real"

    def test_empty_title_falls_back_to_meta(self):
        html = '<title>  </title><meta name="twitter:title" content="Tweet Title">'
        assert extract_page_title(html) == "Tweet Title"

    def test_placeholder(self):
        assert extract_page_title("<p>nothing</p>") == UNKNOWN_TITLE


class TestExtractFromUrl:
    """Test the fetching wrapper with an injected session."""

    def test_extracts_from_fetched_page(self):
        response = Mock(ok=True, status_code=200, encoding="utf-8",
                        text="<title>Shop</title><style>a { color: #3498db; }</style>")
        session = Mock()
        session.get.return_value = response

        result = extract_css_colors("example.com", proxies=["https://proxy.test/?"], session=session)

        assert result.page_title == "Shop"
        assert result.url == "example.com"
        assert result.hex_colors() == ["#3498db"]
        assert "fetch" in result.timings_ms
        session.get.assert_called_once()
