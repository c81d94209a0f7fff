"""
Unit Tests for the Style Cascade Resolver

Tests stylesheet parsing and inline > class > tag > span > parent precedence.
"""

from bs4 import BeautifulSoup

from abnt_review.loader import StyleSheet, load_html, parse_declarations
from abnt_review.styles import MAX_ANCESTOR_DEPTH, ResolvedStyle, StyleResolver


def _resolver(css, body):
    loaded = load_html(f"<html><head><style>{css}</style></head><body>{body}</body></html>")
    return StyleResolver(loaded.stylesheet), loaded.soup


class TestStyleSheet:
    """Tests for the selector -> property map."""

    def test_parse_declarations_when_empty_value_then_dropped(self):
        assert parse_declarations("font-size:12pt; color: ;line-height : 150%") == {
            'font-size': '12pt',
            'line-height': '150%',
        }

    def test_parse_when_selector_group_then_each_selector_gets_properties(self):
        sheet = StyleSheet.parse("p.MsoNormal, li.MsoNormal {font-size:12.0pt}")
        assert sheet.get('p.MsoNormal', 'font-size') == '12.0pt'
        assert sheet.get('li.MsoNormal', 'font-size') == '12.0pt'

    def test_parse_when_selector_repeated_then_later_values_win(self):
        sheet = StyleSheet.parse("p {font-size:10pt; color:red} p {font-size:12pt}")
        assert sheet.get('p', 'font-size') == '12pt'
        assert sheet.get('p', 'color') == 'red'

    def test_parse_when_comments_then_ignored(self):
        sheet = StyleSheet.parse("<!-- /* Font Definitions */ h1 {font-size:14pt} -->")
        assert sheet.selectors == ['h1']

    def test_from_soup_when_several_style_blocks_then_all_read(self):
        soup = BeautifulSoup(
            "<html><head><style>h1 {font-size:14pt}</style>"
            "<style>h2 {font-size:13pt}</style></head></html>",
            "lxml"
        )
        sheet = StyleSheet.from_soup(soup)
        assert 'h1' in sheet
        assert 'h2' in sheet
        assert len(sheet) == 2

    def test_get_when_unknown_selector_then_none(self):
        assert StyleSheet.parse("").get('p', 'font-size') is None


class TestStyleResolver:
    """Tests for cascade precedence."""

    def test_resolve_when_inline_style_then_beats_class_rule(self):
        resolver, soup = _resolver(
            "p.MsoNormal {font-size:12pt}",
            "<p class=MsoNormal style='font-size:10pt'>x</p>"
        )
        assert resolver.resolve(soup.find('p'), 'font-size') == '10pt'

    def test_resolve_when_tag_class_and_class_rules_then_tag_class_wins(self):
        resolver, soup = _resolver(
            ".MsoNormal {font-size:11pt} p.MsoNormal {font-size:12pt} p {font-size:9pt}",
            "<p class=MsoNormal>x</p>"
        )
        assert resolver.resolve(soup.find('p'), 'font-size') == '12pt'

    def test_resolve_when_only_class_rule_then_beats_tag_rule(self):
        resolver, soup = _resolver(
            ".Body {font-size:11pt} p {font-size:9pt}",
            "<p class=Body>x</p>"
        )
        assert resolver.resolve(soup.find('p'), 'font-size') == '11pt'

    def test_resolve_when_only_tag_rule_then_used(self):
        resolver, soup = _resolver("p {font-size:9pt}", "<p>x</p>")
        assert resolver.resolve(soup.find('p'), 'font-size') == '9pt'

    def test_resolve_when_several_classes_then_each_token_tried(self):
        resolver, soup = _resolver(
            "p.Second {text-align:center}",
            "<p class='First Second'>x</p>"
        )
        assert resolver.resolve(soup.find('p'), 'text-align') == 'center'

    def test_resolve_when_declared_on_span_then_span_value_used(self):
        resolver, soup = _resolver(
            "",
            "<p><span style='font-family:\"Arial\",sans-serif'>x</span></p>"
        )
        assert resolver.resolve(soup.find('p'), 'font-family') == '"Arial",sans-serif'

    def test_resolve_when_element_and_span_declare_then_element_wins(self):
        resolver, soup = _resolver(
            "",
            "<p style='font-size:12pt'><span style='font-size:8pt'>x</span></p>"
        )
        assert resolver.resolve(soup.find('p'), 'font-size') == '12pt'

    def test_resolve_when_only_ancestor_declares_then_inherited(self):
        resolver, soup = _resolver(
            "div.WordSection1 {margin-left:3cm}",
            "<div class=WordSection1><p>x</p></div>"
        )
        assert resolver.resolve(soup.find('p'), 'margin-left') == '3cm'

    def test_resolve_when_nothing_declares_then_none(self):
        resolver, soup = _resolver("", "<div><p>x</p></div>")
        assert resolver.resolve(soup.find('p'), 'line-height') is None

    def test_resolve_when_empty_inline_value_then_treated_as_absent(self):
        resolver, soup = _resolver("p {font-size:12pt}", "<p style='font-size:'>x</p>")
        assert resolver.resolve(soup.find('p'), 'font-size') == '12pt'

    def test_resolve_when_depth_limited_then_stops_walking(self):
        resolver, soup = _resolver(
            "div.Outer {text-align:right}",
            "<div class=Outer><div><div><p>x</p></div></div></div>"
        )
        resolver.max_depth = 1
        assert resolver.resolve(soup.find('p'), 'text-align') is None

    def test_default_depth_guard_is_generous(self):
        assert MAX_ANCESTOR_DEPTH >= 64

    def test_resolve_all_returns_every_tracked_property(self):
        resolver, soup = _resolver(
            "p.MsoNormal {font-size:12pt; line-height:150%; text-align:justify}",
            "<p class=MsoNormal style='text-indent:35.4pt'>x</p>"
        )
        styles = resolver.resolve_all(soup.find('p'))
        assert styles == ResolvedStyle(
            font_size='12pt',
            line_height='150%',
            text_align='justify',
            text_indent='35.4pt'
        )
        assert styles.get('text-indent') == '35.4pt'
        assert styles.to_dict()['font_family'] is None
