"""
Unit tests for abnt_review.text.

Tests flattening of element content with emphasis markers.
"""

from bs4 import BeautifulSoup

from abnt_review.text import extract_text


def _first(html, tag='p'):
    return BeautifulSoup(html, 'lxml').find(tag)


class TestExtractText:
    """Tests for extract_text()."""

    def test_extract_text_when_bold_and_italic_then_marked(self):
        element = _first("<p>Um <b>termo</b> e <i>outro</i></p>")
        assert extract_text(element) == "Um **termo** e _outro_"

    def test_extract_text_when_strong_and_em_then_marked_like_b_and_i(self):
        element = _first("<p><strong>forte</strong> <em>enfase</em></p>")
        assert extract_text(element) == "**forte** _enfase_"

    def test_extract_text_when_nested_spans_then_unwrapped(self):
        element = _first("<p><span lang=PT-BR><span><b>REFERÊNCIAS</b></span></span></p>")
        assert extract_text(element) == "**REFERÊNCIAS**"

    def test_extract_text_when_non_breaking_space_then_plain_space(self):
        element = _first("<p>1&nbsp;INTRODUÇÃO</p>")
        assert extract_text(element) == "1 INTRODUÇÃO"

    def test_extract_text_when_comment_then_skipped(self):
        element = _first("<p>antes<!-- [if !supportLists] -->depois</p>")
        assert extract_text(element) == "antesdepois"

    def test_extract_text_when_word_office_tags_then_ignored(self):
        element = _first("<p>texto<o:p></o:p></p>")
        assert extract_text(element) == "texto"

    def test_extract_text_when_padded_then_trimmed(self):
        element = _first("<p>  <span> dentro </span>  </p>")
        assert extract_text(element) == "dentro"

    def test_extract_text_when_empty_element_then_empty_string(self):
        assert extract_text(_first("<p></p>")) == ""

    def test_extract_text_is_stable_across_calls(self):
        """The tree is not modified, so repeated calls agree."""
        element = _first("<p>Um <b>termo</b>&nbsp;final</p>")
        assert extract_text(element) == extract_text(element)
