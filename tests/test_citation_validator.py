"""
Unit tests for abnt_review.citation_validator.

Tests citation discovery, author/year parsing, citation-to-reference
matching and the alphabetical order check.
"""

from abnt_review.citation_validator import (
    CITATION_PATTERN,
    CitationValidator,
    check_alphabetical_order,
    find_citations,
    parse_citation_pair,
)

from conftest import make_citation, make_reference


class TestCitationPattern:
    """Tests for CITATION_PATTERN and find_citations()."""

    def test_pattern_when_single_citation_then_matches(self):
        assert CITATION_PATTERN.findall("como mostrado (SILVA, 2020).") == ["SILVA, 2020"]

    def test_pattern_when_grouped_citation_then_single_match(self):
        matches = CITATION_PATTERN.findall("(SILVA, 2020; COSTA, 2019a)")
        assert matches == ["SILVA, 2020; COSTA, 2019a"]

    def test_pattern_when_accented_author_then_matches(self):
        assert CITATION_PATTERN.search("(ASSUNÇÃO, 2015)") is not None

    def test_pattern_when_not_a_citation_then_no_match(self):
        assert CITATION_PATTERN.search("(see page 12)") is None
        assert CITATION_PATTERN.search("(Silva, 2020)") is None
        assert CITATION_PATTERN.search("(SILVA, 20)") is None

    def test_find_citations_keeps_order_and_source(self):
        text = "Primeiro (SILVA, 2020) e depois (COSTA, 2019a)."
        citations = find_citations(text, paragraph_index=4)
        assert [c.full for c in citations] == ["(SILVA, 2020)", "(COSTA, 2019a)"]
        assert citations[1].content == "COSTA, 2019a"
        assert all(c.paragraph_index == 4 and c.source_text == text for c in citations)

    def test_find_citations_when_grouped_then_first_author_used(self):
        citation, = find_citations("(SILVA, 2020; COSTA, 2019a)", 0)
        assert (citation.author, citation.year) == ("SILVA", "2020")


class TestParseCitationPair:
    """Tests for parse_citation_pair()."""

    def test_parse_when_upper_case_then_author_and_year(self):
        assert parse_citation_pair("(SOUZA, 2018)") == ("SOUZA", "2018")

    def test_parse_when_mixed_case_then_author_uppercased(self):
        assert parse_citation_pair("(Souza, 2018b)") == ("SOUZA", "2018b")

    def test_parse_when_no_year_then_none(self):
        assert parse_citation_pair("(SOUZA)") is None


class TestCitationValidator:
    """Tests for matching citations against the reference list."""

    REFERENCES = [
        make_reference("COSTA, Maria. Métodos de pesquisa. São Paulo: Atlas, 2019a."),
        make_reference("SILVA, João. Estudos clássicos. Rio de Janeiro: Record, 2020."),
        make_reference("ZANETTI, Ana. Um livro nunca citado. Curitiba: UFPR, 2015."),
    ]

    def test_normalize_reference_extracts_match_fields(self):
        ref = CitationValidator.normalize_reference("Silva, João. Livro. 2020.")
        assert ref.text == "SILVA, JOÃO. LIVRO. 2020."
        assert ref.match_author == "SILVA"
        assert ref.year == "2020"

    def test_normalize_reference_when_no_year_then_empty(self):
        assert CitationValidator.normalize_reference("ANÔNIMO. Sem data.").year == ''

    def test_match_when_author_and_year_present_then_matched(self):
        validator = CitationValidator()
        refs = [validator.normalize_reference(r.text) for r in self.REFERENCES]
        match = validator.match_citation_to_reference(
            make_citation("(SILVA, 2020)", author="SILVA", year="2020"), refs
        )
        assert match.matched
        assert match.reference.match_author == "SILVA"

    def test_match_when_year_has_lowercase_suffix_then_unmatched(self):
        """The reference text is uppercased, the citation year is not: 2019a never matches 2019A."""
        validator = CitationValidator()
        refs = [validator.normalize_reference(r.text) for r in self.REFERENCES]
        match = validator.match_citation_to_reference(
            make_citation("(COSTA, 2019a)", author="COSTA", year="2019a"), refs
        )
        assert not match.matched
        assert match.reason == "No matching reference for COSTA (2019a)"

    def test_match_when_year_differs_then_unmatched(self):
        validator = CitationValidator()
        refs = [validator.normalize_reference(r.text) for r in self.REFERENCES]
        match = validator.match_citation_to_reference(
            make_citation("(SILVA, 2021)", author="SILVA", year="2021"), refs
        )
        assert not match.matched
        assert match.reference is None

    def test_validate_when_three_refs_two_cited_then_suffixed_year_unmatched(self):
        """Two of three references cited: only the plain year matches."""
        # Arrange
        citations = [
            make_citation("(SILVA, 2020)", author="SILVA", year="2020"),
            make_citation("(COSTA, 2019a)", author="COSTA", year="2019a"),
        ]

        # Act
        result = CitationValidator().validate_citations_and_references(citations, self.REFERENCES)

        # Assert
        assert [m.citation.author for m in result.matched] == ["SILVA"]
        assert [m.citation.author for m in result.unmatched] == ["COSTA"]
        assert [r.match_author for r in result.unused_references] == ["COSTA", "ZANETTI"]

    def test_validate_when_found_in_text_with_suffixed_year_then_unmatched(self):
        citations = find_citations("Texto (SILVA, 2019a).", 0)
        references = [make_reference("SILVA, J. Obra. 2019a.")]

        result = CitationValidator().validate_citations_and_references(citations, references)

        assert (len(result.matched), len(result.unmatched)) == (0, 1)

    def test_validate_when_citation_unparsable_then_skipped(self):
        citations = [make_citation("(SEM ANO)")]
        result = CitationValidator().validate_citations_and_references(citations, self.REFERENCES)
        assert result.matches == []
        assert len(result.skipped_citations) == 1
        assert len(result.unused_references) == 3

    def test_validate_when_no_references_then_every_citation_unmatched(self):
        citations = [make_citation("(SILVA, 2020)", author="SILVA", year="2020")]
        result = CitationValidator().validate_citations_and_references(citations, [])
        assert len(result.unmatched) == 1
        assert result.unused_references == []


class TestAlphabeticalOrder:
    """Tests for check_alphabetical_order()."""

    def test_when_empty_or_single_then_ordered(self):
        assert check_alphabetical_order([])
        assert check_alphabetical_order([make_reference("ZANETTI, Ana.")])

    def test_when_sorted_then_ordered(self):
        refs = [make_reference(t) for t in ("ALVES", "ALMEIDA", "BRITO", "COSTA")]
        assert check_alphabetical_order(refs)

    def test_when_first_letters_decrease_then_not_ordered(self):
        refs = [make_reference(t) for t in ("COSTA", "ALVES", "BRITO")]
        assert not check_alphabetical_order(refs)

    def test_when_leading_whitespace_then_ignored(self):
        refs = [make_reference(t) for t in ("  ALVES", "BRITO")]
        assert check_alphabetical_order(refs)
