"""
Citation and Reference Validator Module
Finds ABNT author-date citations and matches them to the reference list.
"""

import re
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence, Tuple

from .models import Citation, ReferenceEntry


# (SILVA, 2020) or (SILVA, 2020; COSTA, 2019a)
CITATION_PATTERN = re.compile(
    r'\('                                           # Open paren
    r'([A-Z][A-ZÀ-Ú\s]+,\s*\d{4}[a-z]?'             # AUTHOR, Year[suffix]
    r'(?:;\s*[A-Z][A-ZÀ-Ú\s]+,\s*\d{4}[a-z]?)*)'    # ; AUTHOR, Year ...
    r'\)'                                           # Close paren
)

# First capitalised name token, then the first year after it
CITATION_PAIR_PATTERN = re.compile(
    r"([A-ZÀ-Ú][A-Za-zÀ-ú.'-]+).*?(\d{4}[a-z]?)",
    re.IGNORECASE
)

REFERENCE_YEAR_PATTERN = re.compile(r'\d{4}[a-z]?')


def parse_citation_pair(citation_text: str) -> Optional[Tuple[str, str]]:
    """
    Best-effort (AUTHOR, year) extraction from a citation.

    Deliberately loose: multi-author and inverted-name citations resolve to
    their first name token.
    """
    match = CITATION_PAIR_PATTERN.search(citation_text)
    if not match:
        return None
    return match.group(1).strip().upper(), match.group(2)


def find_citations(text: str, paragraph_index: int) -> List[Citation]:
    """Return every citation in one paragraph's text, in order."""
    citations = []
    for match in CITATION_PATTERN.finditer(text):
        pair = parse_citation_pair(match.group(0))
        author, year = pair if pair else (None, None)
        citations.append(Citation(
            full=match.group(0),
            content=match.group(1),
            paragraph_index=paragraph_index,
            source_text=text,
            author=author,
            year=year
        ))
    return citations


@dataclass(frozen=True)
class NormalizedReference:
    """Reference entry prepared for substring matching."""
    raw: str
    text: str           # uppercased full text
    match_author: str   # first token, trailing comma removed
    year: str           # first year-like run, '' if none


@dataclass
class CitationMatch:
    citation: Citation
    reference: Optional[NormalizedReference]
    matched: bool
    reason: str = ""


@dataclass
class ConsistencyResult:
    """Outcome of pairing citations with the reference list."""
    matches: List[CitationMatch] = field(default_factory=list)
    skipped_citations: List[Citation] = field(default_factory=list)
    unused_references: List[NormalizedReference] = field(default_factory=list)

    @property
    def matched(self) -> List[CitationMatch]:
        return [m for m in self.matches if m.matched]

    @property
    def unmatched(self) -> List[CitationMatch]:
        return [m for m in self.matches if not m.matched]


class CitationValidator:
    """Pairs in-text citations with reference entries by author/year substrings."""

    @staticmethod
    def normalize_reference(reference_text: str) -> NormalizedReference:
        tokens = reference_text.split(' ')
        year_match = REFERENCE_YEAR_PATTERN.search(reference_text)
        return NormalizedReference(
            raw=reference_text,
            text=reference_text.upper(),
            match_author=tokens[0].rstrip(',').upper(),
            year=year_match.group(0) if year_match else ''
        )

    def match_citation_to_reference(
        self,
        citation: Citation,
        references: Sequence[NormalizedReference]
    ) -> CitationMatch:
        """First reference whose text contains both the author and the year."""
        if not citation.author or not citation.year:
            return CitationMatch(citation, None, False, "Could not parse author/year from citation")

        for ref in references:
            if citation.author in ref.text and citation.year in ref.text:
                return CitationMatch(
                    citation=citation,
                    reference=ref,
                    matched=True,
                    reason=f"Matched: {citation.author} ({citation.year})"
                )

        return CitationMatch(
            citation=citation,
            reference=None,
            matched=False,
            reason=f"No matching reference for {citation.author} ({citation.year})"
        )

    def validate_citations_and_references(
        self,
        citations: Iterable[Citation],
        references: Iterable[ReferenceEntry]
    ) -> ConsistencyResult:
        """
        Match every parsable citation and collect references nothing cites.
        Citations without an author/year pair are skipped, not reported.
        """
        result = ConsistencyResult()
        normalized = [self.normalize_reference(ref.text) for ref in references]

        for citation in citations:
            if not citation.author or not citation.year:
                result.skipped_citations.append(citation)
                continue
            result.matches.append(self.match_citation_to_reference(citation, normalized))

        cited = {m.reference.raw for m in result.matched}
        result.unused_references = [ref for ref in normalized if ref.raw not in cited]

        return result


def check_alphabetical_order(references: Sequence[ReferenceEntry]) -> bool:
    """
    True unless some entry's first character sorts strictly after the next
    entry's first character (plain code-point comparison).
    """
    for current, following in zip(references, references[1:]):
        if current.text.strip()[:1] > following.text.strip()[:1]:
            return False
    return True
