"""
Document Models
Typed collections produced by the structural parser.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Optional

from .styles import ResolvedStyle

WORD_SPLIT_PATTERN = re.compile(r'\s+')


class ElementType(Enum):
    """Semantic role of a section child."""
    HEADING = "heading"
    PARAGRAPH = "paragraph"
    LIST = "list"
    CAPTION = "caption"
    TOC = "toc"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class DocumentElement:
    """One direct child of a document section."""
    tag: str
    class_names: FrozenSet[str]
    text: str
    styles: ResolvedStyle
    element_type: ElementType
    section: int
    level: Optional[int] = None  # headings only

    def to_dict(self) -> Dict[str, Any]:
        return {
            'tag': self.tag,
            'class_names': sorted(self.class_names),
            'text': self.text,
            'styles': self.styles.to_dict(),
            'type': self.element_type.value,
            'section': self.section,
            'level': self.level,
        }


@dataclass
class Section:
    index: int
    elements: List[DocumentElement] = field(default_factory=list)


@dataclass(frozen=True)
class ReferenceEntry:
    """A reference-list entry following the references heading."""
    text: str
    styles: ResolvedStyle


@dataclass(frozen=True)
class Citation:
    """
    A parenthetical author-date citation found in a paragraph.

    ``author`` and ``year`` are a best-effort guess and may be None.
    """
    full: str
    content: str
    paragraph_index: int
    source_text: str
    author: Optional[str] = None
    year: Optional[str] = None


def count_words(text: str) -> int:
    # An empty paragraph still counts as one token
    return len(WORD_SPLIT_PATTERN.split(text))


@dataclass
class DocumentData:
    """Root aggregate of a parsed document."""
    sections: List[Section] = field(default_factory=list)
    headings: List[DocumentElement] = field(default_factory=list)
    paragraphs: List[DocumentElement] = field(default_factory=list)
    lists: List[DocumentElement] = field(default_factory=list)
    figures: List[DocumentElement] = field(default_factory=list)
    references: List[ReferenceEntry] = field(default_factory=list)
    citations: List[Citation] = field(default_factory=list)

    @property
    def total_words(self) -> int:
        return sum(count_words(p.text) for p in self.paragraphs)

    @property
    def heading_texts(self) -> List[str]:
        return [h.text.upper() for h in self.headings]


def _ratio(numerator: float, denominator: float) -> float:
    return numerator / denominator if denominator else 0.0


@dataclass(frozen=True)
class DocumentStatistics:
    sections: int
    paragraphs: int
    headings: int
    lists: int
    figures: int
    references: int
    citations: int
    total_words: int

    @classmethod
    def from_document(cls, data: DocumentData) -> 'DocumentStatistics':
        return cls(
            sections=len(data.sections),
            paragraphs=len(data.paragraphs),
            headings=len(data.headings),
            lists=len(data.lists),
            figures=len(data.figures),
            references=len(data.references),
            citations=len(data.citations),
            total_words=data.total_words
        )

    @property
    def words_per_paragraph(self) -> float:
        return _ratio(self.total_words, self.paragraphs)

    @property
    def citations_per_paragraph(self) -> float:
        return _ratio(self.citations, self.paragraphs)

    @property
    def citation_reference_ratio(self) -> float:
        return _ratio(self.citations, self.references)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'sections': self.sections,
            'paragraphs': self.paragraphs,
            'headings': self.headings,
            'lists': self.lists,
            'figures': self.figures,
            'references': self.references,
            'citations': self.citations,
            'total_words': self.total_words,
            'words_per_paragraph': round(self.words_per_paragraph),
            'citations_per_paragraph': round(self.citations_per_paragraph, 2),
            'citation_reference_ratio': round(self.citation_reference_ratio, 2),
        }
