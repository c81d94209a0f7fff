"""
Document Structural Parser Module
Walks the WordSection containers of a Word HTML export and classifies
their children into headings, paragraphs, lists, captions and TOC entries.
"""

import logging
import re
from typing import List, Optional

from bs4 import BeautifulSoup, Tag

from .citation_validator import find_citations
from .config import ParserSettings
from .loader import DEFAULT_ENCODING, StyleSheet, load_document, load_html
from .models import (
    Citation,
    DocumentData,
    DocumentElement,
    ElementType,
    ReferenceEntry,
    Section,
)
from .styles import StyleResolver, class_tokens
from .text import extract_text

logger = logging.getLogger(__name__)

HEADING_PATTERN = re.compile(r'^h([1-6])$')
BOLD_TAGS = ('b', 'strong')
# The reference list is matched on the exact class token
REFERENCE_CLASS = 'MsoNormal'


class DocumentParser:
    """Builds a DocumentData from a parsed tree and its stylesheet."""

    def __init__(
        self,
        soup: BeautifulSoup,
        stylesheet: StyleSheet,
        settings: Optional[ParserSettings] = None
    ):
        self.soup = soup
        self.stylesheet = stylesheet
        self.settings = settings or ParserSettings()
        self.resolver = StyleResolver(stylesheet)

        self._paragraph_re = re.compile(self.settings.paragraph_class_pattern)
        self._list_re = re.compile(self.settings.list_class_pattern)
        self._caption_re = re.compile(self.settings.caption_class_pattern)
        self._toc_re = re.compile(self.settings.toc_class_pattern)

    @classmethod
    def from_html(cls, html: str, settings: Optional[ParserSettings] = None) -> 'DocumentParser':
        loaded = load_html(html)
        return cls(loaded.soup, loaded.stylesheet, settings)

    def parse(self) -> DocumentData:
        """
        Walk every section, classify its direct children and collect the
        reference list and citations.

        Returns:
            DocumentData with every typed collection populated
        """
        data = DocumentData()

        for index, container in enumerate(self._iter_sections(), start=1):
            section = Section(index=index)
            for child in container.find_all(True, recursive=False):
                element = self._build_element(child, index)
                section.elements.append(element)
                self._collect(data, element)
            data.sections.append(section)

        data.references = self._extract_references()
        data.citations = self._extract_citations(data)

        logger.info(
            "Parsed %d sections: %d headings, %d paragraphs, %d references, %d citations",
            len(data.sections), len(data.headings), len(data.paragraphs),
            len(data.references), len(data.citations)
        )
        return data

    def _iter_sections(self):
        index = 1
        while True:
            container = self.soup.find('div', class_=f"{self.settings.section_prefix}{index}")
            if container is None:
                return
            yield container
            index += 1

    def _build_element(self, node: Tag, section_index: int) -> DocumentElement:
        element_type, level = self._classify(node)
        return DocumentElement(
            tag=node.name.lower(),
            class_names=frozenset(class_tokens(node)),
            text=extract_text(node),
            styles=self.resolver.resolve_all(node),
            element_type=element_type,
            section=section_index,
            level=level
        )

    def _classify(self, node: Tag):
        tag = node.name.lower()

        heading = HEADING_PATTERN.match(tag)
        if heading:
            return ElementType.HEADING, int(heading.group(1))

        if tag not in self.settings.paragraph_tags:
            return ElementType.UNKNOWN, None

        classes = class_tokens(node)
        if any(self._paragraph_re.search(cls) for cls in classes):
            return ElementType.PARAGRAPH, None
        if any(self._list_re.search(cls) for cls in classes):
            return ElementType.LIST, None
        if any(self._caption_re.search(cls) for cls in classes):
            return ElementType.CAPTION, None
        if any(self._toc_re.search(cls) for cls in classes):
            return ElementType.TOC, None

        return ElementType.UNKNOWN, None

    @staticmethod
    def _collect(data: DocumentData, element: DocumentElement):
        if element.element_type == ElementType.HEADING:
            data.headings.append(element)
        elif element.element_type == ElementType.PARAGRAPH:
            data.paragraphs.append(element)
        elif element.element_type == ElementType.LIST:
            data.lists.append(element)
        elif element.element_type == ElementType.CAPTION:
            data.figures.append(element)

    def _is_body_paragraph(self, node) -> bool:
        return isinstance(node, Tag) and REFERENCE_CLASS in class_tokens(node)

    def _find_reference_heading(self) -> Optional[Tag]:
        for paragraph in self.soup.find_all('p', class_=REFERENCE_CLASS):
            for bold in paragraph.find_all(BOLD_TAGS):
                text = bold.get_text().upper()
                if any(marker in text for marker in self.settings.reference_markers):
                    return paragraph
        return None

    def _extract_references(self) -> List[ReferenceEntry]:
        heading = self._find_reference_heading()
        if heading is None:
            logger.debug("No reference heading found")
            return []

        references = []
        for sibling in heading.find_next_siblings(True):
            if not self._is_body_paragraph(sibling):
                break
            text = extract_text(sibling)
            if not text:
                continue
            references.append(ReferenceEntry(text=text, styles=self.resolver.resolve_all(sibling)))

        return references

    @staticmethod
    def _extract_citations(data: DocumentData) -> List[Citation]:
        citations = []
        for index, paragraph in enumerate(data.paragraphs):
            citations.extend(find_citations(paragraph.text, index))
        return citations


def parse_document(
    file_path: str,
    encoding: str = DEFAULT_ENCODING,
    settings: Optional[ParserSettings] = None
) -> DocumentData:
    """Load a Word HTML export from disk and parse it."""
    loaded = load_document(file_path, encoding=encoding)
    return DocumentParser(loaded.soup, loaded.stylesheet, settings).parse()
