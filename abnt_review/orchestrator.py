"""
Review Orchestrator Module
Parses a document, picks the review profile and runs the reviewer.
"""

import logging
from typing import Dict, Optional

from .config import (
    ABSTRACT_MARKERS,
    DOCUMENT_TYPES,
    METHODOLOGY_MARKERS,
    PROFILES,
    RESULTS_MARKERS,
    ParserSettings,
    ReviewProfile,
    RuleTable,
)
from .document_parser import parse_document
from .loader import DEFAULT_ENCODING
from .models import DocumentData, DocumentStatistics
from .output_generator import OutputGenerator
from .reference_verifier import ReferenceReviewer, ReferenceVerificationSummary
from .reviewer import DocumentReviewer
from .scoring import Report

logger = logging.getLogger(__name__)


def _any_heading_contains(headings, markers) -> bool:
    return any(marker in heading for heading in headings for marker in markers)


class ReviewOrchestrator:
    """
    Entry point for reviewing one document.

    Either ``file_path`` (a Word HTML export) or an already parsed
    ``document`` must be given. ``profiles`` replaces the review profile of
    the document types it names.
    """

    def __init__(
        self,
        file_path: Optional[str] = None,
        rules: Optional[RuleTable] = None,
        document: Optional[DocumentData] = None,
        verifier=None,
        encoding: str = DEFAULT_ENCODING,
        settings: Optional[ParserSettings] = None,
        profiles: Optional[Dict[str, ReviewProfile]] = None
    ):
        self.file_path = file_path
        self.rules = rules or RuleTable()
        self.document = document
        self.verifier = verifier
        self.encoding = encoding
        self.settings = settings
        self.profiles = {**PROFILES, **(profiles or {})}
        self.document_type: Optional[str] = None

    def parse_document(self) -> DocumentData:
        """Parse the source file once; later calls reuse the result."""
        if self.document is None:
            if not self.file_path:
                raise ValueError("No document to review: pass file_path or document")
            logger.info("Loading document: %s", self.file_path)
            self.document = parse_document(self.file_path, encoding=self.encoding,
                                           settings=self.settings)
        return self.document

    def detect_document_type(self) -> str:
        """
        An abstract heading plus a methodology or results heading means an
        article; anything else is reviewed as a monograph.
        """
        headings = self.parse_document().heading_texts

        has_abstract = _any_heading_contains(headings, ABSTRACT_MARKERS)
        has_methodology = _any_heading_contains(headings, METHODOLOGY_MARKERS)
        has_results = _any_heading_contains(headings, RESULTS_MARKERS)

        if has_abstract and (has_methodology or has_results):
            self.document_type = 'article'
        else:
            self.document_type = 'monograph'

        logger.info("Detected document type: %s", self.document_type)
        return self.document_type

    def set_document_type(self, document_type: str):
        """
        Raises:
            ValueError: If document_type is not a supported type
        """
        if document_type not in DOCUMENT_TYPES:
            raise ValueError(
                f"Invalid document type: {document_type}. "
                f"Valid types: {', '.join(DOCUMENT_TYPES)}"
            )
        self.document_type = document_type
        logger.info("Document type set manually: %s", document_type)

    def review(self, document_type: Optional[str] = None) -> Report:
        """
        Review the document.

        Args:
            document_type: 'monograph' or 'article'; when omitted, the type
                set earlier is used, or it is detected

        Returns:
            Report

        Raises:
            ValueError: On an invalid document type (before any parsing)
        """
        if document_type is not None:
            self.set_document_type(document_type)

        data = self.parse_document()

        if self.document_type is None:
            self.detect_document_type()

        profile = self.profiles[self.document_type]
        return DocumentReviewer(data, profile, self.rules).review()

    def get_document_statistics(self) -> DocumentStatistics:
        return DocumentStatistics.from_document(self.parse_document())

    def export_report(self, output_path: str, document_type: Optional[str] = None) -> str:
        """Review and write the report as JSON; returns output_path."""
        report = self.review(document_type)
        OutputGenerator.save_json(
            OutputGenerator.generate_json_output(report, self.file_path),
            output_path
        )
        logger.info("Report exported to %s", output_path)
        return output_path

    def verify_references(self, max_references: Optional[int] = None) -> ReferenceVerificationSummary:
        """Look up the first references online. Has no effect on any score."""
        reviewer = ReferenceReviewer(self.parse_document().references, verifier=self.verifier)
        if max_references is not None:
            reviewer.max_references = max_references
        return reviewer.validate_references()
