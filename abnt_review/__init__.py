"""
ABNT academic document reviewer.

This package reviews Word "Web Page" (HTML) exports against ABNT rules:
- loader / styles / text: markup loading, style cascade, text extraction
- document_parser: structural classification, references and citations
- rules_engine: formatting checks against the rule table
- reviewer: per-document-type review phases and scoring
- orchestrator: document type detection and the review entry point
- reference_verifier: optional online reference lookups
- output_generator / report_generator: JSON, console and PDF output
"""

__version__ = '1.0.0'

from .config import PROFILES, ParserSettings, RuleTable, load_profiles, load_rules, with_minimums
from .converter import DocumentConverter, convert_document
from .document_parser import DocumentParser, parse_document
from .models import DocumentData, DocumentStatistics
from .orchestrator import ReviewOrchestrator
from .output_generator import OutputGenerator
from .reference_verifier import ReferenceReviewer, SerpApiVerifier
from .reviewer import DocumentReviewer
from .rules_engine import FormattingRulesEngine
from .scoring import Issue, Report, Severity

__all__ = [
    'PROFILES',
    'ParserSettings',
    'RuleTable',
    'load_profiles',
    'load_rules',
    'with_minimums',
    'DocumentConverter',
    'convert_document',
    'DocumentParser',
    'parse_document',
    'DocumentData',
    'DocumentStatistics',
    'ReviewOrchestrator',
    'OutputGenerator',
    'ReferenceReviewer',
    'SerpApiVerifier',
    'DocumentReviewer',
    'FormattingRulesEngine',
    'Issue',
    'Report',
    'Severity',
]
