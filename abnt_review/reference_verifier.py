"""
Reference Verification Module
Looks up the first few reference entries on Google Scholar (via SerpAPI)
and reports which ones could be confirmed. Verification never changes the
review score.
"""

import logging
import os
import re
import unicodedata
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from difflib import SequenceMatcher
from typing import Any, Dict, List, Optional, Sequence

import requests

from .models import ReferenceEntry

logger = logging.getLogger(__name__)

SERP_API_URL = 'https://serpapi.com/search'
SERP_API_KEY_ENV = 'SERP_API_KEY'

# Request timeouts: (connect, read)
HTTP_TIMEOUT = (8, 20)

# Title similarity thresholds
SIMILARITY_THRESHOLD = 0.6
SUBSTRING_SIMILARITY_THRESHOLD = 0.4

DEFAULT_MAX_REFERENCES = 5
DEFAULT_MAX_WORKERS = 3

# "SOBRENOME, Nome" at the start of an ABNT reference
AUTHOR_PATTERN = re.compile(
    r'^([A-ZÀ-Ú][A-ZÀ-Úa-zà-ÿ\s]+),\s*([A-ZÀ-Ú][a-zà-ÿ]+)'
)
YEAR_PATTERN = re.compile(r'(\d{4}[a-z]?)')
TITLE_PATTERN = re.compile(r'\.([^.]+)\.')
SUMMARY_AUTHORS_PATTERN = re.compile(r'^([\w.\s,]+?)\s*-\s*(?:19|20)\d{2}')
SUMMARY_YEAR_PATTERN = re.compile(r'(?:19|20)\d{2}')


@dataclass
class ParsedReference:
    """Best-effort author/year/title guess for a reference entry."""
    authors: List[str]
    year: int
    title: str
    type: str = 'book'


@dataclass
class ScholarWork:
    title: str
    authors: List[str]
    year: Optional[int]
    publisher: Optional[str] = None


@dataclass
class VerificationResult:
    success: bool
    formatted_citation: Optional[str] = None
    comparisons: Dict[str, Any] = field(default_factory=dict)


@dataclass
class ReferenceCheckResult:
    original_text: str
    parsed: Optional[ParsedReference]
    verified: bool
    formatted_citation: Optional[str] = None
    sources: Dict[str, Any] = field(default_factory=dict)
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'original_text': self.original_text,
            'parsed': vars(self.parsed) if self.parsed else None,
            'verified': self.verified,
            'formatted_citation': self.formatted_citation,
            'sources': self.sources,
            'error': self.error,
        }


@dataclass
class ReferenceVerificationSummary:
    validated: int
    total: int
    checked_count: int
    results: List[ReferenceCheckResult] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'validated': self.validated,
            'total': self.total,
            'checked_count': self.checked_count,
            'results': [r.to_dict() for r in self.results],
        }


def normalize_title(value: Optional[str]) -> str:
    """Strip accents, lowercase and trim."""
    if not value:
        return ''
    decomposed = unicodedata.normalize('NFD', value)
    stripped = ''.join(c for c in decomposed if not unicodedata.combining(c))
    return stripped.lower().strip()


def title_similarity(a: str, b: str) -> float:
    return SequenceMatcher(None, normalize_title(a), normalize_title(b)).ratio()


def parse_reference(reference_text: str) -> Optional[ParsedReference]:
    """
    Guess author, year and title from an ABNT reference string.

    Returns:
        ParsedReference, or None when no author or year can be found
    """
    author = AUTHOR_PATTERN.match(reference_text)
    year = YEAR_PATTERN.search(reference_text)
    if not author or not year:
        return None

    title = TITLE_PATTERN.search(reference_text)
    return ParsedReference(
        authors=[f"{author.group(1).strip()}, {author.group(2)}"],
        year=int(year.group(1)[:4]),
        title=title.group(1).strip() if title else reference_text[:100]
    )


def format_abnt(work: ScholarWork, parsed: ParsedReference) -> str:
    """Simple 'AUTHORS. Title. Publisher, year.' rendering."""
    authors = '; '.join(work.authors or parsed.authors)
    title = work.title or parsed.title
    publisher = work.publisher or ''
    year = work.year or parsed.year
    return re.sub(r'\s+', ' ', f"{authors}. {title}. {publisher}, {year}.").strip()


def _work_from_serp_result(result: Dict[str, Any]) -> ScholarWork:
    summary = (result.get('publication_info') or {}).get('summary')

    authors = result.get('authors') or []
    if authors and isinstance(authors[0], dict):
        authors = [a.get('name', '') for a in authors]
    if not authors and summary:
        match = SUMMARY_AUTHORS_PATTERN.match(summary)
        if match:
            authors = [a.strip() for a in match.group(1).split(',')]

    year = None
    if summary:
        match = SUMMARY_YEAR_PATTERN.search(summary)
        if match:
            year = int(match.group(0))

    return ScholarWork(
        title=result.get('title') or '',
        authors=list(authors),
        year=year,
        publisher=summary
    )


class SerpApiVerifier:
    """Google Scholar lookup through SerpAPI."""

    def __init__(self, api_key: str, session: Optional[requests.Session] = None,
                 timeout=HTTP_TIMEOUT):
        self.api_key = api_key
        self.session = session or requests.Session()
        self.timeout = timeout

    @classmethod
    def from_env(cls) -> Optional['SerpApiVerifier']:
        api_key = os.environ.get(SERP_API_KEY_ENV)
        return cls(api_key) if api_key else None

    def search(self, query: str) -> Dict[str, Any]:
        params = {
            'engine': 'google_scholar',
            'q': query,
            'hl': 'en',
            'api_key': self.api_key,
        }
        response = self.session.get(SERP_API_URL, params=params, timeout=self.timeout)
        response.raise_for_status()
        return response.json()

    def verify(self, reference_text: str, parsed: ParsedReference) -> VerificationResult:
        """
        Compare the top Scholar hit's title with the parsed title.

        Raises:
            requests.RequestException: On transport or HTTP errors
        """
        data = self.search(reference_text)
        hits = data.get('organic_results') or []
        if not hits:
            logger.debug("No Scholar results for: %s", reference_text[:60])
            return VerificationResult(success=False)

        work = _work_from_serp_result(hits[0])
        found = normalize_title(work.title)
        expected = normalize_title(parsed.title)

        substring_match = bool(found and expected) and (expected in found or found in expected)
        similarity = title_similarity(work.title, parsed.title)
        threshold = SUBSTRING_SIMILARITY_THRESHOLD if substring_match else SIMILARITY_THRESHOLD

        comparison = {
            'similarity': round(similarity, 3),
            'substring_match': substring_match,
            'title': work.title,
            'year': work.year,
        }

        if similarity >= threshold or substring_match:
            return VerificationResult(
                success=True,
                formatted_citation=format_abnt(work, parsed),
                comparisons={'serp': comparison}
            )
        return VerificationResult(success=False, comparisons={'serp': comparison})


class ReferenceReviewer:
    """
    Verifies a bounded batch of references concurrently.

    Only the first ``max_references`` entries are checked, with at most
    ``max_workers`` lookups in flight. A failing lookup is logged and
    recorded as unverified.
    """

    def __init__(
        self,
        references: Sequence[ReferenceEntry],
        verifier=None,
        max_references: int = DEFAULT_MAX_REFERENCES,
        max_workers: int = DEFAULT_MAX_WORKERS
    ):
        self.references = list(references)
        self.verifier = verifier
        self.max_references = max_references
        self.max_workers = max_workers

    def _check(self, index: int, reference: ReferenceEntry,
               parsed: ParsedReference) -> ReferenceCheckResult:
        try:
            outcome = self.verifier.verify(reference.text, parsed)
        except Exception as e:
            logger.warning("Reference %d lookup failed: %s", index + 1, e)
            return ReferenceCheckResult(
                original_text=reference.text,
                parsed=parsed,
                verified=False,
                error=str(e)
            )
        return ReferenceCheckResult(
            original_text=reference.text,
            parsed=parsed,
            verified=outcome.success,
            formatted_citation=outcome.formatted_citation,
            sources=outcome.comparisons
        )

    def validate_references(self) -> ReferenceVerificationSummary:
        """
        Returns:
            ReferenceVerificationSummary; neutral (nothing checked) when
            no verifier is configured
        """
        total = len(self.references)
        if self.verifier is None:
            logger.warning("No reference verifier configured; skipping verification "
                           "(set %s to enable it)", SERP_API_KEY_ENV)
            return ReferenceVerificationSummary(validated=0, total=total, checked_count=0)

        batch = []
        for index, reference in enumerate(self.references[:self.max_references]):
            parsed = parse_reference(reference.text)
            if parsed is None:
                logger.debug("Reference %d could not be parsed; skipped", index + 1)
                continue
            batch.append((index, reference, parsed))

        results = []
        if batch:
            with ThreadPoolExecutor(max_workers=min(self.max_workers, len(batch))) as pool:
                futures = [pool.submit(self._check, *item) for item in batch]
                results = [future.result() for future in futures]

        validated = sum(1 for r in results if r.verified)
        logger.info("Verified %d/%d references", validated, len(results))

        return ReferenceVerificationSummary(
            validated=validated,
            total=total,
            checked_count=len(results),
            results=results
        )
