"""
ABNT Rule Table Module
Tunable thresholds for the formatting rules engine, the document parser
and the per-document-type review profiles.
"""

import json
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from .scoring import Severity


# Unit conversion
PX_TO_PT = 0.75
CM_PER_PT = 0.0352778  # 1pt = 0.0352778cm (28.3465pt per cm)

# Tolerances for validation
FONT_SIZE_TOLERANCE = 0.5     # ±0.5pt
LINE_SPACING_TOLERANCE = 5    # ±5 percentage points
INDENT_TOLERANCE = 2          # ±2pt
MARGIN_TOLERANCE = 1          # ±1pt

# ABNT Requirements Constants
GENERAL_REQUIREMENTS = {
    'font_size': 12,
    'fonts': ['Arial', 'Times New Roman'],
}

DEVELOPMENT_REQUIREMENTS = {
    'line_spacing': 150,      # 1.5 lines
    'alignment': 'justify',
    'indent': 35.4,           # 1.25cm first-line indent, as Word exports it
}

REFERENCE_REQUIREMENTS = {
    'line_spacing': 100,      # single spacing
    'alignment': 'left',
}

MARGIN_REQUIREMENTS = {
    'top': 0,
    'bottom': 0,
    'left': 0,
}

# Points per formatting check
FORMAT_CHECK_POINTS = 10
REFERENCE_CHECK_POINTS = 5

# Document type detection (uppercased heading substrings)
ABSTRACT_MARKERS = ('ABSTRACT', 'RESUMO')
METHODOLOGY_MARKERS = ('METODOLOGIA', 'METHODOLOGY')
RESULTS_MARKERS = ('RESULTADOS', 'RESULTS')

DOCUMENT_TYPES = ('monograph', 'article')

# Rule file section holding per-document-type count thresholds
THRESHOLDS_SECTION = 'thresholds'


@dataclass
class RuleTable:
    """Expected values and tolerances used by the formatting rules engine."""
    font_size: float = GENERAL_REQUIREMENTS['font_size']
    fonts: List[str] = field(default_factory=lambda: list(GENERAL_REQUIREMENTS['fonts']))
    line_spacing: float = DEVELOPMENT_REQUIREMENTS['line_spacing']
    alignment: str = DEVELOPMENT_REQUIREMENTS['alignment']
    indent: float = DEVELOPMENT_REQUIREMENTS['indent']
    reference_line_spacing: float = REFERENCE_REQUIREMENTS['line_spacing']
    reference_alignment: str = REFERENCE_REQUIREMENTS['alignment']
    margin_top: float = MARGIN_REQUIREMENTS['top']
    margin_bottom: float = MARGIN_REQUIREMENTS['bottom']
    margin_left: float = MARGIN_REQUIREMENTS['left']
    font_size_tolerance: float = FONT_SIZE_TOLERANCE
    line_spacing_tolerance: float = LINE_SPACING_TOLERANCE
    indent_tolerance: float = INDENT_TOLERANCE
    margin_tolerance: float = MARGIN_TOLERANCE
    cm_per_pt: float = CM_PER_PT
    format_check_points: int = FORMAT_CHECK_POINTS
    reference_check_points: int = REFERENCE_CHECK_POINTS

    # JSON section -> {json key: attribute name}
    SECTIONS = {
        'general': {'font_size': 'font_size', 'fonts': 'fonts', 'cm_per_pt': 'cm_per_pt'},
        'development': {'line_spacing': 'line_spacing', 'alignment': 'alignment', 'indent': 'indent'},
        'references': {'line_spacing': 'reference_line_spacing', 'alignment': 'reference_alignment'},
        'margins': {'top': 'margin_top', 'bottom': 'margin_bottom', 'left': 'margin_left'},
        'tolerances': {
            'font_size': 'font_size_tolerance',
            'line_spacing': 'line_spacing_tolerance',
            'indent': 'indent_tolerance',
            'margin': 'margin_tolerance',
        },
        'points': {'format_check': 'format_check_points', 'reference_check': 'reference_check_points'},
    }

    @classmethod
    def from_dict(cls, data: Dict[str, Dict[str, Any]]) -> 'RuleTable':
        """
        Build a rule table from a sectioned mapping, e.g.
        {"general": {"font_size": 12}, "tolerances": {"font_size": 0.5}}.
        Missing keys keep their defaults.

        Raises:
            ValueError: On an unknown section or key
        """
        values = {}
        for section, entries in data.items():
            if section == THRESHOLDS_SECTION:
                continue
            mapping = cls.SECTIONS.get(section)
            if mapping is None:
                raise ValueError(
                    f"Unknown rule section: {section}. "
                    f"Valid sections: {', '.join(cls.SECTIONS)}, {THRESHOLDS_SECTION}"
                )
            for key, value in entries.items():
                if key not in mapping:
                    raise ValueError(f"Unknown rule '{key}' in section '{section}'")
                values[mapping[key]] = value
        return cls(**values)

    def to_dict(self) -> Dict[str, Dict[str, Any]]:
        """Inverse of from_dict."""
        return {
            section: {key: getattr(self, attr) for key, attr in mapping.items()}
            for section, mapping in self.SECTIONS.items()
        }


def load_rules(path: Optional[str] = None) -> RuleTable:
    """
    Load a rule table, overlaying a JSON file on the defaults.

    Args:
        path: Optional path to a JSON rule file

    Returns:
        RuleTable
    """
    if path is None:
        return RuleTable()

    rules_path = Path(path)
    if not rules_path.exists():
        raise FileNotFoundError(f"Rule file not found: {rules_path}")

    with open(rules_path, 'r', encoding='utf-8') as f:
        return RuleTable.from_dict(json.load(f))


@dataclass(frozen=True)
class ParserSettings:
    """Markers the structural parser uses to recognise Word HTML elements."""
    section_prefix: str = 'WordSection'
    paragraph_tags: Tuple[str, ...] = ('p',)
    paragraph_class_pattern: str = r'MsoNormal'
    list_class_pattern: str = r'MsoListParagraph'
    caption_class_pattern: str = r'MsoCaption'
    toc_class_pattern: str = r'MsoTo[cf]'
    reference_markers: Tuple[str, ...] = ('REFERÊNCIAS', 'REFERENCIAS', 'REFERENCES')


# =============================================================================
# REVIEW PROFILES
# =============================================================================

@dataclass(frozen=True)
class Band:
    """
    One rung of a threshold ladder. Ladders are evaluated top to bottom and
    the first band whose bounds contain the value wins; a band with no bounds
    is the catch-all. ``severity`` is None for full credit.
    """
    points: int
    minimum: Optional[float] = None
    maximum: Optional[float] = None
    severity: Optional[Severity] = None
    message: str = ""

    def matches(self, value: float) -> bool:
        if self.minimum is not None and value < self.minimum:
            return False
        if self.maximum is not None and value > self.maximum:
            return False
        return True


def select_band(bands: Tuple[Band, ...], value: float) -> Band:
    """Return the first band containing value (the last band is the fallback)."""
    for band in bands:
        if band.matches(value):
            return band
    return bands[-1]


@dataclass(frozen=True)
class SectionRequirement:
    """A required heading, satisfied when any marker appears in any heading."""
    markers: Tuple[str, ...]
    points: int
    severity: Severity = Severity.CRITICAL
    message: str = "Required section missing: {name}"

    @property
    def name(self) -> str:
        return self.markers[-1]


@dataclass(frozen=True)
class ContentCheck:
    """A measured document quantity scored against a band ladder."""
    metric: str
    bands: Tuple[Band, ...]

    @property
    def max_points(self) -> int:
        return self.bands[0].points


@dataclass(frozen=True)
class ReviewProfile:
    """Thresholds and required sections for one document type."""
    name: str
    label: str
    required_sections: Tuple[SectionRequirement, ...]
    citation_phase: str                 # 'consistency' or 'density'
    structure_max: int = 100
    heading_bonus_per_heading: int = 0
    heading_bonus_cap: int = 0
    formatting_sample: int = 10
    humanize_values: bool = False
    content_checks: Tuple[ContentCheck, ...] = ()
    content_max: int = 100
    reference_bands: Tuple[Band, ...] = ()
    reference_base_max: int = 100
    alphabetical_points: int = 20
    matched_citation_points: int = 2
    consistency_max: int = 100
    ratio_bands: Tuple[Band, ...] = ()
    density_bands: Tuple[Band, ...] = ()
    density_max: int = 50


MONOGRAPH_PROFILE = ReviewProfile(
    name='monograph',
    label='Monograph',
    required_sections=(
        SectionRequirement(('INTRODUÇÃO',), 25),
        SectionRequirement(('Teórico', 'Teórica', 'Fundamentação ou Referencial Teórico'), 25),
        SectionRequirement(('Desenvolvimento',), 25),
        SectionRequirement(('Considerações', 'Conclusão', 'Considerações Finais ou Conclusão'), 25),
        SectionRequirement(('REFERÊNCIAS',), 25),
    ),
    citation_phase='consistency',
    heading_bonus_per_heading=2,
    heading_bonus_cap=10,
    formatting_sample=10,
    humanize_values=True,
    content_checks=(
        ContentCheck('paragraphs', (
            Band(30, minimum=20),
            Band(20, minimum=10, severity=Severity.LOW,
                 message="Document has a modest number of paragraphs: {value}"),
            Band(10, severity=Severity.MEDIUM,
                 message="Document has few paragraphs: {value}"),
        )),
        ContentCheck('citations', (
            Band(30, minimum=10),
            Band(20, minimum=5, severity=Severity.MEDIUM,
                 message="Citation count below recommended: {value}"),
            Band(10, severity=Severity.HIGH,
                 message="Few citations found: {value}"),
        )),
        ContentCheck('avg_paragraph_length', (
            Band(20, minimum=200),
            Band(15, minimum=100, severity=Severity.LOW,
                 message="Paragraphs are somewhat short (average: {value:.0f} characters)"),
            Band(5, severity=Severity.LOW,
                 message="Paragraphs are too short (average: {value:.0f} characters)"),
        )),
        ContentCheck('figures', (
            Band(20, minimum=1),
            Band(10, severity=Severity.LOW,
                 message="Document has no figures or captions"),
        )),
    ),
    reference_bands=(
        Band(40, minimum=15),
        Band(30, minimum=10, severity=Severity.MEDIUM,
             message="Reference list is short: {value} (recommended minimum: {recommended:g})"),
        Band(20, minimum=5, severity=Severity.MEDIUM,
             message="Reference list is short: {value} (recommended minimum: {recommended:g})"),
        Band(10, severity=Severity.CRITICAL,
             message="Few references found: {value} (recommended minimum: {recommended:g})"),
    ),
)


ARTICLE_PROFILE = ReviewProfile(
    name='article',
    label='Article',
    required_sections=(
        SectionRequirement(('RESUMO',), 20, message="Critical section missing: {name}"),
        SectionRequirement(('ABSTRACT',), 20, message="Critical section missing: {name}"),
        SectionRequirement(('INTRODUÇÃO',), 20, message="Critical section missing: {name}"),
        SectionRequirement(('REFERÊNCIAS',), 20, message="Critical section missing: {name}"),
        SectionRequirement(('METODOLOGIA',), 7, Severity.HIGH, "Important section missing: {name}"),
        SectionRequirement(('RESULTADOS',), 7, Severity.HIGH, "Important section missing: {name}"),
        SectionRequirement(('CONCLUSÃO',), 7, Severity.HIGH, "Important section missing: {name}"),
    ),
    citation_phase='density',
    formatting_sample=15,
    content_checks=(
        ContentCheck('words', (
            Band(30, minimum=4000, maximum=8000),
            Band(20, minimum=3000, maximum=10000, severity=Severity.MEDIUM,
                 message="Article has {value} words (ideal: 4000-8000)"),
            Band(10, severity=Severity.HIGH,
                 message="Article length outside the expected range: {value} words"),
        )),
        ContentCheck('citations', (
            Band(30, minimum=15),
            Band(20, minimum=10, severity=Severity.MEDIUM,
                 message="Citation count below recommended for an article: {value}"),
            Band(10, severity=Severity.HIGH,
                 message="Few citations for a scientific article: {value}"),
        )),
        ContentCheck('figures', (
            Band(20, minimum=3),
            Band(15, minimum=1, severity=Severity.LOW,
                 message="Article has only {value} figure(s), tables or charts"),
            Band(5, severity=Severity.MEDIUM,
                 message="Scientific article should contain figures, tables or charts"),
        )),
        ContentCheck('lists', (
            Band(20, minimum=2),
            Band(10, minimum=1, severity=Severity.LOW,
                 message="Article has a single enumerated list"),
            Band(5, severity=Severity.LOW,
                 message="Scientific articles usually contain enumerated lists"),
        )),
    ),
    reference_bands=(
        Band(50, minimum=20),
        Band(40, minimum=15, severity=Severity.MEDIUM,
             message="Reference list is short: {value} (recommended minimum: {recommended:g})"),
        Band(30, minimum=10, severity=Severity.MEDIUM,
             message="Reference list is short: {value} (recommended minimum: {recommended:g})"),
        Band(15, severity=Severity.CRITICAL,
             message="Scientific article with few references: {value} "
                     "(recommended minimum: {recommended:g})"),
    ),
    ratio_bands=(
        Band(25, minimum=0.8),
        Band(15, minimum=0.5, severity=Severity.LOW,
             message="Citations cover only part of the references: "
                     "{citations} citations vs {references} references"),
        Band(5, severity=Severity.MEDIUM,
             message="Few citations relative to references: "
                     "{citations} citations vs {references} references"),
    ),
    density_bands=(
        Band(25, minimum=0.3),
        Band(15, minimum=0.15, severity=Severity.LOW,
             message="Moderate citation density: {percent:.1f}% of paragraphs"),
        Band(5, severity=Severity.LOW,
             message="Low citation density: {percent:.1f}% of paragraphs"),
    ),
)


PROFILES = {
    MONOGRAPH_PROFILE.name: MONOGRAPH_PROFILE,
    ARTICLE_PROFILE.name: ARTICLE_PROFILE,
}


def _move_minimums(bands: Tuple[Band, ...], minimums) -> Tuple[Band, ...]:
    """Replace the lower bounds of the bounded bands, top to bottom."""
    bounded = [band for band in bands if band.minimum is not None]
    if len(minimums) != len(bounded):
        raise ValueError(f"Expected {len(bounded)} minimums, got {len(minimums)}")
    values = iter(minimums)
    return tuple(
        replace(band, minimum=next(values)) if band.minimum is not None else band
        for band in bands
    )


def with_minimums(
    profile: ReviewProfile,
    references: Optional[List[float]] = None,
    citations: Optional[List[float]] = None
) -> ReviewProfile:
    """
    Copy of a profile with the reference count and citation count ladders
    moved to new minimums. Points and severities are kept.

    Args:
        profile: Profile to copy
        references: One minimum per bounded reference band, highest first
        citations: One minimum per bounded band of the 'citations' content check

    Returns:
        New ReviewProfile
    """
    changes = {}
    if references is not None:
        changes['reference_bands'] = _move_minimums(profile.reference_bands, references)
    if citations is not None:
        changes['content_checks'] = tuple(
            replace(check, bands=_move_minimums(check.bands, citations))
            if check.metric == 'citations' else check
            for check in profile.content_checks
        )
    return replace(profile, **changes)


def profiles_from_dict(data: Dict[str, Any]) -> Dict[str, ReviewProfile]:
    """
    Build the profile mapping from the thresholds section of a rule file, e.g.
    {"thresholds": {"monograph": {"references": [20, 12, 6], "citations": [12, 6]}}}.
    Types that are not listed keep their defaults.

    Raises:
        ValueError: On an unknown document type or threshold key
    """
    profiles = dict(PROFILES)
    for document_type, entries in data.get(THRESHOLDS_SECTION, {}).items():
        if document_type not in PROFILES:
            raise ValueError(
                f"Unknown document type in thresholds: {document_type}. "
                f"Valid types: {', '.join(DOCUMENT_TYPES)}"
            )
        unknown = set(entries) - {'references', 'citations'}
        if unknown:
            raise ValueError(f"Unknown threshold '{sorted(unknown)[0]}' for '{document_type}'")
        profiles[document_type] = with_minimums(
            PROFILES[document_type],
            references=entries.get('references'),
            citations=entries.get('citations')
        )
    return profiles


def load_profiles(path: Optional[str] = None) -> Dict[str, ReviewProfile]:
    """
    Load the review profiles, applying the thresholds section of a JSON
    rule file when one is given.
    """
    if path is None:
        return dict(PROFILES)

    rules_path = Path(path)
    if not rules_path.exists():
        raise FileNotFoundError(f"Rule file not found: {rules_path}")

    with open(rules_path, 'r', encoding='utf-8') as f:
        return profiles_from_dict(json.load(f))
