"""
Document Reviewer Module
Runs the ordered review phases for one document type and produces a Report.

Each phase is a plain function ``phase(data, profile, engine, acc) -> acc``
that records one section score and appends its issues to the accumulator.
"""

import logging
from typing import Callable, Dict, List, Optional

from .citation_validator import CitationValidator, check_alphabetical_order
from .config import ContentCheck, ReviewProfile, RuleTable, select_band
from .models import DocumentData
from .rules_engine import FormatResult, FormattingRulesEngine, RuleViolation
from .scoring import Report, ReviewAccumulator, Severity

logger = logging.getLogger(__name__)

# Score board section names
STRUCTURE_SECTION = "Document Structure"
FORMATTING_SECTION = "Formatting"
CONTENT_SECTION = "Content"
REFERENCES_SECTION = "References"
CONSISTENCY_SECTION = "Citation/Reference Consistency"
CITATIONS_SECTION = "Citations"

# Readable labels for monograph reports
ALIGNMENT_LABELS = {
    'justify': 'justified',
    'center': 'centered',
    'left': 'left',
    'right': 'right',
}
SPACING_LABELS = {
    150: '1.5 lines',
    100: 'single',
}

Phase = Callable[[DocumentData, ReviewProfile, FormattingRulesEngine, ReviewAccumulator], ReviewAccumulator]


# =============================================================================
# VALUE HUMANIZATION
# =============================================================================

def _humanize_spacing(percent: Optional[float]) -> str:
    if percent is None:
        return "not defined"
    label = SPACING_LABELS.get(percent, 'multiple')
    return f"{label} ({percent:g}%)"


def _humanize_indent(points: Optional[float], cm_per_pt: float) -> str:
    if points is None:
        return "not defined"
    return f"{points * cm_per_pt:.2f} cm ({points:g}pt)"


def humanize_violation(violation: RuleViolation, rules: RuleTable):
    """Return (expected, actual) labels for a violation, e.g. '1.5 lines (150%)'."""
    check = violation.check
    if violation.kind == 'alignment':
        return (
            ALIGNMENT_LABELS.get(check.expected, check.expected),
            ALIGNMENT_LABELS.get(check.actual, violation.actual)
        )
    if violation.kind == 'line_spacing':
        return _humanize_spacing(check.expected), _humanize_spacing(check.actual)
    if violation.kind == 'indent':
        return (
            _humanize_indent(check.expected, rules.cm_per_pt),
            _humanize_indent(check.actual, rules.cm_per_pt)
        )
    return violation.expected, violation.actual


def _report_violations(
    acc: ReviewAccumulator,
    section: str,
    result: FormatResult,
    location: str,
    profile: ReviewProfile,
    rules: RuleTable
):
    for violation in result.violations:
        if profile.humanize_values:
            expected, actual = humanize_violation(violation, rules)
        else:
            expected, actual = violation.expected, violation.actual
        acc.add_issue(
            section,
            violation.severity,
            f'{violation.rule}: expected "{expected}", found "{actual}"',
            location=location
        )


# =============================================================================
# PHASES
# =============================================================================

def validate_structure(data: DocumentData, profile: ReviewProfile,
                       engine: FormattingRulesEngine, acc: ReviewAccumulator) -> ReviewAccumulator:
    """
    Award each required section once when any of its markers appears in
    any heading, plus the per-heading bonus. Earned points are not clamped,
    so a complete document can exceed the phase maximum.
    """
    logger.info("Validating structure")
    headings = data.heading_texts
    earned = 0

    for requirement in profile.required_sections:
        found = any(
            marker.upper() in heading
            for marker in requirement.markers
            for heading in headings
        )
        if found:
            earned += requirement.points
        else:
            acc.add_issue(
                "Structure",
                requirement.severity,
                requirement.message.format(name=requirement.name),
                score=0,
                max_score=requirement.points
            )

    if profile.heading_bonus_cap:
        if headings:
            earned += min(len(headings) * profile.heading_bonus_per_heading, profile.heading_bonus_cap)
        else:
            acc.add_issue(
                "Structure",
                Severity.CRITICAL,
                "Document has no structured headings",
                score=0,
                max_score=profile.heading_bonus_cap
            )

    acc.record_section(STRUCTURE_SECTION, earned, profile.structure_max)
    return acc


def validate_formatting(data: DocumentData, profile: ReviewProfile,
                        engine: FormattingRulesEngine, acc: ReviewAccumulator) -> ReviewAccumulator:
    """Run the general and development checks over the first N paragraphs."""
    logger.info("Validating formatting (%d-paragraph sample)", profile.formatting_sample)
    earned = 0
    max_points = 0

    for idx, paragraph in enumerate(data.paragraphs[:profile.formatting_sample]):
        location = f"Paragraph {idx + 1}"
        general = engine.validate_general_formatting(paragraph.styles)
        development = engine.validate_development_formatting(paragraph.styles)

        earned += general.earned + development.earned
        max_points += general.max + development.max

        _report_violations(acc, "General Formatting", general, location,
                           profile, engine.rules)
        _report_violations(acc, "Development Formatting", development, location,
                           profile, engine.rules)

    acc.record_section(FORMATTING_SECTION, earned, max_points)
    return acc


def content_metrics(data: DocumentData) -> Dict[str, float]:
    """Measured quantities the content ladders are evaluated against."""
    paragraphs = len(data.paragraphs)
    characters = sum(len(p.text) for p in data.paragraphs)
    return {
        'paragraphs': paragraphs,
        'citations': len(data.citations),
        'avg_paragraph_length': characters / paragraphs if paragraphs else 0.0,
        'figures': len(data.figures),
        'lists': len(data.lists),
        'words': data.total_words,
    }


def _score_content_check(check: ContentCheck, value: float, acc: ReviewAccumulator) -> int:
    band = select_band(check.bands, value)
    if band.severity is not None:
        acc.add_issue(
            "Content",
            band.severity,
            band.message.format(value=value),
            score=band.points,
            max_score=check.max_points
        )
    return band.points


def validate_content(data: DocumentData, profile: ReviewProfile,
                     engine: FormattingRulesEngine, acc: ReviewAccumulator) -> ReviewAccumulator:
    logger.info("Validating content")
    metrics = content_metrics(data)
    earned = sum(
        _score_content_check(check, metrics[check.metric], acc)
        for check in profile.content_checks
    )
    acc.record_section(CONTENT_SECTION, earned, profile.content_max)
    return acc


def validate_references(data: DocumentData, profile: ReviewProfile,
                        engine: FormattingRulesEngine, acc: ReviewAccumulator) -> ReviewAccumulator:
    """
    Count ladder, per-entry style checks and the alphabetical-order check.
    A document without any reference entry earns nothing in this phase.
    """
    logger.info("Validating references")
    references = data.references
    max_points = profile.reference_base_max

    if not references:
        acc.add_issue(
            "References",
            Severity.CRITICAL,
            "No reference list found",
            score=0,
            max_score=profile.reference_bands[0].points
        )
        acc.record_section(REFERENCES_SECTION, 0, max_points)
        return acc

    band = select_band(profile.reference_bands, len(references))
    earned = band.points
    if band.severity is not None:
        acc.add_issue(
            "References",
            band.severity,
            band.message.format(value=len(references),
                                recommended=profile.reference_bands[0].minimum),
            score=band.points,
            max_score=profile.reference_bands[0].points
        )

    for idx, reference in enumerate(references):
        result = engine.validate_reference_formatting(reference.styles)
        earned += result.earned
        max_points += result.max
        _report_violations(acc, "Reference Formatting", result, f"Reference {idx + 1}",
                           profile, engine.rules)

    if check_alphabetical_order(references):
        earned += profile.alphabetical_points
    else:
        acc.add_issue(
            "References",
            Severity.MEDIUM,
            "References are not in alphabetical order",
            score=0,
            max_score=profile.alphabetical_points
        )

    acc.record_section(REFERENCES_SECTION, earned, max_points)
    return acc


def validate_citation_consistency(data: DocumentData, profile: ReviewProfile,
                                  engine: FormattingRulesEngine,
                                  acc: ReviewAccumulator) -> ReviewAccumulator:
    """Pair citations with references; flag unmatched citations and uncited references."""
    logger.info("Validating citation/reference consistency")
    result = CitationValidator().validate_citations_and_references(data.citations, data.references)

    for match in result.unmatched:
        acc.add_issue(
            "Citations vs References",
            Severity.HIGH,
            f"Citation not found in references: {match.citation.full}",
            location=f"Paragraph {match.citation.paragraph_index + 1}",
            score=0,
            max_score=10
        )

    for reference in result.unused_references:
        acc.add_issue(
            "Citations vs References",
            Severity.MEDIUM,
            f"Reference not cited in the text: {reference.raw}",
            score=0,
            max_score=5
        )

    earned = len(result.matched) * profile.matched_citation_points
    acc.record_section(CONSISTENCY_SECTION, min(earned, profile.consistency_max), profile.consistency_max)
    return acc


def validate_citation_density(data: DocumentData, profile: ReviewProfile,
                              engine: FormattingRulesEngine,
                              acc: ReviewAccumulator) -> ReviewAccumulator:
    """Citation/reference ratio and citations per paragraph."""
    logger.info("Validating citation density")
    citations = len(data.citations)
    references = len(data.references)
    paragraphs = len(data.paragraphs)

    # Any citation count covers an empty reference list
    ratio = citations / references if references else float('inf')
    density = citations / paragraphs if paragraphs else 0.0

    earned = 0

    band = select_band(profile.ratio_bands, ratio)
    earned += band.points
    if band.severity is not None:
        acc.add_issue(
            "Citations",
            band.severity,
            band.message.format(citations=citations, references=references),
            score=band.points,
            max_score=profile.ratio_bands[0].points
        )

    band = select_band(profile.density_bands, density)
    earned += band.points
    if band.severity is not None:
        acc.add_issue(
            "Citations",
            band.severity,
            band.message.format(percent=density * 100),
            score=band.points,
            max_score=profile.density_bands[0].points
        )

    acc.record_section(CITATIONS_SECTION, earned, profile.density_max)
    return acc


CITATION_PHASES: Dict[str, Phase] = {
    'consistency': validate_citation_consistency,
    'density': validate_citation_density,
}


def phases_for(profile: ReviewProfile) -> List[Phase]:
    return [
        validate_structure,
        validate_formatting,
        validate_content,
        validate_references,
        CITATION_PHASES[profile.citation_phase],
    ]


# =============================================================================
# REVIEWER
# =============================================================================

class DocumentReviewer:
    """Runs every phase of a profile over parsed document data."""

    def __init__(self, data: DocumentData, profile: ReviewProfile, rules: Optional[RuleTable] = None):
        self.data = data
        self.profile = profile
        self.engine = FormattingRulesEngine(rules)

    def review(self) -> Report:
        """
        Run all phases in order, finalize the percentage once and build
        the report.

        Returns:
            Immutable Report
        """
        logger.info("Starting %s review", self.profile.label.lower())
        acc = ReviewAccumulator()

        for phase in phases_for(self.profile):
            acc = phase(self.data, self.profile, self.engine, acc)

        acc.scores.finalize()
        logger.info("Review finished: %.2f%%", acc.scores.percentage)
        return Report.from_accumulator(self.profile.name, acc)
