"""
Formatting Rules Engine Module
Pure checks of resolved style values against the ABNT rule table.
"""

import re
from dataclasses import dataclass, field
from typing import Any, List, Optional

from .config import PX_TO_PT, RuleTable
from .scoring import Severity
from .styles import ResolvedStyle

SIZE_PATTERN = re.compile(r'(-?[\d.]+)\s*(pt|px|cm|mm)')
# Numeric prefix of a value, e.g. 12.0 in "12.0pt"
LEADING_NUMBER_PATTERN = re.compile(r'^[+-]?(\d+\.?\d*|\.\d+)')
NOT_DEFINED = "not defined"


@dataclass
class RuleCheck:
    """Outcome of one style check. ``actual`` is None when unparsable."""
    valid: bool
    actual: Any
    expected: Any
    difference: Optional[float] = None
    raw: Optional[str] = None


@dataclass
class RuleViolation:
    """A failed check, as reported by the compound validators."""
    rule: str
    kind: str
    expected: str
    actual: str
    severity: Severity
    check: RuleCheck


@dataclass
class FormatResult:
    violations: List[RuleViolation] = field(default_factory=list)
    earned: float = 0
    max: float = 0

    def award(self, points: float, passed: bool):
        self.max += points
        if passed:
            self.earned += points


def format_number(value: Optional[float], unit: str = '') -> str:
    if value is None:
        return NOT_DEFINED
    return f"{value:g}{unit}"


def _to_float(value: str) -> Optional[float]:
    try:
        return float(value)
    except ValueError:
        return None


def _leading_number(value: str) -> Optional[float]:
    match = LEADING_NUMBER_PATTERN.match(value)
    return float(match.group(0)) if match else None


class FormattingRulesEngine:
    """Checks element styles against an injected RuleTable."""

    def __init__(self, rules: Optional[RuleTable] = None):
        self.rules = rules or RuleTable()

    # =========================================================================
    # UNIT PARSING
    # =========================================================================

    def parse_size(self, value: Optional[str]) -> Optional[float]:
        """
        Convert a CSS length to points.

        Args:
            value: e.g. '12.0pt', '16px', '1.25cm', '3mm'

        Returns:
            Size in points, or None when unparsable
        """
        if not value:
            return None

        match = SIZE_PATTERN.search(value)
        if not match:
            return _to_float(value.strip())

        number = _to_float(match.group(1))
        if number is None:
            return None

        unit = match.group(2)
        if unit == 'px':
            return number * PX_TO_PT
        if unit == 'cm':
            return number / self.rules.cm_per_pt
        if unit == 'mm':
            return number / (self.rules.cm_per_pt * 10)
        return number

    def parse_spacing(self, value: Optional[str]) -> Optional[float]:
        if not value:
            return None
        value = value.strip()
        if value.endswith('%'):
            return _to_float(value[:-1])
        if SIZE_PATTERN.search(value):
            return self.parse_size(value)
        return _to_float(value)

    # =========================================================================
    # SINGLE CHECKS
    # =========================================================================

    def _check_length(self, value: Optional[str], expected: float, tolerance: float) -> RuleCheck:
        actual = self.parse_size(value)
        if actual is None:
            return RuleCheck(valid=False, actual=None, expected=expected, raw=value)
        difference = actual - expected
        return RuleCheck(
            valid=abs(difference) <= tolerance,
            actual=actual,
            expected=expected,
            difference=difference,
            raw=value
        )

    def check_font_size(self, value: Optional[str], expected: float,
                        tolerance: Optional[float] = None) -> RuleCheck:
        if tolerance is None:
            tolerance = self.rules.font_size_tolerance
        return self._check_length(value, expected, tolerance)

    def check_font(self, value: Optional[str], allowed: List[str]) -> RuleCheck:
        """Valid when the first listed family contains any allowed font name."""
        if not value:
            return RuleCheck(valid=False, actual=None, expected=list(allowed))

        clean = re.sub(r'[\'"]', '', value).split(',')[0].strip()
        valid = any(font.lower() in clean.lower() for font in allowed)
        return RuleCheck(valid=valid, actual=clean, expected=list(allowed), raw=value)

    def check_line_spacing(self, value: Optional[str], expected_percent: float,
                           tolerance: Optional[float] = None) -> RuleCheck:
        """
        Compare line-height as a percentage: '150%' is used as is, 'normal'
        means 100 and anything else is read as a multiplier from its numeric
        prefix, so '1.5' gives 150 and '18.0pt' gives 1800.
        """
        if tolerance is None:
            tolerance = self.rules.line_spacing_tolerance
        if not value:
            return RuleCheck(valid=False, actual=None, expected=expected_percent)

        value = value.strip()
        if value.endswith('%'):
            percent = _to_float(value[:-1])
        elif value == 'normal':
            percent = 100.0
        else:
            number = _leading_number(value)
            percent = number * 100 if number is not None else None

        if percent is None:
            return RuleCheck(valid=False, actual=None, expected=expected_percent, raw=value)

        difference = percent - expected_percent
        return RuleCheck(
            valid=abs(difference) <= tolerance,
            actual=percent,
            expected=expected_percent,
            difference=difference,
            raw=value
        )

    def check_alignment(self, value: Optional[str], expected: str) -> RuleCheck:
        if not value:
            return RuleCheck(valid=False, actual=None, expected=expected)
        return RuleCheck(valid=value == expected, actual=value, expected=expected, raw=value)

    def check_indent(self, value: Optional[str], expected: float,
                     tolerance: Optional[float] = None) -> RuleCheck:
        if tolerance is None:
            tolerance = self.rules.indent_tolerance
        return self._check_length(value, expected, tolerance)

    def check_margin(self, value: Optional[str], expected: float,
                     tolerance: Optional[float] = None) -> RuleCheck:
        if tolerance is None:
            tolerance = self.rules.margin_tolerance
        return self._check_length(value, expected, tolerance)

    # =========================================================================
    # COMPOUND VALIDATORS
    # =========================================================================

    def validate_general_formatting(self, styles: ResolvedStyle) -> FormatResult:
        """Font size (medium) and font family (high)."""
        result = FormatResult()
        points = self.rules.format_check_points

        size = self.check_font_size(styles.font_size, self.rules.font_size)
        result.award(points, size.valid)
        if not size.valid:
            result.violations.append(RuleViolation(
                rule="Font size",
                kind='font_size',
                expected=format_number(size.expected, 'pt'),
                actual=format_number(size.actual, 'pt'),
                severity=Severity.MEDIUM,
                check=size
            ))

        font = self.check_font(styles.font_family, self.rules.fonts)
        result.award(points, font.valid)
        if not font.valid:
            result.violations.append(RuleViolation(
                rule="Font family",
                kind='font',
                expected=" or ".join(font.expected),
                actual=font.actual or NOT_DEFINED,
                severity=Severity.HIGH,
                check=font
            ))

        return result

    def validate_development_formatting(self, styles: ResolvedStyle) -> FormatResult:
        """Line spacing (high), alignment (medium) and, when declared, indent (low)."""
        result = FormatResult()
        points = self.rules.format_check_points

        spacing = self.check_line_spacing(styles.line_height, self.rules.line_spacing)
        result.award(points, spacing.valid)
        if not spacing.valid:
            result.violations.append(RuleViolation(
                rule="Line spacing",
                kind='line_spacing',
                expected=format_number(spacing.expected, '%'),
                actual=format_number(spacing.actual, '%'),
                severity=Severity.HIGH,
                check=spacing
            ))

        align = self.check_alignment(styles.text_align, self.rules.alignment)
        result.award(points, align.valid)
        if not align.valid:
            result.violations.append(RuleViolation(
                rule="Text alignment",
                kind='alignment',
                expected=align.expected,
                actual=align.actual or NOT_DEFINED,
                severity=Severity.MEDIUM,
                check=align
            ))

        if styles.text_indent:
            indent = self.check_indent(styles.text_indent, self.rules.indent)
            result.award(points, indent.valid)
            if not indent.valid:
                result.violations.append(RuleViolation(
                    rule="Paragraph indent",
                    kind='indent',
                    expected=format_number(indent.expected, 'pt'),
                    actual=format_number(indent.actual, 'pt'),
                    severity=Severity.LOW,
                    check=indent
                ))

        return result

    def validate_reference_formatting(self, styles: ResolvedStyle) -> FormatResult:
        """
        Reference spacing (medium) and alignment (low). An entry that
        declares no line-height passes the spacing check.
        """
        result = FormatResult()
        points = self.rules.reference_check_points

        spacing = self.check_line_spacing(styles.line_height, self.rules.reference_line_spacing)
        passed = spacing.valid or not styles.line_height
        result.award(points, passed)
        if not passed:
            result.violations.append(RuleViolation(
                rule="Reference line spacing",
                kind='line_spacing',
                expected=format_number(spacing.expected, '%'),
                actual=format_number(spacing.actual, '%') if spacing.actual is not None else spacing.raw,
                severity=Severity.MEDIUM,
                check=spacing
            ))

        align = self.check_alignment(styles.text_align, self.rules.reference_alignment)
        result.award(points, align.valid)
        if not align.valid:
            result.violations.append(RuleViolation(
                rule="Reference alignment",
                kind='alignment',
                expected=align.expected,
                actual=align.actual or NOT_DEFINED,
                severity=Severity.LOW,
                check=align
            ))

        return result
