"""
Scoring Module
Issues, per-section score board and the final review report.
"""

import copy
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class Severity(Enum):
    """Issue severity levels, independent of point value."""
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


# (minimum percentage, letter, label), checked top to bottom
GRADE_THRESHOLDS = [
    (90, 'A', 'Excellent'),
    (80, 'B', 'Good'),
    (70, 'C', 'Fair'),
    (60, 'D', 'Insufficient'),
]
FAILING_GRADE = ('F', 'Fail')


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class Issue:
    """A single finding produced by a review phase."""
    section: str
    severity: Severity
    description: str
    location: Optional[str] = None
    score: float = 0
    max_score: float = 0
    timestamp: str = field(default_factory=_now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'section': self.section,
            'severity': self.severity.value,
            'description': self.description,
            'location': self.location,
            'score': self.score,
            'max_score': self.max_score,
            'timestamp': self.timestamp,
        }


@dataclass
class SectionScore:
    earned: float
    max: float
    percentage: float

    def to_dict(self) -> Dict[str, float]:
        return {'earned': self.earned, 'max': self.max, 'percentage': self.percentage}


def _percentage(earned: float, max_points: float) -> float:
    if max_points <= 0:
        return 0.0
    return round(earned / max_points * 100, 2)


@dataclass
class ScoreBoard:
    """Running totals; the overall percentage is computed once by finalize()."""
    total: float = 0
    max_score: float = 0
    percentage: float = 0.0
    sections: Dict[str, SectionScore] = field(default_factory=dict)

    def record(self, name: str, earned: float, max_points: float):
        self.sections[name] = SectionScore(
            earned=earned,
            max=max_points,
            percentage=_percentage(earned, max_points)
        )
        self.total += earned
        self.max_score += max_points

    def finalize(self) -> float:
        self.percentage = _percentage(self.total, self.max_score)
        return self.percentage

    def to_dict(self) -> Dict[str, Any]:
        return {
            'total': self.total,
            'max_score': self.max_score,
            'percentage': self.percentage,
            'sections': {name: s.to_dict() for name, s in self.sections.items()},
        }


@dataclass
class ReviewAccumulator:
    """Score board and issue list threaded through every review phase."""
    scores: ScoreBoard = field(default_factory=ScoreBoard)
    issues: List[Issue] = field(default_factory=list)

    def add_issue(
        self,
        section: str,
        severity: Severity,
        description: str,
        location: Optional[str] = None,
        score: float = 0,
        max_score: float = 0
    ):
        self.issues.append(Issue(
            section=section,
            severity=severity,
            description=description,
            location=location,
            score=score,
            max_score=max_score
        ))

    def record_section(self, name: str, earned: float, max_points: float):
        self.scores.record(name, earned, max_points)


def get_grade(percentage: float) -> str:
    """Map a percentage to a letter grade, e.g. 'B (Good)'."""
    for minimum, letter, label in GRADE_THRESHOLDS:
        if percentage >= minimum:
            return f"{letter} ({label})"
    letter, label = FAILING_GRADE
    return f"{letter} ({label})"


def summarize_issues(issues: List[Issue]) -> Dict[str, int]:
    summary = {'total_issues': len(issues)}
    for severity in Severity:
        summary[severity.value] = sum(1 for i in issues if i.severity == severity)
    return summary


@dataclass(frozen=True)
class Report:
    """Terminal artifact of a review."""
    document_type: str
    scores: ScoreBoard
    grade: str
    issues: Tuple[Issue, ...]
    summary: Dict[str, int]
    generated_at: str = field(default_factory=_now)

    @classmethod
    def from_accumulator(cls, document_type: str, acc: ReviewAccumulator) -> 'Report':
        scores = copy.deepcopy(acc.scores)
        return cls(
            document_type=document_type,
            scores=scores,
            grade=get_grade(scores.percentage),
            issues=tuple(acc.issues),
            summary=summarize_issues(acc.issues)
        )

    @property
    def percentage(self) -> float:
        return self.scores.percentage

    def to_dict(self) -> Dict[str, Any]:
        return {
            'document_type': self.document_type,
            'scores': self.scores.to_dict(),
            'grade': self.grade,
            'issues': [i.to_dict() for i in self.issues],
            'summary': dict(self.summary),
            'generated_at': self.generated_at,
        }
