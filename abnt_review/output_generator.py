"""
Output Generator Module
Formats review reports as JSON and console text.
"""

import json
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

from . import __version__
from .models import DocumentStatistics
from .reference_verifier import ReferenceVerificationSummary
from .scoring import Report, Severity

SEVERITY_SYMBOLS = {
    Severity.CRITICAL: "✗",
    Severity.HIGH: "✗",
    Severity.MEDIUM: "⚠",
    Severity.LOW: "ℹ",
}


class OutputGenerator:
    """Generates JSON output and console summaries for a review."""

    @staticmethod
    def generate_json_output(
        report: Report,
        document_path: Optional[str] = None,
        statistics: Optional[DocumentStatistics] = None,
        verification: Optional[ReferenceVerificationSummary] = None
    ) -> Dict[str, Any]:
        """
        Generate comprehensive JSON output.

        Args:
            report: Review report
            document_path: Path to the reviewed document
            statistics: Optional document statistics
            verification: Optional reference verification summary

        Returns:
            Dictionary ready for JSON serialization
        """
        output = {
            "document_info": {
                "file_path": str(Path(document_path).absolute()) if document_path else None,
                "file_name": Path(document_path).name if document_path else None,
                "analysis_timestamp": datetime.now().isoformat(),
                "analysis_version": f"abnt_review_{__version__}"
            },
            "report": report.to_dict(),
        }

        if statistics is not None:
            output["statistics"] = statistics.to_dict()
        if verification is not None:
            output["reference_verification"] = verification.to_dict()

        return output

    @staticmethod
    def save_json(output_dict: Dict, output_path: str):
        """
        Save JSON output to file.

        Args:
            output_dict: Dictionary to save
            output_path: Path for output file
        """
        with open(output_path, 'w', encoding='utf-8') as f:
            json.dump(output_dict, f, indent=2, ensure_ascii=False)

    @staticmethod
    def get_default_output_path(document_path: str, suffix: str = '.json') -> str:
        """
        Get default output path, e.g. thesis.htm -> thesis_review.json.

        Args:
            document_path: Path to input document
            suffix: Output extension

        Returns:
            Path for output file
        """
        document_path = Path(document_path)
        output_path = document_path.parent / f"{document_path.stem}_review{suffix}"
        return str(output_path)

    @staticmethod
    def format_report_for_console(report: Report) -> str:
        """
        Format a review report for console output.

        Args:
            report: Review report

        Returns:
            Formatted string for console display
        """
        lines = []
        scores = report.scores

        lines.append("=" * 70)
        lines.append(f"REVIEW REPORT - {report.document_type.upper()}")
        lines.append("=" * 70)
        lines.append("")
        lines.append(f"Total Score: {scores.total:g}/{scores.max_score:g} ({scores.percentage}%)")
        lines.append(f"Grade: {report.grade}")
        lines.append("")

        lines.append("SECTION SCORES:")
        lines.append("-" * 70)
        for name, section in scores.sections.items():
            lines.append(f"  {name}: {section.earned:g}/{section.max:g} ({section.percentage}%)")
        lines.append("")

        summary = report.summary
        lines.append(f"ISSUES FOUND: {summary['total_issues']}")
        lines.append("-" * 70)
        for severity in Severity:
            lines.append(f"  {severity.value.capitalize()}: {summary[severity.value]}")
        lines.append("")

        if report.issues:
            lines.append("ISSUE DETAILS:")
            lines.append("-" * 70)
            for idx, issue in enumerate(report.issues, 1):
                symbol = SEVERITY_SYMBOLS[issue.severity]
                lines.append(f"  {idx}. {symbol} [{issue.severity.value.upper()}] {issue.section}")
                lines.append(f"     {issue.description}")
                if issue.location:
                    lines.append(f"     Location: {issue.location}")
                if issue.max_score > 0:
                    lines.append(f"     Points: {issue.score:g}/{issue.max_score:g}")
            lines.append("")

        lines.append("=" * 70)
        return "\n".join(lines)

    @staticmethod
    def format_statistics(statistics: DocumentStatistics) -> str:
        """Format document statistics as an aligned table."""
        stats = statistics.to_dict()
        labels = {
            'sections': "Sections",
            'paragraphs': "Paragraphs",
            'headings': "Headings",
            'lists': "Lists",
            'figures': "Figures",
            'references': "References",
            'citations': "Citations",
            'total_words': "Total words",
            'words_per_paragraph': "Words per paragraph",
            'citations_per_paragraph': "Citations per paragraph",
            'citation_reference_ratio': "Citation/reference ratio",
        }

        lines = ["DOCUMENT STATISTICS:", "-" * 70]
        for key, label in labels.items():
            lines.append(f"  {label:<26} {stats[key]}")
        return "\n".join(lines)

    @staticmethod
    def format_verification_summary(summary: ReferenceVerificationSummary) -> str:
        lines = ["REFERENCE VERIFICATION:", "-" * 70]
        if summary.checked_count == 0:
            lines.append("  Not validated (no lookups performed)")
            return "\n".join(lines)

        lines.append(f"  Verified: {summary.validated}/{summary.checked_count} "
                     f"(of {summary.total} references)")
        for result in summary.results:
            symbol = "✓" if result.verified else "✗"
            lines.append(f"  {symbol} {result.original_text[:80]}")
            if result.formatted_citation:
                lines.append(f"      ABNT: {result.formatted_citation}")
            if result.error:
                lines.append(f"      Error: {result.error}")
        return "\n".join(lines)
