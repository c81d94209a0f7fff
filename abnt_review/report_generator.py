"""
PDF Report Generator Module
Generates a PDF summary of a review: grade, section scores, statistics and issues.
"""

import fitz  # PyMuPDF
from typing import List, Optional, Sequence, Tuple
from pathlib import Path
from datetime import datetime

from .models import DocumentStatistics
from .scoring import Report, Severity


# Layout constants
PAGE_WIDTH = 595   # A4 width in points
PAGE_HEIGHT = 842  # A4 height in points
MARGIN = 40
BOTTOM_LIMIT = PAGE_HEIGHT - MARGIN

# Table settings
FONT_SIZE = 9
LINE_HEIGHT = 11
CELL_PADDING = 6
HEADER_ROW_HEIGHT = 22
GRID_COLOR = (0.7, 0.7, 0.7)
HEADER_FILL = (0.92, 0.92, 0.92)
STRIPE_FILL = (0.97, 0.97, 0.97)

# Colors
COLOR_PASS = (0, 0.6, 0)       # Green
COLOR_WARN = (1, 0.5, 0)       # Orange
COLOR_FAIL = (0.8, 0, 0)       # Red
COLOR_INFO = (0, 0.4, 0.8)     # Blue
COLOR_GRAY = (0.5, 0.5, 0.5)
COLOR_DARK = (0.2, 0.2, 0.2)

SEVERITY_COLORS = {
    Severity.CRITICAL: COLOR_FAIL,
    Severity.HIGH: COLOR_WARN,
    Severity.MEDIUM: COLOR_INFO,
    Severity.LOW: COLOR_GRAY,
}

# Percentage from which a section counts as passing
PASSING_PERCENTAGE = 60

Color = Tuple[float, float, float]
Cell = Tuple[str, Color]


def wrap_text(text: str, width: float, fontsize: float = FONT_SIZE) -> List[str]:
    """Greedy word wrap to a column width measured with the Helvetica metrics."""
    lines = []
    current = ""
    for word in text.split():
        candidate = f"{current} {word}" if current else word
        if current and fitz.get_text_length(candidate, fontname="helv", fontsize=fontsize) > width:
            lines.append(current)
            current = word
        else:
            current = candidate
    lines.append(current)
    return lines


class ReportGenerator:
    """Generates a PDF summary for one review report."""

    def __init__(
        self,
        document_path: Optional[str],
        report: Report,
        statistics: Optional[DocumentStatistics] = None
    ):
        """
        Initialize report generator.

        Args:
            document_path: Path to the reviewed document (shown in the header)
            report: Review report
            statistics: Optional document statistics
        """
        self.document_path = document_path
        self.report = report
        self.statistics = statistics
        self.doc: Optional[fitz.Document] = None

    def build_document(self) -> fitz.Document:
        """Lay out the summary pages in a new PDF document."""
        self.doc = fitz.open()
        self.doc.new_page(width=PAGE_WIDTH, height=PAGE_HEIGHT)
        report = self.report

        # 1. Grade banner
        y_pos = self._draw_banner(MARGIN)

        # 2. Section scores
        score_rows = []
        for section_name, score in report.scores.sections.items():
            color = COLOR_PASS if score.percentage >= PASSING_PERCENTAGE else COLOR_FAIL
            score_rows.append([
                (section_name, COLOR_DARK),
                (f"{score.earned:g}/{score.max:g}", COLOR_DARK),
                (f"{score.percentage}%", color)
            ])
        y_pos = self._draw_table(
            y_pos,
            "Section Scores",
            ["Section", "Points", "Score"],
            [260, 100, 80],
            score_rows
        )

        # 3. Document statistics
        if self.statistics is not None:
            stat_rows = [
                [(key.replace('_', ' ').capitalize(), COLOR_DARK), (str(value), COLOR_DARK)]
                for key, value in self.statistics.to_dict().items()
            ]
            y_pos = self._draw_table(
                y_pos,
                "Document Statistics",
                ["Statistic", "Value"],
                [260, 100],
                stat_rows
            )

        # 4. Issues, most severe first
        ranked = sorted(report.issues, key=lambda issue: list(Severity).index(issue.severity))
        issue_rows = [
            [
                (issue.severity.value.upper(), SEVERITY_COLORS[issue.severity]),
                (issue.section, COLOR_DARK),
                (issue.location or "", COLOR_GRAY),
                (issue.description, COLOR_DARK)
            ]
            for issue in ranked
        ]
        if issue_rows:
            self._draw_table(
                y_pos,
                f"Issues ({len(issue_rows)})",
                ["Severity", "Section", "Location", "Description"],
                [60, 110, 70, 275],
                issue_rows
            )

        return self.doc

    def generate_report(self, output_path: Optional[str] = None) -> str:
        """
        Generate the PDF report.

        Args:
            output_path: Optional output path (default: <document>_review.pdf)

        Returns:
            Path to generated report
        """
        if output_path is None:
            if not self.document_path:
                raise ValueError("output_path is required when no document path is known")
            source = Path(self.document_path)
            output_path = str(source.parent / f"{source.stem}_review.pdf")

        doc = self.build_document()
        doc.save(output_path)
        doc.close()

        return output_path

    def to_bytes(self) -> bytes:
        doc = self.build_document()
        data = doc.tobytes()
        doc.close()
        return data

    @property
    def page(self) -> fitz.Page:
        return self.doc[-1]

    def _ensure_room(self, y_pos: float, needed: float) -> float:
        """Continue on a fresh page when ``needed`` points do not fit below y_pos."""
        if y_pos + needed > BOTTOM_LIMIT:
            self.doc.new_page(width=PAGE_WIDTH, height=PAGE_HEIGHT)
            return MARGIN
        return y_pos

    def _draw_banner(self, y: float) -> float:
        """
        Draw the title block: document name, grade and a bar showing the
        overall percentage against the passing mark.

        Returns:
            New y position after the banner
        """
        report = self.report
        page = self.page
        height = 95
        right = PAGE_WIDTH - MARGIN
        passed = report.percentage >= PASSING_PERCENTAGE

        page.draw_rect(fitz.Rect(MARGIN, y, right, y + height),
                       color=GRID_COLOR, fill=(0.98, 0.98, 0.98), width=1)

        name = Path(self.document_path).name if self.document_path else "(in memory)"
        timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        page.insert_text((MARGIN + 15, y + 22),
                         f"ABNT Review - {report.document_type.capitalize()}",
                         fontsize=16, fontname="hebo", color=COLOR_DARK)
        page.insert_text((MARGIN + 15, y + 38),
                         f"Document: {name}    Generated: {timestamp}",
                         fontsize=9, fontname="helv", color=COLOR_GRAY)

        page.insert_text((MARGIN + 15, y + 60),
                         f"Grade: {report.grade}   ({report.percentage}%)",
                         fontsize=12, fontname="hebo",
                         color=COLOR_PASS if passed else COLOR_FAIL)
        summary = report.summary
        page.insert_text((right - 170, y + 60),
                         f"Issues: {summary['total_issues']}    Critical: {summary['critical']}",
                         fontsize=10, fontname="helv", color=COLOR_DARK)

        # Score bar with a tick at the passing mark
        bar_left = MARGIN + 15
        bar_width = right - 15 - bar_left
        bar_top = y + 72
        page.draw_rect(fitz.Rect(bar_left, bar_top, bar_left + bar_width, bar_top + 8),
                       color=GRID_COLOR, fill=(1, 1, 1), width=0.5)
        filled = bar_width * min(report.percentage, 100) / 100
        if filled > 0:
            page.draw_rect(fitz.Rect(bar_left, bar_top, bar_left + filled, bar_top + 8),
                           color=None, fill=COLOR_PASS if passed else COLOR_FAIL)
        tick = bar_left + bar_width * PASSING_PERCENTAGE / 100
        page.draw_line(fitz.Point(tick, bar_top - 2), fitz.Point(tick, bar_top + 10),
                       color=COLOR_DARK, width=0.8)

        return y + height + 15

    def _draw_header_row(self, y: float, headers: Sequence[str], col_widths: Sequence[float]) -> float:
        page = self.page
        page.draw_rect(fitz.Rect(MARGIN, y, MARGIN + sum(col_widths), y + HEADER_ROW_HEIGHT),
                       color=GRID_COLOR, fill=HEADER_FILL, width=0.5)
        x = MARGIN
        for header, width in zip(headers, col_widths):
            page.insert_text((x + CELL_PADDING, y + 15), header,
                             fontsize=FONT_SIZE, fontname="hebo", color=COLOR_DARK)
            x += width
        return y + HEADER_ROW_HEIGHT

    def _draw_table(
        self,
        y: float,
        title: str,
        headers: Sequence[str],
        col_widths: Sequence[float],
        rows: Sequence[Sequence[Cell]]
    ) -> float:
        """
        Draw a titled table whose cells wrap onto several lines. Rows grow to
        fit their tallest cell; a row that does not fit moves to a new page,
        where the header row is repeated.

        Returns:
            New y position after the table
        """
        y = self._ensure_room(y, 20 + HEADER_ROW_HEIGHT + LINE_HEIGHT + CELL_PADDING)
        self.page.insert_text((MARGIN, y + 12), title, fontsize=11, fontname="hebo", color=COLOR_DARK)
        y = self._draw_header_row(y + 20, headers, col_widths)
        table_width = sum(col_widths)

        for row_idx, row in enumerate(rows):
            cells = [
                wrap_text(text, width - 2 * CELL_PADDING)
                for (text, _), width in zip(row, col_widths)
            ]
            row_height = max(len(lines) for lines in cells) * LINE_HEIGHT + CELL_PADDING

            if y + row_height > BOTTOM_LIMIT:
                y = self._ensure_room(y, row_height)
                y = self._draw_header_row(y, headers, col_widths)

            page = self.page
            rect = fitz.Rect(MARGIN, y, MARGIN + table_width, y + row_height)
            page.draw_rect(rect, color=GRID_COLOR,
                           fill=STRIPE_FILL if row_idx % 2 else None, width=0.5)

            x = MARGIN
            for lines, (_, color), width in zip(cells, row, col_widths):
                for line_idx, line in enumerate(lines):
                    page.insert_text((x + CELL_PADDING, y + LINE_HEIGHT + line_idx * LINE_HEIGHT),
                                     line, fontsize=FONT_SIZE, fontname="helv", color=color)
                x += width
            y += row_height

        return y + 10


def generate_report(
    document_path: Optional[str],
    report: Report,
    statistics: Optional[DocumentStatistics] = None,
    output_path: Optional[str] = None
) -> str:
    """
    Write the PDF summary for a review.

    Args:
        document_path: Path to the reviewed document
        report: Review report
        statistics: Optional document statistics
        output_path: Optional output path

    Returns:
        Path to generated report
    """
    return ReportGenerator(document_path, report, statistics).generate_report(output_path)
