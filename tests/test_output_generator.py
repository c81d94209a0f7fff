"""
Unit tests for JSON, console and PDF output.
"""

import json
from pathlib import Path

import fitz
import pytest

from abnt_review.config import MONOGRAPH_PROFILE
from abnt_review.models import DocumentStatistics
from abnt_review.output_generator import OutputGenerator
from abnt_review.reference_verifier import ReferenceCheckResult, ReferenceVerificationSummary
from abnt_review.report_generator import ReportGenerator, generate_report, wrap_text
from abnt_review.reviewer import DocumentReviewer
from abnt_review.scoring import Report


@pytest.fixture
def report(monograph_data):
    return DocumentReviewer(monograph_data, MONOGRAPH_PROFILE).review()


@pytest.fixture
def statistics(monograph_data):
    return DocumentStatistics.from_document(monograph_data)


class TestJsonOutput:
    """Tests for generate_json_output() and save_json()."""

    def test_generate_json_output_when_minimal_then_info_and_report(self, report):
        output = OutputGenerator.generate_json_output(report, "docs/tese.htm")
        assert output['document_info']['file_name'] == "tese.htm"
        assert output['document_info']['analysis_version'].startswith("abnt_review_")
        assert output['report']['document_type'] == 'monograph'
        assert 'statistics' not in output
        assert 'reference_verification' not in output

    def test_generate_json_output_when_extras_then_included(self, report, statistics):
        verification = ReferenceVerificationSummary(validated=0, total=3, checked_count=0)
        output = OutputGenerator.generate_json_output(
            report, statistics=statistics, verification=verification
        )
        assert output['document_info']['file_path'] is None
        assert output['statistics']['references'] == 3
        assert output['reference_verification']['total'] == 3

    def test_save_json_keeps_accents(self, report, tmp_path):
        path = tmp_path / "review.json"
        OutputGenerator.save_json(OutputGenerator.generate_json_output(report), str(path))
        text = path.read_text(encoding='utf-8')
        assert "REFERÊNCIAS" in text
        assert json.loads(text)['report']['summary']['total_issues'] == len(report.issues)

    def test_get_default_output_path(self):
        path = OutputGenerator.get_default_output_path("/tmp/docs/tese.htm")
        assert Path(path) == Path("/tmp/docs/tese_review.json")
        pdf = OutputGenerator.get_default_output_path("tese.htm", suffix='.pdf')
        assert Path(pdf).name == "tese_review.pdf"


class TestConsoleOutput:
    """Tests for the console formatters."""

    def test_format_report_lists_sections_and_issues(self, report):
        text = OutputGenerator.format_report_for_console(report)
        assert "REVIEW REPORT - MONOGRAPH" in text
        assert f"Grade: {report.grade}" in text
        assert "Document Structure:" in text
        assert "Required section missing: REFERÊNCIAS" in text
        assert "Location: Paragraph 2" in text

    def test_format_statistics_has_every_metric(self, statistics):
        text = OutputGenerator.format_statistics(statistics)
        assert "Citation/reference ratio" in text
        assert "Total words" in text

    def test_format_verification_when_nothing_checked(self):
        summary = ReferenceVerificationSummary(validated=0, total=4, checked_count=0)
        assert "Not validated" in OutputGenerator.format_verification_summary(summary)

    def test_format_verification_lists_results(self):
        summary = ReferenceVerificationSummary(validated=1, total=2, checked_count=2, results=[
            ReferenceCheckResult("SILVA, João. Livro. 2020.", None, True,
                                 formatted_citation="SILVA, João. Livro. , 2020."),
            ReferenceCheckResult("COSTA, Ana. Livro. 2019.", None, False, error="timeout"),
        ])
        text = OutputGenerator.format_verification_summary(summary)
        assert "Verified: 1/2 (of 2 references)" in text
        assert "ABNT: SILVA, João. Livro. , 2020." in text
        assert "Error: timeout" in text


class TestPdfReport:
    """Smoke tests for the PyMuPDF summary report."""

    def test_to_bytes_produces_pdf(self, report, statistics):
        data = ReportGenerator("tese.htm", report, statistics).to_bytes()
        assert data.startswith(b"%PDF")

    def test_generate_report_default_path_beside_document(self, report, tmp_path):
        document = tmp_path / "tese.htm"
        path = generate_report(str(document), report)
        assert Path(path) == tmp_path / "tese_review.pdf"
        assert Path(path).exists()

    def test_generate_report_when_many_issues_then_extra_pages(self, report, tmp_path):
        issues = report.issues * 30
        crowded = Report(
            document_type=report.document_type,
            scores=report.scores,
            grade=report.grade,
            issues=issues,
            summary=report.summary
        )
        path = generate_report(None, crowded, output_path=str(tmp_path / "out.pdf"))
        with fitz.open(path) as doc:
            assert doc.page_count > 1

    def test_generate_report_when_no_paths_then_raises(self, report):
        with pytest.raises(ValueError):
            ReportGenerator(None, report).generate_report()

    def test_wrap_text_splits_long_descriptions(self):
        text = "Reference not cited in the text: " + "palavra " * 40
        lines = wrap_text(text, 200)
        assert len(lines) > 1
        assert " ".join(lines) == " ".join(text.split())
        assert all(fitz.get_text_length(line, fontname="helv", fontsize=9) <= 200 for line in lines)

    def test_wrap_text_when_empty_then_single_blank_line(self):
        assert wrap_text("", 100) == [""]
