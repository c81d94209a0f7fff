"""
Unit tests for abnt_review.converter.

LibreOffice is never launched; subprocess.run is replaced where a Word
conversion is exercised.
"""

import subprocess

import pytest

from abnt_review import converter
from abnt_review.converter import DocumentConverter, convert_document


class TestDocumentConverter:
    """Tests for convert_to_html()."""

    def test_needs_conversion_only_for_word_files(self):
        assert DocumentConverter.needs_conversion("tese.DOCX")
        assert DocumentConverter.needs_conversion("tese.doc")
        assert not DocumentConverter.needs_conversion("tese.htm")

    def test_convert_when_html_then_same_path(self, monograph_file):
        assert convert_document(str(monograph_file)) == str(monograph_file)

    def test_convert_when_missing_then_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            DocumentConverter.convert_to_html(str(tmp_path / "ausente.docx"))

    def test_convert_when_unsupported_then_raises(self, tmp_path):
        path = tmp_path / "tese.pdf"
        path.write_bytes(b"%PDF-1.4")
        with pytest.raises(ValueError, match="Unsupported file format: .pdf"):
            DocumentConverter.convert_to_html(str(path))

    def test_convert_word_runs_libreoffice(self, tmp_path, monkeypatch):
        source = tmp_path / "tese.docx"
        source.write_bytes(b"PK")
        calls = []

        def fake_run(cmd, **kwargs):
            calls.append(cmd)
            (tmp_path / "tese.html").write_text(
                "<html><body><div class=WordSection1><p class=MsoNormal>x</p></div></body></html>",
                encoding='utf-8'
            )
            return subprocess.CompletedProcess(cmd, 0, stdout="", stderr="")

        monkeypatch.setattr(converter.subprocess, "run", fake_run)

        result = DocumentConverter.convert_to_html(str(source))

        assert result == str(tmp_path / "tese.html")
        assert calls[0][:4] == ['soffice', '--headless', '--convert-to', 'html']

    def test_convert_word_when_soffice_missing_then_runtime_error(self, tmp_path, monkeypatch):
        source = tmp_path / "tese.docx"
        source.write_bytes(b"PK")

        def fake_run(cmd, **kwargs):
            raise FileNotFoundError(cmd[0])

        monkeypatch.setattr(converter.subprocess, "run", fake_run)

        with pytest.raises(RuntimeError, match="LibreOffice"):
            DocumentConverter.convert_to_html(str(source))

    def test_convert_word_when_conversion_fails_then_runtime_error(self, tmp_path, monkeypatch):
        source = tmp_path / "tese.doc"
        source.write_bytes(b"\xd0\xcf")
        monkeypatch.setattr(
            converter.subprocess, "run",
            lambda cmd, **kwargs: subprocess.CompletedProcess(cmd, 1, stdout="", stderr="boom")
        )
        with pytest.raises(RuntimeError, match="boom"):
            DocumentConverter.convert_to_html(str(source))

    def test_convert_word_when_output_lacks_word_sections_then_runtime_error(self, tmp_path, monkeypatch):
        """LibreOffice's own HTML has no WordSection divs and would parse as an empty document."""
        source = tmp_path / "tese.docx"
        source.write_bytes(b"PK")

        def fake_run(cmd, **kwargs):
            (tmp_path / "tese.html").write_text(
                "<html><body><h1>INTRODUÇÃO</h1><p>Texto</p></body></html>",
                encoding='utf-8'
            )
            return subprocess.CompletedProcess(cmd, 0, stdout="", stderr="")

        monkeypatch.setattr(converter.subprocess, "run", fake_run)

        with pytest.raises(RuntimeError, match="no WordSection1 container"):
            DocumentConverter.convert_to_html(str(source))
