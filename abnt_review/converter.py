"""
Document Converter Module
Converts Word (.docx/.doc) documents to HTML for review.
"""

import logging
import subprocess
from pathlib import Path

from .config import ParserSettings
from .loader import load_document

logger = logging.getLogger(__name__)

HTML_EXTENSIONS = ('.htm', '.html')
WORD_EXTENSIONS = ('.docx', '.doc')

# LibreOffice writes UTF-8 HTML
CONVERTED_ENCODING = 'utf-8'

CONVERSION_TIMEOUT = 120


class DocumentConverter:
    """Handles conversion of Word documents to HTML."""

    @staticmethod
    def needs_conversion(input_path: str) -> bool:
        return Path(input_path).suffix.lower() in WORD_EXTENSIONS

    @staticmethod
    def convert_to_html(input_path: str) -> str:
        """
        Convert a document to HTML if needed.

        Args:
            input_path: Path to the input document

        Returns:
            Path to the HTML file (original if already HTML, converted otherwise)

        Raises:
            FileNotFoundError: If the input does not exist
            ValueError: If file format is not supported
            RuntimeError: If conversion fails
        """
        input_path = Path(input_path)

        if not input_path.exists():
            raise FileNotFoundError(f"Input file not found: {input_path}")

        extension = input_path.suffix.lower()

        if extension in HTML_EXTENSIONS:
            return str(input_path)

        elif extension in WORD_EXTENSIONS:
            return DocumentConverter._convert_word_to_html(input_path)

        else:
            raise ValueError(
                f"Unsupported file format: {extension}. "
                "Supported formats: .htm, .html, .docx, .doc"
            )

    @staticmethod
    def _convert_word_to_html(word_path: Path) -> str:
        """
        Convert a Word document with headless LibreOffice.

        Args:
            word_path: Path to Word document

        Returns:
            Path to converted HTML
        """
        output_dir = word_path.parent
        output_path = word_path.with_suffix('.html')

        cmd = [
            'soffice',
            '--headless',
            '--convert-to', 'html',
            '--outdir', str(output_dir),
            str(word_path)
        ]

        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=CONVERSION_TIMEOUT
            )
        except FileNotFoundError:
            raise RuntimeError(
                "Word to HTML conversion requires LibreOffice (soffice). "
                "Install it or save the document as 'Web Page (.htm)' from Word."
            )
        except subprocess.TimeoutExpired:
            raise RuntimeError(
                f"LibreOffice conversion timed out for {word_path}"
            )

        if result.returncode != 0 or not output_path.exists():
            raise RuntimeError(
                f"LibreOffice conversion failed for {word_path}: {result.stderr.strip()}"
            )

        DocumentConverter._check_word_markup(output_path)

        logger.info("Converted %s to %s", word_path.name, output_path.name)
        return str(output_path)

    @staticmethod
    def _check_word_markup(html_path: Path, section_prefix: str = ParserSettings.section_prefix):
        """
        Reject converted HTML that lacks Word's section containers.

        LibreOffice writes its own HTML flavour, without the WordSection divs
        and Mso classes the parser reads, so such a file would review as an
        empty document.

        Raises:
            RuntimeError: If the first section container is missing
        """
        loaded = load_document(str(html_path), encoding=CONVERTED_ENCODING)
        if loaded.soup.find('div', class_=f"{section_prefix}1") is None:
            raise RuntimeError(
                f"Converted HTML for {html_path.stem} has no {section_prefix}1 container. "
                "Save the document as 'Web Page (.htm)' from Word and review that file."
            )


def convert_document(input_path: str) -> str:
    """
    Convenience function to convert a document to HTML.

    Args:
        input_path: Path to input document

    Returns:
        Path to HTML file
    """
    return DocumentConverter.convert_to_html(input_path)
