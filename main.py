#!/usr/bin/env python3
"""
ABNT Document Reviewer
Reviews Word HTML exports of monographs and articles against ABNT rules.

Usage:
    python main.py review <path_to_document> [--type monograph|article] [--output <json_path>] [--report]
    python main.py stats <path_to_document>
    python main.py types
    python main.py rules [--rules <rules.json>]
"""

import os
import sys
import logging
import argparse
from pathlib import Path
from typing import Dict, List, Optional

from abnt_review.config import (
    DOCUMENT_TYPES,
    PROFILES,
    ReviewProfile,
    RuleTable,
    load_profiles,
    load_rules,
)
from abnt_review.converter import CONVERTED_ENCODING, DocumentConverter
from abnt_review.loader import DEFAULT_ENCODING
from abnt_review.orchestrator import ReviewOrchestrator
from abnt_review.output_generator import OutputGenerator
from abnt_review.reference_verifier import SERP_API_KEY_ENV, SerpApiVerifier
from abnt_review.report_generator import generate_report
from abnt_review.scoring import Report


class ProgressIndicator:
    """Simple progress indicator for long operations."""

    def __init__(self, message: str):
        self.message = message

    def __enter__(self):
        print(f"{self.message}...", end=" ", flush=True)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is None:
            print("Done!")
        else:
            print("Failed!")


class DocumentReviewRunner:
    """Runs a full review of one document and writes its outputs."""

    def __init__(
        self,
        rules: Optional[RuleTable] = None,
        encoding: str = DEFAULT_ENCODING,
        verifier: Optional[SerpApiVerifier] = None,
        generate_report: bool = False,
        quiet: bool = False,
        profiles: Optional[Dict[str, ReviewProfile]] = None
    ):
        """
        Initialize runner.

        Args:
            rules: Rule table (defaults when None)
            encoding: Encoding of HTML input files
            verifier: Optional reference verifier; verification is skipped when None
            generate_report: Whether to write a PDF summary report
            quiet: Skip printing the full report
            profiles: Review profiles overriding the defaults, by document type
        """
        self.rules = rules or RuleTable()
        self.encoding = encoding
        self.verifier = verifier
        self.generate_report = generate_report
        self.quiet = quiet
        self.profiles = profiles

    def _prepare(self, document_path: str):
        """Convert Word input if needed; returns (html_path, encoding)."""
        if not DocumentConverter.needs_conversion(document_path):
            return DocumentConverter.convert_to_html(document_path), self.encoding

        input_ext = Path(document_path).suffix.lower()
        with ProgressIndicator(f"Converting {input_ext} to HTML"):
            html_path = DocumentConverter.convert_to_html(document_path)
        return html_path, CONVERTED_ENCODING

    def review(
        self,
        document_path: str,
        document_type: Optional[str] = None,
        output_path: Optional[str] = None,
        report_path: Optional[str] = None
    ) -> Report:
        """
        Review a document.

        Args:
            document_path: Path to document (HTM, HTML, DOCX or DOC)
            document_type: 'monograph' or 'article'; detected when None
            output_path: Optional path for JSON output
            report_path: Optional path for the PDF report

        Returns:
            Review report
        """
        print("\n" + "=" * 70)
        print("ABNT DOCUMENT REVIEWER")
        print("=" * 70 + "\n")

        # Fail fast on a bad type, before any conversion or parsing
        if document_type is not None and document_type not in DOCUMENT_TYPES:
            raise ValueError(
                f"Invalid document type: {document_type}. "
                f"Valid types: {', '.join(DOCUMENT_TYPES)}"
            )

        # Step 1: Convert to HTML if needed
        html_path, encoding = self._prepare(document_path)
        print(f"Reviewing: {html_path}\n")

        orchestrator = ReviewOrchestrator(
            file_path=html_path,
            rules=self.rules,
            verifier=self.verifier,
            encoding=encoding,
            profiles=self.profiles
        )

        # Step 2: Parse structure
        with ProgressIndicator("Parsing document structure"):
            data = orchestrator.parse_document()

        print(f"  Found {len(data.sections)} sections, {len(data.paragraphs)} paragraphs")
        print(f"  Found {len(data.references)} references")
        print(f"  Found {len(data.citations)} citations")

        # Step 3: Document type
        if document_type is None:
            with ProgressIndicator("Detecting document type"):
                document_type = orchestrator.detect_document_type()
            print(f"  Detected type: {PROFILES[document_type].label}")
        else:
            print(f"Document type set manually: {PROFILES[document_type].label}")

        # Step 4: Review
        with ProgressIndicator("Validating ABNT formatting"):
            report = orchestrator.review(document_type)

        statistics = orchestrator.get_document_statistics()

        # Step 5: Optional reference verification
        verification = None
        if self.verifier is not None:
            with ProgressIndicator("Verifying references online"):
                verification = orchestrator.verify_references()

        # Step 6: Display results
        if not self.quiet:
            print("\n")
            print(OutputGenerator.format_report_for_console(report))
            if verification is not None:
                print(OutputGenerator.format_verification_summary(verification))
        else:
            print(f"\nScore: {report.percentage}%  Grade: {report.grade}")

        # Step 7: Generate JSON output
        json_output = OutputGenerator.generate_json_output(
            report,
            document_path=document_path,
            statistics=statistics,
            verification=verification
        )

        if output_path is None:
            output_path = OutputGenerator.get_default_output_path(document_path)

        with ProgressIndicator(f"Saving JSON output to {output_path}"):
            OutputGenerator.save_json(json_output, output_path)

        # Step 8: Generate PDF report (if requested)
        if self.generate_report or report_path:
            if report_path is None:
                report_path = OutputGenerator.get_default_output_path(document_path, suffix='.pdf')
            with ProgressIndicator(f"Generating PDF report to {report_path}"):
                generate_report(document_path, report, statistics, output_path=report_path)

        print("\n" + "=" * 70)
        print("REVIEW COMPLETE")
        print("=" * 70 + "\n")

        return report


def print_statistics(document_path: str, encoding: str = DEFAULT_ENCODING):
    orchestrator = ReviewOrchestrator(file_path=document_path, encoding=encoding)
    with ProgressIndicator("Parsing document structure"):
        statistics = orchestrator.get_document_statistics()
    print()
    print(OutputGenerator.format_statistics(statistics))
    print()


def print_document_types():
    print("\nSUPPORTED DOCUMENT TYPES:")
    print("-" * 70)
    for name, profile in PROFILES.items():
        sections = ", ".join(req.name for req in profile.required_sections)
        print(f"  {profile.label} ({name})")
        print(f"    Required sections: {sections}")
    print("\nUse --type to set the type manually, e.g.:")
    print("  python main.py review document.htm --type article\n")


def print_rules(rules: RuleTable):
    """Print the rule table the engine checks against."""
    print("\nABNT RULES CHECKED:")
    print("-" * 70)
    for section, values in rules.to_dict().items():
        print(f"  {section}:")
        for key, value in values.items():
            if isinstance(value, list):
                value = ", ".join(value)
            print(f"    {key:<16} {value}")
    print()


def _api_key(args) -> Optional[str]:
    return args.serp_api_key or os.environ.get(SERP_API_KEY_ENV)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Review academic documents (Word HTML exports) against ABNT rules",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py review thesis.htm
  python main.py review paper.htm --type article --output review.json
  python main.py review thesis.docx --report
  python main.py review thesis.htm --verify-references
  python main.py stats thesis.htm
  python main.py rules --rules custom_rules.json
        """
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    review = subparsers.add_parser("review", help="Review a document")
    review.add_argument(
        "document",
        help="Path to document (HTM, HTML, DOCX, or DOC)"
    )
    review.add_argument(
        "--type", "-t",
        dest="document_type",
        help="Document type (monograph, article); detected when omitted"
    )
    review.add_argument(
        "--output", "-o",
        help="Path for JSON output file (default: <document>_review.json)"
    )
    review.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Only print the final score"
    )
    review.add_argument(
        "--report",
        action="store_true",
        help="Generate a PDF summary report"
    )
    review.add_argument(
        "--report-output",
        help="Path for the PDF report (default: <document>_review.pdf)"
    )
    review.add_argument(
        "--rules",
        help="Path to a JSON rule file (rules and count thresholds) overriding the defaults"
    )
    review.add_argument(
        "--encoding",
        default=DEFAULT_ENCODING,
        help=f"Encoding of HTML input (default: {DEFAULT_ENCODING})"
    )
    review.add_argument(
        "--verify-references",
        action="store_true",
        help=f"Look up the first references on Google Scholar (needs {SERP_API_KEY_ENV})"
    )
    review.add_argument(
        "--serp-api-key",
        help=f"SerpAPI key (default: ${SERP_API_KEY_ENV})"
    )

    stats = subparsers.add_parser("stats", help="Show document statistics")
    stats.add_argument("document", help="Path to HTML document")
    stats.add_argument(
        "--encoding",
        default=DEFAULT_ENCODING,
        help=f"Encoding of HTML input (default: {DEFAULT_ENCODING})"
    )

    subparsers.add_parser("types", help="List supported document types")

    rules = subparsers.add_parser("rules", help="Show the ABNT rules checked")
    rules.add_argument("--rules", help="Path to a JSON rule file overriding the defaults")

    return parser


def main(argv: Optional[List[str]] = None):
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    try:
        if args.command == "types":
            print_document_types()

        elif args.command == "rules":
            print_rules(load_rules(args.rules))

        elif args.command == "stats":
            if not Path(args.document).exists():
                print(f"Error: File not found: {args.document}", file=sys.stderr)
                sys.exit(1)
            print_statistics(args.document, encoding=args.encoding)

        elif args.command == "review":
            if not Path(args.document).exists():
                print(f"Error: File not found: {args.document}", file=sys.stderr)
                sys.exit(1)

            verifier = None
            if args.verify_references:
                api_key = _api_key(args)
                if api_key:
                    verifier = SerpApiVerifier(api_key)
                else:
                    print(f"Warning: {SERP_API_KEY_ENV} not set; references will not be verified")

            runner = DocumentReviewRunner(
                rules=load_rules(args.rules),
                profiles=load_profiles(args.rules),
                encoding=args.encoding,
                verifier=verifier,
                generate_report=args.report,
                quiet=args.quiet
            )
            runner.review(
                document_path=args.document,
                document_type=args.document_type,
                output_path=args.output,
                report_path=args.report_output
            )

        sys.exit(0)

    except (FileNotFoundError, ValueError, RuntimeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    except Exception as e:
        print(f"Error during review: {e}", file=sys.stderr)
        import traceback
        traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()
