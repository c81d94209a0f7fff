"""
ABNT Document Reviewer - Streamlit Web Application

A simple web interface for reviewing academic documents against ABNT rules.
"""

import streamlit as st
import tempfile
import io
import json
from pathlib import Path
from contextlib import redirect_stdout, redirect_stderr

from abnt_review.config import DOCUMENT_TYPES, PROFILES
from abnt_review.output_generator import OutputGenerator
from abnt_review.reference_verifier import SerpApiVerifier
from main import DocumentReviewRunner


AUTO_DETECT = "Detect automatically"


# Page configuration
st.set_page_config(
    page_title="ABNT Document Reviewer",
    page_icon="📄",
    layout="centered"
)

# Custom CSS for cleaner appearance
st.markdown("""
<style>
    .stButton > button {
        width: 100%;
    }
</style>
""", unsafe_allow_html=True)


# Header
st.title("📄 ABNT Document Reviewer")
st.markdown(
    "Upload a monograph or article saved from Word as **Web Page (.htm)** "
    "to check it against ABNT formatting and structure rules."
)

st.divider()

# File upload
uploaded_file = st.file_uploader(
    "Upload your document",
    type=["htm", "html", "docx", "doc"],
    help="Word 'Web Page' exports give the most accurate formatting checks"
)

# Options
type_options = [AUTO_DETECT] + [PROFILES[name].label for name in DOCUMENT_TYPES]
type_choice = st.selectbox("Document type", type_options)

verify_refs = st.checkbox(
    "Verify the first references on Google Scholar",
    help="Requires the SERP_API_KEY environment variable; does not affect the score"
)

st.divider()

if uploaded_file is not None:
    st.info(f"📎 **File:** {uploaded_file.name} ({uploaded_file.size / 1024:.1f} KB)")

    if st.button("🔍 Review Document", type="primary", use_container_width=True):

        document_type = None
        if type_choice != AUTO_DETECT:
            document_type = next(
                name for name in DOCUMENT_TYPES if PROFILES[name].label == type_choice
            )

        verifier = SerpApiVerifier.from_env() if verify_refs else None
        if verify_refs and verifier is None:
            st.warning("SERP_API_KEY is not set; references will not be verified.")

        try:
            with st.spinner("Reviewing document..."):
                with tempfile.TemporaryDirectory() as tmp_dir:
                    tmp_doc = Path(tmp_dir) / uploaded_file.name
                    tmp_doc.write_bytes(uploaded_file.getvalue())

                    json_path = Path(tmp_dir) / f"{tmp_doc.stem}_review.json"
                    pdf_path = Path(tmp_dir) / f"{tmp_doc.stem}_review.pdf"

                    # Suppress console output from the runner
                    stdout_capture = io.StringIO()
                    stderr_capture = io.StringIO()

                    with redirect_stdout(stdout_capture), redirect_stderr(stderr_capture):
                        runner = DocumentReviewRunner(
                            verifier=verifier,
                            generate_report=True,
                            quiet=True
                        )
                        report = runner.review(
                            str(tmp_doc),
                            document_type=document_type,
                            output_path=str(json_path),
                            report_path=str(pdf_path)
                        )

                    json_output = json.loads(json_path.read_text(encoding='utf-8'))
                    pdf_bytes = pdf_path.read_bytes()

            st.success("✅ Review complete!")

            col1, col2, col3 = st.columns(3)
            with col1:
                st.metric("Score", f"{report.percentage}%")
            with col2:
                st.metric("Grade", report.grade)
            with col3:
                st.metric("Issues", report.summary['total_issues'])

            st.subheader("Section scores")
            st.table([
                {
                    "Section": name,
                    "Points": f"{score.earned:g}/{score.max:g}",
                    "Score": f"{score.percentage}%",
                }
                for name, score in report.scores.sections.items()
            ])

            if report.issues:
                with st.expander(f"Issues ({len(report.issues)})"):
                    st.text(OutputGenerator.format_report_for_console(report))

            if 'reference_verification' in json_output:
                with st.expander("Reference verification"):
                    st.json(json_output['reference_verification'])

            st.divider()

            stem = Path(uploaded_file.name).stem
            st.download_button(
                label="📥 Download Review Report (PDF)",
                data=pdf_bytes,
                file_name=f"{stem}_review.pdf",
                mime="application/pdf",
                use_container_width=True
            )
            st.download_button(
                label="📥 Download Review Data (JSON)",
                data=json.dumps(json_output, indent=2, ensure_ascii=False),
                file_name=f"{stem}_review.json",
                mime="application/json",
                use_container_width=True
            )

        except (FileNotFoundError, ValueError, RuntimeError) as e:
            st.error(f"❌ Review failed: {e}")
            st.caption("Please ensure the document is a valid Word HTML export and try again.")

else:
    st.markdown(
        """
        <div style="text-align: center; padding: 40px; color: #888;">
            <p>👆 Upload a document to get started</p>
        </div>
        """,
        unsafe_allow_html=True
    )

# Footer
st.divider()
st.caption(
    "ABNT Document Reviewer | "
    "Checks structure, formatting, content, references and citations"
)
