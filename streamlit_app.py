#!/usr/bin/env python3
"""
Streamlit Web Interface for Filing Intake
Lets a client upload tax documents and previews the strategy insights
found by the AI analysis before a preparer reviews them
"""

import streamlit as st
import asyncio

from filing_intake.api.dependencies import get_settings
from filing_intake.services.document_analyzer import DocumentAnalyzer
from filing_intake.services.insights_view import build_insights_view
from filing_intake.services.intake_pipeline import IncomingFile, IntakePipeline
from filing_intake.services.strategy_extractor import StrategyExtractor
from filing_intake.services.upload_store import create_upload_store
from filing_intake.utils.exceptions import StorageError, ValidationError
from filing_intake.utils.validators import validate_content_type, validate_file_count, validate_file_size

# Page configuration
st.set_page_config(
    page_title="Filing Intake",
    page_icon="🧾",
    layout="wide",
    initial_sidebar_state="expanded"
)

# Initialize the pipeline
@st.cache_resource
def get_pipeline():
    config = get_settings()
    upload_store = create_upload_store(config)
    return IntakePipeline(upload_store, DocumentAnalyzer(upload_store, config=config), StrategyExtractor())

def main():
    """Main Streamlit application"""

    # Header
    st.title("🧾 Upload Your Tax Documents")
    st.markdown("**We'll review your documents and preview the tax strategies worth discussing.**")
    st.markdown("---")

    config = get_settings()
    pipeline = get_pipeline()

    # Sidebar
    with st.sidebar:
        st.header("🔧 Status")
        if config.GROQ_API_KEY:
            st.success("✅ AI document analysis - Ready")
        else:
            st.warning("⚠️ AI document analysis - Not configured")
        st.info(f"📁 Storage: {'S3' if config.s3_configured else 'Local'}")

        st.markdown("---")
        st.subheader("ℹ️ How It Works")
        st.markdown("""
        **1. Upload** W-2s, 1099s, 1098s and other tax forms
        **2. AI reads** each document
        **3. Review** the strategies we spotted
        """)

    uploaded_files = st.file_uploader(
        "Choose documents (PDF, JPG, PNG, TXT)",
        type=['pdf', 'jpg', 'jpeg', 'png', 'txt'],
        accept_multiple_files=True,
        help=f"Up to {config.MAX_FILES_PER_UPLOAD} files, {config.MAX_FILE_SIZE // (1024 * 1024)}MB each"
    )

    if uploaded_files and st.button("🔍 Analyze Documents", type="primary", use_container_width=True):
        analyze_uploads(pipeline, uploaded_files)

def analyze_uploads(pipeline, uploaded_files):
    """Run the intake pipeline and render the insights"""
    try:
        validate_file_count(len(uploaded_files))
        incoming = []
        for uploaded in uploaded_files:
            content = uploaded.getvalue()
            validate_file_size(len(content), uploaded.name)
            validate_content_type(uploaded.type, uploaded.name)
            incoming.append(IncomingFile(filename=uploaded.name, content=content, content_type=uploaded.type))

        with st.spinner("Analyzing documents and identifying tax strategies... This may take a moment."):
            outcome = asyncio.run(pipeline.run(incoming))

    except (ValidationError, StorageError) as e:
        st.error(f"❌ {str(e)}")
        return

    render_insights(outcome.results)

def render_insights(results):
    view = build_insights_view(results)

    st.markdown("---")
    st.subheader(view.summary_line)

    if view.warning:
        st.warning(f"⚠️ {view.warning} You can still submit your documents.")

    if view.strategies:
        st.markdown("### 💡 Identified Tax Strategies")
        for strategy in view.strategies:
            with st.container(border=True):
                st.markdown(f"**{strategy.title}**")
                st.write(strategy.description)
                if strategy.potential_savings:
                    st.markdown(f"*Potential Savings: {strategy.potential_savings}*")

    if view.analyzed:
        count = len(view.analyzed)
        st.markdown(f"### 📄 Document Analysis ({count} document{'s' if count != 1 else ''})")
        for result in view.analyzed:
            analysis = result.analysis
            with st.expander(f"{result.filename} - {analysis.document_type or 'Unknown'} ({analysis.confidence} confidence)"):
                if analysis.extracted_data.year:
                    st.write(f"**Tax Year:** {analysis.extracted_data.year}")
                for amount in analysis.extracted_data.amounts or []:
                    st.write(f"• {amount.label}: ${amount.value:,.2f}")
                if analysis.summary:
                    st.markdown("**Analysis Summary:**")
                    st.write(analysis.summary)
                if analysis.notes:
                    st.markdown("**Strategy Notes:**")
                    for note in analysis.notes:
                        st.write(f"• {note}")

    if view.failed and view.analyzed:
        with st.expander(f"⚠️ Analysis Issues ({len(view.failed)})"):
            for result in view.failed:
                st.write(f"**{result.filename}**: {result.error}")

if __name__ == "__main__":
    main()
