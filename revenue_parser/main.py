"""
Revenue Statement Parser - Main Streamlit UI

Upload an oil & gas revenue statement PDF, extract it with an OpenAI vision
model and download the result as Excel or CDEX XML.

Features:
- PDF upload with type and size checks
- Vision model extraction with progress
- Preview of company, period, line items and totals
- Excel export with a derived production sheet
- CDEX accounting XML export
"""

import logging
import sys
from pathlib import Path

import pandas as pd
import streamlit as st

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from revenue_parser.config import AppConfig, load_config
from revenue_parser.derived.calculator import DerivedFieldCalculator
from revenue_parser.exceptions import ConfigurationError, RevenueParserError
from revenue_parser.export import cdex
from revenue_parser.export.excel import XLSX_MIME_TYPE, ExcelExporter
from revenue_parser.llm.client import VisionExtractionClient
from revenue_parser.models.revenue import RevenueRecord
from revenue_parser.pipeline import RevenueStatementPipeline

logger = logging.getLogger(__name__)


def configure_logging(config: AppConfig):
    """Configure logging once for the process."""
    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def init_session_state():
    """Initialize Streamlit session state."""
    if "config" not in st.session_state:
        config = load_config()
        configure_logging(config)
        st.session_state.config = config

    if "extraction_result" not in st.session_state:
        st.session_state.extraction_result = None

    if "uploaded_file_name" not in st.session_state:
        st.session_state.uploaded_file_name = None

    if "connection_status" not in st.session_state:
        st.session_state.connection_status = None


def get_client() -> VisionExtractionClient:
    """Build the extraction client from the session config."""
    return VisionExtractionClient(st.session_state.config.openai)


def show_api_key_status() -> bool:
    """Display the API key status; returns whether extraction can run."""
    config = st.session_state.config
    is_valid, message = config.openai.validate_api_key()

    if not config.openai.api_key:
        st.error(
            f"⚠️ **{ConfigurationError.user_message}**\n\n"
            "Create a `.env` file with:\n\n"
            "```\nOPENAI_API_KEY=sk-...\n```"
        )
        return False

    if not is_valid:
        st.warning(f"⚠️ {message}")
    return True


def render_sidebar():
    """Render the settings sidebar."""
    with st.sidebar:
        st.header("⚙️ Settings")

        config = st.session_state.config

        st.subheader("OpenAI")
        st.text_input(
            "Model",
            value=config.openai.model,
            key="openai_model",
            help="A vision-capable chat model, e.g. gpt-4o",
        )
        st.caption(f"Endpoint: {config.openai.base_url}")

        if st.button("🔌 Test Connection", use_container_width=True):
            try:
                client = get_client()
            except ConfigurationError as e:
                st.session_state.connection_status = (False, e.user_message)
            else:
                st.session_state.connection_status = client.check_connection()

        status = st.session_state.connection_status
        if status:
            ok, message = status
            if ok:
                st.success(f"✅ {message}")
            else:
                st.error(f"❌ {message}")

        st.divider()

        st.subheader("Export Settings")
        st.checkbox(
            "Reproducible owner interest",
            value=config.jitter_seed is not None,
            key="reproducible_jitter",
            help="Use a fixed seed for the estimated owner interest values",
        )

        st.divider()
        st.caption(f"Maximum upload size: {config.max_file_size_mb}MB")


def render_upload_section():
    """Render the file upload section."""
    st.header("📄 Upload Revenue Statement")

    uploaded_file = st.file_uploader(
        "Choose a revenue statement",
        type=["pdf"],
        help="Upload a PDF of your oil & gas revenue statement",
    )

    if uploaded_file and uploaded_file.name != st.session_state.uploaded_file_name:
        # New file: drop the previous result
        st.session_state.extraction_result = None

    if uploaded_file:
        st.session_state.uploaded_file_content = uploaded_file.getvalue()
        st.session_state.uploaded_file_name = uploaded_file.name
        st.session_state.uploaded_file_type = uploaded_file.type
        return True

    return False


def perform_extraction():
    """Run the pipeline over the uploaded file."""
    config = st.session_state.config
    if model := st.session_state.get("openai_model"):
        config.openai.model = model

    progress_bar = st.progress(0, text="Validating PDF...")

    def on_progress(percent: float):
        if percent < 10:
            text = "Validating PDF..."
        elif percent < 40:
            text = "Converting pages to images..."
        elif percent < 85:
            text = "Extracting data with AI..."
        else:
            text = "Checking extracted data..."
        progress_bar.progress(int(percent), text=text)

    try:
        pipeline = RevenueStatementPipeline(client=get_client(), config=config)
        result = pipeline.run(
            st.session_state.uploaded_file_content,
            st.session_state.uploaded_file_name,
            content_type=st.session_state.get("uploaded_file_type"),
            on_progress=on_progress,
        )
    except RevenueParserError as e:
        progress_bar.empty()
        st.error(e.user_message)
        if e.detail:
            with st.expander("Diagnostic details"):
                st.code(e.detail)
        logger.exception("Extraction failed")
        return None

    progress_bar.empty()

    for warning in result.warnings:
        st.warning(warning)

    st.success(
        f"Extraction completed in {result.processing_time_seconds:.2f}s "
        f"({result.page_count} page(s), model {result.model})"
    )
    return result


def render_extraction_section():
    """Render the extraction workflow section."""
    st.header("🔍 Extract Revenue Data")

    if st.button("🚀 Process Statement", type="primary", use_container_width=True):
        result = perform_extraction()
        if result:
            st.session_state.extraction_result = result

    result = st.session_state.extraction_result
    if result:
        with st.expander("🧾 Raw AI Response", expanded=False):
            st.code(result.raw_response, language="json")


def format_currency(amount: float) -> str:
    sign = "-" if amount < 0 else ""
    return f"{sign}${abs(amount):,.2f}"


def render_preview_section(record: RevenueRecord):
    """Render the extracted data preview."""
    st.header("📋 Extracted Data")

    col1, col2, col3 = st.columns(3)
    col1.metric("Company", record.company)
    col2.metric("Period", record.period)
    col3.metric("Net Revenue", format_currency(record.net_revenue))

    st.subheader("Line Items")
    if record.line_items:
        df = pd.DataFrame([item.to_dict() for item in record.line_items])
        df.columns = ["Description", "Quantity", "Rate", "Amount"]
        st.dataframe(df, use_container_width=True, hide_index=True)
    else:
        st.info("No line items were extracted")

    st.subheader("Revenue Summary")
    summary = pd.DataFrame([
        ("Gross Revenue", format_currency(record.total_revenue)),
        ("Taxes", format_currency(record.taxes)),
        ("Other Deductions (derived)", format_currency(record.other_deductions)),
        ("Net Revenue", format_currency(record.net_revenue)),
    ], columns=["Metric", "Amount"])
    st.dataframe(summary, use_container_width=True, hide_index=True)


def render_export_section(record: RevenueRecord):
    """Render the Excel and CDEX download buttons."""
    st.header("📊 Export")

    config = st.session_state.config
    file_name = st.session_state.uploaded_file_name or "revenue_statement.pdf"
    seed = config.jitter_seed
    if st.session_state.get("reproducible_jitter") and seed is None:
        seed = 0

    col1, col2 = st.columns(2)

    with col1:
        st.subheader("Excel Format")
        st.caption("Revenue analysis, summary and oil & gas production sheets")
        try:
            exporter = ExcelExporter(
                calculator=DerivedFieldCalculator(seed=seed),
                currency_format=config.excel_currency_format,
            )
            st.download_button(
                "⬇️ Download Excel File",
                data=exporter.to_bytes(record),
                file_name=exporter.build_filename(file_name),
                mime=XLSX_MIME_TYPE,
                type="primary",
                use_container_width=True,
            )
        except Exception as e:
            st.error(f"Export failed: {e}")
            logger.exception("Excel export failed")

    with col2:
        st.subheader("CDEX Format")
        st.caption("Accounting interchange XML")
        errors = cdex.validate_cdex_data(record)
        if errors:
            st.warning("CDEX export unavailable:\n\n" + "\n".join(f"- {e}" for e in errors))
        else:
            st.download_button(
                "⬇️ Download CDEX File",
                data=cdex.export_cdex(record, file_name).encode("utf-8"),
                file_name=cdex.build_filename(file_name),
                mime="application/xml",
                use_container_width=True,
            )


def main():
    """Main application entry point."""
    st.set_page_config(
        page_title="Revenue Statement Parser",
        page_icon="🛢️",
        layout="wide",
        initial_sidebar_state="expanded",
    )

    # Initialize
    init_session_state()

    # Header
    st.title("🛢️ Revenue Statement Parser")
    st.markdown(
        "Extract data from oil & gas revenue statements with AI. "
        "Export to Excel or CDEX accounting XML."
    )

    can_extract = show_api_key_status()

    # Sidebar
    render_sidebar()

    st.divider()

    if render_upload_section() and can_extract:
        st.divider()
        render_extraction_section()

        result = st.session_state.extraction_result
        if result:
            st.divider()
            render_preview_section(result.record)

            st.divider()
            render_export_section(result.record)


if __name__ == "__main__":
    main()
