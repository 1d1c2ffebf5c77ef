"""
Streamlit interface for cvmatch.

Run with ``cvmatch web`` or ``streamlit run cvmatch/webapp.py``.  The
page is a thin view over :class:`~cvmatch.session.machine.AnalysisSession`:
widgets feed user actions into the session and each rerun draws
whatever state the session is in.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import Optional

import streamlit as st

from cvmatch.analyze.client import AnalysisClient
from cvmatch.analyze.schema import AnalysisReport, band_label, score_tier
from cvmatch.config import Settings, get_settings
from cvmatch.errors import ConfigurationError
from cvmatch.extract.pdf_text import SelectedFile
from cvmatch.session.machine import MISSING_INPUT_MESSAGE, AnalysisSession
from cvmatch.session.state import AwaitingGate, Status

logger = logging.getLogger(__name__)

TIER_COLOURS = {"low": "#ef4444", "medium": "#eab308", "high": "#22c55e"}


@st.cache_resource(show_spinner=False)
def load_settings_once(config_path: Optional[str]) -> Settings:
    return get_settings(config_path)


@st.cache_resource(show_spinner=False)
def load_client(_settings: Settings) -> AnalysisClient:
    return AnalysisClient(_settings)


def _config_path_from_argv() -> Optional[str]:
    parser = argparse.ArgumentParser(add_help=False)
    parser.add_argument("--config")
    args, _ = parser.parse_known_args(sys.argv[1:])
    return args.config


def _get_session(settings: Settings) -> AnalysisSession:
    if "session" not in st.session_state:
        st.session_state["session"] = AnalysisSession(
            load_client(settings),
            gate_seconds=settings.gate_seconds,
            max_upload_mb=settings.max_upload_mb,
        )
        st.session_state["upload_key"] = 0
    return st.session_state["session"]


def _draw_progress(session: AnalysisSession, placeholder) -> None:
    state = session.state
    with placeholder.container():
        if isinstance(state, AwaitingGate):
            total = session.gate_duration
            st.subheader("Supporting the project")
            st.write("We are processing your résumé for free. Please wait a few seconds.")
            st.progress((total - state.remaining) / total, text=state.message)
        elif state.status in (Status.EXTRACTING, Status.ANALYZING):
            st.info(state.message)


def _new_analysis(session: AnalysisSession) -> None:
    session.reset()
    # A fresh key clears the file uploader widget.
    st.session_state["upload_key"] += 1
    st.session_state.pop("job_description", None)


def render_report(report: AnalysisReport) -> None:
    colour = TIER_COLOURS[score_tier(report.score)]
    st.markdown(
        f"<h1 style='color:{colour};margin-bottom:0'>{report.score}/100</h1>",
        unsafe_allow_html=True,
    )
    st.caption(band_label(report.score))
    st.write(report.verdict)

    st.subheader("Missing keywords (ATS)")
    if report.missing_keywords:
        st.write(" · ".join(f"`{keyword}`" for keyword in report.missing_keywords))
    else:
        st.success("No critical gaps found.")

    st.subheader("Suggested professional summary")
    st.caption("Rewritten to include the keywords above. Use the copy button to paste it into your résumé.")
    st.code(report.suggested_summary, language=None, wrap_lines=True)

    st.subheader("Immediate action plan")
    st.markdown("\n".join(f"{i}. {action}" for i, action in enumerate(report.action_plan, start=1)))

    left, right = st.columns(2)
    with left:
        st.subheader("What you already have")
        st.markdown("\n".join(f"- {item}" for item in report.strengths))
    with right:
        st.subheader("What is missing")
        st.markdown("\n".join(f"- {item}" for item in report.weaknesses))


def main() -> None:
    st.set_page_config(page_title="CV Match AI", layout="centered")
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")
    try:
        settings = load_settings_once(_config_path_from_argv())
    except ConfigurationError as exc:
        st.error(str(exc))
        st.stop()
        return
    logging.getLogger().setLevel(settings.log_level)
    session = _get_session(settings)

    st.title("CV Match AI")

    if session.status is Status.SUCCESS and session.report is not None:
        render_report(session.report)
        if st.button("New analysis", type="primary"):
            _new_analysis(session)
            st.rerun()
        return

    st.write("Find out in seconds whether your profile fits the job you want.")

    uploaded = st.file_uploader(
        "1. Upload your résumé (PDF)",
        type=["pdf"],
        help=f"PDF files up to {settings.max_upload_mb:g} MB",
        key=f"resume_{st.session_state['upload_key']}",
    )
    if session.status is Status.IDLE:
        if uploaded is None:
            # The uploader returns None again once its file is removed.
            if session.selected_file is not None:
                session.clear_file()
        else:
            selected = SelectedFile(name=uploaded.name, data=uploaded.getvalue())
            if session.selected_file != selected:
                session.select_file(selected)
    job_description = st.text_area(
        "2. Job description",
        height=180,
        placeholder="Paste the full job description here (requirements, responsibilities, ...)",
        key="job_description",
    )
    session.set_job_description(job_description)

    if session.upload_warning:
        st.warning(session.upload_warning)
    if session.validation_message:
        st.warning(session.validation_message)

    if session.status is Status.ERROR:
        st.error(session.status_message)
        if st.button("New analysis"):
            _new_analysis(session)
            st.rerun()
        return

    missing = session.missing_inputs()
    if missing and not session.validation_message:
        st.caption(f"{MISSING_INPUT_MESSAGE} Still missing: {' and '.join(missing)}.")

    placeholder = st.empty()
    clicked = st.button(
        "Analyse compatibility",
        type="primary",
        disabled=not session.can_start(),
        use_container_width=True,
    )
    if clicked:
        session.on_change = lambda s: _draw_progress(s, placeholder)
        try:
            asyncio.run(session.run_cycle())
        finally:
            session.on_change = None
        st.rerun()

    st.caption(
        "Your data is only sent to the AI service for this analysis. Nothing is stored."
    )


if __name__ == "__main__":
    main()
