"""
Command line interface for cvmatch.

``cvmatch analyze`` runs one screening cycle in the terminal: the PDF is
read, the gate countdown is shown, the résumé is scored by Gemini and
the report is printed.  ``cvmatch web`` launches the browser interface
through Streamlit.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import subprocess
import sys
from pathlib import Path
from typing import List

from .analyze.client import AnalysisClient
from .config import get_settings
from .errors import ConfigurationError
from .extract.pdf_text import SelectedFile
from .render import render_report_text
from .session.machine import AnalysisSession
from .session.state import AwaitingGate, Status

logger = logging.getLogger("cvmatch.cli")

EXIT_OK = 0
EXIT_ANALYSIS_FAILED = 1
EXIT_USAGE = 2


def _print_progress(session: AnalysisSession) -> None:
    state = session.state
    if isinstance(state, AwaitingGate):
        print(f"\r{state.message}   ", end="", file=sys.stderr, flush=True)
        if state.remaining == 0:
            print(file=sys.stderr)
    elif state.status in (Status.EXTRACTING, Status.ANALYZING):
        print(state.message, file=sys.stderr)


def _read_job_description(args: argparse.Namespace) -> str:
    if args.job_file:
        with open(args.job_file, "r", encoding="utf-8") as f:
            return f.read()
    return args.job or ""


def cmd_analyze(args: argparse.Namespace) -> int:
    """Run a full screening cycle and print the report."""
    try:
        settings = get_settings(args.config)
    except ConfigurationError as exc:
        logger.error("%s", exc)
        return EXIT_USAGE
    logging.getLogger().setLevel(settings.log_level)
    try:
        selected = SelectedFile.from_path(args.file)
    except OSError as exc:
        logger.error("Cannot read %s: %s", args.file, exc)
        return EXIT_USAGE
    session = AnalysisSession(
        AnalysisClient(settings),
        gate_seconds=settings.gate_seconds,
        on_change=_print_progress,
        max_upload_mb=settings.max_upload_mb,
    )
    session.select_file(selected)
    session.set_job_description(_read_job_description(args))
    if session.upload_warning:
        logger.warning("%s", session.upload_warning)
    if not session.can_start():
        logger.error("%s", session.validation_message or "Cannot start the analysis.")
        return EXIT_USAGE

    state = asyncio.run(session.run_cycle())
    report = session.report
    if report is None:
        logger.error("%s", state.message)
        return EXIT_ANALYSIS_FAILED
    print(render_report_text(report))
    if args.json_out:
        with open(args.json_out, "w", encoding="utf-8") as f:
            json.dump(report.to_dict(), f, indent=2, ensure_ascii=False)
        logger.info("Wrote report JSON to %s", args.json_out)
    if args.summary_out:
        Path(args.summary_out).write_text(report.suggested_summary + "\n", encoding="utf-8")
        logger.info("Wrote suggested summary to %s", args.summary_out)
    return EXIT_OK


def cmd_web(args: argparse.Namespace) -> int:
    """Launch the Streamlit interface."""
    try:
        get_settings(args.config)
    except ConfigurationError as exc:
        logger.error("%s", exc)
        return EXIT_USAGE
    app_path = Path(__file__).resolve().parent / "webapp.py"
    command = [sys.executable, "-m", "streamlit", "run", str(app_path), "--server.port", str(args.port)]
    if args.config:
        command += ["--", "--config", args.config]
    logger.info("Starting web interface on port %d", args.port)
    return subprocess.call(command)


def main(argv: List[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="cvmatch", description="Résumé vs. job description screening")
    parser.add_argument("--config", help="Optional YAML config file")
    subparsers = parser.add_subparsers(dest="command", required=True)

    analyze_cmd = subparsers.add_parser("analyze", help="Score a résumé PDF against a job description")
    analyze_cmd.add_argument("--file", required=True, help="Path to the résumé PDF")
    job_group = analyze_cmd.add_mutually_exclusive_group(required=True)
    job_group.add_argument("--job", help="Job description text")
    job_group.add_argument("--job-file", dest="job_file", help="Path to a text file with the job description")
    analyze_cmd.add_argument("--json-out", dest="json_out", help="Write the report as JSON to this path")
    analyze_cmd.add_argument("--summary-out", dest="summary_out", help="Write the suggested summary to this path")
    analyze_cmd.set_defaults(func=cmd_analyze)

    web_cmd = subparsers.add_parser("web", help="Launch the browser interface")
    web_cmd.add_argument("--port", type=int, default=8501, help="Port for the Streamlit server")
    web_cmd.set_defaults(func=cmd_web)

    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
