"""Tests for the command line entry point and text rendering.

The Gemini client and pdfplumber are both replaced so the full
``cvmatch analyze`` path runs offline; the gate is shortened to one
tick through the environment.
"""

from __future__ import annotations

import json
from pathlib import Path
from types import SimpleNamespace

import pytest

from cvmatch import cli
from cvmatch.analyze.client import parse_report
from cvmatch.extract import pdf_text
from cvmatch.render import render_report_text

from conftest import FakeClient, make_report_dict


class _Page:
    def extract_text(self):
        return "Experienced Python developer"


class _PDF:
    pages = [_Page()]

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False


class _EmptyPDF(_PDF):
    pages = []


@pytest.fixture
def offline(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("GEMINI_API_KEY", "test-key")
    monkeypatch.setenv("CVMATCH_GATE_SECONDS", "1")
    monkeypatch.delenv("CVMATCH_CONFIG", raising=False)
    monkeypatch.setattr(cli, "AnalysisClient", lambda settings: FakeClient())
    monkeypatch.setattr(pdf_text, "pdfplumber", SimpleNamespace(open=lambda stream: _PDF()))
    resume = tmp_path / "resume.pdf"
    resume.write_bytes(b"%PDF-1.4 fake")
    return resume


def test_analyze_prints_report(offline: Path, tmp_path: Path, capsys) -> None:
    json_out = tmp_path / "report.json"
    summary_out = tmp_path / "summary.txt"
    code = cli.main([
        "analyze",
        "--file", str(offline),
        "--job", "Senior Python Engineer, 5 years required",
        "--json-out", str(json_out),
        "--summary-out", str(summary_out),
    ])
    assert code == cli.EXIT_OK
    out = capsys.readouterr().out
    assert "Compatibility score: 72/100" in out
    assert json.loads(json_out.read_text(encoding="utf-8")) == make_report_dict()
    assert summary_out.read_text(encoding="utf-8").strip() == make_report_dict()["suggested_summary"]


def test_analyze_blank_job_description(offline: Path, tmp_path: Path) -> None:
    job_file = tmp_path / "job.txt"
    job_file.write_text("   \n", encoding="utf-8")
    code = cli.main(["analyze", "--file", str(offline), "--job-file", str(job_file)])
    assert code == cli.EXIT_USAGE


def test_analyze_missing_api_key(offline: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("GEMINI_API_KEY")
    monkeypatch.delenv("GOOGLE_API_KEY", raising=False)
    monkeypatch.setattr("cvmatch.config.load_dotenv", lambda: False)
    code = cli.main(["analyze", "--file", str(offline), "--job", "Python"])
    assert code == cli.EXIT_USAGE


def test_analyze_failure_exit_code(offline: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(pdf_text, "pdfplumber", SimpleNamespace(open=lambda stream: _EmptyPDF()))
    code = cli.main(["analyze", "--file", str(offline), "--job", "Python"])
    assert code == cli.EXIT_ANALYSIS_FAILED


def test_render_report_text() -> None:
    report = parse_report(json.dumps(make_report_dict(score=30)))
    text = render_report_text(report)
    assert "30/100 (Incompatible profile)" in text
    assert " 1. Add the Kubernetes migration project" in text
    assert "  - Kubernetes" in text


def test_render_report_without_missing_keywords() -> None:
    data = make_report_dict()
    data["missing_keywords"] = []
    text = render_report_text(parse_report(json.dumps(data)))
    assert "No critical gaps found." in text
