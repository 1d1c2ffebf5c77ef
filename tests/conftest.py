"""Shared fixtures and test doubles.

Nothing here talks to the network: the Gemini model is replaced by
``FakeModel`` and the gate timer sleeps through ``instant_sleep``.
"""

from __future__ import annotations

import asyncio
import json
from typing import Dict, List

import pytest

from cvmatch.analyze.client import AnalysisProvider, parse_report
from cvmatch.analyze.schema import AnalysisReport
from cvmatch.config import reset_settings


def make_report_dict(score: int = 72) -> Dict[str, object]:
    return {
        "score": score,
        "strengths": ["Five years of Python", "Django REST APIs", "Team lead experience"],
        "weaknesses": ["No Kubernetes", "No AWS certification", "Little testing evidence"],
        "missing_keywords": ["Kubernetes", "AWS", "Terraform", "CI/CD", "pytest"],
        "action_plan": [
            "Add the Kubernetes migration project",
            "Quantify the latency improvements",
            "List the AWS services used",
        ],
        "suggested_summary": "Senior Python engineer with five years building APIs.",
        "verdict": "Solid fit with a few infrastructure gaps.",
    }


class FakeResponse:
    def __init__(self, text: str) -> None:
        self.text = text


class FakeModel:
    """Stands in for ``genai.GenerativeModel``."""

    def __init__(self, text: str = "", error: Exception | None = None) -> None:
        self.text = text
        self.error = error
        self.prompts: List[str] = []

    def generate_content(self, prompt: str) -> FakeResponse:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return FakeResponse(self.text)


class FakeClient(AnalysisProvider):
    """Stands in for :class:`cvmatch.analyze.client.AnalysisClient`."""

    def __init__(self, report: AnalysisReport | None = None, error: Exception | None = None) -> None:
        self.report = report or parse_report(json.dumps(make_report_dict()))
        self.error = error
        self.calls: List[tuple] = []

    async def analyze_async(self, resume_text: str, job_description: str) -> AnalysisReport:
        self.calls.append((resume_text, job_description))
        await asyncio.sleep(0)
        if self.error is not None:
            raise self.error
        return self.report


async def instant_sleep(interval: float) -> None:
    await asyncio.sleep(0)


@pytest.fixture
def report_dict() -> Dict[str, object]:
    return make_report_dict()


@pytest.fixture(autouse=True)
def _fresh_settings():
    reset_settings()
    yield
    reset_settings()
