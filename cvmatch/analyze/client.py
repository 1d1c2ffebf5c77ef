"""
Gemini analysis client.

Sends the extracted résumé text and the job description to Google
Generative AI (Gemini) with a fixed system instruction and a strict
JSON response schema, then turns the reply into an
:class:`~cvmatch.analyze.schema.AnalysisReport`.

Each call is attempted once.  Service failures are classified by the
HTTP status the service signals (see :func:`classify_error`) and raised
as the matching :class:`~cvmatch.errors.AnalysisError` subclass; the
caller decides whether the user may try again.
"""

from __future__ import annotations

import asyncio
import json
import logging
import re
from abc import ABC, abstractmethod
from typing import Dict, Optional, Type

import google.generativeai as genai
from google.api_core import exceptions as google_exceptions

from ..config import Settings
from ..errors import (
    AnalysisError,
    BadRequest,
    EmptyResponse,
    MalformedResponse,
    RateLimited,
    ServiceUnavailable,
    Unauthorized,
    UnknownAnalysisError,
)
from .prompts import SYSTEM_INSTRUCTION, build_prompt
from .schema import RESPONSE_SCHEMA, AnalysisReport

logger = logging.getLogger(__name__)

_STATUS_ERRORS: Dict[int, Type[AnalysisError]] = {
    400: BadRequest,
    401: Unauthorized,
    403: Unauthorized,
    429: RateLimited,
    500: ServiceUnavailable,
    502: ServiceUnavailable,
    503: ServiceUnavailable,
    504: ServiceUnavailable,
}

_LEADING_FENCE = re.compile(r"^```[\w+-]*[ \t]*\n?")
_TRAILING_FENCE = re.compile(r"\n?[ \t]*```$")
_STATUS_IN_TEXT = re.compile(r"\b(400|401|403|429|500|502|503|504)\b")


def strip_code_fence(text: str) -> str:
    """Remove a surrounding Markdown code fence, with or without a language tag."""
    cleaned = text.strip()
    if cleaned.startswith("```"):
        cleaned = _LEADING_FENCE.sub("", cleaned, count=1)
        cleaned = _TRAILING_FENCE.sub("", cleaned, count=1)
    return cleaned.strip()


def classify_error(exc: BaseException) -> AnalysisError:
    """Map a transport or service exception to an :class:`AnalysisError`.

    ``GoogleAPICallError`` instances carry the HTTP status in ``code``.
    Anything else is classified by a status number found in its
    message, and falls back to :class:`UnknownAnalysisError`.
    """
    status: Optional[int] = None
    if isinstance(exc, google_exceptions.GoogleAPICallError):
        status = exc.code if isinstance(exc.code, int) else None
    if status is None:
        match = _STATUS_IN_TEXT.search(str(exc))
        if match:
            status = int(match.group(1))
    error_cls = _STATUS_ERRORS.get(status, UnknownAnalysisError) if status else UnknownAnalysisError
    return error_cls()


def _response_text(response: object) -> str:
    try:
        text = response.text  # type: ignore[attr-defined]
    except ValueError as exc:
        # Raised by the client when the reply has no candidate parts.
        logger.warning("Gemini returned no usable content: %s", exc)
        raise EmptyResponse() from exc
    if not text or not text.strip():
        raise EmptyResponse()
    return text


def parse_report(raw_text: str) -> AnalysisReport:
    """Decode a raw model reply into a report.

    Raises:
        EmptyResponse: The reply is blank.
        MalformedResponse: The reply is not a JSON object carrying all
            seven report fields.
    """
    if not raw_text or not raw_text.strip():
        raise EmptyResponse()
    cleaned = strip_code_fence(raw_text)
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        logger.warning("Failed to parse Gemini response as JSON: %s", exc)
        raise MalformedResponse() from exc
    return AnalysisReport.from_dict(data)


class AnalysisProvider(ABC):
    """Abstract base class for résumé analysis backends."""

    @abstractmethod
    async def analyze_async(self, resume_text: str, job_description: str) -> AnalysisReport:
        """Score one résumé against one job description.

        Args:
            resume_text: Text extracted from the résumé.
            job_description: Job description as pasted by the user.

        Returns:
            A complete :class:`AnalysisReport`.
        """


class AnalysisClient(AnalysisProvider):
    """Client that scores a résumé against a job description with Gemini.

    Args:
        settings: Validated settings carrying the API key and model name.
        model: Optional object exposing ``generate_content(prompt)``.
            When omitted a ``genai.GenerativeModel`` is built from
            ``settings``.  Tests pass a fake here.
    """

    def __init__(self, settings: Settings, model: Optional[object] = None) -> None:
        self.settings = settings
        if model is None:
            genai.configure(api_key=settings.api_key)
            model = genai.GenerativeModel(
                settings.model,
                system_instruction=SYSTEM_INSTRUCTION,
                generation_config=genai.GenerationConfig(
                    response_mime_type="application/json",
                    response_schema=RESPONSE_SCHEMA,
                    temperature=settings.temperature,
                ),
            )
        self.model = model

    def analyze(self, resume_text: str, job_description: str) -> AnalysisReport:
        """Score one résumé against one job description.

        Returns:
            A complete :class:`AnalysisReport`.

        Raises:
            AnalysisError: One of its subclasses, depending on what
                went wrong.
        """
        prompt = build_prompt(resume_text, job_description)
        logger.debug("Sending %d character prompt to Gemini model %s", len(prompt), self.settings.model)
        try:
            response = self.model.generate_content(prompt)  # type: ignore[attr-defined]
        except Exception as exc:  # noqa: BLE001
            error = classify_error(exc)
            logger.warning("Gemini API call failed (%s): %s", error.kind, exc)
            raise error from exc
        report = parse_report(_response_text(response))
        logger.info("Gemini analysis complete; score=%d", report.score)
        return report

    async def analyze_async(self, resume_text: str, job_description: str) -> AnalysisReport:
        """Run :meth:`analyze` on the default executor."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.analyze, resume_text, job_description)
