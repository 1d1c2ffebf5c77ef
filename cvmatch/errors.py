"""
Error taxonomy for cvmatch.

Every failure a user can see is one of the classes below.  Each class
carries a fixed ``user_message`` that the presentation layer shows
verbatim and a ``kind`` string used in logs and tests.  Internal
diagnostic detail (parser tracebacks, raw service responses) is never
placed in the message; it is logged where the failure happens and kept
reachable through exception chaining.
"""

from __future__ import annotations

from typing import Optional


class CVMatchError(Exception):
    """Base class for all cvmatch errors."""

    kind: str = "CVMatchError"
    user_message: str = "Something went wrong."

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message or self.user_message)

    @property
    def message(self) -> str:
        return str(self)


class ConfigurationError(CVMatchError):
    """Raised at startup when required configuration is missing or invalid."""

    kind = "ConfigurationError"
    user_message = "The application is not configured correctly."


# ---------------------------------------------------------------------------
# Text extraction
# ---------------------------------------------------------------------------

class ExtractionError(CVMatchError):
    """Base class for failures while reading text out of a résumé PDF."""

    kind = "ExtractionError"
    user_message = "Could not read the PDF file."


class EmptyOrUnreadableDocument(ExtractionError):
    kind = "EmptyOrUnreadableDocument"
    user_message = (
        "The PDF appears to be empty or is a scanned image without "
        "selectable text."
    )


class PasswordProtected(ExtractionError):
    kind = "PasswordProtected"
    user_message = "The PDF file is password protected."


class UnreadableDocument(ExtractionError):
    kind = "UnreadableDocument"
    user_message = (
        "Failed to read the PDF file. Try saving it again or exporting "
        "it to PDF with another program."
    )


# ---------------------------------------------------------------------------
# Analysis
# ---------------------------------------------------------------------------

class AnalysisError(CVMatchError):
    """Base class for failures while obtaining a report from the AI service."""

    kind = "AnalysisError"
    user_message = "Failed to analyse the résumé."


class BadRequest(AnalysisError):
    kind = "BadRequest"
    user_message = (
        "The AI service rejected the request (400). Check that the PDF "
        "contains readable text."
    )


class Unauthorized(AnalysisError):
    kind = "Unauthorized"
    user_message = (
        "The AI service refused the credentials (403). Check that the "
        "API key is valid."
    )


class RateLimited(AnalysisError):
    kind = "RateLimited"
    user_message = (
        "Too many requests. The free quota has been exceeded temporarily."
    )


class ServiceUnavailable(AnalysisError):
    kind = "ServiceUnavailable"
    user_message = (
        "The AI service is unavailable right now. Try again in a minute."
    )


class UnknownAnalysisError(AnalysisError):
    kind = "Unknown"
    user_message = "Failed to analyse the résumé."


class EmptyResponse(AnalysisError):
    kind = "EmptyResponse"
    user_message = "The AI service returned an empty response."


class MalformedResponse(AnalysisError):
    kind = "MalformedResponse"
    user_message = (
        "The AI service returned a response that could not be understood."
    )
