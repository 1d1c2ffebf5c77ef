"""
Analysis report schema.

Defines the :class:`AnalysisReport` value returned by the analysis
client and the structured-output schema handed to Gemini.  A report is
only ever built whole: :meth:`AnalysisReport.from_dict` rejects any
document with a missing or mistyped field instead of filling defaults.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Mapping, Tuple

from ..errors import MalformedResponse

LIST_FIELDS = ("strengths", "weaknesses", "missing_keywords", "action_plan")
TEXT_FIELDS = ("suggested_summary", "verdict")
REQUIRED_FIELDS = ("score",) + LIST_FIELDS + TEXT_FIELDS

RESPONSE_SCHEMA: Dict[str, object] = {
    "type": "OBJECT",
    "properties": {
        "score": {
            "type": "INTEGER",
            "description": "A score from 0 to 100 for how well the candidate fits the role.",
        },
        "strengths": {
            "type": "ARRAY",
            "items": {"type": "STRING"},
            "description": "3 strengths found in the résumé relative to the role.",
        },
        "weaknesses": {
            "type": "ARRAY",
            "items": {"type": "STRING"},
            "description": "3 gaps or points of attention in the résumé that need work.",
        },
        "missing_keywords": {
            "type": "ARRAY",
            "items": {"type": "STRING"},
            "description": (
                "5 to 8 EXACT technical keywords or hard skills that appear in the "
                "job description but NOT in the résumé (crucial for ATS filters)."
            ),
        },
        "action_plan": {
            "type": "ARRAY",
            "items": {"type": "STRING"},
            "description": (
                "3 to 5 direct, practical actions (e.g. 'Add experience with X', "
                "'Quantify result Y') that would raise the score."
            ),
        },
        "suggested_summary": {
            "type": "STRING",
            "description": (
                "A fully rewritten 'Professional Summary' paragraph (3 to 4 sentences), "
                "highly professional, NATURALLY including the missing keywords and "
                "focused on the role requirements. Ready to paste into the résumé."
            ),
        },
        "verdict": {
            "type": "STRING",
            "description": "A concise two-line summary of the candidate's chances and a final recommendation.",
        },
    },
    "required": list(REQUIRED_FIELDS),
}


def _string_list(name: str, value: object) -> Tuple[str, ...]:
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise MalformedResponse(f"Field '{name}' must be a list of strings")
    return tuple(value)


def _score(value: object) -> int:
    if isinstance(value, bool):
        raise MalformedResponse("Field 'score' must be an integer")
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if not isinstance(value, int):
        raise MalformedResponse("Field 'score' must be an integer")
    if not 0 <= value <= 100:
        raise MalformedResponse(f"Field 'score' out of range: {value}")
    return value


@dataclass(frozen=True)
class AnalysisReport:
    """Structured compatibility report for one résumé/job pair."""

    score: int
    strengths: Tuple[str, ...]
    weaknesses: Tuple[str, ...]
    missing_keywords: Tuple[str, ...]
    action_plan: Tuple[str, ...]
    suggested_summary: str
    verdict: str

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> "AnalysisReport":
        """Build a report from a decoded JSON document.

        Raises:
            MalformedResponse: If any of the seven fields is missing or
                has the wrong type, or the score is outside 0..100.
        """
        if not isinstance(data, Mapping):
            raise MalformedResponse("Response is not a JSON object")
        missing = [name for name in REQUIRED_FIELDS if name not in data]
        if missing:
            raise MalformedResponse(f"Response is missing fields: {', '.join(missing)}")
        lists = {name: _string_list(name, data[name]) for name in LIST_FIELDS}
        for name in TEXT_FIELDS:
            if not isinstance(data[name], str):
                raise MalformedResponse(f"Field '{name}' must be a string")
        return cls(
            score=_score(data["score"]),
            suggested_summary=data["suggested_summary"],  # type: ignore[arg-type]
            verdict=data["verdict"],  # type: ignore[arg-type]
            **lists,
        )

    def to_dict(self) -> Dict[str, object]:
        return {
            "score": self.score,
            "strengths": list(self.strengths),
            "weaknesses": list(self.weaknesses),
            "missing_keywords": list(self.missing_keywords),
            "action_plan": list(self.action_plan),
            "suggested_summary": self.suggested_summary,
            "verdict": self.verdict,
        }


def score_band(score: int) -> str:
    """Return the scoring-policy band a score falls in."""
    if score <= 40:
        return "incompatible"
    if score <= 60:
        return "junior_or_transition"
    if score <= 80:
        return "compatible"
    return "ideal"


def score_tier(score: int) -> str:
    """Return the display tier (``low``, ``medium`` or ``high``) for a score."""
    if score < 50:
        return "low"
    if score < 80:
        return "medium"
    return "high"


BAND_LABELS: Dict[str, str] = {
    "incompatible": "Incompatible profile",
    "junior_or_transition": "Junior or career transition",
    "compatible": "Compatible profile",
    "ideal": "Ideal match",
}


def band_label(score: int) -> str:
    return BAND_LABELS[score_band(score)]

