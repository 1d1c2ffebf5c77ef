"""
Résumé analysis subsystem.

* `schema` – the :class:`AnalysisReport` value and the JSON schema the
  model must follow.
* `prompts` – the system instruction carrying the scoring policy.
* `client` – the Gemini client, response clean-up and error
  classification.
"""

from .client import AnalysisClient, AnalysisProvider, classify_error, parse_report, strip_code_fence  # noqa: F401
from .schema import AnalysisReport, band_label, score_band, score_tier  # noqa: F401
