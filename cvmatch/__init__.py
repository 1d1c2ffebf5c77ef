"""
cvmatch: résumé screening against a job description.

A user uploads a PDF résumé and pastes a job description; cvmatch
extracts the résumé text, shows a short countdown, asks Gemini for a
structured compatibility report and renders it.

The package is split by pipeline stage:

1. **extract** – Read the text layer out of the uploaded PDF with
   pdfplumber, skipping pages that fail on their own.
2. **analyze** – Send the résumé and job description to Gemini with a
   fixed scoring policy and JSON schema, and validate the reply into an
   `AnalysisReport`.
3. **session** – The state machine tying the two together with the
   gate countdown in between (`Idle → Extracting → AwaitingGate →
   Analyzing → Success/Error`).
4. **webapp** / **cli** – Streamlit page and command line entry points.

Configuration (the Gemini API key above all) is loaded once at startup
by :mod:`cvmatch.config`.
"""

__version__ = "0.1.0"
