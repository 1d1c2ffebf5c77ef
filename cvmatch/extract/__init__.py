"""
Résumé text extraction.

Turns an uploaded PDF into plain text for the analysis step.  See
:mod:`cvmatch.extract.pdf_text`.
"""

from .pdf_text import SelectedFile, extract_text, extract_text_async  # noqa: F401
