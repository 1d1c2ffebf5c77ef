"""Plain text rendering of an analysis report."""

from __future__ import annotations

import textwrap
from typing import Iterable, List

from .analyze.schema import AnalysisReport, band_label


def _section(title: str, items: Iterable[str], numbered: bool = False) -> List[str]:
    lines = [title]
    items = list(items)
    if not items:
        lines.append("   (none)")
    for i, item in enumerate(items, start=1):
        prefix = f"{i:2d}." if numbered else "  -"
        lines.append(f"{prefix} {item}")
    lines.append("")
    return lines


def render_report_text(report: AnalysisReport, width: int = 78) -> str:
    lines = [
        f"Compatibility score: {report.score}/100 ({band_label(report.score)})",
        "",
    ]
    lines.extend(textwrap.wrap(report.verdict, width=width) or [""])
    lines.append("")
    if report.missing_keywords:
        lines.extend(_section("Missing keywords (ATS):", report.missing_keywords))
    else:
        lines.extend(["Missing keywords (ATS):", "   No critical gaps found.", ""])
    lines.append("Suggested professional summary:")
    lines.extend(textwrap.wrap(report.suggested_summary, width=width, initial_indent="   ", subsequent_indent="   "))
    lines.append("")
    lines.extend(_section("Action plan:", report.action_plan, numbered=True))
    lines.extend(_section("What you already have:", report.strengths))
    lines.extend(_section("What is missing:", report.weaknesses))
    return "\n".join(lines).rstrip() + "\n"
