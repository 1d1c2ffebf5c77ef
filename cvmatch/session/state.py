"""
Session state variants.

The status of an analysis session is one of six immutable values.  Data
that only makes sense in a given status lives on that variant alone, so
a report can only exist in :class:`Success` and an error message only
in :class:`Error`.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Optional, Union

from ..analyze.schema import AnalysisReport


class Status(str, enum.Enum):
    IDLE = "Idle"
    EXTRACTING = "Extracting"
    AWAITING_GATE = "AwaitingGate"
    ANALYZING = "Analyzing"
    SUCCESS = "Success"
    ERROR = "Error"


@dataclass(frozen=True)
class Idle:
    status = Status.IDLE
    message = None


@dataclass(frozen=True)
class Extracting:
    status = Status.EXTRACTING
    message: Optional[str] = "Reading PDF..."


@dataclass(frozen=True)
class AwaitingGate:
    extracted_text: str
    remaining: int

    status = Status.AWAITING_GATE

    @property
    def message(self) -> str:
        return f"{self.remaining}s until your analysis is released"


@dataclass(frozen=True)
class Analyzing:
    extracted_text: str
    message: Optional[str] = "Consulting the AI model..."

    status = Status.ANALYZING


@dataclass(frozen=True)
class Success:
    extracted_text: str
    report: AnalysisReport

    status = Status.SUCCESS
    message = None


@dataclass(frozen=True)
class Error:
    message: str
    kind: str

    status = Status.ERROR


SessionState = Union[Idle, Extracting, AwaitingGate, Analyzing, Success, Error]
