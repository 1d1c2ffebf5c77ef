"""
Session orchestration.

* `state` – the immutable status variants of a session.
* `gate` – the countdown shown between extraction and analysis.
* `machine` – :class:`AnalysisSession`, which wires extraction, the
  gate and analysis into one cycle.
"""

from .gate import GateTimer  # noqa: F401
from .machine import AnalysisSession  # noqa: F401
from .state import Status  # noqa: F401
