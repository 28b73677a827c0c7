from __future__ import annotations

from dataclasses import dataclass, asdict
from enum import Enum
from typing import Any, Dict, Optional


class ExitCode(int, Enum):
    OK = 0
    CONFIG_INVALID = 10
    STATE_INVALID = 20
    RUNTIME_ERROR = 30
    INTERNAL_ERROR = 50


@dataclass(frozen=True)
class PointWindowProblem:
    code: str                 # stable machine code, e.g. "PW_STATE_PARSE_ERROR"
    category: str             # "config" | "state" | "runtime" | "internal"
    message: str              # short human message
    details: Dict[str, Any]   # structured details for debugging
    remediation: Optional[str] = None  # actionable next step


class PointWindowException(Exception):
    def __init__(
        self,
        problem: PointWindowProblem,
        exit_code: ExitCode,
        *,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(problem.message)
        self.problem = problem
        self.exit_code = exit_code
        self.cause = cause


def problem_to_dict(p: PointWindowProblem) -> Dict[str, Any]:
    d = asdict(p)
    if d.get("remediation") is None:
        d.pop("remediation", None)
    return d
