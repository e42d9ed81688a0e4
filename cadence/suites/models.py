"""
Typed data structures for test suites.

This module contains the dataclasses that represent the internal
typed structure of a parsed suite file.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from ..assertions import Assertion
from ..transport import RequestSpec


# ─────────────────────────────────────────────────────────────────────────────
# Defaults
# ─────────────────────────────────────────────────────────────────────────────

@dataclass
class Defaults:
    """Default settings for request execution."""
    timeout_ms: int = 30000


# ─────────────────────────────────────────────────────────────────────────────
# Steps & Cases
# ─────────────────────────────────────────────────────────────────────────────

@dataclass
class Step:
    """
    One request within a case.

    The request still holds {{env.*}} and {{vars.*}} templates; they are
    filled in when the step runs.
    """
    request: RequestSpec
    expect: list[Assertion] = field(default_factory=list)
    extract: dict[str, str] = field(default_factory=dict)  # variable -> JSONPath


@dataclass
class Case:
    """An independent test case: steps run in order, sharing extracted variables."""
    id: str
    steps: list[Step] = field(default_factory=list)
    description: str | None = None


# ─────────────────────────────────────────────────────────────────────────────
# Suite
# ─────────────────────────────────────────────────────────────────────────────

@dataclass
class Suite:
    """Fully parsed and validated suite."""
    version: int
    name: str
    base_url: str | None = None
    env: dict[str, Any] = field(default_factory=dict)
    defaults: Defaults = field(default_factory=Defaults)
    cases: list[Case] = field(default_factory=list)

    def get_case(self, case_id: str) -> Case | None:
        for case in self.cases:
            if case.id == case_id:
                return case
        return None
