"""Outcome of one gate invocation: either a verdict or a fatal refusal."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal


@dataclass(frozen=True)
class Fatal:
    """A stage refused to continue.

    ``kind`` names the failing subsystem ("Git Command Error"), ``category``
    the classified cause within it ("Repository"). The record is the audit
    line that must be appended before anything is printed.
    """

    kind: str
    category: str
    message: str
    action: str
    record: dict[str, Any]
    details: tuple[str, ...] = ()
    exit_code: int = 1


@dataclass(frozen=True)
class Success:
    """The service answered and a verdict was derived."""

    verdict: Literal["PASS", "FAIL"]
    reason: str
    usage: dict[str, Any]
    record: dict[str, Any]

    @property
    def exit_code(self) -> int:
        return 0 if self.verdict == "PASS" else 1


Outcome = Success | Fatal
