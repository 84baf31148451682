"""Verdict interpretation and usage summary."""

from __future__ import annotations

from typing import Any, Literal

from bouncer.audit import build_record
from bouncer.budget import DiffPayload
from bouncer.outcome import Success
from bouncer.service.types import GenerationResult, ServiceUsage


def interpret(text: str | None) -> Literal["PASS", "FAIL"]:
    """PASS iff the answer mentions PASS in any case; everything else fails closed."""
    if text and "pass" in text.lower():
        return "PASS"
    return "FAIL"


def build_usage(diff: DiffPayload, usage: ServiceUsage) -> dict[str, Any]:
    return {
        "inputTokens": usage.prompt_tokens or diff.token_count or None,
        "outputTokens": usage.candidate_tokens or None,
        "totalTokens": usage.total_tokens or None,
        **diff.usage_fields(),
    }


def decide(result: GenerationResult, *, commit: str, diff: DiffPayload) -> Success:
    verdict = interpret(result.text)
    usage = build_usage(diff, result.usage)
    record = build_record(commit=commit, verdict=verdict, reason=result.text, usage=usage)
    return Success(verdict=verdict, reason=result.text, usage=usage, record=record)
