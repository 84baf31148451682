"""Contract for the remote verdict service."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class ServiceUsage:
    """Token accounting reported by the service, when it reports any."""

    prompt_tokens: int | None = None
    candidate_tokens: int | None = None
    total_tokens: int | None = None


@dataclass(frozen=True)
class GenerationResult:
    text: str
    usage: ServiceUsage


class VerdictService(Protocol):
    """Remote text-generation service used to judge a diff."""

    def count_tokens(self, text: str) -> int:
        ...

    def generate(self, prompt: str) -> GenerationResult:
        ...
