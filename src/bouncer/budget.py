"""Token budgeting for staged diffs.

Counts are taken from the verdict service when it answers and estimated
from the character length when it does not. Diffs over the ceiling are
cut in two passes: estimate a character cutoff from the measured density,
then measure the cut text again.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any

from bouncer import ui
from bouncer.service.errors import classify_service_error
from bouncer.service.types import VerdictService

logger = logging.getLogger(__name__)

# Leaves room for the rules text and prompt scaffolding inside the model's
# context window.
TOKEN_LIMIT_THRESHOLD = 800_000
FALLBACK_AVERAGE_CHARS_PER_TOKEN = 3.5
SAFETY_MARGIN = 0.95

COUNTING_OPERATION = "token counting"


@dataclass(frozen=True)
class DiffPayload:
    """The diff text that will be sent, with its token accounting."""

    text: str
    token_count: int
    truncated: bool = False
    original_token_count: int | None = None

    def usage_fields(self) -> dict[str, Any]:
        fields: dict[str, Any] = {
            "diffTokens": self.token_count,
            "truncated": self.truncated,
        }
        if self.truncated and self.original_token_count is not None:
            fields["originalDiffTokens"] = self.original_token_count
        return fields


def estimate_tokens(text: str) -> int:
    return math.ceil(len(text) / FALLBACK_AVERAGE_CHARS_PER_TOKEN)


def truncation_marker(shown_tokens: int, total_tokens: int, shown_chars: int, total_chars: int, ceiling: int) -> str:
    return (
        f"\n\n[TRUNCATED: Diff exceeds recommended limit of {ceiling:,} tokens. "
        f"Showing first {shown_tokens} tokens of original {total_tokens} tokens total. "
        f"(Characters: {shown_chars} of {total_chars})]"
    )


class TokenBudgeter:
    """Measures and trims diff text against a token ceiling."""

    def __init__(self, service: VerdictService, ceiling: int = TOKEN_LIMIT_THRESHOLD):
        self.service = service
        self.ceiling = ceiling

    def count(self, text: str) -> int:
        """Count tokens remotely, falling back to a character estimate."""
        try:
            return self.service.count_tokens(text)
        except Exception as exc:
            kind = classify_service_error(exc)
            logger.warning("%s failed (%s): %s", COUNTING_OPERATION, kind.label, kind.failure.message)
            logger.debug("token counting failure", exc_info=exc)
            estimate = estimate_tokens(text)
            ui.warn(
                "Token counting API failed, falling back to estimation",
                f"{kind.label} error: {kind.message}",
                f"Estimated {estimate} tokens from {len(text)} characters.",
            )
            return estimate

    def fit(self, text: str) -> DiffPayload:
        """Return ``text`` as a payload whose token count is within the ceiling."""
        token_count = self.count(text)
        if token_count <= self.ceiling:
            return DiffPayload(text=text, token_count=token_count)

        char_ratio = len(text) / token_count
        cutoff = math.floor(self.ceiling * char_ratio * SAFETY_MARGIN)
        head = text[:cutoff]
        head_tokens = self.count(head)
        logger.debug(
            "diff over budget: %d tokens, cut at %d of %d chars -> %d tokens",
            token_count,
            cutoff,
            len(text),
            head_tokens,
        )

        if head_tokens > self.ceiling:
            # Density in the head was higher than the average; scale down
            # once more from the measured count instead of calling again.
            cutoff = math.floor(len(head) * (self.ceiling / head_tokens) * SAFETY_MARGIN)
            head_tokens = min(self.ceiling, math.ceil(head_tokens * cutoff / len(head)))
            head = head[:cutoff]

        marker = truncation_marker(head_tokens, token_count, len(head), len(text), self.ceiling)
        return DiffPayload(
            text=head + marker,
            token_count=head_tokens,
            truncated=True,
            original_token_count=token_count,
        )
