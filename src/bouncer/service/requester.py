"""Single generation call to the verdict service."""

from __future__ import annotations

import logging
from typing import Any

from bouncer.audit import build_record, error_payload
from bouncer.outcome import Fatal
from bouncer.service.errors import ServiceErrorKind, classify_service_error
from bouncer.service.types import GenerationResult, VerdictService
from bouncer.ui import ReviewSpinner

logger = logging.getLogger(__name__)

GENERATION_OPERATION = "content generation"


def service_fatal(
    kind: ServiceErrorKind,
    *,
    operation: str,
    commit: str,
    usage: dict[str, Any] | None,
) -> Fatal:
    failure = kind.failure
    record = build_record(
        commit=commit,
        verdict="ERROR",
        reason=f"Gemini API Error: {failure.message}",
        usage=usage,
        error=error_payload(kind.label, failure.message, code=failure.code, status=failure.status),
        operation=operation,
    )
    details = [f"Operation: {operation}"]
    if failure.message and failure.message not in kind.message:
        details.append(failure.message)
    return Fatal(
        kind="Gemini API Error",
        category=kind.label,
        message=kind.message,
        action=kind.action,
        record=record,
        details=tuple(details),
    )


def request_verdict(
    service: VerdictService,
    prompt: str,
    *,
    commit: str,
    usage: dict[str, Any],
) -> GenerationResult | Fatal:
    """Ask the service for a verdict; any failure is fatal, there is no retry."""
    logger.debug("requesting verdict for %s (%d prompt chars)", commit, len(prompt))
    try:
        return ReviewSpinner("Bouncer is reviewing your staged changes...").run(
            lambda: service.generate(prompt)
        )
    except Exception as exc:
        kind = classify_service_error(exc)
        logger.debug("%s failure", GENERATION_OPERATION, exc_info=exc)
        return service_fatal(kind, operation=GENERATION_OPERATION, commit=commit, usage=usage)
