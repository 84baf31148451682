"""The commit evaluation pipeline.

Stages run strictly in order and each one returns either its value or a
``Fatal`` outcome. Nothing here exits the process; the caller appends the
outcome's record and turns it into an exit code.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import replace
from pathlib import Path

from bouncer.audit import redact, redact_record
from bouncer.budget import TokenBudgeter
from bouncer.config import ResolvedConfig
from bouncer.credentials import load_env_overlay, validate_credential
from bouncer.git.snapshot import take_snapshot
from bouncer.outcome import Fatal, Outcome, Success
from bouncer.prompt import build_prompt
from bouncer.rules import load_rules
from bouncer.service.requester import request_verdict
from bouncer.service.types import VerdictService
from bouncer.verdict import decide

logger = logging.getLogger(__name__)

ServiceFactory = Callable[[str], VerdictService]


def run_gate(
    config: ResolvedConfig,
    *,
    environ: Mapping[str, str],
    service_factory: ServiceFactory,
    cwd: Path,
) -> Outcome:
    env = load_env_overlay(config.env_path, environ)
    api_key = validate_credential(env, config.env_path)
    if isinstance(api_key, Fatal):
        return api_key

    outcome = _evaluate(config, api_key=api_key, service_factory=service_factory, cwd=cwd)
    return _redact_outcome(outcome, api_key)


def _redact_outcome(outcome: Outcome, secret: str) -> Outcome:
    # Service messages are echoed on the console as well as in the record.
    record = redact_record(outcome.record, secret)
    if isinstance(outcome, Success):
        return replace(outcome, reason=redact(outcome.reason, secret), record=record)
    return replace(
        outcome,
        message=redact(outcome.message, secret),
        details=redact(outcome.details, secret),
        record=record,
    )


def _evaluate(
    config: ResolvedConfig,
    *,
    api_key: str,
    service_factory: ServiceFactory,
    cwd: Path,
) -> Outcome:
    snapshot = take_snapshot(cwd)
    if isinstance(snapshot, Fatal):
        return snapshot

    rules = load_rules(config.rules_path)
    if isinstance(rules, Fatal):
        return rules

    service = service_factory(api_key)
    diff = TokenBudgeter(service).fit(snapshot.diff)
    prompt = build_prompt(rules, snapshot.revision_id, diff.text)
    logger.debug("prompt assembled: %d chars, diff %d tokens", len(prompt), diff.token_count)

    result = request_verdict(
        service,
        prompt,
        commit=snapshot.revision_id,
        usage=diff.usage_fields(),
    )
    if isinstance(result, Fatal):
        return result

    return decide(result, commit=snapshot.revision_id, diff=diff)
