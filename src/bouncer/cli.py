"""Bouncer CLI - one gate evaluation per invocation."""

from __future__ import annotations

import os
from pathlib import Path

import typer

from bouncer import ui
from bouncer.audit import append_record
from bouncer.config import resolve_config
from bouncer.outcome import Fatal, Outcome
from bouncer.pipeline import run_gate
from bouncer.service.gemini import GeminiVerdictService
from bouncer.service.types import VerdictService

cli = typer.Typer(
    name="bouncer",
    help="Bouncer - reviews staged changes against a rules file before each commit.",
    add_help_option=False,
    add_completion=False,
)


def build_service(api_key: str) -> VerdictService:
    return GeminiVerdictService(api_key)


def dispatch(outcome: Outcome, log_path: Path) -> int:
    """Append the outcome's record, announce it, and return the exit code.

    The record is written before anything is printed so the audit trail is
    complete even if console output is interrupted.
    """
    try:
        append_record(log_path, outcome.record)
    except (OSError, ValueError) as exc:
        ui.warn(f"Could not write to log file at {log_path}", f"Error: {exc}")

    if isinstance(outcome, Fatal):
        ui.render_fatal(outcome)
    else:
        ui.render_verdict(outcome)
    return outcome.exit_code


@cli.command(
    add_help_option=False,
    context_settings={"allow_extra_args": True, "ignore_unknown_options": True},
)
def gate(ctx: typer.Context) -> None:
    """Evaluate the staged diff. Flags: --rules-file, --env-file, --log-file, --debug."""
    config = resolve_config(ctx.args)
    ui.configure_logging(config.debug)
    outcome = run_gate(
        config,
        environ=os.environ,
        service_factory=build_service,
        cwd=Path.cwd(),
    )
    raise typer.Exit(dispatch(outcome, config.log_path))


def main() -> None:
    cli()
