from __future__ import annotations

import logging
import os
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, TypeVar

from rich.console import Console
from rich.logging import RichHandler
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.text import Text

if TYPE_CHECKING:
    from bouncer.outcome import Fatal, Success

_T = TypeVar("_T")

console = Console(soft_wrap=True)
err_console = Console(stderr=True, soft_wrap=True)


def spinner_enabled() -> bool:
    return os.getenv("BOUNCER_SPINNER", "1") == "1" and err_console.is_terminal


def configure_logging(debug: bool) -> None:
    """Route the ``bouncer`` logger through rich on stderr."""
    logger = logging.getLogger("bouncer")
    logger.handlers.clear()
    handler = RichHandler(console=err_console, show_path=False, markup=False)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if debug else logging.WARNING)
    logger.propagate = False


def warn(headline: str, *lines: str) -> None:
    err_console.print()
    err_console.print(Text(f"⚠️ Warning: {headline}", style="bold yellow"))
    for line in lines:
        err_console.print(Text(line, style="yellow"))


def error(headline: str, *lines: str) -> None:
    err_console.print()
    err_console.print(Text(headline, style="bold red"))
    for line in lines:
        err_console.print(Text(line))


_KIND_ICONS = {
    "API Key Error": "🔑",
    "Git Command Error": "🔧",
    "Rules File Error": "📄",
    "Gemini API Error": "❌",
}


def render_fatal(fatal: Fatal) -> None:
    icon = _KIND_ICONS.get(fatal.kind, "❌")
    err_console.print()
    err_console.print(Text(f"{icon} {fatal.kind}: {fatal.category}", style="bold bright_white on red"))
    err_console.print(Text(fatal.message, style="bold bright_red"))
    for line in fatal.details:
        err_console.print(Text(line))
    err_console.print(Text(f"Suggested action: {fatal.action}", style="cyan"))


def render_verdict(outcome: Success) -> None:
    usage = outcome.usage
    if outcome.verdict == "PASS":
        console.print(Text("✅ Bouncer PASS", style="bold bright_green"))
        target = console
    else:
        err_console.print()
        err_console.print(Text("🛑 Bouncer blocked this commit:", style="bold bright_white on red"))
        err_console.print(Text(outcome.reason))
        target = err_console

    if usage.get("totalTokens"):
        target.print()
        target.print(
            Text(
                f"Token usage: {usage.get('inputTokens')} input, "
                f"{usage.get('outputTokens')} output ({usage['totalTokens']} total)",
                style="dim",
            )
        )
    if usage.get("truncated"):
        target.print(
            Text(
                f"Diff truncated: {usage['diffTokens']} of {usage.get('originalDiffTokens')} tokens included",
                style="dim",
            )
        )


@dataclass(frozen=True)
class ReviewSpinner:
    message: str

    def run(self, fn: Callable[[], _T]) -> _T:
        if not spinner_enabled():
            return fn()

        with Progress(
            SpinnerColumn(style="bright_magenta"),
            TextColumn("[bold bright_cyan]{task.description}[/bold bright_cyan]"),
            transient=True,
            console=err_console,
        ) as prog:
            task_id = prog.add_task(self.message, total=None)
            try:
                return fn()
            finally:
                prog.update(task_id, completed=1)
