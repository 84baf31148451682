"""Command line configuration for a gate invocation."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

DEFAULT_RULES_FILE = "./rules.md"
DEFAULT_ENV_FILE = "./.env"
DEFAULT_LOG_FILE = "./.bouncer.log.jsonl"

_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class ResolvedConfig:
    """Absolute paths and switches resolved once at startup."""

    rules_path: Path
    env_path: Path
    log_path: Path
    debug: bool = False


def parse_arguments(argv: Sequence[str]) -> dict[str, str | bool]:
    """Parse ``--key value``, ``--key=value`` and bare ``--flag`` switches.

    A switch followed by nothing or by another ``--`` switch is a boolean
    flag. Positional words that do not follow a switch are ignored, and so
    are switches nobody asks for.
    """
    args: dict[str, str | bool] = {}
    i = 0
    while i < len(argv):
        arg = argv[i]
        if arg.startswith("--") and len(arg) > 2:
            key, sep, value = arg[2:].partition("=")
            if sep:
                args[key] = value
            elif i + 1 < len(argv) and not argv[i + 1].startswith("--"):
                args[key] = argv[i + 1]
                i += 1
            else:
                args[key] = True
        i += 1
    return args


def _resolve_path(value: str | bool | None, default: str, cwd: Path) -> Path:
    # A path switch given without a value falls back to the default.
    raw = value if isinstance(value, str) and value else default
    path = Path(raw).expanduser()
    if not path.is_absolute():
        path = cwd / path
    return path.resolve()


def _as_flag(value: str | bool | None) -> bool:
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    return value.strip().lower() not in _FALSE_VALUES


def resolve_config(argv: Sequence[str], cwd: Path | None = None) -> ResolvedConfig:
    """Build the invocation config from the raw argument vector."""
    base = (cwd or Path.cwd()).resolve()
    args = parse_arguments(argv)
    return ResolvedConfig(
        rules_path=_resolve_path(args.get("rules-file"), DEFAULT_RULES_FILE, base),
        env_path=_resolve_path(args.get("env-file"), DEFAULT_ENV_FILE, base),
        log_path=_resolve_path(args.get("log-file"), DEFAULT_LOG_FILE, base),
        debug=_as_flag(args.get("debug")),
    )
