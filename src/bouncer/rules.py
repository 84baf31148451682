"""Rule document loading."""

from __future__ import annotations

import logging
from pathlib import Path

from bouncer.audit import RULES_FILE_ERROR_COMMIT, build_record, error_payload
from bouncer.outcome import Fatal

logger = logging.getLogger(__name__)


def load_rules(rules_path: Path) -> str | Fatal:
    """Read the rule document as one opaque string.

    There is no default rule set: a missing or unreadable file refuses the
    commit instead of letting it through unreviewed.
    """
    try:
        rules = rules_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        code = getattr(exc, "errno", None)
        message = f"Could not read rules file at {rules_path}"
        record = build_record(
            commit=RULES_FILE_ERROR_COMMIT,
            verdict="ERROR",
            reason=f"Rules File Error: {message}: {exc}",
            error=error_payload(type(exc).__name__, str(exc), code=code),
            source=str(rules_path),
        )
        return Fatal(
            kind="Rules File Error",
            category=type(exc).__name__,
            message=message,
            action="Please ensure the rules file exists and is readable, or point --rules-file at it.",
            record=record,
            details=(str(exc),),
        )

    logger.debug("loaded %d chars of rules from %s", len(rules), rules_path)
    return rules
