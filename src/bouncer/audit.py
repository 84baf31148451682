"""Append-only audit trail for gate decisions.

Each invocation appends exactly one JSON object per line to the log file.
Records are never rewritten; consumers read the last line for the most
recent outcome.
"""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from bouncer.schemas import validate_data

logger = logging.getLogger(__name__)

AUDIT_SCHEMA = "audit_record"

API_KEY_ERROR_COMMIT = "<api-key-error>"
GIT_COMMAND_ERROR_COMMIT = "<git-command-error>"
RULES_FILE_ERROR_COMMIT = "<rules-file-error>"

REDACTED = "***"


def utc_timestamp() -> str:
    """ISO-8601 UTC timestamp with millisecond precision."""
    return datetime.now(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def error_payload(
    error_type: str,
    message: str,
    *,
    code: str | int | None = None,
    status: str | int | None = None,
) -> dict[str, Any]:
    payload: dict[str, Any] = {"type": error_type, "message": message}
    if code is not None:
        payload["code"] = code
    if status is not None:
        payload["status"] = status
    return payload


def build_record(
    *,
    commit: str,
    verdict: str,
    reason: str,
    usage: dict[str, Any] | None = None,
    error: dict[str, Any] | None = None,
    operation: str | None = None,
    source: str | None = None,
    ts: str | None = None,
) -> dict[str, Any]:
    """Assemble an audit record, leaving out fields that do not apply."""
    record: dict[str, Any] = {
        "ts": ts or utc_timestamp(),
        "commit": commit,
        "verdict": verdict,
        "reason": reason,
    }
    if operation is not None:
        record["operation"] = operation
    if source is not None:
        record["source"] = source
    if usage is not None:
        record["usage"] = usage
    if error is not None:
        record["error"] = error
    return record


def redact(value: Any, secret: str | None) -> Any:
    """Mask every occurrence of ``secret`` in strings nested in ``value``."""
    if not secret:
        return value
    if isinstance(value, str):
        return value.replace(secret, REDACTED)
    if isinstance(value, dict):
        return {key: redact(item, secret) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return type(value)(redact(item, secret) for item in value)
    return value


def redact_record(record: dict[str, Any], secret: str | None) -> dict[str, Any]:
    """Return a copy of ``record`` with every occurrence of ``secret`` masked."""
    return redact(record, secret)


def append_record(log_path: Path, record: dict[str, Any]) -> None:
    """Validate ``record`` and append it as one line to ``log_path``.

    Raises:
        ValueError: If the record does not match the audit schema
        OSError: If the log file cannot be opened or written
    """
    validate_data(record, AUDIT_SCHEMA, strict=True)
    line = json.dumps(record, ensure_ascii=False) + "\n"
    with open(log_path, "a", encoding="utf-8") as f:
        f.write(line)
    logger.debug("audit record appended to %s (verdict=%s)", log_path, record["verdict"])


def read_records(log_path: Path) -> list[dict[str, Any]]:
    """Read every record from an audit log; a missing or empty file yields []."""
    if not log_path.exists():
        return []
    records = []
    for line in log_path.read_text(encoding="utf-8").splitlines():
        if line.strip():
            records.append(json.loads(line))
    return records
