"""Environment overlay loading and Gemini API key validation."""

from __future__ import annotations

import io
import logging
from collections.abc import Mapping
from pathlib import Path

from dotenv import dotenv_values

from bouncer import ui
from bouncer.audit import API_KEY_ERROR_COMMIT, build_record, error_payload
from bouncer.outcome import Fatal

logger = logging.getLogger(__name__)

API_KEY_VAR = "GEMINI_API_KEY"
MIN_API_KEY_LENGTH = 20


def load_env_overlay(env_path: Path, environ: Mapping[str, str]) -> dict[str, str]:
    """Merge ``env_path`` under the ambient environment.

    Keys already present in ``environ`` win; file keys only fill the gaps.
    A missing file is expected (the key may live in the shell environment)
    and only warns. Any other read failure is reported and ignored here;
    the credential check decides whether the run can go on.
    """
    merged = dict(environ)

    if not env_path.exists():
        ui.warn(
            f"Environment file not found at {env_path}",
            "Will use system environment variables only.",
        )
        return merged

    try:
        content = env_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        ui.error(
            f"🔑 Error: Could not load environment file at {env_path}",
            str(exc),
            "Please ensure the environment file exists and is readable.",
        )
        return merged

    file_values = dotenv_values(stream=io.StringIO(content))
    for key, value in file_values.items():
        if value is not None and key not in merged:
            merged[key] = value
    logger.debug("loaded %d key(s) from %s", len(file_values), env_path)
    return merged


def _api_key_fatal(category: str, message: str, env_path: Path, action: str) -> Fatal:
    record = build_record(
        commit=API_KEY_ERROR_COMMIT,
        verdict="ERROR",
        reason=f"API Key Error: {message}",
        error=error_payload(category, message),
        source=str(env_path),
    )
    return Fatal(
        kind="API Key Error",
        category=category,
        message=message,
        action=action,
        record=record,
        details=(f"Tried loading from: {env_path}",),
    )


def validate_credential(env: Mapping[str, str], env_path: Path) -> str | Fatal:
    """Return the API key, or a fatal outcome for the first failing check.

    Checks run in order: missing, empty after trimming, shorter than
    ``MIN_API_KEY_LENGTH``.
    """
    raw = env.get(API_KEY_VAR)

    if raw is None:
        return _api_key_fatal(
            "Missing",
            "Missing Gemini API key",
            env_path,
            f"Add your API key to your .env file: {API_KEY_VAR}=your_key_here, "
            "or set it as an environment variable before running the script.",
        )

    key = raw.strip()
    if not key:
        return _api_key_fatal(
            "Empty",
            "Gemini API key is empty",
            env_path,
            f"Set {API_KEY_VAR} to the key shown in Google AI Studio.",
        )

    if len(key) < MIN_API_KEY_LENGTH:
        return _api_key_fatal(
            "Too Short",
            "Gemini API key appears to be invalid (too short)",
            env_path,
            f"Check that {API_KEY_VAR} holds the complete key without truncation.",
        )

    return key
