"""Tests for environment overlay loading and API key validation."""

from __future__ import annotations

from pathlib import Path

import pytest

from bouncer.audit import API_KEY_ERROR_COMMIT
from bouncer.credentials import API_KEY_VAR, load_env_overlay, validate_credential
from bouncer.outcome import Fatal


class TestLoadEnvOverlay:
    """Ordered merge of the env file under the ambient environment."""

    def test_file_keys_fill_gaps(self, tmp_path: Path):
        env_file = tmp_path / ".env"
        env_file.write_text("GEMINI_API_KEY=from-file-0123456789abcdef\nOTHER=1\n", encoding="utf-8")

        merged = load_env_overlay(env_file, {"PATH": "/usr/bin"})

        assert merged["GEMINI_API_KEY"] == "from-file-0123456789abcdef"
        assert merged["OTHER"] == "1"
        assert merged["PATH"] == "/usr/bin"

    def test_ambient_values_win(self, tmp_path: Path):
        env_file = tmp_path / ".env"
        env_file.write_text("GEMINI_API_KEY=from-file-0123456789abcdef\n", encoding="utf-8")

        merged = load_env_overlay(env_file, {"GEMINI_API_KEY": "from-shell-0123456789abcdef"})

        assert merged["GEMINI_API_KEY"] == "from-shell-0123456789abcdef"

    def test_does_not_mutate_inputs(self, tmp_path: Path):
        env_file = tmp_path / ".env"
        env_file.write_text("NEW_KEY=value\n", encoding="utf-8")
        ambient = {"A": "1"}

        load_env_overlay(env_file, ambient)

        assert ambient == {"A": "1"}

    def test_missing_file_warns_and_keeps_ambient(self, tmp_path: Path, capsys):
        missing = tmp_path / "nope.env"

        merged = load_env_overlay(missing, {"GEMINI_API_KEY": "x"})

        assert merged == {"GEMINI_API_KEY": "x"}
        err = capsys.readouterr().err
        assert "Environment file not found" in err
        assert str(missing) in err

    def test_unreadable_file_is_not_fatal(self, tmp_path: Path, capsys):
        # A directory cannot be read as a file.
        env_dir = tmp_path / "env-dir"
        env_dir.mkdir()

        merged = load_env_overlay(env_dir, {"A": "1"})

        assert merged == {"A": "1"}
        assert "Could not load environment file" in capsys.readouterr().err


class TestValidateCredential:
    """Ordered credential checks; first failure wins."""

    @pytest.mark.parametrize(
        ("env", "category", "fragment"),
        [
            ({}, "Missing", "Missing Gemini API key"),
            ({API_KEY_VAR: ""}, "Empty", "empty"),
            ({API_KEY_VAR: "    "}, "Empty", "empty"),
            ({API_KEY_VAR: "0123456789"}, "Too Short", "too short"),
        ],
    )
    def test_invalid_keys_are_fatal(self, tmp_path: Path, env, category, fragment):
        env_path = tmp_path / ".env"

        result = validate_credential(env, env_path)

        assert isinstance(result, Fatal)
        assert result.exit_code == 1
        assert result.category == category
        assert fragment in result.message
        assert any(str(env_path) in line for line in result.details)
        record = result.record
        assert record["verdict"] == "ERROR"
        assert record["commit"] == API_KEY_ERROR_COMMIT
        assert "API Key Error" in record["reason"]
        assert record["error"]["type"] == category
        assert record["source"] == str(env_path)

    def test_twenty_five_character_key_passes(self, tmp_path: Path):
        key = "k" * 25
        assert validate_credential({API_KEY_VAR: key}, tmp_path / ".env") == key

    def test_key_is_trimmed(self, tmp_path: Path):
        key = "a" * 30
        assert validate_credential({API_KEY_VAR: f"  {key}\n"}, tmp_path / ".env") == key

    def test_padding_does_not_count_toward_length(self, tmp_path: Path):
        result = validate_credential({API_KEY_VAR: "short" + " " * 30}, tmp_path / ".env")
        assert isinstance(result, Fatal)
        assert result.category == "Too Short"

    def test_key_never_appears_in_record(self, tmp_path: Path):
        short = "abc123"
        result = validate_credential({API_KEY_VAR: short}, tmp_path / ".env")
        assert isinstance(result, Fatal)
        assert short not in str(result.record)
