"""Tests for command line configuration resolution."""

from __future__ import annotations

from pathlib import Path

from bouncer.config import ResolvedConfig, parse_arguments, resolve_config


class TestParseArguments:
    """Switch parsing forms."""

    def test_key_value_pairs(self):
        args = parse_arguments(["--rules-file", "custom.md", "--log-file", "out.jsonl"])
        assert args == {"rules-file": "custom.md", "log-file": "out.jsonl"}

    def test_equals_form(self):
        args = parse_arguments(["--env-file=.env.local", "--rules-file=a=b.md"])
        assert args == {"env-file": ".env.local", "rules-file": "a=b.md"}

    def test_bare_flag_is_true(self):
        assert parse_arguments(["--debug"]) == {"debug": True}

    def test_flag_followed_by_switch_is_true(self):
        args = parse_arguments(["--debug", "--rules-file", "r.md"])
        assert args == {"debug": True, "rules-file": "r.md"}

    def test_unknown_switches_and_positionals_are_kept_out_of_the_way(self):
        args = parse_arguments(["stray", "--future-option", "x", "--rules-file", "r.md"])
        assert args["rules-file"] == "r.md"
        assert "stray" not in args


class TestResolveConfig:
    """Resolution of defaults and paths."""

    def test_defaults_resolve_against_cwd(self, tmp_path: Path):
        config = resolve_config([], cwd=tmp_path)
        base = tmp_path.resolve()
        assert config == ResolvedConfig(
            rules_path=base / "rules.md",
            env_path=base / ".env",
            log_path=base / ".bouncer.log.jsonl",
            debug=False,
        )

    def test_all_paths_are_absolute(self, tmp_path: Path):
        config = resolve_config(
            ["--rules-file", "cfg/rules.md", "--env-file=cfg/.env", "--log-file", "../log.jsonl"],
            cwd=tmp_path,
        )
        for path in (config.rules_path, config.env_path, config.log_path):
            assert path.is_absolute()
        assert config.rules_path == tmp_path.resolve() / "cfg" / "rules.md"
        assert config.log_path == tmp_path.resolve().parent / "log.jsonl"

    def test_absolute_path_is_kept(self, tmp_path: Path):
        target = tmp_path / "elsewhere" / "rules.md"
        config = resolve_config(["--rules-file", str(target)], cwd=tmp_path / "cwd")
        assert config.rules_path == target.resolve()

    def test_path_switch_without_value_uses_default(self, tmp_path: Path):
        config = resolve_config(["--rules-file", "--debug"], cwd=tmp_path)
        assert config.rules_path == tmp_path.resolve() / "rules.md"
        assert config.debug is True

    def test_debug_explicit_false(self, tmp_path: Path):
        assert resolve_config(["--debug=false"], cwd=tmp_path).debug is False
        assert resolve_config(["--debug=1"], cwd=tmp_path).debug is True

    def test_unrecognized_switches_do_not_fail(self, tmp_path: Path):
        config = resolve_config(["--verbose", "--model", "x"], cwd=tmp_path)
        assert config.rules_path.name == "rules.md"
        assert config.debug is False
