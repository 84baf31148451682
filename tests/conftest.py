"""Pytest configuration and fixtures for Bouncer tests."""
from __future__ import annotations

import subprocess
from pathlib import Path

import pytest

from bouncer.service.types import GenerationResult, ServiceUsage

VALID_API_KEY = "test-api-key-for-bouncer-tests-0123456789"


def pytest_sessionfinish(session, exitstatus):
    """Check that coverage data was collected if --cov was requested.

    This prevents silent "no data collected" scenarios that produce 0% coverage
    without failing the test run.
    """
    cov_enabled = any("--cov" in str(arg) for arg in session.config.args)

    if not cov_enabled:
        return

    coverage_files = list(Path.cwd().glob(".coverage*"))

    if not coverage_files:
        pytest.exit(
            "Coverage was enabled but no data was collected. "
            "Check that tests import from 'bouncer' (the package) not 'src/bouncer' (filesystem path).",
            returncode=1
        )


class FakeVerdictService:
    """In-memory stand-in for the Gemini service.

    ``count_error`` / ``generate_error`` are raised instead of answering.
    Token counts are ``len(text) / chars_per_token``.
    """

    def __init__(
        self,
        *,
        answer: str = "PASS – ok",
        usage: ServiceUsage | None = None,
        chars_per_token: float = 4.0,
        count_error: BaseException | None = None,
        generate_error: BaseException | None = None,
    ):
        self.answer = answer
        self.usage = usage or ServiceUsage(prompt_tokens=120, candidate_tokens=8, total_tokens=128)
        self.chars_per_token = chars_per_token
        self.count_error = count_error
        self.generate_error = generate_error
        self.counted: list[str] = []
        self.prompts: list[str] = []

    def count_tokens(self, text: str) -> int:
        self.counted.append(text)
        if self.count_error is not None:
            raise self.count_error
        return int(len(text) / self.chars_per_token)

    def generate(self, prompt: str) -> GenerationResult:
        self.prompts.append(prompt)
        if self.generate_error is not None:
            raise self.generate_error
        return GenerationResult(text=self.answer, usage=self.usage)


class StatusError(Exception):
    """Exception shaped like an HTTP client error carrying a status."""

    def __init__(self, message: str, status: int | None = None, code: str | None = None):
        super().__init__(message)
        self.status = status
        self.code = code


def _git(repo: Path, *args: str) -> str:
    result = subprocess.run(["git", *args], cwd=repo, check=True, capture_output=True, text=True)
    return result.stdout.strip()


@pytest.fixture(autouse=True)
def isolated_git(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep git from discovering repositories above the test directory."""
    monkeypatch.setenv("GIT_CEILING_DIRECTORIES", str(tmp_path))
    monkeypatch.setenv("BOUNCER_SPINNER", "0")
    monkeypatch.delenv("GIT_DIR", raising=False)
    monkeypatch.delenv("GIT_WORK_TREE", raising=False)
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)


@pytest.fixture
def empty_repo(tmp_path: Path) -> Path:
    """A git repository with no commits."""
    repo = tmp_path / "repo"
    repo.mkdir()
    _git(repo, "init")
    _git(repo, "config", "user.email", "test@example.com")
    _git(repo, "config", "user.name", "Test User")
    _git(repo, "config", "commit.gpgsign", "false")
    return repo


@pytest.fixture
def git_repo(empty_repo: Path) -> Path:
    """A git repository with one commit and nothing staged."""
    (empty_repo / "README.md").write_text("# Test Repo\n", encoding="utf-8")
    _git(empty_repo, "add", "README.md")
    _git(empty_repo, "commit", "-m", "Initial commit")
    return empty_repo


@pytest.fixture
def staged_repo(git_repo: Path) -> Path:
    """A committed repository with one staged change."""
    (git_repo / "app.py").write_text("print('hello world')\n", encoding="utf-8")
    _git(git_repo, "add", "app.py")
    return git_repo


@pytest.fixture
def head_sha():
    return lambda repo: _git(repo, "rev-parse", "HEAD")


@pytest.fixture
def rules_file(tmp_path: Path) -> Path:
    path = tmp_path / "rules.md"
    path.write_text("# Rules\n1. No secrets should be committed\n", encoding="utf-8")
    return path


@pytest.fixture
def fake_service() -> type[FakeVerdictService]:
    return FakeVerdictService


@pytest.fixture
def status_error() -> type[StatusError]:
    return StatusError


@pytest.fixture
def api_key() -> str:
    return VALID_API_KEY
