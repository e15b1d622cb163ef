"""Shared pytest fixtures and test-run configuration."""

from __future__ import annotations

import os

import pytest

RUNNER_ENV_VARS = (
    "GITHUB_EVENT_PATH",
    "GITHUB_REPOSITORY",
    "GITHUB_OUTPUT",
    "GITHUB_API_URL",
)
TOKEN_ENV_VARS = ("INPUT_GITHUB-TOKEN", "GITHUB_TOKEN", "GH_TOKEN")


def pytest_addoption(parser: pytest.Parser) -> None:
    """Add custom pytest options for integration test execution."""
    parser.addoption(
        "--run-integration",
        action="store_true",
        default=False,
        help="Run tests marked as integration (live GitHub API).",
    )


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Skip integration tests unless explicitly enabled."""
    if config.getoption("--run-integration") or os.getenv("RUN_INTEGRATION_TESTS") == "1":
        return

    skip_marker = pytest.mark.skip(
        reason="Live GitHub tests are off. Use --run-integration or set RUN_INTEGRATION_TESTS=1."
    )
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip_marker)


def _unset(monkeypatch: pytest.MonkeyPatch, env_var: str) -> None:
    # setenv first so monkeypatch restores variables that load_dotenv adds later.
    monkeypatch.setenv(env_var, "")
    monkeypatch.delenv(env_var)


@pytest.fixture
def runner_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    """Clear the Actions runner variables the gate reads."""
    for env_var in RUNNER_ENV_VARS:
        _unset(monkeypatch, env_var)
    return monkeypatch


@pytest.fixture
def no_token_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    """Clear every GitHub token source."""
    for env_var in TOKEN_ENV_VARS:
        _unset(monkeypatch, env_var)
    return monkeypatch
