"""Unit tests for required reviewer resolution."""

from __future__ import annotations

from pathlib import Path

import pytest
from src.reviewers import ReviewersFileResolver


@pytest.mark.unit
def test_resolve_returns_trimmed_login(tmp_path: Path) -> None:
    reviewers_path = tmp_path / "REVIEWERS"
    reviewers_path.write_text("  alice\n", encoding="utf-8")

    assert ReviewersFileResolver(reviewers_path).resolve() == "alice"


@pytest.mark.unit
def test_resolve_returns_none_for_blank_file(tmp_path: Path) -> None:
    reviewers_path = tmp_path / "REVIEWERS"
    reviewers_path.write_text("\n\t \n", encoding="utf-8")

    assert ReviewersFileResolver(reviewers_path).resolve() is None


@pytest.mark.unit
def test_resolve_returns_none_for_missing_file(tmp_path: Path) -> None:
    assert ReviewersFileResolver(tmp_path / "REVIEWERS").resolve() is None


@pytest.mark.unit
def test_resolve_returns_none_for_directory(tmp_path: Path) -> None:
    assert ReviewersFileResolver(tmp_path).resolve() is None


@pytest.mark.unit
def test_default_path_is_relative_reviewers_file(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    (tmp_path / "REVIEWERS").write_text("bob", encoding="utf-8")
    monkeypatch.chdir(tmp_path)

    resolver = ReviewersFileResolver()

    assert resolver.path == Path("REVIEWERS")
    assert resolver.resolve() == "bob"
