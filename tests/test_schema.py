"""Outcome contract tests."""

from __future__ import annotations

import pytest
from pydantic import ValidationError
from src.schema import GateOutcome, GateStatus


@pytest.mark.unit
def test_failed_outcome_requires_message() -> None:
    with pytest.raises(ValidationError):
        GateOutcome(status=GateStatus.FAILED)


@pytest.mark.unit
def test_outcome_rejects_unknown_fields() -> None:
    with pytest.raises(ValidationError):
        GateOutcome.model_validate({"status": "passed", "approved": True})


@pytest.mark.unit
def test_outcome_json_uses_status_values() -> None:
    outcome = GateOutcome(
        status=GateStatus.PASSED,
        reviewer="alice",
        repository="acme/rocket",
        pr_number=42,
        reviews_checked=1,
    )

    payload = outcome.model_dump(mode="json")

    assert payload["status"] == "passed"
    assert payload["message"] == ""
    assert not outcome.is_failure
