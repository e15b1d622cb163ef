"""Outcome contract for one review gate run."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, model_validator


class GateStatus(StrEnum):
    """Terminal outcomes of a gate run."""

    SKIPPED = "skipped"
    FAILED = "failed"
    PASSED = "passed"


class GateOutcome(BaseModel):
    """Structured result of one gate run."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    status: GateStatus
    message: str = Field(default="")
    reviewer: str | None = None
    repository: str | None = None
    pr_number: int | None = Field(default=None, ge=1)
    reviews_checked: int = Field(default=0, ge=0)

    @model_validator(mode="after")
    def validate_message(self) -> GateOutcome:
        """Require a message for failures only."""
        if self.status is GateStatus.FAILED and not self.message:
            raise ValueError("failed outcomes must carry a message")
        return self

    @property
    def is_failure(self) -> bool:
        return self.status is GateStatus.FAILED
