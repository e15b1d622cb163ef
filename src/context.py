"""Event context construction and run settings for the review gate."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from pydantic import BaseModel, ConfigDict, ValidationError

from src.github_client import GitHubInputError, parse_repo_full_name

DEFAULT_REVIEWERS_PATH = Path("REVIEWERS")
GITHUB_EVENT_PATH_ENV_VAR = "GITHUB_EVENT_PATH"
GITHUB_REPOSITORY_ENV_VAR = "GITHUB_REPOSITORY"


class EventContextError(ValueError):
    """Raised when the event payload or repository identity cannot be read."""


class _PullRequestPayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    number: int | None = None


class _RepositoryPayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    full_name: str | None = None


class EventPayload(BaseModel):
    """Fields of a workflow event payload that the gate reads."""

    model_config = ConfigDict(extra="ignore")

    pull_request: _PullRequestPayload | None = None
    repository: _RepositoryPayload | None = None


@dataclass(frozen=True, slots=True)
class EventContext:
    """Read-only view of the triggering event."""

    owner: str
    repo: str
    pr_number: int | None = None

    def __post_init__(self) -> None:
        if self.pr_number is not None and self.pr_number < 1:
            raise EventContextError(f"Invalid pull request number: {self.pr_number}")

    @property
    def repo_full_name(self) -> str:
        return f"{self.owner}/{self.repo}"


@dataclass(slots=True)
class GateSettings:
    """Knobs for one gate run."""

    reviewers_path: Path = DEFAULT_REVIEWERS_PATH
    paginate: bool = True
    max_attempts: int = 1
    timeout_seconds: int = 20


def parse_event_payload(raw_payload: str) -> EventPayload:
    """Validate the raw JSON event payload."""
    try:
        return EventPayload.model_validate_json(raw_payload)
    except ValidationError as error:
        raise EventContextError(f"Invalid event payload: {error}") from error


def load_event_context(
    *,
    event_path: Path | str | None,
    repo_full_name: str | None,
) -> EventContext:
    """Build the event context from the event payload file and repository name.

    An explicit repository (GITHUB_REPOSITORY) wins over the one in the payload.
    """
    payload = EventPayload()
    if event_path:
        try:
            raw_payload = Path(event_path).read_text(encoding="utf-8")
        except OSError as error:
            raise EventContextError(
                f"Could not read event payload at '{event_path}': {error}"
            ) from error
        payload = parse_event_payload(raw_payload)

    resolved_repo = repo_full_name
    if not resolved_repo and payload.repository is not None:
        resolved_repo = payload.repository.full_name
    if not resolved_repo:
        raise EventContextError(
            f"Repository is unknown. Set {GITHUB_REPOSITORY_ENV_VAR} or pass --repo."
        )

    try:
        owner, repo = parse_repo_full_name(resolved_repo)
    except GitHubInputError as error:
        raise EventContextError(str(error)) from error

    pr_number = payload.pull_request.number if payload.pull_request is not None else None
    if pr_number == 0:
        pr_number = None
    return EventContext(owner=owner, repo=repo, pr_number=pr_number)

