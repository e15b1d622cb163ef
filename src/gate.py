"""Required reviewer approval gate."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence

import httpx

from src.context import EventContext, GateSettings
from src.github_client import (
    GitHubApiError,
    GitHubAuthError,
    GitHubInputError,
    PullRequestReview,
    build_github_client,
    fetch_pull_request_reviews,
)
from src.logging_config import get_logger, log_context
from src.reviewers import RequiredReviewerResolver
from src.schema import GateOutcome, GateStatus

APPROVED_STATE = "APPROVED"
NO_REVIEWER_MESSAGE = "No reviewer found in REVIEWERS file"
GATE_ERRORS: tuple[type[Exception], ...] = (
    GitHubApiError,
    GitHubAuthError,
    GitHubInputError,
    httpx.HTTPError,
    OSError,
    ValueError,
)

ReviewFetcher = Callable[[str, int], Sequence[PullRequestReview]]

logger = get_logger(__name__)


def has_required_approval(reviews: Iterable[PullRequestReview], reviewer: str) -> bool:
    """Return whether `reviewer` has any APPROVED review on record.

    A later review from the same user does not revoke an earlier approval.
    """
    return any(
        review.author_login == reviewer and review.state == APPROVED_STATE for review in reviews
    )


def missing_approval_message(reviewer: str) -> str:
    return f"Reviewer {reviewer} needs to approve the PR"


def run_review_gate(
    context: EventContext,
    *,
    resolver: RequiredReviewerResolver,
    fetch_reviews: ReviewFetcher,
) -> GateOutcome:
    """Decide the outcome for one event; exactly one outcome per call."""
    if context.pr_number is None:
        logger.info("Event has no pull request; skipping", repository=context.repo_full_name)
        return GateOutcome(status=GateStatus.SKIPPED, repository=context.repo_full_name)

    with log_context(repository=context.repo_full_name, pr_number=context.pr_number):
        return _check_pull_request(
            context,
            context.pr_number,
            resolver=resolver,
            fetch_reviews=fetch_reviews,
        )


def _check_pull_request(
    context: EventContext,
    pr_number: int,
    *,
    resolver: RequiredReviewerResolver,
    fetch_reviews: ReviewFetcher,
) -> GateOutcome:
    reviewer: str | None = None
    try:
        reviewer = resolver.resolve()
        if not reviewer:
            return GateOutcome(
                status=GateStatus.FAILED,
                message=NO_REVIEWER_MESSAGE,
                repository=context.repo_full_name,
                pr_number=pr_number,
            )

        reviews = fetch_reviews(context.repo_full_name, pr_number)
    except GATE_ERRORS as error:
        logger.error("Review gate errored", error=str(error), error_type=type(error).__name__)
        return GateOutcome(
            status=GateStatus.FAILED,
            message=str(error) or type(error).__name__,
            reviewer=reviewer,
            repository=context.repo_full_name,
            pr_number=pr_number,
        )

    approved = has_required_approval(reviews, reviewer)
    logger.info(
        "Checked reviews for required approval",
        reviewer=reviewer,
        review_count=len(reviews),
        approved=approved,
    )
    if not approved:
        return GateOutcome(
            status=GateStatus.FAILED,
            message=missing_approval_message(reviewer),
            reviewer=reviewer,
            repository=context.repo_full_name,
            pr_number=pr_number,
            reviews_checked=len(reviews),
        )

    return GateOutcome(
        status=GateStatus.PASSED,
        reviewer=reviewer,
        repository=context.repo_full_name,
        pr_number=pr_number,
        reviews_checked=len(reviews),
    )


def make_github_review_fetcher(
    settings: GateSettings,
    *,
    trust_env: bool = True,
) -> ReviewFetcher:
    """Build a fetcher that opens an authenticated client only when called."""

    def fetch(repo_full_name: str, pr_number: int) -> Sequence[PullRequestReview]:
        with build_github_client(
            timeout_seconds=settings.timeout_seconds,
            trust_env=trust_env,
        ) as client:
            return fetch_pull_request_reviews(
                client=client,
                repo_full_name=repo_full_name,
                pr_number=pr_number,
                paginate=settings.paginate,
                max_attempts=settings.max_attempts,
            )

    return fetch
