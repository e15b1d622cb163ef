"""GitHub API wrapper for pull request reviews and auth helpers."""

from __future__ import annotations

import os
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import httpx
from dotenv import load_dotenv

from src.actions import get_input, input_env_var
from src.logging_config import get_logger

GITHUB_API_BASE_URL = "https://api.github.com"
GITHUB_API_URL_ENV_VAR = "GITHUB_API_URL"
GITHUB_API_VERSION = "2022-11-28"
GITHUB_MAX_RETRIES = 3
DEFAULT_RETRY_BACKOFF_SECONDS = 0.5
REVIEWS_PER_PAGE = 100
GITHUB_TOKEN_INPUT = "github-token"
TOKEN_ENV_VARS = ("GITHUB_TOKEN", "GH_TOKEN")

logger = get_logger(__name__)


class GitHubAuthError(RuntimeError):
    """Raised when required GitHub authentication is missing."""


class GitHubInputError(ValueError):
    """Raised when repository or PR input values are invalid."""


class GitHubApiError(RuntimeError):
    """Raised when a GitHub API request fails."""

    def __init__(self, message: str, *, status_code: int, endpoint: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.endpoint = endpoint


class GitHubRateLimitError(GitHubApiError):
    """Raised when GitHub API rate limiting prevents request completion."""


@dataclass(frozen=True, slots=True)
class PullRequestReview:
    """One review record from the pull request reviews API."""

    review_id: int
    author_login: str | None
    state: str
    submitted_at: str | None = None
    commit_id: str | None = None


def _ensure_mapping(value: object, *, context: str) -> dict[str, Any]:
    """Ensure a response fragment is a JSON object."""
    if not isinstance(value, dict):
        raise GitHubApiError(
            f"Expected JSON object for {context}.",
            status_code=500,
            endpoint=context,
        )
    return value


def _require_str(payload: dict[str, Any], *, key: str, endpoint: str) -> str:
    """Read a required string field from payload."""
    value = payload.get(key)
    if not isinstance(value, str):
        raise GitHubApiError(
            f"Expected string field '{key}' in GitHub response.",
            status_code=500,
            endpoint=endpoint,
        )
    return value


def _require_int(payload: dict[str, Any], *, key: str, endpoint: str) -> int:
    """Read a required integer field from payload."""
    value = payload.get(key)
    if not isinstance(value, int) or isinstance(value, bool):
        raise GitHubApiError(
            f"Expected integer field '{key}' in GitHub response.",
            status_code=500,
            endpoint=endpoint,
        )
    return value


def _optional_str(payload: dict[str, Any], *, key: str, endpoint: str) -> str | None:
    """Read an optional string field from payload."""
    value = payload.get(key)
    if value is not None and not isinstance(value, str):
        raise GitHubApiError(
            f"Expected '{key}' to be a string or null in GitHub response.",
            status_code=500,
            endpoint=endpoint,
        )
    return value


def _decode_json(response: httpx.Response, *, endpoint: str) -> Any:
    """Decode a JSON body; proxies and outages can answer 200 with HTML."""
    try:
        return response.json()
    except ValueError as error:
        raise GitHubApiError(
            f"Expected JSON body in GitHub response for '{endpoint}'.",
            status_code=response.status_code,
            endpoint=endpoint,
        ) from error


def _request_json(
    client: httpx.Client,
    endpoint: str,
    *,
    max_attempts: int = GITHUB_MAX_RETRIES,
) -> dict[str, Any]:
    """Perform a JSON request against GitHub API."""
    response = _request_with_retries(
        client,
        endpoint,
        accept_header="application/vnd.github+json",
        max_attempts=max_attempts,
    )
    return _ensure_mapping(_decode_json(response, endpoint=endpoint), context=endpoint)


def _request_json_list(
    client: httpx.Client,
    endpoint: str,
    *,
    max_attempts: int = GITHUB_MAX_RETRIES,
) -> list[dict[str, Any]]:
    """Perform a JSON request that returns an array of objects."""
    response = _request_with_retries(
        client,
        endpoint,
        accept_header="application/vnd.github+json",
        max_attempts=max_attempts,
    )
    payload = _decode_json(response, endpoint=endpoint)
    if not isinstance(payload, list):
        raise GitHubApiError(
            "Expected JSON array in GitHub response.",
            status_code=500,
            endpoint=endpoint,
        )
    rows: list[dict[str, Any]] = []
    for item in payload:
        if not isinstance(item, dict):
            raise GitHubApiError(
                "Expected all array items to be JSON objects in GitHub response.",
                status_code=500,
                endpoint=endpoint,
            )
        rows.append(item)
    return rows


def _is_retryable_status(status_code: int) -> bool:
    """Return whether a status code is retryable under policy."""
    return status_code == 429 or 500 <= status_code < 600


def _parse_retry_after_seconds(response: httpx.Response) -> float | None:
    """Parse Retry-After header as seconds if present and valid."""
    retry_after = response.headers.get("Retry-After")
    if retry_after is None:
        return None
    try:
        parsed_value = float(retry_after)
    except ValueError:
        return None
    if parsed_value < 0:
        return None
    return parsed_value


def _compute_retry_delay_seconds(response: httpx.Response, *, attempt_number: int) -> float:
    """Compute retry delay from Retry-After header or exponential backoff."""
    retry_after_seconds = _parse_retry_after_seconds(response)
    if retry_after_seconds is not None:
        return retry_after_seconds
    return DEFAULT_RETRY_BACKOFF_SECONDS * (2 ** (attempt_number - 1))


def _sleep_for_retry(seconds: float) -> None:
    """Sleep helper for retry delays (wrapped for deterministic tests)."""
    time.sleep(seconds)


def _raise_http_error(response: httpx.Response, endpoint: str) -> None:
    """Raise a typed error for a non-success GitHub API response."""
    message = f"GitHub API request failed with status {response.status_code} for '{endpoint}'."
    if response.status_code == 429:
        raise GitHubRateLimitError(
            message,
            status_code=response.status_code,
            endpoint=endpoint,
        )
    raise GitHubApiError(
        message,
        status_code=response.status_code,
        endpoint=endpoint,
    )


def _request_with_retries(
    client: httpx.Client,
    endpoint: str,
    *,
    accept_header: str | None = None,
    max_attempts: int = GITHUB_MAX_RETRIES,
) -> httpx.Response:
    """Perform a GET request with retry handling for 429/5xx responses."""
    if max_attempts < 1:
        raise GitHubInputError(f"Invalid max_attempts '{max_attempts}'. Expected at least 1.")

    request_headers = {"Accept": accept_header} if accept_header else None
    for attempt_number in range(1, max_attempts + 1):
        response = client.get(endpoint, headers=request_headers)
        if response.status_code < 400:
            return response

        should_retry = _is_retryable_status(response.status_code) and attempt_number < max_attempts
        if not should_retry:
            _raise_http_error(response, endpoint)

        delay_seconds = _compute_retry_delay_seconds(response, attempt_number=attempt_number)
        logger.warning(
            "Retrying GitHub request",
            endpoint=endpoint,
            status_code=response.status_code,
            attempt=attempt_number,
            delay_seconds=delay_seconds,
        )
        _sleep_for_retry(delay_seconds)

    raise RuntimeError("Unexpected retry loop exit without a response.")


def _parse_review_row(row: dict[str, Any], *, endpoint: str) -> PullRequestReview:
    """Normalize one review row; a deleted account has a null user."""
    user_value = row.get("user")
    if user_value is None:
        author_login = None
    elif isinstance(user_value, dict):
        author_login = _optional_str(user_value, key="login", endpoint=endpoint)
    else:
        raise GitHubApiError(
            "Expected 'user' to be an object or null in GitHub response.",
            status_code=500,
            endpoint=endpoint,
        )

    return PullRequestReview(
        review_id=_require_int(row, key="id", endpoint=endpoint),
        author_login=author_login,
        state=_require_str(row, key="state", endpoint=endpoint),
        submitted_at=_optional_str(row, key="submitted_at", endpoint=endpoint),
        commit_id=_optional_str(row, key="commit_id", endpoint=endpoint),
    )


def fetch_pull_request_reviews(
    *,
    client: httpx.Client,
    repo_full_name: str,
    pr_number: int,
    paginate: bool = True,
    max_attempts: int = GITHUB_MAX_RETRIES,
) -> tuple[PullRequestReview, ...]:
    """Fetch reviews for a pull request, following pages unless told not to."""
    owner, repo = parse_repo_full_name(repo_full_name)
    normalized_pr_number = validate_pr_number(pr_number)
    base_endpoint = f"/repos/{owner}/{repo}/pulls/{normalized_pr_number}/reviews"

    reviews: list[PullRequestReview] = []
    page = 1
    while True:
        endpoint = f"{base_endpoint}?per_page={REVIEWS_PER_PAGE}&page={page}"
        rows = _request_json_list(client, endpoint, max_attempts=max_attempts)
        reviews.extend(_parse_review_row(row, endpoint=endpoint) for row in rows)

        if not paginate or len(rows) < REVIEWS_PER_PAGE:
            break
        page += 1

    logger.debug(
        "Fetched pull request reviews",
        repository=repo_full_name,
        pr_number=normalized_pr_number,
        review_count=len(reviews),
        pages=page,
    )
    return tuple(reviews)


def parse_repo_full_name(repo_full_name: str) -> tuple[str, str]:
    """Parse and validate repository input in owner/repo format."""
    owner, separator, repo = repo_full_name.strip().partition("/")
    if not separator or not owner or not repo or "/" in repo:
        raise GitHubInputError(
            f"Invalid repo '{repo_full_name}'. Expected format is owner/repo."
        )
    return owner, repo


def validate_pr_number(pr_number: int) -> int:
    """Validate and normalize pull request number input."""
    if pr_number <= 0:
        raise GitHubInputError(f"Invalid PR number '{pr_number}'. Expected a positive integer.")
    return pr_number


def get_github_token() -> str:
    """Read GitHub token from environment and fail fast if missing."""
    token, _source = get_github_token_with_source()
    return token


def get_github_token_with_source() -> tuple[str, str]:
    """Read GitHub token and return token value with environment source key.

    The action input wins over the ambient workflow token so a workflow can pass
    a token with wider scope than the default one.
    """
    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)

    input_token = get_input(GITHUB_TOKEN_INPUT)
    if input_token:
        return input_token, input_env_var(GITHUB_TOKEN_INPUT)

    for env_var in TOKEN_ENV_VARS:
        token = os.getenv(env_var, "").strip()
        if token:
            return token, env_var

    message = "Missing GitHub token. Set the github-token input, GITHUB_TOKEN, or GH_TOKEN."
    raise GitHubAuthError(message)


def get_github_api_base_url() -> str:
    """Return the REST API root, honoring GitHub Enterprise runners."""
    return os.getenv(GITHUB_API_URL_ENV_VAR, "").rstrip("/") or GITHUB_API_BASE_URL


def fetch_authenticated_user_login(*, client: httpx.Client) -> str:
    """Fetch authenticated GitHub user login for token validation."""
    endpoint = "/user"
    payload = _request_json(client, endpoint)
    return _require_str(payload, key="login", endpoint=endpoint)


def build_github_client(
    timeout_seconds: int = 20,
    *,
    token: str | None = None,
    trust_env: bool = True,
) -> httpx.Client:
    """Build an authenticated GitHub HTTP client."""
    resolved_token = token or get_github_token()
    headers = {
        "Accept": "application/vnd.github+json",
        "Authorization": f"Bearer {resolved_token}",
        "X-GitHub-Api-Version": GITHUB_API_VERSION,
    }
    return httpx.Client(
        base_url=get_github_api_base_url(),
        headers=headers,
        timeout=timeout_seconds,
        trust_env=trust_env,
    )
