"""Typer CLI for the required reviewer gate."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import httpx
import typer

from src.actions import set_failed, set_output
from src.context import (
    DEFAULT_REVIEWERS_PATH,
    GITHUB_EVENT_PATH_ENV_VAR,
    GITHUB_REPOSITORY_ENV_VAR,
    EventContextError,
    GateSettings,
    load_event_context,
)
from src.gate import make_github_review_fetcher, run_review_gate
from src.github_client import (
    GitHubApiError,
    GitHubAuthError,
    GitHubInputError,
    build_github_client,
    fetch_authenticated_user_login,
    fetch_pull_request_reviews,
    get_github_token_with_source,
)
from src.logging_config import configure_logging
from src.reviewers import ReviewersFileResolver
from src.schema import GateStatus

app = typer.Typer(help="Fail a pull request check until the required reviewer approves.")


@app.command("check")
def check_command(
    event_path: Annotated[
        Path | None,
        typer.Option(
            envvar=GITHUB_EVENT_PATH_ENV_VAR,
            help="Path to the workflow event payload JSON.",
        ),
    ] = None,
    repo: Annotated[
        str | None,
        typer.Option(
            envvar=GITHUB_REPOSITORY_ENV_VAR,
            help="Repository in owner/repo format. Defaults to the payload repository.",
        ),
    ] = None,
    reviewers_file: Annotated[
        Path, typer.Option(help="File holding the required reviewer login.")
    ] = DEFAULT_REVIEWERS_PATH,
    paginate: Annotated[
        bool,
        typer.Option(
            "--paginate/--first-page-only",
            help="Read every page of reviews, or only the first 100.",
        ),
    ] = True,
    max_attempts: Annotated[
        int, typer.Option(min=1, help="GitHub request attempts; 429/5xx responses are retried.")
    ] = 1,
    timeout_seconds: Annotated[
        int, typer.Option(help="GitHub API timeout in seconds.")
    ] = 20,
    trust_env: Annotated[
        bool,
        typer.Option(
            "--trust-env/--no-trust-env",
            help="Use proxy/SSL environment variables from the current shell.",
        ),
    ] = True,
    verbose: Annotated[bool, typer.Option(help="Enable debug logging.")] = False,
) -> None:
    """Check that the required reviewer has approved the pull request."""
    configure_logging("DEBUG" if verbose else None)

    try:
        context = load_event_context(event_path=event_path, repo_full_name=repo)
    except EventContextError as error:
        set_failed(str(error))
        raise typer.Exit(code=1) from error

    settings = GateSettings(
        reviewers_path=reviewers_file,
        paginate=paginate,
        max_attempts=max_attempts,
        timeout_seconds=timeout_seconds,
    )
    outcome = run_review_gate(
        context,
        resolver=ReviewersFileResolver(settings.reviewers_path),
        fetch_reviews=make_github_review_fetcher(settings, trust_env=trust_env),
    )

    set_output("status", outcome.status.value)
    if outcome.reviewer:
        set_output("reviewer", outcome.reviewer)

    if outcome.is_failure:
        set_failed(outcome.message)
        raise typer.Exit(code=1)

    if outcome.status is GateStatus.PASSED:
        typer.echo(
            f"Reviewer {outcome.reviewer} approved {context.repo_full_name}#{context.pr_number}."
        )


@app.command("auth-check")
def auth_check_command(
    repo: Annotated[
        str | None,
        typer.Option(help="Optional repository in owner/repo format for permission check."),
    ] = None,
    pr: Annotated[
        int | None,
        typer.Option(help="Optional pull request number used with --repo for permission check."),
    ] = None,
    timeout_seconds: Annotated[
        int, typer.Option(help="GitHub API timeout in seconds for the validation call.")
    ] = 20,
    trust_env: Annotated[
        bool,
        typer.Option(
            "--trust-env/--no-trust-env",
            help="Use proxy/SSL environment variables from the current shell.",
        ),
    ] = True,
) -> None:
    """Validate GitHub token setup and optional review read access."""
    if (repo is None) != (pr is None):
        raise typer.BadParameter("Provide both --repo and --pr together, or neither.")

    try:
        _token, token_source = get_github_token_with_source()
    except GitHubAuthError as error:
        typer.echo(f"GitHub auth check failed: {error}")
        raise typer.Exit(code=1) from error

    typer.echo(f"Token detected in {token_source}.")

    try:
        with build_github_client(timeout_seconds=timeout_seconds, trust_env=trust_env) as client:
            login = fetch_authenticated_user_login(client=client)
            typer.echo(f"Authenticated as GitHub user '{login}'.")

            if repo is not None and pr is not None:
                reviews = fetch_pull_request_reviews(
                    client=client,
                    repo_full_name=repo,
                    pr_number=pr,
                    paginate=False,
                )
                typer.echo(
                    f"Review read access check passed for {repo}#{pr} "
                    f"({len(reviews)} review(s) on the first page)."
                )
    except GitHubInputError as error:
        raise typer.BadParameter(str(error)) from error
    except GitHubApiError as error:
        typer.echo(
            "GitHub auth check failed: "
            f"status={error.status_code} endpoint={error.endpoint}."
        )
        raise typer.Exit(code=1) from error
    except httpx.HTTPError as error:
        typer.echo(f"GitHub auth check failed: network error ({error}).")
        raise typer.Exit(code=1) from error
    except ImportError as error:
        typer.echo(
            "GitHub auth check failed: proxy transport dependency is missing. "
            "Try `required-reviewer-gate auth-check --no-trust-env`, or install `httpx[socks]`."
        )
        raise typer.Exit(code=1) from error

    typer.echo("GitHub token setup is valid.")


def main() -> None:
    """Console script entrypoint."""
    app()


if __name__ == "__main__":
    main()
