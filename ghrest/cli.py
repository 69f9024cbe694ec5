"""Command-line interface for ghrest.

Usage:
    ghrest rate-limit
    ghrest repo octocat hello-world
    ghrest labels octocat hello-world -n 50
    ghrest issues octocat hello-world --state all
    ghrest login octocat
    ghrest whoami
"""

from __future__ import annotations

import argparse
import getpass
import json
import logging
import sys
from typing import Any

from ghrest import GitHubClient
from ghrest.exceptions import (
    GitHubError,
    NotAuthenticatedError,
    NotFoundError,
    RateLimitError,
    TwoFactorRequiredError,
)
from ghrest.utils.logger import configure_logging

# ============================================================================
# Display Utilities
# ============================================================================


def format_header(text: str) -> str:
    """Format a header string."""
    return f"\n{'=' * 60}\n  {text}\n{'=' * 60}"


def format_json(data: dict[str, Any] | list[Any]) -> str:
    """Format data as JSON."""
    return json.dumps(data, indent=2, default=str)


def print_partial_warning(failure_message: str | None) -> None:
    if failure_message:
        print(f"Warning: listing incomplete: {failure_message}", file=sys.stderr)


# ============================================================================
# Command Handlers
# ============================================================================


def cmd_rate_limit(client: GitHubClient, as_json: bool) -> int:
    """Show current rate limit status."""
    snapshot = client.rate_limits.get_snapshot()
    if as_json:
        print(format_json(snapshot.model_dump()))
        return 0

    print(format_header("Rate Limit Status"))
    for name, bucket in (("core", snapshot.core), ("search", snapshot.search)):
        seconds = int(bucket.reset - client.context.clock())
        print(
            f"  {name.upper():8} {bucket.remaining}/{bucket.limit} remaining "
            f"({bucket.percent_used}% used, resets in {seconds}s)"
        )
    quota = "authenticated" if client.rate_limits.is_authenticated_quota() else (
        "anonymous" if client.rate_limits.is_anonymous_quota() else "custom"
    )
    print(f"  Quota:   {quota}")
    return 0


def cmd_repo(client: GitHubClient, owner: str, name: str, as_json: bool) -> int:
    """Fetch and display repository info."""
    try:
        repository = client.repos.get(owner, name)
    except NotFoundError:
        print(f"Error: Repository '{owner}/{name}' not found", file=sys.stderr)
        return 1

    if as_json:
        print(format_json(repository.model_dump()))
    else:
        print(format_header(f"Repository: {repository.full_name}"))
        print(f"  Description:  {repository.description or 'N/A'}")
        print(f"  Language:     {repository.language or 'N/A'}")
        print(f"  Stars:        {repository.stargazers_count:,}")
        print(f"  Forks:        {repository.forks_count:,}")
        print(f"  Open Issues:  {repository.open_issues_count:,}")
        print(f"  URL:          {repository.html_url}")
    return 0


def cmd_labels(client: GitHubClient, owner: str, repo: str, limit: int, as_json: bool) -> int:
    """List a repository's labels."""
    result = client.labels.list(owner, repo, limit=limit)
    if not result.items and result.failure is not None:
        result.unwrap()

    labels = result.items[:limit]
    if as_json:
        print(format_json([label.model_dump() for label in labels]))
    else:
        print(format_header(f"Labels: {owner}/{repo}"))
        for label in labels:
            print(f"  #{label.color:6}  {label.name}")
    print_partial_warning(result.failure.message if result.failure else None)
    return 0


def cmd_issues(
    client: GitHubClient, owner: str, repo: str, state: str, limit: int, as_json: bool
) -> int:
    """List a repository's issues."""
    result = client.issues.list(owner, repo, state=state, limit=limit)  # type: ignore[arg-type]
    if not result.items and result.failure is not None:
        result.unwrap()

    issues = result.items[:limit]
    if as_json:
        print(format_json([issue.model_dump() for issue in issues]))
    else:
        print(format_header(f"Issues ({state}): {owner}/{repo}"))
        for issue in issues:
            kind = "PR" if issue.is_pull_request else "  "
            print(f"  {kind} #{issue.number:<6} {issue.title}")
    print_partial_warning(result.failure.message if result.failure else None)
    return 0


def cmd_whoami(client: GitHubClient, as_json: bool) -> int:
    """Show the authenticated user."""
    try:
        user = client.authenticated.users.me()
    except NotAuthenticatedError:
        print("Error: Not authenticated. Set GITHUB_TOKEN or run 'login'.", file=sys.stderr)
        return 1

    if as_json:
        print(format_json(user.model_dump()))
    else:
        print(format_header(f"Authenticated as: {user.login}"))
        print(f"  Name:         {user.name or 'N/A'}")
        print(f"  Public Repos: {user.public_repos}")
        print(f"  Identity:     {client.state.value}")
    return 0


def cmd_login(client: GitHubClient, username: str, otp: str | None) -> int:
    """Trade a username and password for a stored token."""
    password = getpass.getpass(f"Password for {username}: ")
    try:
        client.login(username, password, otp=otp)
    except TwoFactorRequiredError:
        print("Error: Two-factor code required. Re-run with --otp.", file=sys.stderr)
        return 1

    print(f"Logged in as {username}; token saved to {client.config.token_file}")
    return 0


# ============================================================================
# Argument Parser
# ============================================================================


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="ghrest",
        description="ghrest - Query the GitHub REST API from the command line",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  ghrest rate-limit                       Show rate limit status
  ghrest repo octocat hello-world         Fetch repository info
  ghrest labels octocat hello-world       List labels
  ghrest issues octocat hello-world       List open issues
  ghrest login octocat                    Log in and save a token
  ghrest whoami                           Show authenticated user
        """,
    )

    parser.add_argument("--token", "-t", help="GitHub token (or set GITHUB_TOKEN)")
    parser.add_argument("--json", "-j", action="store_true", help="Output as JSON")
    parser.add_argument("--verbose", "-v", action="store_true", help="Log requests to stderr")
    parser.add_argument(
        "--delay", type=float, default=None, help="Seconds between page requests"
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    subparsers.add_parser("rate-limit", help="Show rate limit status")

    p = subparsers.add_parser("repo", help="Get repository info")
    p.add_argument("owner", help="Repository owner")
    p.add_argument("name", help="Repository name")

    p = subparsers.add_parser("labels", help="List repository labels")
    p.add_argument("owner", help="Repository owner")
    p.add_argument("repo", help="Repository name")
    p.add_argument("-n", "--limit", type=int, default=100, help="Number of labels (default: 100)")

    p = subparsers.add_parser("issues", help="List repository issues")
    p.add_argument("owner", help="Repository owner")
    p.add_argument("repo", help="Repository name")
    p.add_argument("--state", choices=["open", "closed", "all"], default="open")
    p.add_argument("-n", "--limit", type=int, default=30, help="Number of issues (default: 30)")

    subparsers.add_parser("whoami", help="Get authenticated user")

    p = subparsers.add_parser("login", help="Log in and save a token")
    p.add_argument("username", help="GitHub username")
    p.add_argument("--otp", help="Two-factor one-time password")

    return parser


# ============================================================================
# Main Entry Point
# ============================================================================

COMMANDS = {
    "rate-limit": lambda c, a: cmd_rate_limit(c, a.json),
    "repo": lambda c, a: cmd_repo(c, a.owner, a.name, a.json),
    "labels": lambda c, a: cmd_labels(c, a.owner, a.repo, a.limit, a.json),
    "issues": lambda c, a: cmd_issues(c, a.owner, a.repo, a.state, a.limit, a.json),
    "whoami": lambda c, a: cmd_whoami(c, a.json),
    "login": lambda c, a: cmd_login(c, a.username, a.otp),
}


def main(argv: list[str] | None = None, client: GitHubClient | None = None) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    if args.verbose:
        configure_logging(logging.DEBUG)

    if client is None:
        overrides: dict[str, Any] = {}
        if args.delay is not None:
            overrides["page_delay"] = args.delay
        try:
            client = GitHubClient(token=args.token, **overrides)
        except GitHubError as e:
            print(f"Error: {e.message}", file=sys.stderr)
            return 1

    try:
        handler = COMMANDS.get(args.command)
        if handler:
            return handler(client, args)  # type: ignore[no-untyped-call]
        parser.print_help()
        return 0
    except RateLimitError as e:
        print(f"Error: Rate limit exceeded! Resets at: {e.reset_at}", file=sys.stderr)
        return 1
    except GitHubError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        return 130
    finally:
        client.close()
