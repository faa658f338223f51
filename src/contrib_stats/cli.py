"""Command-line interface for contrib-stats."""

from __future__ import annotations

import asyncio
import re
from collections.abc import Coroutine
from typing import Any

import click
from rich.console import Console
from rich.table import Table

from . import __version__
from .aggregator import SORT_FIELDS
from .config import Config
from .dates import resolve_date
from .errors import ContribStatsError
from .github.client import GitHubClient
from .logging_config import setup_logging
from .models import Issue, IssueResult, Repository
from .orchestrator import run, run_export
from .renderer import render_activity


def _run(coro: Coroutine[Any, Any, Any]) -> Any:
    try:
        return asyncio.run(coro)
    except (ContribStatsError, ValueError, re.error) as exc:
        raise click.ClickException(str(exc)) from exc


def _repository(config: Config, full_name: str) -> Repository:
    try:
        return Repository.from_full_name(full_name, config.host)
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint="REPO") from exc


@click.group()
@click.option("--host", help="API host, e.g. https://github.example.com. [env: GITHUB_HOST]")
@click.option("--org", help="Default organization. [env: DEFAULT_ORG]")
@click.option("--token", help="API token. [env: API_KEY or GITHUB_TOKEN]")
@click.option("--api-prefix", default=None, help="Versioned API path prefix (default /api/v3).")
@click.option("--env-file", default=".env", show_default=True, type=click.Path(dir_okay=False))
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
@click.option("-q", "--quiet", is_flag=True, help="Only log errors.")
@click.version_option(version=__version__, prog_name="contrib-stats")
@click.pass_context
def main(
    ctx: click.Context,
    host: str | None,
    org: str | None,
    token: str | None,
    api_prefix: str | None,
    env_file: str,
    verbose: bool,
    quiet: bool,
) -> None:
    """Per-author contribution statistics for a GitHub organization."""
    setup_logging(verbose=verbose, quiet=quiet)
    config = Config.from_env(env_file=env_file)
    ctx.obj = config.with_overrides(host=host, default_org=org, token=token, api_prefix=api_prefix)


@main.command()
@click.option("--match", help="Regex tested against repository names.")
@click.pass_obj
def repos(config: Config, match: str | None) -> None:
    """List repositories in the organization."""

    async def _list() -> list[Repository]:
        async with GitHubClient(config) as client:
            return await client.list_repos(match)

    found = _run(_list())
    table = Table(show_header=True, header_style="bold")
    table.add_column("Name")
    table.add_column("Full Name")
    table.add_column("URL")
    for r in found:
        table.add_row(r.name, r.full_name, r.url)
    Console().print(table)


@main.command()
@click.option("--match", help="Regex tested against repository names.")
@click.option("--repo", help="Analyze a single repository (NAME or ORG/NAME).")
@click.option("--since", help="Start date (YYYY-MM-DD, free-form, or relative: 7d, 2w, 3m, 1y).")
@click.option("--until", help="End date (YYYY-MM-DD, free-form, or relative: 7d, 2w, 3m, 1y).")
@click.option("--file-match", help="Only count line changes in files whose name matches this regex.")
@click.option("--exclude-repo", multiple=True, help="Repository name to skip (repeatable).")
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["table", "json", "csv"]),
    default="table",
    show_default=True,
)
@click.option("--output", "output_file", type=click.Path(dir_okay=False), help="Write output to a file.")
@click.option("--sort-by", type=click.Choice(SORT_FIELDS), default="commits", show_default=True)
@click.option("--top", "top_n", type=int, default=10, show_default=True, help="Authors shown in the table.")
@click.option("--min-commits", type=int, default=0, show_default=True)
@click.option("--max-concurrency", type=click.IntRange(min=1), default=None, help="Cap concurrent commit requests.")
@click.pass_obj
def authors(
    config: Config,
    match: str | None,
    repo: str | None,
    since: str | None,
    until: str | None,
    file_match: str | None,
    exclude_repo: tuple[str, ...],
    output_format: str,
    output_file: str | None,
    sort_by: str,
    top_n: int,
    min_commits: int,
    max_concurrency: int | None,
) -> None:
    """Aggregate commits, additions and deletions per author email."""
    _run(run(
        config,
        repo=repo,
        match=match,
        since=resolve_date(since),
        until=resolve_date(until),
        file_match=file_match,
        exclude_repos=list(exclude_repo),
        output_format=output_format,
        top_n=top_n,
        sort_by=sort_by,
        min_commits=min_commits,
        max_concurrency=max_concurrency,
        output_file=output_file,
    ))


@main.command()
@click.option("--match", help="Regex tested against repository names.")
@click.option("--since", help="Start date.")
@click.option("--until", help="End date.")
@click.option("--output-dir", required=True, type=click.Path(file_okay=False))
@click.pass_obj
def commits(config: Config, match: str | None, since: str | None, until: str | None, output_dir: str) -> None:
    """Write a SHA,ID,EMAIL CSV of commits for each repository."""
    paths = _run(run_export(
        config,
        output_dir,
        match=match,
        since=resolve_date(since),
        until=resolve_date(until),
    ))
    click.echo(f"Wrote {len(paths)} file(s) to {output_dir}")


@main.command()
@click.argument("repo")
@click.option("--format", "output_format", type=click.Choice(["table", "json"]), default="table", show_default=True)
@click.pass_obj
def activity(config: Config, repo: str, output_format: str) -> None:
    """Show precomputed weekly contributor activity for ORG/NAME."""
    target = _repository(config, repo)

    async def _fetch():
        async with GitHubClient(config) as client:
            return await client.get_contributor_statistics(target)

    render_activity(target.full_name, _run(_fetch()), output_format=output_format)


@main.command("create-issue")
@click.argument("repo")
@click.option("--title", required=True)
@click.option("--body", default="")
@click.option("--assignee", "assignees", multiple=True)
@click.option("--label", "labels", multiple=True)
@click.option("--milestone", type=int, default=None)
@click.pass_obj
def create_issue(
    config: Config,
    repo: str,
    title: str,
    body: str,
    assignees: tuple[str, ...],
    labels: tuple[str, ...],
    milestone: int | None,
) -> None:
    """Open an issue in ORG/NAME."""
    target = _repository(config, repo)
    issue = Issue(
        title=title,
        body=body,
        assignees=list(assignees) or None,
        milestone=milestone,
        labels=list(labels) or None,
    )

    async def _submit() -> IssueResult:
        async with GitHubClient(config) as client:
            return await client.submit_issue(target, issue)

    result = _run(_submit())
    if not result.ok:
        raise click.ClickException(f"Issue not created: {result.error}")
    click.echo(f"Created issue in {target.full_name}")


if __name__ == "__main__":
    main()
