"""Wires the client, aggregator and renderers together for the CLI."""

from __future__ import annotations

import asyncio
import logging
import os

from .aggregator import aggregate_org_report
from .config import Config
from .github.client import GitHubClient
from .models import Repository
from .renderer import commits_to_csv, render_csv, render_json, render_report

logger = logging.getLogger(__name__)


async def run(
    config: Config,
    org: str | None = None,
    repo: str | None = None,
    match: str | None = None,
    since: str | None = None,
    until: str | None = None,
    file_match: str | None = None,
    exclude_repos: list[str] | None = None,
    output_format: str = "table",
    top_n: int = 10,
    sort_by: str = "commits",
    min_commits: int = 0,
    max_concurrency: int | None = None,
    output_file: str | None = None,
) -> None:
    """Collect an author report for an organization and render it."""
    async with GitHubClient(config) as client:
        report = await aggregate_org_report(
            client,
            org,
            repo=repo,
            match=match,
            since=since,
            until=until,
            file_match=file_match,
            exclude_repos=exclude_repos,
            sort_by=sort_by,
            min_commits=min_commits,
            max_concurrency=max_concurrency,
        )

    if output_format == "json":
        render_json(report, output_file=output_file)
    elif output_format == "csv":
        render_csv(report, output_file=output_file)
    else:
        render_report(report, top_n=top_n, sort_by=sort_by, output_file=output_file)


async def export_commits(
    client: GitHubClient,
    repos: list[Repository],
    output_dir: str,
    since: str | None = None,
    until: str | None = None,
) -> list[str]:
    """Write one ``<repo>.csv`` of SHA, identity and email per repository.

    Returns the written paths in repository order.
    """
    os.makedirs(output_dir, exist_ok=True)
    histories = await asyncio.gather(*(client.list_commits(r, since=since, until=until) for r in repos))
    paths = []
    for repo, commits in zip(repos, histories):
        path = os.path.join(output_dir, f"{repo.name}.csv")
        with open(path, "w", encoding="utf-8", newline="") as f:
            f.write(commits_to_csv(commits))
        logger.info("Wrote %d commits to %s", len(commits), path)
        paths.append(path)
    return paths


async def run_export(
    config: Config,
    output_dir: str,
    org: str | None = None,
    match: str | None = None,
    since: str | None = None,
    until: str | None = None,
) -> list[str]:
    async with GitHubClient(config) as client:
        repos = await client.list_repos(match, org=org)
        return await export_commits(client, repos, output_dir, since=since, until=until)
