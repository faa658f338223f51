"""Per-author contribution totals built from individual commit details."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterable

from .errors import ContribStatsError
from .github.client import GitHubClient, Pattern, compile_pattern
from .models import (
    AuthorsReport,
    AuthorStatistics,
    DetailedCommit,
    LightweightCommit,
    RepoAuthors,
    Repository,
)

logger = logging.getLogger(__name__)


def fold_author_statistics(
    commits: Iterable[DetailedCommit],
    match: Pattern | None = None,
) -> list[AuthorStatistics]:
    """Reduce detailed commits into one AuthorStatistics per author email.

    Every commit counts towards ``num_commits``. Additions and deletions
    only count for files whose name matches ``match`` (all files when no
    pattern is given).
    """
    pattern = compile_pattern(match)
    authors: dict[str, AuthorStatistics] = {}
    for commit in commits:
        stats = authors.get(commit.author_email)
        if stats is None:
            stats = authors[commit.author_email] = AuthorStatistics(id=commit.author_email)
        stats.num_commits += 1
        for file in commit.files:
            if pattern is None or pattern.search(file.name):
                stats.additions += file.additions
                stats.deletions += file.deletions
    return list(authors.values())


async def fetch_commit_details(
    client: GitHubClient,
    repo: Repository,
    commits: Iterable[LightweightCommit],
    max_concurrency: int | None = None,
) -> list[DetailedCommit]:
    """Fetch details for every commit concurrently.

    All requests are in flight at once unless ``max_concurrency`` caps them.
    The first failure propagates and no partial list is returned.
    """
    if max_concurrency is None:
        return list(await asyncio.gather(*(client.get_commit_details(repo, c) for c in commits)))

    if max_concurrency < 1:
        raise ValueError("max_concurrency must be at least 1")
    semaphore = asyncio.Semaphore(max_concurrency)

    async def _fetch(commit: LightweightCommit) -> DetailedCommit:
        async with semaphore:
            return await client.get_commit_details(repo, commit)

    return list(await asyncio.gather(*(_fetch(c) for c in commits)))


async def get_authors(
    client: GitHubClient,
    repo: Repository,
    since: str | None = None,
    until: str | None = None,
    match: Pattern | None = None,
    max_concurrency: int | None = None,
) -> list[AuthorStatistics]:
    """All authors of ``repo`` in the window and their contributions.

    Args:
        client: Open GitHub client.
        repo: The repository to inspect.
        since: Only count commits after this date.
        until: Only count commits before this date.
        match: If given, only file changes whose name matches are added to
            the line totals. Commit counts are unaffected.
        max_concurrency: Optional cap on concurrent detail requests.

    Raises:
        RetrievalError: if listing commits or any single detail fetch fails.
    """
    commits = await client.list_commits(repo, since=since, until=until)
    details = await fetch_commit_details(client, repo, commits, max_concurrency=max_concurrency)
    return fold_author_statistics(details, match)


async def get_authors_since(
    client: GitHubClient, repo: Repository, since: str, match: Pattern | None = None
) -> list[AuthorStatistics]:
    return await get_authors(client, repo, since=since, match=match)


async def get_authors_until(
    client: GitHubClient, repo: Repository, until: str, match: Pattern | None = None
) -> list[AuthorStatistics]:
    return await get_authors(client, repo, until=until, match=match)


async def get_authors_between(
    client: GitHubClient, repo: Repository, since: str, until: str, match: Pattern | None = None
) -> list[AuthorStatistics]:
    return await get_authors(client, repo, since=since, until=until, match=match)


# -- organization reports ----------------------------------------------------

SORT_FIELDS = ("commits", "additions", "deletions", "lines")


def _sort_key(sort_by: str) -> Callable[[AuthorStatistics], int]:
    """Return a key function for sorting authors by the given field."""
    if sort_by == "additions":
        return lambda a: a.additions
    if sort_by == "deletions":
        return lambda a: a.deletions
    if sort_by == "lines":
        return lambda a: a.additions + a.deletions
    return lambda a: a.num_commits


def merge_authors(groups: Iterable[Iterable[AuthorStatistics]]) -> list[AuthorStatistics]:
    """Sum author statistics from several repositories, keyed by email."""
    merged: dict[str, AuthorStatistics] = {}
    for group in groups:
        for stats in group:
            total = merged.setdefault(stats.id, AuthorStatistics(id=stats.id))
            total.num_commits += stats.num_commits
            total.additions += stats.additions
            total.deletions += stats.deletions
    return list(merged.values())


def build_report(
    org: str,
    results: Iterable[tuple[Repository, list[AuthorStatistics] | None]],
    *,
    since: str | None = None,
    until: str | None = None,
    file_match: str | None = None,
    sort_by: str = "commits",
    min_commits: int = 0,
) -> AuthorsReport:
    """Assemble an AuthorsReport from per-repository results.

    A result of ``None`` marks a repository whose aggregation failed.
    ``min_commits`` drops authors from the per-repository and merged lists;
    the totals still count every author.
    """
    key = _sort_key(sort_by)
    repos: list[RepoAuthors] = []
    failed: list[str] = []
    every: list[list[AuthorStatistics]] = []
    total_commits = total_additions = total_deletions = 0
    for repo, authors in results:
        if authors is None:
            failed.append(repo.name)
            continue
        every.append(authors)
        total_commits += sum(a.num_commits for a in authors)
        total_additions += sum(a.additions for a in authors)
        total_deletions += sum(a.deletions for a in authors)
        ranked = sorted(authors, key=key, reverse=True)
        if min_commits > 0:
            ranked = [a for a in ranked if a.num_commits >= min_commits]
        repos.append(RepoAuthors(name=repo.name, full_name=repo.full_name, authors=ranked))

    merged = merge_authors(every)
    if min_commits > 0:
        merged = [a for a in merged if a.num_commits >= min_commits]
    merged.sort(key=key, reverse=True)

    return AuthorsReport(
        org=org,
        period_start=since,
        period_end=until,
        file_match=file_match,
        total_repos=len(repos),
        total_commits=total_commits,
        total_additions=total_additions,
        total_deletions=total_deletions,
        authors=merged,
        repos=repos,
        failed_repos=failed,
    )


async def aggregate_org_report(
    client: GitHubClient,
    org: str | None = None,
    *,
    repo: str | None = None,
    match: str | None = None,
    since: str | None = None,
    until: str | None = None,
    file_match: str | None = None,
    exclude_repos: list[str] | None = None,
    sort_by: str = "commits",
    min_commits: int = 0,
    max_concurrency: int | None = None,
) -> AuthorsReport:
    """Aggregate author statistics over every selected repository of an org.

    Repositories are processed concurrently. A repository whose aggregation
    fails is logged and listed in ``failed_repos``; the others still count.
    """
    org = org or client.config.default_org or ""
    if repo:
        full_name = repo if "/" in repo else f"{org}/{repo}"
        repos = [Repository.from_full_name(full_name, client.config.host)]
    else:
        repos = await client.list_repos(match, org=org or None)

    if exclude_repos:
        excluded = set(exclude_repos)
        repos = [r for r in repos if r.name not in excluded]

    async def _collect(target: Repository) -> tuple[Repository, list[AuthorStatistics] | None]:
        try:
            authors = await get_authors(
                client, target, since=since, until=until, match=file_match, max_concurrency=max_concurrency
            )
        except ContribStatsError as exc:
            logger.warning("Failed to collect authors for %s: %s", target.full_name, exc)
            return target, None
        logger.info("%s: %d authors", target.full_name, len(authors))
        return target, authors

    results = await asyncio.gather(*(_collect(r) for r in repos))
    return build_report(
        org,
        results,
        since=since,
        until=until,
        file_match=file_match,
        sort_by=sort_by,
        min_commits=min_commits,
    )
