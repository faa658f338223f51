"""Async GitHub REST API client built on httpx."""

from __future__ import annotations

import logging
import re
from typing import Any

import httpx

from .. import __version__
from ..config import Config
from ..dates import human_week_start, normalize_timestamp
from ..errors import PostError, RetrievalError
from ..models import (
    ContributorStatistics,
    DetailedCommit,
    FileChange,
    Issue,
    IssueResult,
    LightweightCommit,
    Repository,
    WeeklyActivity,
)
from .retry import ProcessingRetryPolicy

logger = logging.getLogger(__name__)

PER_PAGE = 100
_SUCCESS = (200, 201)

Pattern = str | re.Pattern[str]


def compile_pattern(match: Pattern | None) -> re.Pattern[str] | None:
    if match is None or isinstance(match, re.Pattern):
        return match
    return re.compile(match)


class GitHubClient:
    """Async client for the repository, commit, statistics and issue endpoints.

    Use as an async context manager so the underlying connection pool is
    closed::

        async with GitHubClient(config) as client:
            repos = await client.list_repos(r"^project_team")
    """

    def __init__(
        self,
        config: Config,
        *,
        retry_policy: ProcessingRetryPolicy | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        per_page: int = PER_PAGE,
    ) -> None:
        self.config = config
        self.per_page = per_page
        self.retry_policy = retry_policy or ProcessingRetryPolicy(interval=config.processing_retry_interval)
        headers = {
            "Accept": "application/vnd.github.v3+json",
            "User-Agent": f"contrib-stats/{__version__}",
        }
        if config.token:
            headers["Authorization"] = f"Bearer {config.token}"
        self._client = httpx.AsyncClient(
            base_url=config.api_base_url or "",
            headers=headers,
            timeout=None,
            transport=transport,
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> GitHubClient:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.close()

    # -- transport --------------------------------------------------------

    async def get(self, endpoint: str, params: dict[str, Any] | None = None) -> Any:
        """GET ``endpoint`` and return the parsed JSON body.

        A 202 response is polled through the retry policy. Any other status
        outside 200/201, and any transport error, raises ``RetrievalError``.
        """
        query = {k: v for k, v in (params or {}).items() if v is not None}

        async def send() -> httpx.Response:
            logger.debug("GET %s %s", endpoint, query)
            return await self._client.get(endpoint, params=query)

        try:
            response = await self.retry_policy.run(send, endpoint)
        except httpx.HTTPError as exc:
            logger.debug("GET %s failed: %s", endpoint, exc)
            raise RetrievalError(endpoint) from exc
        if response.status_code not in _SUCCESS:
            logger.debug("GET %s returned HTTP %d", endpoint, response.status_code)
            raise RetrievalError(endpoint)
        try:
            return response.json()
        except ValueError as exc:
            logger.debug("GET %s returned a body that is not JSON", endpoint)
            raise RetrievalError(endpoint) from exc

    async def post(self, endpoint: str, payload: Any, params: dict[str, Any] | None = None) -> Any:
        """POST a JSON payload; only 201 Created counts as success.

        Returns the parsed body, or ``None`` when the 201 carries no JSON.
        """
        query = {k: v for k, v in (params or {}).items() if v is not None}
        logger.debug("POST %s", endpoint)
        try:
            response = await self._client.post(endpoint, json=payload, params=query)
        except httpx.HTTPError as exc:
            raise PostError(endpoint) from exc
        if response.status_code != 201:
            raise PostError(endpoint, response.status_code)
        try:
            return response.json()
        except ValueError:
            return None

    async def paginate(self, endpoint: str, params: dict[str, Any] | None = None) -> list[Any]:
        """Fetch pages 1, 2, ... until an empty page comes back and concatenate them.

        Pages are requested one at a time. A short page does not end the
        loop; only an empty one does, so the final empty request is always
        made.
        """
        results: list[Any] = []
        page = 1
        while True:
            data = await self.get(endpoint, {**(params or {}), "per_page": self.per_page, "page": page})
            if not data:
                break
            results.extend(data)
            page += 1
        logger.debug("%s: %d items over %d pages", endpoint, len(results), page - 1)
        return results

    # -- repositories -----------------------------------------------------

    async def list_repos(self, match: Pattern | None = None, org: str | None = None) -> list[Repository]:
        """List every repository in ``org`` (default: the configured organization).

        If ``match`` is given, only repos whose name matches it are returned,
        in listing order. Filtering happens after full enumeration.
        """
        org = org or self.config.default_org
        if not org:
            raise RetrievalError("/orgs/<unset>/repos")
        raw = await self.paginate(f"/orgs/{org}/repos")
        repos = [
            Repository(name=item["name"], url=item.get("html_url", ""), full_name=item["full_name"])
            for item in raw
        ]
        pattern = compile_pattern(match)
        if pattern is not None:
            repos = [repo for repo in repos if pattern.search(repo.name)]
        return repos

    # -- commits ----------------------------------------------------------

    async def list_commits(
        self,
        repo: Repository,
        since: str | None = None,
        until: str | None = None,
    ) -> list[LightweightCommit]:
        """List every commit in ``repo``, optionally bounded by ``since``/``until``."""
        params = {
            "since": normalize_timestamp(since) if since else None,
            "until": normalize_timestamp(until) if until else None,
        }
        raw = await self.paginate(f"/repos/{repo.full_name}/commits", params)
        return [_to_lightweight_commit(item) for item in raw]

    async def get_commit_details(self, repo: Repository, commit: LightweightCommit) -> DetailedCommit:
        """Fetch the per-file change statistics of a single commit."""
        data = await self.get(f"/repos/{repo.full_name}/commits/{commit.sha}")
        files = tuple(
            FileChange(
                name=f["filename"],
                additions=f.get("additions", 0),
                deletions=f.get("deletions", 0),
                status=f.get("status", ""),
            )
            for f in data.get("files") or []
        )
        return DetailedCommit(
            sha=commit.sha,
            author_email=commit.author_email,
            date=commit.date,
            identity=commit.identity,
            files=files,
        )

    # -- statistics -------------------------------------------------------

    async def get_contributor_statistics(self, repo: Repository) -> list[ContributorStatistics]:
        """Weekly contributor activity as precomputed by the platform.

        Covers roughly the last two months. Authors without a linked account
        are omitted by the platform.
        """
        data = await self.get(f"/repos/{repo.full_name}/stats/contributors")
        return [
            ContributorStatistics(
                id=(entry.get("author") or {}).get("login", ""),
                num_commits=entry.get("total", 0),
                history=[
                    WeeklyActivity(
                        additions=week.get("a", 0),
                        deletions=week.get("d", 0),
                        commits=week.get("c", 0),
                        week_start_unix=int(week["w"]),
                        week_start_human=human_week_start(int(week["w"])),
                    )
                    for week in entry.get("weeks", [])
                ],
            )
            for entry in data or []
        ]

    # -- issues -----------------------------------------------------------

    async def submit_issue(self, repo: Repository, issue: Issue) -> IssueResult:
        """Create an issue, capturing any failure in the result instead of raising."""
        endpoint = f"/repos/{repo.full_name}/issues"
        try:
            await self.post(endpoint, issue.to_payload())
        except PostError as exc:
            cause = exc.__cause__ or exc
            logger.warning("Issue %r not created in %s: %s", issue.title, repo.full_name, cause)
            return IssueResult(ok=False, error=str(cause))
        except Exception as exc:
            logger.warning("Issue %r not created in %s: %s", issue.title, repo.full_name, exc)
            return IssueResult(ok=False, error=str(exc))
        return IssueResult(ok=True)

    async def create_issue(self, repo: Repository, issue: Issue) -> bool:
        return (await self.submit_issue(repo, issue)).ok


def _to_lightweight_commit(item: dict[str, Any]) -> LightweightCommit:
    author = item["commit"]["author"]
    account = item.get("author")
    return LightweightCommit(
        sha=item["sha"],
        author_email=author.get("email", ""),
        date=author.get("date", ""),
        identity=account["login"] if account else author.get("name", ""),
    )
